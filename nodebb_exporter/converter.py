"""HTML → Markdown conversion for NodeBB post bodies.

Generic conversion is markdownify's.  On top of it sits an ordered list of
domain rules; for ``a``, ``img`` and ``blockquote`` elements the first rule
that claims the element produces its Markdown, otherwise markdownify's own
handler runs.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Iterable
from urllib.parse import urljoin, urlsplit

from bs4 import Tag
from markdownify import MarkdownConverter

from .config import ConverterConfig

logger = logging.getLogger("exporter.converter")

Replacement = Callable[["ThreadMarkdownConverter", Tag, str, set], str]
Predicate = Callable[[Tag], bool]


@dataclass(frozen=True)
class Rule:
    """A domain conversion rule applied ahead of generic conversion."""

    name: str
    tags: frozenset[str]
    replacement: Replacement
    predicate: Predicate | None = None

    def matches(self, el: Tag) -> bool:
        if el.name not in self.tags:
            return False
        return self.predicate is None or self.predicate(el)


# ── URL helpers ──────────────────────────────────────────────────

def absolute_url(base_url: str, src: str) -> str:
    """Resolve ``src`` against the forum root ``base_url``.

    Root-relative paths land under the forum's install path, so a forum
    served from ``/community`` resolves ``/img/x.png`` to
    ``/community/img/x.png``.  Paths already carrying the install path are
    left alone.
    """
    root = base_url.rstrip("/") + "/"
    if src.startswith("/") and not src.startswith("//"):
        prefix = urlsplit(base_url).path.rstrip("/")
        if prefix and (src == prefix or src.startswith(prefix + "/")):
            return urljoin(root, src)
        return urljoin(root, src[1:])
    return urljoin(root, src)


def has_scheme(url: str) -> bool:
    return bool(urlsplit(url).scheme)


_ALT_SPECIAL_RE = re.compile(r"([\\\[\]])")
_BARE_DEST_RE = re.compile(r"[\s()<>]")


def markdown_image(alt: str, src: str) -> str:
    """``![alt](src)`` with brackets in ``alt`` escaped and awkward URLs in ``<...>``."""
    alt = _ALT_SPECIAL_RE.sub(r"\\\1", " ".join(alt.split()))
    if _BARE_DEST_RE.search(src):
        src = "<" + src.replace("<", "%3C").replace(">", "%3E") + ">"
    return f"![{alt}]({src})"


# ── rules ────────────────────────────────────────────────────────

def _replace_image(conv: ThreadMarkdownConverter, el: Tag, text: str, parent_tags: set) -> str:
    alt = el.get("alt") or ""
    src = el.get("src") or ""
    if src:
        src = conv.resolve_url(src)
    return markdown_image(alt, src)


def _replace_blockquote(conv: ThreadMarkdownConverter, el: Tag, text: str, parent_tags: set) -> str:
    cleaned = conv.strip_citation(text or "").strip()
    if "_inline" in parent_tags:
        return " " + cleaned + " "
    if not cleaned:
        return "\n"
    quoted = "\n".join(f"> {line}" for line in cleaned.split("\n"))
    return "\n" + quoted + "\n\n"


def _replace_mention(conv: ThreadMarkdownConverter, el: Tag, text: str, parent_tags: set) -> str:
    return el.get_text()


def mention_predicate(classes: Iterable[str]) -> Predicate:
    markers = frozenset(classes)

    def _is_mention(el: Tag) -> bool:
        return any(cls in markers for cls in el.get("class") or ())

    return _is_mention


def default_rules(config: ConverterConfig) -> tuple[Rule, ...]:
    return (
        Rule("absoluteImages", frozenset({"img"}), _replace_image),
        Rule("cleanBlockquotes", frozenset({"blockquote"}), _replace_blockquote),
        Rule(
            "userMentions",
            frozenset({"a"}),
            _replace_mention,
            predicate=mention_predicate(config.mention_classes),
        ),
    )


# ── converter ────────────────────────────────────────────────────

class ThreadMarkdownConverter(MarkdownConverter):
    """markdownify converter carrying the NodeBB cleanup rules.

    Stateless apart from its construction arguments; build one per thread
    with the forum's base URL so relative image links can be resolved.
    """

    def __init__(
        self,
        base_url: str | None = None,
        config: ConverterConfig | None = None,
        rules: Iterable[Rule] | None = None,
        **options: object,
    ) -> None:
        self.config = config or ConverterConfig()
        options.setdefault("heading_style", self.config.heading_style)
        options.setdefault("code_language", self.config.code_language)
        super().__init__(**options)
        self.base_url = base_url
        self.rules = tuple(rules) if rules is not None else default_rules(self.config)
        self._citations = tuple(
            re.compile(r"\A\s*(?:" + pattern + ")") for pattern in self.config.citation_patterns
        )

    def resolve_url(self, src: str) -> str:
        """Absolute form of ``src``, or ``src`` itself when it cannot be resolved."""
        try:
            if not self.base_url or has_scheme(src):
                return src
            return absolute_url(self.base_url, src)
        except ValueError as exc:
            logger.warning("Could not create absolute URL for image %s: %s", src, exc)
            return src

    def strip_citation(self, text: str) -> str:
        for pattern in self._citations:
            stripped, n = pattern.subn("", text, count=1)
            if n:
                return stripped
        return text

    def _apply_rules(self, el: Tag, text: str, parent_tags: set, fallback: Callable[..., str]) -> str:
        for rule in self.rules:
            if rule.matches(el):
                return rule.replacement(self, el, text, parent_tags)
        return fallback(el, text, parent_tags)

    def convert_a(self, el, text, parent_tags):
        return self._apply_rules(el, text, parent_tags, super().convert_a)

    def convert_img(self, el, text, parent_tags):
        return self._apply_rules(el, text, parent_tags, super().convert_img)

    def convert_blockquote(self, el, text, parent_tags):
        return self._apply_rules(el, text, parent_tags, super().convert_blockquote)
