"""Configuration and environment settings for the exporter."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field

from .errors import ConfigError

# "@alice wrote in Some topic:" / "@alice כתב בנושא כלשהו:"
DEFAULT_CITATION_PATTERNS: tuple[str, ...] = (
    r"@\S+\s+wrote\s+in\s+.+?:(?=\s|\Z)",
    r"@\S+\s+כתב\s+ב.+?:(?=\s|\Z)",
)

DEFAULT_MENTION_CLASSES: tuple[str, ...] = ("plugin-mentions-user",)


def _split_env(name: str, sep: str) -> tuple[str, ...] | None:
    raw = os.getenv(name)
    if raw is None:
        return None
    return tuple(part.strip() for part in raw.split(sep) if part.strip())


@dataclass(frozen=True)
class ForumConfig:
    """HTTP settings for talking to a NodeBB install."""
    timeout: float = 30.0
    user_agent: str = "nodebb-exporter/1.0"

    @classmethod
    def from_env(cls) -> ForumConfig:
        return cls(
            timeout=float(os.getenv("NODEBB_TIMEOUT", "30")),
            user_agent=os.getenv("NODEBB_USER_AGENT", "nodebb-exporter/1.0"),
        )


@dataclass(frozen=True)
class ConverterConfig:
    citation_patterns: tuple[str, ...] = DEFAULT_CITATION_PATTERNS
    mention_classes: tuple[str, ...] = DEFAULT_MENTION_CLASSES
    heading_style: str = "atx"
    code_language: str = ""

    def __post_init__(self) -> None:
        for pattern in self.citation_patterns:
            try:
                re.compile(pattern)
            except re.error as exc:
                raise ConfigError(f"Invalid citation pattern {pattern!r}: {exc}") from exc

    @classmethod
    def from_env(cls) -> ConverterConfig:
        return cls(
            citation_patterns=_split_env("NODEBB_CITATION_PATTERNS", "||") or DEFAULT_CITATION_PATTERNS,
            mention_classes=_split_env("NODEBB_MENTION_CLASSES", ",") or DEFAULT_MENTION_CLASSES,
        )


@dataclass
class ExporterConfig:
    forum: ForumConfig = field(default_factory=ForumConfig.from_env)
    converter: ConverterConfig = field(default_factory=ConverterConfig.from_env)
