"""Thread identity resolution from the page the export was started on."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlsplit

from bs4 import BeautifulSoup

from .errors import ResolutionError
from .models import ThreadIdentity

logger = logging.getLogger("exporter.context")

TOPIC_MARKER = "/topic/"
TITLE_SELECTOR = 'span[component="topic/title"]'

_TOPIC_ID_RE = re.compile(r"topic/(\d+)")


@dataclass(frozen=True)
class PageContext:
    """Read-only inputs describing the page a thread is exported from.

    ``thread_id`` and ``title`` are the forum's in-page state (NodeBB's
    ``ajaxify.data``); the remaining fields are fallbacks.
    """
    page_url: str
    thread_id: str | None = None
    title: str | None = None
    title_element_text: str | None = None
    document_title: str | None = None

    @classmethod
    def from_html(cls, page_url: str, html: str) -> PageContext:
        """Build a context from a snapshot of a topic page."""
        soup = BeautifulSoup(html, "html.parser")
        state = _ajaxify_data(soup)

        tid = state.get("tid")
        title = state.get("title")
        element = soup.select_one(TITLE_SELECTOR)
        doc_title = soup.title.get_text() if soup.title else None

        return cls(
            page_url=page_url,
            thread_id=str(tid) if tid not in (None, "") else None,
            title=title if isinstance(title, str) and title else None,
            title_element_text=element.get_text() if element else None,
            document_title=doc_title,
        )


def _ajaxify_data(soup: BeautifulSoup) -> dict[str, Any]:
    script = soup.find("script", id="ajaxify-data")
    if script is None or not script.string:
        return {}
    try:
        data = json.loads(script.string)
    except ValueError as exc:
        logger.debug("Ignoring unparseable ajaxify-data: %s", exc)
        return {}
    return data if isinstance(data, dict) else {}


def base_url_from_page(page_url: str) -> str:
    """Forum API root: everything before the ``/topic/`` path segment."""
    return page_url.split(TOPIC_MARKER, 1)[0].rstrip("/")


def thread_id_from_url(page_url: str) -> str | None:
    match = _TOPIC_ID_RE.search(urlsplit(page_url).path)
    return match.group(1) if match else None


def resolve_title(ctx: PageContext) -> str:
    if ctx.title:
        return ctx.title
    if ctx.title_element_text is not None:
        return ctx.title_element_text.strip()
    return ctx.document_title or ""


def resolve_identity(ctx: PageContext) -> ThreadIdentity:
    """Work out which thread to export and where its API lives.

    Raises ResolutionError when neither the page state nor the URL names a
    thread.
    """
    tid = ctx.thread_id or thread_id_from_url(ctx.page_url)
    if not tid:
        raise ResolutionError(f"Could not find the thread id (TID) for {ctx.page_url}")
    return ThreadIdentity(
        id=str(tid),
        title=resolve_title(ctx),
        base_url=base_url_from_page(ctx.page_url),
    )
