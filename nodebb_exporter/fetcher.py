"""Core export logic – orchestrates context → API → converter → records."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from .api import NodeBBAPI
from .config import ExporterConfig
from .context import PageContext, base_url_from_page, resolve_identity
from .converter import ThreadMarkdownConverter
from .models import ThreadExport
from .normalize import normalize_posts

logger = logging.getLogger("exporter.fetcher")


class ThreadFetcher:
    """Exports one NodeBB thread per call to :meth:`fetch_thread`."""

    def __init__(
        self,
        cfg: ExporterConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.cfg = cfg or ExporterConfig()
        self._transport = transport

    async def page_context(self, page_url: str) -> PageContext:
        """Download a topic page and read its embedded page state."""
        base_url = base_url_from_page(page_url)
        async with NodeBBAPI(base_url, self.cfg.forum, transport=self._transport) as api:
            html = await api.get_html(page_url)
        return PageContext.from_html(page_url, html)

    async def fetch_raw_posts(self, api: NodeBBAPI, tid: str) -> list[Any]:
        """Fetch every page of a topic concurrently and flatten the posts.

        The page count is fetched first; then all pages are requested at
        once.  Results are joined in page order whatever order they arrive
        in.  If any page fails the whole fetch fails with the first failing
        page's error.
        """
        page_count = await api.get_page_count(tid)
        logger.debug("Topic %s has %d page(s)", tid, page_count)

        results = await asyncio.gather(
            *(api.get_topic_page(tid, page) for page in range(1, page_count + 1)),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result

        posts: list[Any] = []
        for page_posts in results:
            posts.extend(page_posts)
        return posts

    async def fetch_thread(self, ctx: PageContext) -> ThreadExport:
        identity = resolve_identity(ctx)
        logger.info("Exporting topic %s from %s", identity.id, identity.base_url)

        converter = ThreadMarkdownConverter(base_url=identity.base_url, config=self.cfg.converter)
        async with NodeBBAPI(identity.base_url, self.cfg.forum, transport=self._transport) as api:
            raw_posts = await self.fetch_raw_posts(api, identity.id)

        posts = normalize_posts(raw_posts, converter)
        logger.info(
            "Topic %s: %d post(s) exported, %d skipped",
            identity.id, len(posts), len(raw_posts) - len(posts),
        )
        return ThreadExport(title=identity.title, posts=posts)
