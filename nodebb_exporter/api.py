"""NodeBB read API client – async JSON fetcher, one shot per request."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from .config import ForumConfig
from .errors import NetworkError

logger = logging.getLogger("exporter.api")


class NodeBBAPI:
    """Thin async wrapper around a NodeBB install's ``/api`` routes."""

    def __init__(
        self,
        base_url: str,
        cfg: ForumConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.cfg = cfg or ForumConfig()
        self._client = httpx.AsyncClient(
            timeout=self.cfg.timeout,
            headers={"User-Agent": self.cfg.user_agent, "Accept": "application/json"},
            follow_redirects=True,
            transport=transport,
        )

    async def _get(
        self, url: str, params: dict[str, Any] | None = None, headers: dict[str, str] | None = None
    ) -> httpx.Response:
        try:
            return await self._client.get(url, params=params, headers=headers)
        except httpx.TransportError as exc:
            logger.warning("Request to %s failed: %s", url, exc)
            raise NetworkError(f"Request to {url} failed: {exc}", url=url) from exc

    @staticmethod
    def _decode(resp: httpx.Response) -> Any:
        try:
            return resp.json()
        except ValueError as exc:
            raise NetworkError(
                f"Invalid JSON from {resp.request.url}", url=str(resp.request.url), status_code=resp.status_code
            ) from exc

    # ── public API ───────────────────────────────────────────────

    async def get_page_count(self, tid: str) -> int:
        """Fetch pagination metadata for a topic and return its page count."""
        url = f"{self.base_url}/api/topic/pagination/{tid}"
        resp = await self._get(url)
        if resp.is_error:
            raise NetworkError(
                f"Error fetching page information: {resp.status_code} {resp.reason_phrase}",
                url=url,
                status_code=resp.status_code,
            )
        data = self._decode(resp)
        pagination = data.get("pagination") if isinstance(data, dict) else None
        if not isinstance(pagination, dict):
            pagination = {}
        try:
            count = int(pagination.get("pageCount") or 1)
        except (TypeError, ValueError):
            count = 1
        return max(count, 1)

    async def get_topic_page(self, tid: str, page: int) -> list[Any]:
        """Fetch one page of a topic and return its raw ``posts`` list."""
        url = f"{self.base_url}/api/topic/{tid}"
        resp = await self._get(url, params={"page": page})
        if resp.is_error:
            raise NetworkError(
                f"Error loading page {page}: {resp.status_code} {resp.reason_phrase}",
                url=str(resp.request.url),
                status_code=resp.status_code,
                page=page,
            )
        data = self._decode(resp)
        posts = data.get("posts") if isinstance(data, dict) else None
        return posts if isinstance(posts, list) else []

    async def get_html(self, url: str) -> str:
        """Download a forum page as HTML (used to read its embedded page state)."""
        resp = await self._get(url, headers={"Accept": "text/html"})
        if resp.is_error:
            raise NetworkError(
                f"Error loading {url}: {resp.status_code} {resp.reason_phrase}",
                url=url,
                status_code=resp.status_code,
            )
        return resp.text

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> NodeBBAPI:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()
