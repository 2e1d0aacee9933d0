"""Request boundary: turns an export request into a success/error response."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from .context import PageContext
from .fetcher import ThreadFetcher

logger = logging.getLogger("exporter.service")

EXPORT_ACTION = "exportNodeBBThread"


async def handle_message(
    request: Mapping[str, Any],
    ctx: PageContext,
    fetcher: ThreadFetcher | None = None,
) -> dict[str, Any] | None:
    """Answer an export request.

    Returns ``{"success": True, "data": {...}}`` or
    ``{"success": False, "error": "..."}``; requests for any other action
    get None.
    """
    if request.get("action") != EXPORT_ACTION:
        return None

    fetcher = fetcher or ThreadFetcher()
    try:
        export = await fetcher.fetch_thread(ctx)
    except Exception as exc:
        logger.error("Error exporting thread: %s", exc)
        return {"success": False, "error": str(exc)}
    return {"success": True, "data": export.to_dict()}
