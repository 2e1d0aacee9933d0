from __future__ import annotations

from typing import Any, Iterable, Mapping

from markdownify import MarkdownConverter

from .models import NormalizedPost


def _author(post: Mapping[str, Any]) -> str | None:
    user = post.get("user")
    if not isinstance(user, Mapping):
        return None
    username = user.get("username")
    return username if isinstance(username, str) else None


def normalized_post_from_raw(post: Any, converter: MarkdownConverter) -> NormalizedPost | None:
    """
    Project one NodeBB API post onto a NormalizedPost.

    Returns None for entries that should not appear in an export: missing
    records, deleted posts and posts without a pid or author.
    """
    if not isinstance(post, Mapping) or post.get("deleted"):
        return None

    pid = post.get("pid")
    author = _author(post)
    if pid is None or author is None:
        return None

    html = post.get("content") or ""
    content = converter.convert(html).strip() if isinstance(html, str) else ""

    return NormalizedPost(
        pid=pid,
        author=author,
        content=content,
        reply_to_pid=post.get("toPid") or None,
    )


def normalize_posts(raw_posts: Iterable[Any], converter: MarkdownConverter) -> list[NormalizedPost]:
    out: list[NormalizedPost] = []
    for raw in raw_posts:
        post = normalized_post_from_raw(raw, converter)
        if post is not None:
            out.append(post)
    return out
