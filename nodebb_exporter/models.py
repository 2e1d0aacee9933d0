"""Export records returned to callers."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from typing import Any, Sequence

PostId = int | str


@dataclass(frozen=True)
class ThreadIdentity:
    id: str
    title: str
    base_url: str


@dataclass(frozen=True)
class NormalizedPost:
    """A minimal post record: who wrote it, what they wrote, what it answers."""

    pid: PostId
    author: str
    content: str
    reply_to_pid: PostId | None = None


@dataclass(frozen=True)
class ThreadExport:
    title: str
    posts: Sequence[NormalizedPost] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "posts": [asdict(p) for p in self.posts]}

    def to_json(self, *, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)


def render_markdown(export: ThreadExport) -> str:
    """Render a whole thread as one Markdown document.

    Each post becomes a section headed by its author; replies link back to
    the section of the post they answer when that post is in the export.
    """
    known = {str(p.pid) for p in export.posts}
    parts: list[str] = [f"# {export.title}".rstrip()]
    for post in export.posts:
        section = [f'<a id="post-{post.pid}"></a>', f"## {post.author} (#{post.pid})"]
        if post.reply_to_pid is not None:
            ref = str(post.reply_to_pid)
            if ref in known:
                section.append(f"_In reply to [#{ref}](#post-{ref})_")
            else:
                section.append(f"_In reply to #{ref}_")
        if post.content:
            section.append(post.content)
        parts.append("\n\n".join(section))
    return "\n\n".join(parts) + "\n"
