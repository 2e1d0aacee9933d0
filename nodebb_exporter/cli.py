"""CLI entry-point for the NodeBB thread exporter."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .config import ConverterConfig, ExporterConfig, ForumConfig
from .context import PageContext
from .errors import ConfigError, ExporterError
from .fetcher import ThreadFetcher
from .models import ThreadExport, render_markdown

console = Console(stderr=True)


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, console=console)],
    )
    # Suppress noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def _print_summary(export: ThreadExport) -> None:
    authors = {p.author for p in export.posts}
    replies = sum(1 for p in export.posts if p.reply_to_pid is not None)
    table = Table(title="Export Summary", show_header=True, header_style="bold cyan")
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Title", export.title)
    table.add_row("Posts", str(len(export.posts)))
    table.add_row("Authors", str(len(authors)))
    table.add_row("Replies", str(replies))
    console.print(table)


def _make_fetcher(cfg: ExporterConfig) -> ThreadFetcher:
    return ThreadFetcher(cfg)


async def _export(
    fetcher: ThreadFetcher,
    url: str,
    *,
    thread_id: str | None,
    title: str | None,
    fetch_page: bool,
) -> ThreadExport:
    page = await fetcher.page_context(url) if fetch_page else PageContext(page_url=url)
    if thread_id or title:
        page = dataclasses.replace(
            page,
            thread_id=thread_id or page.thread_id,
            title=title or page.title,
        )
    return await fetcher.fetch_thread(page)


def _run_export(ctx: click.Context, url: str, **kwargs: object) -> ThreadExport:
    fetcher = _make_fetcher(ctx.obj["cfg"])
    try:
        return asyncio.run(_export(fetcher, url, **kwargs))  # type: ignore[arg-type]
    except ExporterError as exc:
        console.print(f"[red]✗[/red] {exc}")
        sys.exit(1)


@click.group()
@click.option("--timeout", envvar="NODEBB_TIMEOUT", default=30.0, type=float, help="HTTP timeout in seconds")
@click.option("--user-agent", envvar="NODEBB_USER_AGENT", default="nodebb-exporter/1.0", help="User-Agent header")
@click.option(
    "--citation-pattern",
    "citation_patterns",
    multiple=True,
    help="Regex for the quoted-reply citation line (repeatable, replaces the defaults)",
)
@click.option(
    "--mention-class",
    "mention_classes",
    multiple=True,
    help="CSS class marking user-mention links (repeatable, replaces the defaults)",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(
    ctx: click.Context,
    timeout: float,
    user_agent: str,
    citation_patterns: tuple[str, ...],
    mention_classes: tuple[str, ...],
    verbose: bool,
) -> None:
    """NodeBB thread exporter – dump a forum topic as Markdown posts.

    Reads every page of a topic through the forum's JSON API and converts
    each post body from HTML to Markdown.
    """
    _setup_logging(verbose)
    try:
        converter_cfg = ConverterConfig.from_env()
        if citation_patterns:
            converter_cfg = dataclasses.replace(converter_cfg, citation_patterns=citation_patterns)
    except ConfigError as exc:
        raise click.BadParameter(str(exc), param_hint="'--citation-pattern' / NODEBB_CITATION_PATTERNS") from exc
    if mention_classes:
        converter_cfg = dataclasses.replace(converter_cfg, mention_classes=mention_classes)

    ctx.ensure_object(dict)
    ctx.obj["cfg"] = ExporterConfig(
        forum=ForumConfig(timeout=timeout, user_agent=user_agent),
        converter=converter_cfg,
    )


# ─── Commands ────────────────────────────────────────────────────


@cli.command()
@click.argument("url")
@click.option("--thread-id", default=None, help="Topic id, when the URL does not carry one")
@click.option("--title", default=None, help="Title to use instead of the page's")
@click.option("--fetch-page/--no-fetch-page", default=True, help="Read title and topic id from the page itself")
@click.option("-o", "--output", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Write to a file instead of stdout")
@click.option("--format", "fmt", type=click.Choice(["json", "markdown"]), default="json", show_default=True)
@click.pass_context
def export(
    ctx: click.Context,
    url: str,
    thread_id: str | None,
    title: str | None,
    fetch_page: bool,
    output: Path | None,
    fmt: str,
) -> None:
    """Export a topic.

    Example: nodebb-export export https://forum.example/topic/42/hello -o thread.json
    """
    console.print(f"[bold]Exporting [cyan]{url}[/cyan]...[/bold]")
    result = _run_export(ctx, url, thread_id=thread_id, title=title, fetch_page=fetch_page)
    text = result.to_json() if fmt == "json" else render_markdown(result)

    if output is None:
        click.echo(text)
    else:
        output.write_text(text if text.endswith("\n") else text + "\n", encoding="utf-8")
        console.print(f"[green]✓[/green] Wrote {output}")
    _print_summary(result)


@cli.command()
@click.argument("url")
@click.option("--limit", default=10, type=int, help="Number of posts to show")
@click.option("--fetch-page/--no-fetch-page", default=True, help="Read title and topic id from the page itself")
@click.pass_context
def preview(ctx: click.Context, url: str, limit: int, fetch_page: bool) -> None:
    """Preview a topic's posts without writing anything.

    Example: nodebb-export preview https://forum.example/topic/42 --limit 5
    """
    result = _run_export(ctx, url, thread_id=None, title=None, fetch_page=fetch_page)
    table = Table(title=result.title or url, show_header=True, header_style="bold cyan")
    table.add_column("Pid", style="bold", justify="right")
    table.add_column("Author")
    table.add_column("Reply To", justify="right")
    table.add_column("Content", max_width=60)
    for post in result.posts[:limit]:
        snippet = " ".join(post.content.split())[:60]
        reply = "" if post.reply_to_pid is None else str(post.reply_to_pid)
        table.add_row(str(post.pid), post.author, reply, snippet)
    console.print(table)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
