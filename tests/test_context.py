# tests/test_context.py
from __future__ import annotations

import unittest

from nodebb_exporter.context import (
    PageContext,
    base_url_from_page,
    resolve_identity,
    thread_id_from_url,
)
from nodebb_exporter.errors import ResolutionError

TOPIC_PAGE = """
<html>
  <head><title>Hello world | Example Forum</title></head>
  <body>
    <h1><span component="topic/title">  Hello world  </span></h1>
    <script id="ajaxify-data" type="application/json">{"tid": 42, "title": "Hello world"}</script>
  </body>
</html>
"""


class TestBaseUrl(unittest.TestCase):
    def test_truncates_at_topic_segment(self) -> None:
        self.assertEqual(
            base_url_from_page("https://f.example/community/topic/42/thread"),
            "https://f.example/community",
        )

    def test_root_install(self) -> None:
        self.assertEqual(base_url_from_page("https://f.example/topic/7/x?page=2"), "https://f.example")

    def test_without_marker_keeps_url(self) -> None:
        self.assertEqual(base_url_from_page("https://f.example/forum/"), "https://f.example/forum")


class TestThreadId(unittest.TestCase):
    def test_parses_numeric_id(self) -> None:
        self.assertEqual(thread_id_from_url("https://f.example/community/topic/42/thread"), "42")

    def test_ignores_non_topic_urls(self) -> None:
        self.assertIsNone(thread_id_from_url("https://f.example/category/3/news"))

    def test_ignores_query_string(self) -> None:
        self.assertIsNone(thread_id_from_url("https://f.example/search?term=topic/9"))


class TestResolveIdentity(unittest.TestCase):
    def test_prefers_page_state(self) -> None:
        ctx = PageContext(
            page_url="https://f.example/topic/42/thread",
            thread_id="99",
            title="State title",
            title_element_text="Element title",
            document_title="Doc title",
        )
        identity = resolve_identity(ctx)
        self.assertEqual(identity.id, "99")
        self.assertEqual(identity.title, "State title")
        self.assertEqual(identity.base_url, "https://f.example")

    def test_falls_back_to_url_and_element(self) -> None:
        ctx = PageContext(
            page_url="https://f.example/c/topic/42/thread",
            title_element_text="  Element title \n",
            document_title="Doc title",
        )
        identity = resolve_identity(ctx)
        self.assertEqual(identity.id, "42")
        self.assertEqual(identity.title, "Element title")
        self.assertEqual(identity.base_url, "https://f.example/c")

    def test_falls_back_to_document_title(self) -> None:
        ctx = PageContext(page_url="https://f.example/topic/42", document_title="Doc title")
        self.assertEqual(resolve_identity(ctx).title, "Doc title")

    def test_title_defaults_to_empty(self) -> None:
        self.assertEqual(resolve_identity(PageContext(page_url="https://f.example/topic/42")).title, "")

    def test_missing_id_raises(self) -> None:
        with self.assertRaises(ResolutionError):
            resolve_identity(PageContext(page_url="https://f.example/recent"))


class TestFromHtml(unittest.TestCase):
    def test_reads_page_state_and_fallbacks(self) -> None:
        ctx = PageContext.from_html("https://f.example/topic/42/hello", TOPIC_PAGE)
        self.assertEqual(ctx.thread_id, "42")
        self.assertEqual(ctx.title, "Hello world")
        self.assertEqual(ctx.title_element_text, "  Hello world  ")
        self.assertEqual(ctx.document_title, "Hello world | Example Forum")

    def test_page_without_state(self) -> None:
        ctx = PageContext.from_html(
            "https://f.example/topic/42/hello",
            "<html><head><title>Doc</title></head><body></body></html>",
        )
        self.assertIsNone(ctx.thread_id)
        self.assertIsNone(ctx.title)
        self.assertIsNone(ctx.title_element_text)
        self.assertEqual(resolve_identity(ctx).title, "Doc")

    def test_broken_state_is_ignored(self) -> None:
        html = '<script id="ajaxify-data" type="application/json">{not json</script>'
        ctx = PageContext.from_html("https://f.example/topic/5", html)
        self.assertIsNone(ctx.thread_id)
        self.assertEqual(resolve_identity(ctx).id, "5")


if __name__ == "__main__":
    unittest.main()
