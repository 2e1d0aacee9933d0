# tests/test_service.py
from __future__ import annotations

import unittest

import httpx

from nodebb_exporter.context import PageContext
from nodebb_exporter.fetcher import ThreadFetcher
from nodebb_exporter.service import EXPORT_ACTION, handle_message

PAGE_URL = "https://f.example/topic/42/thread"


def _forum(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/api/topic/pagination/42":
        return httpx.Response(200, json={"pagination": {"pageCount": 1}})
    if request.url.path == "/api/topic/42":
        return httpx.Response(
            200,
            json={"posts": [{"pid": 1, "content": "<p>hi</p>", "user": {"username": "alice"}, "toPid": None}]},
        )
    return httpx.Response(500)


class TestHandleMessage(unittest.IsolatedAsyncioTestCase):
    async def test_success_response(self) -> None:
        fetcher = ThreadFetcher(transport=httpx.MockTransport(_forum))
        resp = await handle_message({"action": EXPORT_ACTION}, PageContext(page_url=PAGE_URL, title="T"), fetcher)

        self.assertEqual(
            resp,
            {
                "success": True,
                "data": {
                    "title": "T",
                    "posts": [{"pid": 1, "author": "alice", "content": "hi", "reply_to_pid": None}],
                },
            },
        )

    async def test_failure_is_reported_not_raised(self) -> None:
        fetcher = ThreadFetcher(transport=httpx.MockTransport(_forum))
        with self.assertLogs("exporter.service", level="ERROR"):
            resp = await handle_message(
                {"action": EXPORT_ACTION},
                PageContext(page_url="https://f.example/recent"),
                fetcher,
            )

        assert resp is not None
        self.assertFalse(resp["success"])
        self.assertIn("TID", resp["error"])

    async def test_network_failure_is_reported(self) -> None:
        fetcher = ThreadFetcher(transport=httpx.MockTransport(lambda request: httpx.Response(500)))
        with self.assertLogs("exporter.service", level="ERROR"):
            resp = await handle_message({"action": EXPORT_ACTION}, PageContext(page_url=PAGE_URL), fetcher)

        assert resp is not None
        self.assertEqual(resp["success"], False)
        self.assertIn("500", resp["error"])

    async def test_other_actions_are_ignored(self) -> None:
        resp = await handle_message({"action": "somethingElse"}, PageContext(page_url=PAGE_URL))
        self.assertIsNone(resp)


if __name__ == "__main__":
    unittest.main()
