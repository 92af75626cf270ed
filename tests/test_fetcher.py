"""Fetcher tests. ``respx`` patches ``httpx`` so no real network calls are made."""

from __future__ import annotations

import httpx
import respx

from policyguard_agent.fetcher import fetch_html

_HTML = "<html><body><p>Hello</p></body></html>"


class TestFetchHtml:
    def test_successful_fetch_returns_markup(self) -> None:
        with respx.mock:
            route = respx.get("https://example.com/").mock(return_value=httpx.Response(200, text=_HTML))
            assert fetch_html("https://example.com/") == _HTML

        sent = route.calls.last.request
        assert "Mozilla/5.0" in sent.headers["user-agent"]
        assert "text/html" in sent.headers["accept"]

    def test_non_2xx_collapses_to_empty(self) -> None:
        with respx.mock:
            respx.get("https://example.com/missing").mock(return_value=httpx.Response(404, text="nope"))
            assert fetch_html("https://example.com/missing") == ""

    def test_transport_error_collapses_to_empty(self) -> None:
        with respx.mock:
            respx.get("https://example.com/").mock(side_effect=httpx.ConnectError("boom"))
            assert fetch_html("https://example.com/") == ""

    def test_timeout_collapses_to_empty(self) -> None:
        with respx.mock:
            respx.get("https://example.com/slow").mock(side_effect=httpx.ReadTimeout("slow"))
            assert fetch_html("https://example.com/slow") == ""

    def test_follows_redirects(self) -> None:
        with respx.mock:
            respx.get("https://example.com/old").mock(
                return_value=httpx.Response(301, headers={"location": "https://example.com/new"})
            )
            respx.get("https://example.com/new").mock(return_value=httpx.Response(200, text=_HTML))
            assert fetch_html("https://example.com/old") == _HTML

    def test_redirect_bound(self) -> None:
        with respx.mock:
            respx.get("https://example.com/a").mock(
                return_value=httpx.Response(302, headers={"location": "https://example.com/b"})
            )
            respx.get("https://example.com/b").mock(
                return_value=httpx.Response(302, headers={"location": "https://example.com/c"})
            )
            respx.get("https://example.com/c").mock(return_value=httpx.Response(200, text=_HTML))
            assert fetch_html("https://example.com/a", max_redirects=1) == ""

    def test_empty_body(self) -> None:
        with respx.mock:
            respx.get("https://example.com/").mock(return_value=httpx.Response(200, text=""))
            assert fetch_html("https://example.com/") == ""
