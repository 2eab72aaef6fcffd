"""Tests for the HTTP fetcher and URL helpers."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import httpx
import pytest

from truthtrollers_evidence.data import CandidateDoc
from truthtrollers_evidence.fetch import HttpFetcher, html_to_text
from truthtrollers_evidence.url import domain_matches, extract_domain


def _mock_get(monkeypatch: pytest.MonkeyPatch, text: str, content_type: str) -> None:
    response = MagicMock()
    response.text = text
    response.headers = {"content-type": content_type}
    response.raise_for_status = MagicMock()

    async def mock_get(self: httpx.AsyncClient, url: str, **kwargs: Any) -> MagicMock:
        return response

    monkeypatch.setattr(httpx.AsyncClient, "get", mock_get)


class TestHtmlToText:
    def test_strips_tags_and_scripts(self) -> None:
        html = (
            "<html><head><style>p {color: red}</style><script>var x = 1;</script></head>"
            "<body><h1>Title</h1><p>Some   <b>bold</b> text</p></body></html>"
        )
        text = html_to_text(html)
        assert "var x" not in text
        assert "color" not in text
        assert "Title" in text
        assert "Some bold text" in text

    def test_collapses_blank_lines(self) -> None:
        assert html_to_text("a\n\n\n\nb") == "a\nb"

    def test_decodes_entities_and_drops_comments(self) -> None:
        text = html_to_text("<p>Fish &amp; chips &mdash; 5&nbsp;kg</p><!-- <p>hidden</p> -->")
        assert text == "Fish & chips \u2014 5 kg"
        assert "hidden" not in text
        assert "-->" not in text

    def test_blocks_become_lines_and_inline_markup_stays(self) -> None:
        html = (
            '<h1>Title</h1><p>Coffee is <a href="/x">not</a> a diuretic.</p>'
            "<ul><li>One</li><li>Two</li></ul>"
        )
        assert html_to_text(html).split("\n") == [
            "Title",
            "Coffee is not a diuretic.",
            "One",
            "Two",
        ]


class TestHttpFetcher:
    """Tests for HttpFetcher."""

    async def test_html_is_converted(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _mock_get(monkeypatch, "<p>Hello <i>world</i></p>", "text/html; charset=utf-8")
        doc = CandidateDoc(id="d", url="https://example.com")

        assert await HttpFetcher().get_text(doc) == "Hello world"

    async def test_plain_text_passthrough(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _mock_get(monkeypatch, "plain <text>", "text/plain")
        doc = CandidateDoc(id="d", url="https://example.com/a.txt")

        assert await HttpFetcher().get_text(doc) == "plain <text>"

    async def test_binary_falls_back_to_snippet(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _mock_get(monkeypatch, "%PDF-1.4", "application/pdf")
        doc = CandidateDoc(id="d", url="https://example.com/a.pdf", snippet="abstract")

        assert await HttpFetcher().get_text(doc) == "abstract"

    async def test_truncates_to_max_chars(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _mock_get(monkeypatch, "x" * 100, "text/plain")
        doc = CandidateDoc(id="d", url="https://example.com")

        assert len(await HttpFetcher(max_chars=10).get_text(doc)) == 10

    async def test_no_url_returns_snippet(self) -> None:
        doc = CandidateDoc(id="d", url="", snippet="snip")
        assert await HttpFetcher().get_text(doc) == "snip"


class TestUrlHelpers:
    def test_extract_domain(self) -> None:
        assert extract_domain("https://www.Reuters.com/world/x") == "reuters.com"
        assert extract_domain("http://sub.example.org:8080/a") == "sub.example.org"

    def test_extract_domain_without_host(self) -> None:
        assert extract_domain("not a url") is None
        assert extract_domain("") is None

    def test_domain_matches_subdomains(self) -> None:
        assert domain_matches("news.bbc.co.uk", ["bbc.co.uk"])
        assert domain_matches("who.int", ["www.who.int"])
        assert domain_matches("cdc.gov", [".cdc.gov"])

    def test_domain_matches_rejects_suffix_lookalikes(self) -> None:
        assert not domain_matches("notreuters.com", ["reuters.com"])
        assert not domain_matches(None, ["reuters.com"])
        assert not domain_matches("reuters.com", [])
