from __future__ import annotations

import pytest

from policyguard_agent.url_classifier import (
    REQUIRED_PAGES,
    RULES,
    classify_url,
    is_likely_content_url,
    parse_url_path,
)


class TestRuleOrder:
    def test_rules_are_evaluated_in_documented_order(self) -> None:
        assert [r.name for r in RULES] == [
            "ToolKeyword",
            "StructuralPattern",
            "DatedPostPattern",
            "DescriptiveSlug",
            "SingleSegmentFallback",
        ]

    def test_tool_keyword_beats_structural_pattern(self) -> None:
        result = classify_url("https://example.com/category/free-download-tools")
        assert result.role == "content"
        assert result.rule == "ToolKeyword"

    def test_download_page_is_analysed(self) -> None:
        assert is_likely_content_url("https://example.com/download/")

    @pytest.mark.parametrize("keyword", ["torrent", "keygen", "crack", "apk", "youtube-downloader"])
    def test_tool_keywords_under_legal_pages(self, keyword: str) -> None:
        assert is_likely_content_url(f"https://example.com/about/{keyword}-page")


class TestStructural:
    @pytest.mark.parametrize("page", REQUIRED_PAGES)
    def test_required_legal_pages_rejected(self, page: str) -> None:
        assert not is_likely_content_url(f"https://example.com/{page}")
        assert not is_likely_content_url(f"https://example.com/{page}/")
        assert not is_likely_content_url(f"https://example.com/{page}-us-and-more")

    @pytest.mark.parametrize(
        "path",
        [
            "/category/travel/",
            "/tag/python/",
            "/author/jane/",
            "/page/2/",
            "/search/results",
            "/wp-admin/admin/options",
            "/cart",
            "/feed/",
            "/privacy-policy/",
        ],
    )
    def test_structural_patterns_rejected(self, path: str) -> None:
        result = classify_url(f"https://example.com{path}")
        assert result.role == "structural"

    def test_homepage_rejected(self) -> None:
        assert classify_url("https://example.com/").rule == "Default"

    def test_numeric_last_segment_rejected(self) -> None:
        assert not is_likely_content_url("https://example.com/archives/12345")

    def test_short_last_segment_rejected(self) -> None:
        assert not is_likely_content_url("https://example.com/posts/abc")


class TestContent:
    def test_dated_post_with_extension(self) -> None:
        assert classify_url("https://example.com/2024/05/my-first-post.html").rule == "DatedPostPattern"

    def test_dated_post_without_extension(self) -> None:
        assert classify_url("https://example.com/2024/05/slug").rule == "DatedPostPattern"

    def test_descriptive_slug(self) -> None:
        result = classify_url("https://example.com/blog/growing-tomatoes-indoors")
        assert result.role == "content"
        assert result.rule == "DescriptiveSlug"

    def test_single_segment_page(self) -> None:
        result = classify_url("https://example.com/portfolio")
        assert result.rule == "SingleSegmentFallback"

    def test_url_is_lowercased(self) -> None:
        assert not is_likely_content_url("https://example.com/ABOUT")


class TestMalformed:
    @pytest.mark.parametrize("url", ["", "not a url", "ftp://example.com/file-name", "http://[::1/broken"])
    def test_fails_closed(self, url: str) -> None:
        assert classify_url(url).role == "structural"

    def test_parse_url_path_segments(self) -> None:
        parsed = parse_url_path("https://Example.com/Blog/Post-Name/")
        assert parsed is not None
        assert parsed.segments == ("blog", "post-name")
