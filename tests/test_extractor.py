from __future__ import annotations

from policyguard_agent.extractor import (
    content_text,
    extract_links,
    meta_description,
    page_context,
    parse_html,
    strip_fragment,
)

_BASE = "https://example.com/blog/"


def _links(*hrefs: str) -> str:
    return "<html><body>" + "".join(f'<a href="{h}">x</a>' for h in hrefs) + "</body></html>"


class TestExtractLinks:
    def test_resolves_relative_links(self) -> None:
        links = extract_links(_links("post-one", "/about", "../contact"), _BASE)
        assert links == [
            "https://example.com/blog/post-one",
            "https://example.com/about",
            "https://example.com/contact",
        ]

    def test_drops_anchors_and_non_http_schemes(self) -> None:
        html = _links("#top", "mailto:me@example.com", "tel:+123", "javascript:void(0)")
        assert extract_links(html, _BASE) == []

    def test_drops_cross_host_links(self) -> None:
        html = _links("https://other.com/page", "https://cdn.example.com/page", "https://example.com/ok")
        assert extract_links(html, _BASE) == ["https://example.com/ok"]

    def test_drops_assets(self) -> None:
        html = _links("/img/photo.JPG", "/files/doc.pdf", "/static/app.js", "/page")
        assert extract_links(html, _BASE) == ["https://example.com/page"]

    def test_drops_comment_reply_permutations(self) -> None:
        html = _links("/post?replytocom=12", "/post?a=1&replytocom=3", "/post?page=2")
        assert extract_links(html, _BASE) == ["https://example.com/post?page=2"]

    def test_strips_fragment_and_deduplicates(self) -> None:
        html = _links("/post#comments", "/post", "/post#top")
        assert extract_links(html, _BASE) == ["https://example.com/post"]

    def test_empty_markup(self) -> None:
        assert extract_links("", _BASE) == []


class TestText:
    def test_content_container_preferred_over_body(self) -> None:
        soup = parse_html(
            "<body><div>menu menu</div><main>main text</main><article>other</article></body>"
        )
        assert content_text(soup) == "main text"

    def test_falls_back_to_body(self) -> None:
        soup = parse_html("<body><div>just <b>body</b> text</div></body>")
        assert content_text(soup) == "just body text"

    def test_scripts_and_styles_removed(self) -> None:
        soup = parse_html("<body><script>var x = 1;</script><style>p{}</style><p>visible</p></body>")
        assert content_text(soup) == "visible"

    def test_meta_description(self) -> None:
        soup = parse_html('<head><meta name="Description" content=" hello "></head>')
        assert meta_description(soup) == "hello"
        assert meta_description(parse_html("<head></head>")) is None

    def test_page_context_is_bounded(self) -> None:
        soup = parse_html("<head><title>T</title></head><body><h1>H</h1></body>")
        context = page_context(soup, "x" * 500, limit=100)
        assert context.startswith("TITLE: T\nH1: H\nMETA: \nCONTENT: ")
        assert len(context) == 100

    def test_strip_fragment(self) -> None:
        assert strip_fragment("https://example.com/a?b=1#c") == "https://example.com/a?b=1"
