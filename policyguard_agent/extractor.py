"""HTML parsing helpers: link discovery and text extraction for scanned pages."""

from __future__ import annotations

import logging
import re
from urllib.parse import urljoin, urlparse, urlunparse

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

# Most specific first; the first selector that matches wins.
CONTENT_SELECTORS = (
    "main",
    "article",
    ".post-content",
    ".entry-content",
    ".content",
    ".post-body",
)

_ASSET_EXTENSIONS = (
    ".jpg", ".jpeg", ".png", ".gif", ".webp", ".svg", ".ico",
    ".pdf", ".zip", ".mp4", ".mp3",
    ".css", ".js", ".woff", ".woff2",
)

# WordPress comment-reply links produce one URL per comment.
_REPLY_PERMUTATION_RE = re.compile(r"(?:^|&)replytocom=", re.IGNORECASE)

_WS_RE = re.compile(r"\s+")


def parse_html(html: str) -> BeautifulSoup:
    """Parse *html* into a tree with script/style blocks removed."""
    soup = BeautifulSoup(html or "", "html.parser")
    for tag in soup(["script", "style", "noscript", "template"]):
        tag.decompose()
    return soup


def normalize_space(text: str) -> str:
    return _WS_RE.sub(" ", text or "").strip()


def strip_fragment(url: str) -> str:
    try:
        p = urlparse(url)
    except ValueError:
        return url
    return urlunparse(p._replace(fragment=""))


def _is_asset(path: str) -> bool:
    return path.lower().endswith(_ASSET_EXTENSIONS)


def extract_links(html: str | BeautifulSoup, base_url: str) -> list[str]:
    """Return the unique same-host page links found in *html*.

    Links are resolved against *base_url* and their fragments are stripped.
    In-page anchors, ``mailto:``/``tel:``/``javascript:`` links, other hosts,
    asset files and comment-reply permutations are dropped. The result keeps
    document order.
    """
    soup = html if isinstance(html, BeautifulSoup) else parse_html(html)
    try:
        base_host = (urlparse(base_url).hostname or "").lower()
    except ValueError:
        return []

    links: dict[str, None] = {}
    for a in soup.find_all("a", href=True):
        href = (a.get("href") or "").strip()
        if not href or href.startswith(("#", "mailto:", "tel:", "javascript:")):
            continue

        try:
            p = urlparse(urljoin(base_url, href))
            host = (p.hostname or "").lower()
        except ValueError:
            continue

        if p.scheme not in ("http", "https") or host != base_host:
            continue
        if _is_asset(p.path):
            continue
        if _REPLY_PERMUTATION_RE.search(p.query):
            continue

        links[urlunparse(p._replace(fragment=""))] = None

    logger.info("Extracted %d links from %s", len(links), base_url)
    return list(links)


def content_container(soup: BeautifulSoup):
    for selector in CONTENT_SELECTORS:
        node = soup.select_one(selector)
        if node is not None:
            return node
    return None


def content_text(soup: BeautifulSoup) -> str:
    """Whitespace-collapsed text of the main content container, or of the body."""
    node = content_container(soup) or soup.body or soup
    return normalize_space(node.get_text(" "))


def body_text(soup: BeautifulSoup) -> str:
    node = soup.body or soup
    return normalize_space(node.get_text(" "))


def title_text(soup: BeautifulSoup) -> str:
    return normalize_space(soup.title.get_text(" ")) if soup.title else ""


def first_heading(soup: BeautifulSoup) -> str:
    h1 = soup.find("h1")
    return normalize_space(h1.get_text(" ")) if h1 else ""


def meta_description(soup: BeautifulSoup) -> str | None:
    tag = soup.find("meta", attrs={"name": re.compile(r"^description$", re.IGNORECASE)})
    if tag is None:
        return None
    return (tag.get("content") or "").strip()


def page_context(soup: BeautifulSoup, text: str, limit: int) -> str:
    """Bundle title, first heading, meta description and body text for the classifier."""
    context = (
        f"TITLE: {title_text(soup)}\n"
        f"H1: {first_heading(soup)}\n"
        f"META: {meta_description(soup) or ''}\n"
        f"CONTENT: {text[:limit]}"
    )
    return context[:limit]
