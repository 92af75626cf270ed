"""Decide from the URL alone whether a page carries editorial content.

Rules are evaluated in order and the first rule that matches decides the
role.  Tool/download pages are matched before the structural exclusions so
that high-risk pages are always analysed.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Literal
from urllib.parse import urlparse

UrlRole = Literal["content", "structural"]
RuleName = Literal[
    "ToolKeyword",
    "StructuralPattern",
    "DatedPostPattern",
    "DescriptiveSlug",
    "SingleSegmentFallback",
    "Default",
]

REQUIRED_PAGES = ("about", "contact", "privacy", "terms", "disclaimer")

TOOL_KEYWORDS = (
    "download",
    "torrent",
    "crack",
    "keygen",
    "serial",
    "hack",
    "patch",
    "activation",
    "apk",
    "video-downloader",
    "youtube-downloader",
    "tiktok-downloader",
    "instagram-downloader",
)

STRUCTURAL_PATTERNS = (
    "/wp-json/",
    "/wp-content/",
    "/wp-includes/",
    "/admin/",
    "/login",
    "/register",
    "/signup",
    "/cart",
    "/checkout",
    "/feed",
    "/contact",
    "/about",
    "/privacy",
    "/terms",
    "/disclaimer",
    "/support",
    "/help",
    "/faq",
    "/sitemap",
    "/robots.txt",
    "/humans.txt",
    # archives and listings
    "/category/",
    "/tag/",
    "/author/",
    "/archive/",
    "/search/",
    "/page/",
    "/year/",
    "/month/",
    "/day/",
)

_STRUCTURAL_SEGMENTS = {"page", "category", "tag", "feed", "year", "month", "day", "archive", "search", "author"}
_CATEGORY_SEGMENTS = {"category", "tag", "author", "archive", "search"}

_DATED_POST_RE = re.compile(r"^/\d{4}/\d{2}/[^/]+(?:\.html?|/)?$")


@dataclass(frozen=True)
class UrlPath:
    path: str
    segments: tuple[str, ...]


@dataclass(frozen=True)
class UrlRule:
    name: RuleName
    role: UrlRole
    matches: Callable[[UrlPath], bool]


@dataclass(frozen=True)
class UrlClassification:
    role: UrlRole
    rule: RuleName


def _has_tool_keyword(u: UrlPath) -> bool:
    return any(k in u.path for k in TOOL_KEYWORDS)


def _is_structural(u: UrlPath) -> bool:
    return any(p in u.path for p in STRUCTURAL_PATTERNS)


def _is_dated_post(u: UrlPath) -> bool:
    return bool(_DATED_POST_RE.match(u.path))


def _is_descriptive_slug(u: UrlPath) -> bool:
    if len(u.segments) < 2:
        return False
    last = u.segments[-1]
    return (
        len(last) > 4
        and not last.isdigit()
        and last not in _STRUCTURAL_SEGMENTS
        and "?" not in last
        and "#" not in last
    )


def _is_single_content_segment(u: UrlPath) -> bool:
    if len(u.segments) != 1:
        return False
    segment = u.segments[0]
    return segment not in REQUIRED_PAGES and segment not in _CATEGORY_SEGMENTS


RULES: tuple[UrlRule, ...] = (
    UrlRule("ToolKeyword", "content", _has_tool_keyword),
    UrlRule("StructuralPattern", "structural", _is_structural),
    UrlRule("DatedPostPattern", "content", _is_dated_post),
    UrlRule("DescriptiveSlug", "content", _is_descriptive_slug),
    UrlRule("SingleSegmentFallback", "content", _is_single_content_segment),
)

_REJECTED = UrlClassification(role="structural", rule="Default")


def parse_url_path(url: str) -> UrlPath | None:
    """Lowercased path and its non-empty segments, or ``None`` for malformed URLs."""
    try:
        p = urlparse((url or "").strip().lower())
    except ValueError:
        return None
    if p.scheme not in ("http", "https") or not p.netloc:
        return None
    path = p.path or "/"
    return UrlPath(path=path, segments=tuple(s for s in path.split("/") if s))


def classify_url(url: str) -> UrlClassification:
    parsed = parse_url_path(url)
    if parsed is None:
        return _REJECTED
    for rule in RULES:
        if rule.matches(parsed):
            return UrlClassification(role=rule.role, rule=rule.name)
    return _REJECTED


def is_likely_content_url(url: str) -> bool:
    return classify_url(url).role == "content"
