from __future__ import annotations

from bs4 import BeautifulSoup

from .extractor import content_text, meta_description
from .models import QualitySignal

MIN_CONTENT_WORDS = 300


def analyze_content_quality(soup: BeautifulSoup) -> QualitySignal:
    words = len(content_text(soup).split())
    issues: list[str] = []
    if words < MIN_CONTENT_WORDS:
        issues.append(f"Thin content ({words} words < {MIN_CONTENT_WORDS})")

    has_h1 = soup.find("h1") is not None
    has_sub = soup.find(["h2", "h3"]) is not None
    has_proper_headings = has_h1 and has_sub
    if not has_proper_headings:
        issues.append("Missing proper heading hierarchy (H1/H2/H3)")

    return QualitySignal(word_count=words, has_proper_headings=has_proper_headings, issues=issues)


def structure_warnings(soup: BeautifulSoup, quality: QualitySignal) -> list[str]:
    """Homepage-level warnings shown alongside the quality issues."""
    warnings: list[str] = []
    if meta_description(soup) is None:
        warnings.append("Missing homepage meta description")
    if not quality.has_proper_headings:
        warnings.append("Missing proper header structure")
    return warnings
