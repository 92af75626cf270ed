"""Explicit policy-violation patterns that need no semantic judgment."""

from __future__ import annotations

from bs4 import BeautifulSoup

from .extractor import body_text, normalize_space
from .models import Violation

CLEAR_PHRASES = (
    "cracked software",
    "torrent download",
    "download full movie",
    "get rich quick",
    "make money fast",
    "free iphone",
    "download crack",
    "serial key",
    "keygen",
    "casino",
    "betting",
    "porn",
    "xxx",
    "nude",
    "scam",
    "fake download",
    "miracle cure",
)

_PIRACY_TERMS = ("torrent", "crack")
_DOWNLOAD_TERMS = ("download", "full", "software", "movie")

AFFILIATE_SELECTORS = (
    'a[href*="amazon.com/dp/"]',
    'a[href*="clickbank.net/"]',
    'a[href*="shareasale.com/"]',
)
_DISCLOSURE_TERMS = ("affiliate", "sponsored", "disclosure")

AD_SELECTOR = (
    'iframe[src*="doubleclick"], iframe[src*="googlesyndication"], '
    ".adsbygoogle, .ad-container"
)
MAX_AD_SLOTS = 10


def _phrase_violations(text: str) -> list[Violation]:
    return [
        Violation.of("PolicyViolation", f"Phrase: {phrase}", 0.95)
        for phrase in CLEAR_PHRASES
        if phrase in text
    ]


def _illicit_download_violations(soup: BeautifulSoup) -> list[Violation]:
    out: list[Violation] = []
    for a in soup.find_all("a", href=True):
        href = (a.get("href") or "").lower()
        label = normalize_space(a.get_text(" ")).lower()
        piracy = any(t in href or t in label for t in _PIRACY_TERMS)
        if piracy and any(t in label for t in _DOWNLOAD_TERMS):
            out.append(Violation.of("Copyright", f"Illegal download link: {label}", 0.9))
    return out


def _affiliate_violations(soup: BeautifulSoup, text: str) -> list[Violation]:
    if any(t in text for t in _DISCLOSURE_TERMS):
        return []
    out: list[Violation] = []
    for selector in AFFILIATE_SELECTORS:
        for a in soup.select(selector):
            href = a.get("href") or ""
            if href:
                out.append(
                    Violation.of("AffiliateDisclosure", f"Affiliate link without disclosure: {href}", 0.85)
                )
    return out


def _ad_density_violations(soup: BeautifulSoup) -> list[Violation]:
    count = len(soup.select(AD_SELECTOR))
    if count > MAX_AD_SLOTS:
        return [Violation.of("ExcessiveAds", f"High ad density ({count})", 0.8)]
    return []


def detect_clear_violations(soup: BeautifulSoup) -> list[Violation]:
    """Run every rule over the page; a page may trigger several."""
    text = body_text(soup).lower()
    return [
        *_phrase_violations(text),
        *_illicit_download_violations(soup),
        *_affiliate_violations(soup, text),
        *_ad_density_violations(soup),
    ]
