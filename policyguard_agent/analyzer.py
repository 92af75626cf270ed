from __future__ import annotations

import logging
import math
import re
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime, timezone
from urllib.parse import urlparse, urlunparse

from .ai_judge import SemanticClassifier
from .config import Settings, settings as default_settings
from .duplicates import DuplicateDetector
from .errors import InvalidTargetError
from .extractor import content_text, meta_description, page_context, parse_html
from .fetcher import fetch_html
from .models import (
    CrawlStats,
    HomepageSignals,
    PageFinding,
    PageRecord,
    SiteReport,
    VerifyResponse,
    Violation,
)
from .quality import analyze_content_quality, structure_warnings
from .rules import detect_clear_violations
from .scoring import DUPLICATE_TYPE, score_site
from .spider_crawler import Fetch, spider_crawl

logger = logging.getLogger(__name__)

# Pages with less extracted text than this are not analysed at all.
MIN_BODY_CHARS = 200

VERIFY_MARKERS = ("bootbot", "cdn.bardnative.com/bootbot", "bardnative.com/bootbot")


def _normalize_url(raw: str) -> str:
    value = (raw or "").strip()
    if not value:
        raise InvalidTargetError("Please provide a URL.", error="URL is required")

    if not re.match(r"^[a-zA-Z][a-zA-Z\d+.-]*://", value):
        value = "https://" + value

    try:
        parsed = urlparse(value)
        hostname = parsed.hostname
    except ValueError:
        raise InvalidTargetError("Please enter a valid website URL.")
    if parsed.scheme not in ("http", "https"):
        raise InvalidTargetError("Please use an http(s) website URL.")
    if not hostname or "." not in hostname or " " in hostname:
        raise InvalidTargetError("Please enter a valid website domain.")

    return urlunparse(parsed._replace(fragment=""))


def _analyze_homepage(
    page: PageRecord,
    classifier: SemanticClassifier,
    context_chars: int,
) -> tuple[HomepageSignals, list[str]]:
    """Structure, rule and semantic signals for the homepage."""
    soup = parse_html(page.raw_markup)
    quality = analyze_content_quality(soup)
    clear = detect_clear_violations(soup)

    context = page_context(soup, content_text(soup), context_chars)
    ai = classifier.classify(context, page.url, "Homepage", urlparse(page.url).path)

    summary = ai.summary
    if clear and not summary:
        summary = "Potential issues detected on homepage"

    signals = HomepageSignals(
        quality=quality,
        violations=[*ai.violations, *clear],
        suggestions=ai.suggestions,
        summary=summary,
        has_meta_description=meta_description(soup) is not None,
    )
    return signals, structure_warnings(soup, quality)


def _fetch_page(url: str, fetch: Fetch) -> PageRecord | None:
    html = fetch(url)
    if not html:
        return None
    return PageRecord(url=url, raw_markup=html, role="content")


def _analyze_page(
    url: str,
    *,
    fetch: Fetch,
    classifier: SemanticClassifier,
    detector: DuplicateDetector,
    context_chars: int,
) -> PageFinding | None:
    """Fetch and screen one content page.

    Returns ``None`` when the page is unavailable, too short to judge, or has
    nothing worth reporting.
    """
    page = _fetch_page(url, fetch)
    if page is None:
        return None

    soup = parse_html(page.raw_markup)
    quality = analyze_content_quality(soup)
    clear = detect_clear_violations(soup)

    text = content_text(soup)
    if len(text) < MIN_BODY_CHARS:
        return None

    if detector.check_and_register(text):
        return PageFinding(
            url=page.url,
            violations=[Violation.of(DUPLICATE_TYPE, "Likely duplicate content", 0.9)],
            quality_issues=quality.issues,
            summary="Duplicate content",
        )

    ai = classifier.classify(
        page_context(soup, text, context_chars), page.url, "Post", urlparse(page.url).path
    )
    violations = [*ai.violations, *clear]
    if not (violations or ai.suggestions or quality.issues):
        return None

    return PageFinding(
        url=page.url,
        violations=violations,
        suggestions=ai.suggestions,
        quality_issues=quality.issues,
        summary=ai.summary,
    )


def analyze_content_pages(
    urls: list[str],
    *,
    fetch: Fetch,
    classifier: SemanticClassifier,
    concurrency: int,
    context_chars: int,
) -> list[PageFinding]:
    """Screen *urls* in batches of at most *concurrency* pages.

    Each batch is fully settled before the next one starts. Findings are in
    completion order.
    """
    detector = DuplicateDetector()
    findings: list[PageFinding] = []
    total_batches = math.ceil(len(urls) / concurrency) if urls else 0

    for n, start in enumerate(range(0, len(urls), concurrency), start=1):
        batch = urls[start:start + concurrency]
        logger.info("Processing batch %d/%d", n, total_batches)
        with ThreadPoolExecutor(max_workers=len(batch)) as pool:
            futures = {
                pool.submit(
                    _analyze_page,
                    url,
                    fetch=fetch,
                    classifier=classifier,
                    detector=detector,
                    context_chars=context_chars,
                ): url
                for url in batch
            }
            for fut in as_completed(futures):
                try:
                    finding = fut.result()
                except Exception:
                    logger.exception("Analysis failed for %s", futures[fut])
                    continue
                if finding is not None:
                    findings.append(finding)

    return findings


def scan_site(
    raw_url: str,
    *,
    classifier: SemanticClassifier | None = None,
    fetch: Fetch = fetch_html,
    config: Settings | None = None,
) -> SiteReport:
    """Crawl the site at *raw_url* and return its :class:`SiteReport`.

    Raises :class:`InvalidTargetError` for unusable URLs and
    :class:`HomepageUnavailableError` when the homepage cannot be fetched.
    """
    t0 = time.perf_counter()
    config = config or default_settings
    url = _normalize_url(raw_url)
    classifier = classifier or SemanticClassifier.from_settings(config)
    logger.info("Starting scan for: %s", url)

    crawl = spider_crawl(
        url,
        fetch=fetch,
        max_pages=config.max_pages,
        seed_links=config.seed_links,
        expand_pages=config.expand_pages,
    )

    homepage, warnings = _analyze_homepage(crawl.homepage, classifier, config.classifier_context_chars)

    findings = analyze_content_pages(
        crawl.content_urls,
        fetch=fetch,
        classifier=classifier,
        concurrency=config.concurrency,
        context_chars=config.classifier_context_chars,
    )

    report = score_site(
        homepage,
        findings,
        crawl.required_pages,
        url=url,
        content_pages=len(crawl.content_urls),
        crawl=CrawlStats(
            pages_discovered=len(crawl.discovered),
            pages_expanded=crawl.pages_expanded,
            content_pages=len(crawl.content_urls),
        ),
        structure_warnings=warnings,
        duration_ms=int((time.perf_counter() - t0) * 1000),
        scanned_at=datetime.now(timezone.utc).isoformat(),
    )

    logger.info(
        "Scan complete: %s Score: %d Policy Violations: %d Duplicates: %d",
        url,
        report.score,
        report.policy_violations,
        report.duplicate_content_pages,
    )
    return report


def verify_script(raw_url: str, *, fetch: Fetch = fetch_html) -> VerifyResponse:
    """Check whether the installation snippet is present on the page at *raw_url*."""
    url = _normalize_url(raw_url)
    logger.info("Verifying script presence for: %s", url)
    html = fetch(url)
    return VerifyResponse(found=any(marker in html for marker in VERIFY_MARKERS), url=url)
