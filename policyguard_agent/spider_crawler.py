from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from urllib.parse import urlparse, urlunparse

from .config import settings
from .errors import HomepageUnavailableError
from .extractor import extract_links, strip_fragment
from .fetcher import fetch_html
from .models import PageRecord, RequiredPages
from .url_classifier import REQUIRED_PAGES, is_likely_content_url

logger = logging.getLogger(__name__)

Fetch = Callable[[str], str]


@dataclass
class CrawlResult:
    homepage: PageRecord
    required_pages: RequiredPages
    discovered: list[str]
    pages_expanded: int
    content_urls: list[str]


def _page_key(url: str) -> str:
    """``https://host`` and ``https://host/`` name the same page."""
    parsed = urlparse(url)
    return urlunparse(parsed._replace(path=parsed.path or "/", fragment=""))


def check_required_pages(links: Iterable[str]) -> RequiredPages:
    lowered = [link.lower() for link in links]
    found: list[str] = []
    missing: list[str] = []
    for page in REQUIRED_PAGES:
        if any(page in link for link in lowered):
            found.append(page)
        else:
            missing.append(page)
    return RequiredPages(found=found, missing=missing)


def _expand(
    unique: dict[str, None],
    to_expand: list[str],
    fetch: Fetch,
    max_pages: int,
) -> int:
    """Fetch *to_expand* concurrently and merge their links into *unique*.

    Only this coordinating thread writes to *unique*. Once the cap is reached,
    pending fetches are cancelled and results of in-flight ones are dropped.
    """
    expanded = 0
    with ThreadPoolExecutor(max_workers=len(to_expand)) as pool:
        futures = {pool.submit(fetch, url): url for url in to_expand}
        for fut in as_completed(futures):
            if len(unique) >= max_pages:
                for pending in futures:
                    pending.cancel()
                continue

            page_url = futures[fut]
            try:
                html = fut.result()
            except Exception as e:
                logger.warning("Expansion fetch failed for %s: %s", page_url, e)
                continue
            if not html:
                continue

            expanded += 1
            for link in extract_links(html, page_url):
                if len(unique) >= max_pages:
                    break
                unique.setdefault(link, None)
    return expanded


def spider_crawl(
    start_url: str,
    *,
    fetch: Fetch = fetch_html,
    max_pages: int = settings.max_pages,
    seed_links: int = settings.seed_links,
    expand_pages: int = settings.expand_pages,
) -> CrawlResult:
    """Discover the content pages of the site at *start_url*.

    The homepage is fetched (a failure ends the scan), its links seed the
    frontier, the first *expand_pages* seeds are expanded one hop, and every
    discovered URL is then classified by URL alone.
    """
    homepage_html = fetch(start_url)
    if not homepage_html:
        raise HomepageUnavailableError(f"Could not fetch the homepage at {start_url}")

    homepage_links = extract_links(homepage_html, start_url)
    required = check_required_pages(homepage_links)
    logger.info(
        "Required pages found: %d, missing: %d", len(required.found), len(required.missing)
    )

    homepage = PageRecord(
        url=start_url,
        raw_markup=homepage_html,
        role="homepage",
        extracted_links=tuple(homepage_links),
    )

    unique: dict[str, None] = {}
    for link in homepage_links[:seed_links]:
        if len(unique) >= max_pages:
            break
        unique.setdefault(link, None)
    home_key = _page_key(start_url)
    if len(unique) < max_pages and not any(_page_key(u) == home_key for u in unique):
        unique.setdefault(start_url, None)

    pages_expanded = 0
    to_expand = [u for u in unique if _page_key(u) != home_key][:expand_pages]
    if to_expand and len(unique) < max_pages:
        pages_expanded = _expand(unique, to_expand, fetch, max_pages)
    logger.info("Crawl completed. Unique pages discovered: %d", len(unique))

    content: dict[str, None] = {}
    for url in unique:
        if _page_key(url) == home_key or not is_likely_content_url(url):
            continue
        content.setdefault(strip_fragment(url), None)
    logger.info("Candidate posts for scanning: %d", len(content))

    return CrawlResult(
        homepage=homepage,
        required_pages=required,
        discovered=list(unique),
        pages_expanded=pages_expanded,
        content_urls=list(content),
    )
