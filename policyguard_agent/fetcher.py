from __future__ import annotations

import logging

import httpx

from .config import settings

logger = logging.getLogger(__name__)

_HEADERS = {
    "user-agent": settings.user_agent,
    "accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "accept-language": "en-US,en;q=0.6",
}


def fetch_html(
    url: str,
    *,
    timeout_s: float | None = None,
    max_redirects: int | None = None,
) -> str:
    """GET *url* and return its markup, or ``""`` when the page is unavailable.

    Certificate verification is disabled. Transport errors, timeouts, too many
    redirects and non-2xx responses are logged and collapse to an empty string.
    """
    timeout = settings.fetch_timeout_s if timeout_s is None else timeout_s
    redirects = settings.fetch_max_redirects if max_redirects is None else max_redirects

    logger.info("Fetching: %s", url)
    try:
        with httpx.Client(
            timeout=timeout,
            follow_redirects=True,
            max_redirects=redirects,
            verify=False,
        ) as client:
            res = client.get(url, headers=_HEADERS)
            if res.status_code < 200 or res.status_code >= 300:
                logger.warning("Failed to fetch %s: HTTP %s", url, res.status_code)
                return ""
            html = res.text
    except Exception as e:
        logger.warning("Failed to fetch %s: %s", url, e)
        return ""

    if not html:
        logger.warning("Empty response for URL: %s", url)
        return ""

    logger.info("Fetched %s (%d chars)", url, len(html))
    return html
