"""Turn per-page signals into one compliance score and report."""

from __future__ import annotations

from datetime import datetime, timezone

from .models import (
    ContentQuality,
    CrawlStats,
    HomepageSignals,
    PageFinding,
    RequiredPages,
    SiteReport,
    SiteStructure,
)

DUPLICATE_TYPE = "DuplicateContent"

POLICY_VIOLATION_PENALTY = 5
DUPLICATE_PAGE_PENALTY = 1
MISSING_PAGE_PENALTY = 5
HOMEPAGE_ISSUE_PENALTY = 2

LOW_CONTENT_PAGES = 20
LOW_CONTENT_PENALTY = 10
MODERATE_CONTENT_PAGES = 40
MODERATE_CONTENT_PENALTY = 5

MAX_SUGGESTIONS = 20


def _clamp_score(score: float) -> int:
    return max(0, min(100, int(round(score))))


def is_duplicate_finding(finding: PageFinding) -> bool:
    return bool(finding.violations) and all(v.type == DUPLICATE_TYPE for v in finding.violations)


def count_policy_violations(homepage: HomepageSignals, findings: list[PageFinding]) -> int:
    count = sum(1 for v in homepage.violations if v.type != DUPLICATE_TYPE)
    for f in findings:
        count += sum(1 for v in f.violations if v.type != DUPLICATE_TYPE)
    return count


def compute_score(
    *,
    policy_violations: int,
    duplicate_pages: int,
    missing_pages: int,
    homepage_issues: int,
    content_pages: int,
) -> int:
    score = 100
    score -= policy_violations * POLICY_VIOLATION_PENALTY
    score -= duplicate_pages * DUPLICATE_PAGE_PENALTY
    score -= missing_pages * MISSING_PAGE_PENALTY
    score -= homepage_issues * HOMEPAGE_ISSUE_PENALTY
    if content_pages < LOW_CONTENT_PAGES:
        score -= LOW_CONTENT_PENALTY
    elif content_pages < MODERATE_CONTENT_PAGES:
        score -= MODERATE_CONTENT_PENALTY
    return _clamp_score(score)


def collect_suggestions(
    homepage: HomepageSignals,
    findings: list[PageFinding],
    required: RequiredPages,
) -> list[str]:
    suggestions = list(homepage.suggestions)
    for f in findings:
        suggestions.extend(f.suggestions)
    if required.missing:
        suggestions.append(f"Add missing pages: {', '.join(required.missing)}")
    suggestions.extend(homepage.quality.issues)
    return suggestions[:MAX_SUGGESTIONS]


def build_summary(policy_violations: int, duplicate_pages: int, content_pages: int) -> str:
    if policy_violations + duplicate_pages > 0:
        return f"{policy_violations} policy violations and {duplicate_pages} duplicate pages found"
    if content_pages < LOW_CONTENT_PAGES:
        return f"Low content ({content_pages} posts)"
    return "Site appears compliant"


def score_site(
    homepage: HomepageSignals,
    findings: list[PageFinding],
    required: RequiredPages,
    *,
    url: str,
    content_pages: int,
    crawl: CrawlStats | None = None,
    structure_warnings: list[str] | None = None,
    duration_ms: int = 0,
    scanned_at: str | None = None,
) -> SiteReport:
    policy_violations = count_policy_violations(homepage, findings)
    duplicate_pages = sum(1 for f in findings if is_duplicate_finding(f))

    score = compute_score(
        policy_violations=policy_violations,
        duplicate_pages=duplicate_pages,
        missing_pages=len(required.missing),
        homepage_issues=len(homepage.quality.issues),
        content_pages=content_pages,
    )

    return SiteReport(
        url=url,
        score=score,
        summary=build_summary(policy_violations, duplicate_pages, content_pages),
        total_violations=policy_violations + duplicate_pages,
        policy_violations=policy_violations,
        duplicate_content_pages=duplicate_pages,
        required_pages=required,
        site_structure=SiteStructure(
            post_count=content_pages,
            has_meta_tags=homepage.has_meta_description,
            has_good_headers=homepage.quality.has_proper_headings,
            homepage_quality=homepage.quality,
            structure_warnings=list(structure_warnings or []),
        ),
        content_quality=ContentQuality(
            total_posts_analyzed=content_pages,
            posts_with_issues=len(findings),
        ),
        crawl=crawl or CrawlStats(pages_discovered=0, pages_expanded=0, content_pages=content_pages),
        homepage_violations=list(homepage.violations),
        homepage_summary=homepage.summary,
        pages_with_issues=list(findings),
        ai_suggestions=collect_suggestions(homepage, findings, required),
        scanned_at=scanned_at or datetime.now(timezone.utc).isoformat(),
        duration_ms=duration_ms,
    )
