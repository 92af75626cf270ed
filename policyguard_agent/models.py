from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

PageRole = Literal["content", "structural", "homepage"]
ScanAction = Literal["scan-site", "verify-script"]

CONFIDENCE_FLOOR = 0.8


class ScanRequest(BaseModel):
    url: str = ""
    action: ScanAction = "scan-site"


class WireModel(BaseModel):
    """Frozen model serialised with camelCase keys (what the dashboard reads)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


@dataclass(frozen=True)
class PageRecord:
    """A fetched page. Its role is assigned once and never changes."""

    url: str
    raw_markup: str
    role: PageRole
    extracted_links: tuple[str, ...] = field(default_factory=tuple)


class Violation(WireModel):
    type: str
    excerpt: str = Field("", max_length=300)
    confidence: float = Field(..., ge=0.0, le=1.0)

    @classmethod
    def of(cls, type: str, excerpt: str, confidence: float) -> "Violation":
        return cls(type=type, excerpt=(excerpt or "").strip()[:300], confidence=confidence)


class QualitySignal(WireModel):
    word_count: int
    has_proper_headings: bool
    issues: list[str] = []


class Classification(BaseModel):
    """Normalised output of the semantic classifier."""

    violations: list[Violation] = []
    summary: str = ""
    suggestions: list[str] = []


class PageFinding(WireModel):
    url: str
    violations: list[Violation] = []
    suggestions: list[str] = []
    quality_issues: list[str] = []
    summary: str = ""


class RequiredPages(WireModel):
    found: list[str]
    missing: list[str]


class HomepageSignals(BaseModel):
    model_config = ConfigDict(frozen=True)

    quality: QualitySignal
    violations: list[Violation] = []
    suggestions: list[str] = []
    summary: str = ""
    has_meta_description: bool = False


class SiteStructure(WireModel):
    post_count: int
    has_meta_tags: bool
    has_good_headers: bool
    homepage_quality: QualitySignal
    structure_warnings: list[str]


class ContentQuality(WireModel):
    total_posts_analyzed: int
    posts_with_issues: int


class CrawlStats(WireModel):
    pages_discovered: int
    pages_expanded: int
    content_pages: int


class SiteReport(WireModel):
    url: str
    score: int = Field(..., ge=0, le=100)
    summary: str
    total_violations: int
    policy_violations: int
    duplicate_content_pages: int
    required_pages: RequiredPages
    site_structure: SiteStructure
    content_quality: ContentQuality
    crawl: CrawlStats
    homepage_violations: list[Violation]
    homepage_summary: str
    pages_with_issues: list[PageFinding]
    # goes out as "aiSuggestions"
    ai_suggestions: list[str]

    # metadata
    scanned_at: str
    duration_ms: int


class VerifyResponse(BaseModel):
    found: bool
    url: str


class HealthResponse(BaseModel):
    status: Literal["ok"] = "ok"
    classifier_configured: bool
    classifier_ok: bool
    model: str
    timestamp: str
    service: str = "PolicyGuard Scan API"


class ErrorResponse(BaseModel):
    error: str
    message: str
