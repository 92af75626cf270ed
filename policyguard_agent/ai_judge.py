"""
AI-powered policy auditor using Google Gemini.
This module sends borderline page content to Gemini and normalises its verdict
into the fixed violation schema used by the scan.
"""
from __future__ import annotations

import json
import logging
import re
import time
from typing import Any

from google import genai
from google.genai import types

from .config import Settings, settings as default_settings
from .models import CONFIDENCE_FLOOR, Classification, Violation
from .url_classifier import TOOL_KEYWORDS

logger = logging.getLogger(__name__)

VIOLATION_TYPES = (
    "PolicyViolation",
    "Copyright",
    "Adult",
    "Gambling",
    "Scam",
    "Violence",
    "HateSpeech",
    "Drugs",
    "Malware",
    "Misleading",
    "AffiliateDisclosure",
    "ExcessiveAds",
)

_TYPE_ALIASES = {
    "policy": "PolicyViolation",
    "policy_violation": "PolicyViolation",
    "copyright_infringement": "Copyright",
    "piracy": "Copyright",
    "adult_content": "Adult",
    "porn": "Adult",
    "pornography": "Adult",
    "sexual": "Adult",
    "casino": "Gambling",
    "betting": "Gambling",
    "fraud": "Scam",
    "phishing": "Scam",
    "hate": "HateSpeech",
    "hate_speech": "HateSpeech",
    "drug": "Drugs",
    "weapons": "Violence",
    "violent": "Violence",
    "misinformation": "Misleading",
    "deceptive": "Misleading",
    "affiliate": "AffiliateDisclosure",
    "ads": "ExcessiveAds",
    "ad_density": "ExcessiveAds",
}
_CANONICAL = {t.lower(): t for t in VIOLATION_TYPES}

_SAFE_INDICATORS = ("how to", "tutorial", "guide", "tips", "review", "recipe", "news")
_DANGER_INDICATORS = ("casino", "betting", "porn", "scam", "fake download", "get rich", "miracle")

_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)

_SYSTEM_PROMPT = f"""You are a strict publisher ad-policy auditor (AdSense-style content policies).
Only report a violation if you are 100% sure it is present in the supplied content.
Allowed violation types: {", ".join(VIOLATION_TYPES)}.

Respond with ONLY valid JSON (no markdown, no code blocks):

{{
  "violations": [{{"type": "<one of the allowed types>", "excerpt": "<short quote from the content>", "confidence": <0.0-1.0>}}],
  "summary": "<one sentence>",
  "suggestions": ["<actionable fix for the publisher>"]
}}

Be conservative and ONLY flag clear violations. An empty violations list is a valid answer."""


def empty_result(summary: str) -> Classification:
    return Classification(violations=[], summary=summary, suggestions=[])


def should_classify(text: str, url_path: str) -> bool:
    """Cheap pre-filter deciding whether content is worth a classifier call.

    Tool/download URLs are always classified. Otherwise content with danger
    words is classified, content with only safe words is skipped, and anything
    else is classified.
    """
    path = (url_path or "").lower()
    if any(k in path for k in TOOL_KEYWORDS):
        return True
    lower = (text or "").lower()
    if any(d in lower for d in _DANGER_INDICATORS):
        return True
    if any(s in lower for s in _SAFE_INDICATORS):
        return False
    return True


def _as_str_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, (str, int, float, bool)):
        s = str(value).strip()
        return [s] if s else []
    if isinstance(value, list):
        out: list[str] = []
        for item in value:
            if item is None:
                continue
            s = str(item).strip()
            if s:
                out.append(s)
        return out
    return [str(value)]


def _normalize_type(raw: Any) -> str:
    key = re.sub(r"[\s\-]+", "_", str(raw or "").strip()).lower()
    compact = key.replace("_", "")
    if compact in _CANONICAL:
        return _CANONICAL[compact]
    return _TYPE_ALIASES.get(key, "PolicyViolation")


def _confidence(raw: Any) -> float:
    if isinstance(raw, bool):
        return 0.0
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return 0.0
    if value != value:  # NaN
        return 0.0
    return max(0.0, min(1.0, value))


def parse_json_object(text: str | None) -> Any | None:
    """Parse classifier output, tolerating code fences and surrounding prose."""
    if not text:
        return None
    cleaned = _FENCE_RE.sub("", text).strip()
    try:
        return json.loads(cleaned)
    except ValueError:
        pass
    m = re.search(r"\{.*\}", cleaned, flags=re.DOTALL)
    if not m:
        return None
    try:
        return json.loads(m.group(0))
    except ValueError:
        return None


def normalize_classifier_output(raw: Any) -> Classification | None:
    """Normalise Gemini output to the violation schema.

    Entries that are not objects are discarded and every violation below the
    confidence floor is dropped.
    """
    if not isinstance(raw, dict):
        return None

    violations: list[Violation] = []
    items = raw.get("violations")
    for item in items if isinstance(items, list) else []:
        if not isinstance(item, dict):
            continue
        confidence = _confidence(item.get("confidence"))
        if confidence < CONFIDENCE_FLOOR:
            continue
        violations.append(
            Violation.of(_normalize_type(item.get("type")), str(item.get("excerpt") or ""), confidence)
        )

    summary = str(raw.get("summary") or "").strip()
    return Classification(
        violations=violations,
        summary=summary,
        suggestions=_as_str_list(raw.get("suggestions")),
    )


def _build_prompt(context: str, url: str, role: str) -> str:
    return f"URL: {url}\nPAGE ROLE: {role}\n\nCONTENT:\n{context}"


class SemanticClassifier:
    """Handle on the external Gemini auditor, created once per scan.

    *client* may be any object exposing ``models.generate_content``; when it is
    omitted a ``genai.Client`` is built from *api_key*. Without a usable client
    every call returns the empty result.
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        model: str = default_settings.gemini_model,
        timeout_ms: int = default_settings.classifier_timeout_ms,
        context_chars: int = default_settings.classifier_context_chars,
        client: Any | None = None,
    ):
        self.model = model
        self.context_chars = context_chars
        self.init_error: str | None = None
        self._client = client
        if self._client is None and api_key:
            try:
                self._client = genai.Client(
                    api_key=api_key,
                    http_options=types.HttpOptions(timeout=timeout_ms),
                )
            except Exception as e:
                logger.error("Gemini client init failed: %s", e)
                self.init_error = str(e)

    @classmethod
    def from_settings(cls, config: Settings | None = None) -> "SemanticClassifier":
        config = config or default_settings
        return cls(
            config.gemini_api_key,
            model=config.gemini_model,
            timeout_ms=config.classifier_timeout_ms,
            context_chars=config.classifier_context_chars,
        )

    @property
    def available(self) -> bool:
        return self._client is not None

    def _generate(self, prompt: str) -> str | None:
        resp = self._client.models.generate_content(
            model=self.model,
            contents=[
                types.Content(
                    role="user",
                    parts=[types.Part.from_text(text=prompt)],
                )
            ],
            config=types.GenerateContentConfig(
                system_instruction=_SYSTEM_PROMPT,
                response_mime_type="application/json",
                temperature=0.1,
                max_output_tokens=1200,
            ),
        )
        return (getattr(resp, "text", None) or "").strip()

    def classify(self, context: str, url: str, role: str = "Post", url_path: str = "") -> Classification:
        """Judge *context* for policy violations. Never raises."""
        if not self.available:
            logger.warning("Semantic classifier not available; skipping AI analysis.")
            return empty_result("Semantic classifier unavailable")

        if not should_classify(context, url_path):
            logger.info("Pre-filter safe content; skipping AI: %s", url)
            return empty_result("Safe content pre-filter")

        try:
            logger.info("Calling Gemini for URL: %s", url)
            start = time.perf_counter()
            text = self._generate(_build_prompt(context[: self.context_chars], url, role))
            logger.info(
                "Gemini response time for %s: %dms", url, int((time.perf_counter() - start) * 1000)
            )
        except Exception as e:
            logger.error("AI analysis failed for %s: %s", url, e)
            return empty_result("AI error")

        result = normalize_classifier_output(parse_json_object(text))
        if result is None:
            logger.warning("Gemini did not return JSON for: %s", url)
            return empty_result("AI no JSON")
        return result
