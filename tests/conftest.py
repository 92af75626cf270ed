"""Shared fixtures: HTML builders, an in-memory site and a scripted classifier."""

from __future__ import annotations

import json
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from policyguard_agent.ai_judge import SemanticClassifier

# Neutral filler: no policy phrases and no pre-filter "safe" words.
FILLER_WORD = "garden"


def make_html(
    *,
    title: str = "Page",
    h1: str | None = "Heading",
    h2: str | None = "Section",
    body: str = "",
    words: int = 0,
    links: list[str] | None = None,
    meta: str | None = "A description",
    container: str = "article",
    extra: str = "",
) -> str:
    filler = " ".join([FILLER_WORD] * words)
    anchors = "".join(f'<a href="{href}">link</a>' for href in (links or []))
    meta_tag = f'<meta name="description" content="{meta}">' if meta is not None else ""
    h1_tag = f"<h1>{h1}</h1>" if h1 else ""
    h2_tag = f"<h2>{h2}</h2>" if h2 else ""
    return (
        f"<html><head><title>{title}</title>{meta_tag}</head><body>"
        f"<nav>{anchors}</nav>"
        f"<{container}>{h1_tag}{h2_tag}<p>{body} {filler}</p></{container}>"
        f"{extra}</body></html>"
    )


class FakeSite:
    """Maps URLs to markup; unknown URLs behave like failed fetches."""

    def __init__(self, pages: dict[str, str] | None = None):
        self.pages = dict(pages or {})
        self.requests: list[str] = []

    def __call__(self, url: str) -> str:
        self.requests.append(url)
        return self.pages.get(url, "")


def scripted_classifier(payload: dict | str | None = None) -> tuple[SemanticClassifier, MagicMock]:
    """A classifier whose Gemini client returns *payload* for every call."""
    text = payload if isinstance(payload, str) or payload is None else json.dumps(payload)
    client = MagicMock()
    client.models.generate_content.return_value = SimpleNamespace(text=text)
    return SemanticClassifier(client=client), client


@pytest.fixture()
def offline_classifier() -> SemanticClassifier:
    return SemanticClassifier(api_key=None)


@pytest.fixture()
def fake_site() -> FakeSite:
    return FakeSite()
