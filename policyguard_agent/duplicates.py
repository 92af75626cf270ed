"""Approximate duplicate-content detection.

The fingerprint compares characters at evenly spaced positions of two
normalised bodies.  It is position-aligned, so reordered or shifted copies of
the same text are usually not detected, and unrelated pages that share a long
common prefix (templates, boilerplate) can be.
"""

from __future__ import annotations

import re
import threading

MIN_COMPARE_CHARS = 100
DUPLICATE_RATIO = 0.85

_WS_RE = re.compile(r"\s+")


def normalize_body(text: str) -> str:
    return _WS_RE.sub(" ", (text or "").lower()).strip()


def similarity(a: str, b: str) -> float | None:
    """Sampled positional match ratio, or ``None`` when either body is too short."""
    a = normalize_body(a)
    b = normalize_body(b)
    min_len = min(len(a), len(b))
    if min_len < MIN_COMPARE_CHARS:
        return None

    step = max(1, min_len // 100)
    positions = range(0, min_len, step)
    matches = sum(1 for i in positions if a[i] == b[i])
    return matches / len(positions)


def is_duplicate(body: str, prior_bodies: list[str]) -> bool:
    for prior in prior_bodies:
        ratio = similarity(body, prior)
        if ratio is not None and ratio > DUPLICATE_RATIO:
            return True
    return False


class DuplicateDetector:
    """Accumulates accepted page bodies across one scan.

    A body is compared against every body accepted before it; the check and
    the registration happen under one lock, so the outcome for near-identical
    pages analysed in the same batch depends on which finishes fetching first.
    """

    def __init__(self) -> None:
        self._bodies: list[str] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._bodies)

    def check_and_register(self, body: str) -> bool:
        """Return ``True`` if *body* duplicates an accepted body; otherwise accept it."""
        normalized = normalize_body(body)
        with self._lock:
            if is_duplicate(normalized, self._bodies):
                return True
            self._bodies.append(normalized)
            return False
