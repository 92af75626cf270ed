from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

from policyguard_agent.duplicates import DuplicateDetector, is_duplicate, normalize_body, similarity

_BODY = " ".join(f"sentence number {i} talks about gardening and soil." for i in range(30))


class TestSimilarity:
    def test_normalisation(self) -> None:
        assert normalize_body("  Hello \n\t WORLD  ") == "hello world"

    def test_short_bodies_are_not_compared(self) -> None:
        assert similarity("a" * 99, "a" * 500) is None
        assert is_duplicate("a" * 99, ["a" * 99]) is False

    def test_identical_body_is_duplicate(self) -> None:
        assert is_duplicate(_BODY, [_BODY]) is True

    def test_whitespace_and_case_are_ignored(self) -> None:
        assert is_duplicate(_BODY.upper().replace(" ", "   "), [_BODY]) is True

    def test_different_body_is_not_duplicate(self) -> None:
        other = " ".join(f"unrelated {i} paragraph on kitchen tiles, grout & paint!" for i in range(30))
        assert is_duplicate(other, [_BODY]) is False

    def test_shifted_copy_is_not_detected(self) -> None:
        # Position-aligned sampling: a prefix shift defeats the fingerprint.
        shifted = "xyz" + _BODY
        assert is_duplicate(shifted, [_BODY]) is False

    def test_only_shorter_length_is_sampled(self) -> None:
        longer = _BODY + " completely different trailing material " * 50
        assert is_duplicate(longer, [_BODY]) is True


class TestDuplicateDetector:
    def test_second_registration_is_duplicate(self) -> None:
        detector = DuplicateDetector()
        assert detector.check_and_register(_BODY) is False
        assert detector.check_and_register(_BODY) is True
        assert len(detector) == 1

    def test_concurrent_registration_accepts_exactly_one(self) -> None:
        detector = DuplicateDetector()
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(detector.check_and_register, [_BODY] * 16))
        assert results.count(False) == 1
        assert len(detector) == 1
