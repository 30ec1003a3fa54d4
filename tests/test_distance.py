"""Tests for edit distance and closest-domain search."""

import pytest

from mailtidy import closest_domain, levenshtein
from mailtidy.pipeline.distance import normalized_score


class TestLevenshtein:
    """Tests for levenshtein."""

    def test_classic_example(self) -> None:
        """kitten -> sitting takes three edits."""
        assert levenshtein("kitten", "sitting") == 3

    def test_identical(self) -> None:
        """Identical strings have distance zero."""
        assert levenshtein("gmail.com", "gmail.com") == 0

    def test_empty_strings(self) -> None:
        """Distance to the empty string is the length."""
        assert levenshtein("", "abc") == 3
        assert levenshtein("abc", "") == 3
        assert levenshtein("", "") == 0

    def test_symmetric(self) -> None:
        """Argument order does not matter."""
        assert levenshtein("gmial.com", "gmail.com") == levenshtein("gmail.com", "gmial.com")

    def test_transposition_is_two_edits(self) -> None:
        """Swapped letters cost two substitutions."""
        assert levenshtein("gmial.com", "gmail.com") == 2

    def test_bound_exceeded(self) -> None:
        """Exceeding the bound returns max_distance + 1."""
        assert levenshtein("gmial.com", "gmail.com", max_distance=0) == 1
        assert levenshtein("gmial.com", "gmail.com", max_distance=1) == 2

    def test_bound_by_length_gap(self) -> None:
        """A length gap larger than the bound stops early."""
        assert levenshtein("abc", "abcdef", max_distance=1) == 2

    def test_within_bound(self) -> None:
        """Distances within the bound are exact."""
        assert levenshtein("gmal.com", "gmail.com", max_distance=2) == 1


class TestNormalizedScore:
    """Tests for normalized_score."""

    def test_exact(self) -> None:
        """Distance zero scores 1.0."""
        assert normalized_score(0, "abc", "abc") == 1.0
        assert normalized_score(0, "", "") == 1.0

    def test_scaled_by_longer_string(self) -> None:
        """Score is one minus distance over the longer length."""
        assert normalized_score(1, "gmal.com", "gmail.com") == pytest.approx(1 - 1 / 9)

    def test_clamped(self) -> None:
        """Score never goes below zero."""
        assert normalized_score(10, "ab", "cd") == 0.0


class TestClosestDomain:
    """Tests for closest_domain."""

    def test_exact_candidate(self) -> None:
        """A candidate equal to the input wins with a perfect score."""
        result = closest_domain("gmail.com", ["gmail.com"])

        assert result.candidate == "gmail.com"
        assert result.distance == 0
        assert result.normalized_score == 1.0
        assert result.index == 0

    def test_nearest_wins(self) -> None:
        """The lowest distance wins."""
        result = closest_domain("hotmial.com", ["gmail.com", "hotmail.com", "outlook.com"])

        assert result.candidate == "hotmail.com"
        assert result.index == 1
        assert result.distance == 2

    def test_tie_goes_to_earliest(self) -> None:
        """Equal distances resolve to the earliest candidate."""
        result = closest_domain("abc", ["abd", "abe"])

        assert result.candidate == "abd"
        assert result.index == 0

    def test_bound_exceeded(self) -> None:
        """Over the bound: no candidate, bounded distance kept."""
        result = closest_domain("gmial.com", ["gmail.com"], max_distance=0)

        assert result.candidate is None
        assert result.index == -1
        assert result.distance == 1
        assert result.input == "gmial.com"

    def test_normalization(self) -> None:
        """Input and candidates are trimmed and lowercased by default."""
        assert closest_domain(" GMAIL.COM ", ["Gmail.com"]).distance == 0
        assert closest_domain(" GMAIL.COM ", ["gmail.com"], normalize=False).distance > 0

    def test_input_kept_as_given(self) -> None:
        """The result reports the input unmodified."""
        assert closest_domain(" GMAIL.COM ", ["gmail.com"]).input == " GMAIL.COM "

    def test_no_candidates(self) -> None:
        """An empty candidate list finds nothing."""
        result = closest_domain("gmail.com", [])

        assert result.candidate is None
        assert result.index == -1
        assert result.distance == len("gmail.com")
        assert result.normalized_score == 0.0

    def test_default_candidates(self) -> None:
        """Without candidates the built-in list is searched."""
        result = closest_domain("gmal.com")

        assert result.candidate == "gmail.com"
        assert result.distance == 1

    def test_deterministic(self) -> None:
        """Repeated calls give equal results."""
        assert closest_domain("yaho.com") == closest_domain("yaho.com")
