"""Tests for the immutable value types."""

import pytest
from pydantic import ValidationError

from editcore.types import (
    ApplyResult,
    EditBlock,
    MatchLocation,
    MatchResult,
    MatchStrategy,
)


def location(start=0, end=3, start_line=1, end_line=1) -> MatchLocation:
    return MatchLocation(start_offset=start, end_offset=end, start_line=start_line, end_line=end_line)


class TestMatchStrategy:
    """Test the closed strategy enum."""

    def test_cascade_order(self):
        assert list(MatchStrategy) == [
            MatchStrategy.EXACT,
            MatchStrategy.WHITESPACE_NORMALIZED,
            MatchStrategy.LINE_TRIMMED,
            MatchStrategy.FUZZY_SIMILARITY,
        ]

    def test_display_names(self):
        assert [s.display_name for s in MatchStrategy] == [
            "exact",
            "whitespace-normalized",
            "line-trimmed",
            "fuzzy-similarity",
        ]


class TestMatchLocation:
    """Test location invariants."""

    def test_valid(self):
        loc = location(2, 5, 1, 2)
        assert loc.line_range() == "lines 1-2"

    def test_single_line_range(self):
        assert location().line_range() == "line 1"

    def test_start_after_end_rejected(self):
        with pytest.raises(ValidationError):
            location(start=5, end=2)

    def test_negative_offset_rejected(self):
        with pytest.raises(ValidationError):
            location(start=-1)

    def test_frozen(self):
        loc = location()
        with pytest.raises(ValidationError):
            loc.start_offset = 1


class TestMatchResult:
    """Test MatchResult construction and labels."""

    def test_found(self):
        result = MatchResult.found(MatchStrategy.LINE_TRIMMED, location(0, 10, 3, 5))

        assert result.success
        assert result.feedback == ""
        assert result.strategy_name() == "line-trimmed"
        assert result.describe() == "lines 3-5 (strategy: line-trimmed)"

    def test_not_found(self):
        result = MatchResult.not_found("nope")

        assert not result.success
        assert result.location is None
        assert result.strategy_name() == "none"
        assert result.describe() == "no match"

    def test_success_requires_location(self):
        with pytest.raises(ValidationError):
            MatchResult(success=True, strategy=MatchStrategy.EXACT)

    def test_failure_forbids_location(self):
        with pytest.raises(ValidationError):
            MatchResult(success=False, location=location())


class TestApplyResult:
    """Test ApplyResult aggregation."""

    def test_summary_and_feedback(self):
        ok = MatchResult.found(MatchStrategy.EXACT, location())
        bad = MatchResult.not_found("not here")
        result = ApplyResult(after_content="x", per_block=(ok, bad, ok, bad))

        assert not result.all_successful
        assert result.applied_count == 2
        assert result.get_summary() == "2/4 blocks applied"
        assert result.failed_blocks() == [2, 4]
        assert result.get_failure_feedback() == "Block 2 failed: not here\n\nBlock 4 failed: not here"

    def test_all_successful(self):
        ok = MatchResult.found(MatchStrategy.EXACT, location())
        assert ApplyResult(after_content="x", per_block=(ok,)).all_successful


class TestEditBlock:
    """Test EditBlock."""

    def test_defaults(self):
        block = EditBlock(search_text="a", replace_text="b")
        assert block.index == 0

    def test_frozen(self):
        block = EditBlock(search_text="a", replace_text="b")
        with pytest.raises(ValidationError):
            block.search_text = "c"
