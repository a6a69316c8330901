"""Core types for editcore - immutable Pydantic models.

Every value is created fresh per call and frozen after construction, so
results can be shared between threads without copying.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class MatchStrategy(str, Enum):
    """Matching techniques, in cascade order (most literal first)."""

    EXACT = "exact"
    WHITESPACE_NORMALIZED = "whitespace-normalized"
    LINE_TRIMMED = "line-trimmed"
    FUZZY_SIMILARITY = "fuzzy-similarity"

    @property
    def display_name(self) -> str:
        return self.value


class EditBlock(BaseModel):
    """One search/replace instruction pair."""

    search_text: str
    replace_text: str
    index: int = Field(0, ge=0)

    model_config = ConfigDict(frozen=True)


class MatchLocation(BaseModel):
    """Matched region of the buffer as it was when the match ran.

    Offsets are 0-based character indices (end exclusive), lines are 1-based.
    """

    start_offset: int = Field(ge=0)
    end_offset: int = Field(ge=0)
    start_line: int = Field(ge=1)
    end_line: int = Field(ge=1)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_order(self) -> "MatchLocation":
        if self.start_offset > self.end_offset:
            raise ValueError("start_offset must not exceed end_offset")
        if self.start_line > self.end_line:
            raise ValueError("start_line must not exceed end_line")
        return self

    def line_range(self) -> str:
        if self.start_line == self.end_line:
            return f"line {self.start_line}"
        return f"lines {self.start_line}-{self.end_line}"


class MatchCandidate(BaseModel):
    """A region that came close to matching but was not accepted."""

    start_line: int = Field(ge=1)
    end_line: int = Field(ge=1)
    score: float = Field(ge=0.0, le=1.0)
    excerpt: str = ""

    model_config = ConfigDict(frozen=True)

    def line_range(self) -> str:
        if self.start_line == self.end_line:
            return f"line {self.start_line}"
        return f"lines {self.start_line}-{self.end_line}"


class MatchResult(BaseModel):
    """Outcome of one find_match call.

    ``location`` is set iff ``success``; ``feedback`` is empty on success and
    carries LLM-readable diagnostics otherwise.
    """

    success: bool
    strategy: MatchStrategy | None = None
    location: MatchLocation | None = None
    feedback: str = ""
    score: float | None = None
    candidates: tuple[MatchCandidate, ...] = ()

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_location(self) -> "MatchResult":
        if self.success and self.location is None:
            raise ValueError("successful match requires a location")
        if not self.success and self.location is not None:
            raise ValueError("failed match must not carry a location")
        return self

    @classmethod
    def found(
        cls,
        strategy: MatchStrategy,
        location: MatchLocation,
        score: float = 1.0,
    ) -> "MatchResult":
        return cls(success=True, strategy=strategy, location=location, score=score)

    @classmethod
    def not_found(
        cls,
        feedback: str,
        candidates: tuple[MatchCandidate, ...] = (),
    ) -> "MatchResult":
        return cls(success=False, feedback=feedback, candidates=candidates)

    def strategy_name(self) -> str:
        """Stable label used verbatim in user-facing messages."""
        if self.strategy is None:
            return "none"
        return self.strategy.display_name

    def describe(self) -> str:
        """One-line description of a successful match."""
        if not self.success or self.location is None:
            return "no match"
        loc = self.location
        return f"lines {loc.start_line}-{loc.end_line} (strategy: {self.strategy_name()})"


class ApplyResult(BaseModel):
    """Outcome of applying an ordered list of edit blocks.

    Only trust ``after_content`` when ``all_successful`` is true; on partial
    failure it holds the best-effort buffer for diagnostics.
    """

    after_content: str
    per_block: tuple[MatchResult, ...] = ()

    model_config = ConfigDict(frozen=True)

    @property
    def all_successful(self) -> bool:
        return all(result.success for result in self.per_block)

    @property
    def applied_count(self) -> int:
        return sum(1 for result in self.per_block if result.success)

    def failed_blocks(self) -> list[int]:
        """1-based numbers of the blocks that did not match."""
        return [i + 1 for i, result in enumerate(self.per_block) if not result.success]

    def get_summary(self) -> str:
        return f"{self.applied_count}/{len(self.per_block)} blocks applied"

    def get_failure_feedback(self) -> str:
        sections = []
        for number in self.failed_blocks():
            feedback = self.per_block[number - 1].feedback
            sections.append(f"Block {number} failed: {feedback}")
        return "\n\n".join(sections)


__all__ = [
    "ApplyResult",
    "EditBlock",
    "MatchCandidate",
    "MatchLocation",
    "MatchResult",
    "MatchStrategy",
]
