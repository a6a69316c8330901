"""editcore - search/replace patch matching and application for coding agents.

Engine API (pure functions, no I/O):

    blocks = parse(payload)
    errors = validate(blocks)
    result = apply(content, blocks)
    if result.all_successful:
        ...persist result.after_content...
"""

from __future__ import annotations

from editcore.applier import PatchApplier, apply_edit_blocks
from editcore.matcher import FuzzyMatcher, find_match
from editcore.parsers.search_replace import parse_edit_blocks, validate_edit_blocks
from editcore.types import (
    ApplyResult,
    EditBlock,
    MatchCandidate,
    MatchLocation,
    MatchResult,
    MatchStrategy,
)

parse = parse_edit_blocks
validate = validate_edit_blocks
apply = apply_edit_blocks

__version__ = "0.1.0"

__all__ = [
    "ApplyResult",
    "EditBlock",
    "FuzzyMatcher",
    "MatchCandidate",
    "MatchLocation",
    "MatchResult",
    "MatchStrategy",
    "PatchApplier",
    "apply",
    "apply_edit_blocks",
    "find_match",
    "parse",
    "parse_edit_blocks",
    "validate",
    "validate_edit_blocks",
]
