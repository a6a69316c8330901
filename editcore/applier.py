"""Apply an ordered list of edit blocks to an in-memory buffer.

Blocks run strictly in input order, each against the buffer produced by the
blocks before it, so a later block may target text an earlier block wrote.
A block that does not match leaves the buffer untouched and the remaining
blocks are still evaluated, giving complete diagnostics in one pass.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from editcore.config import MatcherConfig
from editcore.matcher import FuzzyMatcher
from editcore.types import ApplyResult, EditBlock, MatchResult


def splice(buffer: str, start: int, end: int, replacement: str) -> str:
    """Return a new buffer with ``buffer[start:end]`` replaced."""
    return buffer[:start] + replacement + buffer[end:]


@dataclass
class PatchApplier:
    """Sequential search/replace applier driving a FuzzyMatcher per block."""

    matcher: FuzzyMatcher = field(default_factory=FuzzyMatcher)

    def apply(self, content: str, blocks: Sequence[EditBlock]) -> ApplyResult:
        """Apply ``blocks`` to ``content``.

        Args:
            content: Current file content
            blocks: Edit blocks in the order they should be applied

        Returns:
            ApplyResult; ``after_content`` is only safe to persist when
            ``all_successful`` is true.
        """
        buffer = content
        results: list[MatchResult] = []

        for block in blocks:
            result = self.matcher.find_match(block.search_text, buffer)
            if result.success and result.location is not None:
                loc = result.location
                buffer = splice(buffer, loc.start_offset, loc.end_offset, block.replace_text)
            results.append(result)

        return ApplyResult(after_content=buffer, per_block=tuple(results))


def apply_edit_blocks(
    content: str,
    blocks: Sequence[EditBlock],
    config: MatcherConfig | None = None,
) -> ApplyResult:
    """Convenience function to apply blocks with a fresh applier."""
    applier = PatchApplier(matcher=FuzzyMatcher(config))
    return applier.apply(content, blocks)


__all__ = ["PatchApplier", "apply_edit_blocks", "splice"]
