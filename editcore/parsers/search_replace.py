"""Parse SEARCH/REPLACE edit blocks emitted by an LLM.

Format::

    <<<<<<< SEARCH
    old text
    =======
    new text
    >>>>>>> REPLACE

Markers must start a line; trailing whitespace after a marker is tolerated.
There is no escaping, so a marker line inside a body ends that section.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from enum import Enum

from editcore.types import EditBlock

SEARCH_MARKER = "<<<<<<< SEARCH"
DIVIDER_MARKER = "======="
REPLACE_MARKER = ">>>>>>> REPLACE"

FORMAT_HINT = f"{SEARCH_MARKER}\\nold code\\n{DIVIDER_MARKER}\\nnew code\\n{REPLACE_MARKER}"


class _State(Enum):
    OUTSIDE = "outside"
    SEARCH = "search"
    REPLACE = "replace"


def _is_marker(line: str, marker: str) -> bool:
    return line.rstrip() == marker


def parse_edit_blocks(payload: str) -> list[EditBlock]:
    """Parse every well-formed block in ``payload``, in input order.

    Malformed blocks (missing divider, missing close, or interrupted by a new
    SEARCH marker) are dropped; an empty list means nothing usable was found.
    """
    blocks: list[EditBlock] = []
    state = _State.OUTSIDE
    search_lines: list[str] = []
    replace_lines: list[str] = []

    for line in (payload or "").splitlines():
        if _is_marker(line, SEARCH_MARKER):
            # Any block still open here is malformed and gets discarded
            state = _State.SEARCH
            search_lines = []
            replace_lines = []
            continue

        if state is _State.SEARCH:
            if _is_marker(line, DIVIDER_MARKER):
                state = _State.REPLACE
            elif _is_marker(line, REPLACE_MARKER):
                state = _State.OUTSIDE
            else:
                search_lines.append(line)
        elif state is _State.REPLACE:
            if _is_marker(line, REPLACE_MARKER):
                blocks.append(EditBlock(
                    search_text="\n".join(search_lines),
                    replace_text="\n".join(replace_lines),
                    index=len(blocks),
                ))
                state = _State.OUTSIDE
            else:
                replace_lines.append(line)

    return blocks


def validate_edit_blocks(blocks: Sequence[EditBlock]) -> list[str]:
    """Return one message per problem across all blocks (empty if valid)."""
    errors: list[str] = []
    for number, block in enumerate(blocks, start=1):
        if not block.search_text.strip():
            errors.append(f"Block {number}: SEARCH section is empty")
        elif block.search_text == block.replace_text:
            errors.append(f"Block {number}: SEARCH and REPLACE sections are identical (no-op edit)")
    return errors


def format_edit_block(search: str, replace: str) -> str:
    """Render a single block in the exact syntax the parser accepts."""
    return "\n".join([SEARCH_MARKER, search, DIVIDER_MARKER, replace, REPLACE_MARKER])


def format_edit_blocks(pairs: Iterable[tuple[str, str]]) -> str:
    return "\n".join(format_edit_block(search, replace) for search, replace in pairs)


__all__ = [
    "DIVIDER_MARKER",
    "FORMAT_HINT",
    "REPLACE_MARKER",
    "SEARCH_MARKER",
    "format_edit_block",
    "format_edit_blocks",
    "parse_edit_blocks",
    "validate_edit_blocks",
]
