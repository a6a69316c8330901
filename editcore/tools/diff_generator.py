"""Unified diff helpers for edited buffers."""

from __future__ import annotations

import difflib
from dataclasses import dataclass
from pathlib import Path


@dataclass
class FileDiff:
    path: Path
    diff: str

    @property
    def changed(self) -> bool:
        return bool(self.diff)


def generate_diff(original: str, modified: str, filepath: Path | str) -> FileDiff:
    """Return a unified diff of one buffer before and after editing."""

    # Normalize line endings so CRLF files do not diff on every line
    original_lines = [line + "\n" for line in original.replace("\r\n", "\n").splitlines()]
    modified_lines = [line + "\n" for line in modified.replace("\r\n", "\n").splitlines()]

    diff_text = "".join(difflib.unified_diff(
        original_lines,
        modified_lines,
        fromfile=f"a/{filepath}",
        tofile=f"b/{filepath}",
    ))
    return FileDiff(path=Path(filepath), diff=diff_text)


__all__ = ["FileDiff", "generate_diff"]
