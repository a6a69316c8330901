"""File-level edit tool built on the editcore engine.

Resolves a path inside a repository root, reads it, applies edits in memory
and writes the result back only when every edit matched. Files are never
created; whole-file replacement, SEARCH/REPLACE payloads and single
old_text/new_text replacements are supported.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from editcore.applier import PatchApplier
from editcore.config import MatcherConfig, load_matcher_config
from editcore.logging import log_failure, log_success
from editcore.matcher import FuzzyMatcher
from editcore.parsers.search_replace import FORMAT_HINT, parse_edit_blocks, validate_edit_blocks
from editcore.tools.diff_generator import generate_diff
from editcore.types import ApplyResult

BOM = "\ufeff"


@dataclass
class EditFileResult:
    """Result of editing one file."""

    success: bool
    file_path: str
    message: str
    strategy: str | None = None
    diff: str | None = None
    apply_result: ApplyResult | None = None


@dataclass
class FileText:
    """Decoded file content plus what is needed to write it back faithfully."""

    text: str
    newline: str = "\n"
    has_bom: bool = False

    @classmethod
    def decode(cls, raw: bytes) -> "FileText":
        text = raw.decode("utf-8")
        has_bom = text.startswith(BOM)
        if has_bom:
            text = text[1:]
        # Only consistently-CRLF files are normalized; mixed endings stay as-is
        crlf = text.count("\r\n")
        if crlf and crlf == text.count("\n"):
            return cls(text=text.replace("\r\n", "\n"), newline="\r\n", has_bom=has_bom)
        return cls(text=text, has_bom=has_bom)

    def encode(self, text: str) -> bytes:
        if self.newline != "\n":
            text = text.replace("\n", self.newline)
        if self.has_bom:
            text = BOM + text
        return text.encode("utf-8")


class EditRefused(Exception):
    """The edit cannot be attempted (bad path, unreadable file, ...)."""


@dataclass
class FileEditor:
    """Edits existing files under ``repo_root`` with fuzzy matching."""

    repo_root: Path
    config: MatcherConfig | None = None
    log_sessions: bool = True
    applier: PatchApplier = field(init=False)

    def __post_init__(self):
        self.repo_root = Path(self.repo_root).resolve()
        if self.config is None:
            self.config = load_matcher_config()
        self.applier = PatchApplier(matcher=FuzzyMatcher(self.config))

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def edit(
        self,
        file_path: str | Path,
        content: str | None = None,
        old_text: str | None = None,
        new_text: str | None = None,
        edits: str | None = None,
    ) -> EditFileResult:
        """Dispatch on the supplied parameters: content, then edits, then old/new."""
        if content is not None:
            return self.replace_content(file_path, content)
        if edits:
            return self.edit_blocks(file_path, edits)
        if old_text is not None and new_text is not None:
            return self.replace_text(file_path, old_text, new_text)
        return EditFileResult(
            success=False,
            file_path=str(file_path),
            message="Either 'content', 'edits', or both 'old_text' and 'new_text' are required",
        )

    def edit_blocks(self, file_path: str | Path, edits: str) -> EditFileResult:
        """Apply a SEARCH/REPLACE payload; writes only if every block matched."""
        try:
            path, loaded = self.read(file_path)
        except EditRefused as e:
            return EditFileResult(success=False, file_path=str(file_path), message=str(e))

        blocks = parse_edit_blocks(edits)
        if not blocks:
            return self._fail(
                file_path,
                "No valid SEARCH/REPLACE blocks found in 'edits'. Use format: " + FORMAT_HINT,
                edits=edits,
            )

        errors = validate_edit_blocks(blocks)
        if errors:
            return self._fail(file_path, "Invalid edit blocks: " + "; ".join(errors), edits=edits)

        result = self.applier.apply(loaded.text, blocks)
        if not result.all_successful:
            return self._fail(
                file_path,
                f"{result.get_summary()}; no changes were written.\n\n{result.get_failure_feedback()}",
                edits=edits,
                original=loaded.text,
                apply_result=result,
            )

        return self._write(
            path,
            file_path,
            loaded,
            result.after_content,
            message=f"{result.get_summary()} in: {file_path}",
            edits=edits,
            apply_result=result,
        )

    def replace_text(self, file_path: str | Path, old_text: str, new_text: str) -> EditFileResult:
        """Replace a single fuzzy-matched region."""
        try:
            path, loaded = self.read(file_path)
        except EditRefused as e:
            return EditFileResult(success=False, file_path=str(file_path), message=str(e))

        match = self.applier.matcher.find_match(old_text, loaded.text)
        if not match.success or match.location is None:
            return self._fail(file_path, match.feedback, original=loaded.text)

        loc = match.location
        updated = loaded.text[: loc.start_offset] + new_text + loaded.text[loc.end_offset :]
        return self._write(
            path,
            file_path,
            loaded,
            updated,
            message=f"Replaced {match.describe()} in: {file_path}",
            strategy=match.strategy_name(),
        )

    def replace_content(self, file_path: str | Path, content: str) -> EditFileResult:
        """Replace the whole file."""
        try:
            path, loaded = self.read(file_path)
        except EditRefused as e:
            return EditFileResult(success=False, file_path=str(file_path), message=str(e))

        return self._write(
            path,
            file_path,
            loaded,
            content.replace("\r\n", "\n") if loaded.newline == "\r\n" else content,
            message=f"Updated file: {file_path} ({len(content)} chars)",
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _is_safe_path(self, path: Path) -> bool:
        """Check if path is within repo root (path sandboxing)."""
        try:
            resolved = path.resolve()
        except (OSError, ValueError):
            return False
        return resolved == self.repo_root or self.repo_root in resolved.parents

    def _resolve(self, file_path: str | Path) -> Path:
        path = Path(file_path)
        if not path.is_absolute():
            path = self.repo_root / path
        if not self._is_safe_path(path):
            raise EditRefused(f"Path outside repo root: {file_path}")
        path = path.resolve()
        if not path.is_file():
            raise EditRefused(
                f"File not found: {file_path}. Creating new files via edit_file is not allowed."
            )
        return path

    def read(self, file_path: str | Path) -> tuple[Path, FileText]:
        """Resolve and decode a file; raises EditRefused if it cannot be edited."""
        path = self._resolve(file_path)
        try:
            return path, FileText.decode(path.read_bytes())
        except (OSError, UnicodeDecodeError) as e:
            raise EditRefused(f"Failed to read file: {e}") from e

    def _write(
        self,
        path: Path,
        file_path: str | Path,
        loaded: FileText,
        updated: str,
        message: str,
        strategy: str | None = None,
        edits: str | None = None,
        apply_result: ApplyResult | None = None,
    ) -> EditFileResult:
        diff = generate_diff(loaded.text, updated, file_path).diff
        try:
            path.write_bytes(loaded.encode(updated))
        except OSError as e:
            return self._fail(
                file_path,
                f"Failed to write file: {e}",
                edits=edits,
                original=loaded.text,
                apply_result=apply_result,
            )

        if self.log_sessions:
            log_success(
                file=str(file_path),
                edits=edits,
                original=loaded.text,
                updated=updated,
                extra={"strategy": strategy} if strategy else None,
            )
        return EditFileResult(
            success=True,
            file_path=str(file_path),
            message=message,
            strategy=strategy,
            diff=diff,
            apply_result=apply_result,
        )

    def _fail(
        self,
        file_path: str | Path,
        message: str,
        edits: str | None = None,
        original: str | None = None,
        apply_result: ApplyResult | None = None,
    ) -> EditFileResult:
        if self.log_sessions:
            extra = None
            if apply_result is not None:
                extra = {"failed_blocks": apply_result.failed_blocks()}
            log_failure(
                file=str(file_path),
                reason=message,
                edits=edits,
                original=original,
                extra=extra,
            )
        return EditFileResult(
            success=False,
            file_path=str(file_path),
            message=message,
            apply_result=apply_result,
        )


def edit_file(
    file_path: str | Path,
    content: str | None = None,
    old_text: str | None = None,
    new_text: str | None = None,
    edits: str | None = None,
    repo_root: str | Path = ".",
) -> EditFileResult:
    """Convenience function mirroring the edit_file tool parameters.

    Args:
        file_path: Path to file (relative to repo_root or absolute)
        content: New content for the whole file
        old_text: Text to find (fuzzy matched)
        new_text: Replacement for old_text
        edits: SEARCH/REPLACE blocks
        repo_root: Repository root

    Returns:
        EditFileResult with status
    """
    editor = FileEditor(repo_root=Path(repo_root))
    return editor.edit(file_path, content=content, old_text=old_text, new_text=new_text, edits=edits)


__all__ = ["EditFileResult", "EditRefused", "FileEditor", "FileText", "edit_file"]
