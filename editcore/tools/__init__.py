"""File-level tools around the editcore engine."""

from .diff_generator import FileDiff, generate_diff
from .edit_file import EditFileResult, EditRefused, FileEditor, FileText, edit_file

__all__ = [
    "EditFileResult",
    "EditRefused",
    "FileDiff",
    "FileEditor",
    "FileText",
    "edit_file",
    "generate_diff",
]
