"""Session logging for file edits.

Dual logging:
- Quick reference log: ~/.editcore/failures.log
- Full session data: ~/.editcore/sessions/<timestamp>.json

Set EDITCORE_HOME to relocate both.
"""

from __future__ import annotations

import json
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Optional


def get_home_dir() -> Path:
    """Base directory for logs, honoring EDITCORE_HOME."""
    override = os.environ.get("EDITCORE_HOME")
    if override:
        return Path(override)
    return Path.home() / ".editcore"


def get_failures_log() -> Path:
    return get_home_dir() / "failures.log"


def get_sessions_dir() -> Path:
    return get_home_dir() / "sessions"


def ensure_dirs():
    """Ensure log directories exist."""
    get_sessions_dir().mkdir(parents=True, exist_ok=True)


def _write_session(session_data: dict[str, Any], timestamp: datetime) -> Path:
    session_id = timestamp.strftime("%Y%m%d_%H%M%S_%f")
    session_file = get_sessions_dir() / f"{session_id}.json"
    with open(session_file, "w") as f:
        json.dump(session_data, f, indent=2)
    return session_file


def log_failure(
    file: str,
    reason: str,
    edits: Optional[str] = None,
    original: Optional[str] = None,
    attempts: int = 1,
    extra: Optional[dict[str, Any]] = None,
) -> Path:
    """Log failure to both quick log and full session.

    Args:
        file: File path that failed
        reason: Failure reason (usually the matcher feedback)
        edits: Raw edit payload that was attempted
        original: Original file content
        attempts: Number of attempts made
        extra: Additional data to log

    Returns:
        Path to the session file.
    """
    ensure_dirs()
    timestamp = datetime.now()
    timestamp_str = timestamp.strftime("%Y-%m-%d %H:%M:%S")

    # Quick reference log (one line per failure)
    with open(get_failures_log(), "a") as f:
        short_reason = reason[:100].replace("\n", " ")
        f.write(f"{timestamp_str} | {file} | FAIL | {short_reason}\n")

    session_data = {
        "timestamp": timestamp_str,
        "file": file,
        "status": "failed",
        "reason": reason,
        "attempts": attempts,
    }
    if edits:
        session_data["edits"] = edits
    if original:
        session_data["original"] = original
    if extra:
        session_data.update(extra)

    return _write_session(session_data, timestamp)


def log_success(
    file: str,
    edits: Optional[str] = None,
    original: Optional[str] = None,
    updated: Optional[str] = None,
    attempts: int = 1,
    extra: Optional[dict[str, Any]] = None,
) -> Path:
    """Log successful edit to a session file.

    Returns:
        Path to the session file.
    """
    ensure_dirs()
    timestamp = datetime.now()

    session_data = {
        "timestamp": timestamp.strftime("%Y-%m-%d %H:%M:%S"),
        "file": file,
        "status": "success",
        "attempts": attempts,
    }
    if edits:
        session_data["edits"] = edits
    if original:
        session_data["original"] = original
    if updated:
        session_data["updated"] = updated
    if extra:
        session_data.update(extra)

    return _write_session(session_data, timestamp)


def get_recent_failures(limit: int = 10) -> list[str]:
    """Get recent failure log lines.

    Args:
        limit: Maximum number of lines to return

    Returns:
        List of recent failure log lines.
    """
    failures_log = get_failures_log()
    if not failures_log.exists():
        return []

    with open(failures_log, "r") as f:
        lines = f.readlines()

    return [line.strip() for line in lines[-limit:]]


__all__ = [
    "get_home_dir",
    "get_recent_failures",
    "log_failure",
    "log_success",
]
