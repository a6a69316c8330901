"""Command-line entry point: apply SEARCH/REPLACE blocks to one file."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from editcore.config import load_matcher_config
from editcore.parsers.search_replace import FORMAT_HINT, parse_edit_blocks, validate_edit_blocks
from editcore.tools.diff_generator import generate_diff
from editcore.tools.edit_file import EditRefused, FileEditor


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Apply SEARCH/REPLACE edit blocks to a file")
    parser.add_argument("file", help="File to edit (relative to --repo-root or absolute)")
    parser.add_argument(
        "--edits",
        default="-",
        metavar="PATH",
        help="File holding the SEARCH/REPLACE blocks ('-' reads stdin)",
    )
    parser.add_argument(
        "--repo-root",
        type=Path,
        default=Path.cwd(),
        help="Repository root (edits are confined to it)",
    )
    parser.add_argument("--config", type=Path, default=None, help="Path to matcher.yaml override")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the resulting diff without writing the file",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Emit JSON output for downstream tooling",
    )
    return parser.parse_args(argv)


def _read_edits(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text()


def _dry_run(editor: FileEditor, file_path: str, edits: str) -> dict:
    """Run parse/validate/apply without touching the file."""
    try:
        _, loaded = editor.read(file_path)
    except EditRefused as e:
        return {"success": False, "message": str(e)}

    blocks = parse_edit_blocks(edits)
    if not blocks:
        return {"success": False, "message": "No valid SEARCH/REPLACE blocks found. Use format: " + FORMAT_HINT}
    errors = validate_edit_blocks(blocks)
    if errors:
        return {"success": False, "message": "Invalid edit blocks: " + "; ".join(errors)}

    result = editor.applier.apply(loaded.text, blocks)
    payload = {
        "success": result.all_successful,
        "message": result.get_summary(),
        "blocks": [
            {"block": i + 1, "success": r.success, "strategy": r.strategy_name()}
            for i, r in enumerate(result.per_block)
        ],
    }
    if result.all_successful:
        payload["diff"] = generate_diff(loaded.text, result.after_content, file_path).diff
    else:
        payload["message"] += "\n\n" + result.get_failure_feedback()
    return payload


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    edits = _read_edits(args.edits)
    editor = FileEditor(
        repo_root=args.repo_root,
        config=load_matcher_config(args.config),
        log_sessions=not args.dry_run,
    )

    if args.dry_run:
        payload = _dry_run(editor, args.file, edits)
    else:
        outcome = editor.edit_blocks(args.file, edits)
        payload = {"success": outcome.success, "message": outcome.message}
        if outcome.diff:
            payload["diff"] = outcome.diff

    payload["file"] = args.file
    if args.json:
        print(json.dumps(payload, indent=2))
    else:
        if payload.get("diff"):
            print(payload["diff"], end="")
        print(payload["message"])

    return 0 if payload["success"] else 1


if __name__ == "__main__":
    raise SystemExit(main())
