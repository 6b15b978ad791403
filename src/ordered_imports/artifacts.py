from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from contracts.imports import FixResult


def build_run_report(*, results: list[FixResult], errors: list[dict[str, Any]], dry_run: bool) -> dict[str, Any]:
    return {
        "dry_run": dry_run,
        "files": [r.to_dict() for r in results],
        "errors": errors,
        "summary": summarize(results=results, errors=errors),
    }


def summarize(*, results: list[FixResult], errors: list[dict[str, Any]]) -> dict[str, Any]:
    return {
        "files_checked": len(results),
        "files_changed": sum(1 for r in results if r.changed),
        "files_failed": sum(1 for r in results if not r.ok),
        "errors": len(errors) + sum(len(r.errors) for r in results),
    }


def serialize_run_report(report: dict[str, Any]) -> str:
    """
    Stable JSON serialization for audit artifacts.
    """

    return json.dumps(report, ensure_ascii=False, sort_keys=True, indent=2) + "\n"


def write_run_report(*, report: dict[str, Any], out_file: Path) -> None:
    out_file.parent.mkdir(parents=True, exist_ok=True)
    out_file.write_text(serialize_run_report(report), encoding="utf-8")
