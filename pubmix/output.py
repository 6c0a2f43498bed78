"""Output rendering."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any

import click

from pubmix import __version__
from pubmix.lint import FileError, LintResult
from pubmix.rules.base import Diagnostic


def render_human(result: LintResult) -> str:
    """Render compiler-style diagnostics followed by a colorized summary."""
    lines: list[str] = []
    for diagnostic in result.diagnostics:
        label = click.style(f"{diagnostic.severity}[{diagnostic.rule_id}]", fg="yellow", bold=True)
        lines.append(f"{diagnostic.span}: {label} {diagnostic.message} (in {diagnostic.record})")
        if diagnostic.help:
            lines.append(f"   help: {diagnostic.help}")

    for error in result.errors:
        label = click.style("error", fg="red", bold=True)
        lines.append(f"{error.path}: {label} {error.message}")

    count = len(result.diagnostics)
    summary = (
        f"Checked {result.records_checked} records in {len(result.files)} files: "
        f"{count} {'warning' if count == 1 else 'warnings'}"
    )
    if result.errors:
        summary += f", {len(result.errors)} unreadable"
    lines.append(click.style(summary, fg="yellow" if count else "green", bold=True))
    return "\n".join(lines)


def render_json(result: LintResult, *, input_source: str) -> str:
    """Render stable JSON output for CI and automation."""
    return json.dumps(build_json_payload(result, input_source=input_source), sort_keys=True)


def build_json_payload(result: LintResult, *, input_source: str) -> dict[str, Any]:
    """Build stable JSON payload for CI and automation."""
    return {
        "diagnostics": [_serialize_diagnostic(item) for item in result.diagnostics],
        "errors": [_serialize_error(item) for item in result.errors],
        "summary": {
            "files": len(result.files),
            "records_checked": result.records_checked,
            "warnings": len(result.diagnostics),
        },
        "meta": {
            "generated_at": datetime.now(tz=UTC)
            .replace(microsecond=0)
            .isoformat()
            .replace("+00:00", "Z"),
            "input_source": input_source,
            "version": __version__,
        },
    }


def _serialize_diagnostic(diagnostic: Diagnostic) -> dict[str, Any]:
    span = diagnostic.span
    return {
        "rule_id": diagnostic.rule_id,
        "severity": diagnostic.severity,
        "message": diagnostic.message,
        "help": diagnostic.help,
        "record": diagnostic.record,
        "span": {
            "path": span.path,
            "line": span.line,
            "column": span.column + 1,
            "end_line": span.end_line,
            "end_column": span.end_column + 1,
        },
    }


def _serialize_error(error: FileError) -> dict[str, Any]:
    return {"path": error.path, "message": error.message}
