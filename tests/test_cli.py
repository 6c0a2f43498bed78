"""CLI tests for the check and explain commands."""

from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from pubmix import __version__
from pubmix.cli import app

runner = CliRunner()

MIXED_SOURCE = "\n".join(
    [
        "from dataclasses import dataclass",
        "",
        "@dataclass",
        "class Color:",
        "    _r: int",
        "    g: int",
        "    _b: int",
        "",
    ]
)


def test_root_help_works() -> None:
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "mix public and non-public fields" in result.stdout
    assert "check" in result.stdout
    assert "explain" in result.stdout
    assert "config-init" in result.stdout


def test_version_flag_prints_version() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert result.stdout.strip() == __version__


def test_check_reports_warning_and_exits_zero_by_default(tmp_path: Path) -> None:
    source = tmp_path / "color.py"
    source.write_text(MIXED_SOURCE, encoding="utf-8")

    result = runner.invoke(app, ["check", str(source), "--root", str(tmp_path)])

    assert result.exit_code == 0
    assert "color.py:6:5: warning[partial_pub_fields]" in result.stdout
    assert "help: consider using private field here" in result.stdout
    assert "1 warning" in result.stdout


def test_check_fail_on_findings_exits_nonzero(tmp_path: Path) -> None:
    source = tmp_path / "color.py"
    source.write_text(MIXED_SOURCE, encoding="utf-8")

    result = runner.invoke(
        app, ["check", str(source), "--root", str(tmp_path), "--fail-on-findings"]
    )

    assert result.exit_code == 1


def test_check_clean_file_passes_even_when_failing_enabled(tmp_path: Path) -> None:
    source = tmp_path / "point.py"
    source.write_text("class Point:\n    x: int\n    y: int\n", encoding="utf-8")

    result = runner.invoke(
        app, ["check", str(source), "--root", str(tmp_path), "--fail-on-findings"]
    )

    assert result.exit_code == 0
    assert "0 warnings" in result.stdout


def test_check_reads_stdin_and_renders_json(tmp_path: Path) -> None:
    result = runner.invoke(
        app,
        [
            "check",
            "--stdin",
            "--stdin-filename",
            "models/color.py",
            "--root",
            str(tmp_path),
            "--format",
            "json",
        ],
        input=MIXED_SOURCE,
    )

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["meta"]["input_source"] == "stdin"
    assert payload["summary"]["warnings"] == 1
    diagnostic = payload["diagnostics"][0]
    assert diagnostic["span"]["path"] == "models/color.py"
    assert diagnostic["span"]["line"] == 6
    assert diagnostic["help"] == "consider using private field here"


def test_check_stdin_syntax_error_is_reported_not_raised(tmp_path: Path) -> None:
    result = runner.invoke(
        app,
        ["check", "--stdin", "--root", str(tmp_path), "--format", "json"],
        input="class Broken(:\n",
    )

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["diagnostics"] == []
    assert payload["errors"][0]["path"] == "<stdin>"


def test_check_rejects_paths_with_stdin(tmp_path: Path) -> None:
    result = runner.invoke(
        app, ["check", str(tmp_path), "--stdin", "--root", str(tmp_path)], input=""
    )
    assert result.exit_code == 2


def test_check_rejects_unknown_format(tmp_path: Path) -> None:
    result = runner.invoke(
        app, ["check", str(tmp_path), "--root", str(tmp_path), "--format", "xml"]
    )
    assert result.exit_code == 2


def test_explain_prints_rationale_and_examples() -> None:
    result = runner.invoke(app, ["explain", "partial_pub_fields"])

    assert result.exit_code == 0
    assert "partial_pub_fields (restriction, warning)" in result.stdout
    assert "partial fields of a record are public" in result.stdout
    assert "abstract data type" in result.stdout
    assert "    _b: int" in result.stdout
    assert "Use instead:" in result.stdout


def test_explain_unknown_rule_fails() -> None:
    result = runner.invoke(app, ["explain", "no_such_rule"])
    assert result.exit_code == 2


def test_check_missing_path_fails_when_failing_enabled(tmp_path: Path) -> None:
    missing = tmp_path / "srcc"

    result = runner.invoke(
        app, ["check", str(missing), "--root", str(tmp_path), "--fail-on-findings"]
    )

    assert result.exit_code == 1
    assert "1 unreadable" in result.stdout


def test_check_missing_path_is_advisory_by_default(tmp_path: Path) -> None:
    result = runner.invoke(app, ["check", str(tmp_path / "srcc"), "--root", str(tmp_path)])

    assert result.exit_code == 0
    assert "0 warnings, 1 unreadable" in result.stdout


def test_check_survives_deeply_nested_file(tmp_path: Path) -> None:
    (tmp_path / "deep.py").write_text(
        "x = " + "+".join(["1"] * 200_000) + "\n", encoding="utf-8"
    )
    (tmp_path / "color.py").write_text(MIXED_SOURCE, encoding="utf-8")

    result = runner.invoke(app, ["check", str(tmp_path), "--root", str(tmp_path)])

    assert result.exit_code == 0
    assert "color.py:6:5: warning[partial_pub_fields]" in result.stdout
    assert "1 warning, 1 unreadable" in result.stdout
