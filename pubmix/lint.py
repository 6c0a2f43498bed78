"""Lint orchestration: discover files, dispatch records to rules."""

from __future__ import annotations

import fnmatch
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from pubmix.records import SourceParseError, load_source_file
from pubmix.rules import default_rules
from pubmix.rules.base import Diagnostic, Rule

_LOG = logging.getLogger(__name__)

SKIP_DIR_NAMES = {"__pycache__", "node_modules", "venv", "site-packages", "build", "dist"}


@dataclass(slots=True)
class FileReport:
    """Diagnostics for a single source file."""

    path: str
    records_checked: int = 0
    diagnostics: list[Diagnostic] = field(default_factory=list)


@dataclass(slots=True)
class FileError:
    """A file that could not be read or parsed."""

    path: str
    message: str


@dataclass(slots=True)
class LintResult:
    """Top-level lint output across all inputs."""

    files: list[FileReport] = field(default_factory=list)
    errors: list[FileError] = field(default_factory=list)

    @property
    def diagnostics(self) -> list[Diagnostic]:
        return [item for report in self.files for item in report.diagnostics]

    @property
    def records_checked(self) -> int:
        return sum(report.records_checked for report in self.files)


def lint_source(text: str, path: str = "<string>", rules: list[Rule] | None = None) -> FileReport:
    """Parse source text and run every rule against every record.

    Raises ``SourceParseError`` when the text is not valid Python.
    """
    active_rules = rules if rules is not None else default_rules()
    source_file = load_source_file(text, path)
    report = FileReport(path=path, records_checked=len(source_file.records))

    for record in source_file.records:
        for rule in active_rules:
            diagnostic = rule.check(record)
            if diagnostic is None:
                continue
            lines = (diagnostic.span.line, record.span.line)
            if any(source_file.is_suppressed(line, rule.rule_id) for line in lines):
                _LOG.debug("suppressed %s at %s", rule.rule_id, diagnostic.span)
                continue
            report.diagnostics.append(diagnostic)

    return report


def lint_paths(
    paths: Iterable[Path],
    rules: list[Rule] | None = None,
    *,
    include: list[str] | None = None,
    exclude: list[str] | None = None,
) -> LintResult:
    """Lint Python files found under the given files and directories."""
    active_rules = rules if rules is not None else default_rules()
    result = LintResult()

    for file_path in collect_source_files(paths, include=include or [], exclude=exclude or []):
        display = file_path.as_posix()
        try:
            text = file_path.read_text(encoding="utf-8")
            report = lint_source(text, display, active_rules)
        except (OSError, UnicodeDecodeError, SourceParseError) as exc:
            _LOG.warning("skipping %s: %s", display, exc)
            result.errors.append(FileError(path=display, message=str(exc)))
            continue
        _LOG.debug(
            "%s: %d records, %d diagnostics",
            display,
            report.records_checked,
            len(report.diagnostics),
        )
        result.files.append(report)

    return result


def collect_source_files(
    paths: Iterable[Path], *, include: list[str], exclude: list[str]
) -> list[Path]:
    """Expand directories to ``*.py`` files and apply include/exclude globs."""
    seen: set[Path] = set()
    collected: list[Path] = []
    for path in paths:
        if path.is_dir():
            candidates = sorted(
                item for item in path.rglob("*.py") if not _in_skipped_dir(item, path)
            )
        else:
            candidates = [path]

        for candidate in candidates:
            if candidate in seen:
                continue
            seen.add(candidate)
            if not _matches_filters(candidate.as_posix(), includes=include, excludes=exclude):
                continue
            collected.append(candidate)
    return collected


def _in_skipped_dir(path: Path, root: Path) -> bool:
    for part in path.relative_to(root).parts[:-1]:
        if part.startswith(".") or part in SKIP_DIR_NAMES:
            return True
    return False


def _matches_filters(path: str, *, includes: list[str], excludes: list[str]) -> bool:
    if includes and not any(fnmatch.fnmatch(path, pattern) for pattern in includes):
        return False
    if excludes and any(fnmatch.fnmatch(path, pattern) for pattern in excludes):
        return False
    return True
