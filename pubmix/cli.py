"""CLI entrypoint for pubmix."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Annotated

import typer

from pubmix import __version__
from pubmix.config import AppConfig, default_config_template, load_app_config
from pubmix.lint import FileError, LintResult, lint_paths, lint_source
from pubmix.output import render_human, render_json
from pubmix.records import SourceParseError
from pubmix.rules import build_rules, get_rule_info, list_rule_info
from pubmix.rules.base import Rule

app = typer.Typer(
    name="pubmix",
    no_args_is_help=True,
    help="Flag records that mix public and non-public fields.",
)


def version_callback(value: bool) -> None:
    """Print version and exit when --version is provided."""
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option("--version", help="Show version and exit.", callback=version_callback),
    ] = False,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Log progress to stderr.")
    ] = False,
) -> None:
    """Root command callback."""
    _ = version
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            stream=sys.stderr,
            format="%(levelname)s %(name)s: %(message)s",
        )


@app.command("check")
def check_command(
    paths: Annotated[
        list[Path] | None, typer.Argument(help="Files or directories to lint.")
    ] = None,
    stdin: Annotated[bool, typer.Option(help="Read Python source from stdin.")] = False,
    stdin_filename: Annotated[
        str, typer.Option(help="Path reported for source read from stdin.")
    ] = "<stdin>",
    root: Annotated[Path, typer.Option(help="Project root used to find config.")] = Path("."),
    format: Annotated[
        str | None, typer.Option(help="Output format: human|json.", show_default="human")
    ] = None,
    fail_on_findings: Annotated[
        bool | None,
        typer.Option(
            "--fail-on-findings/--no-fail-on-findings",
            help="Exit nonzero on any warning or unreadable input.",
        ),
    ] = None,
    include: Annotated[list[str] | None, typer.Option(help="Include glob pattern.")] = None,
    exclude: Annotated[list[str] | None, typer.Option(help="Exclude glob pattern.")] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config TOML file."),
    ] = None,
) -> None:
    """Lint records for mixed field visibility.

    With failing enabled, unreadable or unparsable inputs also exit nonzero.
    """
    app_config = _load_config_or_raise(root, config_file)
    output_format = (format or app_config.format).lower()
    if output_format not in {"human", "json"}:
        raise typer.BadParameter("format must be one of: human, json", param_hint="--format")

    if stdin and paths:
        raise typer.BadParameter("Use either PATHS or --stdin, not both.")

    rules = _build_configured_rules_or_raise(app_config)
    if stdin:
        result = _lint_stdin(stdin_filename, rules)
        input_source = "stdin"
    else:
        result = lint_paths(
            paths or [Path(".")],
            rules,
            include=include if include is not None else app_config.include,
            exclude=exclude if exclude is not None else app_config.exclude,
        )
        input_source = "paths"

    if output_format == "json":
        typer.echo(render_json(result, input_source=input_source))
    else:
        typer.echo(render_human(result))

    should_fail = fail_on_findings if fail_on_findings is not None else app_config.fail_on_findings
    if should_fail and (result.diagnostics or result.errors):
        raise typer.Exit(code=1)


@app.command("explain")
def explain_command(
    rule_id: Annotated[str, typer.Argument(help="Rule id to describe.")],
) -> None:
    """Explain what a rule checks and why."""
    try:
        info = get_rule_info(rule_id)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="RULE_ID") from exc

    lines = [
        f"{info.rule_id} ({info.category}, {info.severity})",
        info.summary,
        "",
        info.description,
        "",
        "Example:",
        *[f"    {line}" for line in info.example.splitlines()],
        "",
        "Use instead:",
        *[f"    {line}" for line in info.example_fixed.splitlines()],
    ]
    typer.echo("\n".join(lines))


@app.command("rules")
def rules_command(
    root: Annotated[Path, typer.Option(help="Project root used to find config.")] = Path("."),
    format: Annotated[str, typer.Option(help="Output format: human|json.")] = "human",
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config TOML file."),
    ] = None,
) -> None:
    """List available rules."""
    output_format = format.lower()
    if output_format not in {"human", "json"}:
        raise typer.BadParameter("format must be one of: human, json", param_hint="--format")

    app_config = _load_config_or_raise(root, config_file)
    active_ids = {rule.rule_id for rule in _build_configured_rules_or_raise(app_config)}
    rule_info = list_rule_info()

    if output_format == "json":
        payload = {
            "rules": [
                {
                    "rule_id": item.rule_id,
                    "name": item.name,
                    "summary": item.summary,
                    "category": item.category,
                    "severity": item.severity,
                    "default_enabled": item.default_enabled,
                    "enabled": item.rule_id in active_ids,
                }
                for item in rule_info
            ],
            "meta": {"config_source": app_config.source},
        }
        typer.echo(json.dumps(payload, sort_keys=True))
        return

    lines = ["Available rules:"]
    for item in rule_info:
        status = "enabled" if item.rule_id in active_ids else "disabled"
        lines.append(f"- {item.rule_id} [{status}] - {item.summary}")
    typer.echo("\n".join(lines))


@app.command("config")
def config_command(
    root: Annotated[Path, typer.Option(help="Project root used to find config.")] = Path("."),
    format: Annotated[str, typer.Option(help="Output format: human|json.")] = "human",
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config TOML file."),
    ] = None,
) -> None:
    """Show resolved configuration."""
    output_format = format.lower()
    if output_format not in {"human", "json"}:
        raise typer.BadParameter("format must be one of: human, json", param_hint="--format")

    app_config = _load_config_or_raise(root, config_file)
    active_rules = _build_configured_rules_or_raise(app_config)
    payload = app_config.to_dict()
    payload["active_rule_ids"] = [rule.rule_id for rule in active_rules]

    if output_format == "json":
        typer.echo(json.dumps(payload, sort_keys=True))
        return

    lines = [
        "Resolved configuration:",
        f"- source: {payload['source'] or 'defaults'}",
        f"- format: {payload['format']}",
        f"- fail_on_findings: {payload['fail_on_findings']}",
        f"- include: {payload['include']}",
        f"- exclude: {payload['exclude']}",
        f"- rules.enable: {payload['rules']['enable']}",
        f"- rules.disable: {payload['rules']['disable']}",
        f"- active_rule_ids: {payload['active_rule_ids']}",
    ]
    typer.echo("\n".join(lines))


@app.command("config-init")
def config_init_command(
    out: Annotated[Path, typer.Option(help="Output path for starter config TOML.")] = Path(
        ".pubmix.toml"
    ),
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite if file already exists."),
    ] = False,
) -> None:
    """Create a starter project config file."""
    out_path = out.resolve()
    if out_path.exists() and not force:
        raise typer.BadParameter(
            f"Refusing to overwrite existing file: {out_path}. Use --force to overwrite."
        )
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(default_config_template(), encoding="utf-8")
    typer.echo(f"Wrote starter config: {out_path}")


@app.command("config-validate")
def config_validate_command(
    root: Annotated[Path, typer.Option(help="Project root used to find config.")] = Path("."),
    config_file: Annotated[
        Path,
        typer.Option("--config", help="Path to config TOML file to validate."),
    ] = Path(".pubmix.toml"),
    format: Annotated[str, typer.Option(help="Output format: human|json.")] = "human",
) -> None:
    """Validate a config file and report active rules."""
    output_format = format.lower()
    if output_format not in {"human", "json"}:
        raise typer.BadParameter("format must be one of: human, json", param_hint="--format")

    app_config = _load_config_or_raise(root, config_file)
    active_rules = _build_configured_rules_or_raise(app_config)
    payload = {
        "ok": True,
        "source": app_config.source,
        "active_rule_ids": [rule.rule_id for rule in active_rules],
    }
    if output_format == "json":
        typer.echo(json.dumps(payload, sort_keys=True))
        return
    typer.echo(
        "\n".join(
            [
                "Config is valid.",
                f"- source: {payload['source']}",
                f"- active_rule_ids: {payload['active_rule_ids']}",
            ]
        )
    )


def main() -> None:
    """Console script entrypoint."""
    app()


def _lint_stdin(filename: str, rules: list[Rule]) -> LintResult:
    result = LintResult()
    try:
        result.files.append(lint_source(sys.stdin.read(), filename, rules))
    except SourceParseError as exc:
        result.errors.append(FileError(path=filename, message=str(exc)))
    return result


def _load_config_or_raise(root: Path, config_file: Path | None = None) -> AppConfig:
    try:
        return load_app_config(root, config_path=config_file)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="config") from exc


def _build_configured_rules_or_raise(app_config: AppConfig) -> list[Rule]:
    try:
        return build_rules(
            enabled_rule_ids=app_config.rule_enable,
            disabled_rule_ids=app_config.rule_disable,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="config.rules") from exc
