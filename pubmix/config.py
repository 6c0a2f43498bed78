"""Configuration loading for pubmix."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

CONFIG_FILENAMES = (".pubmix.toml", "pubmix.toml")
PYPROJECT_FILENAME = "pyproject.toml"
TOP_LEVEL_KEYS = {"format", "fail_on_findings", "include", "exclude", "rules"}
RULES_KEYS = {"enable", "disable"}


@dataclass(slots=True)
class AppConfig:
    """Runtime configuration values resolved from project files."""

    format: str = "human"
    fail_on_findings: bool = False
    include: list[str] = field(default_factory=list)
    exclude: list[str] = field(default_factory=list)
    rule_enable: list[str] | None = None
    rule_disable: list[str] = field(default_factory=list)
    source: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "format": self.format,
            "fail_on_findings": self.fail_on_findings,
            "include": list(self.include),
            "exclude": list(self.exclude),
            "rules": {
                "enable": list(self.rule_enable) if self.rule_enable is not None else None,
                "disable": list(self.rule_disable),
            },
            "source": self.source,
        }


def load_app_config(root: Path, config_path: Path | None = None) -> AppConfig:
    """Resolve configuration for a project root.

    An explicit ``config_path`` wins (relative paths resolve against ``root``).
    Otherwise the first of ``.pubmix.toml``, ``pubmix.toml`` and a
    ``pyproject.toml`` carrying a ``[tool.pubmix]`` table is used. Dedicated
    files hold settings at the top level; only ``pyproject.toml`` is read
    through its tool table.
    """
    root = root.resolve()
    if config_path is not None:
        explicit = config_path if config_path.is_absolute() else root / config_path
        if not explicit.is_file():
            raise ValueError(f"Config file does not exist: {explicit}")
        candidates = [explicit]
    else:
        candidates = [root / name for name in (*CONFIG_FILENAMES, PYPROJECT_FILENAME)]

    for candidate in candidates:
        if not candidate.is_file():
            continue
        mapping = _settings_from_file(candidate)
        if mapping is None:
            continue
        return _from_mapping(mapping, source=str(candidate))
    return AppConfig()


def default_config_template() -> str:
    """Return a starter config template."""
    return "\n".join(
        [
            'format = "human"',
            "fail_on_findings = true",
            'include = ["src/**"]',
            'exclude = ["tests/**", "**/migrations/**"]',
            "",
            "[rules]",
            'enable = ["partial_pub_fields"]',
            "disable = []",
            "",
        ]
    )


def _settings_from_file(path: Path) -> dict[str, Any] | None:
    try:
        document = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Invalid TOML in {path}: {exc}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise ValueError(f"Cannot read config file {path}: {exc}") from exc

    if path.name != PYPROJECT_FILENAME:
        return document
    tool = document.get("tool")
    section = tool.get("pubmix") if isinstance(tool, dict) else None
    if section is None:
        return None
    return _as_table(section, "tool.pubmix")


def _from_mapping(mapping: dict[str, Any], *, source: str) -> AppConfig:
    _reject_unknown_keys(mapping, TOP_LEVEL_KEYS, "config")
    rules_mapping = _as_table(mapping.get("rules"), "rules")
    _reject_unknown_keys(rules_mapping, RULES_KEYS, "rules")

    return AppConfig(
        format=_as_choice(mapping.get("format", "human"), {"human", "json"}, "format"),
        fail_on_findings=_as_bool(mapping.get("fail_on_findings", False), "fail_on_findings"),
        include=_as_str_list(mapping.get("include"), "include"),
        exclude=_as_str_list(mapping.get("exclude"), "exclude"),
        rule_enable=_as_str_list_or_none(rules_mapping.get("enable"), "rules.enable"),
        rule_disable=_as_str_list(rules_mapping.get("disable"), "rules.disable"),
        source=source,
    )


def _reject_unknown_keys(mapping: dict[str, Any], allowed: set[str], section: str) -> None:
    unknown = sorted(key for key in mapping if key not in allowed)
    if unknown:
        raise ValueError(f"Unknown keys in {section}: {', '.join(unknown)}")


def _as_table(value: Any, field_name: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{field_name} must be a table/object")
    return value


def _as_str_list(value: Any, field_name: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"{field_name} must be a list of strings")
    items: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ValueError(f"{field_name} must be a list of strings")
        items.append(item)
    return items


def _as_str_list_or_none(value: Any, field_name: str) -> list[str] | None:
    if value is None:
        return None
    return _as_str_list(value, field_name)


def _as_choice(raw: Any, allowed: set[str], field_name: str) -> str:
    value = str(raw).lower()
    if value not in allowed:
        choices = ", ".join(sorted(allowed))
        raise ValueError(f"{field_name} must be one of: {choices}")
    return value


def _as_bool(raw: Any, field_name: str) -> bool:
    if not isinstance(raw, bool):
        raise ValueError(f"{field_name} must be a boolean")
    return raw
