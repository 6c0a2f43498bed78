"""Rules package."""

from collections.abc import Callable
from dataclasses import dataclass

from pubmix.rules.base import Rule
from pubmix.rules.partial_pub_fields import PartialPubFieldsRule

KNOWN_CATEGORIES = {
    "correctness",
    "style",
    "restriction",
}


@dataclass(frozen=True, slots=True)
class RuleInfo:
    """Rule metadata for listing, selection and documentation."""

    rule_id: str
    name: str
    summary: str
    description: str
    category: str
    severity: str
    example: str
    example_fixed: str
    default_enabled: bool


@dataclass(frozen=True, slots=True)
class _RuleSpec:
    rule_id: str
    factory: Callable[[], Rule]
    name: str
    summary: str
    description: str
    category: str
    example: str
    example_fixed: str
    default_enabled: bool


def default_rules() -> list[Rule]:
    """Return the default rule set."""
    return build_rules()


def build_rules(
    *,
    enabled_rule_ids: list[str] | None = None,
    disabled_rule_ids: list[str] | None = None,
) -> list[Rule]:
    """Build rule instances applying enable/disable filters."""
    specs = _ordered_rule_specs()
    registry = {spec.rule_id: spec for spec in specs}
    disabled_set = set(disabled_rule_ids or [])
    requested_ids = set(enabled_rule_ids or []) | disabled_set

    unknown = [rule_id for rule_id in requested_ids if rule_id not in registry]
    if unknown:
        joined = ", ".join(sorted(unknown))
        raise ValueError(f"Unknown rule ids: {joined}")

    if enabled_rule_ids is None:
        selected_ids = [spec.rule_id for spec in specs if spec.default_enabled]
    else:
        selected_ids = _dedupe(enabled_rule_ids)

    return [
        registry[rule_id].factory() for rule_id in selected_ids if rule_id not in disabled_set
    ]


def list_rule_info() -> list[RuleInfo]:
    """Return metadata for all known rules."""
    return [
        RuleInfo(
            rule_id=spec.rule_id,
            name=spec.name,
            summary=spec.summary,
            description=spec.description,
            category=spec.category,
            severity="warning",
            example=spec.example,
            example_fixed=spec.example_fixed,
            default_enabled=spec.default_enabled,
        )
        for spec in _ordered_rule_specs()
    ]


def get_rule_info(rule_id: str) -> RuleInfo:
    """Return metadata for a single rule id."""
    for info in list_rule_info():
        if info.rule_id == rule_id:
            return info
    choices = ", ".join(info.rule_id for info in list_rule_info())
    raise ValueError(f"Unknown rule id '{rule_id}'. Expected one of: {choices}")


def _ordered_rule_specs() -> list[_RuleSpec]:
    return [
        _spec(PartialPubFieldsRule, category="restriction"),
    ]


def _spec(rule_cls: type[Rule], *, category: str, default_enabled: bool = True) -> _RuleSpec:
    if category not in KNOWN_CATEGORIES:
        raise ValueError(f"Unknown rule category: {category}")
    instance = rule_cls()
    return _RuleSpec(
        rule_id=instance.rule_id,
        factory=rule_cls,
        name=rule_cls.__name__,
        summary=getattr(instance, "summary", ""),
        description=_dedent_doc(rule_cls.__doc__),
        category=category,
        example=getattr(instance, "example", ""),
        example_fixed=getattr(instance, "example_fixed", ""),
        default_enabled=default_enabled,
    )


def _dedent_doc(doc: str | None) -> str:
    lines = [line.strip() for line in (doc or "").strip().splitlines()]
    return "\n".join(lines)


def _dedupe(items: list[str]) -> list[str]:
    seen: set[str] = set()
    output: list[str] = []
    for item in items:
        if item in seen:
            continue
        seen.add(item)
        output.append(item)
    return output
