"""Mixed public/non-public record field rule."""

from __future__ import annotations

from pubmix.records import RecordDeclaration, Span
from pubmix.rules.base import Diagnostic

MESSAGE = "mixed usage of pub and non-pub fields"
HELP_PRIVATE = "consider using private field here"
HELP_PUBLIC = "consider using public field here"


class PartialPubFieldsRule:
    """Checks whether only some fields of a record are public.

    Either make all fields of a type public, or make none of them public.
    Most types should either be an abstract data type, a complex object with
    an opaque implementation that guards its interior invariants and exposes
    an intentionally limited API, or plain data, a simple object grouping a
    bunch of related attributes together.
    """

    rule_id = "partial_pub_fields"
    summary = "partial fields of a record are public"
    example = "\n".join(
        [
            "@dataclass",
            "class Color:",
            "    r: int",
            "    g: int",
            "    _b: int",
        ]
    )
    example_fixed = "\n".join(
        [
            "@dataclass",
            "class Color:",
            "    r: int",
            "    g: int",
            "    b: int",
        ]
    )

    def check(self, record: RecordDeclaration) -> Diagnostic | None:
        if not record.fields:
            return None

        first_field, *rest = record.fields
        all_pub = first_field.public
        all_priv = not all_pub

        for field_decl in rest:
            if all_priv and field_decl.public:
                return self._diagnostic(record, field_decl.span, HELP_PRIVATE)
            if all_pub and not field_decl.public:
                return self._diagnostic(record, field_decl.span, HELP_PUBLIC)
        return None

    def _diagnostic(self, record: RecordDeclaration, span: Span, help_text: str) -> Diagnostic:
        return Diagnostic(
            rule_id=self.rule_id,
            message=MESSAGE,
            span=span,
            record=record.name,
            help=help_text,
        )
