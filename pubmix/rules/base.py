"""Base rule protocol and diagnostic model."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from pubmix.records import RecordDeclaration, Span


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A single report emitted by a rule for one record."""

    rule_id: str
    message: str
    span: Span
    record: str
    help: str | None = None
    severity: str = "warning"


class Rule(Protocol):
    """Protocol for record-level lint rules."""

    rule_id: str

    def check(self, record: RecordDeclaration) -> Diagnostic | None:
        """Inspect one record and return at most one diagnostic."""
