"""Record declaration models and discovery from Python source."""

from __future__ import annotations

import ast
import io
import tokenize
from collections.abc import Iterator
from dataclasses import dataclass, field
from re import compile

NON_RECORD_BASES = {
    "Enum",
    "IntEnum",
    "StrEnum",
    "Flag",
    "IntFlag",
    "Protocol",
    "TypedDict",
}
RECORD_BASES = {
    "NamedTuple": "namedtuple",
    "BaseModel": "pydantic",
}
RECORD_DECORATORS = {
    "dataclass": "dataclass",
    "s": "attrs",
    "attrs": "attrs",
    "define": "attrs",
    "frozen": "attrs",
    "mutable": "attrs",
}
PSEUDO_FIELD_ANNOTATIONS = {"ClassVar", "KW_ONLY"}
CLASS_KEYWORD_RE = compile(rb"class\s+")
SUPPRESSION_RE = compile(r"#\s*pubmix:\s*ignore(?:\[(?P<rules>[^\]]*)\])?")


class SourceParseError(ValueError):
    """Raised when source text cannot be parsed into records."""


@dataclass(frozen=True, slots=True)
class Span:
    """Source location of a declaration token."""

    path: str
    line: int
    column: int
    end_line: int
    end_column: int

    def __str__(self) -> str:
        return f"{self.path}:{self.line}:{self.column + 1}"


@dataclass(frozen=True, slots=True)
class FieldDeclaration:
    """A single declared field of a record."""

    name: str
    public: bool
    span: Span


@dataclass(frozen=True, slots=True)
class RecordDeclaration:
    """A structured-record class and its fields in declaration order."""

    name: str
    kind: str
    span: Span
    fields: tuple[FieldDeclaration, ...] = ()


@dataclass(slots=True)
class SourceFile:
    """Parsed records plus suppression comments for one source file."""

    path: str
    records: list[RecordDeclaration] = field(default_factory=list)
    suppressions: dict[int, frozenset[str] | None] = field(default_factory=dict)

    def is_suppressed(self, line: int, rule_id: str) -> bool:
        if line not in self.suppressions:
            return False
        rules = self.suppressions[line]
        return rules is None or rule_id in rules


def is_public_name(name: str) -> bool:
    """Classify a field name: anything with a leading underscore is not public."""
    return not name.startswith("_")


def parse_source(text: str, path: str = "<string>") -> list[RecordDeclaration]:
    """Parse Python source and return record declarations in source order."""
    return load_source_file(text, path).records


def load_source_file(text: str, path: str = "<string>") -> SourceFile:
    """Parse Python source into records and inline suppressions."""
    try:
        tree = ast.parse(text, filename=path)
    except SyntaxError as exc:
        location = f"{path}:{exc.lineno}" if exc.lineno else path
        raise SourceParseError(f"Cannot parse {location}: {exc.msg}") from exc
    except (ValueError, RecursionError, MemoryError) as exc:
        # Null bytes, or nesting deeper than the parser can build.
        raise SourceParseError(f"Cannot parse {path}: {exc}") from exc

    collector = _RecordCollector(path, text.split("\n"))
    try:
        collector.visit(tree)
        suppressions = _parse_suppressions(text)
    except (RecursionError, tokenize.TokenError) as exc:
        raise SourceParseError(f"Cannot parse {path}: {exc}") from exc
    return SourceFile(path=path, records=collector.records, suppressions=suppressions)


class _RecordCollector(ast.NodeVisitor):
    def __init__(self, path: str, lines: list[str]) -> None:
        self._path = path
        self._lines = lines
        self.records: list[RecordDeclaration] = []

    def visit_ClassDef(self, node: ast.ClassDef) -> None:
        record = _record_from_class(node, self._path, self._lines)
        if record is not None:
            self.records.append(record)
        self.generic_visit(node)


def _record_from_class(
    node: ast.ClassDef, path: str, lines: list[str]
) -> RecordDeclaration | None:
    base_names = {_terminal_name(base) for base in node.bases}
    if base_names & NON_RECORD_BASES:
        return None

    fields = tuple(_iter_fields(node, path))
    kind = _record_kind(node, base_names)
    if not fields and kind == "class":
        return None

    return RecordDeclaration(
        name=node.name,
        kind=kind,
        span=_class_name_span(node, path, lines),
        fields=fields,
    )


def _iter_fields(node: ast.ClassDef, path: str) -> Iterator[FieldDeclaration]:
    for statement in node.body:
        if not isinstance(statement, ast.AnnAssign):
            continue
        target = statement.target
        if not isinstance(target, ast.Name):
            continue
        if _is_pseudo_field(statement.annotation):
            continue
        yield FieldDeclaration(
            name=target.id,
            public=is_public_name(target.id),
            span=Span(
                path=path,
                line=target.lineno,
                column=target.col_offset,
                end_line=target.end_lineno or target.lineno,
                end_column=target.end_col_offset or target.col_offset + len(target.id),
            ),
        )


def _record_kind(node: ast.ClassDef, base_names: set[str | None]) -> str:
    for decorator in node.decorator_list:
        target = decorator.func if isinstance(decorator, ast.Call) else decorator
        name = _terminal_name(target)
        if name in RECORD_DECORATORS:
            return RECORD_DECORATORS[name]
    for base_name, kind in RECORD_BASES.items():
        if base_name in base_names:
            return kind
    return "class"


def _is_pseudo_field(annotation: ast.expr) -> bool:
    if isinstance(annotation, ast.Subscript):
        annotation = annotation.value
    if isinstance(annotation, ast.Constant) and isinstance(annotation.value, str):
        return annotation.value.split("[", 1)[0].rsplit(".", 1)[-1] in PSEUDO_FIELD_ANNOTATIONS
    return _terminal_name(annotation) in PSEUDO_FIELD_ANNOTATIONS


def _terminal_name(node: ast.expr) -> str | None:
    if isinstance(node, ast.Subscript):
        node = node.value
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        return node.attr
    return None


def _class_name_span(node: ast.ClassDef, path: str, lines: list[str]) -> Span:
    # ast has no position for the class name token; col_offset counts UTF-8 bytes.
    line = lines[node.lineno - 1].encode("utf-8") if node.lineno <= len(lines) else b""
    match = CLASS_KEYWORD_RE.match(line, node.col_offset)
    column = match.end() if match else node.col_offset + len("class ")
    return Span(
        path=path,
        line=node.lineno,
        column=column,
        end_line=node.lineno,
        end_column=column + len(node.name.encode("utf-8")),
    )


def _parse_suppressions(text: str) -> dict[int, frozenset[str] | None]:
    suppressions: dict[int, frozenset[str] | None] = {}
    for token in tokenize.generate_tokens(io.StringIO(text).readline):
        if token.type != tokenize.COMMENT:
            continue
        match = SUPPRESSION_RE.search(token.string)
        if match is None:
            continue
        lineno = token.start[0]
        raw_rules = match.group("rules")
        if raw_rules is None:
            suppressions[lineno] = None
            continue
        rules = frozenset(item.strip() for item in raw_rules.split(",") if item.strip())
        suppressions[lineno] = rules or None
    return suppressions
