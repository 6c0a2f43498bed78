"""Record discovery tests."""

from __future__ import annotations

import pytest

from pubmix.records import SourceParseError, is_public_name, load_source_file, parse_source


def test_dataclass_fields_keep_declaration_order_and_visibility() -> None:
    records = parse_source(
        "\n".join(
            [
                "from dataclasses import dataclass",
                "",
                "@dataclass(frozen=True)",
                "class Color:",
                "    r: int",
                "    _g: int = 0",
                "    __b: int = 0",
            ]
        ),
        "color.py",
    )

    assert len(records) == 1
    record = records[0]
    assert record.name == "Color"
    assert record.kind == "dataclass"
    assert record.span.line == 4
    assert [item.name for item in record.fields] == ["r", "_g", "__b"]
    assert [item.public for item in record.fields] == [True, False, False]
    assert record.fields[1].span.path == "color.py"
    assert record.fields[1].span.line == 6
    assert record.fields[1].span.column == 4
    assert record.fields[1].span.end_column == 6


def test_classvars_methods_and_plain_assignments_are_not_fields() -> None:
    records = parse_source(
        "\n".join(
            [
                "import typing",
                "class Point:",
                "    count: typing.ClassVar[int] = 0",
                "    label: 'ClassVar[str]' = ''",
                "    scale = 2",
                "    x: int",
                "    def _helper(self) -> None:",
                "        self._cache: int = 0",
                "    y: int",
            ]
        )
    )

    assert [item.name for item in records[0].fields] == ["x", "y"]
    assert records[0].kind == "class"


def test_enum_protocol_and_typeddict_classes_are_skipped() -> None:
    records = parse_source(
        "\n".join(
            [
                "import enum",
                "from typing import Protocol, TypedDict",
                "class Mode(enum.Enum):",
                "    fast: int = 1",
                "    _slow: int = 2",
                "class Reader(Protocol):",
                "    name: str",
                "    _buffer: bytes",
                "class Payload(TypedDict):",
                "    id: int",
                "    _meta: str",
            ]
        )
    )

    assert records == []


def test_empty_record_decorated_class_is_still_a_record() -> None:
    records = parse_source("import attr\n@attr.s\nclass Empty:\n    pass\n")

    assert len(records) == 1
    assert records[0].kind == "attrs"
    assert records[0].fields == ()


def test_plain_class_without_annotations_is_not_a_record() -> None:
    assert parse_source("class Service:\n    def run(self):\n        return 1\n") == []


def test_nested_classes_are_visited_in_source_order() -> None:
    records = parse_source(
        "\n".join(
            [
                "from typing import NamedTuple",
                "from pydantic import BaseModel",
                "class Outer(BaseModel):",
                "    a: int",
                "    class Inner(NamedTuple):",
                "        b: int",
                "    c: int",
                "class After:",
                "    d: int",
            ]
        )
    )

    assert [(item.name, item.kind) for item in records] == [
        ("Outer", "pydantic"),
        ("Inner", "namedtuple"),
        ("After", "class"),
    ]
    assert [item.name for item in records[0].fields] == ["a", "c"]


def test_suppression_comments_are_collected_per_line() -> None:
    source_file = load_source_file(
        "\n".join(
            [
                "class A:  # pubmix: ignore",
                "    a: int",
                "    _b: int  # pubmix: ignore[partial_pub_fields, other]",
                "    c: int  # pubmix: ignore[other]",
            ]
        )
    )

    assert source_file.is_suppressed(1, "partial_pub_fields")
    assert not source_file.is_suppressed(2, "partial_pub_fields")
    assert source_file.is_suppressed(3, "partial_pub_fields")
    assert not source_file.is_suppressed(4, "partial_pub_fields")
    assert source_file.is_suppressed(4, "other")


def test_syntax_error_raises_source_parse_error() -> None:
    with pytest.raises(SourceParseError, match="broken.py:1"):
        parse_source("class Broken(:\n", "broken.py")


@pytest.mark.parametrize(
    ("name", "expected"),
    [("value", True), ("_value", False), ("__value", False), ("value_", True)],
)
def test_is_public_name(name: str, expected: bool) -> None:
    assert is_public_name(name) is expected


@pytest.mark.parametrize(
    "annotation",
    ["KW_ONLY", "dataclasses.KW_ONLY", "'KW_ONLY'", "'dataclasses.KW_ONLY'"],
)
def test_kw_only_marker_is_not_a_field(annotation: str) -> None:
    records = parse_source(
        "\n".join(
            [
                "import dataclasses",
                "from dataclasses import KW_ONLY, dataclass",
                "@dataclass",
                "class Options:",
                "    x: int",
                f"    _: {annotation}",
                "    y: int = 0",
            ]
        )
    )

    assert [item.name for item in records[0].fields] == ["x", "y"]


@pytest.mark.parametrize(
    ("line", "column"),
    [("class Foo:", 6), ("class  Foo:", 7), ("class\tFoo:", 6), ("class \t Foo(Base):", 8)],
)
def test_class_span_points_at_name_token(line: str, column: int) -> None:
    (record,) = parse_source(f"{line}\n    a: int\n", "foo.py")

    assert record.span.line == 1
    assert record.span.column == column
    assert record.span.end_column == column + len("Foo")


def test_nested_class_span_accounts_for_indentation() -> None:
    records = parse_source("class Outer:\n    a: int\n    class  Inner:\n        b: int\n")

    assert records[1].span.line == 3
    assert records[1].span.column == 11


def test_suppression_marker_inside_string_is_not_a_comment() -> None:
    source_file = load_source_file(
        "\n".join(
            [
                "class C:",
                "    a: int",
                '    _b: str = "# pubmix: ignore"',
                "    c: str = '''",
                "# pubmix: ignore",
                "'''",
            ]
        )
    )

    assert source_file.suppressions == {}


def test_deeply_nested_expression_raises_source_parse_error() -> None:
    deep = "x = " + "+".join(["1"] * 200_000) + "\n"

    with pytest.raises(SourceParseError, match="deep.py"):
        parse_source(deep, "deep.py")


def test_null_byte_raises_source_parse_error() -> None:
    with pytest.raises(SourceParseError, match="nul.py"):
        parse_source("class A:\n    a: int\x00\n", "nul.py")
