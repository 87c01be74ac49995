from __future__ import annotations

import pytest

from adfmd.errors import DocumentDecodeError
from adfmd.models import (
    DocumentNode,
    Empty,
    Mark,
    RawString,
    Tree,
    dump_raw,
    normalize_input,
)

from tests.helpers_adf import doc, nested, node, paragraph, text


def test_from_dict_builds_typed_tree() -> None:
    payload = doc(paragraph(text("hi", "strong")), node("heading", text("T"), level=2))

    tree = DocumentNode.from_dict(payload)

    assert tree.type == "doc"
    assert tree.attrs == {}
    first, second = tree.content
    assert first.content[0] == DocumentNode(type="text", text="hi", marks=(Mark("strong"),))
    assert second.attrs["level"] == 2


def test_null_optional_fields_count_as_absent() -> None:
    tree = DocumentNode.from_dict(
        {"type": "paragraph", "content": None, "marks": None, "attrs": None, "text": None}
    )

    assert tree == DocumentNode(type="paragraph")


def test_attrs_are_read_only() -> None:
    tree = DocumentNode.from_dict(node("heading", level=1))

    with pytest.raises(TypeError):
        tree.attrs["level"] = 3  # type: ignore[index]


@pytest.mark.parametrize(
    "payload",
    [
        ["not", "a", "node"],
        {"type": ["doc"]},
        {"type": 7},
        {"type": "paragraph", "content": "oops"},
        {"type": "text", "text": 12},
        {"type": "text", "text": "a", "marks": [{"type": 1}]},
        {"type": "text", "text": "a", "marks": ["strong"]},
        {"type": "heading", "attrs": ["level", 1]},
    ],
)
def test_invalid_shapes_raise_decode_error(payload: object) -> None:
    with pytest.raises(DocumentDecodeError):
        DocumentNode.from_dict(payload)


def test_decode_error_reports_path() -> None:
    payload = doc(paragraph(text("ok"), {"type": "text", "text": 3}))

    with pytest.raises(DocumentDecodeError) as excinfo:
        DocumentNode.from_dict(payload)

    assert excinfo.value.context["path"] == "$.content[0].content[1]"
    assert excinfo.value.raw == '{"type": "text", "text": 3}'


def test_attr_filters_by_type() -> None:
    tree = DocumentNode.from_dict(
        node("heading", level=True, language=3, title="T", size=2.5)
    )

    assert tree.attr("level", (int, float)) is None
    assert tree.attr("language") is None
    assert tree.attr("title") == "T"
    assert tree.attr("size", (int, float)) == 2.5
    assert tree.attr("missing") is None


def test_max_depth_stops_decoding_children() -> None:
    payload = nested("wrapper", 3, text("leaf"))

    tree = DocumentNode.from_dict(payload, max_depth=1)

    truncated = tree.content[0].content[0]
    assert truncated.type == "wrapper"
    assert truncated.content == ()


def test_max_depth_makes_self_references_terminate() -> None:
    payload: dict = {"type": "doc", "content": []}
    payload["content"].append(payload)

    tree = DocumentNode.from_dict(payload, max_depth=3)

    depth = 0
    current = tree
    while current.content:
        current = current.content[0]
        depth += 1
    assert depth == 4


def test_normalize_input_variants() -> None:
    assert normalize_input(None) == Empty()
    assert normalize_input("") == Empty()
    assert normalize_input("null") == Empty()
    assert normalize_input("# ready") == RawString("# ready")

    document = normalize_input(doc())
    assert isinstance(document, Tree)
    assert document.node.type == "doc"
    assert document.payload == doc()


def test_normalize_input_rejects_other_values() -> None:
    with pytest.raises(DocumentDecodeError):
        normalize_input(42)


def test_dump_raw_falls_back_to_str() -> None:
    assert dump_raw({"a": [1, 2]}) == '{"a": [1, 2]}'
    assert dump_raw({"ü": "ß"}) == '{"ü": "ß"}'
    assert dump_raw({1, 2}) == "{1, 2}"


def test_missing_type_decodes_as_empty_string() -> None:
    tree = DocumentNode.from_dict(
        {"content": [{"type": None, "text": "x", "marks": [{"attrs": {}}]}]}
    )

    assert tree.type == ""
    child = tree.content[0]
    assert child.type == ""
    assert child.marks == (Mark(""),)
