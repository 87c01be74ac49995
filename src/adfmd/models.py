"""Document model for Atlassian Document Format (ADF) payloads.

The converter never works on raw dictionaries past the boundary: values are
normalised once into :class:`Empty`, :class:`RawString` or :class:`Tree` and
the renderer only ever sees :class:`DocumentNode` instances.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Tuple, Union

from .errors import DocumentDecodeError

_EMPTY_ATTRS: Mapping[str, Any] = MappingProxyType({})

# String values Jira returns for fields that were never filled in.
EMPTY_STRINGS = frozenset({"", "null"})


def dump_raw(value: Any) -> str:
    """Return the best-effort text form of an undecodable value."""

    try:
        return json.dumps(value, ensure_ascii=False)
    except (TypeError, ValueError, RecursionError):
        return str(value)


@dataclass(frozen=True)
class Mark:
    """Inline formatting annotation attached to a ``text`` node."""

    type: str
    attrs: Mapping[str, Any] = field(default_factory=lambda: _EMPTY_ATTRS)

    @classmethod
    def from_dict(cls, payload: Any, *, path: str = "marks") -> "Mark":
        if not isinstance(payload, Mapping):
            raise DocumentDecodeError(
                "Mark must be a mapping", context={"path": path, "raw": dump_raw(payload)}
            )
        mark_type = payload.get("type")
        if mark_type is None:
            mark_type = ""
        elif not isinstance(mark_type, str):
            raise DocumentDecodeError(
                "Mark has a non-string 'type'",
                context={"path": path, "raw": dump_raw(payload)},
            )
        return cls(type=mark_type, attrs=_decode_attrs(payload, path))


@dataclass(frozen=True)
class DocumentNode:
    """A typed node of the rich-text tree."""

    type: str
    content: Tuple["DocumentNode", ...] = ()
    text: str = ""
    marks: Tuple[Mark, ...] = ()
    attrs: Mapping[str, Any] = field(default_factory=lambda: _EMPTY_ATTRS)

    def attr(self, name: str, expected: type | tuple[type, ...] = str) -> Any:
        """Return ``attrs[name]`` when it has the ``expected`` type, else ``None``."""

        value = self.attrs.get(name)
        if isinstance(value, bool) and bool not in _as_tuple(expected):
            return None
        if isinstance(value, expected):
            return value
        return None

    @classmethod
    def from_dict(
        cls,
        payload: Any,
        *,
        path: str = "$",
        max_depth: int | None = None,
        _depth: int = 0,
    ) -> "DocumentNode":
        """Decode a JSON-like mapping into a node tree.

        Raises :class:`DocumentDecodeError` when ``payload`` does not have the
        node shape. ``None`` for an optional field counts as absent, and a
        missing ``type`` decodes as ``""`` so the renderer passes the node's
        children through.

        With ``max_depth`` set, children of nodes deeper than ``max_depth``
        are not decoded; the renderer truncates those nodes anyway, and this
        keeps self-referencing payloads from recursing forever.
        """

        if not isinstance(payload, Mapping):
            raise DocumentDecodeError(
                f"Expected a mapping at {path}, got {type(payload).__name__}",
                context={"path": path, "raw": dump_raw(payload)},
            )

        node_type = payload.get("type")
        if node_type is None:
            node_type = ""
        elif not isinstance(node_type, str):
            raise DocumentDecodeError(
                f"Node at {path} has a non-string 'type'",
                context={"path": path, "raw": dump_raw(payload)},
            )

        text = payload.get("text")
        if text is None:
            text = ""
        elif not isinstance(text, str):
            raise DocumentDecodeError(
                f"Node at {path} has a non-string 'text'",
                context={"path": path, "raw": dump_raw(payload)},
            )

        if max_depth is not None and _depth > max_depth:
            return cls(type=node_type, text=text)

        children = _decode_list(payload, "content", path)
        content = tuple(
            cls.from_dict(
                child,
                path=f"{path}.content[{index}]",
                max_depth=max_depth,
                _depth=_depth + 1,
            )
            for index, child in enumerate(children)
        )
        raw_marks = _decode_list(payload, "marks", path)
        marks = tuple(
            Mark.from_dict(mark, path=f"{path}.marks[{index}]")
            for index, mark in enumerate(raw_marks)
        )

        return cls(
            type=node_type,
            content=content,
            text=text,
            marks=marks,
            attrs=_decode_attrs(payload, path),
        )


def _as_tuple(expected: type | tuple[type, ...]) -> tuple[type, ...]:
    return expected if isinstance(expected, tuple) else (expected,)


def _decode_list(payload: Mapping[str, Any], key: str, path: str) -> list:
    value = payload.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise DocumentDecodeError(
            f"Node at {path} has a non-list '{key}'",
            context={"path": path, "raw": dump_raw(payload)},
        )
    return value


def _decode_attrs(payload: Mapping[str, Any], path: str) -> Mapping[str, Any]:
    attrs = payload.get("attrs")
    if attrs is None:
        return _EMPTY_ATTRS
    if not isinstance(attrs, Mapping):
        raise DocumentDecodeError(
            f"Node at {path} has non-mapping 'attrs'",
            context={"path": path, "raw": dump_raw(payload)},
        )
    return MappingProxyType(dict(attrs))


@dataclass(frozen=True)
class Empty:
    """Nothing to render (``None``, ``""`` or the literal ``"null"``)."""


@dataclass(frozen=True)
class RawString:
    """Already-rendered text that passes through verbatim."""

    text: str


@dataclass(frozen=True)
class Tree:
    """A decoded document tree together with its original payload."""

    node: DocumentNode
    payload: Any = None


DocumentInput = Union[Empty, RawString, Tree]


def normalize_input(value: Any, *, max_depth: int | None = None) -> DocumentInput:
    """Classify a loosely-typed field value.

    Raises :class:`DocumentDecodeError` for values that are neither empty,
    a string nor a decodable node mapping.
    """

    if value is None:
        return Empty()
    if isinstance(value, str):
        if value in EMPTY_STRINGS:
            return Empty()
        return RawString(value)
    return Tree(DocumentNode.from_dict(value, max_depth=max_depth), payload=value)


__all__ = [
    "DocumentInput",
    "DocumentNode",
    "Empty",
    "EMPTY_STRINGS",
    "Mark",
    "RawString",
    "Tree",
    "dump_raw",
    "normalize_input",
]
