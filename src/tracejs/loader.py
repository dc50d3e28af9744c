"""JSON interchange for ASTs handed over by the parser.

Every node is an object with ``kind``, ``line`` and ``column`` plus the
fields of its variant. End positions are ``{"line": .., "column": ..}``
objects, nested nodes are objects and statement lists are arrays::

    {"kind": "Main", "line": 1, "column": 0, "end": {"line": 4, "column": 0},
     "body": [{"kind": "Print", "line": 2, "column": 4, "value": "1+1"}]}
"""

from __future__ import annotations

from dataclasses import MISSING, Field, fields
from typing import Any

from . import ast as A
from .errors import AstFormatError
from .spans import Position


_KINDS: dict[str, type[A.Node]] = {
    cls.__name__: cls
    for cls in (
        A.Print,
        A.Bool,
        A.IntDeclaration,
        A.Assignment,
        A.Else,
        A.If,
        A.While,
        A.FunctionDeclaration,
        A.Call,
        A.Return,
        A.AssignmentFromCall,
        A.Main,
    )
}

_STATEMENT_LISTS = {"then", "else_body", "body"}
_STRING_LISTS = {"operations", "params", "arguments"}
_POSITIONS = {"end"}
_NODES = {"else_node", "call"}


def load_document(data: Any) -> tuple[str | None, A.Main]:
    """Return ``(source file id or None, program root)``."""
    if isinstance(data, dict) and "program" in data:
        source = data.get("source")
        if source is not None and not isinstance(source, str):
            raise AstFormatError(path="$.source", message="expected a string")
        path = "$.program"
        root = load_node(data["program"], path=path)
    else:
        source = None
        path = "$"
        root = load_node(data, path=path)
    if not isinstance(root, A.Main):
        raise AstFormatError(path=path, message=f"program root must be Main, got {type(root).__name__}")
    return source, root


def load_node(data: Any, *, path: str = "$") -> A.Node:
    obj = _expect(data, dict, path, "an object")
    kind = obj.get("kind")
    cls = _KINDS.get(kind) if isinstance(kind, str) else None
    if cls is None:
        raise AstFormatError(
            path=f"{path}.kind",
            message=f"unknown node kind: {kind!r}",
            hint="expected one of: " + ", ".join(sorted(_KINDS)),
        )

    kwargs: dict[str, Any] = {"pos": _load_position(obj, path)}
    for f in fields(cls):
        if f.name == "pos":
            continue
        fpath = f"{path}.{f.name}"
        if f.name not in obj or obj[f.name] is None:
            if _has_default(f):
                continue
            raise AstFormatError(path=fpath, message=f"missing field for {kind}")
        kwargs[f.name] = _load_field(cls, f.name, obj[f.name], fpath)
    return cls(**kwargs)


def _load_field(cls: type[A.Node], name: str, value: Any, path: str) -> Any:
    if name in _POSITIONS:
        return _load_position(_expect(value, dict, path, "an object"), path)
    if name in _STATEMENT_LISTS:
        items = _expect(value, list, path, "an array")
        return tuple(load_node(v, path=f"{path}[{i}]") for i, v in enumerate(items))
    if name in _STRING_LISTS:
        items = _expect(value, list, path, "an array")
        return tuple(_expect(v, str, f"{path}[{i}]", "a string") for i, v in enumerate(items))
    if name in _NODES:
        return load_node(value, path=path)
    if cls is A.Bool:
        return _expect(value, bool, path, "a boolean")
    if cls is A.IntDeclaration and name == "value" and isinstance(value, dict):
        return load_node(value, path=path)
    return _expect(value, str, path, "a string")


def _load_position(obj: dict[str, Any], path: str) -> Position:
    line = obj.get("line")
    column = obj.get("column")
    # bool is an int subclass; reject it explicitly.
    if not isinstance(line, int) or isinstance(line, bool) or line < 1:
        raise AstFormatError(path=f"{path}.line", message=f"expected a 1-based line number, got {line!r}")
    if not isinstance(column, int) or isinstance(column, bool) or column < 0:
        raise AstFormatError(path=f"{path}.column", message=f"expected a 0-based column number, got {column!r}")
    return Position(line=line, column=column)


def _expect(value: Any, typ: type, path: str, what: str) -> Any:
    if not isinstance(value, typ):
        raise AstFormatError(path=path, message=f"expected {what}, got {type(value).__name__}")
    return value


def _has_default(f: Field[Any]) -> bool:
    return f.default is not MISSING or f.default_factory is not MISSING


def dump_node(node: A.Node) -> dict[str, Any]:
    """Inverse of `load_node`."""
    out: dict[str, Any] = {"kind": type(node).__name__, "line": node.pos.line, "column": node.pos.column}
    for f in fields(node):
        if f.name == "pos":
            continue
        v = getattr(node, f.name)
        if v is None:
            continue
        out[f.name] = _dump_value(v)
    return out


def _dump_value(v: Any) -> Any:
    if isinstance(v, A.Node):
        return dump_node(v)
    if isinstance(v, Position):
        return {"line": v.line, "column": v.column}
    if isinstance(v, tuple):
        return [_dump_value(x) for x in v]
    return v
