from __future__ import annotations

from dataclasses import dataclass, replace

from .spans import Position


INDENT = "    "


@dataclass(frozen=True, slots=True)
class Origin:
    """Provenance tag: where in which source file a chunk came from."""

    file: str
    pos: Position


@dataclass(frozen=True, slots=True)
class Text:
    text: str
    origin: Origin | None = None


@dataclass(frozen=True, slots=True)
class Group:
    """Ordered children; renders as the concatenation of their renderings.

    The group's own origin marks where its first piece of text begins and is
    independent of any origin carried by the children.
    """

    children: tuple["Chunk", ...] = ()
    origin: Origin | None = None


Chunk = Text | Group


def indent_text(level: int) -> str:
    return INDENT * level


def indent(level: int) -> Text:
    return Text(indent_text(level))


def leaf(text: str) -> Text:
    return Text(text)


def _as_chunk(part: Chunk | str) -> Chunk:
    if isinstance(part, str):
        return Text(part)
    return part


def concat(*parts: Chunk | str) -> Group:
    return Group(children=tuple(_as_chunk(p) for p in parts))


def tagged(pos: Position, file: str, content: Chunk | str) -> Chunk:
    """Attach provenance to `content`.

    A chunk that already carries an origin is wrapped rather than retagged, so
    the child's tag survives and the new one sits outside it.
    """
    origin = Origin(file=file, pos=pos)
    chunk = _as_chunk(content)
    if chunk.origin is None:
        return replace(chunk, origin=origin)
    return Group(children=(chunk,), origin=origin)
