from __future__ import annotations

from dataclasses import dataclass

from .chunks import Chunk, Group, Origin, Text


@dataclass(frozen=True, slots=True)
class MappingRecord:
    """One generated position correlated with a source position.

    Generated and source lines are 1-based, columns 0-based.
    """

    generated_line: int
    generated_column: int
    source_file: str
    source_line: int
    source_column: int


@dataclass(frozen=True, slots=True)
class Rendered:
    code: str
    mappings: tuple[MappingRecord, ...]


@dataclass(slots=True)
class _Cursor:
    line: int = 1
    column: int = 0

    def advance(self, text: str) -> None:
        breaks = text.count("\n")
        if breaks:
            self.line += breaks
            self.column = len(text) - (text.rfind("\n") + 1)
        else:
            self.column += len(text)


def render(root: Chunk) -> Rendered:
    """Flatten a chunk tree into text plus mapping records, in pre-order."""
    cur = _Cursor()
    out: list[str] = []
    mappings: list[MappingRecord] = []

    def mark(origin: Origin) -> None:
        mappings.append(
            MappingRecord(
                generated_line=cur.line,
                generated_column=cur.column,
                source_file=origin.file,
                source_line=origin.pos.line,
                source_column=origin.pos.column,
            )
        )

    # Explicit stack, so arbitrarily deep trees render without recursion.
    stack: list[Chunk] = [root]
    while stack:
        chunk = stack.pop()
        if chunk.origin is not None:
            mark(chunk.origin)
        if isinstance(chunk, Text):
            out.append(chunk.text)
            cur.advance(chunk.text)
        elif isinstance(chunk, Group):
            stack.extend(reversed(chunk.children))
        else:
            raise TypeError(f"not a chunk: {type(chunk)!r}")

    return Rendered(code="".join(out), mappings=tuple(mappings))
