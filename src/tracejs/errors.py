from __future__ import annotations

from dataclasses import dataclass

from .spans import Position


@dataclass(slots=True)
class MalformedNodeError(Exception):
    """A node whose fields do not match the shape its variant requires."""

    pos: Position
    message: str
    file: str = "<memory>"
    hint: str | None = None

    def __str__(self) -> str:
        base = f"{self.pos.format(self.file)}: {self.message}"
        if self.hint:
            return f"{base}\nhint: {self.hint}"
        return base


@dataclass(slots=True)
class AstFormatError(Exception):
    """A JSON AST document that cannot be turned into nodes."""

    path: str  # JSON path, e.g. "$.body[2].then[0]"
    message: str
    hint: str | None = None

    def __str__(self) -> str:
        base = f"{self.path}: {self.message}"
        if self.hint:
            return f"{base}\nhint: {self.hint}"
        return base
