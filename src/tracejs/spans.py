from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Position:
    """A position in the original source, as reported by the parser.

    Lines are 1-based, columns are 0-based (the source-map convention).
    """

    line: int
    column: int

    def format(self, file: str) -> str:
        return f"{file}:{self.line}:{self.column}"
