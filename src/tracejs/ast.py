from __future__ import annotations

from dataclasses import dataclass

from .chunks import Chunk
from .spans import Position


@dataclass(frozen=True, slots=True)
class Node:
    pos: Position

    def compile(self, indent: int, file: str) -> Chunk:
        # codegen imports this module; resolve the dispatcher at call time.
        from .codegen import compile_node

        return compile_node(self, indent, file)


@dataclass(frozen=True, slots=True)
class Print(Node):
    value: str  # pre-rendered JavaScript expression


@dataclass(frozen=True, slots=True)
class Bool(Node):
    value: bool


@dataclass(frozen=True, slots=True)
class IntDeclaration(Node):
    name: str
    value: "str | Node"


@dataclass(frozen=True, slots=True)
class Assignment(Node):
    """`name` rebound to `initial` folded through `operations`.

    Each operation carries its own operator, e.g. ``"+1"`` or ``"*b"``.
    """

    name: str
    initial: str
    operations: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class Else(Node):
    pass


@dataclass(frozen=True, slots=True)
class If(Node):
    predicate: str
    then: tuple["Statement", ...]
    end: Position
    else_node: Else | None = None
    else_body: tuple["Statement", ...] | None = None


@dataclass(frozen=True, slots=True)
class While(Node):
    predicate: str
    body: tuple["Statement", ...]
    end: Position


@dataclass(frozen=True, slots=True)
class FunctionDeclaration(Node):
    name: str
    params: tuple[str, ...] = ()
    body: tuple["Statement", ...] = ()


@dataclass(frozen=True, slots=True)
class Call(Node):
    name: str
    arguments: tuple[str, ...] = ()  # pre-rendered JavaScript expressions


@dataclass(frozen=True, slots=True)
class Return(Node):
    value: str


@dataclass(frozen=True, slots=True)
class AssignmentFromCall(Node):
    name: str
    call: Call


Statement = (
    Print
    | IntDeclaration
    | Assignment
    | If
    | While
    | FunctionDeclaration
    | Call
    | Return
    | AssignmentFromCall
)


@dataclass(frozen=True, slots=True)
class Main(Node):
    """Program root; its body runs inside an immediately-invoked function."""

    body: tuple[Statement, ...]
    end: Position
