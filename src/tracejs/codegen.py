from __future__ import annotations

from . import ast as A
from .chunks import Chunk, concat, indent, tagged
from .errors import MalformedNodeError


_STATEMENT_TYPES = (
    A.Print,
    A.IntDeclaration,
    A.Assignment,
    A.If,
    A.While,
    A.FunctionDeclaration,
    A.Call,
    A.Return,
    A.AssignmentFromCall,
)


def compile_node(node: A.Node, level: int, file: str) -> Chunk:
    """Compile `node` into a chunk tree tagged with the node's own position.

    `level` is the nesting depth of the node. The node's first line is never
    indented here: whoever splices the node into a block emits that
    indentation (see `compile_block`).
    """
    if isinstance(node, A.Print):
        return tagged(node.pos, file, f"console.log( {node.value} );\n")
    if isinstance(node, A.Bool):
        return tagged(node.pos, file, "true" if node.value else "false")
    if isinstance(node, A.IntDeclaration):
        return _compile_int_declaration(node, file)
    if isinstance(node, A.Assignment):
        return _compile_assignment(node, level, file)
    if isinstance(node, A.If):
        return _compile_if(node, level, file)
    if isinstance(node, A.Else):
        return tagged(node.pos, file, "} else {\n")
    if isinstance(node, A.While):
        return _compile_while(node, level, file)
    if isinstance(node, A.FunctionDeclaration):
        return _compile_function(node, level, file)
    if isinstance(node, A.Call):
        args = ", ".join(node.arguments)
        return tagged(node.pos, file, f"{node.name}({args});\n")
    if isinstance(node, A.Return):
        return tagged(node.pos, file, concat("return ", node.value, ";\n"))
    if isinstance(node, A.AssignmentFromCall):
        return _compile_assignment_from_call(node, file)
    if isinstance(node, A.Main):
        return _compile_main(node, level, file)
    raise TypeError(f"not an AST node: {type(node)!r}")


def compile_block(parent: A.Node, statements: tuple[A.Statement, ...], level: int, file: str) -> Chunk:
    """Compile a statement list, one indented statement after another."""
    parts: list[Chunk] = []
    for stmt in statements:
        if not isinstance(stmt, _STATEMENT_TYPES):
            raise MalformedNodeError(
                pos=parent.pos,
                message=f"{type(stmt).__name__} is not allowed in a statement list",
                file=file,
                hint="a Main block is only valid as the program root" if isinstance(stmt, A.Main) else None,
            )
        parts.append(indent(level))
        parts.append(compile_node(stmt, level, file))
    return concat(*parts)


def fold_operations(initial: str, operations: tuple[str, ...]) -> str:
    """Left-to-right fold; every step is parenthesized before the next applies."""
    expr = initial
    for op in operations:
        expr = f"({expr}{op})"
    return f"({expr})"


def _compile_int_declaration(node: A.IntDeclaration, file: str) -> Chunk:
    value = node.value
    if isinstance(value, A.Node):
        # Only literal nodes are expressions; calls go through AssignmentFromCall.
        if not isinstance(value, A.Bool):
            raise MalformedNodeError(
                pos=node.pos,
                message=f"{type(value).__name__} cannot initialize {node.name!r}",
                file=file,
                hint="use AssignmentFromCall to bind the result of a call",
            )
        value = compile_node(value, 0, file)
    return tagged(node.pos, file, concat(f"var {node.name} = ", value, ";\n"))


def _compile_assignment(node: A.Assignment, level: int, file: str) -> Chunk:
    name = node.name
    return tagged(
        node.pos,
        file,
        concat(
            f"{name} = {fold_operations(node.initial, node.operations)};\n",
            # The variable kind is integer-valued: coerce booleans, then round
            # half away from zero.
            indent(level),
            f'if (typeof {name} === "boolean") {{ {name} = {name} ? 1 : 0; }}\n',
            indent(level),
            f"{name} = Math.sign({name}) * Math.round(Math.abs({name}));\n",
        ),
    )


def _compile_if(node: A.If, level: int, file: str) -> Chunk:
    has_else_node = node.else_node is not None
    has_else_body = node.else_body is not None
    if has_else_node != has_else_body:
        raise MalformedNodeError(
            pos=node.pos,
            message="else branch is incomplete",
            file=file,
            hint="an else introducer and an else statement list must be given together",
        )
    if node.else_node is not None and not isinstance(node.else_node, A.Else):
        raise MalformedNodeError(
            pos=node.pos,
            message=f"expected an else introducer, got {type(node.else_node).__name__}",
            file=file,
        )

    parts: list[Chunk | str] = [f"if ({node.predicate}) {{\n", compile_block(node, node.then, level + 1, file)]
    if node.else_node is not None and node.else_body is not None:
        parts.append(indent(level))
        parts.append(compile_node(node.else_node, level, file))
        parts.append(compile_block(node, node.else_body, level + 1, file))
    parts.append(indent(level))
    parts.append(tagged(node.end, file, "}\n"))
    return tagged(node.pos, file, concat(*parts))


def _compile_while(node: A.While, level: int, file: str) -> Chunk:
    return tagged(
        node.pos,
        file,
        concat(
            f"while ({node.predicate}) {{\n",
            compile_block(node, node.body, level + 1, file),
            indent(level),
            tagged(node.end, file, "}\n"),
        ),
    )


def _compile_function(node: A.FunctionDeclaration, level: int, file: str) -> Chunk:
    seen: set[str] = set()
    for p in node.params:
        if p in seen:
            raise MalformedNodeError(
                pos=node.pos,
                message=f"duplicate parameter {p!r} in function {node.name!r}",
                file=file,
            )
        seen.add(p)

    params = ", ".join(node.params)
    return tagged(
        node.pos,
        file,
        concat(
            f"function {node.name}({params}) {{\n",
            compile_block(node, node.body, level + 1, file),
            indent(level),
            "}\n",
        ),
    )


def _compile_assignment_from_call(node: A.AssignmentFromCall, file: str) -> Chunk:
    if not isinstance(node.call, A.Call):
        raise MalformedNodeError(
            pos=node.pos,
            message=f"expected a call to assign to {node.name!r}, got {type(node.call).__name__}",
            file=file,
        )
    return tagged(node.pos, file, concat(f"var {node.name} = ", compile_node(node.call, 0, file)))


def _compile_main(node: A.Main, level: int, file: str) -> Chunk:
    return tagged(
        node.pos,
        file,
        concat(
            "(function() {\n",
            compile_block(node, node.body, level + 1, file),
            indent(level),
            tagged(node.end, file, "}());\n"),
        ),
    )
