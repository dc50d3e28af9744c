from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from .ast import Main
from .errors import AstFormatError, MalformedNodeError
from .loader import load_document
from .render import MappingRecord, render
from .sourcemap import SourceMapDocument, build_source_map


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CompileResult:
    code: str
    mappings: tuple[MappingRecord, ...]
    source_map: SourceMapDocument


def compile_program(
    program: Main,
    *,
    file: str = "<memory>",
    out_file: str | None = None,
    source_root: str | None = None,
    source_text: str | None = None,
) -> CompileResult:
    if not isinstance(program, Main):
        pos = getattr(program, "pos", None)
        if pos is None:
            raise TypeError(f"not an AST node: {type(program)!r}")
        raise MalformedNodeError(
            pos=pos,
            message=f"program root must be a Main block, got {type(program).__name__}",
            file=file,
        )

    out = render(program.compile(0, file))
    content = {file: source_text} if source_text is not None else None
    smap = build_source_map(out.mappings, file=out_file, source_root=source_root, sources_content=content)
    logger.debug(
        "compiled %s: %d generated lines, %d mappings",
        file,
        out.code.count("\n"),
        len(out.mappings),
    )
    return CompileResult(code=out.code, mappings=out.mappings, source_map=smap)


def compile_file(
    path: str | Path,
    *,
    file: str | None = None,
    out_file: str | None = None,
    source_root: str | None = None,
    embed_sources: bool = False,
) -> CompileResult:
    """Compile a JSON AST document (see `tracejs.loader`) from disk."""
    p = Path(path).expanduser().resolve()
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise AstFormatError(path="$", message=f"invalid JSON in {p}: {e.msg} (line {e.lineno})") from e

    source, program = load_document(data)
    file_id = file or source or p.name
    logger.info("compiling %s as %s", p, file_id)

    source_text = None
    if embed_sources:
        src_path = p.parent / file_id
        if src_path.is_file():
            source_text = src_path.read_text(encoding="utf-8")
        else:
            logger.warning("source %s not found, sourcesContent omitted", src_path)

    return compile_program(
        program,
        file=file_id,
        out_file=out_file,
        source_root=source_root,
        source_text=source_text,
    )
