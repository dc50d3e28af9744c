from __future__ import annotations

from .api import CompileResult, compile_file, compile_program
from .chunks import concat, indent_text, leaf, tagged
from .errors import AstFormatError, MalformedNodeError
from .render import MappingRecord, Rendered, render
from .sourcemap import SourceMapDocument, build_source_map, group_by_line
from .spans import Position

__all__ = [
    "AstFormatError",
    "CompileResult",
    "MalformedNodeError",
    "MappingRecord",
    "Position",
    "Rendered",
    "SourceMapDocument",
    "build_source_map",
    "compile_file",
    "compile_program",
    "concat",
    "group_by_line",
    "indent_text",
    "leaf",
    "render",
    "tagged",
]
