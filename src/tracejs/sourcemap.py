"""Source map (revision 3) assembly for rendered mapping records."""

from __future__ import annotations

import json
from dataclasses import dataclass

from .render import MappingRecord


_B64 = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
_B64_INDEX = {ch: i for i, ch in enumerate(_B64)}

_VLQ_SHIFT = 5
_VLQ_BASE = 1 << _VLQ_SHIFT
_VLQ_MASK = _VLQ_BASE - 1
_VLQ_CONTINUE = _VLQ_BASE


@dataclass(frozen=True, slots=True)
class SourceMapDocument:
    file: str | None
    sources: tuple[str, ...]
    mappings: str
    names: tuple[str, ...] = ()
    source_root: str | None = None
    sources_content: tuple[str | None, ...] | None = None
    version: int = 3

    def to_dict(self) -> dict[str, object]:
        out: dict[str, object] = {"version": self.version}
        if self.file is not None:
            out["file"] = self.file
        if self.source_root is not None:
            out["sourceRoot"] = self.source_root
        out["sources"] = list(self.sources)
        out["names"] = list(self.names)
        out["mappings"] = self.mappings
        if self.sources_content is not None:
            out["sourcesContent"] = list(self.sources_content)
        return out

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


def encode_vlq(value: int) -> str:
    # Sign goes in the least significant bit.
    vlq = (value << 1) if value >= 0 else ((-value) << 1) | 1
    out: list[str] = []
    while True:
        digit = vlq & _VLQ_MASK
        vlq >>= _VLQ_SHIFT
        if vlq:
            digit |= _VLQ_CONTINUE
        out.append(_B64[digit])
        if not vlq:
            return "".join(out)


def decode_vlq(segment: str) -> list[int]:
    values: list[int] = []
    vlq = 0
    shift = 0
    for ch in segment:
        digit = _B64_INDEX.get(ch)
        if digit is None:
            raise ValueError(f"invalid base64 digit in VLQ segment: {ch!r}")
        vlq |= (digit & _VLQ_MASK) << shift
        if digit & _VLQ_CONTINUE:
            shift += _VLQ_SHIFT
            continue
        values.append(-(vlq >> 1) if vlq & 1 else vlq >> 1)
        vlq = 0
        shift = 0
    if shift:
        raise ValueError(f"truncated VLQ segment: {segment!r}")
    return values


def group_by_line(mappings: tuple[MappingRecord, ...] | list[MappingRecord]) -> tuple[tuple[MappingRecord, ...], ...]:
    """Records per generated line; entry i holds line i + 1, ordered by column."""
    if not mappings:
        return ()
    last = max(m.generated_line for m in mappings)
    lines: list[list[MappingRecord]] = [[] for _ in range(last)]
    for m in sorted(mappings, key=lambda m: (m.generated_line, m.generated_column)):
        lines[m.generated_line - 1].append(m)
    return tuple(tuple(line) for line in lines)


def referenced_sources(mappings: tuple[MappingRecord, ...] | list[MappingRecord]) -> tuple[str, ...]:
    """Source file ids in order of first use."""
    seen: dict[str, None] = {}
    for m in mappings:
        seen.setdefault(m.source_file, None)
    return tuple(seen)


def encode_mappings(lines: tuple[tuple[MappingRecord, ...], ...], sources: tuple[str, ...]) -> str:
    index = {s: i for i, s in enumerate(sources)}
    prev_source = prev_line = prev_column = 0
    out: list[str] = []
    for line in lines:
        prev_gen_column = 0
        segs: list[str] = []
        for m in line:
            src = index[m.source_file]
            # Source lines are 0-based on the wire.
            src_line = m.source_line - 1
            segs.append(
                encode_vlq(m.generated_column - prev_gen_column)
                + encode_vlq(src - prev_source)
                + encode_vlq(src_line - prev_line)
                + encode_vlq(m.source_column - prev_column)
            )
            prev_gen_column = m.generated_column
            prev_source, prev_line, prev_column = src, src_line, m.source_column
        out.append(",".join(segs))
    return ";".join(out)


def decode_mappings(mappings: str, sources: tuple[str, ...] | list[str]) -> list[MappingRecord]:
    out: list[MappingRecord] = []
    prev_source = prev_line = prev_column = 0
    for line_no, line in enumerate(mappings.split(";"), start=1):
        gen_column = 0
        for seg in line.split(","):
            if not seg:
                continue
            fields = decode_vlq(seg)
            if len(fields) != 4:
                # Segments without a source (1 field) or with a name (5) are
                # never produced by this package.
                raise ValueError(f"unsupported segment with {len(fields)} fields on line {line_no}")
            gen_column += fields[0]
            prev_source += fields[1]
            prev_line += fields[2]
            prev_column += fields[3]
            out.append(
                MappingRecord(
                    generated_line=line_no,
                    generated_column=gen_column,
                    source_file=sources[prev_source],
                    source_line=prev_line + 1,
                    source_column=prev_column,
                )
            )
    return out


def build_source_map(
    mappings: tuple[MappingRecord, ...] | list[MappingRecord],
    *,
    file: str | None = None,
    source_root: str | None = None,
    sources_content: dict[str, str] | None = None,
) -> SourceMapDocument:
    sources = referenced_sources(mappings)
    content = None
    if sources_content is not None:
        content = tuple(sources_content.get(s) for s in sources)
    return SourceMapDocument(
        file=file,
        sources=sources,
        mappings=encode_mappings(group_by_line(mappings), sources),
        source_root=source_root,
        sources_content=content,
    )
