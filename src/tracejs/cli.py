from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .api import compile_file
from .errors import AstFormatError, MalformedNodeError


logger = logging.getLogger(__name__)


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(prog="tracejs", description="Compile a JSON AST to JavaScript with a source map")
    ap.add_argument("input", help="JSON AST document")
    ap.add_argument("-o", "--output", help="Write JavaScript here (and the map next to it)")
    ap.add_argument("--no-map", action="store_true", help="Do not write a .map file")
    ap.add_argument("--source-root", help="sourceRoot recorded in the map")
    ap.add_argument("--embed-sources", action="store_true", help="Embed source text as sourcesContent")
    ap.add_argument("--mappings", action="store_true", help="Print mapping records instead of code")
    ap.add_argument("-v", "--verbose", action="count", default=0, help="More logging (repeatable)")
    args = ap.parse_args(argv)
    _configure_logging(args.verbose)

    out_path = Path(args.output) if args.output else None
    map_name = f"{out_path.name}.map" if out_path is not None else None
    try:
        res = compile_file(
            args.input,
            out_file=out_path.name if out_path is not None else None,
            source_root=args.source_root,
            embed_sources=args.embed_sources,
        )
    except (AstFormatError, MalformedNodeError) as e:
        print(f"tracejs: error: {e}", file=sys.stderr)
        return 1

    if args.mappings:
        for m in res.mappings:
            print(
                f"{m.generated_line}:{m.generated_column} -> "
                f"{m.source_file}:{m.source_line}:{m.source_column}"
            )
        return 0

    if out_path is None:
        sys.stdout.write(res.code)
        return 0

    code = res.code
    if not args.no_map:
        code += f"//# sourceMappingURL={map_name}\n"
        map_path = out_path.with_name(map_name)
        map_path.write_text(res.source_map.to_json(), encoding="utf-8")
        logger.info("wrote %s", map_path)
    out_path.write_text(code, encoding="utf-8")
    logger.info("wrote %s", out_path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
