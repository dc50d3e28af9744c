from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from tracejs import AstFormatError, Position, compile_file
from tracejs import ast as A
from tracejs.cli import main
from tracejs.loader import dump_node, load_document, load_node


PROGRAM = {
    "kind": "Main",
    "line": 1,
    "column": 0,
    "end": {"line": 6, "column": 0},
    "body": [
        {"kind": "IntDeclaration", "line": 2, "column": 4, "name": "n", "value": "2"},
        {
            "kind": "If",
            "line": 3,
            "column": 4,
            "predicate": "n > 1",
            "then": [{"kind": "Print", "line": 4, "column": 8, "value": "n"}],
            "end": {"line": 5, "column": 4},
        },
    ],
}


def _write(tmp_path: Path, doc: object, name: str = "prog.json") -> Path:
    p = tmp_path / name
    p.write_text(json.dumps(doc), encoding="utf-8")
    return p


def test_load_node_builds_typed_tree() -> None:
    _, root = load_document(PROGRAM)
    assert root.pos == Position(line=1, column=0)
    assert root.end == Position(line=6, column=0)
    cond = root.body[1]
    assert isinstance(cond, A.If)
    assert cond.else_node is None and cond.else_body is None
    assert cond.then == (A.Print(pos=Position(line=4, column=8), value="n"),)


def test_dump_node_inverts_load_node() -> None:
    node = A.AssignmentFromCall(
        pos=Position(line=2, column=0),
        name="r",
        call=A.Call(pos=Position(line=2, column=8), name="f", arguments=("1",)),
    )
    assert load_node(dump_node(node)) == node


def test_unknown_kind_reports_json_path() -> None:
    doc = {"source": "p.src", "program": dict(PROGRAM, body=[{"kind": "Goto", "line": 2, "column": 0}])}
    with pytest.raises(AstFormatError) as e:
        load_document(doc)
    assert e.value.path == "$.program.body[0].kind"
    assert "Goto" in str(e.value)


def test_missing_field_reports_json_path() -> None:
    doc = dict(PROGRAM, body=[{"kind": "Print", "line": 2, "column": 4}])
    with pytest.raises(AstFormatError) as e:
        load_document(doc)
    assert e.value.path == "$.body[0].value"


def test_bad_position_is_rejected() -> None:
    with pytest.raises(AstFormatError) as e:
        load_node({"kind": "Bool", "line": 0, "column": 0, "value": True})
    assert e.value.path == "$.line"


def test_root_must_be_main() -> None:
    with pytest.raises(AstFormatError) as e:
        load_document({"kind": "Print", "line": 1, "column": 0, "value": "1"})
    assert "Main" in str(e.value)


def test_compile_file_uses_document_source(tmp_path: Path) -> None:
    p = _write(tmp_path, {"source": "prog.src", "program": PROGRAM})
    res = compile_file(p)
    assert res.code == (
        "(function() {\n"
        "    var n = 2;\n"
        "    if (n > 1) {\n"
        "        console.log( n );\n"
        "    }\n"
        "}());\n"
    )
    assert res.source_map.sources == ("prog.src",)
    assert [(m.generated_line, m.source_line) for m in res.mappings] == [(1, 1), (2, 2), (3, 3), (4, 4), (5, 5), (6, 6)]


def test_compile_file_falls_back_to_file_name(tmp_path: Path) -> None:
    p = _write(tmp_path, PROGRAM, name="bare.json")
    assert compile_file(p).source_map.sources == ("bare.json",)
    assert compile_file(p, file="override.src").source_map.sources == ("override.src",)


def test_compile_file_embeds_sources(tmp_path: Path) -> None:
    (tmp_path / "prog.src").write_text("int n = 2\n", encoding="utf-8")
    p = _write(tmp_path, {"source": "prog.src", "program": PROGRAM})
    res = compile_file(p, embed_sources=True)
    assert res.source_map.to_dict()["sourcesContent"] == ["int n = 2\n"]


def test_invalid_json_is_format_error(tmp_path: Path) -> None:
    p = tmp_path / "broken.json"
    p.write_text("{", encoding="utf-8")
    with pytest.raises(AstFormatError) as e:
        compile_file(p)
    assert "invalid JSON" in str(e.value)


def test_cli_prints_code(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    p = _write(tmp_path, {"source": "prog.src", "program": PROGRAM})
    assert main([str(p)]) == 0
    assert capsys.readouterr().out.startswith("(function() {\n    var n = 2;\n")


def test_cli_writes_code_and_map(tmp_path: Path) -> None:
    p = _write(tmp_path, {"source": "prog.src", "program": PROGRAM})
    out = tmp_path / "prog.js"
    assert main([str(p), "-o", str(out), "--source-root", "src/"]) == 0

    code = out.read_text(encoding="utf-8")
    assert code.endswith("}());\n//# sourceMappingURL=prog.js.map\n")
    payload = json.loads((tmp_path / "prog.js.map").read_text(encoding="utf-8"))
    assert payload["version"] == 3
    assert payload["file"] == "prog.js"
    assert payload["sourceRoot"] == "src/"
    assert payload["sources"] == ["prog.src"]
    assert payload["names"] == []


def test_cli_no_map(tmp_path: Path) -> None:
    p = _write(tmp_path, {"source": "prog.src", "program": PROGRAM})
    out = tmp_path / "prog.js"
    assert main([str(p), "-o", str(out), "--no-map"]) == 0
    assert "sourceMappingURL" not in out.read_text(encoding="utf-8")
    assert not (tmp_path / "prog.js.map").exists()


def test_cli_prints_mappings(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    p = _write(tmp_path, {"source": "prog.src", "program": PROGRAM})
    assert main([str(p), "--mappings"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "1:0 -> prog.src:1:0"
    assert lines[3] == "4:8 -> prog.src:4:8"


def test_cli_reports_malformed_node(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    body = [
        {
            "kind": "If",
            "line": 2,
            "column": 4,
            "predicate": "x",
            "then": [],
            "else_node": {"kind": "Else", "line": 3, "column": 4},
            "end": {"line": 4, "column": 4},
        }
    ]
    p = _write(tmp_path, {"source": "bad.src", "program": dict(PROGRAM, body=body)})
    assert main([str(p)]) == 1
    assert "bad.src:2:4: else branch is incomplete" in capsys.readouterr().err


@pytest.mark.parametrize(("flags", "level"), [([], logging.WARNING), (["-v"], logging.INFO), (["-vv"], logging.DEBUG)])
def test_cli_verbosity_sets_log_level(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, flags: list[str], level: int
) -> None:
    seen: dict[str, object] = {}
    monkeypatch.setattr(logging, "basicConfig", lambda **kw: seen.update(kw))
    p = _write(tmp_path, {"source": "prog.src", "program": PROGRAM})
    assert main([str(p), "--mappings", *flags]) == 0
    assert seen["level"] == level


def test_cli_embeds_sources(tmp_path: Path) -> None:
    (tmp_path / "prog.src").write_text("int n = 2\nif n > 1\n", encoding="utf-8")
    p = _write(tmp_path, {"source": "prog.src", "program": PROGRAM})
    out = tmp_path / "prog.js"
    assert main([str(p), "-o", str(out), "--embed-sources"]) == 0
    payload = json.loads((tmp_path / "prog.js.map").read_text(encoding="utf-8"))
    assert payload["sourcesContent"] == ["int n = 2\nif n > 1\n"]
