"""Tests for the Istanbul adapter (adapters/coverage/istanbul.py)."""

from __future__ import annotations

import json
from pathlib import Path

from covwatch.adapters.coverage.istanbul import IstanbulAdapter


def _write_json(root: Path, rel: str, data: object) -> Path:
    f = root / rel
    f.parent.mkdir(parents=True, exist_ok=True)
    f.write_text(json.dumps(data), encoding="utf-8")
    return f


def _stmt(line: int) -> dict[str, dict[str, int]]:
    return {"start": {"line": line, "column": 0}, "end": {"line": line, "column": 20}}


_SAMPLE_ISTANBUL_JSON = {
    "/project/src/app.ts": {
        "path": "/project/src/app.ts",
        "statementMap": {"0": _stmt(1), "1": _stmt(2), "2": _stmt(2), "3": _stmt(4)},
        "s": {"0": 3, "1": 0, "2": 1, "3": 0},
        "fnMap": {},
        "f": {},
        "branchMap": {},
        "b": {},
    },
    "src/util.js": {
        "statementMap": {"0": _stmt(10)},
        "s": {"0": 1},
    },
}


def test_istanbul_identity() -> None:
    adapter = IstanbulAdapter()
    assert adapter.name == "istanbul"
    assert adapter.language == "javascript"


def test_istanbul_can_parse() -> None:
    adapter = IstanbulAdapter()
    assert adapter.can_parse(Path("coverage/coverage-final.json"))
    assert not adapter.can_parse(Path("coverage.json"))


def test_istanbul_detect_report(tmp_path: Path) -> None:
    report = _write_json(tmp_path, "coverage/coverage-final.json", {})
    assert IstanbulAdapter().detect(tmp_path) == [report]


def test_istanbul_detect_nothing(tmp_path: Path) -> None:
    assert IstanbulAdapter().detect(tmp_path) == []


def test_istanbul_statements_aggregate_per_line(tmp_path: Path) -> None:
    path = _write_json(tmp_path, "coverage-final.json", _SAMPLE_ISTANBUL_JSON)

    report = IstanbulAdapter().parse_coverage_file(path)

    app = report.files["/project/src/app.ts"]
    # Line 2 has one hit statement out of two, so it counts as covered
    assert [(ln.line_number, ln.execution_count) for ln in app.lines] == [(1, 3), (2, 1), (4, 0)]
    assert app.lines_to_cover == 3
    assert app.uncovered_lines == 1


def test_istanbul_path_falls_back_to_key(tmp_path: Path) -> None:
    path = _write_json(tmp_path, "coverage-final.json", _SAMPLE_ISTANBUL_JSON)

    report = IstanbulAdapter().parse_coverage_file(path)

    assert report.files["src/util.js"].lines_to_cover == 1


def test_istanbul_invalid_json(tmp_path: Path) -> None:
    path = tmp_path / "coverage-final.json"
    path.write_text("", encoding="utf-8")
    assert IstanbulAdapter().parse_coverage_file(path).files == {}
