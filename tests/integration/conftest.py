"""Shared fixtures for integration tests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

# ── Marker registration ──────────────────────────────────────────


def pytest_configure(config: pytest.Config) -> None:
    """Register the ``integration`` marker."""
    config.addinivalue_line("markers", "integration: integration tests")


# ── File creation helpers ────────────────────────────────────────


def _write_file(root: Path, rel: str, content: str) -> None:
    f = root / rel
    f.parent.mkdir(parents=True, exist_ok=True)
    f.write_text(content, encoding="utf-8")


def _write_json(root: Path, rel: str, data: dict[str, Any]) -> None:
    _write_file(root, rel, json.dumps(data, indent=2))


def _statement(line: int) -> dict[str, Any]:
    return {"start": {"line": line, "column": 0}, "end": {"line": line, "column": 10}}


# ── Project scaffolding fixtures ─────────────────────────────────

_JACOCO_XML = """\
<?xml version="1.0" encoding="UTF-8"?>
<report name="service">
  <package name="com/acme">
    <sourcefile name="Billing.java">
      <line nr="5" mi="0" ci="3" mb="0" cb="0"/>
      <line nr="6" mi="0" ci="1" mb="0" cb="0"/>
      <line nr="7" mi="2" ci="0" mb="0" cb="0"/>
      <line nr="8" mi="2" ci="0" mb="0" cb="0"/>
    </sourcefile>
  </package>
</report>
"""


@pytest.fixture()
def polyglot_project(tmp_path: Path) -> Path:
    """Create a project with Python, Java and TypeScript sources and their reports.

    Current line coverage:
      - ``src/app/core.py``: 8/10 lines (80%)
      - ``src/app/empty.py``: no coverable line
      - ``src/main/java/com/acme/Billing.java``: 2/4 lines (50%)
      - ``web/src/cart.ts``: 3/4 lines (75%)
      - ``web/src/new.ts``: not measured
    """
    _write_file(tmp_path, "src/app/core.py", "")
    _write_file(tmp_path, "src/app/empty.py", "")
    _write_file(tmp_path, "src/main/java/com/acme/Billing.java", "")
    _write_file(tmp_path, "web/src/cart.ts", "")
    _write_file(tmp_path, "web/src/new.ts", "")
    _write_file(tmp_path, "docs/index.md", "")

    _write_json(
        tmp_path,
        "coverage.json",
        {
            "meta": {"version": "7.4.0"},
            "files": {
                "src/app/core.py": {
                    "executed_lines": [1, 2, 3, 4, 5, 6, 7, 8],
                    "missing_lines": [9, 10],
                },
                "src/app/empty.py": {"executed_lines": [], "missing_lines": []},
            },
        },
    )
    _write_file(tmp_path, "target/site/jacoco/jacoco.xml", _JACOCO_XML)
    cart = str(tmp_path / "web" / "src" / "cart.ts")
    _write_json(
        tmp_path,
        "coverage/coverage-final.json",
        {
            cart: {
                "path": cart,
                "statementMap": {str(i): _statement(i + 1) for i in range(4)},
                "s": {"0": 1, "1": 4, "2": 2, "3": 0},
            }
        },
    )
    return tmp_path
