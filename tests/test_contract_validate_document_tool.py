from __future__ import annotations

import json
import subprocess
import sys
from pathlib import Path

from ganttkit.tools.validate_document import main

REPO_ROOT = Path(__file__).resolve().parents[1]


def test_validate_tool_accepts_legacy_export(tmp_path: Path, capsys):
    src = tmp_path / "legacy.json"
    src.write_text(json.dumps({"projectName": "X", "tasks": [{"id": "t", "segments": []}]}), encoding="utf-8")
    out = tmp_path / "upgraded.json"
    assert main(["--in", str(src), "--write-json", str(out)]) == 0
    assert "[ganttkit-validate] OK" in capsys.readouterr().out
    assert json.loads(out.read_text(encoding="utf-8"))["schemaVersion"] == 1

    assert main(["--in", str(src), "--strict"]) == 3
    assert "schemaVersion must be 1" in capsys.readouterr().err


def test_validate_tool_reports_errors(tmp_path: Path, capsys):
    bad = tmp_path / "dup.json"
    seg = {"id": "s", "type": "range", "startDate": "2024-01-01", "endDate": "2024-01-02"}
    bad.write_text(json.dumps({"tasks": [{"id": "a", "segments": [seg]}, {"id": "b", "segments": [seg]}]}), encoding="utf-8")
    assert main(["--in", str(bad)]) == 3
    err = capsys.readouterr().err
    assert "[ganttkit-validate] FAIL" in err
    assert "id duplicated: 's'" in err

    assert main(["--in", str(tmp_path / "missing.json")]) == 2
    newer = tmp_path / "newer.json"
    newer.write_text(json.dumps({"schemaVersion": 7}), encoding="utf-8")
    assert main(["--in", str(newer)]) == 2


def test_validate_tool_runs_as_module(tmp_path: Path):
    src = tmp_path / "doc.json"
    src.write_text("{}", encoding="utf-8")
    cmd = [sys.executable, "-m", "ganttkit.tools.validate_document", "--in", str(src)]
    p = subprocess.run(cmd, cwd=str(REPO_ROOT), capture_output=True, text=True)
    combined = (p.stdout or "") + "\n" + (p.stderr or "")
    assert p.returncode == 0, combined
    assert "[ganttkit-validate] OK" in combined
