from __future__ import annotations

from pathlib import Path

from ganttkit.config import CELL_WIDTH, HISTORY_LIMIT, EditorConfig, config_from_env


def test_defaults():
    cfg = config_from_env({})
    assert cfg == EditorConfig()
    assert cfg.cell_width == CELL_WIDTH == 28
    assert cfg.history_limit == HISTORY_LIMIT == 30
    assert cfg.resolved_db_path() == Path.home() / ".ganttkit" / "ganttkit.sqlite3"


def test_env_overrides(tmp_path: Path):
    cfg = config_from_env(
        {
            "GANTTKIT_DB": str(tmp_path / "x.sqlite3"),
            "GANTTKIT_JSON": str(tmp_path / "x.json"),
            "GANTTKIT_TZ": "utc",
            "GANTTKIT_HISTORY_LIMIT": "5",
        }
    )
    assert cfg.resolved_db_path() == tmp_path / "x.sqlite3"
    assert cfg.resolved_json_path() == tmp_path / "x.json"
    assert cfg.tz == "UTC"
    assert cfg.history_limit == 5


def test_bad_history_limit_is_ignored_with_warning(capsys):
    assert config_from_env({"GANTTKIT_HISTORY_LIMIT": "many"}).history_limit == 30
    assert config_from_env({"GANTTKIT_HISTORY_LIMIT": "0"}).history_limit == 30
    err = capsys.readouterr().err
    assert "[ganttkit] WARN: ignoring GANTTKIT_HISTORY_LIMIT='many'" in err
