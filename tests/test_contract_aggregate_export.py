from __future__ import annotations

import datetime as dt
import json
from pathlib import Path

from ganttkit.aggregate import daily_totals, day_view, format_total, parse_number
from ganttkit.export import (
    day_view_csv,
    encode_csv,
    export_filename,
    outlook_csv,
    read_document_json,
    write_csv,
    write_document_json,
)
from ganttkit.model import KIND_POINT, Document, Segment, Settings, Task
from ganttkit.sync import document_to_dict
from ganttkit.timeline import build_timeline


def _doc() -> Document:
    return Document(
        settings=Settings("2024-01-01", "2024-01-05"),
        tasks=[
            Task(
                id="t1",
                labels=("API", "kim", "8"),
                segments=[
                    Segment(
                        id="s1",
                        start_date="2024-01-01",
                        end_date="2024-01-03",
                        label="Design",
                        daily_values={"2024-01-01": "1.5", "2024-01-02": "2", "2024-01-09": "5"},
                        daily_results={"2024-01-02": "1h"},
                    )
                ],
            ),
            Task(
                id="t2",
                is_hidden=True,
                segments=[Segment(id="s2", start_date="2024-01-01", end_date="2024-01-02", daily_values={"2024-01-01": "3"})],
            ),
            Task(
                id="t3",
                labels=("Ops", "", ""),
                segments=[
                    Segment(
                        id="s3",
                        start_date="2024-01-02",
                        end_date="2024-01-02",
                        kind=KIND_POINT,
                        label="Deploy",
                        daily_values={"2024-01-02": "0.5"},
                    )
                ],
            ),
        ],
    )


def test_parse_and_format_numbers():
    assert parse_number("1.5h") == 1.5
    assert parse_number("abc") is None
    assert parse_number(None) is None
    assert format_total(0) == ""
    assert format_total(3.0) == "3"
    assert format_total(2.5) == "2.5"
    assert format_total(120) == "99.9"


def test_daily_totals_skip_hidden_and_out_of_range_entries():
    doc = _doc()
    totals = daily_totals(doc, build_timeline("2024-01-01", "2024-01-05"))
    assert totals == {
        "2024-01-01": 1.5,
        "2024-01-02": 2.5,
        "2024-01-03": 0.0,
        "2024-01-04": 0.0,
        "2024-01-05": 0.0,
    }


def test_day_view_rows_and_sums():
    view = day_view(_doc(), "2024-01-02")
    assert [r.segment_id for r in view.rows] == ["s1", "s3"]
    assert view.total_plan == 2.5
    assert view.total_actual == 1.0
    assert view.rows[0].labels == ("API", "kim", "8")
    assert day_view(_doc(), "2024-01-04").is_empty


def test_day_view_csv_quotes_everything_with_crlf():
    text = day_view_csv(day_view(_doc(), "2024-01-02"), ("Area", "Owner", "Hours"))
    lines = text.split("\r\n")
    assert lines[0] == '"Area","Owner","Hours","Description","Plan","Actual"'
    assert lines[1] == '"API","kim","8","Design","2","1h"'
    assert lines[2] == '"Ops","","","Deploy","0.5",""'
    assert len(lines) == 3


def test_outlook_csv_stacks_half_hour_slots():
    lines = outlook_csv(day_view(_doc(), "2024-01-02")).split("\r\n")
    assert lines[0].startswith('"Subject","Start Date","Start Time"')
    assert lines[1].startswith('"API：Design","2024/01/02","8:30:00","2024/01/02","9:00:00"')
    assert lines[2].startswith('"Ops：Deploy","2024/01/02","9:00:00","2024/01/02","9:30:00"')


def test_encode_csv_prefers_shift_jis(tmp_path: Path):
    assert encode_csv("予定") == "予定".encode("cp932")
    assert encode_csv("ok \U0001F600").startswith(b"\xef\xbb\xbf")
    p = write_csv('"a"', tmp_path / "out" / "x.csv")
    assert p.read_bytes() == b'"a"'


def test_json_export_roundtrip(tmp_path: Path):
    name = export_filename("schedule", dt.datetime(2024, 1, 2, 3, 4), "json")
    assert name == "schedule_202401020304.json"
    p = write_document_json(_doc(), tmp_path / name)
    assert read_document_json(p) == document_to_dict(_doc())


def test_read_document_json_rejects_non_objects(tmp_path: Path):
    p = tmp_path / "list.json"
    p.write_text(json.dumps([1, 2]), encoding="utf-8")
    try:
        read_document_json(p)
    except ValueError as e:
        assert "JSON object" in str(e)
    else:
        raise AssertionError("expected ValueError")
