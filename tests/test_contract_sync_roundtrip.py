from __future__ import annotations

import datetime as dt

from ganttkit.model import KIND_POINT, Document, Segment, Settings, Task
from ganttkit.sync import default_document, document_from_dict, document_to_dict, snapshot


def _sample() -> Document:
    return Document(
        settings=Settings("2024-01-01", "2024-02-29", ["2024-01-08"]),
        project_name="Roadmap",
        header_labels=("Area", "Owner", "Hours"),
        tasks=[
            Task(
                id="t1",
                labels=("API", "kim", "12"),
                segments=[
                    Segment(
                        id="s1",
                        start_date="2024-01-02",
                        end_date="2024-01-09",
                        label="Design",
                        progress_end_date="2024-01-04",
                        daily_values={"2024-01-02": "1.5"},
                        daily_results={"2024-01-02": "2"},
                    ),
                    Segment(id="s2", start_date="2024-01-15", end_date="2024-01-15", kind=KIND_POINT, label="Review"),
                ],
                memo="notes",
                is_done=True,
            ),
            Task(id="t2", is_hidden=True),
        ],
        freeform_memo="free text",
    )


def test_document_roundtrip_is_lossless():
    doc = _sample()
    wire = document_to_dict(doc)
    again = document_from_dict(wire)
    assert again == doc
    assert document_to_dict(again) == wire
    assert snapshot(again) == snapshot(doc)


def test_wire_shape_uses_exchange_keys():
    wire = document_to_dict(_sample())
    assert set(wire) == {"schemaVersion", "projectName", "settings", "headers", "tasks", "memo"}
    seg = wire["tasks"][0]["segments"][0]
    assert seg["type"] == "range"
    assert seg["progressEndDate"] == "2024-01-04"
    assert wire["tasks"][0]["label1"] == "API"


def test_empty_document_gets_one_task():
    doc = document_from_dict({}, today=dt.date(2024, 3, 10))
    assert len(doc.tasks) == 1
    assert doc.settings.start_date == "2024-03-01"
    assert doc.settings.end_date == "2024-05-31"


def test_default_document():
    doc = default_document(dt.date(2024, 11, 20))
    assert (doc.settings.start_date, doc.settings.end_date) == ("2024-11-01", "2025-01-31")
    assert len(doc.tasks) == 1 and doc.tasks[0].segments == []
