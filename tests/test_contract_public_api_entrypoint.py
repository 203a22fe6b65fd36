from __future__ import annotations

import datetime as dt
import json
import tempfile
import unittest
from pathlib import Path

TODAY = dt.date(2024, 1, 15)


class TestPublicApiEntrypointContract(unittest.TestCase):
    def test_load_and_normalize_exported_document(self) -> None:
        from ganttkit import DocumentValidationError, load_document_from_json, normalize_document

        raw = {
            "projectName": "Exported",
            "settings": {"startDate": "2024-01-01", "endDate": "2024-01-31", "holidays": []},
            "tasks": [{"id": "task_1", "segments": [{"id": "seg_1", "startDate": "2024-01-02", "endDate": "2024-01-03"}]}],
        }
        with tempfile.TemporaryDirectory() as td:
            p = Path(td) / "plan.json"
            p.write_text(json.dumps(raw), encoding="utf-8")
            doc = load_document_from_json(p, today=TODAY)
        self.assertEqual(doc.project_name, "Exported")
        self.assertEqual(doc.tasks[0].segments[0].end_date, "2024-01-03")

        norm = normalize_document(raw, today=TODAY)
        self.assertEqual(normalize_document(norm, today=TODAY), norm)

        broken = dict(raw, tasks=[{"id": "", "segments": []}])
        with self.assertRaises(DocumentValidationError):
            normalize_document(broken)
        with self.assertRaises(TypeError):
            normalize_document([])  # type: ignore[arg-type]

    def test_open_editor_uses_configured_paths(self) -> None:
        from ganttkit import EditorConfig, open_editor

        with tempfile.TemporaryDirectory() as td:
            cfg = EditorConfig(db_path=str(Path(td) / "p.sqlite3"), json_path=str(Path(td) / "p.json"))
            ed = open_editor(cfg, today=TODAY)
            ed.add_task()
            ed.close()
            self.assertTrue((Path(td) / "p.sqlite3").exists())
            again = open_editor(cfg, today=TODAY)
            self.assertEqual(len(again.document.tasks), 2)
            again.close()


if __name__ == "__main__":
    unittest.main(verbosity=2)
