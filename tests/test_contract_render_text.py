from __future__ import annotations

import datetime as dt
import unittest

from ganttkit.config import EditorConfig
from ganttkit.layout import compute_layout
from ganttkit.model import KIND_POINT, Document, Segment, Settings, Task
from ganttkit.render import GUTTER, render_text
from ganttkit.timeline import build_timeline


class TestRenderTextContract(unittest.TestCase):
    def setUp(self) -> None:
        self.cfg = EditorConfig()
        self.tl = build_timeline("2024-01-01", "2024-01-10", today=dt.date(2024, 1, 1))
        self.doc = Document(
            settings=Settings("2024-01-01", "2024-01-10"),
            project_name="Plan",
            tasks=[
                Task(
                    id="t1",
                    labels=("API", "", ""),
                    segments=[
                        Segment(id="a", start_date="2024-01-02", end_date="2024-01-05", label="Build", progress_end_date="2024-01-03"),
                        Segment(id="b", start_date="2024-01-04", end_date="2024-01-04", kind=KIND_POINT, label="Demo"),
                    ],
                ),
                Task(id="t2", labels=("Hidden", "", ""), is_hidden=True),
            ],
        )

    def _render(self, **kw) -> list:
        text = render_text(self.doc, self.tl, compute_layout(self.doc, self.tl, self.cfg), self.cfg, **kw)
        return text.splitlines()

    def test_lanes_bars_and_markers(self) -> None:
        lines = self._render()
        self.assertEqual(lines[0], "Plan  (2024-01-01 ~ 2024-01-10)")
        self.assertEqual(lines[2], " " * GUTTER + "1234567890")
        lane0, lane1 = lines[3], lines[4]
        self.assertTrue(lane0.startswith("  API"))
        self.assertEqual(lane0[GUTTER:GUTTER + 7], " [#=]..")
        self.assertTrue(lane0.endswith("  Build"))
        self.assertEqual(lane1[GUTTER:GUTTER + 4], "   o")
        self.assertTrue(lane1.endswith("Demo"))
        self.assertFalse(any("Hidden" in ln for ln in lines))

    def test_hidden_rows_on_request_and_column_window(self) -> None:
        lines = self._render(show_hidden=True, columns=3, start_index=2)
        self.assertTrue(any("Hidden" in ln for ln in lines))
        self.assertEqual(lines[2], " " * GUTTER + "345")

    def test_empty_range(self) -> None:
        empty = build_timeline("2024-01-10", "2024-01-01")
        text = render_text(self.doc, empty, compute_layout(self.doc, empty, self.cfg), self.cfg)
        self.assertEqual(text, "Plan  (empty range)\n")


if __name__ == "__main__":
    unittest.main(verbosity=2)
