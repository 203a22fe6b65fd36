from __future__ import annotations

import unittest

from ganttkit import edits
from ganttkit.interaction import (
    BLOCKED,
    MOVE,
    NOTICE_PROGRESS_OTHER_ROW,
    RESIZE_LEFT,
    RESIZE_RIGHT,
    TARGET_BODY,
    Dragging,
    Idle,
    InteractionController,
    PendingStart,
    ProgressPick,
    resolve_mode,
)
from ganttkit.model import KIND_POINT, PLACEHOLDER_SEGMENT_LABEL, Document, Segment, Settings, Task
from ganttkit.timeline import build_timeline

CW = 28


def _fixture(**seg_kw):
    seg = Segment(id="s1", start_date="2024-01-01", end_date="2024-01-05", **seg_kw)
    doc = Document(
        settings=Settings("2024-01-01", "2024-01-31"),
        tasks=[Task(id="t1", segments=[seg]), Task(id="t2")],
    )
    return doc, seg


class TestDragCommitContract(unittest.TestCase):
    def test_move_rekeys_daily_values(self) -> None:
        doc, seg = _fixture(daily_values={"2024-01-02": "1"}, daily_results={"2024-01-03": "0.5"})
        ic = InteractionController(CW)
        self.assertTrue(ic.pointer_down(doc, "t1", "s1", TARGET_BODY, 100, left=14, width=112))
        self.assertEqual(ic.pointer_move(184), ("s1", 98, 112))
        # provisional geometry only; the model is untouched mid-gesture
        self.assertEqual(seg.start_date, "2024-01-01")

        commit = ic.pointer_up(doc, 184)
        self.assertIsNotNone(commit)
        self.assertEqual((commit.mode, commit.day_delta), (MOVE, 3))
        self.assertEqual((seg.start_date, seg.end_date), ("2024-01-04", "2024-01-08"))
        self.assertEqual(seg.daily_values, {"2024-01-05": "1"})
        self.assertEqual(seg.daily_results, {"2024-01-06": "0.5"})
        self.assertIsInstance(ic.state, Idle)

    def test_resize_right_clamps_to_start(self) -> None:
        doc, seg = _fixture()
        ic = InteractionController(CW)
        ic.pointer_down(doc, "t1", "s1", "right", 0)
        commit = ic.pointer_up(doc, -CW * 10)
        self.assertEqual(commit.mode, RESIZE_RIGHT)
        self.assertEqual((seg.start_date, seg.end_date), ("2024-01-01", "2024-01-01"))

    def test_resize_left_clamps_to_end(self) -> None:
        doc, seg = _fixture()
        ic = InteractionController(CW)
        ic.pointer_down(doc, "t1", "s1", "left", 0)
        commit = ic.pointer_up(doc, CW * 10)
        self.assertEqual(commit.mode, RESIZE_LEFT)
        self.assertEqual((seg.start_date, seg.end_date), ("2024-01-05", "2024-01-05"))

    def test_blocked_drag_commits_nothing(self) -> None:
        doc, seg = _fixture(progress_end_date="2024-01-03")
        ic = InteractionController(CW)
        for delta in (-3, 1, 7):
            self.assertTrue(ic.pointer_down(doc, "t1", "s1", TARGET_BODY, 200))
            self.assertEqual(ic.state.mode, BLOCKED)
            self.assertIsNone(ic.pointer_move(200 + delta * CW))
            self.assertIsNone(ic.provisional_geometry())
            self.assertIsNone(ic.pointer_up(doc, 200 + delta * CW))
            self.assertEqual((seg.start_date, seg.end_date), ("2024-01-01", "2024-01-05"))
            self.assertIsInstance(ic.state, Idle)

    def test_zero_delta_commits_nothing(self) -> None:
        doc, seg = _fixture()
        ic = InteractionController(CW)
        ic.pointer_down(doc, "t1", "s1", TARGET_BODY, 100)
        self.assertIsNone(ic.pointer_up(doc, 110))
        self.assertEqual(seg.start_date, "2024-01-01")

    def test_duplicate_pointer_down_is_ignored(self) -> None:
        doc, _seg = _fixture()
        ic = InteractionController(CW)
        self.assertTrue(ic.pointer_down(doc, "t1", "s1", TARGET_BODY, 0))
        self.assertFalse(ic.pointer_down(doc, "t1", "s1", "left", 50))
        self.assertEqual(ic.state.mode, MOVE)

    def test_unknown_segment_is_not_captured(self) -> None:
        doc, _seg = _fixture()
        ic = InteractionController(CW)
        self.assertFalse(ic.pointer_down(doc, "t1", "nope", TARGET_BODY, 0))
        self.assertIsInstance(ic.state, Idle)

    def test_day_delta_rounding(self) -> None:
        self.assertEqual(edits.day_delta(14, CW), 1)
        self.assertEqual(edits.day_delta(13.9, CW), 0)
        self.assertEqual(edits.day_delta(-14, CW), 0)
        self.assertEqual(edits.day_delta(-15, CW), -1)
        self.assertEqual(edits.day_delta(84, CW), 3)

    def test_move_with_bad_day_key_leaves_segment_unchanged(self) -> None:
        seg = Segment(id="s1", start_date="2024-01-02", end_date="2024-01-05", daily_values={"2024/01/03": "1"})
        with self.assertRaises(ValueError):
            edits.move_segment(seg, "2024-01-02", "2024-01-05", 2)
        self.assertEqual((seg.start_date, seg.end_date), ("2024-01-02", "2024-01-05"))
        self.assertEqual(seg.daily_values, {"2024/01/03": "1"})


class TestHandleLockContract(unittest.TestCase):
    def test_modes_follow_progress_lock(self) -> None:
        free = Segment(id="a", start_date="2024-01-01", end_date="2024-01-05")
        partial = Segment(id="b", start_date="2024-01-01", end_date="2024-01-05", progress_end_date="2024-01-02")
        done = Segment(id="c", start_date="2024-01-01", end_date="2024-01-05", progress_end_date="2024-01-05")
        point = Segment(id="d", start_date="2024-01-03", end_date="2024-01-03", kind=KIND_POINT)

        self.assertEqual(resolve_mode(free, "left"), RESIZE_LEFT)
        self.assertEqual(resolve_mode(free, "right"), RESIZE_RIGHT)
        self.assertEqual(resolve_mode(free, TARGET_BODY), MOVE)
        self.assertEqual(resolve_mode(partial, "left"), BLOCKED)
        self.assertEqual(resolve_mode(partial, "right"), RESIZE_RIGHT)
        self.assertEqual(resolve_mode(done, "right"), BLOCKED)
        self.assertEqual(resolve_mode(point, "left"), MOVE)


class TestBoundaryPickingContract(unittest.TestCase):
    def setUp(self) -> None:
        self.doc, self.seg = _fixture()
        self.tl = build_timeline("2024-01-01", "2024-01-31")
        self.ic = InteractionController(CW)

    def test_two_clicks_create_ordered_range(self) -> None:
        first = self.ic.click_cell(self.doc, self.tl, "t2", 9)
        self.assertEqual(first.kind, "pending")
        self.assertEqual(self.ic.pending_for("t2"), PendingStart("t2", "2024-01-10", 9))

        second = self.ic.click_cell(self.doc, self.tl, "t2", 2)
        self.assertEqual(second.kind, "created")
        seg = second.segment
        self.assertEqual((seg.start_date, seg.end_date), ("2024-01-03", "2024-01-10"))
        self.assertEqual(seg.label, PLACEHOLDER_SEGMENT_LABEL)
        self.assertIs(self.doc.task("t2").segments[-1], seg)
        self.assertIsInstance(self.ic.state, Idle)
        self.assertIsNone(self.ic.pending_for("t2"))

    def test_each_task_keeps_its_own_boundary(self) -> None:
        self.ic.click_cell(self.doc, self.tl, "t1", 1)
        self.ic.click_cell(self.doc, self.tl, "t2", 4)
        self.assertEqual(self.ic.pending_for("t1").index, 1)
        self.assertEqual(self.ic.pending_for("t2").index, 4)

        out = self.ic.click_cell(self.doc, self.tl, "t1", 3)
        self.assertEqual(out.kind, "created")
        self.assertEqual((out.segment.start_date, out.segment.end_date), ("2024-01-02", "2024-01-04"))
        self.assertIsNone(self.ic.pending_for("t1"))
        self.assertEqual(self.ic.pending_for("t2").index, 4)

    def test_cancel_one_task_or_all(self) -> None:
        self.ic.click_cell(self.doc, self.tl, "t1", 1)
        self.ic.click_cell(self.doc, self.tl, "t2", 4)
        self.assertTrue(self.ic.cancel_pending("t2"))
        self.assertFalse(self.ic.cancel_pending("t2"))
        self.assertEqual(list(self.ic.pending_starts), ["t1"])
        self.assertTrue(self.ic.cancel_pending())
        self.assertEqual(self.ic.pending_starts, {})
        self.assertFalse(self.ic.cancel_pending())

    def test_select_task_clears_every_boundary(self) -> None:
        self.ic.click_cell(self.doc, self.tl, "t1", 1)
        self.ic.click_cell(self.doc, self.tl, "t2", 5)
        self.ic.select_task("t2")
        self.assertEqual(self.ic.pending_starts, {})

    def test_boundary_survives_unrelated_drag(self) -> None:
        self.ic.click_cell(self.doc, self.tl, "t2", 4)
        self.ic.pointer_down(self.doc, "t1", "s1", TARGET_BODY, 0)
        self.assertEqual(self.ic.click_cell(self.doc, self.tl, "t2", 6).kind, "ignored")
        self.ic.pointer_up(self.doc, 0)
        self.assertEqual(self.ic.pending_for("t2").index, 4)

    def test_boundary_survives_progress_pick(self) -> None:
        self.ic.click_cell(self.doc, self.tl, "t2", 4)
        self.ic.arm_progress("s1")
        self.assertEqual(self.ic.click_cell(self.doc, self.tl, "t1", 6).kind, "progress")
        self.assertEqual(self.ic.pending_for("t2").index, 4)

    def test_progress_pick(self) -> None:
        self.ic.arm_progress("s1")
        self.assertIsInstance(self.ic.state, ProgressPick)

        rejected = self.ic.click_cell(self.doc, self.tl, "t2", 3)
        self.assertEqual(rejected.kind, "rejected")
        self.assertEqual(rejected.message, NOTICE_PROGRESS_OTHER_ROW)
        self.assertEqual(self.ic.progress_armed, "s1")

        # no ordering check against the start date
        out = self.ic.click_cell(self.doc, self.tl, "t1", 0)
        self.assertEqual(out.kind, "progress")
        self.assertEqual(self.seg.progress_end_date, "2024-01-01")
        self.assertIsInstance(self.ic.state, Idle)

    def test_out_of_range_click_is_ignored(self) -> None:
        self.assertEqual(self.ic.click_cell(self.doc, self.tl, "t1", 99).kind, "ignored")
        self.assertEqual(self.ic.click_cell(self.doc, self.tl, "zz", 1).kind, "ignored")

    def test_dragging_state_is_exclusive(self) -> None:
        self.ic.pointer_down(self.doc, "t1", "s1", TARGET_BODY, 0)
        self.assertIsInstance(self.ic.state, Dragging)
        self.ic.arm_progress("s1")
        self.assertIsInstance(self.ic.state, Dragging)


if __name__ == "__main__":
    unittest.main(verbosity=2)
