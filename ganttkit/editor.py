# ganttkit/editor.py
"""Editor session: one document, one gesture controller, one history.

Every committed edit runs the same pipeline: serialize the document,
record a history snapshot, then hand a full copy to the persistence
collaborator without waiting for it. Layout is never cached; callers ask
for `layout()` whenever they need geometry.
"""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from . import edits
from .aggregate import DayView, daily_totals, day_view
from .config import MEMO_MAX_CHARS, EditorConfig
from .export import export_filename, read_document_json, write_document_json
from .history import HistoryManager
from .interaction import ClickOutcome, CommittedEdit, InteractionController
from .layout import LayoutResult, compute_layout
from .model import (
    DEFAULT_HEADER_LABELS,
    DEFAULT_SEGMENT_LABEL,
    NEW_PROJECT_NAME,
    Document,
    Segment,
    Task,
    new_point_segment,
    new_range_segment,
    new_task,
)
from .persist import DataManager, MemoryStore
from .prompt import Prompter, ScriptedPrompter
from .sync import default_document, document_from_dict, document_to_dict
from .timeline import Timeline, build_timeline
from .util.console import warn
from .util.dates import is_iso
from .util.tz import today_in

MSG_SEGMENT_LABEL = "Enter the plan description:"
MSG_EDIT_LABEL = "Plan description:"
MSG_DAILY_VALUE = "Effort (e.g. 1, 0.5) or text:"
MSG_DAILY_VALUE_TOO_WIDE = "Enter at most 2 full-width (4 half-width) characters."
MSG_DELETE_SEGMENT = "Delete the selected plan?"
MSG_NO_ROWS = "No rows selected."
MSG_NO_ITEMS = "Select the items to delete."
MSG_CHANGE_PERIOD = "Change the period?"
MSG_INVALID_DATE = "Dates must be YYYY-MM-DD."
MSG_CLEAR_ALL = "Discard the current plan and start a new empty plan?"
MSG_IMPORT_CONFIRM = "Overwrite the current plan with the loaded data?"
MSG_IMPORT_FAILED = "Failed to load file."
MSG_DONE = "Done."

PathLike = Union[str, Path]


@dataclass
class ViewState:
    """Presentation state that survives undo/redo (not part of the document)."""

    scroll_x: float = 0.0
    scroll_y: float = 0.0


class Editor:
    def __init__(
        self,
        document: Document,
        *,
        data_manager: Optional[DataManager] = None,
        prompter: Optional[Prompter] = None,
        config: Optional[EditorConfig] = None,
        today: Optional[dt.date] = None,
    ):
        self.config = config or EditorConfig()
        self.today = today or today_in(self.config.tz)
        self.document = document
        self.data_manager = data_manager or DataManager(MemoryStore())
        self.prompter: Prompter = prompter or ScriptedPrompter()
        self.controller = InteractionController(self.config.cell_width)
        self.history = HistoryManager(self.config.history_limit, restore=self._restore_from_data)
        self.view = ViewState()
        self.timeline: Timeline = build_timeline("", "")
        self.rebuild()
        self.history.init(document_to_dict(self.document))

    @classmethod
    def open(
        cls,
        data_manager: DataManager,
        *,
        prompter: Optional[Prompter] = None,
        config: Optional[EditorConfig] = None,
        today: Optional[dt.date] = None,
    ) -> "Editor":
        """Load the stored plan (or start the default one) and prime history."""
        today = today or today_in((config or EditorConfig()).tz)
        data_manager.init()
        raw = data_manager.load()
        doc: Optional[Document] = None
        if raw is not None:
            try:
                doc = document_from_dict(raw, today=today, validate=True)
            except (TypeError, ValueError, KeyError) as ex:
                warn(f"stored document unreadable, starting a default plan: {ex}")
        fresh = doc is None
        if doc is None:
            doc = default_document(today)
        ed = cls(doc, data_manager=data_manager, prompter=prompter, config=config, today=today)
        if fresh:
            ed.data_manager.save(document_to_dict(ed.document))
        return ed

    # --- derived state -------------------------------------------------------

    def rebuild(self) -> None:
        st = self.document.settings
        self.timeline = build_timeline(st.start_date, st.end_date, st.holidays, today=self.today)

    def layout(self) -> LayoutResult:
        return compute_layout(
            self.document,
            self.timeline,
            self.config,
            pending={tid: p.index for tid, p in self.controller.pending_starts.items()},
            progress_armed=self.controller.progress_armed,
        )

    def daily_totals(self) -> Dict[str, float]:
        return daily_totals(self.document, self.timeline)

    def day_view(self, iso: str) -> DayView:
        return day_view(self.document, iso)

    def scroll_to_today(self, viewport_width: float) -> float:
        idx = self.timeline.today_index()
        if idx != -1:
            self.view.scroll_x = max(0.0, idx * self.config.cell_width - viewport_width / 2)
        return self.view.scroll_x

    # --- save pipeline -------------------------------------------------------

    def trigger_save(self) -> Dict[str, Any]:
        data = document_to_dict(self.document)
        self.history.record(data)
        self.data_manager.save(data)
        return data

    def _restore_from_data(self, data: Dict[str, Any]) -> None:
        view = ViewState(self.view.scroll_x, self.view.scroll_y)
        self.document = document_from_dict(data, today=self.today)
        self.controller.reset()
        self.rebuild()
        self.data_manager.save(data)
        self.view = view

    def undo(self) -> bool:
        return self.history.undo()

    def redo(self) -> bool:
        return self.history.redo()

    def close(self) -> None:
        self.data_manager.flush()
        self.data_manager.close()

    # --- lookups -------------------------------------------------------------

    def _segment(self, task_id: str, segment_id: str) -> Optional[Tuple[Task, Segment]]:
        task = self.document.task(task_id)
        if task is None:
            return None
        seg = task.segment(segment_id)
        if seg is None:
            return None
        return task, seg

    # --- gestures ------------------------------------------------------------

    def click_cell(self, task_id: str, index: int) -> ClickOutcome:
        out = self.controller.click_cell(self.document, self.timeline, task_id, index)
        if out.kind == "progress":
            self.trigger_save()
        elif out.kind == "rejected" and out.message:
            self.prompter.notify(out.message)
        elif out.kind == "created" and out.segment is not None:
            self._label_new_segment(task_id, out.segment)
        return out

    def click_at(self, task_id: str, x: float) -> ClickOutcome:
        return self.click_cell(task_id, self.timeline.index_at_px(x, self.config.cell_width))

    def _label_new_segment(self, task_id: str, seg: Segment) -> None:
        answer = self.prompter.prompt(MSG_SEGMENT_LABEL, DEFAULT_SEGMENT_LABEL)
        task = self.document.task(task_id)
        if answer is None:
            if task is not None:
                edits.remove_segment(task, seg.id)
            return
        seg.label = answer if answer.strip() else DEFAULT_SEGMENT_LABEL
        self.trigger_save()

    def cancel_pending(self, task_id: Optional[str] = None) -> bool:
        return self.controller.cancel_pending(task_id)

    def select_task(self, task_id: str) -> None:
        self.controller.select_task(task_id)

    def arm_progress(self, task_id: str, segment_id: str) -> bool:
        if self._segment(task_id, segment_id) is None:
            return False
        self.controller.arm_progress(segment_id)
        return True

    def pointer_down(self, task_id: str, segment_id: str, target: str, x: float) -> bool:
        geom = self.layout().geometry_for(segment_id)
        left = geom.left if geom is not None else 0.0
        width = geom.width if geom is not None else 0.0
        return self.controller.pointer_down(self.document, task_id, segment_id, target, x, left=left, width=width)

    def pointer_move(self, x: float) -> Optional[tuple]:
        return self.controller.pointer_move(x)

    def pointer_up(self, x: float) -> Optional[CommittedEdit]:
        commit = self.controller.pointer_up(self.document, x)
        if commit is not None:
            self.trigger_save()
        return commit

    # --- segment commands ----------------------------------------------------

    def edit_segment_label(self, task_id: str, segment_id: str) -> bool:
        found = self._segment(task_id, segment_id)
        if found is None:
            return False
        _task, seg = found
        answer = self.prompter.prompt(MSG_EDIT_LABEL, seg.label or "")
        if answer is None:
            return False
        seg.label = answer.strip()
        self.trigger_save()
        return True

    def set_segment_label(self, task_id: str, segment_id: str, label: str) -> bool:
        found = self._segment(task_id, segment_id)
        if found is None:
            return False
        found[1].label = label
        self.trigger_save()
        return True

    def delete_segment(self, task_id: str, segment_id: str) -> bool:
        found = self._segment(task_id, segment_id)
        if found is None or not self.prompter.confirm(MSG_DELETE_SEGMENT):
            return False
        task, _seg = found
        edits.remove_segment(task, segment_id)
        self.controller.disarm_progress(segment_id)
        self.trigger_save()
        return True

    def delete_segments(self, pairs: Sequence[Tuple[str, str]]) -> bool:
        """Bulk delete from the day view: (task_id, segment_id) pairs."""
        if not pairs:
            self.prompter.notify(MSG_NO_ITEMS)
            return False
        if not self.prompter.confirm(f"Delete {len(pairs)} item(s)?"):
            return False
        changed = False
        for task_id, segment_id in pairs:
            task = self.document.task(task_id)
            if task is not None and edits.remove_segment(task, segment_id):
                self.controller.disarm_progress(segment_id)
                changed = True
        if changed:
            self.trigger_save()
        return changed

    def edit_daily_value(self, task_id: str, segment_id: str, iso: str) -> bool:
        found = self._segment(task_id, segment_id)
        if found is None or not is_iso(iso):
            return False
        _task, seg = found
        answer = self.prompter.prompt(MSG_DAILY_VALUE, seg.daily_values.get(iso, ""))
        if answer is None:
            return False
        value = edits.accept_daily_value(answer)
        if value is None:
            self.prompter.notify(MSG_DAILY_VALUE_TOO_WIDE)
            return False
        edits.set_daily_value(seg, iso, value)
        self.trigger_save()
        return True

    def set_daily_plan(self, task_id: str, segment_id: str, iso: str, value: str) -> bool:
        found = self._segment(task_id, segment_id)
        if found is None or not is_iso(iso):
            return False
        if edits.set_daily_value(found[1], iso, value):
            self.trigger_save()
        return True

    def set_daily_result(self, task_id: str, segment_id: str, iso: str, value: str) -> bool:
        found = self._segment(task_id, segment_id)
        if found is None or not is_iso(iso):
            return False
        if edits.set_daily_result(found[1], iso, value):
            self.trigger_save()
        return True

    def add_segment(self, task_id: str, start: str, end: str, label: str = DEFAULT_SEGMENT_LABEL) -> Optional[Segment]:
        """Non-interactive creation (same ordering rule as two-click creation)."""
        task = self.document.task(task_id)
        if task is None or not (is_iso(start) and is_iso(end)):
            return None
        seg = new_range_segment(start, end, label=label)
        task.segments.append(seg)
        self.trigger_save()
        return seg

    # --- task commands -------------------------------------------------------

    def add_task(self) -> Task:
        task = new_task()
        self.document.tasks.append(task)
        self.trigger_save()
        return task

    def insert_task_after(self, task_id: str) -> Optional[Task]:
        idx = self.document.task_index(task_id)
        if idx == -1:
            return None
        task = new_task()
        self.document.tasks.insert(idx + 1, task)
        self.trigger_save()
        return task

    def add_todo_row(self, iso: str) -> Task:
        task = new_task()
        task.segments.append(new_point_segment(iso))
        self.document.tasks.append(task)
        self.trigger_save()
        return task

    def delete_tasks(self, task_ids: Iterable[str]) -> int:
        ids = {t for t in task_ids if self.document.task(t) is not None}
        if not ids:
            self.prompter.notify(MSG_NO_ROWS)
            return 0
        if not self.prompter.confirm(f"Delete {len(ids)} row(s)?"):
            return 0
        self.document.tasks = [t for t in self.document.tasks if t.id not in ids]
        for tid in ids:
            self.controller.cancel_pending(tid)
        self.trigger_save()
        return len(ids)

    def move_task(self, src: int, dst: int) -> bool:
        if not edits.move_item(self.document.tasks, src, dst):
            return False
        self.trigger_save()
        return True

    def toggle_done(self, task_id: str) -> bool:
        task = self.document.task(task_id)
        if task is None:
            return False
        task.is_done = not task.is_done
        self.trigger_save()
        return task.is_done

    def set_hidden(self, task_id: str, hidden: bool) -> bool:
        task = self.document.task(task_id)
        if task is None:
            return False
        task.is_hidden = bool(hidden)
        self.trigger_save()
        return True

    def set_task_labels(self, task_id: str, labels: Sequence[str]) -> bool:
        task = self.document.task(task_id)
        if task is None or len(labels) != 3:
            return False
        task.labels = (str(labels[0]), str(labels[1]), str(labels[2]))
        self.trigger_save()
        return True

    def set_task_memo(self, task_id: str, text: str) -> str:
        task = self.document.task(task_id)
        if task is None:
            return ""
        task.memo = (text or "")[:MEMO_MAX_CHARS]
        self.trigger_save()
        return task.memo

    # --- document-level commands ---------------------------------------------

    def set_header_labels(self, labels: Sequence[str]) -> bool:
        if len(labels) != 3:
            return False
        self.document.header_labels = (str(labels[0]), str(labels[1]), str(labels[2]))
        self.trigger_save()
        return True

    def set_project_name(self, name: str) -> None:
        self.document.project_name = name
        self.trigger_save()

    def set_freeform_memo(self, text: str) -> None:
        self.document.freeform_memo = text
        self.trigger_save()

    def update_settings(self, start: str, end: str, holidays: Union[str, Iterable[str]] = ()) -> bool:
        if not (is_iso(start) and is_iso(end)):
            self.prompter.notify(MSG_INVALID_DATE)
            return False
        if isinstance(holidays, str):
            hol: List[str] = [h.strip() for h in holidays.split(",") if h.strip()]
        else:
            hol = [str(h).strip() for h in holidays if str(h).strip()]
        if not self.prompter.confirm(MSG_CHANGE_PERIOD):
            return False
        st = self.document.settings
        st.start_date, st.end_date, st.holidays = start, end, hol
        self.controller.reset()
        self.rebuild()
        self.trigger_save()
        return True

    def clear_all(self) -> bool:
        if not self.prompter.confirm(MSG_CLEAR_ALL):
            return False
        self.document = Document(
            settings=self.document.settings,
            project_name=NEW_PROJECT_NAME,
            header_labels=DEFAULT_HEADER_LABELS,
            tasks=[new_task()],
            freeform_memo="",
        )
        self.controller.reset()
        self.rebuild()
        self.trigger_save()
        return True

    # --- file exchange -------------------------------------------------------

    def export_json(self, out_dir: PathLike, *, now: Optional[dt.datetime] = None) -> Path:
        name = export_filename("schedule", now or dt.datetime.now(), "json")
        return write_document_json(self.document, Path(out_dir) / name)

    def import_json(self, path: PathLike) -> bool:
        """Replace the document with an exported file; a bad file leaves everything untouched."""
        try:
            doc = document_from_dict(read_document_json(path), today=self.today, validate=True)
        except (OSError, ValueError, TypeError, KeyError) as ex:
            warn(f"import failed for {path}: {ex}")
            self.prompter.notify(MSG_IMPORT_FAILED)
            return False
        if not self.prompter.confirm(MSG_IMPORT_CONFIRM):
            return False
        self.document = doc
        self.controller.reset()
        self.rebuild()
        self.trigger_save()
        self.prompter.notify(MSG_DONE)
        return True
