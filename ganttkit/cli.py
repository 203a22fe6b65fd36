from __future__ import annotations

import argparse
import datetime as dt
import json
import os
import sys
from dataclasses import asdict, replace
from pathlib import Path
from typing import List, Optional

from .aggregate import format_total
from .config import config_from_env
from .editor import Editor
from .export import day_view_csv, day_view_totals_line, outlook_csv, write_csv
from .persist import STATUS_FAILED, DataManager, JsonFileStore, SqliteStore
from .prompt import ConsolePrompter
from .render import render_text
from .util.console import warn
from .util.dates import is_iso, try_parse_iso
from .util.tz import normalize_tz_name, today_in


def _die(msg: str, rc: int = 2) -> int:
    print(f"[ganttkit] ERROR: {msg}", file=sys.stderr)
    return rc


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="ganttkit", description="Day-granular Gantt plan editor (terminal front-end).")
    ap.add_argument("--db", default=os.getenv("GANTTKIT_DB") or None, help="sqlite store path (default: env GANTTKIT_DB or ~/.ganttkit/ganttkit.sqlite3)")
    ap.add_argument("--json", dest="json_path", default=os.getenv("GANTTKIT_JSON") or None, help="Fallback JSON store path (default: env GANTTKIT_JSON or ~/.ganttkit/ganttkit.json)")
    ap.add_argument(
        "--tz",
        default=os.getenv("GANTTKIT_TZ", "local"),
        help="Timezone that decides 'today' (default: env GANTTKIT_TZ or 'local')",
    )
    ap.add_argument("--today", default=None, help="Override today's date YYYY-MM-DD")
    ap.add_argument("--yes", "-y", action="store_true", help="Answer yes to confirmations")

    sub = ap.add_subparsers(dest="cmd", required=True)

    p = sub.add_parser("init", help="Create the store (or report the existing plan)")
    p.add_argument("--start", default=None, help="Range start YYYY-MM-DD")
    p.add_argument("--end", default=None, help="Range end YYYY-MM-DD")
    p.add_argument("--holidays", default=None, help="Comma-separated holiday dates")
    p.add_argument("--name", default=None, help="Project name")

    p = sub.add_parser("show", help="Print the chart as text")
    p.add_argument("--columns", type=int, default=None, help="Number of day columns to print")
    p.add_argument("--from", dest="from_date", default=None, help="First day to print YYYY-MM-DD")
    p.add_argument("--all", action="store_true", help="Include hidden rows")

    sub.add_parser("layout", help="Dump computed geometry as JSON")
    sub.add_parser("totals", help="Print per-day planned totals")

    p = sub.add_parser("day", help="Print the work scheduled on one day")
    p.add_argument("--date", default=None, help="Day YYYY-MM-DD (default: today)")

    p = sub.add_parser("export-json", help="Write the plan to a timestamped JSON file")
    p.add_argument("--out-dir", default=".", help="Output directory (default: .)")

    p = sub.add_parser("import-json", help="Replace the plan with a JSON export")
    p.add_argument("path", help="Exported JSON file")

    for name in ("export-csv", "export-outlook"):
        p = sub.add_parser(name, help="Write one day's work as CSV" if name == "export-csv" else "Write one day's work as an Outlook calendar CSV")
        p.add_argument("--date", default=None, help="Day YYYY-MM-DD (default: today)")
        p.add_argument("--out", required=True, help="Output CSV path")

    p = sub.add_parser("add-task", help="Append a row")
    p.add_argument("--label1", default="")
    p.add_argument("--label2", default="")
    p.add_argument("--label3", default="")

    p = sub.add_parser("add-segment", help="Add a bar to a row")
    p.add_argument("--task", required=True, help="Task id")
    p.add_argument("--start", required=True, help="Start YYYY-MM-DD")
    p.add_argument("--end", required=True, help="End YYYY-MM-DD")
    p.add_argument("--label", default="New work")
    return ap


def _resolve_today(args: argparse.Namespace) -> dt.date:
    if args.today:
        d = try_parse_iso(args.today)
        if d is None:
            raise ValueError(f"Invalid --today value: {args.today!r}")
        return d
    return today_in(args.tz)


def _open(args: argparse.Namespace, today: dt.date) -> Editor:
    cfg = config_from_env()
    cfg = replace(
        cfg,
        tz=normalize_tz_name(args.tz),
        db_path=args.db or cfg.db_path,
        json_path=args.json_path or cfg.json_path,
    )
    dm = DataManager(SqliteStore(cfg.resolved_db_path()), JsonFileStore(cfg.resolved_json_path()))
    prompter = ConsolePrompter(assume_yes=bool(args.yes))
    return Editor.open(dm, prompter=prompter, config=cfg, today=today)


def _day_arg(value: Optional[str], today: dt.date) -> str:
    if value is None:
        return today.isoformat()
    if not is_iso(value):
        raise ValueError(f"Invalid --date value: {value!r}")
    return value


def _cmd_init(ed: Editor, args: argparse.Namespace) -> int:
    if args.name:
        ed.set_project_name(args.name)
    if args.start or args.end or args.holidays is not None:
        st = ed.document.settings
        ed.prompter = ConsolePrompter(assume_yes=True)
        ok = ed.update_settings(
            args.start or st.start_date,
            args.end or st.end_date,
            args.holidays if args.holidays is not None else st.holidays,
        )
        if not ok:
            return _die("Dates must be YYYY-MM-DD")
    where = "fallback" if ed.data_manager.using_fallback else "primary"
    print(f"[ganttkit] OK: {ed.document.project_name} ({ed.timeline.range_label()}) [{where} store]")
    return 0


def _cmd_show(ed: Editor, args: argparse.Namespace) -> int:
    start = 0
    if args.from_date:
        start = ed.timeline.date_to_index(args.from_date)
        if start == -1:
            return _die(f"--from {args.from_date} is outside {ed.timeline.range_label()}")
    sys.stdout.write(render_text(ed.document, ed.timeline, ed.layout(), ed.config, columns=args.columns, start_index=start, show_hidden=args.all))
    return 0


def _cmd_totals(ed: Editor) -> int:
    for iso, v in ed.daily_totals().items():
        text = format_total(v)
        if text:
            print(f"{iso}\t{text}")
    return 0


def _cmd_day(ed: Editor, iso: str) -> int:
    view = ed.day_view(iso)
    if view.is_empty:
        print(f"No work scheduled on {iso}.")
        return 0
    for r in view.rows:
        print("\t".join([r.labels[0], r.labels[1], r.labels[2], r.description, r.plan, r.actual]))
    print(day_view_totals_line(view))
    return 0


def _cmd_export_day(ed: Editor, iso: str, out: str, *, outlook: bool) -> int:
    view = ed.day_view(iso)
    if view.is_empty:
        return _die(f"No work scheduled on {iso}", rc=1)
    text = outlook_csv(view) if outlook else day_view_csv(view, ed.document.header_labels)
    print(write_csv(text, Path(out)))
    return 0


def main(argv: List[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    try:
        today = _resolve_today(args)
    except ValueError as e:
        return _die(str(e))

    ed = _open(args, today)
    try:
        cmd = args.cmd
        if cmd == "init":
            return _cmd_init(ed, args)
        if cmd == "show":
            return _cmd_show(ed, args)
        if cmd == "layout":
            print(json.dumps(asdict(ed.layout()), ensure_ascii=False, indent=2))
            return 0
        if cmd == "totals":
            return _cmd_totals(ed)
        if cmd in ("day", "export-csv", "export-outlook"):
            try:
                iso = _day_arg(args.date, today)
            except ValueError as e:
                return _die(str(e))
            if cmd == "day":
                return _cmd_day(ed, iso)
            return _cmd_export_day(ed, iso, args.out, outlook=cmd == "export-outlook")
        if cmd == "export-json":
            print(ed.export_json(args.out_dir))
            return 0
        if cmd == "import-json":
            if not ed.import_json(args.path):
                return _die(f"Import of {args.path} was not applied", rc=1)
            return 0
        if cmd == "add-task":
            task = ed.add_task()
            if args.label1 or args.label2 or args.label3:
                ed.set_task_labels(task.id, (args.label1, args.label2, args.label3))
            print(task.id)
            return 0
        if cmd == "add-segment":
            seg = ed.add_segment(args.task, args.start, args.end, label=args.label)
            if seg is None:
                return _die(f"Unknown task {args.task!r} or invalid dates")
            print(seg.id)
            return 0
        return _die(f"Unknown command: {cmd}")
    finally:
        ed.close()
        if ed.data_manager.status == STATUS_FAILED:
            warn("the last save did not complete")


if __name__ == "__main__":
    raise SystemExit(main())
