#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List

from ganttkit.export import read_document_json
from ganttkit.schema import LATEST_SCHEMA_VERSION, upgrade_document
from ganttkit.validate import validate_document


def _die(msg: str, rc: int = 2) -> int:
    print(f"[ganttkit-validate] ERROR: {msg}", file=sys.stderr)
    return rc


def _declared_schema(doc: Dict[str, Any]) -> int:
    v = doc.get("schemaVersion")
    return int(v) if isinstance(v, int) else 0


def main(argv: List[str] | None = None) -> int:
    ap = argparse.ArgumentParser(
        prog="ganttkit-validate",
        description=(
            "Validate a ganttkit document JSON file.\n"
            "By default a document without schemaVersion is upgraded before validation;\n"
            "use --strict to validate the file exactly as written."
        ),
    )
    ap.add_argument("--in", dest="in_json", required=True, help="Input document JSON path")
    ap.add_argument("--strict", action="store_true", help="Validate as-is (no upgrade of legacy documents)")
    ap.add_argument(
        "--write-json",
        default=None,
        help="Write the upgraded document JSON to this path",
    )
    ns = ap.parse_args(argv)

    p = Path(ns.in_json)
    if not p.exists():
        return _die(f"Missing JSON file: {p}")
    try:
        raw = read_document_json(p)
    except (OSError, ValueError) as e:
        return _die(f"Failed to load JSON document: {p} ({e})")

    declared = _declared_schema(raw)
    if declared > LATEST_SCHEMA_VERSION:
        return _die(f"Unsupported schemaVersion: {declared} (latest={LATEST_SCHEMA_VERSION})")

    doc = raw
    if not ns.strict:
        try:
            doc = upgrade_document(raw)
        except (TypeError, ValueError) as e:
            return _die(f"Failed to upgrade document: {p} ({e})")

    if ns.write_json:
        outp = Path(ns.write_json)
        outp.parent.mkdir(parents=True, exist_ok=True)
        outp.write_text(json.dumps(doc, ensure_ascii=False, indent=2, sort_keys=True) + "\n", encoding="utf-8", newline="\n")

    errs = validate_document(doc, label=f"json:{p}")
    if errs:
        print("[ganttkit-validate] FAIL", file=sys.stderr)
        for e in errs:
            print(f"  - {e}", file=sys.stderr)
        return 3

    print("[ganttkit-validate] OK")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
