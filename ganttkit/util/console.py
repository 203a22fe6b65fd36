# ganttkit/util/console.py
from __future__ import annotations
import sys
from typing import Any

def eprint(*args: Any) -> None:
    print(*args, file=sys.stderr)


def info(msg: str) -> None:
    eprint(f"[ganttkit] INFO: {msg}")


def warn(msg: str) -> None:
    eprint(f"[ganttkit] WARN: {msg}")
