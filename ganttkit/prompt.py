# ganttkit/prompt.py
"""User-text-input collaborator.

`prompt` returns None when the user cancels; callers roll back any
provisional change in that case.
"""
from __future__ import annotations

import sys
from typing import Iterable, List, Optional, Protocol, TextIO


class Prompter(Protocol):
    def prompt(self, message: str, default: str = "") -> Optional[str]:
        ...

    def confirm(self, message: str) -> bool:
        ...

    def notify(self, message: str) -> None:
        ...


class ConsolePrompter:
    """Prompts on a terminal. EOF (Ctrl-D) counts as cancel."""

    def __init__(self, stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None, *, assume_yes: bool = False):
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout
        self.assume_yes = assume_yes

    def _readline(self) -> Optional[str]:
        line = self.stdin.readline()
        if line == "":
            return None
        return line.rstrip("\r\n")

    def prompt(self, message: str, default: str = "") -> Optional[str]:
        hint = f" [{default}]" if default else ""
        self.stdout.write(f"{message}{hint} ")
        self.stdout.flush()
        line = self._readline()
        if line is None:
            return None
        return line if line != "" else default

    def confirm(self, message: str) -> bool:
        if self.assume_yes:
            return True
        self.stdout.write(f"{message} [y/N] ")
        self.stdout.flush()
        line = self._readline()
        return (line or "").strip().lower() in ("y", "yes")

    def notify(self, message: str) -> None:
        self.stdout.write(message + "\n")
        self.stdout.flush()


class ScriptedPrompter:
    """Answers from a script; an exhausted script behaves like cancel / "no"."""

    def __init__(self, answers: Iterable[Optional[str]] = (), confirms: Iterable[bool] = ()):
        self.answers: List[Optional[str]] = list(answers)
        self.confirms: List[bool] = list(confirms)
        self.notices: List[str] = []
        self.asked: List[str] = []

    def prompt(self, message: str, default: str = "") -> Optional[str]:
        self.asked.append(message)
        if not self.answers:
            return None
        return self.answers.pop(0)

    def confirm(self, message: str) -> bool:
        self.asked.append(message)
        if not self.confirms:
            return False
        return bool(self.confirms.pop(0))

    def notify(self, message: str) -> None:
        self.notices.append(message)
