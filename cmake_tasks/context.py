"""Invocation context and the console/prompt collaborators."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, Sequence, runtime_checkable
import platform
import sys


@dataclass(frozen=True, slots=True)
class InvocationContext:
    """Working directory and host OS tag for a single task invocation."""

    working_dir: Path
    os_name: str

    @classmethod
    def detect(cls, working_dir: Path | None = None) -> "InvocationContext":
        cwd = working_dir if working_dir is not None else Path.cwd()
        return cls(working_dir=cwd.resolve(), os_name=platform.system().lower())

    @property
    def is_windows(self) -> bool:
        return self.os_name == "windows"


@runtime_checkable
class Notifier(Protocol):
    """Minimal console interface used to report task progress and failures."""

    def info(self, message: str) -> None:
        ...

    def error(self, message: str) -> None:
        ...

    def debug(self, message: str) -> None:
        ...


class Console(Notifier):
    """Simple console output handler with configurable log level.

    Levels: none < error < info < debug
    Default: 'info'
    """

    LEVELS = {
        "none": 0,
        "error": 1,
        "info": 2,
        "debug": 3,
    }

    def __init__(self, level: str = "info"):
        if level not in self.LEVELS:
            raise ValueError(f"Unknown log level '{level}'. Choose from: {', '.join(self.LEVELS)}")
        self.level_name = level
        self.level = self.LEVELS[level]

    def info(self, message: str) -> None:
        if self.level >= self.LEVELS["info"]:
            print(f"[INFO] {message}")

    def error(self, message: str) -> None:
        if self.level >= self.LEVELS["error"]:
            print(f"[ERROR] {message}", file=sys.stderr)

    def debug(self, message: str) -> None:
        if self.level >= self.LEVELS["debug"]:
            print(f"[DEBUG] {message}")


class Prompter(Protocol):
    """Blocking interactive input used by run/debug and preset selection."""

    def input(self, prompt: str) -> str:
        ...

    def choose(self, title: str, options: Sequence[str]) -> int | None:
        """Return the zero-based index of the chosen option, or ``None``."""
        ...


class TerminalPrompter(Prompter):
    """Prompter reading answers from standard input.

    Prompts and menus go to stderr so stdout stays machine readable.
    """

    def input(self, prompt: str) -> str:
        print(prompt, end="", file=sys.stderr, flush=True)
        try:
            return input()
        except EOFError:
            return ""

    def choose(self, title: str, options: Sequence[str]) -> int | None:
        print(title, file=sys.stderr)
        for number, option in enumerate(options, start=1):
            print(f"{number}. {option}", file=sys.stderr)
        answer = self.input("Type number and <Enter>: ").strip()
        if not answer.isdigit():
            return None
        index = int(answer) - 1
        if not 0 <= index < len(options):
            return None
        return index


__all__ = ["Console", "InvocationContext", "Notifier", "Prompter", "TerminalPrompter"]
