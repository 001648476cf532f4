"""Command descriptors handed to the task host."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List
import shlex
import shutil

from .context import Notifier

COMPILE_COMMANDS = "compile_commands.json"


@dataclass(slots=True)
class Command:
    """A single external process invocation for the host to run."""

    cmd: str
    args: List[str] = field(default_factory=list)
    cwd: Path | None = None
    after_success: Callable[[], None] | None = None
    dap_name: str | None = None
    ignore_stdout: bool = False
    ignore_stderr: bool = False

    def argv(self) -> List[str]:
        return [self.cmd, *self.args]

    def format(self) -> str:
        return " ".join(shlex.quote(part) for part in self.argv())

    def to_mapping(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"cmd": self.cmd, "args": list(self.args)}
        if self.cwd is not None:
            data["cwd"] = str(self.cwd)
        if self.after_success is not None:
            data["after_success"] = str(self.after_success)
        if self.dap_name:
            data["dap_name"] = self.dap_name
        if self.ignore_stdout:
            data["ignore_stdout"] = True
        if self.ignore_stderr:
            data["ignore_stderr"] = True
        return data


@dataclass(frozen=True, slots=True)
class Notice:
    """Post-success hook that only reports a message."""

    console: Notifier
    message: str

    def __call__(self) -> None:
        self.console.info(self.message)

    def __str__(self) -> str:
        return f"notify: {self.message}"


@dataclass(frozen=True, slots=True)
class CompileCommandsSync:
    """Mirror ``compile_commands.json`` from the build tree into the project root.

    Windows gets a copy; everywhere else an existing file is replaced with a
    symlink, like ``ln -sf``.
    """

    build_dir: Path
    working_dir: Path
    os_name: str
    console: Notifier

    @property
    def source(self) -> Path:
        return self.build_dir / COMPILE_COMMANDS

    @property
    def destination(self) -> Path:
        return self.working_dir / COMPILE_COMMANDS

    def __call__(self) -> None:
        source = self.source
        destination = self.destination
        if not source.is_file():
            self.console.error(f'Unable to find "{source}", compile commands were not synchronized')
            return
        if destination.exists() and destination.resolve() == source.resolve():
            self.console.debug(f"{destination} already refers to {source}")
            return

        try:
            if self.os_name == "windows":
                shutil.copyfile(source, destination)
            else:
                if destination.is_symlink() or destination.exists():
                    destination.unlink()
                destination.symlink_to(source)
        except OSError as exc:
            self.console.error(f'Unable to synchronize "{destination}": {exc}')
            return
        self.console.debug(f"Synchronized {destination} -> {source}")

    def __str__(self) -> str:
        action = "copy" if self.os_name == "windows" else "symlink"
        return f"{action} {self.source} -> {self.destination}"


__all__ = ["COMPILE_COMMANDS", "Command", "CompileCommandsSync", "Notice"]
