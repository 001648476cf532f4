"""Command generation for CMake and Conan project tasks."""
from __future__ import annotations

from .cli import main
from .commands import Command
from .config_loader import BuildConfig, BuildType
from .context import Console, InvocationContext
from .tasks import TaskBuilder, TaskKind

__all__ = [
    "BuildConfig",
    "BuildType",
    "Command",
    "Console",
    "InvocationContext",
    "TaskBuilder",
    "TaskKind",
    "main",
]
