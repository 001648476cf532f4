"""Shared helpers for writing fake CMake and Conan trees."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence
import json

from cmake_tasks.file_api import FILE_API_V1


class RecordingConsole:
    def __init__(self) -> None:
        self.infos: List[str] = []
        self.errors: List[str] = []
        self.debugs: List[str] = []

    def info(self, message: str) -> None:
        self.infos.append(message)

    def error(self, message: str) -> None:
        self.errors.append(message)

    def debug(self, message: str) -> None:
        self.debugs.append(message)


class ScriptedPrompter:
    def __init__(self, answers: Sequence[str] = (), choice: int | None = 0) -> None:
        self.answers = list(answers)
        self.choice = choice
        self.prompts: List[str] = []
        self.choices: List[List[str]] = []

    def input(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.answers.pop(0) if self.answers else ""

    def choose(self, title: str, options: Sequence[str]) -> int | None:
        self.choices.append(list(options))
        return self.choice


def write_codemodel(build_dir: Path, targets: Mapping[str, Mapping[str, Any]]) -> Path:
    """Write a codemodel reply; ``targets`` maps names to target documents."""

    reply_dir = FILE_API_V1.reply_dir(build_dir)
    reply_dir.mkdir(parents=True, exist_ok=True)
    descriptors: List[Dict[str, str]] = []
    for number, (name, document) in enumerate(targets.items()):
        json_file = f"target-{number}-Debug-abc.json"
        body = {"name": name, **document}
        (reply_dir / json_file).write_text(json.dumps(body), encoding="utf-8")
        descriptors.append({"name": name, "jsonFile": json_file})

    index = {"configurations": [{"name": "Debug", "targets": descriptors}]}
    (reply_dir / "codemodel-v2-0123abcd.json").write_text(json.dumps(index), encoding="utf-8")
    return reply_dir


def executable(path: str) -> Dict[str, Any]:
    return {"type": "EXECUTABLE", "artifacts": [{"path": path}]}


def library(path: str, kind: str = "STATIC_LIBRARY") -> Dict[str, Any]:
    return {"type": kind, "artifacts": [{"path": path}]}


def write_conan_presets(directory: Path, presets: Mapping[str, Sequence[str]], *, vendored: bool = True) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    document: Dict[str, Any] = {"version": 3}
    if vendored:
        document["vendor"] = {"conan": {}}
    for key, names in presets.items():
        document[key] = [{"name": name} for name in names]
    path = directory / "CMakePresets.json"
    path.write_text(json.dumps(document), encoding="utf-8")
    return path
