"""Conan integration: manifest detection and generated CMake presets."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable, List, Mapping
import json

from .commands import Command
from .context import Notifier, Prompter
from .errors import ParseFailureError, UserInputError


class PresetPhase(str, Enum):
    CONFIGURE = "configure"
    BUILD = "build"
    TEST = "test"


@dataclass(frozen=True, slots=True)
class Preset:
    name: str
    phase: PresetPhase


@dataclass(frozen=True, slots=True)
class ConanProtocol:
    """File naming conventions of one Conan generation."""

    manifests: tuple[str, ...]
    presets_pattern: str
    toolchain_pattern: str
    vendor_key: str
    phase_keys: Mapping[PresetPhase, str]


CONAN_V2 = ConanProtocol(
    manifests=("conanfile.py", "conanfile.txt"),
    presets_pattern="*CMakePresets.json",
    toolchain_pattern="*conan_toolchain.cmake",
    vendor_key="conan",
    phase_keys={
        PresetPhase.CONFIGURE: "configurePresets",
        PresetPhase.BUILD: "buildPresets",
        PresetPhase.TEST: "testPresets",
    },
)


def _first_match(root: Path, pattern: str) -> Path | None:
    if not root.is_dir():
        return None
    matches = sorted(path for path in root.rglob(pattern) if path.is_file())
    return matches[0] if matches else None


class DependencyResolver:
    def __init__(
        self,
        *,
        console: Notifier,
        prompter: Prompter,
        protocol: ConanProtocol = CONAN_V2,
        command: str = "conan",
    ) -> None:
        self._console = console
        self._prompter = prompter
        self._protocol = protocol
        self._command = command

    def manifest_present(self, working_dir: Path) -> bool:
        return any((working_dir / name).is_file() for name in self._protocol.manifests)

    def dependencies_installed_hint(self, build_dir: Path) -> bool:
        """Guess whether ``conan install`` already ran for ``build_dir``.

        This is a heuristic only: it reports ``True`` as soon as the build
        directory holds any entry. A stale partial tree gives a false
        positive and dependencies installed elsewhere give a false negative.
        """

        if not build_dir.is_dir():
            return False
        return any(True for _ in build_dir.iterdir())

    def find_presets_file(self, build_dir: Path) -> Path | None:
        return _first_match(build_dir, self._protocol.presets_pattern)

    def find_toolchain_file(self, build_dir: Path) -> Path | None:
        return _first_match(build_dir, self._protocol.toolchain_pattern)

    def list_presets(self, build_dir: Path, phase: PresetPhase) -> List[Preset] | None:
        """Return presets for ``phase`` or ``None`` when Conan generated none."""

        presets_file = self.find_presets_file(build_dir)
        if presets_file is None:
            self._console.info("No CMakePresets generated from conan")
            return None

        try:
            with presets_file.open("r", encoding="utf-8") as handle:
                data: Any = json.load(handle)
        except (OSError, ValueError) as exc:
            raise ParseFailureError(f'Unable to read "{presets_file}": {exc}') from exc

        vendor = data.get("vendor") if isinstance(data, Mapping) else None
        if not isinstance(vendor, Mapping) or self._protocol.vendor_key not in vendor:
            self._console.info("CMakePresets not vendored by conan")
            return None

        phase_key = self._protocol.phase_keys[phase]
        raw_presets = data.get(phase_key)
        if raw_presets is None:
            raw_presets = []
        if not isinstance(raw_presets, list):
            raise ParseFailureError(f'Preset file "{presets_file}" has a non-array "{phase_key}" entry')
        presets: List[Preset] = []
        for entry in raw_presets:
            if not isinstance(entry, Mapping) or not isinstance(entry.get("name"), str):
                raise ParseFailureError(f'Preset file "{presets_file}" contains a malformed entry: {entry!r}')
            presets.append(Preset(name=entry["name"], phase=phase))
        return presets

    def preset_for_phase(self, build_dir: Path, phase: PresetPhase) -> str | None:
        presets = self.list_presets(build_dir, phase)
        if not presets:
            return None
        if len(presets) == 1:
            return presets[0].name

        names = [preset.name for preset in presets]
        choice = self._prompter.choose(f"Select a {phase.value} preset:", names)
        if choice is None or not 0 <= choice < len(names):
            raise UserInputError(f"No valid {phase.value} preset selected from: {', '.join(names)}")
        return names[choice]

    def install_command(self, build_type: str, after_success: Callable[[], None] | None = None) -> Command:
        return Command(
            cmd=self._command,
            args=["install", ".", "--build", "missing", "-s", f"build_type={build_type}"],
            after_success=after_success,
        )


__all__ = ["CONAN_V2", "ConanProtocol", "DependencyResolver", "Preset", "PresetPhase"]
