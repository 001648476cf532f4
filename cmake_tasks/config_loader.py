"""Project settings loading and validation."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping
import json
import tomllib

import yaml


ConfigLoader = Callable[[Any], Mapping[str, Any]]


FILE_LOADERS: Dict[str, ConfigLoader] = {
    ".toml": lambda stream: tomllib.load(stream),
    ".json": lambda stream: json.load(stream),
    ".yaml": lambda stream: yaml.safe_load(stream),
    ".yml": lambda stream: yaml.safe_load(stream),
}
"""Mapping of file suffixes to loader callables."""

SETTINGS_STEM = ".cmake-tasks"
SETTINGS_SECTION = "cmake"

DEFAULT_SETTINGS: Dict[str, Any] = {
    "cmd": "cmake",
    "build_dir": "{cwd}/build/{os}-{build_type}",
    "build_type": "Debug",
    "dap_name": "lldb",
}


class BuildType(str, Enum):
    DEBUG = "Debug"
    RELEASE = "Release"
    REL_WITH_DEB_INFO = "RelWithDebInfo"
    MIN_SIZE_REL = "MinSizeRel"

    @classmethod
    def choices(cls) -> List[str]:
        return [member.value for member in cls]

    @property
    def debuggable(self) -> bool:
        return self in {BuildType.DEBUG, BuildType.REL_WITH_DEB_INFO}


def load_config_file(path: Path) -> Mapping[str, Any]:
    """Load and decode a configuration mapping from ``path``."""

    suffix = path.suffix.lower()
    loader = FILE_LOADERS.get(suffix)
    if loader is None:
        supported = ", ".join(sorted(FILE_LOADERS)) or "<none>"
        raise ValueError(
            f"Unsupported configuration file extension: {suffix}. Supported: {supported}"
        )

    mode = "rb" if suffix == ".toml" else "r"
    kwargs: Dict[str, Any] = {}
    if mode == "r":
        kwargs["encoding"] = "utf-8"

    with path.open(mode, **kwargs) as handle:
        data = loader(handle)

    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise TypeError(f"Configuration file '{path}' must contain a mapping at the root")

    return data


def find_settings_file(directory: Path, *, stem: str = SETTINGS_STEM) -> Path | None:
    """Return the single settings file named ``stem`` in ``directory``."""

    found: List[Path] = []
    for suffix in FILE_LOADERS:
        candidate = directory / f"{stem}{suffix}"
        if candidate.is_file():
            found.append(candidate)
    if len(found) > 1:
        names = "', '".join(path.name for path in found)
        raise ValueError(
            f"Multiple configuration files found for '{stem}': '{names}'. "
            "Only one format per configuration entry is allowed."
        )
    return found[0] if found else None


def merge_mappings(base: Mapping[str, Any], overlay: Mapping[str, Any]) -> Dict[str, Any]:
    """Deep merge two mapping objects."""

    result: Dict[str, Any] = dict(base)
    for key, value in overlay.items():
        existing = result.get(key)
        if isinstance(existing, Mapping) and isinstance(value, Mapping):
            result[key] = merge_mappings(existing, value)
        else:
            result[key] = value
    return result


def _optional_string(value: Any, *, field_name: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise TypeError(f"{field_name} must be a string")
    text = value.strip()
    return text or None


def _required_string(value: Any, *, field_name: str) -> str:
    text = _optional_string(value, field_name=field_name)
    if text is None:
        raise ValueError(f"{field_name} is required")
    return text


@dataclass(frozen=True, slots=True)
class BuildConfig:
    build_dir_template: str
    build_type: BuildType
    command: str = "cmake"
    target: str | None = None
    dap_name: str | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "BuildConfig":
        raw_build_type = _required_string(data.get("build_type"), field_name="cmake.build_type")
        try:
            build_type = BuildType(raw_build_type)
        except ValueError:
            raise ValueError(
                f"Unsupported build type '{raw_build_type}'. Choose from: {', '.join(BuildType.choices())}"
            ) from None
        return cls(
            build_dir_template=_required_string(data.get("build_dir"), field_name="cmake.build_dir"),
            build_type=build_type,
            command=_required_string(data.get("cmd"), field_name="cmake.cmd"),
            target=_optional_string(data.get("target"), field_name="cmake.target"),
            dap_name=_optional_string(data.get("dap_name"), field_name="cmake.dap_name"),
        )


def load_build_config(
    directory: Path,
    *,
    overrides: Mapping[str, Any] | None = None,
) -> BuildConfig:
    """Build a :class:`BuildConfig` from defaults, the settings file and ``overrides``.

    ``None`` values in ``overrides`` are ignored so argparse namespaces can be
    passed through unchanged.
    """

    settings: Dict[str, Any] = dict(DEFAULT_SETTINGS)
    settings_file = find_settings_file(directory)
    if settings_file is not None:
        data = load_config_file(settings_file)
        section = data.get(SETTINGS_SECTION, {})
        if not isinstance(section, Mapping):
            raise TypeError(f"[{SETTINGS_SECTION}] in '{settings_file}' must be a mapping")
        settings = merge_mappings(settings, section)

    if overrides:
        settings = merge_mappings(
            settings,
            {key: value for key, value in overrides.items() if value is not None},
        )
    return BuildConfig.from_mapping(settings)


def is_cmake_project(directory: Path) -> bool:
    return (directory / "CMakeLists.txt").is_file()


__all__ = [
    "BuildConfig",
    "BuildType",
    "ConfigLoader",
    "DEFAULT_SETTINGS",
    "FILE_LOADERS",
    "find_settings_file",
    "is_cmake_project",
    "load_build_config",
    "load_config_file",
    "merge_mappings",
]
