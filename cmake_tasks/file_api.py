"""CMake File API query/reply client.

Creating ``<build>/.cmake/api/v1/query/codemodel-v2`` asks CMake to write a
codemodel reply during its next configure. The reply index and per-target
documents are read back from ``<build>/.cmake/api/v1/reply``. Writing the
query must happen before a configure; reading assumes one has completed.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, List, Mapping, Sequence
import json

from .errors import ConfigStateError, NotFoundError, ParseFailureError


@dataclass(frozen=True, slots=True)
class FileApiProtocol:
    """Directory and file naming used by one version of the File API."""

    version: str
    api_root: tuple[str, ...]
    query_name: str
    index_pattern: str

    def query_dir(self, build_dir: Path) -> Path:
        return build_dir.joinpath(*self.api_root, "query")

    def reply_dir(self, build_dir: Path) -> Path:
        return build_dir.joinpath(*self.api_root, "reply")


FILE_API_V1 = FileApiProtocol(
    version="v1",
    api_root=(".cmake", "api", "v1"),
    query_name="codemodel-v2",
    index_pattern="codemodel*.json",
)


class TargetType(str, Enum):
    EXECUTABLE = "EXECUTABLE"
    STATIC_LIBRARY = "STATIC_LIBRARY"
    SHARED_LIBRARY = "SHARED_LIBRARY"
    MODULE_LIBRARY = "MODULE_LIBRARY"
    OBJECT_LIBRARY = "OBJECT_LIBRARY"
    INTERFACE_LIBRARY = "INTERFACE_LIBRARY"
    UTILITY = "UTILITY"


@dataclass(frozen=True, slots=True)
class TargetDescriptor:
    name: str
    json_file: str


@dataclass(slots=True)
class ReplyIndex:
    path: Path
    targets: List[TargetDescriptor] = field(default_factory=list)

    def names(self) -> List[str]:
        return [target.name for target in self.targets]


@dataclass(slots=True)
class TargetInfo:
    name: str
    type: str
    artifacts: List[Path] = field(default_factory=list)

    @property
    def is_executable(self) -> bool:
        return self.type == TargetType.EXECUTABLE.value

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "TargetInfo":
        name = data.get("name")
        target_type = data.get("type")
        if not isinstance(name, str) or not isinstance(target_type, str):
            raise TypeError("target document requires string 'name' and 'type'")
        artifacts: List[Path] = []
        for artifact in data.get("artifacts") or []:
            if isinstance(artifact, Mapping) and isinstance(artifact.get("path"), str):
                artifacts.append(Path(artifact["path"]))
        return cls(name=name, type=target_type, artifacts=artifacts)


def _load_json(path: Path) -> Any:
    try:
        with path.open("r", encoding="utf-8") as handle:
            return json.load(handle)
    except (OSError, ValueError) as exc:
        raise ParseFailureError(f'Unable to read "{path}": {exc}') from exc


def _parse_index(path: Path, data: Any) -> ReplyIndex:
    try:
        raw_targets: Sequence[Any] = data["configurations"][0]["targets"]
    except (KeyError, IndexError, TypeError) as exc:
        raise ParseFailureError(f'Codemodel file "{path}" has no targets for its first configuration') from exc
    if not isinstance(raw_targets, list):
        raise ParseFailureError(f'Codemodel file "{path}" lists targets as {type(raw_targets).__name__}, expected an array')

    targets: List[TargetDescriptor] = []
    for entry in raw_targets:
        if not isinstance(entry, Mapping) or "name" not in entry or "jsonFile" not in entry:
            raise ParseFailureError(f'Codemodel file "{path}" contains a malformed target entry: {entry!r}')
        targets.append(TargetDescriptor(name=str(entry["name"]), json_file=str(entry["jsonFile"])))
    return ReplyIndex(path=path, targets=targets)


class FileApiClient:
    def __init__(self, protocol: FileApiProtocol = FILE_API_V1) -> None:
        self._protocol = protocol

    @property
    def protocol(self) -> FileApiProtocol:
        return self._protocol

    def query_dir(self, build_dir: Path) -> Path:
        return self._protocol.query_dir(build_dir)

    def reply_dir(self, build_dir: Path) -> Path:
        return self._protocol.reply_dir(build_dir)

    def ensure_query(self, build_dir: Path) -> Path:
        """Create the codemodel query marker, returning its path.

        Calling this repeatedly is harmless.
        """

        query_dir = self.query_dir(build_dir)
        try:
            query_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ConfigStateError(f'Unable to create "{query_dir}": {exc}') from exc

        marker = query_dir / self._protocol.query_name
        if not marker.is_file():
            try:
                marker.touch()
            except OSError as exc:
                raise ConfigStateError(f'Unable to create "{marker}": {exc}') from exc
        return marker

    def find_index_file(self, reply_dir: Path) -> Path | None:
        if not reply_dir.is_dir():
            return None
        matches = sorted(path for path in reply_dir.glob(self._protocol.index_pattern) if path.is_file())
        return matches[0] if matches else None

    def read_reply_index(self, reply_dir: Path) -> ReplyIndex:
        index_file = self.find_index_file(reply_dir)
        if index_file is None:
            raise NotFoundError(f'Unable to find codemodel file in "{reply_dir}"')
        return _parse_index(index_file, _load_json(index_file))

    def read_target_info(self, descriptor: TargetDescriptor, reply_dir: Path) -> TargetInfo:
        target_file = reply_dir / descriptor.json_file
        data = _load_json(target_file)
        if not isinstance(data, Mapping):
            raise ParseFailureError(f'Target file "{target_file}" must contain a JSON object')
        try:
            return TargetInfo.from_mapping(data)
        except TypeError as exc:
            raise ParseFailureError(f'Target file "{target_file}" is malformed: {exc}') from exc


__all__ = [
    "FILE_API_V1",
    "FileApiClient",
    "FileApiProtocol",
    "ReplyIndex",
    "TargetDescriptor",
    "TargetInfo",
    "TargetType",
]
