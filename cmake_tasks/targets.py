"""Target lookup on top of the File API reply."""
from __future__ import annotations

from pathlib import Path
from typing import List

from .errors import ConfigStateError, NotFoundError, TypeMismatchError
from .file_api import FileApiClient

AUTOGEN_MARKER = "_autogen"


def require_build_dir(build_dir: Path) -> None:
    if not build_dir.is_dir():
        raise ConfigStateError(
            f'Build directory "{build_dir}" does not exist, you need to run "configure" task first'
        )


class TargetCatalog:
    def __init__(self, client: FileApiClient | None = None) -> None:
        self._client = client or FileApiClient()

    def list_target_names(self, build_dir: Path) -> List[str]:
        """Return target names in codemodel order, skipping generated helpers."""

        require_build_dir(build_dir)
        index = self._client.read_reply_index(self._client.reply_dir(build_dir))
        return [name for name in index.names() if AUTOGEN_MARKER not in name]

    def resolve_executable_path(self, build_dir: Path, name: str) -> Path:
        reply_dir = self._client.reply_dir(build_dir)
        index = self._client.read_reply_index(reply_dir)
        for descriptor in index.targets:
            if descriptor.name != name:
                continue
            info = self._client.read_target_info(descriptor, reply_dir)
            if not info.is_executable:
                raise TypeMismatchError(f'Specified target "{name}" is not an executable')
            if not info.artifacts:
                raise NotFoundError(f'Target "{name}" does not list any artifacts')
            artifact = info.artifacts[0]
            if not artifact.is_absolute():
                artifact = build_dir / artifact
            return artifact

        raise NotFoundError(f'Unable to find target named "{name}"')


__all__ = ["AUTOGEN_MARKER", "TargetCatalog", "require_build_dir"]
