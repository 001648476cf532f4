"""Build directory template expansion."""
from __future__ import annotations

from pathlib import Path

from .context import InvocationContext

CWD_PLACEHOLDER = "{cwd}"
OS_PLACEHOLDER = "{os}"
BUILD_TYPE_PLACEHOLDER = "{build_type}"


def expand_template(template: str, *, cwd: str, os_name: str, build_type: str) -> str:
    """Substitute every ``{cwd}``, ``{os}`` and ``{build_type}`` in ``template``."""

    expanded = template.replace(CWD_PLACEHOLDER, cwd)
    expanded = expanded.replace(OS_PLACEHOLDER, os_name)
    return expanded.replace(BUILD_TYPE_PLACEHOLDER, build_type)


def resolve_build_dir(template: str, build_type: str, context: InvocationContext) -> Path:
    """Resolve ``template`` into an absolute build directory.

    The result is not validated; relative results are anchored at the
    invocation's working directory.
    """

    expanded = expand_template(
        template,
        cwd=str(context.working_dir),
        os_name=context.os_name,
        build_type=build_type,
    )
    path = Path(expanded)
    if not path.is_absolute():
        path = context.working_dir / path
    return path


__all__ = ["expand_template", "resolve_build_dir"]
