"""Error taxonomy for task resolution.

Components raise these; task steps catch :class:`TaskError`, report it and
produce no command.
"""
from __future__ import annotations


class TaskError(RuntimeError):
    """Base class for every recoverable task failure."""


class ConfigStateError(TaskError):
    """The build tree is missing or not in the state a task requires."""


class NotFoundError(TaskError):
    """A reply file or a named target could not be found."""


class TypeMismatchError(TaskError):
    """A target exists but is not of the requested kind."""


class DependencyStateError(TaskError):
    """Conan dependencies, presets or toolchain files are missing."""


class ParseFailureError(TaskError):
    """A JSON document produced by CMake or Conan could not be decoded."""


class UserInputError(TaskError):
    """An interactive choice did not yield a usable answer."""


__all__ = [
    "ConfigStateError",
    "DependencyStateError",
    "NotFoundError",
    "ParseFailureError",
    "TaskError",
    "TypeMismatchError",
    "UserInputError",
]
