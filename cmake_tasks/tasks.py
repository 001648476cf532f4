"""Task pipelines producing CMake, Conan and launch commands."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from functools import partial, wraps
from pathlib import Path
from typing import Any, Callable, Dict, List, TypeVar
import re

from .commands import Command, CompileCommandsSync, Notice
from .conan import DependencyResolver, PresetPhase
from .config_loader import BuildConfig
from .context import InvocationContext, Notifier, Prompter
from .errors import ConfigStateError, DependencyStateError, NotFoundError, TaskError
from .file_api import FileApiClient
from .paths import resolve_build_dir
from .targets import TargetCatalog, require_build_dir

_T = TypeVar("_T")

_ARGUMENT_SEPARATOR = re.compile(r" +")


class TaskKind(str, Enum):
    GET_DEPS = "get_deps"
    CONFIGURE = "configure"
    BUILD = "build"
    BUILD_ALL = "build_all"
    RUN = "run"
    DEBUG = "debug"
    CLEAN = "clean"
    OPEN_BUILD_DIR = "open_build_dir"

    @classmethod
    def parse(cls, value: str) -> "TaskKind":
        try:
            return cls(value)
        except ValueError:
            choices = ", ".join(kind.value for kind in cls)
            raise ValueError(f"Unknown task '{value}'. Choose from: {choices}") from None


PIPELINES: Dict[TaskKind, tuple[str, ...]] = {
    TaskKind.GET_DEPS: ("get_deps",),
    TaskKind.CONFIGURE: ("configure",),
    TaskKind.BUILD: ("build",),
    TaskKind.BUILD_ALL: ("build_all",),
    TaskKind.RUN: ("build", "run"),
    TaskKind.DEBUG: ("build", "debug"),
    TaskKind.CLEAN: ("clean",),
    TaskKind.OPEN_BUILD_DIR: ("open_build_dir",),
}
"""Ordered steps per task; the host runs the next step only after success."""


@dataclass(slots=True)
class Step:
    name: str
    factory: Callable[[], Command | None]

    def resolve(self) -> Command | None:
        return self.factory()


@dataclass(slots=True)
class TaskPipeline:
    kind: TaskKind
    config: BuildConfig
    steps: List[Step] = field(default_factory=list)

    def step_names(self) -> List[str]:
        return [step.name for step in self.steps]

    def __len__(self) -> int:
        return len(self.steps)


def _reported(step: Callable[..., _T]) -> Callable[..., _T | None]:
    """Turn :class:`TaskError` raised by ``step`` into a console error and ``None``."""

    @wraps(step)
    def wrapper(self: "TaskBuilder", *args: Any, **kwargs: Any) -> _T | None:
        try:
            return step(self, *args, **kwargs)
        except TaskError as exc:
            self.console.error(str(exc))
            return None

    return wrapper


class TaskBuilder:
    def __init__(
        self,
        *,
        context: InvocationContext,
        console: Notifier,
        prompter: Prompter,
        file_api: FileApiClient | None = None,
        catalog: TargetCatalog | None = None,
        conan: DependencyResolver | None = None,
    ) -> None:
        self.context = context
        self.console = console
        self.prompter = prompter
        self.file_api = file_api or FileApiClient()
        self.catalog = catalog or TargetCatalog(self.file_api)
        self.conan = conan or DependencyResolver(console=console, prompter=prompter)

    def pipeline(self, kind: TaskKind, config: BuildConfig) -> TaskPipeline:
        """Return the steps for ``kind``; each step is resolved only when asked."""

        steps = [Step(name=name, factory=partial(getattr(self, name), config)) for name in PIPELINES[kind]]
        return TaskPipeline(kind=kind, config=config, steps=steps)

    def commands(self, kind: TaskKind, config: BuildConfig) -> List[Command] | None:
        """Resolve every step of ``kind`` up front.

        Returns ``None`` as soon as a step produces no command.
        """

        commands: List[Command] = []
        for step in self.pipeline(kind, config).steps:
            command = step.resolve()
            if command is None:
                return None
            commands.append(command)
        return commands

    def build_dir(self, config: BuildConfig) -> Path:
        return resolve_build_dir(config.build_dir_template, config.build_type.value, self.context)

    @_reported
    def target_names(self, config: BuildConfig) -> List[str]:
        return self.catalog.list_target_names(self.build_dir(config))

    def _sync_compile_commands(self, build_dir: Path) -> CompileCommandsSync:
        return CompileCommandsSync(
            build_dir=build_dir,
            working_dir=self.context.working_dir,
            os_name=self.context.os_name,
            console=self.console,
        )

    def _uses_conan(self) -> bool:
        return self.conan.manifest_present(self.context.working_dir)

    @_reported
    def get_deps(self, config: BuildConfig) -> Command | None:
        if not self._uses_conan():
            self.console.info("Conanfile does not exist. Dependencies not managed by conan")
            return None

        self.console.info("Conanfile exists! Installing dependencies...")
        return self.conan.install_command(
            config.build_type.value,
            after_success=Notice(self.console, "Installing dependencies done!"),
        )

    @_reported
    def configure(self, config: BuildConfig) -> Command:
        build_dir = self.build_dir(config)
        try:
            build_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ConfigStateError(f'Unable to create "{build_dir}": {exc}') from exc
        # Sampled before the query marker lands in the tree.
        dependencies_installed = self.conan.dependencies_installed_hint(build_dir)
        self.file_api.ensure_query(build_dir)

        args = ["-B", str(build_dir), "-D", f"CMAKE_BUILD_TYPE={config.build_type.value}"]

        if self._uses_conan():
            if not dependencies_installed:
                raise DependencyStateError(
                    "I detect an existence of a conanfile. Install the dependencies first: `cmake-tasks task get_deps`"
                )

            preset = self.conan.preset_for_phase(build_dir, PresetPhase.CONFIGURE)
            if preset is not None:
                args = ["--preset", preset]
            else:
                toolchain_file = self.conan.find_toolchain_file(build_dir)
                if toolchain_file is None:
                    raise DependencyStateError(
                        "Failed to find conan_toolchain.cmake file (Install the conan dependencies first)"
                    )
                args.append(f"-DCMAKE_TOOLCHAIN_FILE={toolchain_file}")

        return Command(cmd=config.command, args=args, after_success=self._sync_compile_commands(build_dir))

    def _build_command(self, config: BuildConfig, *, target: str | None) -> Command:
        build_dir = self.build_dir(config)
        args = ["--build", str(build_dir)]

        if self._uses_conan():
            preset = self.conan.preset_for_phase(build_dir, PresetPhase.BUILD)
            if preset is not None:
                args = ["--build", "--preset", preset]

        if target:
            args.extend(["--target", target])

        return Command(cmd=config.command, args=args, after_success=self._sync_compile_commands(build_dir))

    @_reported
    def build(self, config: BuildConfig) -> Command:
        return self._build_command(config, target=config.target)

    @_reported
    def build_all(self, config: BuildConfig) -> Command:
        return self._build_command(config, target=None)

    @_reported
    def run(self, config: BuildConfig) -> Command:
        if not config.target:
            raise ConfigStateError('No selected target, please set "target" parameter')

        build_dir = self.build_dir(config)
        require_build_dir(build_dir)

        target_path = self.catalog.resolve_executable_path(build_dir, config.target)
        if not target_path.is_file():
            raise NotFoundError(f'Selected target "{target_path}" is not built')

        args_string = self.prompter.input("Arguments: ").strip()
        args = _ARGUMENT_SEPARATOR.split(args_string) if args_string else []

        self.console.info(f"Launching: {target_path} {args_string}".rstrip())
        return Command(cmd=str(target_path), args=args, cwd=target_path.parent)

    @_reported
    def debug(self, config: BuildConfig) -> Command | None:
        if not config.build_type.debuggable:
            raise ConfigStateError(
                'For debugging your "build_type" param should be set to "Debug" or "RelWithDebInfo", '
                f'but your current build type is "{config.build_type.value}"'
            )

        command = self.run(config)
        if command is None:
            return None
        command.dap_name = config.dap_name
        return command

    @_reported
    def clean(self, config: BuildConfig) -> Command:
        build_dir = self.build_dir(config)
        return Command(
            cmd=config.command,
            args=["--build", str(build_dir), "--target", "clean"],
            after_success=self._sync_compile_commands(build_dir),
        )

    @_reported
    def open_build_dir(self, config: BuildConfig) -> Command:
        if self.context.os_name == "windows":
            opener = "start"
        elif self.context.os_name == "darwin":
            opener = "open"
        else:
            opener = "xdg-open"
        return Command(
            cmd=opener,
            args=[str(self.build_dir(config))],
            ignore_stdout=True,
            ignore_stderr=True,
        )


__all__ = ["PIPELINES", "Step", "TaskBuilder", "TaskKind", "TaskPipeline"]
