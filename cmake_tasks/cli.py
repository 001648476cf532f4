"""Command line interface for cmake-tasks."""
from __future__ import annotations

from argparse import ArgumentParser, Namespace
from pathlib import Path
from typing import Iterable, List
import json
import sys

from .commands import Command
from .config_loader import BuildConfig, BuildType, is_cmake_project, load_build_config
from .context import Console, InvocationContext, Prompter, TerminalPrompter
from .tasks import PIPELINES, TaskBuilder, TaskKind


def _parse_arguments(argv: Iterable[str]) -> Namespace:
    parser = ArgumentParser(prog="cmake-tasks", description="CMake/Conan task command generator")
    parser.add_argument("--cwd", type=Path, default=None, help="Project directory (default: current directory)")
    parser.add_argument(
        "--log",
        "-l",
        choices=list(Console.LEVELS),
        default="info",
        help="Set log level (default: info)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list", help="List task kinds and their steps")

    targets_parser = subparsers.add_parser("targets", help="List targets known to the CMake File API")
    _add_config_arguments(targets_parser)

    task_parser = subparsers.add_parser(
        "task",
        help="Print the commands of a task as JSON",
        description=(
            "Print the commands of a task as JSON. Without --step every step is resolved up front, "
            "so 'run' and 'debug' need an already built artifact; on a fresh tree request "
            "--step 1 (build), run it, then request --step 2."
        ),
    )
    task_parser.add_argument("kind", choices=[kind.value for kind in TaskKind], help="Task to resolve")
    task_parser.add_argument(
        "--step",
        type=int,
        default=None,
        help="Resolve a single step (1-based), after the previous step has succeeded",
    )
    _add_config_arguments(task_parser)

    return parser.parse_args(list(argv))


def _add_config_arguments(parser: ArgumentParser) -> None:
    parser.add_argument("--build-type", choices=BuildType.choices(), help="Override build type")
    parser.add_argument("--build-dir", help="Override build directory template ({cwd}, {os}, {build_type})")
    parser.add_argument("--target", help="Target to build, run or debug")
    parser.add_argument("--cmd", help="Override the cmake executable")
    parser.add_argument("--dap-name", help="Debug adapter session name")


def _config_overrides(args: Namespace) -> dict:
    return {
        "build_type": args.build_type,
        "build_dir": args.build_dir,
        "target": args.target,
        "cmd": args.cmd,
        "dap_name": args.dap_name,
    }


def main(argv: Iterable[str] | None = None, *, prompter: Prompter | None = None) -> int:
    args = _parse_arguments(sys.argv[1:] if argv is None else argv)
    console = Console(level=args.log)
    context = InvocationContext.detect(args.cwd)

    if args.command == "list":
        return _handle_list()

    if not is_cmake_project(context.working_dir):
        console.error(f'No CMakeLists.txt found in "{context.working_dir}"')
        return 1

    try:
        config = load_build_config(context.working_dir, overrides=_config_overrides(args))
    except (ValueError, TypeError, OSError) as exc:
        console.error(f"Failed to load config: {exc}")
        return 1
    console.debug(f"Resolved configuration: {config}")

    builder = TaskBuilder(context=context, console=console, prompter=prompter or TerminalPrompter())
    if args.command == "targets":
        return _handle_targets(builder, config)
    if args.command == "task":
        return _handle_task(builder, config, TaskKind.parse(args.kind), args.step, console)
    raise ValueError(f"Unknown command: {args.command}")


def _handle_list() -> int:
    for kind, steps in PIPELINES.items():
        print(f"{kind.value}: {' -> '.join(steps)}")
    return 0


def _handle_targets(builder: TaskBuilder, config: BuildConfig) -> int:
    names = builder.target_names(config)
    if names is None:
        return 1
    for name in names:
        print(name)
    return 0


def _handle_task(builder: TaskBuilder, config: BuildConfig, kind: TaskKind, step: int | None, console: Console) -> int:
    commands: List[Command] | None
    if step is None:
        commands = builder.commands(kind, config)
    else:
        pipeline = builder.pipeline(kind, config)
        if not 1 <= step <= len(pipeline):
            console.error(f"Task '{kind.value}' has {len(pipeline)} step(s); --step {step} is out of range")
            return 1
        command = pipeline.steps[step - 1].resolve()
        commands = [command] if command is not None else None

    if commands is None:
        return 1
    print(json.dumps([command.to_mapping() for command in commands], indent=2))
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
