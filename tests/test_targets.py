from __future__ import annotations

from pathlib import Path
import tempfile
import unittest

from cmake_tasks.errors import ConfigStateError, NotFoundError, TypeMismatchError
from cmake_tasks.targets import TargetCatalog

from tests.fixtures import executable, library, write_codemodel


class TargetCatalogTests(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.build_dir = Path(self.temp_dir.name) / "build"
        self.build_dir.mkdir()
        self.catalog = TargetCatalog()

    def tearDown(self) -> None:
        self.temp_dir.cleanup()

    def test_list_target_names_skips_autogen_helpers(self) -> None:
        write_codemodel(
            self.build_dir,
            {
                "app": executable("app"),
                "app_autogen": library("", kind="UTILITY"),
                "util_autogen/impl": library("", kind="UTILITY"),
                "tests": executable("tests"),
            },
        )
        self.assertEqual(self.catalog.list_target_names(self.build_dir), ["app", "tests"])

    def test_list_target_names_requires_build_dir(self) -> None:
        with self.assertRaises(ConfigStateError) as exc_info:
            self.catalog.list_target_names(self.build_dir / "missing")
        self.assertIn("configure", str(exc_info.exception))

    def test_relative_artifact_is_joined_onto_build_dir(self) -> None:
        write_codemodel(self.build_dir, {"app": executable("bin/app")})
        self.assertEqual(
            self.catalog.resolve_executable_path(self.build_dir, "app"),
            self.build_dir / "bin" / "app",
        )

    def test_absolute_artifact_is_returned_unchanged(self) -> None:
        absolute = Path(self.temp_dir.name).resolve() / "opt" / "app"
        write_codemodel(self.build_dir, {"app": executable(str(absolute))})
        self.assertEqual(self.catalog.resolve_executable_path(self.build_dir, "app"), absolute)

    def test_static_library_is_type_mismatch(self) -> None:
        write_codemodel(self.build_dir, {"core": library("libcore.a")})
        with self.assertRaises(TypeMismatchError) as exc_info:
            self.catalog.resolve_executable_path(self.build_dir, "core")
        self.assertIn('"core" is not an executable', str(exc_info.exception))

    def test_unknown_target_is_not_found(self) -> None:
        write_codemodel(self.build_dir, {"app": executable("app")})
        with self.assertRaises(NotFoundError) as exc_info:
            self.catalog.resolve_executable_path(self.build_dir, "ghost")
        self.assertIn('"ghost"', str(exc_info.exception))


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
