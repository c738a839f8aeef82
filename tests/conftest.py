"""
Pytest configuration and shared fixtures for nubin tests.

This module provides reusable fixtures and test utilities used across
the test suite.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest
import yaml

from nubin.logging import SilentLogger, get_global_logger, set_global_logger


@pytest.fixture(autouse=True)
def restore_global_logger() -> Iterator[None]:
    """Restore the global logger after tests (the CLI replaces it)."""
    previous = get_global_logger()
    yield
    set_global_logger(previous if previous is not None else SilentLogger())


@pytest.fixture
def tmp_test_dir(tmp_path: Path) -> Path:
    """
    Provide a temporary directory for test artifacts.

    Automatically cleaned up after test completion.
    """
    return tmp_path


@pytest.fixture
def sample_manifest_data() -> dict[str, Any]:
    """
    Provide sample manifest data.

    Returns a complete manifest structure for testing.
    """
    return {
        "apiVersion": "nubin/v1",
        "defaults": {
            "tfm": "net48",
            "packages_path": "pkgs",
            "output_path": "bin",
        },
        "packages": [
            {
                "name": "Newtonsoft.Json",
                "version": "13.0.3",
            },
            {
                "name": "Contoso.Widgets",
                "moniker": "widgets",
                "tfm": "netstandard2.0",
                "exclude": ["*.Design.dll"],
            },
        ],
    }


@pytest.fixture
def create_yaml_file(tmp_test_dir: Path):
    """
    Factory fixture for creating temporary YAML files.

    Usage:
        yaml_path = create_yaml_file("test.yaml", {"key": "value"})
    """

    def _create(filename: str, data: Any) -> Path:
        path = tmp_test_dir / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            yaml.dump(data, f)
        return path

    return _create


@pytest.fixture
def make_package_tree():
    """
    Factory fixture that lays out an extracted NuGet package.

    Usage:
        package_dir = make_package_tree(
            root, "Foo.1.0.0", {"net45": ["Foo.dll", "Foo.xml"]}
        )
    """

    def _create(root: Path, folder: str, frameworks: dict[str, list[str]]) -> Path:
        package_dir = root / folder
        for tfm, files in frameworks.items():
            tfm_dir = package_dir / "lib" / tfm
            tfm_dir.mkdir(parents=True, exist_ok=True)
            for name in files:
                (tfm_dir / name).write_bytes(f"{tfm}/{name}".encode())
        package_dir.mkdir(parents=True, exist_ok=True)
        return package_dir

    return _create
