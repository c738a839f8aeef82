# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Core orchestration for nubin.

Resolving a package is a linear sequence:

1. Build and run ``nuget.exe install`` into ``<packages_path>/<moniker>``
2. Locate the extracted ``<Name>.<Version>`` folder and list ``lib/*``
3. Pick the best framework folder (nubin.matching)
4. Copy binaries and documentation into the output folder (nubin.io)

Every failure along the way is logged and reported as a False/failed result;
nothing is rolled back. Installer output, copied files and deleted
directories stay as they are.

Design Principles:

- Package-level settings override run-level defaults
- Each package writes to its own output folder, so packages never collide
- Errors from lower layers (InstallError, NetworkError) stop at this layer

Example:
    Programmatic usage:
        ```python
        from pathlib import Path
        from nubin.core import copy_binary_set
        from nubin.models import PackageAtom, RunSettings

        ok = copy_binary_set(
            PackageAtom(name="Newtonsoft.Json", version="13.0.3"),
            RunSettings(tfm="net48"),
            Path("_bin/newtonsoft.json"),
        )
        ```

    Whole manifest:
        ```python
        from nubin.core import resolve_manifest

        result = resolve_manifest(Path("packages.yaml"), clean=True)
        print(result.resolved, result.failed)
        ```

"""

from __future__ import annotations

from pathlib import Path

from nubin.config import load_manifest
from nubin.exceptions import InstallError, NetworkError
from nubin.install import (
    build_install_command,
    get_nuget_tool,
    run_install,
    write_default_config,
)
from nubin.io import copy_library_content, delete_directory
from nubin.logging import get_global_logger
from nubin.mapping import PackageInfoMapping
from nubin.matching import get_best_lib_match
from nubin.models import PackageAtom, RunSettings, has_text
from nubin.results import ManifestResult, ResolveResult

LIB_FOLDER = "lib"
DEFAULT_MAPPING_NAME = "assembly-mapping.json"


def find_package_folder(root_path: Path, package: PackageAtom) -> Path | None:
    """Find the folder nuget.exe extracted a package into.

    nuget.exe names it ``<Name>.<Version>``. The pinned version is preferred;
    otherwise, or when the installer normalized the version (1.0 -> 1.0.0),
    any ``<Name>.<digit>...`` folder qualifies and the most recently modified
    one wins.

    Returns:
        The package folder, or None if it cannot be found.
    """
    if not root_path.is_dir():
        return None

    prefix = f"{package.name}.".lower()
    folders = [p for p in root_path.iterdir() if p.is_dir()]

    if package.custom_version_defined:
        wanted = f"{package.name}.{package.version}".lower()
        for folder in folders:
            if folder.name.lower() == wanted:
                return folder

    candidates = [
        f
        for f in folders
        if f.name.lower().startswith(prefix) and f.name[len(prefix) :][:1].isdigit()
    ]
    if not candidates:
        return None
    return max(candidates, key=lambda p: p.stat().st_mtime)


def package_version_from_folder(package_dir: Path, package: PackageAtom) -> str:
    """Return the version part of a ``<Name>.<Version>`` folder name."""
    return package_dir.name[len(package.name) + 1 :]


def get_lib_candidates(package_dir: Path) -> list[Path]:
    """List the framework folders under ``<package>/lib``."""
    lib_dir = package_dir / LIB_FOLDER
    if not lib_dir.is_dir():
        return []
    return sorted(p for p in lib_dir.iterdir() if p.is_dir())


def resolve_package(
    package: PackageAtom,
    run_settings: RunSettings,
    output_path: Path,
    mapping: PackageInfoMapping | None = None,
) -> ResolveResult:
    """Install a package and copy its best-matching binaries.

    Args:
        package: Package to resolve.
        run_settings: Run-level defaults.
        output_path: Folder that receives the binaries.
        mapping: Optional mapping that records the copied binaries.

    Returns:
        ResolveResult describing what was copied. Never raises for installer,
            network, match or copy failures.
    """
    logger = get_global_logger()

    def failed(folder: Path | None = None) -> ResolveResult:
        return ResolveResult(
            moniker=package.moniker,
            success=False,
            framework_folder=folder,
            binaries=[],
        )

    root_path = run_settings.packages_path / package.moniker
    try:
        root_path.mkdir(parents=True, exist_ok=True)
        config_path = run_settings.nuget_config or write_default_config(root_path)
    except OSError as err:
        logger.error(f"Could not prepare {root_path} for {package.name}: {err}")
        return failed()

    try:
        tool_path = get_nuget_tool(run_settings)
        command = build_install_command(package, root_path, config_path, run_settings)
        run_install(tool_path, command)
    except (InstallError, NetworkError) as err:
        logger.error(f"Could not install {package.name}: {err}")
        return failed()

    props = package.custom_properties
    tfm = props.tfm if has_text(props.tfm) else run_settings.tfm
    if not has_text(tfm):
        logger.error(f"No target framework set for {package.name}.")
        return failed()
    tfm = tfm.strip()

    try:
        package_dir = find_package_folder(root_path, package)
        if package_dir is None:
            logger.error(
                f"Could not find extracted package {package.name} in {root_path}."
            )
            return failed()
        logger.verbose("RESOLVE", f"Package folder: {package_dir}")
        candidates = get_lib_candidates(package_dir)
    except OSError as err:
        logger.error(f"Could not read extracted package {package.name}: {err}")
        return failed()

    framework_folder = get_best_lib_match(tfm, candidates)
    if framework_folder is None:
        logger.error(f"No library folder in {package.name} matches {tfm}.")
        return failed()
    logger.verbose("RESOLVE", f"Using {framework_folder.name} for {tfm}")

    copied = copy_library_content(framework_folder, output_path, package)
    if not copied.success:
        return failed(framework_folder)

    if mapping is not None:
        mapping.add(
            package,
            package_version_from_folder(package_dir, package),
            framework_folder.name,
            copied.binaries,
        )

    return ResolveResult(
        moniker=package.moniker,
        success=True,
        framework_folder=framework_folder,
        binaries=copied.binaries,
    )


def copy_binary_set(
    package: PackageAtom,
    run_settings: RunSettings,
    output_path: Path,
    mapping: PackageInfoMapping | None = None,
) -> bool:
    """Install a package and copy its binaries into output_path.

    Returns:
        True if binaries were copied, False if installing, matching or
            copying failed.
    """
    return resolve_package(package, run_settings, output_path, mapping).success


def resolve_manifest(
    manifest_path: Path,
    output_dir: Path | None = None,
    *,
    clean: bool = False,
    mapping_file: Path | None = None,
) -> ManifestResult:
    """Resolve every package listed in a manifest.

    Each package is copied into ``<output_dir>/<moniker>``. The assembly
    mapping is written to mapping_file (default:
    ``<output_dir>/assembly-mapping.json``). An existing mapping_file is
    merged into, with this run's entries winning; the default file is
    rewritten on every run.

    Args:
        manifest_path: Path to the manifest.
        output_dir: Output root. Default: defaults.output_path from the
            manifest.
        clean: Delete the installer output root after the run.
        mapping_file: Assembly mapping to write or merge into.

    Returns:
        ManifestResult with resolved and failed monikers.

    Raises:
        ConfigError: If the manifest is invalid.
    """
    logger = get_global_logger()
    run_settings, packages = load_manifest(manifest_path)
    output_root = (output_dir or run_settings.output_path).resolve()
    mapping = PackageInfoMapping()

    resolved: list[str] = []
    failed: list[str] = []
    total = len(packages)
    for idx, package in enumerate(packages, start=1):
        logger.step(idx, total, f"Resolving {package.name}...")
        ok = copy_binary_set(
            package, run_settings, output_root / package.moniker, mapping
        )
        (resolved if ok else failed).append(package.moniker)

    mapping_path = mapping_file or output_root / DEFAULT_MAPPING_NAME
    if mapping_file is not None and mapping_file.exists():
        try:
            existing = PackageInfoMapping.load(mapping_file)
        except (OSError, ValueError) as err:
            logger.warning(f"Replacing unreadable mapping file {mapping_file}: {err}")
        else:
            logger.verbose("MAPPING", f"Merging into existing {mapping_file}")
            existing.merge(mapping)
            mapping = existing
    mapping.save(mapping_path)

    if clean:
        logger.verbose("RESOLVE", f"Removing {run_settings.packages_path}")
        delete_directory(run_settings.packages_path)

    return ManifestResult(
        manifest_path=manifest_path,
        output_dir=output_root,
        resolved=resolved,
        failed=failed,
        mapping_file=mapping_path,
    )
