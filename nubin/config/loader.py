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

"""Configuration loading and merging for nubin.

A package manifest can be combined with organization-wide defaults so that
every manifest in a repository shares the same framework, feed and output
layout.

Configuration Layers:
    1. **Organization defaults** (defaults/org.yaml)
       - Found by walking upward from the manifest directory
       - Typically sets defaults.tfm, defaults.feed, defaults.packages_path
       - Optional

    2. **Manifest** (any YAML file)
       - Lists the packages to resolve
       - Always required; overrides organization defaults

Merge Behavior:
    The loader performs deep merging with "last wins" semantics:

    - **Dicts**: Recursively merged (keys from overlay override base)
    - **Lists**: Completely replaced (NOT appended/extended), so a manifest's
      packages list never mixes with one from the defaults
    - **Scalars**: Overwritten (strings, numbers, booleans)

Path Resolution:
    Relative paths under ``defaults`` are resolved against the MANIFEST FILE
    location, making manifests relocatable. Resolved keys:

    - defaults.output_path
    - defaults.packages_path
    - defaults.nuget_path
    - defaults.nuget_config
    - defaults.tool_cache

Error Handling:
    - ConfigError: Manifest doesn't exist, YAML parse errors, empty files,
        or invalid structure
    - All errors are chained with "from err" for better debugging

Example:
    Basic usage:
        ```python
        from pathlib import Path
        from nubin.config import load_manifest

        settings, packages = load_manifest(Path("docs/packages.yaml"))
        print(settings.tfm, [p.name for p in packages])
        ```
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from nubin.exceptions import ConfigError
from nubin.logging import get_global_logger
from nubin.models import PackageAtom, RunSettings

PATH_KEYS = ("output_path", "packages_path", "nuget_path", "nuget_config", "tool_cache")

# -------------------------------
# YAML helpers
# -------------------------------


def _load_yaml_file(p: Path) -> Any:
    """Load a YAML file and return the parsed Python object.

    Raises:
        ConfigError: When the file does not exist, is invalid YAML or is empty.
    """
    if not p.exists():
        raise ConfigError(f"file not found: {p}")
    try:
        with p.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as err:
        raise ConfigError(f"Error parsing YAML: {p}: {err}") from err
    if data is None:
        raise ConfigError(f"YAML file is empty: {p}")
    return data


# -------------------------------
# Merge logic
# -------------------------------


def _deep_merge_dicts(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """
    Deep-merge two dicts with "overlay wins".

    Rules:
      - dict + dict -> deep merge
      - list + list -> overlay REPLACES base (not concatenated)
      - everything else -> overlay overwrites base

    This function does not mutate inputs; returns a new dict.
    """
    result: dict[str, Any] = dict(base)
    for k, v in overlay.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge_dicts(result[k], v)
        else:
            result[k] = v
    return result


def _find_defaults_root(start_dir: Path) -> Path | None:
    """
    Walk upward from 'start_dir' looking for a 'defaults/org.yaml'.
    Returns the 'defaults' directory or None if not found.
    """
    for parent in [start_dir] + list(start_dir.parents):
        candidate = parent / "defaults" / "org.yaml"
        if candidate.exists():
            return parent / "defaults"
    return None


def _resolve_known_paths(cfg: dict[str, Any], manifest_dir: Path) -> None:
    """Resolve relative paths under cfg["defaults"] against manifest_dir.

    Modifies cfg in place.
    """
    defaults = cfg.get("defaults")
    if not isinstance(defaults, dict):
        return
    for key in PATH_KEYS:
        raw_path = defaults.get(key)
        if isinstance(raw_path, str) and raw_path:
            p = Path(raw_path)
            if not p.is_absolute():
                defaults[key] = str((manifest_dir / p).resolve())


def _print_yaml_content(data: dict[str, Any]) -> None:
    logger = get_global_logger()
    yaml_str = yaml.dump(data, default_flow_style=False, sort_keys=False)
    for line in yaml_str.split("\n"):
        if line.strip():
            logger.debug("CONFIG", line)


# -------------------------------
# Public API
# -------------------------------


def load_effective_config(manifest_path: Path) -> dict[str, Any]:
    """Load and merge the effective configuration for a manifest.

    Steps:
        1) Read manifest YAML.
        2) Find defaults root by scanning upwards for 'defaults/org.yaml'.
        3) Merge: org -> manifest (dicts deep-merge, lists replace).
        4) Resolve known relative paths against the manifest directory.

    Args:
        manifest_path: Path to the manifest file.

    Returns:
        The merged configuration dict.

    Raises:
        ConfigError: On YAML parse errors, empty files, invalid structure, or
            if the manifest file is missing.
    """
    logger = get_global_logger()
    manifest_path = manifest_path.resolve()
    manifest_dir = manifest_path.parent

    logger.verbose("CONFIG", f"Loading manifest: {manifest_path}")

    manifest_obj = _load_yaml_file(manifest_path)
    if not isinstance(manifest_obj, dict):
        raise ConfigError(
            f"top-level YAML must be a mapping (dict): {manifest_path}"
        )

    merged: dict[str, Any] = {}
    defaults_root = _find_defaults_root(manifest_dir)
    if defaults_root:
        org_defaults_path = defaults_root / "org.yaml"
        logger.verbose("CONFIG", f"Loading: {org_defaults_path}")
        org_defaults = _load_yaml_file(org_defaults_path)
        if not isinstance(org_defaults, dict):
            raise ConfigError(
                f"top-level YAML must be a mapping (dict): {org_defaults_path}"
            )
        merged = _deep_merge_dicts(merged, org_defaults)

    merged = _deep_merge_dicts(merged, manifest_obj)

    logger.debug("CONFIG", "--- Final Merged Configuration ---")
    _print_yaml_content(merged)

    _resolve_known_paths(merged, manifest_dir)
    return merged


def load_manifest(
    manifest_path: Path,
) -> tuple[RunSettings, list[PackageAtom]]:
    """Load a manifest into run settings and packages.

    Args:
        manifest_path: Path to the manifest file.

    Returns:
        A tuple (run_settings, packages).

    Raises:
        ConfigError: If the manifest is invalid or has no packages.
    """
    cfg = load_effective_config(manifest_path)

    packages_cfg = cfg.get("packages")
    if not isinstance(packages_cfg, list) or not packages_cfg:
        raise ConfigError(f"No packages defined in manifest: {manifest_path}")

    run_settings = RunSettings.from_config(cfg.get("defaults"))
    packages = [PackageAtom.from_config(entry) for entry in packages_cfg]

    get_global_logger().verbose(
        "CONFIG", f"Loaded {len(packages)} package(s) from {manifest_path.name}"
    )
    return run_settings, packages
