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

"""Manifest validation module.

Checks manifest syntax and structure without running nuget.exe or touching
the network, for quick feedback while editing and in CI pre-checks.

Validation Checks:

- YAML syntax is valid
- Top level is a mapping with apiVersion and packages
- apiVersion is supported
- Each package has a name and correctly typed optional fields
- Target frameworks can be parsed
- Monikers are unique (each package needs its own output folder)

Example:
    Validate a manifest and handle results:
        ```python
        from pathlib import Path
        from nubin.validation import validate_manifest

        result = validate_manifest(Path("packages.yaml"))
        if result.status == "valid":
            print(f"Manifest is valid with {result.package_count} package(s)")
        else:
            for error in result.errors:
                print(f"Error: {error}")
        ```

"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from nubin.logging import get_global_logger
from nubin.matching import parse_tfm
from nubin.results import ValidationResult

__all__ = ["validate_manifest"]

SUPPORTED_API_VERSION = "nubin/v1"
STRING_FIELDS = ("version", "moniker", "tfm", "feed")


def _validate_package(idx: int, pkg: Any, errors: list[str]) -> str | None:
    """Validate one packages[] entry; return its moniker if it has a name."""
    prefix = f"packages[{idx}]"

    if not isinstance(pkg, dict):
        errors.append(f"{prefix}: Package must be a dictionary")
        return None

    name = pkg.get("name")
    if "name" not in pkg:
        errors.append(f"{prefix}: Missing required field: name")
    elif not isinstance(name, str) or not name.strip():
        errors.append(f"{prefix}: Field 'name' must be a non-empty string")
        name = None

    for field in STRING_FIELDS:
        value = pkg.get(field)
        if value is None:
            continue
        # YAML reads an unquoted 1.10 as the float 1.1
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            errors.append(
                f"{prefix}: Field '{field}' must be a quoted string, got {value!r}"
            )
        elif not isinstance(value, str):
            errors.append(f"{prefix}: Field '{field}' must be a string")

    tfm = pkg.get("tfm")
    if isinstance(tfm, str) and tfm.strip() and parse_tfm(tfm) is None:
        errors.append(f"{prefix}: Cannot parse target framework: {tfm!r}")

    if "prerelease" in pkg and not isinstance(pkg["prerelease"], bool):
        errors.append(f"{prefix}: Field 'prerelease' must be a boolean")

    exclude = pkg.get("exclude")
    if exclude is not None and not isinstance(exclude, (str, list)):
        errors.append(f"{prefix}: Field 'exclude' must be a list of wildcards")
    elif isinstance(exclude, list):
        for pattern in exclude:
            if not isinstance(pattern, str):
                errors.append(f"{prefix}.exclude: Wildcard must be a string: {pattern!r}")

    if not name:
        return None
    moniker = pkg.get("moniker")
    return moniker if isinstance(moniker, str) and moniker else name.strip().lower()


def validate_manifest(manifest_path: Path) -> ValidationResult:
    """Validate a manifest file without installing anything.

    Args:
        manifest_path: Path to the manifest YAML file.

    Returns:
        ValidationResult with status "valid" or "invalid", errors, warnings,
            package count and the manifest path.

    """
    logger = get_global_logger()
    errors: list[str] = []
    warnings: list[str] = []

    def result(package_count: int = 0) -> ValidationResult:
        return ValidationResult(
            status="valid" if not errors else "invalid",
            errors=errors,
            warnings=warnings,
            package_count=package_count,
            manifest_path=str(manifest_path),
        )

    logger.verbose("VALIDATE", f"Validating manifest: {manifest_path}")

    if not manifest_path.exists():
        errors.append(f"Manifest file not found: {manifest_path}")
        return result()

    try:
        with open(manifest_path, encoding="utf-8") as f:
            manifest = yaml.safe_load(f)
    except yaml.YAMLError as err:
        errors.append(f"Invalid YAML syntax: {err}")
        return result()
    except OSError as err:
        errors.append(f"Failed to read manifest file: {err}")
        return result()

    logger.verbose("VALIDATE", "[OK] YAML syntax is valid")

    if not isinstance(manifest, dict):
        errors.append("Manifest must be a YAML dictionary/mapping")
        return result()

    if "apiVersion" not in manifest:
        errors.append("Missing required field: apiVersion")
    else:
        api_version = manifest["apiVersion"]
        if not isinstance(api_version, str):
            errors.append("apiVersion must be a string")
        elif api_version != SUPPORTED_API_VERSION:
            warnings.append(
                f"apiVersion '{api_version}' may not be supported "
                f"(expected: {SUPPORTED_API_VERSION})"
            )

    defaults = manifest.get("defaults")
    if defaults is not None and not isinstance(defaults, dict):
        errors.append("Field 'defaults' must be a dictionary")
    elif isinstance(defaults, dict):
        tfm = defaults.get("tfm")
        if tfm is not None and (not isinstance(tfm, str) or parse_tfm(tfm) is None):
            errors.append(f"defaults: Cannot parse target framework: {tfm!r}")

    packages = manifest.get("packages")
    if packages is None:
        errors.append("Missing required field: packages")
        return result()
    if not isinstance(packages, list):
        errors.append("Field 'packages' must be a list")
        return result()
    if not packages:
        errors.append("Field 'packages' must contain at least one package")
        return result()

    logger.verbose("VALIDATE", f"[OK] Found {len(packages)} package(s)")

    seen: dict[str, int] = {}
    for idx, pkg in enumerate(packages):
        moniker = _validate_package(idx, pkg, errors)
        if moniker is None:
            continue
        key = moniker.lower()
        if key in seen:
            errors.append(
                f"packages[{idx}]: Duplicate moniker {moniker!r} "
                f"(also used by packages[{seen[key]}])"
            )
        else:
            seen[key] = idx

    return result(len(packages))
