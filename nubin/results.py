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

"""Public API return types for nubin.

All dataclasses are frozen (immutable) to prevent accidental mutation of
return values.

Example:
    Using result types:
        ```python
        from pathlib import Path
        from nubin.core import resolve_manifest

        result = resolve_manifest(Path("packages.yaml"))
        print(result.resolved)  # Attribute access, not dict access
        ```

Note:
    Only public API return types belong in this module. Domain types
    (PackageAtom, RunSettings) live in nubin.models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class CopyResult:
    """Result from copying a library folder's content.

    Attributes:
        success: False if the source could not be enumerated or a binary
            could not be copied.
        binaries: File names of the copied binaries (.dll/.winmd).
        documentation: File names of the copied documentation files (.xml).
    """

    success: bool
    binaries: list[str] = field(default_factory=list)
    documentation: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ResolveResult:
    """Result from resolving a single package.

    Attributes:
        moniker: Package moniker (output folder name).
        success: True if binaries were copied.
        framework_folder: Winning lib/ folder, None if nothing matched.
        binaries: File names of the copied binaries.
    """

    moniker: str
    success: bool
    framework_folder: Path | None
    binaries: list[str]


@dataclass(frozen=True)
class ManifestResult:
    """Result from resolving every package in a manifest.

    Attributes:
        manifest_path: Path to the manifest that was processed.
        output_dir: Root directory the package folders were written to.
        resolved: Monikers of successfully resolved packages.
        failed: Monikers of packages that could not be resolved.
        mapping_file: Path to the written assembly mapping, if any.
    """

    manifest_path: Path
    output_dir: Path
    resolved: list[str]
    failed: list[str]
    mapping_file: Path | None

    @property
    def status(self) -> str:
        return "success" if not self.failed else "partial"


@dataclass(frozen=True)
class ValidationResult:
    """Result from validating a manifest.

    Attributes:
        status: Validation status ("valid" or "invalid").
        errors: List of error messages (empty if valid).
        warnings: List of warning messages.
        package_count: Number of packages in the manifest.
        manifest_path: String path to the validated manifest file.
    """

    status: str
    errors: list[str]
    warnings: list[str]
    package_count: int
    manifest_path: str
