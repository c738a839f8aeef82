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

"""Domain types for package resolution.

PackageAtom describes one package to resolve, RunSettings holds the
process-wide defaults for a run. Both are frozen and are normally built from
the merged manifest produced by nubin.config.load_effective_config.

Example:
    ```python
    from nubin.models import PackageAtom, RunSettings

    package = PackageAtom.from_config(
        {"name": "Newtonsoft.Json", "version": "13.0.3", "tfm": "net45"}
    )
    settings = RunSettings.from_config({"tfm": "net48"})
    ```
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from nubin.exceptions import ConfigError
from nubin.patterns import ExclusionFilter

DEFAULT_OUTPUT_PATH = Path("_bin")
DEFAULT_PACKAGES_PATH = Path("_packages")
DEFAULT_TOOL_CACHE = Path("cache/tools")


def has_text(value: str | None) -> bool:
    """Return True if value is a string with non-whitespace content."""
    return bool(value and value.strip())


def _optional_str(data: dict[str, Any], key: str, where: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        # YAML reads 1.10 as the float 1.1; the original text is gone
        raise ConfigError(
            f"{where}: field '{key}' must be a quoted string, got {value!r}"
        )
    if not isinstance(value, str):
        raise ConfigError(f"{where}: field '{key}' must be a string")
    return value


def _optional_path(data: dict[str, Any], key: str) -> Path | None:
    value = data.get(key)
    if value is None or value == "":
        return None
    if not isinstance(value, (str, Path)):
        raise ConfigError(f"defaults: field '{key}' must be a path string")
    return Path(value)


@dataclass(frozen=True)
class CustomProperties:
    """Per-package overrides.

    Attributes:
        tfm: Target framework that overrides the run default.
        custom_feed: Feed URL that overrides the run default.
        excluded_dlls: Compiled exclusion patterns for the copy step.
    """

    tfm: str | None = None
    custom_feed: str | None = None
    excluded_dlls: ExclusionFilter = field(default_factory=ExclusionFilter)


@dataclass(frozen=True)
class PackageAtom:
    """Identity of a package to resolve.

    Attributes:
        name: NuGet package id.
        version: Explicit version, None to let the installer pick.
        prerelease: Allow prerelease versions.
        moniker: Output folder name, defaults to the lower-cased name.
        custom_properties: Per-package overrides.
    """

    name: str
    version: str | None = None
    prerelease: bool = False
    moniker: str = ""
    custom_properties: CustomProperties = field(default_factory=CustomProperties)

    def __post_init__(self) -> None:
        if not self.moniker:
            object.__setattr__(self, "moniker", self.name.lower())

    @property
    def custom_version_defined(self) -> bool:
        return has_text(self.version)

    @classmethod
    def from_config(cls, data: dict[str, Any]) -> PackageAtom:
        """Build a package from a manifest ``packages`` entry.

        Args:
            data: Mapping with ``name`` and optional ``version``,
                ``prerelease``, ``moniker``, ``tfm``, ``feed`` and ``exclude``.

        Returns:
            The package.

        Raises:
            ConfigError: If the entry is malformed.
        """
        if not isinstance(data, dict):
            raise ConfigError(f"package entry must be a mapping, got {data!r}")
        name = data.get("name")
        if not isinstance(name, str) or not name.strip():
            raise ConfigError(f"package entry is missing a 'name': {data!r}")
        where = f"package {name!r}"

        prerelease = data.get("prerelease", False)
        if not isinstance(prerelease, bool):
            raise ConfigError(f"{where}: field 'prerelease' must be a boolean")

        exclude = data.get("exclude") or []
        if isinstance(exclude, str):
            exclude = [exclude]
        if not isinstance(exclude, list):
            raise ConfigError(f"{where}: field 'exclude' must be a list")

        return cls(
            name=name.strip(),
            version=_optional_str(data, "version", where),
            prerelease=prerelease,
            moniker=_optional_str(data, "moniker", where) or "",
            custom_properties=CustomProperties(
                tfm=_optional_str(data, "tfm", where),
                custom_feed=_optional_str(data, "feed", where),
                excluded_dlls=ExclusionFilter.from_wildcards(exclude),
            ),
        )


@dataclass(frozen=True)
class RunSettings:
    """Process-wide defaults for one run.

    Attributes:
        tfm: Default target framework.
        feed: Default package feed.
        output_path: Root for copied binaries.
        packages_path: Root for installer output.
        nuget_path: Explicit nuget.exe, None to use the cache or download.
        nuget_config: Explicit NuGet.config, None to generate one.
        tool_cache: Where a downloaded nuget.exe is cached.
    """

    tfm: str | None = None
    feed: str | None = None
    output_path: Path = DEFAULT_OUTPUT_PATH
    packages_path: Path = DEFAULT_PACKAGES_PATH
    nuget_path: Path | None = None
    nuget_config: Path | None = None
    tool_cache: Path = DEFAULT_TOOL_CACHE

    @classmethod
    def from_config(cls, defaults: dict[str, Any] | None) -> RunSettings:
        """Build run settings from the manifest ``defaults`` section."""
        defaults = defaults or {}
        if not isinstance(defaults, dict):
            raise ConfigError("field 'defaults' must be a mapping")
        return cls(
            tfm=_optional_str(defaults, "tfm", "defaults"),
            feed=_optional_str(defaults, "feed", "defaults"),
            output_path=_optional_path(defaults, "output_path") or DEFAULT_OUTPUT_PATH,
            packages_path=_optional_path(defaults, "packages_path")
            or DEFAULT_PACKAGES_PATH,
            nuget_path=_optional_path(defaults, "nuget_path"),
            nuget_config=_optional_path(defaults, "nuget_config"),
            tool_cache=_optional_path(defaults, "tool_cache") or DEFAULT_TOOL_CACHE,
        )
