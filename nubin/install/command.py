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

"""Argument string for ``nuget.exe install``.

The base invocation installs the package into the given root with quiet
verbosity, nuget.org as fallback source and an explicit config file. Then,
in order:

- ``-Framework``: package TFM, else run default TFM
- ``-Source``: package feed, else run default feed
- ``-Version``: only when the package pins a version
- ``-PreRelease``: only when the package allows prereleases

Package-level values always take priority over run-level defaults.
"""

from __future__ import annotations

from pathlib import Path

from nubin.models import PackageAtom, RunSettings, has_text

FALLBACK_SOURCE = "https://api.nuget.org/v3/index.json"


def build_install_command(
    package: PackageAtom,
    root_path: Path | str,
    config_path: Path | str,
    run_settings: RunSettings,
) -> str:
    """Build the ``nuget.exe`` arguments that install a package.

    Args:
        package: Package to install.
        root_path: Installer output directory.
        config_path: NuGet.config passed with -ConfigFile.
        run_settings: Run-level defaults for framework and feed.

    Returns:
        The argument string, without the executable.

    Example:
        ```python
        build_install_command(
            PackageAtom(name="Foo", version="1.0.0"),
            "out", "NuGet.config", RunSettings(tfm="net48"),
        )
        # 'install Foo -OutputDirectory "out" -Verbosity Quiet
        #  -FallbackSource https://api.nuget.org/v3/index.json
        #  -ConfigFile "NuGet.config" -Framework net48 -Version 1.0.0'
        ```
    """
    root = str(root_path).strip('"')
    config = str(config_path).strip('"')
    command = (
        f'install {package.name} -OutputDirectory "{root}" -Verbosity Quiet '
        f'-FallbackSource {FALLBACK_SOURCE} -ConfigFile "{config}"'
    )

    props = package.custom_properties
    if has_text(props.tfm):
        command += f" -Framework {props.tfm}"
    elif run_settings.tfm:
        command += f" -Framework {run_settings.tfm}"

    if has_text(props.custom_feed):
        command += f" -Source {props.custom_feed}"
    elif run_settings.feed:
        command += f" -Source {run_settings.feed}"

    if package.custom_version_defined:
        command += f" -Version {package.version}"
    if package.prerelease:
        command += " -PreRelease"

    return command
