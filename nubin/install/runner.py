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

"""Running ``nuget.exe install``.

Design Principles:
    - nuget.exe is cached globally (not per package)
    - An explicit nuget_path in the run settings always wins over the cache
    - The installer's exit code is the only success signal; output is only
      shown in debug mode
    - No timeout: a hung installer blocks the run

Example:
    ```python
    from pathlib import Path
    from nubin.install import (
        build_install_command,
        get_nuget_tool,
        run_install,
        write_default_config,
    )
    from nubin.models import PackageAtom, RunSettings

    settings = RunSettings(tfm="net48")
    tool = get_nuget_tool(settings)
    config = write_default_config(Path("_packages/foo"))
    run_install(tool, build_install_command(
        PackageAtom(name="Foo"), "_packages/foo", config, settings
    ))
    ```
"""

from __future__ import annotations

import os
from pathlib import Path
import shlex
import subprocess

import requests

from nubin.exceptions import InstallError, NetworkError
from nubin.io.download import download_file
from nubin.logging import get_global_logger
from nubin.models import RunSettings

NUGET_TOOL_URL = "https://dist.nuget.org/win-x86-commandline/latest/nuget.exe"
NUGET_TOOL_NAME = "nuget.exe"
DEFAULT_CONFIG_NAME = "NuGet.config"

# nuget.exe is a .NET Framework assembly; outside Windows it runs under Mono
MONO_RUNNER = "mono"

DEFAULT_CONFIG = """\
<?xml version="1.0" encoding="utf-8"?>
<configuration>
  <packageSources>
    <add key="nuget.org" value="https://api.nuget.org/v3/index.json" protocolVersion="3" />
  </packageSources>
</configuration>
"""


def get_nuget_tool(run_settings: RunSettings) -> Path:
    """Locate nuget.exe, downloading it into the tool cache if needed.

    Args:
        run_settings: Provides nuget_path and tool_cache.

    Returns:
        Path to nuget.exe.

    Raises:
        InstallError: If an explicit nuget_path does not exist, or the
            downloaded tool cannot be written to the cache.
        NetworkError: If the download fails.
    """
    logger = get_global_logger()

    if run_settings.nuget_path is not None:
        if not run_settings.nuget_path.exists():
            raise InstallError(f"nuget.exe not found: {run_settings.nuget_path}")
        logger.verbose("TOOL", f"Using nuget.exe: {run_settings.nuget_path}")
        return run_settings.nuget_path

    tool_path = run_settings.tool_cache / NUGET_TOOL_NAME
    if tool_path.exists():
        logger.verbose("TOOL", f"Using cached nuget.exe: {tool_path}")
        return tool_path

    logger.verbose("TOOL", "Downloading nuget.exe...")
    try:
        tool_path, _ = download_file(
            NUGET_TOOL_URL, run_settings.tool_cache, filename=NUGET_TOOL_NAME
        )
    except requests.RequestException as err:
        raise NetworkError(f"Failed to download nuget.exe: {err}") from err
    except OSError as err:
        raise InstallError(
            f"Could not cache nuget.exe in {run_settings.tool_cache}: {err}"
        ) from err

    logger.verbose("TOOL", f"[OK] nuget.exe cached: {tool_path}")
    return tool_path


def write_default_config(root_path: Path) -> Path:
    """Write a NuGet.config listing nuget.org into root_path.

    Returns:
        Path to the written config file.
    """
    root_path.mkdir(parents=True, exist_ok=True)
    config_path = root_path / DEFAULT_CONFIG_NAME
    config_path.write_text(DEFAULT_CONFIG, encoding="utf-8")
    return config_path


def _command_line(tool_path: Path, command: str) -> str | list[str]:
    if os.name == "nt":
        return f'"{tool_path}" {command}'
    args = shlex.split(command)
    if tool_path.suffix.lower() == ".exe":
        return [MONO_RUNNER, str(tool_path), *args]
    return [str(tool_path), *args]


def run_install(tool_path: Path, command: str) -> None:
    """Run nuget.exe with the given argument string and wait for it.

    Args:
        tool_path: Path to nuget.exe.
        command: Arguments from build_install_command().

    Raises:
        InstallError: If the process cannot be started or exits non-zero.
    """
    logger = get_global_logger()
    cmd = _command_line(tool_path, command)
    logger.verbose("INSTALL", f"Running: {tool_path.name} {command}")

    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            check=True,
        )
    except subprocess.CalledProcessError as err:
        error_msg = f"nuget.exe failed (exit code {err.returncode})"
        if err.stderr:
            error_msg += f"\n{err.stderr.strip()}"
        raise InstallError(error_msg, returncode=err.returncode) from err
    except OSError as err:
        raise InstallError(f"Could not start nuget.exe: {err}") from err

    if result.stdout:
        for line in result.stdout.strip().splitlines():
            logger.debug("INSTALL", f"  {line}")
