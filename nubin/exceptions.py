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

"""Exception hierarchy for nubin.

This module defines the errors raised by the library layers:

- ConfigError: Manifest-related errors (YAML parse, missing fields, bad types)
- NetworkError: Failures while fetching the NuGet command-line tool
- InstallError: The NuGet installer could not be run or exited non-zero

All exceptions inherit from NubinError, so callers can catch every nubin
error with a single except clause.

Note:
    The content copier never raises; it reports failures through
    CopyResult.success. The resolver turns InstallError and NetworkError
    into a False return value after logging them.

Example:
    Catching configuration errors:
        ```python
        from nubin.config import load_effective_config
        from nubin.exceptions import ConfigError

        try:
            cfg = load_effective_config(Path("packages.yaml"))
        except ConfigError as e:
            print(f"Config error: {e}")
        ```
"""

from __future__ import annotations

__all__ = [
    "NubinError",
    "ConfigError",
    "NetworkError",
    "InstallError",
]


class NubinError(Exception):
    """Base exception for all nubin errors."""

    pass


class ConfigError(NubinError):
    """Raised for manifest and configuration errors.

    This exception is raised when there are problems with:

    - YAML parsing (syntax errors, empty files, non-mapping documents)
    - Missing or invalid package fields
    - Exclusion wildcards that cannot be compiled
    """

    pass


class NetworkError(NubinError):
    """Raised when nuget.exe cannot be downloaded."""

    pass


class InstallError(NubinError):
    """Raised when the NuGet installer cannot be started or fails.

    Attributes:
        returncode: Exit code of the installer process, or None if the
            process never started.
    """

    def __init__(self, message: str, returncode: int | None = None) -> None:
        super().__init__(message)
        self.returncode = returncode
