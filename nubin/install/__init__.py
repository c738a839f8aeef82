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

"""External installer (nuget.exe) invocation.

Public API:

build_install_command : function
    Build the ``nuget.exe install`` argument string for a package.
get_nuget_tool : function
    Locate or download nuget.exe.
run_install : function
    Run the installer and check its exit code.
write_default_config : function
    Write a NuGet.config pointing at nuget.org.

"""

from .command import FALLBACK_SOURCE, build_install_command
from .runner import get_nuget_tool, run_install, write_default_config

__all__ = [
    "FALLBACK_SOURCE",
    "build_install_command",
    "get_nuget_tool",
    "run_install",
    "write_default_config",
]
