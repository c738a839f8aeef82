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

"""Filesystem and network I/O for nubin.

Public API:

copy_library_content : function
    Copy binaries and documentation from a matched lib/ folder.
delete_directory : function
    Remove a directory tree, clearing read-only attributes first.
download_file : function
    Download a single file with retries and an atomic write.

"""

from .copy import copy_library_content
from .download import download_file, make_session
from .fs import delete_directory

__all__ = ["copy_library_content", "delete_directory", "download_file", "make_session"]
