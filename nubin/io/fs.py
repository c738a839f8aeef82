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

"""Filesystem helpers."""

from __future__ import annotations

import os
from pathlib import Path
import stat

from nubin.logging import get_global_logger


def delete_directory(target: Path) -> None:
    """Recursively delete a directory tree, including read-only files.

    Extracted NuGet packages often contain read-only files, which a plain
    unlink refuses on Windows. Every file is made writable before it is
    deleted.

    Args:
        target: Directory to delete. A missing directory is a no-op.

    Raises:
        OSError: If a file or directory still cannot be removed.

    """
    target = Path(target)
    if not target.is_dir():
        return

    os.chmod(target, stat.S_IRWXU)
    for entry in target.iterdir():
        if entry.is_symlink():
            entry.unlink()
        elif entry.is_dir():
            delete_directory(entry)
        else:
            os.chmod(entry, stat.S_IWRITE | stat.S_IREAD)
            entry.unlink()

    target.rmdir()
    get_global_logger().debug("FS", f"Removed directory: {target}")
