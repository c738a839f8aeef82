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

"""Copying a matched library folder into the output tree.

Only files directly inside the source folder are considered:

- Binaries: names ending in ".dll" or ".winmd" (case-sensitive)
- Documentation: names ending in ".xml"

The package's exclusion patterns apply to both. Binaries are all-or-nothing
from the caller's point of view: if the folder cannot be listed or a binary
cannot be copied, the result reports failure with no binaries. Documentation
is best-effort and never fails the copy.

Example:
    ```python
    from pathlib import Path
    from nubin.io import copy_library_content
    from nubin.models import PackageAtom

    result = copy_library_content(
        Path("_packages/foo/Foo.1.0.0/lib/net45"),
        Path("_bin/foo"),
        PackageAtom(name="Foo"),
    )
    if result.success:
        print(result.binaries)
    ```
"""

from __future__ import annotations

from pathlib import Path
import shutil

from nubin.logging import get_global_logger
from nubin.models import PackageAtom
from nubin.results import CopyResult

BINARY_EXTENSIONS = (".dll", ".winmd")
DOCUMENTATION_EXTENSION = ".xml"


def _list_files(source: Path) -> list[Path]:
    return sorted(p for p in source.iterdir() if p.is_file())


def _copy_files(files: list[Path], destination: Path) -> list[str]:
    destination.mkdir(parents=True, exist_ok=True)
    copied = []
    for f in files:
        shutil.copyfile(f, destination / f.name)
        copied.append(f.name)
    return copied


def copy_library_content(
    source: Path, destination: Path, package: PackageAtom
) -> CopyResult:
    """Copy binaries and documentation from a library folder.

    Existing files in the destination with the same name are overwritten.

    Args:
        source: The winning lib/<tfm> folder.
        destination: Folder to copy into (created if missing).
        package: Package whose exclusion patterns apply.

    Returns:
        CopyResult with the copied binary and documentation file names.
            success is False, with empty lists, when the source cannot be
            listed or a binary cannot be copied.

    Note:
        Never raises for filesystem errors; they are logged instead.

    """
    logger = get_global_logger()
    excluded = package.custom_properties.excluded_dlls

    try:
        files = _list_files(source)
    except OSError as err:
        logger.error(f"Could not get binaries for {package.name} from {source}.")
        logger.debug("COPY", str(err))
        return CopyResult(success=False)

    binaries = [f for f in files if f.name.endswith(BINARY_EXTENSIONS)]
    if excluded:
        kept = excluded.filter(binaries)
        for skipped in sorted(set(binaries) - set(kept)):
            logger.verbose("COPY", f"Excluded: {skipped.name}")
        binaries = kept

    try:
        copied = _copy_files(binaries, destination)
    except OSError as err:
        logger.error(f"Could not copy binaries for {package.name} to {destination}.")
        logger.debug("COPY", str(err))
        return CopyResult(success=False)

    logger.verbose("COPY", f"Copied {len(copied)} binaries to {destination}")

    documentation: list[str] = []
    try:
        doc_files = [
            f for f in files if f.name.lower().endswith(DOCUMENTATION_EXTENSION)
        ]
        documentation = _copy_files(excluded.filter(doc_files), destination)
    except OSError as err:
        logger.warning(
            f"Could not get documentation files for {package.name} from {source}."
        )
        logger.debug("COPY", str(err))

    return CopyResult(success=True, binaries=copied, documentation=documentation)
