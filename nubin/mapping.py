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

"""Assembly-to-package mapping.

After a run, downstream tooling (documentation generators, reference
checkers) needs to know which package each copied binary came from. The
resolver records every copied binary here; the table is written as JSON at
the end of a manifest run.

File format:
    ```json
    {
      "metadata": {"nubin_version": "0.1.0", "generated": "2025-01-01T00:00:00+00:00"},
      "assemblies": {
        "Newtonsoft.Json.dll": {
          "package": "Newtonsoft.Json",
          "version": "13.0.3",
          "moniker": "newtonsoft.json",
          "framework": "netstandard2.0"
        }
      }
    }
    ```

Example:
    ```python
    from pathlib import Path
    from nubin.mapping import PackageInfoMapping

    mapping = PackageInfoMapping()
    mapping.add(package, "13.0.3", "netstandard2.0", ["Newtonsoft.Json.dll"])
    mapping.save(Path("_bin/assembly-mapping.json"))
    ```
"""

from __future__ import annotations

from datetime import datetime, timezone
import json
from pathlib import Path
from typing import Any

from nubin.logging import get_global_logger
from nubin.models import PackageAtom


class PackageInfoMapping:
    """In-memory binary name -> package information table.

    Attributes:
        assemblies: Mapping of binary file name to package information.
    """

    def __init__(self) -> None:
        self.assemblies: dict[str, dict[str, Any]] = {}

    def __len__(self) -> int:
        return len(self.assemblies)

    def __contains__(self, binary: str) -> bool:
        return binary in self.assemblies

    def add(
        self,
        package: PackageAtom,
        version: str | None,
        framework: str,
        binaries: list[str],
    ) -> None:
        """Record binaries copied from a package.

        A binary already recorded for another package is overwritten (last
        wins), matching what happens on disk when two packages ship the same
        file into a shared folder. The overwrite is logged.
        """
        logger = get_global_logger()
        for binary in binaries:
            previous = self.assemblies.get(binary)
            if previous and previous["package"] != package.name:
                logger.verbose(
                    "MAPPING",
                    f"{binary} was mapped to {previous['package']}, now {package.name}",
                )
            self.assemblies[binary] = {
                "package": package.name,
                "version": version,
                "moniker": package.moniker,
                "framework": framework,
            }

    def merge(self, other: PackageInfoMapping) -> None:
        """Merge another mapping into this one (other wins on conflicts)."""
        self.assemblies.update(other.assemblies)

    def to_dict(self) -> dict[str, Any]:
        from nubin import __version__

        return {
            "metadata": {
                "nubin_version": __version__,
                "generated": datetime.now(timezone.utc).isoformat(),
            },
            "assemblies": dict(sorted(self.assemblies.items())),
        }

    def save(self, mapping_file: Path) -> None:
        """Write the mapping as JSON, creating parent directories."""
        mapping_file.parent.mkdir(parents=True, exist_ok=True)
        with mapping_file.open("w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)
        get_global_logger().verbose(
            "MAPPING", f"Wrote {len(self)} assemblies to {mapping_file}"
        )

    @classmethod
    def load(cls, mapping_file: Path) -> PackageInfoMapping:
        """Read a mapping previously written by save().

        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If the file is not valid JSON or has no assemblies
                object.
        """
        with mapping_file.open("r", encoding="utf-8") as f:
            data = json.load(f)
        assemblies = data.get("assemblies", {}) if isinstance(data, dict) else None
        if not isinstance(assemblies, dict):
            raise ValueError(f"not an assembly mapping: {mapping_file}")
        mapping = cls()
        mapping.assemblies = dict(assemblies)
        return mapping
