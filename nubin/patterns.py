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

"""Wildcard exclusion patterns for package content.

Packages can exclude files from the copy step with wildcard patterns such as
``*.Design.dll`` or ``System.?.dll``. Each wildcard is converted once into a
fully-anchored regular expression:

- ``*`` matches any run of characters (``.*``)
- ``?`` matches exactly one character (``.``)
- everything else is literal

Patterns are matched against the bare file name, case-sensitively.

Example:
    ```python
    from nubin.patterns import ExclusionFilter

    excluded = ExclusionFilter.from_wildcards(["*.Design.dll"])
    excluded.is_excluded("Foo.Design.dll")  # True
    excluded.filter(["Foo.dll", "Foo.Design.dll"])  # ["Foo.dll"]
    ```
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
import re

from nubin.exceptions import ConfigError

__all__ = ["wildcard_to_regex", "ExclusionFilter"]


def wildcard_to_regex(pattern: str) -> re.Pattern[str]:
    """Compile a wildcard into an anchored regular expression.

    Args:
        pattern: Wildcard such as ``*.resources.dll``.

    Returns:
        Compiled pattern that must match the whole file name.

    Example:
        ```python
        wildcard_to_regex("a?c*").pattern  # '^a.c.*$'
        ```
    """
    escaped = re.escape(pattern).replace(r"\?", ".").replace(r"\*", ".*")
    return re.compile(f"^{escaped}$")


@dataclass(frozen=True)
class ExclusionFilter:
    """Compiled set of exclusion patterns for one package.

    Built once per package and reused for every file. An empty filter
    excludes nothing.

    Attributes:
        wildcards: Source wildcards, kept for display and validation output.
        patterns: Compiled anchored regular expressions.
    """

    wildcards: tuple[str, ...] = ()
    patterns: tuple[re.Pattern[str], ...] = ()

    @classmethod
    def from_wildcards(cls, wildcards: Iterable[str] | None) -> ExclusionFilter:
        """Build a filter from wildcard strings.

        Raises:
            ConfigError: If a wildcard is not a string.
        """
        if not wildcards:
            return cls()
        items: list[str] = []
        for wildcard in wildcards:
            if not isinstance(wildcard, str):
                raise ConfigError(
                    f"exclusion pattern must be a string, got {wildcard!r}"
                )
            items.append(wildcard)
        return cls(
            wildcards=tuple(items),
            patterns=tuple(wildcard_to_regex(w) for w in items),
        )

    def __bool__(self) -> bool:
        return bool(self.patterns)

    def is_excluded(self, file_name: str) -> bool:
        """Return True if the bare file name matches any pattern."""
        return any(p.match(file_name) for p in self.patterns)

    def filter(self, paths: Iterable[Path | str]) -> list:
        """Drop every path whose file name matches an exclusion pattern.

        The items are returned unchanged and in their original order.
        """
        if not self.patterns:
            return list(paths)
        return [p for p in paths if not self.is_excluded(Path(p).name)]
