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

"""Match strategy protocol, registry and tie-breaking for folder matching.

This module defines the building blocks of the folder matching cascade:

- TargetFramework: A requested TFM split into its alphabetic base and
    numeric version fragment
- MatchStrategy protocol: Interface every cascade step implements
- Strategy registry: Ordered list of named strategies, tried in sequence
- pick_winner: Version-based tie-breaking among the candidates a strategy
    returns

Design Philosophy:
    - Strategies are plain functions (structural typing via Protocol)
    - Registration happens at module import time (strategies self-register)
    - Registration order is cascade order
    - Strategies are pure: no filesystem access, no logging

Example:
    Adding a custom step to the end of the cascade:
        ```python
        from nubin.matching.base import folder_name, register_strategy

        def uap_only(target, candidates):
            return [(c, "0") for c in candidates if folder_name(c).startswith("uap")]

        register_strategy("uap_only", uap_only)
        ```

"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
import re
from typing import Any, NamedTuple, Protocol

# Alphabetic base followed by digits and dots, e.g. "netstandard" + "2.0"
TFM_PATTERN = re.compile(r"^(?P<base>[a-zA-Z]*)(?P<version>[0-9.]*)")


class TargetFramework(NamedTuple):
    """A requested target framework moniker.

    Attributes:
        moniker: The full requested string, e.g. "net452".
        base: Alphabetic prefix, e.g. "net".
        version: Numeric fragment following the base, e.g. "452".
    """

    moniker: str
    base: str
    version: str


def parse_tfm(moniker: str) -> TargetFramework | None:
    """Split a TFM into base and version.

    Returns:
        The parsed moniker, or None when it has no alphabetic base.

    Example:
        ```python
        parse_tfm("netcoreapp3.1")
        # TargetFramework(moniker='netcoreapp3.1', base='netcoreapp', version='3.1')
        parse_tfm("45")  # None
        ```
    """
    if not moniker:
        return None
    match = TFM_PATTERN.match(moniker.strip())
    if match is None or not match.group("base"):
        return None
    return TargetFramework(moniker.strip(), match.group("base"), match.group("version"))


def folder_name(folder: Any) -> str:
    """Return the last path component of a candidate (str or Path)."""
    return Path(folder).name


# A strategy returns (candidate, version) pairs; the candidate is returned as
# passed in so callers get back their own path objects.
Match = tuple[Any, str]


class MatchStrategy(Protocol):
    """Protocol for one step of the matching cascade."""

    def __call__(
        self, target: TargetFramework, candidates: Sequence[Any]
    ) -> list[Match]:
        """Return every eligible candidate with its extracted version.

        Args:
            target: Parsed requested framework.
            candidates: Candidate folders (names or paths).

        Returns:
            List of (candidate, version) pairs, empty if nothing matches.
            Version is the raw fragment, possibly empty.

        """
        ...


# -------------------------------
# Strategy Registry
# -------------------------------

_STRATEGY_REGISTRY: dict[str, MatchStrategy] = {}


def register_strategy(name: str, strategy: MatchStrategy) -> None:
    """Register a cascade step by name.

    New names are appended to the end of the cascade. Registering an
    existing name replaces the strategy but keeps its position (allows
    monkey-patching for tests).

    Args:
        name: Strategy name, lowercase with underscores.
        strategy: Function implementing the MatchStrategy protocol.
    """
    _STRATEGY_REGISTRY[name] = strategy


def get_strategies() -> list[tuple[str, MatchStrategy]]:
    """Return the registered strategies in cascade order."""
    return list(_STRATEGY_REGISTRY.items())


def pick_winner(matches: list[Match]) -> Any | None:
    """Pick the candidate with the highest version string.

    Versions are compared as plain strings, so "9" beats "10" and "4.5"
    beats "4.0". An empty version counts as "0". Among equal versions the
    first candidate wins.

    Returns:
        The winning candidate, or None if there are no matches.
    """
    if not matches:
        return None
    winner, _ = max(matches, key=lambda m: m[1] or "0")
    return winner
