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

"""Built-in steps of the folder matching cascade.

Steps are registered in cascade order when this module is imported:

1. exact: folder name equals the requested TFM
2. lenient: requested TFM followed by more version characters
    (net45 -> net451, net452)
3. netstandard: netstandard folders, for runtimes that consume
    netstandard libraries (netcoreapp3.0 -> netstandard2.0)
4. base: requested base plus any letters and a version (net -> net46, netcore45)
5. precise: base followed by a version anywhere in the name
    (net -> portable-net45+win8)
6. broad: first three letters of the base followed by a version anywhere

All matching is case-insensitive.
"""

from __future__ import annotations

from collections.abc import Sequence
import re
from typing import Any

from nubin.matching.base import (
    Match,
    TargetFramework,
    folder_name,
    register_strategy,
)

NETSTANDARD_BASE = "netstandard"


def _collect(
    candidates: Sequence[Any], pattern: re.Pattern[str], *, anchored: bool
) -> list[Match]:
    matches: list[Match] = []
    for candidate in candidates:
        name = folder_name(candidate)
        token = pattern.fullmatch(name) if anchored else pattern.search(name)
        if token is None:
            continue
        matches.append((candidate, token.group("version")))
    return matches


def exact_match(target: TargetFramework, candidates: Sequence[Any]) -> list[Match]:
    wanted = target.moniker.lower()
    for candidate in candidates:
        if folder_name(candidate).lower() == wanted:
            return [(candidate, target.version)]
    return []


def lenient_match(target: TargetFramework, candidates: Sequence[Any]) -> list[Match]:
    pattern = re.compile(
        rf"{re.escape(target.moniker)}(?P<version>[0-9.]*)", re.IGNORECASE
    )
    return _collect(candidates, pattern, anchored=True)


def netstandard_match(
    target: TargetFramework, candidates: Sequence[Any]
) -> list[Match]:
    if target.base.lower() == NETSTANDARD_BASE:
        return []
    pattern = re.compile(rf"{NETSTANDARD_BASE}(?P<version>[0-9.]*)", re.IGNORECASE)
    return _collect(candidates, pattern, anchored=True)


def base_match(target: TargetFramework, candidates: Sequence[Any]) -> list[Match]:
    pattern = re.compile(
        rf"{re.escape(target.base)}[a-z]*(?P<version>[0-9.]*)", re.IGNORECASE
    )
    return _collect(candidates, pattern, anchored=True)


def precise_match(target: TargetFramework, candidates: Sequence[Any]) -> list[Match]:
    pattern = re.compile(
        rf"{re.escape(target.base)}(?P<version>[0-9.]+)", re.IGNORECASE
    )
    return _collect(candidates, pattern, anchored=False)


def broad_match(target: TargetFramework, candidates: Sequence[Any]) -> list[Match]:
    pattern = re.compile(
        rf"{re.escape(target.base[:3])}(?P<version>[0-9.]+)", re.IGNORECASE
    )
    return _collect(candidates, pattern, anchored=False)


register_strategy("exact", exact_match)
register_strategy("lenient", lenient_match)
register_strategy("netstandard", netstandard_match)
register_strategy("base", base_match)
register_strategy("precise", precise_match)
register_strategy("broad", broad_match)
