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

"""Best-folder selection for a requested target framework.

get_best_lib_match() runs the registered strategies in order and returns
the winner of the first strategy that produces any candidate.

Example:
    ```python
    from nubin.matching import get_best_lib_match

    get_best_lib_match("net45", ["net40", "net451", "net452"])  # "net452"
    get_best_lib_match("netcoreapp3.0", ["netstandard1.0", "netstandard2.0"])
    # "netstandard2.0"
    ```
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from nubin.logging import get_global_logger
from nubin.matching import strategies  # noqa: F401  (registers the cascade)
from nubin.matching.base import folder_name, get_strategies, parse_tfm, pick_winner


def get_best_lib_match(tfm: str, folder_paths: Iterable[Any]) -> Any | None:
    """Return the folder that best matches the requested framework.

    Args:
        tfm: Requested target framework moniker, e.g. "net452".
        folder_paths: Candidate folders, as names or paths. Only the last
            path component is matched.

    Returns:
        The winning candidate exactly as it was passed in, or None if no
            strategy matched, the candidate set is empty, or the TFM has no
            alphabetic base.

    """
    logger = get_global_logger()
    candidates = list(folder_paths)

    if not candidates:
        logger.debug("MATCH", "No candidate folders")
        return None

    target = parse_tfm(tfm)
    if target is None:
        logger.debug("MATCH", f"Cannot parse target framework: {tfm!r}")
        return None

    for name, strategy in get_strategies():
        matches = strategy(target, candidates)
        if not matches:
            logger.debug("MATCH", f"{name}: no candidates")
            continue
        winner = pick_winner(matches)
        logger.verbose(
            "MATCH",
            f"{name}: {len(matches)} candidate(s), selected {folder_name(winner)}",
        )
        return winner

    logger.verbose("MATCH", f"No folder matches {tfm}")
    return None
