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

"""Target framework folder matching.

A NuGet package ships one lib/ subfolder per target framework (net45,
netstandard2.0, portable-net45+win8, ...). This package picks the single
folder that best fits a requested framework through an ordered cascade of
strategies; see nubin.matching.strategies for the steps.

Example:
    ```python
    from nubin.matching import get_best_lib_match

    folder = get_best_lib_match("net45", ["net451", "net452", "netstandard2.0"])
    print(folder)  # net452
    ```

"""

from .base import TargetFramework, get_strategies, parse_tfm, register_strategy
from .matcher import get_best_lib_match

__all__ = [
    "TargetFramework",
    "get_best_lib_match",
    "get_strategies",
    "parse_tfm",
    "register_strategy",
]
