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

"""Manifest loading for nubin.

Manifests are YAML files listing the packages to resolve, optionally layered
on top of organization defaults (defaults/org.yaml found upward from the
manifest). See nubin.config.loader for the merge rules.

Public API:

- load_effective_config: Load and merge the raw configuration dict
- load_manifest: Load a manifest into RunSettings and PackageAtom objects

"""

from .loader import load_effective_config, load_manifest

__all__ = ["load_effective_config", "load_manifest"]
