"""
nubin - NuGet binary resolver

Resolves NuGet package binaries for build and documentation pipelines: each
package is installed with nuget.exe, the best target-framework folder is
selected from its lib/ directory, and the binaries and XML documentation
are copied into an output folder.

nubin provides:
  - Declarative YAML package manifests with organization defaults
  - A fallback cascade for picking the best lib/<tfm> folder
  - Wildcard exclusion of unwanted binaries
  - An assembly -> package mapping for downstream tooling

Quick Start
-----------
Validate a manifest:

    $ nubin validate docs/packages.yaml

Resolve binaries:

    $ nubin resolve docs/packages.yaml --output-dir _bin

Package Structure
-----------------
cli : module
    Command-line interface with argparse.
core : module
    Package and manifest resolution.
config : package
    YAML manifest loading and merging.
matching : package
    Target framework folder matching cascade.
install : package
    nuget.exe command construction and execution.
io : package
    Content copy, directory deletion and downloads.

Public API
----------
    from nubin.core import copy_binary_set, resolve_manifest
    from nubin.matching import get_best_lib_match
    from nubin.install import build_install_command
    from nubin.io import copy_library_content, delete_directory
    from nubin.validation import validate_manifest

Project Information
-------------------
Author: Roger Cibrian
License: GPL-3.0-only
"""

__version__ = "0.1.0"
__author__ = "Roger Cibrian"
__license__ = "GPL-3.0-only"
__description__ = "nubin - NuGet binary resolver"

from nubin.core import copy_binary_set, resolve_manifest  # noqa: E402
from nubin.matching import get_best_lib_match  # noqa: E402
from nubin.validation import validate_manifest  # noqa: E402

__all__ = [
    "__version__",
    "__author__",
    "__license__",
    "__description__",
    "copy_binary_set",
    "resolve_manifest",
    "get_best_lib_match",
    "validate_manifest",
]
