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

"""Command-line interface for nubin.

Commands:

    validate: Validate manifest syntax and structure
    resolve: Install every package in a manifest and copy its binaries
    match: Show which framework folder would be selected

Example:
    Validate a manifest:
        ```bash
        $ nubin validate docs/packages.yaml
        ```

    Resolve binaries:
        ```bash
        $ nubin resolve docs/packages.yaml --output-dir _bin --clean
        ```

    Try the folder matcher:
        ```bash
        $ nubin match net45 net40 net451 net452 netstandard2.0
        net452
        ```

Exit Codes:

- 0: Success
- 1: Error (invalid manifest, failed package, or no matching folder)

"""

from __future__ import annotations

import argparse
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
import sys

from nubin.core import resolve_manifest
from nubin.exceptions import NubinError
from nubin.logging import get_logger, set_global_logger
from nubin.matching import get_best_lib_match
from nubin.validation import validate_manifest


def _print_error(err: Exception, show_traceback: bool) -> None:
    print(f"Error: {err}")
    if show_traceback:
        import traceback

        traceback.print_exc()


def cmd_validate(args: argparse.Namespace) -> int:
    """Handler for 'nubin validate' command.

    Args:
        args: Parsed command-line arguments containing the manifest path and
            verbose flag.

    Returns:
        Exit code (0 for valid manifest, 1 for invalid).

    """
    logger = get_logger(verbose=args.verbose, debug=False)
    set_global_logger(logger)

    manifest_path = Path(args.manifest).resolve()

    print(f"Validating manifest: {manifest_path}")
    print()

    result = validate_manifest(manifest_path)

    print("=" * 70)
    print("VALIDATION RESULTS")
    print("=" * 70)
    print(f"Manifest:        {result.manifest_path}")
    print(f"Status:          {result.status.upper()}")
    print(f"Package Count:   {result.package_count}")
    print()

    if result.warnings:
        print(f"Warnings ({len(result.warnings)}):")
        for warning in result.warnings:
            print(f"  [WARNING] {warning}")
        print()

    if result.errors:
        print(f"Errors ({len(result.errors)}):")
        for error in result.errors:
            print(f"  [X] {error}")
        print()

    print("=" * 70)

    if result.status == "valid":
        print()
        print("[SUCCESS] Manifest is valid!")
        return 0
    print()
    print(f"[FAILED] Manifest validation failed with {len(result.errors)} error(s).")
    return 1


def cmd_resolve(args: argparse.Namespace) -> int:
    """Handler for 'nubin resolve' command.

    Installs every package in the manifest with nuget.exe, selects the best
    framework folder and copies its binaries into the output directory.

    Args:
        args: Parsed command-line arguments containing the manifest path,
            output directory, mapping file and flags.

    Returns:
        Exit code (0 if every package resolved, 1 otherwise).

    """
    logger = get_logger(verbose=args.verbose, debug=args.debug)
    set_global_logger(logger)

    manifest_path = Path(args.manifest).resolve()
    output_dir = Path(args.output_dir) if args.output_dir else None
    mapping_file = Path(args.mapping_file) if args.mapping_file else None

    if not manifest_path.exists():
        print(f"Error: Manifest file not found: {manifest_path}")
        return 1

    print(f"Resolving packages from manifest: {manifest_path}")
    print()

    try:
        result = resolve_manifest(
            manifest_path,
            output_dir,
            clean=args.clean,
            mapping_file=mapping_file,
        )
    except (NubinError, OSError) as err:
        _print_error(err, args.verbose or args.debug)
        return 1

    print("=" * 70)
    print("RESOLVE RESULTS")
    print("=" * 70)
    print(f"Output Directory: {result.output_dir}")
    print(f"Mapping File:     {result.mapping_file}")
    print(f"Resolved ({len(result.resolved)}): {', '.join(result.resolved) or '-'}")
    print(f"Failed ({len(result.failed)}):   {', '.join(result.failed) or '-'}")
    print(f"Status:           {result.status}")
    print("=" * 70)
    print()

    if result.failed:
        print(f"[FAILED] {len(result.failed)} package(s) could not be resolved.")
        return 1
    print("[SUCCESS] All packages resolved!")
    return 0


def cmd_match(args: argparse.Namespace) -> int:
    """Handler for 'nubin match' command.

    Prints the folder the matcher selects for a framework among the given
    folder names.

    Returns:
        Exit code (0 if a folder matched, 1 otherwise).

    """
    logger = get_logger(verbose=args.verbose, debug=args.verbose)
    set_global_logger(logger)

    winner = get_best_lib_match(args.tfm, args.folders)
    if winner is None:
        print(f"No folder matches {args.tfm}")
        return 1
    print(winner)
    return 0


def _package_version() -> str:
    try:
        return version("nubin")
    except PackageNotFoundError:
        from nubin import __version__

        return __version__


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the nubin CLI."""
    parser = argparse.ArgumentParser(
        prog="nubin",
        description="nubin - resolve NuGet package binaries for a target framework",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"nubin {_package_version()}",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        help="Available commands",
        required=True,
    )

    # 'validate' command
    parser_validate = subparsers.add_parser(
        "validate",
        help="Validate manifest syntax and structure (no installs)",
        description="Check a manifest for syntax errors and configuration issues without running nuget.exe.",
    )
    parser_validate.add_argument(
        "manifest",
        help="Path to the manifest YAML file",
    )
    parser_validate.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show validation progress and details",
    )
    parser_validate.set_defaults(func=cmd_validate)

    # 'resolve' command
    parser_resolve = subparsers.add_parser(
        "resolve",
        help="Install packages and copy their binaries",
        description="Install every package in the manifest and copy the best-matching framework binaries.",
    )
    parser_resolve.add_argument(
        "manifest",
        help="Path to the manifest YAML file",
    )
    parser_resolve.add_argument(
        "--output-dir",
        default=None,
        help="Root directory for copied binaries (default: defaults.output_path or ./_bin)",
    )
    parser_resolve.add_argument(
        "--mapping-file",
        default=None,
        help="Where to write the assembly mapping JSON (default: <output-dir>/assembly-mapping.json)",
    )
    parser_resolve.add_argument(
        "--clean",
        action="store_true",
        help="Delete the installer output directory after resolving",
    )
    parser_resolve.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show progress and high-level status updates",
    )
    parser_resolve.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Show detailed debugging output (implies --verbose)",
    )
    parser_resolve.set_defaults(func=cmd_resolve)

    # 'match' command
    parser_match = subparsers.add_parser(
        "match",
        help="Show which framework folder would be selected",
        description="Run the framework folder matcher against a list of folder names.",
    )
    parser_match.add_argument(
        "tfm",
        help="Requested target framework moniker (e.g. net452)",
    )
    parser_match.add_argument(
        "folders",
        nargs="*",
        help="Candidate folder names",
    )
    parser_match.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show which matching step selected the folder",
    )
    parser_match.set_defaults(func=cmd_match)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the nubin CLI.

    This function is registered as the 'nubin' console script in pyproject.toml.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
