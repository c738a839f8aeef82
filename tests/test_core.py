"""
Tests for nubin.core module.

Tests core orchestration including:
- Locating the extracted package folder
- Single package resolution (install -> match -> copy)
- Whole manifest runs with mapping and cleanup
- Error handling
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from nubin.core import (
    copy_binary_set,
    find_package_folder,
    get_lib_candidates,
    resolve_manifest,
    resolve_package,
)
from nubin.exceptions import ConfigError, InstallError, NetworkError
from nubin.logging import get_logger, set_global_logger
from nubin.mapping import PackageInfoMapping
from nubin.models import CustomProperties, PackageAtom, RunSettings
from nubin.patterns import ExclusionFilter

pytestmark = pytest.mark.unit

FAKE_TOOL = Path("nuget.exe")


@pytest.fixture
def fake_installer():
    """Patch the installer so no process or download runs."""
    with patch("nubin.core.get_nuget_tool", return_value=FAKE_TOOL) as mock_tool, patch(
        "nubin.core.run_install"
    ) as mock_run:
        yield mock_tool, mock_run


class TestFindPackageFolder:
    """Tests for locating the extracted package."""

    def test_pinned_version(self, tmp_test_dir):
        """Test that the exact Name.Version folder is preferred."""
        (tmp_test_dir / "Foo.1.0.0").mkdir()
        (tmp_test_dir / "Foo.2.0.0").mkdir()

        package = PackageAtom(name="Foo", version="1.0.0")
        assert find_package_folder(tmp_test_dir, package) == tmp_test_dir / "Foo.1.0.0"

    def test_newest_folder_without_version(self, tmp_test_dir):
        """Test that the most recently modified folder wins without a pin."""
        old = tmp_test_dir / "Foo.1.0.0"
        new = tmp_test_dir / "Foo.2.0.0"
        old.mkdir()
        new.mkdir()
        os.utime(old, (1_000_000, 1_000_000))
        os.utime(new, (2_000_000, 2_000_000))

        assert find_package_folder(tmp_test_dir, PackageAtom(name="Foo")) == new

    def test_similar_names_are_ignored(self, tmp_test_dir):
        """Test that Foo does not pick up Foo.Bar.1.0.0."""
        (tmp_test_dir / "Foo.Bar.1.0.0").mkdir()

        assert find_package_folder(tmp_test_dir, PackageAtom(name="Foo")) is None

    def test_case_insensitive(self, tmp_test_dir):
        """Test that folder names are compared case-insensitively."""
        (tmp_test_dir / "foo.1.0.0").mkdir()

        package = PackageAtom(name="Foo", version="1.0.0")
        assert find_package_folder(tmp_test_dir, package) == tmp_test_dir / "foo.1.0.0"

    def test_missing_root(self, tmp_test_dir):
        """Test that a missing root yields None."""
        assert find_package_folder(tmp_test_dir / "nope", PackageAtom(name="Foo")) is None


class TestGetLibCandidates:
    """Tests for listing framework folders."""

    def test_lists_sorted_subfolders(self, tmp_test_dir, make_package_tree):
        """Test that only lib subfolders are returned, sorted."""
        package_dir = make_package_tree(
            tmp_test_dir, "Foo.1.0.0", {"netstandard2.0": [], "net45": []}
        )
        (package_dir / "lib" / "stray.txt").write_text("x")

        names = [p.name for p in get_lib_candidates(package_dir)]
        assert names == ["net45", "netstandard2.0"]

    def test_no_lib_folder(self, tmp_test_dir):
        """Test that a package without lib/ has no candidates."""
        assert get_lib_candidates(tmp_test_dir) == []


class TestResolvePackage:
    """Tests for resolving one package."""

    def test_success(self, tmp_test_dir, make_package_tree, fake_installer):
        """Test install, match and copy of the best framework folder."""
        _, mock_run = fake_installer
        settings = RunSettings(tfm="net45", packages_path=tmp_test_dir / "pkgs")
        package = PackageAtom(name="Foo", version="1.0.0")
        make_package_tree(
            settings.packages_path / "foo",
            "Foo.1.0.0",
            {"net40": ["Foo.dll"], "net452": ["Foo.dll", "Foo.xml"]},
        )
        output = tmp_test_dir / "out"
        mapping = PackageInfoMapping()

        result = resolve_package(package, settings, output, mapping)

        assert result.success is True
        assert result.framework_folder.name == "net452"
        assert result.binaries == ["Foo.dll"]
        assert (output / "Foo.dll").read_bytes() == b"net452/Foo.dll"
        assert (output / "Foo.xml").exists()
        assert mapping.assemblies["Foo.dll"]["version"] == "1.0.0"
        assert mapping.assemblies["Foo.dll"]["framework"] == "net452"

        tool, command = mock_run.call_args.args
        assert tool == FAKE_TOOL
        assert command.startswith("install Foo ")
        assert "-Framework net45" in command
        assert "-Version 1.0.0" in command

    def test_writes_default_config(self, tmp_test_dir, make_package_tree, fake_installer):
        """Test that a NuGet.config is generated next to the installer output."""
        _, mock_run = fake_installer
        settings = RunSettings(tfm="net45", packages_path=tmp_test_dir / "pkgs")
        make_package_tree(settings.packages_path / "foo", "Foo.1.0.0", {"net45": ["Foo.dll"]})

        resolve_package(PackageAtom(name="Foo"), settings, tmp_test_dir / "out")

        config = settings.packages_path / "foo" / "NuGet.config"
        assert config.exists()
        assert f'-ConfigFile "{config}"' in mock_run.call_args.args[1]

    def test_explicit_config_is_used(self, tmp_test_dir, make_package_tree, fake_installer):
        """Test that nuget_config is passed through without generating one."""
        _, mock_run = fake_installer
        explicit = tmp_test_dir / "custom.config"
        settings = RunSettings(
            tfm="net45", packages_path=tmp_test_dir / "pkgs", nuget_config=explicit
        )
        make_package_tree(settings.packages_path / "foo", "Foo.1.0.0", {"net45": ["Foo.dll"]})

        resolve_package(PackageAtom(name="Foo"), settings, tmp_test_dir / "out")

        assert not (settings.packages_path / "foo" / "NuGet.config").exists()
        assert f'-ConfigFile "{explicit}"' in mock_run.call_args.args[1]

    def test_package_tfm_overrides_default(
        self, tmp_test_dir, make_package_tree, fake_installer
    ):
        """Test that the package TFM drives matching."""
        settings = RunSettings(tfm="net48", packages_path=tmp_test_dir / "pkgs")
        package = PackageAtom(
            name="Foo", custom_properties=CustomProperties(tfm="netcoreapp3.1")
        )
        make_package_tree(
            settings.packages_path / "foo",
            "Foo.1.0.0",
            {"net48": ["Foo.dll"], "netstandard2.0": ["Foo.dll"]},
        )

        result = resolve_package(package, settings, tmp_test_dir / "out")

        assert result.framework_folder.name == "netstandard2.0"

    def test_exclusions_applied(self, tmp_test_dir, make_package_tree, fake_installer):
        """Test that excluded binaries are not copied or mapped."""
        settings = RunSettings(tfm="net45", packages_path=tmp_test_dir / "pkgs")
        package = PackageAtom(
            name="Foo",
            custom_properties=CustomProperties(
                excluded_dlls=ExclusionFilter.from_wildcards(["*.Design.dll"])
            ),
        )
        make_package_tree(
            settings.packages_path / "foo",
            "Foo.1.0.0",
            {"net45": ["Foo.dll", "Foo.Design.dll"]},
        )
        mapping = PackageInfoMapping()

        result = resolve_package(package, settings, tmp_test_dir / "out", mapping)

        assert result.binaries == ["Foo.dll"]
        assert "Foo.Design.dll" not in mapping

    @pytest.mark.parametrize(
        "error", [InstallError("exit code 1", returncode=1), NetworkError("offline")]
    )
    def test_install_failure(self, tmp_test_dir, fake_installer, error):
        """Test that installer and download errors become a failed result."""
        _, mock_run = fake_installer
        mock_run.side_effect = error
        settings = RunSettings(tfm="net45", packages_path=tmp_test_dir / "pkgs")

        result = resolve_package(PackageAtom(name="Foo"), settings, tmp_test_dir / "out")

        assert result.success is False
        assert result.binaries == []
        assert not (tmp_test_dir / "out").exists()

    def test_missing_extracted_folder(self, tmp_test_dir, fake_installer):
        """Test that a missing package folder fails the package."""
        settings = RunSettings(tfm="net45", packages_path=tmp_test_dir / "pkgs")

        result = resolve_package(PackageAtom(name="Foo"), settings, tmp_test_dir / "out")

        assert result.success is False

    def test_no_target_framework(self, tmp_test_dir, make_package_tree, fake_installer):
        """Test that a package without any TFM fails."""
        settings = RunSettings(packages_path=tmp_test_dir / "pkgs")
        make_package_tree(settings.packages_path / "foo", "Foo.1.0.0", {"net45": ["Foo.dll"]})

        result = resolve_package(PackageAtom(name="Foo"), settings, tmp_test_dir / "out")

        assert result.success is False

    def test_no_matching_folder(self, tmp_test_dir, make_package_tree, fake_installer):
        """Test that no matching framework folder fails without copying."""
        settings = RunSettings(tfm="net45", packages_path=tmp_test_dir / "pkgs")
        make_package_tree(settings.packages_path / "foo", "Foo.1.0.0", {"sl5": ["Foo.dll"]})

        result = resolve_package(PackageAtom(name="Foo"), settings, tmp_test_dir / "out")

        assert result.success is False
        assert result.framework_folder is None
        assert not (tmp_test_dir / "out").exists()

    def test_copy_binary_set_returns_bool(
        self, tmp_test_dir, make_package_tree, fake_installer
    ):
        """Test the boolean wrapper."""
        settings = RunSettings(tfm="net45", packages_path=tmp_test_dir / "pkgs")
        make_package_tree(settings.packages_path / "foo", "Foo.1.0.0", {"net45": ["Foo.dll"]})

        assert copy_binary_set(PackageAtom(name="Foo"), settings, tmp_test_dir / "out") is True

    def test_blank_package_tfm_uses_run_default(
        self, tmp_test_dir, make_package_tree, fake_installer
    ):
        """Test that a whitespace-only package TFM falls back for install and match."""
        _, mock_run = fake_installer
        settings = RunSettings(tfm="net45", packages_path=tmp_test_dir / "pkgs")
        package = PackageAtom(name="Foo", custom_properties=CustomProperties(tfm="  "))
        make_package_tree(settings.packages_path / "foo", "Foo.1.0.0", {"net45": ["Foo.dll"]})

        result = resolve_package(package, settings, tmp_test_dir / "out")

        assert result.success is True
        assert result.framework_folder.name == "net45"
        assert "-Framework net45" in mock_run.call_args.args[1]

    def test_packages_path_is_a_file(self, tmp_test_dir, fake_installer):
        """Test that an unusable install root fails the package instead of raising."""
        _, mock_run = fake_installer
        blocker = tmp_test_dir / "pkgs"
        blocker.write_text("not a directory")
        settings = RunSettings(tfm="net45", packages_path=blocker)

        assert copy_binary_set(PackageAtom(name="Foo"), settings, tmp_test_dir / "out") is False
        mock_run.assert_not_called()

    def test_unreadable_package_folder(
        self, tmp_test_dir, make_package_tree, fake_installer
    ):
        """Test that errors listing the extracted package fail the package."""
        settings = RunSettings(tfm="net45", packages_path=tmp_test_dir / "pkgs")
        make_package_tree(settings.packages_path / "foo", "Foo.1.0.0", {"net45": ["Foo.dll"]})

        with patch(
            "nubin.core.get_lib_candidates", side_effect=PermissionError("denied")
        ):
            result = resolve_package(
                PackageAtom(name="Foo"), settings, tmp_test_dir / "out"
            )

        assert result.success is False
        assert not (tmp_test_dir / "out").exists()

    def test_failure_is_logged(self, tmp_test_dir, fake_installer, capsys):
        """Test that filesystem failures are reported through the logger."""
        set_global_logger(get_logger())
        blocker = tmp_test_dir / "pkgs"
        blocker.write_text("x")

        resolve_package(
            PackageAtom(name="Foo"),
            RunSettings(tfm="net45", packages_path=blocker),
            tmp_test_dir / "out",
        )

        assert "[error] Could not prepare" in capsys.readouterr().out


class TestResolveManifest:
    """Tests for whole-manifest runs."""

    def _lay_out(self, root: Path, make_package_tree) -> None:
        make_package_tree(
            root / "pkgs" / "newtonsoft.json",
            "Newtonsoft.Json.13.0.3",
            {"net45": ["Newtonsoft.Json.dll"], "net48": ["Newtonsoft.Json.dll"]},
        )
        make_package_tree(
            root / "pkgs" / "widgets",
            "Contoso.Widgets.1.2.0",
            {
                "netstandard2.0": [
                    "Contoso.Widgets.dll",
                    "Contoso.Widgets.Design.dll",
                    "Contoso.Widgets.xml",
                ]
            },
        )

    def test_resolves_all_packages(
        self,
        tmp_test_dir,
        create_yaml_file,
        sample_manifest_data,
        make_package_tree,
        fake_installer,
    ):
        """Test that every package lands in its own folder with a mapping file."""
        manifest_path = create_yaml_file("packages.yaml", sample_manifest_data)
        self._lay_out(tmp_test_dir, make_package_tree)

        result = resolve_manifest(manifest_path)

        output = (tmp_test_dir / "bin").resolve()
        assert result.status == "success"
        assert result.resolved == ["newtonsoft.json", "widgets"]
        assert result.failed == []
        assert result.output_dir == output
        assert (output / "newtonsoft.json" / "Newtonsoft.Json.dll").read_bytes() == (
            b"net48/Newtonsoft.Json.dll"
        )
        assert (output / "widgets" / "Contoso.Widgets.dll").exists()
        assert not (output / "widgets" / "Contoso.Widgets.Design.dll").exists()

        data = json.loads(result.mapping_file.read_text(encoding="utf-8"))
        assert result.mapping_file == output / "assembly-mapping.json"
        assert data["assemblies"]["Contoso.Widgets.dll"] == {
            "package": "Contoso.Widgets",
            "version": "1.2.0",
            "moniker": "widgets",
            "framework": "netstandard2.0",
        }

    def test_partial_failure(
        self, tmp_test_dir, create_yaml_file, sample_manifest_data, fake_installer
    ):
        """Test that failed packages are reported and the run continues."""
        manifest_path = create_yaml_file("packages.yaml", sample_manifest_data)
        _, mock_run = fake_installer
        mock_run.side_effect = InstallError("exit code 1", returncode=1)

        result = resolve_manifest(manifest_path, tmp_test_dir / "out")

        assert result.status == "partial"
        assert result.resolved == []
        assert result.failed == ["newtonsoft.json", "widgets"]
        assert result.mapping_file.exists()

    def test_custom_mapping_file_and_clean(
        self,
        tmp_test_dir,
        create_yaml_file,
        sample_manifest_data,
        make_package_tree,
        fake_installer,
    ):
        """Test the mapping file override and installer output cleanup."""
        manifest_path = create_yaml_file("packages.yaml", sample_manifest_data)
        self._lay_out(tmp_test_dir, make_package_tree)
        mapping_file = tmp_test_dir / "meta" / "map.json"

        result = resolve_manifest(
            manifest_path, tmp_test_dir / "out", clean=True, mapping_file=mapping_file
        )

        assert result.mapping_file == mapping_file
        assert mapping_file.exists()
        assert not (tmp_test_dir / "pkgs").exists()
        assert (tmp_test_dir / "out" / "widgets" / "Contoso.Widgets.dll").exists()

    def test_existing_mapping_file_is_merged(
        self,
        tmp_test_dir,
        create_yaml_file,
        sample_manifest_data,
        make_package_tree,
        fake_installer,
    ):
        """Test that an existing mapping file keeps its entries and gains this run's."""
        manifest_path = create_yaml_file("packages.yaml", sample_manifest_data)
        self._lay_out(tmp_test_dir, make_package_tree)
        earlier = PackageInfoMapping()
        earlier.add(PackageAtom(name="Other"), "3.0.0", "net45", ["Other.dll"])
        earlier.add(PackageAtom(name="Stale"), "0.1.0", "net40", ["Contoso.Widgets.dll"])
        mapping_file = tmp_test_dir / "map.json"
        earlier.save(mapping_file)

        resolve_manifest(manifest_path, tmp_test_dir / "out", mapping_file=mapping_file)

        assemblies = PackageInfoMapping.load(mapping_file).assemblies
        assert assemblies["Other.dll"]["package"] == "Other"
        assert assemblies["Contoso.Widgets.dll"]["package"] == "Contoso.Widgets"
        assert "Newtonsoft.Json.dll" in assemblies

    def test_unreadable_mapping_file_is_replaced(
        self,
        tmp_test_dir,
        create_yaml_file,
        sample_manifest_data,
        make_package_tree,
        fake_installer,
    ):
        """Test that a corrupt mapping file is overwritten with this run's entries."""
        manifest_path = create_yaml_file("packages.yaml", sample_manifest_data)
        self._lay_out(tmp_test_dir, make_package_tree)
        mapping_file = tmp_test_dir / "map.json"
        mapping_file.write_text("{not json", encoding="utf-8")

        resolve_manifest(manifest_path, tmp_test_dir / "out", mapping_file=mapping_file)

        assemblies = PackageInfoMapping.load(mapping_file).assemblies
        assert sorted(assemblies) == ["Contoso.Widgets.dll", "Newtonsoft.Json.dll"]

    def test_default_mapping_file_is_rewritten(
        self,
        tmp_test_dir,
        create_yaml_file,
        sample_manifest_data,
        make_package_tree,
        fake_installer,
    ):
        """Test that the default mapping file only holds the current run."""
        manifest_path = create_yaml_file("packages.yaml", sample_manifest_data)
        self._lay_out(tmp_test_dir, make_package_tree)
        output = tmp_test_dir / "out"
        earlier = PackageInfoMapping()
        earlier.add(PackageAtom(name="Other"), "3.0.0", "net45", ["Other.dll"])
        earlier.save(output / "assembly-mapping.json")

        result = resolve_manifest(manifest_path, output)

        assert "Other.dll" not in PackageInfoMapping.load(result.mapping_file)

    def test_invalid_manifest_raises(self, create_yaml_file):
        """Test that configuration errors propagate."""
        manifest_path = create_yaml_file("packages.yaml", {"packages": []})

        with pytest.raises(ConfigError):
            resolve_manifest(manifest_path)
