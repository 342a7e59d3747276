"""Unit tests for project module discovery."""

from psdocsync.modules.project_scan import discover_imported_modules, modules_in_text


class TestModulesInText:
    def test_import_module(self):
        text = "Import-Module Pester\nImport-Module -Name 'Az.Accounts' -Force\n"
        assert modules_in_text(text) == ["Pester", "Az.Accounts"]

    def test_using_module(self):
        assert modules_in_text("using module Widgets.Core\n") == ["Widgets.Core"]

    def test_requires_modules(self):
        text = "#Requires -Modules PSReadLine, @{ModuleName='Az.Storage'; ModuleVersion='5.0'}\n"
        assert modules_in_text(text) == ["PSReadLine", "Az.Storage"]

    def test_commented_import_ignored(self):
        assert modules_in_text("# Import-Module Old\n") == []


class TestDiscoverImportedModules:
    def test_distinct_sorted(self, tmp_path):
        (tmp_path / "a.ps1").write_text("Import-Module pester\nImport-Module Zeta\n")
        sub = tmp_path / "lib"
        sub.mkdir()
        (sub / "b.psm1").write_text("Import-Module Pester\nusing module Alpha\n")
        (tmp_path / "notes.txt").write_text("Import-Module Ignored\n")

        assert discover_imported_modules(tmp_path) == ["Alpha", "pester", "Zeta"]

    def test_custom_globs(self, tmp_path):
        (tmp_path / "a.ps1").write_text("Import-Module One\n")
        (tmp_path / "b.psd1").write_text("Import-Module Two\n")

        assert discover_imported_modules(tmp_path, ["*.psd1"]) == ["Two"]

    def test_empty_project(self, tmp_path):
        assert discover_imported_modules(tmp_path) == []
