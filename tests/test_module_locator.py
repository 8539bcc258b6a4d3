"""Tests for module identifier parsing and lookup."""

from unittest.mock import Mock

import pytest
from stylepath.errors import ConfigurationError
from stylepath.errors import ParseError
from stylepath.models import ModuleRecord
from stylepath.module_resolution import ModuleLocator
from stylepath.module_resolution import StaticModuleRegistry


class TestParse:
    def test_scoped_module(self):
        assert ModuleLocator.parse("@scope/pkg/lib/_foo") == ("@scope/pkg", "lib/_foo")

    def test_bare_module(self):
        assert ModuleLocator.parse("pkg/lib/foo") == ("pkg", "lib/foo")

    def test_module_only(self):
        assert ModuleLocator.parse("pkg") == ("pkg", "")
        assert ModuleLocator.parse("@scope/pkg") == ("@scope/pkg", "")

    def test_empty_identifier_is_a_parse_error(self):
        with pytest.raises(ParseError, match="invalid uri"):
            ModuleLocator.parse("")


class TestLocate:
    def test_uses_requesting_file_as_context_when_real(self, tmp_path):
        prev = tmp_path / "app.scss"
        prev.write_text("")
        registry = Mock()
        registry.lookup.return_value = None
        locator = ModuleLocator(registry, tmp_path / "root")

        lookup = locator.locate("pkg/foo", str(prev))

        registry.lookup.assert_called_once_with("pkg", str(prev))
        assert lookup.is_real_file
        assert lookup.record is None

    def test_uses_root_as_context_otherwise(self, tmp_path):
        registry = Mock()
        registry.lookup.return_value = None
        locator = ModuleLocator(registry, tmp_path)

        lookup = locator.locate("pkg/foo", "stdin")

        registry.lookup.assert_called_once_with("pkg", str(tmp_path))
        assert not lookup.is_real_file
        assert lookup.context_path == str(tmp_path)

    def test_finds_scoped_module(self, tmp_path):
        record = ModuleRecord(name="@scope/pkg", stylesheet_dir=tmp_path)
        locator = ModuleLocator(StaticModuleRegistry([record]), tmp_path)

        lookup = locator.locate("@scope/pkg/lib/_foo", "stdin")

        assert lookup.module_name == "@scope/pkg"
        assert lookup.relative_path == "lib/_foo"
        assert lookup.record is record

    def test_scoped_miss_retries_first_segment(self, tmp_path):
        record = ModuleRecord(name="@scope", stylesheet_dir=tmp_path)
        registry = Mock(wraps=StaticModuleRegistry([record]))
        locator = ModuleLocator(registry, tmp_path)

        lookup = locator.locate("@scope/name/sub", "stdin")

        assert [call.args[0] for call in registry.lookup.call_args_list] == ["@scope/name", "@scope"]
        assert lookup.module_name == "@scope"
        assert lookup.relative_path == "name/sub"
        assert lookup.record is record

    def test_scoped_retry_happens_only_once(self, tmp_path):
        registry = Mock()
        registry.lookup.return_value = None
        locator = ModuleLocator(registry, tmp_path)

        lookup = locator.locate("@a/b/c/d", "stdin")

        assert registry.lookup.call_count == 2
        assert lookup.record is None

    def test_unscoped_miss_is_not_retried(self, tmp_path):
        registry = Mock()
        registry.lookup.return_value = None
        locator = ModuleLocator(registry, tmp_path)

        locator.locate("pkg/foo", "stdin")

        assert registry.lookup.call_count == 1

    def test_relative_identifiers_skip_registry(self, tmp_path):
        registry = Mock()
        locator = ModuleLocator(registry, tmp_path)

        lookup = locator.locate("./foo", "stdin")

        registry.lookup.assert_not_called()
        assert lookup.module_name is None
        assert lookup.relative_path == "./foo"

    def test_absolute_identifiers_skip_registry(self, tmp_path):
        registry = Mock()
        locator = ModuleLocator(registry, tmp_path)

        lookup = locator.locate(str(tmp_path / "x.scss"), "stdin")

        registry.lookup.assert_not_called()
        assert lookup.module_name is None


def test_missing_stylesheet_dir_error_names_module_and_metadata(tmp_path):
    record = ModuleRecord(
        name="widgets",
        metadata_file=tmp_path / "package.json",
        main_path=tmp_path / "index.js",
    )

    error = ModuleLocator.missing_stylesheet_dir_error(record)

    assert isinstance(error, ConfigurationError)
    assert error.module_name == "widgets"
    assert "widgets's package.json" in str(error)
    assert str(tmp_path / "index.js") in str(error)
