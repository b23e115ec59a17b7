"""
Unit tests for workflow and manifest loading.
"""

import json

import pytest

from pipecheck.commands.errors import ParseError, SetupError
from pipecheck.commands.loader import (
    load_manifest,
    load_workflow_document,
    normalize_workflow_keys,
)


class TestLoadWorkflowDocument:
    """Tests for load_workflow_document."""

    def test_loads_fixture(self, bundled_workflow_path):
        doc = load_workflow_document(bundled_workflow_path)
        assert doc.source == str(bundled_workflow_path)
        assert doc.job("build") is not None

    def test_unquoted_on_key_is_restored(self, tmp_path):
        """Test that YAML 1.1 'on' (parsed as True) is exposed as 'on'."""
        path = tmp_path / "ci.yml"
        path.write_text(
            "on:\n  push:\n    branches: [main]\njobs: {}\n", encoding="utf-8"
        )
        doc = load_workflow_document(path)
        assert doc.branches("push").to_python() == ["main"]
        assert "True" not in doc.node

    def test_missing_file_is_setup_error(self, tmp_path):
        missing = tmp_path / "nope.yml"
        with pytest.raises(SetupError, match="not found") as exc_info:
            load_workflow_document(missing)
        assert exc_info.value.code == "FILE_NOT_FOUND"
        assert exc_info.value.config_file == str(missing)

    def test_invalid_yaml_is_parse_error(self, tmp_path):
        path = tmp_path / "ci.yml"
        path.write_text("jobs:\n  build: [unclosed\n", encoding="utf-8")
        with pytest.raises(ParseError, match="Invalid YAML") as exc_info:
            load_workflow_document(path)
        assert exc_info.value.code == "PARSE_ERROR"

    def test_parse_error_is_setup_error(self, tmp_path):
        path = tmp_path / "ci.yml"
        path.write_text("key: [", encoding="utf-8")
        with pytest.raises(SetupError):
            load_workflow_document(path)

    @pytest.mark.parametrize("content", ["- a\n- b\n", "just a string\n", ""])
    def test_non_mapping_root_is_parse_error(self, tmp_path, content):
        path = tmp_path / "ci.yml"
        path.write_text(content, encoding="utf-8")
        with pytest.raises(ParseError, match="mapping at the top level"):
            load_workflow_document(path)

    def test_invalid_utf8_is_parse_error(self, tmp_path):
        path = tmp_path / "ci.yml"
        path.write_bytes(b"name: \xff\n")
        with pytest.raises(ParseError, match="not valid UTF-8") as exc_info:
            load_workflow_document(path)
        assert exc_info.value.config_file == str(path)

    def test_self_referencing_alias_is_parse_error(self, tmp_path):
        """Test that a recursive YAML alias is rejected instead of recursing forever."""
        path = tmp_path / "ci.yml"
        path.write_text("a: &x\n  - *x\njobs: {}\n", encoding="utf-8")
        with pytest.raises(ParseError, match="self-referencing alias"):
            load_workflow_document(path)

    def test_shared_alias_is_accepted(self, tmp_path):
        path = tmp_path / "ci.yml"
        path.write_text(
            "defaults: &branches [main]\non:\n  push:\n    branches: *branches\n"
            "  pull_request:\n    branches: *branches\n",
            encoding="utf-8",
        )
        workflow = load_workflow_document(path)
        assert "main" in workflow.branches("push")
        assert "main" in workflow.branches("pull_request")

    def test_colliding_keys_are_parse_error(self, tmp_path):
        path = tmp_path / "ci.yml"
        path.write_text("jobs:\n  1: a\n  \"1\": b\n", encoding="utf-8")
        with pytest.raises(ParseError, match="Duplicate key '1'"):
            load_workflow_document(path)

    def test_parse_is_idempotent(self, bundled_workflow_path):
        """Test that loading the same file twice yields equal trees."""
        first = load_workflow_document(bundled_workflow_path)
        second = load_workflow_document(bundled_workflow_path)
        assert first == second
        assert first is not second


class TestNormalizeWorkflowKeys:
    """Tests for normalize_workflow_keys."""

    def test_true_key_becomes_on(self):
        assert normalize_workflow_keys({True: {"push": None}, "jobs": {}}) == {
            "jobs": {},
            "on": {"push": None},
        }

    def test_quoted_on_key_wins(self):
        data = {"on": {"push": None}, True: {"pull_request": None}}
        assert normalize_workflow_keys(data) == {"on": {"push": None}}

    def test_integer_one_key_is_not_treated_as_on(self):
        data = {1: "one"}
        assert normalize_workflow_keys(data) is data


class TestLoadManifest:
    """Tests for load_manifest."""

    def test_loads_fixture(self, bundled_manifest_path):
        manifest = load_manifest(bundled_manifest_path)
        assert manifest.dependencies is not None
        assert manifest.script("build:server") is not None

    def test_invalid_json_is_parse_error(self, tmp_path):
        path = tmp_path / "package.json"
        path.write_text('{"name": "x",', encoding="utf-8")
        with pytest.raises(ParseError, match="Invalid JSON"):
            load_manifest(path)

    def test_array_root_is_parse_error(self, tmp_path):
        path = tmp_path / "package.json"
        path.write_text(json.dumps(["x"]), encoding="utf-8")
        with pytest.raises(ParseError):
            load_manifest(path)

    def test_missing_manifest_is_setup_error(self, tmp_path):
        with pytest.raises(SetupError, match="Manifest file not found"):
            load_manifest(tmp_path / "package.json")

    def test_invalid_utf8_is_parse_error(self, tmp_path):
        path = tmp_path / "package.json"
        path.write_bytes(b'{"name": "\xff"}')
        with pytest.raises(ParseError, match="not valid UTF-8"):
            load_manifest(path)

    def test_deeply_nested_manifest_is_parse_error(self, tmp_path):
        path = tmp_path / "package.json"
        depth = 5000
        path.write_text('{"a": ' + "[" * depth + "]" * depth + "}", encoding="utf-8")
        with pytest.raises(ParseError, match="nested too deeply"):
            load_manifest(path)

    def test_parse_is_idempotent(self, bundled_manifest_path):
        assert load_manifest(bundled_manifest_path) == load_manifest(bundled_manifest_path)
