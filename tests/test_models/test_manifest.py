from __future__ import annotations

import json
from typing import Any, Dict

import pytest

from ngkeeper.exceptions import ManifestError
from ngkeeper.models.manifest import (
    detect_framework_major,
    load_manifest,
    merged_dependencies,
    rewrite_manifest,
    validate_manifest,
)


@pytest.mark.unit
class TestLoadManifest:
    """Tests for load_manifest decoding and validation."""

    def test_valid_manifest(self) -> None:
        text = json.dumps({"name": "app", "dependencies": {"rxjs": "^7.8.1"}})

        assert load_manifest(text) == {"name": "app", "dependencies": {"rxjs": "^7.8.1"}}

    def test_preserves_key_order(self) -> None:
        text = '{"version": "1.0.0", "name": "app", "dependencies": {"b": "1", "a": "2"}}'

        manifest = load_manifest(text)

        assert list(manifest) == ["version", "name", "dependencies"]
        assert list(manifest["dependencies"]) == ["b", "a"]

    @pytest.mark.parametrize("text", ["", "   \n"], ids=["empty", "whitespace"])
    def test_empty_input(self, text: str) -> None:
        with pytest.raises(ManifestError, match="Please provide a package.json"):
            load_manifest(text, file_path="package.json")

    def test_invalid_json_reports_position(self) -> None:
        with pytest.raises(ManifestError) as exc_info:
            load_manifest('{"name": "app",\n}', file_path="package.json")

        assert "Invalid JSON at line 2" in exc_info.value.message
        assert exc_info.value.file_path == "package.json"
        assert isinstance(exc_info.value.__cause__, json.JSONDecodeError)


@pytest.mark.unit
class TestValidateManifest:
    """Tests for validate_manifest shape checks."""

    @pytest.mark.parametrize("data", [[], "package", 42, None])
    def test_non_object(self, data: Any) -> None:
        with pytest.raises(ManifestError, match="JSON object"):
            validate_manifest(data)

    def test_not_a_package_json(self) -> None:
        with pytest.raises(ManifestError, match="does not look like a package.json"):
            validate_manifest({"version": "1.0.0"})

    @pytest.mark.parametrize(
        "data",
        [
            {"name": "app"},
            {"dependencies": {}},
            {"devDependencies": {"typescript": "~5.1.3"}},
        ],
    )
    def test_minimal_valid(self, data: Dict[str, Any]) -> None:
        assert validate_manifest(data) is data

    def test_group_must_be_object(self) -> None:
        with pytest.raises(ManifestError) as exc_info:
            validate_manifest({"name": "app", "dependencies": ["rxjs"]})

        assert exc_info.value.field == "dependencies"

    def test_constraint_must_be_string(self) -> None:
        with pytest.raises(ManifestError) as exc_info:
            validate_manifest({"name": "app", "devDependencies": {"rxjs": 7}})

        assert exc_info.value.field == "devDependencies.rxjs"


@pytest.mark.unit
class TestMergedDependencies:
    def test_dev_overrides_and_order(self) -> None:
        manifest = {
            "dependencies": {"a": "1.0.0", "b": "1.0.0"},
            "devDependencies": {"c": "1.0.0", "a": "2.0.0"},
        }

        merged = merged_dependencies(manifest)

        assert merged == {"a": "2.0.0", "b": "1.0.0", "c": "1.0.0"}
        assert list(merged) == ["a", "b", "c"]

    def test_missing_groups(self) -> None:
        assert merged_dependencies({"name": "app"}) == {}


@pytest.mark.unit
class TestRewriteManifest:
    """Tests for rewrite_manifest."""

    def test_rewrites_with_caret_and_keeps_everything_else(self) -> None:
        original = {
            "name": "app",
            "dependencies": {"rxjs": "~7.5.0", "tslib": "^2.3.0"},
            "scripts": {"build": "ng build"},
            "devDependencies": {"typescript": "~5.1.3"},
        }

        updated = rewrite_manifest(original, {"rxjs": "7.8.1", "typescript": "5.2.2"})

        assert list(updated) == list(original)
        assert updated["dependencies"] == {"rxjs": "^7.8.1", "tslib": "^2.3.0"}
        assert updated["devDependencies"] == {"typescript": "^5.2.2"}
        assert updated["scripts"] is original["scripts"]

    def test_does_not_mutate_original(self) -> None:
        original = {"name": "app", "dependencies": {"rxjs": "~7.5.0"}}

        rewrite_manifest(original, {"rxjs": "7.8.1"})

        assert original["dependencies"] == {"rxjs": "~7.5.0"}

    def test_empty_groups_left_as_is(self) -> None:
        original = {"name": "app", "dependencies": {}}

        assert rewrite_manifest(original, {}) == {"name": "app", "dependencies": {}}


@pytest.mark.unit
class TestDetectFrameworkMajor:
    @pytest.mark.parametrize(
        "constraint, expected",
        [("^19.1.3", 19), ("~16.2.0", 16), (">=17.0.0", 17)],
    )
    def test_reads_core_major(self, constraint: str, expected: int) -> None:
        manifest = {"dependencies": {"@angular/core": constraint}}

        assert detect_framework_major(manifest) == expected

    @pytest.mark.parametrize(
        "manifest",
        [
            {"name": "app"},
            {"dependencies": {"rxjs": "^7.8.1"}},
            {"dependencies": {"@angular/core": "latest"}},
            {"dependencies": {"@angular/core": "17"}},
        ],
    )
    def test_undetectable(self, manifest: Dict[str, Any]) -> None:
        assert detect_framework_major(manifest) is None
