from __future__ import annotations

import pytest

from ngkeeper.models.metadata import PackageMetadata, VersionRecord


@pytest.mark.unit
class TestVersionRecord:
    def test_peer_constraint(self) -> None:
        record = VersionRecord("17.0.0", {"@angular/core": "^17.0.0"})

        assert record.peer_constraint("@angular/core") == "^17.0.0"
        assert record.peer_constraint("rxjs") is None

    def test_empty_constraint_is_undeclared(self) -> None:
        record = VersionRecord("1.0.0", {"@angular/core": ""})

        assert record.peer_constraint("@angular/core") is None


@pytest.mark.unit
class TestPackageMetadataFromRegistryJson:
    """Tests for PackageMetadata.from_registry_json."""

    def test_full_packument(self) -> None:
        data = {
            "name": "@angular/material",
            "dist-tags": {"latest": "17.1.2", "next": "18.0.0-rc.0"},
            "versions": {
                "17.0.0": {
                    "version": "17.0.0",
                    "peerDependencies": {
                        "@angular/core": "^17.0.0",
                        "@angular/cdk": "17.0.0",
                    },
                },
                "17.1.2": {"version": "17.1.2"},
            },
            "time": {"created": "2016-01-01T00:00:00.000Z", "17.0.0": "2023-11-08"},
        }

        metadata = PackageMetadata.from_registry_json(data)

        assert metadata.name == "@angular/material"
        assert metadata.latest == "17.1.2"
        assert metadata.dist_tags["next"] == "18.0.0-rc.0"
        assert metadata.version_list == ["17.0.0", "17.1.2"]
        assert metadata.versions["17.0.0"].peer_constraint("@angular/core") == "^17.0.0"
        assert metadata.versions["17.1.2"].peer_dependencies == {}
        assert metadata.time["17.0.0"] == "2023-11-08"

    def test_name_fallback(self) -> None:
        metadata = PackageMetadata.from_registry_json({}, name="ghost")

        assert metadata.name == "ghost"
        assert metadata.versions == {}
        assert metadata.latest is None

    def test_malformed_sections_are_empty(self) -> None:
        data = {
            "name": "odd",
            "versions": ["1.0.0"],
            "dist-tags": "latest",
            "time": None,
        }

        metadata = PackageMetadata.from_registry_json(data)

        assert metadata.versions == {}
        assert metadata.dist_tags == {}
        assert metadata.time == {}

    def test_non_string_values_are_dropped(self) -> None:
        data = {
            "versions": {
                "1.0.0": {"peerDependencies": {"@angular/core": 17, "rxjs": "^7"}},
                "2.0.0": "not-an-object",
            },
            "dist-tags": {"latest": "2.0.0", "beta": None},
        }

        metadata = PackageMetadata.from_registry_json(data, name="pkg")

        assert metadata.versions["1.0.0"].peer_dependencies == {"rxjs": "^7"}
        assert metadata.versions["2.0.0"].peer_dependencies == {}
        assert metadata.dist_tags == {"latest": "2.0.0"}
