# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Tests for the catalog store and loader."""

import tempfile
from pathlib import Path

import pytest
import yaml

from relationship_catalog.catalog import InMemoryCatalog, load_catalog
from relationship_catalog.errors import CatalogError, NotFoundError
from relationship_catalog.models import RelationKind, RelationshipExample, Role


@pytest.fixture(scope="module")
def catalog():
    return load_catalog()


@pytest.fixture
def temp_dir():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


def write_catalog(path: Path, document) -> Path:
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(document, f, sort_keys=False)
    return path


class TestBundledCatalog:
    @pytest.mark.parametrize("example_id", range(1, 9))
    def test_get_by_id_returns_matching_entry(self, catalog, example_id):
        assert catalog.get_by_id(example_id).id == example_id

    @pytest.mark.parametrize("example_id", [0, 9, -1, 100])
    def test_get_by_id_out_of_range(self, catalog, example_id):
        with pytest.raises(NotFoundError):
            catalog.get_by_id(example_id)

    @pytest.mark.parametrize("example_id", [True, "1", 1.0, None])
    def test_get_by_id_rejects_non_integers(self, catalog, example_id):
        with pytest.raises(NotFoundError):
            catalog.get_by_id(example_id)

    def test_not_found_is_a_lookup_error(self, catalog):
        with pytest.raises(LookupError):
            catalog.get_by_id(9)

    def test_kinds_are_exactly_the_eight_kinds(self, catalog):
        kinds = [example.kind for example in catalog.get_all()]
        assert len(kinds) == 8
        assert len(set(kinds)) == 8
        assert set(kinds) == set(RelationKind.ALL)

    def test_get_all_is_ordered_by_id(self, catalog):
        assert [example.id for example in catalog.get_all()] == list(range(1, 9))

    def test_kinds_follow_canonical_order(self, catalog):
        assert catalog.kinds() == list(RelationKind.ALL)

    def test_get_all_returns_a_copy(self, catalog):
        entries = catalog.get_all()
        entries.clear()
        assert len(catalog.get_all()) == 8

    @pytest.mark.parametrize("kind", RelationKind.ALL)
    def test_get_by_kind(self, catalog, kind):
        assert catalog.get_by_kind(kind).kind == kind

    @pytest.mark.parametrize("kind", ["friendship", "", "Composition", None])
    def test_get_by_kind_unknown(self, catalog, kind):
        with pytest.raises(NotFoundError):
            catalog.get_by_kind(kind)

    def test_composition_denotes_ownership(self, catalog):
        example = catalog.get_by_kind("composition")
        roles = {p.role for p in example.participants}
        assert Role.WHOLE in roles
        assert Role.PART in roles
        summary = example.summary.lower()
        assert "owns" in summary
        assert "lifetime" in summary

    def test_aggregation_entry(self, catalog):
        example = catalog.get_by_kind("aggregation")
        assert example.name == "Aggregation (whole-part, parts independent)"
        assert [(p.name, p.role) for p in example.participants] == [
            ("Team", "whole"),
            ("Player", "part"),
        ]

    def test_every_entry_has_two_or_three_participants(self, catalog):
        for example in catalog.get_all():
            assert 2 <= len(example.participants) <= 3

    def test_export(self, catalog):
        exported = catalog.export()
        assert exported["metadata"]["count"] == 8
        assert exported["metadata"]["kinds"] == list(RelationKind.ALL)
        assert exported["metadata"]["source"].startswith("<bundled:")
        assert exported["metadata"]["exported_at"].endswith("Z")
        assert [e["id"] for e in exported["examples"]] == list(range(1, 9))

    def test_lookup_failure_leaves_catalog_intact(self, catalog):
        with pytest.raises(NotFoundError):
            catalog.get_by_kind("friendship")
        assert len(catalog) == 8


class TestInMemoryCatalogInvariants:
    def test_entries_are_sorted_by_id(self, catalog):
        shuffled = list(reversed(catalog.get_all()))
        rebuilt = InMemoryCatalog(shuffled)
        assert [e.id for e in rebuilt.get_all()] == list(range(1, 9))

    def test_missing_entry(self, catalog):
        with pytest.raises(CatalogError, match="ids must be exactly 1..8"):
            InMemoryCatalog(catalog.get_all()[:7])

    def test_duplicate_id(self, catalog):
        entries = catalog.get_all()
        entries[7] = RelationshipExample(
            id=1,
            name=entries[7].name,
            summary=entries[7].summary,
            participants=entries[7].participants,
            snippet=entries[7].snippet,
        )
        with pytest.raises(CatalogError, match="no duplicates"):
            InMemoryCatalog(entries)

    def test_duplicate_kind(self, catalog):
        entries = catalog.get_all()
        entries[7] = RelationshipExample(
            id=8,
            name="Another Association",
            summary=entries[0].summary,
            participants=entries[0].participants,
            snippet=entries[0].snippet,
        )
        with pytest.raises(CatalogError, match="'association' appears in entries 1 and 8"):
            InMemoryCatalog(entries)

    def test_invalid_entry(self, catalog):
        entries = catalog.get_all()
        entries[0] = RelationshipExample(
            id=1,
            name="",
            summary=entries[0].summary,
            participants=entries[0].participants,
            snippet=entries[0].snippet,
        )
        with pytest.raises(CatalogError, match="name cannot be empty"):
            InMemoryCatalog(entries)


class TestLoadCatalog:
    def test_load_from_file_as_list(self, catalog, temp_dir):
        path = write_catalog(temp_dir / "catalog.yml", catalog.export()["examples"])
        loaded = load_catalog(path)
        assert loaded.kinds() == catalog.kinds()
        assert loaded.source == str(path)

    def test_load_from_file_as_mapping(self, catalog, temp_dir):
        path = write_catalog(
            temp_dir / "catalog.yml", {"examples": catalog.export()["examples"]}
        )
        assert len(load_catalog(path)) == 8

    def test_missing_file(self, temp_dir):
        with pytest.raises(CatalogError, match="not found"):
            load_catalog(temp_dir / "nope.yml")

    def test_directory_is_not_a_catalog(self, temp_dir):
        with pytest.raises(CatalogError, match="Unable to read catalog file"):
            load_catalog(temp_dir)

    def test_undecodable_file(self, temp_dir):
        path = temp_dir / "catalog.yml"
        path.write_bytes(b"examples: \xff\xfe")
        with pytest.raises(CatalogError) as excinfo:
            load_catalog(path)
        assert isinstance(excinfo.value.__cause__, (UnicodeDecodeError, yaml.YAMLError))

    def test_invalid_yaml(self, temp_dir):
        path = temp_dir / "catalog.yml"
        path.write_text("examples: [unclosed", encoding="utf-8")
        with pytest.raises(CatalogError, match="Error parsing"):
            load_catalog(path)

    def test_wrong_shape(self, temp_dir):
        path = write_catalog(temp_dir / "catalog.yml", {"entries": "nothing"})
        with pytest.raises(CatalogError, match="must contain a list"):
            load_catalog(path)

    def test_inconsistent_snippet_is_rejected(self, catalog, temp_dir):
        examples = catalog.export()["examples"]
        generalization = examples[4]
        assert generalization["kind"] == "generalization"
        generalization["snippet"] = generalization["snippet"].replace("Dog(Animal)", "Dog")
        path = write_catalog(temp_dir / "catalog.yml", examples)

        with pytest.raises(CatalogError, match="'Dog' does not inherit from 'Animal'"):
            load_catalog(path)

    def test_snippet_verification_can_be_disabled(self, catalog, temp_dir):
        examples = catalog.export()["examples"]
        examples[4]["snippet"] = examples[4]["snippet"].replace("Dog(Animal)", "Dog")
        path = write_catalog(temp_dir / "catalog.yml", examples)

        loaded = load_catalog(path, verify_snippets=False)
        assert loaded.get_by_id(5).kind == "generalization"
