# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Catalog store for relationship examples.

Components:
- CatalogStore: Abstract read interface for catalog backends
- InMemoryCatalog: Immutable in-memory catalog built once at startup
- load_catalog: Reads a YAML catalog file (bundled by default)
- CatalogExport: Type definition for the catalog export format

The catalog is authored once and only ever read: there is no mutation,
creation or deletion after construction.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from importlib import resources
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import yaml

from relationship_catalog.errors import CatalogError, NotFoundError
from relationship_catalog.models import RelationKind, RelationshipExample, validate_example
from relationship_catalog.snippet_analyzer import SnippetAnalyzer

logger = logging.getLogger(__name__)

# Type alias for catalog export format
CatalogExport = Dict[str, Any]

BUNDLED_CATALOG = "catalog.yml"


class CatalogStore(ABC):
    """Abstract read interface for the relationship catalog."""

    @abstractmethod
    def get_all(self) -> List[RelationshipExample]:
        """Get every entry in catalog order.

        Returns:
            List of entries ordered by id. Never fails.
        """
        pass

    @abstractmethod
    def get_by_id(self, example_id: int) -> RelationshipExample:
        """Get the entry with the given id.

        Raises:
            NotFoundError: If no entry has this id.
        """
        pass

    @abstractmethod
    def get_by_kind(self, kind: str) -> RelationshipExample:
        """Get the entry demonstrating the given relation kind.

        Raises:
            NotFoundError: If the kind is not one of the known relation kinds.
        """
        pass

    def kinds(self) -> List[str]:
        """Relation kinds in catalog order."""
        return [example.kind for example in self.get_all()]

    def export(self) -> CatalogExport:
        """Export the catalog to a JSON-compatible dict.

        Returns:
            Dictionary containing:
            - metadata: count, kinds, source, exported_at
            - examples: list of entry dicts in catalog order
        """
        examples = self.get_all()
        return {
            "metadata": {
                "count": len(examples),
                "kinds": [e.kind for e in examples],
                "source": self.source,
                "exported_at": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            },
            "examples": [e.to_dict() for e in examples],
        }

    @property
    def source(self) -> str:
        """Where the catalog data came from."""
        return "<memory>"


class InMemoryCatalog(CatalogStore):
    """Immutable in-memory catalog.

    Invariants checked at construction:
    - every entry passes validate_example()
    - ids are exactly 1..N with N == number of relation kinds
    - every relation kind appears exactly once

    Data Structure:
    - _examples: Tuple of entries sorted by id
    - _by_id / _by_kind: Indexes for O(1) lookup
    """

    def __init__(self, examples: Iterable[RelationshipExample], source: str = "<memory>") -> None:
        """Build the catalog.

        Args:
            examples: Entries in any order.
            source: Description of where the entries came from (for exports and logs).

        Raises:
            CatalogError: If any catalog invariant is violated.
        """
        entries = list(examples)
        for example in entries:
            validate_example(example)

        self._validate_catalog(entries)

        self._examples = tuple(sorted(entries, key=lambda e: e.id))
        self._by_id: Dict[int, RelationshipExample] = {e.id: e for e in self._examples}
        self._by_kind: Dict[str, RelationshipExample] = {e.kind: e for e in self._examples}
        self._source = source

        logger.debug(f"Catalog built with {len(self._examples)} entries from {source}")

    @staticmethod
    def _validate_catalog(entries: List[RelationshipExample]) -> None:
        expected_ids = list(range(1, len(RelationKind.ALL) + 1))

        ids = sorted(e.id for e in entries)
        if ids != expected_ids:
            raise CatalogError(
                f"Catalog ids must be exactly {expected_ids[0]}..{expected_ids[-1]} "
                f"with no duplicates, got {ids}"
            )

        seen: Dict[str, int] = {}
        for example in entries:
            if example.kind in seen:
                raise CatalogError(
                    f"Relation kind '{example.kind}' appears in entries "
                    f"{seen[example.kind]} and {example.id}"
                )
            seen[example.kind] = example.id

        missing = [k for k in RelationKind.ALL if k not in seen]
        if missing:
            raise CatalogError(f"Catalog is missing relation kinds: {', '.join(missing)}")

    @property
    def source(self) -> str:
        return self._source

    def get_all(self) -> List[RelationshipExample]:
        return list(self._examples)

    def get_by_id(self, example_id: int) -> RelationshipExample:
        # bool is an int subclass; True must not resolve to entry 1
        if isinstance(example_id, bool) or not isinstance(example_id, int):
            raise NotFoundError(f"No relationship example with id {example_id!r}")
        try:
            return self._by_id[example_id]
        except KeyError:
            raise NotFoundError(
                f"No relationship example with id {example_id} "
                f"(valid ids are 1..{len(self._examples)})"
            ) from None

    def get_by_kind(self, kind: str) -> RelationshipExample:
        example = self._by_kind.get(kind) if isinstance(kind, str) else None
        if example is None:
            raise NotFoundError(
                f"Unknown relation kind {kind!r} (expected one of {', '.join(RelationKind.ALL)})"
            )
        return example

    def __len__(self) -> int:
        return len(self._examples)

    def __iter__(self):
        return iter(self._examples)


def _read_catalog_document(path: Optional[Path]) -> Any:
    if path is None:
        bundled = resources.files("relationship_catalog").joinpath("data").joinpath(
            BUNDLED_CATALOG
        )
        return yaml.safe_load(bundled.read_text(encoding="utf-8"))

    if not path.exists():
        raise CatalogError(f"Catalog file not found: {path}")
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f)


def load_catalog(path: Optional[Path] = None, verify_snippets: bool = True) -> InMemoryCatalog:
    """Load the catalog from a YAML file.

    The document is either a list of entries or a mapping with an
    ``examples`` list.

    Args:
        path: Catalog file. If None, the bundled catalog is used.
        verify_snippets: Whether to run SnippetAnalyzer on every entry.

    Returns:
        InMemoryCatalog holding the entries.

    Raises:
        CatalogError: If the file is missing, unreadable, unparsable or
            malformed, or if any entry or snippet fails validation.
    """
    source = str(path) if path is not None else f"<bundled:{BUNDLED_CATALOG}>"

    try:
        document = _read_catalog_document(path)
    except yaml.YAMLError as e:
        raise CatalogError(f"Error parsing catalog file {source}: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise CatalogError(f"Unable to read catalog file {source}: {e}") from e

    if isinstance(document, dict):
        document = document.get("examples")
    if not isinstance(document, list):
        raise CatalogError(
            f"Catalog {source} must contain a list of examples, got {type(document).__name__}"
        )

    catalog = InMemoryCatalog(
        (RelationshipExample.from_dict(item) for item in document), source=source
    )

    if verify_snippets:
        analyzer = SnippetAnalyzer()
        problems: List[str] = []
        for example in catalog.get_all():
            problems.extend(analyzer.check_example(example))
        if problems:
            raise CatalogError(
                f"Catalog {source} has inconsistent snippets:\n  " + "\n  ".join(problems)
            )

    logger.info(f"Loaded {len(catalog)} relationship examples from {source}")
    return catalog
