# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Query API for programmatic access to the catalog.

All methods return JSON-compatible values so the MCP server can hand them
back to clients unchanged.

API Methods:
- list_examples(): Every entry in catalog order
- list_kinds(): Relation kinds in catalog order
- get_example(example_id): One entry by id
- get_example_by_kind(kind): One entry by relation kind
- render_example(example_id, output_format): One rendered entry
- render_catalog(output_format): The full rendered document plus failures
- export(): Catalog export with metadata

NotFoundError and RenderError propagate to the caller unchanged.
"""

import io
from typing import Any, Dict, List, Optional

from .catalog import CatalogStore, load_catalog
from .config import Config
from .renderer import get_renderer


class QueryAPI:
    """Read-only access to the catalog and its renderers.

    Usage:
        config = Config()
        api = QueryAPI.from_config(config)
        entry = api.get_example_by_kind("aggregation")
    """

    def __init__(self, catalog: CatalogStore, config: Optional[Config] = None) -> None:
        """Initialize the Query API.

        Args:
            catalog: Catalog to query.
            config: Configuration for rendering defaults. If None, renderer
                defaults are used.
        """
        self._catalog = catalog
        self._config = config

    @classmethod
    def from_config(cls, config: Config) -> "QueryAPI":
        """Load the configured catalog and wrap it.

        Raises:
            CatalogError: If the configured catalog cannot be loaded.
        """
        catalog = load_catalog(config.catalog_path, verify_snippets=config.verify_snippets)
        return cls(catalog, config)

    @property
    def catalog(self) -> CatalogStore:
        return self._catalog

    def list_examples(self) -> List[Dict[str, Any]]:
        return [example.to_dict() for example in self._catalog.get_all()]

    def list_kinds(self) -> List[str]:
        return self._catalog.kinds()

    def get_example(self, example_id: int) -> Dict[str, Any]:
        """Get one entry by id.

        Raises:
            NotFoundError: If no entry has this id.
        """
        return self._catalog.get_by_id(example_id).to_dict()

    def get_example_by_kind(self, kind: str) -> Dict[str, Any]:
        """Get one entry by relation kind.

        Raises:
            NotFoundError: If the kind is unknown.
        """
        return self._catalog.get_by_kind(kind).to_dict()

    def render_example(self, example_id: int, output_format: Optional[str] = None) -> str:
        """Render one entry.

        Raises:
            NotFoundError: If no entry has this id.
            RenderError: If the entry's snippet is malformed for the format.
            ValueError: If the format is unknown.
        """
        renderer = get_renderer(output_format, self._config)
        return renderer.render_example(self._catalog.get_by_id(example_id))

    def render_catalog(self, output_format: Optional[str] = None) -> Dict[str, Any]:
        """Render the whole catalog.

        Returns:
            Dictionary with:
            - format: The format used
            - content: The rendered document
            - failures: List of {example_id, kind, message} for skipped entries
        """
        renderer = get_renderer(output_format, self._config)
        buffer = io.StringIO()
        failures = renderer.render_catalog(self._catalog.get_all(), buffer)
        return {
            "format": renderer.format_name,
            "content": buffer.getvalue(),
            "failures": [f.to_dict() for f in failures],
        }

    def export(self) -> Dict[str, Any]:
        return self._catalog.export()
