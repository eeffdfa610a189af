# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Catalog of canonical object-relationship patterns."""

from .catalog import CatalogExport, CatalogStore, InMemoryCatalog, load_catalog
from .config import Config, ConfigurationError
from .errors import CatalogError, NotFoundError, RenderError
from .models import RelationKind, RelationshipExample, Role, TypeSketch
from .query_api import QueryAPI
from .renderer import HtmlRenderer, MarkdownRenderer, Renderer, RenderFailure, get_renderer
from .snippet_analyzer import SnippetAnalyzer, SnippetStructure

__version__ = "0.1.0"

__all__ = [
    "CatalogStore",
    "InMemoryCatalog",
    "CatalogExport",
    "load_catalog",
    "Config",
    "ConfigurationError",
    "CatalogError",
    "NotFoundError",
    "RenderError",
    "RelationKind",
    "RelationshipExample",
    "Role",
    "TypeSketch",
    "QueryAPI",
    "Renderer",
    "MarkdownRenderer",
    "HtmlRenderer",
    "RenderFailure",
    "get_renderer",
    "SnippetAnalyzer",
    "SnippetStructure",
]

# Conditional import for MCP server (requires Python 3.10+ and mcp package)
try:
    from .mcp_server import RelationshipCatalogMCPServer

    __all__.append("RelationshipCatalogMCPServer")
except ImportError:
    # MCP package not available
    pass
