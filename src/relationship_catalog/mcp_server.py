# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""MCP Server Protocol Layer for the relationship catalog.

This module only translates MCP tool calls into QueryAPI calls and formats
the results. All catalog and rendering logic lives behind QueryAPI.
"""

import logging
from typing import Any, Dict, List, Optional

from mcp.server.fastmcp import Context, FastMCP
from mcp.server.session import ServerSession

from relationship_catalog.config import Config
from relationship_catalog.errors import NotFoundError, RenderError
from relationship_catalog.query_api import QueryAPI

logger = logging.getLogger(__name__)

SERVER_NAME = "relationship-catalog"


class RelationshipCatalogMCPServer:
    """MCP Protocol Layer for the relationship catalog.

    Responsibilities:
    - Initialize MCP server and register tools
    - Translate MCP requests to QueryAPI calls
    - Report errors through the MCP context and re-raise them
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        api: Optional[QueryAPI] = None,
    ):
        """Initialize MCP server.

        Args:
            config: Configuration object. If None, loads from default location.
            api: Query API instance. If None, loads the configured catalog.

        Raises:
            CatalogError: If the configured catalog cannot be loaded.
        """
        if config is None:
            config = Config()
        self.config = config

        if api is None:
            api = QueryAPI.from_config(config)
        self.api = api

        self.mcp = FastMCP(name=SERVER_NAME)
        self._register_tools()

        logger.info("RelationshipCatalogMCPServer initialized")

    def _register_tools(self) -> None:
        """Register MCP tools with the server.

        Registers:
        - list_relationships: All catalog entries
        - get_relationship: One entry by id
        - get_relationship_by_kind: One entry by relation kind
        - render_relationships: The rendered catalog document
        """

        @self.mcp.tool()
        async def list_relationships(
            ctx: Context[ServerSession, None],
        ) -> List[Dict[str, Any]]:
            """List every object-relationship example in catalog order.

            Returns:
                List of entries, each with id, name, kind, summary,
                participants and snippet.
            """
            await ctx.info("Listing relationship examples")
            return self.api.list_examples()

        @self.mcp.tool()
        async def get_relationship(
            example_id: int,
            ctx: Context[ServerSession, None],
        ) -> Dict[str, Any]:
            """Get one relationship example by its catalog id (1-8).

            Args:
                example_id: Catalog id of the entry
                ctx: MCP context for logging

            Raises:
                NotFoundError: If no entry has this id
            """
            await ctx.info(f"Getting relationship example {example_id}")
            try:
                return self.api.get_example(example_id)
            except NotFoundError as e:
                await ctx.error(str(e))
                raise

        @self.mcp.tool()
        async def get_relationship_by_kind(
            kind: str,
            ctx: Context[ServerSession, None],
        ) -> Dict[str, Any]:
            """Get the example for a relation kind.

            Args:
                kind: One of association, directed-association, aggregation,
                    composition, generalization, realization, dependency, usage
                ctx: MCP context for logging

            Raises:
                NotFoundError: If the kind is unknown
            """
            await ctx.info(f"Getting relationship example for kind {kind}")
            try:
                return self.api.get_example_by_kind(kind)
            except NotFoundError as e:
                await ctx.error(str(e))
                raise

        @self.mcp.tool()
        async def render_relationships(
            ctx: Context[ServerSession, None],
            output_format: Optional[str] = None,
        ) -> Dict[str, Any]:
            """Render the whole catalog as a documentation page.

            Args:
                ctx: MCP context for logging
                output_format: "markdown" or "html"; defaults to the configured format

            Returns:
                Dictionary with:
                - format: The format used
                - content: The rendered document
                - failures: Entries that could not be rendered
            """
            await ctx.info(f"Rendering catalog as {output_format or self.config.output_format}")
            try:
                result = self.api.render_catalog(output_format)
            except (ValueError, RenderError) as e:
                await ctx.error(f"Error rendering catalog: {e}")
                raise

            for failure in result["failures"]:
                await ctx.error(
                    f"Entry {failure['example_id']} was skipped: {failure['message']}"
                )
            return result

        logger.info(
            "MCP tools registered: list_relationships, get_relationship, "
            "get_relationship_by_kind, render_relationships"
        )

    def run(self, transport: str = "stdio") -> None:
        """Run the MCP server.

        Args:
            transport: Transport type to use. Options:
                - "stdio": Standard input/output (default)
                - "streamable-http": HTTP transport
                - "sse": Server-sent events transport
        """
        logger.info(f"Starting MCP server with {transport} transport")
        self.mcp.run(transport=transport)  # type: ignore[arg-type]
