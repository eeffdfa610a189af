# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Command-line interface for the relationship catalog.

Subcommands:
- list: One line per entry
- show: Render a single entry by id or relation kind
- render: Render the whole catalog to stdout or a file
- serve: Run the MCP server

Exit codes: 0 on success, 1 when an entry is not found or fails to render,
2 when the catalog or configuration is unusable.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from relationship_catalog.config import Config, ConfigurationError
from relationship_catalog.errors import CatalogError, NotFoundError, RenderError
from relationship_catalog.logging_setup import (
    CONSOLE_DATEFMT,
    CONSOLE_FORMAT,
    setup_logging,
)
from relationship_catalog.query_api import QueryAPI
from relationship_catalog.renderer import RENDERERS

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="relationship-catalog",
        description="Catalog of canonical object-relationship patterns",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Configuration file. Default: ./.relationship_catalog.yml",
    )
    parser.add_argument(
        "--catalog",
        type=Path,
        default=None,
        help="Catalog YAML file to use instead of the bundled catalog",
    )
    parser.add_argument(
        "--log-dir",
        type=Path,
        default=None,
        help="Write structured JSON logs to this directory",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log at INFO level")

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list", help="List catalog entries")

    show = subparsers.add_parser("show", help="Render one entry by id or relation kind")
    show.add_argument("target", help="Entry id (1-8) or relation kind, e.g. composition")
    show.add_argument("--format", choices=sorted(RENDERERS), default=None)

    render = subparsers.add_parser("render", help="Render the whole catalog")
    render.add_argument("--format", choices=sorted(RENDERERS), default=None)
    render.add_argument(
        "-o", "--output", type=Path, default=None, help="Output file. Default: stdout"
    )

    serve = subparsers.add_parser("serve", help="Run the MCP server")
    serve.add_argument(
        "--transport",
        choices=["stdio", "streamable-http", "sse"],
        default="stdio",
        help="Transport type for MCP server. Default: stdio",
    )

    return parser


def _configure_logging(args: argparse.Namespace) -> None:
    level = logging.INFO if args.verbose else logging.WARNING
    if args.log_dir is not None:
        setup_logging(log_dir=args.log_dir, log_level=level, console_output=args.verbose)
    else:
        logging.basicConfig(
            level=level,
            format=CONSOLE_FORMAT,
            datefmt=CONSOLE_DATEFMT,
            stream=sys.stderr,
        )


def _cmd_list(api: QueryAPI) -> int:
    for example in api.catalog.get_all():
        print(f"{example.id}. {example.name} [{example.kind}]")
    return EXIT_OK


def _cmd_show(api: QueryAPI, target: str, output_format: Optional[str]) -> int:
    if target.isdecimal():
        example = api.catalog.get_by_id(int(target))
    else:
        example = api.catalog.get_by_kind(target)
    sys.stdout.write(api.render_example(example.id, output_format))
    return EXIT_OK


def _cmd_render(api: QueryAPI, output_format: Optional[str], output: Optional[Path]) -> int:
    result = api.render_catalog(output_format)

    if output is None:
        sys.stdout.write(result["content"])
    else:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(result["content"], encoding="utf-8")
        logger.info(f"Wrote {result['format']} catalog to {output}")

    for failure in result["failures"]:
        print(
            f"error: entry {failure['example_id']} ({failure['kind']}) was not rendered: "
            f"{failure['message']}",
            file=sys.stderr,
        )
    return EXIT_FAILURE if result["failures"] else EXIT_OK


def _cmd_serve(config: Config, api: QueryAPI, transport: str) -> int:
    from relationship_catalog.mcp_server import RelationshipCatalogMCPServer

    server = RelationshipCatalogMCPServer(config=config, api=api)
    server.run(transport=transport)
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point.

    Args:
        argv: Arguments without the program name. If None, uses sys.argv.

    Returns:
        Process exit code.
    """
    args = build_parser().parse_args(argv)
    _configure_logging(args)

    config = Config(config_path=args.config)
    try:
        config.override(catalog_path=str(args.catalog.resolve()) if args.catalog else None)
        api = QueryAPI.from_config(config)
    except (CatalogError, ConfigurationError) as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_USAGE

    try:
        if args.command == "list":
            return _cmd_list(api)
        elif args.command == "show":
            return _cmd_show(api, args.target, args.format)
        elif args.command == "render":
            return _cmd_render(api, args.format, args.output)
        elif args.command == "serve":
            return _cmd_serve(config, api, args.transport)
    except (NotFoundError, RenderError) as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_FAILURE

    return EXIT_USAGE
