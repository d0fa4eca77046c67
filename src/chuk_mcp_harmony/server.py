#!/usr/bin/env python3
"""
Entry point for the CHUK Harmony MCP Server.

Supports stdio and http transports. Project template, style and output
directories can be given on the command line; they are exported to the
environment before the server module loads, since it reads them at import time.
"""

import argparse
import asyncio
import logging
import os

from chuk_mcp_harmony.constants import OUTPUT_DIR_ENV, STYLES_DIR_ENV, TEMPLATES_DIR_ENV

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Command-line options for the server."""
    parser = argparse.ArgumentParser(description="CHUK Harmony MCP Server")
    parser.add_argument(
        "--transport",
        choices=["stdio", "http"],
        default="stdio",
        help="Transport mode (default: stdio)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="HTTP port (only for http transport)",
    )
    parser.add_argument(
        "--templates-dir",
        help=f"Project template directory (default: ./templates, or ${TEMPLATES_DIR_ENV})",
    )
    parser.add_argument(
        "--styles-dir",
        help=f"Project style profile directory (default: ./styles, or ${STYLES_DIR_ENV})",
    )
    parser.add_argument(
        "--output-dir",
        help=f"Directory for exported templates (default: ./output, or ${OUTPUT_DIR_ENV})",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging, including one planner summary per request",
    )
    return parser


def main() -> None:
    """Parse options, configure logging and directories, then serve."""
    args = build_parser().parse_args()

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)
    if args.templates_dir:
        os.environ[TEMPLATES_DIR_ENV] = args.templates_dir
    if args.styles_dir:
        os.environ[STYLES_DIR_ENV] = args.styles_dir
    if args.output_dir:
        os.environ[OUTPUT_DIR_ENV] = args.output_dir

    from chuk_mcp_harmony.async_server import mcp

    if args.transport == "stdio":
        logger.info("Starting CHUK Harmony MCP Server (stdio)")
        asyncio.run(mcp.run_stdio())
    else:
        logger.info("Starting CHUK Harmony MCP Server (http:%d)", args.port)
        asyncio.run(mcp.run_http(port=args.port))


if __name__ == "__main__":
    main()
