#!/usr/bin/env python3
"""
Async Harmony MCP Server using chuk-mcp-server

This server plans chord progressions for song sections. A section template
describes the form (phrases, cadences, a tension curve, reharmonization
zones) and a style profile prices harmonic choices; a beam search picks one
chord per bar.

The server provides tools for:
- Listing, describing, validating, registering and exporting templates
- Listing, describing and saving style profiles
- Planning a section with an optional explanation trace
"""

import logging
import os
from pathlib import Path

from chuk_mcp_server import ChukMCPServer

from chuk_mcp_harmony.constants import OUTPUT_DIR_ENV, STYLES_DIR_ENV, TEMPLATES_DIR_ENV
from chuk_mcp_harmony.styles import ProfileLoader
from chuk_mcp_harmony.templates import TemplateRegistry, builtin_library_path
from chuk_mcp_harmony.tools import register_planning_tools, register_template_tools

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Create the MCP server instance
mcp = ChukMCPServer("chuk-mcp-harmony")

# Paths - use standard project structure
BASE_PATH = Path.cwd()
TEMPLATES_DIR = Path(os.environ.get(TEMPLATES_DIR_ENV, BASE_PATH / "templates"))
STYLES_DIR = Path(os.environ.get(STYLES_DIR_ENV, BASE_PATH / "styles"))
OUTPUT_DIR = Path(os.environ.get(OUTPUT_DIR_ENV, BASE_PATH / "output"))
LIBRARY_PATH = builtin_library_path()

# Built-ins first so project templates with the same id replace them
template_registry = TemplateRegistry.with_builtins(LIBRARY_PATH)
project_templates = template_registry.load_directory(TEMPLATES_DIR)
profile_loader = ProfileLoader(project_path=STYLES_DIR)

# Register all tools
template_tools = register_template_tools(
    mcp, template_registry, templates_dir=TEMPLATES_DIR, output_dir=OUTPUT_DIR
)
planning_tools = register_planning_tools(mcp, template_registry, profile_loader)

# Export tool functions for direct access
music_list_templates = template_tools["music_list_templates"]
music_describe_template = template_tools["music_describe_template"]
music_validate_template = template_tools["music_validate_template"]
music_register_template = template_tools["music_register_template"]
music_export_template = template_tools["music_export_template"]

music_list_styles = planning_tools["music_list_styles"]
music_describe_style = planning_tools["music_describe_style"]
music_save_style = planning_tools["music_save_style"]
music_plan_section = planning_tools["music_plan_section"]

logger.info("CHUK Harmony MCP Server initialized")
logger.info(f"  Library path: {LIBRARY_PATH}")
logger.info(f"  Templates dir: {TEMPLATES_DIR} ({len(project_templates)} project templates)")
logger.info(f"  Styles dir: {STYLES_DIR}")
logger.info(f"  Output dir: {OUTPUT_DIR}")
logger.info(f"  Templates registered: {len(template_registry)}")
