"""
MCP tool implementations.

Tools are organized by domain:
- templates - Template discovery, validation and registration
- planning - Style discovery and section planning
"""

from chuk_mcp_harmony.tools.planning import register_planning_tools
from chuk_mcp_harmony.tools.templates import register_template_tools

__all__ = [
    "register_planning_tools",
    "register_template_tools",
]
