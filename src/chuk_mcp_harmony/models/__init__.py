"""
Pydantic models for the harmony planner.

This module provides:
- Template: Section template with phrases, tension curve and reharm zones
- Phrase: Named bar span with a cadence expectation
- ReharmZone: Bar range tolerant of harmonic substitution
- StyleProfile: Cost weights consumed by the planner
"""

from chuk_mcp_harmony.models.style import StyleProfile, StyleProfileMetadata
from chuk_mcp_harmony.models.template import (
    Phrase,
    ReharmZone,
    Template,
    TemplateSummary,
)

__all__ = [
    "Phrase",
    "ReharmZone",
    "StyleProfile",
    "StyleProfileMetadata",
    "Template",
    "TemplateSummary",
]
