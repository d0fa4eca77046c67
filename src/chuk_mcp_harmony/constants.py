"""
Constants for the harmony planner.

No magic strings or numbers - limits, defaults and messages live here.
"""

from typing import Literal

# Template limits
MIN_TEMPLATE_BARS = 4
MAX_TEMPLATE_BARS = 64

# Reharm zone risk when the document does not give one
DEFAULT_REHARM_RISK = 0.5

# Beam width used when neither the caller nor the profile sets one
DEFAULT_BEAM_WIDTH = 6

# Default style preset
DEFAULT_STYLE = "balanced"

# Default key for planning requests
DEFAULT_KEY = "C_major"

# Template ids are file-name safe
TEMPLATE_ID_PATTERN = r"^[A-Za-z0-9_-]+$"

# Template document extensions the loader understands
TEMPLATE_EXTENSIONS: tuple[str, ...] = (".yaml", ".yml", ".json")

# Environment overrides for project directories
TEMPLATES_DIR_ENV = "MUSIC_TEMPLATES_DIR"
STYLES_DIR_ENV = "MUSIC_STYLES_DIR"
OUTPUT_DIR_ENV = "MUSIC_OUTPUT_DIR"

# Formats music_export_template can write
EXPORT_FORMATS: tuple[str, ...] = ("yaml", "json")

# Tension misses above this are reported as diagnostics
TENSION_DIAGNOSTIC_THRESHOLD = 0.35

# Schema versions - frozen for v1
SchemaVersion = Literal[
    "template/v1",
    "style-profile/v1",
    "plan/v1",
]


class ErrorMessages:
    """Standardized error messages."""

    TEMPLATE_NOT_FOUND = "Template '{template_id}' not found."
    STYLE_NOT_FOUND = "Style '{name}' not found."
    INVALID_KEY = "Invalid key: '{key}'. Expected format like 'C_major' or 'D_minor'."
    INVALID_EXPLAIN_MODE = "Invalid explain mode: '{mode}'. Expected none, brief, detailed or debug."
    INVALID_BEAM_WIDTH = "Beam width must be at least 1, got {beam_width}."
    INVALID_EXPORT_FORMAT = "Invalid export format: '{format}'. Expected yaml or json."
    INVALID_OUTPUT_NAME = "Output name '{name}' must contain only [A-Za-z0-9_-]."
    NO_TEMPLATES_DIR = "No project template directory configured."
    NO_OUTPUT_DIR = "No output directory configured."
    TEMPLATE_FILE_EXISTS = "Template file already exists: {path}. Pass force=True to overwrite it."
    OUTPUT_FILE_EXISTS = "Output file already exists: {path}. Pass overwrite=True to replace it."


class SuccessMessages:
    """Standardized success messages."""

    TEMPLATE_REGISTERED = "Registered template '{template_id}' (version {version})."
    TEMPLATE_REPLACED = (
        "Replaced template '{template_id}' version {old_version} with version {new_version}."
    )
    TEMPLATE_VALID = "Template '{template_id}' is valid."
    TEMPLATE_SAVED = "Saved template '{template_id}' to {path}."
    TEMPLATE_EXPORTED = "Exported template '{template_id}' as {format}."
    STYLE_SAVED = "Saved style '{name}' to {path}."
    SECTION_PLANNED = "Planned {bars} bars for template '{template_id}'."
