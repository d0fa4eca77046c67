"""
Template loader - reads and writes template documents.

Templates are YAML or JSON documents. Both a flat layout and the nested
``metadata`` layout are accepted:

    id: jazz_aaba_v1            metadata:
    version: 1                    id: jazz_aaba_v1
    bars: 32                      version: 1
    phrases: [...]                phrases: [...]
    tension_curve: [...]        bars: 32
    reharm_zones: [...]         tension_curve: [...]
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from chuk_mcp_harmony.constants import ErrorMessages, TEMPLATE_EXTENSIONS, TEMPLATE_ID_PATTERN
from chuk_mcp_harmony.models.template import Template

_ID_RE = re.compile(TEMPLATE_ID_PATTERN)


class TemplateLoadError(ValueError):
    """Raised when a template document cannot be parsed into a Template."""


def builtin_library_path() -> Path:
    """Directory holding the built-in template library."""
    return Path(__file__).parent / "library"


class TemplateLoader:
    """Parses template documents into Template models."""

    def load_file(self, path: Path) -> Template:
        """
        Load a template from a YAML or JSON file.

        Raises:
            TemplateLoadError: If the file can't be read or parsed
        """
        if path.suffix.lower() not in TEMPLATE_EXTENSIONS:
            raise TemplateLoadError(f"Unsupported template extension: {path.suffix}")

        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise TemplateLoadError(f"Failed to read template {path}: {e}") from e

        return self.load_string(text, source=str(path))

    def load_string(self, text: str, source: str = "<string>") -> Template:
        """
        Load a template from YAML or JSON text.

        Raises:
            TemplateLoadError: If the text can't be parsed
        """
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise TemplateLoadError(f"Failed to parse template {source}: {e}") from e

        if not isinstance(data, dict):
            raise TemplateLoadError(f"Template {source} must be a mapping")

        return self.from_dict(data, source=source)

    def from_dict(self, data: dict[str, Any], source: str = "<dict>") -> Template:
        """
        Build a template from a parsed document.

        Raises:
            TemplateLoadError: If fields are missing, mistyped, or the id is invalid
        """
        flat = dict(data)
        metadata = flat.pop("metadata", None)
        if isinstance(metadata, dict):
            # Metadata fields win over duplicates at the top level
            flat.update(metadata)

        template_id = str(flat.get("id", "")).strip()
        if not template_id:
            raise TemplateLoadError(f"Template {source} has no id")
        if not _ID_RE.match(template_id):
            raise TemplateLoadError(
                f"Template id '{template_id}' must contain only [A-Za-z0-9_-]"
            )
        flat["id"] = template_id

        try:
            return Template.model_validate(flat)
        except ValidationError as e:
            raise TemplateLoadError(f"Invalid template {source}: {e}") from e

    def to_dict(self, template: Template) -> dict[str, Any]:
        """Convert a template to a serializable document (flat layout)."""
        result: dict[str, Any] = {
            "schema": template.schema_version,
            "id": template.id,
            "version": template.version,
        }
        if template.description:
            result["description"] = template.description

        result["bars"] = template.bars
        result["phrases"] = [
            {
                "name": phrase.name,
                "start_bar": phrase.start_bar,
                "length": phrase.length,
                "cadence": phrase.cadence,
                **(
                    {"modulation_hint": phrase.modulation_hint}
                    if phrase.modulation_hint is not None
                    else {}
                ),
            }
            for phrase in template.phrases
        ]
        result["tension_curve"] = list(template.tension_curve)
        if template.reharm_zones:
            result["reharm_zones"] = [
                {"start_bar": zone.start_bar, "end_bar": zone.end_bar, "risk": zone.risk}
                for zone in template.reharm_zones
            ]

        return result

    def dumps(self, template: Template, format: str = "yaml") -> str:
        """
        Serialize a template to YAML or JSON text.

        Raises:
            ValueError: If format is not yaml or json
        """
        document = self.to_dict(template)
        if format == "json":
            return json.dumps(document, indent=2)
        if format == "yaml":
            return yaml.safe_dump(document, default_flow_style=False, sort_keys=False)
        raise ValueError(ErrorMessages.INVALID_EXPORT_FORMAT.format(format=format))

    def dump(self, template: Template, path: Path) -> Path:
        """
        Write a template to disk as YAML (or JSON for a .json path).

        Returns:
            The path written
        """
        path.parent.mkdir(parents=True, exist_ok=True)
        content = self.dumps(template, "json" if path.suffix.lower() == ".json" else "yaml")
        path.write_text(content, encoding="utf-8")
        return path

    def iter_directory(self, directory: Path) -> list[Path]:
        """Template files in a directory, sorted by name."""
        if not directory.exists():
            return []
        return sorted(
            path
            for path in directory.iterdir()
            if path.is_file() and path.suffix.lower() in TEMPLATE_EXTENSIONS
        )
