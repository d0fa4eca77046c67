"""
Profile loader - resolves style profiles by name.

Profiles can come from:
1. Built-in presets (module constants, reserved names)
2. Project profiles (YAML files in the project's styles directory)

Built-in names always resolve to the preset; a project file that reuses one
is ignored with a warning.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any

import yaml

from chuk_mcp_harmony.constants import TEMPLATE_ID_PATTERN
from chuk_mcp_harmony.core.harmony import CadenceLabel, HarmonicFunction
from chuk_mcp_harmony.models.style import StyleProfile, StyleProfileMetadata
from chuk_mcp_harmony.styles.profiles import (
    BUILTIN_PROFILES,
    UnknownStyleError,
    is_builtin,
    normalize_profile_name,
)

logger = logging.getLogger(__name__)


class ProfileLoader:
    """
    Discovers and loads style profiles.

    Project profiles are YAML documents in the shape produced by
    ``StyleProfile.to_yaml_dict``.
    """

    def __init__(self, project_path: Path | None = None):
        """
        Initialize the profile loader.

        Args:
            project_path: Path to project styles directory
        """
        self.project_path = project_path
        self._cache: dict[str, StyleProfile] = {}

    def list_profiles(self) -> list[StyleProfileMetadata]:
        """
        List all available profiles.

        Built-ins first, then project profiles sorted by name.
        """
        profiles = [
            StyleProfileMetadata.from_profile(profile, builtin=True)
            for profile in BUILTIN_PROFILES.values()
        ]

        for path in self._project_files():
            profile = self._load_profile_file(path)
            if profile is not None:
                profiles.append(StyleProfileMetadata.from_profile(profile))

        return profiles

    def get_profile(self, name: str) -> StyleProfile:
        """
        Get a profile by name.

        Args:
            name: Profile name, in any case, with ``-`` or ``_``

        Returns:
            The resolved profile

        Raises:
            UnknownStyleError: If neither a built-in nor a project profile matches
        """
        key = normalize_profile_name(name)

        builtin = BUILTIN_PROFILES.get(key)
        if builtin is not None:
            return builtin

        if key in self._cache:
            return self._cache[key]

        for path in self._project_files():
            if normalize_profile_name(path.stem) != key:
                continue
            profile = self._load_profile_file(path)
            if profile is not None:
                self._cache[key] = profile
                return profile

        raise UnknownStyleError(name)

    def save_profile(self, profile: StyleProfile) -> Path:
        """
        Write a custom profile to the project styles directory.

        Args:
            profile: Profile to save

        Returns:
            Path to the written file

        Raises:
            ValueError: If no project path is set or the name is reserved or not
                file-name safe
        """
        if not self.project_path:
            raise ValueError("No project path configured")
        if is_builtin(profile.name):
            raise ValueError(f"Style name is reserved for a built-in profile: {profile.name}")

        key = normalize_profile_name(profile.name)
        if not re.fullmatch(TEMPLATE_ID_PATTERN, key):
            raise ValueError(
                f"Style name '{profile.name}' must contain only letters, digits, spaces, - or _"
            )

        self.project_path.mkdir(parents=True, exist_ok=True)
        path = self.project_path / f"{key}.yaml"

        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(profile.to_yaml_dict(), f, default_flow_style=False, sort_keys=False)

        self._cache.pop(key, None)
        return path

    def _project_files(self) -> list[Path]:
        if not self.project_path or not self.project_path.exists():
            return []

        files = []
        for path in sorted(self.project_path.glob("*.yaml")):
            if is_builtin(path.stem):
                logger.warning("Ignoring project style %s: name is reserved", path)
                continue
            files.append(path)
        return files

    def _load_profile_file(self, path: Path) -> StyleProfile | None:
        """Load a profile from a YAML file, or None if it is unreadable."""
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
            if not isinstance(data, dict):
                raise ValueError("document must be a mapping")
            profile = self.parse_profile(data, default_name=path.stem)
        except (OSError, yaml.YAMLError, TypeError, ValueError) as e:
            logger.warning("Failed to load style profile %s: %s", path, e)
            return None

        if is_builtin(profile.name):
            logger.warning("Ignoring project style %s: name is reserved", path)
            return None
        return profile

    def parse_profile(self, data: dict[str, Any], default_name: str = "custom") -> StyleProfile:
        """
        Parse a profile from YAML data.

        Missing sections fall back to StyleProfile defaults.

        Raises:
            ValueError: If a function or cadence name is unknown, or a value
                is out of range (pydantic.ValidationError)
        """
        fields: dict[str, Any] = {
            "name": data.get("name", default_name),
            "description": data.get("description", ""),
        }

        transitions = data.get("transitions", {}) or {}
        fields["transition_costs"] = {
            HarmonicFunction(source): {
                HarmonicFunction(target): float(cost) for target, cost in row.items()
            }
            for source, row in transitions.items()
        }

        bonuses = data.get("cadence_bonuses", {}) or {}
        fields["cadence_bonuses"] = {
            CadenceLabel.parse(label): float(bonus) for label, bonus in bonuses.items()
        }

        for key in ("default_transition_cost", "cadence_mismatch_penalty", "beam_width"):
            if key in data:
                fields[key] = data[key]

        tension = data.get("tension", {}) or {}
        if "scale" in tension:
            fields["tension_scale"] = tension["scale"]
        if "exponent" in tension:
            fields["tension_exponent"] = tension["exponent"]

        reharm = data.get("reharm", {}) or {}
        if "softening" in reharm:
            fields["reharm_softening"] = reharm["softening"]
        if "min_softening" in reharm:
            fields["min_softening"] = reharm["min_softening"]

        return StyleProfile.model_validate(fields)

    def clear_cache(self) -> None:
        """Clear the profile cache."""
        self._cache.clear()
