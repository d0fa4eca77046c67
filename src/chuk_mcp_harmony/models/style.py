"""
Style profile model - cost-weight bundles that shape planner preferences.

Profiles don't pick chords, they price them. A profile says how expensive
each functional move is, how much a satisfied cadence is worth, how hard
the planner should chase the tension curve, and how much reharmonization
risk excuses a missed cadence.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, Field, field_serializer, field_validator

from chuk_mcp_harmony.constants import DEFAULT_BEAM_WIDTH
from chuk_mcp_harmony.core.harmony import CadenceLabel, HarmonicFunction


class StyleProfile(BaseModel):
    """
    An immutable cost-weight bundle.

    Building a variant with ``with_overrides`` never touches the original.
    """

    # Metadata
    schema_version: str = Field("style-profile/v1", alias="schema")
    name: str = Field(..., description="Profile name")
    description: str = Field("", description="Profile description")

    # Functional transitions: from -> to -> cost
    transition_costs: Mapping[HarmonicFunction, Mapping[HarmonicFunction, float]] = Field(
        default_factory=dict,
        description="Cost of moving from one harmonic function to another",
    )
    default_transition_cost: float = Field(
        1.0, ge=0.0, description="Cost for transitions missing from the table"
    )

    # Cadences
    cadence_bonuses: Mapping[CadenceLabel, float] = Field(
        default_factory=dict,
        description="Reward for satisfying each cadence label",
    )
    cadence_mismatch_penalty: float = Field(
        1.5, ge=0.0, description="Penalty for missing an expected cadence"
    )

    # Tension tracking
    tension_scale: float = Field(1.0, ge=0.0, description="Tension penalty scale factor")
    tension_exponent: float = Field(1.0, gt=0.0, description="Tension penalty curve exponent")

    # Reharmonization tolerance
    reharm_softening: float = Field(
        0.8,
        ge=0.0,
        le=1.0,
        description="How strongly reharm risk discounts cadence mismatches",
    )
    min_softening: float = Field(
        0.05, gt=0.0, le=1.0, description="Floor for the softening multiplier"
    )

    # Search
    beam_width: int = Field(DEFAULT_BEAM_WIDTH, ge=1, description="Default beam width")

    model_config = {"frozen": True, "populate_by_name": True}

    @field_validator("transition_costs", mode="after")
    @classmethod
    def freeze_transitions(
        cls, v: Mapping[HarmonicFunction, Mapping[HarmonicFunction, float]]
    ) -> Mapping[HarmonicFunction, Mapping[HarmonicFunction, float]]:
        """Store the table read-only; presets are shared by every caller."""
        return MappingProxyType({source: MappingProxyType(dict(row)) for source, row in v.items()})

    @field_validator("cadence_bonuses", mode="after")
    @classmethod
    def freeze_bonuses(cls, v: Mapping[CadenceLabel, float]) -> Mapping[CadenceLabel, float]:
        """Store the bonuses read-only."""
        return MappingProxyType(dict(v))

    @field_serializer("transition_costs")
    def dump_transitions(
        self, v: Mapping[HarmonicFunction, Mapping[HarmonicFunction, float]]
    ) -> dict[HarmonicFunction, dict[HarmonicFunction, float]]:
        return {source: dict(row) for source, row in v.items()}

    @field_serializer("cadence_bonuses")
    def dump_bonuses(self, v: Mapping[CadenceLabel, float]) -> dict[CadenceLabel, float]:
        return dict(v)

    def transition_cost(self, from_function: HarmonicFunction, to_function: HarmonicFunction) -> float:
        """Cost of moving from one harmonic function to another."""
        row = self.transition_costs.get(from_function)
        if row is not None:
            cost = row.get(to_function)
            if cost is not None:
                return cost
        return self.default_transition_cost

    def cadence_bonus(self, label: CadenceLabel | str) -> float:
        """Reward for satisfying a cadence. Unlisted labels earn nothing."""
        if not isinstance(label, CadenceLabel):
            label = CadenceLabel.parse(label)
        return self.cadence_bonuses.get(label, 0.0)

    def tension_penalty(self, delta: float) -> float:
        """
        Penalty for missing the tension target by ``delta``.

        Non-decreasing in ``abs(delta)``.
        """
        return self.tension_scale * abs(delta) ** self.tension_exponent

    def soften(self, risk: float) -> float:
        """
        Multiplier applied to cadence-mismatch penalties at a given reharm risk.

        Always in (0, 1]; higher risk gives a smaller multiplier.
        """
        clamped = min(1.0, max(0.0, risk))
        return max(self.min_softening, 1.0 - self.reharm_softening * clamped)

    def with_overrides(self, **overrides: Any) -> StyleProfile:
        """
        Build a new profile with some fields replaced.

        Overrides are validated like any other input.

        Raises:
            pydantic.ValidationError: If an override is out of range
        """
        data = self.model_dump()
        data.update(overrides)
        return type(self).model_validate(data)

    def to_yaml_dict(self) -> dict[str, Any]:
        """Convert to YAML-serializable dictionary."""
        return {
            "schema": self.schema_version,
            "name": self.name,
            "description": self.description,
            "transitions": {
                source.value: {target.value: cost for target, cost in row.items()}
                for source, row in self.transition_costs.items()
            },
            "default_transition_cost": self.default_transition_cost,
            "cadence_bonuses": {label.value: bonus for label, bonus in self.cadence_bonuses.items()},
            "cadence_mismatch_penalty": self.cadence_mismatch_penalty,
            "tension": {
                "scale": self.tension_scale,
                "exponent": self.tension_exponent,
            },
            "reharm": {
                "softening": self.reharm_softening,
                "min_softening": self.min_softening,
            },
            "beam_width": self.beam_width,
        }


class StyleProfileMetadata(BaseModel):
    """Lightweight metadata for listing profiles."""

    name: str
    description: str
    beam_width: int
    builtin: bool = False

    model_config = {"frozen": True}

    @classmethod
    def from_profile(cls, profile: StyleProfile, builtin: bool = False) -> StyleProfileMetadata:
        """Create metadata from a profile."""
        return cls(
            name=profile.name,
            description=profile.description,
            beam_width=profile.beam_width,
            builtin=builtin,
        )
