"""
Template model - the section-template DSL.

A template describes a section declaratively: how many bars, how they split
into phrases, which cadence each phrase expects, how tension should move,
and where harmonic substitution is tolerated.

Models accept structurally questionable documents on purpose. Coverage,
ranges and cadence labels are checked by the validator so tooling can load
a broken template and report everything wrong with it.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

from chuk_mcp_harmony.constants import DEFAULT_REHARM_RISK
from chuk_mcp_harmony.core.harmony import CadenceLabel


class Phrase(BaseModel):
    """
    A contiguous, named span of bars with a cadence expectation.

    The name is only used for explainability. The modulation hint is opaque:
    it is forwarded verbatim into plan traces and never interpreted here.
    """

    name: str = Field(..., description="Phrase label (e.g. 'A1', 'bridge')")
    start_bar: int = Field(..., description="First bar of the phrase (0-indexed)")
    length: int = Field(..., description="Length in bars")
    cadence: str = Field("none", description="none, half, perfect, plagal or deceptive")
    modulation_hint: str | None = Field(None, description="Opaque hint for downstream tools")

    model_config = {"frozen": True}

    @field_validator("cadence", mode="before")
    @classmethod
    def cadence_to_string(cls, v: Any) -> Any:
        """Accept CadenceLabel members as well as raw strings."""
        if isinstance(v, Enum):
            return v.value
        return v

    @property
    def end_bar(self) -> int:
        """Exclusive end bar."""
        return self.start_bar + self.length

    @property
    def cadence_label(self) -> CadenceLabel:
        """
        Parsed cadence label.

        Raises:
            ValueError: If the label is not recognized (validate first)
        """
        return CadenceLabel.parse(self.cadence)


class ReharmZone(BaseModel):
    """
    A bar range where harmonic substitution is tolerated.

    Risk is clamped into [0, 1] rather than rejected.
    """

    start_bar: int = Field(..., description="First bar of the zone (0-indexed)")
    end_bar: int = Field(..., description="Exclusive end bar")
    risk: float = Field(DEFAULT_REHARM_RISK, description="Substitution tolerance (0-1)")

    model_config = {"frozen": True}

    @field_validator("risk")
    @classmethod
    def clamp_risk(cls, v: float) -> float:
        """Clamp risk into [0, 1]."""
        return min(1.0, max(0.0, v))

    def covers(self, bar_index: int) -> bool:
        """Whether the zone's [start_bar, end_bar) range contains a bar."""
        return self.start_bar <= bar_index < self.end_bar


class Template(BaseModel):
    """
    A section template.

    Identity is the ``id``; ``version`` is metadata carried alongside it.
    """

    schema_version: str = Field("template/v1", alias="schema", description="Schema version")
    id: str = Field(..., description="Stable template identity")
    version: int = Field(1, ge=1, description="Template version")
    description: str = Field("", description="Human-readable description")
    bars: int = Field(..., description="Section length in bars (4-64)")
    phrases: list[Phrase] = Field(default_factory=list, description="Phrases in bar order")
    tension_curve: list[float] = Field(
        default_factory=list, description="Target tension per bar (0-1)"
    )
    reharm_zones: list[ReharmZone] = Field(
        default_factory=list, description="Possibly overlapping substitution zones"
    )

    model_config = {"frozen": True, "populate_by_name": True}

    def summary(self) -> TemplateSummary:
        """Lightweight summary for listings."""
        return TemplateSummary.from_template(self)


class TemplateSummary(BaseModel):
    """Lightweight metadata for listing templates."""

    id: str
    version: int
    bars: int
    phrases: int
    description: str = ""

    model_config = {"frozen": True}

    @classmethod
    def from_template(cls, template: Template) -> TemplateSummary:
        """Create a summary from a template."""
        return cls(
            id=template.id,
            version=template.version,
            bars=template.bars,
            phrases=len(template.phrases),
            description=template.description,
        )
