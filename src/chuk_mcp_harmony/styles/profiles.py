"""
Built-in style profiles.

Each preset is a module constant. They share one common-practice transition
table (dominant resolves to tonic cheaply, predominant leads to dominant,
dominant back to predominant is expensive) and tilt it toward their idiom.
"""

from __future__ import annotations

from types import MappingProxyType

from chuk_mcp_harmony.constants import DEFAULT_STYLE, ErrorMessages
from chuk_mcp_harmony.core.harmony import CadenceLabel, HarmonicFunction
from chuk_mcp_harmony.models.style import StyleProfile, StyleProfileMetadata

_T = HarmonicFunction.TONIC
_ST = HarmonicFunction.SUPERTONIC
_M = HarmonicFunction.MEDIANT
_SD = HarmonicFunction.SUBDOMINANT
_D = HarmonicFunction.DOMINANT
_SM = HarmonicFunction.SUBMEDIANT
_LT = HarmonicFunction.LEADING_TONE

TransitionTable = dict[HarmonicFunction, dict[HarmonicFunction, float]]


class UnknownStyleError(KeyError):
    """Raised when a style name matches no built-in or project profile."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(ErrorMessages.STYLE_NOT_FOUND.format(name=name))

    def __str__(self) -> str:
        return str(self.args[0])


def normalize_profile_name(name: str) -> str:
    """Canonical lookup form: lowercase, ``-`` and spaces folded to ``_``."""
    return name.strip().lower().replace("-", "_").replace(" ", "_")


def common_practice_transitions() -> TransitionTable:
    """A fresh copy of the shared functional transition table."""
    return {
        _T: {_T: 0.8, _ST: 0.5, _M: 0.7, _SD: 0.3, _D: 0.4, _SM: 0.4, _LT: 0.8},
        _ST: {_T: 0.9, _ST: 0.9, _M: 1.2, _SD: 0.8, _D: 0.1, _SM: 1.0, _LT: 0.3},
        _M: {_T: 0.9, _ST: 0.8, _M: 1.0, _SD: 0.5, _D: 1.0, _SM: 0.3, _LT: 1.2},
        _SD: {_T: 0.4, _ST: 0.5, _M: 1.2, _SD: 0.9, _D: 0.2, _SM: 1.0, _LT: 0.4},
        _D: {_T: 0.1, _ST: 1.5, _M: 1.2, _SD: 1.5, _D: 0.8, _SM: 0.4, _LT: 1.0},
        _SM: {_T: 0.9, _ST: 0.3, _M: 0.8, _SD: 0.3, _D: 0.6, _SM: 1.0, _LT: 0.8},
        _LT: {_T: 0.1, _ST: 1.2, _M: 0.8, _SD: 1.2, _D: 0.6, _SM: 0.9, _LT: 1.2},
    }


def _tilt(
    table: TransitionTable,
    changes: dict[tuple[HarmonicFunction, HarmonicFunction], float],
) -> TransitionTable:
    for (source, target), cost in changes.items():
        table[source][target] = cost
    return table


BALANCED = StyleProfile(
    name="balanced",
    description="Common-practice functional harmony with even weighting",
    transition_costs=common_practice_transitions(),
    default_transition_cost=1.0,
    cadence_bonuses={
        CadenceLabel.PERFECT: 1.0,
        CadenceLabel.HALF: 0.6,
        CadenceLabel.PLAGAL: 0.7,
        CadenceLabel.DECEPTIVE: 0.5,
    },
    cadence_mismatch_penalty=1.5,
    tension_scale=1.0,
    tension_exponent=1.0,
    reharm_softening=0.8,
    min_softening=0.05,
    beam_width=6,
)

SMOOTH_BALLAD = StyleProfile(
    name="smooth_ballad",
    description=(
        "Gentle motion through submediant and subdominant colors; "
        "forgives small tension misses"
    ),
    transition_costs=_tilt(
        common_practice_transitions(),
        {
            (_T, _SM): 0.2,
            (_SM, _SD): 0.2,
            (_SM, _ST): 0.2,
            (_SD, _T): 0.3,
            (_T, _D): 0.6,
            (_D, _SM): 0.3,
        },
    ),
    default_transition_cost=1.0,
    cadence_bonuses={
        CadenceLabel.PERFECT: 0.8,
        CadenceLabel.HALF: 0.5,
        CadenceLabel.PLAGAL: 0.9,
        CadenceLabel.DECEPTIVE: 0.8,
    },
    cadence_mismatch_penalty=1.2,
    tension_scale=1.5,
    tension_exponent=2.0,
    reharm_softening=0.6,
    min_softening=0.1,
    beam_width=5,
)

POP_RADIO = StyleProfile(
    name="pop_radio",
    description="Loop-friendly I-V-vi-IV motion with firm cadences",
    transition_costs=_tilt(
        common_practice_transitions(),
        {
            (_T, _D): 0.2,
            (_D, _SM): 0.2,
            (_SM, _SD): 0.2,
            (_SD, _T): 0.2,
            (_M, _SD): 0.4,
        },
    ),
    default_transition_cost=1.2,
    cadence_bonuses={
        CadenceLabel.PERFECT: 1.2,
        CadenceLabel.HALF: 0.8,
        CadenceLabel.PLAGAL: 0.6,
        CadenceLabel.DECEPTIVE: 0.4,
    },
    cadence_mismatch_penalty=2.0,
    tension_scale=0.8,
    tension_exponent=1.0,
    reharm_softening=0.5,
    min_softening=0.05,
    beam_width=7,
)

GOSPEL_DRIVE = StyleProfile(
    name="gospel_drive",
    description="Plagal-heavy motion with strong reharmonization tolerance",
    transition_costs=_tilt(
        common_practice_transitions(),
        {
            (_SD, _T): 0.1,
            (_T, _SD): 0.2,
            (_ST, _SD): 0.4,
            (_SM, _ST): 0.2,
            (_D, _SD): 0.9,
        },
    ),
    default_transition_cost=0.9,
    cadence_bonuses={
        CadenceLabel.PERFECT: 1.0,
        CadenceLabel.HALF: 0.6,
        CadenceLabel.PLAGAL: 1.5,
        CadenceLabel.DECEPTIVE: 0.7,
    },
    cadence_mismatch_penalty=1.2,
    tension_scale=1.2,
    tension_exponent=1.0,
    reharm_softening=0.95,
    min_softening=0.05,
    beam_width=8,
)

BUILTIN_PROFILES: MappingProxyType[str, StyleProfile] = MappingProxyType(
    {
        profile.name: profile
        for profile in (BALANCED, SMOOTH_BALLAD, POP_RADIO, GOSPEL_DRIVE)
    }
)

DEFAULT_PROFILE = BUILTIN_PROFILES[DEFAULT_STYLE]


def is_builtin(name: str) -> bool:
    """Whether a name (in any accepted spelling) is a reserved built-in."""
    return normalize_profile_name(name) in BUILTIN_PROFILES


def get_profile(name: str) -> StyleProfile:
    """
    Resolve a built-in profile by name.

    Lookup is case-insensitive and treats ``-`` and ``_`` alike, so
    ``Smooth-Ballad`` finds ``smooth_ballad``.

    Raises:
        UnknownStyleError: If no built-in profile has that name
    """
    profile = BUILTIN_PROFILES.get(normalize_profile_name(name))
    if profile is None:
        raise UnknownStyleError(name)
    return profile


def list_profiles() -> list[StyleProfileMetadata]:
    """Metadata for every built-in profile, in declaration order."""
    return [
        StyleProfileMetadata.from_profile(profile, builtin=True)
        for profile in BUILTIN_PROFILES.values()
    ]
