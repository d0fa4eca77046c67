"""
Core music primitives - the theory layer the planner consumes.

- PitchClass: The 12 chromatic pitch classes (0-11)
- Mode / Key: Tonic plus mode, resolves degrees to pitches
- HarmonicFunction: Tonal function of a chord
- CadenceLabel: Expected motion at a phrase ending
- ChordQuality / DiatonicChord: Chords built on scale degrees
"""

from chuk_mcp_harmony.core.harmony import (
    CADENCE_FUNCTIONS,
    CadenceLabel,
    ChordQuality,
    DiatonicChord,
    HarmonicFunction,
    diatonic_chords,
    expected_function,
)
from chuk_mcp_harmony.core.key import Key, Mode
from chuk_mcp_harmony.core.pitch import PitchClass

__all__ = [
    # Pitch
    "PitchClass",
    # Key
    "Mode",
    "Key",
    # Harmony
    "HarmonicFunction",
    "CadenceLabel",
    "CADENCE_FUNCTIONS",
    "expected_function",
    "ChordQuality",
    "DiatonicChord",
    "diatonic_chords",
]
