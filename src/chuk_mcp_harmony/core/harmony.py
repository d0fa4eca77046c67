"""
Harmony primitives - harmonic functions, cadences and diatonic chords.

Functions are the vocabulary the planner reasons in. The cadence table maps
each cadence label to the single function that satisfies it; it is an
explicit enum-to-enum mapping so an unsupported pairing cannot be written.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType

from .key import Key, Mode


class HarmonicFunction(str, Enum):
    """Tonal function of a chord, named after the scale degree of its root."""

    TONIC = "tonic"
    SUPERTONIC = "supertonic"
    MEDIANT = "mediant"
    SUBDOMINANT = "subdominant"
    DOMINANT = "dominant"
    SUBMEDIANT = "submediant"
    LEADING_TONE = "leading_tone"

    @classmethod
    def for_degree(cls, degree: int) -> HarmonicFunction:
        """Function of the chord built on a scale degree (1-7)."""
        if not 1 <= degree <= 7:
            raise ValueError(f"Degree must be 1-7, got {degree}")
        return _DEGREE_FUNCTIONS[degree - 1]


_DEGREE_FUNCTIONS: tuple[HarmonicFunction, ...] = (
    HarmonicFunction.TONIC,
    HarmonicFunction.SUPERTONIC,
    HarmonicFunction.MEDIANT,
    HarmonicFunction.SUBDOMINANT,
    HarmonicFunction.DOMINANT,
    HarmonicFunction.SUBMEDIANT,
    HarmonicFunction.LEADING_TONE,
)


class CadenceLabel(str, Enum):
    """Expected harmonic motion at the final bar of a phrase."""

    NONE = "none"
    HALF = "half"
    PERFECT = "perfect"
    PLAGAL = "plagal"
    DECEPTIVE = "deceptive"

    @classmethod
    def parse(cls, label: str) -> CadenceLabel:
        """
        Parse a cadence label case-insensitively.

        Raises:
            ValueError: If the label is not one of the five recognized labels
        """
        try:
            return cls(label.strip().lower())
        except ValueError:
            raise ValueError(f"Unknown cadence label: {label!r}") from None


# Cadence label -> the function that satisfies it. NONE carries no constraint.
CADENCE_FUNCTIONS: MappingProxyType[CadenceLabel, HarmonicFunction] = MappingProxyType(
    {
        CadenceLabel.HALF: HarmonicFunction.DOMINANT,
        CadenceLabel.PERFECT: HarmonicFunction.TONIC,
        CadenceLabel.PLAGAL: HarmonicFunction.SUBDOMINANT,
        CadenceLabel.DECEPTIVE: HarmonicFunction.SUBMEDIANT,
    }
)


def expected_function(cadence: CadenceLabel) -> HarmonicFunction | None:
    """Function required by a cadence, or None when the label carries no constraint."""
    return CADENCE_FUNCTIONS.get(cadence)


class ChordQuality(str, Enum):
    """Chord qualities that occur diatonically in major and minor keys."""

    MAJOR = "major"
    MINOR = "minor"
    DIMINISHED = "diminished"
    MAJOR_7 = "major 7"
    MINOR_7 = "minor 7"
    DOMINANT_7 = "dominant 7"
    HALF_DIMINISHED_7 = "half-diminished 7"
    DIMINISHED_7 = "diminished 7"

    @property
    def is_seventh(self) -> bool:
        return self in _SEVENTHS

    @property
    def symbol_suffix(self) -> str:
        """Suffix used in lead-sheet chord symbols (Cm7, Bdim, G7)."""
        return _SYMBOL_SUFFIXES[self]

    @property
    def numeral_suffix(self) -> str:
        """Suffix used after a Roman numeral (vii°, iiø7, V7)."""
        return _NUMERAL_SUFFIXES[self]

    @property
    def lowercase_numeral(self) -> bool:
        """Minor and diminished chords use lowercase numerals."""
        return self in _LOWERCASE


_SEVENTHS = frozenset(
    {
        ChordQuality.MAJOR_7,
        ChordQuality.MINOR_7,
        ChordQuality.DOMINANT_7,
        ChordQuality.HALF_DIMINISHED_7,
        ChordQuality.DIMINISHED_7,
    }
)

_LOWERCASE = frozenset(
    {
        ChordQuality.MINOR,
        ChordQuality.DIMINISHED,
        ChordQuality.MINOR_7,
        ChordQuality.HALF_DIMINISHED_7,
        ChordQuality.DIMINISHED_7,
    }
)

_SYMBOL_SUFFIXES: dict[ChordQuality, str] = {
    ChordQuality.MAJOR: "",
    ChordQuality.MINOR: "m",
    ChordQuality.DIMINISHED: "dim",
    ChordQuality.MAJOR_7: "maj7",
    ChordQuality.MINOR_7: "m7",
    ChordQuality.DOMINANT_7: "7",
    ChordQuality.HALF_DIMINISHED_7: "m7b5",
    ChordQuality.DIMINISHED_7: "dim7",
}

_NUMERAL_SUFFIXES: dict[ChordQuality, str] = {
    ChordQuality.MAJOR: "",
    ChordQuality.MINOR: "",
    ChordQuality.DIMINISHED: "°",
    ChordQuality.MAJOR_7: "maj7",
    ChordQuality.MINOR_7: "7",
    ChordQuality.DOMINANT_7: "7",
    ChordQuality.HALF_DIMINISHED_7: "ø7",
    ChordQuality.DIMINISHED_7: "°7",
}

# Diatonic qualities per degree. Minor uses the raised leading tone for V and vii°,
# so cadences in minor have a real dominant.
_TRIADS: dict[Mode, tuple[ChordQuality, ...]] = {
    Mode.MAJOR: (
        ChordQuality.MAJOR,
        ChordQuality.MINOR,
        ChordQuality.MINOR,
        ChordQuality.MAJOR,
        ChordQuality.MAJOR,
        ChordQuality.MINOR,
        ChordQuality.DIMINISHED,
    ),
    Mode.MINOR: (
        ChordQuality.MINOR,
        ChordQuality.DIMINISHED,
        ChordQuality.MAJOR,
        ChordQuality.MINOR,
        ChordQuality.MAJOR,
        ChordQuality.MAJOR,
        ChordQuality.DIMINISHED,
    ),
}

_SEVENTH_CHORDS: dict[Mode, tuple[ChordQuality, ...]] = {
    Mode.MAJOR: (
        ChordQuality.MAJOR_7,
        ChordQuality.MINOR_7,
        ChordQuality.MINOR_7,
        ChordQuality.MAJOR_7,
        ChordQuality.DOMINANT_7,
        ChordQuality.MINOR_7,
        ChordQuality.HALF_DIMINISHED_7,
    ),
    Mode.MINOR: (
        ChordQuality.MINOR_7,
        ChordQuality.HALF_DIMINISHED_7,
        ChordQuality.MAJOR_7,
        ChordQuality.MINOR_7,
        ChordQuality.DOMINANT_7,
        ChordQuality.MAJOR_7,
        ChordQuality.DIMINISHED_7,
    ),
}

# Leading tone is raised in minor: degree 7 sits a semitone below the tonic
_RAISED_SEVENTH: dict[Mode, bool] = {Mode.MAJOR: False, Mode.MINOR: True}

_NUMERALS: tuple[str, ...] = ("I", "II", "III", "IV", "V", "VI", "VII")


@dataclass(frozen=True)
class DiatonicChord:
    """A chord built on a scale degree of a key, resolved to a symbol."""

    degree: int
    quality: ChordQuality
    roman: str
    symbol: str
    function: HarmonicFunction


def _roman(degree: int, quality: ChordQuality) -> str:
    numeral = _NUMERALS[degree - 1]
    if quality.lowercase_numeral:
        numeral = numeral.lower()
    return numeral + quality.numeral_suffix


def diatonic_chords(key: Key, sevenths: bool = False) -> list[DiatonicChord]:
    """
    Get the diatonic chords of a key in degree order.

    Args:
        key: The key
        sevenths: Build seventh chords instead of triads

    Returns:
        Seven chords, degree 1 first
    """
    qualities = _SEVENTH_CHORDS[key.mode] if sevenths else _TRIADS[key.mode]
    chords: list[DiatonicChord] = []

    for degree, quality in enumerate(qualities, start=1):
        root = key.degree_to_pitch(degree)
        if degree == 7 and _RAISED_SEVENTH[key.mode]:
            root = key.tonic.transpose(-1)

        chords.append(
            DiatonicChord(
                degree=degree,
                quality=quality,
                roman=_roman(degree, quality),
                symbol=f"{key.spell(root)}{quality.symbol_suffix}",
                function=HarmonicFunction.for_degree(degree),
            )
        )

    return chords
