"""
Key primitives - Mode and Key.

A key is a tonic pitch class plus a mode. It is the context a candidate
provider needs to turn scale degrees into concrete chord symbols.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .pitch import PitchClass


class Mode(str, Enum):
    """Key mode. Major and natural minor only."""

    MAJOR = "major"
    MINOR = "minor"


# Semitones from the tonic for degrees 1-7
_MODE_STEPS: dict[Mode, tuple[int, ...]] = {
    Mode.MAJOR: (0, 2, 4, 5, 7, 9, 11),
    Mode.MINOR: (0, 2, 3, 5, 7, 8, 10),
}

# Tonics conventionally written with flats
_FLAT_TONICS: dict[Mode, frozenset[PitchClass]] = {
    Mode.MAJOR: frozenset(
        {PitchClass.F, PitchClass.As, PitchClass.Ds, PitchClass.Gs, PitchClass.Cs, PitchClass.Fs}
    ),
    Mode.MINOR: frozenset(
        {PitchClass.D, PitchClass.G, PitchClass.C, PitchClass.F, PitchClass.As, PitchClass.Ds}
    ),
}

_MODE_ALIASES: dict[str, Mode] = {
    "major": Mode.MAJOR,
    "maj": Mode.MAJOR,
    "ionian": Mode.MAJOR,
    "minor": Mode.MINOR,
    "min": Mode.MINOR,
    "natural_minor": Mode.MINOR,
    "aeolian": Mode.MINOR,
}


@dataclass(frozen=True)
class Key:
    """
    A tonic plus a mode.

    Examples:
        Key(PitchClass.C, Mode.MAJOR) = C major
        Key.parse("D_minor") = D minor
    """

    tonic: PitchClass
    mode: Mode = Mode.MAJOR
    # Explicit spelling preference; None means "use the conventional one"
    prefer_flats: bool | None = field(default=None, compare=False)

    def degree_to_pitch(self, degree: int) -> PitchClass:
        """
        Resolve a scale degree (1-7) to a pitch class.

        Raises:
            ValueError: If degree is outside 1-7
        """
        if not 1 <= degree <= 7:
            raise ValueError(f"Degree must be 1-7, got {degree}")
        return self.tonic.transpose(_MODE_STEPS[self.mode][degree - 1])

    @property
    def uses_flats(self) -> bool:
        """Whether chord symbols in this key should be spelled with flats."""
        if self.prefer_flats is not None:
            return self.prefer_flats
        return self.tonic in _FLAT_TONICS[self.mode]

    def spell(self, pitch: PitchClass) -> str:
        """Spell a pitch class the way this key would."""
        return pitch.spell(prefer_flats=self.uses_flats)

    def __str__(self) -> str:
        return f"{self.spell(self.tonic)} {self.mode.value}"

    @classmethod
    def parse(cls, name: str) -> Key:
        """
        Parse a key from 'C_major', 'D_minor', 'Bb major' or a bare tonic 'F#'.

        A bare tonic is read as major.

        Raises:
            ValueError: If the tonic or mode is not recognized
        """
        text = name.strip().replace(" ", "_")
        if not text:
            raise ValueError("Key cannot be empty")

        tonic_str, _, mode_str = text.partition("_")
        mode_key = mode_str.lower() or "major"
        if mode_key not in _MODE_ALIASES:
            raise ValueError(f"Unknown mode '{mode_str}' in key: {name}")

        tonic = PitchClass.parse(tonic_str)
        accidentals = tonic_str[1:]
        prefer_flats: bool | None = None
        if accidentals:
            prefer_flats = accidentals[0] in ("b", "♭")

        return cls(tonic, _MODE_ALIASES[mode_key], prefer_flats)
