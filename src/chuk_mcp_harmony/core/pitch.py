"""
Pitch primitives - the 12 chromatic pitch classes.

Pitch classes are octave-independent. Spelling (sharps vs flats) is a
display concern handled by ``spell``; the planner only ever compares
semitone values.
"""

from __future__ import annotations

from enum import IntEnum

# Display name mappings (module level to avoid IntEnum member issues)
_SHARP_NAMES: tuple[str, ...] = ("C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B")
_FLAT_NAMES: tuple[str, ...] = ("C", "Db", "D", "Eb", "E", "F", "Gb", "G", "Ab", "A", "Bb", "B")

_LETTER_SEMITONES: dict[str, int] = {"C": 0, "D": 2, "E": 4, "F": 5, "G": 7, "A": 9, "B": 11}
_ACCIDENTALS: dict[str, int] = {"#": 1, "♯": 1, "b": -1, "♭": -1}


class PitchClass(IntEnum):
    """
    The 12 chromatic pitch classes (0-11).

    Enharmonic equivalents share the same value (C# == Db == 1).
    """

    C = 0
    Cs = 1  # C# / Db
    D = 2
    Ds = 3  # D# / Eb
    E = 4
    F = 5
    Fs = 6  # F# / Gb
    G = 7
    Gs = 8  # G# / Ab
    A = 9
    As = 10  # A# / Bb
    B = 11

    def transpose(self, semitones: int) -> PitchClass:
        """Transpose by a number of semitones (positive or negative)."""
        return PitchClass((self.value + semitones) % 12)

    def spell(self, prefer_flats: bool = False) -> str:
        """Get human-readable name."""
        names = _FLAT_NAMES if prefer_flats else _SHARP_NAMES
        return names[self.value]

    @classmethod
    def parse(cls, name: str) -> PitchClass:
        """
        Parse a pitch class from a string like 'C', 'F#', 'Bb' or 'Ebb'.

        Any number of accidentals may follow the letter; the result wraps
        around the octave (Cb == B).

        Raises:
            ValueError: If the string is not a pitch name
        """
        text = name.strip()
        if not text:
            raise ValueError("Pitch class cannot be empty")

        letter = text[0].upper()
        if letter not in _LETTER_SEMITONES:
            raise ValueError(f"Unknown pitch class: {name}")

        offset = 0
        for char in text[1:]:
            if char not in _ACCIDENTALS:
                raise ValueError(f"Unrecognized accidental '{char}' in pitch class: {name}")
            offset += _ACCIDENTALS[char]

        return cls((_LETTER_SEMITONES[letter] + offset) % 12)
