"""
Tests for the theory layer.

Tests cover:
- PitchClass parsing and spelling
- Key parsing and degree resolution
- Harmonic functions and the cadence table
- Diatonic chord construction
"""

import pytest

from chuk_mcp_harmony.core import (
    CADENCE_FUNCTIONS,
    CadenceLabel,
    ChordQuality,
    HarmonicFunction,
    Key,
    Mode,
    PitchClass,
    diatonic_chords,
    expected_function,
)


class TestPitchClass:
    """Tests for PitchClass."""

    def test_twelve_classes(self) -> None:
        """There are exactly 12 pitch classes."""
        assert len(PitchClass) == 12

    def test_parse_naturals_and_accidentals(self) -> None:
        """Parse natural, sharp and flat names."""
        assert PitchClass.parse("C") == PitchClass.C
        assert PitchClass.parse("F#") == PitchClass.Fs
        assert PitchClass.parse("Bb") == PitchClass.As
        assert PitchClass.parse("e♭") == PitchClass.Ds

    def test_parse_wraps_octave(self) -> None:
        """Accidentals wrap around the octave."""
        assert PitchClass.parse("Cb") == PitchClass.B
        assert PitchClass.parse("B#") == PitchClass.C

    def test_parse_invalid(self) -> None:
        """Unknown names raise ValueError."""
        with pytest.raises(ValueError):
            PitchClass.parse("H")
        with pytest.raises(ValueError):
            PitchClass.parse("")
        with pytest.raises(ValueError):
            PitchClass.parse("Cx")

    def test_transpose(self) -> None:
        """Transposition wraps in both directions."""
        assert PitchClass.B.transpose(1) == PitchClass.C
        assert PitchClass.C.transpose(-1) == PitchClass.B
        assert PitchClass.G.transpose(7) == PitchClass.D

    def test_spell(self) -> None:
        """Spelling honors the flat preference."""
        assert PitchClass.Cs.spell() == "C#"
        assert PitchClass.Cs.spell(prefer_flats=True) == "Db"
        assert PitchClass.E.spell(prefer_flats=True) == "E"


class TestKey:
    """Tests for Key."""

    def test_parse_underscore_form(self) -> None:
        """Parse 'C_major' and 'D_minor'."""
        assert Key.parse("C_major") == Key(PitchClass.C, Mode.MAJOR)
        assert Key.parse("D_minor") == Key(PitchClass.D, Mode.MINOR)

    def test_parse_space_form_and_bare_tonic(self) -> None:
        """Parse 'A minor' and a bare tonic (read as major)."""
        assert Key.parse("A minor") == Key(PitchClass.A, Mode.MINOR)
        assert Key.parse("F#") == Key(PitchClass.Fs, Mode.MAJOR)

    def test_parse_mode_aliases(self) -> None:
        """Mode aliases resolve."""
        assert Key.parse("E_min").mode == Mode.MINOR
        assert Key.parse("G_ionian").mode == Mode.MAJOR

    def test_parse_invalid(self) -> None:
        """Unknown modes and tonics raise ValueError."""
        with pytest.raises(ValueError):
            Key.parse("C_lydian")
        with pytest.raises(ValueError):
            Key.parse("X_major")
        with pytest.raises(ValueError):
            Key.parse("  ")

    def test_degree_to_pitch(self) -> None:
        """Degrees resolve through the mode's steps."""
        d_major = Key.parse("D_major")
        assert d_major.degree_to_pitch(1) == PitchClass.D
        assert d_major.degree_to_pitch(3) == PitchClass.Fs
        assert d_major.degree_to_pitch(5) == PitchClass.A

        a_minor = Key.parse("A_minor")
        assert a_minor.degree_to_pitch(3) == PitchClass.C

    def test_degree_out_of_range(self) -> None:
        """Degrees outside 1-7 raise ValueError."""
        with pytest.raises(ValueError):
            Key.parse("C_major").degree_to_pitch(8)

    def test_spelling(self) -> None:
        """Flat keys spell with flats; an explicit accidental wins."""
        assert str(Key.parse("F_major")) == "F major"
        assert Key.parse("F_major").spell(PitchClass.As) == "Bb"
        assert str(Key.parse("Bb major")) == "Bb major"
        assert str(Key.parse("A#_major")) == "A# major"

    def test_spelling_preference_ignored_by_equality(self) -> None:
        """Bb and A# name the same key."""
        assert Key.parse("Bb_major") == Key.parse("A#_major")


class TestHarmonicFunction:
    """Tests for HarmonicFunction and the cadence table."""

    def test_for_degree(self) -> None:
        """Each degree has its function."""
        assert HarmonicFunction.for_degree(1) == HarmonicFunction.TONIC
        assert HarmonicFunction.for_degree(5) == HarmonicFunction.DOMINANT
        assert HarmonicFunction.for_degree(7) == HarmonicFunction.LEADING_TONE

    def test_for_degree_invalid(self) -> None:
        """Degree 0 is not a degree."""
        with pytest.raises(ValueError):
            HarmonicFunction.for_degree(0)

    def test_cadence_table(self) -> None:
        """Each cadence names exactly one function; none names nothing."""
        assert CADENCE_FUNCTIONS[CadenceLabel.HALF] == HarmonicFunction.DOMINANT
        assert CADENCE_FUNCTIONS[CadenceLabel.PERFECT] == HarmonicFunction.TONIC
        assert CADENCE_FUNCTIONS[CadenceLabel.PLAGAL] == HarmonicFunction.SUBDOMINANT
        assert CADENCE_FUNCTIONS[CadenceLabel.DECEPTIVE] == HarmonicFunction.SUBMEDIANT
        assert CadenceLabel.NONE not in CADENCE_FUNCTIONS
        assert expected_function(CadenceLabel.NONE) is None

    def test_cadence_table_read_only(self) -> None:
        """The cadence table cannot be modified."""
        with pytest.raises(TypeError):
            CADENCE_FUNCTIONS[CadenceLabel.NONE] = HarmonicFunction.TONIC  # type: ignore[index]

    def test_cadence_parse(self) -> None:
        """Labels parse case-insensitively."""
        assert CadenceLabel.parse("Perfect") == CadenceLabel.PERFECT
        assert CadenceLabel.parse(" half ") == CadenceLabel.HALF
        with pytest.raises(ValueError):
            CadenceLabel.parse("authentic")


class TestDiatonicChords:
    """Tests for diatonic chord construction."""

    def test_c_major_triads(self) -> None:
        """C major triads in degree order."""
        chords = diatonic_chords(Key.parse("C_major"))
        assert [c.symbol for c in chords] == ["C", "Dm", "Em", "F", "G", "Am", "Bdim"]
        assert [c.roman for c in chords] == ["I", "ii", "iii", "IV", "V", "vi", "vii°"]

    def test_c_major_sevenths(self) -> None:
        """C major seventh chords."""
        chords = diatonic_chords(Key.parse("C_major"), sevenths=True)
        assert [c.symbol for c in chords] == [
            "Cmaj7",
            "Dm7",
            "Em7",
            "Fmaj7",
            "G7",
            "Am7",
            "Bm7b5",
        ]
        assert chords[4].roman == "V7"
        assert chords[6].roman == "viiø7"
        assert all(c.quality.is_seventh for c in chords)

    def test_minor_raises_leading_tone(self) -> None:
        """Minor keys get a major V and a leading-tone vii°."""
        chords = diatonic_chords(Key.parse("A_minor"))
        assert [c.symbol for c in chords] == ["Am", "Bdim", "C", "Dm", "E", "F", "G#dim"]
        assert chords[4].quality == ChordQuality.MAJOR
        assert chords[4].roman == "V"

    def test_minor_dominant_seventh(self) -> None:
        """The minor-key V7 is a dominant seventh."""
        chords = diatonic_chords(Key.parse("A_minor"), sevenths=True)
        assert chords[4].symbol == "E7"
        assert chords[6].quality == ChordQuality.DIMINISHED_7

    def test_functions_follow_degrees(self) -> None:
        """Chord functions follow their degree."""
        chords = diatonic_chords(Key.parse("G_major"))
        assert [c.function for c in chords] == [
            HarmonicFunction.for_degree(degree) for degree in range(1, 8)
        ]

    def test_flat_key_spelling(self) -> None:
        """F major spells its subdominant as Bb."""
        chords = diatonic_chords(Key.parse("F_major"))
        assert chords[3].symbol == "Bb"
