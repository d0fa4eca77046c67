"""
Chord candidates - what the planner may choose from at each bar.

The planner never invents chords. A CandidateProvider hands it an ordered
list per bar; the order is the tie-break order when two choices cost the
same, so providers must return the same list for the same bar every time.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from chuk_mcp_harmony.core.harmony import ChordQuality, HarmonicFunction, diatonic_chords
from chuk_mcp_harmony.core.key import Key


@dataclass(frozen=True)
class ChordCandidate:
    """A chord the planner may place in a bar."""

    symbol: str  # e.g. "G7"
    roman: str  # e.g. "V7"
    function: HarmonicFunction
    tension: float  # estimated, 0.0 to 1.0
    base_cost: float = 0.0

    def __post_init__(self) -> None:
        if not 0.0 <= self.tension <= 1.0:
            raise ValueError(f"Candidate tension must be in [0, 1], got {self.tension}")
        if self.base_cost < 0.0:
            raise ValueError(f"Candidate base cost must be >= 0, got {self.base_cost}")

    def to_dict(self) -> dict[str, object]:
        return {
            "symbol": self.symbol,
            "roman": self.roman,
            "function": self.function.value,
            "tension": self.tension,
            "base_cost": self.base_cost,
        }


@runtime_checkable
class CandidateProvider(Protocol):
    """Supplies the ordered candidate list for a bar."""

    def candidates_for(self, bar_index: int) -> Sequence[ChordCandidate]: ...


# Estimated tension of a chord by function, before seventh color
FUNCTION_TENSION: dict[HarmonicFunction, float] = {
    HarmonicFunction.TONIC: 0.1,
    HarmonicFunction.SUBMEDIANT: 0.25,
    HarmonicFunction.MEDIANT: 0.3,
    HarmonicFunction.SUBDOMINANT: 0.4,
    HarmonicFunction.SUPERTONIC: 0.45,
    HarmonicFunction.DOMINANT: 0.75,
    HarmonicFunction.LEADING_TONE: 0.85,
}

SEVENTH_TENSION = 0.1
SEVENTH_BASE_COST = 0.05
DIMINISHED_BASE_COST = 0.1

_DIMINISHED = frozenset(
    {
        ChordQuality.DIMINISHED,
        ChordQuality.HALF_DIMINISHED_7,
        ChordQuality.DIMINISHED_7,
    }
)


class DiatonicCandidateProvider:
    """
    Offers the diatonic chords of one key at every bar.

    Triads come first in degree order, then (optionally) seventh chords in
    degree order. Sevenths carry a little more tension and a small intrinsic
    cost; diminished chords cost a little more again.
    """

    def __init__(self, key: Key, include_sevenths: bool = True):
        """
        Initialize the provider.

        Args:
            key: Key whose diatonic chords are offered
            include_sevenths: Also offer seventh chords
        """
        self.key = key
        self.include_sevenths = include_sevenths
        self._candidates = tuple(self._build())

    def _build(self) -> list[ChordCandidate]:
        chord_sets = [diatonic_chords(self.key, sevenths=False)]
        if self.include_sevenths:
            chord_sets.append(diatonic_chords(self.key, sevenths=True))

        candidates: list[ChordCandidate] = []
        for chords in chord_sets:
            for chord in chords:
                tension = FUNCTION_TENSION[chord.function]
                base_cost = 0.0
                if chord.quality.is_seventh:
                    tension += SEVENTH_TENSION
                    base_cost += SEVENTH_BASE_COST
                if chord.quality in _DIMINISHED:
                    base_cost += DIMINISHED_BASE_COST

                candidates.append(
                    ChordCandidate(
                        symbol=chord.symbol,
                        roman=chord.roman,
                        function=chord.function,
                        tension=round(min(1.0, tension), 4),
                        base_cost=round(base_cost, 4),
                    )
                )
        return candidates

    def candidates_for(self, bar_index: int) -> Sequence[ChordCandidate]:
        return self._candidates


class StaticCandidateProvider:
    """Explicit per-bar candidate lists; bars not listed fall back to ``default``."""

    def __init__(
        self,
        per_bar: Mapping[int, Sequence[ChordCandidate]] | Sequence[Sequence[ChordCandidate]],
        default: Sequence[ChordCandidate] | None = None,
    ):
        if isinstance(per_bar, Mapping):
            self._per_bar = {index: tuple(items) for index, items in per_bar.items()}
        else:
            self._per_bar = {index: tuple(items) for index, items in enumerate(per_bar)}
        self._default = tuple(default) if default is not None else ()

    def candidates_for(self, bar_index: int) -> Sequence[ChordCandidate]:
        return self._per_bar.get(bar_index, self._default)
