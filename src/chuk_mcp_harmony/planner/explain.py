"""
Explainability - why the planner chose what it chose.

The search always prices every candidate the same way; explaining only
decides whether those prices are kept. Turning explanation off therefore
never changes the chords or the costs of a plan.

Trace types are recorded during search. Summaries, narration, diagnostics
and the text report are derived from a finished plan.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING, Any

from chuk_mcp_harmony.constants import ErrorMessages, TENSION_DIAGNOSTIC_THRESHOLD
from chuk_mcp_harmony.core.harmony import CadenceLabel, HarmonicFunction, expected_function
from chuk_mcp_harmony.templates.compiler import BarRuleGrid

if TYPE_CHECKING:
    from chuk_mcp_harmony.planner.candidates import ChordCandidate
    from chuk_mcp_harmony.planner.search import PlanResult


class ExplainMode(str, Enum):
    """How much of the search to keep and report."""

    NONE = "none"
    BRIEF = "brief"
    DETAILED = "detailed"
    DEBUG = "debug"

    @classmethod
    def parse(cls, value: str | ExplainMode) -> ExplainMode:
        """
        Parse a mode name case-insensitively.

        Raises:
            ValueError: If the name is not a known mode
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(ErrorMessages.INVALID_EXPLAIN_MODE.format(mode=value)) from None

    @property
    def enabled(self) -> bool:
        return self is not ExplainMode.NONE


# =============================================================================
# Trace types
# =============================================================================


@dataclass(frozen=True)
class CandidateCost:
    """Cost breakdown for one candidate considered at one bar."""

    candidate_index: int
    symbol: str
    roman: str
    function: HarmonicFunction
    estimated_tension: float
    base_cost: float
    transition: float
    tension: float
    cadence: float  # negative when a cadence bonus applied
    softening: float  # multiplier applied to a cadence mismatch, 1.0 otherwise
    incremental: float
    cumulative: float
    chosen: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "candidate_index": self.candidate_index,
            "symbol": self.symbol,
            "roman": self.roman,
            "function": self.function.value,
            "estimated_tension": self.estimated_tension,
            "base_cost": self.base_cost,
            "transition": self.transition,
            "tension": self.tension,
            "cadence": self.cadence,
            "softening": self.softening,
            "incremental": self.incremental,
            "cumulative": self.cumulative,
            "chosen": self.chosen,
        }


@dataclass(frozen=True)
class BarTrace:
    """Everything the planner weighed at one bar of the winning path."""

    bar_index: int
    phrase_name: str
    modulation_hint: str | None
    tension_target: float
    reharm_risk: float
    cadence_expectation: CadenceLabel
    candidates: tuple[CandidateCost, ...]
    beam_size: int  # states kept after pruning
    expanded: int  # states generated before merging and pruning

    @property
    def chosen(self) -> CandidateCost:
        return next(cost for cost in self.candidates if cost.chosen)

    def to_dict(self) -> dict[str, Any]:
        return {
            "bar_index": self.bar_index,
            "phrase_name": self.phrase_name,
            "modulation_hint": self.modulation_hint,
            "tension_target": self.tension_target,
            "reharm_risk": self.reharm_risk,
            "cadence_expectation": self.cadence_expectation.value,
            "candidates": [cost.to_dict() for cost in self.candidates],
            "beam_size": self.beam_size,
            "expanded": self.expanded,
        }


class ExplainRecorder:
    """
    Collects per-bar search statistics and assembles the winning trace.

    The planner hands it the evaluations of the winning path at the end;
    nothing here feeds back into the search.
    """

    def __init__(self, mode: ExplainMode = ExplainMode.NONE):
        self.mode = mode
        self._bar_stats: list[tuple[int, int]] = []

    @property
    def enabled(self) -> bool:
        return self.mode.enabled

    def record_bar(self, beam_size: int, expanded: int) -> None:
        """Record beam statistics for the bar just searched."""
        if self.enabled:
            self._bar_stats.append((beam_size, expanded))

    def build_trace(
        self,
        grid: BarRuleGrid,
        path: Sequence[tuple[int, Sequence[CandidateCost]]],
    ) -> tuple[BarTrace, ...] | None:
        """
        Build the trace of the winning path.

        Args:
            grid: The grid that was planned
            path: (chosen candidate index, evaluations) per bar, in bar order

        Returns:
            One BarTrace per bar, or None when not explaining
        """
        if not self.enabled:
            return None

        traces: list[BarTrace] = []
        for rule, (chosen_index, evaluations), (beam_size, expanded) in zip(
            grid, path, self._bar_stats
        ):
            traces.append(
                BarTrace(
                    bar_index=rule.bar_index,
                    phrase_name=rule.phrase_name,
                    modulation_hint=rule.modulation_hint,
                    tension_target=rule.tension_target,
                    reharm_risk=rule.reharm_risk,
                    cadence_expectation=rule.cadence_expectation,
                    candidates=tuple(
                        replace(cost, chosen=True)
                        if cost.candidate_index == chosen_index
                        else cost
                        for cost in evaluations
                    ),
                    beam_size=beam_size,
                    expanded=expanded,
                )
            )
        return tuple(traces)


# =============================================================================
# Summaries
# =============================================================================


@dataclass(frozen=True)
class BarSummary:
    """One planned bar, as reported to a reader."""

    bar_index: int
    phrase: str
    function: str
    chord: str
    roman: str
    tension_target: float
    tension_actual: float
    reharm_risk: float
    cadence: str
    notes: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "bar": self.bar_index + 1,
            "phrase": self.phrase,
            "function": self.function,
            "chord": self.chord,
            "roman": self.roman,
            "tension_target": self.tension_target,
            "tension_actual": self.tension_actual,
            "reharm_risk": self.reharm_risk,
            "cadence": self.cadence,
            "notes": list(self.notes),
        }


@dataclass(frozen=True)
class PhraseSummary:
    """A phrase span with its cadences and notable events."""

    phrase: str
    start_bar: int
    end_bar: int  # inclusive
    cadences: tuple[str, ...] = ()
    highlights: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "phrase": self.phrase,
            "start_bar": self.start_bar + 1,
            "end_bar": self.end_bar + 1,
            "cadences": list(self.cadences),
            "highlights": list(self.highlights),
        }


@dataclass(frozen=True)
class CadenceSummary:
    """An expected cadence and whether the plan delivered it."""

    bar_index: int
    phrase: str
    cadence: str
    expected_function: str | None
    chord: str
    satisfied: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "bar": self.bar_index + 1,
            "phrase": self.phrase,
            "cadence": self.cadence,
            "expected_function": self.expected_function,
            "chord": self.chord,
            "satisfied": self.satisfied,
        }


@dataclass(frozen=True)
class ExplainSummaries:
    """Bar, phrase and cadence views of a plan."""

    bars: tuple[BarSummary, ...] = field(default_factory=tuple)
    phrases: tuple[PhraseSummary, ...] = field(default_factory=tuple)
    cadences: tuple[CadenceSummary, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "bars": [bar.to_dict() for bar in self.bars],
            "phrases": [phrase.to_dict() for phrase in self.phrases],
            "cadences": [cadence.to_dict() for cadence in self.cadences],
        }


def _cadence_met(label: CadenceLabel, function: HarmonicFunction) -> bool:
    required = expected_function(label)
    return required is None or required == function


def summarize(result: PlanResult, grid: BarRuleGrid) -> ExplainSummaries:
    """
    Build bar, phrase and cadence summaries for a plan.

    Args:
        result: A finished plan
        grid: The grid it was planned against

    Returns:
        ExplainSummaries (empty when the plan was made without explanation)
    """
    if not result.explain_mode.enabled:
        return ExplainSummaries()

    bars: list[BarSummary] = []
    cadences: list[CadenceSummary] = []
    phrase_rules: dict[int, list[int]] = {}
    highlights: dict[int, list[str]] = {}

    for rule, chord in zip(grid, result.chords):
        notes: list[str] = []
        label = rule.cadence_expectation

        if label is not CadenceLabel.NONE:
            met = _cadence_met(label, chord.function)
            notes.append(f"{label.value} cadence {'met' if met else 'missed'}")
            required = expected_function(label)
            cadences.append(
                CadenceSummary(
                    bar_index=rule.bar_index,
                    phrase=rule.phrase_name,
                    cadence=label.value,
                    expected_function=required.value if required else None,
                    chord=chord.symbol,
                    satisfied=met,
                )
            )
            if not met:
                highlights.setdefault(rule.phrase_index, []).append(
                    f"bar {rule.bar_index + 1}: {label.value} cadence missed"
                )

        if rule.reharm_risk > 0.0:
            notes.append(f"reharm risk {rule.reharm_risk:.2f}")

        miss = abs(chord.tension - rule.tension_target)
        if miss > TENSION_DIAGNOSTIC_THRESHOLD:
            notes.append(f"tension miss {miss:.2f}")
            highlights.setdefault(rule.phrase_index, []).append(
                f"bar {rule.bar_index + 1}: tension miss {miss:.2f}"
            )

        if rule.modulation_hint and rule.bar_index == _first_bar(grid, rule.phrase_index):
            notes.append(f"modulation hint {rule.modulation_hint}")

        phrase_rules.setdefault(rule.phrase_index, []).append(rule.bar_index)
        bars.append(
            BarSummary(
                bar_index=rule.bar_index,
                phrase=rule.phrase_name,
                function=chord.function.value,
                chord=chord.symbol,
                roman=chord.roman,
                tension_target=rule.tension_target,
                tension_actual=chord.tension,
                reharm_risk=rule.reharm_risk,
                cadence=label.value,
                notes=tuple(notes),
            )
        )

    phrases = [
        PhraseSummary(
            phrase=grid[bar_indexes[0]].phrase_name,
            start_bar=bar_indexes[0],
            end_bar=bar_indexes[-1],
            cadences=tuple(
                grid[index].cadence_expectation.value
                for index in bar_indexes
                if grid[index].cadence_expectation is not CadenceLabel.NONE
            ),
            highlights=tuple(highlights.get(phrase_index, ())),
        )
        for phrase_index, bar_indexes in phrase_rules.items()
    ]

    return ExplainSummaries(bars=tuple(bars), phrases=tuple(phrases), cadences=tuple(cadences))


def _first_bar(grid: BarRuleGrid, phrase_index: int) -> int:
    return next(rule.bar_index for rule in grid if rule.phrase_index == phrase_index)


# =============================================================================
# Diagnostics and text
# =============================================================================


def build_diagnostics(chords: Sequence[ChordCandidate], grid: BarRuleGrid) -> tuple[str, ...]:
    """
    Report missed cadences and large tension misses.

    Args:
        chords: One chosen chord per bar
        grid: The grid that was planned

    Returns:
        Human-readable diagnostics, in bar order
    """
    diagnostics: list[str] = []

    for rule, chord in zip(grid, chords):
        label = rule.cadence_expectation
        required = expected_function(label)
        if required is not None and chord.function != required:
            diagnostics.append(
                f"bar {rule.bar_index + 1} ({rule.phrase_name}): {label.value} cadence expects "
                f"{required.value}, got {chord.symbol} ({chord.function.value})"
            )

        miss = abs(chord.tension - rule.tension_target)
        if miss > TENSION_DIAGNOSTIC_THRESHOLD:
            diagnostics.append(
                f"bar {rule.bar_index + 1} ({rule.phrase_name}): tension {chord.tension:.2f} "
                f"misses target {rule.tension_target:.2f}"
            )

    return tuple(diagnostics)


def narrate(result: PlanResult) -> list[str]:
    """
    Bar-by-bar sentences describing a plan.

    Uses the trace when there is one, so each line can say what the chord
    cost and why.
    """
    lines: list[str] = []

    if result.trace is None:
        for index, chord in enumerate(result.chords):
            lines.append(f"Bar {index + 1}: {chord.symbol} ({chord.roman}, {chord.function.value})")
        return lines

    for bar in result.trace:
        chosen = bar.chosen
        line = (
            f"Bar {bar.bar_index + 1} [{bar.phrase_name}]: {chosen.symbol} ({chosen.roman}) "
            f"for {chosen.incremental:+.2f}"
        )
        reasons = []
        if chosen.transition:
            reasons.append(f"transition {chosen.transition:.2f}")
        if chosen.tension:
            reasons.append(f"tension {chosen.tension:.2f} vs target {bar.tension_target:.2f}")
        if chosen.cadence < 0:
            reasons.append(f"{bar.cadence_expectation.value} cadence bonus {-chosen.cadence:.2f}")
        elif chosen.cadence > 0:
            reasons.append(
                f"{bar.cadence_expectation.value} cadence missed {chosen.cadence:.2f} "
                f"(softened x{chosen.softening:.2f})"
            )
        if reasons:
            line += " - " + ", ".join(reasons)
        lines.append(line)

    return lines


def render_text_report(
    result: PlanResult,
    grid: BarRuleGrid,
    key_label: str | None = None,
    style_label: str | None = None,
) -> str:
    """
    Render a plan as a text report honoring its explain mode.

    brief shows the chosen chord per bar; detailed adds every candidate
    considered; debug adds beam statistics.
    """
    mode = result.explain_mode
    lines = [f"Template: {result.template_id} (bars: {len(result.chords)})"]
    if key_label:
        lines.append(f"Key: {key_label}")
    lines.append(
        f"Style: {style_label or '-'} | Explain: {mode.value} | "
        f"Beam width: {result.beam_width} (effective {result.effective_width})"
    )
    lines.append(f"Total cost: {result.total_cost:.4f}")
    lines.append(f"Progression: {' | '.join(chord.symbol for chord in result.chords)}")

    if result.diagnostics:
        lines.append("Diagnostics:")
        lines.extend(f"  - {diagnostic}" for diagnostic in result.diagnostics)
    else:
        lines.append("Diagnostics: none")

    if not mode.enabled or result.trace is None:
        return "\n".join(lines)

    summaries = summarize(result, grid)
    lines.append("")
    lines.append("Bars:")
    for bar, trace in zip(summaries.bars, result.trace):
        lines.append(
            f"  Bar {bar.bar_index + 1:>2} [{bar.phrase:>8}] {bar.function:<12} -> "
            f"{bar.chord:<8} tension {bar.tension_target:.2f}->{bar.tension_actual:.2f} "
            f"cadence {bar.cadence}"
        )
        if mode in (ExplainMode.DETAILED, ExplainMode.DEBUG):
            for cost in trace.candidates:
                marker = "*" if cost.chosen else " "
                lines.append(
                    f"      {marker} {cost.symbol:<8} {cost.roman:<6} "
                    f"trans {cost.transition:.2f} tens {cost.tension:.2f} "
                    f"cad {cost.cadence:+.2f} = {cost.incremental:+.2f} "
                    f"(total {cost.cumulative:.2f})"
                )
        if mode is ExplainMode.DEBUG:
            lines.append(f"      beam {trace.beam_size} kept of {trace.expanded} expanded")

    if summaries.cadences:
        lines.append("")
        lines.append("Cadences:")
        for cadence in summaries.cadences:
            status = "met" if cadence.satisfied else "missed"
            lines.append(
                f"  Bar {cadence.bar_index + 1:>2} [{cadence.phrase}] {cadence.cadence} "
                f"(expected {cadence.expected_function}) {cadence.chord}: {status}"
            )

    return "\n".join(lines)
