"""
Beam Search Planner - chooses one chord per bar against a bar rule grid.

The search walks the grid left to right keeping at most ``beam_width``
partial progressions. At each bar every surviving progression is extended
by every candidate and priced by the style profile:

    incremental = transition(last function -> candidate function)
                + tension_penalty(|candidate tension - target|)
                + cadence term (phrase-final bars with an expected cadence only)

The cadence term is minus the cadence bonus when the candidate has the
function the cadence requires, otherwise the mismatch penalty softened by
the bar's reharm risk. The first bar is priced by candidate base cost alone.

Two progressions ending on the same harmonic function have identical
futures, so only the cheaper survives. The beam then never needs more
slots than there are functions, and any width that large is exact.

A single pruned pass is not monotone in its width: a wider beam can keep
a state that later crowds out the one a narrower beam would have ridden
to a cheaper finish. Below the exact width the planner therefore runs one
pass per width from 1 up to the requested one and returns the cheapest,
preferring the narrowest pass on equal cost. A pass that never had to
prune is already exact and ends the sweep. ``PlanResult.effective_width``
reports which pass won.

Ranking, and therefore tie-breaking, uses the key
(cumulative cost, parent rank in the previous beam, candidate index).
"""

from __future__ import annotations

import heapq
import logging
import threading
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from chuk_mcp_harmony.constants import ErrorMessages
from chuk_mcp_harmony.core.harmony import HarmonicFunction, expected_function
from chuk_mcp_harmony.models.style import StyleProfile
from chuk_mcp_harmony.models.template import Template
from chuk_mcp_harmony.planner.candidates import CandidateProvider, ChordCandidate
from chuk_mcp_harmony.planner.explain import (
    BarTrace,
    CandidateCost,
    ExplainMode,
    ExplainRecorder,
    build_diagnostics,
)
from chuk_mcp_harmony.templates.compiler import BarRule, BarRuleGrid, compile_template
from chuk_mcp_harmony.templates.validator import validate

logger = logging.getLogger(__name__)


class PlanError(Exception):
    """Base class for planning failures. Planning never returns a partial result."""

    def __init__(self, message: str, bar_index: int):
        self.bar_index = bar_index
        super().__init__(message)


class NoCandidatesError(PlanError):
    """The candidate provider offered nothing for a bar."""

    def __init__(self, bar_index: int):
        super().__init__(f"No chord candidates for bar {bar_index}", bar_index)


class PlanCancelledError(PlanError):
    """The caller cancelled planning before it finished."""

    def __init__(self, bar_index: int):
        super().__init__(f"Planning cancelled at bar {bar_index}", bar_index)


@dataclass(frozen=True, eq=False)
class PlannerState:
    """
    A partial progression ending at ``bar_index``.

    The chosen path is the chain of parent links. ``evaluations`` holds the
    pricing of every candidate considered from the parent, and is only kept
    when explaining.
    """

    bar_index: int
    cost: float
    function: HarmonicFunction
    candidate_index: int
    candidate: ChordCandidate
    parent: PlannerState | None = None
    evaluations: tuple[CandidateCost, ...] | None = None

    def path(self) -> list[PlannerState]:
        """States from bar 0 to this one."""
        states: list[PlannerState] = []
        state: PlannerState | None = self
        while state is not None:
            states.append(state)
            state = state.parent
        states.reverse()
        return states


@dataclass(frozen=True)
class PlanResult:
    """
    A planned section: exactly one chord per bar.

    ``beam_width`` is the width requested; ``effective_width`` is the width
    of the pass that produced the plan, never larger.
    """

    template_id: str
    template_version: int
    chords: tuple[ChordCandidate, ...]
    total_cost: float
    beam_width: int
    effective_width: int
    explain_mode: ExplainMode = ExplainMode.NONE
    trace: tuple[BarTrace, ...] | None = None
    diagnostics: tuple[str, ...] = ()

    @property
    def symbols(self) -> list[str]:
        return [chord.symbol for chord in self.chords]

    @property
    def romans(self) -> list[str]:
        return [chord.roman for chord in self.chords]

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        result: dict[str, Any] = {
            "schema": "plan/v1",
            "template_id": self.template_id,
            "template_version": self.template_version,
            "bars": len(self.chords),
            "chords": [chord.to_dict() for chord in self.chords],
            "progression": self.symbols,
            "total_cost": self.total_cost,
            "beam_width": self.beam_width,
            "effective_width": self.effective_width,
            "explain_mode": self.explain_mode.value,
            "diagnostics": list(self.diagnostics),
        }
        if self.trace is not None:
            result["trace"] = [bar.to_dict() for bar in self.trace]
        return result


def _cost_terms(
    profile: StyleProfile,
    rule: BarRule,
    parent_function: HarmonicFunction,
    candidate: ChordCandidate,
) -> tuple[float, float, float, float]:
    """(transition, tension, cadence, softening) for a candidate after bar 0."""
    transition = profile.transition_cost(parent_function, candidate.function)
    tension = profile.tension_penalty(candidate.tension - rule.tension_target)
    cadence = 0.0
    softening = 1.0

    required = expected_function(rule.cadence_expectation) if rule.is_phrase_end else None
    if required is not None:
        if candidate.function == required:
            cadence = -profile.cadence_bonus(rule.cadence_expectation)
        else:
            softening = profile.soften(rule.reharm_risk)
            cadence = profile.cadence_mismatch_penalty * softening

    return transition, tension, cadence, softening


def price_candidate(
    profile: StyleProfile,
    rule: BarRule,
    parent: PlannerState | None,
    candidate_index: int,
    candidate: ChordCandidate,
) -> CandidateCost:
    """
    Price one candidate extending one partial progression.

    Args:
        profile: Cost weights
        rule: Rule for the bar being filled
        parent: Progression being extended (None at bar 0)
        candidate_index: Position of the candidate in the provider's list
        candidate: The candidate

    Returns:
        The full cost breakdown
    """
    if parent is None:
        return CandidateCost(
            candidate_index=candidate_index,
            symbol=candidate.symbol,
            roman=candidate.roman,
            function=candidate.function,
            estimated_tension=candidate.tension,
            base_cost=candidate.base_cost,
            transition=0.0,
            tension=0.0,
            cadence=0.0,
            softening=1.0,
            incremental=candidate.base_cost,
            cumulative=candidate.base_cost,
        )

    transition, tension, cadence, softening = _cost_terms(profile, rule, parent.function, candidate)
    incremental = transition + tension + cadence
    return CandidateCost(
        candidate_index=candidate_index,
        symbol=candidate.symbol,
        roman=candidate.roman,
        function=candidate.function,
        estimated_tension=candidate.tension,
        base_cost=candidate.base_cost,
        transition=transition,
        tension=tension,
        cadence=cadence,
        softening=softening,
        incremental=incremental,
        cumulative=parent.cost + incremental,
    )


def _cumulative(
    profile: StyleProfile,
    rule: BarRule,
    parent: PlannerState | None,
    candidate: ChordCandidate,
) -> float:
    """Same total as ``price_candidate(...).cumulative`` without the breakdown."""
    if parent is None:
        return candidate.base_cost
    transition, tension, cadence, _ = _cost_terms(profile, rule, parent.function, candidate)
    return parent.cost + (transition + tension + cadence)


RankKey = tuple[float, int, int]

# Best extension per last function: (rank key, parent, candidate index, candidate)
Extension = tuple[RankKey, PlannerState | None, int, ChordCandidate]

# Widths at or above this keep every merged state, so one pass is exact
EXACT_BEAM_WIDTH = len(HarmonicFunction)


@dataclass
class _Pass:
    """Outcome of one beam pass at a fixed width."""

    width: int
    winner: PlannerState
    recorder: ExplainRecorder
    expanded: int
    pruned: bool


class BeamSearchPlanner:
    """
    Plans sections for one style profile and candidate provider.

    Holds no mutable state; one planner can serve concurrent calls.
    """

    def __init__(self, profile: StyleProfile, provider: CandidateProvider):
        """
        Initialize the planner.

        Args:
            profile: Cost weights
            provider: Source of per-bar candidates
        """
        self.profile = profile
        self.provider = provider

    def plan(
        self,
        grid: BarRuleGrid,
        beam_width: int | None = None,
        *,
        explain: ExplainMode | str = ExplainMode.NONE,
        cancel_event: threading.Event | None = None,
    ) -> PlanResult:
        """
        Plan one chord per bar of a compiled grid.

        Widening the beam never raises the returned cost: below the exact
        width the cheapest of the passes at widths 1..beam_width is kept,
        the narrowest winning ties.

        Args:
            grid: Compiled bar rules
            beam_width: Partial progressions kept per bar (profile default if None)
            explain: How much of the search to record
            cancel_event: Checked at every bar boundary of every pass

        Returns:
            The lowest-cost complete plan

        Raises:
            ValueError: If beam_width < 1 or the grid is empty
            NoCandidatesError: If the provider offers nothing for some bar
            PlanCancelledError: If cancel_event is set before planning finishes
        """
        width = self.profile.beam_width if beam_width is None else beam_width
        if width < 1:
            raise ValueError(ErrorMessages.INVALID_BEAM_WIDTH.format(beam_width=width))
        if len(grid) == 0:
            raise ValueError(f"Grid for template '{grid.template_id}' has no bars")

        mode = ExplainMode.parse(explain)
        widths = [width] if width >= EXACT_BEAM_WIDTH else range(1, width + 1)
        bar_candidates: dict[int, Sequence[ChordCandidate]] = {}

        best: _Pass | None = None
        expanded_total = 0
        passes = 0
        for pass_width in widths:
            outcome = self._search(grid, pass_width, mode, bar_candidates, cancel_event)
            expanded_total += outcome.expanded
            passes += 1
            if best is None or outcome.winner.cost < best.winner.cost:
                best = outcome
            if not outcome.pruned:
                break

        assert best is not None
        path = best.winner.path()
        chords = tuple(state.candidate for state in path)

        trace = best.recorder.build_trace(
            grid,
            [(state.candidate_index, state.evaluations or ()) for state in path],
        )

        logger.debug(
            "Planned %d bars for '%s' (width=%d, effective=%d, passes=%d, expanded=%d): cost=%.4f",
            len(grid),
            grid.template_id,
            width,
            best.width,
            passes,
            expanded_total,
            best.winner.cost,
        )

        return PlanResult(
            template_id=grid.template_id,
            template_version=grid.template_version,
            chords=chords,
            total_cost=best.winner.cost,
            beam_width=width,
            effective_width=best.width,
            explain_mode=mode,
            trace=trace,
            diagnostics=build_diagnostics(chords, grid),
        )

    def _search(
        self,
        grid: BarRuleGrid,
        width: int,
        mode: ExplainMode,
        bar_candidates: dict[int, Sequence[ChordCandidate]],
        cancel_event: threading.Event | None,
    ) -> _Pass:
        """One left-to-right pass at a fixed width. Candidates are fetched once per bar."""
        recorder = ExplainRecorder(mode)
        beam: list[PlannerState] = []
        expanded_total = 0
        pruned = False

        for rule in grid:
            if cancel_event is not None and cancel_event.is_set():
                raise PlanCancelledError(rule.bar_index)

            candidates = bar_candidates.get(rule.bar_index)
            if candidates is None:
                candidates = self.provider.candidates_for(rule.bar_index)
                bar_candidates[rule.bar_index] = candidates
            if not candidates:
                raise NoCandidatesError(rule.bar_index)

            merged, evaluations = self._expand(rule, beam, candidates, recorder.enabled)
            expanded = max(len(beam), 1) * len(candidates)
            pruned = pruned or len(merged) > width
            beam = self._prune(merged, width, rule.bar_index, evaluations)

            expanded_total += expanded
            recorder.record_bar(beam_size=len(beam), expanded=expanded)

        return _Pass(
            width=width,
            winner=beam[0],
            recorder=recorder,
            expanded=expanded_total,
            pruned=pruned,
        )

    def _expand(
        self,
        rule: BarRule,
        beam: list[PlannerState],
        candidates: Sequence[ChordCandidate],
        keep_evaluations: bool,
    ) -> tuple[dict[HarmonicFunction, Extension], list[tuple[CandidateCost, ...]] | None]:
        """
        Extend every state in the beam (or the empty root) by every candidate.

        Extensions are merged by last function as they are priced. Full cost
        breakdowns are only built when explaining; otherwise each extension
        is priced as a single float.
        """
        parents: Sequence[PlannerState | None] = beam or [None]
        merged: dict[HarmonicFunction, Extension] = {}
        evaluations: list[tuple[CandidateCost, ...]] | None = [] if keep_evaluations else None

        for parent_rank, parent in enumerate(parents):
            if evaluations is not None:
                priced = tuple(
                    price_candidate(self.profile, rule, parent, index, candidate)
                    for index, candidate in enumerate(candidates)
                )
                evaluations.append(priced)
                costs = [evaluation.cumulative for evaluation in priced]
            else:
                costs = [
                    _cumulative(self.profile, rule, parent, candidate) for candidate in candidates
                ]

            for index, (cost, candidate) in enumerate(zip(costs, candidates)):
                key = (cost, parent_rank, index)
                current = merged.get(candidate.function)
                if current is None or key < current[0]:
                    merged[candidate.function] = (key, parent, index, candidate)

        return merged, evaluations

    @staticmethod
    def _prune(
        merged: dict[HarmonicFunction, Extension],
        width: int,
        bar_index: int,
        evaluations: list[tuple[CandidateCost, ...]] | None,
    ) -> list[PlannerState]:
        """Keep the best ``width`` merged extensions in rank order as states."""
        survivors = heapq.nsmallest(width, merged.values(), key=lambda item: item[0])
        return [
            PlannerState(
                bar_index=bar_index,
                cost=key[0],
                function=candidate.function,
                candidate_index=index,
                candidate=candidate,
                parent=parent,
                evaluations=evaluations[key[1]] if evaluations is not None else None,
            )
            for key, parent, index, candidate in survivors
        ]


def plan_section(
    grid: BarRuleGrid,
    profile: StyleProfile,
    provider: CandidateProvider,
    beam_width: int | None = None,
    *,
    explain: ExplainMode | str = ExplainMode.NONE,
    cancel_event: threading.Event | None = None,
) -> PlanResult:
    """
    Convenience function to plan a compiled grid.

    See BeamSearchPlanner.plan.
    """
    return BeamSearchPlanner(profile, provider).plan(
        grid, beam_width, explain=explain, cancel_event=cancel_event
    )


def plan_template(
    template: Template,
    profile: StyleProfile,
    provider: CandidateProvider,
    beam_width: int | None = None,
    *,
    explain: ExplainMode | str = ExplainMode.NONE,
    cancel_event: threading.Event | None = None,
) -> PlanResult:
    """
    Validate, compile and plan a template in one step.

    Raises:
        TemplateValidationError: If the template is invalid
        PlanError: If planning fails
    """
    validate(template)
    grid = compile_template(template)
    return plan_section(
        grid, profile, provider, beam_width, explain=explain, cancel_event=cancel_event
    )

