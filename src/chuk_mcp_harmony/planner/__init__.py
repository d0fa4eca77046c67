"""
Harmonic planner - fills a compiled template with chords.

    BarRuleGrid + StyleProfile + CandidateProvider
    → BeamSearchPlanner
    → PlanResult (one chord per bar, optional trace)
"""

from chuk_mcp_harmony.planner.candidates import (
    CandidateProvider,
    ChordCandidate,
    DiatonicCandidateProvider,
    StaticCandidateProvider,
)
from chuk_mcp_harmony.planner.explain import (
    BarSummary,
    BarTrace,
    CadenceSummary,
    CandidateCost,
    ExplainMode,
    ExplainRecorder,
    ExplainSummaries,
    PhraseSummary,
    build_diagnostics,
    narrate,
    render_text_report,
    summarize,
)
from chuk_mcp_harmony.planner.search import (
    EXACT_BEAM_WIDTH,
    BeamSearchPlanner,
    NoCandidatesError,
    PlanCancelledError,
    PlanError,
    PlannerState,
    PlanResult,
    plan_section,
    plan_template,
    price_candidate,
)

__all__ = [
    # Candidates
    "CandidateProvider",
    "ChordCandidate",
    "DiatonicCandidateProvider",
    "StaticCandidateProvider",
    # Search
    "EXACT_BEAM_WIDTH",
    "BeamSearchPlanner",
    "NoCandidatesError",
    "PlanCancelledError",
    "PlanError",
    "PlanResult",
    "PlannerState",
    "plan_section",
    "plan_template",
    "price_candidate",
    # Explain
    "BarSummary",
    "BarTrace",
    "CadenceSummary",
    "CandidateCost",
    "ExplainMode",
    "ExplainRecorder",
    "ExplainSummaries",
    "PhraseSummary",
    "build_diagnostics",
    "narrate",
    "render_text_report",
    "summarize",
]
