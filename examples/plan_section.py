#!/usr/bin/env python3
"""
Example: Planning a Section.

This demonstrates how a template and a style profile combine to choose one
chord per bar. The template fixes the form; the style only prices choices,
so the same template planned under two styles can come out differently.

Usage:
    python examples/plan_section.py [template_id] [key]
"""

import sys

from chuk_mcp_harmony.core import Key
from chuk_mcp_harmony.planner import (
    DiatonicCandidateProvider,
    narrate,
    plan_section,
    render_text_report,
)
from chuk_mcp_harmony.styles import get_profile, list_profiles
from chuk_mcp_harmony.templates import TemplateRegistry, compile_template


def main() -> None:
    """Plan a built-in template under every preset style."""
    template_id = sys.argv[1] if len(sys.argv) > 1 else "blues_12bar_v1"
    key = Key.parse(sys.argv[2] if len(sys.argv) > 2 else "F_major")

    print("CHUK Harmony Planner Demo")
    print("=" * 40)
    print()

    registry = TemplateRegistry.with_builtins()
    print("Available templates:")
    for summary in registry.summaries():
        print(f"  {summary.id} (v{summary.version}): {summary.bars} bars, {summary.phrases} phrases")
    print()

    template = registry.require(template_id)
    grid = compile_template(template)
    provider = DiatonicCandidateProvider(key)

    # Same template, every style
    print(f"Planning {template.id} in {key}:")
    for meta in list_profiles():
        result = plan_section(grid, get_profile(meta.name), provider)
        print(f"  {meta.name:<14} cost {result.total_cost:7.3f}  {' | '.join(result.symbols)}")
    print()

    # Full explanation for the default style
    result = plan_section(grid, get_profile("balanced"), provider, explain="detailed")
    print(render_text_report(result, grid, key_label=str(key), style_label="balanced"))
    print()

    print("Narration:")
    for line in narrate(result):
        print(f"  {line}")


if __name__ == "__main__":
    main()
