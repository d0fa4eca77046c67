"""
Template Compiler - compiles a validated template into a bar rule grid.

The grid is the planner's view of a template: one rule per bar saying which
phrase the bar belongs to, whether a cadence is expected there, what
tension to aim for, and how much reharmonization risk applies.

Compilation is a pure function of the template. Compiling the same template
twice yields equal grids. Compiling an unvalidated template is a programming
error; run the validator first.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from chuk_mcp_harmony.core.harmony import CadenceLabel
from chuk_mcp_harmony.models.template import ReharmZone, Template


@dataclass(frozen=True)
class BarRule:
    """The compiled constraints for one bar."""

    bar_index: int
    phrase_name: str
    phrase_index: int
    is_phrase_end: bool
    cadence_expectation: CadenceLabel  # NONE unless is_phrase_end
    tension_target: float
    reharm_risk: float  # max over covering zones, never a sum
    modulation_hint: str | None = None


@dataclass(frozen=True)
class BarRuleGrid:
    """
    One BarRule per bar of a template.

    Supports len(), indexing and iteration in bar order.
    """

    template_id: str
    template_version: int
    rules: tuple[BarRule, ...]

    def __len__(self) -> int:
        return len(self.rules)

    def __getitem__(self, bar_index: int) -> BarRule:
        return self.rules[bar_index]

    def __iter__(self) -> Iterator[BarRule]:
        return iter(self.rules)

    @property
    def bars(self) -> int:
        return len(self.rules)

    def phrase_ends(self) -> list[BarRule]:
        """Rules for the final bar of each phrase, in bar order."""
        return [rule for rule in self.rules if rule.is_phrase_end]


def reharm_risk_at(zones: list[ReharmZone], bar_index: int) -> float:
    """
    Reharm risk at a bar: the maximum risk of all zones covering it.

    Risk is a ceiling on acceptable substitution, so overlapping zones do not
    accumulate. Bars outside every zone have risk 0.
    """
    return max((zone.risk for zone in zones if zone.covers(bar_index)), default=0.0)


class TemplateCompiler:
    """
    Compiles templates into bar rule grids.

    Holds no state between calls.
    """

    def compile(self, template: Template) -> BarRuleGrid:
        """
        Compile a validated template.

        Args:
            template: A template that passed validation

        Returns:
            BarRuleGrid with exactly ``template.bars`` rules
        """
        rules: list[BarRule] = []

        for phrase_index, phrase in enumerate(template.phrases):
            cadence = phrase.cadence_label
            last_bar = phrase.start_bar + phrase.length - 1

            for bar_index in range(phrase.start_bar, phrase.start_bar + phrase.length):
                is_end = bar_index == last_bar
                rules.append(
                    BarRule(
                        bar_index=bar_index,
                        phrase_name=phrase.name,
                        phrase_index=phrase_index,
                        is_phrase_end=is_end,
                        cadence_expectation=cadence if is_end else CadenceLabel.NONE,
                        tension_target=template.tension_curve[bar_index],
                        reharm_risk=reharm_risk_at(template.reharm_zones, bar_index),
                        modulation_hint=phrase.modulation_hint,
                    )
                )

        return BarRuleGrid(
            template_id=template.id,
            template_version=template.version,
            rules=tuple(rules),
        )


def compile_template(template: Template) -> BarRuleGrid:
    """
    Convenience function to compile a template.

    Args:
        template: A template that passed validation

    Returns:
        The compiled BarRuleGrid
    """
    return TemplateCompiler().compile(template)
