"""
Template Validator - validates template structure before compilation.

Validates, in order:
- Bar count is within range
- Tension curve has one in-range entry per bar
- Phrases exactly and contiguously cover the section
- Cadence labels are recognized
- Reharm zones lie inside the section

The validator is a pure check. It never repairs a template; the only
leniency (reharm risk clamping) happens when the model is built.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from chuk_mcp_harmony.constants import MAX_TEMPLATE_BARS, MIN_TEMPLATE_BARS
from chuk_mcp_harmony.core.harmony import CadenceLabel
from chuk_mcp_harmony.models.template import Template


class TemplateErrorKind(str, Enum):
    """Template validation failure kinds."""

    BARS_OUT_OF_RANGE = "BARS_OUT_OF_RANGE"
    TENSION_CURVE_LENGTH_MISMATCH = "TENSION_CURVE_LENGTH_MISMATCH"
    TENSION_OUT_OF_RANGE = "TENSION_OUT_OF_RANGE"
    NON_CONTIGUOUS_PHRASES = "NON_CONTIGUOUS_PHRASES"
    ZERO_LENGTH_PHRASE = "ZERO_LENGTH_PHRASE"
    UNKNOWN_CADENCE_LABEL = "UNKNOWN_CADENCE_LABEL"
    INVALID_REHARM_RANGE = "INVALID_REHARM_RANGE"


@dataclass(frozen=True)
class ValidationIssue:
    """A single validation issue."""

    kind: TemplateErrorKind
    message: str
    location: str | None = None

    @property
    def code(self) -> str:
        return self.kind.value

    def __str__(self) -> str:
        location = f" at {self.location}" if self.location else ""
        return f"[ERROR] {self.code}: {self.message}{location}"


class TemplateValidationError(ValueError):
    """
    Raised when a template fails validation.

    ``kind`` is the first failure in check order; ``issues`` holds all of them.
    """

    def __init__(self, issues: list[ValidationIssue]):
        if not issues:
            raise ValueError("TemplateValidationError requires at least one issue")
        self.issues = list(issues)
        self.kind = self.issues[0].kind
        super().__init__(str(self.issues[0]))


class ValidationResult:
    """Result of validating a template."""

    def __init__(self) -> None:
        self.issues: list[ValidationIssue] = []

    def add(self, kind: TemplateErrorKind, message: str, location: str | None = None) -> None:
        """Add an issue."""
        self.issues.append(ValidationIssue(kind, message, location))

    @property
    def is_valid(self) -> bool:
        """Return True if no issues were found."""
        return not self.issues

    @property
    def first(self) -> ValidationIssue | None:
        """The issue that wins in check order."""
        return self.issues[0] if self.issues else None

    @property
    def kinds(self) -> list[TemplateErrorKind]:
        """Kinds of all issues, in check order."""
        return [issue.kind for issue in self.issues]

    def raise_for_issues(self) -> None:
        """
        Raise if any issue was found.

        Raises:
            TemplateValidationError: With every issue attached
        """
        if self.issues:
            raise TemplateValidationError(self.issues)

    def __bool__(self) -> bool:
        """Boolean conversion returns is_valid."""
        return self.is_valid

    def __str__(self) -> str:
        if not self.issues:
            return "Validation passed: no issues found"
        return "\n".join(str(issue) for issue in self.issues)


class TemplateValidator:
    """Validates template structure and ranges."""

    def validate(self, template: Template) -> ValidationResult:
        """
        Validate a template, collecting every issue.

        Args:
            template: The template to validate

        Returns:
            ValidationResult with issues in check order
        """
        result = ValidationResult()

        self._validate_bars(template, result)
        self._validate_tension_curve(template, result)
        self._validate_phrase_coverage(template, result)
        self._validate_cadences(template, result)
        self._validate_reharm_zones(template, result)

        return result

    def _validate_bars(self, template: Template, result: ValidationResult) -> None:
        """Check the bar count is within range."""
        if not MIN_TEMPLATE_BARS <= template.bars <= MAX_TEMPLATE_BARS:
            result.add(
                TemplateErrorKind.BARS_OUT_OF_RANGE,
                f"Template has {template.bars} bars; expected "
                f"{MIN_TEMPLATE_BARS}-{MAX_TEMPLATE_BARS}",
                "bars",
            )

    def _validate_tension_curve(self, template: Template, result: ValidationResult) -> None:
        """Check the tension curve length and value ranges."""
        curve = template.tension_curve
        if len(curve) != template.bars:
            result.add(
                TemplateErrorKind.TENSION_CURVE_LENGTH_MISMATCH,
                f"Tension curve has {len(curve)} entries for {template.bars} bars",
                "tension_curve",
            )

        for index, value in enumerate(curve):
            # Written so NaN fails too
            if not 0.0 <= value <= 1.0:
                result.add(
                    TemplateErrorKind.TENSION_OUT_OF_RANGE,
                    f"Tension {value} is outside [0, 1]",
                    f"tension_curve/{index}",
                )

    def _validate_phrase_coverage(self, template: Template, result: ValidationResult) -> None:
        """Check phrases cover [0, bars) exactly, in order, without gaps or overlaps."""
        if not template.phrases:
            result.add(
                TemplateErrorKind.NON_CONTIGUOUS_PHRASES,
                "Template has no phrases",
                "phrases",
            )
            return

        cursor = 0
        for index, phrase in enumerate(template.phrases):
            location = f"phrases/{index}"

            if phrase.length <= 0:
                result.add(
                    TemplateErrorKind.ZERO_LENGTH_PHRASE,
                    f"Phrase '{phrase.name}' has length {phrase.length}",
                    location,
                )

            if phrase.start_bar != cursor:
                relation = "gap before" if phrase.start_bar > cursor else "overlap at"
                result.add(
                    TemplateErrorKind.NON_CONTIGUOUS_PHRASES,
                    f"Phrase '{phrase.name}' starts at bar {phrase.start_bar}; expected "
                    f"{cursor} ({relation} bar {cursor})",
                    location,
                )

            cursor = phrase.start_bar + phrase.length

        if cursor != template.bars:
            result.add(
                TemplateErrorKind.NON_CONTIGUOUS_PHRASES,
                f"Phrases end at bar {cursor}; expected {template.bars}",
                "phrases",
            )

    def _validate_cadences(self, template: Template, result: ValidationResult) -> None:
        """Check every cadence label is recognized."""
        for index, phrase in enumerate(template.phrases):
            try:
                CadenceLabel.parse(phrase.cadence)
            except ValueError:
                result.add(
                    TemplateErrorKind.UNKNOWN_CADENCE_LABEL,
                    f"Phrase '{phrase.name}' has unknown cadence '{phrase.cadence}'",
                    f"phrases/{index}/cadence",
                )

    def _validate_reharm_zones(self, template: Template, result: ValidationResult) -> None:
        """Check reharm zones lie inside the section and are non-empty."""
        for index, zone in enumerate(template.reharm_zones):
            if not 0 <= zone.start_bar < zone.end_bar <= template.bars:
                result.add(
                    TemplateErrorKind.INVALID_REHARM_RANGE,
                    f"Reharm zone [{zone.start_bar}, {zone.end_bar}) is not inside "
                    f"[0, {template.bars})",
                    f"reharm_zones/{index}",
                )


def validate_template(template: Template) -> ValidationResult:
    """
    Validate a template and report every issue.

    Args:
        template: The template to validate

    Returns:
        ValidationResult with any issues found
    """
    return TemplateValidator().validate(template)


def validate(template: Template) -> None:
    """
    Validate a template, failing on the first issue in check order.

    Args:
        template: The template to validate

    Raises:
        TemplateValidationError: If the template is invalid
    """
    validate_template(template).raise_for_issues()
