"""
Template system - the structural skeleton of a section.

Templates say where phrases start and end, which cadences close them, how
tension should rise and fall, and where reharmonization is tolerated. They
never name chords.

    Template YAML → Template (validated)
    → BarRuleGrid (one rule per bar)
    → planner
"""

from chuk_mcp_harmony.templates.compiler import (
    BarRule,
    BarRuleGrid,
    TemplateCompiler,
    compile_template,
    reharm_risk_at,
)
from chuk_mcp_harmony.templates.loader import (
    TemplateLoader,
    TemplateLoadError,
    builtin_library_path,
)
from chuk_mcp_harmony.templates.registry import TemplateNotFoundError, TemplateRegistry
from chuk_mcp_harmony.templates.validator import (
    TemplateErrorKind,
    TemplateValidationError,
    TemplateValidator,
    ValidationIssue,
    ValidationResult,
    validate,
    validate_template,
)

__all__ = [
    # Validation
    "TemplateErrorKind",
    "TemplateValidationError",
    "TemplateValidator",
    "ValidationIssue",
    "ValidationResult",
    "validate",
    "validate_template",
    # Compilation
    "BarRule",
    "BarRuleGrid",
    "TemplateCompiler",
    "compile_template",
    "reharm_risk_at",
    # Loading
    "TemplateLoadError",
    "TemplateLoader",
    "builtin_library_path",
    # Registry
    "TemplateNotFoundError",
    "TemplateRegistry",
]
