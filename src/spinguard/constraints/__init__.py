"""Constraint domain: rule collection, execution, violation encoding, spin:constructViolations."""

from spinguard.constraints.construct import (
    FUNCTION_NAME,
    construct_violations,
    project,
    substitute,
)
from spinguard.constraints.engine import accumulate, check_instance, execute_rule
from spinguard.constraints.errors import (
    EvaluationError,
    InputArityError,
    InputTypeError,
    RuleEvaluationError,
)
from spinguard.constraints.evaluators import evaluate_query, evaluate_template
from spinguard.constraints.hierarchy import instances_of, subclasses, superclasses
from spinguard.constraints.progress import LoggingProgressMonitor, ProgressMonitor
from spinguard.constraints.report import (
    OUTPUT_FORMATS,
    format_json,
    format_ntriples,
    format_text,
    format_turtle,
)
from spinguard.constraints.rules import (
    QueryRule,
    RuleRef,
    TemplateRule,
    UnresolvedRule,
    collect_constraints,
    declared_rules,
)
from spinguard.constraints.violations import (
    ConstraintViolation,
    ViolationPath,
    serialize,
    violation_triples,
    violations_from_graph,
    violations_to_graph,
)

__all__ = [
    "FUNCTION_NAME",
    "OUTPUT_FORMATS",
    "ConstraintViolation",
    "EvaluationError",
    "InputArityError",
    "InputTypeError",
    "LoggingProgressMonitor",
    "ProgressMonitor",
    "QueryRule",
    "RuleEvaluationError",
    "RuleRef",
    "TemplateRule",
    "UnresolvedRule",
    "ViolationPath",
    "accumulate",
    "check_instance",
    "collect_constraints",
    "construct_violations",
    "declared_rules",
    "evaluate_query",
    "evaluate_template",
    "execute_rule",
    "format_json",
    "format_ntriples",
    "format_text",
    "format_turtle",
    "instances_of",
    "project",
    "serialize",
    "subclasses",
    "substitute",
    "superclasses",
    "violation_triples",
    "violations_from_graph",
    "violations_to_graph",
]
