"""Exceptions raised while evaluating spin:constructViolations."""

from __future__ import annotations


class EvaluationError(Exception):
    """Raised when a constraint evaluation cannot be completed."""


class InputArityError(EvaluationError):
    """Wrong number of arguments on either side of the property function."""


class InputTypeError(EvaluationError):
    """An argument has the wrong node type (literal, variable, bound placeholder)."""


class RuleEvaluationError(EvaluationError):
    """A query or template rule failed while executing."""
