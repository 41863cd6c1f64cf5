"""The ``spin:constructViolations`` property function.

Usage in a query engine binding context::

    (?instance ?class) spin:constructViolations (?s ?p ?o)

For the given instance and class, every constraint attached to the class and
its superclasses is executed against the instance.  The resulting violations
are serialized to triples and each triple is bound to ``?s ?p ?o``, one
result row per triple.

All validation, rule execution and serialization happens before the first
row is produced, so a failure never leaves a partially consumed result.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import TYPE_CHECKING

from rdflib.term import Node, Variable

from spinguard.constraints.engine import accumulate
from spinguard.constraints.errors import InputArityError, InputTypeError
from spinguard.constraints.evaluators import evaluate_query, evaluate_template
from spinguard.constraints.hierarchy import is_resource
from spinguard.constraints.rules import collect_constraints
from spinguard.constraints.violations import serialize
from spinguard.vocabulary import SPIN, SPIN_PREFIX

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping, Sequence

    from rdflib import Graph

    from spinguard.constraints.engine import QueryEvaluator, TemplateEvaluator
    from spinguard.constraints.progress import ProgressMonitor
    from spinguard.constraints.violations import Triple

    ResultRow = Mapping[Variable, Node]

FUNCTION_NAME = f"{SPIN_PREFIX}:constructViolations"

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Argument handling
# ---------------------------------------------------------------------------


def _as_list(arg: Node | Sequence[Node]) -> list[Node]:
    if isinstance(arg, Node):
        return [arg]
    return list(arg)


def substitute(args: Iterable[Node], binding: Mapping[Variable, Node]) -> list[Node]:
    """Replace variables already bound in *binding* by their values."""
    return [binding.get(arg, arg) if isinstance(arg, Variable) else arg for arg in args]


def _check_object_args(objects: list[Node]) -> tuple[Variable, Variable, Variable]:
    if len(objects) != 3:
        msg = f"{FUNCTION_NAME} must have three nodes on the right side"
        raise InputArityError(msg)
    first, second, third = objects
    if (
        not isinstance(first, Variable)
        or not isinstance(second, Variable)
        or not isinstance(third, Variable)
    ):
        msg = f"{FUNCTION_NAME} must have three unbound variables on the right side"
        raise InputTypeError(msg)
    if len({first, second, third}) != 3:
        msg = f"{FUNCTION_NAME} must have three distinct unbound variables on the right side"
        raise InputTypeError(msg)
    return first, second, third


def _check_subject_args(subjects: list[Node]) -> tuple[Node, Node]:
    if len(subjects) != 2:
        msg = f"{FUNCTION_NAME} must have two nodes on the left side"
        raise InputArityError(msg)
    instance, cls = subjects
    if not is_resource(instance):
        msg = f"{FUNCTION_NAME} must have a resource as its first argument on the left side"
        raise InputTypeError(msg)
    if not is_resource(cls):
        msg = f"{FUNCTION_NAME} must have a resource as its second argument on the left side"
        raise InputTypeError(msg)
    return instance, cls


# ---------------------------------------------------------------------------
# Projection
# ---------------------------------------------------------------------------


def project(
    triples: Iterable[Triple],
    slots: tuple[Variable, Variable, Variable],
    binding: Mapping[Variable, Node],
) -> Iterator[ResultRow]:
    """Yield one read-only row per triple: *binding* plus the three slots."""
    subject_var, predicate_var, object_var = slots
    for subject, predicate, obj in triples:
        row = dict(binding)
        row[subject_var] = subject
        row[predicate_var] = predicate
        row[object_var] = obj
        yield MappingProxyType(row)


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def construct_violations(
    graph: Graph,
    binding: Mapping[Variable, Node] | None,
    subject_args: Node | Sequence[Node],
    object_args: Node | Sequence[Node],
    *,
    query_evaluator: QueryEvaluator = evaluate_query,
    template_evaluator: TemplateEvaluator = evaluate_template,
    monitor: ProgressMonitor | None = None,
    include_source: bool = True,
    constraint_predicate: Node = SPIN.constraint,
) -> Iterator[ResultRow]:
    """Evaluate ``(instance class) spin:constructViolations (s p o)``.

    Parameters
    ----------
    graph:
        Background graph holding the data, class hierarchy and rules.
    binding:
        Bindings of the caller's current solution; copied into every row.
    subject_args:
        Left side: the instance and the class.  Bound variables are
        substituted first.
    object_args:
        Right side: three unbound variables receiving subject, predicate
        and object of each violation triple.

    Returns
    -------
    Iterator
        One read-only mapping per violation triple.

    Raises
    ------
    InputArityError
        When either side has the wrong number of arguments.
    InputTypeError
        When the left side holds a non-resource or the right side a
        non-variable (including a variable already bound in *binding*).
    RuleEvaluationError
        When a rule body cannot be executed.
    """
    binding = dict(binding or {})

    objects = substitute(_as_list(object_args), binding)
    slots = _check_object_args(objects)

    subjects = substitute(_as_list(subject_args), binding)
    instance, cls = _check_subject_args(subjects)

    rules = collect_constraints(graph, cls, constraint_predicate)
    violations = accumulate(
        graph,
        rules,
        instance,
        query_evaluator=query_evaluator,
        template_evaluator=template_evaluator,
        monitor=monitor,
    )
    triples = serialize(violations, include_source=include_source)

    logger.debug(
        "%s: %d rule(s), %d violation(s), %d triple(s) for %s",
        FUNCTION_NAME,
        len(rules),
        len(violations),
        len(triples),
        instance,
    )
    return project(triples, slots, binding)
