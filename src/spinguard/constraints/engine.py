"""Rule execution: dispatch each rule to its evaluator and accumulate violations."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from spinguard.constraints.evaluators import evaluate_query, evaluate_template
from spinguard.constraints.progress import ProgressMonitor
from spinguard.constraints.rules import QueryRule, TemplateRule, collect_constraints
from spinguard.vocabulary import SPIN

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from rdflib import Graph
    from rdflib.term import Node

    from spinguard.constraints.rules import RuleRef
    from spinguard.constraints.violations import ConstraintViolation

    QueryEvaluator = Callable[..., list[ConstraintViolation]]
    TemplateEvaluator = Callable[..., list[ConstraintViolation]]

logger = logging.getLogger(__name__)


def execute_rule(
    graph: Graph,
    rule: RuleRef,
    instance: Node,
    *,
    query_evaluator: QueryEvaluator = evaluate_query,
    template_evaluator: TemplateEvaluator = evaluate_template,
    monitor: ProgressMonitor | None = None,
) -> list[ConstraintViolation]:
    """Execute one rule against *instance* only.

    Unresolved rules (neither query nor template call) produce no violations.
    Evaluator errors propagate to the caller unchanged.
    """
    monitor = monitor or ProgressMonitor()

    if isinstance(rule, TemplateRule):
        return list(
            template_evaluator(
                graph, rule, instance, match_all_instances=False, monitor=monitor
            )
        )
    if isinstance(rule, QueryRule):
        return list(
            query_evaluator(
                graph,
                rule,
                instance,
                match_all_instances=False,
                initial_bindings=None,
                monitor=monitor,
            )
        )

    logger.debug(
        "Skipping constraint %s on %s: neither a query nor a template call",
        rule.node,
        rule.declared_on,
    )
    return []


def accumulate(
    graph: Graph,
    rules: Sequence[RuleRef],
    instance: Node,
    *,
    query_evaluator: QueryEvaluator = evaluate_query,
    template_evaluator: TemplateEvaluator = evaluate_template,
    monitor: ProgressMonitor | None = None,
) -> list[ConstraintViolation]:
    """Execute *rules* in order and concatenate their violations.

    Nothing is reordered or deduplicated: a rule listed twice reports its
    violations twice.
    """
    monitor = monitor or ProgressMonitor()
    violations: list[ConstraintViolation] = []

    monitor.begin_task(f"Checking {instance.n3()}", len(rules))
    for rule in rules:
        violations.extend(
            execute_rule(
                graph,
                rule,
                instance,
                query_evaluator=query_evaluator,
                template_evaluator=template_evaluator,
                monitor=monitor,
            )
        )
        monitor.worked(1)
    monitor.done()

    return violations


def check_instance(
    graph: Graph,
    instance: Node,
    cls: Node,
    *,
    predicate: Node = SPIN.constraint,
    query_evaluator: QueryEvaluator = evaluate_query,
    template_evaluator: TemplateEvaluator = evaluate_template,
    monitor: ProgressMonitor | None = None,
) -> list[ConstraintViolation]:
    """Collect the constraints of *cls* and its superclasses and run them on *instance*."""
    rules = collect_constraints(graph, cls, predicate)
    return accumulate(
        graph,
        rules,
        instance,
        query_evaluator=query_evaluator,
        template_evaluator=template_evaluator,
        monitor=monitor,
    )
