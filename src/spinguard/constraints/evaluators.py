"""Default rule evaluators backed by rdflib's SPARQL engine.

Both evaluators bind ``?this`` to the instance under validation and
interpret the query form of the rule body:

* ``ASK``: a true answer means the instance violates the rule; one
  violation is reported with the instance as root.
* ``CONSTRUCT``: every ``spin:ConstraintViolation`` resource in the
  constructed graph is reported as a violation.

Any other query form, and any parse or execution failure, raises
:class:`~spinguard.constraints.errors.RuleEvaluationError`.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from rdflib import RDF, RDFS, Literal, URIRef

from spinguard.constraints.errors import RuleEvaluationError
from spinguard.constraints.hierarchy import instances_of, node_sort_key
from spinguard.constraints.progress import ProgressMonitor
from spinguard.constraints.violations import ConstraintViolation, violations_from_graph
from spinguard.vocabulary import SP, SPIN, SPL, THIS_VAR_NAME

if TYPE_CHECKING:
    from collections.abc import Mapping

    from rdflib import Graph
    from rdflib.query import Result
    from rdflib.term import Node

    from spinguard.constraints.rules import QueryRule, TemplateRule

_LABEL_VAR_RE = re.compile(r"\{[?$]([A-Za-z_][\w-]*)\}")

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _local_name(uri: URIRef) -> str:
    """Return the part of *uri* after the last ``#``, ``/`` or ``:``."""
    text = str(uri)
    for sep in ("#", "/", ":"):
        _, found, tail = text.rpartition(sep)
        if found and tail:
            return tail
    return text


def _targets(
    graph: Graph, declared_on: Node, instance: Node, *, match_all_instances: bool
) -> list[Node]:
    if match_all_instances:
        return list(instances_of(graph, declared_on))
    return [instance]


def _run_body(
    graph: Graph, rule_node: Node, text: str, bindings: Mapping[str, Node]
) -> Result:
    try:
        return graph.query(text, initBindings=dict(bindings))
    except Exception as exc:  # noqa: BLE001
        msg = f"Failed to evaluate constraint {rule_node.n3()}: {exc}"
        raise RuleEvaluationError(msg) from exc


def _collect_results(
    result: Result,
    *,
    rule_node: Node,
    instance: Node,
    message: str | None,
) -> list[ConstraintViolation]:
    if result.type == "ASK":
        if not result.askAnswer:
            return []
        return [ConstraintViolation(root=instance, message=message, source=rule_node)]

    if result.type == "CONSTRUCT":
        if result.graph is None:
            return []
        return violations_from_graph(result.graph, source=rule_node)

    msg = (
        f"Constraint {rule_node.n3()} uses unsupported query form {result.type}, "
        f"expected ASK or CONSTRUCT"
    )
    raise RuleEvaluationError(msg)


def _string_value(graph: Graph, subject: Node, *predicates: URIRef) -> str | None:
    for predicate in predicates:
        value = graph.value(subject, predicate)
        if isinstance(value, Literal):
            return str(value)
    return None


# ---------------------------------------------------------------------------
# Query rules
# ---------------------------------------------------------------------------


def evaluate_query(
    graph: Graph,
    rule: QueryRule,
    instance: Node,
    *,
    match_all_instances: bool = False,
    initial_bindings: Mapping[str, Node] | None = None,
    monitor: ProgressMonitor | None = None,
) -> list[ConstraintViolation]:
    """Run a query rule for *instance* (or every instance of its class)."""
    monitor = monitor or ProgressMonitor()
    message = _string_value(graph, rule.node, RDFS.comment, RDFS.label)

    violations: list[ConstraintViolation] = []
    targets = _targets(graph, rule.declared_on, instance, match_all_instances=match_all_instances)
    for target in targets:
        monitor.sub_task(f"Query {rule.node.n3()} on {target.n3()}")
        bindings: dict[str, Node] = dict(initial_bindings or {})
        bindings[THIS_VAR_NAME] = target
        result = _run_body(graph, rule.node, rule.text, bindings)
        violations.extend(
            _collect_results(result, rule_node=rule.node, instance=target, message=message)
        )
    return violations


# ---------------------------------------------------------------------------
# Template rules
# ---------------------------------------------------------------------------


def template_body(graph: Graph, template: Node) -> str:
    """Return the SPARQL text of *template*'s ``spin:body``."""
    body = graph.value(template, SPIN.body)
    text = graph.value(body, SP.text) if body is not None else None
    if not isinstance(text, Literal) or not str(text).strip():
        msg = f"Template {template.n3()} has no executable spin:body"
        raise RuleEvaluationError(msg)
    return str(text)


def template_arguments(graph: Graph, rule: TemplateRule) -> dict[str, Node]:
    """Bind each declared ``spl:Argument`` of the template to its call value.

    The variable name is the local name of the argument's ``spl:predicate``.
    Missing values fall back to ``spl:defaultValue``; arguments without
    either stay unbound.
    """
    bindings: dict[str, Node] = {}
    arguments = sorted(graph.objects(rule.template, SPIN.constraint), key=node_sort_key)
    for argument in arguments:
        if (argument, RDF.type, SPL.Argument) not in graph:
            continue
        predicate = graph.value(argument, SPL.predicate)
        if not isinstance(predicate, URIRef):
            continue
        value = graph.value(rule.node, predicate)
        if value is None:
            value = graph.value(argument, SPL.defaultValue)
        if value is not None:
            bindings[_local_name(predicate)] = value
    return bindings


def render_label_template(label: str, bindings: Mapping[str, Node]) -> str:
    """Replace ``{?var}`` and ``{$var}`` placeholders with bound values."""

    def _replace(match: re.Match[str]) -> str:
        value = bindings.get(match.group(1))
        return str(value) if value is not None else match.group(0)

    return _LABEL_VAR_RE.sub(_replace, label)


def evaluate_template(
    graph: Graph,
    rule: TemplateRule,
    instance: Node,
    *,
    match_all_instances: bool = False,
    monitor: ProgressMonitor | None = None,
) -> list[ConstraintViolation]:
    """Run a template call for *instance* (or every instance of its class)."""
    monitor = monitor or ProgressMonitor()
    text = template_body(graph, rule.template)
    arguments = template_arguments(graph, rule)
    label = _string_value(graph, rule.template, SPIN.labelTemplate, RDFS.label)

    violations: list[ConstraintViolation] = []
    targets = _targets(graph, rule.declared_on, instance, match_all_instances=match_all_instances)
    for target in targets:
        monitor.sub_task(f"Template {rule.template.n3()} on {target.n3()}")
        bindings = {**arguments, THIS_VAR_NAME: target}
        message = render_label_template(label, bindings) if label is not None else None
        result = _run_body(graph, rule.node, text, bindings)
        violations.extend(
            _collect_results(result, rule_node=rule.node, instance=target, message=message)
        )
    return violations
