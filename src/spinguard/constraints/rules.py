"""Constraint rule references: registry lookup and hierarchy-aware collection."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from rdflib import RDF, Literal

from spinguard.constraints.hierarchy import is_resource, node_sort_key, superclasses
from spinguard.vocabulary import SP, SPIN, TEMPLATE_TYPES

if TYPE_CHECKING:
    from rdflib import Graph
    from rdflib.term import Node

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class QueryRule:
    """A query resource whose SPARQL source is stored in ``sp:text``."""

    node: Node
    text: str
    declared_on: Node


@dataclass(frozen=True)
class TemplateRule:
    """A call of a SPIN template (``node`` is an instance of ``template``)."""

    node: Node
    template: Node
    declared_on: Node


@dataclass(frozen=True)
class UnresolvedRule:
    """A constraint value that is neither a query nor a template call."""

    node: Node
    declared_on: Node


RuleRef = QueryRule | TemplateRule | UnresolvedRule


# ---------------------------------------------------------------------------
# Registry lookup
# ---------------------------------------------------------------------------


def _template_of(graph: Graph, node: Node) -> Node | None:
    """Return the template *node* calls, or None if it is not a template call."""
    for type_node in sorted(graph.objects(node, RDF.type), key=node_sort_key):
        for meta in graph.objects(type_node, RDF.type):
            if meta in TEMPLATE_TYPES:
                return type_node
    return None


def as_rule_ref(graph: Graph, value: Node, declared_on: Node) -> RuleRef:
    """Classify one ``spin:constraint`` value declared on *declared_on*."""
    if not is_resource(value):
        return UnresolvedRule(node=value, declared_on=declared_on)

    template = _template_of(graph, value)
    if template is not None:
        return TemplateRule(node=value, template=template, declared_on=declared_on)

    text = graph.value(value, SP.text)
    if isinstance(text, Literal) and str(text).strip():
        return QueryRule(node=value, text=str(text), declared_on=declared_on)

    return UnresolvedRule(node=value, declared_on=declared_on)


def declared_rules(
    graph: Graph, cls: Node, predicate: Node = SPIN.constraint
) -> list[RuleRef]:
    """Return the rules declared directly on *cls* via *predicate*.

    Values are ordered by :func:`node_sort_key` so that repeated runs over
    the same graph report violations in the same order.
    """
    values = sorted(graph.objects(cls, predicate), key=node_sort_key)
    return [as_rule_ref(graph, value, cls) for value in values]


# ---------------------------------------------------------------------------
# Collection
# ---------------------------------------------------------------------------


def collect_constraints(
    graph: Graph, cls: Node, predicate: Node = SPIN.constraint
) -> list[RuleRef]:
    """Collect the rules of *cls* followed by those of each superclass.

    Superclasses are visited once each, in breadth-first order.  A rule
    declared on several of these classes is kept once per declaration.
    """
    rules = declared_rules(graph, cls, predicate)
    for superclass in superclasses(graph, cls):
        rules.extend(declared_rules(graph, superclass, predicate))

    logger.debug("Collected %d constraint(s) for %s", len(rules), cls)
    return rules


def rule_kind(rule: RuleRef) -> str:
    """Short human-readable name of the rule variant."""
    if isinstance(rule, QueryRule):
        return "query"
    if isinstance(rule, TemplateRule):
        return "template"
    return "unresolved"
