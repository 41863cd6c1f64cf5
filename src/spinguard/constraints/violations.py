"""Constraint violation records and their RDF encoding."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from rdflib import RDF, RDFS, BNode, Graph, Literal, URIRef

from spinguard.constraints.hierarchy import node_sort_key
from spinguard.vocabulary import SP, SPIN, SPIN_PREFIX, VIOLATION_LEVELS

if TYPE_CHECKING:
    from collections.abc import Iterable

    from rdflib.term import Node

Triple = tuple["Node", "Node", "Node"]

# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ViolationPath:
    """A property leading from the violation root to the offending value."""

    predicate: URIRef
    inverse: bool = False


@dataclass(frozen=True)
class ConstraintViolation:
    """A single constraint violation reported for one instance."""

    root: Node | None
    message: str | None = None
    paths: tuple[ViolationPath, ...] = ()
    value: Node | None = None
    source: Node | None = None
    level: URIRef = SPIN.Error


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------


def violation_triples(
    violation: ConstraintViolation, *, include_source: bool = True
) -> list[Triple]:
    """Expand one violation into triples about a fresh blank node.

    Field order is fixed: type, message, root, paths, value, source, level.
    Inverse paths are encoded as an ``sp:ReversePath`` node whose two
    describing triples follow the ``spin:violationPath`` triple.
    """
    subject = BNode()
    triples: list[Triple] = [(subject, RDF.type, SPIN.ConstraintViolation)]

    if violation.message:
        triples.append((subject, RDFS.label, Literal(violation.message)))
    if violation.root is not None:
        triples.append((subject, SPIN.violationRoot, violation.root))
    for path in violation.paths:
        if not path.inverse:
            triples.append((subject, SPIN.violationPath, path.predicate))
            continue
        reverse = BNode()
        triples.append((subject, SPIN.violationPath, reverse))
        triples.append((reverse, RDF.type, SP.ReversePath))
        triples.append((reverse, SP.path, path.predicate))
    if violation.value is not None:
        triples.append((subject, SPIN.violationValue, violation.value))
    if include_source and violation.source is not None:
        triples.append((subject, SPIN.violationSource, violation.source))
    triples.append((subject, SPIN.violationLevel, violation.level))

    return triples


def serialize(
    violations: Iterable[ConstraintViolation], *, include_source: bool = True
) -> list[Triple]:
    """Serialize violations to a flat triple list, preserving input order."""
    triples: list[Triple] = []
    for violation in violations:
        triples.extend(violation_triples(violation, include_source=include_source))
    return triples


def violations_to_graph(
    violations: Iterable[ConstraintViolation],
    graph: Graph | None = None,
    *,
    include_source: bool = True,
) -> Graph:
    """Add the RDF description of *violations* to *graph* (a new one by default)."""
    if graph is None:
        graph = Graph()
    graph.bind(SPIN_PREFIX, SPIN)
    for triple in serialize(violations, include_source=include_source):
        graph.add(triple)
    return graph


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _parse_path(graph: Graph, node: Node) -> ViolationPath | None:
    if isinstance(node, URIRef):
        return ViolationPath(predicate=node)
    if (node, RDF.type, SP.ReversePath) in graph:
        predicate = graph.value(node, SP.path)
        if isinstance(predicate, URIRef):
            return ViolationPath(predicate=predicate, inverse=True)
    return None


def violations_from_graph(
    graph: Graph, *, source: Node | None = None
) -> list[ConstraintViolation]:
    """Read every ``spin:ConstraintViolation`` resource described in *graph*.

    When *source* is given it overrides any ``spin:violationSource`` found in
    the graph.  Results are ordered by root, then message.
    """
    violations: list[ConstraintViolation] = []
    for subject in graph.subjects(RDF.type, SPIN.ConstraintViolation):
        paths: list[ViolationPath] = []
        for path_node in sorted(graph.objects(subject, SPIN.violationPath), key=node_sort_key):
            path = _parse_path(graph, path_node)
            if path is not None:
                paths.append(path)

        message = graph.value(subject, RDFS.label)
        level = graph.value(subject, SPIN.violationLevel)
        if source is None:
            violation_source = graph.value(subject, SPIN.violationSource)
        else:
            violation_source = source
        violations.append(
            ConstraintViolation(
                root=graph.value(subject, SPIN.violationRoot),
                message=str(message) if message is not None else None,
                paths=tuple(paths),
                value=graph.value(subject, SPIN.violationValue),
                source=violation_source,
                level=level if level in VIOLATION_LEVELS else SPIN.Error,  # type: ignore[arg-type]
            )
        )

    violations.sort(
        key=lambda v: (
            node_sort_key(v.root) if v.root is not None else (3, ""),
            v.message or "",
        )
    )
    return violations
