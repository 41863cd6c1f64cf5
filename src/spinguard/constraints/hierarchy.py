"""Class hierarchy traversal over rdfs:subClassOf."""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING

from rdflib import RDF, RDFS, BNode, URIRef

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator

    from rdflib import Graph
    from rdflib.term import Node


def is_resource(node: Node | None) -> bool:
    """Return True for named (URI) and anonymous (blank) resources."""
    return isinstance(node, (URIRef, BNode))


def node_sort_key(node: Node) -> tuple[int, str]:
    """Stable ordering key: URIs first, then blank nodes, then everything else."""
    if isinstance(node, URIRef):
        rank = 0
    elif isinstance(node, BNode):
        rank = 1
    else:
        rank = 2
    return (rank, str(node))


def _walk(start: Node, neighbours: Callable[[Node], Iterable[Node]]) -> list[Node]:
    """Breadth-first walk from *start*, excluding *start* itself.

    Neighbours are visited in :func:`node_sort_key` order.  A visited set
    guarantees termination when the relation contains cycles.
    """
    visited: set[Node] = {start}
    ordered: list[Node] = []
    queue: deque[Node] = deque([start])

    while queue:
        current = queue.popleft()
        for nxt in sorted(neighbours(current), key=node_sort_key):
            if not is_resource(nxt) or nxt in visited:
                continue
            visited.add(nxt)
            ordered.append(nxt)
            queue.append(nxt)

    return ordered


def superclasses(graph: Graph, cls: Node) -> list[Node]:
    """Return all transitive superclasses of *cls* in breadth-first order.

    *cls* itself is never part of the result, even if a cycle in
    ``rdfs:subClassOf`` leads back to it.
    """
    return _walk(cls, lambda node: graph.objects(node, RDFS.subClassOf))


def subclasses(graph: Graph, cls: Node) -> list[Node]:
    """Return all transitive subclasses of *cls* in breadth-first order."""
    return _walk(cls, lambda node: graph.subjects(RDFS.subClassOf, node))


def instances_of(graph: Graph, cls: Node) -> Iterator[Node]:
    """Yield each instance of *cls* or of one of its subclasses exactly once."""
    seen: set[Node] = set()
    for candidate_cls in [cls, *subclasses(graph, cls)]:
        for instance in sorted(graph.subjects(RDF.type, candidate_cls), key=node_sort_key):
            if instance in seen:
                continue
            seen.add(instance)
            yield instance
