"""Formatters for violation triples produced by spin:constructViolations."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from rdflib import RDF, RDFS, Graph

from spinguard.vocabulary import SP, SPIN, SPIN_PREFIX

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from spinguard.constraints.violations import Triple

OUTPUT_FORMATS = ("turtle", "ntriples", "json", "text")

_FIELD_LABELS: dict[object, str] = {
    RDFS.label: "message",
    SPIN.violationRoot: "root",
    SPIN.violationPath: "path",
    SPIN.violationValue: "value",
    SPIN.violationSource: "source",
    SPIN.violationLevel: "level",
}


def format_turtle(triples: Sequence[Triple], prefixes: Mapping[str, str] | None = None) -> str:
    """Format triples as Turtle with the ``spin`` prefix (and any *prefixes*) bound."""
    graph = Graph()
    graph.bind(SPIN_PREFIX, SPIN)
    for prefix, namespace in (prefixes or {}).items():
        graph.bind(prefix, namespace)
    for triple in triples:
        graph.add(triple)
    return graph.serialize(format="turtle")


def format_ntriples(triples: Sequence[Triple]) -> str:
    """Format triples one per line in N-Triples notation, preserving order.

    Returns an empty string when there are no triples.
    """
    return "\n".join(f"{s.n3()} {p.n3()} {o.n3()} ." for s, p, o in triples)


def format_json(triples: Sequence[Triple]) -> str:
    """Format triples as JSON with ``triples`` and ``summary`` keys."""
    violations = {s for s, p, o in triples if p == RDF.type and o == SPIN.ConstraintViolation}
    output: dict[str, object] = {
        "triples": [
            {"subject": s.n3(), "predicate": p.n3(), "object": o.n3()} for s, p, o in triples
        ],
        "summary": {
            "violations_count": len(violations),
            "triples_count": len(triples),
        },
    }
    return json.dumps(output, indent=2)


def format_text(triples: Sequence[Triple]) -> str:
    """Format violations as human-readable blocks, one per violation resource.

    Example output::

        ✗ Person must have a name
          root: <http://example.org/alice>
          source: <http://example.org/R1>
          level: <http://spinrdf.org/spin#Error>

        1 violation found
    """
    reverse_nodes = {s for s, p, o in triples if p == RDF.type and o == SP.ReversePath}
    inverse_paths = {s: o for s, p, o in triples if p == SP.path and s in reverse_nodes}

    order: list[object] = []
    fields: dict[object, list[tuple[str, str]]] = {}
    for s, p, o in triples:
        if p == RDF.type and o == SPIN.ConstraintViolation:
            order.append(s)
            fields[s] = []
            continue
        if s in fields and p in _FIELD_LABELS:
            if p == RDFS.label:
                value = str(o)
            elif p == SPIN.violationPath and o in inverse_paths:
                value = f"^{inverse_paths[o].n3()}"
            else:
                value = o.n3()
            fields[s].append((_FIELD_LABELS[p], value))

    if not order:
        return "✓ No violations found"

    lines: list[str] = []
    for subject in order:
        entries = fields[subject]
        messages = [value for name, value in entries if name == "message"]
        lines.append(f"✗ {messages[0] if messages else 'Constraint violation'}")
        for name, value in entries:
            if name != "message":
                lines.append(f"  {name}: {value}")
        lines.append("")

    count = len(order)
    noun = "violation" if count == 1 else "violations"
    lines.append(f"{count} {noun} found")
    return "\n".join(lines)
