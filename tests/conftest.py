"""Shared test fixtures for spinguard."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from rdflib import Graph

if TYPE_CHECKING:
    from pathlib import Path

PREFIXES = """\
@prefix ex: <http://example.org/> .
@prefix rdf: <http://www.w3.org/1999/02/22-rdf-syntax-ns#> .
@prefix rdfs: <http://www.w3.org/2000/01/rdf-schema#> .
@prefix sp: <http://spinrdf.org/sp#> .
@prefix spin: <http://spinrdf.org/spin#> .
@prefix spl: <http://spinrdf.org/spl#> .
@prefix xsd: <http://www.w3.org/2001/XMLSchema#> .
"""

# Person declares R1 (must have a name), its superclass Agent declares R2
# (must not know itself).  alice has no name; bob satisfies both rules.
PEOPLE_TTL = (
    PREFIXES
    + """
ex:Agent a rdfs:Class ;
    spin:constraint ex:R2 .

ex:Person a rdfs:Class ;
    rdfs:subClassOf ex:Agent ;
    spin:constraint ex:R1 .

ex:R1 a sp:Ask ;
    rdfs:comment "Person must have a name" ;
    sp:text '''ASK WHERE {
        ?this a ?type .
        FILTER NOT EXISTS { ?this ex:name ?name }
    }''' .

ex:R2 a sp:Ask ;
    rdfs:comment "Agent must not know itself" ;
    sp:text '''ASK WHERE { ?this ex:knows ?this }''' .

ex:alice a ex:Person ;
    ex:knows ex:bob .

ex:bob a ex:Person ;
    ex:name "Bob" .
"""
)

# A template with one argument (the property that must be present) and a
# CONSTRUCT query rule that reports negative ages with path and value.
TEMPLATES_TTL = (
    PREFIXES
    + """
ex:RequiredProperty a spin:Template ;
    rdfs:label "Required property" ;
    spin:labelTemplate "Missing value for {?property}" ;
    spin:constraint [
        a spl:Argument ;
        spl:predicate ex:property ;
        spl:defaultValue ex:name
    ] ;
    spin:body [
        a sp:Ask ;
        sp:text '''ASK WHERE {
            ?this a ?type .
            FILTER NOT EXISTS { ?this ?property ?value }
        }'''
    ] .

ex:Employee a rdfs:Class ;
    spin:constraint ex:needsEmail, ex:positiveAge .

ex:needsEmail a ex:RequiredProperty ;
    ex:property ex:email .

ex:positiveAge a sp:Construct ;
    sp:text '''CONSTRUCT {
        _:cv a spin:ConstraintViolation ;
            spin:violationRoot ?this ;
            spin:violationPath ex:age ;
            spin:violationValue ?age ;
            spin:violationLevel spin:Warning ;
            rdfs:label "Age must not be negative" .
    } WHERE {
        ?this ex:age ?age .
        FILTER (?age < 0)
    }''' .

ex:carol a ex:Employee ;
    ex:name "Carol" ;
    ex:age -3 .

ex:dave a ex:Employee ;
    ex:email "dave@example.org" ;
    ex:age 41 .
"""
)


@pytest.fixture()
def people_graph() -> Graph:
    """Person/Agent hierarchy with one ASK rule per class."""
    graph = Graph()
    graph.parse(data=PEOPLE_TTL, format="turtle")
    return graph


@pytest.fixture()
def templates_graph() -> Graph:
    """Employee class with a template call and a CONSTRUCT rule."""
    graph = Graph()
    graph.parse(data=TEMPLATES_TTL, format="turtle")
    return graph


@pytest.fixture()
def people_file(tmp_path: Path) -> Path:
    """PEOPLE_TTL written to a Turtle file."""
    path = tmp_path / "people.ttl"
    path.write_text(PEOPLE_TTL, encoding="utf-8")
    return path


@pytest.fixture()
def templates_file(tmp_path: Path) -> Path:
    """TEMPLATES_TTL written to a Turtle file."""
    path = tmp_path / "employees.ttl"
    path.write_text(TEMPLATES_TTL, encoding="utf-8")
    return path
