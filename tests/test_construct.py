"""Tests for spinguard.constraints.construct — the spin:constructViolations function."""

from __future__ import annotations

from typing import Any

import pytest
from rdflib import RDF, RDFS, BNode, Graph, Literal, Namespace, Variable

from spinguard.constraints.construct import construct_violations, project, substitute
from spinguard.constraints.errors import (
    EvaluationError,
    InputArityError,
    InputTypeError,
    RuleEvaluationError,
)
from spinguard.constraints.violations import ConstraintViolation
from spinguard.vocabulary import SP, SPIN

EX = Namespace("http://example.org/")

S, P, O = Variable("s"), Variable("p"), Variable("o")
SLOTS = [S, P, O]


def _rows(graph: Graph, instance: Any, cls: Any, **kwargs: Any) -> list[Any]:
    return list(construct_violations(graph, {}, [instance, cls], SLOTS, **kwargs))


# ---------------------------------------------------------------------------
# Argument validation
# ---------------------------------------------------------------------------


class TestArguments:
    """Tests for arity and node-type checks on both sides."""

    @pytest.mark.parametrize(
        "subjects",
        [[], [EX.alice], [EX.alice, EX.Person, EX.Agent]],
    )
    def test_left_side_arity(self, people_graph: Graph, subjects: list[Any]) -> None:
        with pytest.raises(InputArityError, match="two nodes on the left side"):
            construct_violations(people_graph, {}, subjects, SLOTS)

    def test_single_node_left_side(self, people_graph: Graph) -> None:
        with pytest.raises(InputArityError):
            construct_violations(people_graph, {}, EX.alice, SLOTS)

    @pytest.mark.parametrize("objects", [[S, P], [S, P, O, Variable("x")]])
    def test_right_side_arity(self, people_graph: Graph, objects: list[Any]) -> None:
        with pytest.raises(InputArityError, match="three nodes on the right side"):
            construct_violations(people_graph, {}, [EX.alice, EX.Person], objects)

    def test_right_side_must_be_variables(self, people_graph: Graph) -> None:
        with pytest.raises(InputTypeError, match="three unbound variables"):
            construct_violations(people_graph, {}, [EX.alice, EX.Person], [S, RDF.type, O])

    def test_right_side_variable_already_bound(self, people_graph: Graph) -> None:
        with pytest.raises(InputTypeError, match="three unbound variables"):
            construct_violations(
                people_graph, {P: EX.bound}, [EX.alice, EX.Person], SLOTS
            )

    @pytest.mark.parametrize("objects", [[S, S, O], [S, P, S], [O, O, O]])
    def test_right_side_variables_must_be_distinct(
        self, people_graph: Graph, objects: list[Any]
    ) -> None:
        with pytest.raises(InputTypeError, match="three distinct unbound variables"):
            construct_violations(people_graph, {}, [EX.alice, EX.Person], objects)

    def test_right_side_checked_before_left_side(self, people_graph: Graph) -> None:
        with pytest.raises(InputArityError, match="right side"):
            construct_violations(people_graph, {}, [EX.alice], [S])

    def test_instance_must_be_resource(self, people_graph: Graph) -> None:
        with pytest.raises(InputTypeError, match="first argument"):
            _rows(people_graph, Literal("alice"), EX.Person)

    def test_class_must_be_resource(self, people_graph: Graph) -> None:
        with pytest.raises(InputTypeError, match="second argument"):
            _rows(people_graph, EX.alice, Literal("Person"))

    def test_unbound_variable_on_left_side(self, people_graph: Graph) -> None:
        with pytest.raises(InputTypeError, match="first argument"):
            _rows(people_graph, Variable("instance"), EX.Person)

    def test_errors_share_a_base_class(self) -> None:
        for exc_type in (InputArityError, InputTypeError, RuleEvaluationError):
            assert issubclass(exc_type, EvaluationError)

    def test_left_side_variables_are_substituted(self, people_graph: Graph) -> None:
        binding = {Variable("x"): EX.alice, Variable("c"): EX.Person}
        rows = list(
            construct_violations(people_graph, binding, [Variable("x"), Variable("c")], SLOTS)
        )
        assert rows
        assert all(row[Variable("x")] == EX.alice for row in rows)

    def test_substitute_keeps_unbound_and_constants(self) -> None:
        x, y = Variable("x"), Variable("y")
        assert substitute([x, y, EX.a], {x: EX.b}) == [EX.b, y, EX.a]


# ---------------------------------------------------------------------------
# End-to-end
# ---------------------------------------------------------------------------


class TestConstructViolations:
    """End-to-end scenarios over the Person/Agent and Employee fixtures."""

    def test_alice_violates_person_rule(self, people_graph: Graph) -> None:
        rows = _rows(people_graph, EX.alice, EX.Person)

        type_rows = [r for r in rows if r[P] == RDF.type]
        assert len(type_rows) == 1
        assert type_rows[0][O] == SPIN.ConstraintViolation

        violation = type_rows[0][S]
        described = {r[P]: r[O] for r in rows if r[S] == violation}
        assert described[SPIN.violationRoot] == EX.alice
        assert described[SPIN.violationSource] == EX.R1
        assert described[RDFS.label] == Literal("Person must have a name")
        assert described[SPIN.violationLevel] == SPIN.Error
        assert len(rows) == 5

    def test_clean_instance_yields_no_rows(self, people_graph: Graph) -> None:
        assert _rows(people_graph, EX.bob, EX.Person) == []

    def test_class_without_rules_yields_no_rows(self, people_graph: Graph) -> None:
        assert _rows(people_graph, EX.alice, EX.Unconstrained) == []

    def test_without_source(self, people_graph: Graph) -> None:
        rows = _rows(people_graph, EX.alice, EX.Person, include_source=False)
        assert SPIN.violationSource not in {r[P] for r in rows}
        assert len(rows) == 4

    def test_employee_template_and_construct(self, templates_graph: Graph) -> None:
        rows = _rows(templates_graph, EX.carol, EX.Employee)
        subjects = [r[S] for r in rows if r[P] == RDF.type and r[O] == SPIN.ConstraintViolation]
        assert len(subjects) == 2
        assert (EX.age,) == tuple(r[O] for r in rows if r[P] == SPIN.violationPath)

    def test_anonymous_instance_and_class(self) -> None:
        graph = Graph()
        cls, instance = BNode(), BNode()
        graph.add((cls, RDFS.subClassOf, EX.Agent))
        graph.add((EX.Agent, SPIN.constraint, EX.R1))
        graph.add((EX.R1, SP.text, Literal("ASK { ?this a ?type }")))
        graph.add((EX.R1, RDFS.comment, Literal("Anonymous things are not allowed")))
        graph.add((instance, RDF.type, cls))

        rows = _rows(graph, instance, cls)

        assert len(rows) == 5
        described = {r[P]: r[O] for r in rows}
        assert described[SPIN.violationRoot] == instance
        assert described[SPIN.violationSource] == EX.R1

    def test_rows_carry_caller_bindings(self, people_graph: Graph) -> None:
        extra = Variable("context")
        rows = list(
            construct_violations(people_graph, {extra: EX.run1}, [EX.alice, EX.Person], SLOTS)
        )
        assert all(row[extra] == EX.run1 for row in rows)
        assert all(set(row) == {extra, S, P, O} for row in rows)

    def test_rows_are_read_only(self, people_graph: Graph) -> None:
        row = _rows(people_graph, EX.alice, EX.Person)[0]
        with pytest.raises(TypeError):
            row[S] = EX.other  # type: ignore[index]

    def test_result_is_single_pass(self, people_graph: Graph) -> None:
        rows = construct_violations(people_graph, {}, [EX.alice, EX.Person], SLOTS)
        assert len(list(rows)) == 5
        assert list(rows) == []

    def test_rule_error_raised_before_any_row(self, people_graph: Graph) -> None:
        people_graph.add((EX.Agent, SPIN.constraint, EX.Broken))
        people_graph.add((EX.Broken, SP.text, Literal("ASK { nonsense")))
        with pytest.raises(RuleEvaluationError):
            construct_violations(people_graph, {}, [EX.alice, EX.Person], SLOTS)

    def test_malformed_rule_is_skipped(self, people_graph: Graph) -> None:
        people_graph.add((EX.Person, SPIN.constraint, Literal("not a rule")))
        rows = _rows(people_graph, EX.alice, EX.Person)
        assert sum(1 for r in rows if r[P] == RDF.type) == 1

    def test_custom_evaluators_and_predicate(self, people_graph: Graph) -> None:
        people_graph.add((EX.Person, EX.validatedBy, EX.R2))
        seen: list[Any] = []

        def evaluator(graph: Graph, rule: Any, instance: Any, **kwargs: Any) -> list[Any]:
            seen.append(rule.node)
            return [ConstraintViolation(root=instance, message="custom")]

        rows = _rows(
            people_graph,
            EX.alice,
            EX.Person,
            query_evaluator=evaluator,
            constraint_predicate=EX.validatedBy,
        )
        assert seen == [EX.R2]
        assert Literal("custom") in {r[O] for r in rows}


# ---------------------------------------------------------------------------
# project()
# ---------------------------------------------------------------------------


class TestProject:
    """Tests for project() — one row per triple."""

    def test_empty(self) -> None:
        assert list(project([], (S, P, O), {})) == []

    def test_one_row_per_triple(self) -> None:
        triples = [(EX.a, EX.b, EX.c), (EX.d, EX.e, Literal(1))]
        rows = list(project(triples, (S, P, O), {}))
        assert [(r[S], r[P], r[O]) for r in rows] == triples

    def test_rows_are_independent(self) -> None:
        binding = {Variable("k"): EX.v}
        rows = list(project([(EX.a, EX.b, EX.c), (EX.d, EX.e, EX.f)], (S, P, O), binding))
        assert rows[0] is not rows[1]
        assert binding == {Variable("k"): EX.v}
