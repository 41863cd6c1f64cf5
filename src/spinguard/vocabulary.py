"""RDF vocabularies used by the constraint engine."""

from __future__ import annotations

from rdflib import Namespace

SPIN = Namespace("http://spinrdf.org/spin#")
SP = Namespace("http://spinrdf.org/sp#")
SPL = Namespace("http://spinrdf.org/spl#")

SPIN_PREFIX = "spin"

# Variable bound to the instance under validation.
THIS_VAR_NAME = "this"

# Metaclasses whose instances are templates.
TEMPLATE_TYPES = frozenset({SPIN.Template, SPIN.AskTemplate, SPIN.ConstructTemplate})

VIOLATION_LEVELS = frozenset({SPIN.Fatal, SPIN.Error, SPIN.Warning, SPIN.Info})
