"""spinguard CLI entry point."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click

from spinguard import __version__
from spinguard.constraints.report import OUTPUT_FORMATS

if TYPE_CHECKING:
    from rdflib import Graph, URIRef

logger = logging.getLogger(__name__)


@click.group()
@click.version_option(version=__version__, prog_name="spinguard")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Minimal output (errors only).")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Settings file (default: ./spinguard.yml).",
)
@click.pass_context
def main(ctx: click.Context, *, verbose: bool, quiet: bool, config_path: Path | None) -> None:
    """spinguard - SPIN class constraints for RDF graphs."""
    from spinguard.infrastructure.config import CONFIG_FILENAME, load_settings

    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    settings = load_settings(config_path or Path.cwd() / CONFIG_FILENAME)

    # Flags win over the configured level.
    if not verbose and not quiet:
        logging.getLogger().setLevel(settings.log_level)

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["settings"] = settings


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _load_graph(paths: tuple[Path, ...]) -> Graph:
    """Parse every data file into one graph; exit 2 on unreadable input."""
    from rdflib import Graph
    from rdflib.plugin import PluginException

    graph = Graph()
    for path in paths:
        try:
            graph.parse(path)
        except (OSError, SyntaxError, ValueError, PluginException) as exc:
            click.echo(f"Error: cannot parse {path}: {exc}", err=True)
            sys.exit(2)
        logger.debug("Loaded %s (%d triples so far)", path, len(graph))
    return graph


def _resolve_term(term: str, graph: Graph, prefixes: dict[str, str]) -> URIRef:
    """Turn an IRI, ``<IRI>`` or ``prefix:local`` CURIE into a URIRef."""
    from rdflib import URIRef

    if term.startswith("<") and term.endswith(">"):
        return URIRef(term[1:-1])
    if "://" in term or term.startswith("urn:"):
        return URIRef(term)

    prefix, sep, local = term.partition(":")
    if sep:
        namespaces = {p: str(ns) for p, ns in graph.namespaces()}
        namespaces.update(prefixes)
        if prefix in namespaces:
            return URIRef(namespaces[prefix] + local)

    msg = f"cannot resolve '{term}' to an IRI (unknown prefix?)"
    raise click.BadParameter(msg)


_DATA_ARGUMENT = click.argument(
    "data",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@main.command()
@_DATA_ARGUMENT
@click.option("--instance", "instance_term", required=True, help="Instance to validate.")
@click.option("--class", "class_term", required=True, help="Class whose constraints apply.")
@click.option(
    "--format",
    "fmt",
    type=click.Choice(list(OUTPUT_FORMATS)),
    default=None,
    help="Output format (default: from spinguard.yml, else turtle).",
)
@click.option(
    "--no-source",
    is_flag=True,
    default=False,
    help="Omit spin:violationSource triples.",
)
@click.option(
    "--strict",
    is_flag=True,
    default=False,
    help="Exit 1 if violations found.",
)
@click.pass_context
def check(
    ctx: click.Context,
    data: tuple[Path, ...],
    *,
    instance_term: str,
    class_term: str,
    fmt: str | None,
    no_source: bool,
    strict: bool,
) -> None:
    """Run the constraints of a class and its superclasses on one instance.

    Prints the violations as triples.  Exit codes: 0 = clean or violations
    without --strict, 1 = violations with --strict, 2 = input or rule error.
    """
    from rdflib import Variable

    from spinguard.constraints import (
        EvaluationError,
        LoggingProgressMonitor,
        construct_violations,
        format_json,
        format_ntriples,
        format_text,
        format_turtle,
    )

    settings = ctx.obj["settings"]
    graph = _load_graph(data)
    instance = _resolve_term(instance_term, graph, settings.prefixes)
    cls = _resolve_term(class_term, graph, settings.prefixes)

    slots = (Variable("s"), Variable("p"), Variable("o"))
    monitor = LoggingProgressMonitor() if ctx.obj["verbose"] else None
    include_source = settings.include_source and not no_source

    try:
        rows = construct_violations(
            graph,
            {},
            [instance, cls],
            list(slots),
            monitor=monitor,
            include_source=include_source,
            constraint_predicate=settings.constraint_predicate,
        )
        triples = [(row[slots[0]], row[slots[1]], row[slots[2]]) for row in rows]
    except EvaluationError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)

    fmt = fmt or settings.output_format
    if fmt == "turtle":
        output = format_turtle(triples, settings.prefixes) if triples else ""
    else:
        formatters = {
            "ntriples": format_ntriples,
            "json": format_json,
            "text": format_text,
        }
        output = formatters[fmt](triples)
    if output:
        click.echo(output)

    if strict and triples:
        sys.exit(1)


@main.command()
@_DATA_ARGUMENT
@click.option("--class", "class_term", required=True, help="Class to inspect.")
@click.pass_context
def constraints(ctx: click.Context, data: tuple[Path, ...], *, class_term: str) -> None:
    """List the constraints collected for a class and its superclasses."""
    from rich.console import Console
    from rich.table import Table

    from spinguard.constraints import collect_constraints
    from spinguard.constraints.rules import rule_kind

    settings = ctx.obj["settings"]
    graph = _load_graph(data)
    cls = _resolve_term(class_term, graph, settings.prefixes)

    rules = collect_constraints(graph, cls, settings.constraint_predicate)
    ns = graph.namespace_manager

    table = Table(title=f"Constraints for {cls.n3(ns)}")
    table.add_column("#", justify="right")
    table.add_column("Kind")
    table.add_column("Rule")
    table.add_column("Declared on")
    for idx, rule in enumerate(rules, start=1):
        table.add_row(str(idx), rule_kind(rule), rule.node.n3(ns), rule.declared_on.n3(ns))

    console = Console()
    console.print(table)
    click.echo(f"{len(rules)} constraint(s)")
