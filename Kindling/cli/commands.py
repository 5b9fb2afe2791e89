"""Kindling command line interface."""

from __future__ import annotations

import functools
import json
import sys

import click

from Kindling.config.logging_config import setup_logging
from Kindling.config.settings import get_config
from Kindling.core.memory_tree import MemoryTree
from Kindling.heat.report import REPORT_KINDS
from Kindling.memory.schemas import Confidence
from Kindling.search.engine import SORT_MODES
from Kindling.utils.errors import KindlingException


def handle_errors(func):
    """Print Kindling errors to stderr and exit 1."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except KindlingException as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)

    return wrapper


def _split_tags(value):
    if not value:
        return []
    return [t.strip() for t in value.split(",") if t.strip()]


@click.group()
@click.option("--root", type=click.Path(file_okay=False), help="Memory tree root directory")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), help="JSON config file")
@click.option("--log-level", help="Logging level (DEBUG, INFO, WARNING, ERROR)")
@click.option("--log-format", type=click.Choice(["standard", "json"]), help="Log output format")
@click.pass_context
@handle_errors
def cli(ctx, root, config_path, log_level, log_format):
    """Kindling - heat tracking and search for a Markdown memory tree."""
    config = get_config(config_path)
    if root:
        config.store.root = root
    if log_level:
        config.logging.level = log_level
    if log_format:
        config.logging.format = log_format

    setup_logging(config.logging.level, config.logging.format, config.logging.file_path)
    ctx.obj = MemoryTree(config)


@cli.group()
def heat():
    """Heat ledger commands."""
    pass


@heat.command()
@click.argument("path")
@click.option("--boost", type=float, default=None, help="Heat boost for this access (default from config)")
@click.option("--confidence", type=click.Choice([c.value for c in Confidence]), default=None,
              help="Confidence tier of the node's content")
@click.pass_obj
@handle_errors
def update(tree, path, boost, confidence):
    """Record one access to PATH."""
    record = tree.touch(path, boost=boost, confidence=confidence)
    level = tree.ledger.get_heat_level(record.heat)
    risk = " [risk-capped]" if record.risk_flag else ""
    click.echo(f"{path}: heat {record.heat:.1f} ({level.value}), {record.access_count} accesses{risk}")


@heat.command()
@click.argument("kind", type=click.Choice(REPORT_KINDS), default="daily")
@click.pass_obj
@handle_errors
def report(tree, kind):
    """Write a heat report (daily, weekly or monthly)."""
    result = tree.reports.generate(kind)
    click.echo(f"Heat report ({kind}) - {result.total_nodes} nodes")
    click.echo(f"  high: {result.high_heat}  medium: {result.medium_heat}  low: {result.low_heat}")
    click.echo(f"  average heat: {result.average_heat:.1f}")
    if result.top_nodes:
        click.echo("\nHottest:")
        for i, node in enumerate(result.top_nodes, 1):
            click.echo(f"  {i}. {node.path} ({node.heat:.1f})")
    if result.archive_candidates:
        click.echo("\nArchive candidates:")
        for candidate in result.archive_candidates:
            click.echo(f"  {candidate.path} ({candidate.days_since_access} days idle)")
    click.echo(f"\nSaved to {tree.reports.report_path(result)}")


@heat.command()
@click.argument("keywords", nargs=-1)
@click.option("--policy", type=click.Choice(["recency", "keyword"]), default=None, help="Spark policy")
@click.option("--json", "as_json", is_flag=True, help="Print sparks as JSON")
@click.pass_obj
@handle_errors
def check(tree, keywords, policy, as_json):
    """Look for cold nodes worth revisiting."""
    sparks = tree.detect_sparks(list(keywords), policy)
    if as_json:
        click.echo(json.dumps([s.to_dict() for s in sparks], indent=2, ensure_ascii=False))
        return
    if not sparks:
        click.echo("No sparks found.")
        return
    click.echo(f"{len(sparks)} spark(s):")
    for i, spark in enumerate(sparks, 1):
        click.echo(f"  {i}. {spark.path}")
        click.echo(f"     heat {spark.heat:.1f} | {round(spark.days_idle)} days idle | {spark.reason}")


@heat.command()
@click.option("--force", is_flag=True, help="Run even if the decay interval has not elapsed")
@click.pass_obj
@handle_errors
def decay(tree, force):
    """Run the periodic decay pass."""
    if tree.ledger.apply_decay_pass(force=force):
        click.echo("Decay pass applied.")
    else:
        click.echo("Decay pass not due yet.")


@heat.command(name="list")
@click.pass_obj
@handle_errors
def list_nodes(tree):
    """List tracked nodes, hottest first."""
    doc = tree.ledger.snapshot()
    if not doc.nodes:
        click.echo("No tracked nodes.")
        return
    for path, record in sorted(doc.nodes.items(), key=lambda item: (-item[1].heat, item[0])):
        level = tree.ledger.get_heat_level(record.heat)
        click.echo(f"{record.heat:6.1f}  {level.value:<6}  {record.access_count:4d}  {path}")


@cli.command()
@click.argument("query", required=False)
@click.option("--tags", help="Comma separated tags, all must match")
@click.option("--start", help="Earliest modification date (ISO)")
@click.option("--end", help="Latest modification date (ISO, inclusive)")
@click.option("--sort", type=click.Choice(SORT_MODES), default="relevance")
@click.option("--limit", type=int, default=None, help="Maximum number of results")
@click.option("--json", "as_json", is_flag=True, help="Print results as JSON")
@click.pass_obj
@handle_errors
def search(tree, query, tags, start, end, sort, limit, as_json):
    """Search notes by text, tags and modification date."""
    engine = tree.search_engine(with_heat=(sort == "heat"))
    if limit is None:
        limit = tree.config.search.max_results
    results = engine.advanced_search(
        query=query, tags=_split_tags(tags), start=start, end=end, sort=sort, max_results=limit
    )
    if as_json:
        click.echo(json.dumps([r.to_dict() for r in results], indent=2, ensure_ascii=False))
        return
    if not results:
        click.echo("No results.")
        return
    for i, r in enumerate(results, 1):
        click.echo(f"{i}. {r.path} (relevance {r.relevance:g}, modified {r.modified:%Y-%m-%d %H:%M})")
        if r.preview:
            click.echo(f"   {r.preview}")


@cli.command()
@click.argument("context", nargs=-1, required=True)
@click.option("--json", "as_json", is_flag=True, help="Print candidates as JSON")
@click.pass_obj
@handle_errors
def resurrect(tree, context, as_json):
    """Find archived notes similar to CONTEXT."""
    candidates = tree.resurrect(" ".join(context))
    if as_json:
        click.echo(json.dumps([c.to_dict() for c in candidates], indent=2, ensure_ascii=False))
        return
    if not candidates:
        click.echo("Nothing to resurrect.")
        return
    for c in candidates:
        click.echo(f"{c.path}  similarity {c.similarity:.3f}  (heat at archival {c.original_heat:.1f})")


@cli.command()
@click.argument("topic")
@click.argument("content")
@click.option("--tags", help="Comma separated tags")
@click.pass_obj
@handle_errors
def save(tree, topic, content, tags):
    """Save CONTENT as a new note under TOPIC."""
    path = tree.save_note(content, topic, _split_tags(tags))
    click.echo(f"Saved {path}")


def main():
    cli()


if __name__ == "__main__":
    main()
