"""CLI entrypoint for compiling and trying out rule conditions."""

from __future__ import annotations

import logging
import random

import typer
from rich import print
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from mc_rules.attributes import AttributeMap
from mc_rules.config import settings
from mc_rules.evaluator import CHECK_ORDER, SHARED_RANDOM, RuleEvaluator
from mc_rules.keys import BLOCKOFFSET
from mc_rules.snapshot import Snapshot, SnapshotError, build_snapshot, load_rules, load_snapshot
from mc_rules.telemetry import CollectingDiagnostics

app = typer.Typer(help="Minecraft rule condition compiler")
console = Console()


@app.callback()
def main(log_level: str = typer.Option(None, help="Logging level (defaults to MC_RULES_LOG_LEVEL)")) -> None:
    logging.basicConfig(
        level=(log_level or settings.log_level).upper(),
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )
    if settings.random_seed is not None:
        SHARED_RANDOM.seed(settings.random_seed)


def _load_snapshot(path: str | None) -> Snapshot:
    try:
        if path is None:
            return build_snapshot({}, default_capabilities=settings.capabilities)
        return load_snapshot(path, default_capabilities=settings.capabilities)
    except SnapshotError as exc:
        print({"error": str(exc)})
        raise typer.Exit(code=2)


def _load_rules(path: str) -> list[tuple[str, dict]]:
    try:
        return load_rules(path)
    except SnapshotError as exc:
        print({"error": str(exc)})
        raise typer.Exit(code=2)


def _compile(
    rule: dict, snapshot: Snapshot, diagnostics: CollectingDiagnostics, rng: random.Random | None = None
) -> RuleEvaluator:
    attributes = AttributeMap.from_mapping(rule, diagnostics)
    return RuleEvaluator(
        attributes,
        registry=snapshot.registry,
        compatibility=snapshot.compatibility,
        diagnostics=diagnostics,
        rng=rng,
    )


@app.command()
def keys() -> None:
    """List condition keys in evaluation order."""
    table = Table(title="Rule condition keys")
    table.add_column("#", justify="right")
    table.add_column("key")
    table.add_column("type")
    table.add_column("requires")
    for index, spec in enumerate(CHECK_ORDER, start=1):
        table.add_row(str(index), spec.key.name, spec.key.type.value, spec.capability.label if spec.capability else "")
    table.add_row("", BLOCKOFFSET.name, BLOCKOFFSET.type.value, "modifies 'block'")
    console.print(table)


@app.command("compile")
def compile_rules(
    rules_file: str = typer.Argument(..., help="JSON file with one rule object or a list of rules"),
    snapshot_file: str = typer.Option(None, "--snapshot", help="Snapshot providing the item/block registry"),
) -> None:
    """Compile rules and report which checks survive."""
    snapshot = _load_snapshot(snapshot_file)
    failed = False
    for name, rule in _load_rules(rules_file):
        diagnostics = CollectingDiagnostics()
        evaluator = _compile(rule, snapshot, diagnostics)
        failed = failed or bool(diagnostics.errors)
        print(
            {
                "rule": name,
                "checks": [key.name for key in evaluator.compiled_keys],
                "errors": diagnostics.errors,
                "warnings": diagnostics.warnings,
            }
        )
    if failed:
        raise typer.Exit(code=1)


@app.command()
def evaluate(
    rules_file: str = typer.Argument(..., help="JSON file with one rule object or a list of rules"),
    snapshot_file: str = typer.Argument(..., help="Snapshot describing the event to match"),
    seed: int = typer.Option(None, help="Seed for 'random' checks"),
) -> None:
    """Match every rule against the event in a snapshot."""
    snapshot = _load_snapshot(snapshot_file)
    if snapshot.event is None:
        print({"error": f"Snapshot {snapshot_file} has no 'event' section"})
        raise typer.Exit(code=2)

    rng = random.Random(seed) if seed is not None else None
    for name, rule in _load_rules(rules_file):
        diagnostics = CollectingDiagnostics()
        evaluator = _compile(rule, snapshot, diagnostics, rng)
        print(
            {
                "rule": name,
                "matched": evaluator.match(snapshot.event, snapshot.query),
                "checks": [key.name for key in evaluator.compiled_keys],
                "errors": diagnostics.errors,
                "warnings": diagnostics.warnings,
            }
        )


if __name__ == "__main__":
    app()
