"""Typer CLI entrypoint."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path

import typer

from zwthings.core.debug import set_debug_flags
from zwthings.core.errors import ZWThingsError
from zwthings.core.node import Node
from zwthings.core.quirks import load_quirks
from zwthings.core.service import AdapterService
from zwthings.core.snapshot import load_snapshot, replay_snapshot
from zwthings.drivers.memory import RecordingDriver

app = typer.Typer(help="Classify Z-Wave nodes into typed things with properties, actions and events")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at INFO level"),
    debug: str | None = typer.Option(
        None,
        "--debug",
        envvar="ZWTHINGS_DEBUG",
        help="Comma separated debug categories: classifier, flow, node, valueId",
    ),
) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose or debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if debug:
        for name in set_debug_flags(debug):
            typer.echo(f"Warning: unknown debug category '{name}'", err=True)


@app.command("quirks")
def list_quirks() -> None:
    """List the quirk catalog, including user overrides."""
    try:
        table = load_quirks()
        for warning in table.warnings:
            typer.echo(f"Warning: {warning}", err=True)
        if not len(table):
            typer.echo("No quirks loaded")
            raise typer.Exit(code=1)

        for quirk in table.quirks:
            products = quirk.match.product_ids or ((quirk.match.product_id,) if quirk.match.product_id else ())
            product = ", ".join(products) or "*"
            typer.echo(f"{quirk.id}: {quirk.match.manufacturer_id} {product}")
            if quirk.description:
                typer.echo(f"  {quirk.description}")
    except ZWThingsError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


def _print_node(node: Node, driver: RecordingDriver) -> None:
    typer.echo(f"Node: {node.id} ({node.name})")
    typer.echo(f"Type: {node.thing_type} [{', '.join(node.capabilities)}]")
    if node.overrides.quirk_ids:
        typer.echo(f"Quirks: {', '.join(node.overrides.quirk_ids)}")
    typer.echo("Properties:")
    for name, binding in node.properties.items():
        if binding.visible:
            unit = f" {binding.descr.unit}" if binding.descr.unit else ""
            typer.echo(f"  {name} = {binding.value}{unit}")
    if node.actions:
        typer.echo(f"Actions: {', '.join(node.actions)}")
    if node.events:
        typer.echo(f"Events: {', '.join(node.events)}")
    writes = driver.writes
    if writes:
        typer.echo("Driver writes:")
        for write in writes:
            typer.echo(f"  {write.describe()}")


@app.command("classify")
def classify(
    snapshot: Path = typer.Argument(..., help="YAML or JSON node snapshot"),
    as_json: bool = typer.Option(False, "--json", help="Print the full node dump as JSON"),
) -> None:
    """Replay a node snapshot and print what the classifier made of it."""
    loop = asyncio.new_event_loop()
    try:
        snap = load_snapshot(snapshot)
        driver = RecordingDriver()
        service = AdapterService(driver, loop=loop)
        for warning in service.load_warnings:
            typer.echo(f"Warning: {warning}", err=True)
        node = replay_snapshot(service, snap)
        if as_json:
            typer.echo(json.dumps(node.as_dict(), indent=2, default=str))
        else:
            _print_node(node, driver)
    except ZWThingsError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None
    finally:
        loop.close()


def run() -> None:
    app()


if __name__ == "__main__":
    run()
