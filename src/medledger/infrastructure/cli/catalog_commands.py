"""CLI commands for catalog listings."""

from __future__ import annotations

import asyncio

import click

from medledger.domain.model.identity import Visibility
from medledger.infrastructure.cli.stock_commands import open_ledger


@click.command("names")
@click.option("--private", is_flag=True, help="List stash names instead.")
@click.pass_obj
def names_list(obj: dict, private: bool) -> None:
    """List every distinct medication name."""
    visibility = Visibility.PRIVATE if private else Visibility.NORMAL
    for name in asyncio.run(open_ledger(obj).catalog.names(visibility)):
        click.echo(name)


@click.command("doses")
@click.argument("name")
@click.pass_obj
def doses_list(obj: dict, name: str) -> None:
    """List the doses stocked for NAME."""
    doses = asyncio.run(open_ledger(obj).catalog.doses(name))
    if not doses:
        click.echo(f"No doses found for '{name}'.")
        return
    for dose in doses:
        click.echo(dose)


@click.command("locations")
@click.pass_obj
def locations_list(obj: dict) -> None:
    """List storage locations in catalog order."""
    locations = asyncio.run(open_ledger(obj).catalog.locations())
    if not locations:
        click.echo("No locations available.")
        return
    for location in locations:
        click.echo(location)


@click.command("archive")
@click.argument("query", default="")
@click.option("--stash", is_flag=True, help="Show items archived from the stash.")
@click.pass_obj
def archive_list(obj: dict, query: str, stash: bool) -> None:
    """List archived (out of stock) medications."""
    entries = asyncio.run(open_ledger(obj).catalog.archived(query, stash))
    if not entries:
        click.echo("Archive is empty.")
        return
    click.echo(f"{'Name':<20} {'Dose':<10} {'Last Location':<16}")
    click.echo("-" * 48)
    for name, dose, last_location in entries:
        click.echo(f"{name:<20} {dose:<10} {last_location:<16}")
