"""CLI commands for searching and changing stock."""

from __future__ import annotations

import asyncio

import click

from medledger.application.dto import (
    ConsumeRequest,
    ItemOutcome,
    KnownRow,
    NewItemRequest,
    RestockRequest,
    RestoreRequest,
)
from medledger.application.ledger import Ledger
from medledger.domain.exceptions import DomainException
from medledger.domain.model.identity import resolve_visibility
from medledger.infrastructure.bootstrap import ledger


def open_ledger(obj: dict) -> Ledger:
    try:
        return ledger(obj.get("data_file"))
    except DomainException as exc:
        raise click.ClickException(str(exc))


def _parse_row_ref(raw: str) -> tuple[str, int]:
    """Parse 'File Meds#3' into ('File Meds', 3)."""
    if "#" not in raw:
        raise click.BadParameter(
            f"Invalid row reference '{raw}'. Expected 'Table#Row'."
        )
    table, row = raw.rsplit("#", 1)
    try:
        return table.strip(), int(row)
    except ValueError:
        raise click.BadParameter(f"Invalid row number '{row}' in '{raw}'.")


def _parse_take(raw: str) -> tuple[str, int, int]:
    """Parse 'File Meds#3:2' into ('File Meds', 3, 2)."""
    if ":" not in raw:
        raise click.BadParameter(
            f"Invalid item format '{raw}'. Expected 'Table#Row:Quantity'."
        )
    ref, take = raw.rsplit(":", 1)
    table, position = _parse_row_ref(ref)
    try:
        return table, position, int(take)
    except ValueError:
        raise click.BadParameter(f"Invalid quantity '{take}' in '{raw}'.")


def _echo_outcomes(outcomes: list[ItemOutcome]) -> None:
    for outcome in outcomes:
        line = (
            f"{outcome.status.value:<10} {outcome.name:<20} {outcome.dose:<10} "
            f"{outcome.location:<16} {outcome.quantity:>5}"
        )
        if outcome.message:
            line += f"  ({outcome.message})"
        click.echo(line)


@click.command("search")
@click.argument("name")
@click.pass_obj
def stock_search(obj: dict, name: str) -> None:
    """Search stock by medication name."""
    result = asyncio.run(open_ledger(obj).search(name))

    if not result.items and not result.archived:
        click.echo(f'No results found for "{result.query}".')
        return

    if result.items:
        click.echo(f"{'Row':<16} {'Name':<20} {'Dose':<10} {'Location':<16} {'Qty':>5}")
        click.echo("-" * 71)
        for item in result.items:
            ref = f"{item.table}#{item.position}"
            click.echo(
                f"{ref:<16} {item.name:<20} {item.dose:<10} {item.location:<16} {item.quantity:>5}"
            )
    if result.archived:
        click.echo()
        click.echo("Out of stock:")
        for entry in result.archived:
            click.echo(f"  {entry.name:<20} {entry.dose:<10} {entry.last_location}")


@click.command("use")
@click.argument("items", nargs=-1, required=True)
@click.pass_obj
def stock_use(obj: dict, items: tuple[str, ...]) -> None:
    """Take stock out, e.g. 'File Meds#3:2' 'Stash#2:1'."""
    parsed = [_parse_take(raw) for raw in items]
    service = open_ledger(obj)

    async def run() -> list[ItemOutcome]:
        requests = []
        for table, position, take in parsed:
            row = await service.describe_row(table, position)
            if row is None:
                click.echo(f"No row {table}#{position}; skipped.")
                continue
            requests.append(
                ConsumeRequest(
                    table=row.table,
                    position=row.position,
                    take=take,
                    known_quantity=row.quantity,
                    name=row.name,
                    dose=row.dose,
                    location=row.location,
                )
            )
        return await service.consume(requests)

    _echo_outcomes(asyncio.run(run()))


@click.command("restock")
@click.option("--name", required=True, help="Medication name.")
@click.option("--dose", required=True, help="Dose, e.g. '500mg'.")
@click.option("--location", default="", help="Storage location.")
@click.option("--quantity", required=True, type=int, help="Units to add.")
@click.option("--row", "row_ref", default=None, help="Known row, e.g. 'File Meds#3'.")
@click.pass_obj
def stock_restock(
    obj: dict, name: str, dose: str, location: str, quantity: int, row_ref: str | None
) -> None:
    """Add units to an existing item, restoring or creating it if needed."""
    service = open_ledger(obj)
    visibility, stored_name = resolve_visibility(name, service.layout.alias_marker)

    async def run() -> list[ItemOutcome]:
        known = None
        if row_ref is not None:
            table, position = _parse_row_ref(row_ref)
            row = await service.describe_row(table, position)
            if row is not None:
                known = KnownRow(row.table, row.position, row.quantity)
        request = RestockRequest(
            name=stored_name,
            dose=dose,
            location=location,
            quantity=quantity,
            visibility=visibility,
            known=known,
        )
        return await service.restock([request])

    _echo_outcomes(asyncio.run(run()))


@click.command("add")
@click.option("--name", required=True, help="Medication name.")
@click.option("--dose", required=True, help="Dose, e.g. '500mg'.")
@click.option("--location", default="", help="Storage location.")
@click.option("--quantity", required=True, type=int, help="Units on hand.")
@click.pass_obj
def stock_add(obj: dict, name: str, dose: str, location: str, quantity: int) -> None:
    """Declare a medication (merges into an identical existing row)."""
    service = open_ledger(obj)
    visibility, stored_name = resolve_visibility(name, service.layout.alias_marker)
    request = NewItemRequest(
        name=stored_name,
        dose=dose,
        location=location,
        quantity=quantity,
        visibility=visibility,
    )

    try:
        outcome = asyncio.run(service.add_item(request))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _echo_outcomes([outcome])


@click.command("restore")
@click.option("--name", required=True, help="Archived medication name.")
@click.option("--dose", required=True, help="Archived dose.")
@click.option("--last-location", required=True, help="Location it was archived from.")
@click.option("--quantity", required=True, type=int, help="Units to restock.")
@click.option("--location", default="", help="New location (defaults to the last one).")
@click.pass_obj
def stock_restore(
    obj: dict, name: str, dose: str, last_location: str, quantity: int, location: str
) -> None:
    """Bring an archived medication back into stock."""
    request = RestoreRequest(
        name=name,
        dose=dose,
        last_location=last_location,
        quantity=quantity,
        chosen_location=location,
    )
    outcome = asyncio.run(open_ledger(obj).restore(request))
    _echo_outcomes([outcome])
