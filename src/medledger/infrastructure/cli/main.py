from pathlib import Path

import click

from medledger.infrastructure.cli.catalog_commands import (
    archive_list,
    doses_list,
    locations_list,
    names_list,
)
from medledger.infrastructure.cli.stock_commands import (
    stock_add,
    stock_restock,
    stock_restore,
    stock_search,
    stock_use,
)
from medledger.infrastructure.logger import bind_context, configure_logging


@click.group()
@click.option(
    "--data-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Ledger JSON file (defaults to MEDLEDGER_DATA_FILE).",
)
@click.option("--log-level", default=None, help="Log level (defaults to LOG_LEVEL).")
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False),
    default=None,
    help="Also write JSON log lines here (defaults to LOG_FILE).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    data_file: Path | None,
    log_level: str | None,
    log_file: str | None,
) -> None:
    """Medication inventory ledger"""
    configure_logging(level=log_level, log_file=log_file)
    bind_context(command=ctx.invoked_subcommand)
    ctx.obj = {"data_file": data_file}


# Register subcommands
cli.add_command(stock_search)
cli.add_command(stock_use)
cli.add_command(stock_restock)
cli.add_command(stock_add)
cli.add_command(stock_restore)
cli.add_command(names_list)
cli.add_command(doses_list)
cli.add_command(locations_list)
cli.add_command(archive_list)
