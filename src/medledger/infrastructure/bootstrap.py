"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from pathlib import Path

from medledger.application.ledger import Ledger
from medledger.domain.model.layout import LedgerLayout
from medledger.infrastructure import config
from medledger.infrastructure.persistence.json_table_store import JsonTableStore
from medledger.infrastructure.persistence.table_activity_log import TableActivityLog


def ledger_layout() -> LedgerLayout:
    return LedgerLayout(
        active_tables=(config.FILE_TABLE, config.CLOSET_TABLE),
        default_table=config.FILE_TABLE,
        keyword_table=config.CLOSET_TABLE,
        location_keyword=config.CLOSET_KEYWORD,
        stash_table=config.STASH_TABLE,
        archive_table=config.ARCHIVE_TABLE,
        catalog_table=config.CATALOG_TABLE,
        activity_table=config.ACTIVITY_TABLE,
        stash_label=config.STASH_LABEL,
        alias_marker=config.ALIAS_MARKER,
    )


def table_store(layout: LedgerLayout, data_file: Path | None = None) -> JsonTableStore:
    return JsonTableStore(data_file or config.DATA_FILE, tables=layout.headers())


def ledger(data_file: Path | None = None) -> Ledger:
    layout = ledger_layout()
    store = table_store(layout, data_file)
    return Ledger(store, layout, TableActivityLog(store, layout.activity_table))
