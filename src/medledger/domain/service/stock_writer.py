"""Domain service: row-level stock mutations.

Every write the ledger performs goes through here so that table routing,
quantity-column addressing, resorting and multi-row deletion follow the
same rules for every operation.

Multi-row deletion rule: when several rows of one table must go, all
positions are computed first and deleted from the highest to the lowest.
Deleting upwards would shift the remaining rows and invalidate the
positions that were already computed.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

import structlog

from medledger.domain.exceptions import EntityNotFoundError
from medledger.domain.model.identity import Visibility
from medledger.domain.model.item import ArchivedItem, Item
from medledger.domain.model.layout import (
    ACTIVE_COLUMNS,
    ARCHIVE_COLUMNS,
    LOCATION_INDEX,
    NAME_INDEX,
    LedgerLayout,
)
from medledger.domain.model.value_objects import ItemKey
from medledger.domain.repository.table_store import SortKey, TableStore
from medledger.domain.service.stock_query import StockQuery

logger = structlog.get_logger(__name__)

RESORT_KEYS = [SortKey(LOCATION_INDEX), SortKey(NAME_INDEX)]


async def delete_rows_descending(
    store: TableStore, table_id: int, positions: Iterable[int]
) -> list[int]:
    """Delete single rows highest position first. Returns the order used."""
    order = sorted(set(positions), reverse=True)
    for position in order:
        await store.delete_rows(table_id, position, position + 1)
    return order


@dataclass(frozen=True)
class Placement:
    """Where a restocked quantity ended up."""

    table: str
    location: str
    quantity: int
    merged: bool


class StockWriter:

    def __init__(self, store: TableStore, layout: LedgerLayout, query: StockQuery) -> None:
        self._store = store
        self._layout = layout
        self._query = query

    async def set_quantity(self, item: Item, quantity: int) -> None:
        column = self._layout.quantity_column(item.table)
        await self._store.update_cell(item.table, column, item.position, str(quantity))

    async def append_item(self, table: str, key: ItemKey, quantity: int) -> None:
        """Append a fresh row; active tables are resorted afterwards."""
        values = self._layout.row_values(table, key.name, key.dose, key.location, quantity)
        await self._store.append_row(table, self._layout.columns(table), values)
        if not self._layout.is_stash(table):
            await self.resort(table)

    async def resort(self, table: str) -> None:
        """Sort a table by location then name, header excluded."""
        ref = await self._store.resolve(table)
        if ref is None:
            raise EntityNotFoundError(f"Table '{table}' not found")
        await self._store.sort_range(ref.id, 2, ACTIVE_COLUMNS, RESORT_KEYS)

    async def delete_item(self, item: Item) -> None:
        ref = await self._store.resolve(item.table)
        if ref is None:
            raise EntityNotFoundError(f"Table '{item.table}' not found")
        await self._store.delete_rows(ref.id, item.position, item.position + 1)

    async def archive(self, item: Item) -> None:
        await self._store.append_row(
            self._layout.archive_table,
            ARCHIVE_COLUMNS,
            [item.name, item.dose, item.location],
        )

    async def delete_archived(self, entries: list[ArchivedItem]) -> list[int]:
        """Remove archive rows, highest position first."""
        if not entries:
            return []
        ref = await self._store.resolve(self._layout.archive_table)
        if ref is None:
            raise EntityNotFoundError(
                f"Table '{self._layout.archive_table}' not found"
            )
        return await delete_rows_descending(
            self._store, ref.id, (entry.position for entry in entries)
        )

    async def merge_or_append(
        self,
        key: ItemKey,
        quantity: int,
        visibility: Visibility,
        *,
        strict_dose: bool = False,
    ) -> Placement:
        """Add *quantity* to the row carrying *key*, or append a new row.

        Private keys always land in the stash under the stash label.
        """
        if visibility is Visibility.PRIVATE:
            key = ItemKey(key.name, key.dose, self._layout.stash_label)
        match = await self._query.find_match(key, visibility, strict_dose=strict_dose)
        if match is not None:
            total = match.quantity + quantity
            await self.set_quantity(match, total)
            return Placement(match.table, match.location, total, merged=True)
        return await self.append_new(key, quantity, visibility)

    async def append_new(
        self, key: ItemKey, quantity: int, visibility: Visibility
    ) -> Placement:
        if visibility is Visibility.PRIVATE:
            table = self._layout.stash_table
            key = ItemKey(key.name, key.dose, self._layout.stash_label)
        else:
            table = self._layout.table_for_location(key.location)
        logger.info("row_appended", table=table, item=str(key), quantity=quantity)
        await self.append_item(table, key, quantity)
        return Placement(table, key.location, quantity, merged=False)
