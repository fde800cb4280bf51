"""Application service: Search Stock use case (query).

A query carrying the alias marker searches the stash and the archive
entries that came out of the stash; any other query searches the
active-stock tables and the rest of the archive.
"""

from __future__ import annotations

from medledger.application.dto import ArchivedLineDTO, SearchResultDTO, StockLineDTO
from medledger.domain.model.identity import Visibility, resolve_visibility
from medledger.domain.model.item import Item
from medledger.domain.model.layout import LedgerLayout
from medledger.domain.repository.table_store import TableStore
from medledger.domain.service.stock_query import StockQuery


class SearchStockHandler:

    def __init__(self, store: TableStore, layout: LedgerLayout) -> None:
        self._layout = layout
        self._query = StockQuery(store, layout)

    async def handle(self, raw_query: str) -> SearchResultDTO:
        visibility, query = resolve_visibility(raw_query, self._layout.alias_marker)
        private = visibility is Visibility.PRIVATE

        items = [item async for item in self._query.find_items(query, visibility)]
        if not private:
            items = StockQuery.sort_for_display(items, await self._query.list_locations())
        archived = await self._query.find_archived(query, stash_only=private) if query else []

        return SearchResultDTO(
            query=query,
            visibility=visibility,
            items=[self._to_line(item) for item in items],
            archived=[
                ArchivedLineDTO(
                    name=entry.name,
                    dose=entry.dose,
                    last_location=entry.last_location,
                )
                for entry in archived
            ],
        )

    async def row(self, table: str, position: int) -> StockLineDTO | None:
        """The row currently at *position*, for row-reference requests."""
        known_tables = (*self._layout.active_tables, self._layout.stash_table)
        if table not in known_tables:
            return None
        item = await self._query.item_at(table, position)
        return self._to_line(item) if item is not None else None

    # --- Mapping --------------------------------------------------------------

    @staticmethod
    def _to_line(item: Item) -> StockLineDTO:
        return StockLineDTO(
            table=item.table,
            position=item.position,
            name=item.name,
            dose=item.dose,
            location=item.location,
            quantity=item.quantity,
        )
