"""The ledger facade: one entry point per ledger operation.

Built once by the composition root and shared for the lifetime of the
process. Mutating operations run under one lock so that two operations
never interleave mid-mutation inside this process; other processes
writing the same tables are not coordinated.
"""

from __future__ import annotations

import asyncio

from medledger.application.add_item import AddItemHandler
from medledger.application.consume_stock import ConsumeStockHandler
from medledger.application.dto import (
    ConsumeRequest,
    ItemOutcome,
    NewItemRequest,
    RestockRequest,
    RestoreRequest,
    SearchResultDTO,
    StockLineDTO,
)
from medledger.application.list_catalog import ListCatalogHandler
from medledger.application.restock_stock import RestockStockHandler
from medledger.application.restore_archived import RestoreArchivedHandler
from medledger.application.search_stock import SearchStockHandler
from medledger.domain.model.layout import LedgerLayout
from medledger.domain.repository.activity_log import ActivityLog
from medledger.domain.repository.table_store import TableStore


class Ledger:

    def __init__(
        self,
        store: TableStore,
        layout: LedgerLayout,
        activity_log: ActivityLog,
    ) -> None:
        self.layout = layout
        self._lock = asyncio.Lock()
        self._consume = ConsumeStockHandler(store, layout, activity_log)
        self._restock = RestockStockHandler(store, layout, activity_log)
        self._restore = RestoreArchivedHandler(store, layout, activity_log)
        self._add = AddItemHandler(store, layout, activity_log)
        self._search = SearchStockHandler(store, layout)
        self.catalog = ListCatalogHandler(store, layout)

    async def search(self, raw_query: str) -> SearchResultDTO:
        return await self._search.handle(raw_query)

    async def describe_row(self, table: str, position: int) -> StockLineDTO | None:
        return await self._search.row(table, position)

    async def consume(self, requests: list[ConsumeRequest]) -> list[ItemOutcome]:
        async with self._lock:
            return await self._consume.handle(requests)

    async def restock(self, requests: list[RestockRequest]) -> list[ItemOutcome]:
        async with self._lock:
            return await self._restock.handle_many(requests)

    async def restore(self, request: RestoreRequest) -> ItemOutcome:
        async with self._lock:
            return await self._restore.handle(request)

    async def add_item(self, request: NewItemRequest) -> ItemOutcome:
        async with self._lock:
            return await self._add.handle(request)
