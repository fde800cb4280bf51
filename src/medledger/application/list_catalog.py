"""Application service: catalog listings (query).

Names, doses and locations feed the choice lists of the add and restock
forms.
"""

from __future__ import annotations

from medledger.domain.model.identity import Visibility
from medledger.domain.model.layout import LedgerLayout
from medledger.domain.repository.table_store import TableStore
from medledger.domain.service.stock_query import StockQuery


class ListCatalogHandler:

    def __init__(self, store: TableStore, layout: LedgerLayout) -> None:
        self._query = StockQuery(store, layout)

    async def names(self, visibility: Visibility = Visibility.NORMAL) -> list[str]:
        return await self._query.list_names(visibility)

    async def doses(self, name: str, visibility: Visibility = Visibility.NORMAL) -> list[str]:
        return await self._query.list_doses(name, visibility)

    async def locations(self) -> list[str]:
        return await self._query.list_locations()

    async def archived(self, query: str = "", stash_only: bool = False) -> list[tuple[str, str, str]]:
        return [
            (entry.name, entry.dose, entry.last_location)
            for entry in await self._query.find_archived(query, stash_only)
        ]
