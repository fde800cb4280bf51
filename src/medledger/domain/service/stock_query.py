"""Domain service: Stock Query.

Reads the active-stock tables, the stash table and the archive into
Items and ArchivedItems. Search paths are forgiving: a table that cannot
be read is logged and treated as empty so one failing table never hides
the others. Lookups that guard a write (``find_match``, ``locate``,
``archived_rows(strict=True)``) propagate StoreUnavailable instead, since
"no rows" there would make the ledger append a duplicate.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterable

import structlog

from medledger.domain.exceptions import StoreUnavailable
from medledger.domain.model.identity import Visibility, normalize
from medledger.domain.model.item import ArchivedItem, Item
from medledger.domain.model.layout import ARCHIVE_COLUMNS, CATALOG_COLUMNS, LedgerLayout
from medledger.domain.model.value_objects import ItemKey, coerce_count
from medledger.domain.repository.table_store import TableStore

logger = structlog.get_logger(__name__)


def _cell(row: list[str], index: int) -> str:
    if index < len(row) and row[index] is not None:
        return str(row[index]).strip()
    return ""


class StockQuery:

    def __init__(self, store: TableStore, layout: LedgerLayout) -> None:
        self._store = store
        self._layout = layout

    # --- Search ---------------------------------------------------------------

    async def find_items(
        self, query: str, visibility: Visibility
    ) -> AsyncIterator[Item]:
        """Yield items whose name contains *query*, table by table.

        A blank query yields nothing.
        """
        needle = normalize(query)
        if not needle:
            return
        for table in self._layout.tables_for(visibility):
            for item in await self.items_in(table):
                if needle in normalize(item.name):
                    yield item

    async def find_archived(self, query: str, stash_only: bool) -> list[ArchivedItem]:
        """Archived items matching *query* on one side of the stash split.

        ``stash_only=True`` keeps entries archived out of the stash;
        ``False`` keeps everything else. A blank query matches all names.
        """
        needle = normalize(query)
        return [
            archived
            for archived in await self.archived_rows()
            if needle in normalize(archived.name)
            and self._layout.is_stash_location(archived.last_location) == stash_only
        ]

    # --- Write-path lookups ---------------------------------------------------

    async def find_match(
        self,
        key: ItemKey,
        visibility: Visibility,
        *,
        strict_dose: bool = False,
    ) -> Item | None:
        """First item whose normalized key equals *key*.

        Tables are scanned in declaration order, rows in table order. In
        the stash only name and dose are compared.
        """
        with_location = visibility is Visibility.NORMAL
        for table in self._layout.tables_for(visibility):
            for item in await self.items_in(table, strict=True):
                if item.key.same_as(
                    key, strict_dose=strict_dose, with_location=with_location
                ):
                    return item
        return None

    async def locate(self, key: ItemKey, table: str, hint: int | None = None) -> Item | None:
        """Refresh the position of the row carrying *key* in *table*.

        The hinted position wins when its row still carries the key;
        otherwise the first row with the key is returned.
        """
        with_location = not self._layout.is_stash(table)
        items = await self.items_in(table, strict=True)
        candidates = [
            item for item in items
            if item.key.same_as(key, with_location=with_location)
        ]
        for item in candidates:
            if item.position == hint:
                return item
        return candidates[0] if candidates else None

    async def item_at(self, table: str, position: int, *, strict: bool = False) -> Item | None:
        for item in await self.items_in(table, strict=strict):
            if item.position == position:
                return item
        return None

    # --- Table readers --------------------------------------------------------

    async def items_in(self, table: str, *, strict: bool = False) -> list[Item]:
        rows = await self._read(table, self._layout.columns(table), strict=strict)
        stash = self._layout.is_stash(table)
        items: list[Item] = []
        for position, row in enumerate(rows[1:], start=2):
            name = _cell(row, 0)
            if not name:
                continue
            if stash:
                location, quantity = self._layout.stash_label, _cell(row, 2)
            else:
                location, quantity = _cell(row, 2), _cell(row, 3)
            items.append(
                Item(
                    name=name,
                    dose=_cell(row, 1),
                    location=location,
                    quantity=coerce_count(quantity),
                    table=table,
                    position=position,
                )
            )
        return items

    async def archived_rows(self, *, strict: bool = False) -> list[ArchivedItem]:
        rows = await self._read(self._layout.archive_table, ARCHIVE_COLUMNS, strict=strict)
        return [
            ArchivedItem(
                name=_cell(row, 0),
                dose=_cell(row, 1),
                last_location=_cell(row, 2),
                position=position,
            )
            for position, row in enumerate(rows[1:], start=2)
            if _cell(row, 0)
        ]

    # --- Listings -------------------------------------------------------------

    async def list_names(self, visibility: Visibility) -> list[str]:
        """Distinct item names; the first spelling seen wins."""
        seen: dict[str, str] = {}
        for table in self._layout.tables_for(visibility):
            for item in await self.items_in(table):
                seen.setdefault(normalize(item.name), item.name)
        return sorted(seen.values(), key=normalize)

    async def list_doses(self, name: str, visibility: Visibility) -> list[str]:
        wanted = normalize(name)
        seen: dict[str, str] = {}
        for table in self._layout.tables_for(visibility):
            for item in await self.items_in(table):
                if normalize(item.name) == wanted and item.dose:
                    seen.setdefault(normalize(item.dose), item.dose)
        return list(seen.values())

    async def list_locations(self) -> list[str]:
        """The location catalog, in catalog order.

        Falls back to the distinct locations used by the active tables when
        the catalog is empty or unreadable.
        """
        rows = await self._read(self._layout.catalog_table, CATALOG_COLUMNS)
        catalog = _distinct(_cell(row, 0) for row in rows[1:])
        if catalog:
            return catalog
        locations: list[str] = []
        for table in self._layout.active_tables:
            locations.extend(item.location for item in await self.items_in(table))
        return _distinct(locations)

    @staticmethod
    def sort_for_display(items: Iterable[Item], catalog: list[str]) -> list[Item]:
        """Order by catalog position, then name.

        Locations missing from the catalog sort after every catalog entry.
        """
        rank = {normalize(location): i for i, location in enumerate(catalog)}
        return sorted(
            items,
            key=lambda item: (
                rank.get(normalize(item.location), len(rank)),
                normalize(item.location),
                normalize(item.name),
            ),
        )

    # --- Internal helpers -----------------------------------------------------

    async def _read(self, table: str, column_range: str, *, strict: bool = False) -> list[list[str]]:
        try:
            return await self._store.read_range(table, column_range)
        except StoreUnavailable as exc:
            if strict:
                raise
            logger.warning("table_read_failed", table=table, error=str(exc))
            return []


def _distinct(values: Iterable[str]) -> list[str]:
    seen: dict[str, str] = {}
    for value in values:
        if value:
            seen.setdefault(normalize(value), value)
    return list(seen.values())
