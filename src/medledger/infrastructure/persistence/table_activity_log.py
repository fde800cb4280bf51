"""ActivityLog that appends audit entries to a table of the store."""

from __future__ import annotations

from medledger.domain.model.item import ActivityRecord
from medledger.domain.model.layout import ACTIVITY_COLUMNS
from medledger.domain.repository.activity_log import ActivityLog
from medledger.domain.repository.table_store import TableStore


class TableActivityLog(ActivityLog):

    def __init__(self, store: TableStore, table: str) -> None:
        self._store = store
        self._table = table

    async def record(self, entry: ActivityRecord) -> None:
        await self._store.append_row(self._table, ACTIVITY_COLUMNS, entry.to_row())
