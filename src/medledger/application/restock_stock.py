"""Application service: Restock use case.

Adds units to an existing row or appends a new one:

1. A row the caller already located (quick-restock from search results)
   is updated in place once its position has been refreshed.
2. Otherwise the first row with the same name, dose and location wins.
3. An item that only exists in the archive is restored.
4. Anything else becomes a new row in the table picked by its location,
   which is then resorted.

Private requests never leave the stash table and match on name and dose.
"""

from __future__ import annotations

import structlog

from medledger.application.dto import (
    ItemOutcome,
    OutcomeStatus,
    RestockRequest,
    RestoreRequest,
)
from medledger.application.restore_archived import RestoreArchivedHandler
from medledger.domain.exceptions import EntityNotFoundError, StoreUnavailable
from medledger.domain.model.identity import Visibility
from medledger.domain.model.item import ActivityAction, ActivityRecord, ArchivedItem
from medledger.domain.model.layout import LedgerLayout
from medledger.domain.model.value_objects import ItemKey
from medledger.domain.repository.activity_log import ActivityLog
from medledger.domain.repository.table_store import TableStore
from medledger.domain.service.stock_query import StockQuery
from medledger.domain.service.stock_writer import StockWriter

logger = structlog.get_logger(__name__)


class RestockStockHandler:

    def __init__(
        self,
        store: TableStore,
        layout: LedgerLayout,
        activity_log: ActivityLog,
    ) -> None:
        self._layout = layout
        self._activity_log = activity_log
        self._query = StockQuery(store, layout)
        self._writer = StockWriter(store, layout, self._query)
        self._restore = RestoreArchivedHandler(store, layout, activity_log)

    async def handle_many(self, requests: list[RestockRequest]) -> list[ItemOutcome]:
        outcomes = []
        for request in requests:
            outcomes.append(await self.handle(request))
        return outcomes

    async def handle(self, request: RestockRequest) -> ItemOutcome:
        private = request.visibility is Visibility.PRIVATE
        location = self._layout.stash_label if private else request.location.strip()
        key = ItemKey(request.name.strip(), request.dose.strip(), location)
        log = logger.bind(item=str(key), quantity=request.quantity)

        def outcome(status: OutcomeStatus, message: str = "", where: str = location) -> ItemOutcome:
            return ItemOutcome(status, key.name, key.dose, where, request.quantity, message)

        if request.quantity <= 0:
            log.info("restock_skipped", reason="nothing to add")
            return outcome(OutcomeStatus.SKIPPED, "nothing to add")
        if not key.name or (not private and not key.location):
            log.info("restock_skipped", reason="missing name or location")
            return outcome(OutcomeStatus.SKIPPED, "missing name or location")

        try:
            if request.known is not None and self._table_allowed(request.known.table, request.visibility):
                item = await self._query.locate(
                    key, request.known.table, hint=request.known.position
                )
                if item is not None:
                    await self._writer.set_quantity(
                        item, request.known.quantity + request.quantity
                    )
                    await self._audit(key, request.quantity)
                    log.info("restock_known_row", table=item.table, position=item.position)
                    return outcome(OutcomeStatus.APPLIED)
                log.info("restock_known_row_moved", table=request.known.table)

            match = await self._query.find_match(key, request.visibility)
            if match is not None:
                await self._writer.set_quantity(match, match.quantity + request.quantity)
                await self._audit(key, request.quantity)
                log.info("restock_merged", table=match.table, position=match.position)
                return outcome(OutcomeStatus.APPLIED)

            archived = await self._find_archived(key, request.visibility)
            if archived is not None:
                log.info("restock_from_archive", last_location=archived.last_location)
                return await self._restore.handle(
                    RestoreRequest(
                        name=archived.name,
                        dose=archived.dose,
                        last_location=archived.last_location,
                        quantity=request.quantity,
                        chosen_location=location,
                    )
                )

            placement = await self._writer.append_new(key, request.quantity, request.visibility)
            await self._audit(key, request.quantity)
        except EntityNotFoundError as exc:
            log.warning("restock_not_found", error=str(exc))
            return outcome(OutcomeStatus.NOT_FOUND, str(exc))
        except StoreUnavailable as exc:
            log.error("restock_failed", error=str(exc))
            return outcome(OutcomeStatus.FAILED, str(exc))

        return outcome(OutcomeStatus.APPLIED, where=placement.location)

    def _table_allowed(self, table: str, visibility: Visibility) -> bool:
        return table in self._layout.tables_for(visibility)

    async def _find_archived(self, key: ItemKey, visibility: Visibility) -> ArchivedItem | None:
        private = visibility is Visibility.PRIVATE
        for entry in await self._query.archived_rows(strict=True):
            if (
                self._layout.is_stash_location(entry.last_location) == private
                and entry.key.same_as(key, with_location=False)
            ):
                return entry
        return None

    async def _audit(self, key: ItemKey, quantity: int) -> None:
        await self._activity_log.record(
            ActivityRecord(
                action=ActivityAction.ADD,
                name=key.name,
                dose=key.dose,
                location=key.location,
                quantity=quantity,
            )
        )
