"""Application service: Consume Stock use case.

Takes units out of one or more rows. Items are processed one at a time
in the order supplied; each is independent, so a failing item never
stops the rest of the batch and nothing is rolled back.

Per item the audit record is written *before* the store is touched, so
the activity log reflects what the user asked for even when the row
update or deletion later fails.
"""

from __future__ import annotations

import structlog

from medledger.application.dto import ConsumeRequest, ItemOutcome, OutcomeStatus
from medledger.domain.exceptions import EntityNotFoundError, StoreUnavailable
from medledger.domain.model.identity import normalize
from medledger.domain.model.item import ActivityAction, ActivityRecord
from medledger.domain.model.layout import LedgerLayout
from medledger.domain.model.value_objects import ItemKey
from medledger.domain.repository.activity_log import ActivityLog
from medledger.domain.repository.table_store import TableStore
from medledger.domain.service.stock_query import StockQuery
from medledger.domain.service.stock_writer import StockWriter

logger = structlog.get_logger(__name__)


class ConsumeStockHandler:

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

    async def handle(self, requests: list[ConsumeRequest]) -> list[ItemOutcome]:
        outcomes = []
        for request in requests:
            outcomes.append(await self._consume_one(request))
        return outcomes

    async def _consume_one(self, request: ConsumeRequest) -> ItemOutcome:
        stash = self._layout.is_stash(request.table)
        key = ItemKey(
            request.name,
            request.dose,
            self._layout.stash_label if stash else request.location,
        )

        def outcome(status: OutcomeStatus, quantity: int, message: str = "") -> ItemOutcome:
            return ItemOutcome(status, key.name, key.dose, key.location, quantity, message)

        skip_reason = self._skip_reason(request)
        if skip_reason:
            logger.info("consume_skipped", item=request.name, reason=skip_reason)
            return outcome(OutcomeStatus.SKIPPED, request.take, skip_reason)

        new_quantity = max(0, request.known_quantity - request.take)
        log = logger.bind(
            table=request.table,
            position=request.position,
            item=request.name,
            take=request.take,
            new_quantity=new_quantity,
        )
        try:
            if not key.dose or not key.location:
                key = await self._complete_key(key, request)

            await self._activity_log.record(
                ActivityRecord(
                    action=ActivityAction.REMOVE,
                    name=key.name,
                    dose=key.dose,
                    location=key.location,
                    quantity=request.take,
                )
            )

            item = await self._query.locate(key, request.table, hint=request.position)
            if item is None:
                log.warning("consume_row_missing")
                return outcome(
                    OutcomeStatus.NOT_FOUND,
                    request.take,
                    f"{key} is no longer in {request.table}",
                )
            if item.position != request.position:
                log = log.bind(position=item.position)
                log.info("consume_row_moved", previous=request.position)

            if new_quantity > 0:
                log.info("consume_update")
                await self._writer.set_quantity(item, new_quantity)
            else:
                log.info("consume_archive")
                await self._writer.archive(item)
                await self._writer.delete_item(item)
        except EntityNotFoundError as exc:
            log.warning("consume_not_found", error=str(exc))
            return outcome(OutcomeStatus.NOT_FOUND, request.take, str(exc))
        except StoreUnavailable as exc:
            log.error("consume_failed", error=str(exc))
            return outcome(OutcomeStatus.FAILED, request.take, str(exc))

        return outcome(OutcomeStatus.APPLIED, request.take)

    def _skip_reason(self, request: ConsumeRequest) -> str:
        if request.take <= 0:
            return "nothing to take"
        if not request.name or not request.name.strip():
            return "missing item name"
        if request.position < 2:
            return f"invalid row position {request.position}"
        known_tables = (*self._layout.active_tables, self._layout.stash_table)
        if request.table not in known_tables:
            return f"unknown table '{request.table}'"
        return ""

    async def _complete_key(self, key: ItemKey, request: ConsumeRequest) -> ItemKey:
        """Fill a missing dose or location from the row at the hinted position.

        Only a row carrying the same name is trusted; otherwise the key is
        returned unchanged and the lookup that follows reports the miss.
        """
        row = await self._query.item_at(request.table, request.position, strict=True)
        if row is None or normalize(row.name) != normalize(key.name):
            return key
        if key.dose and not row.key.same_as(key, with_location=False):
            return key
        return ItemKey(key.name, key.dose or row.dose, key.location or row.location)
