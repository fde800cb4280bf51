"""Application service: Restore Archived Item use case.

Brings a depleted item back into stock. Every archive row carrying the
same name, dose and last location is removed (highest position first),
then the restock quantity is merged into or appended to stock.

Items archived out of the stash always return to the stash, whatever
location the caller offered.
"""

from __future__ import annotations

import structlog

from medledger.application.dto import ItemOutcome, OutcomeStatus, RestoreRequest
from medledger.domain.exceptions import EntityNotFoundError, StoreUnavailable
from medledger.domain.model.identity import Visibility
from medledger.domain.model.item import ActivityAction, ActivityRecord
from medledger.domain.model.layout import LedgerLayout
from medledger.domain.model.value_objects import ItemKey
from medledger.domain.repository.activity_log import ActivityLog
from medledger.domain.repository.table_store import TableStore
from medledger.domain.service.stock_query import StockQuery
from medledger.domain.service.stock_writer import StockWriter

logger = structlog.get_logger(__name__)


class RestoreArchivedHandler:

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

    async def handle(self, request: RestoreRequest) -> ItemOutcome:
        archived_key = ItemKey(request.name, request.dose, request.last_location)
        log = logger.bind(item=str(archived_key), quantity=request.quantity)

        def outcome(status: OutcomeStatus, location: str, message: str = "") -> ItemOutcome:
            return ItemOutcome(
                status, request.name, request.dose, location, request.quantity, message
            )

        if request.quantity <= 0:
            log.info("restore_skipped", reason="nothing to add")
            return outcome(OutcomeStatus.SKIPPED, request.last_location, "nothing to add")

        try:
            entries = [
                entry
                for entry in await self._query.archived_rows(strict=True)
                if entry.key.same_as(archived_key)
            ]
            if not entries:
                log.info("restore_nothing_archived")
                return outcome(
                    OutcomeStatus.NOT_FOUND,
                    request.last_location,
                    f"{archived_key} is not archived",
                )
            if len(entries) > 1:
                log.warning("restore_duplicate_archive_rows", count=len(entries))

            await self._writer.delete_archived(entries)

            if self._layout.is_stash_location(request.last_location):
                visibility = Visibility.PRIVATE
                target = ItemKey(request.name, request.dose, self._layout.stash_label)
            else:
                visibility = Visibility.NORMAL
                location = request.chosen_location.strip() or request.last_location
                target = ItemKey(request.name, request.dose, location)

            placement = await self._writer.merge_or_append(
                target, request.quantity, visibility
            )
            await self._activity_log.record(
                ActivityRecord(
                    action=ActivityAction.ADD,
                    name=request.name,
                    dose=request.dose,
                    location=placement.location,
                    quantity=request.quantity,
                )
            )
        except EntityNotFoundError as exc:
            log.warning("restore_not_found", error=str(exc))
            return outcome(OutcomeStatus.NOT_FOUND, request.last_location, str(exc))
        except StoreUnavailable as exc:
            log.error("restore_failed", error=str(exc))
            return outcome(OutcomeStatus.FAILED, request.last_location, str(exc))

        log.info("restore_applied", table=placement.table, merged=placement.merged)
        return outcome(OutcomeStatus.APPLIED, placement.location)
