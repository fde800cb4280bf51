"""Application service: Add Item use case.

A user explicitly declares an item. If a row with the same name, dose
and location already exists the quantity is merged into it; doses are
compared with all whitespace removed, so "5 mg" and "5mg" are the same
dose here. A genuinely new item first clears any archive entries for the
same name and dose, so a live row and a stale archive entry never
coexist.
"""

from __future__ import annotations

import structlog

from medledger.application.dto import ItemOutcome, NewItemRequest, OutcomeStatus
from medledger.domain.exceptions import EntityNotFoundError, StoreUnavailable, ValidationError
from medledger.domain.model.identity import Visibility
from medledger.domain.model.item import ActivityAction, ActivityRecord
from medledger.domain.model.layout import LedgerLayout
from medledger.domain.model.value_objects import ItemKey, Quantity
from medledger.domain.repository.activity_log import ActivityLog
from medledger.domain.repository.table_store import TableStore
from medledger.domain.service.stock_query import StockQuery
from medledger.domain.service.stock_writer import StockWriter

logger = structlog.get_logger(__name__)


class AddItemHandler:

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

    async def handle(self, request: NewItemRequest) -> ItemOutcome:
        """Declare an item.

        Raises ValidationError for a blank name, dose or location, or a
        non-positive quantity. Store failures are reported in the outcome.
        """
        private = request.visibility is Visibility.PRIVATE
        key = self._validated_key(request, private)
        quantity = Quantity(request.quantity).value
        log = logger.bind(item=str(key), quantity=quantity, private=private)

        try:
            match = await self._query.find_match(key, request.visibility, strict_dose=True)
            if match is not None:
                await self._writer.set_quantity(match, match.quantity + quantity)
                location = match.location
                log.info("add_item_merged", table=match.table, position=match.position)
            else:
                stale = [
                    entry
                    for entry in await self._query.archived_rows(strict=True)
                    if self._layout.is_stash_location(entry.last_location) == private
                    and entry.key.same_as(key, strict_dose=True, with_location=False)
                ]
                if stale:
                    log.info("add_item_clears_archive", count=len(stale))
                    await self._writer.delete_archived(stale)
                placement = await self._writer.append_new(key, quantity, request.visibility)
                location = placement.location

            await self._activity_log.record(
                ActivityRecord(
                    action=ActivityAction.ADD,
                    name=key.name,
                    dose=key.dose,
                    location=location,
                    quantity=quantity,
                )
            )
        except EntityNotFoundError as exc:
            log.warning("add_item_not_found", error=str(exc))
            return ItemOutcome(
                OutcomeStatus.NOT_FOUND, key.name, key.dose, key.location, quantity, str(exc)
            )
        except StoreUnavailable as exc:
            log.error("add_item_failed", error=str(exc))
            return ItemOutcome(
                OutcomeStatus.FAILED, key.name, key.dose, key.location, quantity, str(exc)
            )

        return ItemOutcome(OutcomeStatus.APPLIED, key.name, key.dose, location, quantity)

    def _validated_key(self, request: NewItemRequest, private: bool) -> ItemKey:
        name = (request.name or "").strip()
        dose = (request.dose or "").strip()
        location = self._layout.stash_label if private else (request.location or "").strip()
        if not name:
            raise ValidationError("Medication name is required")
        if not dose:
            raise ValidationError("Dose is required")
        if not location:
            raise ValidationError("Location is required")
        return ItemKey(name, dose, location)
