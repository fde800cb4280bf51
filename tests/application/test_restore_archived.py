"""Integration tests for the RestoreArchived use case."""

import pytest

from medledger.application.dto import OutcomeStatus, RestoreRequest
from medledger.application.restore_archived import RestoreArchivedHandler
from medledger.domain.model.item import ActivityAction
from medledger.domain.model.layout import LedgerLayout
from tests.fakes import FakeActivityLog, make_store

pytestmark = pytest.mark.asyncio

LAYOUT = LedgerLayout()


def _setup(**tables):
    store = make_store(LAYOUT, **tables)
    log = FakeActivityLog()
    return store, log, RestoreArchivedHandler(store, LAYOUT, log)


class TestRestore:

    async def test_restore_to_chosen_location(self):
        store, log, handler = _setup(archive=[["Zinc", "5mg", "Shelf"]])

        outcome = await handler.handle(
            RestoreRequest("Zinc", "5mg", "Shelf", 3, chosen_location="Closet B")
        )

        assert outcome.status is OutcomeStatus.APPLIED
        assert outcome.location == "Closet B"
        assert store.rows("Archive") == []
        assert store.rows("Closet Meds") == [["Zinc", "5mg", "Closet B", "3"]]
        [record] = log.entries
        assert (record.action, record.location, record.quantity) == (
            ActivityAction.ADD, "Closet B", 3,
        )

    async def test_missing_chosen_location_uses_last_location(self):
        store, _, handler = _setup(archive=[["Zinc", "5mg", "Shelf"]])

        await handler.handle(RestoreRequest("Zinc", "5mg", "Shelf", 3))

        assert store.rows("File Meds") == [["Zinc", "5mg", "Shelf", "3"]]

    async def test_restore_merges_into_existing_row(self):
        store, _, handler = _setup(
            file_meds=[["Zinc", "5mg", "Shelf", "1"]],
            archive=[["Zinc", "5mg", "Shelf"]],
        )

        await handler.handle(RestoreRequest("Zinc", "5mg", "Shelf", 3, chosen_location="Shelf"))

        assert store.rows("File Meds") == [["Zinc", "5mg", "Shelf", "4"]]

    async def test_stash_items_return_to_stash(self):
        store, log, handler = _setup(archive=[["Ibuprofen", "800mg", "Stash"]])

        await handler.handle(
            RestoreRequest("Ibuprofen", "800mg", "Stash", 2, chosen_location="Cabinet 1")
        )

        assert store.rows("Stash") == [["Ibuprofen", "800mg", "2"]]
        assert store.rows("File Meds") == []
        assert log.entries[0].location == "Stash"
        assert not {"File Meds", "Closet Meds"} & store.touched()

    async def test_all_duplicates_are_deleted_highest_first(self):
        store, log, handler = _setup(
            archive=[
                ["Zinc", "5mg", "Shelf"],
                ["Aspirin", "81mg", "Shelf"],
                ["zinc", "5MG", "shelf"],
            ]
        )
        deleted = []
        original = store.delete_rows

        async def spy(table_id, start, end):
            deleted.append(start)
            await original(table_id, start, end)

        store.delete_rows = spy

        await handler.handle(RestoreRequest("Zinc", "5mg", "Shelf", 2))

        assert deleted == [4, 2]
        assert store.rows("Archive") == [["Aspirin", "81mg", "Shelf"]]
        assert store.rows("File Meds") == [["Zinc", "5mg", "Shelf", "2"]]
        assert len(log.entries) == 1

    async def test_repeat_restore_is_a_no_op(self):
        store, log, handler = _setup(archive=[["Zinc", "5mg", "Shelf"]])
        request = RestoreRequest("Zinc", "5mg", "Shelf", 3)

        await handler.handle(request)
        again = await handler.handle(request)

        assert again.status is OutcomeStatus.NOT_FOUND
        assert store.rows("File Meds") == [["Zinc", "5mg", "Shelf", "3"]]
        assert len(log.entries) == 1

    async def test_non_positive_quantity_is_skipped(self):
        store, log, handler = _setup(archive=[["Zinc", "5mg", "Shelf"]])

        outcome = await handler.handle(RestoreRequest("Zinc", "5mg", "Shelf", 0))

        assert outcome.status is OutcomeStatus.SKIPPED
        assert store.rows("Archive") == [["Zinc", "5mg", "Shelf"]]
        assert store.calls == []
