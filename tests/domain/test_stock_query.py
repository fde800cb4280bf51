"""Unit tests for the StockQuery domain service."""

import pytest

from medledger.domain.exceptions import StoreUnavailable
from medledger.domain.model.identity import Visibility
from medledger.domain.model.item import Item
from medledger.domain.model.layout import LedgerLayout
from medledger.domain.model.value_objects import ItemKey
from medledger.domain.service.stock_query import StockQuery
from tests.fakes import make_store

pytestmark = pytest.mark.asyncio

LAYOUT = LedgerLayout()


def _query(**tables):
    store = make_store(LAYOUT, **tables)
    return store, StockQuery(store, LAYOUT)


async def _collect(query, text, visibility=Visibility.NORMAL):
    return [item async for item in query.find_items(text, visibility)]


class TestFindItems:

    async def test_union_of_active_tables_in_declaration_order(self):
        _, query = _query(
            file_meds=[["Ibuprofen", "200mg", "Cabinet 1", "10"]],
            closet_meds=[["Ibuprofen", "400mg", "Closet A", "4"]],
        )
        items = await _collect(query, "ibu")
        assert [(i.table, i.position, i.dose) for i in items] == [
            ("File Meds", 2, "200mg"),
            ("Closet Meds", 2, "400mg"),
        ]

    async def test_substring_match_is_normalized(self):
        _, query = _query(
            file_meds=[
                ["Amoxicillin", "500mg", "Cabinet 1", "10"],
                ["Ibuprofen", "200mg", "Cabinet 1", "3"],
            ],
        )
        items = await _collect(query, "  AMOXI ")
        assert [i.name for i in items] == ["Amoxicillin"]
        assert items[0].quantity == 10

    async def test_blank_query_yields_nothing(self):
        _, query = _query(file_meds=[["Ibuprofen", "200mg", "Cabinet 1", "3"]])
        assert await _collect(query, "   ") == []

    async def test_stash_scope_uses_stash_label(self):
        store, query = _query(
            file_meds=[["Ibuprofen", "200mg", "Cabinet 1", "3"]],
            stash=[["Ibuprofen", "800mg", "2"]],
        )
        items = await _collect(query, "ibuprofen", Visibility.PRIVATE)
        assert [(i.table, i.location, i.quantity) for i in items] == [("Stash", "Stash", 2)]
        assert store.touched() == {"Stash"}

    async def test_failing_table_does_not_abort_the_search(self):
        store, query = _query(
            file_meds=[["Ibuprofen", "200mg", "Cabinet 1", "3"]],
            closet_meds=[["Ibuprofen", "400mg", "Closet A", "4"]],
        )
        store.fail_on("read_range", "File Meds")
        items = await _collect(query, "ibu")
        assert [i.table for i in items] == ["Closet Meds"]

    async def test_blank_rows_are_skipped_but_keep_positions(self):
        _, query = _query(
            file_meds=[["", "", "", ""], ["Zinc", "5mg", "Shelf", "2"]],
        )
        items = await _collect(query, "zinc")
        assert items[0].position == 3


class TestFindArchived:

    async def test_stash_flag_partitions_the_archive(self):
        _, query = _query(
            archive=[
                ["Ibuprofen", "200mg", "Cabinet 1"],
                ["Ibuprofen", "800mg", "Stash"],
                ["Zinc", "5mg", "Shelf"],
            ],
        )
        normal = await query.find_archived("ibu", stash_only=False)
        stashed = await query.find_archived("ibu", stash_only=True)
        assert [a.dose for a in normal] == ["200mg"]
        assert [a.dose for a in stashed] == ["800mg"]

    async def test_blank_query_lists_everything_on_one_side(self):
        _, query = _query(
            archive=[["Ibuprofen", "200mg", "Cabinet 1"], ["Zinc", "5mg", "Shelf"]],
        )
        assert len(await query.find_archived("", stash_only=False)) == 2

    async def test_unreadable_archive_is_empty(self):
        store, query = _query(archive=[["Zinc", "5mg", "Shelf"]])
        store.fail_on("read_range", "Archive")
        assert await query.find_archived("zinc", stash_only=False) == []


class TestFindMatch:

    async def test_first_match_wins(self):
        _, query = _query(
            file_meds=[["Zinc", "5mg", "Closet A", "1"]],
            closet_meds=[["Zinc", "5mg", "Closet A", "9"]],
        )
        match = await query.find_match(ItemKey("zinc", "5MG", "closet a"), Visibility.NORMAL)
        assert (match.table, match.quantity) == ("File Meds", 1)

    async def test_location_must_match(self):
        _, query = _query(file_meds=[["Zinc", "5mg", "Shelf", "1"]])
        assert await query.find_match(ItemKey("Zinc", "5mg", "Cabinet"), Visibility.NORMAL) is None

    async def test_strict_dose(self):
        _, query = _query(file_meds=[["Zinc", "5 mg", "Shelf", "1"]])
        key = ItemKey("Zinc", "5mg", "Shelf")
        assert await query.find_match(key, Visibility.NORMAL) is None
        assert await query.find_match(key, Visibility.NORMAL, strict_dose=True) is not None

    async def test_stash_matches_on_name_and_dose(self):
        _, query = _query(stash=[["Zinc", "5mg", "1"]])
        match = await query.find_match(ItemKey("Zinc", "5mg", "anything"), Visibility.PRIVATE)
        assert match.table == "Stash"

    async def test_read_failure_propagates(self):
        store, query = _query()
        store.fail_on("read_range", "File Meds")
        with pytest.raises(StoreUnavailable):
            await query.find_match(ItemKey("Zinc", "5mg", "Shelf"), Visibility.NORMAL)


class TestLocate:

    async def test_hint_is_kept_when_row_still_matches(self):
        _, query = _query(
            file_meds=[["Zinc", "5mg", "Shelf", "1"], ["Zinc", "5mg", "Shelf", "2"]],
        )
        item = await query.locate(ItemKey("Zinc", "5mg", "Shelf"), "File Meds", hint=3)
        assert item.position == 3

    async def test_shifted_row_is_found_again(self):
        _, query = _query(
            file_meds=[["Aspirin", "81mg", "Shelf", "1"], ["Zinc", "5mg", "Shelf", "2"]],
        )
        item = await query.locate(ItemKey("Zinc", "5mg", "Shelf"), "File Meds", hint=2)
        assert item.position == 3

    async def test_vanished_row(self):
        _, query = _query(file_meds=[["Aspirin", "81mg", "Shelf", "1"]])
        assert await query.locate(ItemKey("Zinc", "5mg", "Shelf"), "File Meds", hint=2) is None


class TestListings:

    async def test_names_are_distinct_and_sorted(self):
        _, query = _query(
            file_meds=[["zinc", "5mg", "Shelf", "1"], ["Aspirin", "81mg", "Shelf", "1"]],
            closet_meds=[["Zinc", "10mg", "Closet", "1"]],
        )
        assert await query.list_names(Visibility.NORMAL) == ["Aspirin", "zinc"]

    async def test_doses_for_a_name(self):
        _, query = _query(
            file_meds=[["Zinc", "5mg", "Shelf", "1"], ["Aspirin", "81mg", "Shelf", "1"]],
            closet_meds=[["zinc", "10mg", "Closet", "1"], ["Zinc", "5MG", "Closet", "1"]],
        )
        assert await query.list_doses("ZINC", Visibility.NORMAL) == ["5mg", "10mg"]

    async def test_locations_come_from_catalog(self):
        _, query = _query(
            file_meds=[["Zinc", "5mg", "Shelf", "1"]],
            locations=["Cabinet 1", "Closet A"],
        )
        assert await query.list_locations() == ["Cabinet 1", "Closet A"]

    async def test_locations_fall_back_to_stock(self):
        _, query = _query(
            file_meds=[["Zinc", "5mg", "Shelf", "1"], ["Aspirin", "81mg", "shelf", "1"]],
            closet_meds=[["Zinc", "10mg", "Closet A", "1"]],
        )
        assert await query.list_locations() == ["Shelf", "Closet A"]


class TestSortForDisplay:

    async def test_unknown_locations_sort_after_catalog(self):
        def item(name, location):
            return Item(name, "1mg", location, 1, "File Meds", 2)

        items = [
            item("Zinc", "Attic"),
            item("Aspirin", "Closet A"),
            item("Biotin", "Cabinet 1"),
            item("Aspirin", "Cabinet 1"),
        ]
        ordered = StockQuery.sort_for_display(items, ["Cabinet 1", "Closet A"])
        assert [(i.location, i.name) for i in ordered] == [
            ("Cabinet 1", "Aspirin"),
            ("Cabinet 1", "Biotin"),
            ("Closet A", "Aspirin"),
            ("Attic", "Zinc"),
        ]


class TestReadFailureLogging:

    async def test_failed_table_read_is_logged(self, captured_logs):
        store, query = _query(file_meds=[["Zinc", "5mg", "Shelf", "1"]])
        store.fail_on("read_range", "File Meds")

        await _collect(query, "zinc")

        [event] = [e for e in captured_logs if e["event"] == "table_read_failed"]
        assert event["log_level"] == "warning"
        assert event["table"] == "File Meds"
