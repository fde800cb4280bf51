"""Ledger layout: which logical tables exist and how rows are addressed.

Active-stock tables hold ``name, dose, location, quantity``; the stash
table has no location axis and holds ``name, dose, quantity``. The
archive holds ``name, dose, lastLocation`` and the catalog a single
column of location names.
"""

from __future__ import annotations

from dataclasses import dataclass

from medledger.domain.exceptions import ValidationError
from medledger.domain.model.identity import DEFAULT_ALIAS_MARKER, Visibility, normalize

ACTIVE_COLUMNS = "A:D"
STASH_COLUMNS = "A:C"
ARCHIVE_COLUMNS = "A:C"
CATALOG_COLUMNS = "A:A"
ACTIVITY_COLUMNS = "A:F"

ACTIVE_HEADER = ["Name", "Dose", "Location", "Quantity"]
STASH_HEADER = ["Name", "Dose", "Quantity"]
ARCHIVE_HEADER = ["Name", "Dose", "Last Location"]
CATALOG_HEADER = ["Location"]
ACTIVITY_HEADER = ["Timestamp", "Action", "Name", "Dose", "Location", "Quantity"]

# Zero-based column indexes inside an active-stock row
LOCATION_INDEX = 2
NAME_INDEX = 0


@dataclass(frozen=True)
class LedgerLayout:
    active_tables: tuple[str, ...] = ("File Meds", "Closet Meds")
    default_table: str = "File Meds"
    keyword_table: str = "Closet Meds"
    location_keyword: str = "closet"
    stash_table: str = "Stash"
    archive_table: str = "Archive"
    catalog_table: str = "Locations"
    activity_table: str = "Activity Log"
    stash_label: str = "Stash"
    alias_marker: str = DEFAULT_ALIAS_MARKER

    def __post_init__(self) -> None:
        if not self.active_tables:
            raise ValidationError("At least one active-stock table is required")
        for table in (self.default_table, self.keyword_table):
            if table not in self.active_tables:
                raise ValidationError(
                    f"Table '{table}' is not one of the active-stock tables"
                )
        if self.stash_table in self.active_tables:
            raise ValidationError("The stash table cannot also be an active-stock table")

    # --- Routing --------------------------------------------------------------

    def table_for_location(self, location: str) -> str:
        """Pick the active table a new row at *location* is appended to."""
        keyword = normalize(self.location_keyword)
        if keyword and keyword in normalize(location):
            return self.keyword_table
        return self.default_table

    def tables_for(self, visibility: Visibility) -> tuple[str, ...]:
        if visibility is Visibility.PRIVATE:
            return (self.stash_table,)
        return self.active_tables

    def is_stash(self, table: str) -> bool:
        return normalize(table) == normalize(self.stash_table)

    def is_stash_location(self, location: str) -> bool:
        return normalize(location) == normalize(self.stash_label)

    # --- Addressing -----------------------------------------------------------

    def columns(self, table: str) -> str:
        return STASH_COLUMNS if self.is_stash(table) else ACTIVE_COLUMNS

    def quantity_column(self, table: str) -> str:
        return "C" if self.is_stash(table) else "D"

    def row_values(self, table: str, name: str, dose: str, location: str, quantity: int) -> list[str]:
        if self.is_stash(table):
            return [name, dose, str(quantity)]
        return [name, dose, location, str(quantity)]

    def headers(self) -> dict[str, list[str]]:
        """Header rows for every table, used to seed an empty store."""
        tables = {name: list(ACTIVE_HEADER) for name in self.active_tables}
        tables[self.stash_table] = list(STASH_HEADER)
        tables[self.archive_table] = list(ARCHIVE_HEADER)
        tables[self.catalog_table] = list(CATALOG_HEADER)
        tables[self.activity_table] = list(ACTIVITY_HEADER)
        return tables
