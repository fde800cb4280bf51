"""Abstract table store: row-level access to named tables.

Defined in the domain layer so the ledger never depends on the backing
technology. Rows are addressed by 1-based position with the header row
at position 1, so data row N lives at position N + 1. There are no
transactions: every successful call is durable on its own, and a failed
call raises StoreUnavailable with an unknown outcome.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from medledger.domain.exceptions import ValidationError
from medledger.domain.model.identity import normalize


@dataclass(frozen=True)
class TableRef:
    name: str
    id: int


@dataclass(frozen=True)
class SortKey:
    column_index: int  # zero-based within the sorted column range
    ascending: bool = True


def column_index(letter: str) -> int:
    """Zero-based index of a column letter ("A" -> 0, "AA" -> 26)."""
    letter = letter.strip().upper()
    if not letter or not letter.isalpha():
        raise ValidationError(f"Invalid column: {letter!r}")
    index = 0
    for char in letter:
        index = index * 26 + (ord(char) - ord("A") + 1)
    return index - 1


def parse_columns(column_range: str) -> tuple[int, int]:
    """Parse "A:D" into the half-open index span (0, 4)."""
    start, sep, end = column_range.partition(":")
    first = column_index(start)
    last = column_index(end) if sep else first
    if last < first:
        raise ValidationError(f"Invalid column range: {column_range!r}")
    return first, last + 1


class TableStore(ABC):

    @abstractmethod
    async def list_tables(self) -> list[TableRef]:
        """Return every table with its stable identifier."""

    @abstractmethod
    async def read_range(self, table: str, column_range: str) -> list[list[str]]:
        """Return the rows of *table* restricted to *column_range*, header first."""

    @abstractmethod
    async def update_cell(
        self, table: str, column: str, row_position: int, value: str
    ) -> None:
        """Overwrite a single cell."""

    @abstractmethod
    async def append_row(
        self, table: str, column_range: str, values: list[str]
    ) -> None:
        """Append one row after the last non-empty row."""

    @abstractmethod
    async def delete_rows(
        self, table_id: int, start_position: int, end_position: int
    ) -> None:
        """Delete positions in ``[start_position, end_position)``."""

    @abstractmethod
    async def sort_range(
        self,
        table_id: int,
        first_row: int,
        column_range: str,
        sort_keys: list[SortKey],
    ) -> None:
        """Sort rows from *first_row* to the end of the table."""

    async def resolve(self, table: str) -> TableRef | None:
        """Look a table up by name, ignoring case and stray whitespace."""
        wanted = normalize(table)
        for ref in await self.list_tables():
            if normalize(ref.name) == wanted:
                return ref
        return None
