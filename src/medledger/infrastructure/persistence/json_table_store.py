"""JSON-file-backed implementation of TableStore.

Stands in for the hosted spreadsheet the clinic uses: every table is a
list of string rows with the header first, addressed by 1-based row
position. Each call loads the file, applies one change and writes it
back, so every successful call is durable on its own.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Callable, TypeVar

from medledger.domain.exceptions import StoreUnavailable
from medledger.domain.model.identity import normalize
from medledger.domain.repository.table_store import (
    SortKey,
    TableRef,
    TableStore,
    column_index,
    parse_columns,
)

T = TypeVar("T")


class JsonTableStore(TableStore):

    def __init__(self, file_path: Path, tables: dict[str, list[str]] | None = None) -> None:
        self._file_path = file_path
        self._ensure_file(tables or {})

    # --- TableStore interface -------------------------------------------------

    async def list_tables(self) -> list[TableRef]:
        def op(doc: dict) -> list[TableRef]:
            return [TableRef(raw["name"], raw["id"]) for raw in doc["tables"]]

        return await self._run(op)

    async def read_range(self, table: str, column_range: str) -> list[list[str]]:
        first, stop = parse_columns(column_range)

        def op(doc: dict) -> list[list[str]]:
            rows = [_trim(row[first:stop]) for row in self._table_by_name(doc, table)["rows"]]
            while rows and not rows[-1]:
                rows.pop()
            return rows

        return await self._run(op)

    async def update_cell(
        self, table: str, column: str, row_position: int, value: str
    ) -> None:
        index = column_index(column)
        _check_position(row_position)

        def op(doc: dict) -> None:
            rows = self._table_by_name(doc, table)["rows"]
            while len(rows) < row_position:
                rows.append([])
            row = rows[row_position - 1]
            while len(row) <= index:
                row.append("")
            row[index] = str(value)

        await self._run(op, persist=True)

    async def append_row(self, table: str, column_range: str, values: list[str]) -> None:
        first, _ = parse_columns(column_range)

        def op(doc: dict) -> None:
            rows = self._table_by_name(doc, table)["rows"]
            while rows and not any(cell != "" for cell in rows[-1]):
                rows.pop()
            rows.append([""] * first + [str(value) for value in values])

        await self._run(op, persist=True)

    async def delete_rows(self, table_id: int, start_position: int, end_position: int) -> None:
        _check_position(start_position)
        if end_position <= start_position:
            raise StoreUnavailable(
                f"Invalid row span [{start_position}, {end_position})"
            )

        def op(doc: dict) -> None:
            rows = self._table_by_id(doc, table_id)["rows"]
            del rows[start_position - 1:end_position - 1]

        await self._run(op, persist=True)

    async def sort_range(
        self,
        table_id: int,
        first_row: int,
        column_range: str,
        sort_keys: list[SortKey],
    ) -> None:
        _check_position(first_row)
        first, _ = parse_columns(column_range)

        def op(doc: dict) -> None:
            rows = self._table_by_id(doc, table_id)["rows"]
            body = rows[first_row - 1:]
            for key in reversed(sort_keys):
                index = first + key.column_index
                body.sort(
                    key=lambda row, i=index: normalize(row[i]) if i < len(row) else "",
                    reverse=not key.ascending,
                )
            rows[first_row - 1:] = body

        await self._run(op, persist=True)

    # --- Table lookup ---------------------------------------------------------

    @staticmethod
    def _table_by_name(doc: dict, table: str) -> dict:
        wanted = normalize(table)
        for raw in doc["tables"]:
            if normalize(raw["name"]) == wanted:
                return raw
        raise StoreUnavailable(f"Unable to parse range: table '{table}' does not exist")

    @staticmethod
    def _table_by_id(doc: dict, table_id: int) -> dict:
        for raw in doc["tables"]:
            if raw["id"] == table_id:
                return raw
        raise StoreUnavailable(f"No table with id {table_id}")

    # --- File helpers ---------------------------------------------------------

    async def _run(self, op: Callable[[dict], T], persist: bool = False) -> T:
        return await asyncio.to_thread(self._apply, op, persist)

    def _apply(self, op: Callable[[dict], T], persist: bool) -> T:
        doc = self._load()
        result = op(doc)
        if persist:
            self._persist(doc)
        return result

    def _load(self) -> dict[str, Any]:
        try:
            return json.loads(self._file_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise StoreUnavailable(f"Cannot read {self._file_path}: {exc}") from exc

    def _persist(self, doc: dict[str, Any]) -> None:
        try:
            self._file_path.write_text(json.dumps(doc, indent=2) + "\n", encoding="utf-8")
        except OSError as exc:
            raise StoreUnavailable(f"Cannot write {self._file_path}: {exc}") from exc

    def _ensure_file(self, tables: dict[str, list[str]]) -> None:
        if self._file_path.exists():
            doc = self._load()
        else:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            doc = {"tables": []}
        known = {normalize(raw["name"]) for raw in doc["tables"]}
        next_id = max((raw["id"] for raw in doc["tables"]), default=-1) + 1
        changed = not self._file_path.exists()
        for name, header in tables.items():
            if normalize(name) in known:
                continue
            doc["tables"].append({"id": next_id, "name": name, "rows": [list(header)]})
            next_id += 1
            changed = True
        if changed:
            self._persist(doc)


def _trim(row: list[Any]) -> list[str]:
    cells = ["" if cell is None else str(cell) for cell in row]
    while cells and cells[-1] == "":
        cells.pop()
    return cells


def _check_position(position: int) -> None:
    if position < 1:
        raise StoreUnavailable(f"Row positions start at 1, got {position}")
