"""Data Transfer Objects: plain containers that cross layer boundaries.

Requests carry an explicit Visibility resolved at the boundary; nothing
below the boundary looks at raw names for the alias marker.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from medledger.domain.model.identity import Visibility


@dataclass(frozen=True)
class ConsumeRequest:
    """Input: take *take* units from the row the caller saw at *position*."""

    table: str
    position: int
    take: int
    known_quantity: int
    name: str
    dose: str = ""
    location: str = ""


@dataclass(frozen=True)
class KnownRow:
    """A row the caller already located, e.g. from search results."""

    table: str
    position: int
    quantity: int


@dataclass(frozen=True)
class RestockRequest:
    name: str
    dose: str
    location: str
    quantity: int
    visibility: Visibility = Visibility.NORMAL
    known: KnownRow | None = None


@dataclass(frozen=True)
class RestoreRequest:
    """Input: bring an archived item back with *quantity* units."""

    name: str
    dose: str
    last_location: str
    quantity: int
    chosen_location: str = ""


@dataclass(frozen=True)
class NewItemRequest:
    name: str
    dose: str
    location: str
    quantity: int
    visibility: Visibility = Visibility.NORMAL


class OutcomeStatus(Enum):
    APPLIED = "APPLIED"
    SKIPPED = "SKIPPED"
    NOT_FOUND = "NOT_FOUND"
    FAILED = "FAILED"


@dataclass(frozen=True)
class ItemOutcome:
    """Output: what happened to one item of a ledger operation."""

    status: OutcomeStatus
    name: str
    dose: str
    location: str
    quantity: int
    message: str = ""


@dataclass(frozen=True)
class StockLineDTO:
    table: str
    position: int
    name: str
    dose: str
    location: str
    quantity: int


@dataclass(frozen=True)
class ArchivedLineDTO:
    name: str
    dose: str
    last_location: str


@dataclass(frozen=True)
class SearchResultDTO:
    query: str
    visibility: Visibility
    items: list[StockLineDTO] = field(default_factory=list)
    archived: list[ArchivedLineDTO] = field(default_factory=list)
