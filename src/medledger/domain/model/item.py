"""Stock rows, archive rows and activity records.

Items mirror rows of the active-stock tables and the stash table; their
``position`` is the 1-based row number in the table (header = 1) as of
the read that produced them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from medledger.domain.model.value_objects import ItemKey


@dataclass
class Item:
    """A row of an active-stock table or the stash table."""

    name: str
    dose: str
    location: str
    quantity: int
    table: str
    position: int

    @property
    def key(self) -> ItemKey:
        return ItemKey(self.name, self.dose, self.location)


@dataclass(frozen=True)
class ArchivedItem:
    """An item whose quantity reached zero.

    Holds identity but no quantity; restoring it needs a location and a
    restock quantity.
    """

    name: str
    dose: str
    last_location: str
    position: int

    @property
    def key(self) -> ItemKey:
        return ItemKey(self.name, self.dose, self.last_location)


class ActivityAction(Enum):
    ADD = "ADD"
    REMOVE = "REMOVE"


@dataclass(frozen=True)
class ActivityRecord:
    """One audit entry. Never mutated once written."""

    action: ActivityAction
    name: str
    dose: str
    location: str
    quantity: int
    timestamp: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    def to_row(self) -> list[str]:
        return [
            self.timestamp.isoformat(timespec="seconds"),
            self.action.value,
            self.name,
            self.dose,
            self.location,
            str(self.quantity),
        ]
