"""Abstract append-only activity log."""

from __future__ import annotations

from abc import ABC, abstractmethod

from medledger.domain.model.item import ActivityRecord


class ActivityLog(ABC):

    @abstractmethod
    async def record(self, entry: ActivityRecord) -> None:
        """Append one audit entry. Entries are never read back or changed."""
