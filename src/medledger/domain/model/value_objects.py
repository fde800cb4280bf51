"""Value Objects shared across the domain.

Value Objects are immutable and compared by value, not identity.
They encapsulate validation so invalid values can never exist.
"""

from __future__ import annotations

from dataclasses import dataclass

from medledger.domain.exceptions import ValidationError
from medledger.domain.model.identity import normalize, normalize_dose_strict


@dataclass(frozen=True)
class Quantity:
    """A positive integer quantity.

    Enforces the invariant that you cannot add or take zero or negative
    units of a medication.
    """

    value: int

    def __post_init__(self) -> None:
        if not isinstance(self.value, int) or isinstance(self.value, bool):
            raise ValidationError(
                f"Quantity must be an integer, got {type(self.value).__name__}"
            )
        if self.value <= 0:
            raise ValidationError("Quantity must be positive")

    def __str__(self) -> str:
        return str(self.value)


def coerce_count(raw: str | int | None) -> int:
    """Read a stored or submitted count, treating junk as zero."""
    if raw is None:
        return 0
    try:
        return int(str(raw).strip())
    except ValueError:
        try:
            return int(float(str(raw).strip()))
        except ValueError:
            return 0


@dataclass(frozen=True)
class ItemKey:
    """Durable identity of a stock row: name, dose and location.

    Row positions shift as rows are deleted and sorted, so mutations
    address rows by this key and look the current position up just
    before writing.
    """

    name: str
    dose: str
    location: str = ""

    def normalized(
        self, *, strict_dose: bool = False, with_location: bool = True
    ) -> tuple[str, ...]:
        dose = normalize_dose_strict(self.dose) if strict_dose else normalize(self.dose)
        if with_location:
            return (normalize(self.name), dose, normalize(self.location))
        return (normalize(self.name), dose)

    def same_as(
        self,
        other: ItemKey,
        *,
        strict_dose: bool = False,
        with_location: bool = True,
    ) -> bool:
        return self.normalized(
            strict_dose=strict_dose, with_location=with_location
        ) == other.normalized(strict_dose=strict_dose, with_location=with_location)

    def __str__(self) -> str:
        if self.location:
            return f"{self.name} {self.dose} @ {self.location}"
        return f"{self.name} {self.dose}"
