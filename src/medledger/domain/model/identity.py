"""Identity and normalization rules for stock rows.

Two rows describe the same item when their normalized name, dose and
location agree. Presentation differences (case, stray spaces) never make
two rows distinct.
"""

from __future__ import annotations

import re
from enum import Enum

DEFAULT_ALIAS_MARKER = "sparkles++"

_WHITESPACE = re.compile(r"\s+")


class Visibility(Enum):
    NORMAL = "NORMAL"
    PRIVATE = "PRIVATE"


def normalize(value: str | None) -> str:
    """Trim, lowercase and collapse internal whitespace runs to one space."""
    if value is None:
        return ""
    return _WHITESPACE.sub(" ", str(value).strip()).lower()


def normalize_dose_strict(value: str | None) -> str:
    """Normalize a dose and drop all whitespace, so "5 mg" equals "5mg"."""
    return _WHITESPACE.sub("", normalize(value))


def is_aliased(name: str | None, marker: str = DEFAULT_ALIAS_MARKER) -> bool:
    return bool(name) and name.startswith(marker)


def strip_alias(name: str, marker: str = DEFAULT_ALIAS_MARKER) -> str:
    """Remove the alias marker. Non-aliased names are returned unchanged."""
    if is_aliased(name, marker):
        return name[len(marker):]
    return name


def resolve_visibility(
    raw_name: str, marker: str = DEFAULT_ALIAS_MARKER
) -> tuple[Visibility, str]:
    """Resolve a submitted name into its visibility and the name to store.

    This is the only place a raw name is inspected for the marker; callers
    thread the returned Visibility through every ledger call.
    """
    if is_aliased(raw_name, marker):
        return Visibility.PRIVATE, strip_alias(raw_name, marker).strip()
    return Visibility.NORMAL, raw_name.strip()
