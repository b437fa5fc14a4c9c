"""Service locations shared by vendors and riders.

A rider may only see and claim deliveries whose ``vendor_location`` equals the
rider's own location.
"""

from enum import Enum

from protean.exceptions import ValidationError


class ServiceLocation(Enum):
    YENAGOA = "Yenagoa"
    AMASSOMA = "Amassoma"
    OTUOKE = "Otuoke"


_BY_KEY = {loc.value.lower(): loc for loc in ServiceLocation}


def normalize_location(value) -> str:
    """Return the canonical spelling of a location, case-insensitively."""
    location = _BY_KEY.get((value or "").strip().lower())
    if location is None:
        raise ValidationError({"location": [f"Unknown service location: {value!r}"]})
    return location.value


def same_location(a, b) -> bool:
    if not a or not b:
        return False
    return a.strip().lower() == b.strip().lower()
