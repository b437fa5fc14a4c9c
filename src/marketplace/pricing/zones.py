"""Delivery-fee reference tables.

Two read-only tables back the two pricing strategies:

- Landmarks around Yenagoa (Bayelsa), grouped into four fee zones.
- States with a flat delivery fee.

Lookups are case-insensitive and ignore surrounding whitespace.
"""

from dataclasses import dataclass

from marketplace.errors import InvalidDeliveryZone


@dataclass(frozen=True)
class Landmark:
    name: str
    zone: int
    base_fee: int


@dataclass(frozen=True)
class StateZone:
    state: str
    city: str
    flat_fee: int


LANDMARKS: tuple[Landmark, ...] = (
    Landmark("Azikoro", 1, 1500),
    Landmark("Swali", 1, 1500),
    Landmark("Prosco", 1, 1500),
    Landmark("Kpansia", 1, 1500),
    Landmark("Yenezuegene", 1, 1500),
    Landmark("Ekeki", 2, 1000),
    Landmark("Amarata", 2, 1000),
    Landmark("Ovom", 2, 1000),
    Landmark("Biogbolo", 2, 1000),
    Landmark("Opolo", 2, 1000),
    Landmark("Etegwe", 3, 1500),
    Landmark("Tombia", 3, 1500),
    Landmark("Edepie", 3, 1500),
    Landmark("Agudama", 3, 1500),
    Landmark("Akenfa", 3, 1500),
    Landmark("Yenegwe", 4, 2000),
    Landmark("Okaki", 4, 2000),
    Landmark("Igbogene", 4, 2000),
)

STATES: tuple[StateZone, ...] = (
    StateZone("Bayelsa", "Yenagoa", 1500),
    StateZone("Rivers", "Port Harcourt", 2000),
    StateZone("Abuja", "FCT", 2500),
    StateZone("Lagos", "Lagos", 3000),
)

_STATE_ALIASES = {"fct": "abuja"}

_LANDMARKS_BY_KEY = {lm.name.lower(): lm for lm in LANDMARKS}
_STATES_BY_KEY = {s.state.lower(): s for s in STATES}


def _normalize(name) -> str:
    return (name or "").strip().lower()


def find_landmark(name: str) -> Landmark:
    landmark = _LANDMARKS_BY_KEY.get(_normalize(name))
    if landmark is None:
        raise InvalidDeliveryZone({"zone_or_landmark": [f"Unknown landmark: {name!r}"]})
    return landmark


def find_state(name: str) -> StateZone:
    key = _normalize(name)
    state = _STATES_BY_KEY.get(_STATE_ALIASES.get(key, key))
    if state is None:
        raise InvalidDeliveryZone({"zone_or_landmark": [f"Unknown delivery state: {name!r}"]})
    return state


def available_landmarks() -> list[str]:
    """Landmark names sorted alphabetically."""
    return sorted(lm.name for lm in LANDMARKS)


def landmarks_by_zone() -> dict[int, list[str]]:
    grouped: dict[int, list[str]] = {}
    for lm in LANDMARKS:
        grouped.setdefault(lm.zone, []).append(lm.name)
    return grouped


def available_states() -> list[str]:
    return [s.state for s in STATES]
