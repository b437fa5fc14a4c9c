"""Runtime tunables for pricing and payouts, read from the environment.

Only one delivery-pricing mode is active per deployment. ``landmark`` is the
default; ``state`` switches to the flat per-state fee. Each mode has its own
default for whether the delivery fee is VAT-able, and
``MARKETPLACE_VAT_ON_DELIVERY`` overrides it.
"""

import os
from dataclasses import dataclass
from enum import Enum

from protean.exceptions import ConfigurationError


class PricingMode(Enum):
    LANDMARK = "landmark"
    STATE = "state"


_VAT_ON_DELIVERY_DEFAULTS = {
    PricingMode.LANDMARK: False,
    PricingMode.STATE: True,
}

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class PricingSettings:
    mode: PricingMode = PricingMode.LANDMARK
    vat_rate: float = 0.075
    commission_rate: float = 0.10
    vat_on_delivery: bool | None = None
    rider_rate_per_delivery: int = 500

    @property
    def taxes_delivery(self) -> bool:
        if self.vat_on_delivery is not None:
            return self.vat_on_delivery
        return _VAT_ON_DELIVERY_DEFAULTS[self.mode]

    @property
    def vendor_share(self) -> float:
        return 1 - self.commission_rate


def _env_bool(name: str) -> bool | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {raw!r}")


def _env_number(name: str, default, cast=float):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be numeric, got {raw!r}") from exc


def load_settings() -> PricingSettings:
    """Build settings from ``MARKETPLACE_*`` environment variables."""
    raw_mode = os.getenv("MARKETPLACE_PRICING_MODE", PricingMode.LANDMARK.value).strip().lower()
    try:
        mode = PricingMode(raw_mode)
    except ValueError as exc:
        raise ConfigurationError(f"Unknown MARKETPLACE_PRICING_MODE: {raw_mode!r}") from exc

    return PricingSettings(
        mode=mode,
        vat_rate=_env_number("MARKETPLACE_VAT_RATE", 0.075),
        commission_rate=_env_number("MARKETPLACE_COMMISSION_RATE", 0.10),
        vat_on_delivery=_env_bool("MARKETPLACE_VAT_ON_DELIVERY"),
        rider_rate_per_delivery=_env_number("MARKETPLACE_RIDER_RATE", 500, cast=int),
    )
