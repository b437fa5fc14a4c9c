"""Pricing engine: pure functions from a cart to a priced quote.

    subtotal     = Σ unit_price × quantity
    delivery_fee = strategy(zone_or_landmark, vendor_count)
    vat          = vat_rate × (subtotal [+ delivery_fee])
    commission   = commission_rate × subtotal   (not charged to the customer)
    total        = subtotal + delivery_fee + vat

Nothing here touches persistence, so quotes can be computed in API handlers,
command handlers and tests alike. Quotes, cart lines and order intents are
value objects.
"""

from collections.abc import Iterable, Mapping
from decimal import ROUND_HALF_UP, Decimal

from protean.exceptions import ValidationError
from protean.fields import Dict, Float, Integer, List, String

from marketplace.domain import marketplace
from marketplace.errors import EmptyCart
from marketplace.pricing.settings import PricingMode, PricingSettings, load_settings
from marketplace.pricing.zones import find_landmark, find_state

CENT = Decimal("0.01")

# Multi-vendor discount on the landmark fee, keyed by vendor count (3 and up share the cap).
_MULTI_VENDOR_DISCOUNT = {1: 0, 2: 500}
_MAX_MULTI_VENDOR_DISCOUNT = 800


def money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


@marketplace.value_object
class CartLine:
    vendor_id = String(required=True, max_length=50)
    product_id = String(required=True, max_length=50)
    quantity = Integer(required=True)
    unit_price = Float(required=True)

    @property
    def line_total(self) -> Decimal:
        return money(Decimal(str(self.unit_price)) * self.quantity)

    @classmethod
    def coerce(cls, raw) -> "CartLine":
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, Mapping):
            raise ValidationError({"cart_lines": [f"Unsupported cart line: {raw!r}"]})
        try:
            return cls(
                vendor_id=str(raw["vendor_id"]),
                product_id=str(raw["product_id"]),
                quantity=int(raw["quantity"]),
                unit_price=float(raw["unit_price"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise ValidationError({"cart_lines": [f"Malformed cart line: {raw!r}"]}) from exc


@marketplace.value_object
class PriceQuote:
    subtotal = Float(required=True)
    delivery_fee = Float(required=True)
    vat_amount = Float(required=True)
    commission_amount = Float(required=True)
    total = Float(required=True)
    delivery_zone = String(required=True, max_length=100)
    pricing_mode = String(required=True, max_length=20)
    vendor_count = Integer(required=True)
    lines = List(content_type=Dict)  # billable cart lines, as CartLine dicts

    def cart_lines(self) -> list[CartLine]:
        return [CartLine.coerce(raw) for raw in self.lines or []]

    def as_dict(self) -> dict:
        """The quote without its cart lines, as returned to callers."""
        summary = self.to_dict()
        summary.pop("lines", None)
        return summary


@marketplace.value_object
class OrderIntent:
    """One cart line with its share of delivery fee and VAT, ready to become an Order."""

    vendor_id = String(required=True, max_length=50)
    product_id = String(required=True, max_length=50)
    quantity = Integer(required=True)
    unit_price = Float(required=True)
    subtotal = Float(required=True)
    delivery_fee = Float(required=True)
    vat_amount = Float(required=True)
    total_price = Float(required=True)
    delivery_zone = String(max_length=100)


# ---------------------------------------------------------------------------
# Delivery-fee strategies
# ---------------------------------------------------------------------------
class LandmarkPricing:
    mode = PricingMode.LANDMARK

    @staticmethod
    def discount(vendor_count: int) -> int:
        return _MULTI_VENDOR_DISCOUNT.get(vendor_count, _MAX_MULTI_VENDOR_DISCOUNT)

    def delivery_fee(self, zone_or_landmark: str, vendor_count: int) -> tuple[Decimal, str]:
        landmark = find_landmark(zone_or_landmark)
        n = max(vendor_count, 1)
        fee = landmark.base_fee * n - self.discount(n)
        return money(max(fee, 0)), landmark.name


class StateFlatFeePricing:
    mode = PricingMode.STATE

    def delivery_fee(self, zone_or_landmark: str, vendor_count: int) -> tuple[Decimal, str]:
        state = find_state(zone_or_landmark)
        return money(state.flat_fee), state.state


_STRATEGIES = {
    PricingMode.LANDMARK: LandmarkPricing,
    PricingMode.STATE: StateFlatFeePricing,
}


def strategy_for(mode: PricingMode | str):
    return _STRATEGIES[PricingMode(mode)]()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def _billable_lines(cart_lines: Iterable) -> tuple[CartLine, ...]:
    lines = tuple(CartLine.coerce(raw) for raw in cart_lines or ())
    for line in lines:
        if line.unit_price < 0:
            raise ValidationError({"cart_lines": [f"Negative price for product {line.product_id}"]})
    billable = tuple(line for line in lines if line.quantity > 0)
    if not billable:
        raise EmptyCart({"cart_lines": ["Cart has no items with a positive quantity"]})
    return billable


def quote(
    cart_lines: Iterable,
    zone_or_landmark: str,
    vendor_count: int | None = None,
    settings: PricingSettings | None = None,
) -> PriceQuote:
    """Price a cart.

    Args:
        cart_lines: ``CartLine`` objects or mappings with vendor_id,
            product_id, quantity and unit_price.
        zone_or_landmark: A landmark (landmark mode) or a state (state mode).
        vendor_count: Number of vendors to deliver from. Defaults to the
            distinct vendors in the cart.
        settings: Pricing settings. Defaults to the environment's.

    Raises:
        EmptyCart: No line has a positive quantity.
        InvalidDeliveryZone: The zone or landmark is not in the reference tables.
    """
    settings = settings or load_settings()
    lines = _billable_lines(cart_lines)
    if vendor_count is None:
        vendor_count = len({line.vendor_id for line in lines})

    subtotal = money(sum((line.line_total for line in lines), Decimal(0)))
    fee, zone = strategy_for(settings.mode).delivery_fee(zone_or_landmark, vendor_count)

    taxable = subtotal + fee if settings.taxes_delivery else subtotal
    vat = money(taxable * Decimal(str(settings.vat_rate)))
    commission = money(subtotal * Decimal(str(settings.commission_rate)))

    return PriceQuote(
        subtotal=float(subtotal),
        delivery_fee=float(fee),
        vat_amount=float(vat),
        commission_amount=float(commission),
        total=float(subtotal + fee + vat),
        delivery_zone=zone,
        pricing_mode=settings.mode.value,
        vendor_count=vendor_count,
        lines=[line.to_dict() for line in lines],
    )


def _split(amount: Decimal, weights: list[Decimal]) -> list[Decimal]:
    """Split ``amount`` proportionally to ``weights``; the last share absorbs rounding."""
    total_weight = sum(weights, Decimal(0))
    if total_weight == 0:
        shares = [money(amount / len(weights)) for _ in weights]
    else:
        shares = [money(amount * w / total_weight) for w in weights]
    shares[-1] = amount - sum(shares[:-1], Decimal(0))
    return shares


def allocate(price_quote: PriceQuote) -> list[OrderIntent]:
    """Break a quote into one order intent per cart line.

    Σ intent.total_price equals the quote total, and every intent satisfies
    total_price == subtotal + delivery_fee + vat_amount.
    """
    lines = price_quote.cart_lines()
    if not lines:
        raise EmptyCart({"cart_lines": ["Quote carries no cart lines"]})

    weights = [line.line_total for line in lines]
    fees = _split(money(price_quote.delivery_fee), weights)
    vats = _split(money(price_quote.vat_amount), weights)

    intents = []
    for line, fee, vat in zip(lines, fees, vats, strict=True):
        intents.append(
            OrderIntent(
                vendor_id=line.vendor_id,
                product_id=line.product_id,
                quantity=line.quantity,
                unit_price=line.unit_price,
                subtotal=float(line.line_total),
                delivery_fee=float(fee),
                vat_amount=float(vat),
                total_price=float(line.line_total + fee + vat),
                delivery_zone=price_quote.delivery_zone,
            )
        )
    return intents
