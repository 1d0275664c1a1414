# venefoods/services/shipping_service.py
from decimal import Decimal

from venefoods.core.exceptions import MissingShippingZone
from venefoods.core.money import ZERO, round_money
from venefoods.schemas.settings import ShippingZone


def qualifies_for_free_shipping(subtotal: Decimal, threshold: Decimal) -> bool:
    """
    A threshold of 0 (the default when the setting is empty) disables
    free shipping instead of making every order free.
    """
    return threshold > 0 and subtotal >= threshold


def find_zone(zones: list[ShippingZone], name: str | None) -> ShippingZone | None:
    if not name:
        return None
    wanted = name.strip().casefold()
    for zone in zones:
        if zone.name.casefold() == wanted:
            return zone
    return None


def resolve_shipping_cost(
    zones: list[ShippingZone],
    threshold: Decimal,
    selected_zone: str | None,
    subtotal: Decimal,
) -> tuple[Decimal, ShippingZone | None]:
    """
    Delivery cost for the current cart.

    Rules, in order:
      1. subtotal >= threshold          => 0 (zone ignored, but kept if valid)
      2. no zones configured            => 0, no zone required
      3. a known zone is selected       => that zone's price
      4. otherwise                      => MissingShippingZone

    Returns (cost, resolved zone or None).
    """
    zone = find_zone(zones, selected_zone)

    if qualifies_for_free_shipping(subtotal, threshold):
        return ZERO, zone

    if not zones:
        return ZERO, None

    if zone is None:
        raise MissingShippingZone()

    return round_money(zone.price), zone
