"""
Volume, unit and shipping-cost arithmetic.
"""

from typing import List, Optional, Sequence, Tuple, Union
from models.base import DimensionUnit, ShippingMethod, WeightUnit
from models.settings import SystemSettings

CM3_PER_CBM = 1_000_000
CUBIC_INCHES_PER_CBM = 61_024
LBS_PER_KG = 2.20462


def calculate_cbm(
    length: float,
    width: float,
    height: float,
    unit: Union[DimensionUnit, str] = DimensionUnit.CM
) -> float:
    """
    Volume in cubic meters, rounded to 6 decimals.

    Any non-positive dimension gives 0.
    """
    if length <= 0 or width <= 0 or height <= 0:
        return 0.0

    volume = length * width * height
    if DimensionUnit(unit) == DimensionUnit.CM:
        cbm = volume / CM3_PER_CBM
    else:
        cbm = volume / CUBIC_INCHES_PER_CBM
    return round(cbm, 6)


def convert_weight(
    value: float,
    from_unit: Union[WeightUnit, str],
    to_unit: Union[WeightUnit, str]
) -> float:
    from_unit, to_unit = WeightUnit(from_unit), WeightUnit(to_unit)
    if from_unit == to_unit:
        return value
    if from_unit == WeightUnit.KG:
        return round(value * LBS_PER_KG, 2)
    return round(value / LBS_PER_KG, 2)


def calculate_shipping_cost(
    method: Union[ShippingMethod, str],
    cbm: float,
    weight: Optional[float],
    rates: SystemSettings,
    weight_unit: Union[WeightUnit, str, None] = WeightUnit.KG
) -> Tuple[float, float]:
    """
    Cost of shipping one item.

    Sea freight is charged per CBM, air freight per kilogram (pounds are
    converted first).

    Returns:
        (cost_usd, cost_cedis), both rounded to 2 decimals
    """
    cost_usd = 0.0
    if ShippingMethod(method) == ShippingMethod.SEA:
        if cbm > 0:
            cost_usd = cbm * rates.sea_shipping_rate_per_cbm
    elif weight:
        weight_kg = weight
        if weight_unit and WeightUnit(weight_unit) == WeightUnit.LBS:
            weight_kg = weight / LBS_PER_KG
        cost_usd = weight_kg * rates.air_shipping_rate_per_kg

    return round(cost_usd, 2), round(cost_usd * rates.usd_to_ghs_rate, 2)


def format_usd(amount: float) -> str:
    return f"${amount:.2f}"


def format_cedis(amount: float) -> str:
    return f"GH₵ {amount:.2f}"


def calculate_invoice_totals(
    lines: Sequence[Tuple[float, float]],
    charges: Sequence[float] = (),
    tax: float = 0
) -> Tuple[List[float], float, float]:
    """
    Invoice arithmetic.

    Args:
        lines: (quantity, unit price) per line
        charges: Flat charges added to the subtotal (shipping, handling, ...)
        tax: Flat tax amount

    Returns:
        (line totals, subtotal, total)
    """
    line_totals = [round(quantity * unit_price, 2) for quantity, unit_price in lines]
    subtotal = round(sum(line_totals) + sum(charges), 2)
    return line_totals, subtotal, round(subtotal + tax, 2)


def price_item(
    method: Union[ShippingMethod, str],
    length: float,
    width: float,
    height: float,
    dimension_unit: Union[DimensionUnit, str],
    weight: Optional[float],
    weight_unit: Union[WeightUnit, str, None],
    rates: SystemSettings
) -> Tuple[float, float, float]:
    """(cbm, cost_usd, cost_cedis) for one item as entered on a form."""
    cbm = calculate_cbm(length or 0, width or 0, height or 0, dimension_unit)
    cost_usd, cost_cedis = calculate_shipping_cost(method, cbm, weight, rates, weight_unit)
    return cbm, cost_usd, cost_cedis
