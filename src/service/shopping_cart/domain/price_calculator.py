"""
Price / Tax Calculator

Prices are gross-inclusive: the tax is contained in the gross price.

    gross = unit_gross - discount
    net   = round_half_up(gross * 100 / (100 + tax_percent))
    tax   = gross - net

Lines are rounded to cents before summing so totals never drift from the
sum of the displayed line prices.
"""

from collections.abc import Iterable
from decimal import Decimal
from typing import TYPE_CHECKING

import attrs

from src.service.shopping_cart.domain.value_object.money import ZERO, round_half_up


if TYPE_CHECKING:
    from src.service.shopping_cart.domain.entity.cart_entity import LineItem


HUNDRED = Decimal(100)


@attrs.frozen
class LinePrice:
    gross_price: Decimal
    net_price: Decimal
    tax_price: Decimal


@attrs.frozen
class CartTotals:
    gross_price: Decimal = ZERO
    net_price: Decimal = ZERO
    tax_price: Decimal = ZERO


def calculate_line(*, unit_gross: Decimal, discount: Decimal, tax_percent: Decimal) -> LinePrice:
    gross = round_half_up(unit_gross - discount)
    net = round_half_up(gross * HUNDRED / (HUNDRED + tax_percent))
    return LinePrice(gross_price=gross, net_price=net, tax_price=gross - net)


def recompute(line_items: Iterable['LineItem']) -> CartTotals:
    gross = net = tax = ZERO
    for item in line_items:
        line = calculate_line(
            unit_gross=item.gross_regular,
            discount=item.discount,
            tax_percent=item.tax_percent,
        )
        gross += line.gross_price
        net += line.net_price
        tax += line.tax_price
    return CartTotals(gross_price=gross, net_price=net, tax_price=tax)
