"""
Checkout totals.

CheckoutCalculator turns priced cart lines into the order's amounts using
the shared arithmetic in orders.pricing. The quote endpoint and checkout
both go through it, so the storefront always sees the total it will pay.

    subtotal        = sum((unit price + modifier adjustments) x quantity)
    discount        = promotion strategy on subtotal
    points_discount = value of redeemed points, capped so discount + points <= subtotal
    tax             = (subtotal - discount - points_discount) x rate
    total           = subtotal - discount - points_discount + tax
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Callable, List, Optional

from .pricing import (
    ZERO,
    calculate_points_value,
    calculate_tax,
    max_redeemable_points,
    quantize_money,
    to_decimal,
)


@dataclass
class PricedLine:
    menu_item_id: int
    name: str
    unit_price: Decimal
    quantity: int
    modifiers: List[dict] = field(default_factory=list)
    special_instructions: str = ""

    @property
    def modifier_total(self) -> Decimal:
        return quantize_money(sum((to_decimal(m["price"]) for m in self.modifiers), ZERO))

    @property
    def line_total(self) -> Decimal:
        return quantize_money((to_decimal(self.unit_price) + self.modifier_total) * self.quantity)


class CheckoutCalculator:
    """
    Calculator for a priced cart.

    discount_for: callable(subtotal) -> Decimal, usually a promotion strategy
    points_for:   callable(total) -> int, points the order earns
    """

    def __init__(
        self,
        lines: List[PricedLine],
        tax_rate,
        discount_for: Optional[Callable[[Decimal], Decimal]] = None,
        points_for: Optional[Callable[[Decimal], int]] = None,
        points_to_redeem: int = 0,
        points_balance: int = 0,
        redemption_ratio: int = 100,
    ):
        self.lines = lines
        self.tax_rate = to_decimal(tax_rate)
        self.discount_for = discount_for
        self.points_for = points_for
        self.points_to_redeem = max(0, int(points_to_redeem or 0))
        self.points_balance = max(0, int(points_balance or 0))
        self.redemption_ratio = int(redemption_ratio)

    def calculate_subtotal(self) -> Decimal:
        return quantize_money(sum((line.line_total for line in self.lines), ZERO))

    def calculate_discount(self, subtotal: Decimal) -> Decimal:
        if self.discount_for is None:
            return ZERO
        return min(quantize_money(self.discount_for(subtotal)), subtotal)

    def calculate_points_redemption(self, remaining: Decimal):
        """
        Points actually spent and their value. Only whole points are spent and
        never more than it takes to cover `remaining`.
        """
        requested = min(self.points_to_redeem, self.points_balance)
        points = max_redeemable_points(requested, remaining, self.redemption_ratio)
        return points, calculate_points_value(points, self.redemption_ratio)

    def calculate_totals(self) -> dict:
        subtotal = self.calculate_subtotal()
        discount = self.calculate_discount(subtotal)
        points_redeemed, points_discount = self.calculate_points_redemption(subtotal - discount)

        taxable = subtotal - discount - points_discount
        tax = calculate_tax(taxable, self.tax_rate)
        total = max(ZERO, quantize_money(taxable + tax))
        points_earned = self.points_for(total) if self.points_for else 0

        return {
            "subtotal": subtotal,
            "discount": discount,
            "points_discount": points_discount,
            "points_redeemed": points_redeemed,
            "tax": tax,
            "tax_rate": self.tax_rate,
            "total": total,
            "points_earned": points_earned,
            "item_count": sum(line.quantity for line in self.lines),
        }
