"""
Order and loyalty arithmetic shared by the cart quote, checkout and
order confirmation.

All money values are Decimals quantized to 0.01 with ROUND_HALF_UP. Points
are whole numbers; fractions of a point are always dropped.

    tax                 = taxable x rate
    percentage discount = subtotal x pct / 100
    fixed discount      = min(value, subtotal)
    points earned       = floor(total x points_per_currency)
    points value        = points / ratio
"""
from decimal import Decimal, ROUND_DOWN, ROUND_HALF_UP, InvalidOperation
from typing import Union

Number = Union[Decimal, int, float, str]

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

PERCENTAGE = "percentage"
FIXED = "fixed"


def to_decimal(value: Number) -> Decimal:
    """
    Coerce a number to Decimal. Floats go through str() so 0.1 stays 0.1.
    """
    if isinstance(value, Decimal):
        return value
    if value is None or isinstance(value, bool):
        raise ValueError(f"Not a number: {value!r}")
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValueError(f"Not a number: {value!r}")


def quantize_money(value: Number) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_tax(taxable: Number, rate: Number) -> Decimal:
    """Tax on the post-discount amount. A negative base is taxed as zero."""
    taxable = to_decimal(taxable)
    rate = to_decimal(rate)
    if rate < 0:
        raise ValueError("Tax rate cannot be negative")
    if taxable <= 0:
        return ZERO
    return quantize_money(taxable * rate)


def calculate_discount(subtotal: Number, discount_type: str, value: Number) -> Decimal:
    """
    Discount for a subtotal.

    percentage: subtotal x value / 100 (value 10 means 10%)
    fixed:      min(value, subtotal)

    The result is never negative and never more than the subtotal.
    """
    subtotal = to_decimal(subtotal)
    value = to_decimal(value)
    if discount_type not in (PERCENTAGE, FIXED):
        raise ValueError(f"Unknown discount type: {discount_type!r}")
    if subtotal <= 0 or value <= 0:
        return ZERO

    if discount_type == PERCENTAGE:
        discount = subtotal * min(value, Decimal("100")) / Decimal("100")
    else:
        discount = min(value, subtotal)

    return min(quantize_money(discount), quantize_money(subtotal))


def calculate_points_earned(total: Number, points_per_currency: Number = 1) -> int:
    """floor(total x points_per_currency); zero for non-positive totals."""
    total = to_decimal(total)
    rate = to_decimal(points_per_currency)
    if total <= 0 or rate <= 0:
        return 0
    return int((total * rate).to_integral_value(rounding=ROUND_DOWN))


def calculate_points_value(points: int, ratio: int = 100) -> Decimal:
    """Currency value of `points` when `ratio` points are worth 1.00."""
    if ratio is None or int(ratio) <= 0:
        raise ValueError("Redemption ratio must be positive")
    if points <= 0:
        return ZERO
    return quantize_money(Decimal(int(points)) / Decimal(int(ratio)))


def max_redeemable_points(balance: int, amount: Number, ratio: int = 100) -> int:
    """
    The most points that can be spent against `amount`: the balance, capped
    at what it takes to bring `amount` to zero.
    """
    if int(ratio) <= 0:
        raise ValueError("Redemption ratio must be positive")
    amount = to_decimal(amount)
    if balance <= 0 or amount <= 0:
        return 0
    needed = int((amount * Decimal(int(ratio))).to_integral_value(rounding=ROUND_DOWN))
    return max(0, min(int(balance), needed))
