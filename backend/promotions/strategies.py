from abc import ABC, abstractmethod
from decimal import Decimal

from orders.pricing import FIXED, PERCENTAGE, calculate_discount
from .models import Promotion


class PromotionStrategy(ABC):
    """The interface for a promotion strategy."""

    @abstractmethod
    def apply(self, subtotal: Decimal, promotion: Promotion) -> Decimal:
        pass


class PercentagePromotionStrategy(PromotionStrategy):
    """Takes discount_value percent off the subtotal."""

    def apply(self, subtotal, promotion):
        return calculate_discount(subtotal, PERCENTAGE, promotion.discount_value)


class FixedAmountPromotionStrategy(PromotionStrategy):
    """Takes a fixed amount off, never more than the subtotal."""

    def apply(self, subtotal, promotion):
        return calculate_discount(subtotal, FIXED, promotion.discount_value)


class PromotionStrategyFactory:
    _strategies = {
        Promotion.DiscountType.PERCENTAGE: PercentagePromotionStrategy(),
        Promotion.DiscountType.FIXED: FixedAmountPromotionStrategy(),
    }

    @staticmethod
    def get_strategy(promotion: Promotion) -> PromotionStrategy:
        strategy = PromotionStrategyFactory._strategies.get(promotion.discount_type)
        if not strategy:
            raise ValueError(f"No strategy found for promotion type '{promotion.discount_type}'")
        return strategy
