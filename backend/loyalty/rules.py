"""
Points earning rule evaluation.

Each points_type has its own strategy; EarningRuleEvaluator picks the best
matching active rule for a trigger.
"""
import logging
from abc import ABC, abstractmethod
from decimal import Decimal, ROUND_DOWN
from typing import Optional

from orders.pricing import calculate_points_earned, to_decimal
from .models import PointsEarningRule

logger = logging.getLogger(__name__)


def _floor(value: Decimal) -> int:
    return int(value.to_integral_value(rounding=ROUND_DOWN))


class PointsStrategy(ABC):
    """The interface for turning an amount into points under one rule."""

    @abstractmethod
    def points(self, rule: PointsEarningRule, amount: Decimal) -> int:
        pass


class FixedPointsStrategy(PointsStrategy):
    """A flat award, regardless of amount."""

    def points(self, rule, amount):
        return _floor(rule.points_value)


class MultiplierPointsStrategy(PointsStrategy):
    """points_value points per unit of currency."""

    def points(self, rule, amount):
        return calculate_points_earned(amount, rule.points_value)


class PercentagePointsStrategy(PointsStrategy):
    """points_value percent of the amount, as points."""

    def points(self, rule, amount):
        return calculate_points_earned(amount, rule.points_value / Decimal("100"))


class PointsStrategyFactory:
    _strategies = {
        PointsEarningRule.PointsType.FIXED: FixedPointsStrategy(),
        PointsEarningRule.PointsType.MULTIPLIER: MultiplierPointsStrategy(),
        PointsEarningRule.PointsType.PERCENTAGE: PercentagePointsStrategy(),
    }

    @staticmethod
    def get_strategy(points_type: str) -> PointsStrategy:
        strategy = PointsStrategyFactory._strategies.get(points_type)
        if not strategy:
            raise ValueError(f"No points strategy found for type '{points_type}'")
        return strategy


class EarningRuleEvaluator:

    @staticmethod
    def conditions_met(rule: PointsEarningRule, amount: Decimal, context: dict) -> bool:
        """
        Every condition present on the rule must hold. Context keys:
        branch_id, order_type.
        """
        conditions = rule.conditions or {}

        min_order_value = conditions.get("min_order_value")
        if min_order_value not in (None, "") and amount < to_decimal(min_order_value):
            return False

        branch_ids = conditions.get("branch_ids")
        if branch_ids:
            branch_id = context.get("branch_id")
            if branch_id is None or int(branch_id) not in {int(b) for b in branch_ids}:
                return False

        order_types = conditions.get("order_types")
        if order_types and context.get("order_type") not in order_types:
            return False

        return True

    @staticmethod
    def rule_points(rule: PointsEarningRule, amount: Decimal, customer=None) -> int:
        points = PointsStrategyFactory.get_strategy(rule.points_type).points(rule, amount)
        tier = getattr(customer, 'tier', None) if customer is not None else None
        if rule.tier_multiplier_enabled and tier is not None and tier.is_active:
            points = _floor(Decimal(points) * tier.points_multiplier)
        return max(0, points)

    @staticmethod
    def points_for(trigger: str, amount=Decimal("0"), customer=None, context: Optional[dict] = None,
                   points_per_currency=None) -> int:
        """
        Points a customer earns for `trigger` on `amount`.

        The best matching rule wins. With no matching rule, orders fall back
        to floor(amount x points_per_currency) and other triggers earn nothing.
        """
        amount = to_decimal(amount)
        context = context or {}

        rules = [
            rule
            for rule in PointsEarningRule.objects.filter(trigger_type=trigger, is_active=True)
            if rule.is_in_window() and EarningRuleEvaluator.conditions_met(rule, amount, context)
        ]

        if rules:
            best = max(EarningRuleEvaluator.rule_points(rule, amount, customer) for rule in rules)
            logger.debug(f"{len(rules)} earning rule(s) matched trigger '{trigger}', best={best}")
            return best

        if trigger == PointsEarningRule.TriggerType.ORDER:
            if points_per_currency is None:
                from settings.services import SettingsService
                points_per_currency = SettingsService.get_points_per_currency()
            return calculate_points_earned(amount, points_per_currency)

        return 0
