import logging
from typing import Optional

from django.db import transaction
from django.db.models import F

from customers.models import Customer
from orders.pricing import calculate_points_value
from .exceptions import InsufficientPointsError, LoyaltyError, RewardUnavailableError
from .models import LoyaltyReward, LoyaltyTier, PointsEarningRule, PointsTransaction

logger = logging.getLogger(__name__)


class LoyaltyService:
    """
    Points balance changes, tier placement and reward redemption.

    Every balance change goes through _apply so the ledger and the balance
    never disagree.
    """

    # --- tiers ---

    @staticmethod
    def get_tier_for_points(points: int) -> Optional[LoyaltyTier]:
        return (
            LoyaltyTier.objects.filter(is_active=True, min_points__lte=max(points, 0))
            .order_by('-min_points')
            .first()
        )

    @staticmethod
    def get_next_tier(points: int) -> Optional[LoyaltyTier]:
        return (
            LoyaltyTier.objects.filter(is_active=True, min_points__gt=max(points, 0))
            .order_by('min_points')
            .first()
        )

    @staticmethod
    def refresh_tier(customer: Customer) -> Customer:
        tier = LoyaltyService.get_tier_for_points(customer.lifetime_points)
        if customer.tier_id != (tier.pk if tier else None):
            previous = customer.tier_id
            customer.tier = tier
            customer.save(update_fields=['tier', 'updated_at'])
            logger.info(f"Customer {customer.pk} moved from tier {previous} to {customer.tier_id}")
        return customer

    # --- balance ---

    @staticmethod
    def _apply(customer: Customer, points: int, txn_type: str, order=None,
               description: str = "", lifetime_delta: int = 0) -> PointsTransaction:
        Customer.objects.filter(pk=customer.pk).update(
            points_balance=F('points_balance') + points,
            lifetime_points=F('lifetime_points') + lifetime_delta,
        )
        customer.refresh_from_db(fields=['points_balance', 'lifetime_points'])
        return PointsTransaction.objects.create(
            tenant=customer.tenant,
            customer=customer,
            order=order,
            points=points,
            type=txn_type,
            description=description,
            balance_after=customer.points_balance,
        )

    @staticmethod
    def _locked(customer: Customer) -> Customer:
        return Customer.objects.select_for_update().select_related('tier').get(pk=customer.pk)

    @staticmethod
    @transaction.atomic
    def award_points(customer: Customer, points: int, order=None, description: str = "") -> Optional[PointsTransaction]:
        if points <= 0:
            return None
        txn = LoyaltyService._apply(
            customer, points, PointsTransaction.Type.EARNED, order=order,
            description=description or "Points earned", lifetime_delta=points,
        )
        LoyaltyService.refresh_tier(customer)
        logger.info(f"Awarded {points} points to customer {customer.pk} (balance {txn.balance_after})")
        return txn

    @staticmethod
    @transaction.atomic
    def redeem_points(customer: Customer, points: int, order=None, description: str = "") -> PointsTransaction:
        if points <= 0:
            raise LoyaltyError("Points to redeem must be positive", code="invalid_points")
        locked = LoyaltyService._locked(customer)
        if locked.points_balance < points:
            raise InsufficientPointsError(
                f"Insufficient points: {locked.points_balance} available, {points} requested"
            )
        txn = LoyaltyService._apply(
            customer, -points, PointsTransaction.Type.REDEEMED, order=order,
            description=description or "Points redeemed",
        )
        logger.info(f"Customer {customer.pk} redeemed {points} points (balance {txn.balance_after})")
        return txn

    @staticmethod
    @transaction.atomic
    def adjust_points(customer: Customer, points: int, description: str = "") -> PointsTransaction:
        """Manual correction by staff. Positive adjustments also count towards tiers."""
        if points == 0:
            raise LoyaltyError("Adjustment cannot be zero", code="invalid_points")
        locked = LoyaltyService._locked(customer)
        if locked.points_balance + points < 0:
            raise InsufficientPointsError(
                f"Adjustment would make the balance negative ({locked.points_balance} available)"
            )
        txn = LoyaltyService._apply(
            customer, points, PointsTransaction.Type.ADJUSTED,
            description=description or "Manual adjustment",
            lifetime_delta=max(points, 0),
        )
        LoyaltyService.refresh_tier(customer)
        logger.info(f"Adjusted customer {customer.pk} points by {points:+d}")
        return txn

    @staticmethod
    @transaction.atomic
    def reverse_order_points(order) -> list:
        """
        For a cancelled order: take back what it earned (never below zero)
        and refund what it redeemed.
        """
        customer = order.customer
        if customer is None:
            return []

        transactions = []
        locked = LoyaltyService._locked(customer)

        earned = PointsTransaction.objects.filter(
            order=order, type=PointsTransaction.Type.EARNED
        ).values_list('points', flat=True)
        earned_total = sum(earned)
        clawback = min(earned_total, max(locked.points_balance, 0))
        if clawback > 0:
            transactions.append(LoyaltyService._apply(
                customer, -clawback, PointsTransaction.Type.ADJUSTED, order=order,
                description=f"Reversal of points earned on {order.order_number}",
                lifetime_delta=-min(clawback, locked.lifetime_points),
            ))

        if order.points_redeemed > 0:
            transactions.append(LoyaltyService._apply(
                customer, order.points_redeemed, PointsTransaction.Type.ADJUSTED, order=order,
                description=f"Refund of points redeemed on {order.order_number}",
            ))

        if transactions:
            LoyaltyService.refresh_tier(customer)
            logger.info(f"Reversed loyalty points for cancelled order {order.order_number}")
        return transactions

    # --- rewards ---

    @staticmethod
    def tier_rank(tier: Optional[LoyaltyTier]) -> int:
        return tier.min_points if tier is not None else -1

    @staticmethod
    @transaction.atomic
    def redeem_reward(customer: Customer, reward: LoyaltyReward) -> PointsTransaction:
        reward = LoyaltyReward.objects.select_for_update().select_related('tier_required').get(pk=reward.pk)
        locked = LoyaltyService._locked(customer)

        if not reward.is_active or not reward.is_in_window():
            raise RewardUnavailableError("This reward is not currently available.")
        if reward.tier_required and LoyaltyService.tier_rank(locked.tier) < reward.tier_required.min_points:
            raise RewardUnavailableError(
                f"This reward requires {reward.tier_required.name} tier or higher.",
                code="tier_required",
            )
        if not reward.in_stock:
            raise RewardUnavailableError("This reward is out of stock.", code="reward_out_of_stock")
        if locked.points_balance < reward.points_cost:
            raise InsufficientPointsError(
                f"Insufficient points: {reward.points_cost} required, {locked.points_balance} available"
            )

        txn = LoyaltyService._apply(
            customer, -reward.points_cost, PointsTransaction.Type.REDEEMED,
            description=f"Reward: {reward.name}",
        )
        LoyaltyReward.objects.filter(pk=reward.pk).update(quantity_redeemed=F('quantity_redeemed') + 1)
        logger.info(f"Customer {customer.pk} redeemed reward {reward.pk} for {reward.points_cost} points")
        return txn

    # --- rules ---

    @staticmethod
    def toggle_rule(rule: PointsEarningRule) -> PointsEarningRule:
        rule.is_active = not rule.is_active
        rule.save(update_fields=['is_active', 'updated_at'])
        return rule

    @staticmethod
    def duplicate_rule(rule: PointsEarningRule) -> PointsEarningRule:
        copy = PointsEarningRule.objects.create(
            tenant=rule.tenant,
            name=f"{rule.name} (Copy)",
            description=rule.description,
            trigger_type=rule.trigger_type,
            points_type=rule.points_type,
            points_value=rule.points_value,
            conditions=dict(rule.conditions or {}),
            tier_multiplier_enabled=rule.tier_multiplier_enabled,
            is_active=False,
            start_date=rule.start_date,
            end_date=rule.end_date,
        )
        logger.info(f"Duplicated earning rule {rule.pk} as {copy.pk}")
        return copy

    # --- storefront ---

    @staticmethod
    def summary(customer: Customer, ratio: int) -> dict:
        """Balance, its currency value and tier progress for the loyalty lookup."""
        next_tier = LoyaltyService.get_next_tier(customer.lifetime_points)
        return {
            "name": customer.name,
            "points_balance": customer.points_balance,
            "points_value": calculate_points_value(customer.points_balance, ratio),
            "lifetime_points": customer.lifetime_points,
            "total_orders": customer.total_orders,
            "tier": customer.tier,
            "next_tier": next_tier,
            "points_to_next_tier": (next_tier.min_points - customer.lifetime_points) if next_tier else None,
        }

    @staticmethod
    def active_tiers():
        return LoyaltyTier.objects.filter(is_active=True).order_by('min_points', 'sort_order')
