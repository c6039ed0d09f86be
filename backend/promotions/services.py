import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from orders.pricing import quantize_money, to_decimal
from .exceptions import (
    PromotionError,
    PromotionExpired,
    PromotionInactive,
    PromotionMinimumNotMet,
    PromotionNotFound,
    PromotionNotStarted,
    PromotionUsageLimitReached,
)
from .models import Promotion
from .strategies import PromotionStrategyFactory

logger = logging.getLogger(__name__)


class PromotionValidationService:
    """
    Checks a customer-entered promo code against a subtotal.
    """

    @staticmethod
    def get_applicable_promotion(code: str, subtotal) -> Promotion:
        """
        Return the promotion for `code` if it can be applied to `subtotal`,
        otherwise raise the PromotionError describing the first failed check.
        """
        code = (code or "").strip().upper()
        if not code:
            raise PromotionNotFound()

        promotion = Promotion.objects.with_archived().filter(code=code).first()
        if promotion is None:
            raise PromotionNotFound()

        today = timezone.localdate()
        if not promotion.is_active:
            raise PromotionInactive()
        if today < promotion.start_date:
            raise PromotionNotStarted()
        if today > promotion.end_date:
            raise PromotionExpired()
        if not promotion.is_unlimited and promotion.used_count >= promotion.max_uses:
            raise PromotionUsageLimitReached()

        subtotal = to_decimal(subtotal)
        if subtotal < promotion.min_order_value:
            from settings.services import SettingsService
            symbol = SettingsService.get_currency_symbol()
            raise PromotionMinimumNotMet(
                f"Minimum order of {symbol}{quantize_money(promotion.min_order_value)} required"
            )

        return promotion

    @staticmethod
    def calculate_discount(promotion: Promotion, subtotal) -> Decimal:
        return PromotionStrategyFactory.get_strategy(promotion).apply(to_decimal(subtotal), promotion)

    @staticmethod
    def validate_code(code: str, subtotal) -> dict:
        """
        Storefront check of a promo code.

        {"valid": False, "error": msg} on the first failure, otherwise the
        discount the code gives on `subtotal`.
        """
        try:
            promotion = PromotionValidationService.get_applicable_promotion(code, subtotal)
        except PromotionError as e:
            logger.info(f"Promo code '{(code or '').upper()}' rejected: {e.message}")
            return {"valid": False, "error": e.message}

        return {
            "valid": True,
            "discount": PromotionValidationService.calculate_discount(promotion, subtotal),
            "discount_type": promotion.discount_type,
            "discount_value": promotion.discount_value,
            "name": promotion.name,
            "code": promotion.code,
        }


class PromotionService:

    @staticmethod
    @transaction.atomic
    def redeem(promotion: Promotion) -> Promotion:
        """
        Count one use of the promotion. The row is locked so two checkouts
        cannot both take the last use.
        """
        locked = Promotion.objects.with_archived().select_for_update().get(pk=promotion.pk)
        if not locked.is_unlimited and locked.used_count >= locked.max_uses:
            logger.warning(f"Promotion {locked.code} usage limit reached during checkout")
            raise PromotionUsageLimitReached()

        Promotion.all_objects.filter(pk=locked.pk).update(used_count=F('used_count') + 1)
        locked.refresh_from_db(fields=['used_count'])
        logger.info(f"Promotion {locked.code} redeemed ({locked.used_count}/{locked.max_uses or 'unlimited'})")
        return locked
