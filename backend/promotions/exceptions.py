from core_backend.exceptions import ServiceError


class PromotionError(ServiceError):
    """A promo code that cannot be applied. The message is shown to the customer."""

    default_code = "promotion_invalid"
    default_message = "Invalid promo code"


class PromotionNotFound(PromotionError):
    default_code = "promotion_not_found"
    default_message = "Invalid promo code"


class PromotionInactive(PromotionError):
    default_code = "promotion_inactive"
    default_message = "This promo code is inactive"


class PromotionNotStarted(PromotionError):
    default_code = "promotion_not_started"
    default_message = "This promo code is not yet active"


class PromotionExpired(PromotionError):
    default_code = "promotion_expired"
    default_message = "This promo code has expired"


class PromotionUsageLimitReached(PromotionError):
    status_code = 409
    default_code = "promotion_usage_limit"
    default_message = "This promo code has reached its usage limit"


class PromotionMinimumNotMet(PromotionError):
    default_code = "promotion_minimum_not_met"
