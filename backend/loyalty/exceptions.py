from core_backend.exceptions import ServiceError


class LoyaltyError(ServiceError):
    default_code = "loyalty_error"
    default_message = "The loyalty operation could not be completed."


class InsufficientPointsError(LoyaltyError):
    default_code = "insufficient_points"
    default_message = "Insufficient points balance."


class PointsRedemptionDisabled(LoyaltyError):
    default_code = "points_redemption_disabled"
    default_message = "Points redemption is not available."


class RewardUnavailableError(LoyaltyError):
    default_code = "reward_unavailable"
    default_message = "This reward is not available."
