from core_backend.exceptions import ServiceError


class StockAdjustmentError(ServiceError):
    default_code = "stock_adjustment_invalid"
    default_message = "Invalid stock adjustment."


class RecipeError(ServiceError):
    default_code = "recipe_invalid"
    default_message = "Invalid recipe."
