from core_backend.exceptions import ServiceError


class MenuItemUnavailableError(ServiceError):
    default_code = "menu_item_unavailable"
    default_message = "This menu item is currently unavailable."


class InvalidModifierSelection(ServiceError):
    default_code = "invalid_modifier_selection"
    default_message = "Invalid modifier selection."
