from core_backend.exceptions import NotFoundError, ServiceError


class OrderError(ServiceError):
    default_code = "order_error"
    default_message = "The order could not be processed."


class EmptyOrderError(OrderError):
    default_code = "empty_order"
    default_message = "Your cart is empty."


class BranchUnavailableError(OrderError):
    default_code = "branch_unavailable"
    default_message = "This branch is not accepting orders."


class OrderNotFound(NotFoundError):
    default_code = "order_not_found"
    default_message = "Order not found"
