from core_backend.exceptions import ServiceError


class ReservationValidationError(ServiceError):
    default_code = "reservation_invalid"
    default_message = "Invalid reservation."
