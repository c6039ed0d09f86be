import logging

from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from core_backend.exceptions import InvalidStatusTransition
from customers.models import normalize_phone
from customers.services import CustomerService
from tenant.managers import get_current_tenant
from .exceptions import ReservationValidationError
from .models import Reservation

logger = logging.getLogger(__name__)

OPEN_STATUSES = (Reservation.Status.PENDING, Reservation.Status.CONFIRMED)


class ReservationService:
    """
    Booking creation, the status lifecycle and the back-office queries.
    """

    STATUS_TRANSITIONS = {
        Reservation.Status.PENDING: {Reservation.Status.CONFIRMED, Reservation.Status.CANCELLED},
        Reservation.Status.CONFIRMED: {
            Reservation.Status.COMPLETED,
            Reservation.Status.NO_SHOW,
            Reservation.Status.CANCELLED,
        },
        Reservation.Status.CANCELLED: set(),
        Reservation.Status.COMPLETED: set(),
        Reservation.Status.NO_SHOW: set(),
    }

    @staticmethod
    @transaction.atomic
    def create(data: dict) -> Reservation:
        """
        Create a pending reservation.

        data: branch, reservation_date, reservation_time, party_size, and either
        customer or guest_name + guest_phone (guest_email, notes optional).
        A guest phone that matches a known customer links the booking to them.
        """
        for field in ('branch', 'reservation_date', 'reservation_time', 'party_size'):
            if not data.get(field):
                raise ReservationValidationError(
                    "Branch, date, time and party size are required",
                    code="reservation_missing_fields",
                )

        if data['party_size'] < 1:
            raise ReservationValidationError("Party size must be at least 1", code="reservation_party_size")

        if data['reservation_date'] < timezone.localdate():
            raise ReservationValidationError("Reservation date cannot be in the past", code="reservation_past_date")

        customer = data.get('customer')
        guest_name = (data.get('guest_name') or '').strip()
        guest_phone = normalize_phone(data.get('guest_phone') or '')

        if customer is None:
            if not guest_name or not guest_phone:
                raise ReservationValidationError(
                    "Guest name and phone are required for non-registered users",
                    code="reservation_guest_details",
                )
            customer = CustomerService.lookup_by_phone(guest_phone)

        reservation = Reservation.objects.create(
            tenant=get_current_tenant(),
            branch=data['branch'],
            customer=customer,
            guest_name=guest_name,
            guest_email=data.get('guest_email') or '',
            guest_phone=guest_phone,
            reservation_date=data['reservation_date'],
            reservation_time=data['reservation_time'],
            party_size=data['party_size'],
            notes=data.get('notes') or '',
            status=Reservation.Status.PENDING,
        )
        logger.info(
            f"Reservation {reservation.pk} created at branch {reservation.branch_id} "
            f"for {reservation.reservation_date} {reservation.reservation_time} (party of {reservation.party_size})"
        )
        return reservation

    @staticmethod
    def can_transition(current: str, new_status: str) -> bool:
        return new_status in ReservationService.STATUS_TRANSITIONS.get(current, set())

    @staticmethod
    @transaction.atomic
    def update_status(reservation: Reservation, new_status: str, admin_notes=None) -> Reservation:
        if not ReservationService.can_transition(reservation.status, new_status):
            raise InvalidStatusTransition(reservation.status, new_status)

        previous = reservation.status
        reservation.status = new_status
        update_fields = ['status', 'updated_at']
        if admin_notes is not None:
            reservation.admin_notes = admin_notes
            update_fields.append('admin_notes')
        reservation.save(update_fields=update_fields)

        logger.info(f"Reservation {reservation.pk} status {previous} -> {new_status}")
        return reservation

    # --- queries ---

    @staticmethod
    def upcoming(branch=None):
        queryset = Reservation.objects.filter(
            reservation_date__gte=timezone.localdate(),
            status__in=OPEN_STATUSES,
        )
        if branch is not None:
            queryset = queryset.filter(branch=branch)
        return queryset.select_related('branch', 'customer').order_by('reservation_date', 'reservation_time')

    @staticmethod
    def for_phone(phone: str):
        phone = normalize_phone(phone)
        if not phone:
            return Reservation.objects.none()
        return (
            Reservation.objects.filter(Q(guest_phone=phone) | Q(customer__phone=phone))
            .select_related('branch', 'customer')
            .order_by('-reservation_date', '-reservation_time')
        )

    @staticmethod
    def stats() -> dict:
        today = timezone.localdate()
        reservations = Reservation.objects.all()
        return {
            'pending': reservations.filter(status=Reservation.Status.PENDING).count(),
            'confirmed': reservations.filter(status=Reservation.Status.CONFIRMED).count(),
            'today': reservations.filter(reservation_date=today, status__in=OPEN_STATUSES).count(),
            'upcoming': reservations.filter(reservation_date__gt=today, status__in=OPEN_STATUSES).count(),
        }
