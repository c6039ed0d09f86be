import logging
from decimal import Decimal
from typing import Optional

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from core_backend.exceptions import ServiceError
from tenant.managers import get_current_tenant
from .models import Customer, normalize_phone

logger = logging.getLogger(__name__)


class CustomerService:
    """
    Phone-keyed customer records and their order statistics.
    """

    @staticmethod
    def lookup_by_phone(phone: str) -> Optional[Customer]:
        phone = normalize_phone(phone)
        if not phone:
            return None
        return Customer.objects.select_related('tier').filter(phone=phone).first()

    @staticmethod
    @transaction.atomic
    def find_or_create_by_phone(phone: str, name: str = "", email: str = "") -> Customer:
        """
        Return the tenant's customer with this phone, creating one if needed.
        A missing name or email on an existing record is filled in.
        """
        normalized = normalize_phone(phone)
        if not normalized:
            raise ServiceError("Phone number required", code="phone_required")

        tenant = get_current_tenant()
        customer, created = Customer.objects.select_for_update().get_or_create(
            tenant=tenant,
            phone=normalized,
            defaults={'name': (name or '').strip() or "Guest", 'email': email or ''},
        )

        if created:
            from loyalty.services import LoyaltyService
            LoyaltyService.refresh_tier(customer)
            logger.info(f"Created customer {customer.pk} for tenant '{tenant.slug}'")
            return customer

        update_fields = []
        if name and customer.name in ("", "Guest"):
            customer.name = name.strip()
            update_fields.append('name')
        if email and not customer.email:
            customer.email = email
            update_fields.append('email')
        if update_fields:
            customer.save(update_fields=update_fields + ['updated_at'])
        return customer

    @staticmethod
    @transaction.atomic
    def record_order(customer: Customer, total: Decimal, points_earned: int = 0, order=None) -> Customer:
        """
        Count a placed order against the customer: orders, spend, last order
        time, and the points it earned (which may move them up a tier).
        """
        Customer.objects.filter(pk=customer.pk).update(
            total_orders=F('total_orders') + 1,
            total_spent=F('total_spent') + total,
            last_order_at=timezone.now(),
        )
        customer.refresh_from_db()

        from loyalty.services import LoyaltyService
        if points_earned > 0:
            LoyaltyService.award_points(
                customer, points_earned, order=order,
                description=f"Order {order.order_number}" if order else "Order",
            )
        else:
            LoyaltyService.refresh_tier(customer)
        return customer

    @staticmethod
    @transaction.atomic
    def reverse_order(customer: Customer, total: Decimal) -> Customer:
        """Undo record_order's statistics for a cancelled order."""
        customer = Customer.objects.select_for_update().get(pk=customer.pk)
        customer.total_orders = max(0, customer.total_orders - 1)
        customer.total_spent = max(Decimal("0.00"), customer.total_spent - total)
        customer.save(update_fields=['total_orders', 'total_spent', 'updated_at'])
        return customer
