from django.core.validators import MinValueValidator
from django.db import models

from tenant.managers import TenantManager


class Reservation(models.Model):
    """
    A table booking at a branch. Either linked to a known customer or
    carrying guest contact details.
    """

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        CONFIRMED = "confirmed", "Confirmed"
        CANCELLED = "cancelled", "Cancelled"
        COMPLETED = "completed", "Completed"
        NO_SHOW = "no_show", "No Show"

    tenant = models.ForeignKey('tenant.Tenant', on_delete=models.CASCADE, related_name='reservations')
    branch = models.ForeignKey('branches.Branch', on_delete=models.PROTECT, related_name='reservations')
    customer = models.ForeignKey(
        'customers.Customer',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='reservations',
    )

    guest_name = models.CharField(max_length=150, blank=True)
    guest_email = models.EmailField(blank=True)
    guest_phone = models.CharField(max_length=30, blank=True, db_index=True)

    reservation_date = models.DateField()
    reservation_time = models.TimeField()
    party_size = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    notes = models.TextField(blank=True)

    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING, db_index=True)
    admin_notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        ordering = ['-reservation_date', '-reservation_time']
        indexes = [
            models.Index(fields=['tenant', 'reservation_date', 'status']),
        ]

    def __str__(self):
        return f"{self.contact_name} x{self.party_size} on {self.reservation_date} {self.reservation_time}"

    @property
    def contact_name(self):
        if self.customer_id and self.customer.name:
            return self.customer.name
        return self.guest_name

    @property
    def contact_phone(self):
        if self.customer_id:
            return self.customer.phone
        return self.guest_phone

    @property
    def is_terminal(self):
        return self.status in (self.Status.CANCELLED, self.Status.COMPLETED, self.Status.NO_SHOW)
