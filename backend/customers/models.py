import re
from decimal import Decimal

from django.db import models

from tenant.managers import TenantManager


def normalize_phone(phone):
    """
    Canonical form used for lookups: digits only.
    "+1 (555) 010-2000" and "1 555 010 2000" both become "15550102000",
    so a customer typing the number with or without '+' keeps one balance.
    """
    if not phone:
        return ""
    return re.sub(r"\D", "", phone)


class Customer(models.Model):
    """
    A storefront customer, identified by phone number within a tenant.

    Customers never log in; checkout, reservations and the loyalty lookup
    all find them by phone.
    """

    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='customers'
    )
    name = models.CharField(max_length=150, default="Guest")
    phone = models.CharField(max_length=20)
    email = models.EmailField(blank=True)
    birthday = models.DateField(null=True, blank=True)

    # === LOYALTY ===
    points_balance = models.IntegerField(default=0)
    lifetime_points = models.PositiveIntegerField(
        default=0,
        help_text="All points ever earned. Tier placement uses this, so spending points never demotes."
    )
    total_spent = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    total_orders = models.PositiveIntegerField(default=0)
    tier = models.ForeignKey(
        'loyalty.LoyaltyTier',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='customers'
    )
    last_order_at = models.DateTimeField(null=True, blank=True)

    notes = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(fields=['tenant', 'phone'], name='unique_customer_phone_per_tenant'),
        ]
        indexes = [
            models.Index(fields=['tenant', 'phone']),
        ]

    def __str__(self):
        return f"{self.name} ({self.phone})"

    def save(self, *args, **kwargs):
        self.phone = normalize_phone(self.phone)
        super().save(*args, **kwargs)
