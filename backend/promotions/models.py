from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from core_backend.utils.archiving import SoftDeleteMixin
from tenant.managers import TenantSoftDeleteManager


class Promotion(SoftDeleteMixin):
    """
    A code-activated discount on the order subtotal.

    start_date and end_date are inclusive calendar days. max_uses of 0 means
    the code can be used any number of times.
    """

    class DiscountType(models.TextChoices):
        PERCENTAGE = "percentage", "Percentage"
        FIXED = "fixed", "Fixed Amount"

    tenant = models.ForeignKey('tenant.Tenant', on_delete=models.CASCADE, related_name='promotions')

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    code = models.CharField(max_length=50, help_text="Stored upper-case; unique per tenant")
    discount_type = models.CharField(max_length=20, choices=DiscountType.choices)
    discount_value = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text="Percent (10 = 10%) or a fixed amount, depending on discount_type.",
    )
    min_order_value = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="The minimum subtotal required for the code to apply.",
    )
    max_uses = models.PositiveIntegerField(default=0, help_text="0 = unlimited")
    used_count = models.PositiveIntegerField(default=0)
    start_date = models.DateField()
    end_date = models.DateField()

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TenantSoftDeleteManager()
    all_objects = models.Manager()

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=['tenant', 'code'],
                name='unique_promotion_code_per_tenant'
            ),
        ]
        indexes = [
            models.Index(fields=['tenant', 'code']),
            models.Index(fields=['tenant', 'is_active', 'start_date', 'end_date']),
        ]

    def __str__(self):
        return f"{self.name} ({self.code})"

    def clean(self):
        """Validate discount value based on type."""
        super().clean()
        if self.discount_value is not None and self.discount_value <= 0:
            raise ValidationError({'discount_value': 'Discount value must be greater than zero.'})
        if self.discount_type == self.DiscountType.PERCENTAGE and self.discount_value and self.discount_value > 100:
            raise ValidationError({'discount_value': 'Percentage discount cannot exceed 100%.'})
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValidationError({'end_date': 'End date must be on or after the start date.'})

    def save(self, *args, **kwargs):
        if self.code:
            self.code = self.code.strip().upper()
        super().save(*args, **kwargs)

    @property
    def is_unlimited(self):
        return self.max_uses == 0

    @property
    def uses_remaining(self):
        return None if self.is_unlimited else max(0, self.max_uses - self.used_count)

    def is_currently_active(self, today=None):
        """Active (not archived) and today falls within the date range."""
        today = today or timezone.localdate()
        return self.is_active and self.start_date <= today <= self.end_date
