from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
from decimal import Decimal

from core_backend.utils import unique_tenant_slug
from core_backend.utils.archiving import SoftDeleteMixin
from settings.models import TimezoneChoices
from tenant.managers import TenantManager, TenantSoftDeleteManager


class Branch(SoftDeleteMixin):
    """
    A physical restaurant location.

    Orders, reservations, QR codes and stock levels all belong to a branch.
    Archived branches keep their history but disappear from the storefront.
    """

    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='branches'
    )
    name = models.CharField(max_length=100)
    slug = models.SlugField(max_length=120, blank=True)

    # === CONTACT ===
    address = models.TextField(blank=True)
    phone = models.CharField(max_length=30, blank=True)
    email = models.EmailField(blank=True)

    # === HOURS ===
    timezone = models.CharField(
        max_length=50,
        choices=TimezoneChoices.choices,
        default=TimezoneChoices.UTC,
        help_text="Timezone used to interpret opening and closing times."
    )
    opening_time = models.TimeField(help_text="Local opening time.")
    closing_time = models.TimeField(
        help_text="Local closing time. Earlier than opening_time means the branch closes after midnight."
    )

    tax_rate = models.DecimalField(
        max_digits=5,
        decimal_places=4,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("1"))],
        help_text="Overrides the tenant default tax rate when set (0.08 for 8%)."
    )
    features = models.JSONField(
        default=list,
        blank=True,
        help_text="Amenities shown on the storefront, e.g. [\"wifi\", \"parking\"]."
    )
    image_url = models.URLField(blank=True)
    sort_order = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TenantSoftDeleteManager()
    all_objects = models.Manager()

    class Meta:
        ordering = ['sort_order', 'name']
        verbose_name_plural = "Branches"
        constraints = [
            models.UniqueConstraint(fields=['tenant', 'slug'], name='unique_branch_slug_per_tenant'),
        ]
        indexes = [
            models.Index(fields=['tenant', 'is_active']),
        ]

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = unique_tenant_slug(self, self.name, 120)
        super().save(*args, **kwargs)


class QRCode(models.Model):
    """
    A table QR code. Scanning it tells the storefront which branch and table
    a dine-in order is for.
    """

    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='qr_codes'
    )
    branch = models.ForeignKey(Branch, on_delete=models.CASCADE, related_name='qr_codes')
    table_number = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    code = models.CharField(max_length=64)
    scan_count = models.PositiveIntegerField(default=0)
    last_scanned_at = models.DateTimeField(null=True, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        ordering = ['branch', 'table_number']
        verbose_name = "QR Code"
        constraints = [
            models.UniqueConstraint(fields=['tenant', 'code'], name='unique_qr_code_per_tenant'),
            models.UniqueConstraint(fields=['branch', 'table_number'], name='unique_table_per_branch'),
        ]

    def __str__(self):
        return f"{self.branch} - Table {self.table_number}"
