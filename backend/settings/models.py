from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models

from tenant.managers import TenantManager


# === CHOICES ===

class TimezoneChoices(models.TextChoices):
    """Common timezone choices for branch opening hours"""
    UTC = "UTC", "UTC (Coordinated Universal Time)"

    # US Timezones
    US_EASTERN = "America/New_York", "Eastern Time (US & Canada)"
    US_CENTRAL = "America/Chicago", "Central Time (US & Canada)"
    US_MOUNTAIN = "America/Denver", "Mountain Time (US & Canada)"
    US_PACIFIC = "America/Los_Angeles", "Pacific Time (US & Canada)"

    # European Timezones
    UK_LONDON = "Europe/London", "Greenwich Mean Time (UK)"
    EUROPE_PARIS = "Europe/Paris", "Central European Time"
    EUROPE_BERLIN = "Europe/Berlin", "Central European Time (Germany)"

    # Other Common Timezones
    ASIA_DUBAI = "Asia/Dubai", "Gulf Standard Time"
    ASIA_KARACHI = "Asia/Karachi", "Pakistan Standard Time"
    AUSTRALIA_SYDNEY = "Australia/Sydney", "Australian Eastern Time"
    ASIA_TOKYO = "Asia/Tokyo", "Japan Standard Time"


# === CORE BUSINESS MODELS ===


class GlobalSettings(models.Model):
    """
    Tenant-wide settings that apply across ALL branches within a tenant.

    This model contains ONLY:
    - Brand identity and currency
    - Default tax rate (branches may override)
    - Loyalty points earning and redemption rates

    Branch-specific settings (address, hours, timezone, tax override)
    are stored on branches.Branch.
    """

    tenant = models.OneToOneField(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='global_settings'
    )

    # === BRAND IDENTITY ===
    brand_name = models.CharField(
        max_length=100,
        default="My Restaurant",
        help_text="The tenant's brand name shown on the storefront."
    )
    currency = models.CharField(
        max_length=3,
        default="USD",
        help_text="Three-letter currency code (ISO 4217). Same for all branches within tenant."
    )
    currency_symbol = models.CharField(
        max_length=5,
        default="$",
        help_text="Symbol used in customer-facing messages (e.g. minimum order amounts)."
    )

    # === FINANCIAL RULES ===
    default_tax_rate = models.DecimalField(
        max_digits=5,
        decimal_places=4,
        default=Decimal("0.05"),
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("1"))],
        help_text="Tax rate as a fraction (0.05 for 5%). Branches may override.",
    )

    # === LOYALTY ===
    points_per_currency = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        default=Decimal("1"),
        validators=[MinValueValidator(Decimal("0"))],
        help_text="Points earned per unit of currency when no earning rule matches.",
    )
    points_redemption_ratio = models.PositiveIntegerField(
        default=100,
        validators=[MinValueValidator(1)],
        help_text="Points needed for one unit of currency at checkout (100 points = 1.00).",
    )
    allow_points_redemption = models.BooleanField(
        default=True,
        help_text="If false, customers cannot spend points at checkout.",
    )

    updated_at = models.DateTimeField(auto_now=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        verbose_name = "Global Settings"
        verbose_name_plural = "Global Settings"

    def clean(self):
        # Ensure only one instance per tenant
        if self.tenant_id and GlobalSettings.all_objects.filter(tenant_id=self.tenant_id).exclude(pk=self.pk).exists():
            raise ValidationError("There can only be one GlobalSettings instance per tenant.")

    def save(self, *args, **kwargs):
        self.clean()
        super().save(*args, **kwargs)

    def __str__(self):
        tenant_name = self.tenant.name if self.tenant_id else "System"
        return f"Global Settings ({tenant_name})"
