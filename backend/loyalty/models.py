from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from tenant.managers import TenantManager


class LoyaltyTier(models.Model):
    """
    A customer segment unlocked by lifetime points (Bronze, Silver, Gold...).

    `is_active` switches a tier on or off for assignment; tiers are not archived.
    """

    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='loyalty_tiers'
    )
    name = models.CharField(max_length=50)
    min_points = models.PositiveIntegerField(default=0)
    points_multiplier = models.DecimalField(
        max_digits=4,
        decimal_places=2,
        default=Decimal("1.00"),
        validators=[MinValueValidator(Decimal("0"))],
    )
    benefits = models.JSONField(default=list, blank=True)
    color = models.CharField(max_length=7, default="#CD7F32")
    icon = models.CharField(max_length=50, blank=True)
    sort_order = models.IntegerField(default=0)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        ordering = ['min_points', 'sort_order']
        constraints = [
            models.UniqueConstraint(fields=['tenant', 'name'], name='unique_tier_name_per_tenant'),
        ]

    def __str__(self):
        return self.name


class PointsEarningRule(models.Model):
    """
    A configurable way to earn points.

    conditions (all optional):
        {"min_order_value": "20.00", "branch_ids": [1, 2], "order_types": ["takeaway"]}
    """

    class TriggerType(models.TextChoices):
        ORDER = "order", "Order placed"
        SIGNUP = "signup", "Sign up"
        REFERRAL = "referral", "Referral"
        REVIEW = "review", "Review"
        BIRTHDAY = "birthday", "Birthday"
        CUSTOM = "custom", "Custom"

    class PointsType(models.TextChoices):
        FIXED = "fixed", "Fixed points"
        MULTIPLIER = "multiplier", "Points per currency unit"
        PERCENTAGE = "percentage", "Percentage of amount"

    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='earning_rules'
    )
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True)
    trigger_type = models.CharField(max_length=20, choices=TriggerType.choices, default=TriggerType.ORDER)
    points_type = models.CharField(max_length=20, choices=PointsType.choices, default=PointsType.MULTIPLIER)
    points_value = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0"))],
    )
    conditions = models.JSONField(default=dict, blank=True)
    tier_multiplier_enabled = models.BooleanField(
        default=True,
        help_text="Multiply the result by the customer's tier multiplier."
    )
    is_active = models.BooleanField(default=True)
    start_date = models.DateTimeField(null=True, blank=True)
    end_date = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        ordering = ['trigger_type', 'name']
        indexes = [
            models.Index(fields=['tenant', 'trigger_type', 'is_active']),
        ]

    def __str__(self):
        return self.name

    def clean(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValidationError({"end_date": "End date must be after start date."})

    def is_in_window(self, at=None):
        at = at or timezone.now()
        if self.start_date and at < self.start_date:
            return False
        if self.end_date and at > self.end_date:
            return False
        return True


class PointsTransaction(models.Model):
    """
    Ledger entry for every change to a customer's points balance.
    `points` is signed; `balance_after` is the balance once it was applied.
    """

    class Type(models.TextChoices):
        EARNED = "earned", "Earned"
        REDEEMED = "redeemed", "Redeemed"
        EXPIRED = "expired", "Expired"
        ADJUSTED = "adjusted", "Adjusted"

    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='points_transactions'
    )
    customer = models.ForeignKey(
        'customers.Customer',
        on_delete=models.CASCADE,
        related_name='points_transactions'
    )
    order = models.ForeignKey(
        'orders.Order',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='points_transactions'
    )
    points = models.IntegerField()
    type = models.CharField(max_length=20, choices=Type.choices)
    description = models.CharField(max_length=255, blank=True)
    balance_after = models.IntegerField()
    created_at = models.DateTimeField(auto_now_add=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['tenant', 'customer', '-created_at']),
        ]

    def __str__(self):
        return f"{self.customer_id}: {self.points:+d} ({self.type})"


class LoyaltyReward(models.Model):
    """
    Catalog entry customers can exchange points for.
    `quantity_available` of None means unlimited stock.
    """

    class RewardType(models.TextChoices):
        FREE_ITEM = "free_item", "Free item"
        DISCOUNT = "discount", "Discount"
        EXPERIENCE = "experience", "Experience"
        MERCHANDISE = "merchandise", "Merchandise"

    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='loyalty_rewards'
    )
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True)
    reward_type = models.CharField(max_length=20, choices=RewardType.choices, default=RewardType.FREE_ITEM)
    points_cost = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    tier_required = models.ForeignKey(
        LoyaltyTier,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='rewards'
    )
    quantity_available = models.PositiveIntegerField(null=True, blank=True)
    quantity_redeemed = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)
    start_date = models.DateTimeField(null=True, blank=True)
    end_date = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        ordering = ['points_cost', 'name']

    def __str__(self):
        return self.name

    @property
    def in_stock(self):
        return self.quantity_available is None or self.quantity_redeemed < self.quantity_available

    def is_in_window(self, at=None):
        at = at or timezone.now()
        if self.start_date and at < self.start_date:
            return False
        if self.end_date and at > self.end_date:
            return False
        return True
