from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from tenant.managers import TenantManager


class Order(models.Model):
    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        CONFIRMED = "confirmed", "Confirmed"
        PREPARING = "preparing", "Preparing"
        READY = "ready", "Ready"
        SERVED = "served", "Served"
        COMPLETED = "completed", "Completed"
        CANCELLED = "cancelled", "Cancelled"

    class OrderType(models.TextChoices):
        DINE_IN = "dine_in", "Dine In"
        TAKEAWAY = "takeaway", "Takeaway"

    class PaymentMethod(models.TextChoices):
        CASH = "cash", "Cash"
        CARD = "card", "Card"
        ONLINE = "online", "Online"

    class PaymentStatus(models.TextChoices):
        PENDING = "pending", "Pending"
        PAID = "paid", "Paid"
        REFUNDED = "refunded", "Refunded"

    tenant = models.ForeignKey('tenant.Tenant', on_delete=models.CASCADE, related_name='orders')
    order_number = models.CharField(max_length=20)
    branch = models.ForeignKey('branches.Branch', on_delete=models.PROTECT, related_name='orders')
    customer = models.ForeignKey(
        'customers.Customer',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='orders'
    )
    table_number = models.PositiveIntegerField(null=True, blank=True)
    order_type = models.CharField(max_length=20, choices=OrderType.choices, default=OrderType.TAKEAWAY)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING, db_index=True)

    promotion = models.ForeignKey(
        'promotions.Promotion',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='orders'
    )
    promo_code = models.CharField(max_length=50, blank=True)

    # === AMOUNTS (snapshot at checkout) ===
    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    discount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    points_discount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    tax = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    points_earned = models.PositiveIntegerField(default=0)
    points_redeemed = models.PositiveIntegerField(default=0)

    payment_method = models.CharField(max_length=20, choices=PaymentMethod.choices, default=PaymentMethod.CASH)
    payment_status = models.CharField(
        max_length=20, choices=PaymentStatus.choices, default=PaymentStatus.PENDING, db_index=True
    )

    special_instructions = models.TextField(blank=True)

    # === KITCHEN TIMING ===
    started_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    prep_time_seconds = models.PositiveIntegerField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(fields=['tenant', 'order_number'], name='unique_order_number_per_tenant'),
        ]
        indexes = [
            models.Index(fields=['tenant', 'status', 'created_at']),
            models.Index(fields=['tenant', 'branch', 'created_at']),
            models.Index(fields=['tenant', 'payment_status']),
        ]

    def __str__(self):
        return self.order_number

    @property
    def is_terminal(self):
        return self.status in (self.Status.COMPLETED, self.Status.CANCELLED)


class OrderItem(models.Model):
    """
    A line on an order. Name, prices and modifiers are copied at checkout so
    later menu edits never change past orders.
    """

    tenant = models.ForeignKey('tenant.Tenant', on_delete=models.CASCADE, related_name='order_items')
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='items')
    menu_item = models.ForeignKey(
        'menu.MenuItem',
        on_delete=models.SET_NULL,
        null=True,
        related_name='order_items'
    )
    item_name = models.CharField(max_length=150)
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    modifiers = models.JSONField(default=list, blank=True, help_text='[{"id": 1, "name": "Large", "price": "2.00"}]')
    modifier_total = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    special_instructions = models.CharField(max_length=255, blank=True)
    subtotal = models.DecimalField(max_digits=12, decimal_places=2)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        ordering = ['id']

    def __str__(self):
        return f"{self.quantity} x {self.item_name}"
