from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from core_backend.utils.archiving import SoftDeleteMixin
from tenant.managers import TenantManager, TenantSoftDeleteManager


class Ingredient(SoftDeleteMixin):
    tenant = models.ForeignKey('tenant.Tenant', on_delete=models.CASCADE, related_name='ingredients')
    name = models.CharField(max_length=150)
    unit = models.CharField(max_length=20, default='pcs', help_text="kg, g, l, ml, pcs, ...")
    category = models.CharField(max_length=100, blank=True)
    cost_per_unit = models.DecimalField(
        max_digits=10, decimal_places=4, default=Decimal('0'), validators=[MinValueValidator(0)]
    )
    min_stock_level = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        default=Decimal('0'),
        validators=[MinValueValidator(0)],
        help_text="Stock at or below this level is reported as low.",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TenantSoftDeleteManager()
    all_objects = models.Manager()

    class Meta:
        ordering = ['name']
        unique_together = [('tenant', 'name')]

    def __str__(self):
        return f"{self.name} ({self.unit})"


class MenuItemIngredient(models.Model):
    """One recipe line: how much of an ingredient one unit of a menu item uses."""

    tenant = models.ForeignKey('tenant.Tenant', on_delete=models.CASCADE, related_name='recipe_lines')
    menu_item = models.ForeignKey('menu.MenuItem', on_delete=models.CASCADE, related_name='recipe_lines')
    ingredient = models.ForeignKey(Ingredient, on_delete=models.PROTECT, related_name='recipe_lines')
    quantity = models.DecimalField(max_digits=10, decimal_places=3)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        unique_together = [('menu_item', 'ingredient')]

    def __str__(self):
        return f"{self.menu_item_id}: {self.quantity} x {self.ingredient.name}"


class StockLevel(models.Model):
    tenant = models.ForeignKey('tenant.Tenant', on_delete=models.CASCADE, related_name='stock_levels')
    branch = models.ForeignKey('branches.Branch', on_delete=models.CASCADE, related_name='stock_levels')
    ingredient = models.ForeignKey(Ingredient, on_delete=models.CASCADE, related_name='stock_levels')
    current_quantity = models.DecimalField(max_digits=12, decimal_places=3, default=Decimal('0'))
    updated_at = models.DateTimeField(auto_now=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        unique_together = [('branch', 'ingredient')]
        ordering = ['ingredient__name']

    def __str__(self):
        return f"{self.ingredient.name} @ {self.branch.name}: {self.current_quantity}"

    @property
    def is_low(self):
        return self.current_quantity <= self.ingredient.min_stock_level


class StockUsageLog(models.Model):
    tenant = models.ForeignKey('tenant.Tenant', on_delete=models.CASCADE, related_name='stock_usage_logs')
    order = models.ForeignKey(
        'orders.Order', on_delete=models.SET_NULL, null=True, blank=True, related_name='stock_usage'
    )
    branch = models.ForeignKey('branches.Branch', on_delete=models.CASCADE, related_name='stock_usage_logs')
    ingredient = models.ForeignKey(Ingredient, on_delete=models.CASCADE, related_name='usage_logs')
    quantity_used = models.DecimalField(max_digits=12, decimal_places=3)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.quantity_used} {self.ingredient.unit} {self.ingredient.name} (order {self.order_id})"
