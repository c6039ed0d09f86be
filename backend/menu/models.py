from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

from core_backend.utils import unique_tenant_slug
from core_backend.utils.archiving import SoftDeleteMixin
from tenant.managers import TenantManager, TenantSoftDeleteManager


class Category(SoftDeleteMixin):
    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='menu_categories'
    )
    name = models.CharField(max_length=100, help_text=_("Name of the menu category."))
    slug = models.SlugField(max_length=120, blank=True)
    description = models.TextField(blank=True)
    image_url = models.URLField(blank=True)
    sort_order = models.IntegerField(
        default=0,
        help_text=_("Display order for this category. Lower numbers appear first."),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TenantSoftDeleteManager()
    all_objects = models.Manager()

    class Meta:
        verbose_name = _("Category")
        verbose_name_plural = _("Categories")
        ordering = ["sort_order", "name"]
        constraints = [
            models.UniqueConstraint(fields=['tenant', 'slug'], name='unique_category_slug_per_tenant'),
        ]

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = unique_tenant_slug(self, self.name, 120)
        super().save(*args, **kwargs)


class ModifierGroup(models.Model):
    """
    A set of choices attached to menu items, e.g. "Size" or "Extra toppings".
    """

    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='modifier_groups'
    )
    name = models.CharField(max_length=100)
    is_required = models.BooleanField(default=False)
    min_selections = models.PositiveIntegerField(default=0)
    max_selections = models.PositiveIntegerField(default=1)
    sort_order = models.IntegerField(default=0)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        ordering = ["sort_order", "name"]

    def __str__(self):
        return self.name

    def clean(self):
        if self.max_selections < self.min_selections:
            raise ValidationError({"max_selections": "Must be greater than or equal to min_selections."})

    @property
    def effective_min_selections(self):
        return max(self.min_selections, 1) if self.is_required else self.min_selections


class ModifierOption(models.Model):
    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='modifier_options'
    )
    group = models.ForeignKey(ModifierGroup, on_delete=models.CASCADE, related_name='options')
    name = models.CharField(max_length=100)
    price_adjustment = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal("0.00"),
        help_text=_("Added to the item price when selected. May be negative."),
    )
    is_default = models.BooleanField(default=False)
    is_available = models.BooleanField(default=True)
    sort_order = models.IntegerField(default=0)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        ordering = ["sort_order", "name"]

    def __str__(self):
        return f"{self.group.name}: {self.name}"


class MenuItem(SoftDeleteMixin):
    """
    An orderable dish or drink.

    `is_available` is the day-to-day "sold out" switch; archiving removes the
    item from the menu for good while keeping order history intact.
    """

    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='menu_items'
    )
    category = models.ForeignKey(
        Category,
        on_delete=models.PROTECT,
        related_name='items'
    )
    name = models.CharField(max_length=150)
    slug = models.SlugField(max_length=170, blank=True)
    description = models.TextField(blank=True)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    image_url = models.URLField(blank=True)
    calories = models.PositiveIntegerField(null=True, blank=True)

    # === DIETARY ===
    is_vegetarian = models.BooleanField(default=False)
    is_vegan = models.BooleanField(default=False)
    is_gluten_free = models.BooleanField(default=False)
    allergens = models.JSONField(default=list, blank=True)

    # === BADGES ===
    is_popular = models.BooleanField(default=False)
    is_new = models.BooleanField(default=False)

    is_available = models.BooleanField(
        default=True,
        help_text=_("Uncheck when sold out. Unavailable items stay visible to staff only."),
    )
    prep_time_minutes = models.PositiveIntegerField(default=15)
    sort_order = models.IntegerField(default=0)

    modifier_groups = models.ManyToManyField(ModifierGroup, blank=True, related_name='menu_items')

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TenantSoftDeleteManager()
    all_objects = models.Manager()

    class Meta:
        ordering = ["category__sort_order", "sort_order", "name"]
        constraints = [
            models.UniqueConstraint(fields=['tenant', 'slug'], name='unique_menu_item_slug_per_tenant'),
        ]
        indexes = [
            models.Index(fields=['tenant', 'is_active', 'is_available']),
        ]

    def __str__(self):
        return self.name

    def clean(self):
        if self.price is not None and self.price < 0:
            raise ValidationError({"price": "Price cannot be negative."})

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = unique_tenant_slug(self, self.name, 170)
        super().save(*args, **kwargs)

    @property
    def is_orderable(self):
        return self.is_active and self.is_available and self.category.is_active
