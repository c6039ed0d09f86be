import logging
from datetime import timedelta
from decimal import Decimal, InvalidOperation

from django.db import transaction
from django.db.models import DecimalField, ExpressionWrapper, F, Sum
from django.utils import timezone

from tenant.managers import get_current_tenant
from .exceptions import RecipeError, StockAdjustmentError
from .models import MenuItemIngredient, StockLevel, StockUsageLog

logger = logging.getLogger(__name__)

ZERO = Decimal('0')


def _quantity(value) -> Decimal:
    try:
        return Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise StockAdjustmentError(f"Invalid quantity format: {value}", code="stock_invalid_quantity")


class StockService:
    """
    Ingredient stock per branch: manual adjustments, recipes, and the
    deduction that follows every placed order.
    """

    ADJUST_SET = 'set'
    ADJUST_ADD = 'add'
    ADJUST_SUBTRACT = 'subtract'
    ADJUST_TYPES = (ADJUST_SET, ADJUST_ADD, ADJUST_SUBTRACT)

    # --- recipes ---

    @staticmethod
    def get_recipe(menu_item):
        return MenuItemIngredient.objects.filter(menu_item=menu_item).select_related('ingredient')

    @staticmethod
    @transaction.atomic
    def set_recipe(menu_item, lines):
        """
        Replace the menu item's recipe.

        lines: iterable of {"ingredient": Ingredient, "quantity": Decimal}.
        An empty list clears the recipe.
        """
        seen = set()
        for line in lines:
            if line['ingredient'].pk in seen:
                raise RecipeError(
                    f"Ingredient '{line['ingredient'].name}' is listed more than once",
                    code="recipe_duplicate_ingredient",
                )
            if _quantity(line['quantity']) <= ZERO:
                raise RecipeError("Recipe quantities must be greater than zero", code="recipe_invalid_quantity")
            seen.add(line['ingredient'].pk)

        MenuItemIngredient.objects.filter(menu_item=menu_item).delete()
        tenant = get_current_tenant()
        MenuItemIngredient.objects.bulk_create([
            MenuItemIngredient(
                tenant=tenant,
                menu_item=menu_item,
                ingredient=line['ingredient'],
                quantity=_quantity(line['quantity']),
            )
            for line in lines
        ])
        logger.info(f"Recipe for menu item {menu_item.pk} set to {len(seen)} ingredient(s)")
        return StockService.get_recipe(menu_item)

    # --- stock levels ---

    @staticmethod
    def stock_levels(branch=None):
        queryset = StockLevel.objects.filter(ingredient__is_active=True).select_related('branch', 'ingredient')
        if branch is not None:
            queryset = queryset.filter(branch=branch)
        return queryset.order_by('branch__name', 'ingredient__name')

    @staticmethod
    def low_stock(branch=None):
        """Levels at or under the ingredient's minimum, emptiest first."""
        return (
            StockService.stock_levels(branch)
            .filter(current_quantity__lte=F('ingredient__min_stock_level'))
            .order_by('current_quantity', 'ingredient__name')
        )

    @staticmethod
    @transaction.atomic
    def adjust(branch, ingredient, adjust_type: str, quantity) -> StockLevel:
        """
        Manual stock adjustment.

        set      -> current_quantity = quantity
        add      -> current_quantity + quantity
        subtract -> current_quantity - quantity, refused if it would go below zero
        """
        if adjust_type not in StockService.ADJUST_TYPES:
            raise StockAdjustmentError(f"Unknown adjustment type '{adjust_type}'", code="stock_invalid_type")

        quantity = _quantity(quantity)
        if quantity < ZERO:
            raise StockAdjustmentError("Quantity cannot be negative", code="stock_negative_quantity")

        level, created = StockLevel.objects.select_for_update().get_or_create(
            branch=branch,
            ingredient=ingredient,
            defaults={'tenant': get_current_tenant(), 'current_quantity': ZERO},
        )
        previous = level.current_quantity

        if adjust_type == StockService.ADJUST_SET:
            StockLevel.objects.filter(pk=level.pk).update(current_quantity=quantity)
        elif adjust_type == StockService.ADJUST_ADD:
            StockLevel.objects.filter(pk=level.pk).update(current_quantity=F('current_quantity') + quantity)
        else:
            if previous < quantity:
                raise StockAdjustmentError(
                    f"Insufficient stock for {ingredient.name}: only {previous} {ingredient.unit} available",
                    code="stock_insufficient",
                )
            StockLevel.objects.filter(pk=level.pk).update(current_quantity=F('current_quantity') - quantity)

        level.refresh_from_db()
        logger.info(
            f"Stock {adjust_type} {quantity} {ingredient.unit} of '{ingredient.name}' at branch {branch.pk}: "
            f"{previous} -> {level.current_quantity}"
        )
        return level

    @staticmethod
    @transaction.atomic
    def deduct_for_order(order) -> int:
        """
        Consume the recipe ingredients of every line of the order at its branch.

        Stock is allowed to go negative; the kitchen cooks to order. Returns the
        number of usage log rows written.
        """
        ingredients = {}
        usage = {}
        for item in order.items.all():
            if item.menu_item_id is None:
                continue
            for line in MenuItemIngredient.objects.filter(menu_item_id=item.menu_item_id).select_related('ingredient'):
                used = line.quantity * item.quantity
                ingredients[line.ingredient.pk] = line.ingredient
                usage[line.ingredient.pk] = usage.get(line.ingredient.pk, ZERO) + used

        if not usage:
            return 0

        tenant = order.tenant
        logs = []
        for ingredient_id, used in usage.items():
            ingredient = ingredients[ingredient_id]
            level, _ = StockLevel.objects.select_for_update().get_or_create(
                branch_id=order.branch_id,
                ingredient=ingredient,
                defaults={'tenant': tenant, 'current_quantity': ZERO},
            )
            StockLevel.objects.filter(pk=level.pk).update(current_quantity=F('current_quantity') - used)
            remaining = level.current_quantity - used
            if remaining < ZERO:
                logger.warning(
                    f"Stock for '{ingredient.name}' at branch {order.branch_id} went negative "
                    f"({remaining} {ingredient.unit}) after order {order.order_number}"
                )
            logs.append(StockUsageLog(
                tenant=tenant,
                order=order,
                branch_id=order.branch_id,
                ingredient=ingredient,
                quantity_used=used,
            ))

        StockUsageLog.objects.bulk_create(logs)
        logger.info(f"Deducted {len(logs)} ingredient(s) for order {order.order_number}")
        return len(logs)

    @staticmethod
    def usage_report(start=None, end=None, branch=None) -> list:
        """
        Ingredient usage between two dates (inclusive), default the last 7 days.
        Each row: ingredient, name, unit, total_used, cost.
        """
        end = end or timezone.localdate()
        start = start or end - timedelta(days=7)

        queryset = StockUsageLog.objects.filter(created_at__date__gte=start, created_at__date__lte=end)
        if branch is not None:
            queryset = queryset.filter(branch=branch)

        cost_expr = ExpressionWrapper(
            F('quantity_used') * F('ingredient__cost_per_unit'),
            output_field=DecimalField(max_digits=16, decimal_places=4),
        )
        rows = (
            queryset.values('ingredient', 'ingredient__name', 'ingredient__unit')
            .annotate(total_used=Sum('quantity_used'), cost=Sum(cost_expr))
            .order_by('-total_used')
        )
        return [
            {
                'ingredient': row['ingredient'],
                'name': row['ingredient__name'],
                'unit': row['ingredient__unit'],
                'total_used': row['total_used'] or ZERO,
                'cost': (row['cost'] or ZERO).quantize(Decimal('0.01')),
            }
            for row in rows
        ]
