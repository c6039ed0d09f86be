import logging
from collections import Counter
from typing import Iterable, List

from django.db.models import Prefetch

from .exceptions import InvalidModifierSelection, MenuItemUnavailableError
from .models import Category, MenuItem, ModifierOption

logger = logging.getLogger(__name__)


class MenuService:
    """
    Read models for the storefront menu and the rules for ordering items.
    """

    @staticmethod
    def get_public_menu() -> List[Category]:
        """
        Active categories in display order, each with `public_items` holding
        its active, available items. Categories with nothing orderable are
        left out.
        """
        items = (
            MenuItem.objects.filter(is_available=True)
            .prefetch_related('modifier_groups__options')
            .order_by('sort_order', 'name')
        )
        categories = Category.objects.prefetch_related(
            Prefetch('items', queryset=items, to_attr='public_items')
        ).order_by('sort_order', 'name')
        return [category for category in categories if category.public_items]

    @staticmethod
    def toggle_availability(item: MenuItem) -> MenuItem:
        item.is_available = not item.is_available
        item.save(update_fields=['is_available', 'updated_at'])
        logger.info(f"Menu item {item.pk} availability set to {item.is_available}")
        return item

    @staticmethod
    def get_orderable_item(item_id) -> MenuItem:
        """
        Load an item for checkout. Archived, sold-out and unknown items are
        all reported the same way to the customer.
        """
        try:
            item = MenuItem.objects.select_related('category').get(pk=item_id)
        except (MenuItem.DoesNotExist, ValueError, TypeError):
            raise MenuItemUnavailableError(f"Menu item {item_id} is not available.")

        if not item.is_orderable:
            raise MenuItemUnavailableError(f"{item.name} is currently unavailable.")
        return item

    @staticmethod
    def validate_modifier_selection(item: MenuItem, option_ids: Iterable) -> List[ModifierOption]:
        """
        Check a customer's modifier choices for one item and return the chosen
        options.

        Every option must belong to one of the item's groups and be available,
        and each group's selection count must lie within its bounds.
        """
        option_ids = [int(option_id) for option_id in (option_ids or [])]
        if len(option_ids) != len(set(option_ids)):
            raise InvalidModifierSelection("The same option was selected more than once.")

        groups = list(item.modifier_groups.all())
        group_ids = {group.pk for group in groups}

        options = list(
            ModifierOption.objects.select_related('group').filter(pk__in=option_ids)
        )
        found = {option.pk for option in options}
        missing = [option_id for option_id in option_ids if option_id not in found]
        if missing:
            raise InvalidModifierSelection(f"Unknown modifier option(s): {missing}")

        for option in options:
            if option.group_id not in group_ids:
                raise InvalidModifierSelection(
                    f"'{option.name}' is not a valid choice for {item.name}."
                )
            if not option.is_available:
                raise InvalidModifierSelection(f"'{option.name}' is currently unavailable.")

        counts = Counter(option.group_id for option in options)
        for group in groups:
            selected = counts.get(group.pk, 0)
            if selected < group.effective_min_selections:
                raise InvalidModifierSelection(
                    f"Please choose at least {group.effective_min_selections} option(s) for {group.name}."
                )
            if selected > group.max_selections:
                raise InvalidModifierSelection(
                    f"Please choose at most {group.max_selections} option(s) for {group.name}."
                )

        options.sort(key=lambda option: option_ids.index(option.pk))
        return options
