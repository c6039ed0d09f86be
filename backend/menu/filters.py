from django_filters import rest_framework as filters

from core_backend.base import BaseFilterSet
from .models import MenuItem


class MenuItemFilter(BaseFilterSet):
    category = filters.NumberFilter(field_name='category_id')
    category_slug = filters.CharFilter(field_name='category__slug')
    min_price = filters.NumberFilter(field_name='price', lookup_expr='gte')
    max_price = filters.NumberFilter(field_name='price', lookup_expr='lte')

    class Meta:
        model = MenuItem
        fields = [
            'category', 'is_vegetarian', 'is_vegan', 'is_gluten_free',
            'is_popular', 'is_new', 'is_available',
        ]
