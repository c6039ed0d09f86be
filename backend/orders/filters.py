from django_filters import rest_framework as filters

from core_backend.base import BaseFilterSet
from customers.models import normalize_phone
from .models import Order


class OrderFilter(BaseFilterSet):
    order_number = filters.CharFilter(lookup_expr='icontains')
    customer_phone = filters.CharFilter(method='filter_customer_phone')
    status__in = filters.BaseInFilter(field_name='status')

    class Meta:
        model = Order
        fields = ['status', 'branch', 'order_type', 'payment_status', 'payment_method', 'customer']

    def filter_customer_phone(self, queryset, name, value):
        digits = normalize_phone(value)
        if not digits:
            return queryset
        return queryset.filter(customer__phone__contains=digits)
