from django_filters import rest_framework as filters

from core_backend.base import BaseFilterSet
from .models import Reservation


class ReservationFilter(BaseFilterSet):
    date_from = filters.DateFilter(field_name='reservation_date', lookup_expr='gte')
    date_to = filters.DateFilter(field_name='reservation_date', lookup_expr='lte')

    class Meta:
        model = Reservation
        fields = ['status', 'branch', 'reservation_date', 'customer']
