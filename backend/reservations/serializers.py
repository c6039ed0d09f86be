from django.utils import timezone
from rest_framework import serializers

from branches.models import Branch
from core_backend.base import BaseModelSerializer, TenantFilteredSerializerMixin
from .models import Reservation


class ReservationSerializer(TenantFilteredSerializerMixin, BaseModelSerializer):
    """Back-office view of a reservation. Status changes go through the status action."""

    branch = serializers.PrimaryKeyRelatedField(queryset=Branch.objects.all())
    branch_name = serializers.CharField(source='branch.name', read_only=True)
    customer_name = serializers.CharField(source='customer.name', read_only=True, default=None)
    customer_phone = serializers.CharField(source='customer.phone', read_only=True, default=None)
    customer_email = serializers.CharField(source='customer.email', read_only=True, default=None)

    class Meta:
        model = Reservation
        fields = [
            'id', 'branch', 'branch_name', 'customer', 'customer_name', 'customer_phone',
            'customer_email', 'guest_name', 'guest_email', 'guest_phone', 'reservation_date',
            'reservation_time', 'party_size', 'notes', 'status', 'admin_notes',
            'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'customer', 'status', 'created_at', 'updated_at']
        select_related_fields = ['branch', 'customer']

    def validate_party_size(self, value):
        if value < 1:
            raise serializers.ValidationError("Party size must be at least 1.")
        return value

    def validate_reservation_date(self, value):
        unchanged = self.instance is not None and self.instance.reservation_date == value
        if not unchanged and value < timezone.localdate():
            raise serializers.ValidationError("Reservation date cannot be in the past.")
        return value


class ReservationCreateSerializer(TenantFilteredSerializerMixin, serializers.Serializer):
    branch = serializers.PrimaryKeyRelatedField(queryset=Branch.objects.all())
    reservation_date = serializers.DateField()
    reservation_time = serializers.TimeField()
    party_size = serializers.IntegerField(min_value=1, max_value=100)
    guest_name = serializers.CharField(max_length=150, required=False, allow_blank=True, default='')
    guest_email = serializers.EmailField(required=False, allow_blank=True, default='')
    guest_phone = serializers.CharField(max_length=30, required=False, allow_blank=True, default='')
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class PublicReservationSerializer(BaseModelSerializer):
    """What a guest sees about their own bookings."""

    branch_name = serializers.CharField(source='branch.name', read_only=True)

    class Meta:
        model = Reservation
        fields = [
            'id', 'branch', 'branch_name', 'reservation_date', 'reservation_time',
            'party_size', 'notes', 'status', 'created_at',
        ]
        read_only_fields = fields


class ReservationStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Reservation.Status.choices)
    admin_notes = serializers.CharField(required=False, allow_blank=True)


class ReservationStatsSerializer(serializers.Serializer):
    pending = serializers.IntegerField()
    confirmed = serializers.IntegerField()
    today = serializers.IntegerField()
    upcoming = serializers.IntegerField()
