from rest_framework import serializers

from core_backend.base import BaseModelSerializer
from loyalty.serializers import PublicLoyaltyTierSerializer
from .models import Customer, normalize_phone


class CustomerSerializer(BaseModelSerializer):
    tier_name = serializers.CharField(source='tier.name', read_only=True, default=None)

    class Meta:
        model = Customer
        fields = [
            'id', 'name', 'phone', 'email', 'birthday', 'points_balance', 'lifetime_points',
            'total_spent', 'total_orders', 'tier', 'tier_name', 'last_order_at', 'notes',
            'is_active', 'created_at',
        ]
        read_only_fields = [
            'id', 'points_balance', 'lifetime_points', 'total_spent', 'total_orders',
            'tier', 'last_order_at', 'created_at',
        ]
        select_related_fields = ['tier']

    def validate_phone(self, value):
        phone = normalize_phone(value)
        if not phone:
            raise serializers.ValidationError("Phone number required")
        duplicates = Customer.objects.filter(phone=phone)
        if self.instance is not None:
            duplicates = duplicates.exclude(pk=self.instance.pk)
        if duplicates.exists():
            raise serializers.ValidationError("Another customer already uses this phone number.")
        return phone


class PointsAdjustmentSerializer(serializers.Serializer):
    points = serializers.IntegerField()
    description = serializers.CharField(max_length=255, required=False, allow_blank=True)

    def validate_points(self, value):
        if value == 0:
            raise serializers.ValidationError("Adjustment cannot be zero.")
        return value


class LoyaltyLookupSerializer(serializers.Serializer):
    """What the storefront shows a customer who looks up their points."""

    name = serializers.CharField()
    points_balance = serializers.IntegerField()
    points_value = serializers.DecimalField(max_digits=12, decimal_places=2)
    lifetime_points = serializers.IntegerField()
    total_orders = serializers.IntegerField()
    tier = PublicLoyaltyTierSerializer(allow_null=True)
    next_tier = PublicLoyaltyTierSerializer(allow_null=True)
    points_to_next_tier = serializers.IntegerField(allow_null=True)
