from rest_framework import serializers

from core_backend.base import BaseModelSerializer, TenantFilteredSerializerMixin
from customers.models import Customer
from .models import LoyaltyReward, LoyaltyTier, PointsEarningRule, PointsTransaction


class LoyaltyTierSerializer(BaseModelSerializer):
    class Meta:
        model = LoyaltyTier
        fields = [
            'id', 'name', 'min_points', 'points_multiplier', 'benefits',
            'color', 'icon', 'sort_order', 'is_active',
        ]

    def validate_benefits(self, value):
        if not isinstance(value, list) or not all(isinstance(b, str) for b in value):
            raise serializers.ValidationError("Benefits must be a list of strings.")
        return value


class PublicLoyaltyTierSerializer(BaseModelSerializer):
    class Meta:
        model = LoyaltyTier
        fields = ['id', 'name', 'min_points', 'points_multiplier', 'benefits', 'color', 'icon']


class PointsEarningRuleSerializer(BaseModelSerializer):
    class Meta:
        model = PointsEarningRule
        fields = [
            'id', 'name', 'description', 'trigger_type', 'points_type', 'points_value',
            'conditions', 'tier_multiplier_enabled', 'is_active', 'start_date', 'end_date',
            'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']

    CONDITION_KEYS = {'min_order_value', 'branch_ids', 'order_types'}

    def validate_conditions(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError("Conditions must be an object.")
        unknown = set(value) - self.CONDITION_KEYS
        if unknown:
            raise serializers.ValidationError(f"Unknown condition(s): {', '.join(sorted(unknown))}")
        if 'branch_ids' in value and not isinstance(value['branch_ids'], list):
            raise serializers.ValidationError("branch_ids must be a list.")
        if 'order_types' in value and not isinstance(value['order_types'], list):
            raise serializers.ValidationError("order_types must be a list.")
        return value

    def validate(self, attrs):
        start = attrs.get('start_date', getattr(self.instance, 'start_date', None))
        end = attrs.get('end_date', getattr(self.instance, 'end_date', None))
        if start and end and end < start:
            raise serializers.ValidationError({"end_date": "End date must be after start date."})
        return attrs


class LoyaltyRewardSerializer(TenantFilteredSerializerMixin, BaseModelSerializer):
    tier_required = serializers.PrimaryKeyRelatedField(
        queryset=LoyaltyTier.objects.all(), required=False, allow_null=True
    )
    tier_required_name = serializers.CharField(source='tier_required.name', read_only=True, default=None)
    in_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = LoyaltyReward
        fields = [
            'id', 'name', 'description', 'reward_type', 'points_cost', 'tier_required',
            'tier_required_name', 'quantity_available', 'quantity_redeemed', 'in_stock',
            'is_active', 'start_date', 'end_date',
        ]
        read_only_fields = ['id', 'quantity_redeemed']
        select_related_fields = ['tier_required']


class RewardRedemptionSerializer(TenantFilteredSerializerMixin, serializers.Serializer):
    customer = serializers.PrimaryKeyRelatedField(queryset=Customer.objects.all())


class PointsTransactionSerializer(BaseModelSerializer):
    order_number = serializers.CharField(source='order.order_number', read_only=True, default=None)

    class Meta:
        model = PointsTransaction
        fields = ['id', 'points', 'type', 'description', 'balance_after', 'order', 'order_number', 'created_at']
        select_related_fields = ['order']
