from rest_framework import serializers

from core_backend.base import BaseModelSerializer
from .models import Promotion


class PromotionSerializer(BaseModelSerializer):
    uses_remaining = serializers.IntegerField(read_only=True, allow_null=True)

    class Meta:
        model = Promotion
        fields = [
            'id', 'name', 'description', 'code', 'discount_type', 'discount_value',
            'min_order_value', 'max_uses', 'used_count', 'uses_remaining',
            'start_date', 'end_date', 'is_active', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'used_count', 'is_active', 'created_at', 'updated_at']

    def validate_code(self, value):
        code = value.strip().upper()
        if not code:
            raise serializers.ValidationError("Code is required.")
        duplicates = Promotion.objects.with_archived().filter(code=code)
        if self.instance is not None:
            duplicates = duplicates.exclude(pk=self.instance.pk)
        if duplicates.exists():
            raise serializers.ValidationError("A promotion with this code already exists.")
        return code

    def validate(self, attrs):
        discount_type = attrs.get('discount_type', getattr(self.instance, 'discount_type', None))
        value = attrs.get('discount_value', getattr(self.instance, 'discount_value', None))
        start = attrs.get('start_date', getattr(self.instance, 'start_date', None))
        end = attrs.get('end_date', getattr(self.instance, 'end_date', None))

        if value is not None and value <= 0:
            raise serializers.ValidationError({'discount_value': 'Discount value must be greater than zero.'})
        if discount_type == Promotion.DiscountType.PERCENTAGE and value is not None and value > 100:
            raise serializers.ValidationError({'discount_value': 'Percentage discount cannot exceed 100%.'})
        if start and end and end < start:
            raise serializers.ValidationError({'end_date': 'End date must be on or after the start date.'})
        return attrs


class PromoValidationQuerySerializer(serializers.Serializer):
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
