from rest_framework import serializers

from core_backend.base import BaseModelSerializer
from .models import Order, OrderItem


class CartItemSerializer(serializers.Serializer):
    """One cart line as the storefront sends it. Prices are looked up server-side."""

    menu_item = serializers.IntegerField()
    quantity = serializers.IntegerField(min_value=1, max_value=99)
    modifiers = serializers.ListField(child=serializers.IntegerField(), required=False, default=list)
    special_instructions = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')


class QuoteSerializer(serializers.Serializer):
    branch = serializers.IntegerField()
    items = CartItemSerializer(many=True, allow_empty=False)
    order_type = serializers.ChoiceField(choices=Order.OrderType.choices, default=Order.OrderType.TAKEAWAY)
    promo_code = serializers.CharField(max_length=50, required=False, allow_blank=True, default='')
    customer_phone = serializers.CharField(max_length=30, required=False, allow_blank=True, default='')
    redeem_points = serializers.IntegerField(min_value=0, required=False, default=0)

    def validate(self, attrs):
        if attrs.get('redeem_points') and not attrs.get('customer_phone'):
            raise serializers.ValidationError({"customer_phone": "Phone number required to redeem points."})
        return attrs


class CheckoutSerializer(QuoteSerializer):
    customer_name = serializers.CharField(max_length=150)
    customer_phone = serializers.CharField(max_length=30)
    customer_email = serializers.EmailField(required=False, allow_blank=True, default='')
    table_number = serializers.IntegerField(min_value=1, required=False, allow_null=True, default=None)
    payment_method = serializers.ChoiceField(choices=Order.PaymentMethod.choices, default=Order.PaymentMethod.CASH)
    special_instructions = serializers.CharField(required=False, allow_blank=True, default='')

    def validate(self, attrs):
        attrs = super().validate(attrs)
        if attrs['order_type'] == Order.OrderType.DINE_IN and not attrs.get('table_number'):
            raise serializers.ValidationError({"table_number": "Table number is required for dine-in orders."})
        return attrs


class OrderItemSerializer(BaseModelSerializer):
    class Meta:
        model = OrderItem
        fields = [
            'id', 'menu_item', 'item_name', 'quantity', 'unit_price', 'modifiers',
            'modifier_total', 'special_instructions', 'subtotal',
        ]


class OrderSerializer(BaseModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)
    branch_name = serializers.CharField(source='branch.name', read_only=True)
    customer_name = serializers.CharField(source='customer.name', read_only=True, default=None)
    customer_phone = serializers.CharField(source='customer.phone', read_only=True, default=None)

    class Meta:
        model = Order
        fields = [
            'id', 'order_number', 'branch', 'branch_name', 'customer', 'customer_name',
            'customer_phone', 'table_number', 'order_type', 'status', 'promo_code',
            'subtotal', 'discount', 'points_discount', 'tax', 'total', 'points_earned',
            'points_redeemed', 'payment_method', 'payment_status', 'special_instructions',
            'started_at', 'completed_at', 'prep_time_seconds', 'created_at', 'updated_at', 'items',
        ]
        read_only_fields = fields
        select_related_fields = ['branch', 'customer']
        prefetch_related_fields = ['items']


class OrderTrackingSerializer(BaseModelSerializer):
    """Public order tracking: no customer details."""

    items = OrderItemSerializer(many=True, read_only=True)
    branch_name = serializers.CharField(source='branch.name', read_only=True)

    class Meta:
        model = Order
        fields = [
            'order_number', 'branch_name', 'order_type', 'table_number', 'status',
            'subtotal', 'discount', 'points_discount', 'tax', 'total', 'points_earned',
            'points_redeemed', 'payment_status', 'created_at', 'items',
        ]
        read_only_fields = fields


class OrderStatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Order.Status.choices)


class PaymentStatusUpdateSerializer(serializers.Serializer):
    payment_status = serializers.ChoiceField(choices=Order.PaymentStatus.choices)
    payment_method = serializers.ChoiceField(choices=Order.PaymentMethod.choices, required=False)


class QuoteLineSerializer(serializers.Serializer):
    menu_item = serializers.IntegerField()
    name = serializers.CharField()
    quantity = serializers.IntegerField()
    unit_price = serializers.DecimalField(max_digits=10, decimal_places=2)
    modifiers = serializers.ListField()
    modifier_total = serializers.DecimalField(max_digits=10, decimal_places=2)
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2)


class QuoteResultSerializer(serializers.Serializer):
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2)
    discount = serializers.DecimalField(max_digits=12, decimal_places=2)
    points_discount = serializers.DecimalField(max_digits=12, decimal_places=2)
    points_redeemed = serializers.IntegerField()
    tax = serializers.DecimalField(max_digits=12, decimal_places=2)
    tax_rate = serializers.DecimalField(max_digits=5, decimal_places=4)
    total = serializers.DecimalField(max_digits=12, decimal_places=2)
    points_earned = serializers.IntegerField()
    item_count = serializers.IntegerField()
    promo_code = serializers.CharField(allow_blank=True)
    lines = QuoteLineSerializer(many=True)
