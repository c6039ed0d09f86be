from rest_framework import serializers

from branches.models import Branch
from core_backend.base import TenantFilteredSerializerMixin
from .services import ReportService


class ReportQuerySerializer(TenantFilteredSerializerMixin, serializers.Serializer):
    """
    ?period=today|yesterday|week|month|custom, or explicit ?start=&end=.
    Explicit dates imply a custom period.
    """

    period = serializers.ChoiceField(choices=ReportService.PERIODS, required=False, default="today")
    start = serializers.DateField(required=False)
    end = serializers.DateField(required=False)
    branch = serializers.PrimaryKeyRelatedField(queryset=Branch.objects.all(), required=False)
    format = serializers.ChoiceField(choices=("csv", "xlsx"), required=False, default="csv")

    def validate(self, attrs):
        period = attrs.get("period")
        if attrs.get("start") or attrs.get("end"):
            period = "custom"
        start, end = ReportService.resolve_period(period, attrs.get("start"), attrs.get("end"))
        if start > end:
            raise serializers.ValidationError({"start": "Start date must be on or before end date."})
        attrs["start"], attrs["end"] = start, end
        return attrs


class DailySalesSerializer(serializers.Serializer):
    date = serializers.DateField()
    revenue = serializers.DecimalField(max_digits=14, decimal_places=2)
    orders = serializers.IntegerField()
    avg = serializers.DecimalField(max_digits=14, decimal_places=2)


class TopItemSerializer(serializers.Serializer):
    name = serializers.CharField()
    quantity = serializers.IntegerField()
    revenue = serializers.DecimalField(max_digits=14, decimal_places=2)


class PaymentMethodSerializer(serializers.Serializer):
    method = serializers.CharField()
    count = serializers.IntegerField()
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)


class OrderTypeSerializer(serializers.Serializer):
    type = serializers.CharField()
    count = serializers.IntegerField()
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)


class SummarySerializer(serializers.Serializer):
    total_revenue = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_orders = serializers.IntegerField()
    avg_order_value = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_customers = serializers.IntegerField()


class PrepTimeSerializer(serializers.Serializer):
    avg = serializers.IntegerField()
    min = serializers.IntegerField()
    max = serializers.IntegerField()
    count = serializers.IntegerField()


class ReportSerializer(serializers.Serializer):
    start = serializers.DateField()
    end = serializers.DateField()
    daily_sales = DailySalesSerializer(many=True)
    top_items = TopItemSerializer(many=True)
    payment_methods = PaymentMethodSerializer(many=True)
    order_types = OrderTypeSerializer(many=True)
    summary = SummarySerializer()
    prep_time = PrepTimeSerializer()


class TodayStatsSerializer(serializers.Serializer):
    revenue = serializers.DecimalField(max_digits=14, decimal_places=2)
    orders = serializers.IntegerField()
    avg = serializers.DecimalField(max_digits=14, decimal_places=2)
