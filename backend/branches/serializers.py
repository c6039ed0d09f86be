from rest_framework import serializers

from core_backend.base import BaseModelSerializer, TenantFilteredSerializerMixin
from .models import Branch, QRCode
from .services import BranchService


class BranchSerializer(BaseModelSerializer):
    is_open_now = serializers.SerializerMethodField()

    class Meta:
        model = Branch
        fields = [
            'id', 'name', 'slug', 'address', 'phone', 'email', 'timezone',
            'opening_time', 'closing_time', 'tax_rate', 'features', 'image_url',
            'sort_order', 'is_active', 'is_open_now',
        ]
        read_only_fields = ['id', 'is_active']

    def get_is_open_now(self, obj):
        return BranchService.is_open(obj)

    def validate_features(self, value):
        if not isinstance(value, list) or not all(isinstance(f, str) for f in value):
            raise serializers.ValidationError("Features must be a list of strings.")
        return value


class QRCodeSerializer(TenantFilteredSerializerMixin, BaseModelSerializer):
    branch = serializers.PrimaryKeyRelatedField(queryset=Branch.objects.all())
    branch_name = serializers.CharField(source='branch.name', read_only=True)

    class Meta:
        model = QRCode
        fields = [
            'id', 'branch', 'branch_name', 'table_number', 'code',
            'scan_count', 'last_scanned_at', 'is_active', 'created_at',
        ]
        read_only_fields = ['id', 'code', 'scan_count', 'last_scanned_at', 'created_at']
        select_related_fields = ['branch']


class QRCodeBulkCreateSerializer(TenantFilteredSerializerMixin, serializers.Serializer):
    branch = serializers.PrimaryKeyRelatedField(queryset=Branch.objects.all())
    start_table = serializers.IntegerField(min_value=1)
    end_table = serializers.IntegerField(min_value=1)

    def validate(self, attrs):
        if attrs['end_table'] < attrs['start_table']:
            raise serializers.ValidationError({"end_table": "Must be greater than or equal to start_table."})
        if attrs['end_table'] - attrs['start_table'] >= 500:
            raise serializers.ValidationError({"end_table": "At most 500 tables per request."})
        return attrs


class QRCodeScanSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=64)
