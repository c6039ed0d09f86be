from django.utils.decorators import method_decorator
from django_ratelimit.decorators import ratelimit
from rest_framework import permissions, status
from rest_framework.decorators import action
from rest_framework.response import Response

from core_backend.base import BaseViewSet
from core_backend.utils import get_client_ip
from tenant.managers import get_current_tenant
from users.permissions import IsManagerOrHigher, PublicReadManagerWrite
from .models import Branch, QRCode
from .serializers import (
    BranchSerializer,
    QRCodeBulkCreateSerializer,
    QRCodeScanSerializer,
    QRCodeSerializer,
)
from .services import QRCodeService


class BranchViewSet(BaseViewSet):
    """
    Branches. The storefront lists active branches with their live
    open/closed state; managers maintain them.
    """

    queryset = Branch.objects.all()
    serializer_class = BranchSerializer
    permission_classes = [PublicReadManagerWrite]
    filterset_fields = ['is_active']
    search_fields = ['name', 'address']
    ordering_fields = ['sort_order', 'name']
    ordering = ['sort_order', 'name']
    pagination_class = None


class QRCodeViewSet(BaseViewSet):
    queryset = QRCode.objects.all()
    serializer_class = QRCodeSerializer
    permission_classes = [IsManagerOrHigher]
    filterset_fields = ['branch', 'is_active']
    ordering = ['branch', 'table_number']

    def perform_create(self, serializer):
        branch = serializer.validated_data['branch']
        table_number = serializer.validated_data['table_number']
        serializer.save(
            tenant=get_current_tenant(),
            code=QRCodeService.generate_code(branch, table_number),
        )

    @action(detail=False, methods=['post'])
    def bulk(self, request):
        """Create codes for a range of tables at one branch."""
        serializer = QRCodeBulkCreateSerializer(data=request.data, context={'request': request})
        serializer.is_valid(raise_exception=True)
        created = QRCodeService.bulk_create(
            serializer.validated_data['branch'],
            serializer.validated_data['start_table'],
            serializer.validated_data['end_table'],
        )
        return Response(
            {
                'created': len(created),
                'qr_codes': QRCodeSerializer(created, many=True).data,
            },
            status=status.HTTP_201_CREATED,
        )

    @action(detail=True, methods=['post'])
    def toggle(self, request, pk=None):
        qr = QRCodeService.toggle(self.get_object())
        return Response(QRCodeSerializer(qr).data)

    @action(
        detail=False,
        methods=['post'],
        permission_classes=[permissions.AllowAny],
        authentication_classes=[],
    )
    @method_decorator(ratelimit(key=get_client_ip, rate='60/m', method='POST', block=True))
    def scan(self, request):
        """Public: the storefront reports a scanned table code."""
        serializer = QRCodeScanSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return Response(QRCodeService.record_scan(serializer.validated_data['code']))
