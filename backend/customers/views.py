from django.utils.decorators import method_decorator
from django_ratelimit.decorators import ratelimit
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, mixins, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView

from core_backend.base import OptimizedQuerysetMixin
from core_backend.pagination import StandardPagination
from core_backend.utils import get_client_ip
from loyalty.serializers import PointsTransactionSerializer
from loyalty.services import LoyaltyService
from settings.services import SettingsService
from users.permissions import IsManagerOrHigher, ReadOnlyForStaff
from .models import Customer
from .serializers import CustomerSerializer, LoyaltyLookupSerializer, PointsAdjustmentSerializer
from .services import CustomerService


@method_decorator(
    ratelimit(key=get_client_ip, rate="20/m", method="GET", block=True), name="get"
)
class LoyaltyLookupView(APIView):
    """
    Public: a customer checks their points by phone number.
    """

    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def get(self, request, *args, **kwargs):
        phone = request.query_params.get('phone', '').strip()
        if not phone:
            return Response({'error': 'Phone number required'}, status=status.HTTP_400_BAD_REQUEST)

        customer = CustomerService.lookup_by_phone(phone)
        if customer is None:
            return Response({'error': 'Customer not found'}, status=status.HTTP_404_NOT_FOUND)

        summary = LoyaltyService.summary(customer, SettingsService.get_redemption_ratio())
        return Response(LoyaltyLookupSerializer(summary).data)


class CustomerViewSet(
    OptimizedQuerysetMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.UpdateModelMixin,
    viewsets.GenericViewSet,
):
    """
    Back-office customer records. Customers are created by checkout and
    reservations, never directly.
    """

    serializer_class = CustomerSerializer
    permission_classes = [ReadOnlyForStaff]
    pagination_class = StandardPagination
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['tier', 'is_active']
    search_fields = ['name', 'phone', 'email']
    ordering_fields = ['created_at', 'total_spent', 'total_orders', 'points_balance']
    ordering = ['-created_at']

    def get_queryset(self):
        # Built per request: the tenant manager needs the request's tenant context
        self.queryset = Customer.objects.all()
        return super().get_queryset()

    @action(detail=True, methods=['post'], url_path='adjust-points', permission_classes=[IsManagerOrHigher])
    def adjust_points(self, request, pk=None):
        customer = self.get_object()
        serializer = PointsAdjustmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        txn = LoyaltyService.adjust_points(
            customer,
            serializer.validated_data['points'],
            serializer.validated_data.get('description', ''),
        )
        return Response(PointsTransactionSerializer(txn).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['get'])
    def transactions(self, request, pk=None):
        customer = self.get_object()
        queryset = customer.points_transactions.select_related('order').order_by('-created_at', '-id')
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(PointsTransactionSerializer(page, many=True).data)
        return Response(PointsTransactionSerializer(queryset, many=True).data)
