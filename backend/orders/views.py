from django.utils.decorators import method_decorator
from django_ratelimit.decorators import ratelimit
from rest_framework import mixins, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView

from branches.models import Branch
from core_backend.base import OptimizedQuerysetMixin
from core_backend.exceptions import NotFoundError
from core_backend.pagination import StandardPagination
from core_backend.utils import get_client_ip
from users.permissions import IsStaffMember
from .filters import OrderFilter
from .models import Order
from .serializers import (
    CheckoutSerializer,
    OrderSerializer,
    OrderStatusUpdateSerializer,
    OrderTrackingSerializer,
    PaymentStatusUpdateSerializer,
    QuoteResultSerializer,
    QuoteSerializer,
)
from .services import OrderService


@method_decorator(
    ratelimit(key=get_client_ip, rate="60/m", method="POST", block=True), name="post"
)
class QuoteView(APIView):
    """
    Public: price a cart (subtotal, discounts, tax, total, points) without
    placing an order.
    """

    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def post(self, request, *args, **kwargs):
        serializer = QuoteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        quote = OrderService.quote(serializer.validated_data)
        return Response(QuoteResultSerializer(quote).data)


@method_decorator(
    ratelimit(key=get_client_ip, rate="10/m", method="POST", block=True), name="post"
)
class CheckoutView(APIView):
    """
    Public: place an order. Prices, discounts and points are recomputed on
    the server from the cart contents.
    """

    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def post(self, request, *args, **kwargs):
        serializer = CheckoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = OrderService.place_order(serializer.validated_data)
        return Response(OrderTrackingSerializer(order).data, status=status.HTTP_201_CREATED)


class OrderTrackingView(APIView):
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def get(self, request, order_number, *args, **kwargs):
        order = OrderService.track(order_number)
        return Response(OrderTrackingSerializer(order).data)


class OrderViewSet(
    OptimizedQuerysetMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """
    Back-office orders: listing, status changes, payment status and the
    kitchen queue. Orders are only created through checkout.
    """

    serializer_class = OrderSerializer
    permission_classes = [IsStaffMember]
    pagination_class = StandardPagination
    filterset_class = OrderFilter
    ordering = ['-created_at']

    def get_queryset(self):
        # Built per request: the tenant manager needs the request's tenant context
        self.queryset = Order.objects.all().order_by('-created_at')
        return super().get_queryset()

    @action(detail=True, methods=['patch'], url_path='status')
    def update_status(self, request, pk=None):
        serializer = OrderStatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = OrderService.update_status(self.get_object(), serializer.validated_data['status'])
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=['patch'], url_path='payment')
    def update_payment(self, request, pk=None):
        serializer = PaymentStatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = OrderService.update_payment_status(
            self.get_object(),
            serializer.validated_data['payment_status'],
            serializer.validated_data.get('payment_method'),
        )
        return Response(OrderSerializer(order).data)

    @action(detail=False, methods=['get'])
    def kitchen(self, request):
        """Active orders for the kitchen display, oldest first. ?branch= narrows it."""
        branch = None
        branch_id = request.query_params.get('branch')
        if branch_id:
            branch = Branch.objects.filter(pk=branch_id).first() if branch_id.isdigit() else None
            if branch is None:
                raise NotFoundError("Branch not found", code="branch_not_found")
        queue = OrderService.kitchen_queue(branch)
        return Response(OrderSerializer(queue, many=True).data)
