from django.utils.decorators import method_decorator
from django_ratelimit.decorators import ratelimit
from rest_framework import filters, mixins, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView
from django_filters.rest_framework import DjangoFilterBackend

from core_backend.base import OptimizedQuerysetMixin
from core_backend.pagination import StandardPagination
from core_backend.utils import get_client_ip
from users.permissions import IsStaffMember
from .filters import ReservationFilter
from .models import Reservation
from .serializers import (
    PublicReservationSerializer,
    ReservationCreateSerializer,
    ReservationSerializer,
    ReservationStatsSerializer,
    ReservationStatusSerializer,
)
from .services import ReservationService


@method_decorator(
    ratelimit(key=get_client_ip, rate="10/m", method="POST", block=True), name="post"
)
@method_decorator(
    ratelimit(key=get_client_ip, rate="20/m", method="GET", block=True), name="get"
)
class PublicReservationView(APIView):
    """
    Public booking.

    POST creates a pending reservation.
    GET ?phone= lists the bookings made with that phone number.
    """

    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def get(self, request, *args, **kwargs):
        phone = request.query_params.get('phone', '').strip()
        if not phone:
            return Response({'error': 'Phone number required'}, status=status.HTTP_400_BAD_REQUEST)
        reservations = ReservationService.for_phone(phone)
        return Response(PublicReservationSerializer(reservations, many=True).data)

    def post(self, request, *args, **kwargs):
        serializer = ReservationCreateSerializer(data=request.data, context={'request': request})
        serializer.is_valid(raise_exception=True)
        reservation = ReservationService.create(serializer.validated_data)
        return Response(PublicReservationSerializer(reservation).data, status=status.HTTP_201_CREATED)


class ReservationViewSet(
    OptimizedQuerysetMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.UpdateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = ReservationSerializer
    permission_classes = [IsStaffMember]
    pagination_class = StandardPagination
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = ReservationFilter
    search_fields = ['guest_name', 'guest_phone', 'customer__name', 'customer__phone']
    ordering_fields = ['reservation_date', 'reservation_time', 'party_size', 'created_at']
    ordering = ['-reservation_date', '-reservation_time']

    def get_queryset(self):
        self.queryset = Reservation.objects.all()
        return super().get_queryset()

    @action(detail=False, methods=['get'])
    def upcoming(self, request):
        branch = request.query_params.get('branch', '')
        reservations = ReservationService.upcoming(branch=int(branch) if branch.isdigit() else None)
        return Response(ReservationSerializer(reservations, many=True).data)

    @action(detail=False, methods=['get'])
    def stats(self, request):
        return Response(ReservationStatsSerializer(ReservationService.stats()).data)

    @action(detail=True, methods=['patch'], url_path='status')
    def update_status(self, request, pk=None):
        serializer = ReservationStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        reservation = ReservationService.update_status(
            self.get_object(),
            serializer.validated_data['status'],
            serializer.validated_data.get('admin_notes'),
        )
        return Response(ReservationSerializer(reservation).data)
