from django.utils.decorators import method_decorator
from django_ratelimit.decorators import ratelimit
from rest_framework import permissions
from rest_framework.response import Response
from rest_framework.views import APIView

from core_backend.base import BaseViewSet
from core_backend.utils import get_client_ip
from users.permissions import IsManagerOrHigher
from .models import Promotion
from .serializers import PromoValidationQuerySerializer, PromotionSerializer
from .services import PromotionValidationService


class PromotionViewSet(BaseViewSet):
    """
    Back-office promotions. DELETE archives; archived codes stop validating.
    """

    queryset = Promotion.objects.all()
    serializer_class = PromotionSerializer
    permission_classes = [IsManagerOrHigher]
    filterset_fields = ['discount_type']
    search_fields = ['name', 'code']
    ordering_fields = ['created_at', 'start_date', 'end_date', 'used_count']
    ordering = ['-created_at']


@method_decorator(
    ratelimit(key=get_client_ip, rate="30/m", method="GET", block=True), name="get"
)
class ValidatePromoCodeView(APIView):
    """
    Public: check a promo code against the cart subtotal.
    Always 200; `valid` tells the storefront whether to apply it.
    """

    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def get(self, request, code, *args, **kwargs):
        query = PromoValidationQuerySerializer(data={'subtotal': request.query_params.get('subtotal', '0')})
        query.is_valid(raise_exception=True)
        result = PromotionValidationService.validate_code(code, query.validated_data['subtotal'])
        if result['valid']:
            result['discount'] = str(result['discount'])
            result['discount_value'] = str(result['discount_value'])
        return Response(result)
