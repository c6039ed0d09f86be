from rest_framework import permissions
from rest_framework.decorators import action
from rest_framework.response import Response

from core_backend.base import BaseViewSet
from users.permissions import IsManagerOrHigher, IsStaffMember, ReadOnlyForStaff
from .models import LoyaltyReward, LoyaltyTier, PointsEarningRule
from .serializers import (
    LoyaltyRewardSerializer,
    LoyaltyTierSerializer,
    PointsEarningRuleSerializer,
    PointsTransactionSerializer,
    PublicLoyaltyTierSerializer,
    RewardRedemptionSerializer,
)
from .services import LoyaltyService


class LoyaltyTierViewSet(BaseViewSet):
    queryset = LoyaltyTier.objects.all()
    serializer_class = LoyaltyTierSerializer
    permission_classes = [ReadOnlyForStaff]
    filterset_fields = ['is_active']
    ordering = ['min_points', 'sort_order']
    pagination_class = None

    @action(detail=False, methods=['get'], permission_classes=[permissions.AllowAny])
    def active(self, request):
        """Public: the tier ladder shown on the storefront loyalty page."""
        return Response(PublicLoyaltyTierSerializer(LoyaltyService.active_tiers(), many=True).data)


class PointsEarningRuleViewSet(BaseViewSet):
    queryset = PointsEarningRule.objects.all()
    serializer_class = PointsEarningRuleSerializer
    permission_classes = [IsManagerOrHigher]
    filterset_fields = ['trigger_type', 'points_type', 'is_active']
    search_fields = ['name']
    ordering = ['trigger_type', 'name']

    @action(detail=True, methods=['post'])
    def toggle(self, request, pk=None):
        rule = LoyaltyService.toggle_rule(self.get_object())
        return Response(self.get_serializer(rule).data)

    @action(detail=True, methods=['post'])
    def duplicate(self, request, pk=None):
        copy = LoyaltyService.duplicate_rule(self.get_object())
        return Response(self.get_serializer(copy).data, status=201)


class LoyaltyRewardViewSet(BaseViewSet):
    queryset = LoyaltyReward.objects.all()
    serializer_class = LoyaltyRewardSerializer
    permission_classes = [ReadOnlyForStaff]
    filterset_fields = ['reward_type', 'is_active', 'tier_required']
    search_fields = ['name']
    ordering = ['points_cost', 'name']

    @action(detail=True, methods=['post'], permission_classes=[IsManagerOrHigher])
    def toggle(self, request, pk=None):
        reward = self.get_object()
        reward.is_active = not reward.is_active
        reward.save(update_fields=['is_active'])
        return Response(self.get_serializer(reward).data)

    @action(detail=True, methods=['post'], permission_classes=[IsStaffMember])
    def redeem(self, request, pk=None):
        """Staff exchange a customer's points for this reward."""
        reward = self.get_object()
        serializer = RewardRedemptionSerializer(data=request.data, context={'request': request})
        serializer.is_valid(raise_exception=True)
        txn = LoyaltyService.redeem_reward(serializer.validated_data['customer'], reward)
        return Response(PointsTransactionSerializer(txn).data, status=201)
