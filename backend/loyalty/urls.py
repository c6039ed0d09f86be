from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import LoyaltyTierViewSet, PointsEarningRuleViewSet, LoyaltyRewardViewSet

app_name = "loyalty"

router = DefaultRouter()
router.register(r"tiers", LoyaltyTierViewSet, basename="loyalty-tier")
router.register(r"earning-rules", PointsEarningRuleViewSet, basename="earning-rule")
router.register(r"rewards", LoyaltyRewardViewSet, basename="loyalty-reward")

urlpatterns = [
    path("", include(router.urls)),
]
