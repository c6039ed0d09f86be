from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import PromotionViewSet, ValidatePromoCodeView

app_name = "promotions"

router = DefaultRouter()
router.register(r"", PromotionViewSet, basename="promotion")

urlpatterns = [
    path("validate/<str:code>/", ValidatePromoCodeView.as_view(), name="validate-promo"),
    path("", include(router.urls)),
]
