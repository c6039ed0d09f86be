from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import CustomerViewSet, LoyaltyLookupView

app_name = "customers"

router = DefaultRouter()
router.register(r"", CustomerViewSet, basename="customer")

urlpatterns = [
    path("lookup/", LoyaltyLookupView.as_view(), name="loyalty-lookup"),
    path("", include(router.urls)),
]
