from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import CheckoutView, OrderTrackingView, OrderViewSet, QuoteView

app_name = "orders"

router = DefaultRouter()
router.register(r"", OrderViewSet, basename="order")

urlpatterns = [
    path("quote/", QuoteView.as_view(), name="order-quote"),
    path("checkout/", CheckoutView.as_view(), name="order-checkout"),
    path("track/<str:order_number>/", OrderTrackingView.as_view(), name="order-track"),
    path("", include(router.urls)),
]
