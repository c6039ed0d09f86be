from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import PublicReservationView, ReservationViewSet

app_name = "reservations"

router = DefaultRouter()
router.register(r"manage", ReservationViewSet, basename="reservation")

urlpatterns = [
    path("", PublicReservationView.as_view(), name="reservation-public"),
    path("", include(router.urls)),
]
