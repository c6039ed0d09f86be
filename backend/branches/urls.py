from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import BranchViewSet, QRCodeViewSet

app_name = "branches"

router = DefaultRouter()
router.register(r"branches", BranchViewSet, basename="branch")
router.register(r"qrcodes", QRCodeViewSet, basename="qrcode")

urlpatterns = [
    path("", include(router.urls)),
]
