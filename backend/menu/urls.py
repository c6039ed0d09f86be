from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import (
    PublicMenuView,
    CategoryViewSet,
    MenuItemViewSet,
    ModifierGroupViewSet,
    ModifierOptionViewSet,
)

app_name = "menu"

router = DefaultRouter()
router.register(r"categories", CategoryViewSet, basename="category")
router.register(r"items", MenuItemViewSet, basename="menu-item")
router.register(r"modifier-groups", ModifierGroupViewSet, basename="modifier-group")
router.register(r"modifier-options", ModifierOptionViewSet, basename="modifier-option")

urlpatterns = [
    path("", PublicMenuView.as_view(), name="public-menu"),
    path("", include(router.urls)),
]
