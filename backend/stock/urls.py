from django.urls import path, include
from rest_framework.routers import SimpleRouter
from .views import (
    IngredientViewSet,
    LowStockView,
    MenuItemRecipeView,
    StockAdjustView,
    StockLevelListView,
    StockUsageView,
)

app_name = "stock"

router = SimpleRouter()
router.register(r"ingredients", IngredientViewSet, basename="ingredient")

urlpatterns = [
    path("stock/", StockLevelListView.as_view(), name="stock-levels"),
    path("stock/low/", LowStockView.as_view(), name="stock-low"),
    path("stock/adjust/", StockAdjustView.as_view(), name="stock-adjust"),
    path("stock/usage/", StockUsageView.as_view(), name="stock-usage"),
    path("menu/items/<int:pk>/ingredients/", MenuItemRecipeView.as_view(), name="menu-item-recipe"),
    path("", include(router.urls)),
]
