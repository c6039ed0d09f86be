from django.contrib import admin
from .models import Ingredient, MenuItemIngredient, StockLevel, StockUsageLog


@admin.register(Ingredient)
class IngredientAdmin(admin.ModelAdmin):
    list_display = ("name", "tenant", "unit", "category", "cost_per_unit", "min_stock_level", "is_active")
    list_filter = ("is_active", "category")
    search_fields = ("name",)

    def get_queryset(self, request):
        return Ingredient.all_objects.select_related("tenant")


@admin.register(MenuItemIngredient)
class MenuItemIngredientAdmin(admin.ModelAdmin):
    list_display = ("menu_item", "ingredient", "quantity", "tenant")

    def get_queryset(self, request):
        return MenuItemIngredient.all_objects.select_related("tenant", "menu_item", "ingredient")


@admin.register(StockLevel)
class StockLevelAdmin(admin.ModelAdmin):
    list_display = ("ingredient", "branch", "current_quantity", "tenant")

    def get_queryset(self, request):
        return StockLevel.all_objects.select_related("tenant", "branch", "ingredient")


@admin.register(StockUsageLog)
class StockUsageLogAdmin(admin.ModelAdmin):
    list_display = ("created_at", "ingredient", "branch", "quantity_used", "order")

    def get_queryset(self, request):
        return StockUsageLog.all_objects.select_related("ingredient", "branch", "order")
