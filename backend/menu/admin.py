from django.contrib import admin
from .models import Category, MenuItem, ModifierGroup, ModifierOption


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "tenant", "sort_order", "is_active")
    list_filter = ("is_active", "tenant")

    def get_queryset(self, request):
        return Category.all_objects.select_related("tenant")


@admin.register(MenuItem)
class MenuItemAdmin(admin.ModelAdmin):
    list_display = ("name", "category", "price", "is_available", "is_active")
    list_filter = ("is_available", "is_active", "is_vegan", "is_vegetarian")
    search_fields = ("name",)

    def get_queryset(self, request):
        return MenuItem.all_objects.select_related("category", "tenant")


@admin.register(ModifierGroup)
class ModifierGroupAdmin(admin.ModelAdmin):
    list_display = ("name", "tenant", "is_required", "min_selections", "max_selections")

    def get_queryset(self, request):
        return ModifierGroup.all_objects.select_related("tenant")


@admin.register(ModifierOption)
class ModifierOptionAdmin(admin.ModelAdmin):
    list_display = ("name", "group", "price_adjustment", "is_available")

    def get_queryset(self, request):
        return ModifierOption.all_objects.select_related("group")
