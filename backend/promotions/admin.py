from django.contrib import admin
from .models import Promotion


@admin.register(Promotion)
class PromotionAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "tenant", "discount_type", "discount_value", "used_count", "max_uses", "is_active")
    list_filter = ("discount_type", "is_active", "tenant")
    search_fields = ("code", "name")

    def get_queryset(self, request):
        return Promotion.all_objects.select_related("tenant")
