from django.contrib import admin
from .models import GlobalSettings


@admin.register(GlobalSettings)
class GlobalSettingsAdmin(admin.ModelAdmin):
    list_display = ("tenant", "brand_name", "currency", "default_tax_rate", "points_redemption_ratio")

    def get_queryset(self, request):
        return GlobalSettings.all_objects.select_related("tenant")
