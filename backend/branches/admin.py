from django.contrib import admin
from .models import Branch, QRCode


@admin.register(Branch)
class BranchAdmin(admin.ModelAdmin):
    list_display = ("name", "tenant", "opening_time", "closing_time", "timezone", "is_active")
    list_filter = ("is_active", "tenant")
    search_fields = ("name", "address")

    def get_queryset(self, request):
        return Branch.all_objects.select_related("tenant")


@admin.register(QRCode)
class QRCodeAdmin(admin.ModelAdmin):
    list_display = ("code", "branch", "table_number", "scan_count", "is_active")
    list_filter = ("is_active",)

    def get_queryset(self, request):
        return QRCode.all_objects.select_related("branch")
