from django.contrib import admin
from .models import Customer


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ("name", "phone", "tenant", "points_balance", "total_orders", "tier", "is_active")
    list_filter = ("is_active", "tenant")
    search_fields = ("name", "phone", "email")

    def get_queryset(self, request):
        return Customer.all_objects.select_related("tenant", "tier")
