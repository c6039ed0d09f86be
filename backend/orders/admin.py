from django.contrib import admin
from .models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ("item_name", "quantity", "unit_price", "modifiers", "modifier_total", "subtotal")

    def get_queryset(self, request):
        return OrderItem.all_objects.all()


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("order_number", "tenant", "branch", "status", "payment_status", "total", "created_at")
    list_filter = ("status", "payment_status", "order_type")
    search_fields = ("order_number",)
    inlines = [OrderItemInline]

    def get_queryset(self, request):
        return Order.all_objects.select_related("tenant", "branch", "customer")
