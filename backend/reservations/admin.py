from django.contrib import admin
from .models import Reservation


@admin.register(Reservation)
class ReservationAdmin(admin.ModelAdmin):
    list_display = ("id", "tenant", "branch", "guest_name", "reservation_date", "reservation_time", "party_size", "status")
    list_filter = ("status", "reservation_date")
    search_fields = ("guest_name", "guest_phone", "guest_email")

    def get_queryset(self, request):
        return Reservation.all_objects.select_related("tenant", "branch", "customer")
