"""
URL configuration for core_backend project.

Storefront endpoints (menu, branches, checkout, tracking, reservations,
loyalty lookup) are public and tenant-scoped by TenantMiddleware.
Back-office endpoints require a staff JWT cookie.
"""

from django.contrib import admin
from django.urls import path, include
from django.http import JsonResponse


def health_check(request):
    """Simple health check endpoint that doesn't require authentication"""
    return JsonResponse({"status": "ok", "message": "Backend is running"})


urlpatterns = [
    path("api/health/", health_check, name="health_check"),
    path("admin/", admin.site.urls),
    path("api/users/", include("users.urls")),
    path("api/settings/", include("settings.urls")),
    path("api/", include("branches.urls")),
    path("api/menu/", include("menu.urls")),
    path("api/customers/", include("customers.urls")),
    path("api/loyalty/", include("loyalty.urls")),
    path("api/promotions/", include("promotions.urls")),
    path("api/orders/", include("orders.urls")),
    path("api/reservations/", include("reservations.urls")),
    path("api/", include("stock.urls")),
    path("api/reports/", include("reports.urls")),
]
