from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import StaffLoginView, LogoutView, CurrentUserView, StaffUserViewSet

router = DefaultRouter()
router.register(r"staff", StaffUserViewSet, basename="staff-user")

urlpatterns = [
    path("login/", StaffLoginView.as_view(), name="staff-login"),
    path("logout/", LogoutView.as_view(), name="staff-logout"),
    path("me/", CurrentUserView.as_view(), name="current-user"),
    path("", include(router.urls)),
]
