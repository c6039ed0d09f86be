from rest_framework import permissions
from .models import User


def _role(request):
    """The user's role, or None unless they belong to the request's tenant."""
    user = request.user
    if not user or not user.is_authenticated:
        return None
    tenant = getattr(request, 'tenant', None)
    if tenant is None or getattr(user, 'tenant_id', None) != tenant.pk:
        return None
    return getattr(user, 'role', None)


class IsOwner(permissions.BasePermission):
    def has_permission(self, request, view):
        return _role(request) == User.Role.OWNER


class IsManagerOrHigher(permissions.BasePermission):
    def has_permission(self, request, view):
        return _role(request) in [User.Role.OWNER, User.Role.MANAGER]


class IsStaffMember(permissions.BasePermission):
    """Any authenticated back-office user of the current tenant."""

    def has_permission(self, request, view):
        return _role(request) in [User.Role.OWNER, User.Role.MANAGER, User.Role.STAFF]


class ReadOnlyForStaff(permissions.BasePermission):
    """
    All staff can read; only managers and above can create/update/delete.
    """

    def has_permission(self, request, view):
        if request.method in permissions.SAFE_METHODS:
            return IsStaffMember().has_permission(request, view)
        return IsManagerOrHigher().has_permission(request, view)


class PublicReadManagerWrite(permissions.BasePermission):
    """
    Storefront may read (menu, branches, tiers); managers and above write.
    """

    def has_permission(self, request, view):
        if request.method in permissions.SAFE_METHODS:
            return True
        return IsManagerOrHigher().has_permission(request, view)
