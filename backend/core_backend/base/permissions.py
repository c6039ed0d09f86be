"""
Permissions for archiving functionality.

Archive and unarchive are destructive back-office operations, so they are
limited to managers and owners.
"""

from rest_framework.permissions import BasePermission
from users.permissions import IsManagerOrHigher


class CanArchiveRecords(BasePermission):
    """Only managers and above can archive records."""

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        return IsManagerOrHigher().has_permission(request, view)

    def has_object_permission(self, request, view, obj):
        return self.has_permission(request, view)


class CanUnarchiveRecords(CanArchiveRecords):
    """
    Only managers and above can restore archived records.

    Kept as a separate class so the rule can diverge from archiving.
    """
