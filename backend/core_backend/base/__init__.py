"""
Core backend base components.

Foundational viewsets, serializers, mixins and filters shared by every app
so that tenant scoping, archiving and pagination behave the same everywhere.
"""

from .viewsets import BaseViewSet
from .serializers import BaseModelSerializer, TenantFilteredSerializerMixin
from .mixins import OptimizedQuerysetMixin, ArchivingViewSetMixin, TenantOwnedCreateMixin
from .filters import BaseFilterSet

__all__ = [
    # ViewSets
    'BaseViewSet',

    # Serializers
    'BaseModelSerializer',
    'TenantFilteredSerializerMixin',

    # Mixins
    'OptimizedQuerysetMixin',
    'ArchivingViewSetMixin',
    'TenantOwnedCreateMixin',

    # Filters
    'BaseFilterSet',
]
