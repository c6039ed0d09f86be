from rest_framework import viewsets, filters
from django_filters.rest_framework import DjangoFilterBackend
from .mixins import OptimizedQuerysetMixin, ArchivingViewSetMixin, TenantOwnedCreateMixin
from ..pagination import StandardPagination


class BaseViewSet(
    OptimizedQuerysetMixin,
    ArchivingViewSetMixin,
    TenantOwnedCreateMixin,
    viewsets.ModelViewSet,
):
    """
    Base ViewSet that provides standard configuration for all ModelViewSets.

    Features:
    - Query optimization from the serializer Meta (select/prefetch related)
    - Archive/unarchive actions for soft-deletable models
    - Tenant assignment on create
    - Standard pagination, filtering, search and ordering

    Usage:
        class BranchViewSet(BaseViewSet):
            queryset = Branch.objects.all()
            serializer_class = BranchSerializer
    """

    pagination_class = StandardPagination

    filter_backends = [
        DjangoFilterBackend,
        filters.SearchFilter,
        filters.OrderingFilter,
    ]

    ordering = ['-id']

    def get_queryset(self):
        """
        Re-evaluate the queryset at request time.

        The class-level queryset is built at import time, before any tenant
        context exists, so TenantManager would have produced an empty
        queryset. Rebuild it from the model manager and then hand it to the
        mixin chain.
        """
        if getattr(self, 'queryset', None) is not None:
            original_queryset = self.queryset
            self.queryset = original_queryset.model.objects.all()
            try:
                return super().get_queryset()
            finally:
                self.queryset = original_queryset
        return super().get_queryset()

