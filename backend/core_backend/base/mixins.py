from rest_framework.viewsets import ViewSetMixin
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework import status
from .permissions import CanArchiveRecords, CanUnarchiveRecords
import logging

logger = logging.getLogger(__name__)


class OptimizedQuerysetMixin(ViewSetMixin):
    """
    Applies `select_related_fields` and `prefetch_related_fields` declared in
    the serializer's Meta to the queryset for the current action.
    """

    def get_queryset(self):
        queryset = super().get_queryset()

        try:
            serializer_class = self.get_serializer_class()
        except (AttributeError, AssertionError):
            return queryset

        meta = getattr(serializer_class, "Meta", None)
        if meta is None:
            return queryset

        select_related = getattr(meta, "select_related_fields", [])
        prefetch_related = getattr(meta, "prefetch_related_fields", [])

        if select_related:
            queryset = queryset.select_related(*select_related)
        if prefetch_related:
            queryset = queryset.prefetch_related(*prefetch_related)

        return queryset


class TenantOwnedCreateMixin:
    """
    Stamps the current tenant on newly created records.

    Serializers never accept `tenant` from the client; the tenant always comes
    from the resolved request context.
    """

    def perform_create(self, serializer):
        from tenant.managers import get_current_tenant

        tenant = get_current_tenant()
        if tenant is None:
            raise ValueError(
                f"No tenant context available for {self.__class__.__name__} create"
            )
        serializer.save(tenant=tenant)


class ArchivingViewSetMixin(ViewSetMixin):
    """
    Archiving support for models using SoftDeleteMixin.

    - Archived records are hidden by default
    - ?include_archived=true shows everything, ?include_archived=only shows archived
    - archive/unarchive detail actions for managers
    """

    def get_queryset(self):
        queryset = super().get_queryset()

        if not hasattr(queryset.model, 'archived_at'):
            return queryset

        include_archived = self.request.query_params.get('include_archived', '').lower()
        manager = queryset.model._default_manager

        if include_archived in ['true', '1', 'yes'] and hasattr(manager, 'with_archived'):
            queryset = manager.with_archived()
        elif include_archived == 'only' and hasattr(manager, 'archived_only'):
            queryset = manager.archived_only()

        return queryset

    @action(detail=True, methods=['post'], permission_classes=[CanArchiveRecords])
    def archive(self, request, pk=None):
        """Archive (soft delete) a single record."""
        obj = self.get_object()

        if not hasattr(obj, "archived_at"):
            return Response(
                {"error": "This record type cannot be archived."},
                status=status.HTTP_400_BAD_REQUEST
            )

        if not obj.is_active:
            return Response(
                {'error': 'Record is already archived.'},
                status=status.HTTP_400_BAD_REQUEST
            )

        obj.archive(archived_by=request.user if request.user.is_authenticated else None)
        logger.info(f"Archived {obj._meta.verbose_name} {obj.pk}")

        return Response(
            {'message': f'{obj._meta.verbose_name} archived successfully.'},
            status=status.HTTP_200_OK
        )

    @action(detail=True, methods=['post'], permission_classes=[CanUnarchiveRecords])
    def unarchive(self, request, pk=None):
        """Restore an archived record."""
        manager = self.get_queryset().model._default_manager
        if not hasattr(manager.model, "archived_at"):
            return Response(
                {"error": "This record type cannot be archived."},
                status=status.HTTP_400_BAD_REQUEST
            )
        queryset = manager.with_archived() if hasattr(manager, 'with_archived') else manager.all()

        try:
            obj = queryset.get(pk=pk)
        except queryset.model.DoesNotExist:
            return Response(
                {'error': 'Record not found.'},
                status=status.HTTP_404_NOT_FOUND
            )

        if obj.is_active:
            return Response(
                {'error': 'Record is not archived.'},
                status=status.HTTP_400_BAD_REQUEST
            )

        obj.unarchive()
        logger.info(f"Unarchived {obj._meta.verbose_name} {obj.pk}")

        return Response(
            {'message': f'{obj._meta.verbose_name} unarchived successfully.'},
            status=status.HTTP_200_OK
        )
