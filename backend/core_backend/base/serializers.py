from rest_framework import serializers
import logging

logger = logging.getLogger(__name__)


class BaseModelSerializer(serializers.ModelSerializer):
    """
    Base serializer that provides common functionality.

    Meta may declare `select_related_fields` / `prefetch_related_fields`;
    OptimizedQuerysetMixin applies them to the view's queryset.
    """

    class Meta:
        select_related_fields = []
        prefetch_related_fields = []


class TenantFilteredSerializerMixin:
    """
    Restricts every related-field queryset to the request's tenant.

    Usage:
        class MenuItemSerializer(TenantFilteredSerializerMixin, BaseModelSerializer):
            category = serializers.PrimaryKeyRelatedField(queryset=Category.objects.all())

    Without this, a client could point a foreign key at another tenant's row
    by guessing its primary key.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        request = self.context.get('request')

        if not request:
            if getattr(self, 'instance', None) is None:
                logger.warning(
                    f"{self.__class__.__name__}: No request in context for write operation. "
                    f"Tenant validation will be skipped."
                )
            return

        tenant = getattr(request, 'tenant', None)
        if tenant:
            self._filter_all_querysets_by_tenant(tenant)
        elif not (request.user and request.user.is_superuser):
            raise serializers.ValidationError(
                "Tenant context is required for this operation."
            )

    def _filter_all_querysets_by_tenant(self, tenant):
        for field in self.fields.values():
            # many=True fields wrap the real relation in child_relation
            relation = getattr(field, 'child_relation', field)
            queryset = getattr(relation, 'queryset', None)
            if queryset is None:
                continue
            model = queryset.model
            if hasattr(model, 'tenant'):
                relation.queryset = model._default_manager.filter(tenant=tenant)
