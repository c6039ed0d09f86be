"""
Shared plumbing: the service error handler, archiving and the health check.
"""
import pytest
from rest_framework import status

from core_backend.exceptions import (
    ConflictError,
    InvalidStatusTransition,
    NotFoundError,
    ServiceError,
    api_exception_handler,
)
from menu.models import Category


class TestExceptionHandler:

    def test_service_error_body(self):
        response = api_exception_handler(ServiceError("Bad thing", code="bad_thing"), {})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data == {"error": "Bad thing", "code": "bad_thing"}

    def test_subclass_status_and_defaults(self):
        assert api_exception_handler(NotFoundError(), {}).status_code == status.HTTP_404_NOT_FOUND
        assert api_exception_handler(ConflictError(), {}).data["code"] == "conflict"

    def test_details_included(self):
        response = api_exception_handler(ServiceError("Nope", details={"field": "x"}), {})

        assert response.data["details"] == {"field": "x"}

    def test_invalid_status_transition_message(self):
        exc = InvalidStatusTransition("completed", "pending")

        assert exc.message == "Cannot change status from 'completed' to 'pending'."
        assert exc.code == "invalid_status_transition"

    def test_other_exceptions_fall_through(self):
        assert api_exception_handler(ValueError("boom"), {}) is None


@pytest.mark.django_db
class TestArchiving:

    def test_archive_hides_from_default_manager(self, tenant_a_context, category_tenant_a):
        category_tenant_a.archive()

        assert not Category.objects.filter(pk=category_tenant_a.pk).exists()
        assert Category.objects.with_archived().filter(pk=category_tenant_a.pk).exists()
        assert list(Category.objects.archived_only()) == [category_tenant_a]

    def test_unarchive(self, tenant_a_context, category_tenant_a):
        category_tenant_a.archive()
        category_tenant_a.unarchive()

        assert Category.objects.filter(pk=category_tenant_a.pk).exists()
        assert category_tenant_a.archived_at is None

    def test_archive_actions(self, manager_client_tenant_a, category_tenant_a):
        response = manager_client_tenant_a.post(f'/api/menu/categories/{category_tenant_a.id}/archive/')
        assert response.status_code == status.HTTP_200_OK

        again = manager_client_tenant_a.post(f'/api/menu/categories/{category_tenant_a.id}/archive/')
        assert again.status_code == status.HTTP_404_NOT_FOUND

        response = manager_client_tenant_a.post(f'/api/menu/categories/{category_tenant_a.id}/unarchive/')
        assert response.status_code == status.HTTP_200_OK
        assert Category.all_objects.get(pk=category_tenant_a.pk).is_active is True

    def test_include_archived_param(self, manager_client_tenant_a, category_tenant_a, tenant_a):
        from tenant.managers import set_current_tenant
        set_current_tenant(tenant_a)
        category_tenant_a.archive()
        set_current_tenant(None)

        hidden = manager_client_tenant_a.get('/api/menu/categories/')
        shown = manager_client_tenant_a.get('/api/menu/categories/', {'include_archived': 'true'})

        assert hidden.data == []
        assert [c['id'] for c in shown.data] == [category_tenant_a.id]


@pytest.mark.django_db
def test_health_check(api_client):
    response = api_client.get('/api/health/')

    assert response.status_code == 200
    assert response.json()['status'] == 'ok'
