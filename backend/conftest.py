"""
Root conftest.py for all backend tests.

This file makes fixtures available to all test files across all apps.
"""
import pytest
from django.core.cache import cache

from tenant.managers import set_current_tenant


# ============================================================================
# AUTO-USE FIXTURES (Run automatically for every test)
# ============================================================================

@pytest.fixture(scope='session', autouse=True)
def default_tenant(django_db_setup, django_db_blocker):
    """
    Create the default tenant.

    TenantMiddleware falls back to DEFAULT_TENANT_SLUG for testserver requests
    that carry no JWT cookie or X-Tenant header.
    """
    with django_db_blocker.unblock():
        from django.conf import settings
        from tenant.models import Tenant

        tenant, _ = Tenant.objects.get_or_create(
            slug=getattr(settings, 'DEFAULT_TENANT_SLUG', 'myrestaurant'),
            defaults={'name': 'Test Restaurant', 'is_active': True},
        )
        return tenant


@pytest.fixture(autouse=True)
def reset_tenant_context():
    """
    Reset tenant context after each test so it never leaks between tests.
    """
    yield
    set_current_tenant(None)


@pytest.fixture(autouse=True)
def clear_cache_after_test():
    """
    Clear cache after each test. Rate limit counters live in the cache.
    """
    yield
    cache.clear()


# ============================================================================
# API CLIENT FIXTURES
# ============================================================================

@pytest.fixture
def api_client():
    """
    Provide DRF API client for API tests.

    Usage:
        def test_public_menu(api_client, tenant_a):
            response = api_client.get('/api/menu/', HTTP_X_TENANT=tenant_a.slug)
            assert response.status_code == 200
    """
    from rest_framework.test import APIClient
    return APIClient()


@pytest.fixture
def storefront_client_tenant_a(api_client, tenant_a):
    """Anonymous client that addresses tenant A through the X-Tenant header."""
    api_client.defaults['HTTP_X_TENANT'] = tenant_a.slug
    return api_client


def _authenticate(client, user, tenant):
    from django.conf import settings
    from users.services import UserService

    set_current_tenant(tenant)
    tokens = UserService.generate_tokens_for_user(user)
    # The middleware and authentication read the JWT from cookies, not headers
    client.cookies[settings.SIMPLE_JWT.get('AUTH_COOKIE', 'access_token')] = tokens['access']
    return client


@pytest.fixture
def authenticated_client_tenant_a(api_client, admin_user_tenant_a, tenant_a):
    """
    API client logged in as tenant A's owner.

    Usage:
        def test_protected_endpoint(authenticated_client_tenant_a):
            response = authenticated_client_tenant_a.get('/api/orders/')
            assert response.status_code == 200
    """
    return _authenticate(api_client, admin_user_tenant_a, tenant_a)


@pytest.fixture
def authenticated_client_tenant_b(api_client, admin_user_tenant_b, tenant_b):
    """
    API client logged in as tenant B's owner.

    Usage:
        def test_tenant_isolation(authenticated_client_tenant_b, menu_item_tenant_a):
            response = authenticated_client_tenant_b.get(f'/api/menu/items/{menu_item_tenant_a.id}/')
            assert response.status_code == 404
    """
    return _authenticate(api_client, admin_user_tenant_b, tenant_b)


@pytest.fixture
def manager_client_tenant_a(api_client, manager_user_tenant_a, tenant_a):
    return _authenticate(api_client, manager_user_tenant_a, tenant_a)


@pytest.fixture
def staff_client_tenant_a(api_client, staff_user_tenant_a, tenant_a):
    return _authenticate(api_client, staff_user_tenant_a, tenant_a)


# ============================================================================
# IMPORT ALL FIXTURES FROM core_backend/tests/fixtures.py
# ============================================================================
from core_backend.tests.fixtures import *  # noqa: E402,F401,F403
