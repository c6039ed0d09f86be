"""
Back-office staff login, JWT cookies and role permissions.
"""
from types import SimpleNamespace

import jwt
import pytest
from django.conf import settings
from rest_framework_simplejwt.exceptions import AuthenticationFailed

from users.authentication import CookieJWTAuthentication
from users.models import User
from users.permissions import IsManagerOrHigher, IsOwner, IsStaffMember
from users.services import UserService


@pytest.mark.django_db
class TestStaffLogin:

    def test_login_sets_http_only_cookies(self, api_client, admin_user_tenant_a, tenant_a):
        response = api_client.post('/api/users/login/', {
            'email': 'admin@pizza.com',
            'password': 'password123',
        }, format='json', HTTP_X_TENANT=tenant_a.slug)

        assert response.status_code == 200
        assert response.data['user']['email'] == 'admin@pizza.com'
        assert response.data['tenant']['slug'] == 'pizza-place'

        access_cookie = response.cookies[settings.SIMPLE_JWT['AUTH_COOKIE']]
        assert access_cookie['httponly']
        assert settings.SIMPLE_JWT['AUTH_COOKIE_REFRESH'] in response.cookies
        assert 'access' not in response.data

    def test_wrong_password_is_401(self, api_client, admin_user_tenant_a, tenant_a):
        response = api_client.post('/api/users/login/', {
            'email': 'admin@pizza.com',
            'password': 'nope',
        }, format='json', HTTP_X_TENANT=tenant_a.slug)

        assert response.status_code == 401
        assert response.data['error'] == 'Invalid credentials'

    def test_login_is_scoped_to_resolved_tenant(self, api_client, admin_user_tenant_a, tenant_b):
        response = api_client.post('/api/users/login/', {
            'email': 'admin@pizza.com',
            'password': 'password123',
        }, format='json', HTTP_X_TENANT=tenant_b.slug)

        assert response.status_code == 401

    def test_same_email_in_two_tenants(self, tenant_a, tenant_b):
        User.objects.create_user(email='chef@example.com', password='a-pass', tenant=tenant_a)
        User.objects.create_user(email='chef@example.com', password='b-pass', tenant=tenant_b)

        assert UserService.authenticate_staff_user(tenant_a, 'chef@example.com', 'a-pass').tenant == tenant_a
        assert UserService.authenticate_staff_user(tenant_b, 'chef@example.com', 'a-pass') is None

    def test_logout_clears_cookies(self, authenticated_client_tenant_a):
        response = authenticated_client_tenant_a.post('/api/users/logout/')

        assert response.status_code == 200
        assert response.cookies[settings.SIMPLE_JWT['AUTH_COOKIE']].value == ''


@pytest.mark.django_db
class TestTokens:

    def test_access_token_carries_tenant_claims(self, admin_user_tenant_a, tenant_a):
        tokens = UserService.generate_tokens_for_user(admin_user_tenant_a)
        payload = jwt.decode(tokens['access'], options={'verify_signature': False})

        assert payload['tenant_id'] == str(tenant_a.id)
        assert payload['tenant_slug'] == 'pizza-place'
        assert payload['role'] == User.Role.OWNER

    def test_me_returns_current_user(self, authenticated_client_tenant_a):
        response = authenticated_client_tenant_a.get('/api/users/me/')

        assert response.status_code == 200
        assert response.data['role'] == User.Role.OWNER

    def test_me_requires_login(self, api_client, tenant_a):
        response = api_client.get('/api/users/me/', HTTP_X_TENANT=tenant_a.slug)

        assert response.status_code == 401


@pytest.mark.django_db
class TestRolePermissions:

    def test_staff_can_read_but_not_write_promotions(self, staff_client_tenant_a, percent_promo_tenant_a):
        assert staff_client_tenant_a.get('/api/orders/').status_code == 200
        assert staff_client_tenant_a.get('/api/promotions/').status_code == 403

    def test_staff_cannot_edit_settings(self, staff_client_tenant_a):
        response = staff_client_tenant_a.patch('/api/settings/global/', {'brand_name': 'X'}, format='json')

        assert response.status_code == 403

    def test_manager_can_manage_promotions(self, manager_client_tenant_a, percent_promo_tenant_a):
        response = manager_client_tenant_a.get('/api/promotions/')

        assert response.status_code == 200
        assert response.data['results'][0]['code'] == 'SAVE10'


@pytest.mark.django_db
class TestStaffManagement:

    def test_owner_creates_staff(self, authenticated_client_tenant_a, tenant_a):
        response = authenticated_client_tenant_a.post('/api/users/staff/', {
            'email': 'Cook@Pizza.com',
            'password': 'kitchen123',
            'first_name': 'Rosa',
            'role': 'STAFF',
        }, format='json')

        assert response.status_code == 201
        assert 'password' not in response.data
        user = User.all_objects.get(pk=response.data['id'])
        assert user.email == 'cook@pizza.com'
        assert user.tenant == tenant_a
        assert user.check_password('kitchen123')

    def test_password_required_on_create(self, authenticated_client_tenant_a):
        response = authenticated_client_tenant_a.post(
            '/api/users/staff/', {'email': 'new@pizza.com', 'role': 'STAFF'}, format='json'
        )

        assert response.status_code == 400
        assert 'password' in response.data

    def test_duplicate_email_in_tenant(self, authenticated_client_tenant_a, staff_user_tenant_a):
        response = authenticated_client_tenant_a.post('/api/users/staff/', {
            'email': 'STAFF@pizza.com', 'password': 'password123', 'role': 'STAFF',
        }, format='json')

        assert response.status_code == 400
        assert 'email' in response.data

    def test_owner_cannot_demote_self(self, authenticated_client_tenant_a, admin_user_tenant_a):
        response = authenticated_client_tenant_a.patch(
            f'/api/users/staff/{admin_user_tenant_a.id}/', {'role': 'STAFF'}, format='json'
        )

        assert response.status_code == 400

    def test_deactivate_staff(self, authenticated_client_tenant_a, staff_user_tenant_a):
        response = authenticated_client_tenant_a.patch(
            f'/api/users/staff/{staff_user_tenant_a.id}/', {'is_active': False}, format='json'
        )

        assert response.status_code == 200
        assert User.all_objects.get(pk=staff_user_tenant_a.pk).is_active is False

    def test_delete_not_allowed(self, authenticated_client_tenant_a, staff_user_tenant_a):
        response = authenticated_client_tenant_a.delete(f'/api/users/staff/{staff_user_tenant_a.id}/')

        assert response.status_code == 405

    def test_manager_cannot_manage_staff(self, manager_client_tenant_a):
        assert manager_client_tenant_a.get('/api/users/staff/').status_code == 403

    def test_list_is_tenant_scoped(self, authenticated_client_tenant_a, admin_user_tenant_b):
        response = authenticated_client_tenant_a.get('/api/users/staff/')

        emails = [u['email'] for u in response.data['results']]
        assert emails == ['admin@pizza.com']


@pytest.mark.django_db
class TestTenantBinding:

    def test_bearer_header_is_not_accepted(self, api_client, admin_user_tenant_a, tenant_b, customer_tenant_b):
        token = UserService.generate_tokens_for_user(admin_user_tenant_a)['access']

        response = api_client.get(
            '/api/customers/', HTTP_AUTHORIZATION=f'Bearer {token}', HTTP_X_TENANT=tenant_b.slug
        )

        assert response.status_code in (401, 403)
        assert 'results' not in response.data

    def test_bearer_header_cannot_write(self, api_client, admin_user_tenant_a, tenant_b):
        token = UserService.generate_tokens_for_user(admin_user_tenant_a)['access']

        response = api_client.patch(
            '/api/settings/global/', {'brand_name': 'Hijacked'}, format='json',
            HTTP_AUTHORIZATION=f'Bearer {token}', HTTP_X_TENANT=tenant_b.slug,
        )

        assert response.status_code in (401, 403)

    def test_cookie_pins_requests_to_its_own_tenant(self, authenticated_client_tenant_a, tenant_b, customer_tenant_b):
        response = authenticated_client_tenant_a.get('/api/customers/', HTTP_X_TENANT=tenant_b.slug)

        assert response.status_code == 200
        assert customer_tenant_b.phone not in [c['phone'] for c in response.data['results']]

    def test_user_of_another_tenant_has_no_role(self, admin_user_tenant_a, tenant_a, tenant_b):
        own = SimpleNamespace(user=admin_user_tenant_a, tenant=tenant_a)
        foreign = SimpleNamespace(user=admin_user_tenant_a, tenant=tenant_b)

        assert IsOwner().has_permission(own, None) is True
        assert IsStaffMember().has_permission(foreign, None) is False
        assert IsManagerOrHigher().has_permission(foreign, None) is False

    def test_authentication_rejects_user_from_another_tenant(self, admin_user_tenant_a, tenant_b):
        token = UserService.generate_tokens_for_user(admin_user_tenant_a)['access']
        request = SimpleNamespace(COOKIES={settings.SIMPLE_JWT['AUTH_COOKIE']: token}, tenant=tenant_b)

        with pytest.raises(AuthenticationFailed):
            CookieJWTAuthentication().authenticate(request)

    def test_authentication_without_cookie_is_anonymous(self, admin_user_tenant_a):
        request = SimpleNamespace(COOKIES={}, tenant=admin_user_tenant_a.tenant)

        assert CookieJWTAuthentication().authenticate(request) is None
