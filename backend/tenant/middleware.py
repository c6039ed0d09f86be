import logging

import jwt
from django.conf import settings
from django.core.exceptions import ValidationError
from django.http import JsonResponse
from jwt.exceptions import InvalidTokenError

from .managers import set_current_tenant
from .models import Tenant

logger = logging.getLogger(__name__)


class TenantNotFoundError(Exception):
    """Raised when tenant cannot be resolved from request."""
    pass


class TenantMiddleware:
    """
    Resolves the tenant for a request and attaches it to request.tenant.

    Resolution precedence (highest to lowest):
    1. JWT access cookie `tenant_id` claim - back-office staff
    2. X-Tenant header (slug) - storefronts calling a shared API domain
    3. Subdomain (joespizza.example.com) - public storefront
    4. Session tenant - guests mid-checkout
    5. DEFAULT_TENANT_SLUG for localhost/testserver - development
    6. Fail with 400

    Inactive tenants get 403. The thread-local tenant is always cleared when
    the response leaves, even if the view raised.
    """

    DEV_HOSTS = ('localhost', '127.0.0.1', 'testserver')

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        # Django admin works across tenants
        if request.path.startswith('/admin/'):
            request.tenant = None
            set_current_tenant(None)
            return self.get_response(request)

        try:
            tenant = self.get_tenant_from_request(request)
            request.tenant = tenant
            set_current_tenant(tenant)

            if not tenant.is_active:
                logger.warning(f"Request for inactive tenant '{tenant.slug}' rejected")
                return JsonResponse({
                    'error': 'Tenant account is inactive',
                    'code': 'TENANT_INACTIVE'
                }, status=403)

            return self.get_response(request)

        except TenantNotFoundError as e:
            logger.warning(f"Tenant resolution failed for {request.get_host()}{request.path}: {e}")
            return JsonResponse({
                'error': str(e),
                'code': 'TENANT_NOT_FOUND'
            }, status=400)

        finally:
            set_current_tenant(None)

    def get_tenant_from_request(self, request):
        host = request.get_host().split(':')[0]
        subdomain = self.extract_subdomain(host)
        logger.debug(f"Resolving tenant for host='{host}', subdomain='{subdomain}'")

        tenant = self.get_tenant_from_jwt(request)
        if tenant:
            return tenant

        tenant_header = request.META.get('HTTP_X_TENANT')
        if tenant_header:
            return self._lookup_slug(
                request,
                tenant_header,
                f"Tenant '{tenant_header}' not found. Check X-Tenant header value."
            )

        if subdomain and subdomain not in ('www', 'api'):
            return self._lookup_slug(
                request,
                subdomain,
                f"Tenant '{subdomain}' not found. Check subdomain spelling."
            )

        tenant_id = request.session.get('tenant_id') if hasattr(request, 'session') else None
        if tenant_id:
            try:
                return Tenant.objects.get(id=tenant_id)
            except (Tenant.DoesNotExist, ValidationError, ValueError):
                logger.debug(f"Stale session tenant_id '{tenant_id}' ignored")

        fallback_slug = self.get_fallback_tenant_slug(host)
        if fallback_slug:
            try:
                return Tenant.objects.get(slug=fallback_slug)
            except Tenant.DoesNotExist:
                raise TenantNotFoundError(
                    f"Fallback tenant '{fallback_slug}' not found. "
                    f"Run: python manage.py ensure_default_tenant"
                )

        raise TenantNotFoundError(f"No tenant found for host: {host}")

    def _lookup_slug(self, request, slug, error_message):
        try:
            tenant = Tenant.objects.get(slug=slug)
        except Tenant.DoesNotExist:
            raise TenantNotFoundError(error_message)
        # Remember the tenant for guests whose later requests lack the header
        if hasattr(request, 'session'):
            request.session['tenant_id'] = str(tenant.id)
        return tenant

    def extract_subdomain(self, host):
        """
        Extract subdomain from host.

        Examples:
            joespizza.example.com -> joespizza
            example.com -> None
            localhost -> None
            joespizza.localhost -> joespizza (dev only)
        """
        if host in self.DEV_HOSTS or host.startswith('192.168'):
            return None

        parts = host.split('.')

        if len(parts) == 2 and parts[1] in ('localhost', 'local'):
            return parts[0]

        if len(parts) >= 3:
            return parts[0]

        return None

    def get_tenant_from_jwt(self, request):
        """
        Read the tenant_id claim from the access cookie.

        The token is decoded without signature verification: this only picks
        the tenant context. CookieJWTAuthentication verifies the token before
        any authenticated view runs, and a forged claim still has to match a
        real tenant.
        """
        access_token = request.COOKIES.get(settings.SIMPLE_JWT.get("AUTH_COOKIE"))
        if not access_token:
            return None

        try:
            payload = jwt.decode(
                access_token,
                options={'verify_signature': False, 'verify_exp': False}
            )
        except InvalidTokenError:
            return None

        tenant_id = payload.get('tenant_id')
        if not tenant_id:
            # A staff token without tenant binding is never valid here
            raise TenantNotFoundError("JWT missing tenant_id claim. Token format is invalid.")

        try:
            return Tenant.objects.get(id=tenant_id)
        except (Tenant.DoesNotExist, ValidationError, ValueError):
            raise TenantNotFoundError(
                f"JWT tenant_id '{tenant_id}' not found. Token may be stale."
            )

    def get_fallback_tenant_slug(self, host):
        """Development hosts fall back to DEFAULT_TENANT_SLUG; everything else fails closed."""
        if host in self.DEV_HOSTS or host.startswith('192.168'):
            return getattr(settings, 'DEFAULT_TENANT_SLUG', None)
        return None
