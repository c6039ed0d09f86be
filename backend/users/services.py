import logging

from django.conf import settings
from rest_framework_simplejwt.tokens import RefreshToken

from .models import User

logger = logging.getLogger(__name__)


class UserService:
    """
    Authentication and token issuing for back-office staff.
    """

    @staticmethod
    def authenticate_staff_user(tenant, email: str, password: str):
        """
        Authenticate a staff user of the given tenant.

        Returns the user or None. The same email may exist in several
        tenants, so the lookup is always tenant-qualified.
        """
        if not email or not password:
            return None

        try:
            user = User.all_objects.select_related('tenant').get(
                tenant=tenant, email__iexact=email.strip()
            )
        except User.DoesNotExist:
            # Hash a dummy password to keep response timing consistent
            User().set_password(password)
            logger.warning(f"Staff login failed: unknown email for tenant '{tenant.slug}'")
            return None

        if not user.is_active or not user.check_password(password):
            logger.warning(f"Staff login failed for user {user.pk}")
            return None

        return user

    @staticmethod
    def generate_tokens_for_user(user: User) -> dict:
        """Issue a refresh/access pair whose claims bind the user to their tenant."""
        refresh = RefreshToken.for_user(user)
        refresh['tenant_id'] = str(user.tenant_id)
        refresh['tenant_slug'] = user.tenant.slug
        refresh['role'] = user.role
        return {
            "refresh": str(refresh),
            "access": str(refresh.access_token),
        }


class AuthCookieService:
    """
    Sets and clears the HTTP-only JWT cookies.
    """

    @staticmethod
    def set_auth_cookies(response, access_token: str, refresh_token: str):
        jwt_settings = settings.SIMPLE_JWT
        common = {
            'domain': None,
            'path': jwt_settings.get("AUTH_COOKIE_PATH", "/"),
            'httponly': jwt_settings.get("AUTH_COOKIE_HTTP_ONLY", True),
            'secure': jwt_settings.get("AUTH_COOKIE_SECURE", not settings.DEBUG),
            'samesite': jwt_settings.get("AUTH_COOKIE_SAMESITE", "Lax"),
        }
        response.set_cookie(
            key=jwt_settings["AUTH_COOKIE"],
            value=access_token,
            max_age=int(jwt_settings["ACCESS_TOKEN_LIFETIME"].total_seconds()),
            **common,
        )
        response.set_cookie(
            key=jwt_settings["AUTH_COOKIE_REFRESH"],
            value=refresh_token,
            max_age=int(jwt_settings["REFRESH_TOKEN_LIFETIME"].total_seconds()),
            **common,
        )
        return response

    @staticmethod
    def clear_auth_cookies(response):
        path = settings.SIMPLE_JWT.get("AUTH_COOKIE_PATH", "/")
        response.delete_cookie(settings.SIMPLE_JWT["AUTH_COOKIE"], path=path)
        response.delete_cookie(settings.SIMPLE_JWT["AUTH_COOKIE_REFRESH"], path=path)
        return response
