from django.conf import settings
from django.contrib.auth import get_user_model
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import AuthenticationFailed, InvalidToken

User = get_user_model()


class CookieJWTAuthentication(JWTAuthentication):
    """
    Authenticates staff from the HTTP-only access cookie only. The tenant
    context comes from that same cookie, so a bare Authorization header is
    never accepted.
    """

    def authenticate(self, request):
        access_token = request.COOKIES.get(settings.SIMPLE_JWT["AUTH_COOKIE"])
        if not access_token:
            return None

        validated_token = self.get_validated_token(access_token)
        user = self.get_user(validated_token)

        token_tenant = validated_token.get('tenant_id')
        if token_tenant and str(user.tenant_id) != str(token_tenant):
            raise AuthenticationFailed('Token tenant does not match user', code='tenant_mismatch')

        # The user must belong to the tenant this request was resolved to
        request_tenant = getattr(request, 'tenant', None)
        if request_tenant is not None and user.tenant_id != request_tenant.pk:
            raise AuthenticationFailed('User does not belong to this tenant', code='tenant_mismatch')

        return user, validated_token

    def get_user(self, validated_token):
        """
        Load the user through all_objects.

        DRF authentication runs lazily inside the view, but the lookup must not
        depend on tenant context: the user id in a signed token identifies
        exactly one row.
        """
        try:
            user_id = validated_token[settings.SIMPLE_JWT.get('USER_ID_CLAIM', 'user_id')]
        except KeyError:
            raise InvalidToken('Token contained no recognizable user identification')

        try:
            user = User.all_objects.select_related('tenant').get(
                **{settings.SIMPLE_JWT.get('USER_ID_FIELD', 'id'): user_id}
            )
        except User.DoesNotExist:
            raise AuthenticationFailed('User not found', code='user_not_found')

        if not user.is_active:
            raise AuthenticationFailed('User is inactive', code='user_inactive')

        return user
