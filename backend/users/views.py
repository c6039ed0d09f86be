from django.utils.decorators import method_decorator
from django_ratelimit.decorators import ratelimit
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from core_backend.base import BaseViewSet
from core_backend.utils import get_client_ip
from .models import User
from .permissions import IsOwner
from .serializers import StaffLoginSerializer, StaffUserWriteSerializer, UserSerializer
from .services import AuthCookieService, UserService


@method_decorator(
    ratelimit(key=get_client_ip, rate="5/m", method="POST", block=True), name="post"
)
class StaffLoginView(APIView):
    """
    Email/password login for back-office staff of the resolved tenant.
    Tokens are returned as HTTP-only cookies, not in the body.
    """

    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def post(self, request, *args, **kwargs):
        serializer = StaffLoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = UserService.authenticate_staff_user(
            request.tenant,
            serializer.validated_data["email"],
            serializer.validated_data["password"],
        )
        if not user:
            return Response(
                {"error": "Invalid credentials"}, status=status.HTTP_401_UNAUTHORIZED
            )

        tokens = UserService.generate_tokens_for_user(user)
        response = Response({
            "user": UserSerializer(user).data,
            "tenant": {
                "id": str(user.tenant.id),
                "name": user.tenant.name,
                "slug": user.tenant.slug,
            },
        })
        return AuthCookieService.set_auth_cookies(response, tokens["access"], tokens["refresh"])


class LogoutView(APIView):
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def post(self, request, *args, **kwargs):
        response = Response({"message": "Logged out"}, status=status.HTTP_200_OK)
        return AuthCookieService.clear_auth_cookies(response)


class CurrentUserView(APIView):
    def get(self, request, *args, **kwargs):
        return Response(UserSerializer(request.user).data)


class StaffUserViewSet(BaseViewSet):
    """
    Owners manage the tenant's back-office accounts. Accounts are
    deactivated rather than deleted so order history keeps its references.
    """

    queryset = User.objects.all()
    permission_classes = [IsOwner]
    filterset_fields = ['role', 'is_active']
    search_fields = ['email', 'first_name', 'last_name']
    ordering = ['email']
    http_method_names = ['get', 'post', 'patch', 'head', 'options']

    def get_serializer_class(self):
        if self.action in ('create', 'partial_update'):
            return StaffUserWriteSerializer
        return UserSerializer
