from rest_framework.response import Response
from rest_framework.views import APIView

from users.permissions import PublicReadManagerWrite
from .serializers import GlobalSettingsSerializer
from .services import SettingsService


class GlobalSettingsView(APIView):
    """
    The tenant's single GlobalSettings object.
    The storefront reads it (currency, redemption ratio); managers update it.
    """

    permission_classes = [PublicReadManagerWrite]

    def get(self, request, *args, **kwargs):
        instance = SettingsService.get_global_settings()
        return Response(GlobalSettingsSerializer(instance).data)

    def patch(self, request, *args, **kwargs):
        instance = SettingsService.get_global_settings()
        serializer = GlobalSettingsSerializer(instance, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        instance = SettingsService.update_global_settings(serializer.validated_data)
        return Response(GlobalSettingsSerializer(instance).data)
