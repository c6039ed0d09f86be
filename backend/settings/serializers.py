from core_backend.base import BaseModelSerializer
from .models import GlobalSettings


class GlobalSettingsSerializer(BaseModelSerializer):
    class Meta:
        model = GlobalSettings
        fields = [
            "brand_name",
            "currency",
            "currency_symbol",
            "default_tax_rate",
            "points_per_currency",
            "points_redemption_ratio",
            "allow_points_redemption",
            "updated_at",
        ]
        read_only_fields = ["updated_at"]
