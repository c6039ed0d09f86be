"""
Settings Service Layer

Resolves tenant configuration with fallbacks to the RESTAURANT defaults in
Django settings.
"""
import logging
from decimal import Decimal
from typing import Any, Dict, Optional

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction

from tenant.managers import get_current_tenant
from .models import GlobalSettings

logger = logging.getLogger(__name__)


class SettingsService:
    """
    Service layer for the tenant's GlobalSettings singleton.
    """

    @staticmethod
    def get_global_settings() -> GlobalSettings:
        """
        Get the tenant-scoped GlobalSettings instance.
        Creates one from the RESTAURANT defaults if it doesn't exist yet.
        """
        tenant = get_current_tenant()
        if not tenant:
            raise ValidationError("No tenant context available for settings")

        try:
            return GlobalSettings.objects.get(tenant=tenant)
        except GlobalSettings.DoesNotExist:
            defaults = settings.RESTAURANT
            obj = GlobalSettings.objects.create(
                tenant=tenant,
                brand_name=tenant.business_name or tenant.name,
                currency=defaults["DEFAULT_CURRENCY"],
                default_tax_rate=defaults["DEFAULT_TAX_RATE"],
                points_per_currency=defaults["POINTS_PER_CURRENCY"],
                points_redemption_ratio=defaults["POINTS_REDEMPTION_RATIO"],
            )
            logger.info(f"Created GlobalSettings for tenant '{tenant.slug}'")
            return obj

    @staticmethod
    @transaction.atomic
    def update_global_settings(update_data: Dict[str, Any]) -> GlobalSettings:
        obj = SettingsService.get_global_settings()
        for field, value in update_data.items():
            setattr(obj, field, value)
        obj.save()
        logger.info(f"GlobalSettings updated for tenant {obj.tenant_id}: {sorted(update_data)}")
        return obj

    @staticmethod
    def get_tax_rate(branch=None) -> Decimal:
        """
        Effective tax rate for a checkout.

        Branch override, then the tenant default, then RESTAURANT["DEFAULT_TAX_RATE"].
        """
        if branch is not None and branch.tax_rate is not None:
            return Decimal(branch.tax_rate)

        if get_current_tenant() is not None:
            return Decimal(SettingsService.get_global_settings().default_tax_rate)

        return Decimal(settings.RESTAURANT["DEFAULT_TAX_RATE"])

    @staticmethod
    def get_points_per_currency() -> Decimal:
        if get_current_tenant() is None:
            return Decimal(settings.RESTAURANT["POINTS_PER_CURRENCY"])
        return Decimal(SettingsService.get_global_settings().points_per_currency)

    @staticmethod
    def get_redemption_ratio() -> int:
        if get_current_tenant() is None:
            return int(settings.RESTAURANT["POINTS_REDEMPTION_RATIO"])
        return SettingsService.get_global_settings().points_redemption_ratio

    @staticmethod
    def get_currency_symbol() -> str:
        if get_current_tenant() is None:
            return "$"
        return SettingsService.get_global_settings().currency_symbol

    @staticmethod
    def points_redemption_allowed(global_settings: Optional[GlobalSettings] = None) -> bool:
        global_settings = global_settings or SettingsService.get_global_settings()
        return global_settings.allow_points_redemption
