from django.contrib import admin
from .models import LoyaltyTier, PointsEarningRule, PointsTransaction, LoyaltyReward


@admin.register(LoyaltyTier)
class LoyaltyTierAdmin(admin.ModelAdmin):
    list_display = ("name", "tenant", "min_points", "points_multiplier", "is_active")

    def get_queryset(self, request):
        return LoyaltyTier.all_objects.select_related("tenant")


@admin.register(PointsEarningRule)
class PointsEarningRuleAdmin(admin.ModelAdmin):
    list_display = ("name", "trigger_type", "points_type", "points_value", "is_active")
    list_filter = ("trigger_type", "is_active")

    def get_queryset(self, request):
        return PointsEarningRule.all_objects.all()


@admin.register(PointsTransaction)
class PointsTransactionAdmin(admin.ModelAdmin):
    list_display = ("customer", "points", "type", "balance_after", "created_at")
    list_filter = ("type",)
    readonly_fields = ("customer", "order", "points", "type", "balance_after", "created_at")

    def get_queryset(self, request):
        return PointsTransaction.all_objects.select_related("customer", "order")


@admin.register(LoyaltyReward)
class LoyaltyRewardAdmin(admin.ModelAdmin):
    list_display = ("name", "points_cost", "quantity_available", "quantity_redeemed", "is_active")

    def get_queryset(self, request):
        return LoyaltyReward.all_objects.all()
