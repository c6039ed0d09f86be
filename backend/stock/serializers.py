from rest_framework import serializers

from branches.models import Branch
from core_backend.base import BaseModelSerializer, TenantFilteredSerializerMixin
from .models import Ingredient, MenuItemIngredient, StockLevel
from .services import StockService


class IngredientSerializer(BaseModelSerializer):
    class Meta:
        model = Ingredient
        fields = [
            'id', 'name', 'unit', 'category', 'cost_per_unit', 'min_stock_level',
            'is_active', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'is_active', 'created_at', 'updated_at']

    def validate_name(self, value):
        name = value.strip()
        duplicates = Ingredient.objects.with_archived().filter(name__iexact=name)
        if self.instance is not None:
            duplicates = duplicates.exclude(pk=self.instance.pk)
        if duplicates.exists():
            raise serializers.ValidationError("An ingredient with this name already exists.")
        return name


class StockLevelSerializer(BaseModelSerializer):
    branch_name = serializers.CharField(source='branch.name', read_only=True)
    ingredient_name = serializers.CharField(source='ingredient.name', read_only=True)
    unit = serializers.CharField(source='ingredient.unit', read_only=True)
    min_stock_level = serializers.DecimalField(
        source='ingredient.min_stock_level', max_digits=12, decimal_places=3, read_only=True
    )
    is_low = serializers.BooleanField(read_only=True)

    class Meta:
        model = StockLevel
        fields = [
            'id', 'branch', 'branch_name', 'ingredient', 'ingredient_name', 'unit',
            'current_quantity', 'min_stock_level', 'is_low', 'updated_at',
        ]
        read_only_fields = fields


class StockAdjustmentSerializer(TenantFilteredSerializerMixin, serializers.Serializer):
    branch = serializers.PrimaryKeyRelatedField(queryset=Branch.objects.all())
    ingredient = serializers.PrimaryKeyRelatedField(queryset=Ingredient.objects.all())
    adjust_type = serializers.ChoiceField(choices=StockService.ADJUST_TYPES)
    quantity = serializers.DecimalField(max_digits=12, decimal_places=3, min_value=0)


class RecipeLineSerializer(serializers.Serializer):
    ingredient = serializers.IntegerField()
    quantity = serializers.DecimalField(max_digits=10, decimal_places=3)


class RecipeSerializer(serializers.Serializer):
    """
    Full replacement of a menu item's recipe. Ingredient ids are resolved
    through the tenant-scoped manager, so another tenant's ids are unknown.
    """

    ingredients = RecipeLineSerializer(many=True, allow_empty=True)

    def validate_ingredients(self, lines):
        ids = {line["ingredient"] for line in lines}
        found = Ingredient.objects.in_bulk(ids)
        missing = sorted(ids - set(found))
        if missing:
            raise serializers.ValidationError(f"Unknown ingredient id(s): {missing}")
        return [{"ingredient": found[line["ingredient"]], "quantity": line["quantity"]} for line in lines]


class MenuItemIngredientSerializer(BaseModelSerializer):
    ingredient_name = serializers.CharField(source='ingredient.name', read_only=True)
    unit = serializers.CharField(source='ingredient.unit', read_only=True)

    class Meta:
        model = MenuItemIngredient
        fields = ['id', 'menu_item', 'ingredient', 'ingredient_name', 'unit', 'quantity']
        read_only_fields = fields


class UsageReportRowSerializer(serializers.Serializer):
    ingredient = serializers.IntegerField()
    name = serializers.CharField()
    unit = serializers.CharField()
    total_used = serializers.DecimalField(max_digits=14, decimal_places=3)
    cost = serializers.DecimalField(max_digits=14, decimal_places=2)


class UsageReportQuerySerializer(TenantFilteredSerializerMixin, serializers.Serializer):
    start = serializers.DateField(required=False)
    end = serializers.DateField(required=False)
    branch = serializers.PrimaryKeyRelatedField(queryset=Branch.objects.all(), required=False)

    def validate(self, attrs):
        if attrs.get('start') and attrs.get('end') and attrs['start'] > attrs['end']:
            raise serializers.ValidationError({"start": "Start date must be on or before end date."})
        return attrs
