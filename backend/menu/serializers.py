from rest_framework import serializers

from core_backend.base import BaseModelSerializer, TenantFilteredSerializerMixin
from .models import Category, MenuItem, ModifierGroup, ModifierOption


class ModifierOptionSerializer(TenantFilteredSerializerMixin, BaseModelSerializer):
    group = serializers.PrimaryKeyRelatedField(queryset=ModifierGroup.objects.all())

    class Meta:
        model = ModifierOption
        fields = ['id', 'group', 'name', 'price_adjustment', 'is_default', 'is_available', 'sort_order']


class NestedModifierOptionSerializer(BaseModelSerializer):
    class Meta:
        model = ModifierOption
        fields = ['id', 'name', 'price_adjustment', 'is_default', 'is_available']


class ModifierGroupSerializer(BaseModelSerializer):
    options = NestedModifierOptionSerializer(many=True, read_only=True)

    class Meta:
        model = ModifierGroup
        fields = ['id', 'name', 'is_required', 'min_selections', 'max_selections', 'sort_order', 'options']
        prefetch_related_fields = ['options']

    def validate(self, attrs):
        min_selections = attrs.get('min_selections', getattr(self.instance, 'min_selections', 0))
        max_selections = attrs.get('max_selections', getattr(self.instance, 'max_selections', 1))
        if max_selections < min_selections:
            raise serializers.ValidationError(
                {"max_selections": "Must be greater than or equal to min_selections."}
            )
        return attrs


class CategorySerializer(BaseModelSerializer):
    item_count = serializers.SerializerMethodField()

    class Meta:
        model = Category
        fields = ['id', 'name', 'slug', 'description', 'image_url', 'sort_order', 'is_active', 'item_count']
        read_only_fields = ['id', 'slug', 'is_active']

    def get_item_count(self, obj):
        return obj.items.filter(is_active=True).count()


class MenuItemSerializer(TenantFilteredSerializerMixin, BaseModelSerializer):
    category = serializers.PrimaryKeyRelatedField(queryset=Category.objects.all())
    category_name = serializers.CharField(source='category.name', read_only=True)
    modifier_groups = serializers.PrimaryKeyRelatedField(
        queryset=ModifierGroup.objects.all(), many=True, required=False
    )
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)

    class Meta:
        model = MenuItem
        fields = [
            'id', 'category', 'category_name', 'name', 'slug', 'description', 'price',
            'image_url', 'calories', 'is_vegetarian', 'is_vegan', 'is_gluten_free',
            'allergens', 'is_popular', 'is_new', 'is_available', 'prep_time_minutes',
            'sort_order', 'modifier_groups', 'is_active',
        ]
        read_only_fields = ['id', 'slug', 'is_active']
        select_related_fields = ['category']
        prefetch_related_fields = ['modifier_groups']

    def validate_allergens(self, value):
        if not isinstance(value, list) or not all(isinstance(a, str) for a in value):
            raise serializers.ValidationError("Allergens must be a list of strings.")
        return value


class PublicMenuItemSerializer(BaseModelSerializer):
    """Storefront representation: modifier groups inlined with their options."""

    modifier_groups = ModifierGroupSerializer(many=True, read_only=True)
    category = serializers.IntegerField(source='category_id', read_only=True)

    class Meta:
        model = MenuItem
        fields = [
            'id', 'category', 'name', 'slug', 'description', 'price', 'image_url',
            'calories', 'is_vegetarian', 'is_vegan', 'is_gluten_free', 'allergens',
            'is_popular', 'is_new', 'is_available', 'prep_time_minutes', 'modifier_groups',
        ]
        select_related_fields = ['category']
        prefetch_related_fields = ['modifier_groups__options']


class PublicMenuCategorySerializer(BaseModelSerializer):
    items = PublicMenuItemSerializer(source='public_items', many=True, read_only=True)

    class Meta:
        model = Category
        fields = ['id', 'name', 'slug', 'description', 'image_url', 'items']
