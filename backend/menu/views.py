from rest_framework import permissions
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView

from core_backend.base import BaseViewSet
from users.permissions import IsManagerOrHigher, PublicReadManagerWrite
from .filters import MenuItemFilter
from .models import Category, MenuItem, ModifierGroup, ModifierOption
from .serializers import (
    CategorySerializer,
    MenuItemSerializer,
    ModifierGroupSerializer,
    ModifierOptionSerializer,
    PublicMenuCategorySerializer,
    PublicMenuItemSerializer,
)
from .services import MenuService


class PublicMenuView(APIView):
    """
    The storefront menu: categories in display order with their orderable items.
    """

    permission_classes = [permissions.AllowAny]

    def get(self, request, *args, **kwargs):
        categories = MenuService.get_public_menu()
        return Response(PublicMenuCategorySerializer(categories, many=True).data)


class CategoryViewSet(BaseViewSet):
    queryset = Category.objects.all()
    serializer_class = CategorySerializer
    permission_classes = [PublicReadManagerWrite]
    search_fields = ['name']
    ordering_fields = ['sort_order', 'name']
    ordering = ['sort_order', 'name']
    pagination_class = None


class MenuItemViewSet(BaseViewSet):
    """
    Menu items. Anonymous callers only ever see available items, with
    modifiers inlined; staff get the editable representation.
    """

    queryset = MenuItem.objects.all()
    serializer_class = MenuItemSerializer
    permission_classes = [PublicReadManagerWrite]
    filterset_class = MenuItemFilter
    search_fields = ['name', 'description']
    ordering_fields = ['sort_order', 'name', 'price']
    ordering = ['category__sort_order', 'sort_order', 'name']

    def _is_staff_request(self):
        return bool(self.request.user and self.request.user.is_authenticated)

    def get_serializer_class(self):
        if self.action in ('list', 'retrieve') and not self._is_staff_request():
            return PublicMenuItemSerializer
        return MenuItemSerializer

    def get_queryset(self):
        queryset = super().get_queryset()
        if not self._is_staff_request():
            queryset = queryset.filter(is_available=True, category__is_active=True)
        return queryset

    @action(detail=True, methods=['post'], permission_classes=[IsManagerOrHigher])
    def toggle(self, request, pk=None):
        """Flip the sold-out switch."""
        item = MenuService.toggle_availability(self.get_object())
        return Response(MenuItemSerializer(item, context={'request': request}).data)


class ModifierGroupViewSet(BaseViewSet):
    queryset = ModifierGroup.objects.all()
    serializer_class = ModifierGroupSerializer
    permission_classes = [IsManagerOrHigher]
    search_fields = ['name']
    ordering = ['sort_order', 'name']


class ModifierOptionViewSet(BaseViewSet):
    queryset = ModifierOption.objects.all()
    serializer_class = ModifierOptionSerializer
    permission_classes = [IsManagerOrHigher]
    filterset_fields = ['group', 'is_available']
    ordering = ['group', 'sort_order', 'name']
