from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from branches.models import Branch
from core_backend.base import BaseViewSet
from core_backend.exceptions import NotFoundError
from menu.models import MenuItem
from users.permissions import IsManagerOrHigher, ReadOnlyForStaff
from .models import Ingredient
from .serializers import (
    IngredientSerializer,
    MenuItemIngredientSerializer,
    RecipeSerializer,
    StockAdjustmentSerializer,
    StockLevelSerializer,
    UsageReportQuerySerializer,
    UsageReportRowSerializer,
)
from .services import StockService


def _branch_param(request):
    branch_id = request.query_params.get('branch', '')
    if not branch_id:
        return None
    branch = Branch.objects.filter(pk=branch_id).first() if branch_id.isdigit() else None
    if branch is None:
        raise NotFoundError("Branch not found", code="branch_not_found")
    return branch


class IngredientViewSet(BaseViewSet):
    """Ingredients. DELETE archives."""

    queryset = Ingredient.objects.all()
    serializer_class = IngredientSerializer
    permission_classes = [ReadOnlyForStaff]
    filterset_fields = ['category', 'unit']
    search_fields = ['name', 'category']
    ordering_fields = ['name', 'category', 'cost_per_unit']
    ordering = ['name']


class StockLevelListView(APIView):
    """GET stock/?branch= : current stock of every active ingredient."""

    permission_classes = [ReadOnlyForStaff]

    def get(self, request, *args, **kwargs):
        levels = StockService.stock_levels(_branch_param(request))
        return Response(StockLevelSerializer(levels, many=True).data)


class LowStockView(APIView):
    permission_classes = [ReadOnlyForStaff]

    def get(self, request, *args, **kwargs):
        levels = StockService.low_stock(_branch_param(request))
        return Response(StockLevelSerializer(levels, many=True).data)


class StockAdjustView(APIView):
    permission_classes = [IsManagerOrHigher]

    def post(self, request, *args, **kwargs):
        serializer = StockAdjustmentSerializer(data=request.data, context={'request': request})
        serializer.is_valid(raise_exception=True)
        level = StockService.adjust(**serializer.validated_data)
        return Response(StockLevelSerializer(level).data)


class StockUsageView(APIView):
    """GET stock/usage/?start=&end=&branch= : ingredient usage and cost, default the last 7 days."""

    permission_classes = [ReadOnlyForStaff]

    def get(self, request, *args, **kwargs):
        query = UsageReportQuerySerializer(data=request.query_params, context={'request': request})
        query.is_valid(raise_exception=True)
        rows = StockService.usage_report(
            start=query.validated_data.get('start'),
            end=query.validated_data.get('end'),
            branch=query.validated_data.get('branch'),
        )
        return Response(UsageReportRowSerializer(rows, many=True).data)


class MenuItemRecipeView(APIView):
    """GET/PUT menu/items/{id}/ingredients/ : a menu item's recipe."""

    permission_classes = [ReadOnlyForStaff]

    def _menu_item(self, pk):
        menu_item = MenuItem.objects.with_archived().filter(pk=pk).first()
        if menu_item is None:
            raise NotFoundError("Menu item not found", code="menu_item_not_found")
        return menu_item

    def get(self, request, pk, *args, **kwargs):
        recipe = StockService.get_recipe(self._menu_item(pk))
        return Response(MenuItemIngredientSerializer(recipe, many=True).data)

    def put(self, request, pk, *args, **kwargs):
        menu_item = self._menu_item(pk)
        serializer = RecipeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        recipe = StockService.set_recipe(menu_item, serializer.validated_data['ingredients'])
        return Response(MenuItemIngredientSerializer(recipe, many=True).data, status=status.HTTP_200_OK)
