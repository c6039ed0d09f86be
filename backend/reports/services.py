"""
Sales reporting over placed orders.

Cancelled orders never count. Date ranges are inclusive calendar days in the
server time zone.
"""
import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple

from django.db.models import Avg, Count, Max, Min, Sum
from django.db.models.functions import TruncDate
from django.utils import timezone

from orders.models import Order, OrderItem
from orders.pricing import ZERO, quantize_money

logger = logging.getLogger(__name__)


class ReportService:
    PERIODS = ("today", "yesterday", "week", "month", "custom")
    TOP_ITEMS_LIMIT = 10

    @staticmethod
    def resolve_period(period: str = "today", start: Optional[date] = None, end: Optional[date] = None) -> Tuple[date, date]:
        """
        Turn a named period into an inclusive (start, end) date range.

        week is the last 7 days up to today, month runs from the 1st.
        custom uses the given dates, each defaulting to today.
        """
        today = timezone.localdate()
        if period == "yesterday":
            yesterday = today - timedelta(days=1)
            return yesterday, yesterday
        if period == "week":
            return today - timedelta(days=7), today
        if period == "month":
            return today.replace(day=1), today
        if period == "custom":
            return start or today, end or today
        return today, today

    @staticmethod
    def _orders(start: date, end: date, branch=None):
        queryset = Order.objects.filter(
            created_at__date__gte=start,
            created_at__date__lte=end,
        ).exclude(status=Order.Status.CANCELLED)
        if branch is not None:
            queryset = queryset.filter(branch=branch)
        return queryset

    @staticmethod
    def _average(total, count) -> Decimal:
        if not count:
            return ZERO
        return quantize_money(Decimal(total) / count)

    @staticmethod
    def get_report_data(start: date, end: date, branch=None) -> Dict[str, Any]:
        orders = ReportService._orders(start, end, branch)

        daily_sales = [
            {
                "date": row["day"],
                "revenue": quantize_money(row["revenue"] or ZERO),
                "orders": row["orders"],
                "avg": ReportService._average(row["revenue"] or ZERO, row["orders"]),
            }
            for row in orders.annotate(day=TruncDate("created_at"))
            .values("day")
            .annotate(revenue=Sum("total"), orders=Count("id"))
            .order_by("-day")
        ]

        top_items = [
            {
                "name": row["item_name"],
                "quantity": row["quantity"],
                "revenue": quantize_money(row["revenue"] or ZERO),
            }
            for row in OrderItem.objects.filter(order__in=orders)
            .values("item_name")
            .annotate(quantity=Sum("quantity"), revenue=Sum("subtotal"))
            .order_by("-quantity", "item_name")[: ReportService.TOP_ITEMS_LIMIT]
        ]

        payment_methods = [
            {"method": row["payment_method"], "count": row["count"], "amount": quantize_money(row["amount"] or ZERO)}
            for row in orders.values("payment_method")
            .annotate(count=Count("id"), amount=Sum("total"))
            .order_by("-amount")
        ]

        order_types = [
            {"type": row["order_type"], "count": row["count"], "amount": quantize_money(row["amount"] or ZERO)}
            for row in orders.values("order_type")
            .annotate(count=Count("id"), amount=Sum("total"))
            .order_by("-amount")
        ]

        totals = orders.aggregate(
            total_revenue=Sum("total"),
            total_orders=Count("id"),
            total_customers=Count("customer", distinct=True),
        )
        total_revenue = totals["total_revenue"] or ZERO
        summary = {
            "total_revenue": quantize_money(total_revenue),
            "total_orders": totals["total_orders"],
            "avg_order_value": ReportService._average(total_revenue, totals["total_orders"]),
            "total_customers": totals["total_customers"],
        }

        prep = orders.filter(prep_time_seconds__isnull=False).aggregate(
            avg=Avg("prep_time_seconds"),
            min=Min("prep_time_seconds"),
            max=Max("prep_time_seconds"),
            count=Count("id"),
        )
        prep_time = {
            "avg": round(prep["avg"]) if prep["avg"] is not None else 0,
            "min": prep["min"] or 0,
            "max": prep["max"] or 0,
            "count": prep["count"],
        }

        logger.info(
            f"Report {start}..{end} (branch {getattr(branch, 'pk', 'all')}): "
            f"{summary['total_orders']} orders, {summary['total_revenue']} revenue"
        )
        return {
            "start": start,
            "end": end,
            "daily_sales": daily_sales,
            "top_items": top_items,
            "payment_methods": payment_methods,
            "order_types": order_types,
            "summary": summary,
            "prep_time": prep_time,
        }

    @staticmethod
    def today_stats() -> Dict[str, Any]:
        """Revenue, order count and average over today's paid orders."""
        totals = Order.objects.filter(
            created_at__date=timezone.localdate(),
            payment_status=Order.PaymentStatus.PAID,
        ).aggregate(revenue=Sum("total"), orders=Count("id"))
        revenue = totals["revenue"] or ZERO
        return {
            "revenue": quantize_money(revenue),
            "orders": totals["orders"],
            "avg": ReportService._average(revenue, totals["orders"]),
        }
