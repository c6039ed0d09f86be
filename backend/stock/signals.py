"""
Stock reactions to the order lifecycle.
"""
import logging

from django.db import transaction
from django.dispatch import receiver

from orders.signals import order_placed

logger = logging.getLogger(__name__)


@receiver(order_placed)
def handle_order_placed(sender, order, **kwargs):
    """Deduct recipe ingredients. A stock failure never blocks the order."""
    from .services import StockService

    try:
        with transaction.atomic():
            StockService.deduct_for_order(order)
    except Exception:
        logger.exception(f"Stock deduction failed for order {order.order_number}")
