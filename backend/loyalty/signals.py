"""
Loyalty reactions to the order lifecycle.
"""
import logging

from django.dispatch import receiver

from orders.signals import order_placed, order_status_changed

logger = logging.getLogger(__name__)


@receiver(order_placed)
def handle_order_placed(sender, order, **kwargs):
    """Count the order on the customer and award the points it earned."""
    if order.customer_id is None:
        return

    from customers.services import CustomerService

    CustomerService.record_order(
        order.customer, order.total, points_earned=order.points_earned, order=order
    )


@receiver(order_status_changed)
def handle_order_cancelled(sender, order, previous_status, new_status, **kwargs):
    """Cancelled orders give back redeemed points and lose earned ones."""
    if new_status != 'cancelled' or order.customer_id is None:
        return

    from customers.services import CustomerService
    from .services import LoyaltyService

    LoyaltyService.reverse_order_points(order)
    CustomerService.reverse_order(order.customer, order.total)
    logger.info(f"Loyalty reversed for cancelled order {order.order_number} (was {previous_status})")
