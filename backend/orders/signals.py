"""
Order lifecycle signals.

Loyalty and stock subscribe to these in their AppConfig.ready(); orders
never import those apps' receivers directly.
"""
from django.dispatch import Signal

# Sent once an order and its items are committed. kwargs: order
order_placed = Signal()

# Sent after every status change. kwargs: order, previous_status, new_status
order_status_changed = Signal()
