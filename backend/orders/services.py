import logging
from typing import Optional

from django.db import IntegrityError, transaction
from django.db.models.functions import Length
from django.utils import timezone

from branches.models import Branch
from core_backend.exceptions import InvalidStatusTransition, NotFoundError, ServiceError
from customers.services import CustomerService
from loyalty.exceptions import PointsRedemptionDisabled
from loyalty.rules import EarningRuleEvaluator
from loyalty.services import LoyaltyService
from menu.services import MenuService
from promotions.services import PromotionService, PromotionValidationService
from settings.services import SettingsService
from tenant.managers import get_current_tenant
from tenant.models import Tenant
from .calculators import CheckoutCalculator, PricedLine
from .exceptions import BranchUnavailableError, EmptyOrderError, OrderNotFound
from .models import Order, OrderItem
from .signals import order_placed, order_status_changed

logger = logging.getLogger(__name__)


class OrderService:
    """
    Storefront checkout and the back-office order lifecycle.
    """

    STATUS_TRANSITIONS = {
        Order.Status.PENDING: {Order.Status.CONFIRMED, Order.Status.PREPARING, Order.Status.CANCELLED},
        Order.Status.CONFIRMED: {Order.Status.PREPARING, Order.Status.CANCELLED},
        Order.Status.PREPARING: {Order.Status.READY, Order.Status.CANCELLED},
        Order.Status.READY: {Order.Status.SERVED, Order.Status.COMPLETED},
        Order.Status.SERVED: {Order.Status.COMPLETED},
        Order.Status.COMPLETED: set(),
        Order.Status.CANCELLED: set(),
    }

    ORDER_NUMBER_ATTEMPTS = 3

    KITCHEN_STATUSES = [
        Order.Status.PENDING,
        Order.Status.CONFIRMED,
        Order.Status.PREPARING,
        Order.Status.READY,
    ]

    # --- pricing ---

    @staticmethod
    def _resolve_branch(branch) -> Branch:
        if isinstance(branch, Branch):
            branch_obj = branch
        else:
            branch_obj = Branch.objects.with_archived().filter(pk=branch).first()
        if branch_obj is None:
            raise NotFoundError("Branch not found", code="branch_not_found")
        if not branch_obj.is_active:
            raise BranchUnavailableError()
        return branch_obj

    @staticmethod
    def _price_lines(items) -> list:
        """Server-side prices for each cart line; client prices are never trusted."""
        if not items:
            raise EmptyOrderError()

        lines = []
        for entry in items:
            menu_item = MenuService.get_orderable_item(entry['menu_item'])
            options = MenuService.validate_modifier_selection(menu_item, entry.get('modifiers') or [])
            lines.append(PricedLine(
                menu_item_id=menu_item.pk,
                name=menu_item.name,
                unit_price=menu_item.price,
                quantity=int(entry['quantity']),
                modifiers=[
                    {"id": option.pk, "name": option.name, "price": str(option.price_adjustment)}
                    for option in options
                ],
                special_instructions=entry.get('special_instructions', ''),
            ))
        return lines

    @staticmethod
    def _build_calculator(data: dict, branch: Branch, lines: list, customer=None, promotion=None) -> CheckoutCalculator:
        global_settings = SettingsService.get_global_settings()

        points_to_redeem = int(data.get('redeem_points') or 0)
        if points_to_redeem and not SettingsService.points_redemption_allowed(global_settings):
            raise PointsRedemptionDisabled()

        context = {"branch_id": branch.pk, "order_type": data.get('order_type', Order.OrderType.TAKEAWAY)}

        def points_for(total):
            return EarningRuleEvaluator.points_for(
                'order', total, customer=customer, context=context,
                points_per_currency=global_settings.points_per_currency,
            )

        def discount_for(subtotal):
            return PromotionValidationService.calculate_discount(promotion, subtotal)

        return CheckoutCalculator(
            lines,
            tax_rate=SettingsService.get_tax_rate(branch),
            discount_for=discount_for if promotion is not None else None,
            points_for=points_for,
            points_to_redeem=points_to_redeem,
            points_balance=customer.points_balance if customer is not None else 0,
            redemption_ratio=global_settings.points_redemption_ratio,
        )

    @staticmethod
    def _promotion_for(data: dict, lines_subtotal):
        code = (data.get('promo_code') or '').strip()
        if not code:
            return None
        return PromotionValidationService.get_applicable_promotion(code, lines_subtotal)

    @staticmethod
    def quote(data: dict) -> dict:
        """
        Price a cart without saving anything. Same numbers checkout will charge.
        """
        branch = OrderService._resolve_branch(data['branch'])
        customer = None
        if data.get('customer_phone'):
            customer = CustomerService.lookup_by_phone(data['customer_phone'])

        lines = OrderService._price_lines(data.get('items'))
        subtotal = CheckoutCalculator(lines, tax_rate=0).calculate_subtotal()
        promotion = OrderService._promotion_for(data, subtotal)

        totals = OrderService._build_calculator(data, branch, lines, customer, promotion).calculate_totals()
        totals["promo_code"] = promotion.code if promotion else ""
        totals["lines"] = [
            {
                "menu_item": line.menu_item_id,
                "name": line.name,
                "quantity": line.quantity,
                "unit_price": line.unit_price,
                "modifiers": line.modifiers,
                "modifier_total": line.modifier_total,
                "subtotal": line.line_total,
            }
            for line in lines
        ]
        return totals

    # --- checkout ---

    @staticmethod
    @transaction.atomic
    def generate_order_number(tenant, on_date=None) -> str:
        """
        ORD-YYYYMMDD-NNNN, NNNN counting the tenant's orders that day.

        Must run inside a transaction: the tenant row is locked so concurrent
        checkouts number one after the other. Suffixes are compared by length
        first so -10000 sorts after -9999.
        """
        Tenant.objects.select_for_update().filter(pk=tenant.pk).first()

        on_date = on_date or timezone.localdate()
        prefix = f"ORD-{on_date:%Y%m%d}-"
        last = (
            Order.all_objects.filter(tenant=tenant, order_number__startswith=prefix)
            .annotate(number_length=Length('order_number'))
            .order_by('-number_length', '-order_number')
            .values_list('order_number', flat=True)
            .first()
        )
        sequence = int(last.rsplit('-', 1)[1]) + 1 if last else 1
        return f"{prefix}{sequence:04d}"

    @staticmethod
    def _create_numbered_order(tenant, **fields) -> Order:
        """
        Insert the order under the next free number. A number taken by a
        concurrent checkout is retried inside a savepoint.
        """
        for attempt in range(1, OrderService.ORDER_NUMBER_ATTEMPTS + 1):
            order_number = OrderService.generate_order_number(tenant)
            try:
                with transaction.atomic():
                    return Order.objects.create(tenant=tenant, order_number=order_number, **fields)
            except IntegrityError:
                if attempt == OrderService.ORDER_NUMBER_ATTEMPTS:
                    raise
                logger.warning(f"Order number {order_number} already taken, retrying (attempt {attempt})")

    @staticmethod
    @transaction.atomic
    def place_order(data: dict) -> Order:
        """
        Create an order from a storefront checkout.

        Everything runs in one transaction: a promo or points failure leaves
        no order, no redemption and no promo usage behind.
        """
        tenant = get_current_tenant()
        branch = OrderService._resolve_branch(data['branch'])
        customer = CustomerService.find_or_create_by_phone(
            data['customer_phone'], data.get('customer_name', ''), data.get('customer_email', '')
        )

        lines = OrderService._price_lines(data.get('items'))
        subtotal = CheckoutCalculator(lines, tax_rate=0).calculate_subtotal()
        promotion = OrderService._promotion_for(data, subtotal)

        totals = OrderService._build_calculator(data, branch, lines, customer, promotion).calculate_totals()

        if promotion is not None:
            promotion = PromotionService.redeem(promotion)

        order = OrderService._create_numbered_order(
            tenant,
            branch=branch,
            customer=customer,
            table_number=data.get('table_number'),
            order_type=data.get('order_type', Order.OrderType.TAKEAWAY),
            promotion=promotion,
            promo_code=promotion.code if promotion else '',
            subtotal=totals['subtotal'],
            discount=totals['discount'],
            points_discount=totals['points_discount'],
            tax=totals['tax'],
            total=totals['total'],
            points_earned=totals['points_earned'],
            points_redeemed=totals['points_redeemed'],
            payment_method=data.get('payment_method', Order.PaymentMethod.CASH),
            special_instructions=data.get('special_instructions', ''),
        )

        OrderItem.objects.bulk_create([
            OrderItem(
                tenant=tenant,
                order=order,
                menu_item_id=line.menu_item_id,
                item_name=line.name,
                quantity=line.quantity,
                unit_price=line.unit_price,
                modifiers=line.modifiers,
                modifier_total=line.modifier_total,
                special_instructions=line.special_instructions,
                subtotal=line.line_total,
            )
            for line in lines
        ])

        if totals['points_redeemed']:
            LoyaltyService.redeem_points(
                customer, totals['points_redeemed'], order=order,
                description=f"Redeemed on {order.order_number}",
            )

        order_placed.send(sender=Order, order=order)
        logger.info(
            f"Order {order.order_number} placed at branch {branch.pk}: total={order.total}, "
            f"discount={order.discount}, points_redeemed={order.points_redeemed}"
        )
        return order

    # --- lifecycle ---

    @staticmethod
    def can_transition(current: str, new_status: str) -> bool:
        return new_status in OrderService.STATUS_TRANSITIONS.get(current, set())

    @staticmethod
    @transaction.atomic
    def update_status(order: Order, new_status: str) -> Order:
        order = Order.objects.select_for_update().get(pk=order.pk)
        previous = order.status
        if not OrderService.can_transition(previous, new_status):
            raise InvalidStatusTransition(previous, new_status)

        now = timezone.now()
        order.status = new_status
        update_fields = ['status', 'updated_at']

        if new_status == Order.Status.PREPARING and order.started_at is None:
            order.started_at = now
            update_fields.append('started_at')
        elif new_status == Order.Status.READY:
            order.completed_at = now
            update_fields.append('completed_at')
            if order.started_at:
                order.prep_time_seconds = max(0, int((now - order.started_at).total_seconds()))
                update_fields.append('prep_time_seconds')

        order.save(update_fields=update_fields)
        order_status_changed.send(
            sender=Order, order=order, previous_status=previous, new_status=new_status
        )
        logger.info(f"Order {order.order_number} status {previous} -> {new_status}")
        return order

    @staticmethod
    def update_payment_status(order: Order, payment_status: str, payment_method: Optional[str] = None) -> Order:
        if payment_status not in Order.PaymentStatus.values:
            raise ServiceError(f"Invalid payment status '{payment_status}'", code="invalid_payment_status")
        order.payment_status = payment_status
        update_fields = ['payment_status', 'updated_at']
        if payment_method:
            order.payment_method = payment_method
            update_fields.append('payment_method')
        order.save(update_fields=update_fields)
        logger.info(f"Order {order.order_number} payment status set to {payment_status}")
        return order

    # --- queries ---

    @staticmethod
    def track(order_number: str) -> Order:
        order = (
            Order.objects.select_related('branch')
            .prefetch_related('items')
            .filter(order_number=(order_number or '').strip().upper())
            .first()
        )
        if order is None:
            raise OrderNotFound()
        return order

    @staticmethod
    def kitchen_queue(branch=None):
        """Orders the kitchen still has to act on, oldest first."""
        queryset = Order.objects.filter(status__in=OrderService.KITCHEN_STATUSES)
        if branch is not None:
            queryset = queryset.filter(branch=branch)
        return queryset.select_related('branch', 'customer').prefetch_related('items').order_by('created_at')

