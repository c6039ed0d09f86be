"""
Shared test fixtures for all backend tests.

Tenant A ("Pizza Place") has a full storefront: a branch, a menu with a
required size choice, loyalty tiers, a customer and promo codes. Tenant B
("Burger Joint") has just enough to prove isolation.
"""
import pytest
from datetime import time, timedelta
from decimal import Decimal
from django.utils import timezone

from tenant.models import Tenant
from tenant.managers import set_current_tenant
from users.models import User
from branches.models import Branch
from menu.models import Category, MenuItem, ModifierGroup, ModifierOption
from customers.models import Customer
from loyalty.models import LoyaltyTier
from promotions.models import Promotion


# ============================================================================
# TENANT FIXTURES
# ============================================================================

@pytest.fixture
def tenant_a(db):
    """Create test tenant A (Pizza Place)"""
    return Tenant.objects.create(
        name='Pizza Place',
        slug='pizza-place',
        is_active=True
    )


@pytest.fixture
def tenant_b(db):
    """Create test tenant B (Burger Joint)"""
    return Tenant.objects.create(
        name='Burger Joint',
        slug='burger-joint',
        is_active=True
    )


@pytest.fixture
def inactive_tenant(db):
    """Create inactive test tenant"""
    return Tenant.objects.create(
        name='Closed Restaurant',
        slug='closed-restaurant',
        is_active=False
    )


@pytest.fixture
def tenant_a_context(tenant_a):
    """Run the test body as tenant A, the way TenantMiddleware would."""
    set_current_tenant(tenant_a)
    return tenant_a


# ============================================================================
# USER FIXTURES
# ============================================================================

@pytest.fixture
def admin_user_tenant_a(tenant_a):
    """Create owner for tenant A"""
    return User.objects.create_user(
        email='admin@pizza.com',
        password='password123',
        tenant=tenant_a,
        role=User.Role.OWNER,
    )


@pytest.fixture
def admin_user_tenant_b(tenant_b):
    """Create owner for tenant B"""
    return User.objects.create_user(
        email='admin@burger.com',
        password='password123',
        tenant=tenant_b,
        role=User.Role.OWNER,
    )


@pytest.fixture
def manager_user_tenant_a(tenant_a):
    return User.objects.create_user(
        email='manager@pizza.com',
        password='password123',
        tenant=tenant_a,
        role=User.Role.MANAGER,
    )


@pytest.fixture
def staff_user_tenant_a(tenant_a):
    return User.objects.create_user(
        email='staff@pizza.com',
        password='password123',
        tenant=tenant_a,
        role=User.Role.STAFF,
    )


# ============================================================================
# BRANCH FIXTURES
# ============================================================================

@pytest.fixture
def branch_tenant_a(tenant_a):
    """Downtown branch, open around the clock, no branch tax override"""
    return Branch.objects.create(
        tenant=tenant_a,
        name='Downtown',
        timezone='UTC',
        opening_time=time(0, 0),
        closing_time=time(0, 0),
    )


@pytest.fixture
def branch_tenant_b(tenant_b):
    return Branch.objects.create(
        tenant=tenant_b,
        name='Main Street',
        timezone='UTC',
        opening_time=time(0, 0),
        closing_time=time(0, 0),
    )


# ============================================================================
# MENU FIXTURES
# ============================================================================

@pytest.fixture
def category_tenant_a(tenant_a):
    """Create category for tenant A"""
    return Category.objects.create(
        name='Pizzas',
        tenant=tenant_a
    )


@pytest.fixture
def category_tenant_b(tenant_b):
    """Create category for tenant B"""
    return Category.objects.create(
        name='Burgers',
        tenant=tenant_b
    )


@pytest.fixture
def size_group_tenant_a(tenant_a):
    """Required single choice: Small (+0.00) or Large (+2.00)"""
    group = ModifierGroup.objects.create(
        tenant=tenant_a,
        name='Size',
        is_required=True,
        min_selections=1,
        max_selections=1,
    )
    ModifierOption.objects.create(tenant=tenant_a, group=group, name='Small', price_adjustment=Decimal('0.00'), is_default=True)
    ModifierOption.objects.create(tenant=tenant_a, group=group, name='Large', price_adjustment=Decimal('2.00'))
    return group


@pytest.fixture
def large_option_tenant_a(size_group_tenant_a):
    return ModifierOption.all_objects.get(group=size_group_tenant_a, name='Large')


@pytest.fixture
def small_option_tenant_a(size_group_tenant_a):
    return ModifierOption.all_objects.get(group=size_group_tenant_a, name='Small')


@pytest.fixture
def menu_item_tenant_a(tenant_a, category_tenant_a, size_group_tenant_a):
    """Margherita, 10.00, with the size choice"""
    item = MenuItem.objects.create(
        tenant=tenant_a,
        category=category_tenant_a,
        name='Margherita',
        price=Decimal('10.00'),
        is_popular=True,
    )
    item.modifier_groups.add(size_group_tenant_a)
    return item


@pytest.fixture
def side_item_tenant_a(tenant_a, category_tenant_a):
    """Garlic Bread, 4.50, no modifiers"""
    return MenuItem.objects.create(
        tenant=tenant_a,
        category=category_tenant_a,
        name='Garlic Bread',
        price=Decimal('4.50'),
    )


@pytest.fixture
def menu_item_tenant_b(tenant_b, category_tenant_b):
    return MenuItem.objects.create(
        tenant=tenant_b,
        category=category_tenant_b,
        name='Cheeseburger',
        price=Decimal('8.99'),
    )


# ============================================================================
# LOYALTY / CUSTOMER FIXTURES
# ============================================================================

@pytest.fixture
def loyalty_tiers_tenant_a(tenant_a):
    """Bronze from 0, Silver from 500 (x1.25), Gold from 1000 (x1.5)"""
    return [
        LoyaltyTier.objects.create(tenant=tenant_a, name='Bronze', min_points=0, points_multiplier=Decimal('1.00')),
        LoyaltyTier.objects.create(tenant=tenant_a, name='Silver', min_points=500, points_multiplier=Decimal('1.25')),
        LoyaltyTier.objects.create(tenant=tenant_a, name='Gold', min_points=1000, points_multiplier=Decimal('1.50')),
    ]


@pytest.fixture
def customer_tenant_a(tenant_a):
    """Alice, 500 points to spend"""
    return Customer.objects.create(
        tenant=tenant_a,
        name='Alice Smith',
        phone='+1 555 000 1111',
        email='alice@example.com',
        points_balance=500,
        lifetime_points=500,
    )


@pytest.fixture
def customer_tenant_b(tenant_b):
    return Customer.objects.create(
        tenant=tenant_b,
        name='Bob Jones',
        phone='+15550002222',
        email='bob@example.com',
    )


# ============================================================================
# PROMOTION FIXTURES
# ============================================================================

@pytest.fixture
def percent_promo_tenant_a(tenant_a):
    """SAVE10: 10% off, no minimum, running this month"""
    today = timezone.localdate()
    return Promotion.objects.create(
        tenant=tenant_a,
        name='Ten percent off',
        code='SAVE10',
        discount_type=Promotion.DiscountType.PERCENTAGE,
        discount_value=Decimal('10'),
        start_date=today - timedelta(days=1),
        end_date=today + timedelta(days=30),
    )


@pytest.fixture
def fixed_promo_tenant_a(tenant_a):
    """FIVEOFF: 5.00 off orders of 20.00 or more, single use"""
    today = timezone.localdate()
    return Promotion.objects.create(
        tenant=tenant_a,
        name='Five off',
        code='FIVEOFF',
        discount_type=Promotion.DiscountType.FIXED,
        discount_value=Decimal('5.00'),
        min_order_value=Decimal('20.00'),
        max_uses=1,
        start_date=today,
        end_date=today,
    )
