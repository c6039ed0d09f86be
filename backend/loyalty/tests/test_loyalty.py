"""
Loyalty tiers, earning rules, the points ledger and reward redemption.
"""
import pytest
from datetime import timedelta
from decimal import Decimal
from django.utils import timezone
from rest_framework import status

from customers.models import Customer
from loyalty.exceptions import InsufficientPointsError, RewardUnavailableError
from loyalty.models import LoyaltyReward, PointsEarningRule, PointsTransaction
from loyalty.rules import EarningRuleEvaluator
from loyalty.services import LoyaltyService


def make_rule(tenant, **kwargs):
    defaults = {
        'name': 'Double points',
        'trigger_type': PointsEarningRule.TriggerType.ORDER,
        'points_type': PointsEarningRule.PointsType.MULTIPLIER,
        'points_value': Decimal('2'),
    }
    defaults.update(kwargs)
    return PointsEarningRule.objects.create(tenant=tenant, **defaults)


@pytest.mark.django_db
class TestTiers:

    def test_tier_for_points(self, tenant_a_context, loyalty_tiers_tenant_a):
        bronze, silver, gold = loyalty_tiers_tenant_a

        assert LoyaltyService.get_tier_for_points(0) == bronze
        assert LoyaltyService.get_tier_for_points(499) == bronze
        assert LoyaltyService.get_tier_for_points(500) == silver
        assert LoyaltyService.get_tier_for_points(5000) == gold

    def test_inactive_tier_skipped(self, tenant_a_context, loyalty_tiers_tenant_a):
        bronze, silver, gold = loyalty_tiers_tenant_a
        gold.is_active = False
        gold.save()

        assert LoyaltyService.get_tier_for_points(5000) == silver

    def test_earning_moves_customer_up(self, tenant_a_context, loyalty_tiers_tenant_a, customer_tenant_a):
        LoyaltyService.award_points(customer_tenant_a, 500)

        customer_tenant_a.refresh_from_db()
        assert customer_tenant_a.tier.name == 'Gold'
        assert customer_tenant_a.lifetime_points == 1000

    def test_spending_never_demotes(self, tenant_a_context, loyalty_tiers_tenant_a, customer_tenant_a):
        LoyaltyService.refresh_tier(customer_tenant_a)
        LoyaltyService.redeem_points(customer_tenant_a, 400)

        customer_tenant_a.refresh_from_db()
        assert customer_tenant_a.points_balance == 100
        assert customer_tenant_a.tier.name == 'Silver'


@pytest.mark.django_db
class TestPointsLedger:

    def test_award_writes_ledger(self, tenant_a_context, customer_tenant_a):
        txn = LoyaltyService.award_points(customer_tenant_a, 25, description='Welcome')

        assert txn.points == 25
        assert txn.type == PointsTransaction.Type.EARNED
        assert txn.balance_after == 525

    def test_award_zero_is_noop(self, tenant_a_context, customer_tenant_a):
        assert LoyaltyService.award_points(customer_tenant_a, 0) is None
        assert not PointsTransaction.objects.exists()

    def test_redeem_more_than_balance(self, tenant_a_context, customer_tenant_a):
        with pytest.raises(InsufficientPointsError, match='500 available, 600 requested'):
            LoyaltyService.redeem_points(customer_tenant_a, 600)

        customer_tenant_a.refresh_from_db()
        assert customer_tenant_a.points_balance == 500

    def test_negative_adjustment_cannot_overdraw(self, tenant_a_context, customer_tenant_a):
        with pytest.raises(InsufficientPointsError):
            LoyaltyService.adjust_points(customer_tenant_a, -501)

    def test_adjustment(self, tenant_a_context, customer_tenant_a):
        txn = LoyaltyService.adjust_points(customer_tenant_a, -100, 'Goodwill correction')

        assert txn.type == PointsTransaction.Type.ADJUSTED
        assert txn.balance_after == 400
        customer_tenant_a.refresh_from_db()
        assert customer_tenant_a.lifetime_points == 500


@pytest.mark.django_db
class TestEarningRules:

    def test_fallback_without_rules(self, tenant_a_context):
        assert EarningRuleEvaluator.points_for('order', Decimal('22.99'), points_per_currency=Decimal('1')) == 22

    def test_non_order_trigger_without_rule_earns_nothing(self, tenant_a_context):
        assert EarningRuleEvaluator.points_for('signup') == 0

    def test_multiplier_rule(self, tenant_a, tenant_a_context):
        make_rule(tenant_a)

        assert EarningRuleEvaluator.points_for('order', Decimal('10.50')) == 21

    def test_tier_multiplier(self, tenant_a, tenant_a_context, loyalty_tiers_tenant_a, customer_tenant_a):
        make_rule(tenant_a)
        LoyaltyService.refresh_tier(customer_tenant_a)

        # 20 points x Silver 1.25
        assert EarningRuleEvaluator.points_for('order', Decimal('10.00'), customer=customer_tenant_a) == 25

    def test_tier_multiplier_can_be_disabled(self, tenant_a, tenant_a_context, loyalty_tiers_tenant_a, customer_tenant_a):
        make_rule(tenant_a, tier_multiplier_enabled=False)
        LoyaltyService.refresh_tier(customer_tenant_a)

        assert EarningRuleEvaluator.points_for('order', Decimal('10.00'), customer=customer_tenant_a) == 20

    def test_best_rule_wins(self, tenant_a, tenant_a_context):
        make_rule(tenant_a)
        make_rule(tenant_a, name='Flat fifty', points_type=PointsEarningRule.PointsType.FIXED, points_value=Decimal('50'))

        assert EarningRuleEvaluator.points_for('order', Decimal('10.00')) == 50
        assert EarningRuleEvaluator.points_for('order', Decimal('40.00')) == 80

    def test_percentage_rule(self, tenant_a, tenant_a_context):
        make_rule(tenant_a, points_type=PointsEarningRule.PointsType.PERCENTAGE, points_value=Decimal('10'))

        assert EarningRuleEvaluator.points_for('order', Decimal('55.00')) == 5

    def test_min_order_condition(self, tenant_a, tenant_a_context):
        make_rule(tenant_a, conditions={'min_order_value': '20.00'})

        assert EarningRuleEvaluator.points_for('order', Decimal('19.00'), points_per_currency=1) == 19
        assert EarningRuleEvaluator.points_for('order', Decimal('20.00'), points_per_currency=1) == 40

    def test_branch_and_order_type_conditions(self, tenant_a, tenant_a_context, branch_tenant_a):
        make_rule(tenant_a, conditions={'branch_ids': [branch_tenant_a.id], 'order_types': ['dine_in']})

        matching = {'branch_id': branch_tenant_a.id, 'order_type': 'dine_in'}
        wrong_type = {'branch_id': branch_tenant_a.id, 'order_type': 'takeaway'}
        assert EarningRuleEvaluator.points_for('order', Decimal('10'), context=matching) == 20
        assert EarningRuleEvaluator.points_for('order', Decimal('10'), context=wrong_type, points_per_currency=1) == 10

    def test_inactive_and_expired_rules_ignored(self, tenant_a, tenant_a_context):
        make_rule(tenant_a, is_active=False)
        make_rule(tenant_a, name='Last week', end_date=timezone.now() - timedelta(days=1))

        assert EarningRuleEvaluator.points_for('order', Decimal('10'), points_per_currency=1) == 10

    def test_toggle_and_duplicate(self, manager_client_tenant_a, tenant_a):
        rule = make_rule(tenant_a)

        response = manager_client_tenant_a.post(f'/api/loyalty/earning-rules/{rule.id}/toggle/')
        assert response.data['is_active'] is False

        response = manager_client_tenant_a.post(f'/api/loyalty/earning-rules/{rule.id}/duplicate/')
        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['name'] == 'Double points (Copy)'
        assert response.data['is_active'] is False

    def test_unknown_condition_rejected(self, manager_client_tenant_a):
        response = manager_client_tenant_a.post('/api/loyalty/earning-rules/', {
            'name': 'Weird',
            'points_type': 'fixed',
            'points_value': '10',
            'conditions': {'weekday': 'monday'},
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'conditions' in response.data


@pytest.mark.django_db
class TestRewards:

    @pytest.fixture
    def reward(self, tenant_a):
        return LoyaltyReward.objects.create(tenant=tenant_a, name='Free dessert', points_cost=300, quantity_available=1)

    def test_redeem_reward(self, tenant_a_context, customer_tenant_a, reward):
        txn = LoyaltyService.redeem_reward(customer_tenant_a, reward)

        assert txn.points == -300
        assert txn.description == 'Reward: Free dessert'
        reward.refresh_from_db()
        assert reward.quantity_redeemed == 1
        assert reward.in_stock is False

    def test_out_of_stock(self, tenant_a_context, customer_tenant_a, reward):
        reward.quantity_redeemed = 1
        reward.save()

        with pytest.raises(RewardUnavailableError, match='out of stock'):
            LoyaltyService.redeem_reward(customer_tenant_a, reward)

    def test_tier_required(self, tenant_a_context, loyalty_tiers_tenant_a, customer_tenant_a, reward):
        reward.tier_required = loyalty_tiers_tenant_a[2]
        reward.save()
        LoyaltyService.refresh_tier(customer_tenant_a)

        with pytest.raises(RewardUnavailableError, match='requires Gold tier'):
            LoyaltyService.redeem_reward(customer_tenant_a, reward)

    def test_not_enough_points(self, tenant_a, tenant_a_context, customer_tenant_a):
        reward = LoyaltyReward.objects.create(tenant=tenant_a, name='Dinner for two', points_cost=2000)

        with pytest.raises(InsufficientPointsError, match='2000 required, 500 available'):
            LoyaltyService.redeem_reward(customer_tenant_a, reward)

    def test_redeem_endpoint(self, staff_client_tenant_a, customer_tenant_a, reward):
        response = staff_client_tenant_a.post(
            f'/api/loyalty/rewards/{reward.id}/redeem/', {'customer': customer_tenant_a.id}, format='json'
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert Customer.all_objects.get(pk=customer_tenant_a.pk).points_balance == 200

    def test_redeem_endpoint_rejects_other_tenants_customer(self, staff_client_tenant_a, customer_tenant_b, reward):
        response = staff_client_tenant_a.post(
            f'/api/loyalty/rewards/{reward.id}/redeem/', {'customer': customer_tenant_b.id}, format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'customer' in response.data


@pytest.mark.django_db
class TestPublicTiers:

    def test_active_tiers(self, storefront_client_tenant_a, loyalty_tiers_tenant_a):
        response = storefront_client_tenant_a.get('/api/loyalty/tiers/active/')

        assert response.status_code == status.HTTP_200_OK
        assert [t['name'] for t in response.data] == ['Bronze', 'Silver', 'Gold']
