"""
Promo code validation, discount strategies and back-office management.
"""
import pytest
from datetime import timedelta
from decimal import Decimal
from django.utils import timezone
from rest_framework import status

from promotions.exceptions import (
    PromotionExpired,
    PromotionInactive,
    PromotionMinimumNotMet,
    PromotionNotFound,
    PromotionNotStarted,
    PromotionUsageLimitReached,
)
from promotions.models import Promotion
from promotions.services import PromotionService, PromotionValidationService


@pytest.mark.django_db
class TestPromotionValidation:

    def test_code_is_case_insensitive(self, tenant_a_context, percent_promo_tenant_a):
        promotion = PromotionValidationService.get_applicable_promotion('  save10 ', Decimal('30.00'))

        assert promotion == percent_promo_tenant_a

    def test_unknown_code(self, tenant_a_context):
        with pytest.raises(PromotionNotFound, match='Invalid promo code'):
            PromotionValidationService.get_applicable_promotion('NOPE', Decimal('30.00'))

    def test_other_tenants_code_is_unknown(self, tenant_b, percent_promo_tenant_a):
        from tenant.managers import set_current_tenant
        set_current_tenant(tenant_b)

        with pytest.raises(PromotionNotFound):
            PromotionValidationService.get_applicable_promotion('SAVE10', Decimal('30.00'))

    def test_archived_code_is_inactive(self, tenant_a_context, percent_promo_tenant_a):
        percent_promo_tenant_a.archive()

        with pytest.raises(PromotionInactive, match='inactive'):
            PromotionValidationService.get_applicable_promotion('SAVE10', Decimal('30.00'))

    def test_not_started(self, tenant_a_context, percent_promo_tenant_a):
        percent_promo_tenant_a.start_date = timezone.localdate() + timedelta(days=2)
        percent_promo_tenant_a.save()

        with pytest.raises(PromotionNotStarted, match='not yet active'):
            PromotionValidationService.get_applicable_promotion('SAVE10', Decimal('30.00'))

    def test_expired(self, tenant_a_context, percent_promo_tenant_a):
        percent_promo_tenant_a.start_date = timezone.localdate() - timedelta(days=10)
        percent_promo_tenant_a.end_date = timezone.localdate() - timedelta(days=1)
        percent_promo_tenant_a.save()

        with pytest.raises(PromotionExpired, match='expired'):
            PromotionValidationService.get_applicable_promotion('SAVE10', Decimal('30.00'))

    def test_end_date_is_inclusive(self, tenant_a_context, fixed_promo_tenant_a):
        promotion = PromotionValidationService.get_applicable_promotion('FIVEOFF', Decimal('20.00'))

        assert promotion == fixed_promo_tenant_a

    def test_minimum_order(self, tenant_a_context, fixed_promo_tenant_a):
        with pytest.raises(PromotionMinimumNotMet, match=r'Minimum order of \$20.00 required'):
            PromotionValidationService.get_applicable_promotion('FIVEOFF', Decimal('19.99'))

    def test_usage_limit(self, tenant_a_context, fixed_promo_tenant_a):
        PromotionService.redeem(fixed_promo_tenant_a)

        with pytest.raises(PromotionUsageLimitReached, match='usage limit'):
            PromotionValidationService.get_applicable_promotion('FIVEOFF', Decimal('25.00'))
        with pytest.raises(PromotionUsageLimitReached):
            PromotionService.redeem(fixed_promo_tenant_a)

    def test_unlimited_promotion(self, tenant_a_context, percent_promo_tenant_a):
        for _ in range(3):
            PromotionService.redeem(percent_promo_tenant_a)

        percent_promo_tenant_a.refresh_from_db()
        assert percent_promo_tenant_a.used_count == 3
        assert percent_promo_tenant_a.uses_remaining is None


@pytest.mark.django_db
class TestDiscounts:

    def test_percentage(self, tenant_a_context, percent_promo_tenant_a):
        assert PromotionValidationService.calculate_discount(percent_promo_tenant_a, Decimal('24.00')) == Decimal('2.40')

    def test_fixed_never_exceeds_subtotal(self, tenant_a_context, fixed_promo_tenant_a):
        assert PromotionValidationService.calculate_discount(fixed_promo_tenant_a, Decimal('25.00')) == Decimal('5.00')
        assert PromotionValidationService.calculate_discount(fixed_promo_tenant_a, Decimal('3.00')) == Decimal('3.00')

    def test_validate_code_result(self, tenant_a_context, percent_promo_tenant_a):
        result = PromotionValidationService.validate_code('SAVE10', Decimal('50.00'))

        assert result['valid'] is True
        assert result['discount'] == Decimal('5.00')
        assert result['code'] == 'SAVE10'

    def test_validate_code_failure(self, tenant_a_context, fixed_promo_tenant_a):
        result = PromotionValidationService.validate_code('FIVEOFF', Decimal('10.00'))

        assert result == {'valid': False, 'error': 'Minimum order of $20.00 required'}


@pytest.mark.django_db
class TestValidatePromoEndpoint:

    def test_valid_code(self, storefront_client_tenant_a, percent_promo_tenant_a):
        response = storefront_client_tenant_a.get('/api/promotions/validate/save10/', {'subtotal': '50.00'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['valid'] is True
        assert response.data['discount'] == '5.00'

    def test_invalid_code_is_still_200(self, storefront_client_tenant_a):
        response = storefront_client_tenant_a.get('/api/promotions/validate/NOPE/', {'subtotal': '50.00'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {'valid': False, 'error': 'Invalid promo code'}

    def test_bad_subtotal(self, storefront_client_tenant_a, percent_promo_tenant_a):
        response = storefront_client_tenant_a.get('/api/promotions/validate/SAVE10/', {'subtotal': 'abc'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.django_db
class TestPromotionManagement:

    def _payload(self, **overrides):
        today = timezone.localdate()
        payload = {
            'name': 'Weekend deal',
            'code': 'weekend',
            'discount_type': 'percentage',
            'discount_value': '15.00',
            'start_date': str(today),
            'end_date': str(today + timedelta(days=2)),
        }
        payload.update(overrides)
        return payload

    def test_create_uppercases_code(self, manager_client_tenant_a, tenant_a):
        response = manager_client_tenant_a.post('/api/promotions/', self._payload(), format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['code'] == 'WEEKEND'
        assert Promotion.all_objects.get(pk=response.data['id']).tenant == tenant_a

    def test_duplicate_code_rejected(self, manager_client_tenant_a, percent_promo_tenant_a):
        response = manager_client_tenant_a.post('/api/promotions/', self._payload(code='Save10'), format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'code' in response.data

    def test_same_code_in_other_tenant(self, authenticated_client_tenant_b, percent_promo_tenant_a):
        response = authenticated_client_tenant_b.post('/api/promotions/', self._payload(code='SAVE10'), format='json')

        assert response.status_code == status.HTTP_201_CREATED

    def test_percentage_over_100_rejected(self, manager_client_tenant_a):
        response = manager_client_tenant_a.post(
            '/api/promotions/', self._payload(discount_value='150'), format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'discount_value' in response.data

    def test_end_before_start_rejected(self, manager_client_tenant_a):
        today = timezone.localdate()
        response = manager_client_tenant_a.post('/api/promotions/', self._payload(
            start_date=str(today), end_date=str(today - timedelta(days=1))
        ), format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'end_date' in response.data

    def test_delete_archives(self, manager_client_tenant_a, percent_promo_tenant_a):
        response = manager_client_tenant_a.delete(f'/api/promotions/{percent_promo_tenant_a.id}/')

        assert response.status_code == status.HTTP_204_NO_CONTENT
        promotion = Promotion.all_objects.get(pk=percent_promo_tenant_a.pk)
        assert promotion.is_active is False
        assert promotion.archived_at is not None

    def test_staff_cannot_manage(self, staff_client_tenant_a):
        response = staff_client_tenant_a.post('/api/promotions/', self._payload(), format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN
