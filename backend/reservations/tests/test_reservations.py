"""
Table reservations: public booking, lookup by phone and the back office.
"""
import pytest
from datetime import time, timedelta
from django.utils import timezone
from rest_framework import status

from core_backend.exceptions import InvalidStatusTransition
from reservations.exceptions import ReservationValidationError
from reservations.models import Reservation
from reservations.services import ReservationService


def tomorrow():
    return timezone.localdate() + timedelta(days=1)


@pytest.fixture
def booking(branch_tenant_a):
    return {
        'branch': branch_tenant_a,
        'reservation_date': tomorrow(),
        'reservation_time': time(19, 30),
        'party_size': 4,
        'guest_name': 'Erin Walsh',
        'guest_phone': '+1 555 000 4444',
    }


@pytest.fixture
def reservation(tenant_a_context, booking):
    return ReservationService.create(booking)


@pytest.mark.django_db
class TestReservationService:

    def test_create_guest_booking(self, tenant_a, reservation):
        assert reservation.tenant == tenant_a
        assert reservation.status == Reservation.Status.PENDING
        assert reservation.guest_phone == '15550004444'
        assert reservation.customer is None
        assert reservation.contact_name == 'Erin Walsh'

    def test_known_phone_links_customer(self, tenant_a_context, booking, customer_tenant_a):
        reservation = ReservationService.create({**booking, 'guest_phone': '+1 (555) 000-1111'})

        assert reservation.customer == customer_tenant_a

    def test_registered_customer_needs_no_guest_details(self, tenant_a_context, booking, customer_tenant_a):
        data = {**booking, 'customer': customer_tenant_a, 'guest_name': '', 'guest_phone': ''}
        reservation = ReservationService.create(data)

        assert reservation.contact_phone == '15550001111'

    def test_guest_details_required(self, tenant_a_context, booking):
        with pytest.raises(ReservationValidationError, match='Guest name and phone are required'):
            ReservationService.create({**booking, 'guest_phone': ''})

    def test_required_fields(self, tenant_a_context, booking):
        with pytest.raises(ReservationValidationError, match='Branch, date, time and party size are required'):
            ReservationService.create({**booking, 'reservation_time': None})

    def test_past_date_rejected(self, tenant_a_context, booking):
        with pytest.raises(ReservationValidationError, match='cannot be in the past'):
            ReservationService.create({**booking, 'reservation_date': timezone.localdate() - timedelta(days=1)})

    def test_today_is_allowed(self, tenant_a_context, booking):
        reservation = ReservationService.create({**booking, 'reservation_date': timezone.localdate()})

        assert reservation.pk is not None

    def test_lifecycle(self, reservation):
        reservation = ReservationService.update_status(reservation, 'confirmed', admin_notes='Window table')
        reservation = ReservationService.update_status(reservation, 'completed')

        assert reservation.status == 'completed'
        assert reservation.admin_notes == 'Window table'
        assert reservation.is_terminal

    def test_invalid_transition(self, reservation):
        with pytest.raises(InvalidStatusTransition):
            ReservationService.update_status(reservation, 'no_show')

    def test_terminal_statuses(self):
        for terminal in ['cancelled', 'completed', 'no_show']:
            assert not ReservationService.can_transition(terminal, 'confirmed')

    def test_upcoming_and_stats(self, tenant_a_context, booking, reservation):
        today = ReservationService.create({**booking, 'reservation_date': timezone.localdate()})
        cancelled = ReservationService.create(booking)
        ReservationService.update_status(cancelled, 'cancelled')
        ReservationService.update_status(today, 'confirmed')

        assert list(ReservationService.upcoming()) == [today, reservation]
        assert ReservationService.stats() == {'pending': 1, 'confirmed': 1, 'today': 1, 'upcoming': 1}

    def test_for_phone(self, tenant_a_context, booking, reservation, customer_tenant_a):
        linked = ReservationService.create({**booking, 'customer': customer_tenant_a, 'guest_phone': ''})

        assert list(ReservationService.for_phone('+1 555-000-4444')) == [reservation]
        assert list(ReservationService.for_phone('+15550001111')) == [linked]
        assert not ReservationService.for_phone('').exists()


@pytest.mark.django_db
class TestPublicReservationAPI:

    def _payload(self, branch, **overrides):
        payload = {
            'branch': branch.id,
            'reservation_date': str(tomorrow()),
            'reservation_time': '19:30',
            'party_size': 2,
            'guest_name': 'Frank Moss',
            'guest_phone': '555 000 5555',
        }
        payload.update(overrides)
        return payload

    def test_book(self, storefront_client_tenant_a, branch_tenant_a, tenant_a):
        response = storefront_client_tenant_a.post('/api/reservations/', self._payload(branch_tenant_a), format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['status'] == 'pending'
        assert response.data['branch_name'] == 'Downtown'
        assert Reservation.all_objects.get(pk=response.data['id']).tenant == tenant_a

    def test_past_date(self, storefront_client_tenant_a, branch_tenant_a):
        yesterday = str(timezone.localdate() - timedelta(days=1))
        response = storefront_client_tenant_a.post(
            '/api/reservations/', self._payload(branch_tenant_a, reservation_date=yesterday), format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'Reservation date cannot be in the past'

    def test_zero_party_size(self, storefront_client_tenant_a, branch_tenant_a):
        response = storefront_client_tenant_a.post(
            '/api/reservations/', self._payload(branch_tenant_a, party_size=0), format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'party_size' in response.data

    def test_other_tenants_branch(self, storefront_client_tenant_a, branch_tenant_b):
        response = storefront_client_tenant_a.post('/api/reservations/', self._payload(branch_tenant_b), format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'branch' in response.data

    def test_lookup_by_phone(self, storefront_client_tenant_a, branch_tenant_a):
        storefront_client_tenant_a.post('/api/reservations/', self._payload(branch_tenant_a), format='json')

        response = storefront_client_tenant_a.get('/api/reservations/', {'phone': '5550005555'})

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data) == 1
        assert 'guest_phone' not in response.data[0]

    def test_lookup_requires_phone(self, storefront_client_tenant_a):
        response = storefront_client_tenant_a.get('/api/reservations/')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'Phone number required'


@pytest.mark.django_db
class TestReservationManagement:

    def test_list(self, staff_client_tenant_a, reservation):
        response = staff_client_tenant_a.get('/api/reservations/manage/', {'status': 'pending'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1
        assert response.data['results'][0]['guest_name'] == 'Erin Walsh'

    def test_date_range_filter(self, staff_client_tenant_a, reservation):
        response = staff_client_tenant_a.get('/api/reservations/manage/', {'date_from': str(tomorrow() + timedelta(days=1))})

        assert response.data['count'] == 0

    def test_confirm(self, staff_client_tenant_a, reservation):
        response = staff_client_tenant_a.patch(
            f'/api/reservations/manage/{reservation.id}/status/',
            {'status': 'confirmed', 'admin_notes': 'Booth'},
            format='json',
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == 'confirmed'
        assert response.data['admin_notes'] == 'Booth'

    def test_bad_transition(self, staff_client_tenant_a, reservation):
        response = staff_client_tenant_a.patch(
            f'/api/reservations/manage/{reservation.id}/status/', {'status': 'completed'}, format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['code'] == 'invalid_status_transition'

    def test_edit_does_not_change_status(self, staff_client_tenant_a, reservation):
        response = staff_client_tenant_a.patch(
            f'/api/reservations/manage/{reservation.id}/', {'party_size': 6, 'status': 'completed'}, format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['party_size'] == 6
        assert response.data['status'] == 'pending'

    def test_upcoming_and_stats(self, staff_client_tenant_a, reservation):
        upcoming = staff_client_tenant_a.get('/api/reservations/manage/upcoming/')
        stats = staff_client_tenant_a.get('/api/reservations/manage/stats/')

        assert [r['id'] for r in upcoming.data] == [reservation.id]
        assert stats.data['pending'] == 1
        assert stats.data['upcoming'] == 1

    def test_delete(self, staff_client_tenant_a, reservation):
        response = staff_client_tenant_a.delete(f'/api/reservations/manage/{reservation.id}/')

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not Reservation.all_objects.filter(pk=reservation.pk).exists()

    def test_other_tenant_staff(self, authenticated_client_tenant_b, reservation):
        response = authenticated_client_tenant_b.get(f'/api/reservations/manage/{reservation.id}/')

        assert response.status_code == status.HTTP_404_NOT_FOUND
