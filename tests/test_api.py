"""
Tests for the REST endpoints.
"""
from datetime import date

import pytest
from django.db import DatabaseError
from django.utils import timezone
from rest_framework.test import APIClient

from accounts.models import CustomUser
from algorithms.eligibility import EligibilityStatus
from algorithms.exceptions import PoolFetchFailed
from algorithms.matching import SearchFilter
from donors.models import Donor, ScheduledDonation
from donors.utils import fetch_donor_pool
from geography.models import City, Country, Region

pytestmark = pytest.mark.django_db


@pytest.fixture
def client():
    return APIClient()


@pytest.fixture
def user():
    return CustomUser.objects.create_user(username='ravi', email='ravi@example.com', password='secret-pass')


@pytest.fixture
def admin_user():
    return CustomUser.objects.create_user(
        username='admin', email='admin@example.com', password='secret-pass', is_staff=True, role='admin'
    )


@pytest.fixture
def donors():
    rows = [
        ('Ravi Kumar', 'A+', 'Kakinada', True),
        ('Priya Sharma', 'A+', 'Rajahmundry', False),
        ('Suresh Reddy', 'B+', 'Kakinada', True),
        ('Prasad', 'A+', 'Kakinada', None),
    ]
    return [
        Donor.objects.create(
            name=name, phone=f'98765{i:05d}', blood_type=blood_type,
            country='IN', state='AP', city=city, is_available=is_available,
        )
        for i, (name, blood_type, city, is_available) in enumerate(rows)
    ]


@pytest.fixture
def geography():
    india = Country.objects.create(code='IN', name='India')
    usa = Country.objects.create(code='US', name='United States')
    andhra = Region.objects.create(country=india, code='AP', name='Andhra Pradesh')
    california = Region.objects.create(country=usa, code='CA', name='California')
    City.objects.create(region=andhra, name='Kakinada')
    City.objects.create(region=california, name='Los Angeles')


def names(items):
    return {item['name'] for item in items}


# Donor search

def test_search_partitions_by_availability(client, donors):
    response = client.get('/api/donors/search/', {'blood_type': 'A+', 'country': 'IN', 'seq': 7})
    assert response.status_code == 200
    data = response.json()
    assert data['seq'] == 7
    assert data['filter'] == {'blood_type': 'A+', 'country': 'IN'}
    assert names(data['available']) == {'Ravi Kumar'}
    assert names(data['unavailable']) == {'Priya Sharma'}
    assert data['total'] == 2
    assert data['available'][0]['blood_type'] == 'A+'


def test_search_without_filters_lists_every_decided_donor(client, donors):
    data = client.get('/api/donors/search/', {'blood_type': 'all'}).json()
    assert names(data['available']) == {'Ravi Kumar', 'Suresh Reddy'}
    assert names(data['unavailable']) == {'Priya Sharma'}


def test_search_with_no_match_is_not_an_error(client, donors):
    response = client.get('/api/donors/search/', {'blood_type': 'AB-'})
    assert response.status_code == 200
    assert response.json()['total'] == 0


@pytest.mark.parametrize('blood_type', ['Unknown', 'Q+', 'a+'])
def test_search_with_unmatchable_blood_type_is_empty(client, donors, blood_type):
    Donor.objects.create(name='Anon', phone='9876599999', blood_type='Unknown', country='IN', is_available=True)
    response = client.get('/api/donors/search/', {'blood_type': blood_type})
    assert response.status_code == 200
    data = response.json()
    assert data['total'] == 0
    assert data['available'] == []
    assert data['unavailable'] == []
    assert data['filter'] == {'blood_type': blood_type}


def failing_queryset(*args, **kwargs):
    raise DatabaseError("connection refused")


def test_fetch_donor_pool_wraps_database_errors(monkeypatch):
    monkeypatch.setattr('donors.utils.donor_queryset', failing_queryset)
    with pytest.raises(PoolFetchFailed) as excinfo:
        fetch_donor_pool(SearchFilter(blood_type='A+'))
    assert isinstance(excinfo.value.__cause__, DatabaseError)


def test_search_reports_pool_failure(client, monkeypatch):
    monkeypatch.setattr('donors.utils.donor_queryset', failing_queryset)
    response = client.get('/api/donors/search/', {'blood_type': 'A+'})
    assert response.status_code == 503
    assert response.json() == {'error': 'Failed to fetch donors', 'code': 'pool_fetch_failed'}

    response = client.get('/api/donors/compatible/', {'recipient': 'AB+'})
    assert response.status_code == 503


def test_compatible_donor_search(client, donors):
    data = client.get('/api/donors/compatible/', {'recipient': 'AB+', 'city': 'Kakinada'}).json()
    assert data['recipient'] == 'AB+'
    assert names(data['available']) == {'Ravi Kumar', 'Suresh Reddy'}
    assert data['unavailable'] == []

    data = client.get('/api/donors/compatible/', {'recipient': 'A-'}).json()
    assert data['total'] == 0


# Compatibility

def test_compatibility_table(client):
    data = client.get('/api/compatibility/').json()
    assert [row['blood_type'] for row in data['blood_types']] == [
        'O-', 'O+', 'A-', 'A+', 'B-', 'B+', 'AB-', 'AB+'
    ]


def test_compatibility_detail(client):
    data = client.get('/api/compatibility/AB-/').json()
    assert data['can_receive_from'] == ['O-', 'A-', 'B-', 'AB-']
    assert data['donor_type'] == 'Rare Donor'

    assert client.get('/api/compatibility/A%2B/').json()['blood_type'] == 'A+'


def test_compatibility_detail_rejects_invalid_code(client):
    response = client.get('/api/compatibility/Z+/')
    assert response.status_code == 400
    assert response.json()['code'] == 'invalid_blood_type'


def test_compatibility_check(client):
    assert client.get('/api/compatibility/check/', {'donor': 'O-', 'recipient': 'AB+'}).json()['compatible']
    assert not client.get('/api/compatibility/check/', {'donor': 'AB+', 'recipient': 'O-'}).json()['compatible']
    assert client.get('/api/compatibility/check/', {'donor': 'O-'}).status_code == 400


# Eligibility

def test_eligibility_without_date_of_birth_is_unknown(client):
    data = client.post('/api/eligibility/', {'date_of_birth': None}, format='json').json()
    assert data['status'] == 'unknown'
    assert data['needs_profile_update'] is True
    assert data['refresh_interval'] is None


def test_eligibility_under_age_includes_countdown(client, settings):
    settings.BLOODBRIDGE_COUNTDOWN_INTERVAL = 60
    data = client.post(
        '/api/eligibility/',
        {'date_of_birth': '2020-01-01', 'signup_reason': 'donateLater'},
        format='json',
    ).json()
    assert data['status'] == 'under_age'
    assert data['refresh_interval'] == 60
    assert data['remaining']['days'] > 0


def test_eligibility_health_issue(client):
    data = client.post(
        '/api/eligibility/', {'date_of_birth': '1990-01-01', 'signup_reason': 'healthIssue'}, format='json'
    ).json()
    assert data['status'] == 'health_excluded'


def test_eligibility_rejects_bad_date(client):
    response = client.post('/api/eligibility/', {'date_of_birth': 'yesterday-ish'}, format='json')
    assert response.status_code == 400
    assert response.json()['code'] == 'invalid_date'


# Profile

def test_profile_requires_login(client):
    assert client.get('/api/profile/').status_code in (401, 403)


def test_profile_shows_unknown_eligibility_until_updated(client, user):
    client.force_authenticate(user=user)
    data = client.get('/api/profile/').json()
    assert data['eligibility']['status'] == 'unknown'
    assert data['blood_type'] == 'Unknown'
    assert data['availability'] is None

    response = client.patch(
        '/api/profile/',
        {'date_of_birth': '1990-05-05', 'blood_type': 'O+', 'signup_reason': 'donateLater'},
        format='json',
    )
    assert response.status_code == 200
    data = response.json()
    assert data['date_of_birth'] == '1990-05-05'
    assert data['blood_type'] == 'O+'
    assert data['eligibility']['status'] == 'eligible'
    assert data['can_update_to_donor'] is True
    assert data['profile_kind'] == 'donateLater'

    user.refresh_from_db()
    assert user.date_of_birth == date(1990, 5, 5)


def test_profile_rejects_invalid_blood_type(client, user):
    client.force_authenticate(user=user)
    response = client.patch('/api/profile/', {'blood_type': 'Q+'}, format='json')
    assert response.status_code == 400
    assert response.json()['code'] == 'invalid_blood_type'


def test_profile_eligibility(client, user):
    user.date_of_birth = date(1950, 1, 1)
    user.save()
    client.force_authenticate(user=user)
    assert client.get('/api/profile/eligibility/').json()['status'] == 'above_age'


def test_profile_age_and_eligibility_use_the_same_local_date(user, settings):
    # UTC+14: the local date runs a day ahead of UTC for most of the day
    settings.TIME_ZONE = 'Pacific/Kiritimati'
    today = timezone.localdate()
    try:
        user.date_of_birth = today.replace(year=today.year - 18)
    except ValueError:
        user.date_of_birth = today.replace(year=today.year - 18, day=28)
    user.signup_reason = 'donateLater'
    user.save()

    state = user.eligibility()
    assert user.current_age == 18
    assert state.age == user.current_age
    assert state.status is EligibilityStatus.ELIGIBLE
    assert user.profile_updatable_at is None


# Scheduled donation

def test_schedule_lifecycle(client, user):
    donor = Donor.objects.create(user=user, name='Ravi Kumar', phone='9876500000', country='IN')
    client.force_authenticate(user=user)

    assert client.get('/api/donors/schedule/').json()['schedule'] is None

    response = client.post('/api/donors/schedule/', {'scheduled_date': '2026-11-01'}, format='json')
    assert response.status_code == 201
    assert response.json()['schedule']['donor_name'] == 'Ravi Kumar'

    response = client.post('/api/donors/schedule/', {'scheduled_date': '2026-12-01'}, format='json')
    assert response.status_code == 200
    assert ScheduledDonation.objects.get(donor=donor).scheduled_date == date(2026, 12, 1)

    assert client.delete('/api/donors/schedule/').json()['deleted'] is True
    assert not ScheduledDonation.objects.exists()


def test_schedule_requires_donor_record(client, user):
    client.force_authenticate(user=user)
    assert client.get('/api/donors/schedule/').status_code == 404


# Geography

def test_geography_listings(client, geography):
    countries = client.get('/api/geography/countries/').json()['countries']
    assert {c['code'] for c in countries} == {'IN', 'US'}

    states = client.get('/api/geography/countries/IN/states/').json()['states']
    assert states == [{'code': 'AP', 'name': 'Andhra Pradesh'}]

    cities = client.get('/api/geography/countries/IN/states/AP/cities/').json()['cities']
    assert cities == [{'code': 'Kakinada', 'name': 'Kakinada'}]

    assert client.get('/api/geography/countries/ZZ/states/').json()['states'] == []


def test_cascade_clears_state_and_city_on_country_change(client, geography):
    response = client.post('/api/geography/cascade/', {
        'country': 'US', 'state': 'CA', 'city': 'Los Angeles',
        'field': 'country', 'value': 'IN',
    }, format='json')
    assert response.status_code == 200
    data = response.json()
    assert data['selection'] == {'country': 'IN', 'state': '', 'city': ''}
    assert data['states'] == [{'code': 'AP', 'name': 'Andhra Pradesh'}]
    assert data['cities'] == []


def test_cascade_rejects_state_of_other_country(client, geography):
    response = client.post('/api/geography/cascade/', {
        'country': 'IN', 'field': 'state', 'value': 'CA',
    }, format='json')
    assert response.status_code == 400
    assert response.json()['code'] == 'invalid_selection'


# Admin

def test_stats_are_admin_only(client, user, admin_user, donors):
    client.force_authenticate(user=user)
    assert client.get('/api/stats/').status_code == 403

    client.force_authenticate(user=admin_user)
    data = client.get('/api/stats/').json()
    assert data['total_donors'] == 4
    assert data['available_donors'] == 2
    assert data['unavailable_donors'] == 1
    assert data['not_selected_donors'] == 1
    assert data['by_blood_type'] == {'A+': 3, 'B+': 1}


def test_donor_list_filters_by_blood_type(client, admin_user, donors):
    client.force_authenticate(user=admin_user)
    data = client.get('/api/donors/', {'blood_type': 'B+'}).json()
    assert [row['name'] for row in data] == ['Suresh Reddy']
    assert data[0]['availability'] == 'available'
