"""
Shared fixtures for the BloodBridge tests.
"""
from datetime import datetime, timezone

import pytest

from algorithms.blood_compatibility import BloodType
from algorithms.geography import StaticGeographyCatalog
from algorithms.matching import DonorProfile

GEOGRAPHY = {
    'US': {
        'name': 'United States',
        'states': {
            'CA': {'name': 'California', 'cities': ['Los Angeles', 'San Francisco']},
            'NY': {'name': 'New York', 'cities': ['New York', 'Buffalo']},
        },
    },
    'IN': {
        'name': 'India',
        'states': {
            'AP': {'name': 'Andhra Pradesh', 'cities': ['Kakinada', 'Rajahmundry', 'East Godavari']},
            'KA': {'name': 'Karnataka', 'cities': ['Bengaluru']},
        },
    },
    'NP': {
        'name': 'Nepal',
        'states': {},
    },
}


@pytest.fixture
def catalog():
    return StaticGeographyCatalog(GEOGRAPHY)


@pytest.fixture
def now():
    """Fixed reference time: 2026-10-19 15:30 UTC"""
    return datetime(2026, 10, 19, 15, 30, tzinfo=timezone.utc)


def make_donor(id, blood_type, country='IN', state='AP', city='Kakinada', is_available=True, **kwargs):
    return DonorProfile(
        id=id,
        blood_type=BloodType.parse(blood_type),
        country=country,
        state=state,
        city=city,
        is_available=is_available,
        **kwargs,
    )


@pytest.fixture
def donor_pool():
    return [
        make_donor(1, 'A+', city='Kakinada', is_available=True, name='Ravi Kumar'),
        make_donor(2, 'O+', city='Rajahmundry', is_available=True, name='Priya Sharma'),
        make_donor(3, 'B+', city='East Godavari', is_available=False, name='Suresh Reddy'),
        make_donor(4, 'AB+', city='East Godavari', is_available=True, name='Lakshmi Devi'),
        make_donor(5, 'A-', city='Kakinada', is_available=False, name='Krishna Prasad'),
        make_donor(6, 'A-', city='Kakinada', is_available=None, name='Prasad'),
        make_donor(7, 'A-', city='Kakinada', is_available=True, name='Krishna'),
        make_donor(8, 'Unknown', city='Kakinada', is_available=True, name='Anon'),
        make_donor(9, 'O-', country='US', state='CA', city='Los Angeles', is_available=False, name='Sam'),
    ]
