"""
Tests for the scheduled availability task.
"""
from datetime import date

import pytest

from donors.models import Donor, ScheduledDonation
from donors.tasks import refresh_scheduled_availability

pytestmark = pytest.mark.django_db


def make_scheduled_donor(name, scheduled_date, is_available):
    donor = Donor.objects.create(name=name, phone='9876500000', country='IN', is_available=is_available)
    ScheduledDonation.objects.create(donor=donor, scheduled_date=scheduled_date)
    return donor


def test_due_donors_become_available():
    due = make_scheduled_donor('Due', date(2026, 10, 19), False)
    undecided = make_scheduled_donor('Undecided', date(2026, 10, 1), None)
    later = make_scheduled_donor('Later', date(2026, 10, 20), False)
    already = make_scheduled_donor('Already', date(2026, 10, 1), True)
    unscheduled = Donor.objects.create(name='Unscheduled', phone='9876500001', country='IN', is_available=False)

    assert refresh_scheduled_availability('2026-10-19') == 2

    for donor in (due, undecided, later, already, unscheduled):
        donor.refresh_from_db()
    assert due.is_available is True
    assert undecided.is_available is True
    assert later.is_available is False
    assert already.is_available is True
    assert unscheduled.is_available is False


def test_running_twice_changes_nothing_more():
    make_scheduled_donor('Due', date(2026, 10, 19), False)
    assert refresh_scheduled_availability(date(2026, 10, 19)) == 1
    assert refresh_scheduled_availability(date(2026, 10, 19)) == 0
