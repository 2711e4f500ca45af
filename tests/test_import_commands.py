"""
Tests for the CSV import management commands.
"""
import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from algorithms.geography import GeographyCascadeResolver
from donors.models import Donor
from geography.catalog import ModelGeographyCatalog
from geography.models import City, Country, Region

pytestmark = pytest.mark.django_db

LOCATIONS_CSV = """country_code,country_name,state_code,state_name,city
IN,India,AP,Andhra Pradesh,Kakinada
IN,India,AP,Andhra Pradesh,Rajahmundry
IN,India,KA,Karnataka,Bengaluru
NP,Nepal,,,
"""

DONORS_CSV = """name,phone,blood_type,country,state,city,date_of_birth,gender,is_available
Ravi Kumar,9876543210,A+,IN,AP,Kakinada,1990-05-05,Male,yes
Priya Sharma,9876543211,unknown,IN,AP,Rajahmundry,,female,
Bad Type,9876543212,C+,IN,AP,Kakinada,,,
Bad Date,9876543213,O+,IN,AP,Kakinada,not a date,,
,9876543214,O+,IN,AP,Kakinada,,,
"""


def write(tmp_path, name, content):
    path = tmp_path / name
    path.write_text(content)
    return str(path)


def test_import_geography(tmp_path):
    path = write(tmp_path, 'locations.csv', LOCATIONS_CSV)
    call_command('import_geography', path)

    assert set(Country.objects.values_list('code', flat=True)) == {'IN', 'NP'}
    assert Region.objects.filter(country__code='IN').count() == 2
    assert City.objects.count() == 3

    # Importing again does not duplicate anything
    call_command('import_geography', path)
    assert City.objects.count() == 3

    resolver = GeographyCascadeResolver(ModelGeographyCatalog(), country='IN', state='AP', city='Kakinada')
    resolver.set_country('NP')
    assert resolver.selection.state == ''
    assert resolver.states == []


def test_import_geography_requires_columns(tmp_path):
    path = write(tmp_path, 'locations.csv', "country_code,country_name\nIN,India\n")
    with pytest.raises(CommandError):
        call_command('import_geography', path)


def test_import_donors_skips_invalid_rows(tmp_path):
    path = write(tmp_path, 'donors.csv', DONORS_CSV)
    call_command('import_donors', path)

    assert Donor.objects.count() == 2
    ravi = Donor.objects.get(phone='9876543210')
    assert ravi.blood_type == 'A+'
    assert ravi.gender == 'male'
    assert ravi.is_available is True
    assert ravi.date_of_birth.isoformat() == '1990-05-05'

    priya = Donor.objects.get(phone='9876543211')
    assert priya.blood_type == 'Unknown'
    assert priya.is_available is None
    assert priya.date_of_birth is None


def test_import_donors_updates_existing(tmp_path):
    path = write(tmp_path, 'donors.csv', DONORS_CSV)
    call_command('import_donors', path)
    call_command('import_donors', path)
    assert Donor.objects.count() == 2


def test_import_missing_file():
    with pytest.raises(CommandError):
        call_command('import_donors', '/nonexistent/donors.csv')
