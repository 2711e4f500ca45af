# geography/management/commands/import_geography.py
"""
Django management command to load the country/state/city catalog

USAGE:
    python manage.py import_geography path/to/locations.csv

One row per city (state and city columns may be blank for countries or
states without subdivisions). Required columns:
    country_code, country_name, state_code, state_name, city
"""
import os

import pandas as pd
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from geography.models import City, Country, Region

REQUIRED_COLUMNS = ['country_code', 'country_name', 'state_code', 'state_name', 'city']


class Command(BaseCommand):
    help = 'Import countries, states and cities from a CSV or Excel file'

    def add_arguments(self, parser):
        parser.add_argument('file', type=str, help='Path to the CSV or Excel file')

    def handle(self, *args, **options):
        path = options['file']
        if not os.path.exists(path):
            raise CommandError(f'File not found: {path}')

        if path.lower().endswith(('.xlsx', '.xls')):
            df = pd.read_excel(path, dtype=str)
        else:
            df = pd.read_csv(path, dtype=str)
        df = df.fillna('')

        missing_columns = [col for col in REQUIRED_COLUMNS if col not in df.columns]
        if missing_columns:
            raise CommandError(f'Missing columns: {", ".join(missing_columns)}')

        countries = {}
        regions = {}
        city_count = 0

        with transaction.atomic():
            for _, row in df.iterrows():
                country_code = row['country_code'].strip()
                if not country_code:
                    continue

                country = countries.get(country_code)
                if country is None:
                    country, _ = Country.objects.update_or_create(
                        code=country_code,
                        defaults={'name': row['country_name'].strip() or country_code},
                    )
                    countries[country_code] = country

                state_code = row['state_code'].strip()
                if not state_code:
                    continue

                region = regions.get((country_code, state_code))
                if region is None:
                    region, _ = Region.objects.update_or_create(
                        country=country,
                        code=state_code,
                        defaults={'name': row['state_name'].strip() or state_code},
                    )
                    regions[(country_code, state_code)] = region

                city_name = row['city'].strip()
                if city_name:
                    _, created = City.objects.get_or_create(region=region, name=city_name)
                    city_count += int(created)

        self.stdout.write(
            self.style.SUCCESS(
                f'Imported {len(countries)} countries, {len(regions)} states, {city_count} new cities'
            )
        )
