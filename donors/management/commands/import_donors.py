# donors/management/commands/import_donors.py
"""
Django management command to import donor data from CSV or Excel
Usage: python manage.py import_donors path/to/donors.xlsx
"""
import os

import pandas as pd
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from algorithms.blood_compatibility import BloodType
from algorithms.eligibility import parse_date_of_birth
from algorithms.exceptions import InvalidBloodType, InvalidDate
from donors.models import Donor


def read_table(path):
    """Load a CSV or Excel file into a DataFrame of strings"""
    if path.lower().endswith(('.xlsx', '.xls')):
        df = pd.read_excel(path, dtype=str)
    else:
        df = pd.read_csv(path, dtype=str)
    return df.fillna('')


def parse_availability(value):
    value = str(value).strip().lower()
    if value in ('true', 'yes', '1'):
        return True
    if value in ('false', 'no', '0'):
        return False
    return None


class Command(BaseCommand):
    help = 'Import donors from a CSV or Excel file'

    def add_arguments(self, parser):
        parser.add_argument('file', type=str, help='Path to the CSV or Excel file')

    def handle(self, *args, **options):
        path = options['file']
        if not os.path.exists(path):
            raise CommandError(f'File not found: {path}')

        df = read_table(path)
        self.stdout.write(f'Found {len(df)} rows in {path}')

        missing = [col for col in ('name', 'phone', 'blood_type', 'country') if col not in df.columns]
        if missing:
            raise CommandError(f'Missing columns: {", ".join(missing)}')

        imported_count = 0
        updated_count = 0
        skipped_count = 0

        with transaction.atomic():
            for index, row in df.iterrows():
                line = index + 2  # header is line 1
                name = row['name'].strip()
                phone = row['phone'].strip()

                if not name:
                    self.stdout.write(self.style.WARNING(f'Skipping line {line}: Missing name'))
                    skipped_count += 1
                    continue

                try:
                    blood_type = BloodType.parse(row['blood_type'] or 'Unknown')
                    date_of_birth = parse_date_of_birth(row.get('date_of_birth', ''))
                except (InvalidBloodType, InvalidDate) as e:
                    self.stdout.write(self.style.WARNING(f'Skipping line {line}: {e}'))
                    skipped_count += 1
                    continue

                donor, created = Donor.objects.update_or_create(
                    phone=phone,
                    name=name,
                    defaults={
                        'email': row.get('email', '').strip(),
                        'blood_type': blood_type.value,
                        'date_of_birth': date_of_birth,
                        'gender': row.get('gender', '').strip().lower(),
                        'country': row['country'].strip(),
                        'state': row.get('state', '').strip(),
                        'city': row.get('city', '').strip(),
                        'is_available': parse_availability(row.get('is_available', '')),
                    }
                )

                if created:
                    imported_count += 1
                else:
                    updated_count += 1

        self.stdout.write(
            self.style.SUCCESS(
                f'Import complete! Created: {imported_count}, '
                f'Updated: {updated_count}, Skipped: {skipped_count}'
            )
        )
