"""
Geography catalog backed by the Country / Region / City tables.
Unknown codes give empty lists, never errors.
"""
from algorithms.geography import GeoOption
from geography.models import City, Country, Region


class ModelGeographyCatalog:

    def get_all_countries(self):
        return [GeoOption(code, name) for code, name in Country.objects.values_list('code', 'name')]

    def get_states_of(self, country):
        regions = Region.objects.filter(country__code=country).values_list('code', 'name')
        return [GeoOption(code, name) for code, name in regions]

    def get_cities_of(self, country, state):
        names = City.objects.filter(
            region__country__code=country,
            region__code=state,
        ).values_list('name', flat=True)
        return [GeoOption(name, name) for name in names]
