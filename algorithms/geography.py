"""
Country -> state -> city cascade used by the donor search and profile forms.

Catalogs are duck-typed: any object with get_all_countries(),
get_states_of(country) and get_cities_of(country, state), each returning a
list of GeoOption, can back the resolver.
"""
import logging
from collections import namedtuple
from dataclasses import dataclass

from algorithms.exceptions import InvalidSelection

logger = logging.getLogger(__name__)

GeoOption = namedtuple('GeoOption', ['code', 'name'])


@dataclass(frozen=True)
class CascadeSelection:
    country: str = ''
    state: str = ''
    city: str = ''

    def as_filter_fields(self):
        """Non-empty parts only, ready to feed a SearchFilter"""
        return {field: value for field, value in
                (('country', self.country), ('state', self.state), ('city', self.city))
                if value}


class StaticGeographyCatalog:
    """
    In-memory catalog.

    `data` maps country code -> {'name': ..., 'states': {state code ->
    {'name': ..., 'cities': [city names]}}}.
    """

    def __init__(self, data):
        self._data = data

    def get_all_countries(self):
        return [GeoOption(code, entry.get('name', code)) for code, entry in self._data.items()]

    def get_states_of(self, country):
        states = self._data.get(country, {}).get('states', {})
        return [GeoOption(code, entry.get('name', code)) for code, entry in states.items()]

    def get_cities_of(self, country, state):
        state_entry = self._data.get(country, {}).get('states', {}).get(state, {})
        return [GeoOption(name, name) for name in state_entry.get('cities', [])]


def _codes(options):
    return {option.code for option in options}


class GeographyCascadeResolver:
    """
    Keeps a country/state/city selection consistent with the catalog.

    Invariant: a city is only selected under a selected state, and a state
    only under a selected country.
    """

    def __init__(self, catalog, country='', state='', city=''):
        self.catalog = catalog
        self.country = ''
        self.state = ''
        self.city = ''
        self.states = []
        self.cities = []
        if country:
            self.set_country(country)
        if state:
            self.set_state(state)
        if city:
            self.set_city(city)

    @property
    def countries(self):
        return self.catalog.get_all_countries()

    @property
    def selection(self):
        return CascadeSelection(self.country, self.state, self.city)

    def as_filter_fields(self):
        return self.selection.as_filter_fields()

    def set_country(self, code):
        """Select a country; clears state and city when they no longer apply"""
        code = code or ''
        self.country = code
        self.states = self.catalog.get_states_of(code) if code else []

        if self.state and self.state not in _codes(self.states):
            logger.debug(f"State {self.state!r} not valid for {code!r}, clearing state and city")
            self.state = ''
            self.city = ''
            self.cities = []
        elif self.state:
            self._refresh_cities()
        else:
            self.city = ''
            self.cities = []
        return self.selection

    def set_state(self, code):
        """Select a state of the current country; clears city when it no longer applies"""
        code = code or ''
        if not code:
            self.state = ''
            self.city = ''
            self.cities = []
            return self.selection
        if not self.country:
            raise InvalidSelection(f"Cannot select state {code!r} without a country")
        if code not in _codes(self.states):
            raise InvalidSelection(f"State {code!r} does not belong to {self.country!r}")

        self.state = code
        self._refresh_cities()
        return self.selection

    def set_city(self, code):
        code = code or ''
        if not code:
            self.city = ''
            return self.selection
        if not self.state:
            raise InvalidSelection(f"Cannot select city {code!r} without a state")
        if code not in _codes(self.cities):
            raise InvalidSelection(f"City {code!r} does not belong to {self.country!r}/{self.state!r}")
        self.city = code
        return self.selection

    def _refresh_cities(self):
        self.cities = self.catalog.get_cities_of(self.country, self.state)
        if self.city and self.city not in _codes(self.cities):
            logger.debug(f"City {self.city!r} not valid for {self.state!r}, clearing city")
            self.city = ''
