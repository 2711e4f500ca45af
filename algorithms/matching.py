"""
Donor search: exact-match filtering of a donor pool and a stable split into
available and unavailable donors.
"""
import itertools
import logging
import threading
from dataclasses import dataclass, field
from typing import List, Optional, Union

from algorithms.blood_compatibility import BloodType, can_receive_from
from algorithms.exceptions import InvalidBloodType

logger = logging.getLogger(__name__)

LOCATION_FIELDS = ('country', 'state', 'city')
NO_CONSTRAINT = (None, '', 'all')


@dataclass(frozen=True)
class DonorProfile:
    id: object
    blood_type: BloodType
    country: str = ''
    state: str = ''
    city: str = ''
    is_available: Optional[bool] = None
    gender: Optional[str] = None
    name: Optional[str] = None
    phone: Optional[str] = None


@dataclass(frozen=True)
class SearchFilter:
    blood_type: Optional[Union[BloodType, str]] = None
    country: Optional[str] = None
    state: Optional[str] = None
    city: Optional[str] = None

    def __post_init__(self):
        if self.blood_type == '':
            object.__setattr__(self, 'blood_type', None)
        elif self.blood_type is not None:
            try:
                object.__setattr__(self, 'blood_type', BloodType.parse(self.blood_type))
            except InvalidBloodType:
                # Unrecognized codes are kept as given and match no donor
                logger.debug(f"Unrecognized blood type filter {self.blood_type!r}")
        for name in LOCATION_FIELDS:
            if getattr(self, name) == '':
                object.__setattr__(self, name, None)

    @classmethod
    def from_params(cls, params):
        """
        Build a filter from request-style parameters.

        Empty strings, None and 'all' mean "no constraint". An Unknown or
        unrecognized blood type is kept and matches nobody.
        """
        blood_type = params.get('blood_type')
        if blood_type in NO_CONSTRAINT:
            blood_type = None
        return cls(
            blood_type=blood_type,
            **{name: params.get(name) or None for name in LOCATION_FIELDS},
        )

    @property
    def is_empty(self):
        return self.blood_type is None and all(getattr(self, name) is None for name in LOCATION_FIELDS)

    def as_dict(self):
        data = {name: getattr(self, name) for name in LOCATION_FIELDS if getattr(self, name) is not None}
        if self.blood_type is not None:
            data['blood_type'] = str(self.blood_type)
        return data

    @property
    def has_searchable_blood_type(self):
        """True when the blood type constraint is one of the 8 donatable types"""
        return isinstance(self.blood_type, BloodType) and self.blood_type.is_canonical

    def matches(self, profile: DonorProfile) -> bool:
        if self.blood_type is not None:
            if not self.has_searchable_blood_type or profile.blood_type != self.blood_type:
                return False
        return self.matches_location(profile)

    def matches_location(self, profile: DonorProfile) -> bool:
        for name in LOCATION_FIELDS:
            wanted = getattr(self, name)
            if wanted is not None and getattr(profile, name) != wanted:
                return False
        return True


@dataclass
class SearchResult:
    available: List[DonorProfile] = field(default_factory=list)
    unavailable: List[DonorProfile] = field(default_factory=list)

    @property
    def total(self):
        return len(self.available) + len(self.unavailable)

    @property
    def is_empty(self):
        return self.total == 0


def partition_by_availability(profiles) -> SearchResult:
    """Stable split; donors who never set their availability are left out"""
    result = SearchResult()
    for profile in profiles:
        if profile.is_available is True:
            result.available.append(profile)
        elif profile.is_available is False:
            result.unavailable.append(profile)
    return result


def search(search_filter: SearchFilter, pool) -> SearchResult:
    """
    Filter a donor pool and split it by availability.

    Every field set on the filter must equal the donor's field exactly;
    unset fields impose no constraint. Order within each group follows
    the pool.
    """
    search_filter = search_filter or SearchFilter()
    result = partition_by_availability(p for p in pool if search_filter.matches(p))
    logger.debug(
        f"Search {search_filter.as_dict()} -> "
        f"{len(result.available)} available, {len(result.unavailable)} unavailable"
    )
    return result


def find_compatible_donors(recipient_blood_type, pool, search_filter: Optional[SearchFilter] = None) -> SearchResult:
    """
    Donors whose blood can be given to the recipient, narrowed by the
    location part of `search_filter` (its blood type is ignored).
    """
    donor_types = can_receive_from(recipient_blood_type)
    search_filter = search_filter or SearchFilter()
    return partition_by_availability(
        p for p in pool
        if p.blood_type in donor_types and search_filter.matches_location(p)
    )


class SearchSequencer:
    """
    Monotonic request numbering for overlapping searches.

    Each search gets a ticket from issue(); a result is only applied when
    its ticket is still the latest one issued, whatever order the results
    arrive in.
    """

    def __init__(self):
        self._counter = itertools.count(1)
        self._latest = 0
        self._lock = threading.Lock()

    @property
    def latest(self):
        return self._latest

    def issue(self):
        with self._lock:
            self._latest = next(self._counter)
            return self._latest

    def is_current(self, ticket):
        return ticket == self._latest

    def accept(self, ticket, result):
        """Return `result` if `ticket` is current, otherwise None (stale)"""
        if not self.is_current(ticket):
            logger.debug(f"Discarding stale search result #{ticket} (latest #{self._latest})")
            return None
        return result
