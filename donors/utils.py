import logging

from django.db import DatabaseError

from algorithms.exceptions import PoolFetchFailed
from algorithms.matching import LOCATION_FIELDS, SearchFilter
from donors.models import Donor

# Logger setup
logger = logging.getLogger(__name__)


def donor_queryset(search_filter=None):
    """
    Donors pre-filtered in the database by the same fields as the search filter.
    The matcher re-applies the filter, so this only narrows what gets loaded.
    """
    queryset = Donor.objects.all()
    if search_filter is None:
        return queryset

    if search_filter.blood_type is not None:
        if not search_filter.has_searchable_blood_type:
            return queryset.none()
        queryset = queryset.filter(blood_type=search_filter.blood_type.value)
    for name in LOCATION_FIELDS:
        value = getattr(search_filter, name)
        if value is not None:
            queryset = queryset.filter(**{name: value})
    return queryset


def fetch_donor_pool(search_filter=None, location_only=False):
    """
    Load the donor pool for a search.

    Args:
        search_filter (SearchFilter): optional server-side prefilter
        location_only (bool): ignore the filter's blood type (compatible-donor search)

    Returns:
        list of DonorProfile, in the model's default ordering

    Raises:
        PoolFetchFailed: if the database query fails
    """
    if location_only and search_filter is not None:
        search_filter = SearchFilter(**{name: getattr(search_filter, name) for name in LOCATION_FIELDS})

    try:
        pool = [donor.to_profile() for donor in donor_queryset(search_filter)]
    except DatabaseError as e:
        logger.error(f"Donor pool fetch failed: {e}")
        raise PoolFetchFailed("Failed to fetch donors") from e

    logger.info(f"Fetched donor pool of {len(pool)} donors")
    return pool
