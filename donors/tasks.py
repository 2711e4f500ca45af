# donors/tasks.py
"""
Celery tasks for donor availability
"""
import logging
from datetime import date

from celery import shared_task
from django.utils import timezone

from donors.models import Donor, ScheduledDonation

logger = logging.getLogger(__name__)


@shared_task
def refresh_scheduled_availability(today=None):
    """
    Mark donors available once their scheduled donation date has arrived.
    Runs daily from Celery beat.

    Args:
        today: ISO date string or date; defaults to the local date

    Returns:
        int: number of donors switched to available
    """
    if today is None:
        today = timezone.localdate()
    elif isinstance(today, str):
        today = date.fromisoformat(today)

    due_donor_ids = ScheduledDonation.objects.filter(
        scheduled_date__lte=today
    ).values_list('donor_id', flat=True)

    updated = Donor.objects.filter(
        id__in=list(due_donor_ids)
    ).exclude(is_available=True).update(is_available=True, updated_at=timezone.now())

    logger.info(f"Updated {updated} donors to available")
    return updated
