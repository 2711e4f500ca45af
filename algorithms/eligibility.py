"""
Donor eligibility from date of birth and signup reason.

The state is recomputed on every call from (date_of_birth, signup_reason, now)
and never stored, since it changes with the passage of time.
"""
import logging
from collections import namedtuple
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Optional

from algorithms.exceptions import InvalidDate

# Constants
MIN_DONOR_AGE = 18
MAX_DONOR_AGE = 65
# Slash dates are month-first, like the signup forms that produced them
DATE_FORMATS = ('%Y-%m-%d', '%m/%d/%Y', '%Y/%m/%d')

# Logger
logger = logging.getLogger(__name__)


class SignupReason(str, Enum):
    DONATE_LATER = 'donateLater'
    HEALTH_ISSUE = 'healthIssue'
    UNDER_AGE = 'underAge'
    ABOVE_AGE = 'aboveAge'
    # Legacy value, resolved into one of the age reasons at signup
    AGE_RESTRICTION = 'ageRestriction'


SIGNUP_REASON_CHOICES = [
    (SignupReason.DONATE_LATER.value, 'I will donate later'),
    (SignupReason.HEALTH_ISSUE.value, 'Health issue'),
    (SignupReason.UNDER_AGE.value, 'Under age'),
    (SignupReason.ABOVE_AGE.value, 'Above age'),
]


class EligibilityStatus(str, Enum):
    ELIGIBLE = 'eligible'
    UNDER_AGE = 'under_age'
    ABOVE_AGE = 'above_age'
    HEALTH_EXCLUDED = 'health_excluded'
    UNKNOWN = 'unknown'


Countdown = namedtuple('Countdown', ['days', 'hours', 'minutes'])


def split_duration(remaining: timedelta) -> Countdown:
    """Break a duration into whole days, hours and minutes (negative clamps to zero)"""
    total_minutes = max(int(remaining.total_seconds() // 60), 0)
    days, rest = divmod(total_minutes, 24 * 60)
    hours, minutes = divmod(rest, 60)
    return Countdown(days, hours, minutes)


def format_countdown(remaining: timedelta) -> str:
    if remaining <= timedelta(0):
        return 'Eligible now!'
    countdown = split_duration(remaining)
    return f"{countdown.days} days, {countdown.hours} hours, {countdown.minutes} minutes"


@dataclass(frozen=True)
class EligibilityState:
    status: EligibilityStatus
    remaining: Optional[timedelta] = None
    eligible_at: Optional[datetime] = None
    age: Optional[int] = None

    @property
    def is_eligible(self) -> bool:
        return self.status is EligibilityStatus.ELIGIBLE

    @property
    def needs_profile_update(self) -> bool:
        """Unknown means the caller must collect a date of birth first"""
        return self.status is EligibilityStatus.UNKNOWN

    @property
    def countdown(self) -> Optional[Countdown]:
        if self.remaining is None:
            return None
        return split_duration(self.remaining)

    def as_dict(self) -> dict:
        data = {
            'status': self.status.value,
            'age': self.age,
            'needs_profile_update': self.needs_profile_update,
            'eligible_at': self.eligible_at.isoformat() if self.eligible_at else None,
            'remaining': None,
        }
        if self.remaining is not None:
            countdown = self.countdown
            data['remaining'] = {
                'days': countdown.days,
                'hours': countdown.hours,
                'minutes': countdown.minutes,
                'total_seconds': int(self.remaining.total_seconds()),
                'display': format_countdown(self.remaining),
            }
        return data


def parse_date_of_birth(value, today: Optional[date] = None) -> Optional[date]:
    """
    Normalize a date of birth.

    Args:
        value: date, datetime, string (ISO or one of DATE_FORMATS) or None
        today: reference date used to reject future birthdays

    Returns:
        date, or None when the value is absent

    Raises:
        InvalidDate: if the value cannot be parsed or is in the future
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value.date()
    elif isinstance(value, date):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        parsed = _parse_date_string(text)
        if parsed is None:
            raise InvalidDate(value)
    else:
        raise InvalidDate(value, 'unsupported type')

    if today is not None and parsed > today:
        raise InvalidDate(value, 'date of birth is in the future')
    return parsed


def _parse_date_string(text):
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    try:
        return datetime.fromisoformat(text.replace('Z', '+00:00')).date()
    except ValueError:
        return None


def calculate_age(dob: date, today: date) -> int:
    """Whole years between dob and today, calendar aware"""
    age = today.year - dob.year
    if (today.month, today.day) < (dob.month, dob.day):
        age -= 1
    return age


def add_years(dob: date, years: int) -> date:
    """Same day `years` later; Feb 29 rolls over to Mar 1 in non-leap years"""
    try:
        return dob.replace(year=dob.year + years)
    except ValueError:
        return date(dob.year + years, 3, 1)


def eligible_at(dob: date, now: datetime) -> datetime:
    """Midnight of the 18th birthday, in the timezone of `now`"""
    birthday = add_years(dob, MIN_DONOR_AGE)
    return datetime.combine(birthday, time.min, tzinfo=now.tzinfo)


def _coerce_reason(signup_reason):
    if signup_reason is None or signup_reason == '':
        return None
    return SignupReason(signup_reason)


def classify(date_of_birth, signup_reason, now: datetime) -> EligibilityState:
    """
    Classify a user into an eligibility state.

    Rules, in order:
    1. No date of birth -> UNKNOWN
    2. healthIssue -> HEALTH_EXCLUDED regardless of age
    3. age < 18 -> UNDER_AGE with the time left until the 18th birthday
    4. age > 65 -> ABOVE_AGE
    5. otherwise ELIGIBLE (18 and 65 are both eligible)

    Raises:
        InvalidDate: unparseable or future date of birth
        ValueError: unknown signup reason
    """
    reason = _coerce_reason(signup_reason)
    dob = parse_date_of_birth(date_of_birth, today=now.date())
    if dob is None:
        return EligibilityState(EligibilityStatus.UNKNOWN)

    age = calculate_age(dob, now.date())

    if reason is SignupReason.HEALTH_ISSUE:
        return EligibilityState(EligibilityStatus.HEALTH_EXCLUDED, age=age)

    if age < MIN_DONOR_AGE:
        target = eligible_at(dob, now)
        return EligibilityState(
            EligibilityStatus.UNDER_AGE,
            remaining=target - now,
            eligible_at=target,
            age=age,
        )

    if age > MAX_DONOR_AGE:
        return EligibilityState(EligibilityStatus.ABOVE_AGE, age=age)

    return EligibilityState(EligibilityStatus.ELIGIBLE, age=age)


def resolve_signup_reason(signup_reason, date_of_birth, now: datetime) -> SignupReason:
    """
    Resolve the legacy 'ageRestriction' reason into a concrete one.

    Under 18 becomes underAge, over 65 aboveAge, anything in between
    donateLater. Other reasons are returned unchanged.
    """
    reason = SignupReason(signup_reason)
    if reason is not SignupReason.AGE_RESTRICTION:
        return reason

    dob = parse_date_of_birth(date_of_birth, today=now.date())
    if dob is None:
        raise InvalidDate(date_of_birth, 'date of birth is required for age restriction')

    age = calculate_age(dob, now.date())
    if age < MIN_DONOR_AGE:
        resolved = SignupReason.UNDER_AGE
    elif age > MAX_DONOR_AGE:
        resolved = SignupReason.ABOVE_AGE
    else:
        resolved = SignupReason.DONATE_LATER
    logger.debug(f"Resolved ageRestriction to {resolved.value} (age {age})")
    return resolved


def can_update_to_donor(state: EligibilityState) -> bool:
    return state.is_eligible


def profile_updatable_at(date_of_birth, now: datetime) -> Optional[datetime]:
    """When an under-age user may upgrade to donor; None otherwise"""
    dob = parse_date_of_birth(date_of_birth, today=now.date())
    if dob is None or calculate_age(dob, now.date()) >= MIN_DONOR_AGE:
        return None
    return eligible_at(dob, now)


# ---------------------------
# Profile kinds
# ---------------------------
class ProfileKind(str, Enum):
    DONOR = 'donor'
    DONATE_LATER = 'donateLater'
    HEALTH_ISSUE = 'healthIssue'
    UNDER_AGE = 'underAge'
    ABOVE_AGE = 'aboveAge'
    DEFAULT = 'default'


PROFILE_TITLES = {
    ProfileKind.DONOR: 'Donor Profile',
    ProfileKind.DONATE_LATER: 'Donate Later Profile',
    ProfileKind.HEALTH_ISSUE: 'Health Issue Profile',
    ProfileKind.UNDER_AGE: 'Under Age Profile',
    ProfileKind.ABOVE_AGE: 'Above Age Profile',
    ProfileKind.DEFAULT: 'User Profile',
}

PROFILE_DESCRIPTIONS = {
    ProfileKind.DONOR: 'You are a registered blood donor. Thank you for your contribution!',
    ProfileKind.DONATE_LATER: "You can become a donor anytime! Update your profile with blood donation details when you're ready.",
    ProfileKind.HEALTH_ISSUE: 'We understand that health conditions may prevent blood donation. You can still support our mission by spreading awareness.',
    ProfileKind.UNDER_AGE: "You need to be 18 or older to donate blood. We'll notify you when you become eligible!",
    ProfileKind.ABOVE_AGE: 'We understand that age-related factors may prevent blood donation. You can still support our mission by encouraging others to donate.',
    ProfileKind.DEFAULT: 'Manage your profile information and preferences.',
}


def profile_kind(role, signup_reason, current_age=None) -> ProfileKind:
    """Pick which profile/home variant a user sees"""
    if role == 'donor':
        return ProfileKind.DONOR
    try:
        reason = _coerce_reason(signup_reason)
    except ValueError:
        return ProfileKind.DEFAULT

    if reason is SignupReason.AGE_RESTRICTION:
        age = current_age or 0
        return ProfileKind.UNDER_AGE if age < MIN_DONOR_AGE else ProfileKind.ABOVE_AGE
    if reason is None:
        return ProfileKind.DEFAULT
    return ProfileKind(reason.value)
