from django.contrib.auth.models import AbstractUser
from django.db import models
from django.utils import timezone

from algorithms.blood_compatibility import BLOOD_TYPE_CHOICES, BloodType
from algorithms.eligibility import (
    SIGNUP_REASON_CHOICES,
    calculate_age,
    classify,
    profile_kind,
    profile_updatable_at,
)


class CustomUser(AbstractUser):
    ROLE_CHOICES = (
        ('user', 'User'),
        ('donor', 'Donor'),
        ('admin', 'Admin'),
        ('blocked', 'Blocked'),
    )

    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default='user')
    email = models.EmailField(unique=True)
    phone = models.CharField(max_length=20, blank=True)

    signup_reason = models.CharField(max_length=20, choices=SIGNUP_REASON_CHOICES, blank=True)
    date_of_birth = models.DateField(null=True, blank=True)
    blood_type = models.CharField(
        max_length=8,
        choices=BLOOD_TYPE_CHOICES,
        default=BloodType.UNKNOWN.value,
    )
    health_details = models.TextField(blank=True)

    def __str__(self):
        return f"{self.username} ({self.role})"

    # Eligibility is always derived, never stored, against local time
    def eligibility(self, now=None):
        return classify(self.date_of_birth, self.signup_reason, now or timezone.localtime())

    @property
    def current_age(self):
        if not self.date_of_birth:
            return None
        return calculate_age(self.date_of_birth, timezone.localtime().date())

    @property
    def profile_kind(self):
        return profile_kind(self.role, self.signup_reason, self.current_age)

    @property
    def profile_updatable_at(self):
        return profile_updatable_at(self.date_of_birth, timezone.localtime())
