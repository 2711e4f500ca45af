from django.db import models
from django.conf import settings

from algorithms.blood_compatibility import BLOOD_TYPE_CHOICES, BloodType
from algorithms.matching import DonorProfile


# ---------------------------
# Donor
# ---------------------------
class Donor(models.Model):
    GENDER_CHOICES = [
        ('male', 'Male'),
        ('female', 'Female'),
        ('other', 'Other'),
    ]

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='donor',
        null=True,
        blank=True,
    )

    name = models.CharField(max_length=200)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=20, db_index=True)
    blood_type = models.CharField(
        max_length=8,
        choices=BLOOD_TYPE_CHOICES,
        default=BloodType.UNKNOWN.value,
        db_index=True,
    )
    date_of_birth = models.DateField(null=True, blank=True)
    gender = models.CharField(max_length=10, choices=GENDER_CHOICES, blank=True)
    weight = models.FloatField(null=True, blank=True)
    height = models.FloatField(null=True, blank=True)

    # Location codes as used by the geography catalog
    country = models.CharField(max_length=10, db_index=True)
    state = models.CharField(max_length=10, blank=True)
    city = models.CharField(max_length=100, blank=True)

    # None means the donor has not said yet
    is_available = models.BooleanField(null=True, blank=True, default=None)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def availability_label(self):
        if self.is_available is None:
            return 'not_selected'
        return 'available' if self.is_available else 'unavailable'

    def to_profile(self) -> DonorProfile:
        """Plain record handed to the matching algorithms"""
        return DonorProfile(
            id=self.pk,
            blood_type=BloodType.parse(self.blood_type),
            country=self.country,
            state=self.state,
            city=self.city,
            is_available=self.is_available,
            gender=self.gender or None,
            name=self.name,
            phone=self.phone,
        )

    def __str__(self):
        return f"{self.name} ({self.blood_type})"

    class Meta:
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['country', 'state', 'city'], name='donor_location_idx'),
        ]


class ScheduledDonation(models.Model):
    """A donor's next planned donation; they become available on that date"""
    donor = models.OneToOneField(
        Donor,
        on_delete=models.CASCADE,
        related_name='scheduled_donation'
    )
    scheduled_date = models.DateField()

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.donor.name} | {self.scheduled_date}"

    class Meta:
        ordering = ['scheduled_date']
