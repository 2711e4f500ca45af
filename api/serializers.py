# api/serializers.py
from django.utils import timezone
from rest_framework import serializers

from accounts.models import CustomUser
from algorithms.blood_compatibility import BloodType
from algorithms.eligibility import (
    PROFILE_DESCRIPTIONS,
    PROFILE_TITLES,
    SignupReason,
    can_update_to_donor,
    parse_date_of_birth,
    resolve_signup_reason,
)

SIGNUP_REASONS = [reason.value for reason in SignupReason]


class SearchQuerySerializer(serializers.Serializer):
    """
    Query parameters of the donor search. Blood type codes are left to
    SearchFilter: an unrecognized one simply finds no donors.
    """
    blood_type = serializers.CharField(required=False, allow_blank=True)
    country = serializers.CharField(required=False, allow_blank=True)
    state = serializers.CharField(required=False, allow_blank=True)
    city = serializers.CharField(required=False, allow_blank=True)
    # Client-side request sequence number, echoed back untouched
    seq = serializers.IntegerField(required=False, min_value=0)


class CompatibleSearchQuerySerializer(SearchQuerySerializer):
    recipient = serializers.CharField()


class CompatibilityCheckSerializer(serializers.Serializer):
    donor = serializers.CharField()
    recipient = serializers.CharField()


class EligibilityQuerySerializer(serializers.Serializer):
    date_of_birth = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    signup_reason = serializers.ChoiceField(choices=SIGNUP_REASONS, required=False, allow_blank=True)

    def validate(self, attrs):
        reason = attrs.get('signup_reason')
        if reason:
            attrs['signup_reason'] = resolve_signup_reason(
                reason, attrs.get('date_of_birth'), timezone.localtime()
            ).value
        return attrs


class CascadeSerializer(serializers.Serializer):
    FIELD_CHOICES = ['country', 'state', 'city']

    country = serializers.CharField(required=False, allow_blank=True, default='')
    state = serializers.CharField(required=False, allow_blank=True, default='')
    city = serializers.CharField(required=False, allow_blank=True, default='')
    field = serializers.ChoiceField(choices=FIELD_CHOICES)
    value = serializers.CharField(allow_blank=True)


class ProfileSerializer(serializers.ModelSerializer):
    """
    Profile update sink: accepts corrected blood type, date of birth and
    signup reason. Eligibility fields are derived on every read.
    """
    date_of_birth = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    blood_type = serializers.CharField(required=False)
    signup_reason = serializers.ChoiceField(choices=SIGNUP_REASONS, required=False, allow_blank=True)

    profile_kind = serializers.SerializerMethodField()
    profile_title = serializers.SerializerMethodField()
    profile_description = serializers.SerializerMethodField()
    eligibility = serializers.SerializerMethodField()
    can_update_to_donor = serializers.SerializerMethodField()
    profile_updatable_at = serializers.DateTimeField(read_only=True)
    availability = serializers.SerializerMethodField()

    class Meta:
        model = CustomUser
        fields = [
            'id', 'username', 'email', 'phone', 'role',
            'signup_reason', 'date_of_birth', 'blood_type', 'health_details',
            'profile_kind', 'profile_title', 'profile_description',
            'eligibility', 'can_update_to_donor', 'profile_updatable_at',
            'availability',
        ]
        read_only_fields = ['id', 'username', 'email', 'role']

    def validate_blood_type(self, value):
        return BloodType.parse(value).value

    def validate_date_of_birth(self, value):
        return parse_date_of_birth(value, today=timezone.localdate())

    def validate(self, attrs):
        reason = attrs.get('signup_reason')
        if reason:
            dob = attrs.get('date_of_birth', getattr(self.instance, 'date_of_birth', None))
            attrs['signup_reason'] = resolve_signup_reason(reason, dob, timezone.localtime()).value
        return attrs

    def to_representation(self, instance):
        data = super().to_representation(instance)
        data['date_of_birth'] = instance.date_of_birth.isoformat() if instance.date_of_birth else None
        return data

    def _state(self, obj):
        cache = self.context.setdefault('_eligibility', {})
        if obj.pk not in cache:
            cache[obj.pk] = obj.eligibility()
        return cache[obj.pk]

    def get_profile_kind(self, obj):
        return obj.profile_kind.value

    def get_profile_title(self, obj):
        return PROFILE_TITLES[obj.profile_kind]

    def get_profile_description(self, obj):
        return PROFILE_DESCRIPTIONS[obj.profile_kind]

    def get_eligibility(self, obj):
        return self._state(obj).as_dict()

    def get_can_update_to_donor(self, obj):
        return can_update_to_donor(self._state(obj))

    def get_availability(self, obj):
        donor = getattr(obj, 'donor', None)
        return donor.availability_label if donor else None
