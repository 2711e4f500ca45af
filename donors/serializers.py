# donors/serializers.py
from rest_framework import serializers
from .models import Donor, ScheduledDonation


class DonorSerializer(serializers.ModelSerializer):
    availability = serializers.CharField(source='availability_label', read_only=True)

    class Meta:
        model = Donor
        fields = [
            'id', 'name', 'email', 'phone', 'blood_type', 'gender',
            'country', 'state', 'city', 'is_available', 'availability',
            'created_at', 'updated_at',
        ]


class DonorProfileSerializer(serializers.Serializer):
    """Serializes the plain DonorProfile records returned by a search"""
    id = serializers.IntegerField()
    name = serializers.CharField(allow_null=True)
    phone = serializers.CharField(allow_null=True)
    blood_type = serializers.CharField()
    gender = serializers.CharField(allow_null=True)
    country = serializers.CharField()
    state = serializers.CharField()
    city = serializers.CharField()
    is_available = serializers.BooleanField(allow_null=True)


class ScheduledDonationSerializer(serializers.ModelSerializer):
    donor_name = serializers.CharField(source='donor.name', read_only=True)

    class Meta:
        model = ScheduledDonation
        fields = ['id', 'donor', 'donor_name', 'scheduled_date', 'created_at', 'updated_at']
        read_only_fields = ['donor']
