# api/views.py
import logging

from django.conf import settings
from django.db.models import Count
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework import status, viewsets
from rest_framework.authentication import BasicAuthentication, SessionAuthentication
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.response import Response

from algorithms.blood_compatibility import (
    BloodType,
    compatibility_info,
    is_compatible,
)
from algorithms.eligibility import EligibilityStatus, classify
from algorithms.geography import GeographyCascadeResolver
from algorithms.matching import SearchFilter, find_compatible_donors, search
from api.serializers import (
    CascadeSerializer,
    CompatibilityCheckSerializer,
    CompatibleSearchQuerySerializer,
    EligibilityQuerySerializer,
    ProfileSerializer,
    SearchQuerySerializer,
)
from donors.models import Donor, ScheduledDonation
from donors.serializers import DonorProfileSerializer, DonorSerializer, ScheduledDonationSerializer
from donors.utils import fetch_donor_pool
from geography.catalog import ModelGeographyCatalog

logger = logging.getLogger(__name__)


class DonorViewSet(viewsets.ReadOnlyModelViewSet):
    """API endpoint for viewing donors"""
    queryset = Donor.objects.all().order_by('-created_at')
    serializer_class = DonorSerializer
    authentication_classes = [SessionAuthentication, BasicAuthentication]
    permission_classes = [IsAuthenticated, IsAdminUser]

    def get_queryset(self):
        queryset = super().get_queryset()
        blood_type = self.request.query_params.get('blood_type')
        if blood_type and blood_type != 'all':
            queryset = queryset.filter(blood_type=BloodType.parse(blood_type).value)
        return queryset


def search_payload(result, search_filter, seq=None):
    return {
        'seq': seq,
        'filter': search_filter.as_dict(),
        'total': result.total,
        'available': DonorProfileSerializer(result.available, many=True).data,
        'unavailable': DonorProfileSerializer(result.unavailable, many=True).data,
    }


# ============================================
# DONOR SEARCH
# ============================================
@api_view(['GET'])
def donor_search(request):
    """
    Exact-match donor search by blood type, country, state and city.

    The optional `seq` parameter is echoed back so the client can drop
    responses to searches it has already superseded.
    """
    query = SearchQuerySerializer(data=request.query_params)
    query.is_valid(raise_exception=True)

    search_filter = SearchFilter.from_params(query.validated_data)
    pool = fetch_donor_pool(search_filter)
    result = search(search_filter, pool)

    return Response(search_payload(result, search_filter, query.validated_data.get('seq')))


@api_view(['GET'])
def compatible_donor_search(request):
    """Donors who can give blood to `recipient`, optionally narrowed by location"""
    query = CompatibleSearchQuerySerializer(data=request.query_params)
    query.is_valid(raise_exception=True)

    recipient = BloodType.parse(query.validated_data['recipient'])
    search_filter = SearchFilter.from_params({**query.validated_data, 'blood_type': None})
    pool = fetch_donor_pool(search_filter, location_only=True)
    result = find_compatible_donors(recipient, pool, search_filter)

    payload = search_payload(result, search_filter, query.validated_data.get('seq'))
    payload['recipient'] = recipient.value
    return Response(payload)


# ============================================
# BLOOD COMPATIBILITY
# ============================================
@api_view(['GET'])
def compatibility_table(request):
    return Response({
        'blood_types': [compatibility_info(t) for t in BloodType.canonical()],
    })


@api_view(['GET'])
def compatibility_detail(request, blood_type):
    return Response(compatibility_info(blood_type))


@api_view(['GET'])
def compatibility_check(request):
    query = CompatibilityCheckSerializer(data=request.query_params)
    query.is_valid(raise_exception=True)
    donor = query.validated_data['donor']
    recipient = query.validated_data['recipient']
    return Response({
        'donor': BloodType.parse(donor).value,
        'recipient': BloodType.parse(recipient).value,
        'compatible': is_compatible(donor, recipient),
    })


# ============================================
# ELIGIBILITY
# ============================================
def eligibility_payload(state):
    data = state.as_dict()
    data['refresh_interval'] = (
        settings.BLOODBRIDGE_COUNTDOWN_INTERVAL
        if state.status is EligibilityStatus.UNDER_AGE else None
    )
    data['min_age'] = settings.BLOODBRIDGE_MIN_DONOR_AGE
    data['max_age'] = settings.BLOODBRIDGE_MAX_DONOR_AGE
    return data


@api_view(['POST'])
def evaluate_eligibility(request):
    """Classify an arbitrary date of birth / signup reason at the current time"""
    query = EligibilityQuerySerializer(data=request.data)
    query.is_valid(raise_exception=True)

    state = classify(
        query.validated_data.get('date_of_birth'),
        query.validated_data.get('signup_reason'),
        timezone.localtime(),
    )
    return Response(eligibility_payload(state))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def my_eligibility(request):
    return Response(eligibility_payload(request.user.eligibility()))


# ============================================
# PROFILE (update sink)
# ============================================
@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def my_profile(request):
    if request.method == 'GET':
        return Response(ProfileSerializer(request.user).data)

    serializer = ProfileSerializer(request.user, data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    user = serializer.save()
    logger.info(f"Profile updated for user {user.pk}: {sorted(serializer.validated_data)}")
    return Response(ProfileSerializer(user).data)


# ============================================
# SCHEDULED DONATION
# ============================================
@api_view(['GET', 'POST', 'DELETE'])
@permission_classes([IsAuthenticated])
def my_scheduled_donation(request):
    donor = get_object_or_404(Donor, user=request.user)

    if request.method == 'GET':
        schedule = ScheduledDonation.objects.filter(donor=donor).first()
        return Response({
            'schedule': ScheduledDonationSerializer(schedule).data if schedule else None
        })

    if request.method == 'DELETE':
        deleted, _ = ScheduledDonation.objects.filter(donor=donor).delete()
        return Response({'success': True, 'deleted': bool(deleted)})

    serializer = ScheduledDonationSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    # One schedule per donor
    schedule, created = ScheduledDonation.objects.update_or_create(
        donor=donor,
        defaults={'scheduled_date': serializer.validated_data['scheduled_date']},
    )
    return Response(
        {'success': True, 'schedule': ScheduledDonationSerializer(schedule).data},
        status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
    )


# ============================================
# GEOGRAPHY
# ============================================
def options_payload(options):
    return [{'code': option.code, 'name': option.name} for option in options]


@api_view(['GET'])
def countries(request):
    return Response({'countries': options_payload(ModelGeographyCatalog().get_all_countries())})


@api_view(['GET'])
def states(request, country):
    return Response({'states': options_payload(ModelGeographyCatalog().get_states_of(country))})


@api_view(['GET'])
def cities(request, country, state):
    return Response({'cities': options_payload(ModelGeographyCatalog().get_cities_of(country, state))})


@api_view(['POST'])
def cascade(request):
    """
    Apply one change to a country/state/city selection and return the
    normalized selection together with the options valid under it.
    """
    serializer = CascadeSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    resolver = GeographyCascadeResolver(
        ModelGeographyCatalog(),
        country=data['country'],
        state=data['state'],
        city=data['city'],
    )
    setter = {
        'country': resolver.set_country,
        'state': resolver.set_state,
        'city': resolver.set_city,
    }[data['field']]
    selection = setter(data['value'])

    return Response({
        'selection': {'country': selection.country, 'state': selection.state, 'city': selection.city},
        'states': options_payload(resolver.states),
        'cities': options_payload(resolver.cities),
    })


# ============================================
# ADMIN STATS
# ============================================
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminUser])
def dashboard_stats(request):
    """Donor counts by availability and blood type"""
    by_blood_type = {
        row['blood_type']: row['count']
        for row in Donor.objects.values('blood_type').annotate(count=Count('id')).order_by()
    }
    return Response({
        'total_donors': Donor.objects.count(),
        'available_donors': Donor.objects.filter(is_available=True).count(),
        'unavailable_donors': Donor.objects.filter(is_available=False).count(),
        'not_selected_donors': Donor.objects.filter(is_available__isnull=True).count(),
        'by_blood_type': by_blood_type,
    })
