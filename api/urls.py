# api/urls.py

from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

# Create router and register viewsets
router = DefaultRouter()
router.register(r'donors', views.DonorViewSet, basename='donor')

app_name = 'api'

urlpatterns = [
    # Donor search (before the router so 'search' is not read as a donor id)
    path('donors/search/', views.donor_search, name='donor-search'),
    path('donors/compatible/', views.compatible_donor_search, name='compatible-donor-search'),
    path('donors/schedule/', views.my_scheduled_donation, name='scheduled-donation'),

    # Compatibility
    path('compatibility/', views.compatibility_table, name='compatibility-table'),
    path('compatibility/check/', views.compatibility_check, name='compatibility-check'),
    path('compatibility/<str:blood_type>/', views.compatibility_detail, name='compatibility-detail'),

    # Eligibility and profile
    path('eligibility/', views.evaluate_eligibility, name='eligibility'),
    path('profile/', views.my_profile, name='profile'),
    path('profile/eligibility/', views.my_eligibility, name='profile-eligibility'),

    # Geography
    path('geography/countries/', views.countries, name='countries'),
    path('geography/countries/<str:country>/states/', views.states, name='states'),
    path('geography/countries/<str:country>/states/<str:state>/cities/', views.cities, name='cities'),
    path('geography/cascade/', views.cascade, name='cascade'),

    path('stats/', views.dashboard_stats, name='dashboard-stats'),

    # Router URLs
    path('', include(router.urls)),
]

# Available endpoints:
# GET  /api/donors/search/?blood_type=&country=&state=&city=&seq=
# GET  /api/donors/compatible/?recipient=&country=&state=&city=
# GET|POST|DELETE /api/donors/schedule/
# GET  /api/donors/                          - List donors (admin)
# GET  /api/compatibility/                   - Full compatibility table
# GET  /api/compatibility/check/?donor=&recipient=
# GET  /api/compatibility/{blood_type}/
# POST /api/eligibility/
# GET|PATCH /api/profile/
# GET  /api/profile/eligibility/
# GET  /api/geography/countries/...
# POST /api/geography/cascade/
# GET  /api/stats/                           - Dashboard statistics (admin)
