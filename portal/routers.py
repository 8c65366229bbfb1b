"""
URL mappings for the SwasthyaSetu API.

Paths match the ones the web frontend calls.  Trailing slashes are
deliberately omitted (``APPEND_SLASH`` is off).
"""
from django.urls import path, include

from .auth_views import (
    register_view,
    login_view,
    government_login_view,
    refresh_view,
    logout_view,
    me_view,
    verify_view,
)
from .views import analytics
from .views import appointments
from .views import health
from .views import hospitals
from .views import profile


urlpatterns = [
    path('', health.root),
    path('', include('django_prometheus.urls')),
    path('api/health-check', health.health_check),
    # Authentication
    path('api/auth/register', register_view),
    path('api/auth/login', login_view),
    path('api/auth/government/login', government_login_view),
    path('api/auth/refresh', refresh_view),
    path('api/auth/logout', logout_view),
    path('api/auth/me', me_view),
    path('api/auth/verify', verify_view),
    # Appointments
    path('api/appointments', appointments.appointments),
    path('api/appointments/hospital', appointments.hospital_appointments),
    path('api/appointments/<int:pk>', appointments.appointment_detail),
    path('api/appointments/<int:pk>/documents', appointments.upload_document),
    path('api/appointments/<int:pk>/documents/<int:doc_index>', appointments.delete_document),
    path('api/appointments/<int:pk>/transfer', appointments.transfer),
    # Hospitals
    path('api/hospitals', hospitals.hospital_list),
    path('api/hospitals/nearby/<str:lat>/<str:lng>', hospitals.hospitals_nearby),
    path('api/hospitals/<int:pk>', hospitals.hospital_detail),
    # Profile
    path('api/profile', profile.profile),
    path('api/profile/records', profile.records),
    # Public health
    path('api/health/alerts', health.health_alerts),
    path('api/health/aqi', health.air_quality),
    # Government analytics
    path('api/analytics/disease-map', analytics.disease_map),
    path('api/analytics/alerts', analytics.crisis_alerts),
    path('api/analytics/hospital-performance', analytics.hospital_performance),
    path('api/analytics/outcomes', analytics.outcomes),
]
