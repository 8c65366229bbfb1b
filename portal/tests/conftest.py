import datetime

import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from portal.models import Hospital, User


@pytest.fixture(autouse=True)
def _reset_rate_limit():
    # the throttle counts in the default cache, which outlives a test
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def hospital(db):
    return Hospital.objects.create(
        name='AIIMS New Delhi', city='Delhi', type=Hospital.TYPE_GOVERNMENT,
        address='Ansari Nagar, New Delhi', phone='011-26588500',
        latitude=28.5672, longitude=77.2100, rating=4.8,
    )


@pytest.fixture
def other_hospital(db):
    return Hospital.objects.create(
        name='Tata Memorial Hospital', city='Mumbai', type=Hospital.TYPE_GOVERNMENT,
        address='Parel, Mumbai', phone='022-24177000',
        latitude=19.0142, longitude=72.8447, rating=4.7,
    )


@pytest.fixture
def patient(db):
    return User.objects.create_user(
        username='12-3456-7890-1234', password='patient123', role=User.ROLE_PATIENT,
        abha_id='12-3456-7890-1234', name='Rahul Kumar', mobile='9876543210',
        date_of_birth=datetime.date(1990, 5, 15), gender='Male',
    )


@pytest.fixture
def hospital_admin(db, hospital):
    return User.objects.create_user(
        username='99-9999-9999-9999', password='admin123', role=User.ROLE_ADMIN,
        abha_id='99-9999-9999-9999', name='Dr. Admin AIIMS', mobile='9999999999', hospital=hospital,
    )


@pytest.fixture
def officer(db):
    return User.objects.create_user(username='admin_gov', password='gov_password_123', role=User.ROLE_GOVERNMENT)


@pytest.fixture
def client_for():
    def make(user=None):
        c = APIClient()
        if user is not None:
            c.force_authenticate(user=user)
        return c
    return make
