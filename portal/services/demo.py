"""
Demo accounts shared by the seeding commands.

Identifiers and passwords come from ``settings.DEMO_CREDENTIALS`` so that a
deployment can change them through the environment.
"""
import datetime
from typing import Optional

from django.conf import settings
from django.db import transaction

from portal.models import GovernmentUser, Hospital, User

GOVERNMENT_DEPARTMENT = 'MoHFW (Ministry of Health & Family Welfare)'


def _upsert(username: str, password: str, **fields) -> User:
    user, created = User.objects.get_or_create(username=username, defaults=fields)
    if not created:
        for k, v in fields.items():
            setattr(user, k, v)
    user.is_active = True
    user.set_password(password)
    user.save()
    return user


@transaction.atomic
def ensure_demo_patient() -> User:
    cred = settings.DEMO_CREDENTIALS['patient']
    return _upsert(
        cred['identifier'], cred['password'],
        abha_id=cred['identifier'],
        name='Rahul Kumar',
        mobile='9876543210',
        email='rahul.kumar@example.com',
        role=User.ROLE_PATIENT,
        date_of_birth=datetime.date(1990, 5, 15),
        gender='Male',
        address='Sector 15, Noida, UP',
        emergency_contact={'name': 'Priya Kumar', 'relation': 'Wife', 'mobile': '9876543211'},
    )


@transaction.atomic
def ensure_demo_admin(hospital: Optional[Hospital]=None) -> User:
    cred = settings.DEMO_CREDENTIALS['admin']
    if hospital is None:
        hospital = Hospital.objects.order_by('id').first()
    return _upsert(
        cred['identifier'], cred['password'],
        abha_id=cred['identifier'],
        name='Dr. Admin AIIMS',
        mobile='9999999999',
        email='admin@aiims.edu',
        role=User.ROLE_ADMIN,
        date_of_birth=datetime.date(1980, 1, 1),
        gender='Male',
        hospital=hospital,
    )


@transaction.atomic
def ensure_government_officer() -> User:
    cred = settings.DEMO_CREDENTIALS['government']
    user = _upsert(
        cred['identifier'], cred['password'],
        name='Government Health Officer',
        email='admin@mohfw.gov.in',
        role=User.ROLE_GOVERNMENT,
    )
    GovernmentUser.objects.update_or_create(user=user, defaults={'department': GOVERNMENT_DEPARTMENT})
    return user
