from typing import Optional, Dict, Any

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import Q
from rest_framework_simplejwt.tokens import RefreshToken

from portal.models import MedicalRecord

User = get_user_model()

DUPLICATE_USER_MESSAGE = 'User with this ABHA ID or mobile already exists'


def issue_tokens(user: User) -> Dict[str, str]:
    refresh = RefreshToken.for_user(user)
    return {'token': str(refresh.access_token), 'refresh': str(refresh)}


def serialize_user(user: User) -> Dict[str, Any]:
    return {
        'id': user.id,
        'abhaId': user.abha_id,
        'name': user.name,
        'mobile': user.mobile,
        'email': user.email or None,
        'dateOfBirth': user.date_of_birth.isoformat() if user.date_of_birth else None,
        'age': user.age,
        'gender': user.gender or None,
        'bloodGroup': user.blood_group or None,
        'address': user.address,
        'location': user.location or None,
        'emergencyContact': user.emergency_contact or None,
        'role': user.role,
        'hospitalId': user.hospital_id,
        'createdAt': user.date_joined.isoformat() if user.date_joined else None,
    }


@transaction.atomic
def register_patient(data: Dict[str, Any]) -> User:
    """Create a patient account.  Roles other than patient are never assigned here."""
    abha_id, mobile = data['abhaId'], data['mobile']
    if User.objects.filter(Q(abha_id=abha_id) | Q(mobile=mobile) | Q(username=abha_id)).exists():
        raise ValueError(DUPLICATE_USER_MESSAGE)
    user = User(
        username=abha_id,
        abha_id=abha_id,
        name=data['name'],
        mobile=mobile,
        email=data.get('email') or '',
        date_of_birth=data.get('dateOfBirth'),
        gender=data.get('gender') or '',
        blood_group=data.get('bloodGroup') or '',
        address=data.get('address') or '',
        role=User.ROLE_PATIENT,
    )
    user.set_password(data['password'])
    try:
        with transaction.atomic():
            user.save()
    except IntegrityError:
        # lost a race with a concurrent registration
        raise ValueError(DUPLICATE_USER_MESSAGE)
    return user


def find_login_user(abha_id: Optional[str], mobile: Optional[str]) -> Optional[User]:
    q = Q()
    if abha_id:
        q |= Q(abha_id=abha_id)
    if mobile:
        q |= Q(mobile=mobile)
    if not q:
        return None
    return User.objects.filter(q).select_related('hospital').order_by('id').first()


PROFILE_FIELDS = {
    'name': 'name',
    'email': 'email',
    'bloodGroup': 'blood_group',
    'address': 'address',
    'location': 'location',
    'emergencyContact': 'emergency_contact',
}


def update_profile(user: User, data: Dict[str, Any]) -> User:
    changed = []
    for key, field in PROFILE_FIELDS.items():
        if key in data:
            value = data[key]
            if key in ('location', 'emergencyContact'):
                value = dict(value or {})
            setattr(user, field, value)
            changed.append(field)
    if changed:
        user.save(update_fields=changed)
    return user


def serialize_record(r: MedicalRecord) -> Dict[str, Any]:
    return {
        'id': r.id,
        'date': r.date.isoformat(),
        'hospital': r.hospital,
        'doctor': r.doctor,
        'diagnosis': r.diagnosis,
        'prescriptions': r.prescriptions or [],
        'documents': r.documents or [],
        'notes': r.notes,
        'createdAt': r.created_at.isoformat() if r.created_at else None,
    }


def medical_records(user: User):
    return [serialize_record(r) for r in MedicalRecord.objects.filter(patient=user).order_by('-date', '-id')]
