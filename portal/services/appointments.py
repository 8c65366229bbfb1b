"""
Appointment workflow.

Booking, admin updates, the two cancellation paths, attached documents and
transfer handling.  Views translate the exceptions raised here:
``PermissionError`` -> 403, ``ValueError`` -> 400, ``LookupError`` -> 404.

Hospital resolution during booking is lenient: clients often book against
hospitals found through an external map provider, which have no row in our
table yet.  Those hospitals are created on first booking (auto-onboarding).
"""
import logging
from typing import Optional, List, Dict, Any

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError, transaction
from django.utils import timezone

from portal.models import Appointment, AppointmentDocument, Hospital
from portal.permissions import is_hospital_admin_of
from portal.services.audit import log_action
from portal.services.notifications import notify_appointment_change

logger = logging.getLogger(__name__)

User = get_user_model()

DEFAULT_CITY = 'Unknown City'
DEFAULT_ADDRESS = 'Address not provided'
PLACEHOLDER_PHONE = '0000000000'
DEFAULT_CANCEL_REASON = 'No reason provided'
TRANSFER_APPROVED_MARKER = ' [Transfer Approved]'


def _audit(user, action: str, appointment: Appointment, /, **detail) -> None:
    try:
        with transaction.atomic():
            log_action(user=user, action=action, object_type='appointment', object_id=appointment.id, detail=detail)
    except DatabaseError:
        logger.warning('audit write failed for %s on appointment %s', action, appointment.id, exc_info=True)


# ---------------------------------------------------------------------
# Auto-onboarding
# ---------------------------------------------------------------------
def _is_record_id(value) -> bool:
    value = str(value or '').strip()
    return value.isascii() and value.isdigit() and value != settings.FALLBACK_HOSPITAL_ID


def city_from_address(address: Optional[str]) -> str:
    """Last comma-separated part of the address, e.g. "12 Main St, Pune" -> "Pune"."""
    if address:
        parts = address.split(',')
        if len(parts) > 1 and parts[-1].strip():
            return parts[-1].strip()
    return DEFAULT_CITY


def resolve_hospital(hospital_id, name: Optional[str], address: Optional[str]=None) -> Optional[Hospital]:
    """Find the hospital by id, then by exact name, else create it.

    Returns ``None`` when nothing matched and creation failed.  Lookup and
    creation are not atomic: two concurrent bookings for the same unknown
    name may each create a row.
    """
    if _is_record_id(hospital_id):
        hospital = Hospital.objects.filter(pk=int(str(hospital_id).strip())).first()
        if hospital:
            logger.info('resolved hospital by id: %s', hospital.name)
            return hospital

    if not name:
        return None

    hospital = Hospital.objects.filter(name=name).order_by('id').first()
    if hospital:
        logger.info('resolved hospital by name: %s', hospital.name)
        return hospital

    try:
        with transaction.atomic():
            hospital = Hospital(
                name=name,
                address=address or DEFAULT_ADDRESS,
                city=city_from_address(address),
                type=Hospital.TYPE_PRIVATE,
                phone=PLACEHOLDER_PHONE,
                emergency_phone='108',
            )
            hospital.full_clean()
            hospital.save()
    except (DatabaseError, DjangoValidationError) as e:
        logger.error('auto-onboarding of hospital %r failed: %s', name, e)
        return None
    logger.info('auto-onboarded hospital %s (id=%s, city=%s)', hospital.name, hospital.id, hospital.city)
    return hospital


# ---------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------
def _iso(value):
    return value.isoformat() if value else None


def serialize_document(doc: AppointmentDocument, index: int) -> Dict[str, Any]:
    return {
        'index': index,
        'type': doc.doc_type,
        'url': doc.url,
        'notes': doc.notes,
        'uploadedBy': doc.uploaded_by_id,
        'uploadedAt': _iso(doc.uploaded_at),
    }


def serialize_documents(appointment: Appointment) -> List[Dict[str, Any]]:
    return [serialize_document(d, i) for i, d in enumerate(appointment.documents.all())]


def serialize_appointment(a: Appointment) -> Dict[str, Any]:
    p = a.patient
    h = a.hospital
    return {
        'id': a.id,
        'patient': {
            'id': p.id,
            'name': p.name,
            'abhaId': p.abha_id,
            'mobile': p.mobile,
            'age': p.age,
            'gender': p.gender,
        },
        'hospitalId': a.hospital_id,
        'hospital': {
            'id': h.id,
            'name': h.name,
            'city': h.city,
            'address': h.address,
            'contact': {'phone': h.phone, 'email': h.email, 'emergency': h.emergency_phone},
        },
        'hospitalName': a.hospital_name,
        'hospitalAddress': a.hospital_address,
        'doctor': a.doctor,
        'specialty': a.specialty,
        'date': _iso(a.date),
        'time': a.time,
        'type': a.type,
        'status': a.status,
        'reason': a.reason,
        'notes': a.notes,
        'transferStatus': a.transfer_status or None,
        'confirmedBy': a.confirmed_by_id,
        'confirmedAt': _iso(a.confirmed_at),
        'cancelReason': a.cancel_reason or None,
        'cancelledBy': a.cancelled_by_id,
        'cancelledAt': _iso(a.cancelled_at),
        'documents': serialize_documents(a),
        'createdAt': _iso(a.created_at),
        'updatedAt': _iso(a.updated_at),
    }


def get_appointment(pk: int) -> Appointment:
    try:
        return Appointment.objects.select_related('patient', 'hospital').get(pk=pk)
    except Appointment.DoesNotExist:
        raise LookupError('Appointment not found')


# ---------------------------------------------------------------------
# Workflow
# ---------------------------------------------------------------------
def create_appointment(patient: User, data: Dict[str, Any]) -> Appointment:
    hospital = resolve_hospital(data.get('hospitalId'), data.get('hospital'), data.get('hospitalAddress'))
    if hospital is None:
        raise ValueError('Unable to resolve hospital for this appointment')

    appointment = Appointment.objects.create(
        patient=patient,
        hospital=hospital,
        hospital_name=hospital.name,
        hospital_address=hospital.address,
        doctor=data['doctor'],
        specialty=data['specialty'],
        date=data['date'],
        time=data['time'],
        type=data['type'],
        reason=data['reason'],
        status=Appointment.STATUS_PENDING,
    )
    _audit(patient, 'appointment_create', appointment, hospitalId=hospital.id)
    notify_appointment_change(appointment, 'created')
    return appointment


def list_for_patient(user: User):
    return (Appointment.objects.filter(patient=user)
            .select_related('patient', 'hospital')
            .prefetch_related('documents')
            .order_by('-date', '-created_at'))


def list_for_hospital(user: User, status: Optional[str]=None):
    if getattr(user, 'hospital_id', None) is None:
        raise PermissionError('Admin is not assigned to a hospital')
    qs = Appointment.objects.filter(hospital_id=user.hospital_id)
    if status:
        qs = qs.filter(status=status)
    return qs.select_related('patient', 'hospital').prefetch_related('documents').order_by('-date', '-created_at')


def apply_status(appointment: Appointment, status: str, actor: User, cancel_reason: Optional[str]=None) -> None:
    """Set ``status`` and stamp the confirmation or cancellation metadata.

    Any status in the enum may follow any other.  Confirmation is stamped
    only when entering ``confirmed``; cancellation is stamped every time.
    """
    previous = appointment.status
    appointment.status = status
    now = timezone.now()
    if status == Appointment.STATUS_CONFIRMED and previous != Appointment.STATUS_CONFIRMED:
        appointment.confirmed_by = actor
        appointment.confirmed_at = now
    if status == Appointment.STATUS_CANCELLED:
        appointment.cancel_reason = cancel_reason or DEFAULT_CANCEL_REASON
        appointment.cancelled_by = actor
        appointment.cancelled_at = now


@transaction.atomic
def update_appointment(appointment: Appointment, actor: User, *, status: Optional[str]=None,
                       notes: Optional[str]=None, transfer_status: Optional[str]=None,
                       cancel_reason: Optional[str]=None) -> Appointment:
    if not is_hospital_admin_of(actor, appointment):
        raise PermissionError('Not authorized to update this appointment')

    previous = appointment.status
    if status:
        apply_status(appointment, status, actor, cancel_reason)
    if notes:
        appointment.notes = notes
    if transfer_status:
        appointment.transfer_status = transfer_status
    appointment.save()

    _audit(actor, 'appointment_update', appointment, **{'from': previous, 'to': appointment.status})
    notify_appointment_change(appointment, 'updated')
    return appointment


def cancel_appointment(appointment: Appointment, actor: User) -> Appointment:
    """Quick cancel by the owning patient or any admin; no reason is recorded."""
    is_owner = appointment.patient_id == actor.id
    is_admin = getattr(actor, 'role', None) == User.ROLE_ADMIN
    if not (is_owner or is_admin):
        raise PermissionError('Not authorized to cancel this appointment')

    appointment.status = Appointment.STATUS_CANCELLED
    appointment.save(update_fields=['status', 'updated_at'])
    _audit(actor, 'appointment_cancel', appointment)
    notify_appointment_change(appointment, 'cancelled')
    return appointment


def _check_upload(f) -> None:
    size_mb = (f.size or 0) / (1024 * 1024)
    if size_mb > settings.UPLOAD_MAX_MB:
        raise ValueError(f'File too large (max {settings.UPLOAD_MAX_MB}MB)')
    ctype = getattr(f, 'content_type', '') or ''
    if not any(ctype.startswith(prefix) for prefix in settings.ALLOWED_UPLOAD_TYPES):
        raise ValueError('Only PDF and Image files are allowed!')


def add_document(appointment: Appointment, actor: User, *, doc_type: Optional[str]=None,
                 url: Optional[str]=None, file=None, notes: Optional[str]=None) -> List[Dict[str, Any]]:
    if not is_hospital_admin_of(actor, appointment):
        raise PermissionError('Not authorized to upload documents')
    if not file and not url:
        raise ValueError('No file or URL provided')

    doc = AppointmentDocument(
        appointment=appointment,
        doc_type=doc_type or AppointmentDocument.TYPE_PRESCRIPTION,
        notes=notes or '',
        uploaded_by=actor,
    )
    if file:
        _check_upload(file)
        doc.file.save(file.name, file, save=False)
        doc.url = doc.file.url
    else:
        doc.url = url
    doc.save()

    _audit(actor, 'document_upload', appointment, documentId=doc.id, type=doc.doc_type)
    notify_appointment_change(appointment, 'document_added')
    return serialize_documents(appointment)


def delete_document(appointment: Appointment, actor: User, index: int) -> List[Dict[str, Any]]:
    if not is_hospital_admin_of(actor, appointment):
        raise PermissionError('Not authorized to delete documents')
    docs = list(appointment.documents.all())
    if index < 0 or index >= len(docs):
        raise LookupError('Document not found at specified index')

    doc = docs[index]
    if doc.file:
        doc.file.delete(save=False)
    doc.delete()

    _audit(actor, 'document_delete', appointment, index=index)
    notify_appointment_change(appointment, 'document_removed')
    return serialize_documents(appointment)


def handle_transfer(appointment: Appointment, actor: User, action: str) -> Appointment:
    if action == 'approve':
        appointment.transfer_status = Appointment.TRANSFER_APPROVED
        appointment.notes = (appointment.notes or '') + TRANSFER_APPROVED_MARKER
    elif action == 'reject':
        appointment.transfer_status = Appointment.TRANSFER_REJECTED
    else:
        raise ValueError('Invalid action. Use "approve" or "reject"')
    appointment.save(update_fields=['transfer_status', 'notes', 'updated_at'])

    _audit(actor, 'appointment_transfer', appointment, action=action)
    notify_appointment_change(appointment, 'transfer')
    return appointment
