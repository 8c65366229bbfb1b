"""
Fan-out of appointment changes to WebSocket subscribers.

Every mutation is pushed to the owning patient's group and to the group of
the hospital that holds the appointment, so both the patient page and the
hospital admin dashboard can refresh without polling.
"""
import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.db import transaction

logger = logging.getLogger(__name__)


def user_group(user_id) -> str:
    return f"appointments.user.{user_id}"


def hospital_group(hospital_id) -> str:
    return f"appointments.hospital.{hospital_id}"


def broadcast_appointment_change(appointment, event: str) -> None:
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return
    payload = {
        "type": "appointment.changed",
        "event": event,
        "appointmentId": appointment.id,
        "status": appointment.status,
        "hospitalId": appointment.hospital_id,
        "patientId": appointment.patient_id,
    }
    try:
        for group in (user_group(appointment.patient_id), hospital_group(appointment.hospital_id)):
            async_to_sync(channel_layer.group_send)(group, payload)
    except Exception:
        # subscribers miss this update
        logger.warning("broadcast of appointment %s (%s) failed", appointment.id, event, exc_info=True)
        return
    logger.debug("appointment %s broadcast (%s)", appointment.id, event)


def notify_appointment_change(appointment, event: str) -> None:
    """Broadcast once the surrounding transaction commits."""
    transaction.on_commit(lambda: broadcast_appointment_change(appointment, event))
