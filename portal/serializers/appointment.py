import bleach
from django.utils import timezone
from rest_framework import serializers

from portal.models import Appointment, AppointmentDocument

STATUS_VALUES = [s for s, _ in Appointment.STATUS_CHOICES]
TRANSFER_VALUES = [s for s, _ in Appointment.TRANSFER_CHOICES]


def _clean(v):
    return bleach.clean((v or '').strip(), strip=True)


class AppointmentCreateSerializer(serializers.Serializer):
    hospitalId = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    hospital = serializers.CharField(max_length=255)
    hospitalAddress = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    doctor = serializers.CharField(max_length=120)
    specialty = serializers.CharField(max_length=120)
    date = serializers.DateField(input_formats=['iso-8601'])
    time = serializers.CharField(max_length=32)
    type = serializers.ChoiceField(choices=[t for t, _ in Appointment.TYPE_CHOICES])
    reason = serializers.CharField(max_length=2000)

    def validate_hospital(self, v):
        v = (v or '').strip()
        if not v:
            raise serializers.ValidationError('Hospital name is required')
        return v

    def validate_doctor(self, v):
        v = (v or '').strip()
        if not v:
            raise serializers.ValidationError('Doctor name is required')
        return v

    def validate_specialty(self, v):
        v = (v or '').strip()
        if not v:
            raise serializers.ValidationError('Specialty is required')
        return v

    def validate_date(self, v):
        if v < timezone.localdate():
            raise serializers.ValidationError('Appointment date cannot be in the past')
        return v

    def validate_time(self, v):
        v = (v or '').strip()
        if not v:
            raise serializers.ValidationError('Time is required')
        return v

    def validate_reason(self, v):
        v = _clean(v)
        if not v:
            raise serializers.ValidationError('Reason for appointment is required')
        return v


class AppointmentUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=STATUS_VALUES, required=False)
    notes = serializers.CharField(required=False, allow_blank=True, max_length=4000)
    transferStatus = serializers.ChoiceField(choices=TRANSFER_VALUES, required=False)
    cancelReason = serializers.CharField(required=False, allow_blank=True, max_length=255)

    def validate_notes(self, v):
        return _clean(v)

    def validate_cancelReason(self, v):
        return _clean(v)


class HospitalAppointmentsQuerySerializer(serializers.Serializer):
    status = serializers.CharField(required=False, allow_blank=True)

    def validate_status(self, v):
        # unknown values are ignored rather than rejected
        return v if v in STATUS_VALUES else None


class DocumentUploadSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=[t for t, _ in AppointmentDocument.TYPE_CHOICES], required=False)
    url = serializers.CharField(required=False, allow_blank=True, max_length=512)
    notes = serializers.CharField(required=False, allow_blank=True, max_length=2000)

    def validate_notes(self, v):
        return _clean(v)

    def validate_url(self, v):
        return (v or '').strip()


class TransferSerializer(serializers.Serializer):
    action = serializers.ChoiceField(choices=['approve', 'reject'], error_messages={
        'invalid_choice': 'Invalid action. Use "approve" or "reject"',
    })
