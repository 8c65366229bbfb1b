"""
Database models for the health portal backend.

These models capture the core concepts of the system: user accounts
(patients, hospital admins and government officers), hospitals,
appointments with their attached documents, medical records, public
health alerts and the epidemiological logs behind the analytics
dashboards.  Nested groups of values that the frontend reads as a
whole are kept in JSON fields; values that are filtered on are
flattened into columns.
"""
from __future__ import annotations

import datetime
import os

from django.contrib.auth.models import AbstractUser
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone


class Hospital(models.Model):
    """A facility that patients can book appointments with."""
    TYPE_GOVERNMENT = 'Government'
    TYPE_PRIVATE = 'Private'
    TYPE_TRUST = 'Trust'
    TYPE_CHOICES = (
        (TYPE_GOVERNMENT, 'Government'),
        (TYPE_PRIVATE, 'Private'),
        (TYPE_TRUST, 'Trust'),
    )

    name = models.CharField(max_length=255)
    city = models.CharField(max_length=120)
    type = models.CharField(max_length=16, choices=TYPE_CHOICES)

    # beds
    beds_total = models.PositiveIntegerField(default=0)
    beds_available = models.PositiveIntegerField(default=0)
    icu_total = models.PositiveIntegerField(default=0)
    icu_available = models.PositiveIntegerField(default=0)

    # resources
    has_oxygen = models.BooleanField(default=False)
    has_ventilators = models.BooleanField(default=False)
    has_blood_bank = models.BooleanField(default=False)

    # contact
    phone = models.CharField(max_length=32)
    email = models.EmailField(blank=True)
    emergency_phone = models.CharField(max_length=16, default='108')

    address = models.TextField()
    latitude = models.FloatField(null=True, blank=True)
    longitude = models.FloatField(null=True, blank=True)
    rating = models.FloatField(default=0, validators=[MinValueValidator(0), MaxValueValidator(5)])
    # [{"name": "Cardiology", "doctors": [{"name": ..., "specialty": ..., "available": true}]}]
    departments = models.JSONField(default=list, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['latitude', 'longitude'], name='hospital_location_idx'),
            models.Index(fields=['city', 'type'], name='hospital_city_type_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.city})"


class User(AbstractUser):
    """Account for every kind of portal user.

    Patients sign in with their ABHA ID or mobile number; the ABHA ID is
    also stored as ``username`` so that Django's auth machinery keeps
    working.  Hospital admins are bound to the hospital they manage via
    ``hospital``.  Government officers carry a :class:`GovernmentUser`
    profile.
    """
    ROLE_PATIENT = 'patient'
    ROLE_DOCTOR = 'doctor'
    ROLE_ADMIN = 'admin'
    ROLE_GOVERNMENT = 'government'
    ROLE_CHOICES = (
        (ROLE_PATIENT, 'Patient'),
        (ROLE_DOCTOR, 'Doctor'),
        (ROLE_ADMIN, 'Hospital administrator'),
        (ROLE_GOVERNMENT, 'Government officer'),
    )
    GENDER_CHOICES = (
        ('Male', 'Male'),
        ('Female', 'Female'),
        ('Other', 'Other'),
    )
    BLOOD_GROUP_CHOICES = tuple((g, g) for g in ('A+', 'A-', 'B+', 'B-', 'AB+', 'AB-', 'O+', 'O-'))

    abha_id = models.CharField(max_length=20, unique=True, null=True, blank=True)
    name = models.CharField(max_length=100, blank=True)
    mobile = models.CharField(max_length=15, unique=True, null=True, blank=True)
    date_of_birth = models.DateField(null=True, blank=True)
    gender = models.CharField(max_length=10, choices=GENDER_CHOICES, blank=True)
    blood_group = models.CharField(max_length=3, choices=BLOOD_GROUP_CHOICES, blank=True)
    address = models.TextField(blank=True)
    # {"latitude", "longitude", "city", "state", "country"}
    location = models.JSONField(default=dict, blank=True)
    # {"name", "relation", "mobile"}
    emergency_contact = models.JSONField(default=dict, blank=True)
    role = models.CharField(max_length=16, choices=ROLE_CHOICES, default=ROLE_PATIENT, db_index=True)
    hospital = models.ForeignKey(
        Hospital, null=True, blank=True, on_delete=models.SET_NULL, related_name='staff'
    )

    def save(self, *args, **kwargs):
        # unique + nullable: store NULL instead of empty strings
        self.abha_id = self.abha_id or None
        self.mobile = self.mobile or None
        if self.email:
            self.email = self.email.strip().lower()
        super().save(*args, **kwargs)

    @property
    def age(self) -> int | None:
        """Whole years since ``date_of_birth``, evaluated at read time."""
        if not self.date_of_birth:
            return None
        today = timezone.localdate()
        born = self.date_of_birth
        years = today.year - born.year
        if (today.month, today.day) < (born.month, born.day):
            years -= 1
        return years

    def __str__(self) -> str:
        return f"{self.name or self.username} ({self.role})"


class GovernmentUser(models.Model):
    """Profile of a government officer with access to the analytics dashboards."""
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='government_profile')
    department = models.CharField(max_length=255, default='Health Ministry')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"{self.user.username} ({self.department})"


class Appointment(models.Model):
    """A patient's booking with a hospital and the workflow subject for admins."""
    # --- Consultation type ---
    TYPE_IN_PERSON = 'In-person'
    TYPE_TELEMEDICINE = 'Telemedicine'
    TYPE_CHOICES = ((TYPE_IN_PERSON, 'In-person'), (TYPE_TELEMEDICINE, 'Telemedicine'))

    # --- Lifecycle status ---
    STATUS_PENDING = 'pending'
    STATUS_CONFIRMED = 'confirmed'
    STATUS_COMPLETED = 'completed'
    STATUS_CANCELLED = 'cancelled'
    STATUS_REJECTED = 'rejected'
    STATUS_CHOICES = (
        (STATUS_PENDING, 'pending'),
        (STATUS_CONFIRMED, 'confirmed'),
        (STATUS_COMPLETED, 'completed'),
        (STATUS_CANCELLED, 'cancelled'),
        (STATUS_REJECTED, 'rejected'),
    )

    # --- Inter-hospital transfer ---
    TRANSFER_PENDING = 'pending'
    TRANSFER_APPROVED = 'approved'
    TRANSFER_REJECTED = 'rejected'
    TRANSFER_CHOICES = (
        (TRANSFER_PENDING, 'pending'),
        (TRANSFER_APPROVED, 'approved'),
        (TRANSFER_REJECTED, 'rejected'),
    )

    patient = models.ForeignKey(User, on_delete=models.CASCADE, related_name='appointments')
    hospital = models.ForeignKey(Hospital, on_delete=models.PROTECT, related_name='appointments')
    # Denormalised for display; set from the resolved hospital at booking time
    hospital_name = models.CharField(max_length=255, blank=True)
    hospital_address = models.TextField(blank=True)

    doctor = models.CharField(max_length=120)
    specialty = models.CharField(max_length=120)
    date = models.DateField()
    time = models.CharField(max_length=32)
    type = models.CharField(max_length=16, choices=TYPE_CHOICES)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    reason = models.TextField()
    notes = models.TextField(blank=True)
    transfer_status = models.CharField(max_length=16, choices=TRANSFER_CHOICES, blank=True)

    confirmed_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='confirmed_appointments'
    )
    confirmed_at = models.DateTimeField(null=True, blank=True)
    cancel_reason = models.CharField(max_length=255, blank=True)
    cancelled_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='cancelled_appointments'
    )
    cancelled_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['patient', 'date'], name='appt_patient_date_idx'),
            models.Index(fields=['hospital', 'status', 'date'], name='appt_hosp_status_date_idx'),
        ]

    def __str__(self) -> str:
        return f"appt {self.id} p={self.patient_id} h={self.hospital_id} ({self.status})"


def _document_upload(instance, filename: str) -> str:
    ext = os.path.splitext(filename)[1]
    stamp = int(datetime.datetime.now().timestamp() * 1000)
    return f"reports/doc-{instance.appointment_id}-{stamp}{ext}"


class AppointmentDocument(models.Model):
    """A prescription, report or scan attached to an appointment by a hospital admin."""
    TYPE_PRESCRIPTION = 'prescription'
    TYPE_CHOICES = (
        (TYPE_PRESCRIPTION, 'prescription'),
        ('report', 'report'),
        ('x-ray', 'x-ray'),
        ('scan', 'scan'),
        ('other', 'other'),
    )

    appointment = models.ForeignKey(Appointment, on_delete=models.CASCADE, related_name='documents')
    doc_type = models.CharField(max_length=16, choices=TYPE_CHOICES, default=TYPE_PRESCRIPTION)
    url = models.CharField(max_length=512)
    file = models.FileField(upload_to=_document_upload, max_length=512, blank=True)
    notes = models.TextField(blank=True)
    uploaded_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='uploaded_documents'
    )
    uploaded_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['uploaded_at', 'id']

    def __str__(self) -> str:
        return f"doc {self.id} appt={self.appointment_id} ({self.doc_type})"


class MedicalRecord(models.Model):
    """A visit summary; independent of appointments and read-only for patients."""
    patient = models.ForeignKey(User, on_delete=models.CASCADE, related_name='medical_records')
    date = models.DateField()
    hospital = models.CharField(max_length=255)
    doctor = models.CharField(max_length=120)
    diagnosis = models.TextField()
    prescriptions = models.JSONField(default=list, blank=True)
    documents = models.JSONField(default=list, blank=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [models.Index(fields=['patient', 'date'], name='record_patient_date_idx')]

    def __str__(self) -> str:
        return f"record {self.id} p={self.patient_id} {self.date:%F}"


class HealthAlert(models.Model):
    """A public health advisory shown on the landing page."""
    SEVERITY_HIGH = 'high'
    SEVERITY_MODERATE = 'moderate'
    SEVERITY_LOW = 'low'
    SEVERITY_CHOICES = ((SEVERITY_HIGH, 'high'), (SEVERITY_MODERATE, 'moderate'), (SEVERITY_LOW, 'low'))
    TYPE_CHOICES = (('disease', 'disease'), ('weather', 'weather'), ('pollution', 'pollution'))

    title = models.CharField(max_length=255)
    severity = models.CharField(max_length=10, choices=SEVERITY_CHOICES)
    type = models.CharField(max_length=16, choices=TYPE_CHOICES)
    description = models.TextField()
    symptoms = models.JSONField(default=list, blank=True)
    prevention = models.JSONField(default=list, blank=True)
    affected_areas = models.JSONField(default=list, blank=True)
    risk_level = models.PositiveSmallIntegerField(
        null=True, blank=True, validators=[MinValueValidator(0), MaxValueValidator(100)]
    )
    is_active = models.BooleanField(default=True)
    source = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [models.Index(fields=['is_active', 'severity', 'created_at'], name='alert_active_sev_idx')]

    def __str__(self) -> str:
        return f"{self.title} ({self.severity})"


class PublicHealthLog(models.Model):
    """A single reported case; input for the analytics aggregations only."""
    STATUS_ACTIVE = 'active'
    STATUS_RECOVERED = 'recovered'
    STATUS_DECEASED = 'deceased'
    STATUS_CHOICES = (
        (STATUS_ACTIVE, 'active'),
        (STATUS_RECOVERED, 'recovered'),
        (STATUS_DECEASED, 'deceased'),
    )

    disease = models.CharField(max_length=120, db_index=True)
    state = models.CharField(max_length=120)
    city = models.CharField(max_length=120)
    lat = models.FloatField(null=True, blank=True)
    lng = models.FloatField(null=True, blank=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_ACTIVE)
    hospital = models.ForeignKey(
        Hospital, null=True, blank=True, on_delete=models.SET_NULL, related_name='health_logs'
    )
    date_reported = models.DateTimeField(default=timezone.now, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [models.Index(fields=['state', 'disease', 'date_reported'], name='log_state_disease_date_idx')]

    def __str__(self) -> str:
        return f"{self.disease} @ {self.city} ({self.status})"


class AuditEvent(models.Model):
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.IntegerField(blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='audit_action_created_idx'),
            models.Index(fields=['object_type', 'object_id', 'created_at'], name='audit_object_created_idx'),
        ]

    def __str__(self):
        return f"{self.action}:{self.user_id}@{self.created_at:%F %T}"
