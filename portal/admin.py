"""
Django admin registrations for the portal models.

Hooks the models into Django's built-in admin at ``/admin/`` so that
superusers can inspect seeded data and fix records by hand during
development.
"""

from django.contrib import admin

from .models import (
    Hospital,
    User,
    GovernmentUser,
    Appointment,
    AppointmentDocument,
    MedicalRecord,
    HealthAlert,
    PublicHealthLog,
    AuditEvent,
)


@admin.register(Hospital)
class HospitalAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'city', 'type', 'beds_available', 'rating')
    list_filter = ('type', 'city')
    search_fields = ('name', 'city', 'address')


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('username', 'name', 'abha_id', 'mobile', 'role', 'hospital', 'is_active')
    list_filter = ('role', 'hospital')
    search_fields = ('username', 'name', 'abha_id', 'mobile')


@admin.register(GovernmentUser)
class GovernmentUserAdmin(admin.ModelAdmin):
    list_display = ('user', 'department', 'created_at')
    search_fields = ('user__username', 'department')


class AppointmentDocumentInline(admin.TabularInline):
    model = AppointmentDocument
    extra = 0


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'hospital', 'doctor', 'date', 'time', 'status', 'transfer_status')
    list_filter = ('status', 'type', 'hospital')
    search_fields = ('id', 'patient__name', 'patient__abha_id', 'hospital_name', 'doctor')
    inlines = [AppointmentDocumentInline]


@admin.register(MedicalRecord)
class MedicalRecordAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'date', 'hospital', 'doctor')
    search_fields = ('patient__name', 'hospital', 'diagnosis')


@admin.register(HealthAlert)
class HealthAlertAdmin(admin.ModelAdmin):
    list_display = ('id', 'title', 'severity', 'type', 'risk_level', 'is_active')
    list_filter = ('severity', 'type', 'is_active')
    search_fields = ('title',)


@admin.register(PublicHealthLog)
class PublicHealthLogAdmin(admin.ModelAdmin):
    list_display = ('id', 'disease', 'city', 'state', 'status', 'date_reported')
    list_filter = ('disease', 'status', 'state')


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'action', 'object_type', 'object_id', 'created_at')
    list_filter = ('action', 'object_type')
