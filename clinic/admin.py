"""
Django admin registrations for the clinic models.

Superusers can inspect accounts, the directory, referrals and the audit
trail at ``/admin/``.
"""
from django.contrib import admin

from .models import AuditEvent, Doctor, InstrumentSet, Notification, Patient, User


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('username', 'email', 'phone_number', 'role', 'status', 'date_joined')
    list_filter = ('role', 'status')
    search_fields = ('username', 'email', 'phone_number')


@admin.register(Doctor)
class DoctorAdmin(admin.ModelAdmin):
    list_display = ('name', 'specialty', 'phone_number', 'is_partner', 'referral_count', 'created_at')
    list_filter = ('is_partner', 'specialty')
    search_fields = ('id', 'name', 'specialty', 'phone_number')


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ('name', 'phone_number', 'referring_doctor', 'status', 'referral_date')
    list_filter = ('status',)
    search_fields = ('name', 'phone_number', 'referring_doctor__name')


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ('title', 'recipient', 'is_read', 'created_at')
    list_filter = ('is_read',)


@admin.register(InstrumentSet)
class InstrumentSetAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'department', 'status', 'created_at')
    list_filter = ('status', 'department')


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('action', 'user', 'object_type', 'object_id', 'created_at')
    list_filter = ('action',)
    search_fields = ('object_id',)
