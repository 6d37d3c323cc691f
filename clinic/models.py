"""
Database models for the medical-representative portal.

These models hold the portal state: user accounts with an approval
workflow, the doctor directory, referred patients, per-user
notifications, sterilization instrument sets and an audit trail.  Field names are snake_case here; the serializers expose
the camelCase names the front-end expects.
"""
from __future__ import annotations

import uuid

from django.contrib.auth.models import AbstractUser
from django.db import models
from django.utils import timezone


def new_record_id() -> str:
    return uuid.uuid4().hex


class User(AbstractUser):
    """Portal account with a role and an approval status.

    Self-registered accounts start as ``pending`` and must be approved by
    an administrator.  ``banned`` accounts cannot authenticate at all.
    """
    ROLE_ADMIN = 'admin'
    ROLE_USER = 'user'
    ROLE_CHOICES = [
        (ROLE_ADMIN, 'Administrator'),
        (ROLE_USER, 'User'),
    ]

    STATUS_PENDING = 'pending'
    STATUS_ACTIVE = 'active'
    STATUS_BANNED = 'banned'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_ACTIVE, 'Active'),
        (STATUS_BANNED, 'Banned'),
    ]

    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default=ROLE_USER)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    phone_number = models.CharField(max_length=32, blank=True, db_index=True)
    is_first_login = models.BooleanField(default=True)

    def __str__(self) -> str:
        return f"{self.username} ({self.role}/{self.status})"


class Doctor(models.Model):
    """An entry of the doctor directory maintained by the representatives."""
    id = models.CharField(max_length=64, primary_key=True, default=new_record_id)
    name = models.CharField(max_length=255, db_index=True)
    specialty = models.CharField(max_length=128, blank=True, db_index=True)
    phone_number = models.CharField(max_length=32, blank=True)
    clinic_address = models.TextField(blank=True)
    map_location = models.CharField(max_length=500, blank=True)
    # Business card photo stored as a data URL
    clinic_card_image_url = models.TextField(blank=True)
    is_partner = models.BooleanField(default=False, db_index=True)
    referral_count = models.PositiveIntegerField(default=0)
    referral_notes = models.JSONField(default=list, blank=True)
    available_days = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    created_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='doctors_created'
    )

    class Meta:
        ordering = ['-created_at']

    def __str__(self) -> str:
        return f"{self.name} ({self.specialty})"

    @property
    def commission(self) -> int:
        return self.referral_count * 100


class Patient(models.Model):
    """A patient referred by a doctor of the directory."""
    STATUS_PENDING = 'Pending'
    STATUS_VISITED = 'Visited'
    STATUS_CANCELED = 'Canceled'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_VISITED, 'Visited'),
        (STATUS_CANCELED, 'Canceled'),
    ]

    id = models.CharField(max_length=64, primary_key=True, default=new_record_id)
    name = models.CharField(max_length=255)
    phone_number = models.CharField(max_length=32, blank=True)
    referring_doctor = models.ForeignKey(Doctor, on_delete=models.CASCADE, related_name='patients')
    referral_date = models.DateTimeField(default=timezone.now, db_index=True)
    visit_date = models.DateTimeField(null=True, blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ['-referral_date']

    def __str__(self) -> str:
        return f"{self.name} -> {self.referring_doctor_id} ({self.status})"


class Notification(models.Model):
    recipient = models.ForeignKey(User, on_delete=models.CASCADE, related_name='notifications')
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']
        indexes = [models.Index(fields=['recipient', 'is_read'], name='notif_recipient_read_idx')]

    def __str__(self) -> str:
        return f"{self.title} -> {self.recipient_id}"


class InstrumentSet(models.Model):
    """A surgical instrument set moving through the sterilization cycle."""
    STATUS_CLEANING = 'cleaning'
    STATUS_PACKAGING = 'packaging'
    STATUS_STERILIZING = 'sterilizing'
    STATUS_STORAGE = 'storage'
    STATUS_FLOW = [STATUS_CLEANING, STATUS_PACKAGING, STATUS_STERILIZING, STATUS_STORAGE]
    STATUS_CHOICES = [(s, s) for s in STATUS_FLOW]

    id = models.CharField(max_length=64, primary_key=True)
    name = models.CharField(max_length=255)
    department = models.CharField(max_length=128, db_index=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_CLEANING)
    # epoch milliseconds, as produced by the client's Date.now()
    cycle_start_time = models.BigIntegerField()
    cycle_duration = models.PositiveIntegerField(help_text="seconds")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self) -> str:
        return f"{self.name} [{self.status}]"


class AuditEvent(models.Model):
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.CharField(max_length=64, blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='audit_action_created_idx'),
            models.Index(fields=['object_type', 'object_id', 'created_at'], name='audit_object_created_idx'),
        ]

    def __str__(self):
        return f"{self.action}:{self.user_id}@{self.created_at:%F %T}"
