"""
Doctor directory operations.

Referral bookkeeping keeps ``referral_notes`` in step with
``referral_count``: one note per referral, padded with blank notes or
truncated whenever the count changes.
"""
import logging
from typing import Optional

from django.db import transaction
from django.shortcuts import get_object_or_404
from django.utils import timezone

from clinic.models import Doctor, Patient
from clinic.serializers.doctors import MAX_REFERRALS, WEEKDAYS
from clinic.services.audit import log_action

logger = logging.getLogger(__name__)


def blank_note(today: Optional[str] = None) -> dict:
    return {
        'patientName': '',
        'referralDate': '',
        'testDate': today or timezone.localdate().isoformat(),
        'testType': '',
        'patientAge': '',
        'chronicDiseases': '',
    }


def fit_notes(notes: list, count: int) -> list:
    """Pad with blank notes or truncate so there is one note per referral."""
    notes = list(notes or [])[:count]
    today = timezone.localdate().isoformat()
    while len(notes) < count:
        notes.append(blank_note(today))
    return notes


def search_doctors(*, q: Optional[str] = None, partners: bool = False, specialty: Optional[str] = None,
                   page: Optional[int] = None, page_size: Optional[int] = None):
    qs = Doctor.objects.all()
    if q:
        qs = qs.filter(name__icontains=q)
    if partners:
        qs = qs.filter(is_partner=True)
    if specialty:
        qs = qs.filter(specialty__iexact=specialty)
    total = qs.count()
    if page and page_size:
        start = (page-1)*page_size
        qs = qs[start:start + page_size]
    return qs, total


@transaction.atomic
def create_doctor(user, data: dict) -> Doctor:
    count = data.get('referral_count') or 0
    data['referral_count'] = count
    data['referral_notes'] = fit_notes(data.get('referral_notes'), count)
    doctor = Doctor.objects.create(created_by=user if getattr(user, 'pk', None) else None, **data)
    logger.info("Doctor %s created by %s", doctor.id, getattr(user, 'username', None))
    return doctor


def update_doctor(doctor: Doctor, data: dict) -> Doctor:
    for field, value in data.items():
        setattr(doctor, field, value)
    if 'referral_count' in data and 'referral_notes' not in data:
        doctor.referral_notes = fit_notes(doctor.referral_notes, doctor.referral_count)
    doctor.save()
    return doctor


@transaction.atomic
def delete_doctor(actor, doctor: Doctor) -> int:
    patients = doctor.patients.count()
    log_action(user=actor, action='doctor_delete', object_type='doctor', object_id=doctor.id,
               detail={'name': doctor.name, 'patients': patients})
    doctor.delete()
    return patients


@transaction.atomic
def adjust_referrals(doctor_id: str, amount: int) -> Doctor:
    doctor = get_object_or_404(Doctor.objects.select_for_update(), id=doctor_id)
    doctor.referral_count = min(MAX_REFERRALS, max(0, doctor.referral_count + amount))
    doctor.referral_notes = fit_notes(doctor.referral_notes, doctor.referral_count)
    doctor.save(update_fields=['referral_count', 'referral_notes'])
    return doctor


def set_referral_notes(doctor: Doctor, notes: list) -> Doctor:
    doctor.referral_notes = notes
    doctor.save(update_fields=['referral_notes'])
    return doctor


def toggle_partner(doctor: Doctor) -> Doctor:
    doctor.is_partner = not doctor.is_partner
    doctor.save(update_fields=['is_partner'])
    return doctor


def toggle_available_day(doctor: Doctor, day: str) -> Doctor:
    days = set(doctor.available_days or [])
    days ^= {day}
    doctor.available_days = [d for d in WEEKDAYS if d in days]
    doctor.save(update_fields=['available_days'])
    return doctor


def _coord(v: float) -> str:
    return ('%.7f' % v).rstrip('0').rstrip('.')


def maps_url(lat: float, lng: float) -> str:
    return f"https://www.google.com/maps?q={_coord(lat)},{_coord(lng)}"


def set_location(doctor: Doctor, lat: float, lng: float) -> Doctor:
    doctor.map_location = maps_url(lat, lng)
    doctor.save(update_fields=['map_location'])
    return doctor


def partner_dashboard():
    return Doctor.objects.filter(is_partner=True).order_by('-referral_count', 'name')


def uncheck_all_partners(actor) -> int:
    n = Doctor.objects.filter(is_partner=True).update(is_partner=False)
    log_action(user=actor, action='doctors_uncheck_partners', object_type='doctor', detail={'count': n})
    return n


@transaction.atomic
def reset_all_referrals(actor) -> dict:
    doctors = Doctor.objects.update(referral_count=0, referral_notes=[])
    patients, _ = Patient.objects.all().delete()
    log_action(user=actor, action='doctors_reset_referrals', object_type='doctor',
               detail={'doctors': doctors, 'patients': patients})
    logger.info("Referral counters reset by %s", getattr(actor, 'username', None))
    return {'doctors': doctors, 'patientsDeleted': patients}


def specialties(q: Optional[str] = None) -> list[str]:
    qs = Doctor.objects.exclude(specialty='')
    if q:
        qs = qs.filter(specialty__icontains=q)
    return sorted(set(qs.values_list('specialty', flat=True)), key=str.lower)
