from typing import Optional

from django.db import transaction

from clinic.models import Patient
from clinic.services.audit import log_action


def list_patients(doctor_id: Optional[str] = None):
    qs = Patient.objects.select_related('referring_doctor').order_by('-referral_date', '-created_at')
    if doctor_id:
        qs = qs.filter(referring_doctor_id=doctor_id)
    return qs


def update_patient(patient: Patient, data: dict) -> Patient:
    for field, value in data.items():
        setattr(patient, field, value)
    patient.save()
    return patient


def delete_by_doctor(actor, doctor_id: str) -> int:
    deleted, _ = Patient.objects.filter(referring_doctor_id=doctor_id).delete()
    log_action(user=actor, action='patients_delete_by_doctor', object_type='doctor', object_id=doctor_id,
               detail={'count': deleted})
    return deleted


@transaction.atomic
def delete_all(actor) -> int:
    deleted, _ = Patient.objects.all().delete()
    log_action(user=actor, action='patients_delete_all', object_type='patient', detail={'count': deleted})
    return deleted
