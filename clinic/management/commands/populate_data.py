"""
Management command to populate the database with demo data.
"""
import random
from datetime import timedelta

from django.core.management.base import BaseCommand
from django.utils import timezone

from clinic.models import Doctor, Patient
from clinic.services.doctors import fit_notes

FIRST_NAMES = ["د. جاسم", "د. كريم", "د. سعيد", "د. رنا", "د. آلاء", "د. بلال", "د. سندس", "د. ليث", "د. غيث", "د. سارة"]
LAST_NAMES = ["العاني", "البياتي", "الحمداني", "الجبوري", "الكبيسي", "الأسدي", "المالكي", "الزبيدي", "الدليمي"]
SPECIALTIES = [
    "Internal Medicine", "General Surgery", "Obstetrics and Gynecology", "Pediatrics", "Orthopedics",
    "Urology", "ENT", "Ophthalmology", "Dermatology", "Cardiology", "Neurology", "Oncology", "Nephrology",
]
PATIENT_FIRST = ["علي", "محمد", "حسن", "حسين", "فاطمة", "زينب", "مريم", "نور", "عباس", "حيدر"]
PATIENT_LAST = ["الساعدي", "العبيدي", "الطائي", "اللامي", "الكعبي", "الركابي", "الخالدي", "الموسوي", "الجنابي"]
GOVERNORATES = ["بغداد", "البصرة", "نينوى", "أربيل", "الأنبار", "كربلاء", "كركوك", "النجف", "ذي قار", "ديالى"]


class Command(BaseCommand):
    help = 'Populate database with demo doctors and referrals'

    def add_arguments(self, parser):
        parser.add_argument('--doctors', type=int, default=15)
        parser.add_argument('--patients', type=int, default=40)

    def handle(self, *args, **options):
        self.stdout.write('Creating demo data...')
        doctors = self.create_doctors(options['doctors'])
        patients = self.create_patients(doctors, options['patients'])
        self.stdout.write(self.style.SUCCESS(f'Created {len(doctors)} doctors and {len(patients)} patients.'))

    def create_doctors(self, count):
        doctors = []
        for _ in range(count):
            referrals = random.randint(0, 4)
            doctors.append(Doctor.objects.create(
                name=f"{random.choice(FIRST_NAMES)} {random.choice(LAST_NAMES)}",
                specialty=random.choice(SPECIALTIES),
                phone_number=f"07{random.randint(700000000, 999999999)}",
                clinic_address=f"منطقة عشوائية, {random.choice(GOVERNORATES)}",
                is_partner=random.random() > 0.7,
                referral_count=referrals,
                referral_notes=fit_notes([], referrals),
                available_days=["Sat", "Mon", "Wed"],
            ))
        return doctors

    def create_patients(self, doctors, count):
        if not doctors:
            return []
        now = timezone.now()
        patients = []
        for _ in range(count):
            referred = now - timedelta(days=random.randint(0, 13), hours=random.randint(0, 8))
            patient = Patient.objects.create(
                name=f"{random.choice(PATIENT_FIRST)} {random.choice(PATIENT_LAST)}",
                phone_number=f"07{random.randint(700000000, 999999999)}",
                referring_doctor=random.choice(doctors),
                referral_date=referred,
                status=random.choice([c[0] for c in Patient.STATUS_CHOICES]),
            )
            # spread creation times so the stats dashboard has history
            Patient.objects.filter(pk=patient.pk).update(created_at=referred)
            patients.append(patient)
        return patients
