import io
import json
from datetime import timedelta

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from django.urls import reverse
from django.utils import timezone
from openpyxl import load_workbook

from clinic.models import AuditEvent, Doctor, Patient
from clinic.serializers.doctors import MAX_REFERRALS
from clinic.services.doctors import fit_notes, maps_url
from clinic.services.transfer import export_file_name, normalize_entry

pytestmark = pytest.mark.django_db

NEW_DOCTOR = {
    'name': 'Dr. Ghaith Al-Bayati',
    'specialty': 'Neurology',
    'phoneNumber': '07801112233',
    'clinicAddress': 'Mansour, Baghdad',
}


def test_create_doctor_pads_referral_notes(rep_client, rep):
    r = rep_client.post(reverse('create_doctor'), {**NEW_DOCTOR, 'referralCount': 2}, format='json')
    assert r.status_code == 201
    d = r.data['doctor']
    assert d['id'] and d['createdAt']
    assert d['referralCount'] == 2
    assert len(d['referralNotes']) == 2
    assert d['referralNotes'][0]['testDate'] == timezone.localdate().isoformat()
    assert d['referralNotes'][0]['patientName'] == ''
    assert Doctor.objects.get(id=d['id']).created_by == rep


def test_create_doctor_requires_core_fields(rep_client):
    r = rep_client.post(reverse('create_doctor'), {'name': 'Dr. X'}, format='json')
    assert r.status_code == 400
    assert {'specialty', 'phoneNumber', 'clinicAddress'} <= set(r.data['error']['message'])


def test_create_doctor_strips_markup(rep_client):
    r = rep_client.post(reverse('create_doctor'), {**NEW_DOCTOR, 'name': '<b>Dr. Saad</b><script>x</script>'}, format='json')
    assert r.status_code == 201
    assert '<' not in r.data['doctor']['name']
    assert 'Dr. Saad' in r.data['doctor']['name']


def test_list_search_and_filters(rep_client):
    Doctor.objects.create(name='Dr. Sara', specialty='ENT', phone_number='1', clinic_address='a', is_partner=True)
    Doctor.objects.create(name='Dr. Bilal', specialty='Urology', phone_number='2', clinic_address='b')
    Doctor.objects.create(name='Dr. Sarmad', specialty='ENT', phone_number='3', clinic_address='c')

    r = rep_client.get(reverse('list_doctors'), {'q': 'sar'})
    assert r.status_code == 200
    assert {d['name'] for d in r.data['data']} == {'Dr. Sara', 'Dr. Sarmad'}

    r = rep_client.get(reverse('list_doctors'), {'partners': '1'})
    assert [d['name'] for d in r.data['data']] == ['Dr. Sara']

    r = rep_client.get(reverse('list_doctors'), {'specialty': 'urology'})
    assert [d['name'] for d in r.data['data']] == ['Dr. Bilal']

    r = rep_client.get(reverse('list_doctors'), {'page': 1, 'pageSize': 2})
    assert len(r.data['data']) == 2
    assert r.data['pagination']['total'] == 3


def test_list_is_newest_first(rep_client):
    old = Doctor.objects.create(name='Old', specialty='ENT', phone_number='1', clinic_address='a',
                                created_at=timezone.now() - timedelta(days=3))
    new = Doctor.objects.create(name='New', specialty='ENT', phone_number='2', clinic_address='b')
    r = rep_client.get(reverse('list_doctors'))
    assert [d['id'] for d in r.data['data']] == [new.id, old.id]


def test_update_is_partial(rep_client, doctor):
    r = rep_client.post(reverse('update_doctor', args=[doctor.id]), {'specialty': 'Cardiac Surgery'}, format='json')
    assert r.status_code == 200
    doctor.refresh_from_db()
    assert doctor.specialty == 'Cardiac Surgery'
    assert doctor.name == 'Dr. Rana Al-Ani'
    assert doctor.phone_number == '07701234567'


def test_update_rejects_bad_weekday(rep_client, doctor):
    r = rep_client.post(reverse('update_doctor', args=[doctor.id]), {'availableDays': ['Funday']}, format='json')
    assert r.status_code == 400


def test_get_unknown_doctor_is_404(rep_client):
    r = rep_client.get(reverse('doctor_detail', args=['missing']))
    assert r.status_code == 404


def test_delete_doctor_removes_patients(rep_client, doctor):
    Patient.objects.create(name='P1', referring_doctor=doctor)
    r = rep_client.post(reverse('delete_doctor', args=[doctor.id]))
    assert r.status_code == 200
    assert r.data['patientsDeleted'] == 1
    assert not Doctor.objects.filter(id=doctor.id).exists()
    assert Patient.objects.count() == 0
    assert AuditEvent.objects.filter(action='doctor_delete', object_id=doctor.id).exists()


def test_adjust_referrals_keeps_notes_in_step(rep_client, doctor):
    url = reverse('adjust_referrals', args=[doctor.id])
    r = rep_client.post(url, {'amount': 3}, format='json')
    assert r.data['doctor']['referralCount'] == 3
    assert len(r.data['doctor']['referralNotes']) == 3

    r = rep_client.post(url, {'amount': -1}, format='json')
    assert r.data['doctor']['referralCount'] == 2
    assert len(r.data['doctor']['referralNotes']) == 2

    r = rep_client.post(url, {'amount': -10}, format='json')
    assert r.data['doctor']['referralCount'] == 0
    assert r.data['doctor']['referralNotes'] == []


def test_adjust_referrals_rejects_zero(rep_client, doctor):
    r = rep_client.post(reverse('adjust_referrals', args=[doctor.id]), {'amount': 0}, format='json')
    assert r.status_code == 400


def test_set_referral_notes(rep_client, doctor):
    notes = [
        {'patientName': 'Ali', 'referralDate': '2024-05-01', 'testDate': '2024-05-02',
         'testType': 'ECG', 'patientAge': '54', 'chronicDiseases': 'Diabetes'},
        'legacy free text note',
    ]
    r = rep_client.post(reverse('set_referral_notes', args=[doctor.id]), {'notes': notes}, format='json')
    assert r.status_code == 200
    doctor.refresh_from_db()
    assert doctor.referral_notes == notes


def test_toggle_partner(rep_client, doctor):
    url = reverse('toggle_partner', args=[doctor.id])
    assert rep_client.post(url).data['doctor']['isPartner'] is True
    assert rep_client.post(url).data['doctor']['isPartner'] is False


def test_toggle_available_day(rep_client, doctor):
    url = reverse('toggle_available_day', args=[doctor.id])
    rep_client.post(url, {'day': 'Mon'}, format='json')
    r = rep_client.post(url, {'day': 'Sat'}, format='json')
    assert r.data['doctor']['availableDays'] == ['Sat', 'Mon']
    r = rep_client.post(url, {'day': 'Mon'}, format='json')
    assert r.data['doctor']['availableDays'] == ['Sat']


def test_set_location(rep_client, doctor):
    r = rep_client.post(reverse('set_location', args=[doctor.id]), {'lat': 33.3152, 'lng': 44.3661}, format='json')
    assert r.status_code == 200
    assert r.data['doctor']['mapLocation'] == 'https://www.google.com/maps?q=33.3152,44.3661'
    r = rep_client.post(reverse('set_location', args=[doctor.id]), {'lat': 120, 'lng': 44}, format='json')
    assert r.status_code == 400


def test_maps_url_formats_whole_degrees():
    assert maps_url(33.0, -44.5) == 'https://www.google.com/maps?q=33,-44.5'


def test_partner_dashboard_sorted_with_commission(rep_client):
    Doctor.objects.create(name='Low', specialty='ENT', phone_number='1', clinic_address='a', is_partner=True, referral_count=1)
    Doctor.objects.create(name='High', specialty='ENT', phone_number='2', clinic_address='b', is_partner=True, referral_count=4)
    Doctor.objects.create(name='NotPartner', specialty='ENT', phone_number='3', clinic_address='c', referral_count=9)
    r = rep_client.get(reverse('partner_dashboard'))
    assert [d['name'] for d in r.data['data']] == ['High', 'Low']
    assert [d['commission'] for d in r.data['data']] == [400, 100]
    assert r.data['totalCommission'] == 500


def test_uncheck_all_partners(rep_client):
    Doctor.objects.create(name='A', specialty='ENT', phone_number='1', clinic_address='a', is_partner=True)
    Doctor.objects.create(name='B', specialty='ENT', phone_number='2', clinic_address='b', is_partner=True)
    r = rep_client.post(reverse('uncheck_all_partners'))
    assert r.data['updated'] == 2
    assert not Doctor.objects.filter(is_partner=True).exists()


def test_reset_all_referrals_deletes_patients(rep_client, doctor):
    doctor.referral_count = 2
    doctor.referral_notes = fit_notes([], 2)
    doctor.save()
    Patient.objects.create(name='P1', referring_doctor=doctor)
    r = rep_client.post(reverse('reset_all_referrals'))
    assert r.status_code == 200
    assert r.data['patientsDeleted'] == 1
    doctor.refresh_from_db()
    assert doctor.referral_count == 0 and doctor.referral_notes == []


def test_specialties(rep_client):
    for i, s in enumerate(['ENT', 'Cardiology', 'ENT', 'Neurology']):
        Doctor.objects.create(name=f'D{i}', specialty=s, phone_number=str(i), clinic_address='x')
    r = rep_client.get(reverse('list_specialties'))
    assert r.data['data'] == ['Cardiology', 'ENT', 'Neurology']
    r = rep_client.get(reverse('list_specialties'), {'q': 'neu'})
    assert r.data['data'] == ['Neurology']


def test_export_download(rep_client, doctor):
    r = rep_client.get(reverse('export_doctors'), {'fileName': 'backup'})
    assert r.status_code == 200
    assert 'filename="backup.json"' in r['Content-Disposition']
    rows = json.loads(r.content)
    assert rows[0]['id'] == doctor.id
    assert 'createdBy' not in rows[0]


def test_export_file_name():
    assert export_file_name('x.json') == 'x.json'
    assert export_file_name('x') == 'x.json'
    assert export_file_name('').startswith('doctors-backup-')


def test_normalize_entry_matches_client_rules():
    assert normalize_entry({'name': 'No id'}) is None
    assert normalize_entry({'id': 'x'}) is None
    d = normalize_entry({'id': 7, 'name': 'Dr. N', 'isPartner': 'true', 'referralCount': '3'})
    assert d['id'] == '7'
    assert d['is_partner'] is True
    assert d['referral_count'] == 3
    assert d['specialty'] == '' and d['referral_notes'] == [] and d['available_days'] == []
    assert normalize_entry({'id': 'y', 'name': 'n', 'isPartner': 'yes', 'referralCount': 'many'})['referral_count'] == 0
    assert normalize_entry({'id': 'y', 'name': 'n', 'isPartner': 'yes'})['is_partner'] is False


def test_import_upserts_and_skips_invalid(rep_client, doctor):
    payload = [
        {'id': doctor.id, 'name': 'Renamed', 'referralCount': 1},
        {'id': 'imported-1', 'name': 'Dr. Imported', 'specialty': 'ENT', 'createdAt': '2024-01-02T03:04:05Z'},
        {'name': 'missing id'},
    ]
    r = rep_client.post(reverse('import_doctors'), payload, format='json')
    assert r.status_code == 200
    assert r.data['created'] == 1 and r.data['updated'] == 1 and r.data['skipped'] == 1
    doctor.refresh_from_db()
    assert doctor.name == 'Renamed'
    assert Doctor.objects.get(id='imported-1').created_at.year == 2024


def test_import_file_upload(rep_client):
    content = json.dumps([{'id': 'f1', 'name': 'From file'}]).encode()
    upload = SimpleUploadedFile('backup.json', content, content_type='application/json')
    r = rep_client.post(reverse('import_doctors'), {'file': upload}, format='multipart')
    assert r.status_code == 200
    assert Doctor.objects.filter(id='f1').exists()


def test_import_rejects_bad_payloads(rep_client):
    r = rep_client.post(reverse('import_doctors'), {'id': 'x', 'name': 'not a list'}, format='json')
    assert r.status_code == 400
    upload = SimpleUploadedFile('backup.json', b'{broken', content_type='application/json')
    r = rep_client.post(reverse('import_doctors'), {'file': upload}, format='multipart')
    assert r.status_code == 400
    upload = SimpleUploadedFile('backup.txt', b'[]', content_type='text/plain')
    r = rep_client.post(reverse('import_doctors'), {'file': upload}, format='multipart')
    assert r.status_code == 400


def test_plain_text_keeps_ampersands_and_brackets(rep_client, doctor):
    r = rep_client.post(reverse('create_doctor'), {**NEW_DOCTOR, 'clinicAddress': 'Street 5 & 6'}, format='json')
    assert r.data['doctor']['clinicAddress'] == 'Street 5 & 6'

    r = rep_client.post(reverse('update_doctor', args=[doctor.id]), {'specialty': 'ENT <> Audiology'}, format='json')
    assert r.data['doctor']['specialty'] == 'ENT <> Audiology'

    r = rep_client.post(reverse('set_referral_notes', args=[doctor.id]), {'notes': ['BP < 140', 'HbA1c > 7 & rising']}, format='json')
    doctor.refresh_from_db()
    assert doctor.referral_notes == ['BP < 140', 'HbA1c > 7 & rising']


def test_referral_count_is_capped(rep_client, doctor):
    r = rep_client.post(reverse('create_doctor'), {**NEW_DOCTOR, 'referralCount': MAX_REFERRALS + 1}, format='json')
    assert r.status_code == 400

    url = reverse('adjust_referrals', args=[doctor.id])
    assert rep_client.post(url, {'amount': 10**9}, format='json').status_code == 400
    Doctor.objects.filter(pk=doctor.pk).update(referral_count=MAX_REFERRALS - 1)
    r = rep_client.post(url, {'amount': 5}, format='json')
    assert r.data['doctor']['referralCount'] == MAX_REFERRALS


def test_import_clamps_huge_referral_counts(rep_client):
    r = rep_client.post(reverse('import_doctors'), [{'id': 'x1', 'name': 'N', 'referralCount': 1e20}], format='json')
    assert r.status_code == 200
    assert Doctor.objects.get(id='x1').referral_count == MAX_REFERRALS
    assert normalize_entry({'id': 'x2', 'name': 'N', 'referralCount': 'inf'})['referral_count'] == 0


def test_import_skips_ids_that_shadow_routes(rep_client):
    payload = [
        {'id': 'partners', 'name': 'A'},
        {'id': 'export', 'name': 'B'},
        {'id': 'a/b', 'name': 'C'},
        {'id': 'ok-1', 'name': 'D'},
    ]
    r = rep_client.post(reverse('import_doctors'), payload, format='json')
    assert r.data['created'] == 1 and r.data['skipped'] == 3
    assert list(Doctor.objects.values_list('id', flat=True)) == ['ok-1']


def test_export_file_name_drops_control_characters(rep_client, doctor):
    assert export_file_name('a\nb') == 'ab.json'
    assert export_file_name('q"x\r', suffix='.xlsx') == 'qx.xlsx'
    r = rep_client.get(reverse('export_doctors'), {'fileName': 'a\nb'})
    assert r.status_code == 200
    assert 'filename="ab.json"' in r['Content-Disposition']


def test_export_excel(rep_client, doctor):
    doctor.available_days = ['Sat', 'Mon']
    doctor.save()
    r = rep_client.get(reverse('export_doctors_excel'), {'fileName': 'Iraqi_Doctors'})
    assert r.status_code == 200
    assert 'filename="Iraqi_Doctors.xlsx"' in r['Content-Disposition']
    ws = load_workbook(io.BytesIO(r.content)).active
    assert ws.title == 'Data'
    rows = list(ws.iter_rows(values_only=True))
    header = rows[0]
    assert 'createdBy' not in header
    assert len(rows) == 2
    row = dict(zip(header, rows[1]))
    assert row['id'] == doctor.id
    assert row['name'] == 'Dr. Rana Al-Ani'
    assert row['availableDays'] == 'Sat, Mon'
    assert ws.column_dimensions['A'].width <= 62


def test_export_excel_partners_only(rep_client, doctor):
    Doctor.objects.create(name='Dr. P', specialty='ENT', phone_number='1', clinic_address='a', is_partner=True)
    r = rep_client.get(reverse('export_doctors_excel'), {'partners': '1'})
    assert r['Content-Disposition'].endswith('.xlsx"')
    rows = list(load_workbook(io.BytesIO(r.content)).active.iter_rows(values_only=True))
    assert len(rows) == 2
    assert rows[1][rows[0].index('name')] == 'Dr. P'
