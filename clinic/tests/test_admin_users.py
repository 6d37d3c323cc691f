from datetime import timedelta

import pytest
from django.urls import reverse
from django.utils import timezone

from clinic.models import AuditEvent, Doctor, Patient, User
from clinic.services.stats import patient_stats, percent_change
from clinic.tests.conftest import PASSWORD

pytestmark = pytest.mark.django_db


def test_non_admin_gets_403(rep_client):
    r = rep_client.get(reverse('admin_list_users'))
    assert r.status_code == 403
    assert r.data['error']['code'] == 'permission_denied'


def test_list_users_filters(admin_client, make_user):
    make_user('pending1', status='pending')
    make_user('active1')
    r = admin_client.get(reverse('admin_list_users'), {'status': 'pending'})
    assert r.status_code == 200
    assert [u['username'] for u in r.data['data']] == ['pending1']
    r = admin_client.get(reverse('admin_list_users'), {'q': 'active'})
    assert [u['username'] for u in r.data['data']] == ['active1']


def test_admin_creates_active_user(admin_client):
    r = admin_client.post(reverse('admin_create_user'), {
        'username': 'made', 'password': PASSWORD, 'email': 'made@example.com', 'role': 'admin',
    }, format='json')
    assert r.status_code == 201
    u = User.objects.get(username='made')
    assert u.status == 'active' and u.role == 'admin'
    assert u.check_password(PASSWORD)
    assert AuditEvent.objects.filter(action='user_create', object_id=str(u.id)).exists()


def test_update_user_preserves_unmodified_fields(admin_client, make_user):
    u = make_user('target', phone='07744444444')
    r = admin_client.post(reverse('admin_update_user', args=[u.id]), {'email': 'new@example.com'}, format='json')
    assert r.status_code == 200
    u.refresh_from_db()
    assert u.email == 'new@example.com'
    assert u.phone_number == '07744444444'
    assert u.username == 'target'


def test_update_user_rechecks_uniqueness_against_others(admin_client, make_user):
    make_user('first', email='first@example.com')
    u = make_user('second', email='second@example.com')
    r = admin_client.post(reverse('admin_update_user', args=[u.id]), {'email': 'first@example.com'}, format='json')
    assert r.status_code == 409
    # re-sending its own email is not a conflict
    r = admin_client.post(reverse('admin_update_user', args=[u.id]), {'email': 'second@example.com'}, format='json')
    assert r.status_code == 200


def test_default_admin_and_self_cannot_be_deleted(admin_client, admin_user, make_user, settings):
    settings.DEFAULT_ADMIN_USERNAME = 'admin'
    default_admin = make_user('admin', role='admin')
    r = admin_client.post(reverse('admin_delete_user', args=[default_admin.id]))
    assert r.status_code == 400
    r = admin_client.post(reverse('admin_delete_user', args=[admin_user.id]))
    assert r.status_code == 400
    assert User.objects.filter(id__in=[default_admin.id, admin_user.id]).count() == 2


def test_delete_user(admin_client, make_user):
    u = make_user('gone')
    r = admin_client.delete(reverse('admin_delete_user', args=[u.id]))
    assert r.status_code == 200
    assert not User.objects.filter(id=u.id).exists()


def test_set_role(admin_client, rep):
    r = admin_client.post(reverse('admin_set_user_role', args=[rep.id]), {'role': 'admin'}, format='json')
    assert r.status_code == 200
    rep.refresh_from_db()
    assert rep.role == 'admin'
    r = admin_client.post(reverse('admin_set_user_role', args=[rep.id]), {'role': 'super'}, format='json')
    assert r.status_code == 400


@pytest.mark.parametrize('before,after', [
    ('active', 'pending'),
    ('pending', 'active'),
    ('banned', 'active'),
])
def test_toggle_active(admin_client, make_user, before, after):
    u = make_user('toggled', status=before)
    r = admin_client.post(reverse('admin_toggle_user_active', args=[u.id]))
    assert r.status_code == 200
    assert r.data['user']['status'] == after


@pytest.mark.parametrize('before,after', [
    ('pending', 'active'),
    ('banned', 'banned'),
    ('active', 'active'),
])
def test_approve_only_moves_pending(admin_client, make_user, before, after):
    u = make_user('applicant', status=before)
    r = admin_client.post(reverse('admin_approve_user', args=[u.id]))
    assert r.status_code == 200
    u.refresh_from_db()
    assert u.status == after


def test_unknown_user_is_404(admin_client):
    r = admin_client.post(reverse('admin_approve_user', args=[99999]))
    assert r.status_code == 404
    assert r.data['error']['code'] == 'not_found'


def test_percent_change():
    assert percent_change(3, 2) == 50.0
    assert percent_change(1, 2) == -50.0
    assert percent_change(5, 0) is None
    assert percent_change(0, 0) == 0.0


def test_patient_stats(doctor):
    other = Doctor.objects.create(name='Dr. Laith', specialty='ENT', phone_number='1', clinic_address='x')
    now = timezone.now()
    Patient.objects.create(name='A', referring_doctor=doctor)
    Patient.objects.create(name='B', referring_doctor=doctor)
    c = Patient.objects.create(name='C', referring_doctor=other)
    Patient.objects.filter(pk=c.pk).update(created_at=now - timedelta(days=1))

    stats = patient_stats(now)
    assert stats['todayCount'] == 2
    assert stats['dailyChange'] == 100.0
    assert stats['weeklyCount'] == 3
    assert stats['weeklyChange'] is None
    assert stats['busiestDoctor'] == {'doctorId': doctor.id, 'name': doctor.name, 'count': 2}
    assert len(stats['dailyTraffic']) == 7
    assert [d['total'] for d in stats['dailyTraffic'][-2:]] == [1, 2]


def test_patient_stats_endpoint(admin_client, rep_client):
    r = admin_client.get(reverse('admin_patient_stats'))
    assert r.status_code == 200
    assert r.data['data']['todayCount'] == 0
    assert r.data['data']['dailyChange'] == 0.0
    assert r.data['data']['busiestDoctor'] is None
    assert rep_client.get(reverse('admin_patient_stats')).status_code == 403


@pytest.mark.parametrize('status', ['pending', 'banned'])
def test_admin_without_active_account_gets_403(make_user, status):
    from rest_framework.test import APIClient
    client = APIClient()
    client.force_authenticate(make_user('sleeper', role='admin', status=status))
    assert client.get(reverse('admin_list_users')).status_code == 403
    assert client.get(reverse('admin_patient_stats')).status_code == 403
    target = make_user('target', status='pending')
    assert client.post(reverse('admin_approve_user', args=[target.pk])).status_code == 403
    target.refresh_from_db()
    assert target.status == 'pending'


def test_patient_stats_busiest_doctor_counts_last_seven_days_only(doctor):
    other = Doctor.objects.create(name='Dr. Laith', specialty='ENT', phone_number='1', clinic_address='x')
    now = timezone.now()
    old = [Patient.objects.create(name=f'old{i}', referring_doctor=other) for i in range(3)]
    Patient.objects.filter(pk__in=[p.pk for p in old]).update(created_at=now - timedelta(days=9))
    Patient.objects.create(name='new', referring_doctor=doctor)

    stats = patient_stats(now)
    assert stats['busiestDoctor'] == {'doctorId': doctor.id, 'name': doctor.name, 'count': 1}
    assert stats['weeklyCount'] == 1
    assert stats['weeklyChange'] == round((1 - 3) / 3 * 100, 1)
