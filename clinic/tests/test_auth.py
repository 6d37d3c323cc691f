import pytest
from django.urls import reverse
from rest_framework.test import APIClient

from clinic.models import AuditEvent, Notification, User
from clinic.tests.conftest import PASSWORD

pytestmark = pytest.mark.django_db


def login(client, username, password=PASSWORD):
    return client.post(reverse('login_view'), {'username': username, 'password': password}, format='json')


def test_signup_creates_pending_user_and_notifies_admins(admin_user):
    client = APIClient()
    r = client.post(reverse('signup_view'), {
        'username': 'newrep', 'password': PASSWORD, 'email': 'newrep@example.com', 'phoneNumber': '07700000001',
    }, format='json')
    assert r.status_code == 201
    assert r.data['status'] == 'pending'
    assert r.data['token'] and r.data['jwt_access']
    u = User.objects.get(username='newrep')
    assert u.role == 'user' and u.status == 'pending'
    assert Notification.objects.filter(recipient=admin_user).count() == 1


@pytest.mark.parametrize('field,value', [
    ('username', 'taken'),
    ('email', 'taken@example.com'),
    ('phoneNumber', '07711111111'),
])
def test_signup_rejects_duplicates_with_conflict(make_user, field, value):
    make_user('taken', phone='07711111111')
    payload = {'username': 'fresh', 'password': PASSWORD, 'email': 'fresh@example.com', 'phoneNumber': ''}
    payload[field] = value
    r = APIClient().post(reverse('signup_view'), payload, format='json')
    assert r.status_code == 409
    assert r.data['ok'] is False
    assert r.data['error']['code'] == 'conflict'


def test_signup_validates_lengths():
    r = APIClient().post(reverse('signup_view'), {
        'username': 'ab', 'password': '123', 'email': 'not-an-email',
    }, format='json')
    assert r.status_code == 400
    errors = r.data['error']['message']
    assert {'username', 'password', 'email'} <= set(errors)


def test_login_returns_jwt_and_legacy_token(rep):
    r = login(APIClient(), 'rep1')
    assert r.status_code == 200
    assert r.data['ok'] is True
    assert r.data['token'] and r.data['jwt_access'] and r.data['jwt_refresh']
    assert r.data['role'] == 'user'
    assert r.data['user']['username'] == 'rep1'
    assert AuditEvent.objects.filter(action='login', user=rep).exists()


def test_login_wrong_password(rep):
    r = login(APIClient(), 'rep1', 'wrong-password')
    assert r.status_code == 400
    assert r.data['error']['code'] == 'invalid_credentials'


def test_no_role_bypass_in_login(rep):
    r = APIClient().post(reverse('login_view'), {'username': 'rep1', 'password': PASSWORD, 'role': 'admin'}, format='json')
    assert r.status_code == 200
    rep.refresh_from_db()
    assert rep.role == 'user'


def test_pending_user_logs_in_but_cannot_use_directory(make_user):
    make_user('waiting', status='pending')
    client = APIClient()
    r = login(client, 'waiting')
    assert r.status_code == 200
    assert r.data['status'] == 'pending'
    client.credentials(HTTP_AUTHORIZATION=f"Token {r.data['token']}")
    assert client.get(reverse('user_profile')).status_code == 200
    assert client.get(reverse('list_doctors')).status_code == 403


def test_banned_user_cannot_login(make_user):
    make_user('outlaw', status='banned')
    r = login(APIClient(), 'outlaw')
    assert r.status_code == 403
    assert r.data['error']['code'] == 'account_banned'


def test_existing_tokens_stop_working_after_ban(rep):
    client = APIClient()
    data = login(client, 'rep1').data
    rep.status = 'banned'
    rep.save(update_fields=['status'])

    client.credentials(HTTP_AUTHORIZATION=f"Token {data['token']}")
    assert client.get(reverse('user_profile')).status_code == 401
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {data['jwt_access']}")
    assert client.get(reverse('user_profile')).status_code == 401


def test_bearer_token_authenticates(rep):
    client = APIClient()
    access = login(client, 'rep1').data['jwt_access']
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {access}')
    r = client.get(reverse('user_profile'))
    assert r.status_code == 200
    assert r.data['user']['username'] == 'rep1'


def test_anonymous_request_is_rejected():
    r = APIClient().get(reverse('user_profile'))
    assert r.status_code == 401
    assert r.data['ok'] is False


def test_refresh_and_logout_blacklists_refresh_token(rep):
    client = APIClient()
    data = login(client, 'rep1').data
    r = client.post(reverse('jwt_refresh_view'), {'refresh': data['jwt_refresh']}, format='json')
    assert r.status_code == 200
    assert r.data['jwt_access']

    client.credentials(HTTP_AUTHORIZATION=f"Bearer {data['jwt_access']}")
    r = client.post(reverse('jwt_logout_view'), {'refresh': data['jwt_refresh']}, format='json')
    assert r.status_code == 200
    assert r.data['blacklisted'] == 1

    client.credentials()
    r = client.post(reverse('jwt_refresh_view'), {'refresh': data['jwt_refresh']}, format='json')
    assert r.status_code == 401


def test_logout_without_refresh_blacklists_everything(rep):
    client = APIClient()
    login(client, 'rep1')
    data = login(client, 'rep1').data
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {data['jwt_access']}")
    r = client.post(reverse('jwt_logout_view'), {}, format='json')
    assert r.status_code == 200
    assert r.data['blacklisted'] == 2


def test_profile_update_checks_uniqueness(make_user, rep_client):
    make_user('other', phone='07722222222')
    r = rep_client.post(reverse('user_profile_update'), {'phoneNumber': '07722222222'}, format='json')
    assert r.status_code == 409

    r = rep_client.post(reverse('user_profile_update'), {'phoneNumber': '07733333333', 'isFirstLogin': False}, format='json')
    assert r.status_code == 200
    assert r.data['user']['phoneNumber'] == '07733333333'
    assert r.data['user']['isFirstLogin'] is False


def test_change_password(rep, rep_client):
    r = rep_client.post(reverse('change_password'), {'oldPassword': 'nope', 'newPassword': 'An0ther-Pass!'}, format='json')
    assert r.status_code == 400
    r = rep_client.post(reverse('change_password'), {'oldPassword': PASSWORD, 'newPassword': 'An0ther-Pass!'}, format='json')
    assert r.status_code == 200
    rep.refresh_from_db()
    assert rep.check_password('An0ther-Pass!')
