import json

import pytest
import requests
from django.core.cache import cache
from rest_framework.test import APIClient

from clinic.models import Doctor, User

PASSWORD = 'Str0ng-Pass!42'


@pytest.fixture(autouse=True)
def _clear_cache():
    # throttles and AI results live in the cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def make_user(db):
    def _make(username, *, role='user', status='active', email=None, phone=''):
        return User.objects.create_user(
            username=username, password=PASSWORD, email=email or f'{username}@example.com',
            role=role, status=status, phone_number=phone,
        )
    return _make


@pytest.fixture
def admin_user(make_user):
    return make_user('boss', role='admin')


@pytest.fixture
def rep(make_user):
    return make_user('rep1')


def _client_for(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture
def admin_client(admin_user):
    return _client_for(admin_user)


@pytest.fixture
def rep_client(rep):
    return _client_for(rep)


@pytest.fixture
def doctor(db):
    return Doctor.objects.create(
        name='Dr. Rana Al-Ani', specialty='Cardiology', phone_number='07701234567',
        clinic_address='Karrada, Baghdad',
    )


class FakeGemini:
    """Stands in for the Gemini REST endpoint; tests queue the answers."""

    def __init__(self):
        self.answers = []
        self.calls = []

    def reply(self, value, *, status=200):
        text = value if isinstance(value, str) else json.dumps(value)
        self.answers.append((status, text))

    def post(self, url, params=None, json=None, timeout=None):
        self.calls.append({'url': url, 'params': params, 'json': json})
        status, text = self.answers.pop(0)
        return _FakeResponse(status, text)


class _FakeResponse:
    def __init__(self, status, text):
        self.status_code = status
        self.text = text

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f'{self.status_code} error')

    def json(self):
        return {'candidates': [{'content': {'parts': [{'text': self.text}], 'role': 'model'}}]}


@pytest.fixture
def gemini(monkeypatch, settings):
    settings.AI_ENABLE = True
    settings.GEMINI_API_KEY = 'test-key'
    fake = FakeGemini()
    monkeypatch.setattr('clinic.services.gemini.requests.post', fake.post)
    return fake
