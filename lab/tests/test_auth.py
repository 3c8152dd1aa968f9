import pytest
from django.urls import reverse
from rest_framework.test import APIClient

from lab.models import User
from lab.permissions import normalize_permissions

pytestmark = pytest.mark.django_db


def login(client, username, password):
    return client.post(reverse('login_view'), {'username': username, 'password': password}, format='json')


def test_anonymous_requests_get_401_with_error_shape():
    r = APIClient().get('/api/patients')
    assert r.status_code == 401
    assert r.data['ok'] is False
    assert r.data['error']['code'] == 'not_authenticated'


def test_login_starts_a_session():
    User.objects.create_user(username='tech', password='Str0ng-pass!')
    client = APIClient()
    r = login(client, 'tech', 'Str0ng-pass!')
    assert r.status_code == 200
    assert r.data['success'] is True
    assert 'password' not in r.data['user']
    s = client.get(reverse('session_view'))
    assert s.data['authenticated'] is True
    assert s.data['username'] == 'tech'


def test_bad_credentials_are_rejected():
    User.objects.create_user(username='tech', password='Str0ng-pass!')
    r = login(APIClient(), 'tech', 'wrong')
    assert r.status_code == 400
    assert r.data == {'success': False, 'message': 'Invalid username or password'}


def test_logout_ends_the_session():
    User.objects.create_user(username='tech', password='Str0ng-pass!')
    client = APIClient()
    login(client, 'tech', 'Str0ng-pass!')
    assert client.post(reverse('logout_view')).status_code == 200
    assert client.get(reverse('session_view')).data == {'authenticated': False}
    assert client.get('/api/patients').status_code == 401


def test_session_probe_is_public():
    assert APIClient().get(reverse('session_view')).data == {'authenticated': False}


def test_user_without_permissions_is_denied():
    user = User.objects.create_user(username='nobody', password='Str0ng-pass!')
    client = APIClient()
    client.force_authenticate(user=user)
    assert client.get('/api/patients').status_code == 403
    assert client.get('/api/users').status_code == 403
    # the catalog is readable by anyone signed in
    assert client.get('/api/tests').status_code == 200
    assert client.post('/api/tests', {'name': 'X'}, format='json').status_code == 403


def test_section_flags_gate_reads_and_writes():
    perms = normalize_permissions({'patients': {'view': True}})
    user = User.objects.create_user(username='viewer', password='Str0ng-pass!', section_permissions=perms)
    client = APIClient()
    client.force_authenticate(user=user)
    assert client.get('/api/patients').status_code == 200
    assert client.post('/api/patients', {'name': 'A'}, format='json').status_code == 403


def test_normalize_permissions_is_fail_closed():
    perms = normalize_permissions('{"results": {"view": "yes", "edit": true}, "bogus": {}}')
    assert perms['results'] == {'view': False, 'edit': True, 'print': False}
    assert 'bogus' not in perms
    assert normalize_permissions('not json')['accounts'] == {'access': False}
