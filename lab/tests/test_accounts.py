import pytest
from rest_framework.test import APIClient

from lab.models import User
from lab.permissions import normalize_permissions

pytestmark = pytest.mark.django_db


def test_create_user_hashes_password_and_hides_it(api):
    r = api.post('/api/users', {
        'displayName': 'Lab Tech', 'username': 'tech1', 'password': 'Str0ng-pass!',
        'permissions': {'results': {'view': True, 'edit': True}},
    }, format='json')
    assert r.status_code == 201
    assert 'password' not in r.data
    assert r.data['permissions']['results'] == {'view': True, 'edit': True, 'print': False}
    user = User.objects.get(username='tech1')
    assert user.password != 'Str0ng-pass!'
    assert user.check_password('Str0ng-pass!')
    assert all('password' not in u for u in api.get('/api/users').data)


def test_username_must_be_unique(api):
    api.post('/api/users', {'username': 'tech1', 'password': 'Str0ng-pass!'}, format='json')
    r = api.post('/api/users', {'username': 'TECH1', 'password': 'Str0ng-pass!'}, format='json')
    assert r.status_code == 400


def test_update_user_permissions_and_password(api):
    uid = api.post('/api/users', {'username': 'tech1', 'password': 'Str0ng-pass!'}, format='json').data['id']
    r = api.put(f'/api/users/{uid}', {'password': 'An0ther-pass!', 'permissions': {'reports': {'view': True}}},
                format='json')
    assert r.status_code == 200
    assert r.data['permissions']['reports']['view'] is True
    assert User.objects.get(pk=uid).check_password('An0ther-pass!')


def test_account_manager_cannot_touch_superusers(admin_user):
    manager = User.objects.create_user(
        username='mgr', password='Str0ng-pass!',
        section_permissions=normalize_permissions({'accounts': {'access': True}}),
    )
    client = APIClient()
    client.force_authenticate(user=manager)
    assert client.get('/api/users').status_code == 200
    assert client.put(f'/api/users/{admin_user.pk}', {'displayName': 'x'}, format='json').status_code == 403
    assert client.delete(f'/api/users/{admin_user.pk}').status_code == 403


def test_delete_user(api):
    uid = api.post('/api/users', {'username': 'tech1', 'password': 'Str0ng-pass!'}, format='json').data['id']
    assert api.delete(f'/api/users/{uid}').status_code == 204
    assert api.get(f'/api/users/{uid}').status_code == 404
