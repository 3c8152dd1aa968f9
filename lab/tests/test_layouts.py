import pytest
from rest_framework.test import APIClient

from lab.models import DashboardLayout, User
from lab.permissions import normalize_permissions, section_visible
from lab.services.layouts import commit_layout_change, initialize_default_layouts, list_layouts, recolor_section, \
    rename_section

pytestmark = pytest.mark.django_db


def test_defaults_created_once_on_first_read():
    assert len(list(list_layouts())) == 6
    assert len(list(list_layouts())) == 6
    assert DashboardLayout.objects.count() == 6
    accounts = DashboardLayout.objects.get(section_name='accounts')
    assert (accounts.position_x, accounts.position_y, accounts.width, accounts.height) == (2, 1, 1, 1)
    assert accounts.route == '/accounts'


def test_initialize_fills_only_missing_sections():
    initialize_default_layouts()
    DashboardLayout.objects.filter(section_name='reports').delete()
    commit_layout_change('tests', 2, 2, 2, 1)
    created = initialize_default_layouts()
    assert [layout.section_name for layout in created] == ['reports']
    tests = DashboardLayout.objects.get(section_name='tests')
    assert (tests.position_x, tests.position_y, tests.width) == (2, 2, 2)


def test_commit_is_idempotent_and_partial_updates_keep_geometry():
    commit_layout_change('patients', 0, 3, 1, 2)
    commit_layout_change('patients', 0, 3, 1, 2)
    rename_section('patients', 'Clients')
    recolor_section('patients', 'from-pink-500/10 to-pink-500/5')
    layout = DashboardLayout.objects.get(section_name='patients')
    assert (layout.position_y, layout.height, layout.display_name) == (3, 2, 'Clients')
    assert layout.color.startswith('from-pink')
    assert DashboardLayout.objects.filter(section_name='patients').count() == 1


def test_visibility_is_fail_closed():
    bare = User.objects.create_user(username='bare', password='Str0ng-pass!')
    assert not any(section_visible(bare, s) for s in ('tests', 'patients', 'accounts'))
    boss = User.objects.create_superuser(username='boss', password='Str0ng-pass!')
    assert section_visible(boss, 'accounts')


def test_layout_list_is_filtered_per_user():
    perms = normalize_permissions({'results': {'view': True}, 'tests': {'access': True}})
    user = User.objects.create_user(username='tech', password='Str0ng-pass!', section_permissions=perms)
    client = APIClient()
    client.force_authenticate(user=user)
    r = client.get('/api/dashboard-layouts')
    assert {x['sectionName'] for x in r.data} == {'results', 'tests'}
    # ?all=1 is ignored for regular users
    assert len(client.get('/api/dashboard-layouts', {'all': '1'}).data) == 2


def test_superuser_can_list_and_move_tiles(api):
    assert len(api.get('/api/dashboard-layouts', {'all': '1'}).data) == 6
    r = api.put('/api/dashboard-layouts/reports', {'positionX': 2, 'positionY': 2}, format='json')
    assert r.status_code == 200
    assert (r.data['positionX'], r.data['positionY'], r.data['width']) == (2, 2, 1)


def test_unknown_section_needs_name_and_route(api):
    r = api.put('/api/dashboard-layouts/inventory', {'positionX': 0}, format='json')
    assert r.status_code == 400
    r = api.put('/api/dashboard-layouts/inventory', {'displayName': 'Inventory', 'route': '/inventory'},
                format='json')
    assert r.status_code == 200


def test_tile_move_rename_and_recolor_endpoints(api):
    r = api.put('/api/dashboard-layouts/results/position', {'x': 1, 'y': 2, 'w': 2, 'h': 1}, format='json')
    assert r.status_code == 200
    assert (r.data['positionX'], r.data['positionY'], r.data['width']) == (1, 2, 2)
    assert api.put('/api/dashboard-layouts/results/name', {'displayName': 'Entry'},
                   format='json').data['displayName'] == 'Entry'
    r = api.put('/api/dashboard-layouts/results/color', {'color': 'from-teal-500/10'}, format='json')
    assert (r.data['color'], r.data['displayName'], r.data['positionY']) == ('from-teal-500/10', 'Entry', 2)
    assert api.put('/api/dashboard-layouts/results/position', {'x': 0, 'y': 0, 'w': 20, 'h': 1},
                   format='json').status_code == 400


def test_tile_endpoints_need_settings_access(db):
    user = User.objects.create_user(username='viewer', password='Str0ng-pass!',
                                    section_permissions=normalize_permissions({'results': {'view': True}}))
    client = APIClient()
    client.force_authenticate(user=user)
    r = client.put('/api/dashboard-layouts/results/name', {'displayName': 'Mine'}, format='json')
    assert r.status_code == 403
