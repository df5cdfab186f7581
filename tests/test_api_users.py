import pytest

from admin_site.models import ActivityLog
from user.models import User

from .conftest import PASSWORD

pytestmark = pytest.mark.django_db


def test_signup_always_creates_active_employee(api_client):
    response = api_client.post('/api/signup/', {
        'email': 'new@example.com',
        'full_name': 'New Person',
        'password': PASSWORD,
        'role': 'admin',
    }, format='json')

    assert response.status_code == 201
    user = User.objects.get(email='new@example.com')
    assert user.role == User.ROLE_EMPLOYEE
    assert user.status == User.STATUS_ACTIVE
    assert user.check_password(PASSWORD)


def test_signup_rejects_weak_password(api_client):
    response = api_client.post('/api/signup/', {
        'email': 'weak@example.com', 'full_name': 'Weak', 'password': '123',
    }, format='json')
    assert response.status_code == 400
    assert 'password' in response.data


def test_login_returns_tokens(api_client, employee):
    response = api_client.post('/api/login/', {'email': employee.email, 'password': PASSWORD}, format='json')

    assert response.status_code == 200
    assert response.data['access_token']
    assert response.data['profile']['role'] == 'employee'

    refreshed = api_client.post('/api/token/refresh/', {'refresh': response.data['refresh_token']}, format='json')
    assert refreshed.status_code == 200
    assert 'access' in refreshed.data


def test_login_refuses_inactive_account(api_client, make_user):
    make_user('gone@example.com', status=User.STATUS_INACTIVE)
    response = api_client.post('/api/login/', {'email': 'gone@example.com', 'password': PASSWORD}, format='json')
    assert response.status_code == 400


def test_login_wrong_password(api_client, employee):
    response = api_client.post('/api/login/', {'email': employee.email, 'password': 'nope'}, format='json')
    assert response.status_code in (401, 403)
    assert 'access_token' not in response.data


def test_profile_update_keeps_role_and_status(client_for, employee):
    client = client_for(employee)

    renamed = client.patch('/api/user/', {'full_name': 'Em Ployee'}, format='json')
    promoted = client.patch('/api/user/', {'role': 'admin'}, format='json')
    suspended = client.patch('/api/user/', {'status': 'inactive'}, format='json')

    assert renamed.status_code == 200
    assert renamed.data['full_name'] == 'Em Ployee'
    assert promoted.status_code == 403
    assert suspended.status_code == 403
    employee.refresh_from_db()
    assert employee.role == User.ROLE_EMPLOYEE
    assert employee.status == User.STATUS_ACTIVE


def test_profiles_visible_to_manager(client_for, manager, employee, outsider, project):
    ids = {p['id'] for p in client_for(manager).get('/api/profiles/').data}
    assert ids == {manager.pk, employee.pk}


def test_admin_user_listing(client_for, admin, manager, employee):
    client = client_for(admin)

    employees = client.get('/api/admin/users/', {'role': 'employee'})
    search = client.get('/api/admin/users/', {'search': 'manag'})

    assert [u['id'] for u in employees.data['results']] == [employee.pk]
    assert [u['id'] for u in search.data['results']] == [manager.pk]


def test_admin_endpoints_forbidden_for_employees(client_for, employee):
    client = client_for(employee)
    assert client.get('/api/admin/users/').status_code == 403
    assert client.get('/api/admin/activity-logs/').status_code == 403


def test_admin_changes_role_and_suspends(client_for, admin, employee):
    client = client_for(admin)

    updated = client.patch(f'/api/admin/users/{employee.pk}/', {'role': 'project_manager'}, format='json')
    suspended = client.post(f'/api/admin/users/{employee.pk}/suspend/')

    assert updated.status_code == 200
    assert suspended.status_code == 200
    employee.refresh_from_db()
    assert employee.role == User.ROLE_PROJECT_MANAGER
    assert not employee.is_active

    logs = client.get('/api/admin/activity-logs/', {'action': 'user_suspend'})
    assert [entry['target_id'] for entry in logs.data['results']] == [employee.pk]
    assert ActivityLog.objects.filter(action='user_update').count() == 1

    activated = client.post(f'/api/admin/users/{employee.pk}/activate/')
    assert activated.data['user']['status'] == User.STATUS_ACTIVE


def test_admin_cannot_suspend_self(client_for, admin):
    response = client_for(admin).post(f'/api/admin/users/{admin.pk}/suspend/')
    assert response.status_code == 400
    admin.refresh_from_db()
    assert admin.is_active


@pytest.mark.parametrize('payload', [{'role': 'employee'}, {'status': 'inactive'}])
def test_admin_cannot_demote_or_deactivate_self(client_for, admin, payload):
    response = client_for(admin).patch(f'/api/admin/users/{admin.pk}/', payload, format='json')

    assert response.status_code == 400
    admin.refresh_from_db()
    assert admin.role == User.ROLE_ADMIN
    assert admin.is_active


def test_admin_renames_self(client_for, admin):
    response = client_for(admin).patch(f'/api/admin/users/{admin.pk}/', {'full_name': 'Root'}, format='json')
    assert response.status_code == 200


def test_activity_log_filter_rejects_bad_admin_id(client_for, admin):
    response = client_for(admin).get('/api/admin/activity-logs/', {'admin_id': 'abc'})
    assert response.status_code == 400
    assert 'admin_id' in response.data
