import pytest

from admin_site.models import ActivityLog
from management.models import Notification, Project, ProjectMember, Task

pytestmark = pytest.mark.django_db


def test_admin_creates_project_with_null_optionals(client_for, admin):
    response = client_for(admin).post('/api/projects/', {'name': 'Zeus'}, format='json')

    assert response.status_code == 201
    for field in ('description', 'manager', 'start_date', 'end_date'):
        assert response.data[field] is None
    assert response.data['status'] == 'planned'

    fetched = client_for(admin).get(f"/api/projects/{response.data['id']}/")
    assert fetched.data['description'] is None
    assert ActivityLog.objects.filter(action='project_create').count() == 1


def test_employee_cannot_create_project(client_for, employee):
    response = client_for(employee).post('/api/projects/', {'name': 'Shadow'}, format='json')

    assert response.status_code == 403
    assert not Project.objects.exists()


def test_project_rejects_end_before_start(client_for, admin):
    response = client_for(admin).post(
        '/api/projects/',
        {'name': 'Zeus', 'start_date': '2024-05-10', 'end_date': '2024-05-01'},
        format='json',
    )
    assert response.status_code == 400


def test_project_status_filter(client_for, admin):
    Project.objects.create(name='Done', status=Project.STATUS_COMPLETED)
    Project.objects.create(name='Next')

    response = client_for(admin).get('/api/projects/', {'status': 'completed'})

    assert [p['name'] for p in response.data] == ['Done']


def test_manager_cannot_reassign_project(client_for, manager, outsider, project):
    response = client_for(manager).patch(
        f'/api/projects/{project.pk}/', {'manager_id': outsider.pk}, format='json'
    )

    assert response.status_code == 403
    project.refresh_from_db()
    assert project.manager_id == manager.pk


def test_manager_edits_own_project(client_for, manager, project):
    response = client_for(manager).patch(
        f'/api/projects/{project.pk}/', {'status': 'in_progress'}, format='json'
    )
    assert response.status_code == 200
    assert response.data['status'] == 'in_progress'


def test_member_management(client_for, admin, employee, outsider, project):
    client = client_for(admin)

    added = client.post(f'/api/projects/{project.pk}/add-member/', {'user_id': outsider.pk}, format='json')
    duplicate = client.post(f'/api/projects/{project.pk}/add-member/', {'user_id': outsider.pk}, format='json')
    members = client.get(f'/api/projects/{project.pk}/members/')

    assert added.status_code == 201
    assert duplicate.status_code == 400
    assert {m['user']['id'] for m in members.data} == {employee.pk, outsider.pk}

    removed = client.delete(f'/api/projects/{project.pk}/remove-member/', {'user_id': outsider.pk}, format='json')
    assert removed.status_code == 200
    assert not ProjectMember.objects.filter(project=project, user=outsider).exists()


def test_manager_cannot_add_members(client_for, manager, outsider, project):
    response = client_for(manager).post(
        f'/api/projects/{project.pk}/add-member/', {'user_id': outsider.pk}, format='json'
    )
    assert response.status_code == 403


def test_employee_creates_personal_task(client_for, employee):
    response = client_for(employee).post('/api/tasks/', {'name': 'Inbox zero'}, format='json')

    assert response.status_code == 201
    assert response.data['project_id'] is None
    assert response.data['created_by']['id'] == employee.pk
    assert response.data['is_overdue'] is False


def test_task_in_foreign_project_is_rejected(client_for, outsider, project):
    response = client_for(outsider).post(
        '/api/tasks/', {'name': 'Sneaky', 'project_id': project.pk}, format='json'
    )
    assert response.status_code == 400
    assert not Task.objects.filter(name='Sneaky').exists()


def test_assignment_notifies_assignee(client_for, manager, employee, project):
    response = client_for(manager).post(
        '/api/tasks/',
        {'name': 'Telemetry', 'project_id': project.pk, 'assigned_to_id': employee.pk},
        format='json',
    )

    assert response.status_code == 201
    notification = Notification.objects.get(user=employee)
    assert notification.type == Notification.TYPE_TASK_ASSIGNMENT
    assert 'Telemetry' in notification.message


def test_status_change_notifies_creator(client_for, employee, manager, task):
    response = client_for(employee).patch(f'/api/tasks/{task.pk}/', {'status': 'completed'}, format='json')

    assert response.status_code == 200
    assert Notification.objects.filter(user=manager, type=Notification.TYPE_STATUS_CHANGE).exists()


def test_task_filters(client_for, employee, task):
    client = client_for(employee)
    client.post('/api/tasks/', {'name': 'Inbox zero'}, format='json')

    personal = client.get('/api/tasks/', {'project': 'personal'})
    mine = client.get('/api/tasks/', {'assigned_to': 'me'})
    done = client.get('/api/tasks/', {'status': 'completed'})

    assert [t['name'] for t in personal.data] == ['Inbox zero']
    assert [t['id'] for t in mine.data] == [task.pk]
    assert done.data == []


def test_only_admin_deletes_tasks(client_for, manager, admin, task):
    assert client_for(manager).delete(f'/api/tasks/{task.pk}/').status_code == 403
    assert client_for(admin).delete(f'/api/tasks/{task.pk}/').status_code == 204
    assert ActivityLog.objects.filter(action='task_delete', target_id=task.pk).exists()


def test_notifications_read_flow(client_for, employee):
    client = client_for(employee)
    for title in ('one', 'two'):
        Notification.objects.create(user=employee, title=title, message='m', type=Notification.TYPE_STATUS_CHANGE)

    unread = client.get('/api/notifications/', {'unread': 'true'})
    assert len(unread.data) == 2

    first_id = unread.data[0]['id']
    assert client.post(f'/api/notifications/{first_id}/read/').data['read'] is True
    assert client.post('/api/notifications/read-all/').data == {'updated': 1}
    assert client.get('/api/notifications/', {'unread': 'true'}).data == []


def test_notifications_cannot_target_others(client_for, employee, outsider):
    response = client_for(employee).post(
        '/api/notifications/',
        {'user_id': outsider.pk, 'title': 'hi', 'message': 'there', 'type': 'status_change'},
        format='json',
    )
    assert response.status_code == 403
    assert not Notification.objects.filter(user=outsider).exists()


@pytest.mark.parametrize('params', [{'project': 'abc'}, {'assigned_to': 'abc'}])
def test_invalid_task_filters_are_rejected(client_for, employee, params):
    response = client_for(employee).get('/api/tasks/', params)
    assert response.status_code == 400
    assert set(params) <= set(response.data)


def test_task_filter_by_project_id(client_for, employee, project, task):
    client = client_for(employee)
    client.post('/api/tasks/', {'name': 'Inbox zero'}, format='json')

    response = client.get('/api/tasks/', {'project': project.pk})

    assert [t['id'] for t in response.data] == [task.pk]
