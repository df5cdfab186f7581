from datetime import date, timedelta

import pytest
from django.utils import timezone

from management.models import Task, TimeLog

pytestmark = pytest.mark.django_db


def test_dashboard_for_employee(client_for, employee, manager, project, task):
    today = timezone.localdate()
    task.status = Task.STATUS_IN_PROGRESS
    task.end_date = today - timedelta(days=1)
    task.save()
    Task.objects.create(
        name='Shipped', project=project, assigned_to=employee, created_by=manager,
        status=Task.STATUS_COMPLETED, end_date=today - timedelta(days=1),
    )
    Task.objects.create(name='Inbox zero', created_by=employee)
    Task.objects.create(name='Not mine', project=project, created_by=manager)
    now = timezone.now()
    TimeLog.objects.create(
        user=employee, task=task, start_time=now - timedelta(minutes=25), end_time=now, date=today,
    )

    data = client_for(employee).get('/api/dashboard/').data

    assert data['total_tasks'] == 3
    assert data['in_progress_tasks'] == 1
    assert data['completed_tasks'] == 1
    assert data['overdue_tasks'] == 1
    assert data['total_projects'] == 0
    assert data['total_time_today'] == 25
    assert len(data['recent_tasks']) == 4


def test_dashboard_for_admin_counts_everything(client_for, admin, manager, project, task):
    Task.objects.create(name='Side quest', created_by=manager)

    data = client_for(admin).get('/api/dashboard/').data

    assert data['total_tasks'] == 2
    assert data['total_projects'] == 1


def test_reports_are_role_gated(client_for, employee, manager, project, task):
    assert client_for(employee).get('/api/reports/').status_code == 403

    response = client_for(manager).get('/api/reports/')

    assert response.status_code == 200
    assert response.data['task_status'] == [{'status': 'to_do', 'label': 'TO DO', 'count': 1}]
    assert response.data['project_progress'][0]['total'] == 1
    assert response.data['total_hours'] == 0
    assert {row['user_id'] for row in response.data['user_productivity']} == {manager.pk, employee.pk}


def test_calendar_month(client_for, employee, task):
    task.end_date = date(2024, 2, 10)
    task.save()

    response = client_for(employee).get('/api/calendar/', {'year': 2024, 'month': 2})

    assert response.status_code == 200
    assert response.data['leading_blank_days'] == 4
    assert len(response.data['days']) == 29
    tenth = response.data['days'][9]
    assert tenth['date'] == '2024-02-10'
    assert [t['id'] for t in tenth['tasks']] == [task.pk]


def test_calendar_rejects_bad_month(client_for, employee):
    assert client_for(employee).get('/api/calendar/', {'year': 2024, 'month': 13}).status_code == 400


def test_navigation_by_role(client_for, employee, manager, admin):
    def keys(user):
        return [item['key'] for item in client_for(user).get('/api/navigation/').data['items']]

    base = ['dashboard', 'projects', 'tasks', 'time_tracking', 'calendar']
    assert keys(employee) == base
    assert keys(manager) == base + ['reports']
    assert keys(admin) == base + ['reports', 'users']


def test_anonymous_requests_are_rejected(api_client):
    assert api_client.get('/api/dashboard/').status_code == 401
