from datetime import timedelta

import pytest
from django.utils import timezone

from admin_site.models import ActivityLog
from management.models import Notification, TimeLog

pytestmark = pytest.mark.django_db


def _manual(client, task, **overrides):
    payload = {
        'task_id': task.pk,
        'date': (timezone.localdate() - timedelta(days=1)).isoformat(),
        'start_time': '09:00',
        'end_time': '10:30',
    }
    payload.update(overrides)
    return client.post('/api/time-logs/manual/', payload, format='json')


def test_start_and_stop_timer(client_for, employee, task):
    client = client_for(employee)

    response = client.post('/api/time-logs/start/', {'task_id': task.pk}, format='json')
    assert response.status_code == 201
    assert response.data['is_running'] is True
    assert response.data['elapsed_seconds'] is not None

    active = client.get('/api/time-logs/active/')
    assert active.status_code == 200
    assert active.data['id'] == response.data['id']

    stopped = client.post('/api/time-logs/stop/')
    assert stopped.status_code == 200
    assert stopped.data['is_running'] is False
    assert stopped.data['duration_minutes'] == 0
    assert stopped.data['duration_display'] == '0m'


def test_rapid_double_start_keeps_one_running_log(client_for, employee, task):
    client = client_for(employee)

    first = client.post('/api/time-logs/start/', {'task_id': task.pk}, format='json')
    second = client.post('/api/time-logs/start/', {'task_id': task.pk}, format='json')

    assert first.status_code == 201
    assert second.status_code == 409
    assert TimeLog.objects.filter(user=employee, end_time__isnull=True).count() == 1


def test_stop_without_timer(client_for, employee):
    response = client_for(employee).post('/api/time-logs/stop/')
    assert response.status_code == 400
    assert response.data['detail'] == 'No active timer to stop'


def test_active_without_timer(client_for, employee):
    assert client_for(employee).get('/api/time-logs/active/').status_code == 404


def test_start_on_invisible_task(client_for, outsider, task):
    response = client_for(outsider).post('/api/time-logs/start/', {'task_id': task.pk}, format='json')
    assert response.status_code == 400
    assert 'task_id' in response.data


def test_manual_entry_is_always_pending(client_for, employee, task, admin):
    response = _manual(client_for(employee), task, approval_status='approved')

    assert response.status_code == 201
    assert response.data['approval_status'] == 'pending'
    assert response.data['duration_minutes'] == 90
    assert response.data['duration_display'] == '1h 30m'
    assert Notification.objects.filter(user=admin, type='approval_request').exists()


def test_manual_entry_rejects_inverted_range(client_for, employee, task):
    response = _manual(client_for(employee), task, start_time='11:00', end_time='10:00')
    assert response.status_code == 400
    assert not TimeLog.objects.exists()


def test_admin_approves_entry(client_for, employee, task, admin):
    log_id = _manual(client_for(employee), task).data['id']

    response = client_for(admin).post(f'/api/time-logs/{log_id}/approve/')

    assert response.status_code == 200
    assert response.data['approval_status'] == 'approved'
    assert Notification.objects.filter(user=employee, type='status_change').count() == 1
    assert ActivityLog.objects.filter(action='timelog_approve', target_id=log_id).exists()


def test_admin_rejects_entry(client_for, employee, task, admin):
    log_id = _manual(client_for(employee), task).data['id']

    response = client_for(admin).post(f'/api/time-logs/{log_id}/reject/')

    assert response.status_code == 200
    assert TimeLog.objects.get(pk=log_id).approval_status == 'rejected'


def test_employee_cannot_approve(client_for, employee, task):
    client = client_for(employee)
    log_id = _manual(client, task).data['id']

    assert client.post(f'/api/time-logs/{log_id}/approve/').status_code == 403
    assert TimeLog.objects.get(pk=log_id).approval_status == 'pending'


def test_running_timer_cannot_be_reviewed(client_for, employee, task, admin):
    log_id = client_for(employee).post('/api/time-logs/start/', {'task_id': task.pk}, format='json').data['id']
    assert client_for(admin).post(f'/api/time-logs/{log_id}/approve/').status_code == 400


def test_owner_cannot_change_approval_status(client_for, employee, task):
    client = client_for(employee)
    log_id = _manual(client, task).data['id']

    response = client.patch(f'/api/time-logs/{log_id}/', {'approval_status': 'approved'}, format='json')

    assert response.status_code == 200
    assert TimeLog.objects.get(pk=log_id).approval_status == 'pending'


def test_rejected_entry_is_frozen_for_owner(client_for, employee, task, admin):
    client = client_for(employee)
    log_id = _manual(client, task).data['id']
    client_for(admin).post(f'/api/time-logs/{log_id}/reject/')

    response = client.patch(f'/api/time-logs/{log_id}/', {'start_time': timezone.now().isoformat()}, format='json')
    assert response.status_code == 403


def test_owner_deletes_pending_entry_only(client_for, employee, task):
    client = client_for(employee)
    pending_id = _manual(client, task).data['id']
    now = timezone.now()
    approved = TimeLog.objects.create(
        user=employee, task=task, start_time=now - timedelta(hours=1), end_time=now, date=now.date()
    )

    assert client.delete(f'/api/time-logs/{pending_id}/').status_code == 204
    assert client.delete(f'/api/time-logs/{approved.pk}/').status_code == 403


def test_list_filters(client_for, employee, task, manager):
    client = client_for(employee)
    _manual(client, task)
    now = timezone.now()
    TimeLog.objects.create(user=employee, task=task, start_time=now - timedelta(hours=1), end_time=now, date=now.date())

    pending = client.get('/api/time-logs/', {'approval_status': 'pending'})
    assert [row['approval_status'] for row in pending.data] == ['pending']

    today = client.get('/api/time-logs/', {'date': now.date().isoformat()})
    assert len(today.data) == 1

    # Project manager sees logs of the projects they manage
    assert len(client_for(manager).get('/api/time-logs/').data) == 2


def test_stopped_log_cannot_be_reopened(client_for, employee, task):
    client = client_for(employee)
    now = timezone.now()
    stopped = TimeLog.objects.create(
        user=employee, task=task, start_time=now - timedelta(hours=1), end_time=now, date=now.date()
    )
    client.post('/api/time-logs/start/', {'task_id': task.pk}, format='json')

    response = client.patch(f'/api/time-logs/{stopped.pk}/', {'end_time': None}, format='json')

    assert response.status_code == 400
    assert 'end_time' in response.data
    stopped.refresh_from_db()
    assert stopped.end_time is not None
    assert TimeLog.objects.filter(user=employee, end_time__isnull=True).count() == 1


@pytest.mark.parametrize('params', [
    {'user': 'abc'},
    {'date': 'notadate'},
    {'approval_status': 'maybe'},
])
def test_invalid_list_filters_are_rejected(client_for, employee, params):
    response = client_for(employee).get('/api/time-logs/', params)
    assert response.status_code == 400
    assert set(params) <= set(response.data)
