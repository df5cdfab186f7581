import pytest
from rest_framework.test import APIClient

from management.models import Project, ProjectMember, Task
from user.models import User

PASSWORD = 'Str0ng-pass-123'


@pytest.fixture
def make_user(db):
    def _make(email, role=User.ROLE_EMPLOYEE, **extra):
        extra.setdefault('full_name', email.split('@')[0].title())
        return User.objects.create_user(email=email, password=PASSWORD, role=role, **extra)
    return _make


@pytest.fixture
def admin(make_user):
    return make_user('admin@example.com', User.ROLE_ADMIN)


@pytest.fixture
def manager(make_user):
    return make_user('manager@example.com', User.ROLE_PROJECT_MANAGER)


@pytest.fixture
def employee(make_user):
    return make_user('employee@example.com')


@pytest.fixture
def outsider(make_user):
    return make_user('outsider@example.com')


@pytest.fixture
def project(manager, employee):
    project = Project.objects.create(name='Apollo', manager=manager)
    ProjectMember.objects.create(project=project, user=employee)
    return project


@pytest.fixture
def task(project, manager, employee):
    return Task.objects.create(
        name='Write launch checklist',
        project=project,
        assigned_to=employee,
        created_by=manager,
    )


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def client_for():
    def _client(user):
        client = APIClient()
        client.force_authenticate(user=user)
        return client
    return _client
