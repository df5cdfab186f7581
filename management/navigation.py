from user.models import User

ALL_ROLES = (User.ROLE_ADMIN, User.ROLE_PROJECT_MANAGER, User.ROLE_EMPLOYEE)

NAV_ITEMS = [
    {'key': 'dashboard', 'label': 'Dashboard', 'path': '/', 'roles': ALL_ROLES},
    {'key': 'projects', 'label': 'Projects', 'path': '/projects', 'roles': ALL_ROLES},
    {'key': 'tasks', 'label': 'Tasks', 'path': '/tasks', 'roles': ALL_ROLES},
    {'key': 'time_tracking', 'label': 'Time Tracking', 'path': '/time-tracking', 'roles': ALL_ROLES},
    {'key': 'calendar', 'label': 'Calendar', 'path': '/calendar', 'roles': ALL_ROLES},
    {'key': 'reports', 'label': 'Reports', 'path': '/reports',
     'roles': (User.ROLE_ADMIN, User.ROLE_PROJECT_MANAGER)},
    {'key': 'users', 'label': 'Users', 'path': '/users', 'roles': (User.ROLE_ADMIN,)},
]


def items_for_role(role):
    """Menu entries visible to ``role``; unknown roles get the employee menu."""
    if role not in ALL_ROLES:
        role = User.ROLE_EMPLOYEE
    return [
        {k: v for k, v in item.items() if k != 'roles'}
        for item in NAV_ITEMS
        if role in item['roles']
    ]
