"""Settings used by the test suite: in-memory SQLite, fast hashing."""
import os

os.environ.setdefault('SECRET_KEY', 'tasktrack-test-secret')
os.environ.setdefault('DB_NAME', ':memory:')
os.environ.setdefault('DB_ENGINE', 'django.db.backends.sqlite3')

from .settings import *  # noqa: E402,F401,F403

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

LOGGING['root']['level'] = 'CRITICAL'  # noqa: F405
for _logger in LOGGING['loggers'].values():  # noqa: F405
    _logger['level'] = 'CRITICAL'
