"""
Test settings for store_server project.
"""

from .base import *

SECRET_KEY = 'test-secret-key-not-for-production'

# File-backed so threaded tests share one database; writers take the lock at BEGIN
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': BASE_DIR / 'test_db.sqlite3',
        'OPTIONS': {
            'transaction_mode': 'IMMEDIATE',
            'timeout': 20,
        },
        'TEST': {
            'NAME': BASE_DIR / 'test_db.sqlite3',
        },
    }
}


# Disable migrations for faster testing
class DisableMigrations:
    def __contains__(self, item):
        return True

    def __getitem__(self, item):
        return None


MIGRATION_MODULES = DisableMigrations()

# Use faster password hasher for testing
PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.MD5PasswordHasher',
]

# Disable logging configuration during tests
LOGGING_CONFIG = None

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
    }
}

CSRF_COOKIE_SECURE = False
SESSION_COOKIE_SECURE = False

EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'

SIMPLE_JWT = dict(SIMPLE_JWT, SIGNING_KEY=SECRET_KEY)

PAYMENT_GATEWAY = dict(
    PAYMENT_GATEWAY,
    KEY_ID='rzp_test_key',
    KEY_SECRET='test_key_secret',
    WEBHOOK_SECRET='test_webhook_secret',
)
