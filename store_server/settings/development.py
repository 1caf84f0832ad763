"""
Development settings for store_server project.
"""

from decouple import config
from .base import *

DEBUG = config('DEBUG', default=True, cast=bool)

CORS_ALLOW_ALL_ORIGINS = True

# Email backend for development
EMAIL_BACKEND = config('EMAIL_BACKEND', default='django.core.mail.backends.console.EmailBackend')

# Logging for development, console only
LOGGING['handlers'] = {'console': LOGGING['handlers']['console']}
LOGGING['root']['handlers'] = ['console']
for _logger in LOGGING['loggers'].values():
    _logger['handlers'] = ['console']
LOGGING['handlers']['console']['level'] = config('LOG_LEVEL', default='DEBUG')
LOGGING['root']['level'] = config('LOG_LEVEL', default='DEBUG')
