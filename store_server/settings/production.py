"""
Production settings for store_server project.
"""

from decouple import config
from .base import *

DEBUG = False

SECURE_SSL_REDIRECT = config('SECURE_SSL_REDIRECT', default=True, cast=bool)
SECURE_PROXY_SSL_HEADER = ('HTTP_X_FORWARDED_PROTO', 'https')

DATABASES['default']['CONN_HEALTH_CHECKS'] = True

LOG_DIR.mkdir(parents=True, exist_ok=True)
