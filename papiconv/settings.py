"""
Django settings for papiconv.

Only the pieces the management commands need: the two apps, logging, and the
converter options. Every converter option can be overridden from the
environment.
"""

import os

SECRET_KEY = os.environ.get("PAPICONV_SECRET_KEY", "papiconv-local-only")

DEBUG = os.environ.get("PAPICONV_DEBUG", "") == "1"

ALLOWED_HOSTS = []

INSTALLED_APPS = [
    'papiconv.converter_core',
    'papiconv.converter',
]

# Conversion never goes through the ORM
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

USE_TZ = True
TIME_ZONE = 'UTC'

# Converter options

# Width of the INFO.Value column; longer setting values are cut on import
PAPICONV_MAX_VALUE_LENGTH = int(os.environ.get("PAPICONV_MAX_VALUE_LENGTH", "50"))

# Blank tournament file copied before an import. When unset, a fresh store with
# the INFO/JOUEUR tables and the EXEMPT row is created instead.
PAPICONV_TEMPLATE = os.environ.get("PAPICONV_TEMPLATE") or None

PAPICONV_LOG_LEVEL = os.environ.get("PAPICONV_LOG_LEVEL", "WARNING")

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'simple': {
            'format': '%(asctime)s - %(levelname)s - %(name)s - %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'simple',
        },
    },
    'loggers': {
        'papiconv': {
            'handlers': ['console'],
            'level': PAPICONV_LOG_LEVEL,
            'propagate': False,
        },
    },
}
