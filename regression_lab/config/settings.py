"""
Django settings for the regression lab.

Environment variables:
    REGRESSION_LAB_SECRET_KEY, REGRESSION_LAB_DEBUG,
    REGRESSION_LAB_MEDIA_ROOT, REGRESSION_LAB_LOG_LEVEL
"""
import os
from pathlib import Path

from shared.utils.logging_utils import LOG_FORMAT

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get('REGRESSION_LAB_SECRET_KEY', 'django-insecure-regression-lab-dev-key')

DEBUG = os.environ.get('REGRESSION_LAB_DEBUG', '1').lower() in ('1', 'true', 'yes')

ALLOWED_HOSTS = ['*'] if DEBUG else ['localhost', '127.0.0.1']

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'workbench',
    'dataset_app',
    'training_app',
    'inference_app',
    'model_registry',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'config.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'config.wsgi.application'

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': BASE_DIR / 'db.sqlite3',
    }
}

# The workbench pages keep no per-user rows
SESSION_ENGINE = 'django.contrib.sessions.backends.signed_cookies'
MESSAGE_STORAGE = 'django.contrib.messages.storage.cookie.CookieStorage'

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True

STATIC_URL = 'static/'

MEDIA_ROOT = os.environ.get('REGRESSION_LAB_MEDIA_ROOT', str(BASE_DIR / 'media'))
MEDIA_URL = 'media/'

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

DATA_UPLOAD_MAX_MEMORY_SIZE = 10 * 1024 * 1024

REGRESSION_LAB = {
    'EPOCHS': 50,
    'LEARNING_RATE': 0.2,
    'HIDDEN_UNITS': 16,
    'PREDICTION_TIMEOUT': 30.0,
    'PREDICTION_WORKERS': 4,
}

LOG_LEVEL = os.environ.get('REGRESSION_LAB_LOG_LEVEL', 'INFO').upper()

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'default': {'format': LOG_FORMAT},
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'default',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': LOG_LEVEL,
    },
    'loggers': {
        'django': {
            'handlers': ['console'],
            'level': 'WARNING',
            'propagate': False,
        },
    },
}
