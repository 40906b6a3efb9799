"""
Django settings for the trash talk song backend.
"""
import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent

# Initialize dotenv so local .env values become settings
load_dotenv(BASE_DIR / '.env')


def env_bool(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY', 'dev-insecure-secret-key')
DEBUG = env_bool('DJANGO_DEBUG', True)
ALLOWED_HOSTS = [host for host in os.environ.get('DJANGO_ALLOWED_HOSTS', 'localhost,127.0.0.1').split(',') if host]

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'rest_framework',
    'api',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'api.middleware.ContentTypeMiddleware',
]

ROOT_URLCONF = 'trash_talk_project.urls'

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

WSGI_APPLICATION = 'trash_talk_project.wsgi.application'

DATABASES = {
    'default': {
        'ENGINE': os.environ.get('DB_ENGINE', 'django.db.backends.sqlite3'),
        'NAME': os.environ.get('DB_NAME', str(BASE_DIR / 'db.sqlite3')),
        'USER': os.environ.get('DATABASE_USER', ''),
        'PASSWORD': os.environ.get('DATABASE_PASS', ''),
        'HOST': os.environ.get('DB_HOST', ''),
        'PORT': os.environ.get('DB_PORT', ''),
    }
}

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True

STATIC_URL = 'static/'
MEDIA_URL = '/media/'
MEDIA_ROOT = os.environ.get('MEDIA_ROOT', str(BASE_DIR / 'media'))

REST_FRAMEWORK = {
    'DEFAULT_PERMISSION_CLASSES': ['rest_framework.permissions.AllowAny'],
    'DEFAULT_RENDERER_CLASSES': ['rest_framework.renderers.JSONRenderer'],
}

# Celery
CELERY_BROKER_URL = os.environ.get('CELERY_BROKER_URL', 'redis://localhost:6379/0')
CELERY_RESULT_BACKEND = os.environ.get('CELERY_RESULT_BACKEND', CELERY_BROKER_URL)
CELERY_TASK_ALWAYS_EAGER = env_bool('CELERY_TASK_ALWAYS_EAGER', False)
CELERY_TASK_DEFAULT_QUEUE = 'song-generate'
CELERY_TASK_ACKS_LATE = True
CELERY_WORKER_CONCURRENCY = int(os.environ.get('CELERY_WORKER_CONCURRENCY', '3'))
CELERY_WORKER_PREFETCH_MULTIPLIER = 1
CELERY_TASK_SERIALIZER = 'json'
CELERY_ACCEPT_CONTENT = ['json']

# Song generation
SONG_PROVIDER_API_KEY = os.environ.get('SONG_PROVIDER_API_KEY', '')
SONG_PROVIDER_BASE_URL = os.environ.get('SONG_PROVIDER_BASE_URL', 'https://api.suno.ai/v1')
SONG_PROVIDER_TIMEOUT = float(os.environ.get('SONG_PROVIDER_TIMEOUT', '30'))
SONG_GENERATION_OFFLINE = env_bool('SONG_GENERATION_OFFLINE', False)
SONG_STUB_DELAY = float(os.environ.get('SONG_STUB_DELAY', '1.0'))
SONG_POLL_INTERVAL = float(os.environ.get('SONG_POLL_INTERVAL', '5'))
SONG_MAX_POLL_ATTEMPTS = int(os.environ.get('SONG_MAX_POLL_ATTEMPTS', '60'))
SONG_DEFAULT_DURATION = int(os.environ.get('SONG_DEFAULT_DURATION', '45'))
SONG_PREVIEW_SECONDS = float(os.environ.get('SONG_PREVIEW_SECONDS', '15'))
SONG_PREVIEW_FADE = float(os.environ.get('SONG_PREVIEW_FADE', '0.2'))
SONG_PREVIEW_FORMAT = os.environ.get('SONG_PREVIEW_FORMAT', 'mp3')
SONG_SIGNED_URL_TTL = int(os.environ.get('SONG_SIGNED_URL_TTL', '600'))
SONG_ENTITLEMENT_CHECKER = os.environ.get('SONG_ENTITLEMENT_CHECKER', 'api.entitlements.deny_all')
SONG_JOB_STORE = os.environ.get('SONG_JOB_STORE', 'django')
FFMPEG_BINARY = os.environ.get('FFMPEG_BINARY', 'ffmpeg')
FFPROBE_BINARY = os.environ.get('FFPROBE_BINARY', 'ffprobe')

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{asctime} {levelname} {name} {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'WARNING',
    },
    'loggers': {
        'api': {
            'handlers': ['console'],
            'level': os.environ.get('SONG_LOG_LEVEL', 'INFO'),
            'propagate': False,
        },
        'trash_talk_project': {
            'handlers': ['console'],
            'level': os.environ.get('SONG_LOG_LEVEL', 'INFO'),
            'propagate': False,
        },
    },
}
