import os
from pathlib import Path

from upload_app import conf

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "dev-only-not-secret")
DEBUG = os.getenv("DJANGO_DEBUG", "1") == "1"
ALLOWED_HOSTS = [h for h in os.getenv("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1").split(",") if h]

INSTALLED_APPS = [
    'django.contrib.staticfiles',
    'upload_app',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'django_core.urls'
WSGI_APPLICATION = 'django_core.wsgi.application'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.request',
            ],
        },
    },
]

# No persistence: the widget keeps nothing between requests.
DATABASES = {}

STATIC_URL = 'static/'
USE_TZ = True

GITHUB_API_URL = os.getenv("GITHUB_API_URL", conf.GITHUB_API_URL)
GITHUB_TIMEOUT = float(os.getenv("GITHUB_TIMEOUT", conf.GITHUB_TIMEOUT))
UPLOAD_REPO_OWNER = os.getenv("UPLOAD_REPO_OWNER", conf.REPO_OWNER)
UPLOAD_REPO_NAME = os.getenv("UPLOAD_REPO_NAME", conf.REPO_NAME)
UPLOAD_BRANCH = os.getenv("UPLOAD_BRANCH", conf.BRANCH)
UPLOAD_BASE_BRANCH = os.getenv("UPLOAD_BASE_BRANCH", conf.BASE_BRANCH)
UPLOAD_TARGET_PATH = os.getenv("UPLOAD_TARGET_PATH", conf.TARGET_PATH)
UPLOAD_MAX_BYTES = int(os.getenv("UPLOAD_MAX_BYTES", conf.MAX_BYTES))
UPLOAD_ENCRYPTED_TOKEN = os.getenv("UPLOAD_ENCRYPTED_TOKEN", conf.ENCRYPTED_TOKEN)

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'simple': {
            'format': '{asctime} {levelname} {name}: {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'simple',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'WARNING',
    },
    'loggers': {
        'upload_app': {
            'handlers': ['console'],
            'level': os.getenv('DJANGO_LOG_LEVEL', 'INFO'),
            'propagate': False,
        },
    },
}
