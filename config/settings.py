"""
Django settings for the civic complaints service.
"""

import os
from pathlib import Path
import environ

# Build paths inside the project
BASE_DIR = Path(__file__).resolve().parent.parent

# Environment variables
env = environ.Env(DEBUG=(bool, False))
environ.Env.read_env(os.path.join(BASE_DIR, ".env"))

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = env("SECRET_KEY", default="django-insecure-change-this-key")

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = env("DEBUG")

ALLOWED_HOSTS = env.list("ALLOWED_HOSTS", default=["localhost", "127.0.0.1"])

# Application definition
INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    # Third party apps
    "rest_framework",
    "corsheaders",
    # Local apps
    "complaints",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "corsheaders.middleware.CorsMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "config.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "config.wsgi.application"

# Database
DATABASES = {"default": env.db("DATABASE_URL", default="sqlite:///db.sqlite3")}

# Password validation
AUTH_PASSWORD_VALIDATORS = [
    {
        "NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator",
    },
    {
        "NAME": "django.contrib.auth.password_validation.MinimumLengthValidator",
    },
    {
        "NAME": "django.contrib.auth.password_validation.CommonPasswordValidator",
    },
    {
        "NAME": "django.contrib.auth.password_validation.NumericPasswordValidator",
    },
]

# Internationalization
LANGUAGE_CODE = "en-us"
TIME_ZONE = env("TIME_ZONE", default="Asia/Kolkata")
USE_I18N = True
USE_TZ = True

# Static files (CSS, JavaScript, Images)
STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

# Default primary key field type
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# Photos arrive base64 encoded inside JSON bodies
DATA_UPLOAD_MAX_MEMORY_SIZE = env.int("DATA_UPLOAD_MAX_MEMORY_SIZE", default=15 * 1024 * 1024)

# REST Framework
REST_FRAMEWORK = {
    "DEFAULT_RENDERER_CLASSES": [
        "rest_framework.renderers.JSONRenderer",
    ],
    "DEFAULT_PARSER_CLASSES": [
        "rest_framework.parsers.JSONParser",
    ],
    # Phone login hands out an opaque token; requests are not authenticated here
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.AllowAny",
    ],
    "UNAUTHENTICATED_USER": None,
    "EXCEPTION_HANDLER": "complaints.api.exceptions.error_handler",
}

# CORS
CORS_ALLOW_ALL_ORIGINS = DEBUG
CORS_ALLOWED_ORIGINS = env.list("CORS_ALLOWED_ORIGINS", default=[])

# Community verification consensus
VERIFICATION_YES_THRESHOLD = env.int("VERIFICATION_YES_THRESHOLD", default=3)
VERIFICATION_NO_THRESHOLD = env.int("VERIFICATION_NO_THRESHOLD", default=2)

# Geospatial queries
KM_PER_DEGREE = env.float("KM_PER_DEGREE", default=111.0)
NEARBY_DEFAULT_RADIUS_KM = env.float("NEARBY_DEFAULT_RADIUS_KM", default=5.0)
NEARBY_MAX_VERIFICATIONS = env.int("NEARBY_MAX_VERIFICATIONS", default=2)
FIRST_IN_AREA_RADIUS_KM = env.float("FIRST_IN_AREA_RADIUS_KM", default=0.5)

# Image classification
COMPLAINT_CLASSIFIER = env(
    "COMPLAINT_CLASSIFIER", default="complaints.services.classifier.KeywordClassifier"
)
CLASSIFIER_API_URL = env("CLASSIFIER_API_URL", default="http://localhost:9100/classify")
CLASSIFIER_TIMEOUT = env.int("CLASSIFIER_TIMEOUT", default=10)

# RabbitMQ Configuration
EVENTS_ENABLED = env.bool("EVENTS_ENABLED", default=True)
RABBITMQ_HOST = env("RABBITMQ_HOST", default="localhost")
RABBITMQ_PORT = env.int("RABBITMQ_PORT", default=5672)
RABBITMQ_USER = env("RABBITMQ_USER", default="guest")
RABBITMQ_PASSWORD = env("RABBITMQ_PASSWORD", default="guest")
RABBITMQ_VHOST = env("RABBITMQ_VHOST", default="/")

# RabbitMQ Queue Names
RABBITMQ_COMPLAINT_STATUS_CHANGED_QUEUE = env(
    "RABBITMQ_COMPLAINT_STATUS_CHANGED_QUEUE", default="complaint.status.changed"
)
RABBITMQ_COMPLAINT_VERIFIED_QUEUE = env(
    "RABBITMQ_COMPLAINT_VERIFIED_QUEUE", default="complaint.verified"
)
RABBITMQ_BADGE_UNLOCKED_QUEUE = env("RABBITMQ_BADGE_UNLOCKED_QUEUE", default="badge.unlocked")
RABBITMQ_CLASSIFICATION_COMPLETED_QUEUE = env(
    "RABBITMQ_CLASSIFICATION_COMPLETED_QUEUE", default="classification.completed"
)

# Logging Configuration
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "[{levelname}] {asctime} {name} - {message}",
            "style": "{",
        },
        "simple": {
            "format": "[{levelname}] {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": "INFO",
    },
    "loggers": {
        "complaints": {
            "handlers": ["console"],
            "level": env("COMPLAINTS_LOG_LEVEL", default="INFO"),
            "propagate": False,
        },
        "django": {
            "handlers": ["console"],
            "level": "INFO",
            "propagate": False,
        },
    },
}
