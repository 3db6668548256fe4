# Build paths inside the project like this: os.path.join(BASE_DIR, ...)
import os

import sentry_sdk
from sentry_sdk.integrations.django import DjangoIntegration
BASE_DIR = os.path.dirname(os.path.dirname(__file__))

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = os.environ.get(
    "DJANGO_SECRET_KEY",
    "tgs-dev-+3v!x0c#q2n8w@k5m1r7z%p4d9h6j^y_a8e2u0t5b3f1l7o",
)

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = os.environ.get("DEBUG") in ["1", "true", "True"]

ALLOWED_HOSTS = os.environ.get("ALLOWED_HOSTS", "*").split(",")

# Application definition

INSTALLED_APPS = ("django.contrib.admin", "django.contrib.auth",
                  "django.contrib.contenttypes", "django.contrib.sessions",
                  "django.contrib.messages", "django.contrib.staticfiles",
                  "tgspain.apps.core", "tgspain.apps.events",
                  "tgspain.apps.workshops",
                  "bootstrap4", "qr_code",)

MIDDLEWARE = (
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    "tgspain.apps.core.middleware.Login",
    "tgspain.apps.core.middleware.VerificationGate",
)

ROOT_URLCONF = "tgspain.urls"

WSGI_APPLICATION = "tgspain.wsgi.application"

MYSQL_DATABASE = os.environ.get("MYSQL_DATABASE")
MYSQL_USER = os.environ.get("MYSQL_USER", "root")
MYSQL_PASSWORD = os.environ.get("MYSQL_PASSWORD", "")
MYSQL_HOST = os.environ.get("MYSQL_HOST", "127.0.0.1")
MYSQL_PORT = os.environ.get("MYSQL_PORT", "3306")

if MYSQL_DATABASE:
    DATABASES = {
        "default": {
            "ENGINE":   "django.db.backends.mysql",
            "OPTIONS":  {"charset": "utf8mb4"},
            "NAME":     MYSQL_DATABASE,
            "USER":     MYSQL_USER,
            "PASSWORD": MYSQL_PASSWORD,
            "HOST":     MYSQL_HOST,
            "PORT":     MYSQL_PORT,
            "CONN_MAX_AGE": 60,
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": os.path.join(BASE_DIR, "tgspain.sqlite3"),
        }
    }

# Error monitoring
# https://docs.sentry.io/platforms/python/integrations/django/
if os.environ.get("SENTRY_DSN"):
    sentry_sdk.init(
        dsn=os.environ["SENTRY_DSN"],
        integrations=[DjangoIntegration()],
        traces_sample_rate=float(os.environ.get("SENTRY_TRACES_SAMPLE_RATE", "0.2")),
        send_default_pii=False,
        )

# Internationalization

LANGUAGE_CODE = "es-es"

TIME_ZONE = "Europe/Madrid"

# Event days and check-in dates are always evaluated in this zone
EVENT_TIME_ZONE = "Europe/Madrid"

USE_I18N = True

USE_TZ = True

STATIC_URL = "/static/"
STATIC_ROOT = os.path.join(BASE_DIR, "staticfiles")

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [
            os.path.join(BASE_DIR, "tgspain", "templates"),
        ],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.contrib.auth.context_processors.auth",
                "django.template.context_processors.debug",
                "django.template.context_processors.i18n",
                "django.template.context_processors.media",
                "django.contrib.messages.context_processors.messages",
                "django.template.context_processors.request",
            ],
        },
    },
]

MESSAGE_STORAGE = "django.contrib.messages.storage.session.SessionStorage"

# Login/Logout redirects
LOGIN_REDIRECT_URL = "/"
LOGIN_URL = "/accounts/login/"
LOGOUT_REDIRECT_URL = "/accounts/login/"

PLATFORM_SETTINGS_DIR = os.path.join(BASE_DIR, "tgspain", "platform_settings")

# Used to build absolute links in outgoing emails
PUBLIC_SITE_URL = os.environ.get("PUBLIC_SITE_URL", "http://localhost:8000")

# Amazon SES
AWS_SES_REGION = os.environ.get("AWS_SES_REGION", "")
AWS_SES_ACCESS_KEY_ID = os.environ.get("AWS_SES_ACCESS_KEY_ID", "")
AWS_SES_SECRET_ACCESS_KEY = os.environ.get("AWS_SES_SECRET_ACCESS_KEY", "")
AWS_SES_CONFIGURATION_SET = os.environ.get("AWS_SES_CONFIGURATION_SET", "")
AWS_MAILMANAGER_ADDRESS_LIST = os.environ.get("AWS_MAILMANAGER_ADDRESS_LIST", "")
DEFAULT_FROM_EMAIL = os.environ.get(
    "DEFAULT_FROM_EMAIL",
    "Technovation Girls España <no-reply@technovationgirls.es>",
)
EMAIL_REPLY_TO = os.environ.get("EMAIL_REPLY_TO", "")

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
    },
    "filesystem": {
        "BACKEND": "django.core.cache.backends.filebased.FileBasedCache",
        "LOCATION": os.environ.get("TGSPAIN_CACHE_DIR", "/var/tmp/tgspain_cache"),
    }
}

DEFAULT_AUTO_FIELD = "django.db.models.AutoField"

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "simple",
        },
    },
    "loggers": {
        "tgspain": {
            "handlers": ["console"],
            "level": os.environ.get("TGSPAIN_LOG_LEVEL", "INFO"),
        },
    },
}

if os.environ.get("TGSPAIN_LOG_QUERIES"):
    LOGGING["loggers"]["django.db.backends"] = {
        "handlers": ["console"],
        "level": "DEBUG",
    }
