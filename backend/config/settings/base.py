import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent.parent


def get_env(name, default=None, required=False, cast=None):
    """
    Read a setting from the environment.
    Raises when a required value is missing so misconfigured deploys fail at boot.
    """
    value = os.environ.get(name)
    if value is None or value == "":
        if required:
            raise RuntimeError(f"Environment variable {name} is required.")
        value = default
    if cast is not None and value is not None:
        if cast is bool:
            return str(value).strip().lower() in {"1", "true", "yes", "on"}
        return cast(value)
    return value


DEBUG = False

SECRET_KEY = get_env("SECRET_KEY", "insecure-placeholder-key")

ALLOWED_HOSTS = ["localhost", "127.0.0.1"]

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "django_htmx",
    "catalog",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "whitenoise.middleware.WhiteNoiseMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    "django_htmx.middleware.HtmxMiddleware",
]

ROOT_URLCONF = "config.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [BASE_DIR / "templates"],
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

DB_ENGINE = get_env("DB_ENGINE", "sqlite")

if DB_ENGINE == "postgres":
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": get_env("DB_NAME", "catalog"),
            "USER": get_env("DB_USER", "catalog"),
            "PASSWORD": get_env("DB_PASSWORD", ""),
            "HOST": get_env("DB_HOST", "localhost"),
            "PORT": get_env("DB_PORT", "5432"),
            "CONN_MAX_AGE": get_env("DB_CONN_MAX_AGE", 60, cast=int),
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "db.sqlite3",
        }
    }

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator"},
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator"},
    {"NAME": "django.contrib.auth.password_validation.CommonPasswordValidator"},
    {"NAME": "django.contrib.auth.password_validation.NumericPasswordValidator"},
]

LANGUAGE_CODE = "en-us"
TIME_ZONE = get_env("TIME_ZONE", "UTC")
USE_I18N = True
USE_TZ = True

STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

LOGIN_URL = "admin:login"

# Large legacy exports arrive as a single upload.
DATA_UPLOAD_MAX_MEMORY_SIZE = get_env("DATA_UPLOAD_MAX_MEMORY_SIZE", 50 * 1024 * 1024, cast=int)
FILE_UPLOAD_MAX_MEMORY_SIZE = DATA_UPLOAD_MAX_MEMORY_SIZE

CATALOG_IMPORT = {
    # "completed" blocks re-imports of completed or running files; "any" also blocks failed/cancelled ones.
    "DUPLICATE_POLICY": get_env("CATALOG_IMPORT_DUPLICATE_POLICY", "completed"),
    "PROGRESS_SAVE_INTERVAL": get_env("CATALOG_IMPORT_PROGRESS_INTERVAL", 10, cast=int),
    "ERROR_PREVIEW_LIMIT": 10,
    "IMPORTED_EMAIL_DOMAIN": "ar.imported.local",
    "CLASSIFIER": {},
}

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {
            "format": "%(asctime)s - %(levelname)s - %(name)s - %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "simple",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": get_env("LOG_LEVEL", "INFO"),
    },
    "loggers": {
        "catalog": {
            "handlers": ["console"],
            "level": get_env("CATALOG_LOG_LEVEL", "INFO"),
            "propagate": False,
        },
    },
}
