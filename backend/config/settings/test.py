from .base import *

# Test settings trade durability for speed.
DEBUG = False

SECRET_KEY = "test-secret-key"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

LOGGING["root"]["level"] = "WARNING"  # type: ignore
LOGGING["loggers"]["catalog"]["level"] = "WARNING"  # type: ignore
