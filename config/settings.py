"""
OrderDesk – Django Settings (Infrastructure Only)
==================================================
Django serves as the storage container for OrderDesk: connection
handling, transactions and the SQLite backend. No ORM models are
declared; every table is owned by the packaged SQL migrations.

Application options live in the ORDERDESK dict and are read once by
core.config.options.OrderDeskOptions.from_settings().
"""

import os
from pathlib import Path

# ── Paths ─────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent.parent

# ── Security ──────────────────────────────────────────────────
SECRET_KEY = os.environ.get("ORDERDESK_SECRET_KEY", "orderdesk-local-desktop-key")

DEBUG = False

ALLOWED_HOSTS = []

# ── Installed Apps ────────────────────────────────────────────
INSTALLED_APPS = [
    "core.bootstrap",
]

# ── Database ──────────────────────────────────────────────────
# One embedded SQLite file. The timeout is the busy timeout (seconds)
# a writer waits on a locked database before failing.
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.environ.get(
            "ORDERDESK_DB_PATH",
            str(BASE_DIR / "data" / "orderdesk.sqlite3"),
        ),
        "OPTIONS": {
            "timeout": 5,
        },
        "TEST": {
            "NAME": None,
        },
    }
}

# ── OrderDesk Options ─────────────────────────────────────────
ORDERDESK = {
    "DATABASE_ALIAS": "default",
    "MIGRATIONS_DIR": os.environ.get("ORDERDESK_MIGRATIONS_DIR") or None,
    "DEBUG_SQL": False,
    "LOCALE": "en",
    "DEFAULT_ITEM_CURRENCY": "USD",
    "DEFAULT_PRODUCT_CURRENCY": "DZD",
    "DEFAULT_PAGE_SIZE": 20,
    "MAX_PAGE_SIZE": 100,
    "WAL_JOURNAL": True,
}

# ── Logging ───────────────────────────────────────────────────
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "plain",
        },
    },
    "loggers": {
        "orderdesk": {
            "handlers": ["console"],
            "level": os.environ.get("ORDERDESK_LOG_LEVEL", "INFO"),
            "propagate": True,
        },
    },
}

# ── Internationalization ──────────────────────────────────────
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"
