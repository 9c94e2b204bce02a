import os
from decimal import Decimal
from pathlib import Path
from dotenv import load_dotenv
import dj_database_url

BASE_DIR = Path(__file__).resolve().parent.parent
# Values in sb_project/.env override nothing that is already exported
load_dotenv(BASE_DIR / ".env")

SECRET_KEY = os.environ.get("SECRET_KEY", os.environ.get("DJANGO_SECRET_KEY", "changeme"))
DEBUG = os.getenv("DEBUG", os.getenv("DJANGO_DEBUG", "True")) == "True"
ALLOWED_HOSTS = os.getenv("ALLOWED_HOSTS", "127.0.0.1,localhost,testserver").split(",")

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "ledger_core.apps.LedgerCoreConfig",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

# JSON 403 for CSRF failures under /api/ (clients send X-CSRFToken)
CSRF_FAILURE_VIEW = "ledger_core.views.csrf_failure"

ROOT_URLCONF = "sb_project.urls"

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
    }
]

WSGI_APPLICATION = "sb_project.wsgi.application"

# =============================================================================
# Database Configuration
# =============================================================================
DATABASES = {
    "default": dj_database_url.config(
        env="DATABASE_URL",
        default=f"sqlite:///{BASE_DIR / 'db.sqlite3'}",
        conn_max_age=600,
    )
}

# SQLite test databases live on disk so worker threads in the
# concurrency tests open real connections to the same file
if DATABASES["default"]["ENGINE"] == "django.db.backends.sqlite3":
    DATABASES["default"]["TEST"] = {"NAME": str(BASE_DIR / "test_db.sqlite3")}

AUTH_PASSWORD_VALIDATORS = [
    {
        "NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator",
    },
    {
        "NAME": "django.contrib.auth.password_validation.MinimumLengthValidator",
        "OPTIONS": {"min_length": 8},
    },
    {
        "NAME": "django.contrib.auth.password_validation.CommonPasswordValidator",
    },
    {
        "NAME": "django.contrib.auth.password_validation.NumericPasswordValidator",
    },
]

LANGUAGE_CODE = "en-us"
TIME_ZONE = os.getenv("TIME_ZONE", "UTC")
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# =============================================================================
# Ledger Configuration
# =============================================================================
# Control accounts the inventory posting rules resolve by code.
# Every code listed here must exist in the chart of accounts
# (see `manage.py seed_chart` and `manage.py check_control_accounts`)
LEDGER_CONTROL_ACCOUNTS = {
    "inventory": os.getenv("LEDGER_INVENTORY_CODE", "1200"),
    "accounts_payable": os.getenv("LEDGER_AP_CODE", "2000"),
    "accounts_receivable": os.getenv("LEDGER_AR_CODE", "1100"),
    "sales_revenue": os.getenv("LEDGER_SALES_REVENUE_CODE", "4000"),
    "cost_of_goods_sold": os.getenv("LEDGER_COGS_CODE", "5000"),
    "purchase_returns": os.getenv("LEDGER_PURCHASE_RETURNS_CODE", "5100"),
    "sales_returns": os.getenv("LEDGER_SALES_RETURNS_CODE", "4100"),
    "freight_expense": os.getenv("LEDGER_FREIGHT_CODE", "5200"),
}
# Period close moves net income here
LEDGER_RETAINED_EARNINGS_CODE = os.getenv("LEDGER_RETAINED_EARNINGS_CODE", "3200")
# Debits and credits within this amount count as balanced
LEDGER_BALANCE_TOLERANCE = Decimal(os.getenv("LEDGER_BALANCE_TOLERANCE", "0.01"))

# =============================================================================
# Celery Configuration (Async Task Processing)
# =============================================================================
REDIS_URL = os.getenv("REDIS_URL", "redis://127.0.0.1:6379/0")

CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", REDIS_URL)
CELERY_ACCEPT_CONTENT = ["json"]
CELERY_TASK_SERIALIZER = "json"
CELERY_RESULT_SERIALIZER = "json"
CELERY_TIMEZONE = TIME_ZONE
CELERY_TASK_TIME_LIMIT = 30 * 60  # 30 minutes
# Run tasks inline when no broker is wanted (local dev, tests)
CELERY_TASK_ALWAYS_EAGER = os.getenv("CELERY_TASK_ALWAYS_EAGER", "False") == "True"

# =============================================================================
# Structured Logging Configuration
# =============================================================================
from .logging_config import get_logging_config  # noqa: E402
LOGGING = get_logging_config(DEBUG)
