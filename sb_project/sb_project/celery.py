""" Start a worker with "celery -A sb_project worker -l info"
    The -A sb_project means:
    Import sb_project/__init__.py →
    which exposes celery_app →  Celery picks up ledger_core.tasks. """
from __future__ import annotations
import os
from celery import Celery

# ensure Django settings are set for Celery
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "sb_project.settings")

# name matches the project package
celery_app = Celery("sb_project")

# read config from Django settings, using CELERY_ prefix
celery_app.config_from_object("django.conf:settings", namespace="CELERY")

# autoload tasks.py from installed apps (ledger_core.tasks)
celery_app.autodiscover_tasks()
