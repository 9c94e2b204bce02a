# Celery instance is defined in sb_project/celery.py
# It builds the celery_app object and points it at the Django settings
# so ledger background jobs (balance verification) share one task queue app
from .celery import celery_app

# 'from sb_project import *' only exports celery_app
__all__ = ("celery_app",)
