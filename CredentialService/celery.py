"""
Celery configuration for background tasks.

Used for the periodic expiry sweeps and expiry warnings.
"""
import os

from celery import Celery

# Set default Django settings module
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "CredentialService.settings.dev")

app = Celery("CredentialService")

# Load configuration from Django settings
app.config_from_object("django.conf:settings", namespace="CELERY")

# Auto-discover tasks from all installed apps
app.autodiscover_tasks()
