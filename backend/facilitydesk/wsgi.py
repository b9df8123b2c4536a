"""WSGI entry point for the facilitydesk backend."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "facilitydesk.settings")

application = get_wsgi_application()
