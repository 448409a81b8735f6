"""WSGI entry point for the DApp ledger demo."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "dapp_ledger.settings")

application = get_wsgi_application()
