"""
ASGI config for the labdesk project.

Plain Django HTTP application; the auto-save reconciler runs inside the
event loop of whichever ASGI server hosts it.
"""
import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "labdesk.settings")

application = get_asgi_application()
