"""
WSGI config for the trash talk song backend.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'trash_talk_project.settings')

application = get_wsgi_application()
