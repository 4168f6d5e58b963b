"""
WSGI config for the name registry client.

Named export for Gunicorn: config.wsgi:nameRegistry
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

nameRegistry = get_wsgi_application()
