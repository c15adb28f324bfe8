"""
WSGI config for the Batu Alam project.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'batualam.settings')

application = get_wsgi_application()
