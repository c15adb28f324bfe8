# batualam/core/apps.py

from django.apps import AppConfig

class CoreConfig(AppConfig):
    name = 'batualam.core'
    label = 'core'
    # Camada sem models: entidades, portas e casos de uso puros.
    verbose_name = 'Store Core'
    default_auto_field = 'django.db.models.BigAutoField'
