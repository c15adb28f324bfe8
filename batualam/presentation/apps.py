# batualam/presentation/apps.py

from django.apps import AppConfig


class PresentationConfig(AppConfig):
    # Views, formulários, API e templates (sem modelos próprios)
    name = 'batualam.presentation'
    label = 'presentation'
    verbose_name = 'Loja e Painel'
    default_auto_field = 'django.db.models.BigAutoField'
