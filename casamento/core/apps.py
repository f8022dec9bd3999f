# casamento/core/apps.py

from django.apps import AppConfig

class CoreConfig(AppConfig):
    name = 'casamento.core'
    label = 'core'
    verbose_name = 'Camada de Entidades e Lógica (Core)'

    # Sem modelos nesta camada; a persistência fica na Infrastructure.
    default_auto_field = 'django.db.models.BigAutoField'
