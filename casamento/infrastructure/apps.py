from django.apps import AppConfig


class InfrastructureConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'casamento.infrastructure'
    label = 'infrastructure'
    verbose_name = 'Persistência e Integrações'
