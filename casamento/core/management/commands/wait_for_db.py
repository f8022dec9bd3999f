"""
Management command para aguardar o banco de dados estar disponível.
"""
import time
from django.db import connections
from django.db.utils import OperationalError
from django.core.management.base import BaseCommand


class Command(BaseCommand):
    """Pausa a execução até o banco de dados aceitar conexões."""
    help = 'Aguarda o banco de dados aceitar conexões (uso em containers).'

    def add_arguments(self, parser):
        parser.add_argument('--tentativas', type=int, default=30)
        parser.add_argument('--intervalo', type=float, default=1.0)

    def handle(self, *args, **options):
        self.stdout.write('Aguardando pelo banco de dados...')
        for _ in range(options['tentativas']):
            try:
                connections['default'].ensure_connection()
            except OperationalError:
                self.stdout.write(f"Banco de dados indisponível, aguardando {options['intervalo']} segundo(s)...")
                time.sleep(options['intervalo'])
            else:
                self.stdout.write(self.style.SUCCESS('Banco de dados disponível!'))
                return

        raise OperationalError('Banco de dados não respondeu no tempo esperado.')
