from decimal import Decimal

from django.core.management.base import BaseCommand

from casamento.infrastructure.models import Presente


PRESENTES_INICIAIS = [
    ('Jogo de Panelas', 'Conjunto de panelas antiaderentes', Decimal('450.00')),
    ('Jogo de Cama Casal', 'Lençóis 400 fios', Decimal('320.00')),
    ('Cafeteira Expresso', 'Para os cafés da manhã a dois', Decimal('899.90')),
    ('Jantar Romântico', 'Cota para um jantar na lua de mel', Decimal('250.00')),
    ('Passeio na Lua de Mel', 'Cota para um passeio de barco', Decimal('600.00')),
    ('Aparelho de Jantar', 'Aparelho de jantar para 6 pessoas', Decimal('540.00')),
]


class Command(BaseCommand):
    help = 'Carrega uma lista de presentes inicial para desenvolvimento'

    def handle(self, *args, **kwargs):
        self.stdout.write('Criando lista de presentes...')

        for nome, descricao, preco in PRESENTES_INICIAIS:
            presente, created = Presente.objects.get_or_create(
                nome=nome,
                defaults={'descricao': descricao, 'preco': preco},
            )
            if created:
                self.stdout.write(self.style.SUCCESS(f'Criado presente "{presente.nome}"'))

        self.stdout.write(self.style.SUCCESS('Lista de presentes carregada.'))
