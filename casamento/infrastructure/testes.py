from decimal import Decimal
from unittest.mock import patch, Mock

import requests
from django.core.cache import cache
from django.test import TestCase, override_settings

from casamento.infrastructure.models import Presente as PresenteModel, Compra as CompraModel
from casamento.infrastructure.models import Convidado as ConvidadoModel
from casamento.infrastructure.repositories import (
    PresenteRepositoryDjango,
    CompraRepositoryDjango,
    ConvidadoRepositoryDjango,
)
from casamento.infrastructure.gateways import AbacatePayGateway, MercadoPagoGateway, dividir_nome
from casamento.infrastructure.rate_limit import LimitadorTentativasLogin
from casamento.core.entities import Compra, Comprador, Presente
from casamento.core.exceptions import (
    PagamentoFalhouError,
    RecursoNaoEncontradoNoProvedorError,
    MuitasTentativasError,
    SimulacaoNaoPermitidaError,
    PresenteNaoEncontradoError,
)


def resposta_http(json_data=None, status_code=200, texto=''):
    """Monta um Mock de requests.Response."""
    response = Mock()
    response.status_code = status_code
    response.text = texto
    response.json.return_value = json_data
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(response=response)
    else:
        response.raise_for_status.return_value = None
    return response


class PresenteRepositoryTestCase(TestCase):

    def setUp(self):
        self.repository = PresenteRepositoryDjango()
        self.presente_model = PresenteModel.objects.create(nome='Jogo de Panelas', preco=Decimal('450.00'))

    def test_buscar_por_id_com_sucesso(self):
        """
        Cenário: Verificar se o repositório converte o modelo em entidade.
        """
        # ACT
        presente = self.repository.buscar_por_id(self.presente_model.id)

        # ASSERT
        self.assertIsInstance(presente, Presente)
        self.assertEqual(presente.nome, 'Jogo de Panelas')
        self.assertEqual(presente.preco_em_centavos, 45000)

    def test_buscar_por_id_inexistente(self):
        self.assertIsNone(self.repository.buscar_por_id(9999))

    def test_reserva_concorrente_so_funciona_uma_vez(self):
        """
        Cenário: Duas requisições tentam reservar o mesmo presente.
        """
        self.assertTrue(self.repository.reservar(self.presente_model.id))
        self.assertFalse(self.repository.reservar(self.presente_model.id))

        self.presente_model.refresh_from_db()
        self.assertFalse(self.presente_model.disponivel)

    def test_liberar_reserva(self):
        self.repository.reservar(self.presente_model.id)

        self.repository.liberar(self.presente_model.id)

        self.presente_model.refresh_from_db()
        self.assertTrue(self.presente_model.disponivel)

    def test_listar_paginado(self):
        PresenteModel.objects.create(nome='Cafeteira', preco=Decimal('899.90'))
        PresenteModel.objects.create(nome='Torradeira', preco=Decimal('150.00'))

        total, presentes = self.repository.listar(offset=1, limite=1)

        self.assertEqual(total, 3)
        self.assertEqual([p.nome for p in presentes], ['Cafeteira'])

    def test_deletar_inexistente(self):
        with self.assertRaises(PresenteNaoEncontradoError):
            self.repository.deletar(9999)


class CompraRepositoryTestCase(TestCase):

    def setUp(self):
        self.repository = CompraRepositoryDjango()
        self.presente_model = PresenteModel.objects.create(
            nome='Jogo de Cama', preco=Decimal('320.00'), disponivel=False
        )

    def criar_compra(self, **kwargs):
        dados = dict(
            presente=self.presente_model,
            nome_comprador='Ana Souza',
            telefone_comprador='11999990000',
            documento_comprador='12345678901',
            pix_cobranca_id='pix_char_1',
            pagamento_id='pix_char_1',
        )
        dados.update(kwargs)
        return CompraModel.objects.create(**dados)

    def test_criar_compra_a_partir_da_entidade(self):
        compra = self.repository.criar(Compra(
            presente_id=self.presente_model.id,
            nome_comprador='Bruno Lima',
            telefone_comprador='21988887777',
            documento_comprador='11222333000181',
            pagamento_id='pref-1',
            metadados={'checkoutUrl': 'https://mp.example/checkout'},
        ))

        self.assertIsNotNone(compra.id)
        self.assertEqual(compra.status_pagamento, 'pending')
        self.assertEqual(self.repository.buscar_por_pagamento_id('pref-1').id, compra.id)

    def test_transicionar_para_pago_mantem_presente_indisponivel(self):
        """
        Cenário: Compra pendente é paga; o presente sai da lista.
        """
        # ARRANGE
        compra_model = self.criar_compra()

        # ACT
        compra = self.repository.transicionar(compra_model.id, 'paid', presente_disponivel=False)

        # ASSERT
        self.assertEqual(compra.status_pagamento, 'paid')
        self.presente_model.refresh_from_db()
        self.assertFalse(self.presente_model.disponivel)

    def test_transicionar_compra_finalizada_nao_altera_nada(self):
        """
        Cenário: Segunda transição sobre a mesma compra (evento duplicado ou corrida).
        """
        compra_model = self.criar_compra(status_pagamento='paid')

        resultado = self.repository.transicionar(compra_model.id, 'expired', presente_disponivel=True)

        self.assertIsNone(resultado)
        compra_model.refresh_from_db()
        self.assertEqual(compra_model.status_pagamento, 'paid')
        self.presente_model.refresh_from_db()
        self.assertFalse(self.presente_model.disponivel)

    def test_expiracao_libera_presente(self):
        compra_model = self.criar_compra()

        self.repository.transicionar(compra_model.id, 'expired', presente_disponivel=True)

        self.presente_model.refresh_from_db()
        self.assertTrue(self.presente_model.disponivel)

    def test_expiracao_nao_libera_presente_com_outra_compra_ativa(self):
        """
        Cenário: Uma compra antiga expira enquanto outra compra do mesmo presente está pendente.
        """
        antiga = self.criar_compra(pix_cobranca_id='pix_char_antigo')
        self.criar_compra(pix_cobranca_id='pix_char_novo')

        self.repository.transicionar(antiga.id, 'expired', presente_disponivel=True)

        self.presente_model.refresh_from_db()
        self.assertFalse(self.presente_model.disponivel)

    def test_buscar_por_cobranca_pix(self):
        compra_model = self.criar_compra()

        compra = self.repository.buscar_por_cobranca_pix('pix_char_1')

        self.assertEqual(compra.id, compra_model.id)
        self.assertIsNone(self.repository.buscar_por_cobranca_pix('nao-existe'))

    def test_buscar_pagas_por_presentes(self):
        self.criar_compra(status_pagamento='paid')
        self.criar_compra(status_pagamento='cancelled')

        pagas = self.repository.buscar_pagas_por_presentes([self.presente_model.id])

        self.assertEqual(len(pagas[self.presente_model.id]), 1)

    def test_atualizar_metodo_pagamento(self):
        compra_model = self.criar_compra()

        self.repository.atualizar_metodo_pagamento(compra_model.id, 'card')

        compra_model.refresh_from_db()
        self.assertEqual(compra_model.metodo_pagamento, 'card')


class ConvidadoRepositoryTestCase(TestCase):

    def test_atualizar_confirmacao_somente_ids_informados(self):
        repository = ConvidadoRepositoryDjango()
        carlos = ConvidadoModel.objects.create(nome='Carlos', telefone='11911112222')
        julia = ConvidadoModel.objects.create(nome='Julia', telefone='11911112222')

        atualizados = repository.atualizar_confirmacao([carlos.id], True, None)

        self.assertEqual(atualizados, 1)
        julia.refresh_from_db()
        self.assertFalse(julia.confirmado)
        self.assertEqual(len(repository.listar(confirmado=True)), 1)


class AbacatePayGatewayTestCase(TestCase):

    def setUp(self):
        self.gateway = AbacatePayGateway(base_url='https://api.abacatepay.test/v1', api_key='chave',
                                         modo_dev=True, timeout=5)
        self.comprador = Comprador(nome='Ana Souza', telefone='11999990000', documento='12345678901')

    @patch('casamento.infrastructure.gateways.requests.request')
    def test_criar_cobranca(self, mock_request):
        """
        Cenário: A AbacatePay cria a cobrança e devolve o QR Code no envelope {data}.
        """
        # ARRANGE
        mock_request.return_value = resposta_http({
            'data': {
                'id': 'pix_char_1',
                'status': 'PENDING',
                'brCode': '000201...',
                'brCodeBase64': 'data:image/png;base64,AAA',
                'amount': 45000,
                'expiresAt': '2024-06-01T13:00:00.000Z',
                'devMode': True,
                'platformFee': 80,
            },
            'error': None,
        })

        # ACT
        cobranca = self.gateway.criar_cobranca(45000, 3600, 'Pagamento de presente', self.comprador, {})

        # ASSERT
        self.assertEqual(cobranca.id, 'pix_char_1')
        self.assertEqual(cobranca.taxa_plataforma, 80)
        self.assertIsNotNone(cobranca.expira_em.tzinfo)
        args, kwargs = mock_request.call_args
        self.assertEqual(args, ('POST', 'https://api.abacatepay.test/v1/pixQrCode/create'))
        self.assertEqual(kwargs['json']['amount'], 45000)
        self.assertEqual(kwargs['json']['customer']['taxId'], '12345678901')
        self.assertNotIn('email', kwargs['json']['customer'])

    @patch('casamento.infrastructure.gateways.requests.request')
    def test_erro_http_vira_pagamento_falhou(self, mock_request):
        mock_request.return_value = resposta_http(status_code=401, texto='Unauthorized')

        with self.assertRaises(PagamentoFalhouError) as ctx:
            self.gateway.verificar_cobranca('pix_char_1')

        self.assertEqual(ctx.exception.message, 'AbacatePay API Error: 401 - Unauthorized')

    @patch('casamento.infrastructure.gateways.requests.request')
    def test_falha_de_conexao(self, mock_request):
        mock_request.side_effect = requests.exceptions.ConnectionError('recusada')

        with self.assertRaises(PagamentoFalhouError):
            self.gateway.verificar_cobranca('pix_char_1')

    @patch('casamento.infrastructure.gateways.requests.request')
    def test_verificar_cobranca(self, mock_request):
        mock_request.return_value = resposta_http({'data': {'status': 'PAID'}, 'error': None})

        self.assertEqual(self.gateway.verificar_cobranca('pix_char_1'), 'PAID')
        self.assertEqual(mock_request.call_args.kwargs['params'], {'id': 'pix_char_1'})

    @patch('casamento.infrastructure.gateways.requests.request')
    def test_simulacao_fora_do_modo_dev(self, mock_request):
        gateway = AbacatePayGateway(base_url='https://api.abacatepay.test/v1', api_key='chave', modo_dev=False)

        with self.assertRaises(SimulacaoNaoPermitidaError):
            gateway.simular_pagamento('pix_char_1')
        mock_request.assert_not_called()


@override_settings(MERCADOPAGO_URL_WEBHOOK='https://casamento.example')
class MercadoPagoGatewayTestCase(TestCase):

    def setUp(self):
        self.gateway = MercadoPagoGateway(access_token='token', timeout=5)

    @patch('casamento.infrastructure.gateways.requests.post')
    def test_criar_preferencia(self, mock_post):
        """
        Cenário: Preferência criada com referência externa 'gift-{id}-...' e URL de notificação.
        """
        mock_post.return_value = resposta_http({
            'id': 'pref-7',
            'init_point': 'https://mp.example/checkout',
            'external_reference': 'gift-7-1700000000000',
        })
        presente = Presente(id=7, nome='Cafeteira', preco=Decimal('899.90'))
        comprador = Comprador(nome='Bruno', telefone='21988887777', documento='11222333000181')

        preferencia = self.gateway.criar_preferencia(presente, comprador, modo_binario=True)

        self.assertEqual(preferencia.id, 'pref-7')
        self.assertEqual(preferencia.checkout_url, 'https://mp.example/checkout')
        payload = mock_post.call_args.kwargs['json']
        self.assertTrue(payload['external_reference'].startswith('gift-7-'))
        self.assertTrue(payload['binary_mode'])
        self.assertEqual(payload['payer']['identification']['type'], 'CNPJ')
        self.assertEqual(payload['notification_url'],
                         'https://casamento.example/api/pagamentos/webhook/mercadopago/')
        self.assertIn('X-Idempotency-Key', mock_post.call_args.kwargs['headers'])

    @patch('casamento.infrastructure.gateways.requests.get')
    def test_buscar_pagamento_detecta_cartao(self, mock_get):
        mock_get.return_value = resposta_http({
            'id': 123,
            'status': 'approved',
            'preference_id': 'pref-7',
            'payment_type_id': 'credit_card',
        })

        pagamento = self.gateway.buscar_pagamento('123')

        self.assertEqual(pagamento.id, '123')
        self.assertEqual(pagamento.metodo_pagamento, 'card')
        self.assertEqual(pagamento.preference_id, 'pref-7')

    @patch('casamento.infrastructure.gateways.requests.get')
    def test_buscar_pagamento_inexistente(self, mock_get):
        mock_get.return_value = resposta_http(status_code=404, texto='not found')

        with self.assertRaises(RecursoNaoEncontradoNoProvedorError) as ctx:
            self.gateway.buscar_pagamento('pref-7')
        self.assertEqual(ctx.exception.recurso_id, 'pref-7')

    def test_dividir_nome(self):
        self.assertEqual(dividir_nome('Ana Maria Souza'), ('Ana', 'Maria Souza'))
        self.assertEqual(dividir_nome('Ana'), ('Ana', 'Ana'))
        self.assertEqual(dividir_nome(''), ('Cliente', 'Convidado'))


class LimitadorTentativasLoginTestCase(TestCase):

    def setUp(self):
        cache.clear()
        self.limitador = LimitadorTentativasLogin(max_tentativas=3, janela_segundos=60)

    def test_bloqueia_apos_limite(self):
        """
        Cenário: Três falhas seguidas do mesmo IP bloqueiam novas tentativas.
        """
        for _ in range(3):
            self.limitador.verificar('10.0.0.1')
            self.limitador.registrar_falha('10.0.0.1')

        with self.assertRaises(MuitasTentativasError) as ctx:
            self.limitador.verificar('10.0.0.1')
        self.assertEqual(ctx.exception.minutos_restantes, 1)

        # Outros IPs não são afetados
        self.limitador.verificar('10.0.0.2')

    def test_limpar_remove_bloqueio(self):
        for _ in range(3):
            self.limitador.registrar_falha('10.0.0.1')

        self.limitador.limpar('10.0.0.1')

        self.limitador.verificar('10.0.0.1')
        self.assertEqual(self.limitador.registrar_falha('10.0.0.1'), 1)
