# casamento/core/tests.py

import unittest
from unittest.mock import Mock
from decimal import Decimal
from datetime import datetime, timedelta, timezone

from casamento.core.use_cases import (
    ReconciliarPagamentoUseCase,
    CriarPagamentoPixUseCase,
    CriarPagamentoCheckoutUseCase,
    _CriarPagamentoBase,
    GerenciarComprasUseCase,
    GerenciarPresentesUseCase,
    GerenciarConvidadosUseCase,
    extrair_presente_da_referencia,
)
from casamento.core.entities import (
    Presente, Compra, Convidado, Comprador, CobrancaPix, PreferenciaCheckout, PagamentoProvedor,
)
from casamento.core.exceptions import (
    CompraNaoEncontradaError,
    PresenteNaoEncontradoError,
    PresenteIndisponivelError,
    PresenteJaCompradoError,
    PagamentoPendenteExistenteError,
    PagamentoFalhouError,
    RecursoNaoEncontradoNoProvedorError,
    StatusInvalidoError,
    SimulacaoNaoPermitidaError,
    PresenteComComprasError,
    EstadoInvalidoError,
    DadosInvalidosError,
    FamiliaNaoEncontradaError,
)

AGORA = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def nova_compra(**kwargs):
    dados = dict(
        id=1,
        presente_id=42,
        nome_comprador='Ana Souza',
        telefone_comprador='11999990000',
        documento_comprador='12345678901',
        metodo_pagamento='pix',
        status_pagamento='pending',
    )
    dados.update(kwargs)
    return Compra(**dados)


class TestAplicarTransicao(unittest.TestCase):

    def setUp(self):
        self.compra_repo_mock = Mock()
        self.use_case = ReconciliarPagamentoUseCase(compra_repo=self.compra_repo_mock)

    def test_compra_paga_nao_sofre_nova_transicao(self):
        """
        Cenário: Uma compra já paga recebe outro evento; nada é gravado.
        """
        compra = nova_compra(status_pagamento='paid')

        resultado = self.use_case.aplicar_transicao(compra, 'expired')

        self.assertEqual(resultado.status, 'already_processed')
        self.compra_repo_mock.transicionar.assert_not_called()

    def test_compra_finalizada_por_outra_requisicao(self):
        """
        Cenário: O UPDATE condicional não encontra a compra pendente (corrida perdida).
        """
        self.compra_repo_mock.transicionar.return_value = None

        resultado = self.use_case.aplicar_transicao(nova_compra(), 'paid')

        self.assertEqual(resultado.status, 'already_processed')

    def test_pagamento_torna_presente_indisponivel(self):
        self.compra_repo_mock.transicionar.return_value = nova_compra(status_pagamento='paid')

        resultado = self.use_case.aplicar_transicao(nova_compra(), 'paid')

        self.assertEqual(resultado.status, 'paid')
        self.compra_repo_mock.transicionar.assert_called_once_with(1, 'paid', presente_disponivel=False)

    def test_expiracao_libera_presente(self):
        self.compra_repo_mock.transicionar.return_value = nova_compra(status_pagamento='expired')

        self.use_case.aplicar_transicao(nova_compra(), 'expired')

        self.compra_repo_mock.transicionar.assert_called_once_with(1, 'expired', presente_disponivel=True)


class TestWebhookPix(unittest.TestCase):

    def setUp(self):
        self.compra_repo_mock = Mock()
        self.use_case = ReconciliarPagamentoUseCase(compra_repo=self.compra_repo_mock, gateway_pix=Mock())

    def test_pix_pago_marca_compra_como_paga(self):
        """
        Cenário: Evento pix.paid com status PAID para uma cobrança conhecida.
        """
        # ARRANGE
        self.compra_repo_mock.buscar_por_cobranca_pix.return_value = nova_compra(pix_cobranca_id='pix_char_1')
        self.compra_repo_mock.transicionar.return_value = nova_compra(status_pagamento='paid')

        # ACT
        resultado = self.use_case.processar_webhook_pix('pix.paid', {'id': 'pix_char_1', 'status': 'PAID'})

        # ASSERT
        self.assertEqual(resultado.status, 'paid')
        self.compra_repo_mock.buscar_por_cobranca_pix.assert_called_once_with('pix_char_1')
        self.compra_repo_mock.transicionar.assert_called_once_with(1, 'paid', presente_disponivel=False)

    def test_pix_expirado_libera_presente(self):
        self.compra_repo_mock.buscar_por_cobranca_pix.return_value = nova_compra(pix_cobranca_id='pix_char_1')
        self.compra_repo_mock.transicionar.return_value = nova_compra(status_pagamento='expired')

        resultado = self.use_case.processar_webhook_pix('pix.expired', {'id': 'pix_char_1', 'status': 'EXPIRED'})

        self.assertEqual(resultado.status, 'expired')
        self.compra_repo_mock.transicionar.assert_called_once_with(1, 'expired', presente_disponivel=True)

    def test_pix_pago_repetido_reporta_ja_processado(self):
        """
        Cenário: O provedor reenvia pix.paid para uma compra já paga.
        """
        self.compra_repo_mock.buscar_por_cobranca_pix.return_value = nova_compra(status_pagamento='paid')

        resultado = self.use_case.processar_webhook_pix('pix.paid', {'id': 'pix_char_1', 'status': 'PAID'})

        self.assertEqual(resultado.status, 'already_processed')
        self.compra_repo_mock.transicionar.assert_not_called()

    def test_pix_expirado_apos_pagamento_nao_reverte(self):
        self.compra_repo_mock.buscar_por_cobranca_pix.return_value = nova_compra(status_pagamento='paid')

        resultado = self.use_case.processar_webhook_pix('pix.expired', {'id': 'pix_char_1', 'status': 'EXPIRED'})

        self.assertEqual(resultado.status, 'already_processed')
        self.compra_repo_mock.transicionar.assert_not_called()

    def test_cobranca_desconhecida_retorna_none(self):
        self.compra_repo_mock.buscar_por_cobranca_pix.return_value = None

        resultado = self.use_case.processar_webhook_pix('pix.paid', {'id': 'nao-existe', 'status': 'PAID'})

        self.assertIsNone(resultado)

    def test_evento_e_status_divergentes_nao_geram_transicao(self):
        self.compra_repo_mock.buscar_por_cobranca_pix.return_value = nova_compra()

        resultado = self.use_case.processar_webhook_pix('pix.paid', {'id': 'pix_char_1', 'status': 'PENDING'})

        self.assertIsNone(resultado)
        self.compra_repo_mock.transicionar.assert_not_called()

    def test_erro_interno_e_engolido(self):
        """
        Cenário: Falha de banco durante o webhook; o erro é registrado e não propaga.
        """
        self.compra_repo_mock.buscar_por_cobranca_pix.side_effect = RuntimeError("banco fora do ar")

        with self.assertLogs('casamento.core.use_cases', level='ERROR'):
            resultado = self.use_case.processar_webhook_pix('pix.paid', {'id': 'pix_char_1', 'status': 'PAID'})

        self.assertIsNone(resultado)


class TestVerificarStatus(unittest.TestCase):

    def setUp(self):
        self.compra_repo_mock = Mock()
        self.gateway_pix_mock = Mock()
        self.use_case = ReconciliarPagamentoUseCase(
            compra_repo=self.compra_repo_mock, gateway_pix=self.gateway_pix_mock
        )

    def test_compra_inexistente(self):
        self.compra_repo_mock.buscar_por_id.return_value = None

        with self.assertRaises(CompraNaoEncontradaError):
            self.use_case.verificar_status(99)

    def test_compra_finalizada_nao_consulta_provedor(self):
        self.compra_repo_mock.buscar_por_id.return_value = nova_compra(status_pagamento='cancelled',
                                                                       pix_cobranca_id='pix_char_1')

        compra, atualizado = self.use_case.verificar_status(1)

        self.assertFalse(atualizado)
        self.assertEqual(compra.status_pagamento, 'cancelled')
        self.gateway_pix_mock.verificar_cobranca.assert_not_called()

    def test_cobranca_paga_atualiza_compra(self):
        """
        Cenário: Consulta de status encontra a cobrança PAID no provedor.
        """
        pendente = nova_compra(pix_cobranca_id='pix_char_1')
        paga = nova_compra(pix_cobranca_id='pix_char_1', status_pagamento='paid')
        self.compra_repo_mock.buscar_por_id.side_effect = [pendente, paga]
        self.compra_repo_mock.transicionar.return_value = paga
        self.gateway_pix_mock.verificar_cobranca.return_value = 'PAID'

        compra, atualizado = self.use_case.verificar_status(1)

        self.assertTrue(atualizado)
        self.assertEqual(compra.status_pagamento, 'paid')

    def test_cobranca_ainda_pendente(self):
        self.compra_repo_mock.buscar_por_id.return_value = nova_compra(pix_cobranca_id='pix_char_1')
        self.gateway_pix_mock.verificar_cobranca.return_value = 'PENDING'

        compra, atualizado = self.use_case.verificar_status(1)

        self.assertFalse(atualizado)
        self.compra_repo_mock.transicionar.assert_not_called()

    def test_erro_do_provedor_e_engolido(self):
        self.compra_repo_mock.buscar_por_id.return_value = nova_compra(pix_cobranca_id='pix_char_1')
        self.gateway_pix_mock.verificar_cobranca.side_effect = PagamentoFalhouError("timeout")

        with self.assertLogs('casamento.core.use_cases', level='ERROR'):
            compra, atualizado = self.use_case.verificar_status(1)

        self.assertFalse(atualizado)
        self.assertEqual(compra.status_pagamento, 'pending')


class TestWebhookCheckout(unittest.TestCase):

    def setUp(self):
        self.compra_repo_mock = Mock()
        self.gateway_checkout_mock = Mock()
        self.use_case = ReconciliarPagamentoUseCase(
            compra_repo=self.compra_repo_mock, gateway_checkout=self.gateway_checkout_mock
        )

    def test_aprovado_com_preferencia_marca_paga(self):
        """
        Cenário: Pagamento 'approved' cuja preference_id é o pagamento_id de uma compra pendente.
        """
        # ARRANGE
        self.gateway_checkout_mock.buscar_pagamento.return_value = PagamentoProvedor(
            id='123', status='approved', preference_id='pref-1', metodo_pagamento='pix'
        )
        self.compra_repo_mock.buscar_por_pagamento_id.return_value = nova_compra(pagamento_id='pref-1')
        self.compra_repo_mock.transicionar.return_value = nova_compra(status_pagamento='paid')

        # ACT
        resultado = self.use_case.processar_webhook_checkout('payment', '123')

        # ASSERT
        self.assertEqual(resultado.status, 'paid')
        self.compra_repo_mock.buscar_por_pagamento_id.assert_called_once_with('pref-1')
        self.compra_repo_mock.atualizar_metodo_pagamento.assert_not_called()

    def test_rejeitado_sem_preferencia_usa_referencia_externa(self):
        """
        Cenário: Pagamento 'rejected' sem preference_id e referência 'gift-42-1699999999'.
        """
        self.gateway_checkout_mock.buscar_pagamento.return_value = PagamentoProvedor(
            id='123', status='rejected', referencia_externa='gift-42-1699999999'
        )
        self.compra_repo_mock.buscar_por_presente.return_value = [
            nova_compra(id=5, status_pagamento='cancelled'),
            nova_compra(id=6),
        ]
        self.compra_repo_mock.transicionar.return_value = nova_compra(id=6, status_pagamento='failed')

        resultado = self.use_case.processar_webhook_checkout('payment', '123')

        self.assertEqual(resultado.compra_id, 6)
        self.assertEqual(resultado.status, 'failed')
        self.compra_repo_mock.buscar_por_presente.assert_called_once_with(42)
        self.compra_repo_mock.transicionar.assert_called_once_with(6, 'failed', presente_disponivel=True)

    def test_id_de_preferencia_reporta_notificacao_recebida(self):
        """
        Cenário: O id notificado não é de pagamento (404) mas de uma preferência conhecida.
        """
        self.gateway_checkout_mock.buscar_pagamento.side_effect = RecursoNaoEncontradoNoProvedorError('pref-1')
        self.gateway_checkout_mock.buscar_preferencia.return_value = PreferenciaCheckout(id='pref-1')
        self.compra_repo_mock.buscar_por_pagamento_id.return_value = nova_compra(pagamento_id='pref-1')

        resultado = self.use_case.processar_webhook_checkout('payment', 'pref-1')

        self.assertEqual(resultado.status, 'notification_received')
        self.compra_repo_mock.transicionar.assert_not_called()

    def test_id_desconhecido_retorna_none(self):
        self.gateway_checkout_mock.buscar_pagamento.side_effect = RecursoNaoEncontradoNoProvedorError('x')
        self.gateway_checkout_mock.buscar_preferencia.side_effect = RecursoNaoEncontradoNoProvedorError('x')

        self.assertIsNone(self.use_case.processar_webhook_checkout('payment', 'x'))

    def test_metodo_de_pagamento_e_corrigido(self):
        """
        Cenário: Compra registrada como pix, mas o pagamento aprovado foi com cartão.
        """
        self.gateway_checkout_mock.buscar_pagamento.return_value = PagamentoProvedor(
            id='123', status='approved', preference_id='pref-1', metodo_pagamento='card'
        )
        self.compra_repo_mock.buscar_por_pagamento_id.return_value = nova_compra(pagamento_id='pref-1')
        self.compra_repo_mock.transicionar.return_value = nova_compra(status_pagamento='paid')

        self.use_case.processar_webhook_checkout('payment', '123')

        self.compra_repo_mock.atualizar_metodo_pagamento.assert_called_once_with(1, 'card')

    def test_status_em_processamento_apenas_reportado(self):
        self.gateway_checkout_mock.buscar_pagamento.return_value = PagamentoProvedor(
            id='123', status='in_process', preference_id='pref-1'
        )
        self.compra_repo_mock.buscar_por_pagamento_id.return_value = nova_compra()

        resultado = self.use_case.processar_webhook_checkout('payment', '123')

        self.assertEqual(resultado.status, 'pending')
        self.compra_repo_mock.transicionar.assert_not_called()

    def test_status_desconhecido_reportado_como_recebido(self):
        self.gateway_checkout_mock.buscar_pagamento.return_value = PagamentoProvedor(
            id='123', status='charged_back', preference_id='pref-1'
        )
        self.compra_repo_mock.buscar_por_pagamento_id.return_value = nova_compra()

        resultado = self.use_case.processar_webhook_checkout('payment', '123')

        self.assertEqual(resultado.status, 'charged_back')

    def test_compra_ja_paga_reporta_ja_processado(self):
        self.gateway_checkout_mock.buscar_pagamento.return_value = PagamentoProvedor(
            id='123', status='approved', preference_id='pref-1', metodo_pagamento='card'
        )
        self.compra_repo_mock.buscar_por_pagamento_id.return_value = nova_compra(status_pagamento='paid')

        resultado = self.use_case.processar_webhook_checkout('payment', '123')

        self.assertEqual(resultado.status, 'already_processed')
        self.compra_repo_mock.atualizar_metodo_pagamento.assert_not_called()
        self.compra_repo_mock.transicionar.assert_not_called()

    def test_reembolso_apos_falha_nao_reverte(self):
        self.gateway_checkout_mock.buscar_pagamento.return_value = PagamentoProvedor(
            id='123', status='rejected', preference_id='pref-1'
        )
        self.compra_repo_mock.buscar_por_pagamento_id.return_value = nova_compra(status_pagamento='failed')

        resultado = self.use_case.processar_webhook_checkout('payment', '123')

        self.assertEqual(resultado.status, 'already_processed')
        self.compra_repo_mock.transicionar.assert_not_called()

    def test_metodo_nao_e_corrigido_em_compra_finalizada(self):
        """
        Cenário: Notificação com cartão para uma compra que já falhou; nada é gravado.
        """
        self.gateway_checkout_mock.buscar_pagamento.return_value = PagamentoProvedor(
            id='123', status='rejected', preference_id='pref-1', metodo_pagamento='card'
        )
        self.compra_repo_mock.buscar_por_pagamento_id.return_value = nova_compra(status_pagamento='failed')

        resultado = self.use_case.processar_webhook_checkout('payment', '123')

        self.assertEqual(resultado.status, 'already_processed')
        self.compra_repo_mock.atualizar_metodo_pagamento.assert_not_called()

    def test_tipo_nao_suportado_e_ignorado(self):
        self.assertIsNone(self.use_case.processar_webhook_checkout('subscription', '123'))
        self.gateway_checkout_mock.buscar_pagamento.assert_not_called()

    def test_falha_de_comunicacao_e_engolida(self):
        self.gateway_checkout_mock.buscar_pagamento.side_effect = PagamentoFalhouError("timeout")

        with self.assertLogs('casamento.core.use_cases', level='ERROR'):
            self.assertIsNone(self.use_case.processar_webhook_checkout('payment', '123'))

    def test_extrair_presente_da_referencia(self):
        self.assertEqual(extrair_presente_da_referencia('gift-42-1699999999'), 42)
        self.assertIsNone(extrair_presente_da_referencia('pedido-42'))
        self.assertIsNone(extrair_presente_da_referencia(None))


class TestCriarPagamentoPix(unittest.TestCase):

    def setUp(self):
        self.presente_repo_mock = Mock()
        self.compra_repo_mock = Mock()
        self.gateway_pix_mock = Mock()
        self.use_case = CriarPagamentoPixUseCase(
            presente_repo=self.presente_repo_mock,
            compra_repo=self.compra_repo_mock,
            gateway_pix=self.gateway_pix_mock,
            relogio=lambda: AGORA,
        )
        self.presente = Presente(id=42, nome='Jogo de Panelas', preco=Decimal('450.00'))
        self.comprador = Comprador(nome='Ana Souza', telefone='11999990000',
                                   documento='123.456.789-01', email='ana@example.com')

    def test_criar_pagamento_com_sucesso(self):
        """
        Cenário: Presente disponível, sem compras anteriores.
        """
        # ARRANGE
        self.presente_repo_mock.buscar_por_id.return_value = self.presente
        self.compra_repo_mock.buscar_por_presente.return_value = []
        self.presente_repo_mock.reservar.return_value = True
        self.gateway_pix_mock.criar_cobranca.return_value = CobrancaPix(
            id='pix_char_1', status='PENDING', br_code='000201...', br_code_base64='data:image/png;base64,AAA',
            valor_centavos=45000, expira_em=AGORA + timedelta(hours=1), modo_dev=True, taxa_plataforma=80,
        )
        self.compra_repo_mock.criar.side_effect = lambda compra: Compra(**{**compra.__dict__, 'id': 10})

        # ACT
        resultado = self.use_case.executar(presente_id=42, comprador=self.comprador)

        # ASSERT
        self.assertEqual(resultado.compra.id, 10)
        self.assertEqual(resultado.compra.status_pagamento, 'pending')
        self.assertEqual(resultado.compra.pix_cobranca_id, 'pix_char_1')
        self.assertEqual(resultado.compra.pagamento_id, 'pix_char_1')
        self.assertEqual(resultado.compra.documento_comprador, '12345678901')
        self.assertEqual(resultado.compra.metadados, {'devMode': True, 'platformFee': 80})
        self.assertFalse(resultado.presente.disponivel)

        chamada = self.gateway_pix_mock.criar_cobranca.call_args.kwargs
        self.assertEqual(chamada['valor_centavos'], 45000)
        self.assertEqual(chamada['expira_em_segundos'], 3600)

    def test_presente_inexistente(self):
        self.presente_repo_mock.buscar_por_id.return_value = None

        with self.assertRaises(PresenteNaoEncontradoError):
            self.use_case.executar(presente_id=42, comprador=self.comprador)

    def test_presente_indisponivel(self):
        self.presente.disponivel = False
        self.presente_repo_mock.buscar_por_id.return_value = self.presente
        self.compra_repo_mock.buscar_por_presente.return_value = []

        with self.assertRaises(PresenteIndisponivelError):
            self.use_case.executar(presente_id=42, comprador=self.comprador)

    def test_presente_ja_comprado(self):
        self.presente_repo_mock.buscar_por_id.return_value = self.presente
        self.compra_repo_mock.buscar_por_presente.return_value = [nova_compra(status_pagamento='paid')]

        with self.assertRaises(PresenteJaCompradoError):
            self.use_case.executar(presente_id=42, comprador=self.comprador)

    def test_pagamento_pendente_nao_expirado_bloqueia_novo(self):
        """
        Cenário: Já existe uma compra pendente que expira daqui a 30 minutos.
        """
        self.presente_repo_mock.buscar_por_id.return_value = self.presente
        self.compra_repo_mock.buscar_por_presente.return_value = [
            nova_compra(expira_em=AGORA + timedelta(minutes=30))
        ]

        with self.assertRaises(PagamentoPendenteExistenteError) as ctx:
            self.use_case.executar(presente_id=42, comprador=self.comprador)

        self.assertEqual(ctx.exception.message, "Já existe um pagamento pendente para este presente")
        self.presente_repo_mock.reservar.assert_not_called()
        self.gateway_pix_mock.criar_cobranca.assert_not_called()
        self.compra_repo_mock.criar.assert_not_called()

    def test_pendente_vencido_e_expirado_antes_do_novo_pagamento(self):
        """
        Cenário: Uma compra pendente venceu e ainda segura o presente indisponível.
        A criação expira a compra antiga, o presente volta à lista e a nova compra segue.
        """
        # ARRANGE
        presente_reservado = Presente(id=42, nome='Jogo de Panelas', preco=Decimal('450.00'), disponivel=False)
        self.presente_repo_mock.buscar_por_id.side_effect = [presente_reservado, self.presente]
        self.compra_repo_mock.buscar_por_presente.return_value = [
            nova_compra(id=3, expira_em=AGORA - timedelta(minutes=5))
        ]
        self.compra_repo_mock.transicionar.return_value = nova_compra(id=3, status_pagamento='expired')
        self.presente_repo_mock.reservar.return_value = True
        self.gateway_pix_mock.criar_cobranca.return_value = CobrancaPix(
            id='pix_char_2', status='PENDING', br_code='x', br_code_base64='y', valor_centavos=45000,
        )
        self.compra_repo_mock.criar.side_effect = lambda compra: compra

        # ACT
        resultado = self.use_case.executar(presente_id=42, comprador=self.comprador)

        # ASSERT
        self.compra_repo_mock.transicionar.assert_called_once_with(3, 'expired', presente_disponivel=True)
        self.assertEqual(resultado.compra.pix_cobranca_id, 'pix_char_2')

    def test_pendente_valido_tem_prioridade_sobre_indisponibilidade(self):
        """
        Cenário: O presente está indisponível porque já existe um PIX pendente válido.
        """
        self.presente.disponivel = False
        self.presente_repo_mock.buscar_por_id.return_value = self.presente
        self.compra_repo_mock.buscar_por_presente.return_value = [
            nova_compra(expira_em=AGORA + timedelta(minutes=30))
        ]

        with self.assertRaises(PagamentoPendenteExistenteError):
            self.use_case.executar(presente_id=42, comprador=self.comprador)
        self.compra_repo_mock.transicionar.assert_not_called()

    def test_reserva_concorrente_perdida(self):
        self.presente_repo_mock.buscar_por_id.return_value = self.presente
        self.compra_repo_mock.buscar_por_presente.return_value = []
        self.presente_repo_mock.reservar.return_value = False

        with self.assertRaises(PresenteIndisponivelError):
            self.use_case.executar(presente_id=42, comprador=self.comprador)
        self.gateway_pix_mock.criar_cobranca.assert_not_called()

    def test_falha_no_provedor_desfaz_reserva(self):
        """
        Cenário: O provedor PIX falha; o presente volta a ficar disponível e o erro propaga.
        """
        self.presente_repo_mock.buscar_por_id.return_value = self.presente
        self.compra_repo_mock.buscar_por_presente.return_value = []
        self.presente_repo_mock.reservar.return_value = True
        self.gateway_pix_mock.criar_cobranca.side_effect = PagamentoFalhouError("AbacatePay API Error: 500 - erro")

        with self.assertRaises(PagamentoFalhouError):
            self.use_case.executar(presente_id=42, comprador=self.comprador)

        self.presente_repo_mock.liberar.assert_called_once_with(42)
        self.compra_repo_mock.criar.assert_not_called()

    def test_documento_invalido(self):
        comprador = Comprador(nome='Ana', telefone='11999990000', documento='123')

        with self.assertRaises(DadosInvalidosError):
            self.use_case.executar(presente_id=42, comprador=comprador)


class TestCriarPagamentoCheckout(unittest.TestCase):

    def test_cria_preferencia_e_compra_pendente(self):
        presente_repo_mock = Mock()
        compra_repo_mock = Mock()
        gateway_mock = Mock()
        presente_repo_mock.buscar_por_id.return_value = Presente(id=7, nome='Cafeteira', preco=Decimal('899.90'))
        presente_repo_mock.reservar.return_value = True
        compra_repo_mock.buscar_por_presente.return_value = []
        compra_repo_mock.criar.side_effect = lambda compra: compra
        gateway_mock.criar_preferencia.return_value = PreferenciaCheckout(
            id='pref-7', checkout_url='https://mp.example/checkout', referencia_externa='gift-7-1700000000000'
        )
        use_case = CriarPagamentoCheckoutUseCase(presente_repo_mock, compra_repo_mock, gateway_mock)

        resultado = use_case.executar(
            presente_id=7,
            comprador=Comprador(nome='Bruno Lima', telefone='21988887777', documento='11222333000181'),
            modo_binario=True,
        )

        self.assertEqual(resultado.compra.pagamento_id, 'pref-7')
        self.assertEqual(resultado.compra.metodo_pagamento, 'pix')
        self.assertEqual(resultado.compra.metadados['checkoutUrl'], 'https://mp.example/checkout')
        self.assertEqual(resultado.preferencia.id, 'pref-7')
        self.assertTrue(gateway_mock.criar_preferencia.call_args.kwargs['modo_binario'])


class TestCriarPagamentoBase(unittest.TestCase):

    def test_base_sem_provedor_nao_e_instanciavel(self):
        with self.assertRaises(TypeError):
            _CriarPagamentoBase(Mock(), Mock())


class TestGerenciarCompras(unittest.TestCase):

    def setUp(self):
        self.compra_repo_mock = Mock()
        self.gateway_pix_mock = Mock(modo_dev=True)
        self.reconciliacao = ReconciliarPagamentoUseCase(self.compra_repo_mock, gateway_pix=self.gateway_pix_mock)
        self.use_case = GerenciarComprasUseCase(self.compra_repo_mock, self.reconciliacao, self.gateway_pix_mock)

    def test_cancelar_compra_pendente(self):
        cancelada = nova_compra(status_pagamento='cancelled')
        self.compra_repo_mock.buscar_por_id.side_effect = [nova_compra(), cancelada]
        self.compra_repo_mock.transicionar.return_value = cancelada

        compra = self.use_case.cancelar(1)

        self.assertEqual(compra.status_pagamento, 'cancelled')
        self.compra_repo_mock.transicionar.assert_called_once_with(1, 'cancelled', presente_disponivel=True)

    def test_cancelar_compra_paga_falha(self):
        self.compra_repo_mock.buscar_por_id.return_value = nova_compra(status_pagamento='paid')

        with self.assertRaises(StatusInvalidoError) as ctx:
            self.use_case.cancelar(1)
        self.assertEqual(ctx.exception.message, "Apenas pagamentos pendentes podem ser cancelados")

    def test_simular_fora_do_modo_dev(self):
        self.gateway_pix_mock.modo_dev = False

        with self.assertRaises(SimulacaoNaoPermitidaError):
            self.use_case.simular(1)

    def test_simular_sem_cobranca_pix(self):
        self.compra_repo_mock.buscar_por_id.return_value = nova_compra(pix_cobranca_id=None)

        with self.assertRaises(DadosInvalidosError) as ctx:
            self.use_case.simular(1)
        self.assertEqual(ctx.exception.message, "Compra não possui ID do PIX")

    def test_simular_pagamento_com_sucesso(self):
        pendente = nova_compra(pix_cobranca_id='pix_char_1')
        paga = nova_compra(pix_cobranca_id='pix_char_1', status_pagamento='paid')
        self.compra_repo_mock.buscar_por_id.side_effect = [pendente, paga]
        self.compra_repo_mock.transicionar.return_value = paga

        compra = self.use_case.simular(1)

        self.assertEqual(compra.status_pagamento, 'paid')
        self.gateway_pix_mock.simular_pagamento.assert_called_once_with('pix_char_1')


class TestGerenciarPresentes(unittest.TestCase):

    def setUp(self):
        self.presente_repo_mock = Mock()
        self.compra_repo_mock = Mock()
        self.use_case = GerenciarPresentesUseCase(self.presente_repo_mock, self.compra_repo_mock)
        self.presente = Presente(id=3, nome='Jogo de Cama', preco=Decimal('320.00'), descricao='400 fios')

    def test_listar_paginado_com_compradores(self):
        self.presente_repo_mock.listar.return_value = (51, [self.presente])
        self.compra_repo_mock.buscar_pagas_por_presentes.return_value = {3: [nova_compra(presente_id=3)]}

        resultado = self.use_case.listar(pagina=2, limite=50)

        self.presente_repo_mock.listar.assert_called_once_with(offset=50, limite=50)
        self.assertEqual(resultado['total'], 51)
        self.assertEqual(len(resultado['presentes'][0].compras_pagas), 1)

    def test_atualizar_sem_campos(self):
        with self.assertRaises(DadosInvalidosError) as ctx:
            self.use_case.atualizar(3, {})
        self.assertEqual(ctx.exception.message, "Nenhum campo para atualizar")

    def test_atualizar_string_vazia_limpa_campo(self):
        self.presente_repo_mock.buscar_por_id.return_value = self.presente
        self.presente_repo_mock.salvar.side_effect = lambda presente: presente

        presente = self.use_case.atualizar(3, {'descricao': ''})

        self.assertIsNone(presente.descricao)

    def test_disponibilidade_bloqueada_com_compra_pendente(self):
        """
        Cenário: O administrador tenta reabrir um presente que tem compra pendente.
        """
        self.presente.disponivel = False
        self.presente_repo_mock.buscar_por_id.return_value = self.presente
        self.compra_repo_mock.buscar_por_presente.return_value = [nova_compra(presente_id=3)]

        with self.assertRaises(EstadoInvalidoError):
            self.use_case.atualizar(3, {'disponivel': True})
        self.presente_repo_mock.salvar.assert_not_called()

    def test_deletar_com_compras_falha(self):
        self.presente_repo_mock.buscar_por_id.return_value = self.presente
        self.compra_repo_mock.existe_para_presente.return_value = True

        with self.assertRaises(PresenteComComprasError):
            self.use_case.deletar(3)
        self.presente_repo_mock.deletar.assert_not_called()

    def test_criar_preco_invalido(self):
        with self.assertRaises(DadosInvalidosError):
            self.use_case.criar(nome='Torradeira', preco=Decimal('0'))


class TestGerenciarConvidados(unittest.TestCase):

    def setUp(self):
        self.convidado_repo_mock = Mock()
        self.use_case = GerenciarConvidadosUseCase(self.convidado_repo_mock, relogio=lambda: AGORA)
        self.familia = [
            Convidado(id=1, nome='Carlos', telefone='11911112222', faixa_etaria='adult'),
            Convidado(id=2, nome='Julia', telefone='11911112222', faixa_etaria='adult'),
            Convidado(id=3, nome='Pedro', telefone='11911112222', faixa_etaria='child'),
        ]

    def test_buscar_familia_separa_adultos_e_criancas(self):
        self.convidado_repo_mock.buscar_por_telefone.return_value = self.familia

        familia = self.use_case.buscar_familia('11911112222')

        self.assertEqual(len(familia.adultos), 2)
        self.assertEqual(len(familia.criancas), 1)
        self.assertEqual(familia.total, 3)

    def test_buscar_familia_inexistente(self):
        self.convidado_repo_mock.buscar_por_telefone.return_value = []

        with self.assertRaises(FamiliaNaoEncontradaError):
            self.use_case.buscar_familia('000')

    def test_confirmar_por_telefone_ignora_ids_de_outras_familias(self):
        self.convidado_repo_mock.buscar_por_telefone.return_value = self.familia

        self.use_case.confirmar_por_telefone('11911112222', [
            {'id': 1, 'confirmado': True},
            {'id': 3, 'confirmado': False},
            {'id': 99, 'confirmado': True},
        ])

        self.convidado_repo_mock.atualizar_confirmacao.assert_any_call([1], True, AGORA)
        self.convidado_repo_mock.atualizar_confirmacao.assert_any_call([3], False, None)
        self.assertEqual(self.convidado_repo_mock.atualizar_confirmacao.call_count, 2)

    def test_confirmar_telefone_sem_convidados(self):
        self.convidado_repo_mock.buscar_por_telefone.return_value = []

        self.assertIsNone(self.use_case.confirmar_por_telefone('000', [{'id': 1, 'confirmado': True}]))

    def test_importar_faixa_etaria_invalida(self):
        with self.assertRaises(DadosInvalidosError):
            self.use_case.importar([{'nome': 'Ana', 'telefone': '119', 'faixa_etaria': 'senior'}])

    def test_estatisticas(self):
        self.familia[0].confirmado = True
        self.familia[2].confirmado = True
        self.convidado_repo_mock.listar.return_value = self.familia

        stats = self.use_case.estatisticas()

        self.assertEqual(stats['total'], 3)
        self.assertEqual(stats['confirmados'], {'total': 2, 'adultos': 1, 'criancas': 1})
        self.assertEqual(stats['nao_confirmados'], {'total': 1, 'adultos': 1, 'criancas': 0})
        self.assertEqual(stats['percentual_confirmacao'], 67)

    def test_estatisticas_sem_convidados(self):
        self.convidado_repo_mock.listar.return_value = []

        self.assertEqual(self.use_case.estatisticas()['percentual_confirmacao'], 0)


if __name__ == '__main__':
    unittest.main()
