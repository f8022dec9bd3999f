from datetime import timedelta
from decimal import Decimal
from unittest.mock import patch, Mock

from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import override_settings
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from casamento.infrastructure.models import Presente, Compra, Convidado
from casamento.core.entities import CobrancaPix, PagamentoProvedor
from casamento.core.exceptions import PagamentoFalhouError

User = get_user_model()


class PagamentoBaseTestCase(APITestCase):

    def setUp(self):
        self.presente = Presente.objects.create(nome='Jogo de Panelas', preco=Decimal('450.00'))

    def criar_compra(self, **kwargs):
        dados = dict(
            presente=self.presente,
            nome_comprador='Ana Souza',
            telefone_comprador='11999990000',
            documento_comprador='12345678901',
            pix_cobranca_id='pix_char_1',
            pagamento_id='pix_char_1',
        )
        dados.update(kwargs)
        return Compra.objects.create(**dados)


@override_settings(PROVEDOR_PAGAMENTO='abacatepay')
class CriarPagamentoAPITestCase(PagamentoBaseTestCase):

    def dados_compra(self):
        return {
            'presente_id': self.presente.id,
            'nome_comprador': 'Ana Souza',
            'telefone_comprador': '11999990000',
            'email_comprador': 'ana@example.com',
            'documento_comprador': '123.456.789-01',
        }

    @patch('casamento.core.dependency_injection.gateway_pix')
    def test_criar_pagamento_pix(self, mock_gateway):
        """
        Cenário: Comprador inicia o PIX de um presente disponível.
        """
        # ARRANGE
        mock_gateway.criar_cobranca.return_value = CobrancaPix(
            id='pix_char_1', status='PENDING', br_code='000201...', br_code_base64='data:image/png;base64,AAA',
            valor_centavos=45000, modo_dev=True, taxa_plataforma=80,
        )

        # ACT
        response = self.client.post('/api/pagamentos/', self.dados_compra(), format='json')

        # ASSERT
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['data']['pix']['cobranca_id'], 'pix_char_1')
        compra = Compra.objects.get(pk=response.data['data']['compra_id'])
        self.assertEqual(compra.documento_comprador, '12345678901')
        self.assertEqual(compra.status_pagamento, 'pending')
        self.presente.refresh_from_db()
        self.assertFalse(self.presente.disponivel)

    @patch('casamento.core.dependency_injection.gateway_pix')
    def test_segundo_pagamento_e_recusado(self, mock_gateway):
        """
        Cenário: Já existe um PIX pendente que vence em 30 minutos para o mesmo presente.
        """
        mock_gateway.criar_cobranca.return_value = CobrancaPix(
            id='pix_char_1', status='PENDING', br_code='x', br_code_base64='y', valor_centavos=45000,
            expira_em=timezone.now() + timedelta(minutes=30),
        )
        primeira = self.client.post('/api/pagamentos/', self.dados_compra(), format='json')
        self.assertEqual(primeira.status_code, status.HTTP_201_CREATED)

        response = self.client.post('/api/pagamentos/', self.dados_compra(), format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data['success'])
        self.assertEqual(response.data['error'], 'Já existe um pagamento pendente para este presente')
        self.assertEqual(Compra.objects.count(), 1)

    @patch('casamento.core.dependency_injection.gateway_pix')
    def test_pendente_vencido_nao_bloqueia_novo_pagamento(self, mock_gateway):
        """
        Cenário: O PIX anterior venceu há 5 minutos sem webhook; o presente ainda está indisponível.
        """
        # ARRANGE
        self.presente.disponivel = False
        self.presente.save()
        antiga = Compra.objects.create(
            presente=self.presente,
            nome_comprador='Bruno Lima',
            telefone_comprador='21988887777',
            documento_comprador='12345678901',
            pix_cobranca_id='pix_char_antigo',
            pagamento_id='pix_char_antigo',
            expira_em=timezone.now() - timedelta(minutes=5),
        )
        mock_gateway.criar_cobranca.return_value = CobrancaPix(
            id='pix_char_novo', status='PENDING', br_code='x', br_code_base64='y', valor_centavos=45000,
            expira_em=timezone.now() + timedelta(hours=1),
        )

        # ACT
        response = self.client.post('/api/pagamentos/', self.dados_compra(), format='json')

        # ASSERT
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        antiga.refresh_from_db()
        self.assertEqual(antiga.status_pagamento, 'expired')
        nova = Compra.objects.get(pk=response.data['data']['compra_id'])
        self.assertEqual(nova.pix_cobranca_id, 'pix_char_novo')
        self.presente.refresh_from_db()
        self.assertFalse(self.presente.disponivel)

    @patch('casamento.core.dependency_injection.gateway_pix')
    def test_falha_no_provedor_libera_presente(self, mock_gateway):
        """
        Cenário: O provedor PIX está fora do ar; nenhuma compra fica registrada.
        """
        mock_gateway.criar_cobranca.side_effect = PagamentoFalhouError("Erro de conexão com a API da AbacatePay")

        response = self.client.post('/api/pagamentos/', self.dados_compra(), format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Compra.objects.count(), 0)
        self.presente.refresh_from_db()
        self.assertTrue(self.presente.disponivel)

    def test_presente_inexistente(self):
        dados = self.dados_compra()
        dados['presente_id'] = 9999

        response = self.client.post('/api/pagamentos/', dados, format='json')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Presente não encontrado')

    def test_documento_invalido(self):
        dados = self.dados_compra()
        dados['documento_comprador'] = '123'

        response = self.client.post('/api/pagamentos/', dados, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('documento_comprador', response.data['details'])


class StatusECancelamentoAPITestCase(PagamentoBaseTestCase):

    @patch('casamento.core.dependency_injection.gateway_pix')
    def test_status_consulta_provedor(self, mock_gateway):
        self.presente.disponivel = False
        self.presente.save()
        compra = self.criar_compra()
        mock_gateway.verificar_cobranca.return_value = 'PAID'

        response = self.client.get(f'/api/pagamentos/{compra.id}/status/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['status_pagamento'], 'paid')
        self.assertTrue(response.data['data']['atualizado'])

    def test_status_compra_inexistente(self):
        response = self.client.get('/api/pagamentos/9999/status/')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_cancelar_compra_pendente(self):
        """
        Cenário: O comprador desiste do pagamento; o presente volta à lista.
        """
        self.presente.disponivel = False
        self.presente.save()
        compra = self.criar_compra()

        response = self.client.post(f'/api/pagamentos/{compra.id}/cancelar/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['status_pagamento'], 'cancelled')
        self.presente.refresh_from_db()
        self.assertTrue(self.presente.disponivel)

    def test_cancelar_compra_paga(self):
        compra = self.criar_compra(status_pagamento='paid')

        response = self.client.post(f'/api/pagamentos/{compra.id}/cancelar/')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Apenas pagamentos pendentes podem ser cancelados')

    @patch('casamento.core.dependency_injection.gateway_pix')
    def test_simular_pagamento_em_modo_dev(self, mock_gateway):
        mock_gateway.modo_dev = True
        compra = self.criar_compra()

        response = self.client.post(f'/api/pagamentos/{compra.id}/simular/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['status_pagamento'], 'paid')
        mock_gateway.simular_pagamento.assert_called_once_with('pix_char_1')

    @patch('casamento.core.dependency_injection.gateway_pix')
    def test_simular_fora_do_modo_dev(self, mock_gateway):
        mock_gateway.modo_dev = False
        compra = self.criar_compra()

        response = self.client.post(f'/api/pagamentos/{compra.id}/simular/')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class WebhookAPITestCase(PagamentoBaseTestCase):

    def test_webhook_pix_pago(self):
        """
        Cenário: A AbacatePay notifica o pagamento de uma cobrança conhecida.
        """
        # ARRANGE
        self.presente.disponivel = False
        self.presente.save()
        compra = self.criar_compra()

        # ACT
        response = self.client.post('/api/pagamentos/webhook/abacatepay/', {
            'event': 'pix.paid',
            'data': {'id': 'pix_char_1', 'status': 'PAID'},
        }, format='json')

        # ASSERT
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {'success': True})
        compra.refresh_from_db()
        self.assertEqual(compra.status_pagamento, 'paid')
        self.presente.refresh_from_db()
        self.assertFalse(self.presente.disponivel)

    def test_webhook_pix_expirado_nao_reverte_compra_paga(self):
        compra = self.criar_compra(status_pagamento='paid')

        response = self.client.post('/api/pagamentos/webhook/abacatepay/', {
            'event': 'pix.expired',
            'data': {'id': 'pix_char_1', 'status': 'EXPIRED'},
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        compra.refresh_from_db()
        self.assertEqual(compra.status_pagamento, 'paid')

    def test_webhook_pix_payload_invalido_responde_200(self):
        response = self.client.post('/api/pagamentos/webhook/abacatepay/', {'data': 'lixo'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {'success': True})

    def test_webhook_pix_cobranca_desconhecida_responde_200(self):
        response = self.client.post('/api/pagamentos/webhook/abacatepay/', {
            'event': 'pix.paid',
            'data': {'id': 'nao-existe', 'status': 'PAID'},
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)

    @patch('casamento.core.dependency_injection.gateway_checkout')
    def test_webhook_mercadopago_aprovado(self, mock_gateway):
        """
        Cenário: O Mercado Pago notifica um pagamento aprovado com cartão.
        """
        compra = self.criar_compra(pagamento_id='pref-1', pix_cobranca_id=None)
        mock_gateway.buscar_pagamento.return_value = PagamentoProvedor(
            id='123', status='approved', preference_id='pref-1', metodo_pagamento='card'
        )

        response = self.client.post('/api/pagamentos/webhook/mercadopago/', {
            'type': 'payment',
            'data': {'id': '123'},
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        mock_gateway.buscar_pagamento.assert_called_once_with('123')
        compra.refresh_from_db()
        self.assertEqual(compra.status_pagamento, 'paid')
        self.assertEqual(compra.metodo_pagamento, 'card')

    @patch('casamento.core.dependency_injection.gateway_checkout')
    def test_webhook_mercadopago_ipn_legado(self, mock_gateway):
        mock_gateway.buscar_pagamento.return_value = PagamentoProvedor(id='123', status='pending')

        response = self.client.get('/api/pagamentos/webhook/mercadopago/?topic=payment&id=123')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        mock_gateway.buscar_pagamento.assert_called_once_with('123')

    @patch('casamento.core.dependency_injection.gateway_checkout')
    def test_webhook_mercadopago_erro_do_provedor_responde_200(self, mock_gateway):
        mock_gateway.buscar_pagamento.side_effect = PagamentoFalhouError("timeout")

        response = self.client.post('/api/pagamentos/webhook/mercadopago/', {
            'type': 'payment',
            'data': {'id': '123'},
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {'success': True})


class AdminBaseTestCase(APITestCase):

    def setUp(self):
        self.admin = User.objects.create_user(email='noivos@example.com', password='senha123', is_staff=True)

    def autenticar(self):
        self.client.force_authenticate(user=self.admin)


class PresenteAPITestCase(AdminBaseTestCase):

    def test_listar_presentes_publico(self):
        Presente.objects.create(nome='Cafeteira', preco=Decimal('899.90'))

        response = self.client.get('/api/presentes/?pagina=1&limite=10')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total'], 1)
        self.assertEqual(response.data['presentes'][0]['nome'], 'Cafeteira')
        self.assertEqual(response.data['presentes'][0]['compras'], [])

    def test_criar_presente_exige_admin(self):
        response = self.client.post('/api/presentes/', {'nome': 'Torradeira', 'preco': '150.00'}, format='json')

        self.assertIn(response.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))
        self.assertEqual(Presente.objects.count(), 0)

    def test_criar_presente_como_admin(self):
        self.autenticar()

        response = self.client.post('/api/presentes/', {'nome': 'Torradeira', 'preco': '150.00'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Presente.objects.get().nome, 'Torradeira')

    def test_deletar_presente_com_compras(self):
        self.autenticar()
        presente = Presente.objects.create(nome='Cafeteira', preco=Decimal('899.90'))
        Compra.objects.create(presente=presente, nome_comprador='Ana', telefone_comprador='11999990000',
                              documento_comprador='12345678901', status_pagamento='cancelled')

        response = self.client.delete(f'/api/presentes/{presente.id}/')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(Presente.objects.filter(pk=presente.id).exists())

    def test_lista_de_compras_exige_admin(self):
        response = self.client.get('/api/pagamentos/compras/')
        self.assertIn(response.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))

        self.autenticar()
        response = self.client.get('/api/pagamentos/compras/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)


class ConvidadoAPITestCase(AdminBaseTestCase):

    def test_importar_csv(self):
        """
        Cenário: Os noivos enviam o CSV de convidados pelo painel.
        """
        self.autenticar()
        arquivo = SimpleUploadedFile(
            'convidados.csv',
            'name,phone,ageGroup\nCarlos,11911112222,adult\nPedro,11911112222,child\n\n'.encode('utf-8'),
            content_type='text/csv',
        )

        response = self.client.post('/api/convidados/importar/', {'arquivo': arquivo}, format='multipart')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['importados'], 2)
        self.assertEqual(Convidado.objects.filter(telefone='11911112222').count(), 2)

    def test_importar_csv_invalido(self):
        self.autenticar()
        arquivo = SimpleUploadedFile('convidados.csv', b'name,phone,ageGroup\nCarlos,119,senior\n',
                                     content_type='text/csv')

        response = self.client.post('/api/convidados/importar/', {'arquivo': arquivo}, format='multipart')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Convidado.objects.count(), 0)

    def test_confirmar_presenca_da_familia(self):
        carlos = Convidado.objects.create(nome='Carlos', telefone='11911112222')
        pedro = Convidado.objects.create(nome='Pedro', telefone='11911112222', faixa_etaria='child')
        estranho = Convidado.objects.create(nome='Outro', telefone='21900000000')

        response = self.client.post('/api/convidados/confirmar/', {
            'telefone': '11911112222',
            'confirmacoes': [
                {'id': carlos.id, 'confirmado': True},
                {'id': pedro.id, 'confirmado': False},
                {'id': estranho.id, 'confirmado': True},
            ],
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['familia']['total'], 2)
        carlos.refresh_from_db()
        estranho.refresh_from_db()
        self.assertTrue(carlos.confirmado)
        self.assertIsNotNone(carlos.data_confirmacao)
        self.assertFalse(estranho.confirmado)

    def test_confirmar_telefone_desconhecido(self):
        response = self.client.post('/api/convidados/confirmar/', {
            'telefone': '000',
            'confirmacoes': [{'id': 1, 'confirmado': True}],
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_familia_inexistente(self):
        response = self.client.get('/api/convidados/familia/000/')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_confirmar_em_lote(self):
        self.autenticar()
        carlos = Convidado.objects.create(nome='Carlos', telefone='1')
        julia = Convidado.objects.create(nome='Julia', telefone='2')

        response = self.client.post('/api/convidados/confirmar-lote/', {'ids': [carlos.id, julia.id]},
                                    format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['atualizados'], 2)
        self.assertEqual(Convidado.objects.filter(confirmado=True).count(), 2)

    def test_estatisticas(self):
        self.autenticar()
        Convidado.objects.create(nome='Carlos', telefone='1', confirmado=True)
        Convidado.objects.create(nome='Julia', telefone='1')

        response = self.client.get('/api/convidados/estatisticas/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total'], 2)
        self.assertEqual(response.data['percentual_confirmacao'], 50)


class MemoriaAPITestCase(APITestCase):

    @patch('casamento.core.dependency_injection.armazenamento')
    def test_enviar_foto(self, mock_armazenamento):
        mock_armazenamento.salvar.return_value = '/media/memorias/abc.jpg'
        arquivo = SimpleUploadedFile('festa.jpg', b'\xff\xd8\xff', content_type='image/jpeg')

        response = self.client.post('/api/memorias/', {'arquivo': arquivo, 'descricao': 'Pista de dança'},
                                    format='multipart')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['url'], '/media/memorias/abc.jpg')
        self.assertEqual(len(self.client.get('/api/memorias/').data), 1)


class AutenticacaoAPITestCase(AdminBaseTestCase):

    def setUp(self):
        super().setUp()
        cache.clear()

    def test_login_com_sucesso(self):
        response = self.client.post('/api/auth/signin/', {'email': 'noivos@example.com', 'senha': 'senha123'},
                                    format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)

    def test_login_bloqueado_apos_tentativas(self):
        """
        Cenário: Cinco senhas erradas seguidas bloqueiam o IP.
        """
        for _ in range(5):
            response = self.client.post('/api/auth/signin/', {'email': 'noivos@example.com', 'senha': 'errada'},
                                        format='json')
            self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

        response = self.client.post('/api/auth/signin/', {'email': 'noivos@example.com', 'senha': 'senha123'},
                                    format='json')

        self.assertEqual(response.status_code, status.HTTP_429_TOO_MANY_REQUESTS)
        self.assertIn('Muitas tentativas de login', response.data['error'])

    def test_cadastro_admin(self):
        response = self.client.post('/api/auth/signup/', {
            'nome': 'Noiva', 'email': 'noiva@example.com', 'senha': 'segredo1',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(User.objects.get(email='noiva@example.com').is_staff)

    @override_settings(PERMITIR_CADASTRO_ADMIN=False)
    def test_cadastro_desabilitado(self):
        response = self.client.post('/api/auth/signup/', {
            'nome': 'Intruso', 'email': 'x@example.com', 'senha': 'segredo1',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
