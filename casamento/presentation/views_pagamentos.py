# casamento/presentation/views_pagamentos.py
"""
API de pagamentos da lista de presentes: criação, consulta, cancelamento,
simulação (modo dev), consultas administrativas e webhooks dos provedores.
"""
import logging

from rest_framework import status
from rest_framework.permissions import AllowAny, IsAdminUser
from rest_framework.response import Response
from rest_framework.views import APIView

from casamento.core import dependency_injection as di
from casamento.core.entities import Comprador, PagamentoCriado
from casamento.core.exceptions import BaseErroCore, ItemNaoEncontradoError
from .serializers import (
    CriarPagamentoSerializer,
    WebhookPixSerializer,
    CompraSerializer,
    CompraDetalheSerializer,
    StatusCompraSerializer,
)

logger = logging.getLogger(__name__)


def resposta_erro(erro: BaseErroCore) -> Response:
    """Traduz exceções do Core em {success: false, error}."""
    codigo = status.HTTP_404_NOT_FOUND if isinstance(erro, ItemNaoEncontradoError) else status.HTTP_400_BAD_REQUEST
    return Response({'success': False, 'error': erro.message}, status=codigo)


def resposta_validacao(erros) -> Response:
    return Response({'success': False, 'error': 'Dados inválidos', 'details': erros},
                    status=status.HTTP_400_BAD_REQUEST)


def _dados_pagamento_criado(resultado: PagamentoCriado) -> dict:
    compra = resultado.compra
    dados = {
        'compra_id': compra.id,
        'presente_id': resultado.presente.id,
        'presente_nome': resultado.presente.nome,
        'valor': str(resultado.presente.preco),
        'status_pagamento': compra.status_pagamento,
        'expira_em': compra.expira_em,
    }
    if resultado.cobranca_pix:
        cobranca = resultado.cobranca_pix
        dados['pix'] = {
            'cobranca_id': cobranca.id,
            'qr_code': cobranca.br_code,
            'qr_code_base64': cobranca.br_code_base64,
            'valor_centavos': cobranca.valor_centavos,
            'modo_dev': cobranca.modo_dev,
        }
    if resultado.preferencia:
        dados['preferencia_id'] = resultado.preferencia.id
        dados['checkout_url'] = resultado.preferencia.checkout_url
        dados['metodos_disponiveis'] = ['pix', 'card']
    return dados


# ====================================================================
# COMPRADOR
# ====================================================================

class CriarPagamentoAPIView(APIView):
    """Inicia o pagamento de um presente no provedor configurado."""
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = CriarPagamentoSerializer(data=request.data)
        if not serializer.is_valid():
            return resposta_validacao(serializer.errors)

        dados = serializer.validated_data
        comprador = Comprador(
            nome=dados['nome_comprador'],
            telefone=dados['telefone_comprador'],
            documento=dados['documento_comprador'],
            email=dados['email_comprador'],
        )
        try:
            resultado = di.get_criar_pagamento_use_case().executar(
                presente_id=dados['presente_id'],
                comprador=comprador,
                convidado_id=dados.get('convidado_id'),
                modo_binario=dados.get('modo_binario', False),
                endereco=dados.get('endereco'),
            )
        except BaseErroCore as e:
            return resposta_erro(e)

        return Response({'success': True, 'data': _dados_pagamento_criado(resultado)},
                        status=status.HTTP_201_CREATED)


class StatusPagamentoAPIView(APIView):
    """Consulta o status da compra, verificando o provedor PIX se ainda estiver pendente."""
    permission_classes = [AllowAny]

    def get(self, request, compra_id):
        try:
            compra, atualizado = di.get_reconciliar_pagamento_use_case().verificar_status(compra_id)
        except BaseErroCore as e:
            return resposta_erro(e)

        dados = StatusCompraSerializer(compra).data
        dados['atualizado'] = atualizado
        return Response({'success': True, 'data': dados})


class CancelarPagamentoAPIView(APIView):
    permission_classes = [AllowAny]

    def post(self, request, compra_id):
        try:
            compra = di.get_gerenciar_compras_use_case().cancelar(compra_id)
        except BaseErroCore as e:
            return resposta_erro(e)
        return Response({'success': True, 'data': StatusCompraSerializer(compra).data})


class SimularPagamentoAPIView(APIView):
    """Confirma um PIX pendente no ambiente de testes do provedor."""
    permission_classes = [AllowAny]

    def post(self, request, compra_id):
        try:
            compra = di.get_gerenciar_compras_use_case().simular(compra_id)
        except BaseErroCore as e:
            return resposta_erro(e)
        return Response({'success': True, 'data': StatusCompraSerializer(compra).data})


# ====================================================================
# ADMINISTRAÇÃO
# ====================================================================

class CompraListaAPIView(APIView):
    permission_classes = [IsAdminUser]

    def get(self, request):
        presente_id = request.query_params.get('presente_id')
        compras = di.get_gerenciar_compras_use_case().listar(
            status=request.query_params.get('status') or None,
            presente_id=int(presente_id) if presente_id and presente_id.isdigit() else None,
        )
        return Response({'success': True, 'data': CompraSerializer(compras, many=True).data})


class CompraDetalheAPIView(APIView):
    permission_classes = [IsAdminUser]

    def get(self, request, compra_id):
        try:
            compra = di.get_gerenciar_compras_use_case().detalhar(compra_id)
        except BaseErroCore as e:
            return resposta_erro(e)
        return Response({'success': True, 'data': CompraDetalheSerializer(compra).data})


# ====================================================================
# WEBHOOKS (sempre respondem 200 para o provedor não reenviar)
# ====================================================================

class WebhookAbacatePayAPIView(APIView):
    """Recebe {event, data: {id, status}} da AbacatePay."""
    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = WebhookPixSerializer(data=request.data)
        if serializer.is_valid():
            evento = serializer.validated_data.get('event')
            dados = serializer.validated_data.get('data') or {}
            logger.info("Webhook AbacatePay recebido: evento=%s cobranca=%s status=%s",
                        evento, dados.get('id'), dados.get('status'))
            resultado = di.get_reconciliar_pagamento_use_case().processar_webhook_pix(evento, dados)
            if resultado:
                logger.info("Webhook AbacatePay: compra %s -> %s", resultado.compra_id, resultado.status)
        else:
            logger.warning("Webhook AbacatePay com payload inválido: %s", serializer.errors)

        return Response({'success': True}, status=status.HTTP_200_OK)


class WebhookMercadoPagoAPIView(APIView):
    """
    Recebe notificações do Mercado Pago. Aceita o formato atual
    ({type, data: {id}}) e o IPN legado (?topic=payment&id=...).
    """
    authentication_classes = []
    permission_classes = [AllowAny]

    @staticmethod
    def _extrair_notificacao(request):
        params = request.query_params
        tipo = params.get('type') or params.get('topic')
        recurso_id = params.get('data.id') or params.get('id')

        corpo = request.data if hasattr(request.data, 'get') else {}
        tipo = corpo.get('type') or corpo.get('topic') or tipo
        dados = corpo.get('data')
        if hasattr(dados, 'get') and dados.get('id'):
            recurso_id = dados.get('id')
        elif corpo.get('resource') and not recurso_id:
            recurso_id = str(corpo.get('resource')).rstrip('/').split('/')[-1]
        return tipo, recurso_id

    def _processar(self, request):
        tipo, recurso_id = self._extrair_notificacao(request)
        logger.info("Webhook Mercado Pago recebido: tipo=%s id=%s", tipo, recurso_id)
        resultado = di.get_reconciliar_pagamento_use_case().processar_webhook_checkout(tipo, recurso_id)
        if resultado:
            logger.info("Webhook Mercado Pago: compra %s -> %s", resultado.compra_id, resultado.status)
        return Response({'success': True}, status=status.HTTP_200_OK)

    def post(self, request):
        return self._processar(request)

    def get(self, request):
        return self._processar(request)
