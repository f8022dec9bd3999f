import os
import time
import uuid
import logging
import requests
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from django.conf import settings
from django.core.files.storage import default_storage
from django.utils.dateparse import parse_datetime

from casamento.core.ports import IGatewayPix, IGatewayCheckout, IArmazenamentoArquivos
from casamento.core.entities import (
    Presente, Comprador, CobrancaPix, PreferenciaCheckout, PagamentoProvedor,
    METODO_PIX, METODO_CARTAO,
)
from casamento.core.exceptions import (
    PagamentoFalhouError,
    RecursoNaoEncontradoNoProvedorError,
    SimulacaoNaoPermitidaError,
)

logger = logging.getLogger(__name__)


def _parse_data(valor: Optional[str]) -> Optional[datetime]:
    if not valor:
        return None
    data = parse_datetime(valor)
    if data is not None and data.tzinfo is None:
        data = data.replace(tzinfo=timezone.utc)
    return data


def dividir_nome(nome: str):
    """Separa o nome completo em (primeiro nome, sobrenome)."""
    partes = (nome or "").split()
    if not partes:
        return "Cliente", "Convidado"
    if len(partes) == 1:
        return partes[0], partes[0]
    return partes[0], " ".join(partes[1:])


# ====================================================================
# GATEWAYS: Implementações concretas que se comunicam com APIs externas.
# ====================================================================

class AbacatePayGateway(IGatewayPix):
    """
    Gateway para a API de QR Code PIX da AbacatePay.
    Cada cobrança tem um id próprio e os status PENDING, PAID e EXPIRED.
    """

    def __init__(self, base_url: Optional[str] = None, api_key: Optional[str] = None,
                 modo_dev: Optional[bool] = None, timeout: Optional[int] = None):
        self.base_url = (base_url or settings.ABACATEPAY_BASE_URL).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.ABACATEPAY_API_KEY
        self.modo_dev = settings.ABACATEPAY_DEV_MODE if modo_dev is None else modo_dev
        self.timeout = timeout or settings.PROVEDOR_TIMEOUT_SEGUNDOS

        if not self.api_key:
            logger.warning("ABACATEPAY_API_KEY não configurada. Cobranças PIX reais falharão.")

    def _headers(self) -> Dict[str, str]:
        return {
            "accept": "application/json",
            "authorization": f"Bearer {self.api_key}",
            "content-type": "application/json",
        }

    def _requisitar(self, metodo: str, caminho: str, **kwargs) -> Dict[str, Any]:
        """Executa a chamada e devolve o campo 'data' do envelope {data, error}."""
        url = f"{self.base_url}{caminho}"
        try:
            response = requests.request(metodo, url, headers=self._headers(), timeout=self.timeout, **kwargs)
            response.raise_for_status()
            corpo = response.json()
        except requests.exceptions.HTTPError as e:
            mensagem = f"AbacatePay API Error: {e.response.status_code} - {e.response.text}"
            logger.error(mensagem)
            raise PagamentoFalhouError(mensagem)
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.error("Falha de comunicação com a AbacatePay (%s %s): %s", metodo, caminho, e)
            raise PagamentoFalhouError(f"Erro de conexão com a API da AbacatePay: {e}")

        if corpo.get("error"):
            raise PagamentoFalhouError(f"AbacatePay API Error: {corpo['error']}")
        return corpo.get("data") or {}

    def criar_cobranca(self, valor_centavos: int, expira_em_segundos: int, descricao: str,
                       comprador: Comprador, metadados: Dict[str, Any]) -> CobrancaPix:
        cliente = {
            "name": comprador.nome,
            "cellphone": comprador.telefone,
            "taxId": comprador.documento,
        }
        if comprador.email:
            cliente["email"] = comprador.email

        payload = {
            "amount": valor_centavos,
            "expiresIn": expira_em_segundos,
            "description": descricao,
            "customer": cliente,
            "metadata": metadados,
        }
        data = self._requisitar("POST", "/pixQrCode/create", json=payload)

        if not data.get("id"):
            raise PagamentoFalhouError("Resposta da AbacatePay sem id de cobrança.")

        return CobrancaPix(
            id=str(data["id"]),
            status=data.get("status", "PENDING"),
            br_code=data.get("brCode", ""),
            br_code_base64=data.get("brCodeBase64", ""),
            valor_centavos=data.get("amount", valor_centavos),
            expira_em=_parse_data(data.get("expiresAt")),
            modo_dev=bool(data.get("devMode", self.modo_dev)),
            taxa_plataforma=data.get("platformFee"),
        )

    def verificar_cobranca(self, cobranca_id: str) -> str:
        data = self._requisitar("GET", "/pixQrCode/check", params={"id": cobranca_id})
        return data.get("status", "PENDING")

    def simular_pagamento(self, cobranca_id: str) -> None:
        if not self.modo_dev:
            raise SimulacaoNaoPermitidaError()
        self._requisitar("POST", "/pixQrCode/simulate-payment", params={"id": cobranca_id}, json={"metadata": {}})
        logger.info("Pagamento simulado para a cobrança %s.", cobranca_id)


class MercadoPagoGateway(IGatewayCheckout):
    """
    Gateway para o Checkout Pro do Mercado Pago (preferências e consulta de pagamentos).
    """

    TIPOS_EXCLUIDOS = ("ticket", "atm", "digital_currency", "prepaid_card")
    MAX_PARCELAS = 6
    _TIPOS_CARTAO = ("credit_card", "debit_card")

    def __init__(self, access_token: Optional[str] = None, timeout: Optional[int] = None):
        self.api_base_url = "https://api.mercadopago.com"
        self.access_token = access_token if access_token is not None else settings.MERCADOPAGO_ACCESS_TOKEN
        self.timeout = timeout or settings.PROVEDOR_TIMEOUT_SEGUNDOS

        if not self.access_token:
            logger.warning("MERCADOPAGO_ACCESS_TOKEN não configurado. Pagamentos reais falharão.")

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
        }

    def _get(self, caminho: str, recurso_id: str) -> Dict[str, Any]:
        try:
            response = requests.get(f"{self.api_base_url}{caminho}", headers=self._headers(), timeout=self.timeout)
            if response.status_code == 404:
                raise RecursoNaoEncontradoNoProvedorError(recurso_id)
            response.raise_for_status()
            return response.json()
        except requests.exceptions.RequestException as e:
            logger.error("ERRO MP API: falha ao consultar %s: %s", caminho, e)
            raise PagamentoFalhouError(f"Erro de conexão com a API do Mercado Pago: {e}")

    def _notification_url(self) -> Optional[str]:
        base = settings.MERCADOPAGO_URL_WEBHOOK
        if not base:
            return None
        return f"{base.rstrip('/')}/api/pagamentos/webhook/mercadopago/"

    def _payer(self, comprador: Comprador, endereco: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        primeiro_nome, sobrenome = dividir_nome(comprador.nome)
        telefone = "".join(c for c in comprador.telefone if c.isdigit())
        payer = {
            "name": primeiro_nome,
            "surname": sobrenome,
            "first_name": primeiro_nome,
            "last_name": sobrenome,
            "phone": {"area_code": telefone[:2], "number": telefone[2:]},
            "identification": {
                "type": "CPF" if len(comprador.documento) == 11 else "CNPJ",
                "number": comprador.documento,
            },
        }
        if comprador.email:
            payer["email"] = comprador.email
        if endereco:
            payer["address"] = {
                "zip_code": endereco.get("cep", ""),
                "street_name": endereco.get("rua", ""),
                "street_number": endereco.get("numero", ""),
            }
        return payer

    def criar_preferencia(self, presente: Presente, comprador: Comprador,
                          convidado_id: Optional[int] = None, modo_binario: bool = False,
                          endereco: Optional[Dict[str, Any]] = None) -> PreferenciaCheckout:
        agora = datetime.now(timezone.utc)
        expira_em = agora + timedelta(minutes=settings.CHECKOUT_EXPIRACAO_MINUTOS)
        referencia_externa = f"gift-{presente.id}-{int(time.time() * 1000)}"

        payload = {
            "items": [{
                "id": f"gift-{presente.id}",
                "title": f"Presente de casamento: {presente.nome}",
                "description": presente.descricao or presente.nome,
                "quantity": 1,
                "unit_price": float(presente.preco),
                "currency_id": "BRL",
                "category_id": "others",
            }],
            "payer": self._payer(comprador, endereco),
            "payment_methods": {
                "excluded_payment_types": [{"id": tipo} for tipo in self.TIPOS_EXCLUIDOS],
                "installments": self.MAX_PARCELAS,
            },
            "binary_mode": modo_binario,
            "back_urls": {
                "success": settings.MERCADOPAGO_SUCCESS_URL,
                "failure": settings.MERCADOPAGO_FAILURE_URL,
                "pending": settings.MERCADOPAGO_PENDING_URL,
            },
            "metadata": {
                "gift_id": presente.id,
                "gift_name": presente.nome,
                "guest_id": convidado_id,
            },
            "external_reference": referencia_externa,
            "statement_descriptor": "CASAMENTO",
            "expires": True,
            "expiration_date_from": agora.isoformat(timespec="milliseconds"),
            "expiration_date_to": expira_em.isoformat(timespec="milliseconds"),
        }
        notification_url = self._notification_url()
        if notification_url:
            payload["notification_url"] = notification_url

        headers = self._headers()
        headers["X-Idempotency-Key"] = str(uuid.uuid4())

        try:
            response = requests.post(f"{self.api_base_url}/checkout/preferences", json=payload,
                                     headers=headers, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            logger.error("ERRO MP API: falha ao criar preferência do presente %s: %s", presente.id, e)
            raise PagamentoFalhouError(f"Erro de conexão com a API do Mercado Pago: {e}")

        return PreferenciaCheckout(
            id=str(data["id"]),
            checkout_url=data.get("init_point") or data.get("sandbox_init_point"),
            referencia_externa=data.get("external_reference", referencia_externa),
            expira_em=expira_em,
        )

    def buscar_preferencia(self, preferencia_id: str) -> PreferenciaCheckout:
        data = self._get(f"/checkout/preferences/{preferencia_id}", preferencia_id)
        return PreferenciaCheckout(
            id=str(data["id"]),
            checkout_url=data.get("init_point") or data.get("sandbox_init_point"),
            referencia_externa=data.get("external_reference"),
            expira_em=_parse_data(data.get("expiration_date_to")),
        )

    def buscar_pagamento(self, pagamento_id: str) -> PagamentoProvedor:
        data = self._get(f"/v1/payments/{pagamento_id}", pagamento_id)
        preference_id = data.get("preference_id")
        return PagamentoProvedor(
            id=str(data["id"]),
            status=data.get("status"),
            preference_id=str(preference_id) if preference_id else None,
            referencia_externa=data.get("external_reference"),
            metodo_pagamento=self._detectar_metodo(data),
        )

    def _detectar_metodo(self, data: Dict[str, Any]) -> Optional[str]:
        if data.get("payment_type_id") in self._TIPOS_CARTAO:
            return METODO_CARTAO
        if data.get("payment_method_id") == "pix" or data.get("payment_type_id") == "bank_transfer":
            return METODO_PIX
        return None


class ArmazenamentoArquivosDjango(IArmazenamentoArquivos):
    """Grava uploads no storage padrão do Django (MEDIA_ROOT por padrão)."""

    def salvar(self, arquivo, nome: str, pasta: str) -> str:
        _, extensao = os.path.splitext(nome or "")
        caminho = default_storage.save(f"{pasta}/{uuid.uuid4().hex}{extensao.lower()}", arquivo)
        return default_storage.url(caminho)
