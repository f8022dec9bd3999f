from dataclasses import dataclass, field
from decimal import Decimal
from datetime import datetime, timezone
from typing import List, Optional, Dict, Any

# ====================================================================
# STATUS DE PAGAMENTO
# Valores persistidos em Compra.status_pagamento.
# ====================================================================

STATUS_PENDENTE = 'pending'
STATUS_PAGO = 'paid'
STATUS_FALHOU = 'failed'
STATUS_EXPIRADO = 'expired'
STATUS_CANCELADO = 'cancelled'

STATUS_TERMINAIS = frozenset({STATUS_PAGO, STATUS_FALHOU, STATUS_EXPIRADO, STATUS_CANCELADO})

# Resultados de reconciliação que não correspondem a uma transição
RESULTADO_JA_PROCESSADO = 'already_processed'
RESULTADO_NOTIFICACAO_RECEBIDA = 'notification_received'

METODO_PIX = 'pix'
METODO_CARTAO = 'card'

FAIXA_ADULTO = 'adult'
FAIXA_CRIANCA = 'child'


def agora_utc() -> datetime:
    return datetime.now(timezone.utc)


# ====================================================================
# ENTIDADES CORE
# Representam os objetos de negócio puros.
# ====================================================================

@dataclass
class Presente:
    """Item da lista de presentes que os convidados podem comprar."""
    nome: str
    preco: Decimal
    descricao: Optional[str] = None
    imagem_url: Optional[str] = None
    disponivel: bool = True
    id: Optional[int] = None
    criado_em: datetime = field(default_factory=agora_utc)
    compras_pagas: List['Compra'] = field(default_factory=list)

    @property
    def preco_em_centavos(self) -> int:
        return int((self.preco * 100).quantize(Decimal('1')))


@dataclass
class Compra:
    """
    Tentativa de compra de um presente, com o estado do pagamento no provedor.

    O status só avança de 'pending' para um status terminal; nunca sai dele.
    """
    presente_id: int
    nome_comprador: str
    telefone_comprador: str
    documento_comprador: str
    metodo_pagamento: str = METODO_PIX
    email_comprador: Optional[str] = None
    status_pagamento: str = STATUS_PENDENTE
    convidado_id: Optional[int] = None
    pagamento_id: Optional[str] = None
    pix_cobranca_id: Optional[str] = None
    pix_qr_code: Optional[str] = None
    pix_qr_code_base64: Optional[str] = None
    expira_em: Optional[datetime] = None
    metadados: Dict[str, Any] = field(default_factory=dict)
    id: Optional[int] = None
    comprado_em: datetime = field(default_factory=agora_utc)
    atualizado_em: datetime = field(default_factory=agora_utc)
    presente: Optional[Presente] = None

    @property
    def finalizada(self) -> bool:
        return self.status_pagamento in STATUS_TERMINAIS

    @property
    def pendente(self) -> bool:
        return self.status_pagamento == STATUS_PENDENTE

    def expirada_em(self, momento: datetime) -> bool:
        """Uma compra sem data de expiração nunca é considerada vencida."""
        return self.expira_em is not None and self.expira_em <= momento


@dataclass
class Convidado:
    """Convidado do casamento. O telefone agrupa a família."""
    nome: str
    telefone: str
    faixa_etaria: str = FAIXA_ADULTO
    confirmado: bool = False
    data_confirmacao: Optional[datetime] = None
    id: Optional[int] = None


@dataclass
class Memoria:
    """Foto enviada pelos convidados."""
    url: str
    descricao: Optional[str] = None
    id: Optional[int] = None
    enviado_em: datetime = field(default_factory=agora_utc)


# ====================================================================
# OBJETOS DE VALOR DOS PROVEDORES DE PAGAMENTO
# ====================================================================

@dataclass
class Comprador:
    nome: str
    telefone: str
    documento: str
    email: Optional[str] = None


@dataclass
class CobrancaPix:
    """Cobrança PIX criada no provedor baseado em id de cobrança (AbacatePay)."""
    id: str
    status: str
    br_code: str
    br_code_base64: str
    valor_centavos: int
    expira_em: Optional[datetime] = None
    modo_dev: bool = False
    taxa_plataforma: Optional[int] = None


@dataclass
class PreferenciaCheckout:
    """Preferência de checkout do provedor baseado em preferência (Mercado Pago)."""
    id: str
    checkout_url: Optional[str] = None
    referencia_externa: Optional[str] = None
    expira_em: Optional[datetime] = None


@dataclass
class PagamentoProvedor:
    """Pagamento consultado no provedor baseado em preferência."""
    id: str
    status: str
    preference_id: Optional[str] = None
    referencia_externa: Optional[str] = None
    metodo_pagamento: Optional[str] = None


@dataclass
class PagamentoCriado:
    """Retorno da criação de pagamento: a compra pendente e os dados para o comprador pagar."""
    compra: Compra
    presente: Presente
    cobranca_pix: Optional[CobrancaPix] = None
    preferencia: Optional[PreferenciaCheckout] = None


@dataclass
class ResultadoReconciliacao:
    """Resultado reportado ao processar um evento de pagamento."""
    compra_id: int
    status: str


@dataclass
class FamiliaConvidados:
    telefone: str
    adultos: List[Convidado] = field(default_factory=list)
    criancas: List[Convidado] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.adultos) + len(self.criancas)
