# casamento/core/dependency_injection.py
"""
Módulo de Injeção de Dependência (DI).
Responsável por instanciar os Use Cases com suas dependências de Repositórios/Gateways
concretos da camada de Infraestrutura.
"""
from django.conf import settings

from casamento.infrastructure.repositories import (
    PresenteRepositoryDjango,
    CompraRepositoryDjango,
    ConvidadoRepositoryDjango,
    MemoriaRepositoryDjango,
)
from casamento.infrastructure.gateways import (
    AbacatePayGateway,
    MercadoPagoGateway,
    ArmazenamentoArquivosDjango,
)
from casamento.infrastructure.rate_limit import LimitadorTentativasLogin
from .use_cases import (
    ReconciliarPagamentoUseCase,
    CriarPagamentoPixUseCase,
    CriarPagamentoCheckoutUseCase,
    GerenciarComprasUseCase,
    GerenciarPresentesUseCase,
    GerenciarConvidadosUseCase,
    GerenciarMemoriasUseCase,
)

PROVEDOR_ABACATEPAY = 'abacatepay'
PROVEDOR_MERCADOPAGO = 'mercadopago'

# Repositórios e Gateways Concretos
presente_repo = PresenteRepositoryDjango()
compra_repo = CompraRepositoryDjango()
convidado_repo = ConvidadoRepositoryDjango()
memoria_repo = MemoriaRepositoryDjango()
gateway_pix = AbacatePayGateway()
gateway_checkout = MercadoPagoGateway()
armazenamento = ArmazenamentoArquivosDjango()

# Vive enquanto o processo viver; o estado fica no cache com expiração.
limitador_login = LimitadorTentativasLogin(
    max_tentativas=settings.LOGIN_MAX_TENTATIVAS,
    janela_segundos=settings.LOGIN_JANELA_SEGUNDOS,
)

# ====================================================================
# Use Cases de Pagamento
# ====================================================================

def get_reconciliar_pagamento_use_case() -> ReconciliarPagamentoUseCase:
    return ReconciliarPagamentoUseCase(
        compra_repo=compra_repo,
        gateway_pix=gateway_pix,
        gateway_checkout=gateway_checkout,
    )

def get_criar_pagamento_use_case():
    """Escolhe o provedor que atende novas compras conforme PROVEDOR_PAGAMENTO."""
    if settings.PROVEDOR_PAGAMENTO == PROVEDOR_MERCADOPAGO:
        return CriarPagamentoCheckoutUseCase(presente_repo, compra_repo, gateway_checkout)
    return CriarPagamentoPixUseCase(
        presente_repo, compra_repo, gateway_pix,
        expiracao_segundos=settings.PIX_EXPIRACAO_SEGUNDOS,
    )

def get_gerenciar_compras_use_case() -> GerenciarComprasUseCase:
    return GerenciarComprasUseCase(
        compra_repo=compra_repo,
        reconciliacao=get_reconciliar_pagamento_use_case(),
        gateway_pix=gateway_pix,
    )

# ====================================================================
# Use Cases de Presentes, Convidados e Memórias
# ====================================================================

def get_gerenciar_presentes_use_case() -> GerenciarPresentesUseCase:
    return GerenciarPresentesUseCase(presente_repo, compra_repo, armazenamento)

def get_gerenciar_convidados_use_case() -> GerenciarConvidadosUseCase:
    return GerenciarConvidadosUseCase(convidado_repo)

def get_gerenciar_memorias_use_case() -> GerenciarMemoriasUseCase:
    return GerenciarMemoriasUseCase(memoria_repo, armazenamento)
