# casamento/core/use_cases.py
"""
Implementação dos Casos de Uso (Lógica de Negócio) da aplicação.
Esta camada depende apenas das Entidades e Portas (Interfaces) do Core,
garantindo o isolamento da lógica de negócio.
"""
import logging
import re
from abc import ABC, abstractmethod
from typing import List, Optional, Dict, Any, Tuple, Callable
from decimal import Decimal
from datetime import datetime

from casamento.core.entities import (
    Presente, Compra, Convidado, Memoria, Comprador, FamiliaConvidados,
    PagamentoCriado, PagamentoProvedor, ResultadoReconciliacao, agora_utc,
    STATUS_PENDENTE, STATUS_PAGO, STATUS_FALHOU, STATUS_EXPIRADO, STATUS_CANCELADO,
    RESULTADO_JA_PROCESSADO, RESULTADO_NOTIFICACAO_RECEBIDA,
    METODO_PIX, FAIXA_ADULTO, FAIXA_CRIANCA,
)
from casamento.core.exceptions import (
    DadosInvalidosError,
    PresenteNaoEncontradoError,
    CompraNaoEncontradaError,
    FamiliaNaoEncontradaError,
    EstadoInvalidoError,
    PresenteIndisponivelError,
    PresenteJaCompradoError,
    PagamentoPendenteExistenteError,
    StatusInvalidoError,
    PresenteComComprasError,
    SimulacaoNaoPermitidaError,
    PagamentoFalhouError,
    RecursoNaoEncontradoNoProvedorError,
)
from casamento.core.ports import (
    IPresenteRepository,
    ICompraRepository,
    IConvidadoRepository,
    IMemoriaRepository,
    IGatewayPix,
    IGatewayCheckout,
    IArmazenamentoArquivos,
)

logger = logging.getLogger(__name__)

_REFERENCIA_EXTERNA_RE = re.compile(r'^gift-(\d+)-')


def somente_digitos(valor: Optional[str]) -> str:
    return re.sub(r'\D', '', valor or '')


def extrair_presente_da_referencia(referencia_externa: Optional[str]) -> Optional[int]:
    """Extrai o id do presente de uma referência externa no formato 'gift-{id}-...'."""
    if not referencia_externa:
        return None
    match = _REFERENCIA_EXTERNA_RE.match(referencia_externa)
    return int(match.group(1)) if match else None


# ====================================================================
# 1. RECONCILIAÇÃO DE PAGAMENTOS
# ====================================================================

class ReconciliarPagamentoUseCase:
    """
    Traduz eventos dos provedores de pagamento (webhook ou consulta) em transições
    de status da Compra e na disponibilidade do Presente.

    Toda transição passa por aplicar_transicao, que só age sobre compras pendentes.
    """

    # Provedor baseado em id de cobrança (AbacatePay)
    _STATUS_COBRANCA_PIX = {
        "PAID": STATUS_PAGO,
        "EXPIRED": STATUS_EXPIRADO,
    }
    _EVENTOS_PIX = {
        ("pix.paid", "PAID"): STATUS_PAGO,
        ("pix.expired", "EXPIRED"): STATUS_EXPIRADO,
    }

    # Provedor baseado em preferência (Mercado Pago)
    _STATUS_CHECKOUT_MAP = {
        "approved": STATUS_PAGO,
        "rejected": STATUS_FALHOU,
        "cancelled": STATUS_FALHOU,
        "expired": STATUS_EXPIRADO,
        "refunded": STATUS_EXPIRADO,
    }
    _STATUS_CHECKOUT_EM_ANDAMENTO = ("pending", "in_process")
    _TIPOS_NOTIFICACAO_CHECKOUT = ("payment", "merchant_order")

    def __init__(self, compra_repo: ICompraRepository,
                 gateway_pix: Optional[IGatewayPix] = None,
                 gateway_checkout: Optional[IGatewayCheckout] = None):
        self.compra_repo = compra_repo
        self.gateway_pix = gateway_pix
        self.gateway_checkout = gateway_checkout

    def aplicar_transicao(self, compra: Compra, status_destino: str) -> ResultadoReconciliacao:
        """
        Aplica 'pending' -> status_destino. Compras já finalizadas, ou finalizadas por
        outra requisição concorrente, são reportadas como 'already_processed'.
        """
        if compra.finalizada:
            logger.info("Compra %s já está em '%s'; evento '%s' ignorado.",
                        compra.id, compra.status_pagamento, status_destino)
            return ResultadoReconciliacao(compra_id=compra.id, status=RESULTADO_JA_PROCESSADO)

        atualizada = self.compra_repo.transicionar(
            compra.id, status_destino, presente_disponivel=(status_destino != STATUS_PAGO)
        )
        if atualizada is None:
            logger.info("Compra %s deixou de estar pendente antes da transição para '%s'.",
                        compra.id, status_destino)
            return ResultadoReconciliacao(compra_id=compra.id, status=RESULTADO_JA_PROCESSADO)

        logger.info("Compra %s: %s -> %s (presente %s).",
                    compra.id, compra.status_pagamento, status_destino, compra.presente_id)
        return ResultadoReconciliacao(compra_id=compra.id, status=status_destino)

    # --- Provedor baseado em id de cobrança ---

    def verificar_status(self, compra_id: int) -> Tuple[Compra, bool]:
        """
        Consulta o provedor PIX para uma compra pendente. Retorna a compra
        (atualizada, se for o caso) e se houve transição.
        """
        compra = self.compra_repo.buscar_por_id(compra_id)
        if not compra:
            raise CompraNaoEncontradaError()

        if compra.finalizada or not compra.pix_cobranca_id or self.gateway_pix is None:
            return compra, False

        try:
            status_provedor = self.gateway_pix.verificar_cobranca(compra.pix_cobranca_id)
        except PagamentoFalhouError:
            logger.exception("Erro ao consultar a cobrança %s da compra %s.",
                             compra.pix_cobranca_id, compra.id)
            return compra, False

        status_destino = self._STATUS_COBRANCA_PIX.get(status_provedor)
        if status_destino is None:
            return compra, False

        resultado = self.aplicar_transicao(compra, status_destino)
        atualizada = self.compra_repo.buscar_por_id(compra_id) or compra
        return atualizada, resultado.status == status_destino

    def processar_webhook_pix(self, evento: Optional[str], dados: Optional[Dict[str, Any]]) -> Optional[ResultadoReconciliacao]:
        """Processa {event, data: {id, status}}. Erros são registrados e nunca propagados."""
        try:
            return self._processar_evento_pix(evento, dados or {})
        except Exception:
            logger.exception("Erro ao processar webhook PIX (evento=%s).", evento)
            return None

    def _processar_evento_pix(self, evento: Optional[str], dados: Dict[str, Any]) -> Optional[ResultadoReconciliacao]:
        cobranca_id = dados.get("id")
        if not cobranca_id:
            logger.warning("Webhook PIX sem id de cobrança (evento=%s).", evento)
            return None

        compra = self.compra_repo.buscar_por_cobranca_pix(str(cobranca_id))
        if compra is None:
            logger.warning("Nenhuma compra encontrada para a cobrança PIX %s.", cobranca_id)
            return None

        if compra.status_pagamento == STATUS_PAGO:
            return ResultadoReconciliacao(compra_id=compra.id, status=RESULTADO_JA_PROCESSADO)

        status_destino = self._EVENTOS_PIX.get((evento, dados.get("status")))
        if status_destino is None:
            logger.info("Evento PIX '%s' com status '%s' não gera transição.", evento, dados.get("status"))
            return None

        return self.aplicar_transicao(compra, status_destino)

    # --- Provedor baseado em preferência ---

    def processar_webhook_checkout(self, tipo: Optional[str], recurso_id: Optional[str]) -> Optional[ResultadoReconciliacao]:
        """Processa notificações {type|topic, data.id|id}. Erros são registrados e nunca propagados."""
        if tipo not in self._TIPOS_NOTIFICACAO_CHECKOUT or not recurso_id:
            logger.info("Notificação de checkout ignorada (tipo=%s, id=%s).", tipo, recurso_id)
            return None

        try:
            return self._processar_notificacao_checkout(str(recurso_id))
        except Exception:
            logger.exception("Erro ao processar notificação de checkout %s (tipo=%s).", recurso_id, tipo)
            return None

    def _processar_notificacao_checkout(self, recurso_id: str) -> Optional[ResultadoReconciliacao]:
        try:
            pagamento = self.gateway_checkout.buscar_pagamento(recurso_id)
        except RecursoNaoEncontradoNoProvedorError:
            # O id notificado pode ser de uma preferência e não de um pagamento
            return self._processar_notificacao_preferencia(recurso_id)

        compra = self._resolver_compra_checkout(pagamento)
        if compra is None:
            logger.warning("Nenhuma compra associada ao pagamento %s (preferência=%s, referência=%s).",
                           pagamento.id, pagamento.preference_id, pagamento.referencia_externa)
            return None

        if compra.status_pagamento == STATUS_PAGO:
            return ResultadoReconciliacao(compra_id=compra.id, status=RESULTADO_JA_PROCESSADO)

        if (compra.pendente and pagamento.metodo_pagamento
                and pagamento.metodo_pagamento != compra.metodo_pagamento):
            self.compra_repo.atualizar_metodo_pagamento(compra.id, pagamento.metodo_pagamento)
            compra.metodo_pagamento = pagamento.metodo_pagamento

        status_destino = self._STATUS_CHECKOUT_MAP.get(pagamento.status)
        if status_destino is not None:
            return self.aplicar_transicao(compra, status_destino)

        if pagamento.status in self._STATUS_CHECKOUT_EM_ANDAMENTO:
            return ResultadoReconciliacao(compra_id=compra.id, status=STATUS_PENDENTE)
        return ResultadoReconciliacao(compra_id=compra.id, status=pagamento.status)

    def _processar_notificacao_preferencia(self, preferencia_id: str) -> Optional[ResultadoReconciliacao]:
        try:
            preferencia = self.gateway_checkout.buscar_preferencia(preferencia_id)
        except RecursoNaoEncontradoNoProvedorError:
            logger.warning("Id %s não corresponde a pagamento nem a preferência.", preferencia_id)
            return None

        compra = self.compra_repo.buscar_por_pagamento_id(preferencia.id)
        if compra is None:
            return None
        return ResultadoReconciliacao(compra_id=compra.id, status=RESULTADO_NOTIFICACAO_RECEBIDA)

    def _resolver_compra_checkout(self, pagamento: PagamentoProvedor) -> Optional[Compra]:
        """Localiza a compra de um pagamento: primeiro pela preferência, depois pela referência externa."""
        if pagamento.preference_id:
            return self.compra_repo.buscar_por_pagamento_id(pagamento.preference_id)

        presente_id = extrair_presente_da_referencia(pagamento.referencia_externa)
        if presente_id is None:
            return None
        for compra in self.compra_repo.buscar_por_presente(presente_id):
            if compra.pendente:
                return compra
        return None


# ====================================================================
# 2. CRIAÇÃO DE PAGAMENTOS
# ====================================================================

class _CriarPagamentoBase(ABC):
    """Validações e reserva do presente comuns aos dois provedores."""

    def __init__(self, presente_repo: IPresenteRepository, compra_repo: ICompraRepository,
                 relogio: Callable[[], datetime] = agora_utc):
        self.presente_repo = presente_repo
        self.compra_repo = compra_repo
        self.relogio = relogio
        self.reconciliacao = ReconciliarPagamentoUseCase(compra_repo)

    def _validar_presente(self, presente_id: int) -> Presente:
        """
        As compras do presente são avaliadas antes da disponibilidade: uma compra
        pendente ainda válida mantém o presente indisponível, e uma pendente já
        vencida é expirada aqui, devolvendo o presente à lista.
        """
        presente = self.presente_repo.buscar_por_id(presente_id)
        if not presente:
            raise PresenteNaoEncontradoError()

        agora = self.relogio()
        compras = self.compra_repo.buscar_por_presente(presente_id)
        if any(c.status_pagamento == STATUS_PAGO for c in compras):
            raise PresenteJaCompradoError()
        if any(c.pendente and not c.expirada_em(agora) for c in compras):
            raise PagamentoPendenteExistenteError()

        vencidas = [c for c in compras if c.pendente]
        for compra in vencidas:
            self.reconciliacao.aplicar_transicao(compra, STATUS_EXPIRADO)
        if vencidas:
            presente = self.presente_repo.buscar_por_id(presente_id) or presente

        if not presente.disponivel:
            raise PresenteIndisponivelError()
        return presente

    @staticmethod
    def _normalizar_comprador(comprador: Comprador) -> Comprador:
        documento = somente_digitos(comprador.documento)
        if len(documento) not in (11, 14):
            raise DadosInvalidosError("CPF ou CNPJ inválido")
        return Comprador(
            nome=comprador.nome.strip(),
            telefone=comprador.telefone.strip(),
            documento=documento,
            email=comprador.email or None,
        )

    @abstractmethod
    def _criar_no_provedor(self, presente: Presente, comprador: Comprador,
                           convidado_id: Optional[int], **opcoes) -> Tuple[Compra, Dict[str, Any]]:
        """Cria a cobrança/preferência no provedor e monta a Compra pendente."""

    def executar(self, presente_id: int, comprador: Comprador,
                 convidado_id: Optional[int] = None, **opcoes) -> PagamentoCriado:
        comprador = self._normalizar_comprador(comprador)
        presente = self._validar_presente(presente_id)

        if not self.presente_repo.reservar(presente.id):
            raise PresenteIndisponivelError()

        try:
            compra, dados_provedor = self._criar_no_provedor(presente, comprador, convidado_id, **opcoes)
            compra = self.compra_repo.criar(compra)
        except Exception:
            self.presente_repo.liberar(presente.id)
            logger.error("Falha ao criar pagamento do presente %s; reserva desfeita.", presente.id)
            raise

        presente.disponivel = False
        logger.info("Compra %s criada para o presente %s (pagamento %s).",
                    compra.id, presente.id, compra.pagamento_id)
        return PagamentoCriado(compra=compra, presente=presente, **dados_provedor)


class CriarPagamentoPixUseCase(_CriarPagamentoBase):
    """Cria uma cobrança PIX (QR Code) no provedor baseado em id de cobrança."""

    DESCRICAO_COBRANCA = "Pagamento de presente"

    def __init__(self, presente_repo: IPresenteRepository, compra_repo: ICompraRepository,
                 gateway_pix: IGatewayPix, expiracao_segundos: int = 3600,
                 relogio: Callable[[], datetime] = agora_utc):
        super().__init__(presente_repo, compra_repo, relogio)
        self.gateway_pix = gateway_pix
        self.expiracao_segundos = expiracao_segundos

    def _criar_no_provedor(self, presente, comprador, convidado_id, **opcoes):
        cobranca = self.gateway_pix.criar_cobranca(
            valor_centavos=presente.preco_em_centavos,
            expira_em_segundos=self.expiracao_segundos,
            descricao=self.DESCRICAO_COBRANCA,
            comprador=comprador,
            metadados={"presenteId": presente.id, "presenteNome": presente.nome, "convidadoId": convidado_id},
        )
        compra = Compra(
            presente_id=presente.id,
            convidado_id=convidado_id,
            nome_comprador=comprador.nome,
            telefone_comprador=comprador.telefone,
            email_comprador=comprador.email,
            documento_comprador=comprador.documento,
            metodo_pagamento=METODO_PIX,
            pagamento_id=cobranca.id,
            pix_cobranca_id=cobranca.id,
            pix_qr_code=cobranca.br_code,
            pix_qr_code_base64=cobranca.br_code_base64,
            expira_em=cobranca.expira_em,
            metadados={"devMode": cobranca.modo_dev, "platformFee": cobranca.taxa_plataforma},
        )
        return compra, {"cobranca_pix": cobranca}


class CriarPagamentoCheckoutUseCase(_CriarPagamentoBase):
    """Cria uma preferência de checkout (PIX ou cartão) no provedor baseado em preferência."""

    def __init__(self, presente_repo: IPresenteRepository, compra_repo: ICompraRepository,
                 gateway_checkout: IGatewayCheckout, relogio: Callable[[], datetime] = agora_utc):
        super().__init__(presente_repo, compra_repo, relogio)
        self.gateway_checkout = gateway_checkout

    def _criar_no_provedor(self, presente, comprador, convidado_id, **opcoes):
        preferencia = self.gateway_checkout.criar_preferencia(
            presente,
            comprador,
            convidado_id=convidado_id,
            modo_binario=opcoes.get("modo_binario", False),
            endereco=opcoes.get("endereco"),
        )
        compra = Compra(
            presente_id=presente.id,
            convidado_id=convidado_id,
            nome_comprador=comprador.nome,
            telefone_comprador=comprador.telefone,
            email_comprador=comprador.email,
            documento_comprador=comprador.documento,
            metodo_pagamento=METODO_PIX,
            pagamento_id=preferencia.id,
            expira_em=preferencia.expira_em,
            metadados={"checkoutUrl": preferencia.checkout_url, "externalReference": preferencia.referencia_externa},
        )
        return compra, {"preferencia": preferencia}


# ====================================================================
# 3. GESTÃO DE COMPRAS
# ====================================================================

class GerenciarComprasUseCase:
    """Cancelamento, simulação (modo dev) e consultas administrativas de compras."""

    def __init__(self, compra_repo: ICompraRepository, reconciliacao: ReconciliarPagamentoUseCase,
                 gateway_pix: Optional[IGatewayPix] = None):
        self.compra_repo = compra_repo
        self.reconciliacao = reconciliacao
        self.gateway_pix = gateway_pix

    def _buscar(self, compra_id: int) -> Compra:
        compra = self.compra_repo.buscar_por_id(compra_id)
        if not compra:
            raise CompraNaoEncontradaError()
        return compra

    def cancelar(self, compra_id: int) -> Compra:
        compra = self._buscar(compra_id)
        if not compra.pendente:
            raise StatusInvalidoError()

        resultado = self.reconciliacao.aplicar_transicao(compra, STATUS_CANCELADO)
        if resultado.status == RESULTADO_JA_PROCESSADO:
            raise StatusInvalidoError()
        return self._buscar(compra_id)

    def simular(self, compra_id: int) -> Compra:
        if self.gateway_pix is None or not self.gateway_pix.modo_dev:
            raise SimulacaoNaoPermitidaError()

        compra = self._buscar(compra_id)
        if not compra.pendente:
            raise StatusInvalidoError("Apenas pagamentos pendentes podem ser simulados")
        if not compra.pix_cobranca_id:
            raise DadosInvalidosError("Compra não possui ID do PIX")

        self.gateway_pix.simular_pagamento(compra.pix_cobranca_id)
        self.reconciliacao.aplicar_transicao(compra, STATUS_PAGO)
        return self._buscar(compra_id)

    def listar(self, status: Optional[str] = None, presente_id: Optional[int] = None) -> List[Compra]:
        return self.compra_repo.listar(status=status, presente_id=presente_id)

    def detalhar(self, compra_id: int) -> Compra:
        return self._buscar(compra_id)


# ====================================================================
# 4. LISTA DE PRESENTES
# ====================================================================

class GerenciarPresentesUseCase:
    """Catálogo da lista de presentes (consulta pública e administração)."""

    CAMPOS_EDITAVEIS = ("nome", "descricao", "preco", "imagem_url", "disponivel")
    CAMPOS_ANULAVEIS = ("descricao", "imagem_url")

    def __init__(self, presente_repo: IPresenteRepository, compra_repo: ICompraRepository,
                 armazenamento: Optional[IArmazenamentoArquivos] = None):
        self.presente_repo = presente_repo
        self.compra_repo = compra_repo
        self.armazenamento = armazenamento

    def _buscar(self, presente_id: int) -> Presente:
        presente = self.presente_repo.buscar_por_id(presente_id)
        if not presente:
            raise PresenteNaoEncontradoError()
        return presente

    def _anexar_compras_pagas(self, presentes: List[Presente]) -> List[Presente]:
        compras = self.compra_repo.buscar_pagas_por_presentes([p.id for p in presentes])
        for presente in presentes:
            presente.compras_pagas = compras.get(presente.id, [])
        return presentes

    def listar(self, pagina: int = 1, limite: int = 50) -> Dict[str, Any]:
        pagina = max(pagina, 1)
        limite = max(limite, 1)
        total, presentes = self.presente_repo.listar(offset=(pagina - 1) * limite, limite=limite)
        return {
            "total": total,
            "pagina": pagina,
            "limite": limite,
            "presentes": self._anexar_compras_pagas(presentes),
        }

    def detalhar(self, presente_id: int) -> Presente:
        return self._anexar_compras_pagas([self._buscar(presente_id)])[0]

    def _salvar_imagem(self, imagem) -> str:
        if self.armazenamento is None:
            raise DadosInvalidosError("Upload de imagens não está configurado.")
        return self.armazenamento.salvar(imagem, imagem.name, "presentes")

    def criar(self, nome: str, preco: Decimal, descricao: Optional[str] = None,
              imagem_url: Optional[str] = None, disponivel: bool = True, imagem=None) -> Presente:
        if not nome or not nome.strip():
            raise DadosInvalidosError("Nome do presente é obrigatório")
        if preco is None or Decimal(preco) <= 0:
            raise DadosInvalidosError("Preço deve ser maior que zero")

        if imagem is not None:
            imagem_url = self._salvar_imagem(imagem)

        presente = Presente(
            nome=nome.strip(),
            preco=Decimal(preco),
            descricao=descricao or None,
            imagem_url=imagem_url or None,
            disponivel=disponivel,
        )
        return self.presente_repo.salvar(presente)

    def atualizar(self, presente_id: int, campos: Dict[str, Any], imagem=None) -> Presente:
        campos = {k: v for k, v in campos.items() if k in self.CAMPOS_EDITAVEIS}
        if not campos and imagem is None:
            raise DadosInvalidosError("Nenhum campo para atualizar")

        presente = self._buscar(presente_id)

        if "disponivel" in campos and campos["disponivel"] != presente.disponivel:
            ativas = [c for c in self.compra_repo.buscar_por_presente(presente_id)
                      if c.status_pagamento in (STATUS_PENDENTE, STATUS_PAGO)]
            if ativas:
                raise EstadoInvalidoError(
                    "A disponibilidade deste presente é controlada por uma compra em andamento ou paga."
                )

        for campo in self.CAMPOS_ANULAVEIS:
            if campo in campos and campos[campo] == "":
                campos[campo] = None

        if imagem is not None:
            campos["imagem_url"] = self._salvar_imagem(imagem)

        for campo, valor in campos.items():
            setattr(presente, campo, valor)
        return self.presente_repo.salvar(presente)

    def deletar(self, presente_id: int) -> None:
        self._buscar(presente_id)
        if self.compra_repo.existe_para_presente(presente_id):
            raise PresenteComComprasError()
        self.presente_repo.deletar(presente_id)


# ====================================================================
# 5. CONVIDADOS (RSVP)
# ====================================================================

class GerenciarConvidadosUseCase:
    """Importação da lista de convidados e confirmação de presença por família."""

    FAIXAS_ETARIAS = (FAIXA_ADULTO, FAIXA_CRIANCA)

    def __init__(self, convidado_repo: IConvidadoRepository, relogio: Callable[[], datetime] = agora_utc):
        self.convidado_repo = convidado_repo
        self.relogio = relogio

    def importar(self, registros: List[Dict[str, str]]) -> List[Convidado]:
        convidados = []
        for numero, registro in enumerate(registros, start=1):
            nome = (registro.get("nome") or "").strip()
            telefone = (registro.get("telefone") or "").strip()
            faixa = (registro.get("faixa_etaria") or "").strip()
            if not nome or not telefone:
                raise DadosInvalidosError(f"Linha {numero}: nome e telefone são obrigatórios")
            if faixa not in self.FAIXAS_ETARIAS:
                raise DadosInvalidosError(f"Linha {numero}: ageGroup deve ser 'adult' ou 'child'")
            convidados.append(Convidado(nome=nome, telefone=telefone, faixa_etaria=faixa))

        if not convidados:
            raise DadosInvalidosError("Nenhum convidado encontrado no arquivo")

        criados = self.convidado_repo.criar_em_lote(convidados)
        logger.info("%s convidados importados.", len(criados))
        return criados

    def buscar_familia(self, telefone: str) -> FamiliaConvidados:
        convidados = self.convidado_repo.buscar_por_telefone(telefone)
        if not convidados:
            raise FamiliaNaoEncontradaError()
        return FamiliaConvidados(
            telefone=telefone,
            adultos=[c for c in convidados if c.faixa_etaria == FAIXA_ADULTO],
            criancas=[c for c in convidados if c.faixa_etaria == FAIXA_CRIANCA],
        )

    def confirmar_por_telefone(self, telefone: str, confirmacoes: List[Dict[str, Any]]) -> Optional[FamiliaConvidados]:
        """
        Atualiza a presença dos membros da família. Ids que não pertencem à
        família do telefone são ignorados. Retorna None se o telefone não tem convidados.
        """
        familia = self.convidado_repo.buscar_por_telefone(telefone)
        if not familia:
            return None

        ids_familia = {c.id for c in familia}
        confirmados = [c["id"] for c in confirmacoes if c["id"] in ids_familia and c["confirmado"]]
        recusados = [c["id"] for c in confirmacoes if c["id"] in ids_familia and not c["confirmado"]]

        if confirmados:
            self.convidado_repo.atualizar_confirmacao(confirmados, True, self.relogio())
        if recusados:
            self.convidado_repo.atualizar_confirmacao(recusados, False, None)

        return self.buscar_familia(telefone)

    def confirmar(self, convidado_ids: List[int]) -> int:
        return self.convidado_repo.atualizar_confirmacao(convidado_ids, True, self.relogio())

    def listar(self, confirmado: Optional[bool] = None) -> List[Convidado]:
        return self.convidado_repo.listar(confirmado=confirmado)

    def estatisticas(self) -> Dict[str, Any]:
        convidados = self.convidado_repo.listar()
        confirmados = [c for c in convidados if c.confirmado]
        pendentes = [c for c in convidados if not c.confirmado]

        def por_faixa(grupo: List[Convidado]) -> Dict[str, int]:
            adultos = sum(1 for c in grupo if c.faixa_etaria == FAIXA_ADULTO)
            return {"total": len(grupo), "adultos": adultos, "criancas": len(grupo) - adultos}

        total = len(convidados)
        return {
            "total": total,
            "confirmados": por_faixa(confirmados),
            "nao_confirmados": por_faixa(pendentes),
            "percentual_confirmacao": round(len(confirmados) / total * 100) if total else 0,
        }


# ====================================================================
# 6. MEMÓRIAS (FOTOS)
# ====================================================================

class GerenciarMemoriasUseCase:

    def __init__(self, memoria_repo: IMemoriaRepository, armazenamento: IArmazenamentoArquivos):
        self.memoria_repo = memoria_repo
        self.armazenamento = armazenamento

    def listar(self) -> List[Memoria]:
        return self.memoria_repo.listar()

    def criar(self, arquivo, descricao: Optional[str] = None) -> Memoria:
        if arquivo is None:
            raise DadosInvalidosError("Nenhuma imagem enviada")
        url = self.armazenamento.salvar(arquivo, arquivo.name, "memorias")
        return self.memoria_repo.criar(Memoria(url=url, descricao=descricao or None))
