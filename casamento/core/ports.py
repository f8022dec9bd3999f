# casamento/core/ports.py
"""
Definição das Portas (Interfaces/Protocolos) da Arquitetura Limpa.

Estes protocolos definem o contrato que a camada de Infraestrutura (Repositórios, Gateways)
DEVE seguir para se conectar à camada Core (Casos de Uso).
"""

from typing import Protocol, List, Optional, Dict, Any, Tuple, BinaryIO
from abc import abstractmethod
from datetime import datetime

from casamento.core.entities import (
    Presente, Compra, Convidado, Memoria, Comprador,
    CobrancaPix, PreferenciaCheckout, PagamentoProvedor,
)


# ====================================================================
# 1. REPOSITÓRIOS (Portas de Persistência)
# ====================================================================

class IPresenteRepository(Protocol):
    """Protocolo para a persistência e busca de Presentes."""

    @abstractmethod
    def buscar_por_id(self, presente_id: int) -> Optional[Presente]: ...

    @abstractmethod
    def listar(self, offset: int, limite: int) -> Tuple[int, List[Presente]]: ...

    @abstractmethod
    def salvar(self, presente: Presente) -> Presente: ...

    @abstractmethod
    def deletar(self, presente_id: int) -> None: ...

    @abstractmethod
    def reservar(self, presente_id: int) -> bool:
        """Marca o presente como indisponível somente se ainda estiver disponível."""
        ...

    @abstractmethod
    def liberar(self, presente_id: int) -> None: ...


class ICompraRepository(Protocol):
    """Protocolo para a persistência de Compras e suas transições de status."""

    @abstractmethod
    def buscar_por_id(self, compra_id: int) -> Optional[Compra]: ...

    @abstractmethod
    def buscar_por_presente(self, presente_id: int) -> List[Compra]:
        """Compras do presente, da mais antiga para a mais recente."""
        ...

    @abstractmethod
    def buscar_por_cobranca_pix(self, cobranca_id: str) -> Optional[Compra]: ...

    @abstractmethod
    def buscar_por_pagamento_id(self, pagamento_id: str) -> Optional[Compra]: ...

    @abstractmethod
    def buscar_pagas_por_presentes(self, presente_ids: List[int]) -> Dict[int, List[Compra]]: ...

    @abstractmethod
    def listar(self, status: Optional[str] = None, presente_id: Optional[int] = None) -> List[Compra]: ...

    @abstractmethod
    def existe_para_presente(self, presente_id: int) -> bool: ...

    @abstractmethod
    def criar(self, compra: Compra) -> Compra: ...

    @abstractmethod
    def transicionar(self, compra_id: int, novo_status: str, presente_disponivel: bool) -> Optional[Compra]:
        """
        Aplica 'pending' -> novo_status de forma atômica, ajustando a disponibilidade
        do presente na mesma transação. Retorna None se a compra não estava mais pendente.
        """
        ...

    @abstractmethod
    def atualizar_metodo_pagamento(self, compra_id: int, metodo: str) -> None: ...


class IConvidadoRepository(Protocol):
    """Protocolo para a persistência de Convidados (RSVP)."""

    @abstractmethod
    def criar_em_lote(self, convidados: List[Convidado]) -> List[Convidado]: ...

    @abstractmethod
    def buscar_por_telefone(self, telefone: str) -> List[Convidado]: ...

    @abstractmethod
    def listar(self, confirmado: Optional[bool] = None) -> List[Convidado]: ...

    @abstractmethod
    def atualizar_confirmacao(self, convidado_ids: List[int], confirmado: bool,
                              data_confirmacao: Optional[datetime]) -> int: ...


class IMemoriaRepository(Protocol):

    @abstractmethod
    def listar(self) -> List[Memoria]: ...

    @abstractmethod
    def criar(self, memoria: Memoria) -> Memoria: ...


# ====================================================================
# 2. GATEWAYS (Portas de Serviços Externos)
# ====================================================================

class IGatewayPix(Protocol):
    """Provedor baseado em id de cobrança (status PENDING/PAID/EXPIRED)."""

    modo_dev: bool

    @abstractmethod
    def criar_cobranca(self, valor_centavos: int, expira_em_segundos: int, descricao: str,
                       comprador: Comprador, metadados: Dict[str, Any]) -> CobrancaPix: ...

    @abstractmethod
    def verificar_cobranca(self, cobranca_id: str) -> str:
        """Retorna o status atual da cobrança no provedor."""
        ...

    @abstractmethod
    def simular_pagamento(self, cobranca_id: str) -> None: ...


class IGatewayCheckout(Protocol):
    """Provedor baseado em preferência e referência externa."""

    @abstractmethod
    def criar_preferencia(self, presente: Presente, comprador: Comprador,
                          convidado_id: Optional[int] = None, modo_binario: bool = False,
                          endereco: Optional[Dict[str, Any]] = None) -> PreferenciaCheckout: ...

    @abstractmethod
    def buscar_preferencia(self, preferencia_id: str) -> PreferenciaCheckout:
        """Levanta RecursoNaoEncontradoNoProvedorError quando o provedor responde 404."""
        ...

    @abstractmethod
    def buscar_pagamento(self, pagamento_id: str) -> PagamentoProvedor:
        """Levanta RecursoNaoEncontradoNoProvedorError quando o provedor responde 404."""
        ...


class IArmazenamentoArquivos(Protocol):
    """Porta para gravação de arquivos enviados (fotos de memórias e presentes)."""

    @abstractmethod
    def salvar(self, arquivo: BinaryIO, nome: str, pasta: str) -> str:
        """Grava o arquivo e retorna a URL pública."""
        ...
