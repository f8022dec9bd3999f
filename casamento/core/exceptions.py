class BaseErroCore(Exception):
    """Classe base para todas as exceções da Camada Core."""
    def __init__(self, message="Ocorreu um erro ao processar a solicitação."):
        self.message = message
        super().__init__(self.message)


class DadosInvalidosError(BaseErroCore):
    """Erro levantado quando dados inválidos são fornecidos."""
    def __init__(self, message="Os dados fornecidos são inválidos."):
        super().__init__(message)

# ===============================================
# ERROS DE PERSISTÊNCIA E ENTIDADE
# ===============================================

class ItemNaoEncontradoError(BaseErroCore):
    """Erro levantado quando um item (genérico) não é encontrado."""
    def __init__(self, message="O item solicitado não foi encontrado."):
        super().__init__(message)

class PresenteNaoEncontradoError(ItemNaoEncontradoError):
    def __init__(self, message="Presente não encontrado"):
        super().__init__(message)

class CompraNaoEncontradaError(ItemNaoEncontradoError):
    def __init__(self, message="Compra não encontrada"):
        super().__init__(message)

class FamiliaNaoEncontradaError(ItemNaoEncontradoError):
    def __init__(self, message="Nenhum convidado encontrado para este telefone"):
        super().__init__(message)

# ===============================================
# ERROS DE ESTADO (regras de negócio)
# ===============================================

class EstadoInvalidoError(BaseErroCore):
    """Erro levantado quando a operação não é permitida no estado atual."""
    def __init__(self, message="Operação não permitida no estado atual."):
        super().__init__(message)

class PresenteIndisponivelError(EstadoInvalidoError):
    def __init__(self, message="Presente não está disponível para compra"):
        super().__init__(message)

class PresenteJaCompradoError(EstadoInvalidoError):
    def __init__(self, message="Este presente já foi comprado"):
        super().__init__(message)

class PagamentoPendenteExistenteError(EstadoInvalidoError):
    def __init__(self, message="Já existe um pagamento pendente para este presente"):
        super().__init__(message)

class StatusInvalidoError(EstadoInvalidoError):
    """Erro levantado ao tentar operar uma compra que não está no status exigido."""
    def __init__(self, message="Apenas pagamentos pendentes podem ser cancelados"):
        super().__init__(message)

class PresenteComComprasError(EstadoInvalidoError):
    def __init__(self, message=(
        "Não é possível deletar este presente pois existem compras associadas a ele. "
        "Considere marcá-lo como indisponível ao invés de deletá-lo."
    )):
        super().__init__(message)

class SimulacaoNaoPermitidaError(EstadoInvalidoError):
    def __init__(self, message="Simulação de pagamento disponível apenas em modo de desenvolvimento"):
        super().__init__(message)

# ===============================================
# ERROS DE PROVEDOR DE PAGAMENTO
# ===============================================

class PagamentoFalhouError(BaseErroCore):
    """Erro levantado quando o provedor de pagamento rejeita ou não responde."""
    def __init__(self, message="A comunicação com o provedor de pagamento falhou."):
        super().__init__(message)

class RecursoNaoEncontradoNoProvedorError(PagamentoFalhouError):
    """O provedor respondeu 404 para o recurso consultado."""
    def __init__(self, recurso_id: str, message=None):
        self.recurso_id = recurso_id
        if message is None:
            message = f"Recurso {recurso_id} não encontrado no provedor de pagamento."
        super().__init__(message)

# ===============================================
# ERROS DE AUTENTICAÇÃO
# ===============================================

class MuitasTentativasError(BaseErroCore):
    """Erro levantado quando o limite de tentativas de login é excedido."""
    def __init__(self, minutos_restantes: int, message=None):
        self.minutos_restantes = minutos_restantes
        if message is None:
            message = f"Muitas tentativas de login. Tente novamente em {minutos_restantes} minutos."
        super().__init__(message)
