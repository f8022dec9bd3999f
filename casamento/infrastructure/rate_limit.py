"""
Limitador de tentativas de login apoiado no cache do Django.

Os contadores expiram sozinhos junto com a janela configurada, então nada
cresce indefinidamente na memória do processo.
"""
import math
import time
import logging

from django.core.cache import caches

from casamento.core.exceptions import MuitasTentativasError

logger = logging.getLogger(__name__)


class LimitadorTentativasLogin:
    """Bloqueia um identificador (IP) após max_tentativas falhas dentro da janela."""

    PREFIXO = "login-tentativas"

    def __init__(self, max_tentativas: int = 5, janela_segundos: int = 900, cache_alias: str = "default"):
        self.max_tentativas = max_tentativas
        self.janela_segundos = janela_segundos
        self.cache_alias = cache_alias

    @property
    def cache(self):
        return caches[self.cache_alias]

    def _chave_contador(self, identificador: str) -> str:
        return f"{self.PREFIXO}:contador:{identificador}"

    def _chave_bloqueio(self, identificador: str) -> str:
        return f"{self.PREFIXO}:bloqueio:{identificador}"

    def verificar(self, identificador: str) -> None:
        """Levanta MuitasTentativasError se o identificador estiver bloqueado."""
        bloqueado_ate = self.cache.get(self._chave_bloqueio(identificador))
        if bloqueado_ate is None:
            return
        restante = bloqueado_ate - time.time()
        if restante <= 0:
            self.cache.delete(self._chave_bloqueio(identificador))
            return
        raise MuitasTentativasError(minutos_restantes=max(1, math.ceil(restante / 60)))

    def registrar_falha(self, identificador: str) -> int:
        chave = self._chave_contador(identificador)
        self.cache.add(chave, 0, timeout=self.janela_segundos)
        try:
            tentativas = self.cache.incr(chave)
        except ValueError:
            # O contador expirou entre o add e o incr
            self.cache.set(chave, 1, timeout=self.janela_segundos)
            tentativas = 1

        if tentativas >= self.max_tentativas:
            self.cache.set(self._chave_bloqueio(identificador), time.time() + self.janela_segundos,
                           timeout=self.janela_segundos)
            self.cache.delete(chave)
            logger.warning("Login bloqueado para %s após %s tentativas.", identificador, tentativas)
        return tentativas

    def limpar(self, identificador: str) -> None:
        self.cache.delete_many([self._chave_contador(identificador), self._chave_bloqueio(identificador)])
