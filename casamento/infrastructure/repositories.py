"""
Camada de Infraestrutura: Implementação dos Repositórios.

Esta camada traduz as operações abstratas definidas nas Portas do Core
em chamadas concretas ao Django ORM.
"""
from typing import List, Optional, Dict, Tuple
from datetime import datetime
from collections import defaultdict

from django.apps import apps
from django.db import transaction
from django.utils import timezone

from casamento.core.entities import (
    Presente, Compra, Convidado, Memoria,
    STATUS_PENDENTE, STATUS_PAGO,
)
from casamento.core.ports import (
    IPresenteRepository,
    ICompraRepository,
    IConvidadoRepository,
    IMemoriaRepository,
)
from casamento.core.exceptions import PresenteNaoEncontradoError

from .mappers import PresenteMapper, CompraMapper, ConvidadoMapper, MemoriaMapper


# Helper para Lazy Loading
def get_model(model_name):
    """Busca o modelo Django de forma segura (Lazy Loading)."""
    return apps.get_model('infrastructure', model_name)


class PresenteRepositoryDjango(IPresenteRepository):
    """Implementação do PresenteRepository usando o Django ORM."""

    @property
    def PresenteModel(self):
        return get_model('Presente')

    def buscar_por_id(self, presente_id: int) -> Optional[Presente]:
        try:
            return PresenteMapper.to_entity(self.PresenteModel.objects.get(pk=presente_id))
        except self.PresenteModel.DoesNotExist:
            return None

    def listar(self, offset: int, limite: int) -> Tuple[int, List[Presente]]:
        qs = self.PresenteModel.objects.order_by('id')
        total = qs.count()
        return total, [PresenteMapper.to_entity(model) for model in qs[offset:offset + limite]]

    @transaction.atomic
    def salvar(self, presente: Presente) -> Presente:
        model = None
        if presente.id:
            try:
                model = self.PresenteModel.objects.select_for_update().get(pk=presente.id)
            except self.PresenteModel.DoesNotExist:
                raise PresenteNaoEncontradoError()
        model = PresenteMapper.to_model(presente, model)
        model.save()
        return PresenteMapper.to_entity(model)

    def deletar(self, presente_id: int) -> None:
        apagados, _ = self.PresenteModel.objects.filter(pk=presente_id).delete()
        if not apagados:
            raise PresenteNaoEncontradoError()

    def reservar(self, presente_id: int) -> bool:
        # UPDATE condicional: só uma requisição concorrente consegue reservar
        return self.PresenteModel.objects.filter(pk=presente_id, disponivel=True).update(disponivel=False) == 1

    def liberar(self, presente_id: int) -> None:
        self.PresenteModel.objects.filter(pk=presente_id).update(disponivel=True)


class CompraRepositoryDjango(ICompraRepository):
    """Implementação do CompraRepository usando o Django ORM."""

    @property
    def CompraModel(self):
        return get_model('Compra')

    @property
    def PresenteModel(self):
        return get_model('Presente')

    def buscar_por_id(self, compra_id: int) -> Optional[Compra]:
        try:
            model = self.CompraModel.objects.select_related('presente').get(pk=compra_id)
            return CompraMapper.to_entity(model, com_presente=True)
        except self.CompraModel.DoesNotExist:
            return None

    def buscar_por_presente(self, presente_id: int) -> List[Compra]:
        qs = self.CompraModel.objects.filter(presente_id=presente_id).order_by('comprado_em', 'id')
        return [CompraMapper.to_entity(model) for model in qs]

    def buscar_por_cobranca_pix(self, cobranca_id: str) -> Optional[Compra]:
        model = self.CompraModel.objects.filter(pix_cobranca_id=cobranca_id).order_by('-id').first()
        return CompraMapper.to_entity(model) if model else None

    def buscar_por_pagamento_id(self, pagamento_id: str) -> Optional[Compra]:
        model = self.CompraModel.objects.filter(pagamento_id=pagamento_id).order_by('-id').first()
        return CompraMapper.to_entity(model) if model else None

    def buscar_pagas_por_presentes(self, presente_ids: List[int]) -> Dict[int, List[Compra]]:
        pagas = defaultdict(list)
        qs = self.CompraModel.objects.filter(presente_id__in=presente_ids, status_pagamento=STATUS_PAGO)
        for model in qs.order_by('comprado_em'):
            pagas[model.presente_id].append(CompraMapper.to_entity(model))
        return dict(pagas)

    def listar(self, status: Optional[str] = None, presente_id: Optional[int] = None) -> List[Compra]:
        qs = self.CompraModel.objects.select_related('presente').order_by('-comprado_em', '-id')
        if status:
            qs = qs.filter(status_pagamento=status)
        if presente_id:
            qs = qs.filter(presente_id=presente_id)
        return [CompraMapper.to_entity(model, com_presente=True) for model in qs]

    def existe_para_presente(self, presente_id: int) -> bool:
        return self.CompraModel.objects.filter(presente_id=presente_id).exists()

    def criar(self, compra: Compra) -> Compra:
        model = CompraMapper.to_model(compra)
        model.save()
        return CompraMapper.to_entity(model)

    @transaction.atomic
    def transicionar(self, compra_id: int, novo_status: str, presente_disponivel: bool) -> Optional[Compra]:
        atualizadas = self.CompraModel.objects.filter(
            pk=compra_id, status_pagamento=STATUS_PENDENTE
        ).update(status_pagamento=novo_status, atualizado_em=timezone.now())
        if not atualizadas:
            return None

        model = self.CompraModel.objects.get(pk=compra_id)
        if not presente_disponivel:
            self.PresenteModel.objects.filter(pk=model.presente_id).update(disponivel=False)
        else:
            # O presente só volta à lista se nenhuma outra compra o mantém ocupado
            outra_ativa = self.CompraModel.objects.filter(
                presente_id=model.presente_id,
                status_pagamento__in=[STATUS_PENDENTE, STATUS_PAGO],
            ).exclude(pk=compra_id).exists()
            if not outra_ativa:
                self.PresenteModel.objects.filter(pk=model.presente_id).update(disponivel=True)
        return CompraMapper.to_entity(model)

    def atualizar_metodo_pagamento(self, compra_id: int, metodo: str) -> None:
        self.CompraModel.objects.filter(pk=compra_id).update(
            metodo_pagamento=metodo, atualizado_em=timezone.now()
        )


class ConvidadoRepositoryDjango(IConvidadoRepository):
    """Implementação do ConvidadoRepository usando o Django ORM."""

    @property
    def ConvidadoModel(self):
        return get_model('Convidado')

    @transaction.atomic
    def criar_em_lote(self, convidados: List[Convidado]) -> List[Convidado]:
        criados = []
        for convidado in convidados:
            model = ConvidadoMapper.to_model(convidado)
            model.save()
            criados.append(ConvidadoMapper.to_entity(model))
        return criados

    def buscar_por_telefone(self, telefone: str) -> List[Convidado]:
        qs = self.ConvidadoModel.objects.filter(telefone=telefone).order_by('id')
        return [ConvidadoMapper.to_entity(model) for model in qs]

    def listar(self, confirmado: Optional[bool] = None) -> List[Convidado]:
        qs = self.ConvidadoModel.objects.all()
        if confirmado is not None:
            qs = qs.filter(confirmado=confirmado)
        return [ConvidadoMapper.to_entity(model) for model in qs]

    def atualizar_confirmacao(self, convidado_ids: List[int], confirmado: bool,
                              data_confirmacao: Optional[datetime]) -> int:
        if not convidado_ids:
            return 0
        return self.ConvidadoModel.objects.filter(pk__in=convidado_ids).update(
            confirmado=confirmado, data_confirmacao=data_confirmacao
        )


class MemoriaRepositoryDjango(IMemoriaRepository):
    """Implementação do MemoriaRepository usando o Django ORM."""

    @property
    def MemoriaModel(self):
        return get_model('Memoria')

    def listar(self) -> List[Memoria]:
        return [MemoriaMapper.to_entity(model) for model in self.MemoriaModel.objects.order_by('-enviado_em', '-id')]

    def criar(self, memoria: Memoria) -> Memoria:
        model = self.MemoriaModel.objects.create(url=memoria.url, descricao=memoria.descricao)
        return MemoriaMapper.to_entity(model)
