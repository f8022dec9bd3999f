"""
Mapeadores (Mappers) para converter entre:
1. Modelos do Django ORM
2. Entidades de Domínio (casamento.core.entities)
"""
from typing import Optional

from casamento.core.entities import (
    Presente as PresenteEntity,
    Compra as CompraEntity,
    Convidado as ConvidadoEntity,
    Memoria as MemoriaEntity,
)
from casamento.infrastructure.models import (
    Presente as PresenteModel,
    Compra as CompraModel,
    Convidado as ConvidadoModel,
    Memoria as MemoriaModel,
)


class PresenteMapper:

    @staticmethod
    def to_entity(model: PresenteModel) -> PresenteEntity:
        return PresenteEntity(
            id=model.id,
            nome=model.nome,
            descricao=model.descricao,
            imagem_url=model.imagem_url,
            preco=model.preco,
            disponivel=model.disponivel,
            criado_em=model.criado_em,
        )

    @staticmethod
    def to_model(entity: PresenteEntity, model: Optional[PresenteModel] = None) -> PresenteModel:
        if model is None:
            model = PresenteModel()
        model.nome = entity.nome
        model.descricao = entity.descricao
        model.imagem_url = entity.imagem_url
        model.preco = entity.preco
        model.disponivel = entity.disponivel
        return model


class CompraMapper:

    @staticmethod
    def to_entity(model: CompraModel, com_presente: bool = False) -> CompraEntity:
        presente = None
        if com_presente:
            presente = PresenteMapper.to_entity(model.presente)
        return CompraEntity(
            id=model.id,
            presente_id=model.presente_id,
            convidado_id=model.convidado_id,
            nome_comprador=model.nome_comprador,
            telefone_comprador=model.telefone_comprador,
            email_comprador=model.email_comprador,
            documento_comprador=model.documento_comprador,
            metodo_pagamento=model.metodo_pagamento,
            status_pagamento=model.status_pagamento,
            pagamento_id=model.pagamento_id,
            pix_cobranca_id=model.pix_cobranca_id,
            pix_qr_code=model.pix_qr_code,
            pix_qr_code_base64=model.pix_qr_code_base64,
            expira_em=model.expira_em,
            metadados=model.metadados or {},
            comprado_em=model.comprado_em,
            atualizado_em=model.atualizado_em,
            presente=presente,
        )

    @staticmethod
    def to_model(entity: CompraEntity) -> CompraModel:
        return CompraModel(
            presente_id=entity.presente_id,
            convidado_id=entity.convidado_id,
            nome_comprador=entity.nome_comprador,
            telefone_comprador=entity.telefone_comprador,
            email_comprador=entity.email_comprador,
            documento_comprador=entity.documento_comprador,
            metodo_pagamento=entity.metodo_pagamento,
            status_pagamento=entity.status_pagamento,
            pagamento_id=entity.pagamento_id,
            pix_cobranca_id=entity.pix_cobranca_id,
            pix_qr_code=entity.pix_qr_code,
            pix_qr_code_base64=entity.pix_qr_code_base64,
            expira_em=entity.expira_em,
            metadados=entity.metadados,
        )


class ConvidadoMapper:

    @staticmethod
    def to_entity(model: ConvidadoModel) -> ConvidadoEntity:
        return ConvidadoEntity(
            id=model.id,
            nome=model.nome,
            telefone=model.telefone,
            faixa_etaria=model.faixa_etaria,
            confirmado=model.confirmado,
            data_confirmacao=model.data_confirmacao,
        )

    @staticmethod
    def to_model(entity: ConvidadoEntity) -> ConvidadoModel:
        return ConvidadoModel(
            nome=entity.nome,
            telefone=entity.telefone,
            faixa_etaria=entity.faixa_etaria,
            confirmado=entity.confirmado,
            data_confirmacao=entity.data_confirmacao,
        )


class MemoriaMapper:

    @staticmethod
    def to_entity(model: MemoriaModel) -> MemoriaEntity:
        return MemoriaEntity(
            id=model.id,
            url=model.url,
            descricao=model.descricao,
            enviado_em=model.enviado_em,
        )
