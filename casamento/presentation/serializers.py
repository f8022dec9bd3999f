import re
from decimal import Decimal

from rest_framework import serializers


# ====================================================================
# SERIALIZERS DE ENTRADA
# ====================================================================

class EnderecoSerializer(serializers.Serializer):
    cep = serializers.CharField(max_length=9)
    rua = serializers.CharField(max_length=255)
    numero = serializers.CharField(max_length=20)


class CriarPagamentoSerializer(serializers.Serializer):
    """Dados do comprador para iniciar o pagamento de um presente."""
    presente_id = serializers.IntegerField(min_value=1)
    nome_comprador = serializers.CharField(min_length=3, max_length=100)
    telefone_comprador = serializers.CharField(min_length=10, max_length=20)
    email_comprador = serializers.EmailField(max_length=100)
    documento_comprador = serializers.CharField(max_length=18, help_text="CPF ou CNPJ, com ou sem máscara")
    convidado_id = serializers.IntegerField(required=False, allow_null=True)
    modo_binario = serializers.BooleanField(required=False, default=False)
    endereco = EnderecoSerializer(required=False)

    def validate_documento_comprador(self, value):
        digitos = re.sub(r'\D', '', value)
        if len(digitos) not in (11, 14):
            raise serializers.ValidationError("CPF deve ter 11 dígitos ou CNPJ deve ter 14 dígitos.")
        return digitos


class WebhookPixSerializer(serializers.Serializer):
    """Envelope {event, data: {id, status}} enviado pela AbacatePay."""
    event = serializers.CharField(required=False, allow_blank=True)
    data = serializers.DictField(required=False)


class PresenteEntradaSerializer(serializers.Serializer):
    nome = serializers.CharField(max_length=100)
    descricao = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    preco = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0.01'))
    imagem_url = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    disponivel = serializers.BooleanField(required=False, default=True)
    imagem = serializers.FileField(required=False, write_only=True)


class ConvidadoCsvSerializer(serializers.Serializer):
    """Linha do CSV de convidados: name, phone, ageGroup."""
    name = serializers.CharField(max_length=100)
    phone = serializers.CharField(max_length=20)
    ageGroup = serializers.ChoiceField(choices=['adult', 'child'])


class ConfirmacaoItemSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    confirmado = serializers.BooleanField()


class ConfirmarPresencaSerializer(serializers.Serializer):
    telefone = serializers.CharField(max_length=20)
    confirmacoes = ConfirmacaoItemSerializer(many=True, allow_empty=False)


class ConfirmarLoteSerializer(serializers.Serializer):
    ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=False)


class MemoriaEntradaSerializer(serializers.Serializer):
    arquivo = serializers.FileField()
    descricao = serializers.CharField(required=False, allow_blank=True, max_length=500)


class CadastroAdminSerializer(serializers.Serializer):
    nome = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    senha = serializers.CharField(min_length=6, write_only=True)


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    senha = serializers.CharField(write_only=True)


class LogoutSerializer(serializers.Serializer):
    refresh = serializers.CharField()


# ====================================================================
# SERIALIZERS DE SAÍDA (a partir das entidades do Core)
# ====================================================================

class CompradorPresenteSerializer(serializers.Serializer):
    nome_comprador = serializers.CharField()
    email_comprador = serializers.CharField(allow_null=True)
    comprado_em = serializers.DateTimeField()
    metodo_pagamento = serializers.CharField()


class PresenteSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    nome = serializers.CharField()
    descricao = serializers.CharField(allow_null=True)
    imagem_url = serializers.CharField(allow_null=True)
    preco = serializers.DecimalField(max_digits=10, decimal_places=2)
    disponivel = serializers.BooleanField()
    criado_em = serializers.DateTimeField()
    compras = CompradorPresenteSerializer(source='compras_pagas', many=True)


class CompraSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    presente_id = serializers.IntegerField()
    convidado_id = serializers.IntegerField(allow_null=True)
    nome_comprador = serializers.CharField()
    telefone_comprador = serializers.CharField()
    email_comprador = serializers.CharField(allow_null=True)
    documento_comprador = serializers.CharField()
    metodo_pagamento = serializers.CharField()
    status_pagamento = serializers.CharField()
    pagamento_id = serializers.CharField(allow_null=True)
    pix_cobranca_id = serializers.CharField(allow_null=True)
    pix_qr_code = serializers.CharField(allow_null=True)
    pix_qr_code_base64 = serializers.CharField(allow_null=True)
    expira_em = serializers.DateTimeField(allow_null=True)
    metadados = serializers.DictField()
    comprado_em = serializers.DateTimeField()
    atualizado_em = serializers.DateTimeField()


class CompraDetalheSerializer(CompraSerializer):
    presente = PresenteSerializer(allow_null=True)


class StatusCompraSerializer(serializers.Serializer):
    """Resposta pública da consulta de status (sem dados pessoais do comprador)."""
    id = serializers.IntegerField()
    presente_id = serializers.IntegerField()
    status_pagamento = serializers.CharField()
    metodo_pagamento = serializers.CharField()
    expira_em = serializers.DateTimeField(allow_null=True)
    atualizado_em = serializers.DateTimeField()


class ConvidadoSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    nome = serializers.CharField()
    telefone = serializers.CharField()
    faixa_etaria = serializers.CharField()
    confirmado = serializers.BooleanField()
    data_confirmacao = serializers.DateTimeField(allow_null=True)


class MemoriaSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    url = serializers.CharField()
    descricao = serializers.CharField(allow_null=True)
    enviado_em = serializers.DateTimeField()
