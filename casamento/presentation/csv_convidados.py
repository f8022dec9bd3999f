"""
Leitura do CSV de convidados enviado pelo painel administrativo.

Formato esperado (com cabeçalho):

    name,phone,ageGroup
    Maria Silva,11999990000,adult
"""
import csv
import io

from casamento.core.exceptions import DadosInvalidosError
from .serializers import ConvidadoCsvSerializer


def ler_convidados_csv(arquivo):
    """Converte o arquivo enviado em registros {nome, telefone, faixa_etaria}."""
    try:
        conteudo = arquivo.read().decode('utf-8-sig')
    except UnicodeDecodeError:
        raise DadosInvalidosError("O arquivo CSV deve estar codificado em UTF-8")

    leitor = csv.DictReader(io.StringIO(conteudo), skipinitialspace=True)
    registros = []
    erros = []
    for numero, linha in enumerate(leitor, start=2):
        valores = {chave.strip(): (valor or '').strip() for chave, valor in linha.items() if chave}
        if not any(valores.values()):
            continue

        serializer = ConvidadoCsvSerializer(data=valores)
        if not serializer.is_valid():
            campos = ', '.join(sorted(serializer.errors))
            erros.append(f"Linha {numero}: campos inválidos ({campos})")
            continue

        dados = serializer.validated_data
        registros.append({
            'nome': dados['name'],
            'telefone': dados['phone'],
            'faixa_etaria': dados['ageGroup'],
        })

    if erros:
        raise DadosInvalidosError('; '.join(erros))
    return registros
