from rest_framework import status
from rest_framework.parsers import JSONParser, MultiPartParser, FormParser
from rest_framework.permissions import AllowAny, IsAdminUser
from rest_framework.response import Response
from rest_framework.views import APIView

from casamento.core import dependency_injection as di
from casamento.core.exceptions import BaseErroCore
from .csv_convidados import ler_convidados_csv
from .serializers import (
    PresenteEntradaSerializer,
    PresenteSerializer,
    ConvidadoSerializer,
    ConfirmarPresencaSerializer,
    ConfirmarLoteSerializer,
    MemoriaEntradaSerializer,
    MemoriaSerializer,
)
from .views_pagamentos import resposta_erro, resposta_validacao


class LeituraPublicaMixin:
    """GET aberto ao público; demais métodos restritos aos administradores."""

    def get_permissions(self):
        if self.request.method == 'GET':
            return [AllowAny()]
        return [IsAdminUser()]


# ====================================================================
# LISTA DE PRESENTES
# ====================================================================

class PresenteListaAPIView(LeituraPublicaMixin, APIView):
    parser_classes = [JSONParser, MultiPartParser, FormParser]

    def get(self, request):
        try:
            pagina = int(request.query_params.get('pagina', 1))
            limite = int(request.query_params.get('limite', 50))
        except ValueError:
            return Response({'success': False, 'error': 'Paginação inválida'}, status=status.HTTP_400_BAD_REQUEST)

        resultado = di.get_gerenciar_presentes_use_case().listar(pagina=pagina, limite=limite)
        return Response({
            'total': resultado['total'],
            'pagina': resultado['pagina'],
            'limite': resultado['limite'],
            'presentes': PresenteSerializer(resultado['presentes'], many=True).data,
        })

    def post(self, request):
        serializer = PresenteEntradaSerializer(data=request.data)
        if not serializer.is_valid():
            return resposta_validacao(serializer.errors)

        dados = dict(serializer.validated_data)
        try:
            presente = di.get_gerenciar_presentes_use_case().criar(
                nome=dados['nome'],
                preco=dados['preco'],
                descricao=dados.get('descricao'),
                imagem_url=dados.get('imagem_url'),
                disponivel=dados.get('disponivel', True),
                imagem=dados.get('imagem'),
            )
        except BaseErroCore as e:
            return resposta_erro(e)
        return Response(PresenteSerializer(presente).data, status=status.HTTP_201_CREATED)


class PresenteDetalheAPIView(LeituraPublicaMixin, APIView):
    parser_classes = [JSONParser, MultiPartParser, FormParser]

    def get(self, request, presente_id):
        try:
            presente = di.get_gerenciar_presentes_use_case().detalhar(presente_id)
        except BaseErroCore as e:
            return resposta_erro(e)
        return Response(PresenteSerializer(presente).data)

    def patch(self, request, presente_id):
        serializer = PresenteEntradaSerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            return resposta_validacao(serializer.errors)

        campos = dict(serializer.validated_data)
        imagem = campos.pop('imagem', None)
        try:
            presente = di.get_gerenciar_presentes_use_case().atualizar(presente_id, campos, imagem=imagem)
        except BaseErroCore as e:
            return resposta_erro(e)
        return Response(PresenteSerializer(presente).data)

    def delete(self, request, presente_id):
        try:
            di.get_gerenciar_presentes_use_case().deletar(presente_id)
        except BaseErroCore as e:
            return resposta_erro(e)
        return Response(status=status.HTTP_204_NO_CONTENT)


# ====================================================================
# CONVIDADOS (RSVP)
# ====================================================================

def _dados_familia(familia):
    return {
        'telefone': familia.telefone,
        'total': familia.total,
        'adultos': {
            'quantidade': len(familia.adultos),
            'convidados': ConvidadoSerializer(familia.adultos, many=True).data,
        },
        'criancas': {
            'quantidade': len(familia.criancas),
            'convidados': ConvidadoSerializer(familia.criancas, many=True).data,
        },
    }


class ConvidadoImportarAPIView(APIView):
    """Importa convidados a partir de um CSV (name, phone, ageGroup)."""
    permission_classes = [IsAdminUser]
    parser_classes = [MultiPartParser, FormParser]

    def post(self, request):
        arquivo = request.FILES.get('arquivo')
        if arquivo is None:
            return Response({'success': False, 'error': 'Nenhum arquivo enviado'},
                            status=status.HTTP_400_BAD_REQUEST)
        try:
            registros = ler_convidados_csv(arquivo)
            convidados = di.get_gerenciar_convidados_use_case().importar(registros)
        except BaseErroCore as e:
            return resposta_erro(e)

        return Response({
            'success': True,
            'importados': len(convidados),
            'convidados': ConvidadoSerializer(convidados, many=True).data,
        }, status=status.HTTP_201_CREATED)


class FamiliaAPIView(APIView):
    permission_classes = [AllowAny]

    def get(self, request, telefone):
        try:
            familia = di.get_gerenciar_convidados_use_case().buscar_familia(telefone)
        except BaseErroCore as e:
            return resposta_erro(e)
        return Response(_dados_familia(familia))


class ConfirmarPresencaAPIView(APIView):
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = ConfirmarPresencaSerializer(data=request.data)
        if not serializer.is_valid():
            return resposta_validacao(serializer.errors)

        dados = serializer.validated_data
        familia = di.get_gerenciar_convidados_use_case().confirmar_por_telefone(
            dados['telefone'], [dict(item) for item in dados['confirmacoes']]
        )
        if familia is None:
            return Response({'success': False, 'error': 'Nenhum convidado encontrado para este telefone'},
                            status=status.HTTP_404_NOT_FOUND)
        return Response({'success': True, 'familia': _dados_familia(familia)})


class ConfirmarLoteAPIView(APIView):
    """Confirma a presença de vários convidados de uma vez (painel dos noivos)."""
    permission_classes = [IsAdminUser]

    def post(self, request):
        serializer = ConfirmarLoteSerializer(data=request.data)
        if not serializer.is_valid():
            return resposta_validacao(serializer.errors)

        atualizados = di.get_gerenciar_convidados_use_case().confirmar(serializer.validated_data['ids'])
        return Response({'success': True, 'atualizados': atualizados})


class ConvidadoListaAPIView(APIView):
    permission_classes = [IsAdminUser]

    def get(self, request):
        filtro = request.query_params.get('confirmado')
        confirmado = None
        if filtro is not None:
            confirmado = filtro.lower() in ('true', '1', 'sim')
        convidados = di.get_gerenciar_convidados_use_case().listar(confirmado=confirmado)
        return Response(ConvidadoSerializer(convidados, many=True).data)


class EstatisticasConvidadosAPIView(APIView):
    permission_classes = [IsAdminUser]

    def get(self, request):
        return Response(di.get_gerenciar_convidados_use_case().estatisticas())


# ====================================================================
# MEMÓRIAS (FOTOS)
# ====================================================================

class MemoriaAPIView(APIView):
    """Galeria pública: qualquer convidado pode ver e enviar fotos."""
    permission_classes = [AllowAny]
    parser_classes = [MultiPartParser, FormParser]

    def get(self, request):
        memorias = di.get_gerenciar_memorias_use_case().listar()
        return Response(MemoriaSerializer(memorias, many=True).data)

    def post(self, request):
        serializer = MemoriaEntradaSerializer(data=request.data)
        if not serializer.is_valid():
            return resposta_validacao(serializer.errors)
        try:
            memoria = di.get_gerenciar_memorias_use_case().criar(
                serializer.validated_data['arquivo'],
                descricao=serializer.validated_data.get('descricao'),
            )
        except BaseErroCore as e:
            return resposta_erro(e)
        return Response(MemoriaSerializer(memoria).data, status=status.HTTP_201_CREATED)
