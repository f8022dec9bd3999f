# casamento/presentation/views_auth.py
"""
Autenticação dos administradores (JWT via simplejwt).
"""
import logging

from django.conf import settings
from django.contrib.auth import authenticate, get_user_model
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

from casamento.core import dependency_injection as di
from casamento.core.exceptions import MuitasTentativasError
from .serializers import CadastroAdminSerializer, LoginSerializer, LogoutSerializer

logger = logging.getLogger(__name__)

User = get_user_model()


def _dados_usuario(user):
    return {'id': user.id, 'nome': user.first_name, 'email': user.email}


def _tokens(user):
    refresh = RefreshToken.for_user(user)
    return {'access': str(refresh.access_token), 'refresh': str(refresh)}


def ip_cliente(request) -> str:
    encaminhado = request.META.get('HTTP_X_FORWARDED_FOR')
    if encaminhado:
        return encaminhado.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR', 'desconhecido')


class CadastroAdminAPIView(APIView):
    permission_classes = [AllowAny]

    def post(self, request):
        if not settings.PERMITIR_CADASTRO_ADMIN:
            return Response({'success': False, 'error': 'Cadastro de administradores desabilitado'},
                            status=status.HTTP_403_FORBIDDEN)

        serializer = CadastroAdminSerializer(data=request.data)
        if not serializer.is_valid():
            return Response({'success': False, 'error': 'Dados inválidos', 'details': serializer.errors},
                            status=status.HTTP_400_BAD_REQUEST)

        dados = serializer.validated_data
        if User.objects.filter(email__iexact=dados['email']).exists():
            return Response({'success': False, 'error': 'E-mail já cadastrado'},
                            status=status.HTTP_400_BAD_REQUEST)

        user = User.objects.create_user(
            email=dados['email'],
            password=dados['senha'],
            first_name=dados['nome'],
            is_staff=True,
        )
        logger.info("Administrador %s cadastrado.", user.email)
        return Response({'success': True, 'usuario': _dados_usuario(user), **_tokens(user)},
                        status=status.HTTP_201_CREATED)


class LoginAPIView(APIView):
    """Login com limite de tentativas por IP."""
    permission_classes = [AllowAny]

    def post(self, request):
        identificador = ip_cliente(request)
        try:
            di.limitador_login.verificar(identificador)
        except MuitasTentativasError as e:
            return Response({'success': False, 'error': e.message}, status=status.HTTP_429_TOO_MANY_REQUESTS)

        serializer = LoginSerializer(data=request.data)
        if not serializer.is_valid():
            return Response({'success': False, 'error': 'Dados inválidos', 'details': serializer.errors},
                            status=status.HTTP_400_BAD_REQUEST)

        user = authenticate(request, username=serializer.validated_data['email'],
                            password=serializer.validated_data['senha'])
        if user is None:
            di.limitador_login.registrar_falha(identificador)
            return Response({'success': False, 'error': 'E-mail ou senha inválidos'},
                            status=status.HTTP_401_UNAUTHORIZED)

        di.limitador_login.limpar(identificador)
        return Response({'success': True, 'usuario': _dados_usuario(user), **_tokens(user)})


class LogoutAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = LogoutSerializer(data=request.data)
        if not serializer.is_valid():
            return Response({'success': False, 'error': 'Refresh token obrigatório'},
                            status=status.HTTP_400_BAD_REQUEST)
        try:
            RefreshToken(serializer.validated_data['refresh']).blacklist()
        except TokenError:
            return Response({'success': False, 'error': 'Token inválido ou expirado'},
                            status=status.HTTP_400_BAD_REQUEST)
        return Response({'success': True})


class MeAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(_dados_usuario(request.user))
