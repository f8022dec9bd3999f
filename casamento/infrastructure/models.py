# Define os modelos do banco de dados da camada de infraestrutura.

from django.db import models
from django.contrib.auth.models import AbstractUser, BaseUserManager

# ====================================================================
# GERENCIADOR DE USUÁRIOS PERSONALIZADO (Para usar email como login)
# ====================================================================

class CustomUserManager(BaseUserManager):
    """
    Gerenciador de modelos de usuário onde o email é o identificador único
    para autenticação, em vez dos nomes de usuário.
    """
    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError('O e-mail deve ser definido')
        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('is_active', True)

        if extra_fields.get('is_staff') is not True:
            raise ValueError('Superuser must have is_staff=True.')
        if extra_fields.get('is_superuser') is not True:
            raise ValueError('Superuser must have is_superuser=True.')

        return self.create_user(email, password, **extra_fields)


# ====================================================================
# ADMINISTRADORES
# ====================================================================

class Usuario(AbstractUser):
    """Administrador do casamento (noivos). O e-mail é o login."""
    username = None
    email = models.EmailField('Endereço de E-mail', unique=True)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = []

    objects = CustomUserManager()

    class Meta:
        verbose_name = 'Usuário'
        verbose_name_plural = 'Usuários'
        db_table = 'infra_usuario'

    def __str__(self):
        return self.email


# ====================================================================
# CONVIDADOS
# ====================================================================

class Convidado(models.Model):
    FAIXA_ETARIA_CHOICES = [
        ('adult', 'Adulto'),
        ('child', 'Criança'),
    ]

    nome = models.CharField(max_length=100, verbose_name="Nome")
    telefone = models.CharField(max_length=20, db_index=True, verbose_name="Telefone")
    faixa_etaria = models.CharField(max_length=10, choices=FAIXA_ETARIA_CHOICES, default='adult',
                                    verbose_name="Faixa Etária")
    confirmado = models.BooleanField(default=False, verbose_name="Presença Confirmada")
    data_confirmacao = models.DateTimeField(null=True, blank=True, verbose_name="Data da Confirmação")

    class Meta:
        verbose_name = 'Convidado'
        verbose_name_plural = 'Convidados'
        db_table = 'convidados'
        ordering = ['nome']

    def __str__(self):
        return f"{self.nome} ({self.telefone})"


# ====================================================================
# LISTA DE PRESENTES E COMPRAS
# ====================================================================

class Presente(models.Model):
    nome = models.CharField(max_length=100, verbose_name="Nome")
    descricao = models.TextField(null=True, blank=True, verbose_name="Descrição")
    imagem_url = models.TextField(null=True, blank=True, verbose_name="URL da Imagem")
    preco = models.DecimalField(max_digits=10, decimal_places=2, verbose_name="Preço")
    disponivel = models.BooleanField(default=True, verbose_name="Disponível")
    criado_em = models.DateTimeField(auto_now_add=True, verbose_name="Criado em")

    class Meta:
        verbose_name = 'Presente'
        verbose_name_plural = 'Presentes'
        db_table = 'presentes'
        ordering = ['id']

    def __str__(self):
        return self.nome


class Compra(models.Model):
    METODO_PAGAMENTO_CHOICES = [
        ('pix', 'PIX'),
        ('card', 'Cartão'),
    ]
    STATUS_PAGAMENTO_CHOICES = [
        ('pending', 'Pendente'),
        ('paid', 'Pago'),
        ('failed', 'Falhou'),
        ('expired', 'Expirado'),
        ('cancelled', 'Cancelado'),
    ]

    presente = models.ForeignKey(Presente, on_delete=models.PROTECT, related_name='compras')
    convidado = models.ForeignKey(Convidado, on_delete=models.SET_NULL, null=True, blank=True,
                                  related_name='compras')
    nome_comprador = models.CharField(max_length=100, verbose_name="Nome do Comprador")
    telefone_comprador = models.CharField(max_length=20, verbose_name="Telefone do Comprador")
    email_comprador = models.CharField(max_length=100, null=True, blank=True, verbose_name="E-mail do Comprador")
    documento_comprador = models.CharField(max_length=14, verbose_name="CPF/CNPJ do Comprador")
    metodo_pagamento = models.CharField(max_length=10, choices=METODO_PAGAMENTO_CHOICES, default='pix')
    status_pagamento = models.CharField(max_length=20, choices=STATUS_PAGAMENTO_CHOICES, default='pending',
                                        db_index=True)
    pagamento_id = models.CharField(max_length=255, null=True, blank=True, db_index=True)
    pix_cobranca_id = models.CharField(max_length=255, null=True, blank=True, db_index=True)
    pix_qr_code = models.TextField(null=True, blank=True)
    pix_qr_code_base64 = models.TextField(null=True, blank=True)
    expira_em = models.DateTimeField(null=True, blank=True, verbose_name="Expira em")
    metadados = models.JSONField(default=dict, blank=True)
    comprado_em = models.DateTimeField(auto_now_add=True, verbose_name="Comprado em")
    atualizado_em = models.DateTimeField(auto_now=True, verbose_name="Atualizado em")

    class Meta:
        verbose_name = 'Compra'
        verbose_name_plural = 'Compras'
        db_table = 'compras'
        ordering = ['comprado_em', 'id']

    def __str__(self):
        return f"Compra {self.id} - {self.presente_id} ({self.status_pagamento})"


# ====================================================================
# MEMÓRIAS
# ====================================================================

class Memoria(models.Model):
    url = models.TextField(verbose_name="URL")
    descricao = models.TextField(null=True, blank=True, verbose_name="Descrição")
    enviado_em = models.DateTimeField(auto_now_add=True, verbose_name="Enviado em")

    class Meta:
        verbose_name = 'Memória'
        verbose_name_plural = 'Memórias'
        db_table = 'memorias'
        ordering = ['-enviado_em']

    def __str__(self):
        return self.url
