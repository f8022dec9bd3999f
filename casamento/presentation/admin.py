# Configuração da interface administrativa do Django para os modelos do Casamento.

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from casamento.infrastructure.models import Usuario, Presente, Compra, Convidado, Memoria


# ====================================================================
# 1. ADMINISTRADORES (login por e-mail)
# ====================================================================

@admin.register(Usuario)
class UsuarioAdmin(BaseUserAdmin):
    list_display = ('email', 'first_name', 'last_name', 'is_staff', 'is_active')
    fieldsets = (
        (None, {'fields': ('email', 'password')}),
        ('Informações Pessoais', {'fields': ('first_name', 'last_name')}),
        ('Permissões', {'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions')}),
        ('Datas', {'fields': ('last_login', 'date_joined')}),
    )
    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'first_name', 'password1', 'password2'),
        }),
    )
    # O campo 'username' não existe no modelo Usuario
    search_fields = ('email', 'first_name', 'last_name')
    ordering = ('email',)


# ====================================================================
# 2. LISTA DE PRESENTES
# ====================================================================

class CompraInline(admin.TabularInline):
    model = Compra
    fields = ('nome_comprador', 'metodo_pagamento', 'status_pagamento', 'comprado_em')
    readonly_fields = fields
    extra = 0
    can_delete = False
    show_change_link = True

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Presente)
class PresenteAdmin(admin.ModelAdmin):
    list_display = ('nome', 'preco', 'disponivel', 'criado_em')
    list_filter = ('disponivel',)
    search_fields = ('nome', 'descricao')
    inlines = [CompraInline]

    def get_readonly_fields(self, request, obj=None):
        """A disponibilidade acompanha as compras enquanto houver uma pendente ou paga."""
        if obj and obj.compras.filter(status_pagamento__in=['pending', 'paid']).exists():
            return ('disponivel',)
        return ()


# ====================================================================
# 3. COMPRAS (status alterado somente pela reconciliação)
# ====================================================================

@admin.register(Compra)
class CompraAdmin(admin.ModelAdmin):
    list_display = ('id', 'presente', 'nome_comprador', 'metodo_pagamento', 'status_pagamento',
                    'comprado_em', 'atualizado_em')
    list_filter = ('status_pagamento', 'metodo_pagamento')
    search_fields = ('id', 'nome_comprador', 'email_comprador', 'pagamento_id', 'pix_cobranca_id')
    date_hierarchy = 'comprado_em'
    readonly_fields = (
        'presente',
        'status_pagamento',
        'metodo_pagamento',
        'pagamento_id',
        'pix_cobranca_id',
        'expira_em',
        'metadados',
        'comprado_em',
        'atualizado_em',
    )
    exclude = ('pix_qr_code', 'pix_qr_code_base64')

    def has_add_permission(self, request):
        """Compras nascem apenas pelo fluxo de pagamento."""
        return False


# ====================================================================
# 4. CONVIDADOS E MEMÓRIAS
# ====================================================================

@admin.register(Convidado)
class ConvidadoAdmin(admin.ModelAdmin):
    list_display = ('nome', 'telefone', 'faixa_etaria', 'confirmado', 'data_confirmacao')
    list_filter = ('confirmado', 'faixa_etaria')
    search_fields = ('nome', 'telefone')


@admin.register(Memoria)
class MemoriaAdmin(admin.ModelAdmin):
    list_display = ('id', 'descricao', 'enviado_em')
    readonly_fields = ('enviado_em',)
