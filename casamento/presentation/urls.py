from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from . import views, views_auth, views_pagamentos

urlpatterns = [
    # ====================================================================
    # AUTENTICAÇÃO (ADMINISTRADORES)
    # ====================================================================
    path('auth/signup/', views_auth.CadastroAdminAPIView.as_view(), name='auth_signup'),
    path('auth/signin/', views_auth.LoginAPIView.as_view(), name='auth_signin'),
    path('auth/signout/', views_auth.LogoutAPIView.as_view(), name='auth_signout'),
    path('auth/refresh/', TokenRefreshView.as_view(), name='auth_refresh'),
    path('auth/me/', views_auth.MeAPIView.as_view(), name='auth_me'),

    # ====================================================================
    # LISTA DE PRESENTES
    # ====================================================================
    path('presentes/', views.PresenteListaAPIView.as_view(), name='presente_lista'),
    path('presentes/<int:presente_id>/', views.PresenteDetalheAPIView.as_view(), name='presente_detalhe'),

    # ====================================================================
    # PAGAMENTOS
    # ====================================================================
    path('pagamentos/', views_pagamentos.CriarPagamentoAPIView.as_view(), name='pagamento_criar'),
    path('pagamentos/pix/', views_pagamentos.CriarPagamentoAPIView.as_view(), name='pagamento_criar_pix'),
    path('pagamentos/<int:compra_id>/status/', views_pagamentos.StatusPagamentoAPIView.as_view(),
         name='pagamento_status'),
    path('pagamentos/<int:compra_id>/cancelar/', views_pagamentos.CancelarPagamentoAPIView.as_view(),
         name='pagamento_cancelar'),
    path('pagamentos/<int:compra_id>/simular/', views_pagamentos.SimularPagamentoAPIView.as_view(),
         name='pagamento_simular'),
    path('pagamentos/compras/', views_pagamentos.CompraListaAPIView.as_view(), name='compra_lista'),
    path('pagamentos/compras/<int:compra_id>/', views_pagamentos.CompraDetalheAPIView.as_view(),
         name='compra_detalhe'),
    path('pagamentos/webhook/abacatepay/', views_pagamentos.WebhookAbacatePayAPIView.as_view(),
         name='webhook_abacatepay'),
    path('pagamentos/webhook/mercadopago/', views_pagamentos.WebhookMercadoPagoAPIView.as_view(),
         name='webhook_mercadopago'),

    # ====================================================================
    # CONVIDADOS
    # ====================================================================
    path('convidados/', views.ConvidadoListaAPIView.as_view(), name='convidado_lista'),
    path('convidados/importar/', views.ConvidadoImportarAPIView.as_view(), name='convidado_importar'),
    path('convidados/familia/<str:telefone>/', views.FamiliaAPIView.as_view(), name='convidado_familia'),
    path('convidados/confirmar/', views.ConfirmarPresencaAPIView.as_view(), name='convidado_confirmar'),
    path('convidados/confirmar-lote/', views.ConfirmarLoteAPIView.as_view(), name='convidado_confirmar_lote'),
    path('convidados/estatisticas/', views.EstatisticasConvidadosAPIView.as_view(),
         name='convidado_estatisticas'),

    # ====================================================================
    # MEMÓRIAS
    # ====================================================================
    path('memorias/', views.MemoriaAPIView.as_view(), name='memoria_lista'),
]
