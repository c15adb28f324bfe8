# batualam/urls.py
"""
Configuração principal de URL do projeto Batu Alam.

Este arquivo centraliza o roteamento, incluindo:
1. Rotas da Loja, do Painel e da API (batualam.presentation)
2. Rotas do Admin (Django Admin)
3. Rotas da Documentação da API (Swagger/Redoc)
"""
from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import path, include
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView, SpectacularRedocView


urlpatterns = [
    path('', include('batualam.presentation.urls')),

    path('admin/', admin.site.urls),

    # ====================================================================
    # ROTAS DE DOCUMENTAÇÃO DA API (DRF SPECTACULAR)
    # ====================================================================
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/swagger/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
    path('api/docs/redoc/', SpectacularRedocView.as_view(url_name='schema'), name='redoc'),
]

# Comprovantes e imagens de produto servidos pelo Django apenas em desenvolvimento.
urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
