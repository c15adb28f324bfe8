from django.contrib.auth import views as auth_views
from django.urls import path, include
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from . import views, views_admin


# Cria o roteador e registra os ViewSets do catálogo
router = DefaultRouter()
router.register(r'products', views.ProductViewSet, basename='api-product')
router.register(r'categories', views.CategoryViewSet, basename='api-category')

urlpatterns = [
    # URLs da Loja
    path('', views.HomeView.as_view(), name='home'),
    path('products/', views.ProductListView.as_view(), name='product_list'),
    path('products/<int:pk>/', views.ProductDetailView.as_view(), name='product_detail'),

    # URLs do Carrinho e Checkout
    path('cart/', views.CartView.as_view(), name='cart'),
    path('cart/add/<int:product_id>/', views.add_to_cart, name='cart_add'),
    path('cart/increase/<int:index>/', views.increase_quantity, name='cart_increase'),
    path('cart/decrease/<int:index>/', views.decrease_quantity, name='cart_decrease'),
    path('cart/clear/', views.clear_cart, name='cart_clear'),
    path('order/created/', views.OrderCreatedView.as_view(), name='order_created'),
    path('payment/', views.PaymentView.as_view(), name='payment'),

    # URLs de Autenticação
    path('login/', auth_views.LoginView.as_view(template_name='auth/login.html'), name='login'),
    path('logout/', auth_views.LogoutView.as_view(next_page='home'), name='logout'),

    # URLs do Painel (back-office)
    path('backoffice/', views_admin.DashboardAdminView.as_view(), name='backoffice_dashboard'),
    path('backoffice/orders/', views_admin.OrderListAdminView.as_view(), name='backoffice_order_list'),
    path('backoffice/orders/new/', views_admin.OrderFormAdminView.as_view(), name='backoffice_order_create'),
    path('backoffice/orders/<int:pk>/', views_admin.OrderDetailAdminView.as_view(), name='backoffice_order_detail'),
    path('backoffice/orders/<int:pk>/edit/', views_admin.OrderFormAdminView.as_view(), name='backoffice_order_update'),
    path('backoffice/orders/<int:pk>/delete/', views_admin.OrderDeleteAdminView.as_view(),
         name='backoffice_order_delete'),
    path('backoffice/products/', views_admin.ProductListAdminView.as_view(), name='backoffice_product_list'),
    path('backoffice/products/new/', views_admin.ProductFormAdminView.as_view(), name='backoffice_product_create'),
    path('backoffice/products/<int:pk>/edit/', views_admin.ProductFormAdminView.as_view(),
         name='backoffice_product_update'),
    path('backoffice/products/<int:pk>/delete/', views_admin.ProductDeleteAdminView.as_view(),
         name='backoffice_product_delete'),
    path('backoffice/categories/new/', views_admin.CategoryFormAdminView.as_view(),
         name='backoffice_category_create'),
    path('backoffice/categories/<int:pk>/edit/', views_admin.CategoryFormAdminView.as_view(),
         name='backoffice_category_update'),
    path('backoffice/categories/<int:pk>/delete/', views_admin.CategoryDeleteAdminView.as_view(),
         name='backoffice_category_delete'),
    path('backoffice/report/', views_admin.SalesReportAdminView.as_view(), name='backoffice_report'),

    # URLs da API (geradas pelo roteador)
    path('api/', include(router.urls)),
    path('api/checkout/', views.CheckoutAPIView.as_view(), name='checkout-api'),
    path('api/payment-confirmation/', views.PaymentConfirmationAPIView.as_view(), name='payment-confirmation-api'),
    path('api/orders/<str:order_code>/status/', views.OrderStatusAPIView.as_view(), name='order-status-api'),

    # URLs de Autenticação com JWT
    path('api/token/', TokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('api/token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
]
