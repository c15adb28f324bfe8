# Configuração da interface administrativa do Django para os modelos da Batu Alam.

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from batualam.catalog.models import Category, Image, Product, Review
from batualam.core.dependency_injection import get_manage_catalog_use_case, get_manage_orders_use_case
from batualam.infrastructure.models import Customer
from batualam.orders.models import Order, OrderItem

# ====================================================================
# 1. ADMIN PERSONALIZADO PARA CLIENTES (LOGIN POR EMAIL)
# ====================================================================

@admin.register(Customer)
class CustomerAdmin(BaseUserAdmin):
    """O modelo Customer não tem 'username', então os fieldsets são redefinidos por completo."""

    list_display = ('email', 'first_name', 'last_name', 'phone_number', 'is_staff', 'is_active')

    fieldsets = (
        (None, {'fields': ('email', 'password')}),
        ('Personal info', {'fields': ('first_name', 'last_name', 'phone_number')}),
        ('Addresses', {'fields': ('shipping_address', 'billing_address')}),
        ('Permissions', {'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions')}),
        ('Important dates', {'fields': ('last_login', 'date_joined')}),
    )

    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'first_name', 'last_name', 'password1', 'password2'),
        }),
    )

    search_fields = ('email', 'first_name', 'last_name')
    ordering = ('email',)


# ====================================================================
# 2. ADMIN DO CATÁLOGO
# ====================================================================

@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ('name',)
    search_fields = ('name',)


class ImageInline(admin.TabularInline):
    """Permite enviar imagens diretamente na página do Produto."""
    model = Image
    extra = 1


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ('name', 'category', 'price', 'stock_quantity', 'created_at')
    list_filter = ('category',)
    search_fields = ('name', 'description')
    inlines = [ImageInline]

    def delete_model(self, request, obj):
        get_manage_catalog_use_case().delete_product(obj.pk)

    def delete_queryset(self, request, queryset):
        use_case = get_manage_catalog_use_case()
        for product_id in list(queryset.values_list('pk', flat=True)):
            use_case.delete_product(product_id)


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ('product', 'customer', 'rating', 'created_at')
    list_filter = ('rating',)


# ====================================================================
# 3. ADMIN DE PEDIDOS
# ====================================================================

class OrderItemInline(admin.TabularInline):
    """Itens apenas para consulta: subtotais são recalculados pelo painel da loja."""
    model = OrderItem
    extra = 0
    can_delete = False
    readonly_fields = ('product', 'quantity', 'subtotal')

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """
    Status, comprovante e itens só mudam pelo painel da loja ou pela confirmação de pagamento.
    Exclusões passam pelo caso de uso para remover também o arquivo do comprovante.
    """
    list_display = ('order_code', 'buyer_name', 'buyer_phone', 'order_date', 'status')
    list_filter = ('status', 'order_date')
    search_fields = ('order_code', 'buyer_name')
    date_hierarchy = 'order_date'
    readonly_fields = ('status', 'payment_proof')
    inlines = [OrderItemInline]

    def has_add_permission(self, request):
        return False

    def delete_model(self, request, obj):
        get_manage_orders_use_case().delete_order(obj.pk)

    def delete_queryset(self, request, queryset):
        use_case = get_manage_orders_use_case()
        for order_id in list(queryset.values_list('pk', flat=True)):
            use_case.delete_order(order_id)
