from rest_framework import serializers

from batualam.catalog.models import Category as CategoryModel, Product as ProductModel


# ====================================================================
# SERIALIZERS DO CATÁLOGO
# ====================================================================

class CategorySerializer(serializers.ModelSerializer):
    name = serializers.CharField(min_length=3, max_length=100)
    product_count = serializers.SerializerMethodField()

    class Meta:
        model = CategoryModel
        fields = ['id', 'name', 'product_count']

    def get_product_count(self, obj) -> int:
        return obj.products.count()

    def validate_name(self, value):
        value = value.strip()
        queryset = CategoryModel.objects.filter(name__iexact=value)
        if self.instance is not None:
            queryset = queryset.exclude(pk=self.instance.pk)
        if queryset.exists():
            raise serializers.ValidationError("A category with this name already exists.")
        return value


class ProductSerializer(serializers.ModelSerializer):
    name = serializers.CharField(min_length=3, max_length=255)
    category_name = serializers.CharField(source='category.name', read_only=True)
    images = serializers.SerializerMethodField()

    class Meta:
        model = ProductModel
        fields = ['id', 'name', 'description', 'price', 'stock_quantity', 'category', 'category_name',
                  'images', 'created_at']
        read_only_fields = ['created_at']

    def get_images(self, obj):
        return [image.image.url for image in obj.images.all() if image.image]


# ====================================================================
# SERIALIZERS DE CHECKOUT E PEDIDOS
# ====================================================================

class CartItemSerializer(serializers.Serializer):
    """Item do carrinho mantido pelo cliente (mesmo formato do carrinho da sessão)."""
    id = serializers.IntegerField(min_value=1)
    name = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')
    price = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, default=0)
    quantity = serializers.IntegerField(min_value=1)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    imageUrl = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)


class CheckoutSerializer(serializers.Serializer):
    buyer_name = serializers.CharField(max_length=255)
    buyer_phone = serializers.CharField(max_length=20)
    shipping_address = serializers.CharField(min_length=10)
    items = CartItemSerializer(many=True, allow_empty=False)


class PaymentConfirmationSerializer(serializers.Serializer):
    order_code = serializers.CharField(max_length=50)
    payment_proof = serializers.ImageField()


class OrderItemSerializer(serializers.Serializer):
    product_id = serializers.IntegerField()
    product_name = serializers.CharField(source='display_name')
    quantity = serializers.IntegerField()
    subtotal = serializers.DecimalField(max_digits=14, decimal_places=2)


class OrderSerializer(serializers.Serializer):
    """Serializa a entidade Order do Core (não o Model)."""
    order_code = serializers.CharField()
    buyer_name = serializers.CharField()
    buyer_phone = serializers.CharField()
    shipping_address = serializers.CharField()
    order_date = serializers.DateTimeField()
    status = serializers.CharField(source='status.value')
    status_label = serializers.CharField(source='buyer_status_label')
    has_payment_proof = serializers.BooleanField()
    total = serializers.DecimalField(max_digits=14, decimal_places=2)
    items = OrderItemSerializer(many=True)
