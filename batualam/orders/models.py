from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Sum
from django.utils import timezone

from batualam.core.entities import OrderStatus, format_rupiah


class Order(models.Model):
    """
    Pedido feito na vitrine (checkout sem login) ou lançado pelo painel.
    O order_code é a referência pública do comprador.
    """
    STATUS_CHOICES = OrderStatus.choices()

    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='orders'
    )
    order_code = models.CharField(max_length=50, unique=True)
    buyer_name = models.CharField(max_length=255)
    buyer_phone = models.CharField(max_length=20)
    shipping_address = models.TextField()
    order_date = models.DateTimeField(default=timezone.now)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=OrderStatus.PENDING.value)
    payment_proof = models.ImageField(upload_to='payment-proofs/', max_length=255, blank=True, null=True)

    class Meta:
        verbose_name = 'Order'
        verbose_name_plural = 'Orders'
        db_table = 'orders'
        ordering = ['-order_date', '-id']

    def __str__(self):
        return self.order_code

    @property
    def total(self):
        return self.items.aggregate(total=Sum('subtotal'))['total'] or Decimal('0')

    @property
    def formatted_total(self):
        return format_rupiah(self.total)


class OrderItem(models.Model):
    order = models.ForeignKey(Order, related_name='items', on_delete=models.CASCADE)
    product = models.ForeignKey('catalog.Product', related_name='order_items', on_delete=models.CASCADE)
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    # Snapshot do preço x quantidade no momento da criação (ou da última edição no painel).
    subtotal = models.DecimalField(max_digits=14, decimal_places=2)

    class Meta:
        verbose_name = 'Order item'
        verbose_name_plural = 'Order items'
        db_table = 'order_items'
        ordering = ['id']

    def __str__(self):
        return f"{self.quantity}x {self.product_id} on {self.order.order_code}"
