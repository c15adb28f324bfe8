from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from batualam.core.entities import format_rupiah

# ====================================================================
# 1. Categoria
# ====================================================================

class Category(models.Model):
    """Agrupa as pedras do catálogo (Ex: Batu Alam, Batu Buatan)."""
    name = models.CharField(max_length=100, unique=True, verbose_name="Category name")

    class Meta:
        verbose_name = "Category"
        verbose_name_plural = "Categories"
        db_table = 'categories'
        ordering = ['name']

    def __str__(self):
        return self.name


# ====================================================================
# 2. Produto
# ====================================================================

class Product(models.Model):
    # PROTECT: a exclusão de categorias com produtos é bloqueada também no caso de uso.
    category = models.ForeignKey(Category, on_delete=models.PROTECT, related_name='products')

    name = models.CharField(max_length=255)
    description = models.TextField(max_length=1000, blank=True)
    price = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(0)])
    stock_quantity = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Product"
        verbose_name_plural = "Products"
        db_table = 'products'
        ordering = ['-created_at', '-id']

    def __str__(self):
        return self.name

    @property
    def formatted_price(self):
        return format_rupiah(self.price)


# ====================================================================
# 3. Imagens e Avaliações
# ====================================================================

class Image(models.Model):
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='images')
    image = models.ImageField(upload_to='product-images/', max_length=255)

    class Meta:
        verbose_name = "Image"
        verbose_name_plural = "Images"
        db_table = 'images'
        ordering = ['id']

    def __str__(self):
        return self.image.name


class Review(models.Model):
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='reviews')
    customer = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='reviews')
    rating = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(5)])
    comment = models.TextField(max_length=1000, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Review"
        verbose_name_plural = "Reviews"
        db_table = 'reviews'
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"{self.product} ({self.rating}/5)"
