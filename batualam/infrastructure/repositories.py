# batualam/infrastructure/repositories.py
"""
Implementações concretas das portas de persistência usando o Django ORM.
Os modelos são acessados via apps.get_model para evitar importações circulares.
"""
import logging
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from django.apps import apps
from django.db import IntegrityError, transaction
from django.db.models import Count, Q, Sum
from django.db.models.deletion import ProtectedError

from batualam.core.entities import (
    Category, Order, OrderStatus, Product, Review, SalesReportLine, SalesSummary
)
from batualam.core.exceptions import CategoryInUseError, DuplicateOrderCodeError
from batualam.core.ports import (
    ICategoryRepository, IOrderRepository, IProductRepository, IReviewRepository
)
from .mappers import CategoryMapper, OrderItemMapper, OrderMapper, ProductMapper, ReviewMapper

logger = logging.getLogger(__name__)


def get_model(app_label, model_name):
    return apps.get_model(app_label, model_name)


# ====================================================================
# 1. CATÁLOGO
# ====================================================================

class ProductRepositoryDjango(IProductRepository):

    @property
    def ProductModel(self):
        return get_model('catalog', 'Product')

    @property
    def ImageModel(self):
        return get_model('catalog', 'Image')

    def _queryset(self):
        return self.ProductModel.objects.select_related('category').prefetch_related('images')

    def get_by_id(self, product_id: int) -> Optional[Product]:
        try:
            return ProductMapper.to_entity(self._queryset().get(pk=product_id))
        except (self.ProductModel.DoesNotExist, ValueError, TypeError):
            return None

    def get_many(self, product_ids: Iterable[int]) -> Dict[int, Product]:
        models = self._queryset().filter(pk__in=list(product_ids))
        return {model.id: ProductMapper.to_entity(model) for model in models}

    def search(self, term: Optional[str] = None, category_id: Optional[int] = None) -> List[Product]:
        queryset = self._queryset()
        if term:
            queryset = queryset.filter(name__icontains=term)
        if category_id:
            queryset = queryset.filter(category_id=category_id)
        return [ProductMapper.to_entity(model) for model in queryset]

    def best_sellers(self, limit: int) -> List[Product]:
        queryset = (
            self._queryset()
            .annotate(units_sold=Sum('order_items__quantity'))
            .filter(units_sold__gt=0)
            .order_by('-units_sold', '-created_at', '-id')[:limit]
        )
        return [ProductMapper.to_entity(model) for model in queryset]

    def newest(self, limit: int) -> List[Product]:
        queryset = self._queryset().order_by('-created_at', '-id')[:limit]
        return [ProductMapper.to_entity(model) for model in queryset]

    def related(self, product: Product, limit: int) -> List[Product]:
        queryset = (
            self._queryset()
            .filter(category_id=product.category_id)
            .exclude(pk=product.id)[:limit]
        )
        return [ProductMapper.to_entity(model) for model in queryset]

    def _save_model(self, product: Product):
        model = self.ProductModel.objects.get(pk=product.id) if product.id else None
        model = ProductMapper.to_model(product, model)
        model.save()
        return model

    @transaction.atomic
    def save(self, product: Product) -> Product:
        model = self._save_model(product)
        return self.get_by_id(model.id)

    @transaction.atomic
    def save_with_image(self, product: Product, path: str) -> Tuple[Product, List[str]]:
        model = self._save_model(product)
        old_images = list(self.ImageModel.objects.filter(product_id=model.id))
        old_paths = [image.image.name for image in old_images if image.image]
        self.ImageModel.objects.filter(pk__in=[image.pk for image in old_images]).delete()
        self.ImageModel.objects.create(product_id=model.id, image=path)
        return self.get_by_id(model.id), old_paths

    @transaction.atomic
    def delete(self, product_id: int) -> Optional[Product]:
        try:
            model = self._queryset().get(pk=product_id)
        except self.ProductModel.DoesNotExist:
            return None
        entity = ProductMapper.to_entity(model)
        model.delete()
        return entity


class CategoryRepositoryDjango(ICategoryRepository):

    @property
    def CategoryModel(self):
        return get_model('catalog', 'Category')

    def _queryset(self):
        return self.CategoryModel.objects.annotate(product_count=Count('products'))

    def list_all(self) -> List[Category]:
        return [CategoryMapper.to_entity(model) for model in self._queryset().order_by('name')]

    def get_by_id(self, category_id: int) -> Optional[Category]:
        try:
            return CategoryMapper.to_entity(self._queryset().get(pk=category_id))
        except (self.CategoryModel.DoesNotExist, ValueError, TypeError):
            return None

    def name_taken(self, name: str, exclude_id: Optional[int] = None) -> bool:
        queryset = self.CategoryModel.objects.filter(name__iexact=name)
        if exclude_id:
            queryset = queryset.exclude(pk=exclude_id)
        return queryset.exists()

    def count_products(self, category_id: int) -> int:
        return get_model('catalog', 'Product').objects.filter(category_id=category_id).count()

    @transaction.atomic
    def save(self, category: Category) -> Category:
        model = self.CategoryModel.objects.get(pk=category.id) if category.id else None
        model = CategoryMapper.to_model(category, model)
        model.save()
        return self.get_by_id(model.id)

    def delete(self, category_id: int) -> None:
        try:
            with transaction.atomic():
                self.CategoryModel.objects.filter(pk=category_id).delete()
        except ProtectedError as exc:
            raise CategoryInUseError() from exc


class ReviewRepositoryDjango(IReviewRepository):

    @property
    def ReviewModel(self):
        return get_model('catalog', 'Review')

    def list_for_product(self, product_id: int) -> List[Review]:
        queryset = self.ReviewModel.objects.select_related('customer').filter(product_id=product_id)
        return [ReviewMapper.to_entity(model) for model in queryset]

    @transaction.atomic
    def add(self, review: Review) -> Review:
        model = self.ReviewModel.objects.create(
            product_id=review.product_id,
            customer_id=review.customer_id,
            rating=review.rating,
            comment=review.comment,
        )
        return ReviewMapper.to_entity(self.ReviewModel.objects.select_related('customer').get(pk=model.pk))


# ====================================================================
# 2. PEDIDOS
# ====================================================================

class OrderRepositoryDjango(IOrderRepository):

    @property
    def OrderModel(self):
        return get_model('orders', 'Order')

    @property
    def OrderItemModel(self):
        return get_model('orders', 'OrderItem')

    def _queryset(self):
        return self.OrderModel.objects.prefetch_related('items__product')

    def _code_exists(self, order_code: str, exclude_id: Optional[int] = None) -> bool:
        queryset = self.OrderModel.objects.filter(order_code=order_code)
        if exclude_id:
            queryset = queryset.exclude(pk=exclude_id)
        return queryset.exists()

    def create_order(self, order: Order) -> Order:
        """Pedido e itens entram juntos ou nenhum deles entra."""
        try:
            with transaction.atomic():
                model = OrderMapper.to_model(order)
                model.save()
                self.OrderItemModel.objects.bulk_create(
                    [OrderItemMapper.to_model(item, model.id) for item in order.items]
                )
        except IntegrityError as exc:
            if self._code_exists(order.order_code):
                raise DuplicateOrderCodeError(order.order_code) from exc
            raise
        return self.get_by_id(model.id)

    def get_by_id(self, order_id: int) -> Optional[Order]:
        try:
            return OrderMapper.to_entity(self._queryset().get(pk=order_id))
        except (self.OrderModel.DoesNotExist, ValueError, TypeError):
            return None

    def get_by_code(self, order_code: str) -> Optional[Order]:
        try:
            return OrderMapper.to_entity(self._queryset().get(order_code=order_code))
        except self.OrderModel.DoesNotExist:
            return None

    def code_taken(self, order_code: str, exclude_id: Optional[int] = None) -> bool:
        return self._code_exists(order_code, exclude_id)

    def attach_payment_proof(self, order_id: int, path: str, status: OrderStatus) -> bool:
        # UPDATE condicional: só grava se ainda não houver comprovante.
        updated = (
            self.OrderModel.objects
            .filter(pk=order_id)
            .filter(Q(payment_proof__isnull=True) | Q(payment_proof=''))
            .update(payment_proof=path, status=status.value)
        )
        return updated == 1

    def list_orders(
        self,
        search: Optional[str] = None,
        status: Optional[OrderStatus] = None,
        on_date: Optional[date] = None,
    ) -> List[Order]:
        queryset = self._queryset()
        if search:
            queryset = queryset.filter(Q(order_code__icontains=search) | Q(buyer_name__icontains=search))
        if status:
            queryset = queryset.filter(status=status.value)
        if on_date:
            queryset = queryset.filter(order_date__date=on_date)
        return [OrderMapper.to_entity(model) for model in queryset.order_by('-order_date', '-id')]

    def save_with_items(self, order: Order) -> Order:
        try:
            with transaction.atomic():
                model = self.OrderModel.objects.select_for_update().get(pk=order.id) if order.id else None
                model = OrderMapper.to_model(order, model)
                model.save()
                # Os itens são sempre recriados; a identidade dos itens não é preservada.
                model.items.all().delete()
                self.OrderItemModel.objects.bulk_create(
                    [OrderItemMapper.to_model(item, model.id) for item in order.items]
                )
        except IntegrityError as exc:
            if self._code_exists(order.order_code, exclude_id=order.id):
                raise DuplicateOrderCodeError(order.order_code) from exc
            raise
        return self.get_by_id(model.id)

    @transaction.atomic
    def delete(self, order_id: int) -> Optional[Order]:
        try:
            model = self._queryset().get(pk=order_id)
        except self.OrderModel.DoesNotExist:
            return None
        entity = OrderMapper.to_entity(model)
        model.items.all().delete()
        model.delete()
        return entity

    def list_completed_between(self, start: date, end: date) -> List[SalesReportLine]:
        queryset = self._queryset().filter(
            status=OrderStatus.COMPLETED.value,
            order_date__date__gte=start,
            order_date__date__lte=end,
        ).order_by('order_date', 'id')
        return [OrderMapper.to_report_line(model) for model in queryset]

    def sales_summary(self) -> SalesSummary:
        revenue = self.OrderItemModel.objects.aggregate(total=Sum('subtotal'))['total']
        return SalesSummary(
            total_revenue=revenue or Decimal('0'),
            total_orders=self.OrderModel.objects.count(),
        )
