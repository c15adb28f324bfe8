"""
Mapeadores (Mappers) para converter entre:
1. Modelos do Django ORM
2. Entidades de Domínio (batualam.core.entities)
"""
from typing import Any, Optional

from django.apps import apps

from batualam.core.entities import (
    Category as CategoryEntity,
    Order as OrderEntity,
    OrderItem as OrderItemEntity,
    OrderStatus,
    Product as ProductEntity,
    ProductImage as ProductImageEntity,
    Review as ReviewEntity,
    SalesReportLine,
)


def get_model(app_label: str, model_name: str):
    """Retorna um modelo do Django de forma segura (lazy loading)."""
    return apps.get_model(app_label, model_name)


def _file_url(field_file) -> Optional[str]:
    return field_file.url if field_file else None


# ====================================================================
# MAPPERS DO CATÁLOGO
# ====================================================================

class CategoryMapper:

    @staticmethod
    def to_entity(model: Any) -> Optional[CategoryEntity]:
        if not model:
            return None
        return CategoryEntity(
            id=model.id,
            name=model.name,
            # Preenchido apenas quando a queryset foi anotada com a contagem.
            product_count=getattr(model, 'product_count', 0) or 0,
        )

    @staticmethod
    def to_model(entity: CategoryEntity, model: Optional[Any] = None) -> Any:
        if model is None:
            model = get_model('catalog', 'Category')()
        model.name = entity.name
        return model


class ProductMapper:

    @staticmethod
    def to_entity(model: Any) -> Optional[ProductEntity]:
        if not model:
            return None
        return ProductEntity(
            id=model.id,
            name=model.name,
            description=model.description,
            price=model.price,
            stock_quantity=model.stock_quantity,
            category_id=model.category_id,
            category=CategoryMapper.to_entity(model.category),
            images=[
                ProductImageEntity(id=image.id, path=image.image.name, url=_file_url(image.image))
                for image in model.images.all()
            ],
            created_at=model.created_at,
        )

    @staticmethod
    def to_model(entity: ProductEntity, model: Optional[Any] = None) -> Any:
        if model is None:
            model = get_model('catalog', 'Product')()
        model.name = entity.name
        model.description = entity.description
        model.price = entity.price
        model.stock_quantity = entity.stock_quantity
        model.category_id = entity.category_id
        return model


class ReviewMapper:

    @staticmethod
    def to_entity(model: Any) -> Optional[ReviewEntity]:
        if not model:
            return None
        customer = model.customer
        return ReviewEntity(
            id=model.id,
            product_id=model.product_id,
            customer_id=model.customer_id,
            customer_name=(customer.get_full_name() or customer.email) if customer else '',
            rating=model.rating,
            comment=model.comment,
            created_at=model.created_at,
        )


# ====================================================================
# MAPPERS DE PEDIDO
# ====================================================================

class OrderItemMapper:

    @staticmethod
    def to_entity(model: Any) -> Optional[OrderItemEntity]:
        if not model:
            return None
        return OrderItemEntity(
            id=model.id,
            order_id=model.order_id,
            product_id=model.product_id,
            product_name=model.product.name if model.product_id else None,
            quantity=model.quantity,
            subtotal=model.subtotal,
        )

    @staticmethod
    def to_model(entity: OrderItemEntity, order_id: int) -> Any:
        return get_model('orders', 'OrderItem')(
            order_id=order_id,
            product_id=entity.product_id,
            quantity=entity.quantity,
            subtotal=entity.subtotal,
        )


class OrderMapper:

    @staticmethod
    def to_entity(model: Any) -> Optional[OrderEntity]:
        """Converte Order Model para Order Entity, incluindo os itens."""
        if not model:
            return None
        return OrderEntity(
            id=model.id,
            customer_id=model.customer_id,
            order_code=model.order_code,
            buyer_name=model.buyer_name,
            buyer_phone=model.buyer_phone,
            shipping_address=model.shipping_address,
            order_date=model.order_date,
            status=OrderStatus.parse(model.status),
            payment_proof=model.payment_proof.name if model.payment_proof else None,
            payment_proof_url=_file_url(model.payment_proof),
            items=[OrderItemMapper.to_entity(item) for item in model.items.all()],
        )

    @staticmethod
    def to_model(entity: OrderEntity, model: Optional[Any] = None) -> Any:
        if model is None:
            model = get_model('orders', 'Order')()
        model.order_code = entity.order_code
        model.buyer_name = entity.buyer_name
        model.buyer_phone = entity.buyer_phone
        model.shipping_address = entity.shipping_address
        model.status = entity.status.value
        model.customer_id = entity.customer_id
        model.payment_proof = entity.payment_proof or None
        if entity.order_date:
            model.order_date = entity.order_date
        return model

    @staticmethod
    def to_report_line(model: Any) -> SalesReportLine:
        return SalesReportLine(
            order_id=model.id,
            order_code=model.order_code,
            order_date=model.order_date,
            buyer_name=model.buyer_name,
            items=[OrderItemMapper.to_entity(item) for item in model.items.all()],
        )
