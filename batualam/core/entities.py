# batualam/core/entities.py
"""
Entidades de domínio da loja (camada Core).

Dataclasses puras, sem dependência do Django. Os repositórios da camada de
infraestrutura convertem os Models para estas entidades através dos mappers.
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional


def format_rupiah(value) -> str:
    """Formata um valor no padrão 'Rp 1.000' (sem casas decimais)."""
    amount = Decimal(value or 0).quantize(Decimal('1'))
    return f"Rp {amount:,.0f}".replace(',', '.')


# ====================================================================
# 1. STATUS DO PEDIDO
# ====================================================================

class OrderStatus(str, Enum):
    """Vocabulário canônico de status armazenado no banco."""

    PENDING = 'pending'
    PROCESSING = 'processing'
    SHIPPED = 'shipped'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'

    @property
    def label(self) -> str:
        return _ADMIN_LABELS[self]

    @property
    def buyer_label(self) -> str:
        return _BUYER_LABELS[self]

    @classmethod
    def choices(cls):
        return [(status.value, status.label) for status in cls]

    @classmethod
    def parse(cls, value) -> 'OrderStatus':
        """
        Converte texto livre (inglês ou indonésio, qualquer caixa) para o enum.
        Levanta ValueError para valores desconhecidos.
        """
        if isinstance(value, cls):
            return value
        key = str(value or '').strip().lower()
        if key in _ALIASES:
            return _ALIASES[key]
        raise ValueError(f"Unknown order status: {value!r}")

    def can_transition_to(self, target: 'OrderStatus', has_payment_proof: bool = False) -> bool:
        if target == self:
            return True
        if target == OrderStatus.CANCELLED:
            return self != OrderStatus.CANCELLED
        if self == OrderStatus.PENDING and target == OrderStatus.PROCESSING:
            return has_payment_proof
        return _FORWARD.get(self) == target


_ADMIN_LABELS = {
    OrderStatus.PENDING: 'Pending',
    OrderStatus.PROCESSING: 'Processing',
    OrderStatus.SHIPPED: 'Shipped',
    OrderStatus.COMPLETED: 'Completed',
    OrderStatus.CANCELLED: 'Cancelled',
}

_BUYER_LABELS = {
    OrderStatus.PENDING: 'Pending',
    OrderStatus.PROCESSING: 'Diproses',
    OrderStatus.SHIPPED: 'Dikirim',
    OrderStatus.COMPLETED: 'Selesai',
    OrderStatus.CANCELLED: 'Dibatalkan',
}

_ALIASES = {
    'pending': OrderStatus.PENDING,
    'processing': OrderStatus.PROCESSING,
    'diproses': OrderStatus.PROCESSING,
    'shipped': OrderStatus.SHIPPED,
    'dikirim': OrderStatus.SHIPPED,
    'completed': OrderStatus.COMPLETED,
    'selesai': OrderStatus.COMPLETED,
    'cancelled': OrderStatus.CANCELLED,
    'dibatalkan': OrderStatus.CANCELLED,
}

_FORWARD = {
    OrderStatus.PROCESSING: OrderStatus.SHIPPED,
    OrderStatus.SHIPPED: OrderStatus.COMPLETED,
}


# ====================================================================
# 2. CATÁLOGO
# ====================================================================

@dataclass
class Category:
    name: str
    id: Optional[int] = None
    product_count: int = 0


@dataclass
class ProductImage:
    path: str
    url: Optional[str] = None
    id: Optional[int] = None


@dataclass
class Product:
    name: str
    price: Decimal
    category_id: Optional[int] = None
    description: str = ''
    stock_quantity: int = 0
    id: Optional[int] = None
    category: Optional[Category] = None
    images: List[ProductImage] = field(default_factory=list)
    created_at: Optional[datetime] = None

    @property
    def image_url(self) -> Optional[str]:
        return self.images[0].url if self.images else None

    @property
    def formatted_price(self) -> str:
        return format_rupiah(self.price)


@dataclass
class Review:
    product_id: int
    rating: int
    comment: str = ''
    customer_id: Optional[int] = None
    customer_name: str = ''
    id: Optional[int] = None
    created_at: Optional[datetime] = None


# ====================================================================
# 3. CARRINHO (efêmero, nunca persistido como tabela)
# ====================================================================

@dataclass
class CartItem:
    product_id: int
    name: str
    price: Decimal
    quantity: int = 1
    description: str = ''
    image_url: Optional[str] = None

    @property
    def subtotal(self) -> Decimal:
        return self.price * self.quantity

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.product_id,
            'name': self.name,
            'price': str(self.price),
            'description': self.description,
            'imageUrl': self.image_url,
            'quantity': self.quantity,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CartItem':
        return cls(
            product_id=int(data['id']),
            name=data.get('name', ''),
            price=Decimal(str(data.get('price', '0'))),
            quantity=int(data.get('quantity', 1)),
            description=data.get('description') or '',
            image_url=data.get('imageUrl'),
        )


@dataclass
class Cart:
    """
    Lista ordenada de itens. O índice é o único identificador de um item
    dentro da sessão, então remoções compactam a lista.
    """
    items: List[CartItem] = field(default_factory=list)

    def add_to_cart(self, product: Product) -> None:
        for item in self.items:
            if item.product_id == product.id:
                item.quantity += 1
                return
        self.items.append(CartItem(
            product_id=product.id,
            name=product.name,
            price=product.price,
            quantity=1,
            description=product.description,
            image_url=product.image_url,
        ))

    def increase_quantity(self, index: int) -> None:
        if 0 <= index < len(self.items):
            self.items[index].quantity += 1

    def decrease_quantity(self, index: int) -> None:
        if not 0 <= index < len(self.items):
            return
        self.items[index].quantity -= 1
        if self.items[index].quantity <= 0:
            del self.items[index]

    def subtotal(self) -> Decimal:
        return sum((item.subtotal for item in self.items), Decimal('0'))

    def total(self) -> Decimal:
        # Sem frete: o total é o próprio subtotal.
        return self.subtotal()

    def clear(self) -> None:
        self.items = []

    def is_empty(self) -> bool:
        return not self.items

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    def to_list(self) -> List[Dict[str, Any]]:
        return [item.to_dict() for item in self.items]

    @classmethod
    def from_list(cls, raw: Optional[List[Dict[str, Any]]]) -> 'Cart':
        items = [CartItem.from_dict(entry) for entry in (raw or [])]
        return cls(items=[item for item in items if item.quantity > 0])


# ====================================================================
# 4. PEDIDOS
# ====================================================================

@dataclass
class OrderItem:
    product_id: Optional[int]
    quantity: int
    subtotal: Decimal
    product_name: Optional[str] = None
    id: Optional[int] = None
    order_id: Optional[int] = None

    @property
    def display_name(self) -> str:
        return self.product_name or 'Deleted product'


@dataclass
class Order:
    order_code: str
    buyer_name: str
    buyer_phone: str
    shipping_address: str
    status: OrderStatus = OrderStatus.PENDING
    items: List[OrderItem] = field(default_factory=list)
    order_date: Optional[datetime] = None
    payment_proof: Optional[str] = None
    payment_proof_url: Optional[str] = None
    customer_id: Optional[int] = None
    id: Optional[int] = None

    @property
    def total(self) -> Decimal:
        return sum((item.subtotal for item in self.items), Decimal('0'))

    @property
    def formatted_total(self) -> str:
        return format_rupiah(self.total)

    @property
    def has_payment_proof(self) -> bool:
        return bool(self.payment_proof)

    @property
    def status_label(self) -> str:
        return self.status.label

    @property
    def buyer_status_label(self) -> str:
        return self.status.buyer_label


@dataclass
class SalesSummary:
    total_revenue: Decimal = Decimal('0')
    total_orders: int = 0

    @property
    def formatted_revenue(self) -> str:
        return format_rupiah(self.total_revenue)


# ====================================================================
# 5. RELATÓRIO DE VENDAS
# ====================================================================

@dataclass
class SalesReportLine:
    order_id: int
    order_code: str
    order_date: datetime
    buyer_name: str
    items: List[OrderItem] = field(default_factory=list)

    @property
    def total(self) -> Decimal:
        return sum((item.subtotal for item in self.items), Decimal('0'))


@dataclass
class SalesReport:
    start_date: date
    end_date: date
    lines: List[SalesReportLine] = field(default_factory=list)
    generated_at: Optional[datetime] = None

    @property
    def total_orders(self) -> int:
        return len(self.lines)

    @property
    def total_revenue(self) -> Decimal:
        return sum((line.total for line in self.lines), Decimal('0'))

    def is_empty(self) -> bool:
        return not self.lines

    @property
    def filename(self) -> str:
        return f"sales-report-{self.start_date:%Y-%m-%d}-to-{self.end_date:%Y-%m-%d}.pdf"
