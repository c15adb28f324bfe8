# batualam/core/use_cases.py
"""
Implementação dos Casos de Uso (Lógica de Negócio) da aplicação.
Esta camada depende apenas das Entidades e Portas (Interfaces) do Core,
garantindo o isolamento da lógica de negócio.
"""
import logging
import os
import secrets
import string
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Tuple

from batualam.core.entities import (
    Cart, Category, Order, OrderItem, OrderStatus, Product, Review, SalesReport, SalesSummary
)
from batualam.core.exceptions import (
    CategoryInUseError,
    CategoryNameTakenError,
    CategoryNotFoundError,
    DuplicateOrderCodeError,
    EmptyCartError,
    InvalidDataError,
    OrderCodeGenerationError,
    OrderCodeTakenError,
    OrderNotFoundError,
    PaymentAlreadyConfirmedError,
    ProductNotFoundError,
)
from batualam.core.ports import (
    ICategoryRepository,
    IFileStorage,
    IOrderRepository,
    IProductRepository,
    IReviewRepository,
    ISalesReportRenderer,
)

logger = logging.getLogger(__name__)

MAX_IMAGE_SIZE = 2 * 1024 * 1024
IMAGE_EXTENSIONS = ('.jpg', '.jpeg', '.png', '.gif', '.bmp', '.webp')
ORDER_CODE_ALPHABET = string.ascii_uppercase + string.digits
MAX_ORDER_CODE_ATTEMPTS = 5


# ====================================================================
# FUNÇÕES AUXILIARES
# ====================================================================

def _random_suffix(length: int) -> str:
    return ''.join(secrets.choice(ORDER_CODE_ALPHABET) for _ in range(length))


def generate_order_code(today: Optional[date] = None) -> str:
    """Código do checkout: INV-AAAAMMDD-XXXXXX."""
    today = today or date.today()
    return f"INV-{today:%Y%m%d}-{_random_suffix(6)}"


def generate_admin_order_code() -> str:
    return f"ORD-{_random_suffix(8)}"


def validate_image_upload(uploaded_file: Any, max_size: int = MAX_IMAGE_SIZE) -> List[str]:
    """Retorna a lista de erros da imagem enviada (vazia se válida)."""
    if uploaded_file is None:
        return ['This field is required.']
    errors = []
    content_type = (getattr(uploaded_file, 'content_type', None) or '').lower()
    extension = os.path.splitext(getattr(uploaded_file, 'name', '') or '')[1].lower()
    if not (content_type.startswith('image/') or extension in IMAGE_EXTENSIONS):
        errors.append('The file must be an image.')
    size = getattr(uploaded_file, 'size', None) or 0
    if size > max_size:
        errors.append(f'The image may not be larger than {max_size // 1024} KB.')
    return errors


def _add_error(errors: Dict[str, List[str]], field_name: str, message: str) -> None:
    errors.setdefault(field_name, []).append(message)


def _validate_buyer(errors, buyer_name, buyer_phone, shipping_address, address_min_length=10):
    buyer_name = (buyer_name or '').strip()
    buyer_phone = (buyer_phone or '').strip()
    shipping_address = (shipping_address or '').strip()

    if not buyer_name:
        _add_error(errors, 'buyer_name', 'This field is required.')
    elif len(buyer_name) > 255:
        _add_error(errors, 'buyer_name', 'Ensure this value has at most 255 characters.')

    if not buyer_phone:
        _add_error(errors, 'buyer_phone', 'This field is required.')
    elif len(buyer_phone) > 20:
        _add_error(errors, 'buyer_phone', 'Ensure this value has at most 20 characters.')

    if not shipping_address:
        _add_error(errors, 'shipping_address', 'This field is required.')
    elif len(shipping_address) < address_min_length:
        _add_error(
            errors, 'shipping_address',
            f'Ensure this value has at least {address_min_length} characters.'
        )
    return buyer_name, buyer_phone, shipping_address


# ====================================================================
# 1. CASOS DE USO DO CATÁLOGO (LOJA)
# ====================================================================

class BrowseCatalogUseCase:
    """Consultas do catálogo para a vitrine."""

    def __init__(self, product_repo: IProductRepository, category_repo: ICategoryRepository,
                 review_repo: IReviewRepository):
        self.product_repo = product_repo
        self.category_repo = category_repo
        self.review_repo = review_repo

    def list_products(self, search: Optional[str] = None, category_id: Optional[int] = None) -> List[Product]:
        return self.product_repo.search(term=(search or '').strip() or None, category_id=category_id)

    def list_categories(self) -> List[Category]:
        return self.category_repo.list_all()

    def featured_products(self, limit: int = 3) -> List[Product]:
        """Mais vendidos por unidades; sem vendas, os mais recentes."""
        products = self.product_repo.best_sellers(limit)
        return products or self.product_repo.newest(limit)

    def promotion(self) -> Optional[Product]:
        newest = self.product_repo.newest(1)
        return newest[0] if newest else None

    def product_detail(self, product_id: int) -> Product:
        product = self.product_repo.get_by_id(product_id)
        if not product:
            raise ProductNotFoundError(f"Product {product_id} not found.")
        return product

    def related_products(self, product: Product, limit: int = 3) -> List[Product]:
        return self.product_repo.related(product, limit)

    def reviews(self, product_id: int) -> List[Review]:
        return self.review_repo.list_for_product(product_id)


class SubmitReviewUseCase:

    def __init__(self, product_repo: IProductRepository, review_repo: IReviewRepository):
        self.product_repo = product_repo
        self.review_repo = review_repo

    def execute(self, product_id: int, customer_id: int, rating: Any, comment: str = '') -> Review:
        if not self.product_repo.get_by_id(product_id):
            raise ProductNotFoundError(f"Product {product_id} not found.")

        errors: Dict[str, List[str]] = {}
        try:
            rating = int(rating)
        except (TypeError, ValueError):
            rating = 0
        if not 1 <= rating <= 5:
            _add_error(errors, 'rating', 'Rating must be between 1 and 5.')
        comment = (comment or '').strip()
        if len(comment) > 1000:
            _add_error(errors, 'comment', 'Ensure this value has at most 1000 characters.')
        if errors:
            raise InvalidDataError(errors)

        return self.review_repo.add(Review(
            product_id=product_id, customer_id=customer_id, rating=rating, comment=comment
        ))


# ====================================================================
# 2. FLUXO DE PEDIDOS DO COMPRADOR
# ====================================================================

class CreateOrderUseCase:
    """
    Converte o carrinho + dados de entrega em um Pedido com seus itens.

    O subtotal de cada item é o preço atual do catálogo x quantidade, congelado
    no momento da criação. O código do pedido é a única referência do comprador
    (checkout não exige login).
    """

    def __init__(self, order_repo: IOrderRepository, product_repo: IProductRepository,
                 code_generator: Callable[[], str] = generate_order_code,
                 max_attempts: int = MAX_ORDER_CODE_ATTEMPTS):
        self.order_repo = order_repo
        self.product_repo = product_repo
        self.code_generator = code_generator
        self.max_attempts = max_attempts

    def execute(self, cart: Cart, buyer_name: str, buyer_phone: str, shipping_address: str,
                customer_id: Optional[int] = None) -> Order:
        errors: Dict[str, List[str]] = {}
        buyer_name, buyer_phone, shipping_address = _validate_buyer(
            errors, buyer_name, buyer_phone, shipping_address
        )
        if errors:
            raise InvalidDataError(errors)
        if cart.is_empty():
            raise EmptyCartError()

        products = self.product_repo.get_many([item.product_id for item in cart.items])
        items = []
        for cart_item in cart.items:
            product = products.get(cart_item.product_id)
            if product is None:
                _add_error(errors, 'items', f'"{cart_item.name}" is no longer available.')
                continue
            items.append(OrderItem(
                product_id=product.id,
                product_name=product.name,
                quantity=cart_item.quantity,
                subtotal=product.price * cart_item.quantity,
            ))
        if errors:
            raise InvalidDataError(errors)

        order = Order(
            order_code='',
            buyer_name=buyer_name,
            buyer_phone=buyer_phone,
            shipping_address=shipping_address,
            status=OrderStatus.PENDING,
            items=items,
            customer_id=customer_id,
        )

        for attempt in range(1, self.max_attempts + 1):
            order.order_code = self.code_generator()
            try:
                created = self.order_repo.create_order(order)
                break
            except DuplicateOrderCodeError:
                logger.warning("Order code collision on %s (attempt %d)", order.order_code, attempt)
        else:
            raise OrderCodeGenerationError()

        cart.clear()
        logger.info("Order %s created with %d item(s), total %s",
                    created.order_code, len(created.items), created.total)
        return created


class ConfirmPaymentUseCase:
    """
    Anexa o comprovante de transferência ao pedido e o move para 'processing'.
    A gravação do arquivo acontece antes da atualização do registro.
    """

    def __init__(self, order_repo: IOrderRepository, storage: IFileStorage,
                 namespace: str = 'payment-proofs', max_size: int = MAX_IMAGE_SIZE):
        self.order_repo = order_repo
        self.storage = storage
        self.namespace = namespace
        self.max_size = max_size

    def execute(self, order_code: str, payment_proof: Any) -> Order:
        order_code = (order_code or '').strip()
        errors: Dict[str, List[str]] = {}
        if not order_code:
            _add_error(errors, 'order_code', 'This field is required.')
        for message in validate_image_upload(payment_proof, self.max_size):
            _add_error(errors, 'payment_proof', message)
        if errors:
            raise InvalidDataError(errors)

        order = self.order_repo.get_by_code(order_code)
        if order is None:
            raise InvalidDataError({'order_code': ['Order code not found.']})
        if order.has_payment_proof or not order.status.can_transition_to(
                OrderStatus.PROCESSING, has_payment_proof=True):
            raise PaymentAlreadyConfirmedError()

        path = self.storage.save(self.namespace, payment_proof)
        try:
            attached = self.order_repo.attach_payment_proof(order.id, path, OrderStatus.PROCESSING)
        except Exception:
            self.storage.delete(path)
            raise
        if not attached:
            self.storage.delete(path)
            raise PaymentAlreadyConfirmedError()

        logger.info("Payment proof received for order %s", order_code)
        return self.order_repo.get_by_id(order.id)


class CheckOrderStatusUseCase:

    def __init__(self, order_repo: IOrderRepository):
        self.order_repo = order_repo

    def execute(self, order_code: str) -> Optional[Order]:
        order_code = (order_code or '').strip()
        if not order_code:
            return None
        return self.order_repo.get_by_code(order_code)


# ====================================================================
# 3. CASOS DE USO ADMINISTRATIVOS (PEDIDOS)
# ====================================================================

class ManageOrdersAdminUseCase:
    """
    CRUD de pedidos para o painel administrativo.

    Ao salvar, os itens são recriados e o subtotal é recalculado com o preço
    atual do produto (ao contrário do checkout, que congela o preço da compra).
    """

    def __init__(self, order_repo: IOrderRepository, product_repo: IProductRepository,
                 storage: IFileStorage, namespace: str = 'payment-proofs',
                 max_size: int = MAX_IMAGE_SIZE):
        self.order_repo = order_repo
        self.product_repo = product_repo
        self.storage = storage
        self.namespace = namespace
        self.max_size = max_size

    def list_orders(self, search: Optional[str] = None, status: Optional[str] = None,
                    on_date: Optional[date] = None) -> List[Order]:
        parsed_status = None
        if status:
            try:
                parsed_status = OrderStatus.parse(status)
            except ValueError:
                raise InvalidDataError({'status': [f'"{status}" is not a valid status.']})
        return self.order_repo.list_orders(
            search=(search or '').strip() or None,
            status=parsed_status,
            on_date=on_date,
        )

    def get_order(self, order_id: int) -> Order:
        order = self.order_repo.get_by_id(order_id)
        if not order:
            raise OrderNotFoundError(f"Order {order_id} not found.")
        return order

    def new_order_code(self) -> str:
        return generate_admin_order_code()

    def sales_summary(self) -> SalesSummary:
        return self.order_repo.sales_summary()

    def save_order(self, order_id: Optional[int], data: Dict[str, Any],
                   items: List[Dict[str, Any]], payment_proof: Any = None) -> Order:
        existing = self.get_order(order_id) if order_id else None
        errors: Dict[str, List[str]] = {}

        order_code = (data.get('order_code') or '').strip()
        if not order_code:
            _add_error(errors, 'order_code', 'This field is required.')
        elif len(order_code) > 50:
            _add_error(errors, 'order_code', 'Ensure this value has at most 50 characters.')

        buyer_name, buyer_phone, shipping_address = _validate_buyer(
            errors, data.get('buyer_name'), data.get('buyer_phone'), data.get('shipping_address'),
            address_min_length=1,
        )

        order_date = data.get('order_date')
        if not order_date:
            _add_error(errors, 'order_date', 'This field is required.')

        try:
            status = OrderStatus.parse(data.get('status') or OrderStatus.PENDING)
        except ValueError:
            status = None
            _add_error(errors, 'status', 'Select a valid status.')

        if payment_proof is not None:
            for message in validate_image_upload(payment_proof, self.max_size):
                _add_error(errors, 'payment_proof', message)

        order_items = self._build_items(items, errors)

        if status is not None:
            current = existing.status if existing else OrderStatus.PENDING
            # só conta o comprovante já gravado pela confirmação de pagamento, não o enviado aqui
            has_proof = bool(existing and existing.has_payment_proof)
            if current == OrderStatus.PENDING and status == OrderStatus.PROCESSING and not has_proof:
                _add_error(errors, 'status',
                           'Only the payment confirmation can move a pending order to Processing.')
            elif not current.can_transition_to(status, has_payment_proof=has_proof):
                _add_error(errors, 'status', f'An order cannot move from {current.label} to {status.label}.')

        if errors:
            raise InvalidDataError(errors)

        if self.order_repo.code_taken(order_code, exclude_id=order_id):
            raise OrderCodeTakenError()

        old_proof = existing.payment_proof if existing else None
        new_proof = self.storage.save(self.namespace, payment_proof) if payment_proof is not None else None

        order = Order(
            id=order_id,
            order_code=order_code,
            buyer_name=buyer_name,
            buyer_phone=buyer_phone,
            shipping_address=shipping_address,
            order_date=order_date,
            status=status,
            items=order_items,
            payment_proof=new_proof or old_proof,
            customer_id=existing.customer_id if existing else data.get('customer_id'),
        )
        try:
            saved = self.order_repo.save_with_items(order)
        except DuplicateOrderCodeError:
            if new_proof:
                self.storage.delete(new_proof)
            raise OrderCodeTakenError()
        except Exception:
            if new_proof:
                self.storage.delete(new_proof)
            raise

        if new_proof and old_proof:
            self.storage.delete(old_proof)
        logger.info("Order %s saved from back-office (%s)", saved.order_code, saved.status.value)
        return saved

    def _build_items(self, items: List[Dict[str, Any]], errors: Dict[str, List[str]]) -> List[OrderItem]:
        if not items:
            _add_error(errors, 'items', 'An order needs at least one item.')
            return []

        products = self.product_repo.get_many(
            [entry.get('product_id') for entry in items if entry.get('product_id')]
        )
        order_items = []
        for position, entry in enumerate(items, start=1):
            product = products.get(entry.get('product_id'))
            try:
                quantity = int(entry.get('quantity') or 0)
            except (TypeError, ValueError):
                quantity = 0
            if product is None:
                _add_error(errors, 'items', f'Item {position}: select a valid product.')
                continue
            if quantity < 1:
                _add_error(errors, 'items', f'Item {position}: quantity must be at least 1.')
                continue
            order_items.append(OrderItem(
                product_id=product.id,
                product_name=product.name,
                quantity=quantity,
                subtotal=product.price * quantity,
            ))
        return order_items

    def delete_order(self, order_id: int) -> Order:
        deleted = self.order_repo.delete(order_id)
        if deleted is None:
            raise OrderNotFoundError(f"Order {order_id} not found.")
        if deleted.payment_proof:
            self.storage.delete(deleted.payment_proof)
        logger.info("Order %s deleted from back-office", deleted.order_code)
        return deleted


# ====================================================================
# 4. RELATÓRIO DE VENDAS
# ====================================================================

class GenerateSalesReportUseCase:

    def __init__(self, order_repo: IOrderRepository, renderer: ISalesReportRenderer,
                 clock: Callable[[], datetime] = datetime.now):
        self.order_repo = order_repo
        self.renderer = renderer
        self.clock = clock

    def build(self, start_date: date, end_date: date) -> SalesReport:
        errors: Dict[str, List[str]] = {}
        if not start_date:
            _add_error(errors, 'start_date', 'This field is required.')
        if not end_date:
            _add_error(errors, 'end_date', 'This field is required.')
        if start_date and end_date and end_date < start_date:
            _add_error(errors, 'end_date', 'The end date must be on or after the start date.')
        if errors:
            raise InvalidDataError(errors)

        return SalesReport(
            start_date=start_date,
            end_date=end_date,
            lines=self.order_repo.list_completed_between(start_date, end_date),
            generated_at=self.clock(),
        )

    def render(self, start_date: date, end_date: date) -> Tuple[str, bytes]:
        report = self.build(start_date, end_date)
        logger.info("Sales report %s generated with %d order(s)", report.filename, report.total_orders)
        return report.filename, self.renderer.render(report)


# ====================================================================
# 5. CASOS DE USO ADMINISTRATIVOS (CATÁLOGO)
# ====================================================================

class ManageCatalogAdminUseCase:

    def __init__(self, product_repo: IProductRepository, category_repo: ICategoryRepository,
                 storage: IFileStorage, namespace: str = 'product-images',
                 max_size: int = MAX_IMAGE_SIZE):
        self.product_repo = product_repo
        self.category_repo = category_repo
        self.storage = storage
        self.namespace = namespace
        self.max_size = max_size

    # --- Produtos ---

    def get_product(self, product_id: int) -> Product:
        product = self.product_repo.get_by_id(product_id)
        if not product:
            raise ProductNotFoundError(f"Product {product_id} not found.")
        return product

    def save_product(self, product_id: Optional[int], data: Dict[str, Any], image: Any = None) -> Product:
        errors: Dict[str, List[str]] = {}

        name = (data.get('name') or '').strip()
        if len(name) < 3:
            _add_error(errors, 'name', 'Ensure this value has at least 3 characters.')
        elif len(name) > 255:
            _add_error(errors, 'name', 'Ensure this value has at most 255 characters.')

        description = (data.get('description') or '').strip()
        if len(description) > 1000:
            _add_error(errors, 'description', 'Ensure this value has at most 1000 characters.')

        price = data.get('price')
        try:
            price = Decimal(str(price))
            if price < 0:
                raise ValueError
        except (ArithmeticError, TypeError, ValueError):
            _add_error(errors, 'price', 'Enter a price of zero or more.')

        stock_quantity = data.get('stock_quantity')
        try:
            stock_quantity = int(stock_quantity)
            if stock_quantity < 0:
                raise ValueError
        except (TypeError, ValueError):
            _add_error(errors, 'stock_quantity', 'Enter a whole number of zero or more.')

        category_id = data.get('category_id')
        if not category_id or not self.category_repo.get_by_id(category_id):
            _add_error(errors, 'category_id', 'Select a valid category.')

        if image is not None:
            for message in validate_image_upload(image, self.max_size):
                _add_error(errors, 'image', message)

        if errors:
            raise InvalidDataError(errors)

        if product_id:
            self.get_product(product_id)

        product = Product(
            id=product_id,
            name=name,
            description=description,
            price=price,
            stock_quantity=stock_quantity,
            category_id=category_id,
        )

        if image is None:
            saved = self.product_repo.save(product)
        else:
            # o arquivo é gravado antes do registro; falha no storage não altera o banco
            path = self.storage.save(self.namespace, image)
            try:
                saved, replaced = self.product_repo.save_with_image(product, path)
            except Exception:
                self.storage.delete(path)
                raise
            for old_path in replaced:
                self.storage.delete(old_path)

        logger.info("Product %s saved from back-office", saved.id)
        return saved

    def delete_product(self, product_id: int) -> Product:
        deleted = self.product_repo.delete(product_id)
        if deleted is None:
            raise ProductNotFoundError(f"Product {product_id} not found.")
        for image in deleted.images:
            self.storage.delete(image.path)
        logger.info("Product %s deleted from back-office", product_id)
        return deleted

    # --- Categorias ---

    def list_categories(self) -> List[Category]:
        return self.category_repo.list_all()

    def get_category(self, category_id: int) -> Category:
        category = self.category_repo.get_by_id(category_id)
        if not category:
            raise CategoryNotFoundError(f"Category {category_id} not found.")
        return category

    def save_category(self, category_id: Optional[int], name: str) -> Category:
        name = (name or '').strip()
        if len(name) < 3:
            raise InvalidDataError({'name': ['Ensure this value has at least 3 characters.']})
        if len(name) > 100:
            raise InvalidDataError({'name': ['Ensure this value has at most 100 characters.']})
        if category_id:
            self.get_category(category_id)
        if self.category_repo.name_taken(name, exclude_id=category_id):
            raise CategoryNameTakenError()
        return self.category_repo.save(Category(id=category_id, name=name))

    def delete_category(self, category_id: int) -> None:
        category = self.get_category(category_id)
        if self.category_repo.count_products(category_id) > 0:
            raise CategoryInUseError()
        self.category_repo.delete(category_id)
        logger.info("Category %s deleted from back-office", category.name)
