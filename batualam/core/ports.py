# batualam/core/ports.py
"""
Definição das Portas (Interfaces/Protocolos) da Arquitetura Limpa.

Estes protocolos definem o contrato que a camada de Infraestrutura (Repositórios, Gateways)
DEVE seguir para se conectar à camada Core (Casos de Uso).
"""

from abc import abstractmethod
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Protocol, Tuple

from batualam.core.entities import (
    Category, Order, OrderStatus, Product, Review, SalesReport, SalesReportLine, SalesSummary
)


# ====================================================================
# 1. REPOSITÓRIOS (Portas de Persistência)
# ====================================================================

class IProductRepository(Protocol):
    """Protocolo para a persistência e busca de Produtos."""

    @abstractmethod
    def get_by_id(self, product_id: int) -> Optional[Product]: ...

    @abstractmethod
    def get_many(self, product_ids: Iterable[int]) -> Dict[int, Product]: ...

    @abstractmethod
    def search(self, term: Optional[str] = None, category_id: Optional[int] = None) -> List[Product]: ...

    @abstractmethod
    def best_sellers(self, limit: int) -> List[Product]: ...

    @abstractmethod
    def newest(self, limit: int) -> List[Product]: ...

    @abstractmethod
    def related(self, product: Product, limit: int) -> List[Product]: ...

    @abstractmethod
    def save(self, product: Product) -> Product: ...

    @abstractmethod
    def save_with_image(self, product: Product, path: str) -> Tuple[Product, List[str]]:
        """Grava o produto e a nova imagem principal numa única transação.

        Devolve o produto salvo e os caminhos das imagens substituídas.
        """
        ...

    @abstractmethod
    def delete(self, product_id: int) -> Optional[Product]:
        """Remove o produto (cascata em imagens, avaliações e itens) e devolve a entidade removida."""
        ...


class ICategoryRepository(Protocol):
    """Protocolo para a persistência e busca de Categorias."""

    @abstractmethod
    def list_all(self) -> List[Category]: ...

    @abstractmethod
    def get_by_id(self, category_id: int) -> Optional[Category]: ...

    @abstractmethod
    def name_taken(self, name: str, exclude_id: Optional[int] = None) -> bool: ...

    @abstractmethod
    def count_products(self, category_id: int) -> int: ...

    @abstractmethod
    def save(self, category: Category) -> Category: ...

    @abstractmethod
    def delete(self, category_id: int) -> None: ...


class IReviewRepository(Protocol):

    @abstractmethod
    def list_for_product(self, product_id: int) -> List[Review]: ...

    @abstractmethod
    def add(self, review: Review) -> Review: ...


class IOrderRepository(Protocol):
    """Protocolo para a persistência e gestão de Pedidos."""

    @abstractmethod
    def create_order(self, order: Order) -> Order:
        """
        Insere o pedido e todos os itens numa única transação atômica.
        Levanta DuplicateOrderCodeError se o código colidir com um existente.
        """
        ...

    @abstractmethod
    def get_by_id(self, order_id: int) -> Optional[Order]: ...

    @abstractmethod
    def get_by_code(self, order_code: str) -> Optional[Order]: ...

    @abstractmethod
    def code_taken(self, order_code: str, exclude_id: Optional[int] = None) -> bool: ...

    @abstractmethod
    def attach_payment_proof(self, order_id: int, path: str, status: OrderStatus) -> bool:
        """Grava o comprovante somente se o pedido ainda não tiver um. Retorna False caso contrário."""
        ...

    @abstractmethod
    def list_orders(
        self,
        search: Optional[str] = None,
        status: Optional[OrderStatus] = None,
        on_date: Optional[date] = None,
    ) -> List[Order]: ...

    @abstractmethod
    def save_with_items(self, order: Order) -> Order:
        """Cria ou atualiza o pedido e recria todos os itens (delete-then-recreate)."""
        ...

    @abstractmethod
    def delete(self, order_id: int) -> Optional[Order]: ...

    @abstractmethod
    def list_completed_between(self, start: date, end: date) -> List[SalesReportLine]: ...

    @abstractmethod
    def sales_summary(self) -> SalesSummary: ...


# ====================================================================
# 2. GATEWAYS (Portas de Serviços Externos)
# ====================================================================

class IFileStorage(Protocol):
    """Armazenamento de arquivos enviados (imagens de produto e comprovantes)."""

    @abstractmethod
    def save(self, namespace: str, uploaded_file: Any) -> str: ...

    @abstractmethod
    def delete(self, path: str) -> None: ...


class ISalesReportRenderer(Protocol):

    @abstractmethod
    def render(self, report: SalesReport) -> bytes: ...
