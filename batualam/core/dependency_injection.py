# batualam/core/dependency_injection.py
"""
Módulo de Injeção de Dependência (DI).
Responsável por instanciar os Use Cases com suas dependências de Repositórios/Gateways
concretos da camada de Infraestrutura.
"""
from django.conf import settings
from django.utils import timezone

from batualam.infrastructure.gateways import DjangoFileStorage, ReportLabSalesReportRenderer
from batualam.infrastructure.repositories import (
    CategoryRepositoryDjango,
    OrderRepositoryDjango,
    ProductRepositoryDjango,
    ReviewRepositoryDjango,
)
from .use_cases import (
    BrowseCatalogUseCase,
    CheckOrderStatusUseCase,
    ConfirmPaymentUseCase,
    CreateOrderUseCase,
    GenerateSalesReportUseCase,
    ManageCatalogAdminUseCase,
    ManageOrdersAdminUseCase,
    SubmitReviewUseCase,
)

# Repositórios e Gateways Concretos
product_repo = ProductRepositoryDjango()
category_repo = CategoryRepositoryDjango()
review_repo = ReviewRepositoryDjango()
order_repo = OrderRepositoryDjango()
file_storage = DjangoFileStorage()
report_renderer = ReportLabSalesReportRenderer(store_name=settings.STORE_NAME)


# ====================================================================
# Use Cases de Catálogo
# ====================================================================

def get_browse_catalog_use_case() -> BrowseCatalogUseCase:
    return BrowseCatalogUseCase(product_repo, category_repo, review_repo)

def get_submit_review_use_case() -> SubmitReviewUseCase:
    return SubmitReviewUseCase(product_repo, review_repo)

def get_manage_catalog_use_case() -> ManageCatalogAdminUseCase:
    return ManageCatalogAdminUseCase(
        product_repo, category_repo, file_storage,
        namespace=settings.PRODUCT_IMAGE_DIR,
        max_size=settings.MAX_UPLOAD_SIZE,
    )


# ====================================================================
# Use Cases de Pedidos
# ====================================================================

def get_create_order_use_case() -> CreateOrderUseCase:
    return CreateOrderUseCase(order_repo, product_repo)

def get_confirm_payment_use_case() -> ConfirmPaymentUseCase:
    return ConfirmPaymentUseCase(
        order_repo, file_storage,
        namespace=settings.PAYMENT_PROOF_DIR,
        max_size=settings.MAX_UPLOAD_SIZE,
    )

def get_check_order_status_use_case() -> CheckOrderStatusUseCase:
    return CheckOrderStatusUseCase(order_repo)

def get_manage_orders_use_case() -> ManageOrdersAdminUseCase:
    return ManageOrdersAdminUseCase(
        order_repo, product_repo, file_storage,
        namespace=settings.PAYMENT_PROOF_DIR,
        max_size=settings.MAX_UPLOAD_SIZE,
    )

def get_sales_report_use_case() -> GenerateSalesReportUseCase:
    return GenerateSalesReportUseCase(order_repo, report_renderer, clock=timezone.now)
