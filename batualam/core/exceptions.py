from typing import Dict, List, Optional


class BaseCoreError(Exception):
    """Classe base para todas as exceções da Camada Core."""
    def __init__(self, message="An unexpected error occurred."):
        self.message = message
        super().__init__(self.message)


# ===============================================
# ERROS DE VALIDAÇÃO
# ===============================================

class InvalidDataError(BaseCoreError):
    """Erro levantado quando dados inválidos são fornecidos. Carrega os erros por campo."""
    def __init__(self, errors: Optional[Dict[str, List[str]]] = None, message="The submitted data is invalid."):
        self.errors = errors or {}
        super().__init__(message)


class EmptyCartError(InvalidDataError):
    """Erro levantado ao tentar fazer checkout com carrinho vazio."""
    def __init__(self, message="Your cart is empty."):
        super().__init__({'items': [message]}, message)


# ===============================================
# ERROS DE INTEGRIDADE
# ===============================================

class IntegrityViolationError(BaseCoreError):
    """Operação rejeitada porque violaria uma regra de integridade. O estado não é alterado."""
    pass


class DuplicateOrderCodeError(IntegrityViolationError):
    """O código gerado já existe no banco (colisão na inserção)."""
    def __init__(self, order_code: str = ''):
        self.order_code = order_code
        super().__init__(f"Order code {order_code} already exists.")


class OrderCodeGenerationError(IntegrityViolationError):
    def __init__(self, message="Could not generate a unique order code. Please try again."):
        super().__init__(message)


class OrderCodeTakenError(IntegrityViolationError):
    def __init__(self, message="This order code is already in use."):
        super().__init__(message)


class PaymentAlreadyConfirmedError(IntegrityViolationError):
    """Comprovante já enviado para o pedido, ou o pedido não aceita mais confirmação."""
    def __init__(self, message="This order has already been confirmed or is invalid."):
        super().__init__(message)


class CategoryInUseError(IntegrityViolationError):
    def __init__(self, message="Category cannot be deleted because it has related products."):
        super().__init__(message)


class CategoryNameTakenError(IntegrityViolationError):
    def __init__(self, message="A category with this name already exists."):
        super().__init__(message)


# ===============================================
# ERROS DE PERSISTÊNCIA E ENTIDADE
# ===============================================

class ItemNotFoundError(BaseCoreError):
    """Erro levantado quando um item (genérico) não é encontrado."""
    def __init__(self, message="The requested item was not found."):
        super().__init__(message)


class OrderNotFoundError(ItemNotFoundError):
    def __init__(self, message="Order not found."):
        super().__init__(message)


class ProductNotFoundError(ItemNotFoundError):
    def __init__(self, message="Product not found."):
        super().__init__(message)


class CategoryNotFoundError(ItemNotFoundError):
    def __init__(self, message="Category not found."):
        super().__init__(message)


# ===============================================
# ERROS DE ARMAZENAMENTO DE ARQUIVOS
# ===============================================

class StorageError(BaseCoreError):
    """Falha ao gravar ou remover um arquivo no storage."""
    def __init__(self, message="The file could not be stored. Please try again."):
        super().__init__(message)
