"""
Context processors para a aplicação presentation.
"""
from django.conf import settings

from .cart_manager import CartManager


def cart_context(request):
    """Adiciona a quantidade de itens do carrinho (sessão) e os dados da loja a todos os templates."""
    context = {
        'store_name': settings.STORE_NAME,
        'bank_account': settings.STORE_BANK_ACCOUNT,
    }
    if hasattr(request, 'session'):
        context['cart_item_count'] = CartManager(request).get_cart().item_count
    return context
