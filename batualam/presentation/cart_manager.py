# batualam/presentation/cart_manager.py
# Mantém o Carrinho na sessão do navegador. O carrinho nunca vira tabela no banco:
# só é enviado ao fluxo de pedidos no checkout.

from typing import Any, Dict

from django.http import HttpRequest

from batualam.core.entities import Cart, Product


class CartManager:
    """
    Carrega e persiste a entidade Cart na sessão do Django.
    Os itens guardam nome, preço, descrição e imagem no momento da adição.
    """

    SESSION_KEY = 'batualam_cart'

    def __init__(self, request: HttpRequest):
        self.request = request
        self.cart: Cart = Cart.from_list(self.request.session.get(self.SESSION_KEY))

    # --- Persistência ---

    def save(self):
        self.request.session[self.SESSION_KEY] = self.cart.to_list()
        self.request.session.modified = True

    def clear(self):
        self.cart.clear()
        self.request.session.pop(self.SESSION_KEY, None)
        self.request.session.modified = True

    # --- Manipulação ---

    def add_product(self, product: Product):
        self.cart.add_to_cart(product)
        self.save()

    def increase(self, index: int):
        self.cart.increase_quantity(index)
        self.save()

    def decrease(self, index: int):
        self.cart.decrease_quantity(index)
        self.save()

    # --- Consulta ---

    def get_cart(self) -> Cart:
        return self.cart

    def get_cart_context(self) -> Dict[str, Any]:
        return {
            'cart': self.cart,
            'cart_items': list(enumerate(self.cart.items)),
            'cart_subtotal': self.cart.subtotal(),
            'cart_total': self.cart.total(),
        }
