# batualam/core/tests.py

import unittest
from datetime import date, datetime
from decimal import Decimal
from unittest.mock import Mock

from batualam.core.entities import (
    Cart, CartItem, Category, Order, OrderItem, OrderStatus, Product, SalesReport, format_rupiah
)
from batualam.core.exceptions import (
    CategoryInUseError,
    DuplicateOrderCodeError,
    EmptyCartError,
    InvalidDataError,
    OrderCodeGenerationError,
    OrderCodeTakenError,
    PaymentAlreadyConfirmedError,
    StorageError,
)
from batualam.core.use_cases import (
    CheckOrderStatusUseCase,
    ConfirmPaymentUseCase,
    CreateOrderUseCase,
    GenerateSalesReportUseCase,
    ManageCatalogAdminUseCase,
    ManageOrdersAdminUseCase,
    generate_order_code,
)


def make_upload(name='bukti.png', content_type='image/png', size=1024):
    """Simula um arquivo enviado (apenas os atributos usados na validação)."""
    upload = Mock()
    upload.name = name
    upload.content_type = content_type
    upload.size = size
    return upload


# ====================================================================
# ENTIDADES
# ====================================================================

class TestCart(unittest.TestCase):

    def setUp(self):
        self.product = Product(id=1, name='Batu Andesit', price=Decimal('50000'), description='Andesit bakar')
        self.other = Product(id=2, name='Batu Templek', price=Decimal('20000'))

    def test_adicionar_mesmo_produto_incrementa_quantidade(self):
        """
        Cenário: adicionar o mesmo produto duas vezes não cria uma segunda linha.
        """
        # ARRANGE
        cart = Cart()

        # ACT
        cart.add_to_cart(self.product)
        cart.add_to_cart(self.product)

        # ASSERT
        self.assertEqual(len(cart.items), 1)
        self.assertEqual(cart.items[0].quantity, 2)
        self.assertEqual(cart.subtotal(), Decimal('100000'))
        self.assertEqual(cart.total(), cart.subtotal())

    def test_diminuir_ate_zero_remove_e_compacta_a_lista(self):
        cart = Cart()
        cart.add_to_cart(self.product)
        cart.add_to_cart(self.other)

        cart.decrease_quantity(0)

        self.assertEqual(len(cart.items), 1)
        self.assertEqual(cart.items[0].product_id, 2)

    def test_indice_invalido_e_ignorado(self):
        cart = Cart()
        cart.add_to_cart(self.product)

        cart.increase_quantity(5)
        cart.decrease_quantity(-1)

        self.assertEqual(cart.items[0].quantity, 1)

    def test_item_count_soma_quantidades(self):
        cart = Cart()
        cart.add_to_cart(self.product)
        cart.add_to_cart(self.product)
        cart.add_to_cart(self.other)

        self.assertEqual(cart.item_count, 3)

    def test_conversao_para_sessao_preserva_os_itens(self):
        """
        Cenário: o carrinho é guardado na sessão como lista de dicts.
        """
        cart = Cart()
        cart.add_to_cart(self.product)

        raw = cart.to_list()
        restored = Cart.from_list(raw)

        self.assertEqual(raw[0]['id'], 1)
        self.assertEqual(raw[0]['price'], '50000')
        self.assertEqual(restored.items[0].price, Decimal('50000'))
        self.assertEqual(restored.items[0].name, 'Batu Andesit')

    def test_from_list_ignora_itens_com_quantidade_zero(self):
        cart = Cart.from_list([{'id': 1, 'name': 'X', 'price': '10', 'quantity': 0}])
        self.assertTrue(cart.is_empty())


class TestOrderStatus(unittest.TestCase):

    def test_parse_aceita_ingles_e_indonesio_em_qualquer_caixa(self):
        self.assertEqual(OrderStatus.parse('Processing'), OrderStatus.PROCESSING)
        self.assertEqual(OrderStatus.parse('DIPROSES'), OrderStatus.PROCESSING)
        self.assertEqual(OrderStatus.parse('selesai'), OrderStatus.COMPLETED)

    def test_parse_valor_desconhecido_levanta_value_error(self):
        with self.assertRaises(ValueError):
            OrderStatus.parse('paid')

    def test_pending_para_processing_exige_comprovante(self):
        self.assertFalse(OrderStatus.PENDING.can_transition_to(OrderStatus.PROCESSING))
        self.assertTrue(OrderStatus.PENDING.can_transition_to(OrderStatus.PROCESSING, has_payment_proof=True))

    def test_cancelamento_permitido_de_qualquer_status_ativo(self):
        for status in (OrderStatus.PENDING, OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.COMPLETED):
            self.assertTrue(status.can_transition_to(OrderStatus.CANCELLED))

    def test_nao_permite_pular_ou_voltar_etapas(self):
        self.assertFalse(OrderStatus.PENDING.can_transition_to(OrderStatus.SHIPPED, has_payment_proof=True))
        self.assertFalse(OrderStatus.SHIPPED.can_transition_to(OrderStatus.PROCESSING))
        self.assertFalse(OrderStatus.CANCELLED.can_transition_to(OrderStatus.PENDING))

    def test_rotulo_do_comprador_em_indonesio(self):
        self.assertEqual(OrderStatus.SHIPPED.buyer_label, 'Dikirim')
        self.assertEqual(OrderStatus.SHIPPED.label, 'Shipped')


class TestFormatRupiah(unittest.TestCase):

    def test_formata_com_ponto_como_separador_de_milhar(self):
        self.assertEqual(format_rupiah(Decimal('1250000')), 'Rp 1.250.000')
        self.assertEqual(format_rupiah(None), 'Rp 0')


# ====================================================================
# CRIAÇÃO DE PEDIDO (CHECKOUT)
# ====================================================================

class TestCreateOrder(unittest.TestCase):

    def setUp(self):
        self.order_repo_mock = Mock()
        self.product_repo_mock = Mock()
        # create_order devolve o próprio pedido recebido
        self.order_repo_mock.create_order.side_effect = lambda order: order

        self.product = Product(id=7, name='Batu Palimanan', price=Decimal('50000'))
        self.product_repo_mock.get_many.return_value = {7: self.product}

        self.use_case = CreateOrderUseCase(
            order_repo=self.order_repo_mock,
            product_repo=self.product_repo_mock,
        )

    def _cart(self, price='50000', quantity=2):
        return Cart(items=[CartItem(product_id=7, name='Batu Palimanan', price=Decimal(price), quantity=quantity)])

    def test_criar_pedido_com_sucesso(self):
        """
        Cenário: carrinho com 2 unidades de um produto de Rp 50.000.
        """
        # ARRANGE
        cart = self._cart()

        # ACT
        order = self.use_case.execute(
            cart=cart,
            buyer_name='Budi Santoso',
            buyer_phone='081234567890',
            shipping_address='Jl. Merdeka No. 10, Bandung',
        )

        # ASSERT
        # 1. O código segue o formato INV-AAAAMMDD-XXXXXX
        self.assertRegex(order.order_code, r'^INV-\d{8}-[A-Z0-9]{6}$')
        # 2. O subtotal é preço x quantidade
        self.assertEqual(len(order.items), 1)
        self.assertEqual(order.items[0].subtotal, Decimal('100000'))
        self.assertEqual(order.status, OrderStatus.PENDING)
        # 3. O carrinho foi esvaziado
        self.assertTrue(cart.is_empty())
        self.order_repo_mock.create_order.assert_called_once()

    def test_subtotal_usa_preco_atual_e_nao_o_do_carrinho(self):
        cart = self._cart(price='1')

        order = self.use_case.execute(
            cart=cart,
            buyer_name='Budi',
            buyer_phone='0812',
            shipping_address='Jl. Merdeka No. 10, Bandung',
        )

        self.assertEqual(order.items[0].subtotal, Decimal('100000'))

    def test_dados_do_comprador_invalidos(self):
        cart = self._cart()

        with self.assertRaises(InvalidDataError) as ctx:
            self.use_case.execute(cart=cart, buyer_name='', buyer_phone='0812', shipping_address='curto')

        self.assertIn('buyer_name', ctx.exception.errors)
        self.assertIn('shipping_address', ctx.exception.errors)
        self.order_repo_mock.create_order.assert_not_called()
        self.assertFalse(cart.is_empty())

    def test_carrinho_vazio_falha(self):
        with self.assertRaises(EmptyCartError):
            self.use_case.execute(
                cart=Cart(), buyer_name='Budi', buyer_phone='0812',
                shipping_address='Jl. Merdeka No. 10, Bandung',
            )
        self.order_repo_mock.create_order.assert_not_called()

    def test_produto_removido_do_catalogo(self):
        self.product_repo_mock.get_many.return_value = {}

        with self.assertRaises(InvalidDataError) as ctx:
            self.use_case.execute(
                cart=self._cart(), buyer_name='Budi', buyer_phone='0812',
                shipping_address='Jl. Merdeka No. 10, Bandung',
            )
        self.assertIn('items', ctx.exception.errors)

    def test_colisao_de_codigo_gera_novo_codigo(self):
        """
        Cenário: o primeiro código já existe; o segundo é aceito.
        """
        # ARRANGE
        codes = iter(['INV-20240101-AAAAAA', 'INV-20240101-BBBBBB'])
        self.use_case.code_generator = lambda: next(codes)

        def create_order(order):
            if order.order_code == 'INV-20240101-AAAAAA':
                raise DuplicateOrderCodeError(order.order_code)
            return order
        self.order_repo_mock.create_order.side_effect = create_order

        # ACT
        order = self.use_case.execute(
            cart=self._cart(), buyer_name='Budi', buyer_phone='0812',
            shipping_address='Jl. Merdeka No. 10, Bandung',
        )

        # ASSERT
        self.assertEqual(order.order_code, 'INV-20240101-BBBBBB')
        self.assertEqual(self.order_repo_mock.create_order.call_count, 2)

    def test_colisoes_esgotam_as_tentativas(self):
        self.order_repo_mock.create_order.side_effect = DuplicateOrderCodeError('X')
        cart = self._cart()

        with self.assertRaises(OrderCodeGenerationError):
            self.use_case.execute(
                cart=cart, buyer_name='Budi', buyer_phone='0812',
                shipping_address='Jl. Merdeka No. 10, Bandung',
            )
        self.assertEqual(self.order_repo_mock.create_order.call_count, 5)
        self.assertFalse(cart.is_empty())

    def test_generate_order_code_usa_a_data(self):
        code = generate_order_code(date(2024, 3, 5))
        self.assertTrue(code.startswith('INV-20240305-'))


# ====================================================================
# CONFIRMAÇÃO DE PAGAMENTO E CONSULTA DE STATUS
# ====================================================================

class TestConfirmPayment(unittest.TestCase):

    def setUp(self):
        self.order_repo_mock = Mock()
        self.storage_mock = Mock()
        self.storage_mock.save.return_value = 'payment-proofs/abc.png'

        self.pending_order = Order(
            id=1, order_code='INV-20240101-AAAAAA', buyer_name='Budi', buyer_phone='0812',
            shipping_address='Jl. Merdeka No. 10', status=OrderStatus.PENDING,
        )
        self.order_repo_mock.get_by_code.return_value = self.pending_order
        self.order_repo_mock.attach_payment_proof.return_value = True

        self.use_case = ConfirmPaymentUseCase(order_repo=self.order_repo_mock, storage=self.storage_mock)

    def test_confirmar_pagamento_com_sucesso(self):
        # ARRANGE
        upload = make_upload()

        # ACT
        self.use_case.execute('INV-20240101-AAAAAA', upload)

        # ASSERT
        self.storage_mock.save.assert_called_once_with('payment-proofs', upload)
        self.order_repo_mock.attach_payment_proof.assert_called_once_with(
            1, 'payment-proofs/abc.png', OrderStatus.PROCESSING
        )
        self.storage_mock.delete.assert_not_called()

    def test_comprovante_ja_enviado_falha_sem_gravar_arquivo(self):
        self.pending_order.payment_proof = 'payment-proofs/old.png'

        with self.assertRaises(PaymentAlreadyConfirmedError):
            self.use_case.execute('INV-20240101-AAAAAA', make_upload())

        self.storage_mock.save.assert_not_called()

    def test_pedido_cancelado_nao_aceita_comprovante(self):
        self.pending_order.status = OrderStatus.CANCELLED

        with self.assertRaises(PaymentAlreadyConfirmedError):
            self.use_case.execute('INV-20240101-AAAAAA', make_upload())

    def test_atualizacao_concorrente_remove_o_arquivo_gravado(self):
        """
        Cenário: outro envio foi gravado entre a leitura e a atualização condicional.
        """
        self.order_repo_mock.attach_payment_proof.return_value = False

        with self.assertRaises(PaymentAlreadyConfirmedError):
            self.use_case.execute('INV-20240101-AAAAAA', make_upload())

        self.storage_mock.delete.assert_called_once_with('payment-proofs/abc.png')

    def test_falha_no_banco_remove_o_arquivo_gravado(self):
        self.order_repo_mock.attach_payment_proof.side_effect = RuntimeError('db down')

        with self.assertRaises(RuntimeError):
            self.use_case.execute('INV-20240101-AAAAAA', make_upload())

        self.storage_mock.delete.assert_called_once_with('payment-proofs/abc.png')

    def test_codigo_inexistente(self):
        self.order_repo_mock.get_by_code.return_value = None

        with self.assertRaises(InvalidDataError) as ctx:
            self.use_case.execute('INV-00000000-XXXXXX', make_upload())

        self.assertIn('order_code', ctx.exception.errors)

    def test_arquivo_grande_demais_ou_nao_imagem(self):
        upload = make_upload(name='bukti.pdf', content_type='application/pdf', size=3 * 1024 * 1024)

        with self.assertRaises(InvalidDataError) as ctx:
            self.use_case.execute('INV-20240101-AAAAAA', upload)

        self.assertEqual(len(ctx.exception.errors['payment_proof']), 2)
        self.order_repo_mock.get_by_code.assert_not_called()
        self.storage_mock.save.assert_not_called()


class TestCheckOrderStatus(unittest.TestCase):

    def test_codigo_em_branco_retorna_none(self):
        order_repo_mock = Mock()
        use_case = CheckOrderStatusUseCase(order_repo_mock)

        self.assertIsNone(use_case.execute('   '))
        order_repo_mock.get_by_code.assert_not_called()

    def test_codigo_desconhecido_retorna_none(self):
        order_repo_mock = Mock()
        order_repo_mock.get_by_code.return_value = None

        self.assertIsNone(CheckOrderStatusUseCase(order_repo_mock).execute('INV-X'))


# ====================================================================
# PAINEL: PEDIDOS, RELATÓRIO E CATÁLOGO
# ====================================================================

class TestManageOrdersAdmin(unittest.TestCase):

    def setUp(self):
        self.order_repo_mock = Mock()
        self.product_repo_mock = Mock()
        self.storage_mock = Mock()
        self.order_repo_mock.code_taken.return_value = False
        self.order_repo_mock.save_with_items.side_effect = lambda order: order
        self.product_repo_mock.get_many.return_value = {
            3: Product(id=3, name='Paving Block', price=Decimal('72000')),
        }
        self.use_case = ManageOrdersAdminUseCase(
            order_repo=self.order_repo_mock,
            product_repo=self.product_repo_mock,
            storage=self.storage_mock,
        )
        self.data = {
            'order_code': 'ORD-TEST0001',
            'buyer_name': 'Sari',
            'buyer_phone': '0813',
            'shipping_address': 'Jl. Sudirman 1',
            'order_date': datetime(2024, 5, 1, 10, 0),
            'status': 'pending',
        }

    def test_salvar_recalcula_subtotal_com_preco_atual(self):
        order = self.use_case.save_order(None, self.data, [{'product_id': 3, 'quantity': 2}])

        self.assertEqual(order.items[0].subtotal, Decimal('144000'))
        self.order_repo_mock.save_with_items.assert_called_once()

    def test_pending_para_processing_sem_comprovante_e_rejeitado(self):
        self.data['status'] = 'processing'

        with self.assertRaises(InvalidDataError) as ctx:
            self.use_case.save_order(None, self.data, [{'product_id': 3, 'quantity': 1}])

        self.assertIn('status', ctx.exception.errors)
        self.order_repo_mock.save_with_items.assert_not_called()

    def test_comprovante_enviado_pelo_painel_nao_confirma_pagamento(self):
        """
        Cenário: a equipe anexa um comprovante a um pedido pendente e pede 'processing'.
        Só a confirmação de pagamento do comprador tira o pedido de 'pending'.
        """
        # ARRANGE
        self.order_repo_mock.get_by_id.return_value = Order(
            id=5, order_code='ORD-TEST0001', buyer_name='Sari', buyer_phone='0813',
            shipping_address='Jl. Sudirman 1', status=OrderStatus.PENDING,
        )
        self.data['status'] = 'processing'

        # ACT e ASSERT
        with self.assertRaises(InvalidDataError) as ctx:
            self.use_case.save_order(5, self.data, [{'product_id': 3, 'quantity': 1}],
                                     payment_proof=make_upload())

        self.assertIn('status', ctx.exception.errors)
        self.storage_mock.save.assert_not_called()
        self.order_repo_mock.save_with_items.assert_not_called()

    def test_pedido_confirmado_pode_ser_enviado(self):
        self.order_repo_mock.get_by_id.return_value = Order(
            id=5, order_code='ORD-TEST0001', buyer_name='Sari', buyer_phone='0813',
            shipping_address='Jl. Sudirman 1', status=OrderStatus.PROCESSING,
            payment_proof='payment-proofs/p.png',
        )
        self.data['status'] = 'shipped'

        order = self.use_case.save_order(5, self.data, [{'product_id': 3, 'quantity': 1}])

        self.assertEqual(order.status, OrderStatus.SHIPPED)

    def test_codigo_em_uso_por_outro_pedido(self):
        self.order_repo_mock.code_taken.return_value = True

        with self.assertRaises(OrderCodeTakenError):
            self.use_case.save_order(None, self.data, [{'product_id': 3, 'quantity': 1}])

        self.storage_mock.save.assert_not_called()

    def test_pedido_sem_itens(self):
        with self.assertRaises(InvalidDataError) as ctx:
            self.use_case.save_order(None, self.data, [])
        self.assertIn('items', ctx.exception.errors)

    def test_filtro_de_status_invalido(self):
        with self.assertRaises(InvalidDataError):
            self.use_case.list_orders(status='paid')

    def test_excluir_pedido_remove_o_comprovante(self):
        self.order_repo_mock.delete.return_value = Order(
            id=9, order_code='ORD-1', buyer_name='A', buyer_phone='1', shipping_address='x',
            payment_proof='payment-proofs/p.png',
        )

        self.use_case.delete_order(9)

        self.storage_mock.delete.assert_called_once_with('payment-proofs/p.png')


class TestGenerateSalesReport(unittest.TestCase):

    def setUp(self):
        self.order_repo_mock = Mock()
        self.renderer_mock = Mock()
        self.renderer_mock.render.return_value = b'%PDF-1.4'
        self.use_case = GenerateSalesReportUseCase(
            order_repo=self.order_repo_mock,
            renderer=self.renderer_mock,
            clock=lambda: datetime(2024, 6, 1, 12, 0),
        )

    def test_periodo_sem_vendas_gera_relatorio_vazio(self):
        self.order_repo_mock.list_completed_between.return_value = []

        report = self.use_case.build(date(2024, 5, 1), date(2024, 5, 31))

        self.assertTrue(report.is_empty())
        self.assertEqual(report.total_revenue, Decimal('0'))

    def test_render_retorna_nome_do_arquivo_e_bytes(self):
        self.order_repo_mock.list_completed_between.return_value = []

        filename, content = self.use_case.render(date(2024, 5, 1), date(2024, 5, 31))

        self.assertEqual(filename, 'sales-report-2024-05-01-to-2024-05-31.pdf')
        self.assertEqual(content, b'%PDF-1.4')
        self.assertIsInstance(self.renderer_mock.render.call_args[0][0], SalesReport)

    def test_data_final_antes_da_inicial(self):
        with self.assertRaises(InvalidDataError) as ctx:
            self.use_case.build(date(2024, 5, 31), date(2024, 5, 1))

        self.assertIn('end_date', ctx.exception.errors)
        self.order_repo_mock.list_completed_between.assert_not_called()


class TestManageCatalogAdmin(unittest.TestCase):

    def setUp(self):
        self.product_repo_mock = Mock()
        self.category_repo_mock = Mock()
        self.storage_mock = Mock()
        self.use_case = ManageCatalogAdminUseCase(
            product_repo=self.product_repo_mock,
            category_repo=self.category_repo_mock,
            storage=self.storage_mock,
        )

    def test_categoria_com_produtos_nao_pode_ser_excluida(self):
        # ARRANGE
        self.category_repo_mock.get_by_id.return_value = Category(id=1, name='Batu Alam')
        self.category_repo_mock.count_products.return_value = 3

        # ACT e ASSERT
        with self.assertRaises(CategoryInUseError) as ctx:
            self.use_case.delete_category(1)

        self.assertEqual(
            ctx.exception.message, "Category cannot be deleted because it has related products."
        )
        self.category_repo_mock.delete.assert_not_called()

    def test_categoria_vazia_e_excluida(self):
        self.category_repo_mock.get_by_id.return_value = Category(id=2, name='Batu Buatan')
        self.category_repo_mock.count_products.return_value = 0

        self.use_case.delete_category(2)

        self.category_repo_mock.delete.assert_called_once_with(2)

    def test_nome_de_categoria_curto(self):
        with self.assertRaises(InvalidDataError):
            self.use_case.save_category(None, 'ab')

    def test_produto_com_preco_negativo(self):
        self.category_repo_mock.get_by_id.return_value = Category(id=1, name='Batu Alam')

        with self.assertRaises(InvalidDataError) as ctx:
            self.use_case.save_product(None, {
                'name': 'Batu Koral', 'price': '-1', 'stock_quantity': 1, 'category_id': 1,
            })

        self.assertIn('price', ctx.exception.errors)
        self.product_repo_mock.save.assert_not_called()

    def _product_data(self):
        self.category_repo_mock.get_by_id.return_value = Category(id=1, name='Batu Alam')
        return {'name': 'Batu Koral', 'price': '65000', 'stock_quantity': 10, 'category_id': 1}

    def test_falha_no_storage_nao_grava_produto(self):
        """
        Cenário: a imagem não pôde ser gravada; nenhum produto deve ser salvo.
        """
        # ARRANGE
        self.storage_mock.save.side_effect = StorageError()

        # ACT e ASSERT
        with self.assertRaises(StorageError):
            self.use_case.save_product(None, self._product_data(), image=make_upload('foto.png'))

        self.product_repo_mock.save.assert_not_called()
        self.product_repo_mock.save_with_image.assert_not_called()

    def test_imagem_e_gravada_antes_do_produto(self):
        # ARRANGE
        self.storage_mock.save.return_value = 'product-images/nova.png'
        saved = Product(id=7, name='Batu Koral', price=Decimal('65000'), category_id=1)
        self.product_repo_mock.save_with_image.return_value = (saved, ['product-images/velha.png'])

        # ACT
        result = self.use_case.save_product(None, self._product_data(), image=make_upload('foto.png'))

        # ASSERT
        self.assertEqual(result, saved)
        self.storage_mock.save.assert_called_once()
        product, path = self.product_repo_mock.save_with_image.call_args[0]
        self.assertIsNone(product.id)
        self.assertEqual(path, 'product-images/nova.png')
        self.storage_mock.delete.assert_called_once_with('product-images/velha.png')

    def test_falha_no_banco_remove_imagem_gravada(self):
        self.storage_mock.save.return_value = 'product-images/nova.png'
        self.product_repo_mock.save_with_image.side_effect = RuntimeError('db down')

        with self.assertRaises(RuntimeError):
            self.use_case.save_product(None, self._product_data(), image=make_upload('foto.png'))

        self.storage_mock.delete.assert_called_once_with('product-images/nova.png')


class TestOrderEntity(unittest.TestCase):

    def test_total_e_item_sem_produto(self):
        order = Order(
            order_code='INV-1', buyer_name='A', buyer_phone='1', shipping_address='x',
            items=[
                OrderItem(product_id=None, quantity=1, subtotal=Decimal('1000')),
                OrderItem(product_id=2, quantity=2, subtotal=Decimal('4000'), product_name='Roster'),
            ],
        )

        self.assertEqual(order.total, Decimal('5000'))
        self.assertEqual(order.formatted_total, 'Rp 5.000')
        self.assertEqual(order.items[0].display_name, 'Deleted product')


if __name__ == '__main__':
    unittest.main()
