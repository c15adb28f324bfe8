# batualam/infrastructure/tests.py

import os
import shutil
import tempfile
from datetime import date, datetime
from decimal import Decimal
from io import BytesIO, StringIO
from unittest.mock import patch

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.files.uploadedfile import SimpleUploadedFile
from django.core.management import call_command
from django.db import IntegrityError
from django.test import TestCase, override_settings
from django.utils import timezone
from PIL import Image as PILImage
from reportlab.lib.styles import getSampleStyleSheet

from batualam.catalog.models import Category as CategoryModel, Product as ProductModel
from batualam.core.dependency_injection import (
    get_manage_catalog_use_case,
    get_manage_orders_use_case,
    report_renderer,
)
from batualam.core.entities import (
    Order as OrderEntity,
    OrderItem as OrderItemEntity,
    OrderStatus,
    SalesReport,
    SalesReportLine,
)
from batualam.core.exceptions import CategoryInUseError, DuplicateOrderCodeError, StorageError
from batualam.infrastructure.gateways import DjangoFileStorage, ReportLabSalesReportRenderer
from batualam.infrastructure.repositories import (
    CategoryRepositoryDjango,
    OrderRepositoryDjango,
    ProductRepositoryDjango,
)
from batualam.orders.models import Order as OrderModel, OrderItem as OrderItemModel


def make_png(name='bukti.png'):
    buffer = BytesIO()
    PILImage.new('RGB', (10, 10), color='gray').save(buffer, format='PNG')
    return SimpleUploadedFile(name, buffer.getvalue(), content_type='image/png')


def local_datetime(*args):
    return timezone.make_aware(datetime(*args))


class OrderRepositoryTestCase(TestCase):
    """Testes do repositório de pedidos contra o banco de teste do Django."""

    def setUp(self):
        self.repository = OrderRepositoryDjango()
        self.category = CategoryModel.objects.create(name='Batu Alam')
        self.product = ProductModel.objects.create(
            category=self.category, name='Batu Andesit', price=Decimal('50000'), stock_quantity=10
        )

    def _order(self, code='INV-20240501-AAAAAA', **kwargs):
        defaults = {
            'order_code': code,
            'buyer_name': 'Budi Santoso',
            'buyer_phone': '081234567890',
            'shipping_address': 'Jl. Merdeka No. 10, Bandung',
            'items': [OrderItemEntity(product_id=self.product.id, quantity=2, subtotal=Decimal('100000'))],
        }
        defaults.update(kwargs)
        return OrderEntity(**defaults)

    def test_criar_pedido_com_itens(self):
        """
        Cenário: pedido e itens são gravados juntos.
        """
        # ACT
        created = self.repository.create_order(self._order())

        # ASSERT
        self.assertIsNotNone(created.id)
        self.assertEqual(created.status, OrderStatus.PENDING)
        self.assertEqual(created.total, Decimal('100000'))
        self.assertEqual(created.items[0].product_name, 'Batu Andesit')
        self.assertIsNotNone(created.order_date)

    def test_falha_nos_itens_nao_deixa_pedido_orfao(self):
        """
        Cenário: a inserção dos itens falha; o pedido não pode permanecer no banco.
        """
        with patch.object(OrderItemModel.objects, 'bulk_create', side_effect=IntegrityError('boom')):
            with self.assertRaises(IntegrityError):
                self.repository.create_order(self._order())

        self.assertEqual(OrderModel.objects.count(), 0)

    def test_codigo_duplicado(self):
        self.repository.create_order(self._order())

        with self.assertRaises(DuplicateOrderCodeError):
            self.repository.create_order(self._order())

        self.assertEqual(OrderModel.objects.count(), 1)

    def test_comprovante_e_gravado_apenas_uma_vez(self):
        created = self.repository.create_order(self._order())

        first = self.repository.attach_payment_proof(created.id, 'payment-proofs/a.png', OrderStatus.PROCESSING)
        second = self.repository.attach_payment_proof(created.id, 'payment-proofs/b.png', OrderStatus.PROCESSING)

        self.assertTrue(first)
        self.assertFalse(second)
        stored = self.repository.get_by_id(created.id)
        self.assertEqual(stored.payment_proof, 'payment-proofs/a.png')
        self.assertEqual(stored.status, OrderStatus.PROCESSING)

    def test_filtros_sao_combinados_com_and(self):
        self.repository.create_order(self._order('INV-20240501-AAAAAA', buyer_name='Budi',
                                                 order_date=local_datetime(2024, 5, 1, 10, 0)))
        self.repository.create_order(self._order('INV-20240502-BBBBBB', buyer_name='Budi',
                                                 order_date=local_datetime(2024, 5, 2, 10, 0),
                                                 status=OrderStatus.CANCELLED))
        self.repository.create_order(self._order('INV-20240501-CCCCCC', buyer_name='Sari',
                                                 order_date=local_datetime(2024, 5, 1, 11, 0)))

        by_name = self.repository.list_orders(search='budi')
        by_name_and_status = self.repository.list_orders(search='budi', status=OrderStatus.PENDING)
        by_date = self.repository.list_orders(on_date=date(2024, 5, 1))
        all_filters = self.repository.list_orders(
            search='budi', status=OrderStatus.PENDING, on_date=date(2024, 5, 2)
        )

        self.assertEqual(len(by_name), 2)
        self.assertEqual([o.order_code for o in by_name_and_status], ['INV-20240501-AAAAAA'])
        self.assertEqual(len(by_date), 2)
        self.assertEqual(all_filters, [])

    def test_relatorio_considera_apenas_pedidos_concluidos_no_periodo(self):
        self.repository.create_order(self._order('INV-1', status=OrderStatus.COMPLETED,
                                                 order_date=local_datetime(2024, 5, 10, 9, 0)))
        self.repository.create_order(self._order('INV-2', status=OrderStatus.SHIPPED,
                                                 order_date=local_datetime(2024, 5, 11, 9, 0)))
        self.repository.create_order(self._order('INV-3', status=OrderStatus.COMPLETED,
                                                 order_date=local_datetime(2024, 6, 1, 9, 0)))

        lines = self.repository.list_completed_between(date(2024, 5, 1), date(2024, 5, 31))

        self.assertEqual([line.order_code for line in lines], ['INV-1'])
        self.assertEqual(lines[0].total, Decimal('100000'))

    def test_resumo_de_vendas(self):
        self.repository.create_order(self._order('INV-1'))
        self.repository.create_order(self._order('INV-2'))

        summary = self.repository.sales_summary()

        self.assertEqual(summary.total_orders, 2)
        self.assertEqual(summary.total_revenue, Decimal('200000'))


class ManageOrdersIntegrationTestCase(TestCase):

    def setUp(self):
        self.media_root = tempfile.mkdtemp()
        self.settings_override = override_settings(MEDIA_ROOT=self.media_root)
        self.settings_override.enable()

        category = CategoryModel.objects.create(name='Batu Buatan')
        self.product = ProductModel.objects.create(
            category=category, name='Paving Block', price=Decimal('72000'), stock_quantity=5
        )
        self.repository = OrderRepositoryDjango()
        self.order = self.repository.create_order(OrderEntity(
            order_code='INV-20240501-AAAAAA',
            buyer_name='Sari',
            buyer_phone='0813',
            shipping_address='Jl. Sudirman 1, Jakarta',
            items=[OrderItemEntity(product_id=self.product.id, quantity=1, subtotal=Decimal('70000'))],
        ))

    def tearDown(self):
        self.settings_override.disable()
        shutil.rmtree(self.media_root, ignore_errors=True)

    def test_salvar_no_painel_recalcula_com_preco_atual(self):
        """
        Cenário: o subtotal gravado no checkout é substituído pelo preço atual ao salvar no painel.
        """
        # ARRANGE
        data = {
            'order_code': self.order.order_code,
            'buyer_name': 'Sari',
            'buyer_phone': '0813',
            'shipping_address': 'Jl. Sudirman 1, Jakarta',
            'order_date': self.order.order_date,
            'status': 'pending',
        }

        # ACT
        saved = get_manage_orders_use_case().save_order(
            self.order.id, data, [{'product_id': self.product.id, 'quantity': 2}]
        )

        # ASSERT
        self.assertEqual(saved.total, Decimal('144000'))
        self.assertEqual(OrderItemModel.objects.filter(order_id=self.order.id).count(), 1)

    def test_subtotal_do_checkout_nao_muda_com_o_preco(self):
        ProductModel.objects.filter(pk=self.product.id).update(price=Decimal('99000'))

        stored = self.repository.get_by_id(self.order.id)

        self.assertEqual(stored.items[0].subtotal, Decimal('70000'))

    def test_excluir_pedido_remove_itens_e_comprovante(self):
        storage = DjangoFileStorage()
        path = storage.save('payment-proofs', make_png())
        self.repository.attach_payment_proof(self.order.id, path, OrderStatus.PROCESSING)
        self.assertTrue(os.path.exists(os.path.join(self.media_root, path)))

        get_manage_orders_use_case().delete_order(self.order.id)

        self.assertFalse(OrderModel.objects.exists())
        self.assertFalse(OrderItemModel.objects.exists())
        self.assertFalse(os.path.exists(os.path.join(self.media_root, path)))

    def test_excluir_produto_remove_os_itens_de_pedido(self):
        get_manage_catalog_use_case().delete_product(self.product.id)

        self.assertFalse(OrderItemModel.objects.exists())
        self.assertTrue(OrderModel.objects.filter(pk=self.order.id).exists())

    def test_storage_grava_no_namespace(self):
        path = DjangoFileStorage().save('product-images', make_png('foto.png'))

        self.assertTrue(path.startswith('product-images/'))
        self.assertTrue(path.endswith('.png'))


class ManageCatalogIntegrationTestCase(TestCase):

    def setUp(self):
        self.media_root = tempfile.mkdtemp()
        self.settings_override = override_settings(MEDIA_ROOT=self.media_root)
        self.settings_override.enable()

        self.category = CategoryModel.objects.create(name='Batu Alam')
        self.data = {
            'name': 'Batu Koral Sikat',
            'description': 'Koral sikat putih',
            'price': '65000',
            'stock_quantity': 30,
            'category_id': self.category.id,
        }

    def tearDown(self):
        self.settings_override.disable()
        shutil.rmtree(self.media_root, ignore_errors=True)

    def test_falha_ao_gravar_imagem_nao_cria_produto(self):
        """
        Cenário: o storage recusa a imagem; o produto novo não pode ficar no banco.
        """
        with patch.object(DjangoFileStorage, 'save', side_effect=StorageError()):
            with self.assertRaises(StorageError):
                get_manage_catalog_use_case().save_product(None, self.data, image=make_png('foto.png'))

        self.assertEqual(ProductModel.objects.count(), 0)

    def test_trocar_imagem_remove_arquivo_antigo(self):
        use_case = get_manage_catalog_use_case()
        created = use_case.save_product(None, self.data, image=make_png('foto.png'))
        old_path = created.images[0].path

        updated = use_case.save_product(created.id, self.data, image=make_png('nova.png'))

        self.assertEqual(ProductModel.objects.count(), 1)
        self.assertEqual(len(updated.images), 1)
        self.assertNotEqual(updated.images[0].path, old_path)
        self.assertFalse(os.path.exists(os.path.join(self.media_root, old_path)))
        self.assertTrue(os.path.exists(os.path.join(self.media_root, updated.images[0].path)))


class CatalogRepositoryTestCase(TestCase):

    def setUp(self):
        self.category_repo = CategoryRepositoryDjango()
        self.product_repo = ProductRepositoryDjango()
        self.category = CategoryModel.objects.create(name='Batu Alam')

    def test_categoria_com_produtos_e_protegida(self):
        ProductModel.objects.create(category=self.category, name='Batu Templek', price=Decimal('95000'))

        with self.assertRaises(CategoryInUseError):
            self.category_repo.delete(self.category.id)

        self.assertTrue(CategoryModel.objects.filter(pk=self.category.id).exists())

    def test_contagem_de_produtos_e_nome_em_uso(self):
        ProductModel.objects.create(category=self.category, name='Batu Templek', price=Decimal('95000'))

        categories = self.category_repo.list_all()

        self.assertEqual(categories[0].product_count, 1)
        self.assertTrue(self.category_repo.name_taken('batu alam'))
        self.assertFalse(self.category_repo.name_taken('batu alam', exclude_id=self.category.id))

    def test_busca_por_nome_e_categoria(self):
        other = CategoryModel.objects.create(name='Batu Buatan')
        ProductModel.objects.create(category=self.category, name='Batu Koral', price=Decimal('65000'))
        ProductModel.objects.create(category=other, name='Roster Beton', price=Decimal('18500'))

        self.assertEqual([p.name for p in self.product_repo.search(term='koral')], ['Batu Koral'])
        self.assertEqual([p.name for p in self.product_repo.search(category_id=other.id)], ['Roster Beton'])


class SalesReportRendererTestCase(TestCase):

    def test_relatorio_vazio_gera_pdf_valido(self):
        report = SalesReport(
            start_date=date(2024, 5, 1),
            end_date=date(2024, 5, 31),
            lines=[],
            generated_at=timezone.now(),
        )

        content = ReportLabSalesReportRenderer(store_name='Batu Alam').render(report)

        self.assertTrue(content.startswith(b'%PDF'))

    def test_linhas_identificam_o_pedido_pelo_id(self):
        report = SalesReport(
            start_date=date(2024, 5, 1),
            end_date=date(2024, 5, 31),
            lines=[SalesReportLine(
                order_id=42,
                order_code='INV-20240510-AAAAAA',
                order_date=local_datetime(2024, 5, 10, 9, 0),
                buyer_name='Budi',
                items=[OrderItemEntity(product_id=1, quantity=2, subtotal=Decimal('100000'))],
            )],
            generated_at=timezone.now(),
        )
        renderer = ReportLabSalesReportRenderer(store_name='Batu Alam')

        rows = renderer.build_rows(report, getSampleStyleSheet()['BodyText'])

        self.assertEqual(rows[0][0], 'ID')
        self.assertEqual(rows[1][0], '#42')
        self.assertEqual(rows[1][1], 'INV-20240510-AAAAAA')
        self.assertEqual(rows[1][-1], 'Rp 100.000')
        self.assertTrue(renderer.render(report).startswith(b'%PDF'))

    def test_nome_da_loja_vem_das_configuracoes(self):
        self.assertEqual(report_renderer.store_name, settings.STORE_NAME)


class LoadInitialDataCommandTestCase(TestCase):

    def test_comando_e_idempotente(self):
        out = StringIO()

        call_command('load_initial_data', admin_email='admin@batualam.id', admin_password='rahasia123', stdout=out)
        call_command('load_initial_data', admin_email='admin@batualam.id', admin_password='rahasia123', stdout=out)

        self.assertEqual(
            sorted(CategoryModel.objects.values_list('name', flat=True)), ['Batu Alam', 'Batu Buatan']
        )
        self.assertEqual(ProductModel.objects.count(), 6)
        admin = get_user_model().objects.get(email='admin@batualam.id')
        self.assertTrue(admin.is_staff)
