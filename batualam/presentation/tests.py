# batualam/presentation/tests.py

import os
import shutil
import tempfile
from decimal import Decimal
from io import BytesIO

from django.contrib.auth import get_user_model
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings
from django.urls import reverse
from PIL import Image as PILImage
from rest_framework import status
from rest_framework.test import APIClient

from batualam.catalog.models import Category as CategoryModel, Product as ProductModel
from batualam.orders.models import Order as OrderModel
from batualam.presentation.cart_manager import CartManager


def make_png(name='bukti.png'):
    buffer = BytesIO()
    PILImage.new('RGB', (10, 10), color='white').save(buffer, format='PNG')
    return SimpleUploadedFile(name, buffer.getvalue(), content_type='image/png')


class StoreTestCase(TestCase):
    """Base com um produto cadastrado e MEDIA_ROOT temporário."""

    def setUp(self):
        self.media_root = tempfile.mkdtemp()
        self.settings_override = override_settings(MEDIA_ROOT=self.media_root)
        self.settings_override.enable()

        self.category = CategoryModel.objects.create(name='Batu Alam')
        self.product = ProductModel.objects.create(
            category=self.category,
            name='Batu Andesit',
            description='Andesit bakar 10x20',
            price=Decimal('50000'),
            stock_quantity=20,
        )
        self.checkout_data = {
            'buyer_name': 'Budi Santoso',
            'buyer_phone': '081234567890',
            'shipping_address': 'Jl. Merdeka No. 10, Bandung',
        }

    def tearDown(self):
        self.settings_override.disable()
        shutil.rmtree(self.media_root, ignore_errors=True)


# ====================================================================
# LOJA: CARRINHO, CHECKOUT E PAGAMENTO
# ====================================================================

class StorefrontViewsTestCase(StoreTestCase):

    def test_paginas_do_catalogo(self):
        self.assertEqual(self.client.get(reverse('home')).status_code, 200)

        response = self.client.get(reverse('product_list'), {'search': 'andesit'})
        self.assertEqual(response.status_code, 200)
        self.assertContains(response, 'Batu Andesit')

        response = self.client.get(reverse('product_detail', kwargs={'pk': self.product.id}))
        self.assertContains(response, 'Rp 50.000')

    def test_produto_inexistente_retorna_404(self):
        response = self.client.get(reverse('product_detail', kwargs={'pk': 9999}))
        self.assertEqual(response.status_code, 404)

    def test_fluxo_carrinho_e_checkout(self):
        """
        Cenário: adicionar 2 unidades, finalizar o pedido e ver o código gerado.
        """
        # ARRANGE: adiciona o mesmo produto duas vezes
        add_url = reverse('cart_add', kwargs={'product_id': self.product.id})
        self.client.post(add_url)
        response = self.client.post(add_url)
        self.assertRedirects(response, reverse('cart'))
        self.assertEqual(self.client.session[CartManager.SESSION_KEY][0]['quantity'], 2)

        # ACT
        response = self.client.post(reverse('cart'), self.checkout_data)

        # ASSERT
        self.assertRedirects(response, reverse('order_created'))
        order = OrderModel.objects.get()
        self.assertTrue(order.order_code.startswith('INV-'))
        self.assertEqual(order.total, Decimal('100000'))
        self.assertNotIn(CartManager.SESSION_KEY, self.client.session)

        response = self.client.get(reverse('order_created'))
        self.assertContains(response, order.order_code)

    def test_diminuir_quantidade_remove_item(self):
        self.client.post(reverse('cart_add', kwargs={'product_id': self.product.id}))

        self.client.post(reverse('cart_decrease', kwargs={'index': 0}))

        self.assertEqual(self.client.session[CartManager.SESSION_KEY], [])

    def test_checkout_com_carrinho_vazio_nao_cria_pedido(self):
        response = self.client.post(reverse('cart'), self.checkout_data)

        self.assertEqual(response.status_code, 200)
        self.assertFalse(OrderModel.objects.exists())

    def test_confirmacao_de_pagamento_pela_pagina(self):
        self.client.post(reverse('cart_add', kwargs={'product_id': self.product.id}))
        self.client.post(reverse('cart'), self.checkout_data)
        order = OrderModel.objects.get()

        response = self.client.post(
            reverse('payment'), {'order_code': order.order_code, 'payment_proof': make_png()}
        )

        self.assertRedirects(response, f"{reverse('payment')}?code={order.order_code}")
        order.refresh_from_db()
        self.assertEqual(order.status, 'processing')
        self.assertTrue(order.payment_proof.name.startswith('payment-proofs/'))

        response = self.client.get(reverse('payment'), {'code': order.order_code})
        self.assertContains(response, 'Diproses')


# ====================================================================
# API REST
# ====================================================================

class CheckoutAPITestCase(StoreTestCase):

    def setUp(self):
        super().setUp()
        self.client = APIClient()

    def _checkout(self, price='50000', quantity=2):
        payload = dict(self.checkout_data)
        payload['items'] = [{'id': self.product.id, 'name': 'Batu Andesit', 'price': price, 'quantity': quantity}]
        return self.client.post(reverse('checkout-api'), payload, format='json')

    def test_checkout_cria_pedido_pendente(self):
        response = self._checkout()

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertRegex(response.data['order_code'], r'^INV-\d{8}-[A-Z0-9]{6}$')
        self.assertEqual(response.data['status'], 'pending')
        self.assertEqual(Decimal(response.data['total']), Decimal('100000'))

    def test_preco_enviado_pelo_cliente_e_ignorado(self):
        response = self._checkout(price='1')

        self.assertEqual(Decimal(response.data['total']), Decimal('100000'))

    def test_checkout_sem_itens(self):
        payload = dict(self.checkout_data, items=[])

        response = self.client.post(reverse('checkout-api'), payload, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('items', response.data['errors'])

    def test_confirmacao_de_pagamento_e_duplicidade(self):
        order_code = self._checkout().data['order_code']
        url = reverse('payment-confirmation-api')

        first = self.client.post(url, {'order_code': order_code, 'payment_proof': make_png()}, format='multipart')
        second = self.client.post(url, {'order_code': order_code, 'payment_proof': make_png()}, format='multipart')

        self.assertEqual(first.status_code, status.HTTP_200_OK)
        self.assertEqual(first.data['status'], 'processing')
        self.assertEqual(first.data['status_label'], 'Diproses')
        self.assertEqual(second.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(second.data['detail'], 'This order has already been confirmed or is invalid.')

    def test_confirmacao_com_codigo_desconhecido(self):
        response = self.client.post(
            reverse('payment-confirmation-api'),
            {'order_code': 'INV-00000000-XXXXXX', 'payment_proof': make_png()},
            format='multipart',
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('order_code', response.data['errors'])

    def test_consulta_de_status(self):
        order_code = self._checkout().data['order_code']

        found = self.client.get(reverse('order-status-api', kwargs={'order_code': order_code}))
        missing = self.client.get(reverse('order-status-api', kwargs={'order_code': 'INV-NOPE'}))

        self.assertEqual(found.data['order']['status_label'], 'Pending')
        self.assertEqual(missing.status_code, status.HTTP_200_OK)
        self.assertIsNone(missing.data['order'])

    def test_catalogo_publico_e_escrita_restrita(self):
        listing = self.client.get(reverse('api-product-list'))
        create = self.client.post(reverse('api-category-list'), {'name': 'Batu Hias'}, format='json')

        self.assertEqual(listing.status_code, status.HTTP_200_OK)
        self.assertEqual(listing.data['results'][0]['name'], 'Batu Andesit')
        self.assertIn(create.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))

    def test_excluir_categoria_com_produtos_pela_api(self):
        staff = get_user_model().objects.create_user(email='staff@batualam.id', password='x', is_staff=True)
        self.client.force_authenticate(staff)

        response = self.client.delete(reverse('api-category-detail', kwargs={'pk': self.category.id}))

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertTrue(CategoryModel.objects.filter(pk=self.category.id).exists())


# ====================================================================
# PAINEL (BACK-OFFICE)
# ====================================================================

class BackofficeViewsTestCase(StoreTestCase):

    def setUp(self):
        super().setUp()
        User = get_user_model()
        self.staff = User.objects.create_user(email='admin@batualam.id', password='rahasia', is_staff=True)
        self.customer = User.objects.create_user(email='pembeli@mail.id', password='rahasia')

    def test_acesso_exige_login_de_equipe(self):
        url = reverse('backoffice_dashboard')

        anonymous = self.client.get(url)
        self.client.force_login(self.customer)
        customer = self.client.get(url)
        self.client.force_login(self.staff)
        staff = self.client.get(url)

        self.assertEqual(anonymous.status_code, 302)
        self.assertIn(reverse('login'), anonymous['Location'])
        self.assertEqual(customer.status_code, 403)
        self.assertEqual(staff.status_code, 200)

    def test_download_do_relatorio_em_pdf(self):
        self.client.force_login(self.staff)

        response = self.client.post(
            reverse('backoffice_report'), {'start_date': '2024-05-01', 'end_date': '2024-05-31'}
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response['Content-Type'], 'application/pdf')
        self.assertIn('sales-report-2024-05-01-to-2024-05-31.pdf', response['Content-Disposition'])
        self.assertTrue(response.content.startswith(b'%PDF'))

    def test_relatorio_com_periodo_invertido(self):
        self.client.force_login(self.staff)

        response = self.client.post(
            reverse('backoffice_report'), {'start_date': '2024-05-31', 'end_date': '2024-05-01'}
        )

        self.assertEqual(response.status_code, 200)
        self.assertIn('end_date', response.context['form'].errors)

    def test_excluir_categoria_com_produtos_e_bloqueado(self):
        self.client.force_login(self.staff)

        response = self.client.post(
            reverse('backoffice_category_delete', kwargs={'pk': self.category.id}), follow=True
        )

        self.assertTrue(CategoryModel.objects.filter(pk=self.category.id).exists())
        self.assertContains(response, 'Category cannot be deleted because it has related products.')

    def test_criar_pedido_pelo_painel(self):
        self.client.force_login(self.staff)
        data = {
            'order_code': 'ORD-PANEL001',
            'buyer_name': 'Sari',
            'buyer_phone': '0813',
            'shipping_address': 'Jl. Sudirman 1, Jakarta',
            'order_date': '2024-05-01T10:00',
            'status': 'pending',
            'form-TOTAL_FORMS': '1',
            'form-INITIAL_FORMS': '0',
            'form-MIN_NUM_FORMS': '1',
            'form-MAX_NUM_FORMS': '1000',
            'form-0-product': str(self.product.id),
            'form-0-quantity': '3',
        }

        response = self.client.post(reverse('backoffice_order_create'), data)

        self.assertRedirects(response, reverse('backoffice_order_list'))
        order = OrderModel.objects.get(order_code='ORD-PANEL001')
        self.assertEqual(order.total, Decimal('150000'))

    def test_lista_de_pedidos_com_filtros(self):
        self.client.force_login(self.staff)

        response = self.client.get(reverse('backoffice_order_list'), {'search': 'x', 'status': 'pending'})

        self.assertEqual(response.status_code, 200)
        self.assertContains(response, 'No orders found.')


# ====================================================================
# ADMIN DO DJANGO
# ====================================================================

class DjangoAdminTestCase(StoreTestCase):

    def setUp(self):
        super().setUp()
        self.superuser = get_user_model().objects.create_superuser(email='root@batualam.id', password='rahasia')
        self.client.force_login(self.superuser)
        self.order = OrderModel.objects.create(
            order_code='INV-20240501-ADMIN1',
            buyer_name='Sari',
            buyer_phone='0813',
            shipping_address='Jl. Sudirman 1, Jakarta',
            status='processing',
            payment_proof=make_png(),
        )
        self.order.items.create(product=self.product, quantity=1, subtotal=Decimal('50000'))

    def test_excluir_pedido_no_admin_remove_comprovante(self):
        """
        Cenário: exclusão pelo /admin/ também apaga o arquivo do comprovante.
        """
        # ARRANGE
        proof_path = self.order.payment_proof.path
        self.assertTrue(os.path.exists(proof_path))

        # ACT
        response = self.client.post(
            reverse('admin:orders_order_delete', args=[self.order.pk]), {'post': 'yes'}
        )

        # ASSERT
        self.assertEqual(response.status_code, 302)
        self.assertFalse(OrderModel.objects.filter(pk=self.order.pk).exists())
        self.assertFalse(os.path.exists(proof_path))

    def test_acao_de_exclusao_em_massa_remove_comprovante(self):
        proof_path = self.order.payment_proof.path

        self.client.post(reverse('admin:orders_order_changelist'), {
            'action': 'delete_selected',
            'post': 'yes',
            '_selected_action': [str(self.order.pk)],
        })

        self.assertFalse(OrderModel.objects.exists())
        self.assertFalse(os.path.exists(proof_path))

    def test_status_e_itens_sao_somente_leitura(self):
        response = self.client.get(reverse('admin:orders_order_change', args=[self.order.pk]))

        self.assertEqual(response.status_code, 200)
        form_fields = response.context['adminform'].form.fields
        self.assertNotIn('status', form_fields)
        self.assertNotIn('payment_proof', form_fields)
        inline_fields = response.context['inline_admin_formsets'][0].formset.form.base_fields
        self.assertNotIn('subtotal', inline_fields)
        self.assertNotIn('quantity', inline_fields)
