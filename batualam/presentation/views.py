# batualam/presentation/views.py
"""
Views da loja (vitrine, carrinho, checkout e confirmação de pagamento) e a API REST.
"""
from django.contrib import messages
from django.core.paginator import Paginator
from django.http import Http404
from django.shortcuts import redirect, render
from django.utils.http import url_has_allowed_host_and_scheme
from django.views import View
from django.views.decorators.http import require_POST
from rest_framework import permissions, status, viewsets
from rest_framework.response import Response
from rest_framework.views import APIView

from batualam.catalog.models import Category as CategoryModel, Product as ProductModel
from batualam.core.dependency_injection import (
    get_browse_catalog_use_case,
    get_check_order_status_use_case,
    get_confirm_payment_use_case,
    get_create_order_use_case,
    get_manage_catalog_use_case,
    get_submit_review_use_case,
)
from batualam.core.entities import Cart
from batualam.core.exceptions import (
    BaseCoreError,
    IntegrityViolationError,
    InvalidDataError,
    ItemNotFoundError,
    ProductNotFoundError,
    StorageError,
)
from .cart_manager import CartManager
from .forms import (
    CheckoutForm,
    OrderStatusForm,
    PaymentConfirmationForm,
    ReviewForm,
    apply_core_errors,
)
from .serializers import (
    CategorySerializer,
    CheckoutSerializer,
    OrderSerializer,
    PaymentConfirmationSerializer,
    ProductSerializer,
)


# ====================================================================
# 1. CATÁLOGO (LOJA)
# ====================================================================

class HomeView(View):
    """Página inicial: mais vendidos e o produto mais recente em promoção."""
    template_name = 'store/home.html'

    def get(self, request):
        catalog = get_browse_catalog_use_case()
        context = {
            'featured_products': catalog.featured_products(limit=3),
            'promotion': catalog.promotion(),
            'categories': catalog.list_categories(),
        }
        return render(request, self.template_name, context)


class ProductListView(View):
    template_name = 'store/product_list.html'
    paginate_by = 10

    def get(self, request):
        catalog = get_browse_catalog_use_case()
        search = request.GET.get('search', '').strip()
        try:
            category_id = int(request.GET.get('category') or 0) or None
        except ValueError:
            category_id = None

        products = catalog.list_products(search=search, category_id=category_id)
        page_obj = Paginator(products, self.paginate_by).get_page(request.GET.get('page'))

        context = {
            'page_obj': page_obj,
            'products': page_obj.object_list,
            'categories': catalog.list_categories(),
            'search': search,
            'selected_category': category_id,
        }
        return render(request, self.template_name, context)


class ProductDetailView(View):
    """Detalhe do produto com imagens, avaliações e produtos relacionados."""
    template_name = 'store/product_detail.html'

    def _context(self, request, product_id, review_form=None):
        catalog = get_browse_catalog_use_case()
        try:
            product = catalog.product_detail(product_id)
        except ProductNotFoundError:
            raise Http404("Product not found.")
        reviews = catalog.reviews(product.id)
        average = sum(review.rating for review in reviews) / len(reviews) if reviews else None
        return {
            'product': product,
            'related_products': catalog.related_products(product, limit=3),
            'reviews': reviews,
            'average_rating': average,
            'review_form': review_form or ReviewForm(),
        }

    def get(self, request, pk):
        return render(request, self.template_name, self._context(request, pk))

    def post(self, request, pk):
        if not request.user.is_authenticated:
            messages.error(request, "Please log in to review this product.")
            return redirect('product_detail', pk=pk)

        form = ReviewForm(request.POST)
        if form.is_valid():
            try:
                get_submit_review_use_case().execute(
                    product_id=pk,
                    customer_id=request.user.id,
                    rating=form.cleaned_data['rating'],
                    comment=form.cleaned_data['comment'],
                )
            except ProductNotFoundError:
                raise Http404("Product not found.")
            except InvalidDataError as e:
                apply_core_errors(form, e.errors)
            else:
                messages.success(request, "Thank you for your review!")
                return redirect('product_detail', pk=pk)
        return render(request, self.template_name, self._context(request, pk, form))


# ====================================================================
# 2. CARRINHO E CHECKOUT
# ====================================================================

@require_POST
def add_to_cart(request, product_id):
    try:
        product = get_browse_catalog_use_case().product_detail(product_id)
    except ProductNotFoundError:
        raise Http404("Product not found.")
    CartManager(request).add_product(product)
    messages.success(request, f'"{product.name}" was added to your cart.')
    next_url = request.POST.get('next')
    if next_url and url_has_allowed_host_and_scheme(next_url, allowed_hosts={request.get_host()}):
        return redirect(next_url)
    return redirect('cart')


@require_POST
def increase_quantity(request, index):
    CartManager(request).increase(index)
    return redirect('cart')


@require_POST
def decrease_quantity(request, index):
    CartManager(request).decrease(index)
    return redirect('cart')


@require_POST
def clear_cart(request):
    CartManager(request).clear()
    messages.info(request, "Your cart is now empty.")
    return redirect('cart')


class CartView(View):
    """Carrinho + formulário de entrega. O POST finaliza o pedido."""
    template_name = 'store/cart.html'

    def get(self, request):
        cart_manager = CartManager(request)
        context = cart_manager.get_cart_context()
        context['form'] = CheckoutForm()
        return render(request, self.template_name, context)

    def post(self, request):
        cart_manager = CartManager(request)
        form = CheckoutForm(request.POST)

        if form.is_valid():
            try:
                order = get_create_order_use_case().execute(
                    cart=cart_manager.get_cart(),
                    buyer_name=form.cleaned_data['buyer_name'],
                    buyer_phone=form.cleaned_data['buyer_phone'],
                    shipping_address=form.cleaned_data['shipping_address'],
                    customer_id=request.user.id if request.user.is_authenticated else None,
                )
            except InvalidDataError as e:
                apply_core_errors(form, e.errors)
            except IntegrityViolationError as e:
                messages.error(request, e.message)
            else:
                cart_manager.clear()
                request.session['last_order_code'] = order.order_code
                return redirect('order_created')

        context = cart_manager.get_cart_context()
        context['form'] = form
        return render(request, self.template_name, context)


class OrderCreatedView(View):
    """Mostra o código do pedido recém-criado e as instruções de transferência."""
    template_name = 'store/order_created.html'

    def get(self, request):
        order_code = request.session.get('last_order_code')
        if not order_code:
            return redirect('cart')
        order = get_check_order_status_use_case().execute(order_code)
        return render(request, self.template_name, {'order_code': order_code, 'order': order})


# ====================================================================
# 3. CONFIRMAÇÃO DE PAGAMENTO E STATUS DO PEDIDO
# ====================================================================

class PaymentView(View):
    """
    GET com ?code= consulta o status (somente leitura).
    POST envia o comprovante de transferência.
    """
    template_name = 'store/payment.html'

    def _status_lookup(self, request):
        status_form = OrderStatusForm(request.GET or None)
        order, searched = None, False
        if status_form.is_bound and status_form.is_valid():
            searched = True
            order = get_check_order_status_use_case().execute(status_form.cleaned_data['code'])
        return status_form, order, searched

    def get(self, request):
        status_form, order, searched = self._status_lookup(request)
        initial = {'order_code': request.session.get('last_order_code', '')}
        context = {
            'payment_form': PaymentConfirmationForm(initial=initial),
            'status_form': status_form,
            'order': order,
            'searched': searched,
        }
        return render(request, self.template_name, context)

    def post(self, request):
        form = PaymentConfirmationForm(request.POST, request.FILES)
        if form.is_valid():
            try:
                order = get_confirm_payment_use_case().execute(
                    order_code=form.cleaned_data['order_code'],
                    payment_proof=form.cleaned_data['payment_proof'],
                )
            except InvalidDataError as e:
                apply_core_errors(form, e.errors)
            except (IntegrityViolationError, StorageError) as e:
                messages.error(request, e.message)
            else:
                messages.success(
                    request,
                    f"Payment proof for {order.order_code} received. Your order is now {order.buyer_status_label}."
                )
                return redirect(f"{request.path}?code={order.order_code}")

        context = {
            'payment_form': form,
            'status_form': OrderStatusForm(),
            'order': None,
            'searched': False,
        }
        return render(request, self.template_name, context)


# ====================================================================
# 4. API REST
# ====================================================================

class IsAdminOrReadOnly(permissions.BasePermission):

    def has_permission(self, request, view):
        if request.method in permissions.SAFE_METHODS:
            return True
        return bool(request.user and request.user.is_staff)


def error_response(error: BaseCoreError) -> Response:
    """Converte exceções do Core no status HTTP correspondente."""
    if isinstance(error, InvalidDataError):
        return Response({'detail': error.message, 'errors': error.errors}, status=status.HTTP_400_BAD_REQUEST)
    if isinstance(error, ItemNotFoundError):
        return Response({'detail': error.message}, status=status.HTTP_404_NOT_FOUND)
    if isinstance(error, IntegrityViolationError):
        return Response({'detail': error.message}, status=status.HTTP_409_CONFLICT)
    if isinstance(error, StorageError):
        return Response({'detail': error.message}, status=status.HTTP_503_SERVICE_UNAVAILABLE)
    return Response({'detail': error.message}, status=status.HTTP_400_BAD_REQUEST)


class ProductViewSet(viewsets.ModelViewSet):
    """
    Catálogo via API. Leitura pública; escrita apenas para a equipe.
    A exclusão passa pelo caso de uso para remover também os arquivos de imagem.
    """
    queryset = ProductModel.objects.select_related('category').prefetch_related('images')
    serializer_class = ProductSerializer
    permission_classes = [IsAdminOrReadOnly]

    def get_queryset(self):
        queryset = super().get_queryset()
        search = self.request.query_params.get('search')
        category = self.request.query_params.get('category')
        if search:
            queryset = queryset.filter(name__icontains=search)
        if category:
            queryset = queryset.filter(category_id=category)
        return queryset

    def destroy(self, request, *args, **kwargs):
        try:
            get_manage_catalog_use_case().delete_product(int(kwargs['pk']))
        except BaseCoreError as e:
            return error_response(e)
        return Response(status=status.HTTP_204_NO_CONTENT)


class CategoryViewSet(viewsets.ModelViewSet):
    queryset = CategoryModel.objects.all()
    serializer_class = CategorySerializer
    permission_classes = [IsAdminOrReadOnly]
    pagination_class = None

    def destroy(self, request, *args, **kwargs):
        try:
            get_manage_catalog_use_case().delete_category(int(kwargs['pk']))
        except BaseCoreError as e:
            return error_response(e)
        return Response(status=status.HTTP_204_NO_CONTENT)


class CheckoutAPIView(APIView):
    """
    Recebe o carrinho mantido pelo cliente e cria o pedido.
    Não exige login; o order_code retornado é a referência do comprador.
    """
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        serializer = CheckoutSerializer(data=request.data)
        if not serializer.is_valid():
            return Response({'errors': serializer.errors}, status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        cart = Cart.from_list(data['items'])
        try:
            order = get_create_order_use_case().execute(
                cart=cart,
                buyer_name=data['buyer_name'],
                buyer_phone=data['buyer_phone'],
                shipping_address=data['shipping_address'],
                customer_id=request.user.id if request.user.is_authenticated else None,
            )
        except BaseCoreError as e:
            return error_response(e)
        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)


class PaymentConfirmationAPIView(APIView):
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        serializer = PaymentConfirmationSerializer(data=request.data)
        if not serializer.is_valid():
            return Response({'errors': serializer.errors}, status=status.HTTP_400_BAD_REQUEST)
        try:
            order = get_confirm_payment_use_case().execute(
                order_code=serializer.validated_data['order_code'],
                payment_proof=serializer.validated_data['payment_proof'],
            )
        except BaseCoreError as e:
            return error_response(e)
        return Response(OrderSerializer(order).data, status=status.HTTP_200_OK)


class OrderStatusAPIView(APIView):
    """Consulta pública pelo código. Código desconhecido não é erro: retorna order = null."""
    permission_classes = [permissions.AllowAny]

    def get(self, request, order_code):
        order = get_check_order_status_use_case().execute(order_code)
        return Response({'order': OrderSerializer(order).data if order else None}, status=status.HTTP_200_OK)
