# batualam/presentation/views_admin.py
"""
Views para o painel de administração (back-office da loja).
"""
import calendar

from django.contrib import messages
from django.contrib.auth.mixins import LoginRequiredMixin
from django.core.exceptions import PermissionDenied
from django.core.paginator import Paginator
from django.http import Http404, HttpResponse
from django.shortcuts import get_object_or_404, redirect, render
from django.utils import timezone
from django.views import View

from batualam.catalog.models import Category as CategoryModel, Product as ProductModel
from batualam.core.dependency_injection import (
    get_manage_catalog_use_case,
    get_manage_orders_use_case,
    get_sales_report_use_case,
)
from batualam.core.exceptions import (
    IntegrityViolationError,
    InvalidDataError,
    ItemNotFoundError,
    StorageError,
)
from .forms import (
    CategoryForm,
    OrderAdminForm,
    OrderFilterForm,
    OrderItemFormSet,
    ProductForm,
    SalesReportForm,
    apply_core_errors,
)


class StaffRequiredMixin(LoginRequiredMixin):
    """Exige login e a flag is_staff."""

    def dispatch(self, request, *args, **kwargs):
        if request.user.is_authenticated and not request.user.is_staff:
            raise PermissionDenied("You do not have permission to access this page.")
        return super().dispatch(request, *args, **kwargs)


# ====================================================================
# DASHBOARD
# ====================================================================

class DashboardAdminView(StaffRequiredMixin, View):
    template_name = 'backoffice/dashboard.html'

    def get(self, request):
        orders_uc = get_manage_orders_use_case()
        context = {
            'summary': orders_uc.sales_summary(),
            'recent_orders': orders_uc.list_orders()[:5],
            'total_products': ProductModel.objects.count(),
        }
        return render(request, self.template_name, context)


# ====================================================================
# GERENCIAMENTO DE PEDIDOS
# ====================================================================

class OrderListAdminView(StaffRequiredMixin, View):
    """Listagem com busca (código/comprador), filtro de status e de data, combinados com AND."""
    template_name = 'backoffice/order_list.html'
    paginate_by = 10

    def get(self, request):
        filter_form = OrderFilterForm(request.GET or None)
        search, status, on_date = None, None, None
        if filter_form.is_bound and filter_form.is_valid():
            search = filter_form.cleaned_data['search']
            status = filter_form.cleaned_data['status']
            on_date = filter_form.cleaned_data['date']

        orders = get_manage_orders_use_case().list_orders(search=search, status=status, on_date=on_date)
        page_obj = Paginator(orders, self.paginate_by).get_page(request.GET.get('page'))

        query = request.GET.copy()
        query.pop('page', None)
        context = {
            'filter_form': filter_form if filter_form.is_bound else OrderFilterForm(),
            'page_obj': page_obj,
            'orders': page_obj.object_list,
            'querystring': query.urlencode(),
        }
        return render(request, self.template_name, context)


class OrderDetailAdminView(StaffRequiredMixin, View):
    template_name = 'backoffice/order_detail.html'

    def get(self, request, pk):
        try:
            order = get_manage_orders_use_case().get_order(pk)
        except ItemNotFoundError:
            raise Http404("Order not found.")
        return render(request, self.template_name, {'order': order})


class OrderFormAdminView(StaffRequiredMixin, View):
    """
    Criação (sem pk) e edição (com pk) de pedidos com seus itens.
    Ao salvar, os itens são recriados com o preço atual dos produtos.
    """
    template_name = 'backoffice/order_form.html'

    def _render(self, request, form, formset, order=None):
        context = {'form': form, 'formset': formset, 'order': order}
        return render(request, self.template_name, context)

    def _get_order(self, pk):
        if pk is None:
            return None
        try:
            return get_manage_orders_use_case().get_order(pk)
        except ItemNotFoundError:
            raise Http404("Order not found.")

    def get(self, request, pk=None):
        order = self._get_order(pk)
        if order:
            form = OrderAdminForm(initial={
                'order_code': order.order_code,
                'buyer_name': order.buyer_name,
                'buyer_phone': order.buyer_phone,
                'shipping_address': order.shipping_address,
                'order_date': timezone.localtime(order.order_date) if order.order_date else None,
                'status': order.status.value,
            })
            formset = OrderItemFormSet(initial=[
                {'product': item.product_id, 'quantity': item.quantity} for item in order.items
            ])
        else:
            form = OrderAdminForm(initial={
                'order_code': get_manage_orders_use_case().new_order_code(),
                'order_date': timezone.localtime().replace(second=0, microsecond=0),
                'status': 'pending',
            })
            formset = OrderItemFormSet()
        return self._render(request, form, formset, order)

    def post(self, request, pk=None):
        order = self._get_order(pk)
        form = OrderAdminForm(request.POST, request.FILES)
        formset = OrderItemFormSet(request.POST)

        if form.is_valid() and formset.is_valid():
            items = [
                {'product_id': item_form.cleaned_data['product'].id,
                 'quantity': item_form.cleaned_data['quantity']}
                for item_form in formset.forms
                if item_form.cleaned_data and not item_form.cleaned_data.get('DELETE')
            ]
            try:
                saved = get_manage_orders_use_case().save_order(
                    order_id=pk,
                    data=form.cleaned_data,
                    items=items,
                    payment_proof=form.cleaned_data.get('payment_proof'),
                )
            except InvalidDataError as e:
                apply_core_errors(form, e.errors)
            except IntegrityViolationError as e:
                form.add_error('order_code', e.message)
            except StorageError as e:
                messages.error(request, e.message)
            else:
                messages.success(request, f"Order {saved.order_code} saved successfully.")
                return redirect('backoffice_order_list')

        return self._render(request, form, formset, order)


class OrderDeleteAdminView(StaffRequiredMixin, View):
    template_name = 'backoffice/order_confirm_delete.html'

    def get(self, request, pk):
        try:
            order = get_manage_orders_use_case().get_order(pk)
        except ItemNotFoundError:
            raise Http404("Order not found.")
        return render(request, self.template_name, {'order': order})

    def post(self, request, pk):
        try:
            deleted = get_manage_orders_use_case().delete_order(pk)
        except ItemNotFoundError:
            raise Http404("Order not found.")
        messages.success(request, f"Order {deleted.order_code} deleted.")
        return redirect('backoffice_order_list')


# ====================================================================
# GERENCIAMENTO DO CATÁLOGO
# ====================================================================

class ProductListAdminView(StaffRequiredMixin, View):
    """Produtos e categorias (com contagem de produtos) na mesma página."""
    template_name = 'backoffice/product_list.html'
    paginate_by = 10

    def get(self, request):
        catalog_uc = get_manage_catalog_use_case()
        search = request.GET.get('search', '').strip()
        products = catalog_uc.product_repo.search(term=search or None)
        page_obj = Paginator(products, self.paginate_by).get_page(request.GET.get('page'))
        context = {
            'page_obj': page_obj,
            'products': page_obj.object_list,
            'categories': catalog_uc.list_categories(),
            'search': search,
        }
        return render(request, self.template_name, context)


class ProductFormAdminView(StaffRequiredMixin, View):
    template_name = 'backoffice/product_form.html'

    def get(self, request, pk=None):
        instance = get_object_or_404(ProductModel, pk=pk) if pk else None
        form = ProductForm(instance=instance)
        return render(request, self.template_name, {'form': form, 'product': instance})

    def post(self, request, pk=None):
        instance = get_object_or_404(ProductModel, pk=pk) if pk else None
        form = ProductForm(request.POST, request.FILES, instance=instance)
        if form.is_valid():
            data = dict(form.cleaned_data)
            data['category_id'] = data.pop('category').id
            try:
                product = get_manage_catalog_use_case().save_product(
                    product_id=pk, data=data, image=data.pop('image', None)
                )
            except InvalidDataError as e:
                apply_core_errors(form, e.errors, field_map={'category_id': 'category'})
            except (IntegrityViolationError, StorageError) as e:
                messages.error(request, e.message)
            else:
                messages.success(request, f'Product "{product.name}" saved successfully.')
                return redirect('backoffice_product_list')
        return render(request, self.template_name, {'form': form, 'product': instance})


class ProductDeleteAdminView(StaffRequiredMixin, View):

    def post(self, request, pk):
        try:
            product = get_manage_catalog_use_case().delete_product(pk)
        except ItemNotFoundError:
            raise Http404("Product not found.")
        messages.success(request, f'Product "{product.name}" deleted.')
        return redirect('backoffice_product_list')


class CategoryFormAdminView(StaffRequiredMixin, View):
    template_name = 'backoffice/category_form.html'

    def get(self, request, pk=None):
        instance = get_object_or_404(CategoryModel, pk=pk) if pk else None
        return render(request, self.template_name, {'form': CategoryForm(instance=instance), 'category': instance})

    def post(self, request, pk=None):
        instance = get_object_or_404(CategoryModel, pk=pk) if pk else None
        form = CategoryForm(request.POST, instance=instance)
        if form.is_valid():
            try:
                category = get_manage_catalog_use_case().save_category(pk, form.cleaned_data['name'])
            except InvalidDataError as e:
                apply_core_errors(form, e.errors)
            except IntegrityViolationError as e:
                form.add_error('name', e.message)
            else:
                messages.success(request, f'Category "{category.name}" saved successfully.')
                return redirect('backoffice_product_list')
        return render(request, self.template_name, {'form': form, 'category': instance})


class CategoryDeleteAdminView(StaffRequiredMixin, View):

    def post(self, request, pk):
        try:
            get_manage_catalog_use_case().delete_category(pk)
        except ItemNotFoundError:
            raise Http404("Category not found.")
        except IntegrityViolationError as e:
            messages.error(request, e.message)
        else:
            messages.success(request, "Category deleted.")
        return redirect('backoffice_product_list')


# ====================================================================
# RELATÓRIO DE VENDAS
# ====================================================================

class SalesReportAdminView(StaffRequiredMixin, View):
    """GET mostra o formulário (mês corrente por padrão); POST baixa o PDF."""
    template_name = 'backoffice/report.html'

    def get(self, request):
        today = timezone.localdate()
        last_day = calendar.monthrange(today.year, today.month)[1]
        form = SalesReportForm(initial={
            'start_date': today.replace(day=1),
            'end_date': today.replace(day=last_day),
        })
        return render(request, self.template_name, {'form': form})

    def post(self, request):
        form = SalesReportForm(request.POST)
        if form.is_valid():
            try:
                filename, pdf = get_sales_report_use_case().render(
                    form.cleaned_data['start_date'], form.cleaned_data['end_date']
                )
            except InvalidDataError as e:
                apply_core_errors(form, e.errors)
            else:
                response = HttpResponse(pdf, content_type='application/pdf')
                response['Content-Disposition'] = f'attachment; filename="{filename}"'
                return response
        return render(request, self.template_name, {'form': form})
