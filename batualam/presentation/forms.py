# batualam/presentation/forms.py

from django import forms
from django.forms import formset_factory

from batualam.catalog.models import Category, Product
from batualam.core.entities import OrderStatus


def apply_core_errors(form, errors, field_map=None):
    """
    Copia os erros por campo levantados pelos casos de uso (InvalidDataError.errors)
    para o formulário. Campos desconhecidos viram erros gerais (non_field_errors).
    """
    field_map = field_map or {}
    for field_name, messages in errors.items():
        target = field_map.get(field_name, field_name)
        if target not in form.fields:
            target = None
        for message in messages:
            form.add_error(target, message)


# --- 1. FORMULÁRIOS DA LOJA (CHECKOUT E PAGAMENTO) ---

class CheckoutForm(forms.Form):
    """Dados de entrega informados pelo comprador (checkout sem login)."""
    buyer_name = forms.CharField(label="Full name", max_length=255)
    buyer_phone = forms.CharField(label="Phone number", max_length=20)
    shipping_address = forms.CharField(
        label="Shipping address",
        min_length=10,
        widget=forms.Textarea(attrs={'rows': 3}),
    )


class PaymentConfirmationForm(forms.Form):
    order_code = forms.CharField(label="Order code", max_length=50)
    payment_proof = forms.ImageField(label="Transfer receipt")


class OrderStatusForm(forms.Form):
    code = forms.CharField(label="Order code", max_length=50)


class ReviewForm(forms.Form):
    rating = forms.TypedChoiceField(
        label="Rating",
        choices=[(value, f"{value} / 5") for value in range(5, 0, -1)],
        coerce=int,
    )
    comment = forms.CharField(
        label="Comment", max_length=1000, required=False, widget=forms.Textarea(attrs={'rows': 3})
    )


# --- 2. FORMULÁRIOS DO PAINEL (PEDIDOS) ---

class OrderAdminForm(forms.Form):
    order_code = forms.CharField(label="Order code", max_length=50)
    buyer_name = forms.CharField(label="Buyer name", max_length=255)
    buyer_phone = forms.CharField(label="Buyer phone", max_length=20)
    shipping_address = forms.CharField(label="Shipping address", widget=forms.Textarea(attrs={'rows': 3}))
    order_date = forms.DateTimeField(
        label="Order date",
        input_formats=['%Y-%m-%dT%H:%M', '%Y-%m-%d %H:%M:%S', '%Y-%m-%d %H:%M', '%Y-%m-%d'],
        widget=forms.DateTimeInput(attrs={'type': 'datetime-local'}, format='%Y-%m-%dT%H:%M'),
    )
    status = forms.ChoiceField(label="Status", choices=OrderStatus.choices())
    payment_proof = forms.ImageField(label="Payment proof", required=False)


class OrderItemForm(forms.Form):
    product = forms.ModelChoiceField(
        queryset=Product.objects.all(),
        label="Product",
        empty_label="Select a product",
    )
    quantity = forms.IntegerField(label="Quantity", min_value=1, initial=1)


OrderItemFormSet = formset_factory(
    OrderItemForm, extra=0, min_num=1, validate_min=True, can_delete=True
)


class OrderFilterForm(forms.Form):
    search = forms.CharField(label="Search", required=False)
    status = forms.ChoiceField(
        label="Status", required=False, choices=[('', 'All statuses')] + OrderStatus.choices()
    )
    date = forms.DateField(label="Date", required=False, widget=forms.DateInput(attrs={'type': 'date'}))


class SalesReportForm(forms.Form):
    start_date = forms.DateField(label="Start date", widget=forms.DateInput(attrs={'type': 'date'}))
    end_date = forms.DateField(label="End date", widget=forms.DateInput(attrs={'type': 'date'}))

    def clean(self):
        cleaned_data = super().clean()
        start_date = cleaned_data.get('start_date')
        end_date = cleaned_data.get('end_date')
        if start_date and end_date and end_date < start_date:
            self.add_error('end_date', "The end date must be on or after the start date.")
        return cleaned_data


# --- 3. FORMULÁRIOS DO PAINEL (CATÁLOGO) ---

class ProductForm(forms.ModelForm):
    category = forms.ModelChoiceField(
        queryset=Category.objects.all(),
        label="Category",
        empty_label="Select a category",
    )
    image = forms.ImageField(label="Image", required=False)

    class Meta:
        model = Product
        fields = ['name', 'description', 'price', 'stock_quantity', 'category']
        widgets = {
            'description': forms.Textarea(attrs={'rows': 4}),
            'price': forms.NumberInput(attrs={'step': '0.01', 'min': '0'}),
        }

    def clean_name(self):
        name = self.cleaned_data['name'].strip()
        if len(name) < 3:
            raise forms.ValidationError("Ensure this value has at least 3 characters.")
        return name


class CategoryForm(forms.ModelForm):

    class Meta:
        model = Category
        fields = ['name']

    def clean_name(self):
        name = self.cleaned_data['name'].strip()
        if len(name) < 3:
            raise forms.ValidationError("Ensure this value has at least 3 characters.")
        return name
