from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand

from batualam.catalog.models import Category, Product


class Command(BaseCommand):
    help = 'Carrega dados iniciais (categorias, produtos e um usuário da equipe) para teste do site'

    def add_arguments(self, parser):
        parser.add_argument('--admin-email', help='Email do usuário da equipe a ser criado')
        parser.add_argument('--admin-password', help='Senha do usuário da equipe')

    def handle(self, *args, **options):
        self.stdout.write('Criando dados iniciais...')

        # Categorias
        categories = ['Batu Alam', 'Batu Buatan']
        for name in categories:
            category, created = Category.objects.get_or_create(name=name)
            if created:
                self.stdout.write(self.style.SUCCESS(f'Created category "{category.name}"'))

        # Produtos por categoria
        products = {
            'Batu Alam': [
                ('Batu Andesit Bakar 10x20', 'Andesit bakar untuk lantai carport dan teras, tebal 2 cm.',
                 Decimal('185000'), 120),
                ('Batu Palimanan Gosok 20x40', 'Batu palimanan krem untuk dinding fasad, permukaan halus.',
                 Decimal('210000'), 80),
                ('Batu Templek Hitam', 'Batu templek hitam susun sirih untuk dinding taman.',
                 Decimal('95000'), 200),
                ('Batu Koral Sikat', 'Koral sikat putih untuk lantai kolam dan jalan setapak.',
                 Decimal('65000'), 300),
            ],
            'Batu Buatan': [
                ('Roster Beton Motif Daun', 'Roster beton cetak 20x20 untuk ventilasi dinding.',
                 Decimal('18500'), 500),
                ('Paving Block Hexagon', 'Paving block hexagon tebal 6 cm, per meter persegi.',
                 Decimal('72000'), 250),
            ],
        }

        for category_name, entries in products.items():
            try:
                category = Category.objects.get(name=category_name)
            except Category.DoesNotExist:
                self.stdout.write(self.style.ERROR(f'Category "{category_name}" not found'))
                continue
            for name, description, price, stock in entries:
                product, created = Product.objects.get_or_create(
                    name=name,
                    defaults={
                        'description': description,
                        'price': price,
                        'stock_quantity': stock,
                        'category': category,
                    }
                )
                if created:
                    self.stdout.write(self.style.SUCCESS(f'Created product "{product.name}"'))

        self._create_admin(options.get('admin_email'), options.get('admin_password'))

        self.stdout.write(self.style.SUCCESS('Initial data loaded successfully!'))

    def _create_admin(self, email, password):
        if not email:
            return
        if not password:
            self.stdout.write(self.style.WARNING('--admin-password is required to create the staff account'))
            return

        User = get_user_model()
        if User.objects.filter(email=email).exists():
            self.stdout.write(f'Staff account "{email}" already exists')
            return
        User.objects.create_superuser(email=email, password=password, first_name='Admin', last_name='Batu Alam')
        self.stdout.write(self.style.SUCCESS(f'Created staff account "{email}"'))
