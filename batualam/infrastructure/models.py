# Define os modelos do banco de dados para a camada de infraestrutura (apenas autenticação).

from django.db import models
from django.contrib.auth.models import AbstractUser, BaseUserManager

# ====================================================================
# GERENCIADOR DE USUÁRIOS PERSONALIZADO (Para usar email como login)
# ====================================================================

class CustomerManager(BaseUserManager):
    """
    Gerenciador onde o email é o identificador único para autenticação,
    em vez do nome de usuário.
    """
    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError('The email address must be set')
        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('is_active', True)

        if extra_fields.get('is_staff') is not True:
            raise ValueError('Superuser must have is_staff=True.')
        if extra_fields.get('is_superuser') is not True:
            raise ValueError('Superuser must have is_superuser=True.')

        return self.create_user(email, password, **extra_fields)


# ====================================================================
# MODELO DE CLIENTE
# ====================================================================

class Customer(AbstractUser):
    """
    Conta da loja. Clientes e equipe compartilham esta tabela; a flag
    is_staff libera o painel administrativo.
    """
    username = None

    email = models.EmailField('email address', unique=True)

    phone_number = models.CharField(max_length=20, blank=True)
    shipping_address = models.TextField(blank=True)
    billing_address = models.TextField(blank=True)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['first_name', 'last_name']

    objects = CustomerManager()

    class Meta:
        verbose_name = 'Customer'
        verbose_name_plural = 'Customers'
        db_table = 'customers'

    def __str__(self):
        return self.get_full_name() or self.email
