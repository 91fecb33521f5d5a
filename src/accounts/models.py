import uuid

from django.contrib.auth.models import (
    AbstractBaseUser,
    BaseUserManager,
    PermissionsMixin,
)
from django.db import models
from django.utils import timezone


class UserManager(BaseUserManager):
    """Custom manager for the User model that uses email as the unique identifier."""

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError("El correo electrónico es obligatorio.")
        email = self.normalize_email(email)
        extra_fields.setdefault("is_active", True)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault("role", User.Role.ADMIN)
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("El superusuario debe tener is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("El superusuario debe tener is_superuser=True.")

        return self.create_user(email, password, **extra_fields)

    def payroll(self):
        """Active team members with a monthly salary."""
        return self.filter(is_active=True, salary__gt=0)


class User(AbstractBaseUser, PermissionsMixin):
    """
    Team member of the agency.

    Setters book calls, closers run them and close deals, delivery staff
    serve clients once onboarded, admins manage the ledger.
    """

    class Role(models.TextChoices):
        SETTER = "setter", "Setter"
        CLOSER = "closer", "Closer"
        ADMIN = "admin", "Administrador"
        DELIVERY = "delivery", "Delivery"

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
    )
    email = models.EmailField(
        "correo electrónico",
        unique=True,
        error_messages={
            "unique": "Ya existe un usuario con este correo electrónico.",
        },
    )
    first_name = models.CharField("nombre", max_length=150)
    last_name = models.CharField("apellido", max_length=150, blank=True, default="")
    whatsapp = models.CharField("WhatsApp", max_length=30, blank=True, default="")
    role = models.CharField(
        "rol",
        max_length=20,
        choices=Role.choices,
        default=Role.SETTER,
        db_index=True,
    )
    salary = models.DecimalField(
        "salario mensual (USD)",
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
    )
    is_active = models.BooleanField("activo", default=True, db_index=True)
    is_staff = models.BooleanField("acceso al admin", default=False)
    date_joined = models.DateTimeField("fecha de ingreso", default=timezone.now)

    objects = UserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["first_name"]

    class Meta:
        verbose_name = "usuario"
        verbose_name_plural = "usuarios"
        ordering = ["first_name", "last_name"]

    def __str__(self):
        return self.get_full_name() or self.email

    def get_full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    def get_short_name(self):
        return self.first_name

    @property
    def is_admin(self) -> bool:
        return self.role == self.Role.ADMIN or self.is_superuser
