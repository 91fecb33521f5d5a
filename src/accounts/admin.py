from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.translation import gettext_lazy as _

from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Admin configuration for team members."""

    list_display = (
        "email",
        "first_name",
        "last_name",
        "role",
        "salary",
        "is_active",
        "date_joined",
    )
    list_filter = ("role", "is_active", "is_staff")
    search_fields = ("email", "first_name", "last_name", "whatsapp")
    ordering = ("first_name", "last_name")
    actions = ("activate_users", "deactivate_users")

    fieldsets = (
        (None, {"fields": ("email", "password")}),
        (_("Datos personales"), {"fields": ("first_name", "last_name", "whatsapp")}),
        (_("Equipo"), {"fields": ("role", "salary")}),
        (
            _("Permisos"),
            {"fields": ("is_active", "is_staff", "is_superuser", "groups", "user_permissions")},
        ),
        (_("Fechas"), {"fields": ("last_login", "date_joined")}),
    )
    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": ("email", "first_name", "last_name", "role", "salary", "password1", "password2"),
            },
        ),
    )

    @admin.action(description=_("Activar usuarios seleccionados"))
    def activate_users(self, request, queryset):
        updated = queryset.update(is_active=True)
        self.message_user(request, _("%(count)d usuario(s) activado(s).") % {"count": updated})

    @admin.action(description=_("Desactivar usuarios seleccionados"))
    def deactivate_users(self, request, queryset):
        updated = queryset.exclude(pk=request.user.pk).update(is_active=False)
        self.message_user(request, _("%(count)d usuario(s) desactivado(s).") % {"count": updated})
