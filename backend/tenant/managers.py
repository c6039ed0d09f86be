from threading import local

from django.contrib.auth.models import BaseUserManager
from django.db import models

# Thread-local storage for the tenant of the request being served
_thread_locals = local()


def set_current_tenant(tenant):
    """
    Set the current tenant for this thread.

    Called by TenantMiddleware at the start of a request (and with None at
    the end), and by tests/management commands that work on one tenant.
    """
    _thread_locals.tenant = tenant


def get_current_tenant():
    """Return the current tenant for this thread, or None."""
    return getattr(_thread_locals, 'tenant', None)


def _tenant_filtered(queryset):
    """Scope a queryset to the current tenant, or to nothing when there is none."""
    tenant = get_current_tenant()
    if tenant is None:
        return queryset.none()
    return queryset.filter(tenant=tenant)


class TenantManager(models.Manager):
    """
    Automatically filters querysets by the current tenant.

    FAILS CLOSED: with no tenant context the queryset is empty, so a missing
    middleware or a forgotten set_current_tenant() never leaks data.

    Usage:
        class LoyaltyTier(models.Model):
            tenant = models.ForeignKey('tenant.Tenant', on_delete=models.CASCADE)

            objects = TenantManager()
            all_objects = models.Manager()  # unfiltered, for admin/scripts
    """

    def get_queryset(self):
        return _tenant_filtered(super().get_queryset())


class TenantSoftDeleteManager(models.Manager):
    """
    Manager for models with both multi-tenancy and soft delete.

    The default queryset is tenant-scoped and hides archived rows;
    with_archived() and archived_only() widen or invert the archive filter.
    """

    def _base_queryset(self):
        from core_backend.utils.archiving import SoftDeleteQuerySet
        return _tenant_filtered(SoftDeleteQuerySet(self.model, using=self._db))

    def get_queryset(self):
        return self._base_queryset().active()

    def active(self):
        return self.get_queryset()

    def with_archived(self):
        return self._base_queryset()

    def archived_only(self):
        return self._base_queryset().archived()


class TenantAwareUserManager(BaseUserManager):
    """
    Manager for staff users.

    Unlike TenantManager this does NOT fail closed: authentication and the
    Django admin load users before any tenant context exists. API views are
    still tenant-scoped because the middleware sets the context first.
    """

    def get_queryset(self):
        queryset = super().get_queryset()
        tenant = get_current_tenant()
        if tenant is not None:
            queryset = queryset.filter(tenant=tenant)
        return queryset

    def get_by_natural_key(self, username):
        # Called by Django auth without tenant context
        return self.model.all_objects.get(**{self.model.USERNAME_FIELD: username})

    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError("The Email must be set")
        email = self.normalize_email(email).lower()
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("role", self.model.Role.OWNER)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True.")
        if "tenant" not in extra_fields and "tenant_id" not in extra_fields:
            from django.conf import settings
            from tenant.models import Tenant
            extra_fields["tenant"], _ = Tenant.objects.get_or_create(
                slug=settings.DEFAULT_TENANT_SLUG,
                defaults={"name": settings.DEFAULT_TENANT_SLUG},
            )

        return self._create_user(email, password, **extra_fields)
