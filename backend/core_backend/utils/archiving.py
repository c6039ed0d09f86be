"""
Soft delete (archiving) infrastructure.

Branches, categories, menu items, promotions and ingredients are referenced
by historical orders and usage logs, so they are archived rather than deleted.
"""

from django.conf import settings
from django.db import models
from django.utils import timezone


class SoftDeleteQuerySet(models.QuerySet):
    """
    QuerySet with archive-aware filters and bulk archive operations.
    """

    def active(self):
        return self.filter(is_active=True)

    def archived(self):
        return self.filter(is_active=False)

    def archive(self, archived_by=None):
        """Archive every record in this queryset. Returns the row count."""
        update_fields = {
            'is_active': False,
            'archived_at': timezone.now(),
        }
        if archived_by:
            update_fields['archived_by'] = archived_by
        return self.update(**update_fields)

    def unarchive(self):
        return self.update(is_active=True, archived_at=None, archived_by=None)


class SoftDeleteMixin(models.Model):
    """
    Abstract base class that provides soft delete functionality.

    Subclasses get:
    - is_active: False means archived
    - archived_at / archived_by audit fields
    - archive() / unarchive(); delete() archives, force_delete() removes the row

    Pair with tenant.managers.TenantSoftDeleteManager as the default manager.
    """

    is_active = models.BooleanField(
        default=True,
        db_index=True,
        help_text="Designates whether this record is active. "
                  "Inactive records are considered archived."
    )
    archived_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="Timestamp when this record was archived."
    )
    archived_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="%(app_label)s_%(class)s_archived",
        help_text="User who archived this record."
    )

    class Meta:
        abstract = True

    def archive(self, archived_by=None):
        self.is_active = False
        self.archived_at = timezone.now()
        if archived_by:
            self.archived_by = archived_by
        self.save(update_fields=['is_active', 'archived_at', 'archived_by'])

    def unarchive(self):
        self.is_active = True
        self.archived_at = None
        self.archived_by = None
        self.save(update_fields=['is_active', 'archived_at', 'archived_by'])

    @property
    def is_archived(self):
        return not self.is_active

    def delete(self, using=None, keep_parents=False):
        """Archive instead of deleting. Use force_delete() for a hard delete."""
        self.archive()

    def force_delete(self, using=None, keep_parents=False):
        return super().delete(using=using, keep_parents=keep_parents)
