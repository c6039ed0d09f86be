"""
Ensure the development fallback tenant exists.

Idempotent; run after migrations so localhost requests resolve to a tenant.

Usage:
    python manage.py ensure_default_tenant
    python manage.py ensure_default_tenant --slug=joes-pizza --name="Joe's Pizza"
"""

from django.conf import settings
from django.core.management.base import BaseCommand

from tenant.models import Tenant


class Command(BaseCommand):
    help = "Ensure the DEFAULT_TENANT_SLUG tenant exists (idempotent)"

    def add_arguments(self, parser):
        parser.add_argument("--slug", type=str, default=None)
        parser.add_argument("--name", type=str, default="My Restaurant")
        parser.add_argument("--email", type=str, default="owner@example.com")

    def handle(self, *args, **options):
        slug = options["slug"] or settings.DEFAULT_TENANT_SLUG

        tenant, created = Tenant.objects.get_or_create(
            slug=slug,
            defaults={
                "name": options["name"],
                "business_name": options["name"],
                "contact_email": options["email"],
                "is_active": True,
            },
        )

        if created:
            self.stdout.write(self.style.SUCCESS(f"Created tenant '{tenant.slug}' ({tenant.id})"))
        else:
            self.stdout.write(f"Tenant '{tenant.slug}' already exists ({tenant.id})")
