"""
Utility functions for core_backend.
"""


def get_client_ip(group, request):
    """
    Rate-limit key: the client IP.

    Signature matches django-ratelimit's callable key contract (group is unused).
    Behind a proxy the last X-Forwarded-For entry is the address the proxy saw,
    which the client cannot spoof.
    """
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        return x_forwarded_for.split(',')[-1].strip()
    return request.META.get('REMOTE_ADDR')


def unique_tenant_slug(instance, value, max_length=120):
    """
    Slugify `value` and suffix it (-2, -3, ...) until no other row of the
    same tenant uses it. Archived rows count, since they keep their slugs.
    """
    from django.utils.text import slugify

    base = slugify(value)[:max_length] or "item"
    model = instance.__class__
    queryset = model.all_objects.filter(tenant_id=instance.tenant_id).exclude(pk=instance.pk)

    slug, counter = base, 2
    while queryset.filter(slug=slug).exists():
        suffix = f"-{counter}"
        slug = f"{base[:max_length - len(suffix)]}{suffix}"
        counter += 1
    return slug
