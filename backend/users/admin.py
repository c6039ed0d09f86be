from django.contrib import admin
from .models import User


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ['email', 'tenant', 'role', 'is_active', 'date_joined']
    list_filter = ['role', 'is_active', 'tenant']
    search_fields = ['email', 'first_name', 'last_name']
    readonly_fields = ['date_joined', 'updated_at', 'last_login']
    exclude = ['password']

    def get_queryset(self, request):
        return User.all_objects.select_related('tenant')
