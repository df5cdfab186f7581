from django.contrib import admin
from .models import User


class UserAdmin(admin.ModelAdmin):
    list_display = ('email', 'full_name', 'role', 'status', 'created_at')
    list_filter = ('role', 'status')
    search_fields = ('email', 'full_name')
    ordering = ('email',)
    exclude = ('password',)


admin.site.register(User, UserAdmin)
