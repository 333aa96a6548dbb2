"""
Admin configuration for users app.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.contrib.auth.models import User

from .models import Profile


class ProfileInline(admin.StackedInline):
    """
    Inline admin for Profile model.
    """
    model = Profile
    can_delete = False
    verbose_name_plural = 'Profile'
    fk_name = 'user'
    raw_id_fields = ['current_team']


class UserAdmin(BaseUserAdmin):
    """
    Extended User admin with Profile inline.
    """
    inlines = (ProfileInline,)


# Unregister default User admin and register custom one
admin.site.unregister(User)
admin.site.register(User, UserAdmin)


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    """
    Admin interface for Profile model.
    """
    list_display = [
        'user',
        'name',
        'country',
        'current_team',
        'suspended_to',
        'created_at',
    ]
    list_filter = ['country', 'created_at']
    search_fields = ['user__username', 'user__email', 'name']
    readonly_fields = ['created_at', 'updated_at']
    raw_id_fields = ['user', 'current_team']
    actions = ['lift_suspension']

    fieldsets = (
        ('Main', {
            'fields': ('user', 'name', 'country', 'current_team')
        }),
        ('Suspension', {
            'fields': ('suspended_at', 'suspended_to', 'suspended_reason')
        }),
        ('Dates', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    @admin.action(description='Lift suspension')
    def lift_suspension(self, request, queryset):
        for profile in queryset:
            profile.lift_suspension()
