"""
Admin configuration for teams app.
"""

from django.contrib import admin

from .models import Team, TeamMember


class TeamMemberInline(admin.TabularInline):
    model = TeamMember
    extra = 0
    raw_id_fields = ['user']


@admin.register(Team)
class TeamAdmin(admin.ModelAdmin):
    list_display = ['id', 'name', 'slug', 'owner', 'created_at', 'deleted_at']
    list_filter = ['created_at', 'deleted_at']
    search_fields = ['name', 'slug', 'owner__email']
    readonly_fields = ['slug', 'created_at', 'updated_at']
    raw_id_fields = ['owner']
    inlines = [TeamMemberInline]

    def get_queryset(self, request):
        return Team.all_objects.select_related('owner')
