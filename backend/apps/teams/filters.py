"""
Filters for the staff dashboard.
"""

import django_filters
from django.db.models import Q

from .models import Team

# Largest values the id columns can hold (teams: bigint, auth users: integer)
MAX_TEAM_ID = 2 ** 63 - 1
MAX_USER_ID = 2 ** 31 - 1


class TeamSearchFilter(django_filters.FilterSet):
    """
    ?search= matches the team id, the owner id, or a fragment of the name or slug.
    """
    search = django_filters.CharFilter(method='filter_search')

    class Meta:
        model = Team
        fields = ['search']

    def filter_search(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset

        query = Q(name__icontains=value) | Q(slug__icontains=value)
        if value.isascii() and value.isdigit() and len(value) <= len(str(MAX_TEAM_ID)):
            number = int(value)
            if number <= MAX_TEAM_ID:
                query |= Q(pk=number)
            if number <= MAX_USER_ID:
                query |= Q(owner_id=number)
        return queryset.filter(query)
