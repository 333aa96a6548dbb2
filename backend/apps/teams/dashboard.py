"""
Staff dashboard views for teams.
"""

from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema
from rest_framework import generics
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAdminUser, IsAuthenticated

from apps.users.permissions import NotSuspended

from .filters import TeamSearchFilter
from .models import Team
from .serializers import DashboardTeamSerializer


class DashboardPagination(PageNumberPagination):
    page_size = 30


class DashboardTeamMixin:
    permission_classes = [IsAuthenticated, NotSuspended, IsAdminUser]
    serializer_class = DashboardTeamSerializer
    pagination_class = DashboardPagination

    def get_queryset(self):
        return Team.objects.select_related('owner').order_by('-id')


@extend_schema(tags=['Dashboard'])
class DashboardTeamListView(DashboardTeamMixin, generics.ListAPIView):
    """
    GET /api/v1/dashboard/teams/ - All teams, 30 per page
    """
    filter_backends = []


@extend_schema(tags=['Dashboard'])
class DashboardTeamDetailView(DashboardTeamMixin, generics.RetrieveAPIView):
    """
    GET /api/v1/dashboard/teams/{id}/
    """
    filter_backends = []


@extend_schema(tags=['Dashboard'])
class DashboardTeamSearchView(DashboardTeamMixin, generics.ListAPIView):
    """
    GET /api/v1/dashboard/teams/search/?search=
    """
    filter_backends = [DjangoFilterBackend]
    filterset_class = TeamSearchFilter
