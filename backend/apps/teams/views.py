"""
Views for teams app.

Token scopes are checked by HasTokenScope through `required_scopes`
(403 when missing); team roles are checked by apps.teams.policies.
"""

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.users.permissions import HasTokenScope, NotSuspended

from . import services
from .policies import authorize
from .serializers import TeamSerializer, TeamWriteSerializer


class TeamAPIView(APIView):
    permission_classes = [IsAuthenticated, NotSuspended, HasTokenScope]
    required_scopes = {}


@extend_schema(tags=['Teams'])
class TeamListCreateView(TeamAPIView):
    """
    GET /api/v1/teams/ - Teams the user belongs to
    POST /api/v1/teams/ - Create a team, caller becomes owner
    """
    required_scopes = {
        'GET': 'view-teams',
        'POST': 'manage-teams',
    }

    @extend_schema(responses={200: TeamSerializer(many=True)})
    def get(self, request):
        teams = services.teams_for_user(request.user)
        return Response(TeamSerializer(teams, many=True).data)

    @extend_schema(
        request=TeamWriteSerializer,
        responses={200: TeamSerializer, 403: {"description": "Missing manage-teams scope"}}
    )
    def post(self, request):
        serializer = TeamWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        team = services.create_team(request.user, serializer.validated_data['name'])
        return Response(TeamSerializer(team).data, status=status.HTTP_200_OK)


@extend_schema(tags=['Teams'])
class TeamDetailView(TeamAPIView):
    """
    GET /api/v1/teams/{slug}/ - Team details (members)
    PUT /api/v1/teams/{slug}/ - Rename (owner or admin)
    DELETE /api/v1/teams/{slug}/ - Delete (owner)
    """
    required_scopes = {
        'GET': 'view-teams',
        'PUT': 'manage-teams',
        'PATCH': 'manage-teams',
        'DELETE': 'manage-teams',
    }

    @extend_schema(responses={200: TeamSerializer})
    def get(self, request, slug):
        team = services.get_team_or_404(slug)
        authorize(request, team, 'view')
        return Response(TeamSerializer(team).data)

    @extend_schema(request=TeamWriteSerializer, responses={200: TeamSerializer})
    def put(self, request, slug):
        team = services.get_team_or_404(slug)
        authorize(request, team, 'update')

        serializer = TeamWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        services.rename_team(team, serializer.validated_data['name'], user=request.user)
        return Response(TeamSerializer(team).data)

    def patch(self, request, slug):
        return self.put(request, slug)

    @extend_schema(responses={200: {"description": "Team deleted"}})
    def delete(self, request, slug):
        team = services.get_team_or_404(slug)
        authorize(request, team, 'delete')

        services.delete_team(team, user=request.user)
        return Response({"message": "Team deleted."}, status=status.HTTP_200_OK)


@extend_schema(tags=['Teams'])
class TeamSwitchView(TeamAPIView):
    """
    POST /api/v1/teams/{slug}/change/ - Make the team the user's active team
    """
    required_scopes = {
        'POST': 'view-teams',
    }

    @extend_schema(request=None, responses={200: TeamSerializer, 403: {"description": "Not a member"}})
    def post(self, request, slug):
        team = services.get_team_or_404(slug)
        authorize(request, team, 'view')

        services.switch_current_team(request.user, team)
        return Response(TeamSerializer(team).data)
