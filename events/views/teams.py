# events/views/teams.py - Team roster API views

from rest_framework import mixins, viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response

from events import services
from events.models import Team
from events.permissions import IsTeamCaptainOrReadOnly
from events.serializers import (
    MemberInputSerializer,
    TeamCreateSerializer,
    TeamMemberSerializer,
    TeamSerializer,
    TeamUpdateSerializer,
)


class TeamViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """
    Team roster of an event.

    GET    /api/events/teams/?event=<id>     roster, newest first
    POST   /api/events/teams/                 register (members optional)
    PATCH  /api/events/teams/<id>/            rename (captain only)
    DELETE /api/events/teams/<id>/            delete, members cascade (captain only)
    POST   /api/events/teams/<id>/members/    insert the 4 members
    PUT    /api/events/teams/<id>/members/    replace the 4 members atomically
    DELETE /api/events/teams/<id>/members/    remove all members
    """
    serializer_class = TeamSerializer
    permission_classes = [IsTeamCaptainOrReadOnly]

    def get_queryset(self):
        if self.action == 'list':
            event_id = self.request.query_params.get('event')
            if not event_id:
                return Team.objects.none()
            return services.list_teams(event_id)
        return Team.objects.select_related('captain').prefetch_related('team_members')

    def create(self, request):
        serializer = TeamCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        if data.get('team_members') is None:
            team = services.create_team(
                request.user,
                event=data['event'],
                team_name=data['team_name'],
                team_code=data.get('team_code'),
            )
        else:
            team = services.register_team(
                request.user,
                event=data['event'],
                team_name=data['team_name'],
                members=data['team_members'],
                team_code=data.get('team_code'),
            )

        return Response(TeamSerializer(team).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        team = self.get_object()

        serializer = TeamUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        services.rename_team(request.user, team, serializer.validated_data['team_name'])

        return Response(TeamSerializer(team).data)

    def update(self, request, pk=None):
        return self.partial_update(request, pk=pk)

    def destroy(self, request, pk=None):
        team = self.get_object()
        services.delete_team(request.user, team)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['post', 'put', 'delete'], url_path='members')
    def members(self, request, pk=None):
        team = self.get_object()

        if request.method == 'DELETE':
            services.clear_team_members(request.user, team)
            return Response(status=status.HTTP_204_NO_CONTENT)

        serializer = MemberInputSerializer(data=request.data, many=True)
        serializer.is_valid(raise_exception=True)

        if request.method == 'POST':
            created = services.add_team_members(request.user, team, serializer.validated_data)
            response_status = status.HTTP_201_CREATED
        else:
            created = services.replace_team_members(request.user, team, serializer.validated_data)
            response_status = status.HTTP_200_OK

        return Response(TeamMemberSerializer(created, many=True).data, status=response_status)
