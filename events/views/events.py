from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from rest_framework import status

from events import services
from events.serializers import EventSerializer


class EventListCreateView(APIView):
    """
    GET  /api/events/   all events, newest first
    POST /api/events/   create an event owned by the caller
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        qs = services.list_events().select_related("created_by")
        serializer = EventSerializer(qs, many=True, context={"request": request})
        return Response(serializer.data)

    def post(self, request):
        serializer = EventSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)

        event = services.create_event(
            request.user,
            name=serializer.validated_data["name"],
            description=serializer.validated_data.get("description", ""),
            event_date=serializer.validated_data["event_date"],
            max_teams=serializer.validated_data["max_teams"],
        )

        return Response(EventSerializer(event).data, status=status.HTTP_201_CREATED)
