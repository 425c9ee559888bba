from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from events.codes import generate_unique_team_code


class GenerateTeamCodeView(APIView):
    """
    POST /api/rpc/generate_team_code/

    Returns a bare JSON string, the same shape a Postgres function called
    through the data API returns.
    """
    permission_classes = [IsAuthenticated]

    def post(self, request):
        return Response(generate_unique_team_code())
