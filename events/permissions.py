from rest_framework.permissions import BasePermission, SAFE_METHODS

from .models import Team
from .policies import TeamPolicy


class IsTeamCaptainOrReadOnly(BasePermission):
    """
    For team-scoped endpoints:
    - SAFE methods: allowed for every signed-in user (rosters are public
      within the app).
    - Write operations on an existing team require the captain.

    Creation is not an object-level action; the view checks event capacity.
    """
    message = "Only the team captain can change this team."

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated)

    def has_object_permission(self, request, view, obj):
        if request.method in SAFE_METHODS:
            return True

        team = obj if isinstance(obj, Team) else getattr(obj, "team", None)
        if team is None:
            return False

        if request.method == "DELETE" and view.action == "destroy":
            allowed, reason = TeamPolicy.can_delete_team(request.user, team)
        else:
            allowed, reason = TeamPolicy.can_edit_team(request.user, team)

        if not allowed:
            self.message = reason
        return allowed
