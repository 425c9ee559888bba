# events/policies.py
"""
Centralized registration policy layer.

These are the row-level access rules of the backend: the client hides
controls it knows will be refused, but only these checks decide.
All methods return bool or (bool, str) with reason.
"""
from typing import Tuple

from .models import Event, Team


class TeamPolicy:
    """
    Permission checks for events and teams.
    """

    @staticmethod
    def is_authenticated(user) -> bool:
        return bool(user and user.is_authenticated)

    @staticmethod
    def is_captain(user, team: Team) -> bool:
        """Check if user is the team's captain (its creator)."""
        if not TeamPolicy.is_authenticated(user) or team is None:
            return False
        return team.captain_id == user.id

    # ─────────────────────────────────────────────────────────────
    # Events
    # ─────────────────────────────────────────────────────────────

    @staticmethod
    def can_create_event(user) -> Tuple[bool, str]:
        """Any signed-in user may organize an event."""
        if not TeamPolicy.is_authenticated(user):
            return False, "Authentication required"
        return True, ""

    # ─────────────────────────────────────────────────────────────
    # Teams
    # ─────────────────────────────────────────────────────────────

    @staticmethod
    def can_register_team(user, event: Event) -> Tuple[bool, str]:
        """Check if user can register a new team for the event."""
        if not TeamPolicy.is_authenticated(user):
            return False, "Authentication required"

        if event.teams.count() >= event.max_teams:
            return False, f"This event already has {event.max_teams} teams"

        return True, ""

    @staticmethod
    def can_edit_team(user, team: Team) -> Tuple[bool, str]:
        """Renaming a team or replacing its members: captain only."""
        if not TeamPolicy.is_authenticated(user):
            return False, "Authentication required"

        if TeamPolicy.is_captain(user, team):
            return True, ""

        return False, "Only the team captain can edit this team"

    @staticmethod
    def can_delete_team(user, team: Team) -> Tuple[bool, str]:
        """Check if user can delete the team."""
        if not TeamPolicy.is_authenticated(user):
            return False, "Authentication required"

        if TeamPolicy.is_captain(user, team):
            return True, ""

        return False, "Only the team captain can delete this team"
