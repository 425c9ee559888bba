# events/services.py
"""
Write paths of the registration backend.

Views and the in-process client backend both go through these functions so
the access rules in `policies.py` and the exactly-four-members invariant are
checked in one place.
"""
import logging
from typing import Iterable, List, Optional

from django.db import IntegrityError, transaction
from rest_framework import status
from rest_framework.exceptions import APIException, PermissionDenied, ValidationError

from core.constants import (
    ACTIVITY_EVENT_CREATED,
    ACTIVITY_TEAM_CREATED,
    ACTIVITY_TEAM_DELETED,
    ACTIVITY_TEAM_MEMBERS_REPLACED,
    ACTIVITY_TEAM_RENAMED,
    DEFAULT_MAX_TEAMS,
    DESCRIPTION_MAX_LENGTH,
    EVENT_NAME_MAX_LENGTH,
    MEMBER_EMAIL_MAX_LENGTH,
    MEMBER_NAME_MAX_LENGTH,
    MEMBER_POSITIONS,
    TEAM_NAME_MAX_LENGTH,
    TEAM_SIZE,
)
from .codes import generate_unique_team_code
from .models import Event, Team, TeamMember
from .policies import TeamPolicy
from .sanitizers import sanitize_html, sanitize_text

logger = logging.getLogger('teamreg.events')


class TeamRegistrationClosed(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "This event does not accept more teams."
    default_code = "registration_closed"


class TeamCodeConflict(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "This team code is already taken."
    default_code = "team_code_conflict"


def _require(allowed_reason):
    allowed, reason = allowed_reason
    if not allowed:
        raise PermissionDenied(reason)


def _bounded(value, max_length: int, field: str, label: str) -> str:
    """Sanitized text; over-long input is rejected, never cut down."""
    text = sanitize_text(value)
    if len(text) > max_length:
        raise ValidationError({field: f"{label} must be at most {max_length} characters."})
    return text


def _log(verb: str, actor, **metadata):
    details = ", ".join(f"{key}={value}" for key, value in metadata.items())
    logger.info(f"{verb}: actor={getattr(actor, 'id', 'unknown')}, {details}")


# ─────────────────────────────────────────────────────────────
# Events
# ─────────────────────────────────────────────────────────────

def list_events():
    return Event.objects.order_by('-created_at', '-id')


def create_event(user, *, name, event_date, description="", max_teams=DEFAULT_MAX_TEAMS) -> Event:
    _require(TeamPolicy.can_create_event(user))

    name = _bounded(name, EVENT_NAME_MAX_LENGTH, "name", "Event name")
    if not name:
        raise ValidationError({"name": "Event name is required."})
    if not event_date:
        raise ValidationError({"event_date": "Event date is required."})
    if max_teams is None or max_teams < 1:
        raise ValidationError({"max_teams": "max_teams must be a positive integer."})

    event = Event.objects.create(
        name=name,
        description=sanitize_html(description, max_length=DESCRIPTION_MAX_LENGTH),
        event_date=event_date,
        max_teams=max_teams,
        created_by=user,
    )
    _log(ACTIVITY_EVENT_CREATED, user, event_id=event.id, max_teams=max_teams)
    return event


# ─────────────────────────────────────────────────────────────
# Teams
# ─────────────────────────────────────────────────────────────

def list_teams(event_id):
    return (
        Team.objects.filter(event_id=event_id)
        .select_related('captain')
        .prefetch_related('team_members')
        .order_by('-created_at', '-id')
    )


def normalize_members(members: Iterable[dict]) -> List[dict]:
    """
    Validate a submitted member list and return it ordered by position.

    Either every row carries `member_position` (and together they are exactly
    1..4) or none does and positions follow submission order.
    """
    members = list(members)
    if len(members) != TEAM_SIZE:
        raise ValidationError({"team_members": f"A team needs exactly {TEAM_SIZE} members."})

    positions = [member.get("member_position") for member in members]
    if all(position is None for position in positions):
        positions = list(MEMBER_POSITIONS)
    elif sorted(p for p in positions if p is not None) != list(MEMBER_POSITIONS):
        raise ValidationError({"team_members": f"Member positions must be exactly {list(MEMBER_POSITIONS)}."})

    cleaned = []
    for position, member in zip(positions, members):
        name = _bounded(member.get("member_name"), MEMBER_NAME_MAX_LENGTH, "team_members", f"Member {position} name")
        email = _bounded(member.get("member_email"), MEMBER_EMAIL_MAX_LENGTH, "team_members", f"Member {position} email")
        if not name or not email:
            raise ValidationError({"team_members": f"Member {position} needs a name and an email."})
        cleaned.append({"member_name": name, "member_email": email, "member_position": position})

    return sorted(cleaned, key=lambda member: member["member_position"])


def create_team(user, *, event: Event, team_name: str, team_code: Optional[str] = None) -> Team:
    """
    Insert a team row with `user` as captain.

    Members are added separately (`add_team_members`) or in the same
    transaction by `register_team`.
    """
    allowed, reason = TeamPolicy.can_register_team(user, event)
    if not allowed:
        if TeamPolicy.is_authenticated(user):
            raise TeamRegistrationClosed(reason)
        raise PermissionDenied(reason)

    team_name = _bounded(team_name, TEAM_NAME_MAX_LENGTH, "team_name", "Team name")
    if not team_name:
        raise ValidationError({"team_name": "Team name is required."})

    try:
        with transaction.atomic():
            team = Team.objects.create(
                event=event,
                team_name=team_name,
                team_code=team_code or generate_unique_team_code(),
                captain=user,
            )
    except IntegrityError:
        logger.warning(f"Team code conflict on insert: {team_code}")
        raise TeamCodeConflict()

    _log(ACTIVITY_TEAM_CREATED, user, team_id=team.id, event_id=event.id, code=team.team_code)
    return team


def add_team_members(user, team: Team, members: Iterable[dict]) -> List[TeamMember]:
    """Insert the four members of a team that has none yet."""
    _require(TeamPolicy.can_edit_team(user, team))
    rows = normalize_members(members)

    if team.team_members.exists():
        raise ValidationError({"team_members": "This team already has members; replace them instead."})

    return TeamMember.objects.bulk_create(TeamMember(team=team, **row) for row in rows)


@transaction.atomic
def register_team(user, *, event: Event, team_name: str, members: Iterable[dict], team_code: Optional[str] = None) -> Team:
    """Team row and its members as one unit: either both exist or neither."""
    rows = normalize_members(members)
    team = create_team(user, event=event, team_name=team_name, team_code=team_code)
    TeamMember.objects.bulk_create(TeamMember(team=team, **row) for row in rows)
    return team


def rename_team(user, team: Team, team_name: str) -> Team:
    _require(TeamPolicy.can_edit_team(user, team))

    team_name = _bounded(team_name, TEAM_NAME_MAX_LENGTH, "team_name", "Team name")
    if not team_name:
        raise ValidationError({"team_name": "Team name is required."})

    team.team_name = team_name
    team.save(update_fields=['team_name'])
    _log(ACTIVITY_TEAM_RENAMED, user, team_id=team.id)
    return team


def replace_team_members(user, team: Team, members: Iterable[dict]) -> List[TeamMember]:
    """
    Delete every member of the team and insert the submitted four.

    Runs in one transaction, so a failed insert leaves the old members intact.
    """
    _require(TeamPolicy.can_edit_team(user, team))
    rows = normalize_members(members)

    with transaction.atomic():
        team.team_members.all().delete()
        created = TeamMember.objects.bulk_create(TeamMember(team=team, **row) for row in rows)

    _log(ACTIVITY_TEAM_MEMBERS_REPLACED, user, team_id=team.id)
    return created


def clear_team_members(user, team: Team) -> int:
    _require(TeamPolicy.can_edit_team(user, team))
    deleted, _ = team.team_members.all().delete()
    return deleted


def delete_team(user, team: Team):
    """Delete the team; its members go with it (FK cascade)."""
    _require(TeamPolicy.can_delete_team(user, team))
    team_id = team.id
    team.delete()
    _log(ACTIVITY_TEAM_DELETED, user, team_id=team_id)
