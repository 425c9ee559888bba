# ux/presenters.py
"""
Render-ready data for each screen.

Read-only views over AppState; a UI shell renders these dicts as they are.
"""
from typing import List, Optional
from urllib.parse import quote

from core.constants import TEAM_SIZE
from .records import TeamRecord, UserIdentity
from .state import AppState

AVATAR_FALLBACK_URL = "https://ui-avatars.com/api/?name={name}&background=4285f4&color=fff"


def display_name(user: UserIdentity) -> str:
    return user.display_name or user.email


def avatar_url(user: UserIdentity) -> str:
    if user.avatar_url:
        return user.avatar_url
    return AVATAR_FALLBACK_URL.format(name=quote(display_name(user)))


def header(state: AppState) -> Optional[dict]:
    user = state.current_user
    if user is None:
        return None
    return {
        "display_name": display_name(user),
        "email": user.email,
        "avatar_url": avatar_url(user),
    }


def team_count(state: AppState, event_id: str) -> int:
    """Teams of the event among the loaded roster."""
    return sum(1 for team in state.teams if team.event_id == event_id)


def event_cards(state: AppState) -> List[dict]:
    cards = []
    for event in state.events:
        count = team_count(state, event.id)
        cards.append({
            "id": event.id,
            "name": event.name,
            "description": event.description,
            "event_date": event.event_date,
            "team_count": count,
            "max_teams": event.max_teams,
            "badge": f"{count}/{event.max_teams} Teams",
        })
    return cards


def can_manage_team(user: Optional[UserIdentity], team: TeamRecord) -> bool:
    """Edit/delete controls are shown to the captain only."""
    return team.is_captained_by(user)


def team_cards(state: AppState) -> List[dict]:
    event = state.selected_event
    if event is None:
        return []

    user = state.current_user
    cards = []
    for team in state.teams:
        if team.event_id != event.id:
            continue
        manageable = can_manage_team(user, team)
        cards.append({
            "id": team.id,
            "team_name": team.team_name,
            "code": f"#{team.team_code}",
            "captain": team.captain_name or team.captain_email,
            "members": [
                {
                    "position": member.member_position,
                    "name": member.member_name,
                    "email": member.member_email,
                }
                for member in sorted(team.members, key=lambda m: m.member_position)
            ],
            "can_edit": manageable,
            "can_delete": manageable,
        })
    return cards


def team_form_initial(team: Optional[TeamRecord] = None) -> dict:
    """Form values: the team's members in position order, or four blank rows."""
    if team is None:
        return {
            "team_name": "",
            "members": [{"name": "", "email": ""} for _ in range(TEAM_SIZE)],
        }
    return {
        "team_name": team.team_name,
        "members": [
            {"name": member.member_name, "email": member.member_email}
            for member in sorted(team.members, key=lambda m: m.member_position)
        ],
    }
