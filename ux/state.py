# ux/state.py
"""
The single application-state container of the registration client.

Nothing mutates an AppState directly except the named transitions in
`ux.state_machine`; services call those, presenters only read.
"""
from dataclasses import dataclass, field
from typing import List, Optional

from .records import EventRecord, TeamRecord, UserIdentity

# Views (the controller's states)
VIEW_EVENTS = "events"
VIEW_CREATE_EVENT = "create_event"
VIEW_TEAMS = "teams"

VIEW_CHOICES = [VIEW_EVENTS, VIEW_CREATE_EVENT, VIEW_TEAMS]

# Screens (what gets rendered; views plus the session gate and overlay)
SCREEN_LOADING = "loading"
SCREEN_SIGN_IN = "sign_in"
SCREEN_TEAM_FORM = "team_form"


@dataclass
class AppState:
    # session
    current_user: Optional[UserIdentity] = None
    loading: bool = True

    # view controller
    view: str = VIEW_EVENTS

    # catalog
    events: List[EventRecord] = field(default_factory=list)

    # roster
    selected_event: Optional[EventRecord] = None
    teams: List[TeamRecord] = field(default_factory=list)

    # forms
    show_team_form: bool = False
    editing_team: Optional[TeamRecord] = None
    is_submitting: bool = False
    validation_message: Optional[str] = None
