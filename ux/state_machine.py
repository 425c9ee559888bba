# ux/state_machine.py
"""
View controller of the registration client.

Enforces valid view transitions:
events → create_event → events
events → teams → events

Any transition not in VALID_TRANSITIONS is rejected. The other named
transitions here are the only code allowed to mutate an AppState.
"""
from typing import List, Optional, Tuple
import logging

from .records import EventRecord, TeamRecord, UserIdentity
from .state import (
    AppState,
    SCREEN_LOADING,
    SCREEN_SIGN_IN,
    SCREEN_TEAM_FORM,
    VIEW_CHOICES,
    VIEW_CREATE_EVENT,
    VIEW_EVENTS,
    VIEW_TEAMS,
)

logger = logging.getLogger('teamreg.ux')


# Valid view transitions: from_view -> list of allowed to_views
VALID_TRANSITIONS = {
    VIEW_EVENTS: [VIEW_CREATE_EVENT, VIEW_TEAMS],
    VIEW_CREATE_EVENT: [VIEW_EVENTS],
    VIEW_TEAMS: [VIEW_EVENTS],
}


def can_transition(state: AppState, new_view: str) -> Tuple[bool, str]:
    """
    Check if the controller can move to a new view.

    Returns (can_transition: bool, reason: str)
    """
    if state.current_user is None:
        return False, "Sign in required"

    if new_view == state.view:
        return True, "Same view"

    if new_view not in VIEW_CHOICES:
        return False, f"Invalid view: {new_view}"

    if new_view == VIEW_TEAMS and state.selected_event is None:
        return False, "No event selected"

    if new_view not in VALID_TRANSITIONS.get(state.view, []):
        return False, f"Cannot transition from '{state.view}' to '{new_view}'"

    return True, ""


def transition(state: AppState, new_view: str) -> Tuple[bool, str]:
    """
    Attempt to move the controller to a new view.

    Leaving `teams` always closes the team overlay.
    Returns (success: bool, message: str)
    """
    can, reason = can_transition(state, new_view)

    if not can:
        logger.warning(f"Invalid view transition attempted: from={state.view}, to={new_view}. Reason: {reason}")
        return False, reason

    old_view = state.view
    state.view = new_view
    state.validation_message = None
    if new_view != VIEW_TEAMS:
        _close_overlay(state)

    logger.debug(f"View transition: from={old_view}, to={new_view}")
    return True, f"Transitioned from '{old_view}' to '{new_view}'"


def current_screen(state: AppState) -> str:
    """Map the whole state to the one screen that should be rendered."""
    if state.loading:
        return SCREEN_LOADING
    if state.current_user is None:
        return SCREEN_SIGN_IN
    if state.view == VIEW_TEAMS and state.show_team_form:
        return SCREEN_TEAM_FORM
    return state.view


# ─────────────────────────────────────────────────────────────
# Session
# ─────────────────────────────────────────────────────────────

def reset_session_data(state: AppState):
    """Drop everything loaded for the current user and go back to the catalog."""
    state.events = []
    state.teams = []
    state.selected_event = None
    state.view = VIEW_EVENTS
    state.is_submitting = False
    state.validation_message = None
    _close_overlay(state)


def session_changed(state: AppState, user: Optional[UserIdentity]) -> bool:
    """
    Apply a new identity (or its absence).

    Losing the user, or switching to a different one, clears all downstream
    state so nothing of one session leaks into the next. Returns True when
    a (new) user became present.
    """
    previous = state.current_user
    state.loading = False

    if previous is not None and (user is None or user.id != previous.id):
        reset_session_data(state)
        logger.info(f"Session ended for user={previous.id}; client state cleared")

    state.current_user = user

    signed_in = user is not None and (previous is None or previous.id != user.id)
    if signed_in:
        logger.info(f"Session started for user={user.id}")
    return signed_in


# ─────────────────────────────────────────────────────────────
# Catalog
# ─────────────────────────────────────────────────────────────

def events_loaded(state: AppState, events: List[EventRecord]):
    state.events = list(events)


def open_create_event(state: AppState) -> Tuple[bool, str]:
    return transition(state, VIEW_CREATE_EVENT)


def close_create_event(state: AppState) -> Tuple[bool, str]:
    return transition(state, VIEW_EVENTS)


def event_created(state: AppState, event: EventRecord):
    state.events = [event] + [existing for existing in state.events if existing.id != event.id]
    transition(state, VIEW_EVENTS)


def show_events(state: AppState) -> Tuple[bool, str]:
    """Back to the catalog; the roster no longer has a selected event."""
    ok, reason = transition(state, VIEW_EVENTS)
    if ok:
        state.selected_event = None
    return ok, reason


# ─────────────────────────────────────────────────────────────
# Roster
# ─────────────────────────────────────────────────────────────

def select_event(state: AppState, event: EventRecord) -> Tuple[bool, str]:
    previous = state.selected_event
    state.selected_event = event

    ok, reason = transition(state, VIEW_TEAMS)
    if not ok:
        state.selected_event = previous
    return ok, reason


def teams_loaded(state: AppState, event_id: str, teams: List[TeamRecord]) -> bool:
    """Store a roster unless the user has moved on to another event meanwhile."""
    if state.selected_event is None or state.selected_event.id != str(event_id):
        logger.debug(f"Discarding roster for event={event_id}; no longer selected")
        return False

    state.teams = list(teams)
    if state.editing_team is not None:
        state.editing_team = next((t for t in state.teams if t.id == state.editing_team.id), None)
    return True


def open_team_form(state: AppState, team: Optional[TeamRecord] = None) -> Tuple[bool, str]:
    if state.view != VIEW_TEAMS:
        return False, "Team form is only available on the roster"

    state.show_team_form = True
    state.editing_team = team
    state.validation_message = None
    return True, ""


def close_team_form(state: AppState):
    _close_overlay(state)


def _close_overlay(state: AppState):
    state.show_team_form = False
    state.editing_team = None


# ─────────────────────────────────────────────────────────────
# Forms
# ─────────────────────────────────────────────────────────────

def begin_submit(state: AppState) -> bool:
    """Claim the submit control; False while another submit is in flight."""
    if state.is_submitting:
        logger.info("Ignoring submit while another one is in flight")
        return False
    state.is_submitting = True
    state.validation_message = None
    return True


def end_submit(state: AppState):
    state.is_submitting = False


def validation_failed(state: AppState, message: str):
    state.validation_message = message
