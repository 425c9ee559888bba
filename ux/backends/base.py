# ux/backends/base.py
"""
The backend collaborator surface the client consumes.

One abstract class stands for the managed backend: hosted identity, the
events/teams/team_members tables and the team-code procedure. Every call is
a coroutine; any failure surfaces as BackendError carrying the backend's
message.
"""
import abc
from typing import Callable, List, Optional

from ux.records import EventRecord, TeamRecord, UserIdentity

# Auth-state change event names (same vocabulary as Supabase)
AUTH_SIGNED_IN = "SIGNED_IN"
AUTH_SIGNED_OUT = "SIGNED_OUT"
AUTH_USER_UPDATED = "USER_UPDATED"

AuthChangeHandler = Callable[[str, Optional[UserIdentity]], None]


class BackendError(Exception):
    def __init__(self, message: str, *, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code


class AuthSubscription:
    def __init__(self, stream: "AuthEventStream", handler: AuthChangeHandler):
        self._stream = stream
        self.handler = handler

    def unsubscribe(self):
        self._stream.discard(self)


class AuthEventStream:
    """Fan-out of auth-state changes for backends without their own stream."""

    def __init__(self):
        self._subscriptions: List[AuthSubscription] = []

    def subscribe(self, handler: AuthChangeHandler) -> AuthSubscription:
        subscription = AuthSubscription(self, handler)
        self._subscriptions.append(subscription)
        return subscription

    def discard(self, subscription: AuthSubscription):
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    def emit(self, event: str, user: Optional[UserIdentity]):
        for subscription in list(self._subscriptions):
            subscription.handler(event, user)


class RegistrationBackend(abc.ABC):

    # --- identity ---

    @abc.abstractmethod
    async def get_current_session(self) -> Optional[UserIdentity]:
        ...

    @abc.abstractmethod
    def on_auth_state_change(self, handler: AuthChangeHandler):
        """Subscribe; returns an object with `unsubscribe()`."""

    @abc.abstractmethod
    async def sign_in_with_oauth(self, provider: str, redirect_to: str) -> Optional[str]:
        """Start the OAuth flow; returns the authorization URL if there is one."""

    @abc.abstractmethod
    async def sign_out(self):
        ...

    # --- events ---

    @abc.abstractmethod
    async def list_events(self) -> List[EventRecord]:
        """All events, newest first."""

    @abc.abstractmethod
    async def insert_event(self, row: dict) -> EventRecord:
        ...

    # --- teams ---

    @abc.abstractmethod
    async def list_teams(self, event_id: str) -> List[TeamRecord]:
        """Teams of one event with captain profile and members, newest first."""

    @abc.abstractmethod
    async def insert_team(self, row: dict) -> TeamRecord:
        ...

    @abc.abstractmethod
    async def update_team_name(self, team_id: str, team_name: str):
        ...

    @abc.abstractmethod
    async def delete_team(self, team_id: str):
        ...

    # --- team members ---

    @abc.abstractmethod
    async def insert_team_members(self, rows: List[dict]):
        ...

    @abc.abstractmethod
    async def delete_team_members(self, team_id: str):
        ...

    @abc.abstractmethod
    async def replace_team_members(self, team_id: str, rows: List[dict]):
        """Delete-all-then-insert as one unit: old members survive a failed insert."""

    # --- procedures ---

    @abc.abstractmethod
    async def generate_team_code(self) -> str:
        ...
