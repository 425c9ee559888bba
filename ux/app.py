# ux/app.py
"""
The registration client as one object.

A UI shell (web view, TUI, test) holds a RegistrationApp, calls its actions
in response to user input and renders `screen` with the matching view
method after every call.
"""
import logging
from typing import Optional, Union

from django.conf import settings

from . import presenters, state_machine
from .backends.base import RegistrationBackend
from .notifications import Notifier
from .records import EventRecord, TeamRecord
from .services import EventCatalog, SessionManager, TeamRoster
from .services.roster import CodeGenerator, Confirm
from .state import AppState

logger = logging.getLogger('teamreg.ux')


class RegistrationApp:
    def __init__(
        self,
        backend: RegistrationBackend,
        *,
        notifier: Optional[Notifier] = None,
        code_generator: Optional[CodeGenerator] = None,
        confirm: Optional[Confirm] = None,
        provider: Optional[str] = None,
        redirect_to: Optional[str] = None,
    ):
        self.state = AppState()
        self.backend = backend
        self.notifier = notifier or Notifier()

        self.catalog = EventCatalog(self.state, backend, self.notifier)
        self.roster = TeamRoster(
            self.state,
            backend,
            self.notifier,
            code_generator=code_generator,
            confirm=confirm,
        )
        self.session = SessionManager(
            self.state,
            backend,
            self.notifier,
            provider=provider or settings.TEAMREG_OAUTH_PROVIDER,
            redirect_to=redirect_to or settings.TEAMREG_REDIRECT_URL,
            on_signed_in=self.catalog.load_events,
        )

    @classmethod
    async def from_settings(cls, **kwargs) -> "RegistrationApp":
        """App bound to the configured Supabase project."""
        from .backends.supabase import SupabaseBackend

        return cls(await SupabaseBackend.from_settings(), **kwargs)

    # --- lifecycle ---

    async def start(self):
        await self.session.start()

    async def stop(self):
        await self.session.stop()

    async def settle(self):
        await self.session.settle()

    @property
    def screen(self) -> str:
        return state_machine.current_screen(self.state)

    # --- session ---

    async def sign_in(self) -> Optional[str]:
        return await self.session.sign_in()

    async def sign_out(self) -> bool:
        return await self.session.sign_out()

    # --- catalog ---

    async def load_events(self) -> bool:
        return await self.catalog.load_events()

    def open_create_event(self):
        return self.catalog.open_create_event()

    def cancel_create_event(self):
        return self.catalog.cancel_create_event()

    async def create_event(self, form: dict) -> Optional[EventRecord]:
        return await self.catalog.create_event(form)

    def show_events(self):
        return state_machine.show_events(self.state)

    # --- roster ---

    async def select_event(self, event: Union[EventRecord, str]) -> bool:
        if not isinstance(event, EventRecord):
            event_id = str(event)
            event = next((e for e in self.state.events if e.id == event_id), None)
            if event is None:
                logger.warning(f"Cannot select unknown event={event_id}")
                return False
        return await self.roster.select_event(event)

    def open_team_form(self, team: Optional[TeamRecord] = None):
        return self.roster.open_team_form(team)

    def close_team_form(self):
        self.roster.close_team_form()

    async def save_team(self, form: dict) -> Optional[str]:
        return await self.roster.save_team(form)

    async def delete_team(self, team_id: str) -> bool:
        return await self.roster.delete_team(team_id)

    # --- views ---

    def header(self):
        return presenters.header(self.state)

    def event_cards(self):
        return presenters.event_cards(self.state)

    def team_cards(self):
        return presenters.team_cards(self.state)

    def team_form_initial(self):
        return presenters.team_form_initial(self.state.editing_team)
