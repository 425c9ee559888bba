# ux/services/catalog.py

import logging
from typing import Optional

from ux import state_machine
from ux.backends.base import BackendError, RegistrationBackend
from ux.forms import FormValidationError, clean_event_form
from ux.notifications import Notifier
from ux.records import EventRecord
from ux.state import AppState

logger = logging.getLogger('teamreg.ux')


class EventCatalog:
    """Loads the event list and creates events."""

    def __init__(self, state: AppState, backend: RegistrationBackend, notifier: Notifier):
        self.state = state
        self.backend = backend
        self.notifier = notifier

    async def load_events(self) -> bool:
        user = self.state.current_user
        if user is None:
            return False

        try:
            events = await self.backend.list_events()
        except BackendError as exc:
            self.notifier.error("loading events", exc.message)
            return False

        if self.state.current_user != user:
            logger.info("Discarding event list loaded for a session that has ended")
            return False

        state_machine.events_loaded(self.state, events)
        return True

    def open_create_event(self):
        return state_machine.open_create_event(self.state)

    def cancel_create_event(self):
        return state_machine.close_create_event(self.state)

    async def create_event(self, form: dict) -> Optional[EventRecord]:
        """
        Validate and submit the event form.

        `form` is `{name, description, date, max_teams}`. On any failure the
        form stays open and None is returned.
        """
        user = self.state.current_user
        if user is None:
            return None

        try:
            cleaned = clean_event_form(form)
        except FormValidationError as exc:
            state_machine.validation_failed(self.state, exc.message)
            self.notifier.validation(exc.message)
            return None

        if not state_machine.begin_submit(self.state):
            return None

        try:
            event = await self.backend.insert_event({
                "name": cleaned["name"],
                "description": cleaned["description"],
                "event_date": cleaned["date"],
                "max_teams": cleaned["max_teams"],
                "created_by": user.id,
            })
        except BackendError as exc:
            self.notifier.error("creating event", exc.message)
            return None
        finally:
            state_machine.end_submit(self.state)

        if self.state.current_user != user:
            return None

        state_machine.event_created(self.state, event)
        logger.info(f"Event created: event={event.id}, user={user.id}")
        return event
