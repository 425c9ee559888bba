# ux/services/roster.py

import inspect
import logging
from typing import Awaitable, Callable, List, Optional, Union

from core.constants import MEMBER_POSITIONS
from ux import state_machine
from ux.backends.base import BackendError, RegistrationBackend
from ux.forms import FormValidationError, clean_team_form
from ux.notifications import Notifier
from ux.records import EventRecord, TeamRecord, UserIdentity
from ux.state import AppState

logger = logging.getLogger('teamreg.ux')

# Produces a fresh unique team code; the backend procedure by default
CodeGenerator = Callable[[], Awaitable[str]]
# Asks the user to confirm a destructive action
Confirm = Callable[[str], Union[bool, Awaitable[bool]]]

DELETE_TEAM_PROMPT = "Do you really want to delete this team?"


def member_rows(team_id: str, members: List[dict]) -> List[dict]:
    """Team member rows in submission order, positions 1..4."""
    return [
        {
            "team_id": team_id,
            "member_name": member["name"],
            "member_email": member["email"],
            "member_position": position,
        }
        for position, member in zip(MEMBER_POSITIONS, members)
    ]


def _refuse(message: str) -> bool:
    logger.warning(f"No confirmation handler configured; refusing: {message}")
    return False


class TeamRoster:
    """
    Teams of the selected event: load, register, edit, delete.

    Registering is a saga: code, team row, member rows. If the member insert
    fails the team row is deleted again so no memberless team is left behind.
    Editing renames the team and replaces its members as one unit; code,
    captain and event never change.
    """

    def __init__(
        self,
        state: AppState,
        backend: RegistrationBackend,
        notifier: Notifier,
        *,
        code_generator: Optional[CodeGenerator] = None,
        confirm: Optional[Confirm] = None,
    ):
        self.state = state
        self.backend = backend
        self.notifier = notifier
        self.code_generator = code_generator or backend.generate_team_code
        self.confirm = confirm or _refuse

    # --- loading & navigation ---

    async def load_teams(self, event_id: Optional[str]) -> bool:
        if not event_id:
            return False

        try:
            teams = await self.backend.list_teams(event_id)
        except BackendError as exc:
            self.notifier.error("loading teams", exc.message)
            return False

        return state_machine.teams_loaded(self.state, str(event_id), teams)

    async def select_event(self, event: EventRecord) -> bool:
        ok, _ = state_machine.select_event(self.state, event)
        if not ok:
            return False
        await self.load_teams(event.id)
        return True

    def open_team_form(self, team: Optional[TeamRecord] = None):
        return state_machine.open_team_form(self.state, team)

    def close_team_form(self):
        state_machine.close_team_form(self.state)

    # --- writes ---

    async def save_team(self, form: dict) -> Optional[str]:
        """
        Validate and submit the team form for the selected event.

        `form` is `{team_name, members: [{name, email}] * 4}`; the team being
        edited (if any) is `state.editing_team`. Returns the team id on success;
        on failure the overlay stays open and None is returned.
        """
        user = self.state.current_user
        event = self.state.selected_event
        if user is None or event is None:
            return None

        try:
            cleaned = clean_team_form(form)
        except FormValidationError as exc:
            state_machine.validation_failed(self.state, exc.message)
            self.notifier.validation(exc.message)
            return None

        if not state_machine.begin_submit(self.state):
            return None

        existing = self.state.editing_team
        try:
            if existing is not None:
                team_id = await self._update_team(existing, cleaned)
            else:
                team_id = await self._create_team(user, event, cleaned)
        finally:
            state_machine.end_submit(self.state)

        if team_id is None:
            return None

        state_machine.close_team_form(self.state)
        await self.load_teams(event.id)
        return team_id

    async def _create_team(self, user: UserIdentity, event: EventRecord, cleaned: dict) -> Optional[str]:
        try:
            code = await self.code_generator()
        except BackendError as exc:
            self.notifier.error("generating team code", exc.message)
            return None

        try:
            team = await self.backend.insert_team({
                "team_name": cleaned["team_name"],
                "team_code": code,
                "event_id": event.id,
                "captain_id": user.id,
            })
        except BackendError as exc:
            self.notifier.error("creating team", exc.message)
            return None

        try:
            await self.backend.insert_team_members(member_rows(team.id, cleaned["members"]))
        except BackendError as exc:
            await self._discard_team(team)
            self.notifier.error("adding team members", exc.message)
            return None

        logger.info(f"Team registered: team={team.id}, code={team.team_code}, event={event.id}, captain={user.id}")
        return team.id

    async def _discard_team(self, team: TeamRecord):
        """Compensate a team row whose members could not be stored."""
        try:
            await self.backend.delete_team(team.id)
        except BackendError as exc:
            logger.error(f"Orphaned team left behind: team={team.id}, code={team.team_code}: {exc.message}")
        else:
            logger.info(f"Rolled back team={team.id} after failed member insert")

    async def _update_team(self, team: TeamRecord, cleaned: dict) -> Optional[str]:
        try:
            await self.backend.update_team_name(team.id, cleaned["team_name"])
        except BackendError as exc:
            self.notifier.error("updating team", exc.message)
            return None

        try:
            await self.backend.replace_team_members(team.id, member_rows(team.id, cleaned["members"]))
        except BackendError as exc:
            self.notifier.error("updating team members", exc.message)
            return None

        return team.id

    async def delete_team(self, team_id: str) -> bool:
        confirmed = self.confirm(DELETE_TEAM_PROMPT)
        if inspect.isawaitable(confirmed):
            confirmed = await confirmed
        if not confirmed:
            return False

        try:
            await self.backend.delete_team(team_id)
        except BackendError as exc:
            self.notifier.error("deleting team", exc.message)
            return False

        if self.state.selected_event is not None:
            await self.load_teams(self.state.selected_event.id)
        return True
