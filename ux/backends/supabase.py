# ux/backends/supabase.py
"""
RegistrationBackend over a Supabase project (supabase-py, async client).

Authorization is entirely the project's row-level security: a write the
caller may not make comes back as an error, or as an update/delete that
touched no row, which is reported the same way.
"""
import logging
from typing import List, Optional

from postgrest.exceptions import APIError
from supabase import AsyncClient
from supabase_auth.errors import AuthError

from core.supabase_client import get_supabase_client
from ux.records import EventRecord, TeamRecord, UserIdentity
from .base import BackendError, RegistrationBackend

logger = logging.getLogger('teamreg.supabase')


class SupabaseBackend(RegistrationBackend):
    TEAM_SELECT = "*, captain:profiles!teams_captain_id_fkey(full_name, email), team_members(*)"

    def __init__(self, client: AsyncClient):
        self._client = client

    @classmethod
    async def from_settings(cls) -> "SupabaseBackend":
        return cls(await get_supabase_client())

    async def _execute(self, query) -> list:
        try:
            response = await query.execute()
        except APIError as exc:
            raise BackendError(exc.message or str(exc), code=exc.code) from exc
        return response.data

    # --- identity ---

    async def get_current_session(self) -> Optional[UserIdentity]:
        try:
            session = await self._client.auth.get_session()
        except AuthError as exc:
            raise BackendError(exc.message, code=getattr(exc, "code", None)) from exc

        if session is None or session.user is None:
            return None
        return UserIdentity.from_auth_user(session.user)

    def on_auth_state_change(self, handler):
        def callback(event, session):
            user = session.user if session is not None else None
            handler(str(event), UserIdentity.from_auth_user(user) if user is not None else None)

        return self._client.auth.on_auth_state_change(callback)

    async def sign_in_with_oauth(self, provider: str, redirect_to: str) -> Optional[str]:
        try:
            response = await self._client.auth.sign_in_with_oauth(
                {"provider": provider, "options": {"redirect_to": redirect_to}}
            )
        except AuthError as exc:
            raise BackendError(exc.message, code=getattr(exc, "code", None)) from exc
        return getattr(response, "url", None)

    async def sign_out(self):
        try:
            await self._client.auth.sign_out()
        except AuthError as exc:
            raise BackendError(exc.message, code=getattr(exc, "code", None)) from exc

    # --- events ---

    async def list_events(self) -> List[EventRecord]:
        rows = await self._execute(
            self._client.table("events").select("*").order("created_at", desc=True)
        )
        return [EventRecord.from_row(row) for row in rows or []]

    async def insert_event(self, row: dict) -> EventRecord:
        rows = await self._execute(self._client.table("events").insert(row))
        if not rows:
            raise BackendError("Event was not created")
        return EventRecord.from_row(rows[0])

    # --- teams ---

    async def list_teams(self, event_id: str) -> List[TeamRecord]:
        rows = await self._execute(
            self._client.table("teams")
            .select(self.TEAM_SELECT)
            .eq("event_id", event_id)
            .order("created_at", desc=True)
        )
        return [TeamRecord.from_row(row) for row in rows or []]

    async def insert_team(self, row: dict) -> TeamRecord:
        rows = await self._execute(self._client.table("teams").insert(row))
        if not rows:
            raise BackendError("Team was not created")
        return TeamRecord.from_row(rows[0])

    async def update_team_name(self, team_id: str, team_name: str):
        rows = await self._execute(
            self._client.table("teams").update({"team_name": team_name}).eq("id", team_id)
        )
        if not rows:
            raise BackendError("Team not found or you are not its captain")

    async def delete_team(self, team_id: str):
        rows = await self._execute(self._client.table("teams").delete().eq("id", team_id))
        if not rows:
            raise BackendError("Team not found or you are not its captain")

    # --- team members ---

    async def insert_team_members(self, rows: List[dict]):
        await self._execute(self._client.table("team_members").insert(rows))

    async def delete_team_members(self, team_id: str):
        await self._execute(self._client.table("team_members").delete().eq("team_id", team_id))

    async def replace_team_members(self, team_id: str, rows: List[dict]):
        """
        PostgREST has no multi-statement transaction, so the previous members
        are snapshotted and put back if the insert fails.
        """
        previous = await self._execute(
            self._client.table("team_members")
            .select("team_id, member_name, member_email, member_position")
            .eq("team_id", team_id)
            .order("member_position")
        )
        await self.delete_team_members(team_id)

        try:
            await self.insert_team_members(rows)
        except BackendError:
            if previous:
                try:
                    await self.insert_team_members(previous)
                except BackendError as restore_exc:
                    logger.error(f"Could not restore members of team={team_id}: {restore_exc.message}")
            raise

    # --- procedures ---

    async def generate_team_code(self) -> str:
        code = await self._execute(self._client.rpc("generate_team_code", {}))
        if not code:
            raise BackendError("No team code was generated")
        return str(code)
