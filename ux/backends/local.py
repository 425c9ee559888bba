# ux/backends/local.py
"""
RegistrationBackend running in-process on the Django backend.

Used for development without a Supabase project and for end-to-end tests:
every call goes through `events.services`, so the same row-level rules that
guard the REST API guard this adapter. The ORM is synchronous; each call is
moved off the event loop with `sync_to_async`.
"""
import logging
from typing import List, Optional

from asgiref.sync import sync_to_async
from django.contrib.auth import get_user_model
from django.db import IntegrityError
from rest_framework.exceptions import APIException

from events import services
from events.codes import generate_unique_team_code
from events.models import Event, Team
from events.serializers import EventSerializer, TeamSerializer
from ux.records import EventRecord, TeamRecord, UserIdentity
from .base import (
    AUTH_SIGNED_IN,
    AUTH_SIGNED_OUT,
    AuthEventStream,
    BackendError,
    RegistrationBackend,
)

logger = logging.getLogger('teamreg.ux')

User = get_user_model()


def _detail_message(detail) -> str:
    if isinstance(detail, dict):
        return "; ".join(f"{key}: {_detail_message(value)}" for key, value in detail.items())
    if isinstance(detail, (list, tuple)):
        return " ".join(_detail_message(value) for value in detail)
    return str(detail)


class LocalBackend(RegistrationBackend):
    def __init__(self, user=None, *, oauth_user=None):
        self._user = user
        self._oauth_user = oauth_user
        self._stream = AuthEventStream()

    # --- identity ---

    def sign_in_as(self, user):
        """Make `user` the signed-in identity and notify subscribers."""
        self._user = user
        self._stream.emit(AUTH_SIGNED_IN, UserIdentity.from_user_model(user))

    async def get_current_session(self) -> Optional[UserIdentity]:
        if self._user is None:
            return None
        return UserIdentity.from_user_model(self._user)

    def on_auth_state_change(self, handler):
        return self._stream.subscribe(handler)

    async def sign_in_with_oauth(self, provider: str, redirect_to: str) -> Optional[str]:
        if self._oauth_user is None:
            raise BackendError(f"OAuth provider '{provider}' is not available on the local backend")
        self.sign_in_as(self._oauth_user)
        return redirect_to

    async def sign_out(self):
        self._user = None
        self._stream.emit(AUTH_SIGNED_OUT, None)

    # --- plumbing ---

    def _require_user(self):
        if self._user is None:
            raise BackendError("Not authenticated", code="not_authenticated")
        return self._user

    async def _call(self, func, *args):
        try:
            return await sync_to_async(func)(*args)
        except APIException as exc:
            raise BackendError(_detail_message(exc.detail), code=exc.default_code) from exc
        except (Event.DoesNotExist, Team.DoesNotExist) as exc:
            raise BackendError(str(exc), code="not_found") from exc
        except (ValueError, IntegrityError) as exc:
            raise BackendError(str(exc), code="invalid") from exc

    @staticmethod
    def _get_team(team_id) -> Team:
        return Team.objects.select_related('captain').get(pk=team_id)

    # --- events ---

    async def list_events(self) -> List[EventRecord]:
        return await self._call(self._list_events)

    def _list_events(self):
        self._require_user()
        rows = EventSerializer(services.list_events(), many=True).data
        return [EventRecord.from_row(row) for row in rows]

    async def insert_event(self, row: dict) -> EventRecord:
        return await self._call(self._insert_event, row)

    def _insert_event(self, row):
        user = self._require_user()
        if str(row.get("created_by")) != str(user.pk):
            raise BackendError("Events can only be created for yourself", code="permission_denied")

        fields = ("name", "description", "event_date", "max_teams")
        serializer = EventSerializer(data={key: row[key] for key in fields if row.get(key) is not None})
        serializer.is_valid(raise_exception=True)
        event = services.create_event(user, **serializer.validated_data)
        return EventRecord.from_row(EventSerializer(event).data)

    # --- teams ---

    async def list_teams(self, event_id: str) -> List[TeamRecord]:
        return await self._call(self._list_teams, event_id)

    def _list_teams(self, event_id):
        self._require_user()
        rows = TeamSerializer(services.list_teams(event_id), many=True).data
        return [TeamRecord.from_row(row) for row in rows]

    async def insert_team(self, row: dict) -> TeamRecord:
        return await self._call(self._insert_team, row)

    def _insert_team(self, row):
        user = self._require_user()
        if str(row.get("captain_id")) != str(user.pk):
            raise BackendError("You can only register teams you captain", code="permission_denied")

        event = Event.objects.get(pk=row["event_id"])
        team = services.create_team(
            user,
            event=event,
            team_name=row.get("team_name"),
            team_code=row.get("team_code"),
        )
        return TeamRecord.from_row(TeamSerializer(team).data)

    async def update_team_name(self, team_id: str, team_name: str):
        await self._call(self._update_team_name, team_id, team_name)

    def _update_team_name(self, team_id, team_name):
        services.rename_team(self._require_user(), self._get_team(team_id), team_name)

    async def delete_team(self, team_id: str):
        await self._call(self._delete_team, team_id)

    def _delete_team(self, team_id):
        services.delete_team(self._require_user(), self._get_team(team_id))

    # --- team members ---

    async def insert_team_members(self, rows: List[dict]):
        await self._call(self._insert_team_members, rows)

    def _insert_team_members(self, rows):
        user = self._require_user()
        team_ids = {str(row.get("team_id")) for row in rows}
        if len(team_ids) != 1:
            raise BackendError("Members must all belong to one team", code="invalid")
        services.add_team_members(user, self._get_team(team_ids.pop()), rows)

    async def delete_team_members(self, team_id: str):
        await self._call(self._delete_team_members, team_id)

    def _delete_team_members(self, team_id):
        services.clear_team_members(self._require_user(), self._get_team(team_id))

    async def replace_team_members(self, team_id: str, rows: List[dict]):
        await self._call(self._replace_team_members, team_id, rows)

    def _replace_team_members(self, team_id, rows):
        services.replace_team_members(self._require_user(), self._get_team(team_id), rows)

    # --- procedures ---

    async def generate_team_code(self) -> str:
        return await self._call(self._generate_team_code)

    def _generate_team_code(self):
        self._require_user()
        return generate_unique_team_code()
