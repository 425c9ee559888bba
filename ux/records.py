# ux/records.py
"""
Client-side copies of backend rows.

Backends hand back rows keyed by table column names (the Supabase tables and
the Django serializers agree on them); these records are the immutable,
parsed form the rest of the client works with. Ids are always strings so a
Postgres uuid and a Django integer pk compare the same way.
"""
from dataclasses import dataclass, field
from typing import Optional, Tuple


def _str_or_empty(value) -> str:
    return "" if value is None else str(value)


@dataclass(frozen=True)
class UserIdentity:
    id: str
    email: str = ""
    display_name: str = ""
    avatar_url: str = ""

    @classmethod
    def from_auth_user(cls, user) -> "UserIdentity":
        """Build from a Supabase auth user (attributes, `user_metadata` dict)."""
        metadata = getattr(user, "user_metadata", None) or {}
        return cls(
            id=str(user.id),
            email=getattr(user, "email", None) or "",
            display_name=metadata.get("full_name") or metadata.get("name") or "",
            avatar_url=metadata.get("avatar_url") or metadata.get("picture") or "",
        )

    @classmethod
    def from_user_model(cls, user) -> "UserIdentity":
        """Build from a `users.User` row."""
        return cls(
            id=str(user.pk),
            email=user.email or "",
            display_name=user.full_name or "",
            avatar_url=user.avatar_url or "",
        )


@dataclass(frozen=True)
class EventRecord:
    id: str
    name: str
    event_date: str
    max_teams: int
    description: str = ""
    created_by: str = ""
    created_at: str = ""

    @classmethod
    def from_row(cls, row: dict) -> "EventRecord":
        return cls(
            id=str(row["id"]),
            name=row.get("name") or "",
            event_date=_str_or_empty(row.get("event_date")),
            max_teams=int(row.get("max_teams") or 0),
            description=row.get("description") or "",
            created_by=_str_or_empty(row.get("created_by")),
            created_at=_str_or_empty(row.get("created_at")),
        )


@dataclass(frozen=True)
class MemberRecord:
    member_name: str
    member_email: str
    member_position: int
    team_id: str = ""

    @classmethod
    def from_row(cls, row: dict) -> "MemberRecord":
        return cls(
            member_name=row.get("member_name") or "",
            member_email=row.get("member_email") or "",
            member_position=int(row["member_position"]),
            team_id=_str_or_empty(row.get("team_id")),
        )


@dataclass(frozen=True)
class TeamRecord:
    id: str
    team_name: str
    team_code: str
    event_id: str
    captain_id: str
    created_at: str = ""
    captain_name: str = ""
    captain_email: str = ""
    members: Tuple[MemberRecord, ...] = field(default_factory=tuple)

    @classmethod
    def from_row(cls, row: dict) -> "TeamRecord":
        captain = row.get("captain") or {}
        members = sorted(
            (MemberRecord.from_row(member) for member in row.get("team_members") or []),
            key=lambda member: member.member_position,
        )
        return cls(
            id=str(row["id"]),
            team_name=row.get("team_name") or "",
            team_code=_str_or_empty(row.get("team_code")),
            event_id=_str_or_empty(row.get("event_id")),
            captain_id=_str_or_empty(row.get("captain_id")),
            created_at=_str_or_empty(row.get("created_at")),
            captain_name=captain.get("full_name") or "",
            captain_email=captain.get("email") or "",
            members=tuple(members),
        )

    def is_captained_by(self, user: Optional[UserIdentity]) -> bool:
        return user is not None and user.id == self.captain_id
