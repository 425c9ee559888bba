# ux/forms.py
"""
Validation of the event and team forms.

Runs before any backend call; a failure produces one human-readable message
and the form stays open. Only presence is checked: no e-mail format or
uniqueness rules live on the client.
"""
import datetime

from rest_framework import serializers

from core.constants import DEFAULT_MAX_TEAMS, TEAM_SIZE

REQUIRED_EVENT_FIELDS_MESSAGE = "Please fill in all required fields."
TEAM_NAME_MESSAGE = "Please enter a team name."
TEAM_SIZE_MESSAGE = f"A team needs exactly {TEAM_SIZE} members."


class FormValidationError(Exception):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def parse_max_teams(value) -> int:
    """Positive integers pass through; anything else means the default."""
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError):
        return DEFAULT_MAX_TEAMS
    return number if number > 0 else DEFAULT_MAX_TEAMS


def first_error(errors) -> str:
    """Flatten DRF's nested error structure to its first message."""
    if isinstance(errors, dict):
        for value in errors.values():
            return first_error(value)
        return ""
    if isinstance(errors, (list, tuple)):
        for value in errors:
            message = first_error(value)
            if message:
                return message
        return ""
    return str(errors)


class EventFormSerializer(serializers.Serializer):
    name = serializers.CharField(allow_blank=True, required=False, default="")
    description = serializers.CharField(allow_blank=True, required=False, default="")
    date = serializers.CharField(allow_blank=True, required=False, default="")
    max_teams = serializers.CharField(allow_blank=True, allow_null=True, required=False, default=None)

    def validate_date(self, value):
        if value:
            try:
                datetime.date.fromisoformat(value)
            except ValueError:
                raise serializers.ValidationError("Please enter the date as YYYY-MM-DD.")
        return value

    def validate(self, attrs):
        if not attrs["name"] or not attrs["date"]:
            raise serializers.ValidationError(REQUIRED_EVENT_FIELDS_MESSAGE)
        attrs["max_teams"] = parse_max_teams(attrs.get("max_teams"))
        return attrs


class MemberFormSerializer(serializers.Serializer):
    name = serializers.CharField(allow_blank=True, required=False, default="")
    email = serializers.CharField(allow_blank=True, required=False, default="")


class TeamFormSerializer(serializers.Serializer):
    team_name = serializers.CharField(allow_blank=True, required=False, default="")
    members = MemberFormSerializer(many=True, required=False, default=list)

    def validate_team_name(self, value):
        if not value:
            raise serializers.ValidationError(TEAM_NAME_MESSAGE)
        return value

    def validate_members(self, value):
        if len(value) != TEAM_SIZE:
            raise serializers.ValidationError(TEAM_SIZE_MESSAGE)
        for position, member in enumerate(value, start=1):
            if not member["name"] or not member["email"]:
                raise serializers.ValidationError(
                    f"Please enter a name and an email for member {position}."
                )
        return value


def clean_event_form(data: dict) -> dict:
    """Return `{name, description, date, max_teams}` or raise FormValidationError."""
    serializer = EventFormSerializer(data=data)
    if not serializer.is_valid():
        raise FormValidationError(first_error(serializer.errors))
    return dict(serializer.validated_data)


def clean_team_form(data: dict) -> dict:
    """Return `{team_name, members: [{name, email}] * 4}` or raise FormValidationError."""
    serializer = TeamFormSerializer(data=data)
    if not serializer.is_valid():
        raise FormValidationError(first_error(serializer.errors))
    validated = serializer.validated_data
    return {
        "team_name": validated["team_name"],
        "members": [{"name": m["name"], "email": m["email"]} for m in validated["members"]],
    }
