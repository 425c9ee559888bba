from rest_framework import serializers

from core.constants import (
    DEFAULT_MAX_TEAMS,
    DESCRIPTION_MAX_LENGTH,
    MEMBER_EMAIL_MAX_LENGTH,
    MEMBER_NAME_MAX_LENGTH,
    TEAM_NAME_MAX_LENGTH,
    TEAM_SIZE,
)
from users.serializers import CaptainProfileSerializer
from .models import Event, Team, TeamMember
from .sanitizers import sanitize_html, sanitize_text


# -----------------------------------------
# EVENT SERIALIZER
# -----------------------------------------
class EventSerializer(serializers.ModelSerializer):
    created_by = serializers.CharField(source="created_by_id", read_only=True)
    max_teams = serializers.IntegerField(min_value=1, required=False, default=DEFAULT_MAX_TEAMS)

    class Meta:
        model = Event
        fields = [
            "id",
            "name",
            "description",
            "event_date",
            "max_teams",
            "created_by",
            "created_at",
        ]
        read_only_fields = ["id", "created_by", "created_at"]

    def validate_name(self, value):
        name = sanitize_text(value)
        if not name:
            raise serializers.ValidationError("Event name is required.")
        return name

    def validate_description(self, value):
        """Sanitize event description (allows limited HTML)."""
        return sanitize_html(value, max_length=DESCRIPTION_MAX_LENGTH)


# -----------------------------------------
# TEAM SERIALIZERS
# -----------------------------------------
class TeamMemberSerializer(serializers.ModelSerializer):
    team_id = serializers.CharField(read_only=True)

    class Meta:
        model = TeamMember
        fields = ["id", "team_id", "member_name", "member_email", "member_position"]
        read_only_fields = ["id", "team_id"]


class MemberInputSerializer(serializers.Serializer):
    """One submitted member row; positions are checked as a set by the list."""
    member_name = serializers.CharField(allow_blank=True, trim_whitespace=True, max_length=MEMBER_NAME_MAX_LENGTH)
    member_email = serializers.CharField(allow_blank=True, trim_whitespace=True, max_length=MEMBER_EMAIL_MAX_LENGTH)
    member_position = serializers.IntegerField(required=False, min_value=1, max_value=TEAM_SIZE)

    def validate(self, attrs):
        attrs["member_name"] = sanitize_text(attrs["member_name"])
        attrs["member_email"] = sanitize_text(attrs["member_email"])
        if not attrs["member_name"] or not attrs["member_email"]:
            raise serializers.ValidationError("Every member needs a name and an email.")
        return attrs


class TeamSerializer(serializers.ModelSerializer):
    """Read shape: team row joined with captain profile and ordered members."""
    event_id = serializers.CharField(read_only=True)
    captain_id = serializers.CharField(read_only=True)
    captain = CaptainProfileSerializer(read_only=True)
    team_members = TeamMemberSerializer(many=True, read_only=True)

    class Meta:
        model = Team
        fields = [
            "id",
            "team_name",
            "team_code",
            "event_id",
            "captain_id",
            "captain",
            "team_members",
            "created_at",
        ]
        read_only_fields = fields


class TeamCreateSerializer(serializers.Serializer):
    team_name = serializers.CharField(allow_blank=True, max_length=TEAM_NAME_MAX_LENGTH)
    event_id = serializers.PrimaryKeyRelatedField(queryset=Event.objects.all(), source="event")
    team_code = serializers.CharField(required=False, max_length=16)
    team_members = MemberInputSerializer(many=True, required=False)

    def validate_team_name(self, value):
        name = sanitize_text(value)
        if not name:
            raise serializers.ValidationError("Team name is required.")
        return name


class TeamUpdateSerializer(serializers.Serializer):
    """Only the name of a team can change."""
    IMMUTABLE_FIELDS = ("team_code", "captain_id", "event_id", "captain", "event")

    team_name = serializers.CharField(allow_blank=True, max_length=TEAM_NAME_MAX_LENGTH)

    def validate(self, attrs):
        locked = [field for field in self.IMMUTABLE_FIELDS if field in self.initial_data]
        if locked:
            raise serializers.ValidationError(
                {field: "This field cannot be changed after the team is created." for field in locked}
            )
        return attrs

    def validate_team_name(self, value):
        name = sanitize_text(value)
        if not name:
            raise serializers.ValidationError("Team name is required.")
        return name
