# events/models.py
from django.db import models
from django.conf import settings

from core.constants import (
    DEFAULT_MAX_TEAMS,
    EVENT_NAME_MAX_LENGTH,
    MEMBER_EMAIL_MAX_LENGTH,
    MEMBER_NAME_MAX_LENGTH,
    TEAM_NAME_MAX_LENGTH,
    TEAM_SIZE,
)


class Event(models.Model):
    """
    A dated activity that teams register against.

    Created by any signed-in user; there is no update or delete path.
    """
    name = models.CharField(max_length=EVENT_NAME_MAX_LENGTH)
    description = models.TextField(blank=True, default="")
    event_date = models.DateField()
    max_teams = models.PositiveIntegerField(default=DEFAULT_MAX_TEAMS)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='created_events',
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['created_at'], name='event_created_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(max_teams__gte=1),
                name='event_max_teams_positive',
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.event_date})"


class Team(models.Model):
    """
    A registered team: one captain, one event, one unique code.

    Captain, event and code are fixed at creation; only the name changes.
    """
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name='teams')
    team_name = models.CharField(max_length=TEAM_NAME_MAX_LENGTH)
    team_code = models.CharField(max_length=16, unique=True, editable=False)
    captain = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='captained_teams',
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['event', 'created_at'], name='team_event_created_idx'),
        ]

    def __str__(self):
        return f"{self.team_name} #{self.team_code}"

    @property
    def is_complete(self):
        """Four members stored; False only while a registration is half done."""
        return self.team_members.count() == TEAM_SIZE


class TeamMember(models.Model):
    """
    One of the exactly four people on a team.

    Members are never edited one by one; the whole set is replaced.
    """
    team = models.ForeignKey(Team, on_delete=models.CASCADE, related_name='team_members')
    member_name = models.CharField(max_length=MEMBER_NAME_MAX_LENGTH)
    member_email = models.CharField(max_length=MEMBER_EMAIL_MAX_LENGTH)
    member_position = models.PositiveSmallIntegerField()

    class Meta:
        ordering = ['member_position']
        constraints = [
            models.UniqueConstraint(
                fields=['team', 'member_position'],
                name='team_member_unique_position',
            ),
            models.CheckConstraint(
                condition=models.Q(member_position__gte=1, member_position__lte=TEAM_SIZE),
                name='team_member_position_range',
            ),
        ]

    def __str__(self):
        return f"{self.member_position}. {self.member_name} ({self.team.team_name})"
