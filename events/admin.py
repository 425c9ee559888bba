from django.contrib import admin
from .models import Event, Team, TeamMember


class TeamMemberInline(admin.TabularInline):
    model = TeamMember
    extra = 0
    ordering = ('member_position',)


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ('name', 'event_date', 'max_teams', 'created_by', 'created_at')
    list_filter = ('event_date',)
    search_fields = ('name', 'description', 'created_by__email')
    date_hierarchy = 'event_date'


@admin.register(Team)
class TeamAdmin(admin.ModelAdmin):
    list_display = ('team_name', 'team_code', 'event', 'captain', 'is_complete', 'created_at')
    list_filter = ('event',)
    search_fields = ('team_name', 'team_code', 'captain__email')
    readonly_fields = ('team_code',)
    inlines = [TeamMemberInline]
