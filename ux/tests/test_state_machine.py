from django.test import SimpleTestCase

from ux import state_machine
from ux.records import EventRecord, TeamRecord
from ux.state import (
    AppState,
    SCREEN_LOADING,
    SCREEN_SIGN_IN,
    SCREEN_TEAM_FORM,
    VIEW_CREATE_EVENT,
    VIEW_EVENTS,
    VIEW_TEAMS,
)
from ux.tests.fakes import ALICE, BOB


def make_event(event_id="ev-1", name="Spring Cup", max_teams=8):
    return EventRecord(id=event_id, name=name, event_date="2024-04-01", max_teams=max_teams)


def make_team(team_id="team-1", event_id="ev-1", captain_id=ALICE.id, name="Rockets"):
    return TeamRecord(id=team_id, team_name=name, team_code="ABC234", event_id=event_id, captain_id=captain_id)


class ViewTransitionTests(SimpleTestCase):
    def setUp(self):
        self.state = AppState()
        state_machine.session_changed(self.state, ALICE)

    def test_initial_screen_is_loading_until_session_known(self):
        state = AppState()
        self.assertEqual(state_machine.current_screen(state), SCREEN_LOADING)

        state_machine.session_changed(state, None)
        self.assertEqual(state_machine.current_screen(state), SCREEN_SIGN_IN)

    def test_signed_in_user_starts_on_events(self):
        self.assertEqual(state_machine.current_screen(self.state), VIEW_EVENTS)

    def test_create_event_round_trip(self):
        ok, _ = state_machine.open_create_event(self.state)
        self.assertTrue(ok)
        self.assertEqual(self.state.view, VIEW_CREATE_EVENT)

        ok, _ = state_machine.close_create_event(self.state)
        self.assertTrue(ok)
        self.assertEqual(self.state.view, VIEW_EVENTS)

    def test_teams_requires_selected_event(self):
        ok, reason = state_machine.transition(self.state, VIEW_TEAMS)
        self.assertFalse(ok)
        self.assertEqual(reason, "No event selected")
        self.assertEqual(self.state.view, VIEW_EVENTS)

    def test_create_event_to_teams_is_rejected(self):
        state_machine.open_create_event(self.state)
        self.state.selected_event = make_event()

        with self.assertLogs('teamreg.ux', level='WARNING'):
            ok, _ = state_machine.transition(self.state, VIEW_TEAMS)

        self.assertFalse(ok)
        self.assertEqual(self.state.view, VIEW_CREATE_EVENT)

    def test_unknown_view_is_rejected(self):
        ok, reason = state_machine.transition(self.state, "settings")
        self.assertFalse(ok)
        self.assertIn("Invalid view", reason)

    def test_no_transition_without_user(self):
        state = AppState()
        state_machine.session_changed(state, None)
        ok, reason = state_machine.open_create_event(state)
        self.assertFalse(ok)
        self.assertEqual(reason, "Sign in required")

    def test_select_event_reverts_on_rejection(self):
        state_machine.open_create_event(self.state)
        ok, _ = state_machine.select_event(self.state, make_event())
        self.assertFalse(ok)
        self.assertIsNone(self.state.selected_event)

    def test_leaving_teams_closes_overlay(self):
        state_machine.select_event(self.state, make_event())
        state_machine.open_team_form(self.state, make_team())
        self.assertEqual(state_machine.current_screen(self.state), SCREEN_TEAM_FORM)

        state_machine.show_events(self.state)

        self.assertEqual(self.state.view, VIEW_EVENTS)
        self.assertFalse(self.state.show_team_form)
        self.assertIsNone(self.state.editing_team)
        self.assertIsNone(self.state.selected_event)

    def test_roster_arriving_after_leaving_is_discarded(self):
        state_machine.select_event(self.state, make_event())
        state_machine.show_events(self.state)

        stored = state_machine.teams_loaded(self.state, "ev-1", [make_team()])

        self.assertFalse(stored)
        self.assertEqual(self.state.teams, [])
        ok, reason = state_machine.transition(self.state, VIEW_TEAMS)
        self.assertFalse(ok)
        self.assertEqual(reason, "No event selected")

    def test_team_form_only_on_roster(self):
        ok, _ = state_machine.open_team_form(self.state)
        self.assertFalse(ok)
        self.assertFalse(self.state.show_team_form)

    def test_event_created_prepends_and_returns_to_events(self):
        self.state.events = [make_event("ev-1", "Old")]
        state_machine.open_create_event(self.state)

        state_machine.event_created(self.state, make_event("ev-2", "New"))

        self.assertEqual([e.id for e in self.state.events], ["ev-2", "ev-1"])
        self.assertEqual(self.state.view, VIEW_EVENTS)


class SessionTransitionTests(SimpleTestCase):
    def _populated_state(self):
        state = AppState()
        state_machine.session_changed(state, ALICE)
        state.events = [make_event()]
        state_machine.select_event(state, make_event())
        state.teams = [make_team()]
        state_machine.open_team_form(state, make_team())
        state.validation_message = "Please enter a team name."
        return state

    def test_sign_out_clears_everything_from_any_view(self):
        state = self._populated_state()

        signed_in = state_machine.session_changed(state, None)

        self.assertFalse(signed_in)
        self.assertIsNone(state.current_user)
        self.assertEqual(state.events, [])
        self.assertEqual(state.teams, [])
        self.assertIsNone(state.selected_event)
        self.assertFalse(state.show_team_form)
        self.assertIsNone(state.editing_team)
        self.assertIsNone(state.validation_message)
        self.assertEqual(state.view, VIEW_EVENTS)
        self.assertEqual(state_machine.current_screen(state), SCREEN_SIGN_IN)

    def test_user_switch_clears_previous_data(self):
        state = self._populated_state()

        signed_in = state_machine.session_changed(state, BOB)

        self.assertTrue(signed_in)
        self.assertEqual(state.current_user, BOB)
        self.assertEqual(state.teams, [])
        self.assertIsNone(state.selected_event)

    def test_same_user_refresh_keeps_data(self):
        state = self._populated_state()

        signed_in = state_machine.session_changed(state, ALICE)

        self.assertFalse(signed_in)
        self.assertEqual(len(state.teams), 1)
        self.assertEqual(state.view, VIEW_TEAMS)


class RosterTransitionTests(SimpleTestCase):
    def setUp(self):
        self.state = AppState()
        state_machine.session_changed(self.state, ALICE)
        state_machine.select_event(self.state, make_event("ev-1"))

    def test_roster_for_other_event_is_discarded(self):
        stored = state_machine.teams_loaded(self.state, "ev-2", [make_team(event_id="ev-2")])
        self.assertFalse(stored)
        self.assertEqual(self.state.teams, [])

    def test_roster_refreshes_editing_team(self):
        state_machine.open_team_form(self.state, make_team(name="Old"))

        state_machine.teams_loaded(self.state, "ev-1", [make_team(name="New")])

        self.assertEqual(self.state.editing_team.team_name, "New")

    def test_double_submit_is_rejected(self):
        self.assertTrue(state_machine.begin_submit(self.state))
        self.assertFalse(state_machine.begin_submit(self.state))

        state_machine.end_submit(self.state)
        self.assertTrue(state_machine.begin_submit(self.state))
