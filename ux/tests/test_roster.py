import asyncio

from django.test import SimpleTestCase

from ux.app import RegistrationApp
from ux.forms import TEAM_NAME_MESSAGE
from ux.records import UserIdentity
from ux.state import SCREEN_TEAM_FORM, VIEW_TEAMS
from ux.tests.fakes import ALICE, BOB, FOUR_MEMBERS, FakeBackend, FakeServer, team_form


def confirm_yes(message):
    return True


def confirm_no(message):
    return False


class TeamRosterTestCase(SimpleTestCase):
    def setUp(self):
        self.server = FakeServer()
        self.event = self.server.add_event("Spring Cup", max_teams=8)

    def make_app(self, user=ALICE, **kwargs):
        backend = FakeBackend(self.server, user=user)
        kwargs.setdefault("confirm", confirm_yes)
        return backend, RegistrationApp(backend, **kwargs)

    async def open_roster(self, app):
        await app.start()
        await app.select_event(self.event.id)
        self.assertEqual(app.screen, VIEW_TEAMS)

    async def register(self, app, name="Rockets", members=None):
        app.open_team_form()
        return await app.save_team(team_form(name, members))


class RegisterTeamTests(TeamRosterTestCase):
    async def test_register_team_scenario(self):
        backend, app = self.make_app()
        await self.open_roster(app)

        app.open_team_form()
        self.assertEqual(app.screen, SCREEN_TEAM_FORM)
        team_id = await app.save_team(team_form("Rockets"))

        self.assertIsNotNone(team_id)
        self.assertEqual(app.screen, VIEW_TEAMS)
        self.assertEqual(len(app.state.teams), 1)

        team = app.state.teams[0]
        self.assertEqual(team.team_name, "Rockets")
        self.assertEqual(team.team_code, "TC0001")
        self.assertEqual(team.captain_id, ALICE.id)
        self.assertEqual(team.event_id, self.event.id)
        self.assertEqual([m.member_position for m in team.members], [1, 2, 3, 4])
        self.assertEqual([m.member_name for m in team.members], [m["name"] for m in FOUR_MEMBERS])

        card = app.team_cards()[0]
        self.assertEqual(card["code"], "#TC0001")
        self.assertEqual(card["captain"], "Alice Captain")
        self.assertTrue(card["can_edit"])

    async def test_badge_counts_loaded_teams(self):
        backend, app = self.make_app()
        await self.open_roster(app)
        await self.register(app)

        cards = app.event_cards()
        self.assertEqual(cards[0]["badge"], "1/8 Teams")

    async def test_injected_code_generator(self):
        async def fixed_code():
            return "XYZ789"

        backend, app = self.make_app(code_generator=fixed_code)
        await self.open_roster(app)
        await self.register(app)

        self.assertEqual(app.state.teams[0].team_code, "XYZ789")
        self.assertEqual(backend.calls_to("generate_team_code"), 0)

    async def test_validation_stops_before_backend(self):
        backend, app = self.make_app()
        await self.open_roster(app)

        app.open_team_form()
        result = await app.save_team(team_form("   "))

        self.assertIsNone(result)
        self.assertEqual(app.screen, SCREEN_TEAM_FORM)
        self.assertEqual(app.state.validation_message, TEAM_NAME_MESSAGE)
        self.assertEqual(backend.calls_to("generate_team_code"), 0)
        self.assertEqual(backend.calls_to("insert_team"), 0)

    async def test_code_generation_failure_is_reported(self):
        backend, app = self.make_app()
        await self.open_roster(app)
        backend.fail("generate_team_code", "function generate_team_code() does not exist")

        self.assertIsNone(await self.register(app))

        self.assertEqual(backend.calls_to("insert_team"), 0)
        self.assertEqual(app.screen, SCREEN_TEAM_FORM)
        self.assertEqual(
            app.notifier.last.text,
            "Error generating team code: function generate_team_code() does not exist",
        )

    async def test_failed_member_insert_removes_team(self):
        backend, app = self.make_app()
        await self.open_roster(app)
        backend.fail("insert_team_members", "value too long for type character varying(150)")

        self.assertIsNone(await self.register(app))

        self.assertEqual(self.server.teams, {})
        self.assertEqual(backend.calls_to("delete_team"), 1)
        self.assertEqual(app.screen, SCREEN_TEAM_FORM)
        self.assertFalse(app.state.is_submitting)
        self.assertEqual(
            [n.text for n in app.notifier.history],
            ["Error adding team members: value too long for type character varying(150)"],
        )

    async def test_failed_compensation_is_logged(self):
        backend, app = self.make_app()
        await self.open_roster(app)
        backend.fail("insert_team_members", "insert failed")
        backend.fail("delete_team", "delete failed")

        with self.assertLogs('teamreg.ux', level='ERROR') as logs:
            await self.register(app)

        self.assertIn("Orphaned team", logs.output[-1])
        self.assertEqual(len(self.server.teams), 1)

    async def test_double_submit_sends_one_request(self):
        backend, app = self.make_app()
        await self.open_roster(app)
        app.open_team_form()

        results = await asyncio.gather(
            app.save_team(team_form("Rockets")),
            app.save_team(team_form("Rockets")),
        )

        self.assertEqual(sum(1 for r in results if r is not None), 1)
        self.assertEqual(backend.calls_to("insert_team"), 1)
        self.assertEqual(len(self.server.teams), 1)

    async def test_concurrent_sessions_get_unique_codes(self):
        apps = []
        for n in range(6):
            user = UserIdentity(id=f"u-{n}", email=f"captain{n}@example.com")
            _, app = self.make_app(user=user)
            await self.open_roster(app)
            app.open_team_form()
            apps.append(app)

        await asyncio.gather(*(app.save_team(team_form(f"Team {i}")) for i, app in enumerate(apps)))

        codes = [team["team_code"] for team in self.server.teams.values()]
        self.assertEqual(len(codes), 6)
        self.assertEqual(len(set(codes)), 6)
        for team_id in self.server.teams:
            positions = sorted(m["member_position"] for m in self.server.members[team_id])
            self.assertEqual(positions, [1, 2, 3, 4])

    async def test_duplicate_code_is_rejected_by_backend(self):
        async def same_code():
            return "SAME22"

        _, first = self.make_app(code_generator=same_code)
        _, second = self.make_app(user=BOB, code_generator=same_code)
        await self.open_roster(first)
        await self.open_roster(second)

        self.assertIsNotNone(await self.register(first))
        self.assertIsNone(await self.register(second))

        self.assertEqual(len(self.server.teams), 1)
        self.assertIn("Error creating team: duplicate key", second.notifier.last.text)


class EditTeamTests(TeamRosterTestCase):
    async def register_first_team(self, app):
        await self.open_roster(app)
        await self.register(app)
        return app.state.teams[0]

    async def test_rename_keeps_code_captain_and_event(self):
        backend, app = self.make_app()
        team = await self.register_first_team(app)

        app.open_team_form(team)
        self.assertEqual(app.team_form_initial()["team_name"], "Rockets")

        members = [dict(m) for m in FOUR_MEMBERS]
        members.reverse()
        self.assertEqual(await app.save_team(team_form("Comets", members)), team.id)

        updated = app.state.teams[0]
        self.assertEqual(updated.team_name, "Comets")
        self.assertEqual(updated.team_code, team.team_code)
        self.assertEqual(updated.captain_id, team.captain_id)
        self.assertEqual(updated.event_id, team.event_id)
        self.assertEqual([m.member_name for m in updated.members], ["Dan", "Cat", "Ben", "Ann"])
        self.assertEqual([m.member_position for m in updated.members], [1, 2, 3, 4])
        self.assertEqual(backend.calls_to("replace_team_members"), 1)
        self.assertEqual(app.screen, VIEW_TEAMS)

    async def test_member_replace_failure_keeps_form_open(self):
        backend, app = self.make_app()
        team = await self.register_first_team(app)
        backend.fail("replace_team_members", "connection reset")

        app.open_team_form(team)
        self.assertIsNone(await app.save_team(team_form("Comets")))

        self.assertEqual(app.screen, SCREEN_TEAM_FORM)
        self.assertEqual(app.notifier.last.text, "Error updating team members: connection reset")
        self.assertEqual(len(self.server.members[team.id]), 4)

    async def test_non_captain_sees_no_controls(self):
        _, alice_app = self.make_app()
        await self.register_first_team(alice_app)

        _, bob_app = self.make_app(user=BOB)
        await self.open_roster(bob_app)

        card = bob_app.team_cards()[0]
        self.assertFalse(card["can_edit"])
        self.assertFalse(card["can_delete"])
        # no display name: the header shows the e-mail
        self.assertEqual(bob_app.header()["display_name"], BOB.email)

    async def test_backend_denies_non_captain_edit(self):
        _, alice_app = self.make_app()
        team = await self.register_first_team(alice_app)

        bob_backend, bob_app = self.make_app(user=BOB)
        await self.open_roster(bob_app)
        # bypass the hidden controls
        bob_app.open_team_form(bob_app.state.teams[0])

        self.assertIsNone(await bob_app.save_team(team_form("Hijacked")))

        self.assertEqual(self.server.teams[team.id]["team_name"], "Rockets")
        self.assertTrue(bob_app.notifier.last.text.startswith("Error updating team: "))

    async def test_backend_denies_non_captain_delete(self):
        _, alice_app = self.make_app()
        team = await self.register_first_team(alice_app)

        _, bob_app = self.make_app(user=BOB)
        await self.open_roster(bob_app)

        self.assertFalse(await bob_app.delete_team(team.id))
        self.assertIn(team.id, self.server.teams)
        self.assertTrue(bob_app.notifier.last.text.startswith("Error deleting team: "))


class DeleteTeamTests(TeamRosterTestCase):
    async def test_delete_team_scenario(self):
        backend, app = self.make_app()
        await self.open_roster(app)
        await self.register(app)
        team_id = app.state.teams[0].id

        self.assertTrue(await app.delete_team(team_id))

        self.assertEqual(app.state.teams, [])
        self.assertNotIn(team_id, self.server.teams)
        self.assertNotIn(team_id, self.server.members)

    async def test_declined_confirmation_keeps_team(self):
        backend, app = self.make_app(confirm=confirm_no)
        await self.open_roster(app)
        await self.register(app)

        self.assertFalse(await app.delete_team(app.state.teams[0].id))

        self.assertEqual(len(self.server.teams), 1)
        self.assertEqual(backend.calls_to("delete_team"), 0)

    async def test_async_confirmation(self):
        async def ask(message):
            self.assertEqual(message, "Do you really want to delete this team?")
            return True

        backend, app = self.make_app(confirm=ask)
        await self.open_roster(app)
        await self.register(app)

        self.assertTrue(await app.delete_team(app.state.teams[0].id))
        self.assertEqual(self.server.teams, {})

    async def test_without_confirm_handler_nothing_is_deleted(self):
        backend = FakeBackend(self.server, user=ALICE)
        app = RegistrationApp(backend)
        await self.open_roster(app)
        await self.register(app)

        with self.assertLogs('teamreg.ux', level='WARNING'):
            self.assertFalse(await app.delete_team(app.state.teams[0].id))

        self.assertEqual(len(self.server.teams), 1)


class RosterLoadTests(TeamRosterTestCase):
    async def test_load_failure_keeps_prior_roster(self):
        backend, app = self.make_app()
        await self.open_roster(app)
        await self.register(app)
        backend.fail("list_teams", "timeout")

        self.assertFalse(await app.roster.load_teams(self.event.id))

        self.assertEqual(len(app.state.teams), 1)
        self.assertEqual(app.notifier.last.text, "Error loading teams: timeout")

    async def test_unknown_event_cannot_be_selected(self):
        backend, app = self.make_app()
        await app.start()

        with self.assertLogs('teamreg.ux', level='WARNING'):
            self.assertFalse(await app.select_event("ev-missing"))

        self.assertIsNone(app.state.selected_event)
