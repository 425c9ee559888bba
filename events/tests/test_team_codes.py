from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from core.constants import TEAM_CODE_ALPHABET
from events.codes import TeamCodeExhausted, TeamCodeGenerator, generate_unique_team_code
from events.models import Event, Team


User = get_user_model()


class TeamCodeTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(username="captain", password="pass")
        self.event = Event.objects.create(name="Spring Cup", event_date="2024-04-01", created_by=self.user)

    def test_generator_uses_unambiguous_alphabet(self):
        code = TeamCodeGenerator(length=64)()
        self.assertEqual(len(code), 64)
        self.assertTrue(set(code) <= set(TEAM_CODE_ALPHABET))
        for ambiguous in "01IO":
            self.assertNotIn(ambiguous, TEAM_CODE_ALPHABET)

    @override_settings(TEAM_CODE_LENGTH=8)
    def test_length_from_settings(self):
        self.assertEqual(len(TeamCodeGenerator()()), 8)

    def test_collision_is_retried(self):
        Team.objects.create(event=self.event, team_name="Rockets", team_code="TAKEN2", captain=self.user)
        candidates = iter(["TAKEN2", "TAKEN2", "FRESH3"])

        with self.assertLogs('teamreg.events', level='WARNING') as logs:
            code = generate_unique_team_code(generator=lambda: next(candidates))

        self.assertEqual(code, "FRESH3")
        self.assertEqual(len(logs.output), 2)

    def test_exhausted_attempts(self):
        Team.objects.create(event=self.event, team_name="Rockets", team_code="TAKEN2", captain=self.user)

        with self.assertLogs('teamreg.events', level='WARNING'):
            with self.assertRaises(TeamCodeExhausted):
                generate_unique_team_code(generator=lambda: "TAKEN2", max_attempts=3)

    def test_codes_are_unique_across_many_teams(self):
        codes = set()
        for n in range(50):
            team = Team.objects.create(
                event=self.event,
                team_name=f"Team {n}",
                team_code=generate_unique_team_code(),
                captain=self.user,
            )
            codes.add(team.team_code)
        self.assertEqual(len(codes), 50)


class GenerateTeamCodeRpcTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(username="captain", password="pass")
        self.url = reverse("rpc-generate-team-code")

    def test_returns_bare_code(self):
        self.client.force_authenticate(user=self.user)

        resp = self.client.post(self.url)

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        code = resp.json()
        self.assertIsInstance(code, str)
        self.assertEqual(len(code), 6)

    def test_requires_authentication(self):
        resp = self.client.post(self.url)
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)
