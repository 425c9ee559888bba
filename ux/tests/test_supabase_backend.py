from collections import defaultdict, deque
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

from django.test import SimpleTestCase
from postgrest.exceptions import APIError
from supabase_auth.errors import AuthError

from ux.backends.base import BackendError
from ux.backends.supabase import SupabaseBackend


class QueryStub:
    """Records builder calls; `execute` answers with the queued result."""

    def __init__(self, target, log, result):
        self.target = target
        self.calls = []
        self._result = result
        log.append(self)

    def __getattr__(self, name):
        def method(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            return self
        return method

    async def execute(self):
        if isinstance(self._result, Exception):
            raise self._result
        return SimpleNamespace(data=self._result)


class ClientStub:
    def __init__(self):
        self.results = defaultdict(deque)
        self.queries = []
        self.auth = MagicMock()

    def answer(self, target, *results):
        self.results[target].extend(results)

    def table(self, name):
        return QueryStub(name, self.queries, self.results[name].popleft())

    def rpc(self, name, params):
        query = QueryStub(f"rpc:{name}", self.queries, self.results[f"rpc:{name}"].popleft())
        query.calls.append(("rpc", (name, params), {}))
        return query


def api_error(message, code="42501"):
    return APIError({"message": message, "code": code, "hint": None, "details": None})


MEMBERS = [
    {"team_id": "t-1", "member_name": n, "member_email": f"{n.lower()}@example.com", "member_position": p}
    for p, n in enumerate(["Ann", "Ben", "Cat", "Dan"], start=1)
]


class SupabaseBackendTests(SimpleTestCase):
    def setUp(self):
        self.stub = ClientStub()
        self.backend = SupabaseBackend(self.stub)

    async def test_list_events_newest_first(self):
        self.stub.answer("events", [
            {"id": 2, "name": "Spring Cup", "event_date": "2024-04-01", "max_teams": 8, "created_by": "u-1"},
        ])

        events = await self.backend.list_events()

        query = self.stub.queries[0]
        self.assertEqual(query.calls, [("select", ("*",), {}), ("order", ("created_at",), {"desc": True})])
        self.assertEqual(events[0].id, "2")
        self.assertEqual(events[0].max_teams, 8)

    async def test_list_teams_joins_captain_and_members(self):
        self.stub.answer("teams", [{
            "id": "t-1",
            "team_name": "Rockets",
            "team_code": "ABC234",
            "event_id": "ev-1",
            "captain_id": "u-1",
            "captain": {"full_name": "Alice", "email": "alice@example.com"},
            "team_members": list(reversed(MEMBERS)),
        }])

        teams = await self.backend.list_teams("ev-1")

        calls = self.stub.queries[0].calls
        self.assertEqual(calls[0], ("select", (SupabaseBackend.TEAM_SELECT,), {}))
        self.assertIn(("eq", ("event_id", "ev-1"), {}), calls)
        self.assertEqual(teams[0].captain_name, "Alice")
        self.assertEqual([m.member_position for m in teams[0].members], [1, 2, 3, 4])

    async def test_api_error_becomes_backend_error(self):
        self.stub.answer("teams", api_error("new row violates row-level security policy"))

        with self.assertRaises(BackendError) as ctx:
            await self.backend.insert_team({"team_name": "Rockets"})

        self.assertEqual(ctx.exception.message, "new row violates row-level security policy")
        self.assertEqual(ctx.exception.code, "42501")

    async def test_update_touching_no_row_is_an_error(self):
        self.stub.answer("teams", [])

        with self.assertRaises(BackendError):
            await self.backend.update_team_name("t-1", "Comets")

        self.assertIn(("update", ({"team_name": "Comets"},), {}), self.stub.queries[0].calls)

    async def test_delete_touching_no_row_is_an_error(self):
        self.stub.answer("teams", [])

        with self.assertRaises(BackendError):
            await self.backend.delete_team("t-1")

    async def test_replace_members_restores_on_failed_insert(self):
        previous = [dict(m, member_name=m["member_name"] + " Old") for m in MEMBERS]
        self.stub.answer("team_members", previous, [], api_error("insert failed", code="23514"), previous)

        with self.assertRaises(BackendError):
            await self.backend.replace_team_members("t-1", MEMBERS)

        select, delete, insert, restore = self.stub.queries
        self.assertEqual(delete.calls[0][0], "delete")
        self.assertEqual(insert.calls, [("insert", (MEMBERS,), {})])
        self.assertEqual(restore.calls, [("insert", (previous,), {})])

    async def test_replace_members(self):
        self.stub.answer("team_members", list(MEMBERS), [], MEMBERS)

        await self.backend.replace_team_members("t-1", MEMBERS)

        self.assertEqual(len(self.stub.queries), 3)

    async def test_generate_team_code(self):
        self.stub.answer("rpc:generate_team_code", "XK4P7Q")

        self.assertEqual(await self.backend.generate_team_code(), "XK4P7Q")
        self.assertEqual(self.stub.queries[0].calls, [("rpc", ("generate_team_code", {}), {})])

    async def test_current_session(self):
        user = SimpleNamespace(
            id="5f0c",
            email="alice@example.com",
            user_metadata={"full_name": "Alice", "avatar_url": "https://img/a.png"},
        )
        self.stub.auth.get_session = AsyncMock(return_value=SimpleNamespace(user=user))

        identity = await self.backend.get_current_session()

        self.assertEqual(identity.id, "5f0c")
        self.assertEqual(identity.display_name, "Alice")
        self.assertEqual(identity.avatar_url, "https://img/a.png")

    async def test_no_session(self):
        self.stub.auth.get_session = AsyncMock(return_value=None)
        self.assertIsNone(await self.backend.get_current_session())

    async def test_sign_in_returns_url(self):
        self.stub.auth.sign_in_with_oauth = AsyncMock(
            return_value=SimpleNamespace(provider="google", url="https://x.supabase.co/auth/v1/authorize")
        )

        url = await self.backend.sign_in_with_oauth("google", "http://localhost:3000")

        self.assertEqual(url, "https://x.supabase.co/auth/v1/authorize")
        self.stub.auth.sign_in_with_oauth.assert_awaited_once_with(
            {"provider": "google", "options": {"redirect_to": "http://localhost:3000"}}
        )

    async def test_auth_error_becomes_backend_error(self):
        self.stub.auth.sign_out = AsyncMock(side_effect=AuthError("Session not found", None))

        with self.assertRaises(BackendError) as ctx:
            await self.backend.sign_out()

        self.assertEqual(ctx.exception.message, "Session not found")

    def test_auth_state_change_is_translated(self):
        received = []
        self.backend.on_auth_state_change(lambda event, user: received.append((event, user)))
        callback = self.stub.auth.on_auth_state_change.call_args[0][0]

        callback("SIGNED_IN", SimpleNamespace(user=SimpleNamespace(id="u-1", email="a@example.com", user_metadata={})))
        callback("SIGNED_OUT", None)

        self.assertEqual(received[0][0], "SIGNED_IN")
        self.assertEqual(received[0][1].id, "u-1")
        self.assertEqual(received[1], ("SIGNED_OUT", None))
