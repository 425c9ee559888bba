# ux/services/session.py

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Set

from ux import state_machine
from ux.backends.base import BackendError, RegistrationBackend
from ux.notifications import Notifier
from ux.records import UserIdentity
from ux.state import AppState

logger = logging.getLogger('teamreg.ux')


class SessionManager:
    """
    Tracks the signed-in identity.

    The backend's auth stream is the only source of identity changes: sign-in
    and sign-out merely ask the backend to start them. Losing the user clears
    every piece of loaded data; gaining one runs `on_signed_in`.
    """

    def __init__(
        self,
        state: AppState,
        backend: RegistrationBackend,
        notifier: Notifier,
        *,
        provider: str,
        redirect_to: str,
        on_signed_in: Optional[Callable[[], Awaitable]] = None,
    ):
        self.state = state
        self.backend = backend
        self.notifier = notifier
        self.provider = provider
        self.redirect_to = redirect_to
        self.on_signed_in = on_signed_in
        self._subscription = None
        self._tasks: Set[asyncio.Task] = set()

    async def start(self):
        try:
            user = await self.backend.get_current_session()
        except BackendError as exc:
            self.notifier.error("restoring your session", exc.message)
            user = None

        signed_in = state_machine.session_changed(self.state, user)
        self._subscription = self.backend.on_auth_state_change(self._handle_auth_change)

        if signed_in and self.on_signed_in is not None:
            await self.on_signed_in()

    async def stop(self):
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
        await self.settle()

    async def settle(self):
        """Wait for the side effects spawned by auth-stream callbacks."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    def _handle_auth_change(self, event: str, user: Optional[UserIdentity]):
        logger.info(f"Auth state change: {event} user={user.id if user else None}")
        signed_in = state_machine.session_changed(self.state, user)

        if signed_in and self.on_signed_in is not None:
            self._spawn(self.on_signed_in())

    def _spawn(self, coro):
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def sign_in(self) -> Optional[str]:
        try:
            return await self.backend.sign_in_with_oauth(self.provider, self.redirect_to)
        except BackendError as exc:
            self.notifier.error("signing in", exc.message)
            return None

    async def sign_out(self) -> bool:
        try:
            await self.backend.sign_out()
        except BackendError as exc:
            self.notifier.error("signing out", exc.message)
            return False
        return True
