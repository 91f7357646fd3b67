"""
Session controller mediating between the UI surface and the auth service.
"""

import logging
from contextlib import contextmanager
from typing import Awaitable, Callable, Optional

from pydantic import BaseModel

from staly.core.exceptions import MissingThirdPartyNonceError, StalyError
from staly.core.security import public_user_id, random_nonce, sha256_hex
from staly.models.schemas import AppleIDCredential, AppleSignInRequest, User
from staly.services.auth_service import AuthService

logger = logging.getLogger(__name__)


class SessionState(BaseModel):
    """Snapshot of the controller's observable state."""

    user: Optional[User]
    publicUserId: Optional[str]
    isLoading: bool
    errorMessage: Optional[str]


class SessionController:
    """
    Holds the current user plus loading/error state for one UI session.

    Every auth action runs with ``is_loading`` set and ends with either a
    cleared ``error_message`` or the failing error's user message.
    ``is_loading`` only marks an action in flight; it does not lock.
    """

    def __init__(self, auth: AuthService):
        self.auth = auth
        self.user: Optional[User] = auth.current_user
        self.is_loading = False
        self.error_message: Optional[str] = None
        self.last_error: Optional[StalyError] = None
        self._apple_nonce: Optional[str] = None
        self._subscription = auth.user_changes.subscribe(self._on_user_change)

    @property
    def public_user_id(self) -> Optional[str]:
        if self.user is None:
            return None
        return public_user_id(self.user.id)

    def snapshot(self) -> SessionState:
        return SessionState(
            user=self.user,
            publicUserId=self.public_user_id,
            isLoading=self.is_loading,
            errorMessage=self.error_message,
        )

    async def sign_in(self, email: str, password: str) -> bool:
        return await self._perform_auth_action(
            lambda: self.auth.sign_in_with_email(email, password)
        )

    async def sign_up(self, email: str, password: str, display_name: Optional[str] = None) -> bool:
        return await self._perform_auth_action(
            lambda: self.auth.sign_up_with_email(email, password, display_name)
        )

    def prepare_apple_sign_in(self) -> AppleSignInRequest:
        """Start an Apple sign-in; the returned nonce is the hash of the one kept here."""
        nonce = random_nonce()
        self._apple_nonce = nonce
        self.clear_error()
        return AppleSignInRequest(nonce=sha256_hex(nonce))

    async def handle_apple_sign_in(self, credential: Optional[AppleIDCredential]) -> bool:
        raw_nonce = self._apple_nonce
        self._apple_nonce = None

        async def action():
            if raw_nonce is None:
                raise MissingThirdPartyNonceError("Apple sign-in completed without a prepared nonce")
            await self.auth.sign_in_with_apple(credential, raw_nonce)

        return await self._perform_auth_action(action)

    def handle_apple_sign_in_failure(self, error: Exception) -> None:
        """Record a provider-side failure (e.g. the user cancelled)."""
        self._apple_nonce = None
        self.error_message = getattr(error, "user_message", None) or str(error)

    async def sign_out(self) -> bool:
        return await self._perform_auth_action(self.auth.sign_out)

    async def update_display_name(self, display_name: Optional[str]) -> bool:
        return await self._perform_auth_action(
            lambda: self.auth.update_display_name(display_name)
        )

    def clear_error(self) -> None:
        self.error_message = None
        self.last_error = None

    def close(self) -> None:
        """Stop mirroring auth changes."""
        self._subscription.cancel()

    def _on_user_change(self, user: Optional[User]) -> None:
        self.user = user

    @contextmanager
    def _loading(self):
        self.is_loading = True
        try:
            yield
        finally:
            self.is_loading = False

    async def _perform_auth_action(self, action: Callable[[], Awaitable[object]]) -> bool:
        """Run an auth action; returns True on success."""
        with self._loading():
            try:
                await action()
            except StalyError as e:
                logger.info(f"Auth action failed: {e}")
                self.error_message = e.user_message
                self.last_error = e
                return False
            except Exception as e:
                logger.exception("Unexpected error during auth action")
                error = StalyError(f"Unexpected auth failure: {e}")
                self.error_message = error.user_message
                self.last_error = error
                return False
            self.error_message = None
            self.last_error = None
            return True
