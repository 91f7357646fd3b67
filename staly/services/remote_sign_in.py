"""
Client for an optional remote identity backend.
"""

import logging
from typing import Optional, Protocol

import httpx

from staly.core.exceptions import RemoteSignInError
from staly.models.schemas import RemoteSignInResult

logger = logging.getLogger(__name__)


class RemoteSignIn(Protocol):
    """Exchanges a provider identity token for a backend identity."""

    async def sign_in(
        self,
        id_token: str,
        nonce: str,
        full_name: Optional[str],
    ) -> RemoteSignInResult:
        ...


class HttpRemoteSignIn:
    """
    Remote sign-in over HTTP.

    POSTs ``{"idToken", "nonce", "fullName"}`` as JSON and expects
    ``{"uid", "email", "displayName"}`` back.
    """

    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url
        self.timeout = timeout
        self._transport = transport

    async def sign_in(
        self,
        id_token: str,
        nonce: str,
        full_name: Optional[str],
    ) -> RemoteSignInResult:
        payload = {"idToken": id_token, "nonce": nonce, "fullName": full_name}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.url, json=payload)
                response.raise_for_status()
            return RemoteSignInResult.model_validate(response.json())
        except httpx.HTTPStatusError as e:
            logger.error(f"Remote sign-in rejected with status {e.response.status_code}")
            raise RemoteSignInError(f"Remote sign-in returned {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error(f"Remote sign-in request failed: {e}")
            raise RemoteSignInError(f"Remote sign-in request failed: {e}") from e
        except ValueError as e:
            raise RemoteSignInError(f"Remote sign-in returned an invalid body: {e}") from e
