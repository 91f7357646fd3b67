"""
Session endpoints: email and Apple sign-in, profile, sign-out.
"""

from typing import Optional

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field

from staly.api.deps import SessionControllerDep
from staly.core.exceptions import (
    AccountAlreadyExistsError,
    AccountNotFoundError,
    NotAuthenticatedError,
    RemoteSignInError,
    StalyError,
)
from staly.models.schemas import AppleIDCredential, AppleSignInRequest, PersonName
from staly.services.session_controller import SessionController, SessionState


router = APIRouter()

ERROR_STATUS = {
    NotAuthenticatedError: status.HTTP_401_UNAUTHORIZED,
    AccountNotFoundError: status.HTTP_404_NOT_FOUND,
    AccountAlreadyExistsError: status.HTTP_409_CONFLICT,
    RemoteSignInError: status.HTTP_502_BAD_GATEWAY,
    StalyError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


# Request Models
class SignInRequest(BaseModel):
    """Email sign-in request."""

    email: str
    password: str


class SignUpRequest(BaseModel):
    """Email sign-up request."""

    email: str
    password: str
    displayName: Optional[str] = None


class AppleSignInPayload(BaseModel):
    """Apple ID credential as relayed by the client."""

    subject: str = Field(..., min_length=1)
    email: Optional[str] = None
    givenName: Optional[str] = None
    familyName: Optional[str] = None
    identityToken: Optional[str] = None


class ProfileUpdateRequest(BaseModel):
    """Display name update; blank or null clears it."""

    displayName: Optional[str] = None


def session_result(ok: bool, session: SessionController) -> SessionState:
    """Return the session snapshot, or raise with the controller's error."""
    if ok:
        return session.snapshot()
    status_code = ERROR_STATUS.get(type(session.last_error), status.HTTP_400_BAD_REQUEST)
    raise HTTPException(status_code=status_code, detail=session.error_message)


@router.get("", response_model=SessionState)
async def get_session(session: SessionControllerDep):
    """Current user, public id and last error."""
    return session.snapshot()


@router.post("/sign-in", response_model=SessionState)
async def sign_in(request: SignInRequest, session: SessionControllerDep):
    ok = await session.sign_in(request.email, request.password)
    return session_result(ok, session)


@router.post(
    "/sign-up",
    response_model=SessionState,
    status_code=status.HTTP_201_CREATED,
)
async def sign_up(request: SignUpRequest, session: SessionControllerDep):
    """
    Register a new email account.

    The new account is signed in immediately.
    """
    ok = await session.sign_up(request.email, request.password, request.displayName)
    return session_result(ok, session)


@router.post("/apple/prepare", response_model=AppleSignInRequest)
async def prepare_apple_sign_in(session: SessionControllerDep):
    """Issue the hashed nonce the client passes to Apple."""
    return session.prepare_apple_sign_in()


@router.post("/apple", response_model=SessionState)
async def apple_sign_in(payload: AppleSignInPayload, session: SessionControllerDep):
    full_name = None
    if payload.givenName or payload.familyName:
        full_name = PersonName(given_name=payload.givenName, family_name=payload.familyName)
    credential = AppleIDCredential(
        user=payload.subject,
        email=payload.email,
        full_name=full_name,
        identity_token=payload.identityToken.encode("utf-8") if payload.identityToken else None,
    )
    ok = await session.handle_apple_sign_in(credential)
    return session_result(ok, session)


@router.patch("/profile", response_model=SessionState)
async def update_profile(request: ProfileUpdateRequest, session: SessionControllerDep):
    ok = await session.update_display_name(request.displayName)
    return session_result(ok, session)


@router.post("/sign-out", response_model=SessionState)
async def sign_out(session: SessionControllerDep):
    ok = await session.sign_out()
    return session_result(ok, session)
