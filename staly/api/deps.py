"""
API route dependencies.
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from staly.container import AppContainer
from staly.core.exceptions import NotAuthenticatedError
from staly.models.schemas import User
from staly.services.session_controller import SessionController
from staly.services.stays_service import StaysService


def get_container(request: Request) -> AppContainer:
    """Container built at startup (or installed by tests)."""
    return request.app.state.container


def get_session_controller(container: AppContainer = Depends(get_container)) -> SessionController:
    return container.session


def get_stays_service(container: AppContainer = Depends(get_container)) -> StaysService:
    return container.stays


def get_current_user(
    session: SessionController = Depends(get_session_controller),
) -> User:
    """
    Dependency to get the signed-in user.

    Requires an active session.
    """
    if session.user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=NotAuthenticatedError().user_message,
        )
    return session.user


# Dependency annotations
ContainerDep = Annotated[AppContainer, Depends(get_container)]
SessionControllerDep = Annotated[SessionController, Depends(get_session_controller)]
StaysServiceDep = Annotated[StaysService, Depends(get_stays_service)]
CurrentUserDep = Annotated[User, Depends(get_current_user)]
