"""
Service wiring: pick storage/auth implementations from settings at startup.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine

from staly.config import Settings, get_settings
from staly.db.database import create_engine, create_session_maker, init_db
from staly.services.auth_service import LocalAuthService
from staly.services.remote_sign_in import HttpRemoteSignIn
from staly.services.session_controller import SessionController
from staly.services.stays_service import LocalStaysService, StaysService
from staly.storage.identity_store import IdentityStore
from staly.storage.kv import InMemoryKeyValueStore, KeyValueStore, SqlKeyValueStore
from staly.storage.stay_store import StayStore

logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    """The auth/stays services and the session controller built on them."""

    auth: LocalAuthService
    stays: StaysService
    session: SessionController
    engine: Optional[AsyncEngine] = None

    async def close(self) -> None:
        self.session.close()
        if self.engine is not None:
            await self.engine.dispose()


async def build_kv_store(settings: Settings) -> tuple[KeyValueStore, Optional[AsyncEngine]]:
    """Create the configured key-value backend (and its engine, if any)."""
    if settings.storage_backend == "memory":
        return InMemoryKeyValueStore(), None

    engine = create_engine(settings.database_url, echo=settings.debug)
    await init_db(engine)
    return SqlKeyValueStore(create_session_maker(engine)), engine


async def build_container(
    settings: Optional[Settings] = None,
    kv: Optional[KeyValueStore] = None,
) -> AppContainer:
    """
    Wire services and restore the persisted session.

    Args:
        settings: Defaults to the cached application settings
        kv: Use this store instead of the configured backend

    Returns:
        Ready AppContainer
    """
    settings = settings or get_settings()
    engine = None
    if kv is None:
        kv, engine = await build_kv_store(settings)

    remote = None
    if settings.remote_sign_in_url:
        remote = HttpRemoteSignIn(
            settings.remote_sign_in_url,
            timeout=settings.remote_sign_in_timeout_seconds,
        )

    auth = LocalAuthService(
        IdentityStore(kv),
        remote=remote,
        min_password_length=settings.min_password_length,
    )
    await auth.restore_session()

    logger.info(
        f"Storage backend: {settings.storage_backend}, "
        f"Apple sign-in: {'remote' if remote else 'local'}"
    )
    return AppContainer(
        auth=auth,
        stays=LocalStaysService(StayStore(kv)),
        session=SessionController(auth),
        engine=engine,
    )
