"""
Persistence of accounts, profiles and the current session.

Pure data access: each collection is one JSON blob. A missing or corrupt
blob is read as an empty collection.
"""

import json
import logging
from typing import Optional, TypeVar

from pydantic import TypeAdapter, ValidationError

from staly.models.schemas import EmailAccount, ExternalAccount, Profile, Record, User
from staly.storage.kv import KeyValueStore

logger = logging.getLogger(__name__)

SESSION_KEY = "current-session"
EMAIL_ACCOUNTS_KEY = "email-accounts"
EXTERNAL_ACCOUNTS_KEY = "external-accounts"
PROFILES_KEY = "profiles"

R = TypeVar("R", bound=Record)


class IdentityStore:
    """Load/save whole identity collections."""

    def __init__(self, kv: KeyValueStore):
        self.kv = kv

    # ============ Email Accounts ============

    async def load_email_accounts(self) -> dict[str, EmailAccount]:
        """Accounts keyed by normalized email."""
        return await self._load_map(EMAIL_ACCOUNTS_KEY, EmailAccount)

    async def save_email_accounts(self, accounts: dict[str, EmailAccount]) -> None:
        await self._save_map(EMAIL_ACCOUNTS_KEY, accounts)

    # ============ External Accounts ============

    async def load_external_accounts(self) -> dict[str, ExternalAccount]:
        """Accounts keyed by provider subject id."""
        return await self._load_map(EXTERNAL_ACCOUNTS_KEY, ExternalAccount)

    async def save_external_accounts(self, accounts: dict[str, ExternalAccount]) -> None:
        await self._save_map(EXTERNAL_ACCOUNTS_KEY, accounts)

    # ============ Profiles ============

    async def load_profiles(self) -> dict[str, Profile]:
        """Profiles keyed by user id."""
        return await self._load_map(PROFILES_KEY, Profile)

    async def save_profiles(self, profiles: dict[str, Profile]) -> None:
        await self._save_map(PROFILES_KEY, profiles)

    # ============ Session ============

    async def load_session(self) -> Optional[User]:
        raw = await self.kv.get(SESSION_KEY)
        if raw is None:
            return None
        try:
            return User.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Discarding unreadable {SESSION_KEY} blob: {e.error_count()} errors")
            return None

    async def save_session(self, user: Optional[User]) -> None:
        """Persist the signed-in user, or clear the session when None."""
        if user is None:
            await self.kv.delete(SESSION_KEY)
        else:
            await self.kv.set(SESSION_KEY, json.dumps(user.to_json_dict()))

    # ============ Helpers ============

    async def _load_map(self, key: str, model: type[R]) -> dict[str, R]:
        raw = await self.kv.get(key)
        if raw is None:
            return {}
        try:
            return TypeAdapter(dict[str, model]).validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Discarding unreadable {key} blob: {e.error_count()} errors")
            return {}

    async def _save_map(self, key: str, records: dict[str, Record]) -> None:
        payload = {k: record.to_json_dict() for k, record in records.items()}
        await self.kv.set(key, json.dumps(payload))
