"""
Authentication service: email and Apple sign-in over the local identity store.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from staly.config import settings
from staly.core.exceptions import (
    AccountAlreadyExistsError,
    AccountNotFoundError,
    InvalidCredentialsError,
    InvalidThirdPartyCredentialError,
    InvalidThirdPartyTokenError,
    NotAuthenticatedError,
)
from staly.core.localization import localized_text
from staly.core.observable import ValueStream
from staly.core.security import generate_user_id, hash_password, verify_password
from staly.models.schemas import AppleIDCredential, EmailAccount, ExternalAccount, Profile, User
from staly.services.remote_sign_in import RemoteSignIn
from staly.storage.identity_store import IdentityStore

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    """Trim and lowercase; the result is the email account key."""
    return email.strip().lower()


def normalize_display_name(name: Optional[str]) -> Optional[str]:
    """Trim; blank names become None."""
    if name is None:
        return None
    trimmed = name.strip()
    return trimmed or None


class AuthService(ABC):
    """
    Owns the current session.

    ``user_changes`` replays the current user to each new subscriber and
    then broadcasts every session change (None = signed out).
    """

    def __init__(self):
        self.user_changes: ValueStream[Optional[User]] = ValueStream(None)

    @property
    def current_user(self) -> Optional[User]:
        return self.user_changes.value

    @abstractmethod
    async def sign_in_with_email(self, email: str, password: str) -> User:
        ...

    @abstractmethod
    async def sign_up_with_email(
        self,
        email: str,
        password: str,
        display_name: Optional[str] = None,
    ) -> User:
        ...

    @abstractmethod
    async def sign_in_with_apple(
        self,
        credential: Optional[AppleIDCredential],
        raw_nonce: str,
    ) -> User:
        ...

    @abstractmethod
    async def update_display_name(self, display_name: Optional[str]) -> User:
        ...

    @abstractmethod
    async def sign_out(self) -> None:
        ...


class LocalAuthService(AuthService):
    """Auth service persisting accounts through an IdentityStore."""

    def __init__(
        self,
        store: IdentityStore,
        remote: Optional[RemoteSignIn] = None,
        min_password_length: Optional[int] = None,
    ):
        super().__init__()
        self.store = store
        self.remote = remote
        if min_password_length is None:
            min_password_length = settings.min_password_length
        self.min_password_length = min_password_length

    async def restore_session(self) -> Optional[User]:
        """Load the persisted session into memory."""
        user = await self.store.load_session()
        self.user_changes.send(user)
        if user:
            logger.info(f"Restored session for {user.id}")
        return user

    async def sign_in_with_email(self, email: str, password: str) -> User:
        """
        Sign in with an existing email account.

        Raises:
            AccountNotFoundError: If the normalized email is not registered
            InvalidCredentialsError: If the password is too short or wrong
        """
        key = normalize_email(email)
        accounts = await self.store.load_email_accounts()
        account = accounts.get(key)
        if account is None:
            raise AccountNotFoundError(f"No email account for {key}")

        if len(password) < self.min_password_length or not verify_password(password, account.password_hash):
            raise InvalidCredentialsError(f"Password rejected for {key}")

        account.email = key
        accounts[key] = account
        await self.store.save_email_accounts(accounts)

        # Stored profile name beats whatever the account row says
        user = await self._merge_and_persist_profile(
            User(id=account.id, email=key, display_name=account.display_name),
            prefer_incoming=False,
        )
        await self._persist_session(user)
        logger.info(f"Email sign-in for {user.id}")
        return user

    async def sign_up_with_email(
        self,
        email: str,
        password: str,
        display_name: Optional[str] = None,
    ) -> User:
        """
        Register a new email account and sign it in.

        Args:
            email: Any-case email; stored trimmed and lowercased
            password: At least min_password_length characters
            display_name: Optional; defaults to the email local part

        Raises:
            InvalidCredentialsError: If the password is too short or the email has no "@"
            AccountAlreadyExistsError: If the normalized email is registered
        """
        key = normalize_email(email)
        if len(password) < self.min_password_length or "@" not in key:
            raise InvalidCredentialsError(f"Sign-up rejected for {key!r}")

        accounts = await self.store.load_email_accounts()
        if key in accounts:
            raise AccountAlreadyExistsError(f"{key} is already registered")

        name = normalize_display_name(display_name) or normalize_display_name(key.split("@", 1)[0])
        account = EmailAccount(
            id=generate_user_id("u_"),
            email=key,
            password_hash=hash_password(password),
            display_name=name,
        )
        accounts[key] = account
        await self.store.save_email_accounts(accounts)
        logger.info(f"Created email account {account.id}")

        user = await self._merge_and_persist_profile(
            User(id=account.id, email=key, display_name=name),
            prefer_incoming=True,
        )
        await self._persist_session(user)
        return user

    async def sign_in_with_apple(
        self,
        credential: Optional[AppleIDCredential],
        raw_nonce: str,
    ) -> User:
        """
        Sign in with an Apple ID credential.

        Delegates to the remote backend when one is configured, otherwise
        finds or creates an ExternalAccount keyed by the credential subject.
        """
        if credential is None:
            raise InvalidThirdPartyCredentialError("No Apple ID credential supplied")
        if not credential.identity_token:
            raise InvalidThirdPartyTokenError("Credential has no identity token")
        try:
            id_token = credential.identity_token.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidThirdPartyTokenError("Identity token is not UTF-8") from e

        full_name = credential.full_name.formatted() if credential.full_name else None
        email = normalize_email(credential.email) if credential.email and credential.email.strip() else None

        if self.remote is not None:
            result = await self.remote.sign_in(id_token, raw_nonce, full_name)
            incoming = User(
                id=result.uid,
                email=result.email,
                display_name=normalize_display_name(result.display_name) or full_name,
            )
        else:
            incoming = await self._upsert_external_account(credential.user, email, full_name)

        user = await self._merge_and_persist_profile(incoming, prefer_incoming=True)
        await self._persist_session(user)
        logger.info(f"Apple sign-in for {user.id}")
        return user

    async def update_display_name(self, display_name: Optional[str]) -> User:
        """
        Rename the signed-in user.

        Every credential row sharing the user id is updated, then the profile.

        Raises:
            NotAuthenticatedError: If nobody is signed in
        """
        current = self.current_user
        if current is None:
            raise NotAuthenticatedError("Display name update without a session")

        name = normalize_display_name(display_name)

        email_accounts = await self.store.load_email_accounts()
        matched = [a for a in email_accounts.values() if a.id == current.id]
        for account in matched:
            account.display_name = name
        if matched:
            await self.store.save_email_accounts(email_accounts)

        external_accounts = await self.store.load_external_accounts()
        matched_external = [a for a in external_accounts.values() if a.id == current.id]
        for account in matched_external:
            account.display_name = name
        if matched_external:
            await self.store.save_external_accounts(external_accounts)

        user = await self._merge_and_persist_profile(
            User(id=current.id, email=current.email, display_name=name),
            prefer_incoming=True,
        )
        await self._persist_session(user)
        return user

    async def sign_out(self) -> None:
        """Clear the session. Accounts and profiles stay stored."""
        previous = self.current_user
        await self._persist_session(None)
        if previous:
            logger.info(f"Signed out {previous.id}")

    async def _upsert_external_account(
        self,
        subject_id: str,
        email: Optional[str],
        full_name: Optional[str],
    ) -> User:
        accounts = await self.store.load_external_accounts()
        account = accounts.get(subject_id)

        if account is not None:
            if email:
                account.email = email
            if full_name:
                account.display_name = full_name
        else:
            account = ExternalAccount(
                id=generate_user_id("a_"),
                subject_id=subject_id,
                email=email,
                display_name=full_name or localized_text("Appleユーザー", "Apple User"),
            )
            logger.info(f"Created Apple account {account.id}")

        accounts[subject_id] = account
        await self.store.save_external_accounts(accounts)
        return User(id=account.id, email=account.email, display_name=account.display_name)

    async def _merge_and_persist_profile(self, incoming: User, prefer_incoming: bool) -> User:
        """
        Fold an identity claim into the user's Profile.

        The email is always overwritten when supplied. The display name is
        overwritten when prefer_incoming is set, otherwise only filled in
        when the profile has none.
        """
        profiles = await self.store.load_profiles()
        profile = profiles.get(incoming.id) or Profile(id=incoming.id)

        if incoming.email:
            profile.email = incoming.email

        name = normalize_display_name(incoming.display_name)
        if prefer_incoming and name:
            profile.display_name = name
        elif profile.display_name is None and name:
            profile.display_name = name

        profiles[incoming.id] = profile
        await self.store.save_profiles(profiles)

        return User(
            id=incoming.id,
            email=profile.email if profile.email is not None else incoming.email,
            display_name=profile.display_name if profile.display_name is not None else incoming.display_name,
        )

    async def _persist_session(self, user: Optional[User]) -> None:
        await self.store.save_session(user)
        self.user_changes.send(user)
