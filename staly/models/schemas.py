"""
Pydantic records for accounts, profiles and stays.

All records serialize with camelCase keys (``displayName``, ``checkIn``)
and accept either camelCase or snake_case on input.
"""

from datetime import date
from typing import List, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class Record(BaseModel):
    """Base for persisted records."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


# ============ Identity Records ============

class User(Record):
    """The signed-in identity handed to callers."""

    id: str = Field(..., description="Opaque, stable user id")
    email: Optional[str] = None
    display_name: Optional[str] = None


class EmailAccount(Record):
    """Email/password credential, keyed by normalized email."""

    id: str
    email: str
    password_hash: str
    display_name: Optional[str] = None


class ExternalAccount(Record):
    """Third-party credential, keyed by the provider subject id."""

    id: str
    subject_id: str
    email: Optional[str] = None
    display_name: Optional[str] = None


class Profile(Record):
    """Merge target holding the durable email/display name for a user id."""

    id: str
    email: Optional[str] = None
    display_name: Optional[str] = None


# ============ Third-Party Sign-In ============

class PersonName(Record):
    """Name components supplied by the identity provider."""

    given_name: Optional[str] = None
    family_name: Optional[str] = None

    def formatted(self) -> Optional[str]:
        parts = [p.strip() for p in (self.given_name, self.family_name) if p and p.strip()]
        return " ".join(parts) or None


class AppleIDCredential(Record):
    """Credential returned by Sign in with Apple."""

    user: str = Field(..., description="Provider-issued subject id")
    email: Optional[str] = None
    full_name: Optional[PersonName] = None
    identity_token: Optional[bytes] = None


class AppleSignInRequest(Record):
    """Parameters for starting an Apple sign-in request."""

    scopes: List[str] = Field(default_factory=lambda: ["full_name", "email"])
    nonce: str = Field(..., description="SHA-256 hex of the raw nonce")


class RemoteSignInResult(Record):
    """Identity returned by the remote sign-in backend."""

    uid: str
    email: Optional[str] = None
    display_name: Optional[str] = None


# ============ Stays ============

class Stay(Record):
    """A hotel or trip entry owned by one user."""

    id: str = Field(default_factory=lambda: str(uuid4()).upper())
    title: str = Field(..., min_length=1)
    city: Optional[str] = None
    check_in: date
    check_out: Optional[date] = None
    note: Optional[str] = None

    @model_validator(mode="after")
    def validate_dates(self) -> "Stay":
        if self.check_out is not None and self.check_out < self.check_in:
            raise ValueError("check_out must be on or after check_in")
        return self
