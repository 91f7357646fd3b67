"""
Stays service: CRUD over a user's stay list.
"""

import logging
from abc import ABC, abstractmethod
from datetime import date
from typing import Optional

from pydantic import ValidationError

from staly.core.exceptions import StayValidationError
from staly.core.localization import localized_text
from staly.models.schemas import Stay
from staly.storage.stay_store import StayStore

logger = logging.getLogger(__name__)


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


def build_stay(
    title: Optional[str],
    check_in: date,
    city: Optional[str] = None,
    check_out: Optional[date] = None,
    note: Optional[str] = None,
    stay_id: Optional[str] = None,
) -> Stay:
    """
    Build a Stay from editor input.

    Text fields are trimmed and blanks dropped. A blank title falls back to
    the city, then to a dated "Stay" label.

    Raises:
        StayValidationError: If check_out is before check_in
    """
    resolved_title = _clean(title) or _clean(city)
    if resolved_title is None:
        resolved_title = f"{localized_text('滞在', 'Stay')} {check_in.isoformat()}"

    fields = {
        "title": resolved_title,
        "city": _clean(city),
        "check_in": check_in,
        "check_out": check_out,
        "note": _clean(note),
    }
    if stay_id:
        fields["id"] = stay_id

    try:
        return Stay(**fields)
    except ValidationError as e:
        raise StayValidationError(f"Invalid stay: {e.errors()[0]['msg']}") from e


class StaysService(ABC):
    """Per-user stay CRUD. Every read returns stays sorted by check-in."""

    @abstractmethod
    async def list_stays(self, user_id: str) -> list[Stay]:
        ...

    @abstractmethod
    async def add_stay(self, stay: Stay, user_id: str) -> None:
        ...

    @abstractmethod
    async def upsert_stay(self, stay: Stay, user_id: str) -> None:
        ...

    @abstractmethod
    async def delete_stay(self, stay_id: str, user_id: str) -> None:
        ...


class LocalStaysService(StaysService):
    """Read-modify-write over the full list held by a StayStore."""

    def __init__(self, store: StayStore):
        self.store = store

    async def list_stays(self, user_id: str) -> list[Stay]:
        return await self.store.load(user_id)

    async def add_stay(self, stay: Stay, user_id: str) -> None:
        stays = await self.store.load(user_id)
        stays.append(stay)
        await self.store.save(user_id, stays)
        logger.debug(f"Added stay {stay.id} for {user_id}")

    async def upsert_stay(self, stay: Stay, user_id: str) -> None:
        stays = await self.store.load(user_id)
        for index, existing in enumerate(stays):
            if existing.id == stay.id:
                stays[index] = stay
                break
        else:
            stays.append(stay)
        await self.store.save(user_id, stays)
        logger.debug(f"Upserted stay {stay.id} for {user_id}")

    async def delete_stay(self, stay_id: str, user_id: str) -> None:
        stays = await self.store.load(user_id)
        remaining = [stay for stay in stays if stay.id != stay_id]
        await self.store.save(user_id, remaining)
        logger.debug(f"Deleted {len(stays) - len(remaining)} stays with id {stay_id} for {user_id}")
