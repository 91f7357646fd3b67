"""
Persistence of each user's stay list.
"""

import json
import logging

from pydantic import TypeAdapter, ValidationError

from staly.models.schemas import Stay
from staly.storage.kv import KeyValueStore

logger = logging.getLogger(__name__)

_stay_list = TypeAdapter(list[Stay])


def stays_key(user_id: str) -> str:
    return f"stays:{user_id}"


def sort_by_check_in(stays: list[Stay]) -> list[Stay]:
    """Ascending by check-in; ties keep their existing order."""
    return sorted(stays, key=lambda stay: stay.check_in)


class StayStore:
    """Load/save a user's stays as one JSON array, always check-in sorted."""

    def __init__(self, kv: KeyValueStore):
        self.kv = kv

    async def load(self, user_id: str) -> list[Stay]:
        raw = await self.kv.get(stays_key(user_id))
        if raw is None:
            return []
        try:
            return sort_by_check_in(_stay_list.validate_json(raw))
        except ValidationError as e:
            logger.warning(f"Discarding unreadable stays for {user_id}: {e.error_count()} errors")
            return []

    async def save(self, user_id: str, stays: list[Stay]) -> None:
        ordered = sort_by_check_in(stays)
        await self.kv.set(
            stays_key(user_id),
            json.dumps([stay.to_json_dict() for stay in ordered]),
        )
