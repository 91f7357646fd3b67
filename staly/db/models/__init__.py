"""
SQLAlchemy ORM models package.

Re-exports all models for convenient imports.
"""

from staly.db.models.kv import KeyValueModel

__all__ = [
    "KeyValueModel",
]
