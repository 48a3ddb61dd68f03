"""Exception hierarchy for MoneyTrack services."""

from __future__ import annotations

from typing import Any


class MoneyTrackError(Exception):
    """Base exception for all MoneyTrack errors."""


class ValidationError(MoneyTrackError):
    """Raised when input is malformed or an operation is not allowed."""


class NotFoundError(MoneyTrackError):
    """Raised when a referenced entity does not exist."""

    def __init__(self, entity: str, entity_id: Any):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class StorageError(MoneyTrackError):
    """Raised when the database fails partway through an operation.

    The surrounding session has already been rolled back when this is raised.
    """
