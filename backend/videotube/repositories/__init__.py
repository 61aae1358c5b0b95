"""Repository package exposing persistence-layer access for domain models."""

from __future__ import annotations

from videotube.repositories.base import BaseRepository
from videotube.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
]
