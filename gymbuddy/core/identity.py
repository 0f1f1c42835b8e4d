"""
User directory: platform user id -> scheduling account email.

Injected into the dispatcher so neither the core nor the client holds a
global identity table.
"""

import logging
from typing import Mapping, Optional, Protocol

from gymbuddy.config import get_settings

logger = logging.getLogger(__name__)


class UserDirectory(Protocol):
    """Resolves a messaging-platform user id to an account email."""

    def resolve(self, user_id: str) -> Optional[str]:
        ...


class StaticUserDirectory:
    """In-memory directory built from a fixed mapping."""

    def __init__(self, mapping: Optional[Mapping[str, str]] = None):
        self._mapping = {str(k): v for k, v in (mapping or {}).items()}

    def __len__(self) -> int:
        return len(self._mapping)

    def resolve(self, user_id: str) -> Optional[str]:
        email = self._mapping.get(str(user_id))
        if email is None:
            logger.warning(f"No account linked for user {user_id}")
        return email

    @classmethod
    def from_settings(cls) -> "StaticUserDirectory":
        """Build from the USER_DIRECTORY setting."""
        directory = cls(get_settings().user_directory_map)
        logger.info(f"User directory loaded with {len(directory)} entries")
        return directory
