from __future__ import annotations

from typing import Optional, Protocol

from .model import Settings


class SettingsRepository(Protocol):
    """Storage for the singleton settings record."""

    def get_settings(self) -> Optional[Settings]:
        raise NotImplementedError

    def create_settings(self, settings: Settings) -> bool:
        """Insert the record; return False if one already exists."""

        raise NotImplementedError

    def update_settings(self, settings: Settings) -> bool:
        raise NotImplementedError
