"""Core module - shared kernel for SongVault."""
from songvault.core.config import settings
from songvault.core.exceptions import SongVaultError

__all__ = ["settings", "SongVaultError"]
