"""Services module - orchestration across the storage backends."""
from songvault.services.coordinator import SongCoordinator

__all__ = ["SongCoordinator"]
