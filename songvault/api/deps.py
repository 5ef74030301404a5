"""Dependency injection for FastAPI routes."""
from typing import Annotated

from fastapi import Depends, HTTPException, Request

from songvault.core.config import Settings
from songvault.services.coordinator import SongCoordinator


# Settings dependency
def get_settings_dep(request: Request) -> Settings:
    """Get the settings the application was created with."""
    return request.app.state.settings


SettingsDep = Annotated[Settings, Depends(get_settings_dep)]


# Readiness check
async def require_ready(request: Request) -> None:
    """Ensure application is ready to handle requests."""
    if not getattr(request.app.state, "ready", False):
        raise HTTPException(status_code=503, detail="Service not ready")


# Coordinator dependency
def get_coordinator(request: Request) -> SongCoordinator:
    """Get the song coordinator wired up at startup."""
    coordinator = getattr(request.app.state, "coordinator", None)
    if coordinator is None:
        raise RuntimeError("Song coordinator not initialized")
    return coordinator


CoordinatorDep = Annotated[SongCoordinator, Depends(get_coordinator)]
