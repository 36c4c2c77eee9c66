"""Family routes."""

from household_hub.routes.family.settings_routes import router as family_settings_router

__all__ = ["family_settings_router"]
