"""Service layer exposed to the CLI."""

from monk_manager.services.ai_service import AIService

__all__ = ["AIService"]
