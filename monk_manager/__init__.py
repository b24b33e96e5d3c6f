"""monk-manager top-level package.

Terminal assistant that chats with, or asks for code explanations from, a
remote LLM provider. Includes configuration loading, the shared domain models
and error taxonomy, provider adapters, the timeout-bounded AI service and the
interactive session.
"""

from monk_manager.domain.models import Message, ModelConfig
from monk_manager.services.ai_service import AIService

__all__ = ["AIService", "Message", "ModelConfig"]
