"""Shared data models.

- ModelConfig: the validated provider/model settings for one session.
- Message: one turn of a conversation (user or assistant).
- Conversation: the append-only, in-memory history of an interactive session.

Provider clients only depend on these types and translate them to and from
their own wire JSON.
"""

from dataclasses import dataclass, field
from typing import Iterator, List, Literal, Optional, Tuple, Union

from monk_manager.domain.exceptions import ConfigurationError


# Role tags; providers may accept more, so plain str is allowed too
Role = Union[Literal["user", "assistant"], str]


@dataclass(frozen=True)
class ModelConfig:
    """Provider and sampling settings, immutable for the session."""

    provider: str
    model_name: str
    api_key: str = field(repr=False)
    temperature: float = 0.7
    max_tokens: int = 1024
    api_base_url: Optional[str] = None

    def validate(self) -> None:
        """Raise ConfigurationError on any broken invariant (no clamping)."""

        if not self.provider:
            raise ConfigurationError("AI provider is required")
        if not self.model_name:
            raise ConfigurationError("Model name is required")
        if not self.api_key:
            raise ConfigurationError("AI API key is required")
        if not 0.0 <= self.temperature <= 1.0:
            raise ConfigurationError("Temperature must be between 0.0 and 1.0")
        if self.max_tokens <= 0:
            raise ConfigurationError("Max tokens must be greater than 0")


@dataclass(frozen=True)
class Message:
    role: Role
    content: str


@dataclass
class Conversation:
    """Ordered message history owned by the interactive loop.

    Messages are only ever appended; `snapshot()` hands a read-only copy to
    each provider call.
    """

    _messages: List[Message] = field(default_factory=list, init=False)

    def append(self, role: Role, content: str) -> Message:
        message = Message(role=role, content=content)
        self._messages.append(message)
        return message

    def snapshot(self) -> Tuple[Message, ...]:
        return tuple(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(tuple(self._messages))
