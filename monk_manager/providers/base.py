"""Provider client protocol.

AIService never talks to a vendor HTTP API directly; it depends on this
protocol instead:

- every backend ships one AIClient implementation (e.g. AnthropicClient);
- the client turns explain/chat calls into its own request JSON and parses the
  response back into plain text.

New backends (OpenAI, local gateways, ...) plug in without touching AIService
or the interactive loop.
"""

from typing import Optional, Protocol, Sequence

from monk_manager.domain.models import Message


class AIClient(Protocol):
    """LLM provider client protocol.

    Implementations provide:
    - name: provider name, used in logs.
    - explain(code, language): one-shot explanation of a code snippet.
    - chat(history, project_context): reply to the latest turn of `history`.

    Both calls raise AIError subclasses on failure and never mutate `history`.
    """

    name: str

    def explain(self, code: str, language: str) -> str:
        ...

    def chat(self, history: Sequence[Message], project_context: Optional[str] = None) -> str:
        ...

    def close(self) -> None:
        ...
