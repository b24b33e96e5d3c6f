"""AI service: the single entry point for explain/chat calls.

Hides provider selection and bounds every call with a wall-clock timeout.
A call that misses its deadline is abandoned rather than killed: the worker
thread may still finish the HTTP request, but its result is dropped.
"""

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Callable, Optional, Sequence, TypeVar

from monk_manager.domain.exceptions import AIError, RequestFailedError, RequestTimeoutError
from monk_manager.domain.models import Message, ModelConfig
from monk_manager.providers import create_provider
from monk_manager.providers.base import AIClient

T = TypeVar("T")


class AIService:
    """Owns exactly one provider client for its whole lifetime."""

    EXPLAIN_TIMEOUT = 30.0
    CHAT_TIMEOUT = 60.0

    def __init__(
        self,
        config: ModelConfig,
        *,
        client: Optional[AIClient] = None,
        logger: Optional[logging.Logger] = None,
    ):
        config.validate()
        self._config = config
        self._client = client if client is not None else create_provider(config)
        self._logger = logger or logging.getLogger(__name__)
        # More than one worker so an abandoned call never blocks the next one
        self._executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="ai-call")

    @property
    def config(self) -> ModelConfig:
        return self._config

    @property
    def provider_name(self) -> str:
        return getattr(self._client, "name", self._config.provider)

    def explain(self, code: str, language: str) -> str:
        """Explain `code`, raising RequestTimeoutError after EXPLAIN_TIMEOUT seconds."""

        self._logger.debug(
            "Explaining code",
            extra={"extra": {
                "language": language,
                "max_tokens": self._config.max_tokens,
                "temperature": self._config.temperature,
            }},
        )
        return self._call("explain", self.EXPLAIN_TIMEOUT, self._client.explain, code, language)

    def chat(self, history: Sequence[Message], project_context: Optional[str] = None) -> str:
        """Reply to the latest turn; the history is snapshotted before dispatch."""

        snapshot = tuple(history)
        return self._call("chat", self.CHAT_TIMEOUT, self._client.chat, snapshot, project_context)

    def close(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)
        self._client.close()

    def __enter__(self) -> "AIService":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # ---- helpers ----

    def _call(self, op: str, timeout: float, fn: Callable[..., T], *args) -> T:
        start = time.monotonic()
        future: Future = self._executor.submit(fn, *args)
        try:
            result = future.result(timeout=timeout)
        except FutureTimeoutError:
            # Drops the call if it is still queued; a running one is left to finish
            future.cancel()
            self._logger.warning(
                f"AI {op} request timed out after {timeout:g}s",
                extra={"extra": {"provider": self.provider_name, "op": op, "timeout": timeout}},
            )
            raise RequestTimeoutError(timeout, provider=self.provider_name)
        except AIError as e:
            self._log_failure(op, start, e)
            raise
        except Exception as e:
            self._log_failure(op, start, e)
            raise RequestFailedError(str(e) or type(e).__name__) from e
        self._logger.info(
            f"AI {op} finished",
            extra={"extra": {
                "provider": self.provider_name,
                "op": op,
                "elapsed": round(time.monotonic() - start, 3),
            }},
        )
        return result

    def _log_failure(self, op: str, start: float, error: Exception) -> None:
        self._logger.error(
            f"AI {op} failed: {error}",
            extra={"extra": {
                "provider": self.provider_name,
                "op": op,
                "elapsed": round(time.monotonic() - start, 3),
                "error": type(error).__name__,
            }},
        )
