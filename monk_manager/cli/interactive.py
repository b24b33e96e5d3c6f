"""Interactive chat session.

One turn at a time: read a line, dispatch it with the whole history to
AIService.chat, render the reply (or the error), then wait for the next line.
A failed turn keeps the user's message in history but appends no reply.
"""

import logging
from pathlib import Path
from typing import Callable, Optional

from monk_manager.domain.exceptions import AIError
from monk_manager.domain.models import Conversation
from monk_manager.services.ai_service import AIService

PROMPT = ">> "
EXIT_COMMANDS = ("/exit", "/quit")
HELP_COMMAND = "/help"

HELP_TEXT = """
Available commands:
  /help - Display this help message
  /exit or /quit - Exit the session
"""


class InteractiveSession:
    """Line-oriented REPL over an AIService.

    `input_fn` / `output_fn` default to the builtins; tests pass their own.
    """

    def __init__(
        self,
        service: AIService,
        project_root: Optional[Path] = None,
        *,
        input_fn: Callable[[str], str] = input,
        output_fn: Callable[[str], None] = print,
        logger: Optional[logging.Logger] = None,
    ):
        self._service = service
        self._project_root = project_root or Path.cwd()
        self._input = input_fn
        self._output = output_fn
        self._logger = logger or logging.getLogger(__name__)
        self.history = Conversation()

    @property
    def project_context(self) -> str:
        return f"Current directory: {self._project_root}"

    def run(self) -> None:
        self._welcome()
        while True:
            try:
                line = self._input(PROMPT)
            except EOFError:
                self._output("")
                break
            text = line.strip()
            if not text:
                continue
            if text in EXIT_COMMANDS:
                self._output("\nExiting monk-manager.")
                break
            if text == HELP_COMMAND:
                self._output(HELP_TEXT)
                continue
            self.handle_turn(text)

    def handle_turn(self, text: str) -> bool:
        """Dispatch one user message; return True when a reply was appended."""

        self.history.append("user", text)
        self._output("Thinking...")
        try:
            reply = self._service.chat(self.history.snapshot(), self.project_context)
        except AIError as e:
            self._logger.warning(
                f"Chat turn failed: {e}",
                extra={"extra": {"code": e.code, "history": len(self.history)}},
            )
            self._output(f"Error getting AI response: {e}")
            self._output("Please check your API key and internet connection.")
            self._output("You can continue chatting, but responses may not work.\n")
            return False
        self.history.append("assistant", reply)
        self._output(f"{reply}\n")
        return True

    def _welcome(self) -> None:
        self._output("Welcome to monk-manager interactive mode!")
        self._output(f"Project directory: {self._project_root}")
        self._output("Type your message and press Enter to send.")
        self._output("Type '/help' for assistance or '/exit' to quit.\n")


def run_interactive_session(service: AIService, project_root: Optional[Path] = None) -> None:
    InteractiveSession(service, project_root).run()
