"""`monk explain FILE`: one-shot code explanation."""

from pathlib import Path
from typing import Optional

from monk_manager.services.ai_service import AIService

FORMATS = ("markdown", "plain")


def detect_language(path: Path) -> str:
    """Language tag from the file extension, or "unknown"."""

    return path.suffix.lstrip(".") or "unknown"


def render(path: Path, language: str, explanation: str, fmt: str = "markdown") -> str:
    if fmt == "markdown":
        return (
            "# Code Explanation\n\n"
            f"## File: {path}\n\n"
            f"## Language: {language}\n\n"
            "## Explanation\n\n"
            f"{explanation}"
        )
    if fmt == "plain":
        return f"File: {path}\nLanguage: {language}\n\nExplanation:\n\n{explanation}"
    raise ValueError(f"Unsupported output format: {fmt}")


def run_explain(
    service: AIService,
    file: Path,
    language: Optional[str] = None,
    fmt: str = "markdown",
    *,
    default_language: str = "rust",
    language_detection: bool = True,
) -> str:
    """Explain `file` and return the rendered text.

    An explicit `language` wins; otherwise it comes from the extension, or is
    `default_language` when detection is turned off. Raises OSError /
    UnicodeDecodeError when the file cannot be read, and any AIError from the
    service.
    """

    content = file.read_text(encoding="utf-8")
    if language:
        lang = language
    elif language_detection:
        lang = detect_language(file)
    else:
        lang = default_language
    explanation = service.explain(content, lang)
    return render(file, lang, explanation, fmt)
