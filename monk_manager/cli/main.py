"""Process entry point: parse flags, load config, start a session."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from monk_manager.cli.explain import FORMATS, run_explain
from monk_manager.cli.interactive import run_interactive_session
from monk_manager.config.settings import (
    API_KEY_ENV_VAR,
    Settings,
    build_model_config,
    load_settings,
    resolve_api_key,
)
from monk_manager.domain.exceptions import AIError, ConfigurationError
from monk_manager.infrastructure.logging.logger import setup_logger
from monk_manager.services.ai_service import AIService

EXIT_OK = 0
EXIT_RUNTIME_ERROR = 1
EXIT_CONFIG_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="monk",
        description="Chat with an LLM about your code, or ask it to explain a file.",
    )
    parser.add_argument("--config", help="Path to a TOML, JSON or YAML config file (overrides $MONK_CONFIG)")
    parser.add_argument("--log-level", help="Log level (debug, info, warning, error)")
    sub = parser.add_subparsers(dest="command")

    explain = sub.add_parser("explain", help="Explain a source file")
    explain.add_argument("file", type=Path, help="Path to the file to explain")
    explain.add_argument("-l", "--language", help="Programming language of the code")
    explain.add_argument(
        "-f",
        "--format",
        choices=FORMATS,
        default=None,
        help="Output format (default from config: markdown)",
    )
    return parser


def create_service(settings: Settings, out=print) -> AIService:
    """Resolve the credential and build the AIService; warns on the placeholder key."""

    api_key, placeholder = resolve_api_key(settings)
    if placeholder:
        out(f"WARNING: {API_KEY_ENV_VAR} environment variable not found, using demo key")
        out("WARNING: Using demo API key. This won't work for real requests.")
        out(f"Please set the {API_KEY_ENV_VAR} environment variable to use the service.")
        logging.getLogger(__name__).warning("No API key configured, using placeholder credential")
    return AIService(build_model_config(settings, api_key), logger=logging.getLogger("monk_manager.ai"))


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = load_settings(args.config, create_default=True)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    log_cfg = settings.logging
    try:
        logger = setup_logger(args.log_level or log_cfg.level, log_cfg.format, log_cfg.output, log_cfg.file)
    except (OSError, ValueError) as e:
        print(f"Error: Failed to set up logging: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    try:
        service = create_service(settings)
    except ConfigurationError as e:
        logger.error(f"Startup failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    with service:
        if args.command == "explain":
            commands = settings.commands
            fmt = args.format or commands.default_format
            try:
                print(run_explain(
                    service,
                    args.file,
                    args.language,
                    fmt,
                    default_language=commands.default_language,
                    language_detection=commands.explain.language_detection,
                ))
            except (OSError, UnicodeDecodeError) as e:
                print(f"Error: Failed to read file {args.file}: {e}", file=sys.stderr)
                return EXIT_RUNTIME_ERROR
            except AIError as e:
                print(f"Error: {e}", file=sys.stderr)
                return EXIT_RUNTIME_ERROR
            return EXIT_OK
        run_interactive_session(service, Path.cwd())
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
