"""
Shell helpers: run a command, ask a question on the terminal
"""

from __future__ import annotations

import subprocess
from collections.abc import Sequence

from aiscripts.core.exceptions import CommandError
from aiscripts.core.logging import get_logger

logger = get_logger(__name__)


def run_command(args: Sequence[str], *, input_text: str | None = None) -> str:
    """
    Run `args` and return stripped stdout

    Raises:
        CommandError: If the command is missing or exits non-zero
    """
    try:
        completed = subprocess.run(
            list(args),
            input=input_text,
            capture_output=True,
            text=True,
            check=True,
        )
    except FileNotFoundError as exc:
        raise CommandError(f"Command not found: {args[0]}") from exc
    except subprocess.CalledProcessError as exc:
        stderr = (exc.stderr or "").strip()
        logger.error("command_failed", command=" ".join(args), returncode=exc.returncode, stderr=stderr)
        raise CommandError(f"Error executing command: {' '.join(args)}: {stderr or exc}") from exc
    return completed.stdout.strip()


def ask_question(query: str) -> str:
    """Prompt on stdin; EOF counts as an empty answer."""
    try:
        return input(query)
    except EOFError:
        return ""
