"""
Git access for the commit script
"""

from __future__ import annotations

import os
import tempfile
from collections.abc import Callable, Sequence
from pathlib import Path

from aiscripts.utils.shell import run_command

Runner = Callable[[Sequence[str]], str]


class GitRepository:
    """Staged-change queries and commits in the current working tree."""

    def __init__(self, runner: Runner = run_command) -> None:
        self._run = runner

    def staged_diff(self) -> str:
        return self._run(["git", "diff", "--cached"])

    def staged_files(self) -> list[str]:
        output = self._run(["git", "diff", "--cached", "--name-only"])
        return [line for line in output.splitlines() if line.strip()]

    def commit(self, message: str) -> str:
        """Commit with `message` passed through a file, so no shell quoting is involved."""
        fd, path = tempfile.mkstemp(prefix="git-commit-msg-", suffix=".txt")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(message)
            return self._run(["git", "commit", "-F", path])
        finally:
            Path(path).unlink(missing_ok=True)
