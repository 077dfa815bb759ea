"""
Commit message generation

Builds a prompt from a template, the staged diff and a short excerpt of
each changed file, asks the configured provider for a message, and
cleans the reply up for `git commit -F`.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from pathlib import Path

from aiscripts.core.exceptions import NoStagedChangesError
from aiscripts.core.logging import get_logger
from aiscripts.llm.factory import ClientFactory
from aiscripts.llm.query import query_llm
from aiscripts.utils.git import GitRepository

logger = get_logger(__name__)

DIFF_PLACEHOLDER = "{{CODE_DIFF}}"
CONTEXT_PLACEHOLDER = "{{CODE_CONTEXT}}"
TRUNCATION_MARKER = "\n\n... [content truncated for brevity] ...\n\n"

MAX_DIFF_CHARS = 8000
MAX_CONTEXT_CHARS = 4000
FILE_EXCERPT_CHARS = 200

COMMIT_MAX_TOKENS = 2000
COMMIT_TEMPERATURE = 0.5
DEFAULT_COMMIT_MESSAGE = "Update staged files"

_FENCE_LINE = re.compile(r"^```[\w+-]*[ \t]*$", re.MULTILINE)
_SECTION_HEADING = re.compile(r"^([A-Z][^:\n]+):[ \t]*$", re.MULTILINE)
_BULLET = re.compile(r"^[*•][ \t]*", re.MULTILINE)
_EXTRA_NEWLINES = re.compile(r"\n{3,}")


def truncate_text(text: str, max_length: int) -> str:
    """Keep the head and tail of `text`, each max_length // 2 chars."""
    if len(text) <= max_length:
        return text
    half = max_length // 2
    return f"{text[:half]}{TRUNCATION_MARKER}{text[len(text) - half:]}"


def process_commit_message(message: str) -> str:
    """
    Normalize a raw model reply into a commit message

    - literal "\\n" sequences become newlines
    - Markdown fence lines are dropped, their content is kept
    - "Heading:" lines get a blank line before and after them
    - "*" and "•" bullets become "- "
    - runs of blank lines collapse to one
    """
    processed = message.replace("\\n", "\n")
    processed = _FENCE_LINE.sub("", processed)
    processed = _SECTION_HEADING.sub(lambda match: f"\n{match.group(1)}:\n", processed)
    processed = _BULLET.sub("- ", processed)
    processed = _EXTRA_NEWLINES.sub("\n\n", processed)
    return processed.strip()


def _read_excerpt(path: str) -> str | None:
    file_path = Path(path)
    if not file_path.is_file():
        return None
    with file_path.open("r", encoding="utf-8", errors="replace") as handle:
        return handle.read(FILE_EXCERPT_CHARS + 1)


def build_code_context(
    files: Iterable[str],
    read_file: Callable[[str], str | None] = _read_excerpt,
) -> str:
    """First FILE_EXCERPT_CHARS chars of every readable changed file."""
    blocks = []
    for path in files:
        content = read_file(path)
        if content is None:
            continue
        excerpt = content[:FILE_EXCERPT_CHARS]
        ellipsis = "..." if len(content) > FILE_EXCERPT_CHARS else ""
        blocks.append(f"\nFile: {path}\n{excerpt}\n{ellipsis}\n")
    return truncate_text("".join(blocks), MAX_CONTEXT_CHARS)


def build_prompt(template: str, diff: str, context: str) -> str:
    return template.replace(DIFF_PLACEHOLDER, diff, 1).replace(CONTEXT_PLACEHOLDER, context, 1)


class CommitMessageService:
    """Turns the staged changes of a repository into a commit message."""

    def __init__(
        self,
        git: GitRepository | None = None,
        *,
        factory: ClientFactory | None = None,
        read_file: Callable[[str], str | None] = _read_excerpt,
    ) -> None:
        self.git = git or GitRepository()
        self.factory = factory
        self._read_file = read_file

    def build_prompt(self, template: str) -> str:
        """
        Fill `template` from the staged changes

        Raises:
            NoStagedChangesError: If nothing is staged
        """
        diff = truncate_text(self.git.staged_diff(), MAX_DIFF_CHARS)
        if not diff.strip():
            raise NoStagedChangesError("No staged changes found. Please stage your changes first.")
        context = build_code_context(self.git.staged_files(), self._read_file)
        return build_prompt(template, diff, context)

    async def generate(
        self,
        template: str,
        *,
        provider: str | None = None,
        model: str | None = None,
    ) -> str:
        prompt = self.build_prompt(template)
        raw = await query_llm(
            prompt,
            provider=provider,
            model=model,
            max_tokens=COMMIT_MAX_TOKENS,
            temperature=COMMIT_TEMPERATURE,
            factory=self.factory,
        )
        message = process_commit_message(raw)
        if not message:
            logger.warning("commit_message_empty_fallback", raw_length=len(raw))
            return DEFAULT_COMMIT_MESSAGE
        return message

    def commit(self, message: str) -> str:
        return self.git.commit(message)
