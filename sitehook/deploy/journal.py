"""Append-only plain-text record of deployment attempts."""

from __future__ import annotations

import asyncio
import re
from pathlib import Path

from sitehook.deploy.models import DeploymentAttempt
from sitehook.utils.logging import get_logger

log = get_logger(__name__)

BLOCK_MARKER = "=== deploy "

_HEADER_RE = re.compile(
    r"=== deploy \d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(?:\.\d+)?(?:[+-]\d{2}:\d{2}|Z)?"
    r" (?:success|failure) ==="
)


def format_block(attempt: DeploymentAttempt) -> str:
    """Render one attempt: header, stdout, stderr, then error if any."""
    lines = [
        f"{BLOCK_MARKER}{attempt.timestamp.isoformat()} {attempt.status.value} ===",
        "stdout:",
        attempt.stdout.rstrip("\n"),
        "stderr:",
        attempt.stderr.rstrip("\n"),
    ]
    if attempt.error:
        lines += ["error:", attempt.error]
    return "\n".join(lines) + "\n\n"


class DeploymentLogger:
    """Appends one block per attempt to a file that is never truncated."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    async def append(self, attempt: DeploymentAttempt) -> None:
        block = format_block(attempt)
        await asyncio.to_thread(self._write, block)
        log.debug("deploy_log_appended", path=str(self._path), status=attempt.status.value)

    def _write(self, block: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._path, "a", encoding="utf-8") as f:
            f.write(block)

    def read_blocks(self) -> list[str]:
        """Return every recorded block, oldest first.

        A block starts at a full header line that follows a blank line, so
        command output echoing something header-like stays in its block.
        """
        if not self._path.exists():
            return []
        text = self._path.read_text(encoding="utf-8")
        blocks: list[str] = []
        current: list[str] = []
        previous = ""
        for line in text.splitlines(keepends=True):
            header = _HEADER_RE.fullmatch(line.rstrip("\n")) and not previous.strip()
            if header and current:
                blocks.append("".join(current).rstrip("\n"))
                current = []
            current.append(line)
            previous = line
        if current:
            blocks.append("".join(current).rstrip("\n"))
        return blocks
