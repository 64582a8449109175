"""Runs the configured rebuild-and-restart command sequence."""

from __future__ import annotations

import asyncio
import codecs
import os
import signal
import time
from datetime import datetime, timezone

from sitehook.config import DeployConfig
from sitehook.deploy.models import DeploymentAttempt, DeployStatus
from sitehook.utils.logging import get_logger
from sitehook.utils.platform import get_platform, shell_args

log = get_logger(__name__)

_READ_CHUNK = 4096


class DeploymentTrigger:
    """Executes deploy commands one after another, stopping at the first failure.

    Runs are serialized: a delivery arriving while a deploy is in progress
    waits for it to finish instead of rebuilding into the same output
    directory concurrently.
    """

    def __init__(self, config: DeployConfig) -> None:
        self._commands = list(config.commands)
        self._working_dir = config.working_dir or None
        self._timeout = config.timeout
        self._lock = asyncio.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    async def run(self) -> DeploymentAttempt:
        if self._lock.locked():
            log.info("deploy_queued")
        async with self._lock:
            return await self._run_locked()

    async def _run_locked(self) -> DeploymentAttempt:
        timestamp = datetime.now(timezone.utc)
        started = time.monotonic()
        stdout: list[str] = []
        stderr: list[str] = []

        log.info("deploy_started", commands=len(self._commands), cwd=self._working_dir)

        if not self._commands:
            exit_code, error = None, "No deploy commands configured"
        else:
            try:
                exit_code, error = await asyncio.wait_for(
                    self._run_all(stdout, stderr), timeout=self._timeout
                )
            except asyncio.TimeoutError:
                exit_code, error = None, f"Deployment timed out after {self._timeout:g}s"

        duration = time.monotonic() - started
        attempt = DeploymentAttempt(
            status=DeployStatus.SUCCESS if error is None else DeployStatus.FAILURE,
            stdout="".join(stdout),
            stderr="".join(stderr),
            error=error,
            exit_code=exit_code,
            duration=duration,
            timestamp=timestamp,
        )

        if attempt.succeeded:
            log.info("deploy_finished", duration=round(duration, 2))
        else:
            log.error(
                "deploy_failed",
                error=error,
                exit_code=exit_code,
                duration=round(duration, 2),
            )
        return attempt

    async def _run_all(
        self, stdout: list[str], stderr: list[str]
    ) -> tuple[int | None, str | None]:
        """Return (exit code of the last command run, error or None)."""
        exit_code: int | None = None
        for command in self._commands:
            stdout.append(f"$ {command}\n")
            try:
                exit_code = await self._run_one(command, stdout, stderr)
            except OSError as e:
                return None, f"Failed to launch {command!r}: {e}"
            if exit_code != 0:
                return exit_code, f"Command {command!r} exited with status {exit_code}"
        return exit_code, None

    async def _run_one(self, command: str, stdout: list[str], stderr: list[str]) -> int:
        """Run one command, streaming its output into ``stdout``/``stderr``.

        Output is appended as it arrives so a timed-out command still leaves
        what it printed before hanging.
        """
        log.debug("deploy_command", command=command)
        posix = get_platform() != "windows"
        proc = await asyncio.create_subprocess_exec(
            *shell_args(command),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=self._working_dir,
            # Own process group, so a timeout can take down npm/node children too
            start_new_session=posix,
        )
        try:
            await asyncio.gather(
                _drain(proc.stdout, stdout),
                _drain(proc.stderr, stderr),
            )
            return await proc.wait()
        except asyncio.CancelledError:
            # The shell may be gone while its children still hold the pipes
            _kill_tree(proc, posix)
            await proc.wait()
            raise


async def _drain(stream: asyncio.StreamReader | None, sink: list[str]) -> None:
    if stream is None:
        return
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    while chunk := await stream.read(_READ_CHUNK):
        sink.append(decoder.decode(chunk))
    tail = decoder.decode(b"", final=True)
    if tail:
        sink.append(tail)


def _kill_tree(proc: asyncio.subprocess.Process, posix: bool) -> None:
    if not posix:
        if proc.returncode is None:
            proc.kill()
        return
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except ProcessLookupError:  # group already gone
        pass
