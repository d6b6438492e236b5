"""Shell command execution with captured output."""

from __future__ import annotations

import asyncio
import os
from pathlib import Path

from rich.text import Text


def strip_ansi(text: str) -> str:
    """Remove terminal color codes and trailing whitespace from command output."""
    return Text.from_ansi(text).plain.rstrip()


async def run_command(
    command: str,
    cwd: Path,
    *,
    env: dict[str, str] | None = None,
    timeout: float | None = None,
) -> tuple[int, str, str]:
    """Run a shell command asynchronously.

    Args:
        command: Shell command to execute.
        cwd: Working directory.
        env: Environment variables (merged with current env).
        timeout: Timeout in seconds; None waits indefinitely.

    Returns:
        Tuple of (exit_code, stdout, stderr). Exit code is -1 when the
        process could not be started or timed out.
    """
    run_env = os.environ.copy()
    if env:
        run_env.update(env)

    try:
        process = await asyncio.create_subprocess_shell(
            command,
            cwd=str(cwd),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env=run_env,
        )
    except OSError as e:
        return -1, "", str(e)

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except (asyncio.TimeoutError, TimeoutError):
        process.kill()
        await process.wait()
        return -1, "", f"Command timed out after {timeout}s"

    stdout = stdout_bytes.decode("utf-8", errors="replace")
    stderr = stderr_bytes.decode("utf-8", errors="replace")
    return process.returncode or 0, stdout, stderr
