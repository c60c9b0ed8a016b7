"""Augment CLI runner: prerequisites, session file, bounded execution, reply body."""

from __future__ import annotations

import json
import logging
import os
import subprocess
import tempfile
import time
from pathlib import Path
from typing import IO

from mention_dispatch.errors import MissingConfiguration, SubprocessFailed
from mention_dispatch.log import redact

AUGMENT_PACKAGE_URL = "https://augment-assets.com/augment-latest.tgz"
AUGMENT_TENANT_URL = "https://d10.api.augmentcode.com/"
MIN_NODE_MAJOR = 22

DEFAULT_TIMEOUT_SEC = 15 * 60
DEFAULT_MAX_OUTPUT_BYTES = 10 * 1024 * 1024
PREVIEW_CHARS = 500
POLL_INTERVAL_SEC = 0.1

FOOTER = "---\n*Powered by Augment*"

logger = logging.getLogger("mention-dispatch.augment")


def check_node_version() -> int:
    try:
        result = subprocess.run(["node", "--version"], capture_output=True, text=True, timeout=30)
    except (OSError, subprocess.TimeoutExpired) as exc:
        raise MissingConfiguration(f"Failed to check Node.js version: {exc}") from exc
    version = result.stdout.strip()
    logger.info("Node.js version: %s", version)
    try:
        major = int(version.lstrip("v").split(".", 1)[0])
    except ValueError as exc:
        raise MissingConfiguration(f"Unrecognized Node.js version output: {version!r}") from exc
    if major < MIN_NODE_MAJOR:
        raise MissingConfiguration(
            f"Node.js version {major} is too old. Augment requires Node.js {MIN_NODE_MAJOR} or newer."
        )
    return major


def setup_augment_session(api_key: str, home: Path | None = None) -> Path:
    augment_dir = (home or Path.home()) / ".augment"
    augment_dir.mkdir(parents=True, exist_ok=True)
    session_file = augment_dir / "session.json"
    session = {
        "accessToken": api_key,
        "tenantURL": AUGMENT_TENANT_URL,
        "scopes": ["read", "write"],
    }
    session_file.write_text(json.dumps(session, indent=2), encoding="utf-8")
    logger.info("Created Augment session file: %s", session_file)
    return session_file


def build_augment_command(github_token: str, instruction_file: str) -> list[str]:
    return [
        "npx",
        AUGMENT_PACKAGE_URL,
        "--ni",
        "--github-api-token",
        github_token,
        "--instruction-file",
        instruction_file,
    ]


def _read_capped(handle: IO[bytes], limit: int) -> str:
    handle.seek(0)
    return handle.read(limit).decode("utf-8", errors="replace")


def _spooled_size(handle: IO[bytes]) -> int:
    return os.fstat(handle.fileno()).st_size


def run_bounded(
    cmd: list[str],
    *,
    timeout_seconds: float = DEFAULT_TIMEOUT_SEC,
    max_output_bytes: int = DEFAULT_MAX_OUTPUT_BYTES,
    secrets: tuple[str, ...] = (),
) -> tuple[str, str]:
    """Run ``cmd`` to completion and return (stdout, stderr).

    Output is spooled to temporary files and their sizes are polled while the
    process runs; the process is killed as soon as either stream passes
    ``max_output_bytes`` or ``timeout_seconds`` elapses. Raises
    SubprocessFailed with whatever output was captured, truncated to the cap.
    """
    logger.info("Command: %s", redact(" ".join(cmd), *secrets))
    with tempfile.TemporaryFile() as out, tempfile.TemporaryFile() as err:
        try:
            proc = subprocess.Popen(cmd, stdout=out, stderr=err)
        except OSError as exc:
            raise SubprocessFailed(f"failed to start {cmd[0]}: {exc}") from exc

        deadline = time.monotonic() + timeout_seconds
        failure = ""
        while proc.poll() is None:
            if max(_spooled_size(out), _spooled_size(err)) > max_output_bytes:
                failure = f"command output exceeded {max_output_bytes} bytes"
            elif time.monotonic() >= deadline:
                failure = f"command timed out after {timeout_seconds}s"
            if failure:
                logger.warning("Killing %s: %s", cmd[0], failure)
                proc.kill()
                proc.wait()
                break
            time.sleep(POLL_INTERVAL_SEC)

        exit_code = None if failure else proc.returncode
        overflow = max(_spooled_size(out), _spooled_size(err)) > max_output_bytes
        if overflow and not failure:
            failure = f"command output exceeded {max_output_bytes} bytes"
        stdout = _read_capped(out, max_output_bytes)
        stderr = _read_capped(err, max_output_bytes)

    if failure:
        raise SubprocessFailed(failure, exit_code=exit_code, stdout=stdout, stderr=stderr)
    if exit_code != 0:
        raise SubprocessFailed(
            f"command exited with status {exit_code}", exit_code=exit_code, stdout=stdout, stderr=stderr
        )
    return stdout, stderr


def preview(text: str, limit: int = PREVIEW_CHARS) -> str:
    return text[:limit] + ("..." if len(text) > limit else "")


def build_final_comment(
    output: str,
    stderr: str = "",
    *,
    instruction: str = "",
    trigger_username: str = "",
) -> str:
    body = "✅ **Augment completed your request**\n\n"
    if trigger_username:
        body += f"@{trigger_username} "
    if instruction.strip():
        body += f"**Original Request:**\n```\n{instruction.strip()}\n```\n\n"
    if output.strip():
        body += f"**Augment's Response:**\n{output.strip()}\n\n"
    else:
        body += "Augment completed the task but didn't provide detailed output.\n\n"
    if stderr.strip():
        body += (
            "<details>\n<summary>Additional Info</summary>\n\n"
            f"```\n{stderr.strip()}\n```\n</details>\n\n"
        )
    return body + FOOTER


def build_failure_detail(exc: SubprocessFailed) -> str:
    return f"Error: {exc}\n\nStderr: {exc.stderr}\n\nPartial output: {exc.stdout}"
