"""Install and run a resolved CLI tool, and guarantee a result artifact exists."""

from __future__ import annotations

import json
import logging
import os
import subprocess
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from mention_dispatch.errors import InstallFailed
from mention_dispatch.runner.cli_tools import ToolInvocationConfig

OUTPUT_FILENAME = "ai-execution-output.json"

logger = logging.getLogger("mention-dispatch.runner")


@dataclass(frozen=True)
class ExecutionResult:
    output_file: Path
    conclusion: str
    exit_code: int | None


def _now_iso() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


def output_path(output_dir: str | Path) -> Path:
    return Path(output_dir) / OUTPUT_FILENAME


def _write_records(path: Path, records: list[dict[str, Any]]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(records, indent=2), encoding="utf-8")


def install_cli_tool(config: ToolInvocationConfig) -> None:
    if not config.install_command:
        return
    cmd = list(config.install_command)
    logger.info("Installing %s...", " ".join(cmd))
    try:
        result = subprocess.run(cmd, env={**os.environ})
    except OSError as exc:
        raise InstallFailed(f"Failed to install CLI tool: {' '.join(cmd)} ({exc})") from exc
    if result.returncode != 0:
        raise InstallFailed(f"Failed to install CLI tool: {' '.join(cmd)}")


def invoke(
    config: ToolInvocationConfig,
    output_dir: str | Path,
    timeout_seconds: float | None = None,
) -> ExecutionResult:
    """Run the tool in the foreground; conclusion is success only on exit code 0."""
    env = {**os.environ, **config.env}
    logger.info("Executing: %s", config.command_line)

    exit_code: int | None
    try:
        result = subprocess.run(
            [config.command, *config.args],
            env=env,
            cwd=os.getcwd(),
            timeout=timeout_seconds,
        )
        exit_code = result.returncode
    except subprocess.TimeoutExpired:
        logger.error("CLI tool timed out after %ss", timeout_seconds)
        exit_code = None
    except OSError as exc:
        logger.error("CLI tool could not be started: %s", exc)
        exit_code = None

    conclusion = "success" if exit_code == 0 else "failure"
    path = output_path(output_dir)
    if not path.exists():
        _write_records(
            path,
            [
                {
                    "type": "result",
                    "status": conclusion,
                    "exit_code": exit_code,
                    "command": config.command_line,
                    "timestamp": _now_iso(),
                }
            ],
        )
    return ExecutionResult(output_file=path, conclusion=conclusion, exit_code=exit_code)


def write_error_file(output_dir: str | Path, message: str) -> Path:
    path = output_path(output_dir)
    _write_records(path, [{"type": "error", "error": message, "timestamp": _now_iso()}])
    return path
