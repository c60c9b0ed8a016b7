#!/usr/bin/env python3
"""Run the configured AI CLI tool (claude-cli, gemini-cli, codex-cli, augment-cli).

Outputs: execution_file, conclusion.
"""

from __future__ import annotations

import logging
from pathlib import Path

from mention_dispatch.config import (
    ExecutionSettings,
    load_execution_settings,
    load_file_config,
    resolve_output_dir,
)
from mention_dispatch.errors import ActionError, MissingConfiguration
from mention_dispatch.github.actions import set_failed, set_output
from mention_dispatch.log import setup_logging
from mention_dispatch.runner.cli_tools import resolve_config
from mention_dispatch.runner.execute import ExecutionResult, install_cli_tool, invoke, write_error_file

logger = logging.getLogger("mention-dispatch.execute")


def run_cli(settings: ExecutionSettings) -> ExecutionResult:
    logger.info("Using CLI tool: %s", settings.cli_tool)
    if not settings.prompt_file:
        raise MissingConfiguration("PROMPT_FILE environment variable is required")
    if not Path(settings.prompt_file).exists():
        raise MissingConfiguration(f"Prompt file not found: {settings.prompt_file}")

    config = resolve_config(settings.cli_tool, settings)
    install_cli_tool(config)
    return invoke(config, settings.output_dir, settings.timeout_minutes * 60)


def main() -> int:
    setup_logging()
    output_dir = resolve_output_dir()
    try:
        settings = load_execution_settings(file_config=load_file_config())
        result = run_cli(settings)
    except ActionError as exc:
        output_file = write_error_file(output_dir, str(exc))
        set_output("execution_file", str(output_file))
        set_output("conclusion", "failure")
        return set_failed(f"Execute CLI failed: {exc}")

    set_output("execution_file", str(result.output_file))
    set_output("conclusion", result.conclusion)
    if result.conclusion != "success":
        return set_failed(f"CLI tool execution failed with exit code: {result.exit_code}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
