"""Workflow-command helpers: step outputs and failure annotations."""

from __future__ import annotations

import logging
import os
import uuid

logger = logging.getLogger("mention-dispatch.actions")


def set_output(name: str, value: str) -> None:
    output_file = os.environ.get("GITHUB_OUTPUT")
    if not output_file:
        logger.info("output %s=%s", name, value)
        return
    with open(output_file, "a", encoding="utf-8") as f:
        if "\n" in value:
            delimiter = f"ghadelimiter_{uuid.uuid4().hex}"
            f.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")
        else:
            f.write(f"{name}={value}\n")


def set_failed(message: str) -> int:
    """Annotate the step as failed; returns the exit code to hand to SystemExit."""
    logger.error(message)
    escaped = message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")
    print(f"::error::{escaped}", flush=True)
    return 1
