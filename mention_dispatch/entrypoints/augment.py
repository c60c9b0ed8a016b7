#!/usr/bin/env python3
"""Run the Augment CLI for a triggered request and post its reply to the tracking comment."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from mention_dispatch.config import require_env
from mention_dispatch.errors import ActionError, SubprocessFailed
from mention_dispatch.github.actions import set_failed
from mention_dispatch.github.api import GitHubClient
from mention_dispatch.github.comments import format_status_comment, update_comment_best_effort
from mention_dispatch.github.context import Repository
from mention_dispatch.log import setup_logging
from mention_dispatch.runner import augment

logger = logging.getLogger("mention-dispatch.augment")

WORKING_MESSAGE = "🤖 Augment is working on your request..."


@dataclass(frozen=True)
class AugmentRequest:
    github_token: str
    api_key: str
    instruction_file: str
    comment_id: int
    repository: Repository
    trigger_username: str = ""


def load_request() -> AugmentRequest:
    return AugmentRequest(
        github_token=require_env("GITHUB_TOKEN"),
        api_key=require_env("AUGMENT_API_KEY"),
        instruction_file=require_env("INSTRUCTION_FILE"),
        comment_id=int(require_env("CLAUDE_COMMENT_ID")),
        repository=Repository.parse(require_env("REPOSITORY")),
        trigger_username=os.environ.get("TRIGGER_USERNAME", ""),
    )


def _read_instruction(path: str) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        logger.warning("Could not read instruction file for context: %s", exc)
        return ""


def run_augment(
    client: GitHubClient,
    req: AugmentRequest,
    *,
    home: Path | None = None,
    runner: Callable[..., tuple[str, str]] = augment.run_bounded,
) -> str:
    def post_status(title: str, detail: str = "") -> None:
        update_comment_best_effort(client, req.repository, req.comment_id, format_status_comment(title, detail))

    post_status(WORKING_MESSAGE)

    try:
        augment.check_node_version()
    except ActionError as exc:
        post_status(
            f"❌ **Error**: Failed to check Node.js version. "
            f"Augment requires Node.js {augment.MIN_NODE_MAJOR} or newer.",
            f"Error: {exc}",
        )
        raise

    try:
        augment.setup_augment_session(req.api_key, home)
    except OSError as exc:
        post_status("❌ **Error**: Failed to setup Augment session.", f"Error: {exc}")
        raise ActionError(f"Failed to setup Augment session: {exc}") from exc

    cmd = augment.build_augment_command(req.github_token, req.instruction_file)
    try:
        stdout, stderr = runner(cmd, secrets=(req.github_token,))
    except SubprocessFailed as exc:
        logger.error("Augment CLI failed: %s", exc)
        post_status("❌ **Augment CLI Error**", augment.build_failure_detail(exc))
        raise

    logger.info("Augment CLI completed successfully")
    if stdout:
        logger.info("Augment output: %s", augment.preview(stdout))
    if stderr:
        logger.info("Augment stderr: %s", augment.preview(stderr))

    body = augment.build_final_comment(
        stdout,
        stderr,
        instruction=_read_instruction(req.instruction_file),
        trigger_username=req.trigger_username,
    )
    update_comment_best_effort(client, req.repository, req.comment_id, body)
    logger.info("Posted Augment response to GitHub")
    return body


def main() -> int:
    setup_logging()
    try:
        req = load_request()
    except (ActionError, ValueError) as exc:
        return set_failed(f"Augment entrypoint misconfigured: {exc}")

    client = GitHubClient(req.github_token, os.environ.get("GITHUB_API_URL"))
    try:
        run_augment(client, req)
    except ActionError as exc:
        return set_failed(f"Augment run failed: {exc}")
    except OSError as exc:
        update_comment_best_effort(
            client,
            req.repository,
            req.comment_id,
            format_status_comment("💥 **Fatal Error**", f"An unexpected error occurred: {exc}"),
        )
        return set_failed(f"Fatal error in Augment entrypoint: {exc}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
