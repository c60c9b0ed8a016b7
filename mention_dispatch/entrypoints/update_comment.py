#!/usr/bin/env python3
"""Final step: clean up an empty working branch and rewrite the tracking comment.

Runs after the CLI step regardless of its outcome; the CLI step already
signalled any failure, so a failed update here is logged and only fails this
step when the run itself succeeded.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from mention_dispatch.config import TRUTHY, require_env
from mention_dispatch.errors import ActionError
from mention_dispatch.github.actions import set_failed, set_output
from mention_dispatch.github.api import GitHubClient
from mention_dispatch.github.branch_cleanup import check_and_delete_empty_branch
from mention_dispatch.github.comments import (
    create_job_run_link,
    format_final_comment,
    update_comment,
    update_comment_best_effort,
)
from mention_dispatch.github.context import DEFAULT_SERVER_URL, Repository
from mention_dispatch.log import setup_logging

logger = logging.getLogger("mention-dispatch.report")


def summarize_execution(path: str) -> str:
    if not path or not Path(path).exists():
        return ""
    try:
        records = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("could not read execution file %s: %s", path, exc)
        return ""
    if not isinstance(records, list):
        return ""
    lines = []
    for record in records:
        if not isinstance(record, dict):
            continue
        if record.get("type") == "error":
            lines.append(f"Error: {record.get('error', '')}")
        elif record.get("type") == "result":
            lines.append(f"`{record.get('command', '')}` exited with `{record.get('exit_code')}`")
    return "\n".join(lines)


def report(
    client: GitHubClient,
    repository: Repository,
    *,
    comment_id: int,
    run_id: str,
    conclusion: str,
    provider: str | None,
    branch: str = "",
    base_branch: str = "main",
    execution_file: str = "",
    is_review_comment: bool = False,
    server_url: str = DEFAULT_SERVER_URL,
) -> str:
    deleted, branch_link = check_and_delete_empty_branch(
        client,
        repository,
        branch,
        base_branch,
        keep_empty_branch=provider == "augment",
        server_url=server_url,
    )
    set_output("branch_deleted", str(deleted).lower())

    body = format_final_comment(
        provider=provider,
        conclusion=conclusion,
        job_run_link=create_job_run_link(repository.owner, repository.repo, run_id, server_url),
        branch_link=branch_link,
        details=summarize_execution(execution_file),
    )
    if conclusion == "success":
        update_comment(client, repository, comment_id, body, is_review_comment=is_review_comment)
    else:
        update_comment_best_effort(client, repository, comment_id, body, is_review_comment=is_review_comment)
    return body


def main() -> int:
    setup_logging()
    try:
        client = GitHubClient(require_env("GITHUB_TOKEN"), os.environ.get("GITHUB_API_URL"))
        report(
            client,
            Repository.parse(require_env("GITHUB_REPOSITORY")),
            comment_id=int(require_env("CLAUDE_COMMENT_ID")),
            run_id=os.environ.get("GITHUB_RUN_ID", ""),
            conclusion=os.environ.get("CONCLUSION", "failure"),
            provider=os.environ.get("AI_PROVIDER") or None,
            branch=os.environ.get("CLAUDE_BRANCH", ""),
            base_branch=os.environ.get("BASE_BRANCH", "main"),
            execution_file=os.environ.get("EXECUTION_FILE", ""),
            is_review_comment=os.environ.get("IS_REVIEW_COMMENT", "").lower() in TRUTHY,
            server_url=os.environ.get("GITHUB_SERVER_URL") or DEFAULT_SERVER_URL,
        )
    except (ActionError, ValueError) as exc:
        return set_failed(f"Update comment failed: {exc}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
