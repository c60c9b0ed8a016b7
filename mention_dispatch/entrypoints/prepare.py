#!/usr/bin/env python3
"""First action step: detect the trigger, authorize the actor, post the tracking comment.

Outputs: contains_trigger, ai_provider, claude_comment_id.
"""

from __future__ import annotations

import logging
import os

from mention_dispatch.config import load_file_config, load_inputs, require_env
from mention_dispatch.errors import ActionError, UnauthorizedActor
from mention_dispatch.github.actions import set_failed, set_output
from mention_dispatch.github.actor import check_allowed_actor
from mention_dispatch.github.api import GitHubClient
from mention_dispatch.github.comments import create_initial_comment
from mention_dispatch.github.context import EventContext, parse_github_context
from mention_dispatch.github.permissions import check_write_permissions
from mention_dispatch.github.trigger import check_trigger_action
from mention_dispatch.log import setup_logging

logger = logging.getLogger("mention-dispatch.prepare")


def authorize_and_acknowledge(client: GitHubClient, context: EventContext, provider: str | None) -> int:
    if not check_write_permissions(client, context):
        raise UnauthorizedActor(f"Actor {context.actor} does not have write permissions to the repository")
    check_allowed_actor(client, context)

    comment_id = create_initial_comment(client, context, provider)
    set_output("claude_comment_id", str(comment_id))
    return comment_id


def main() -> int:
    setup_logging()
    try:
        inputs = load_inputs(file_config=load_file_config())
        context = parse_github_context(inputs)
        logger.info(
            "event=%s action=%s repo=%s actor=%s",
            context.event_name,
            context.event_action,
            context.repository.full_name,
            context.actor,
        )

        trigger = check_trigger_action(context)
        if not trigger.contains_trigger:
            logger.info("No trigger found, skipping remaining steps")
            return 0

        client = GitHubClient(require_env("GITHUB_TOKEN"), os.environ.get("GITHUB_API_URL"))
        authorize_and_acknowledge(client, context, trigger.ai_provider)
    except ActionError as exc:
        return set_failed(f"Prepare step failed: {exc}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
