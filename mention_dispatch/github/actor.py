"""Reject runs started by automated accounts that are not explicitly whitelisted."""

from __future__ import annotations

import logging

from mention_dispatch.errors import UnauthorizedActor
from mention_dispatch.github.api import GitHubClient
from mention_dispatch.github.context import EventContext

logger = logging.getLogger("mention-dispatch.auth")


def check_allowed_actor(client: GitHubClient, context: EventContext) -> None:
    actor = context.actor
    actor_type = client.get_user(actor).get("type", "")
    allowed_bot_names = context.inputs.allowed_bot_names

    logger.info("Actor: %s, type: %s", actor, actor_type)

    if actor_type == "User":
        logger.info("Verified human actor: %s", actor)
        return

    if actor_type == "Bot" and actor in allowed_bot_names:
        logger.info("Verified allowed bot actor: %s", actor)
        return

    message = (
        f"Workflow initiated by unauthorized actor: {actor} (type: {actor_type}). "
        "Only human users and whitelisted bots are allowed."
    )
    if allowed_bot_names:
        message += f" Allowed bots: {', '.join(allowed_bot_names)}"
    raise UnauthorizedActor(message)
