from __future__ import annotations

import logging

from mention_dispatch.errors import GitHubAPIError, PermissionCheckFailed
from mention_dispatch.github.api import GitHubClient
from mention_dispatch.github.context import EventContext

WRITE_LEVELS = {"admin", "write"}

logger = logging.getLogger("mention-dispatch.auth")


def check_write_permissions(client: GitHubClient, context: EventContext) -> bool:
    """True when the actor is a whitelisted bot or has admin/write on the repo."""
    actor = context.actor
    repository = context.repository
    logger.info("Checking permissions for actor: %s", actor)

    if actor in context.inputs.allowed_bot_names:
        logger.info("Actor is an allowed bot: %s", actor)
        return True

    try:
        response = client.get_collaborator_permission(repository.owner, repository.repo, actor)
    except GitHubAPIError as exc:
        logger.error("Failed to check permissions: %s", exc)
        raise PermissionCheckFailed(f"Failed to check permissions for {actor}: {exc}") from exc

    permission = response.get("permission", "")
    logger.info("Permission level retrieved: %s", permission)
    if permission in WRITE_LEVELS:
        logger.info("Actor has write access: %s", permission)
        return True

    logger.warning("Actor has insufficient permissions: %s", permission)
    return False
