from __future__ import annotations

import logging

from mention_dispatch.errors import GitHubAPIError
from mention_dispatch.github.api import GitHubClient
from mention_dispatch.github.comments import create_branch_link
from mention_dispatch.github.context import DEFAULT_SERVER_URL, Repository

logger = logging.getLogger("mention-dispatch.branches")


def check_and_delete_empty_branch(
    client: GitHubClient,
    repository: Repository,
    branch: str | None,
    base_branch: str,
    *,
    keep_empty_branch: bool = False,
    server_url: str = DEFAULT_SERVER_URL,
) -> tuple[bool, str]:
    """Return (branch_deleted, branch_link).

    A working branch with no commits over ``base_branch`` is deleted unless
    ``keep_empty_branch`` is set (analysis-only runs). When the comparison
    itself fails the branch is assumed to have commits and is kept.
    """
    if not branch:
        return False, ""

    owner, repo = repository.owner, repository.repo
    link = create_branch_link(owner, repo, branch, server_url)
    try:
        comparison = client.compare_commits(owner, repo, f"{base_branch}...{branch}")
    except GitHubAPIError as exc:
        logger.error("Error checking for commits on branch %s: %s", branch, exc)
        return False, link

    if comparison.get("total_commits", 0) > 0:
        return False, link

    if keep_empty_branch:
        logger.info("Branch %s has no commits but is kept for analysis", branch)
        return False, link

    logger.info("Branch %s has no commits, deleting it", branch)
    try:
        client.delete_ref(owner, repo, f"heads/{branch}")
    except GitHubAPIError as exc:
        logger.error("Failed to delete branch %s: %s", branch, exc)
        return False, ""
    logger.info("Deleted empty branch: %s", branch)
    return True, ""
