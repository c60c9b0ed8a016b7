"""Tracking-comment bodies and the create/update calls behind them."""

from __future__ import annotations

import logging

from mention_dispatch.errors import GitHubAPIError
from mention_dispatch.github.api import GitHubClient
from mention_dispatch.github.context import DEFAULT_SERVER_URL, EventContext, Repository

PROVIDER_NAMES = {"claude": "Claude", "augment": "Augment"}

logger = logging.getLogger("mention-dispatch.comments")


def provider_name(provider: str | None) -> str:
    return PROVIDER_NAMES.get(provider or "claude", (provider or "claude").title())


def create_job_run_link(owner: str, repo: str, run_id: str, server_url: str = DEFAULT_SERVER_URL) -> str:
    return f"[View job run]({server_url}/{owner}/{repo}/actions/runs/{run_id})"


def create_branch_link(owner: str, repo: str, branch_name: str, server_url: str = DEFAULT_SERVER_URL) -> str:
    return f"\n[View branch]({server_url}/{owner}/{repo}/tree/{branch_name})"


def create_comment_body(job_run_link: str, branch_link: str = "", provider: str | None = None) -> str:
    return (
        f"{provider_name(provider)} is working…\n\n"
        "I'll analyze this and get back to you.\n\n"
        f"{job_run_link}{branch_link}"
    )


def format_final_comment(
    *,
    provider: str | None,
    conclusion: str,
    job_run_link: str,
    branch_link: str = "",
    details: str = "",
) -> str:
    name = provider_name(provider)
    if conclusion == "success":
        header = f"✅ **{name} finished the job**"
    else:
        header = f"❌ **{name} encountered an error**"
    body = f"{header} | {job_run_link}{branch_link}"
    if details.strip():
        body += f"\n\n---\n{details.strip()}"
    return body


def format_status_comment(title: str, detail: str = "") -> str:
    body = title
    if detail:
        body += f"\n\n{detail}"
    return body.strip()


def create_initial_comment(client: GitHubClient, context: EventContext, provider: str | None = None) -> int:
    repository = context.repository
    if context.entity_number is None:
        raise GitHubAPIError(f"event {context.event_name} has no issue or pull request number")
    job_run_link = create_job_run_link(repository.owner, repository.repo, context.run_id, context.server_url)
    response = client.create_issue_comment(
        repository.owner,
        repository.repo,
        int(context.entity_number),
        create_comment_body(job_run_link, provider=provider),
    )
    comment_id = int(response["id"])
    logger.info("Created tracking comment id=%s on #%s", comment_id, context.entity_number)
    return comment_id


def update_comment(
    client: GitHubClient,
    repository: Repository,
    comment_id: int,
    body: str,
    *,
    is_review_comment: bool = False,
) -> None:
    """Rewrite a tracking comment.

    Issue comments and pull request review comments live behind different
    endpoints; when the caller does not know which one it holds, a 404 from the
    issue endpoint falls through to the review comment endpoint.
    """
    if is_review_comment:
        client.update_review_comment(repository.owner, repository.repo, comment_id, body)
        return
    try:
        client.update_issue_comment(repository.owner, repository.repo, comment_id, body)
    except GitHubAPIError as exc:
        if exc.status != 404:
            raise
        logger.info("comment %s is not an issue comment, retrying as review comment", comment_id)
        client.update_review_comment(repository.owner, repository.repo, comment_id, body)


def update_comment_best_effort(
    client: GitHubClient,
    repository: Repository,
    comment_id: int,
    body: str,
    *,
    is_review_comment: bool = False,
) -> bool:
    try:
        update_comment(client, repository, comment_id, body, is_review_comment=is_review_comment)
    except GitHubAPIError as exc:
        logger.warning("failed to update comment repo=%s id=%s err=%s", repository.full_name, comment_id, exc)
        return False
    return True
