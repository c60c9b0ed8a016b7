"""Immutable snapshot of the triggering GitHub event."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from mention_dispatch.config import ActionInputs
from mention_dispatch.errors import MissingConfiguration, UnsupportedEvent

ISSUES = "issues"
ISSUE_COMMENT = "issue_comment"
PULL_REQUEST = "pull_request"
PULL_REQUEST_REVIEW = "pull_request_review"
PULL_REQUEST_REVIEW_COMMENT = "pull_request_review_comment"

DEFAULT_SERVER_URL = "https://github.com"

SUPPORTED_EVENTS = {
    ISSUES,
    ISSUE_COMMENT,
    PULL_REQUEST,
    PULL_REQUEST_REVIEW,
    PULL_REQUEST_REVIEW_COMMENT,
}


@dataclass(frozen=True)
class Repository:
    owner: str
    repo: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    @classmethod
    def parse(cls, full_name: str) -> "Repository":
        owner, _, repo = full_name.partition("/")
        if not owner or not repo:
            raise MissingConfiguration(f"invalid repository format: {full_name!r}")
        return cls(owner=owner, repo=repo)


@dataclass(frozen=True)
class EventContext:
    run_id: str
    event_name: str
    event_action: str
    repository: Repository
    actor: str
    payload: Mapping[str, Any]
    entity_number: int | None = None
    is_pr: bool = False
    inputs: ActionInputs = field(default_factory=ActionInputs)
    server_url: str = DEFAULT_SERVER_URL

    @property
    def is_issues_event(self) -> bool:
        return self.event_name == ISSUES

    @property
    def is_issue_assigned_event(self) -> bool:
        return self.event_name == ISSUES and self.event_action == "assigned"

    @property
    def is_issue_comment_event(self) -> bool:
        return self.event_name == ISSUE_COMMENT

    @property
    def is_pull_request_event(self) -> bool:
        return self.event_name == PULL_REQUEST

    @property
    def is_pull_request_review_event(self) -> bool:
        return self.event_name == PULL_REQUEST_REVIEW

    @property
    def is_pull_request_review_comment_event(self) -> bool:
        return self.event_name == PULL_REQUEST_REVIEW_COMMENT


def _entity(event_name: str, payload: Mapping[str, Any]) -> tuple[int | None, bool]:
    if event_name == ISSUES:
        return payload.get("issue", {}).get("number"), False
    if event_name == ISSUE_COMMENT:
        issue = payload.get("issue", {})
        return issue.get("number"), bool(issue.get("pull_request"))
    return payload.get("pull_request", {}).get("number"), True


def build_context(
    event_name: str,
    payload: Mapping[str, Any],
    *,
    repository: str,
    actor: str,
    run_id: str = "",
    inputs: ActionInputs | None = None,
    server_url: str = DEFAULT_SERVER_URL,
) -> EventContext:
    if event_name not in SUPPORTED_EVENTS:
        raise UnsupportedEvent(f"Unsupported event type: {event_name}")
    number, is_pr = _entity(event_name, payload)
    return EventContext(
        run_id=run_id,
        event_name=event_name,
        event_action=payload.get("action", "") or "",
        repository=Repository.parse(repository),
        actor=actor,
        payload=payload,
        entity_number=number,
        is_pr=is_pr,
        inputs=inputs or ActionInputs(),
        server_url=server_url.rstrip("/"),
    )


def parse_github_context(
    inputs: ActionInputs,
    environ: Mapping[str, str] | None = None,
) -> EventContext:
    env = os.environ if environ is None else environ
    for name in ("GITHUB_EVENT_NAME", "GITHUB_EVENT_PATH", "GITHUB_REPOSITORY", "GITHUB_ACTOR"):
        if not env.get(name):
            raise MissingConfiguration(f"{name} environment variable is required")

    event_path = Path(env["GITHUB_EVENT_PATH"])
    if not event_path.exists():
        raise MissingConfiguration(f"GitHub event payload not found: {event_path}")
    with event_path.open("r", encoding="utf-8") as f:
        payload = json.load(f)

    return build_context(
        env["GITHUB_EVENT_NAME"],
        payload,
        repository=env["GITHUB_REPOSITORY"],
        actor=env["GITHUB_ACTOR"],
        run_id=env.get("GITHUB_RUN_ID", ""),
        inputs=inputs,
        server_url=env.get("GITHUB_SERVER_URL") or DEFAULT_SERVER_URL,
    )
