"""Minimal GitHub REST client over urllib.

Only the handful of endpoints the action needs. Every non-2xx response is
raised as GitHubAPIError; callers decide whether a failure is fatal.
"""

from __future__ import annotations

import json
import logging
from typing import Any
from urllib import error, parse, request

from mention_dispatch.errors import GitHubAPIError

DEFAULT_API_URL = "https://api.github.com"
API_VERSION = "2022-11-28"
REQUEST_TIMEOUT_SEC = 15

logger = logging.getLogger("mention-dispatch.github")


class GitHubClient:
    def __init__(self, token: str, api_url: str | None = None) -> None:
        self.token = token
        self.api_url = (api_url or DEFAULT_API_URL).rstrip("/")

    def _request(self, method: str, path: str, payload: dict[str, Any] | None = None) -> Any:
        data = None
        if payload is not None:
            data = json.dumps(payload).encode("utf-8")
        req = request.Request(f"{self.api_url}{path}", data=data, method=method)
        req.add_header("Accept", "application/vnd.github+json")
        req.add_header("Authorization", f"Bearer {self.token}")
        req.add_header("X-GitHub-Api-Version", API_VERSION)
        if data is not None:
            req.add_header("Content-Type", "application/json")
        logger.debug("github api %s %s", method, path)
        try:
            with request.urlopen(req, timeout=REQUEST_TIMEOUT_SEC) as resp:
                body = resp.read().decode("utf-8")
        except error.HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="ignore")
            raise GitHubAPIError(
                f"{method} {path} failed status={exc.code} body={detail}", status=exc.code
            ) from exc
        except error.URLError as exc:
            raise GitHubAPIError(f"{method} {path} failed: {exc.reason}") from exc
        except TimeoutError as exc:
            raise GitHubAPIError(f"{method} {path} timed out after {REQUEST_TIMEOUT_SEC}s") from exc
        if not body:
            return {}
        try:
            return json.loads(body)
        except json.JSONDecodeError as exc:
            raise GitHubAPIError(f"{method} {path} returned a non-JSON body: {body[:200]}") from exc

    def get_user(self, username: str) -> dict[str, Any]:
        return self._request("GET", f"/users/{parse.quote(username)}")

    def get_collaborator_permission(self, owner: str, repo: str, username: str) -> dict[str, Any]:
        return self._request(
            "GET", f"/repos/{owner}/{repo}/collaborators/{parse.quote(username)}/permission"
        )

    def compare_commits(self, owner: str, repo: str, basehead: str) -> dict[str, Any]:
        return self._request("GET", f"/repos/{owner}/{repo}/compare/{parse.quote(basehead)}")

    def delete_ref(self, owner: str, repo: str, ref: str) -> None:
        self._request("DELETE", f"/repos/{owner}/{repo}/git/refs/{ref}")

    def create_issue_comment(self, owner: str, repo: str, issue_number: int, body: str) -> dict[str, Any]:
        return self._request(
            "POST", f"/repos/{owner}/{repo}/issues/{issue_number}/comments", {"body": body}
        )

    def update_issue_comment(self, owner: str, repo: str, comment_id: int, body: str) -> dict[str, Any]:
        return self._request(
            "PATCH", f"/repos/{owner}/{repo}/issues/comments/{comment_id}", {"body": body}
        )

    def update_review_comment(self, owner: str, repo: str, comment_id: int, body: str) -> dict[str, Any]:
        return self._request(
            "PATCH", f"/repos/{owner}/{repo}/pulls/comments/{comment_id}", {"body": body}
        )
