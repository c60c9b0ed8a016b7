"""Terminal error kinds for a single action run."""

from __future__ import annotations


class ActionError(RuntimeError):
    """Base class; entrypoints turn these into a failed step."""


class UnauthorizedActor(ActionError):
    """Actor is neither a human user nor a whitelisted bot, or lacks write access."""


class PermissionCheckFailed(ActionError):
    """The collaborator permission lookup itself failed."""


class UnsupportedTool(ActionError):
    """Unknown CLI tool identifier."""


class InstallFailed(ActionError):
    """A tool install command exited non-zero."""


class SubprocessFailed(ActionError):
    def __init__(
        self,
        message: str,
        *,
        exit_code: int | None = None,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr


class MissingConfiguration(ActionError):
    """A required environment variable or file is absent."""


class InvalidConfiguration(ActionError):
    """The repository config file failed schema validation."""


class GitHubAPIError(ActionError):
    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class UnsupportedEvent(ActionError):
    """Workflow was triggered by an event this action does not handle."""
