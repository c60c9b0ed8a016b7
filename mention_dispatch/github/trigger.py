"""Decide whether an event mentions the assistant, and which provider it asked for."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Literal

from mention_dispatch.github.actions import set_output
from mention_dispatch.github.context import EventContext

AIProvider = Literal["claude", "augment"]

DEFAULT_PROVIDER: AIProvider = "claude"

# A mention starts at the beginning of the text or after whitespace, and ends at
# the end of the text, at whitespace, or at light punctuation.
_LEADING = r"(?:^|\s)"
_TRAILING = r"(?:[\s.,!?;:]|$)"
_REGEX_SPECIALS = re.compile(r"[.*+?^${}()|\[\]\\]")

_PROVIDER_PATTERNS: tuple[tuple[AIProvider, re.Pattern[str]], ...] = (
    ("augment", re.compile(_LEADING + "@augment" + _TRAILING)),
    ("claude", re.compile(_LEADING + "@claude" + _TRAILING)),
)

logger = logging.getLogger("mention-dispatch.trigger")


@dataclass(frozen=True)
class TriggerResult:
    contains_trigger: bool
    ai_provider: AIProvider | None = None


NOT_TRIGGERED = TriggerResult(False)


def escape_regexp(text: str) -> str:
    return _REGEX_SPECIALS.sub(r"\\\g<0>", text)


def detect_ai_provider(text: str) -> AIProvider | None:
    """Return the provider mentioned in ``text``; ``@augment`` wins over ``@claude``."""
    for provider, pattern in _PROVIDER_PATTERNS:
        if pattern.search(text):
            return provider
    return None


def _phrase_pattern(trigger_phrase: str) -> re.Pattern[str]:
    return re.compile(_LEADING + escape_regexp(trigger_phrase) + _TRAILING)


def _scan(fields: Iterable[tuple[str, str | None]], trigger_phrase: str, where: str) -> TriggerResult:
    texts = [(label, text or "") for label, text in fields]

    for label, text in texts:
        provider = detect_ai_provider(text)
        if provider:
            logger.info("%s %s contains %s trigger", where, label, provider)
            return TriggerResult(True, provider)

    if not trigger_phrase:
        return NOT_TRIGGERED
    pattern = _phrase_pattern(trigger_phrase)
    for label, text in texts:
        if pattern.search(text):
            logger.info("%s %s contains exact trigger phrase '%s'", where, label, trigger_phrase)
            return TriggerResult(True, DEFAULT_PROVIDER)
    return NOT_TRIGGERED


def check_contains_trigger(context: EventContext) -> TriggerResult:
    inputs = context.inputs
    payload = context.payload

    if inputs.direct_prompt:
        logger.info("Direct prompt provided, triggering action with %s", DEFAULT_PROVIDER)
        return TriggerResult(True, DEFAULT_PROVIDER)

    if context.is_issue_assigned_event:
        trigger_user = inputs.assignee_trigger.removeprefix("@")
        assignee = (payload.get("assignee") or {}).get("login", "")
        if trigger_user and assignee == trigger_user:
            logger.info("Issue assigned to trigger user '%s'", trigger_user)
            return TriggerResult(True, DEFAULT_PROVIDER)

    result = NOT_TRIGGERED
    if context.is_issues_event and context.event_action == "opened":
        issue = payload.get("issue", {})
        result = _scan(
            [("body", issue.get("body")), ("title", issue.get("title"))],
            inputs.trigger_phrase,
            "Issue",
        )
    elif context.is_pull_request_event:
        pr = payload.get("pull_request", {})
        result = _scan(
            [("body", pr.get("body")), ("title", pr.get("title"))],
            inputs.trigger_phrase,
            "Pull request",
        )
    elif context.is_pull_request_review_event and context.event_action in {"submitted", "edited"}:
        review = payload.get("review", {})
        result = _scan([("body", review.get("body"))], inputs.trigger_phrase, "Pull request review")
    elif context.is_issue_comment_event or context.is_pull_request_review_comment_event:
        comment = payload.get("comment", {})
        result = _scan([("body", comment.get("body"))], inputs.trigger_phrase, "Comment")

    if not result.contains_trigger:
        logger.info("No trigger was met for %s", inputs.trigger_phrase)
    return result


def check_trigger_action(context: EventContext) -> TriggerResult:
    result = check_contains_trigger(context)
    set_output("contains_trigger", str(result.contains_trigger).lower())
    if result.ai_provider:
        set_output("ai_provider", result.ai_provider)
    return result
