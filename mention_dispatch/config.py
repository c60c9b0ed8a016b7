"""Run configuration: action inputs from env, optional repo YAML file for defaults.

Precedence is non-empty env input > config file value > built-in default.
Everything is resolved once at process start and handed to components
explicitly.
"""

from __future__ import annotations

import json
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml
from jsonschema import Draft202012Validator

from mention_dispatch.errors import InvalidConfiguration, MissingConfiguration

SCHEMA_PATH = Path(__file__).resolve().parent / "schemas" / "config.schema.json"
DEFAULT_CONFIG_FILE = Path(".github") / "mention-dispatch.yaml"

DEFAULT_TRIGGER_PHRASE = "@claude"
DEFAULT_CLI_TOOL = "claude-cli"
DEFAULT_TIMEOUT_MINUTES = 30

TRUTHY = {"1", "true", "yes"}


@dataclass(frozen=True)
class ActionInputs:
    trigger_phrase: str = DEFAULT_TRIGGER_PHRASE
    assignee_trigger: str = ""
    direct_prompt: str = ""
    allowed_bot_names: tuple[str, ...] = ()
    allowed_tools: tuple[str, ...] = ()
    disallowed_tools: tuple[str, ...] = ()


@dataclass(frozen=True)
class ExecutionSettings:
    cli_tool: str = DEFAULT_CLI_TOOL
    prompt_file: str = ""
    api_key: str = ""
    allowed_tools: tuple[str, ...] = ()
    disallowed_tools: tuple[str, ...] = ()
    model: str = ""
    max_turns: str = ""
    timeout_minutes: int = DEFAULT_TIMEOUT_MINUTES
    mcp_config: str = ""
    use_bedrock: bool = False
    use_vertex: bool = False
    ai_env: Mapping[str, str] = field(default_factory=dict)
    output_dir: str = field(default_factory=tempfile.gettempdir)


def parse_list(value: str | list[str] | tuple[str, ...] | None) -> tuple[str, ...]:
    """Split a comma/newline separated input into trimmed, non-empty names."""
    if not value:
        return ()
    if isinstance(value, str):
        value = value.replace("\n", ",").split(",")
    return tuple(item.strip() for item in value if item and item.strip())


def _flag(value: str | None) -> bool:
    return (value or "").strip().lower() in TRUTHY


def _schema() -> dict[str, Any]:
    with SCHEMA_PATH.open("r", encoding="utf-8") as f:
        return json.load(f)


def validate_file_config(data: Any) -> dict[str, Any]:
    validator = Draft202012Validator(_schema())
    errors = sorted(validator.iter_errors(data), key=lambda e: list(e.absolute_path))
    if errors:
        first = errors[0]
        path = "/".join(str(p) for p in first.absolute_path) or "<root>"
        raise InvalidConfiguration(f"config schema error at {path}: {first.message}")
    return data


def load_file_config(environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    env = os.environ if environ is None else environ
    explicit = env.get("MENTION_DISPATCH_CONFIG", "")
    path = Path(explicit) if explicit else DEFAULT_CONFIG_FILE
    if not path.exists():
        if explicit:
            raise InvalidConfiguration(f"config file missing: {path}")
        return {}
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return validate_file_config(data)


def _pick(env: Mapping[str, str], name: str, file_config: Mapping[str, Any], key: str, default: Any) -> Any:
    value = env.get(name, "").strip()
    if value:
        return value
    if key in file_config:
        picked = file_config[key]
        return picked.strip() if isinstance(picked, str) else picked
    return default


def resolve_output_dir(environ: Mapping[str, str] | None = None) -> str:
    env = os.environ if environ is None else environ
    return env.get("RUNNER_TEMP") or tempfile.gettempdir()


def load_inputs(
    environ: Mapping[str, str] | None = None,
    file_config: Mapping[str, Any] | None = None,
) -> ActionInputs:
    env = os.environ if environ is None else environ
    cfg = file_config or {}
    return ActionInputs(
        trigger_phrase=_pick(env, "TRIGGER_PHRASE", cfg, "trigger_phrase", DEFAULT_TRIGGER_PHRASE),
        assignee_trigger=_pick(env, "ASSIGNEE_TRIGGER", cfg, "assignee_trigger", ""),
        direct_prompt=env.get("DIRECT_PROMPT", ""),
        allowed_bot_names=parse_list(_pick(env, "ALLOWED_BOT_NAMES", cfg, "allowed_bot_names", "")),
        allowed_tools=parse_list(_pick(env, "ALLOWED_TOOLS", cfg, "allowed_tools", "")),
        disallowed_tools=parse_list(_pick(env, "DISALLOWED_TOOLS", cfg, "disallowed_tools", "")),
    )


def _parse_ai_env(raw: str) -> dict[str, str]:
    if not raw.strip():
        return {}
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise InvalidConfiguration(f"AI_ENV is not valid JSON: {exc}") from exc
    if not isinstance(parsed, dict):
        raise InvalidConfiguration("AI_ENV must be a JSON object")
    return {str(k): str(v) for k, v in parsed.items()}


def load_execution_settings(
    environ: Mapping[str, str] | None = None,
    file_config: Mapping[str, Any] | None = None,
) -> ExecutionSettings:
    env = os.environ if environ is None else environ
    cfg = file_config or {}
    timeout_raw = _pick(env, "TIMEOUT_MINUTES", cfg, "timeout_minutes", DEFAULT_TIMEOUT_MINUTES)
    try:
        timeout_minutes = int(timeout_raw)
    except (TypeError, ValueError) as exc:
        raise InvalidConfiguration(f"TIMEOUT_MINUTES must be an integer, got {timeout_raw!r}") from exc
    return ExecutionSettings(
        cli_tool=_pick(env, "CLI_TOOL", cfg, "cli_tool", DEFAULT_CLI_TOOL).strip(),
        prompt_file=env.get("PROMPT_FILE", ""),
        api_key=env.get("API_KEY", ""),
        allowed_tools=parse_list(_pick(env, "ALLOWED_TOOLS", cfg, "allowed_tools", "")),
        disallowed_tools=parse_list(_pick(env, "DISALLOWED_TOOLS", cfg, "disallowed_tools", "")),
        model=_pick(env, "MODEL", cfg, "model", ""),
        max_turns=str(_pick(env, "MAX_TURNS", cfg, "max_turns", "")),
        timeout_minutes=timeout_minutes,
        mcp_config=env.get("MCP_CONFIG", ""),
        use_bedrock=_flag(env.get("USE_BEDROCK")),
        use_vertex=_flag(env.get("USE_VERTEX")),
        ai_env=_parse_ai_env(env.get("AI_ENV", "")),
        output_dir=resolve_output_dir(env),
    )


def require_env(name: str, environ: Mapping[str, str] | None = None) -> str:
    env = os.environ if environ is None else environ
    value = env.get(name, "")
    if not value:
        raise MissingConfiguration(f"{name} environment variable is required")
    return value
