"""Fixed command table for the supported AI command-line tools."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Mapping

from mention_dispatch.config import ExecutionSettings
from mention_dispatch.errors import MissingConfiguration, UnsupportedTool

NPX = "npx"
DEFAULT_GEMINI_MODEL = "gemini-pro"
DEFAULT_OPENAI_MODEL = "gpt-4"
MAX_TOKENS = "2048"


class CliTool(str, Enum):
    CLAUDE = "claude-cli"
    GEMINI = "gemini-cli"
    CODEX = "codex-cli"
    AUGMENT = "augment-cli"


SUPPORTED_TOOLS = ", ".join(tool.value for tool in CliTool)


@dataclass(frozen=True)
class ToolInvocationConfig:
    command: str
    args: tuple[str, ...]
    install_command: tuple[str, ...] | None = None
    env: Mapping[str, str] = field(default_factory=dict)

    @property
    def command_line(self) -> str:
        return " ".join([self.command, *self.args])


def _env(settings: ExecutionSettings, **fixed: str) -> dict[str, str]:
    return {**fixed, **settings.ai_env}


def _claude(settings: ExecutionSettings) -> ToolInvocationConfig:
    args = [
        "@anthropic-ai/claude-code",
        "--prompt-file", settings.prompt_file,
        "--allowed-tools", ",".join(settings.allowed_tools),
        "--disallowed-tools", ",".join(settings.disallowed_tools),
        "--timeout-minutes", str(settings.timeout_minutes),
    ]
    if settings.max_turns:
        args += ["--max-turns", settings.max_turns]
    if settings.model:
        args += ["--model", settings.model]
    if settings.mcp_config:
        args += ["--mcp-config", settings.mcp_config]
    if settings.use_bedrock:
        args.append("--use-bedrock")
    if settings.use_vertex:
        args.append("--use-vertex")
    return ToolInvocationConfig(
        command=NPX,
        args=tuple(args),
        install_command=("npm", "install", "-g", "@anthropic-ai/claude-code"),
        env=_env(settings, ANTHROPIC_API_KEY=settings.api_key, ANTHROPIC_MODEL=settings.model),
    )


def _gemini(settings: ExecutionSettings) -> ToolInvocationConfig:
    return ToolInvocationConfig(
        command=NPX,
        args=(
            "@google-ai/generativelanguage",
            "--input-file", settings.prompt_file,
            "--model", settings.model or DEFAULT_GEMINI_MODEL,
            "--max-tokens", MAX_TOKENS,
            "--timeout", str(settings.timeout_minutes),
        ),
        install_command=("npm", "install", "-g", "@google-ai/generativelanguage"),
        env=_env(settings, GOOGLE_API_KEY=settings.api_key, GOOGLE_AI_MODEL=settings.model),
    )


def _codex(settings: ExecutionSettings) -> ToolInvocationConfig:
    return ToolInvocationConfig(
        command=NPX,
        args=("@openai/codex", "exec", "--full-auto", f"Read and execute: {settings.prompt_file}"),
        install_command=("npm", "install", "-g", "@openai/codex"),
        env=_env(settings, OPENAI_API_KEY=settings.api_key, OPENAI_MODEL=settings.model),
    )


def _augment(settings: ExecutionSettings) -> ToolInvocationConfig:
    # No shell is involved, so the prompt text itself goes on the command line.
    prompt_path = Path(settings.prompt_file)
    if not prompt_path.is_file():
        raise MissingConfiguration(f"Prompt file not found: {settings.prompt_file}")
    return ToolInvocationConfig(
        command=NPX,
        args=(
            "openai", "api", "completions.create",
            "-m", settings.model or DEFAULT_OPENAI_MODEL,
            "--prompt", prompt_path.read_text(encoding="utf-8"),
            "--max-tokens", MAX_TOKENS,
        ),
        install_command=("npm", "install", "-g", "openai"),
        env=_env(settings, OPENAI_API_KEY=settings.api_key, OPENAI_MODEL=settings.model),
    )


BUILDERS: dict[CliTool, Callable[[ExecutionSettings], ToolInvocationConfig]] = {
    CliTool.CLAUDE: _claude,
    CliTool.GEMINI: _gemini,
    CliTool.CODEX: _codex,
    CliTool.AUGMENT: _augment,
}


def resolve_config(tool_id: str, settings: ExecutionSettings) -> ToolInvocationConfig:
    try:
        tool = CliTool(tool_id)
    except ValueError:
        raise UnsupportedTool(
            f"Unsupported CLI tool: {tool_id}. Supported tools: {SUPPORTED_TOOLS}"
        ) from None
    return BUILDERS[tool](settings)
