from __future__ import annotations

import json

import pytest

from mention_dispatch.config import ExecutionSettings
from mention_dispatch.entrypoints import execute_cli
from mention_dispatch.errors import MissingConfiguration
from mention_dispatch.runner.execute import OUTPUT_FILENAME


def test_run_cli_requires_prompt_file() -> None:
    with pytest.raises(MissingConfiguration, match="PROMPT_FILE environment variable is required"):
        execute_cli.run_cli(ExecutionSettings())


def test_run_cli_requires_existing_prompt_file(tmp_path) -> None:
    with pytest.raises(MissingConfiguration, match="Prompt file not found"):
        execute_cli.run_cli(ExecutionSettings(prompt_file=str(tmp_path / "missing.txt")))


def _env(tmp_path, monkeypatch, **values: str) -> None:
    monkeypatch.chdir(tmp_path)
    for name in ("MENTION_DISPATCH_CONFIG", "AI_ENV", "TIMEOUT_MINUTES", "MAX_TURNS", "MODEL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("RUNNER_TEMP", str(tmp_path))
    monkeypatch.setenv("GITHUB_OUTPUT", str(tmp_path / "out"))
    for name, value in values.items():
        monkeypatch.setenv(name, value)


def test_main_with_unsupported_tool_writes_error_artifact(tmp_path, monkeypatch) -> None:
    prompt = tmp_path / "prompt.txt"
    prompt.write_text("do things", encoding="utf-8")
    _env(tmp_path, monkeypatch, CLI_TOOL="foo-cli", PROMPT_FILE=str(prompt))

    assert execute_cli.main() == 1

    (record,) = json.loads((tmp_path / OUTPUT_FILENAME).read_text())
    assert record["type"] == "error"
    assert "Unsupported CLI tool: foo-cli" in record["error"]
    outputs = (tmp_path / "out").read_text().splitlines()
    assert outputs == [f"execution_file={tmp_path / OUTPUT_FILENAME}", "conclusion=failure"]


def test_main_reports_tool_conclusion(tmp_path, monkeypatch) -> None:
    prompt = tmp_path / "prompt.txt"
    prompt.write_text("do things", encoding="utf-8")
    _env(tmp_path, monkeypatch, CLI_TOOL="codex-cli", PROMPT_FILE=str(prompt))

    invoked = {}

    def fake_install(config):
        invoked["install"] = config.install_command

    def fake_invoke(config, output_dir, timeout_seconds):
        from mention_dispatch.runner.execute import ExecutionResult

        invoked["timeout"] = timeout_seconds
        return ExecutionResult(output_file=tmp_path / OUTPUT_FILENAME, conclusion="failure", exit_code=2)

    monkeypatch.setattr(execute_cli, "install_cli_tool", fake_install)
    monkeypatch.setattr(execute_cli, "invoke", fake_invoke)

    assert execute_cli.main() == 1
    assert invoked == {"install": ("npm", "install", "-g", "@openai/codex"), "timeout": 30 * 60}
    assert (tmp_path / "out").read_text().splitlines()[-1] == "conclusion=failure"
