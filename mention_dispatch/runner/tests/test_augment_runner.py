from __future__ import annotations

import json
import sys
import unittest
from pathlib import Path
import tempfile
import time

from mention_dispatch.errors import MissingConfiguration, SubprocessFailed
from mention_dispatch.runner import augment


class RunBoundedTests(unittest.TestCase):
    def test_captures_stdout_and_stderr(self) -> None:
        code = "import sys; print('hello'); print('warn', file=sys.stderr)"
        stdout, stderr = augment.run_bounded([sys.executable, "-c", code])
        self.assertEqual(stdout.strip(), "hello")
        self.assertEqual(stderr.strip(), "warn")

    def test_non_zero_exit_keeps_partial_output(self) -> None:
        code = "import sys; print('partial'); print('broke', file=sys.stderr); sys.exit(4)"
        with self.assertRaises(SubprocessFailed) as ctx:
            augment.run_bounded([sys.executable, "-c", code])
        self.assertEqual(ctx.exception.exit_code, 4)
        self.assertEqual(ctx.exception.stdout.strip(), "partial")
        self.assertEqual(ctx.exception.stderr.strip(), "broke")

    def test_output_over_cap_fails_with_truncated_output(self) -> None:
        code = "print('x' * 5000)"
        with self.assertRaises(SubprocessFailed) as ctx:
            augment.run_bounded([sys.executable, "-c", code], max_output_bytes=100)
        self.assertIn("exceeded 100 bytes", str(ctx.exception))
        self.assertEqual(len(ctx.exception.stdout), 100)

    def test_output_cap_kills_running_process(self) -> None:
        code = "import sys, time; sys.stdout.write('x' * 1_000_000); sys.stdout.flush(); time.sleep(30)"
        started = time.monotonic()
        with self.assertRaises(SubprocessFailed) as ctx:
            augment.run_bounded([sys.executable, "-c", code], timeout_seconds=60, max_output_bytes=100)
        self.assertLess(time.monotonic() - started, 10)
        self.assertIn("exceeded 100 bytes", str(ctx.exception))
        self.assertIsNone(ctx.exception.exit_code)
        self.assertEqual(ctx.exception.stdout, "x" * 100)

    def test_timeout_kills_process(self) -> None:
        with self.assertRaises(SubprocessFailed) as ctx:
            augment.run_bounded([sys.executable, "-c", "import time; time.sleep(30)"], timeout_seconds=0.5)
        self.assertIn("timed out", str(ctx.exception))
        self.assertIsNone(ctx.exception.exit_code)

    def test_missing_binary(self) -> None:
        with self.assertRaises(SubprocessFailed):
            augment.run_bounded(["definitely-not-a-real-command-xyz"])


class AugmentHelpersTests(unittest.TestCase):
    def test_session_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = augment.setup_augment_session("aug-key", Path(tmp))
            self.assertEqual(path, Path(tmp) / ".augment" / "session.json")
            session = json.loads(path.read_text())
        self.assertEqual(session["accessToken"], "aug-key")
        self.assertEqual(session["scopes"], ["read", "write"])
        self.assertEqual(session["tenantURL"], augment.AUGMENT_TENANT_URL)

    def test_command_carries_token_and_instruction_file(self) -> None:
        cmd = augment.build_augment_command("ghs_token", "/tmp/instructions.md")
        self.assertEqual(cmd[:3], ["npx", augment.AUGMENT_PACKAGE_URL, "--ni"])
        self.assertEqual(cmd[cmd.index("--github-api-token") + 1], "ghs_token")
        self.assertEqual(cmd[cmd.index("--instruction-file") + 1], "/tmp/instructions.md")

    def test_final_comment_sections(self) -> None:
        body = augment.build_final_comment(
            "Here is the fix.", "deprecation warning", instruction="fix it", trigger_username="octocat"
        )
        self.assertTrue(body.startswith("✅ **Augment completed your request**\n\n@octocat "))
        self.assertIn("**Original Request:**\n```\nfix it\n```", body)
        self.assertIn("**Augment's Response:**\nHere is the fix.", body)
        self.assertIn("<summary>Additional Info</summary>", body)
        self.assertTrue(body.endswith(augment.FOOTER))

    def test_final_comment_without_output(self) -> None:
        body = augment.build_final_comment("  ")
        self.assertIn("didn't provide detailed output", body)
        self.assertNotIn("Additional Info", body)

    def test_preview_truncates(self) -> None:
        self.assertEqual(augment.preview("abc", limit=5), "abc")
        self.assertEqual(augment.preview("abcdef", limit=3), "abc...")

    def test_old_node_is_rejected(self) -> None:
        original = augment.subprocess.run
        augment.subprocess.run = lambda *a, **k: augment.subprocess.CompletedProcess(a, 0, stdout="v20.11.1\n", stderr="")
        try:
            with self.assertRaises(MissingConfiguration) as ctx:
                augment.check_node_version()
        finally:
            augment.subprocess.run = original
        self.assertIn("Node.js version 20 is too old", str(ctx.exception))

    def test_current_node_is_accepted(self) -> None:
        original = augment.subprocess.run
        augment.subprocess.run = lambda *a, **k: augment.subprocess.CompletedProcess(a, 0, stdout="v22.3.0\n", stderr="")
        try:
            self.assertEqual(augment.check_node_version(), 22)
        finally:
            augment.subprocess.run = original


if __name__ == "__main__":
    unittest.main()
