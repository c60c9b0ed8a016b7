from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from mention_dispatch.entrypoints import augment as entry
from mention_dispatch.errors import MissingConfiguration, SubprocessFailed
from mention_dispatch.github.context import Repository


class FakeGitHub:
    def __init__(self) -> None:
        self.bodies: list[str] = []

    def update_issue_comment(self, owner, repo, comment_id, body):
        self.bodies.append(body)


class AugmentEntrypointTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        self.home = Path(self.tmp.name)
        instruction = self.home / "instructions.md"
        instruction.write_text("Summarize the failing test", encoding="utf-8")
        self.req = entry.AugmentRequest(
            github_token="ghs_secret",
            api_key="aug-key",
            instruction_file=str(instruction),
            comment_id=31,
            repository=Repository("o", "r"),
            trigger_username="octocat",
        )
        self.original_node_check = entry.augment.check_node_version
        entry.augment.check_node_version = lambda: 22

    def tearDown(self) -> None:
        entry.augment.check_node_version = self.original_node_check
        self.tmp.cleanup()

    def test_successful_run_posts_response(self) -> None:
        client = FakeGitHub()
        seen = {}

        def runner(cmd, secrets=()):
            seen["cmd"] = cmd
            seen["secrets"] = secrets
            return "All tests pass now.", ""

        body = entry.run_augment(client, self.req, home=self.home, runner=runner)

        self.assertEqual(client.bodies[0], entry.WORKING_MESSAGE)
        self.assertEqual(client.bodies[-1], body)
        self.assertIn("@octocat", body)
        self.assertIn("Summarize the failing test", body)
        self.assertIn("All tests pass now.", body)
        self.assertIn("ghs_secret", seen["cmd"])
        self.assertEqual(seen["secrets"], ("ghs_secret",))
        self.assertTrue((self.home / ".augment" / "session.json").exists())

    def test_cli_failure_is_reported_then_raised(self) -> None:
        client = FakeGitHub()

        def runner(cmd, secrets=()):
            raise SubprocessFailed("command exited with status 1", exit_code=1, stdout="half", stderr="oops")

        with self.assertRaises(SubprocessFailed):
            entry.run_augment(client, self.req, home=self.home, runner=runner)
        self.assertTrue(client.bodies[-1].startswith("❌ **Augment CLI Error**"))
        self.assertIn("Stderr: oops", client.bodies[-1])
        self.assertIn("Partial output: half", client.bodies[-1])

    def test_old_node_is_reported_then_raised(self) -> None:
        def too_old():
            raise MissingConfiguration("Node.js version 18 is too old. Augment requires Node.js 22 or newer.")

        entry.augment.check_node_version = too_old
        client = FakeGitHub()
        with self.assertRaises(MissingConfiguration):
            entry.run_augment(client, self.req, home=self.home, runner=lambda *a, **k: ("", ""))
        self.assertIn("Failed to check Node.js version", client.bodies[-1])


if __name__ == "__main__":
    unittest.main()
