import importlib.util
import json
import os
import shutil
import tempfile
import unittest
from unittest.mock import patch

from tests.helpers import fake_response, rest_repo, user_payload

SCRIPT_PATH = os.path.join(os.path.dirname(__file__), "..", "scripts", "sync_github.py")


def load_script():
    spec = importlib.util.spec_from_file_location("sync_github", SCRIPT_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def fake_get(url, **kwargs):
    if url.endswith("/users/octo"):
        return fake_response(body=user_payload("octo"))
    if "/users/octo/repos" in url:
        return fake_response(body=[
            rest_repo("new", "2024-02-01T00:00:00Z"),
            rest_repo("forked", "2024-01-20T00:00:00Z", fork=True),
            rest_repo("old", "2024-01-01T00:00:00Z"),
        ])
    return fake_response(status=404)


class TestSyncGithubScript(unittest.TestCase):

    def setUp(self):
        self.test_dir = tempfile.mkdtemp()
        self.output_file = os.path.join(self.test_dir, "github.json")
        self.script = load_script()

    def tearDown(self):
        shutil.rmtree(self.test_dir)

    @patch("src.infrastructure.github_client.requests.post")
    @patch("src.infrastructure.github_client.requests.get", side_effect=fake_get)
    def test_anonymous_run_writes_snapshot_without_graphql(self, mock_get, mock_post):
        env = {"GITHUB_USERNAME": "octo", "GITHUB_SNAPSHOT_PATH": self.output_file}
        with patch.dict(os.environ, env, clear=True):
            with self.assertLogs(self.script.logger, level="INFO") as logs:
                exit_code = self.script.main()

        self.assertEqual(exit_code, 0)
        mock_post.assert_not_called()
        with open(self.output_file, encoding="utf-8") as f:
            data = json.load(f)
        self.assertEqual(data["user"]["login"], "octo")
        self.assertEqual([r["name"] for r in data["recent"]], ["new", "old"])
        self.assertEqual(data["contributed"], [])
        self.assertEqual(data["pinned"], [])
        self.assertTrue(any("set GITHUB_TOKEN" in line for line in logs.output))

    def test_missing_username_exits_nonzero(self):
        with patch.dict(os.environ, {}, clear=True):
            self.assertEqual(self.script.main(), 1)
        self.assertFalse(os.path.exists(self.output_file))


if __name__ == "__main__":
    unittest.main()
