import unittest
from unittest.mock import MagicMock, patch

import requests

from coachnudge.errors import SlackAPIError
from coachnudge.slack.client import SlackClient


def reply(data):
    response = MagicMock()
    response.json.return_value = data
    return response


class TestSlackClient(unittest.TestCase):
    @patch('coachnudge.slack.client.requests.post')
    def test_post_message(self, mock_post):
        mock_post.return_value = reply({"ok": True, "channel": "D1", "ts": "1760000000.000100"})
        client = SlackClient(base_url="https://slack.test/api", timeout=5)

        result = client.post_message("xoxb-1", "D1", [{"type": "divider"}], "hello")

        self.assertEqual(result, {"channel": "D1", "ts": "1760000000.000100"})
        args, kwargs = mock_post.call_args
        self.assertEqual(args[0], "https://slack.test/api/chat.postMessage")
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer xoxb-1")
        self.assertEqual(kwargs["json"], {"channel": "D1", "blocks": [{"type": "divider"}], "text": "hello"})
        self.assertEqual(kwargs["timeout"], 5)

    @patch('coachnudge.slack.client.requests.post')
    def test_platform_error_raises(self, mock_post):
        mock_post.return_value = reply({"ok": False, "error": "invalid_auth"})
        with self.assertRaises(SlackAPIError) as ctx:
            SlackClient().post_message("bad", "D1", [], "hello")
        self.assertEqual(ctx.exception.error, "invalid_auth")

    @patch('coachnudge.slack.client.requests.post')
    def test_transport_error_raises(self, mock_post):
        mock_post.side_effect = requests.ConnectionError("boom")
        with self.assertRaises(SlackAPIError):
            SlackClient().update_message("xoxb-1", "D1", "1.2", [])

    @patch('coachnudge.slack.client.requests.post')
    def test_update_message(self, mock_post):
        mock_post.return_value = reply({"ok": True})
        SlackClient().update_message("xoxb-1", "D1", "1.2", [{"type": "divider"}])
        args, kwargs = mock_post.call_args
        self.assertTrue(args[0].endswith("/chat.update"))
        self.assertEqual(kwargs["json"]["ts"], "1.2")
        self.assertEqual(kwargs["json"]["channel"], "D1")


if __name__ == '__main__':
    unittest.main()
