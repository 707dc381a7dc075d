import requests

from coachnudge.config import DEFAULT_SLACK_API_BASE
from coachnudge.errors import SlackAPIError


class SlackClient:
    """
    Minimal Slack Web API client: post a message, edit it in place.
    The bot token is passed per call since recipients live in different workspaces.
    """

    def __init__(self, base_url: str = DEFAULT_SLACK_API_BASE, timeout: float = 10.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _call(self, method: str, bot_token: str, payload: dict) -> dict:
        try:
            response = requests.post(
                f"{self.base_url}/{method}",
                headers={
                    "Authorization": f"Bearer {bot_token}",
                    "Content-Type": "application/json; charset=utf-8",
                },
                json=payload,
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            raise SlackAPIError(method, str(e)) from e
        except ValueError as e:
            raise SlackAPIError(method, f"invalid JSON reply: {e}") from e

        if not data.get("ok"):
            raise SlackAPIError(method, data.get("error") or "unknown_error")
        return data

    def post_message(self, bot_token: str, channel: str, blocks: list, text: str) -> dict:
        """
        chat.postMessage. Returns {"channel": ..., "ts": ...} of the new message.
        """
        data = self._call("chat.postMessage", bot_token, {
            "channel": channel,
            "blocks": blocks,
            "text": text,
        })
        if not data.get("ts"):
            raise SlackAPIError("chat.postMessage", "missing message ts")
        return {"channel": data.get("channel") or channel, "ts": data["ts"]}

    def update_message(self, bot_token: str, channel: str, ts: str, blocks: list, text: str = "Action items updated") -> None:
        self._call("chat.update", bot_token, {
            "channel": channel,
            "ts": ts,
            "blocks": blocks,
            "text": text,
        })
