import hashlib
import hmac
import time
from typing import Optional, Union

SIGNATURE_VERSION = "v0"


def compute_signature(signing_secret: str, timestamp: str, body: Union[str, bytes]) -> str:
    # Signed over the raw bytes as received; the body is never decoded here
    if isinstance(body, str):
        body = body.encode("utf-8")
    base = SIGNATURE_VERSION.encode() + b":" + timestamp.encode() + b":" + body
    digest = hmac.new(signing_secret.encode(), base, hashlib.sha256).hexdigest()
    return f"{SIGNATURE_VERSION}={digest}"


def verify_slack_signature(
    signing_secret: str,
    signature: str,
    timestamp: str,
    body: Union[str, bytes],
    now: Optional[float] = None,
    tolerance: int = 300,
) -> bool:
    """
    Verify X-Slack-Signature over the raw request body.
    Requests older (or newer) than tolerance seconds are rejected as replays.
    """
    if not signing_secret or not signature or not timestamp:
        return False
    try:
        sent_at = int(timestamp)
    except ValueError:
        return False

    current = time.time() if now is None else now
    if tolerance and abs(current - sent_at) > tolerance:
        return False

    expected = compute_signature(signing_secret, timestamp, body)
    return hmac.compare_digest(expected, signature)
