class NudgeError(Exception):
    """Base class for nudge subsystem failures."""


class StoreError(NudgeError):
    """The relational store could not be read or written."""


class SlackAPIError(NudgeError):
    """The messaging platform rejected a call or could not be reached."""

    def __init__(self, method: str, error: str):
        self.method = method
        self.error = error
        super().__init__(f"Slack {method} failed: {error}")


class MissingCredentialError(NudgeError):
    """No bot token is installed for a recipient's workspace."""


class InvalidPreferenceError(NudgeError):
    """A preference row cannot be used to reach its recipient."""


class DuplicateNudgeError(NudgeError):
    """A ledger entry already exists for the (recipient, category, period) key."""
