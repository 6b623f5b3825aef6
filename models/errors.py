"""Errors raised inside a simulation session.

None of these cross the message boundary: the session converts each one into
an ``error`` result.
"""


class SessionError(Exception):
    """Base class for errors reported back to the caller as ``error`` results.

    Args:
        message: Human-readable description sent in the result.
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class UninitializedSessionError(SessionError):
    """Raised when a control message arrives before ``init``.

    Args:
        message_type: Tag of the rejected message.
    """

    def __init__(self, message_type: str):
        self.message_type = message_type
        super().__init__(
            f"Cannot handle '{message_type}': session is not initialized"
        )


class MalformedMessageError(SessionError):
    """Raised when an inbound payload has an unknown tag or invalid fields."""
