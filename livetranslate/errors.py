"""Error taxonomy for the live translation session core."""


class LiveTranslateError(Exception):
    """Base class for all session core errors."""


class AuthError(LiveTranslateError):
    """Credential acquisition or refresh failed."""


class ProviderError(LiveTranslateError):
    """The provider adapter reported a construction, start or stop failure."""


class InvalidTransitionError(LiveTranslateError):
    """A command was issued in a state that forbids it."""

    def __init__(self, command: str, status):
        self.command = command
        self.status = status
        super().__init__(f"Cannot {command}() while session is {status.value}")
