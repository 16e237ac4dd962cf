"""
Error taxonomy for fetching and formatting Sentry issues
"""


class SentryMonitorError(Exception):
    """Base error; the message is what the widget shows to the user"""

    retry_after: float | None = None

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(SentryMonitorError):
    pass


class AuthError(SentryMonitorError):
    def __init__(self):
        super().__init__("Invalid Sentry auth token (401 Unauthorized)")


class NotFoundError(SentryMonitorError):
    def __init__(self):
        super().__init__("Invalid organization or project (404 Not Found)")


class RateLimitError(SentryMonitorError):
    retry_after = 60.0

    def __init__(self):
        super().__init__(
            "Sentry API rate limit exceeded. Retrying in 60 seconds..."
        )


class TransportError(SentryMonitorError):
    retry_after = 5.0

    def __init__(self, reason: str):
        super().__init__(f"Network error: {reason}")


class ParseError(SentryMonitorError):
    def __init__(self):
        super().__init__("Failed to parse Sentry response")


class GenericApiError(SentryMonitorError):
    def __init__(self, status: int, reason: str | None):
        super().__init__(f"Sentry API error: {status} {reason or ''}".rstrip())
        self.status = status
