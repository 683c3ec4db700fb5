"""
Remote control surface exceptions.
"""

from .base import HProxyError


class TransportUnavailable(HProxyError):
    """Raised when a remote control call fails or times out."""

    def __init__(self, operation: str, reason: str = None):
        self.operation = operation
        self.reason = reason
        message = f"Remote call '{operation}' unavailable"
        if reason:
            message += f": {reason}"
        super().__init__(message)
