"""
Exceptions raised by the relay core.
"""


class RelayError(Exception):
    """Base exception for relay errors."""

    pass


class EnvelopeError(RelayError):
    """Raised when an inbound frame cannot be parsed into a known envelope."""

    pass


class UnrecognizedEnvelopeError(RelayError):
    """Raised for a well-formed envelope whose ``type`` the relay does not handle."""

    def __init__(self, envelope_type: object):
        self.envelope_type = envelope_type
        super().__init__(f"Unrecognized message type: {envelope_type!r}")


class AuthenticationRequiredError(RelayError):
    """Raised when a channel sends a turn before binding an account."""

    def __init__(self, message: str = "Please authenticate first using CONNECTION_AUTH message."):
        super().__init__(message)
