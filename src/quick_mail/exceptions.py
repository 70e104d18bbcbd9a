"""Custom exceptions for Quick Mail."""


class QuickMailError(Exception):
    """Base exception for all Quick Mail errors."""


class MailConnectionError(QuickMailError):
    """Exception raised for any failure while talking to the mailbox server.

    The message is deliberately generic; protocol details are logged where the
    failure happens and never carried to the caller.
    """

    def __init__(self, message: str = "Encountered error while communicating with gmail") -> None:
        super().__init__(message)


class ContentError(QuickMailError):
    """Exception raised when message content cannot be resolved."""


class UnsupportedCharsetError(ContentError):
    """Exception raised for a charset label with no registered decoder."""

    def __init__(self, label: str) -> None:
        super().__init__(f"unsupported charset: {label!r}")
        self.label = label


class MissingBoundaryError(ContentError):
    """Exception raised for a multipart part without a boundary parameter."""


class NoDisplayableContentError(ContentError):
    """Exception raised when no text/html or text/plain part could be found."""


class SanitizerError(ContentError):
    """Exception raised when the HTML sanitizer fails."""


class AddressListError(ContentError):
    """Exception raised for a malformed address-list header."""


class MessageParseError(QuickMailError):
    """Exception raised when a fetched message cannot be parsed at all."""


class MessageIdentifierError(QuickMailError):
    """Exception raised for an invalid Gmail message or thread identifier."""


class DataConsistencyError(QuickMailError):
    """Exception raised when mailbox data cannot be cross-referenced."""


class ConfigurationError(QuickMailError):
    """Exception raised for configuration related errors."""


class AuthenticationError(QuickMailError):
    """Exception raised for authentication failures."""
