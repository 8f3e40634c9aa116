"""Custom exceptions for the Gmail Discord Relay."""


class GmailRelayError(Exception):
    """Base exception for all Gmail Discord Relay errors."""


class AuthenticationError(GmailRelayError):
    """Failed to authenticate with Gmail API."""


class RateLimitError(GmailRelayError):
    """Gmail API rate limit exceeded."""


class ParseError(GmailRelayError):
    """Failed to extract a summary from a Gmail message."""


class DeliveryError(GmailRelayError):
    """Failed to deliver a notification to Discord."""


class ConfigurationError(GmailRelayError):
    """Required configuration is missing or invalid."""
