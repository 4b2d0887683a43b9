"""Exception types shared across listkeeper."""


class ListkeeperError(Exception):
    """Base class for listkeeper errors."""


class ConfigError(ListkeeperError):
    """A required setting or environment variable is missing."""


class AuthenticationError(ListkeeperError):
    """The login probe or the login submission failed."""


class AutomationError(ListkeeperError):
    """A page step failed: selector absent, navigation timeout, closed page."""


class SelectionError(ListkeeperError):
    """A pick was out of range or had no pending selection to act on."""


class ConversationServiceError(ListkeeperError):
    """The LLM provider call failed."""
