"""
Exception types raised by leadcatcher collaborators.
"""


class LeadcatcherError(Exception):
    """Base class for all leadcatcher errors."""


class CompletionError(LeadcatcherError):
    """The completion engine call failed or returned an unusable response."""


class ChannelError(LeadcatcherError):
    """A messaging channel request failed."""


class LeadSaveError(LeadcatcherError):
    """The CRM rejected or failed to store a lead record."""


class MediaProcessingError(LeadcatcherError):
    """None of the pending media could be transferred to storage."""


class ToolCallStateError(LeadcatcherError):
    """A tool-call transition was requested from the wrong state."""
