"""
Defines custom exceptions for the application to allow for more specific error handling.
"""


class SoundCloudCliError(Exception):
    """Base exception for all application-specific errors."""


class InvalidInputError(SoundCloudCliError):
    """Raised when a track or playlist reference does not match a known URL pattern."""


class TrackUnavailableError(SoundCloudCliError):
    """
    Raised when a track cannot be resolved: it is blocked in the current region,
    or none of its transcodings match the selection policy.
    """


class ResolutionError(SoundCloudCliError):
    """Raised when a transcoding or manifest endpoint returns unusable content."""


class RetriesExhaustedError(ResolutionError):
    """Raised when a request kept failing transiently after every allowed attempt."""


class SizeProbeError(SoundCloudCliError):
    """Raised when the size of a media file cannot be probed before downloading."""


class DownloadError(SoundCloudCliError):
    """Raised when the media stream breaks off in the middle of a transfer."""


class ClientIdError(SoundCloudCliError):
    """Raised when no client_id can be extracted from the SoundCloud web app."""


class ConfigurationError(SoundCloudCliError):
    """Raised for issues related to configuration loading or validation."""
