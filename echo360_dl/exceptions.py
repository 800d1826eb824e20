"""
Defines custom exceptions for the application to allow for more specific error handling.

Every exception names the pipeline stage it belongs to, so a failure can be
reported to the user as "<stage> failed: <reason>".
"""


class Echo360Error(Exception):
    """Base exception for all application-specific errors."""

    stage = "processing"


class ConfigurationError(Echo360Error):
    """Raised for invalid settings or when no valid source URLs are available."""

    stage = "configuration"


class DiscoveryError(Echo360Error):
    """Raised when no manifest URL could be found for a source page."""

    stage = "discovery"


class ManifestFetchError(Echo360Error):
    """Raised when the manifest document cannot be retrieved."""

    stage = "manifest fetch"


class ManifestParseError(Echo360Error):
    """
    Raised when the manifest is not a playlist, or when a variant filename does
    not follow the s<track>q<quality>.<ext> encoding.
    """

    stage = "manifest parse"


class NoVariantsError(Echo360Error):
    """Raised when a manifest lists no variants to select from."""

    stage = "variant selection"


class SegmentFetchError(Echo360Error):
    """Raised when the raw segment data for a stream cannot be retrieved."""

    stage = "segment fetch"


class SegmentWriteError(Echo360Error):
    """Raised when downloaded segment data cannot be written to disk."""

    stage = "segment write"


class MuxingError(Echo360Error):
    """Raised when ffmpeg fails, is missing, or does not finish in time."""

    stage = "muxing"
