# tracklens/errors

"""
tracklens.errors

Central exception hierarchy for tracklens.

The metrics and map engines never raise for degenerate input; these errors
belong to the outer layers (configuration, file formats).
Callers can catch TrackLensError (broad) or specific subclasses (narrow).
"""


class TrackLensError(RuntimeError):
    """Base class for all tracklens runtime errors."""


# ---- Configuration errors ----------------------

class ConfigError(TrackLensError):
    """A config file could not be parsed or holds an invalid value."""


# ---- File format errors ------------------------

class FormatError(TrackLensError):
    """Errors reading point data from a file format."""

class InvalidGpxError(FormatError):
    """GPX file could not be parsed or did not contain expected data structures."""
