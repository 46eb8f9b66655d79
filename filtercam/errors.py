class DetectorInitError(Exception):
    """Raised when the face-landmark detector cannot be constructed."""


class DetectionError(Exception):
    """Raised when a single landmark estimation call fails."""


class MalformedKeypointsError(ValueError):
    """Raised when a face carries too few landmarks to place overlays."""


class InvalidFilterError(ValueError):
    """Raised when a filter definition is missing required fields."""
