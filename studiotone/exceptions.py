"""
Exceptions raised by the StudioTone enhancement pipeline.
"""


class EnhancementError(Exception):
    """Base exception for enhancement pipeline failures."""
    pass


class DecodeFailure(EnhancementError):
    """Raised when an image source cannot be decoded."""
    pass


class RenderContextUnavailable(EnhancementError):
    """Raised when no pixel surface is available to render into."""
    pass


class StaleResultDiscarded(EnhancementError):
    """Raised internally when a superseded recompute finishes."""

    def __init__(self, sequence: int, latest: int):
        super().__init__(f"Render #{sequence} superseded by #{latest}")
        self.sequence = sequence
        self.latest = latest
