"""
Data models for the StudioTone interactive preview.
"""

from dataclasses import dataclass
from enum import Enum

from ..models import ImageBuffer, EnhancementParameters


class OrchestratorState(Enum):
    """Lifecycle states of an enhancement session."""
    EMPTY = "empty"              # No image decoded yet
    READY = "ready"              # Source decoded, nothing rendered for current parameters
    PROCESSING = "processing"    # A recompute is running
    RENDERED = "rendered"        # Output matches a complete parameter snapshot
    ERROR = "error"              # Decode or render failed; needs user action


@dataclass(frozen=True)
class RenderRequest:
    """One recompute: the source, the snapshot it reads and its sequence number."""
    sequence: int
    source: ImageBuffer
    parameters: EnhancementParameters
